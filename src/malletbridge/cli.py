"""
Command-line interface for malletbridge.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Dict, List, Optional

from pydantic import ValidationError

from .commands import (
    build_train_command,
    default_model_path,
    import_with_cli,
    run_mallet,
    train_options,
)
from .configuration import load_mallet_configuration
from .constants import STOPLIST_FILENAME
from .doc_topics import DOC_TOPICS_LAYOUTS, load_doc_topics
from .errors import MalletCommandError, MalletRuntimeError
from .instances import instance_list_store, make_instance_list_from_config, write_import_file
from .lda import as_lda
from .models import MalletConfiguration, PartitionBundle, Phrases
from .paths import require_file, resolve_destination
from .runtime import MalletRuntime, get_runtime, resolve_mallet_settings
from .stopwords import resolve_stopwords, write_stoplist
from .topic_model import load_topic_model
from .word_weights import mallet_load_word_weights, mallet_save_word_weights
from .xml_report import mallet_get_sparse_word_weights_matrix


def _load_configuration(arguments: argparse.Namespace) -> MalletConfiguration:
    try:
        return load_mallet_configuration(
            getattr(arguments, "configuration", None),
            getattr(arguments, "override", None),
        )
    except ValidationError as exc:
        raise ValueError(f"Invalid malletbridge configuration: {exc}") from exc


def _runtime(configuration: MalletConfiguration) -> MalletRuntime:
    return get_runtime(resolve_mallet_settings(config=configuration.runtime))


def _load_phrases(path: Optional[str]) -> Optional[Phrases]:
    if path is None:
        return None
    source = require_file(path, label="Phrases file")
    return Phrases.from_lines(source.read_text(encoding="utf-8").splitlines())


def _print_json(payload: Dict[str, object]) -> None:
    print(json.dumps(payload, indent=2))


def cmd_prepare(arguments: argparse.Namespace) -> int:
    """
    Write the MALLET import file and stoplist for a partition bundle.

    :param arguments: Parsed command-line interface arguments.
    :type arguments: argparse.Namespace
    :return: Exit code.
    :rtype: int
    """
    configuration = _load_configuration(arguments)
    bundle = PartitionBundle.from_jsonl(arguments.bundle)
    import_file = write_import_file(
        bundle,
        arguments.output,
        p_attribute=configuration.instances.p_attribute,
        phrases=_load_phrases(arguments.phrases),
    )
    stopwords = resolve_stopwords(configuration.instances)
    stoplist_file = write_stoplist(stopwords, arguments.stoplist)
    _print_json(
        {
            "import_file": str(import_file),
            "stoplist_file": str(stoplist_file),
            "documents": len(bundle),
            "stopwords": len(stopwords),
        }
    )
    return 0


def cmd_import(arguments: argparse.Namespace) -> int:
    """
    Build and store an instance list for a partition bundle.

    :param arguments: Parsed command-line interface arguments.
    :type arguments: argparse.Namespace
    :return: Exit code.
    :rtype: int
    """
    configuration = _load_configuration(arguments)
    bundle = PartitionBundle.from_jsonl(arguments.bundle)
    phrases = _load_phrases(arguments.phrases)
    destination = resolve_destination(arguments.output, suffix=".mallet")

    if arguments.via == "cli":
        settings = resolve_mallet_settings(config=configuration.runtime)
        with TemporaryDirectory(prefix="malletbridge-") as temporary_directory:
            workdir = Path(temporary_directory)
            import_file = write_import_file(
                bundle,
                workdir / "documents.tsv",
                p_attribute=configuration.instances.p_attribute,
                phrases=phrases,
            )
            stoplist_file = write_stoplist(
                resolve_stopwords(configuration.instances), workdir / STOPLIST_FILENAME
            )
            import_with_cli(
                import_file,
                destination,
                mallet_home=settings.mallet_home,
                config=configuration.instances,
                stoplist_file=stoplist_file,
            )
    else:
        runtime = _runtime(configuration)
        instance_list = make_instance_list_from_config(
            bundle, configuration.instances, phrases=phrases, runtime=runtime
        )
        instance_list_store(instance_list, destination, runtime=runtime)

    _print_json(
        {"instance_list": str(destination), "documents": len(bundle), "via": arguments.via}
    )
    return 0


def cmd_train(arguments: argparse.Namespace) -> int:
    """
    Train a topic model with the MALLET command-line tool.

    :param arguments: Parsed command-line interface arguments.
    :type arguments: argparse.Namespace
    :return: Exit code.
    :rtype: int
    """
    configuration = _load_configuration(arguments)
    settings = resolve_mallet_settings(config=configuration.runtime)
    train = configuration.train
    destination = (
        Path(arguments.output_model)
        if arguments.output_model is not None
        else default_model_path(arguments.input)
    )
    command = build_train_command(
        Path(settings.mallet_home) / "bin", arguments.input, destination, **train_options(train)
    )
    if arguments.dry_run:
        _print_json({"command": command})
        return 0
    require_file(arguments.input, label="Instance list")
    run_mallet(command, verbose=configuration.instances.verbose)
    _print_json({"command": command, "model": str(destination)})
    return 0


def cmd_lda(arguments: argparse.Namespace) -> int:
    """
    Convert a stored topic model into an LDA result archive.

    :param arguments: Parsed command-line interface arguments.
    :type arguments: argparse.Namespace
    :return: Exit code.
    :rtype: int
    """
    configuration = _load_configuration(arguments)
    runtime = _runtime(configuration)
    model = load_topic_model(arguments.model, runtime=runtime)
    lda = as_lda(model, verbose=configuration.instances.verbose)
    output = lda.save(arguments.output)
    _print_json(
        {
            "output": str(output),
            "documents": lda.dim[0],
            "terms": lda.dim[1],
            "topics": lda.k,
            "iterations": lda.iter,
        }
    )
    return 0


def cmd_word_weights(arguments: argparse.Namespace) -> int:
    """
    Write the topic-word weights of a stored model and optionally the sparse matrix.

    :param arguments: Parsed command-line interface arguments.
    :type arguments: argparse.Namespace
    :return: Exit code.
    :rtype: int
    """
    configuration = _load_configuration(arguments)
    runtime = _runtime(configuration)
    model = load_topic_model(arguments.model, runtime=runtime)
    weights_file = mallet_save_word_weights(model, arguments.output, runtime=runtime)
    payload: Dict[str, object] = {"word_weights": str(weights_file)}
    if arguments.matrix is not None:
        matrix = mallet_load_word_weights(weights_file)
        payload["matrix"] = str(matrix.save(arguments.matrix))
        payload["shape"] = list(matrix.shape)
        payload["nonzero"] = matrix.nnz
    _print_json(payload)
    return 0


def cmd_load_word_weights(arguments: argparse.Namespace) -> int:
    """
    Convert an existing weights file into a sparse matrix archive.

    :param arguments: Parsed command-line interface arguments.
    :type arguments: argparse.Namespace
    :return: Exit code.
    :rtype: int
    """
    matrix = mallet_load_word_weights(arguments.input)
    output = matrix.save(arguments.output)
    _print_json({"matrix": str(output), "shape": list(matrix.shape), "nonzero": matrix.nnz})
    return 0


def cmd_sparse_beta(arguments: argparse.Namespace) -> int:
    """
    Write the sparse top-word count matrix of a stored model.

    :param arguments: Parsed command-line interface arguments.
    :type arguments: argparse.Namespace
    :return: Exit code.
    :rtype: int
    """
    configuration = _load_configuration(arguments)
    runtime = _runtime(configuration)
    model = load_topic_model(arguments.model, runtime=runtime)
    top_words = (
        arguments.top_words if arguments.top_words is not None else configuration.train.top_words
    )
    matrix = mallet_get_sparse_word_weights_matrix(
        model, top_words, arguments.report, runtime=runtime
    )
    output = matrix.save(arguments.output)
    _print_json({"matrix": str(output), "shape": list(matrix.shape), "nonzero": matrix.nnz})
    return 0


def cmd_doc_topics(arguments: argparse.Namespace) -> int:
    """
    Convert a doc-topics file into a dense matrix archive.

    :param arguments: Parsed command-line interface arguments.
    :type arguments: argparse.Namespace
    :return: Exit code.
    :rtype: int
    """
    matrix = load_doc_topics(
        arguments.input, layout=arguments.layout, num_topics=arguments.num_topics
    )
    output = matrix.save(arguments.output)
    _print_json({"matrix": str(output), "shape": list(matrix.shape)})
    return 0


def _add_configuration_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--configuration",
        action="append",
        default=argparse.SUPPRESS,
        help="Path to a configuration YAML. Repeatable; later files override earlier ones.",
    )
    parser.add_argument(
        "--override",
        "--config",
        action="append",
        default=argparse.SUPPRESS,
        help="Override key=value pairs applied after composing configurations (supports dotted keys).",
    )


def build_parser() -> argparse.ArgumentParser:
    """
    Build the command-line interface argument parser.

    :return: Argument parser instance.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="malletbridge",
        description="Move corpora into MALLET and topic model results back out.",
    )
    parser.add_argument(
        "--configuration",
        action="append",
        default=None,
        help=(
            "Path to a configuration YAML. Repeatable; later files override earlier ones. "
            "Can be provided before or after the subcommand."
        ),
    )
    parser.add_argument(
        "--override",
        "--config",
        action="append",
        default=None,
        help="Override key=value pairs applied after composing configurations (supports dotted keys).",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_prepare = sub.add_parser(
        "prepare", help="Write the MALLET import file and stoplist for a bundle."
    )
    _add_configuration_args(p_prepare)
    p_prepare.add_argument("--bundle", required=True, help="Partition bundle JSON Lines file.")
    p_prepare.add_argument("--output", required=True, help="Import file to write.")
    p_prepare.add_argument("--stoplist", required=True, help="Stoplist file to write.")
    p_prepare.add_argument("--phrases", default=None, help="Optional phrases file, one per line.")
    p_prepare.set_defaults(func=cmd_prepare)

    p_import = sub.add_parser("import", help="Build and store an instance list for a bundle.")
    _add_configuration_args(p_import)
    p_import.add_argument("--bundle", required=True, help="Partition bundle JSON Lines file.")
    p_import.add_argument(
        "--output", default=None, help="Instance list file (defaults to a temporary file)."
    )
    p_import.add_argument("--phrases", default=None, help="Optional phrases file, one per line.")
    p_import.add_argument(
        "--via",
        choices=["jvm", "cli"],
        default="jvm",
        help="Build in-process through the Java virtual machine or with mallet import-file.",
    )
    p_import.set_defaults(func=cmd_import)

    p_train = sub.add_parser("train", help="Train a topic model with mallet train-topics.")
    _add_configuration_args(p_train)
    p_train.add_argument("--input", required=True, help="Stored instance list.")
    p_train.add_argument(
        "--output-model",
        default=None,
        help="Model file (defaults to the instance list path with a .model suffix).",
    )
    p_train.add_argument(
        "--dry-run", action="store_true", help="Print the command without running it."
    )
    p_train.set_defaults(func=cmd_train)

    p_lda = sub.add_parser("lda", help="Convert a stored model into an LDA result archive.")
    _add_configuration_args(p_lda)
    p_lda.add_argument("--model", required=True, help="Stored ParallelTopicModel.")
    p_lda.add_argument("--output", required=True, help="Archive (.npz) to write.")
    p_lda.set_defaults(func=cmd_lda)

    p_weights = sub.add_parser("word-weights", help="Write the topic-word weights of a model.")
    _add_configuration_args(p_weights)
    p_weights.add_argument("--model", required=True, help="Stored ParallelTopicModel.")
    p_weights.add_argument(
        "--output", default=None, help="Weights file (defaults to a temporary file)."
    )
    p_weights.add_argument(
        "--matrix", default=None, help="Optional sparse matrix archive (.npz) to write."
    )
    p_weights.set_defaults(func=cmd_word_weights)

    p_load_weights = sub.add_parser(
        "load-word-weights", help="Convert a weights file into a sparse matrix archive."
    )
    p_load_weights.add_argument("--input", required=True, help="Weights file.")
    p_load_weights.add_argument("--output", required=True, help="Archive (.npz) to write.")
    p_load_weights.set_defaults(func=cmd_load_word_weights)

    p_sparse = sub.add_parser(
        "sparse-beta", help="Write the sparse top-word counts from the XML topic report."
    )
    _add_configuration_args(p_sparse)
    p_sparse.add_argument("--model", required=True, help="Stored ParallelTopicModel.")
    p_sparse.add_argument(
        "--top-words", type=int, default=None, help="Top words per topic in the report."
    )
    p_sparse.add_argument(
        "--report", default=None, help="XML report file (defaults to a temporary file)."
    )
    p_sparse.add_argument("--output", required=True, help="Archive (.npz) to write.")
    p_sparse.set_defaults(func=cmd_sparse_beta)

    p_doc_topics = sub.add_parser(
        "doc-topics", help="Convert a doc-topics file into a dense matrix archive."
    )
    p_doc_topics.add_argument("--input", required=True, help="Doc-topics file.")
    p_doc_topics.add_argument(
        "--layout", choices=list(DOC_TOPICS_LAYOUTS), default="dense", help="File layout."
    )
    p_doc_topics.add_argument(
        "--num-topics", type=int, default=None, help="Number of topics (inferred when omitted)."
    )
    p_doc_topics.add_argument("--output", required=True, help="Archive (.npz) to write.")
    p_doc_topics.set_defaults(func=cmd_doc_topics)

    return parser


def main(argument_list: Optional[List[str]] = None) -> int:
    """
    Entry point for the malletbridge command-line interface.

    :param argument_list: Optional command-line interface arguments.
    :type argument_list: list[str] or None
    :return: Exit code.
    :rtype: int
    """
    parser = build_parser()
    arguments = parser.parse_args(argument_list)
    try:
        return int(arguments.func(arguments))
    except (
        FileNotFoundError,
        KeyError,
        ValueError,
        ValidationError,
        MalletCommandError,
        MalletRuntimeError,
    ) as exception:
        message = exception.args[0] if getattr(exception, "args", None) else str(exception)
        print(str(message), file=sys.stderr)
        return 2
