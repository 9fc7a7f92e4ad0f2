"""
MALLET instance lists built from partition bundles.
"""

from __future__ import annotations

import sys
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Any, List, Optional, Sequence, Union

from .constants import (
    DEFAULT_TOKEN_REGEXP,
    INSTANCE_LIST_CLASS,
    PROGRESS_PREFIX,
    STOPLIST_FILENAME,
)
from .corpus import get_token_stream
from .models import InstanceListConfig, PartitionBundle, Phrases
from .paths import require_file, resolve_destination
from .runtime import MalletRuntime, get_runtime
from .stopwords import default_stopwords, resolve_stopwords, write_stoplist

IMPORT_FILE_LABEL = "X"


def _build_import_pipe(
    runtime: MalletRuntime,
    *,
    stoplist_file: Path,
    preserve_case: bool,
    token_regexp: str,
) -> Any:
    pattern = runtime.jclass("java.util.regex.Pattern").compile(token_regexp)
    pipes = runtime.array_list()
    pipes.add(runtime.jclass("cc.mallet.pipe.CharSequence2TokenSequence")(pattern))
    if not preserve_case:
        pipes.add(runtime.jclass("cc.mallet.pipe.TokenSequenceLowercase")())
    pipes.add(
        runtime.jclass("cc.mallet.pipe.TokenSequenceRemoveStopwords")(
            runtime.java_file(stoplist_file), "UTF-8", False, False, False
        )
    )
    pipes.add(runtime.jclass("cc.mallet.pipe.TokenSequence2FeatureSequence")())
    return runtime.jclass("cc.mallet.pipe.SerialPipes")(pipes)


def make_instance_list(
    bundle: PartitionBundle,
    *,
    p_attribute: str = "word",
    phrases: Optional[Phrases] = None,
    terms_to_drop: Optional[Sequence[str]] = None,
    preserve_case: bool = True,
    token_regexp: str = DEFAULT_TOKEN_REGEXP,
    verbose: bool = True,
    runtime: Optional[MalletRuntime] = None,
) -> Any:
    """
    Turn a partition bundle into a MALLET ``InstanceList``.

    Each partition becomes one instance named after the partition. Tokens are passed
    newline-separated through MALLET's import pipe: tokenization with ``token_regexp``,
    optional lowercasing, stopword removal and conversion to a feature sequence.

    :param bundle: Partition bundle to convert.
    :type bundle: PartitionBundle
    :param p_attribute: Positional attribute to use, typically word or lemma.
    :type p_attribute: str
    :param phrases: Optional phrases to concatenate before import.
    :type phrases: Phrases or None
    :param terms_to_drop: Stopwords; None selects the German default list.
    :type terms_to_drop: Sequence[str] or None
    :param preserve_case: Whether to keep token case.
    :type preserve_case: bool
    :param token_regexp: Java regular expression recognising tokens.
    :type token_regexp: str
    :param verbose: Whether to report progress on standard error.
    :type verbose: bool
    :param runtime: Runtime to use; defaults to the process-wide runtime.
    :type runtime: MalletRuntime or None
    :return: Java ``cc.mallet.types.InstanceList``.
    :rtype: Any
    """
    active = runtime or get_runtime()
    token_streams = get_token_stream(
        bundle, p_attribute=p_attribute, phrases=phrases, collapse="\n"
    )
    stopwords: List[str] = (
        list(terms_to_drop) if terms_to_drop is not None else default_stopwords()
    )

    with TemporaryDirectory(prefix="malletbridge-") as temporary_directory:
        stoplist_file = write_stoplist(
            stopwords, Path(temporary_directory) / STOPLIST_FILENAME
        )
        if verbose:
            print(f"{PROGRESS_PREFIX} preparing mallet object", flush=True, file=sys.stderr)
        # The stopword pipe reads the stoplist when it is constructed.
        pipe = _build_import_pipe(
            active,
            stoplist_file=stoplist_file,
            preserve_case=preserve_case,
            token_regexp=token_regexp,
        )

    instance_list = active.jclass(INSTANCE_LIST_CLASS)(pipe)
    instance_class = active.jclass("cc.mallet.types.Instance")
    batch = active.array_list(
        instance_class(active.java_string(text), None, active.java_string(name), None)
        for name, text in zip(bundle.names, token_streams)
    )
    instance_list.addThruPipe(batch.iterator())
    if verbose:
        print(
            f"{PROGRESS_PREFIX} instance list documents={len(token_streams)}",
            flush=True,
            file=sys.stderr,
        )
    return instance_list


def make_instance_list_from_config(
    bundle: PartitionBundle,
    config: InstanceListConfig,
    *,
    phrases: Optional[Phrases] = None,
    runtime: Optional[MalletRuntime] = None,
) -> Any:
    """
    Build an instance list using an :class:`InstanceListConfig`.

    :param bundle: Partition bundle to convert.
    :type bundle: PartitionBundle
    :param config: Instance list configuration.
    :type config: InstanceListConfig
    :param phrases: Optional phrases to concatenate.
    :type phrases: Phrases or None
    :param runtime: Runtime to use.
    :type runtime: MalletRuntime or None
    :return: Java ``InstanceList``.
    :rtype: Any
    """
    return make_instance_list(
        bundle,
        p_attribute=config.p_attribute,
        phrases=phrases,
        terms_to_drop=resolve_stopwords(config),
        preserve_case=config.preserve_case,
        token_regexp=config.token_regexp,
        verbose=config.verbose,
        runtime=runtime,
    )


def instance_list_store(
    instance_list: Any,
    filename: Optional[Union[str, Path]] = None,
    *,
    runtime: Optional[MalletRuntime] = None,
) -> Path:
    """
    Save an instance list with MALLET's own serialization.

    :param instance_list: Java ``InstanceList``.
    :type instance_list: Any
    :param filename: Destination; a new temporary file when omitted.
    :type filename: str or Path or None
    :param runtime: Runtime to use.
    :type runtime: MalletRuntime or None
    :return: Path of the stored instance list.
    :rtype: Path
    """
    active = runtime or get_runtime()
    destination = resolve_destination(filename, suffix=".mallet")
    instance_list.save(active.java_file(destination))
    return destination


def instance_list_load(
    filename: Union[str, Path], *, runtime: Optional[MalletRuntime] = None
) -> Any:
    """
    Load an instance list stored by :func:`instance_list_store` or ``mallet import-file``.

    :param filename: Stored instance list.
    :type filename: str or Path
    :param runtime: Runtime to use.
    :type runtime: MalletRuntime or None
    :return: Java ``InstanceList``.
    :rtype: Any
    :raises FileNotFoundError: If the file does not exist.
    """
    source = require_file(filename, label="Instance list")
    active = runtime or get_runtime()
    return active.jclass(INSTANCE_LIST_CLASS).load(active.java_file(source))


def _import_field(value: str) -> str:
    return value.replace("\t", " ").replace("\r", " ").replace("\n", " ")


def write_import_file(
    bundle: PartitionBundle,
    path: Union[str, Path],
    *,
    p_attribute: str = "word",
    phrases: Optional[Phrases] = None,
) -> Path:
    """
    Write a bundle in the text format read by ``mallet import-file``.

    Each line holds the partition name, a placeholder label and the space-joined
    tokens, separated by tabs.

    :param bundle: Partition bundle.
    :type bundle: PartitionBundle
    :param path: Destination file.
    :type path: str or Path
    :param p_attribute: Positional attribute to use.
    :type p_attribute: str
    :param phrases: Optional phrases to concatenate.
    :type phrases: Phrases or None
    :return: Written path.
    :rtype: Path
    """
    destination = Path(path)
    token_streams = get_token_stream(bundle, p_attribute=p_attribute, phrases=phrases, collapse=" ")
    with destination.open("w", encoding="utf-8") as handle:
        for name, text in zip(bundle.names, token_streams):
            handle.write(f"{_import_field(name)}\t{IMPORT_FILE_LABEL}\t{_import_field(text)}\n")
    return destination
