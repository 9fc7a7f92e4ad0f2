"""
Construction and execution of MALLET command-line invocations.
"""

from __future__ import annotations

import shlex
import subprocess
import sys
import time
from numbers import Real
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from .constants import MALLET_EXECUTABLE, PROGRESS_PREFIX
from .errors import MalletCommandError
from .models import InstanceListConfig, TrainConfig
from .paths import require_file

TAB_LINE_REGEX = "^([^\\t]*)\\t([^\\t]*)\\t(.*)$"

PathLike = Union[str, Path]


def mallet_executable(mallet_bin_dir: PathLike) -> str:
    return str(Path(mallet_bin_dir) / MALLET_EXECUTABLE)


def _format_number(value: Real) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _require_number(name: str, value: object, *, minimum_exclusive: float) -> Real:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"{name} must be a number (got {value!r})")
    if not value > minimum_exclusive:
        raise ValueError(f"{name} must be greater than {_format_number(minimum_exclusive)}")
    return value


def _require_whole_number(name: str, value: object, *, minimum: Optional[int] = None) -> Real:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"{name} must be a number (got {value!r})")
    if not float(value).is_integer():
        raise ValueError(f"{name} must be a whole number (got {value!r})")
    if minimum is not None and value < minimum:
        raise ValueError(f"{name} must be at least {minimum}")
    return value


def default_model_path(instance_file: PathLike) -> Path:
    """
    Derive the model path written next to an instance list.

    The suffix is replaced with ``.model``; an instance list that already ends in
    ``.model`` gets the suffix appended so the model never replaces its input.

    :param instance_file: Stored instance list.
    :type instance_file: str or Path
    :return: Model path.
    :rtype: Path
    """
    source = Path(instance_file)
    destination = source.with_suffix(".model")
    if destination == source:
        destination = source.with_name(f"{source.name}.model")
    return destination


def build_train_command(
    mallet_bin_dir: PathLike,
    sourcefile: PathLike,
    destfile: PathLike,
    *,
    topwords: Real = 50,
    topics: Real = 50,
    iterations: Real = 2000,
    threads: Optional[Real] = None,
    alpha_sum: Optional[Real] = None,
    beta: Optional[Real] = None,
    optimize_interval: Optional[Real] = None,
    random_seed: Optional[Real] = None,
) -> List[str]:
    """
    Build the argument vector for ``mallet train-topics``.

    Optional arguments left as None are omitted and MALLET's defaults apply.

    :param mallet_bin_dir: Directory holding the ``mallet`` launcher script.
    :type mallet_bin_dir: str or Path
    :param sourcefile: Instance list to train on.
    :type sourcefile: str or Path
    :param destfile: Where MALLET writes the serialized model.
    :type destfile: str or Path
    :param topwords: Number of top words per topic, greater than 2.
    :type topwords: numbers.Real
    :param topics: Number of topics, greater than 2.
    :type topics: numbers.Real
    :param iterations: Number of iterations, greater than 1.
    :type iterations: numbers.Real
    :param threads: Number of sampler threads, a whole number of at least 1.
    :type threads: numbers.Real or None
    :param alpha_sum: Sum of the document-topic prior over all topics (``--alpha``).
    :type alpha_sum: numbers.Real or None
    :param beta: Topic-word prior.
    :type beta: numbers.Real or None
    :param optimize_interval: Iterations between hyperparameter optimizations.
    :type optimize_interval: numbers.Real or None
    :param random_seed: Sampler seed.
    :type random_seed: numbers.Real or None
    :return: Argument vector.
    :rtype: list[str]
    :raises ValueError: If a numeric argument is missing or out of range, or the model
        would be written over the instance list.
    """
    _require_number("topics", topics, minimum_exclusive=2)
    _require_number("iterations", iterations, minimum_exclusive=1)
    _require_number("topwords", topwords, minimum_exclusive=2)
    if threads is not None:
        _require_whole_number("threads", threads, minimum=1)
    if alpha_sum is not None:
        _require_number("alpha_sum", alpha_sum, minimum_exclusive=0)
    if beta is not None:
        _require_number("beta", beta, minimum_exclusive=0)
    if optimize_interval is not None:
        _require_whole_number("optimize_interval", optimize_interval, minimum=1)
    if random_seed is not None:
        _require_whole_number("random_seed", random_seed)
    if Path(sourcefile).resolve() == Path(destfile).resolve():
        raise ValueError(f"Model destination is the instance list itself: {destfile}")

    command = [
        mallet_executable(mallet_bin_dir),
        "train-topics",
        "--input",
        str(sourcefile),
        "--num-topics",
        _format_number(topics),
        "--num-iterations",
        _format_number(iterations),
        "--num-top-words",
        _format_number(topwords),
        "--output-model",
        str(destfile),
    ]
    if alpha_sum is not None:
        command.extend(["--alpha", _format_number(alpha_sum)])
    if beta is not None:
        command.extend(["--beta", _format_number(beta)])
    if optimize_interval is not None:
        command.extend(["--optimize-interval", _format_number(optimize_interval)])
    if random_seed is not None:
        command.extend(["--random-seed", _format_number(random_seed)])
    if threads is not None:
        command.extend(["--num-threads", _format_number(threads)])
    return command


def train_options(config: TrainConfig) -> Dict[str, Optional[Real]]:
    """
    Map a training configuration onto :func:`build_train_command` keyword arguments.

    :param config: Training configuration.
    :type config: TrainConfig
    :return: Keyword arguments.
    :rtype: dict[str, numbers.Real or None]
    """
    return {
        "topwords": config.top_words,
        "topics": config.topics,
        "iterations": config.iterations,
        "threads": config.threads,
        "alpha_sum": config.alpha_sum,
        "beta": config.beta,
        "optimize_interval": config.optimize_interval,
        "random_seed": config.random_seed,
    }


def mallet_cmd(
    mallet_bin_dir: PathLike,
    sourcefile: PathLike,
    destfile: PathLike,
    *,
    topwords: Real = 50,
    topics: Real = 50,
    iterations: Real = 2000,
    threads: Optional[Real] = None,
    alpha_sum: Optional[Real] = None,
    beta: Optional[Real] = None,
    optimize_interval: Optional[Real] = None,
    random_seed: Optional[Real] = None,
) -> str:
    """
    Return the ``train-topics`` command as a single shell-quoted line.

    Arguments are those of :func:`build_train_command`.

    :return: Command line.
    :rtype: str
    """
    return shlex.join(
        build_train_command(
            mallet_bin_dir,
            sourcefile,
            destfile,
            topwords=topwords,
            topics=topics,
            iterations=iterations,
            threads=threads,
            alpha_sum=alpha_sum,
            beta=beta,
            optimize_interval=optimize_interval,
            random_seed=random_seed,
        )
    )


def build_import_command(
    mallet_bin_dir: PathLike,
    sourcefile: PathLike,
    destfile: PathLike,
    *,
    stoplist_file: Optional[PathLike] = None,
    preserve_case: bool = True,
    token_regexp: Optional[str] = None,
) -> List[str]:
    """
    Build the argument vector for ``mallet import-file``.

    The source is expected in the tab-separated layout written by
    :func:`malletbridge.instances.write_import_file`.

    :param mallet_bin_dir: Directory holding the ``mallet`` launcher script.
    :type mallet_bin_dir: str or Path
    :param sourcefile: Tab-separated document file.
    :type sourcefile: str or Path
    :param destfile: Instance list to write.
    :type destfile: str or Path
    :param stoplist_file: Optional stoplist file replacing MALLET's default list.
    :type stoplist_file: str or Path or None
    :param preserve_case: Whether to keep token case.
    :type preserve_case: bool
    :param token_regexp: Optional Java regular expression for tokens.
    :type token_regexp: str or None
    :return: Argument vector.
    :rtype: list[str]
    """
    command = [
        mallet_executable(mallet_bin_dir),
        "import-file",
        "--input",
        str(sourcefile),
        "--output",
        str(destfile),
        "--keep-sequence",
        "--line-regex",
        TAB_LINE_REGEX,
        "--name",
        "1",
        "--label",
        "2",
        "--data",
        "3",
    ]
    if stoplist_file is not None:
        command.extend(["--stoplist-file", str(stoplist_file)])
    if preserve_case:
        command.append("--preserve-case")
    if token_regexp is not None:
        command.extend(["--token-regex", token_regexp])
    return command


def run_mallet(command: Sequence[str], *, verbose: bool = True) -> str:
    """
    Run a MALLET command and return its standard output.

    :param command: Argument vector.
    :type command: Sequence[str]
    :param verbose: Whether to report the command and its duration on standard error.
    :type verbose: bool
    :return: Captured standard output.
    :rtype: str
    :raises MalletCommandError: If the executable is missing or exits with a non-zero code.
    """
    if verbose:
        print(f"{PROGRESS_PREFIX} running {shlex.join(command)}", flush=True, file=sys.stderr)
    start_time = time.perf_counter()
    try:
        result = subprocess.run(
            list(command),
            check=False,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as exc:
        raise MalletCommandError(command=command, returncode=None, stderr=str(exc)) from exc
    if result.returncode != 0:
        raise MalletCommandError(
            command=command, returncode=result.returncode, stderr=result.stderr
        )
    if verbose:
        elapsed = time.perf_counter() - start_time
        print(
            f"{PROGRESS_PREFIX} command complete elapsed={elapsed:.1f}s",
            flush=True,
            file=sys.stderr,
        )
    return result.stdout


def import_with_cli(
    sourcefile: PathLike,
    destfile: PathLike,
    *,
    mallet_home: PathLike,
    config: InstanceListConfig,
    stoplist_file: Optional[PathLike] = None,
) -> Path:
    """
    Create an instance list with ``mallet import-file``.

    :param sourcefile: Tab-separated document file.
    :type sourcefile: str or Path
    :param destfile: Instance list to write.
    :type destfile: str or Path
    :param mallet_home: MALLET installation directory.
    :type mallet_home: str or Path
    :param config: Instance list configuration.
    :type config: InstanceListConfig
    :param stoplist_file: Optional stoplist file.
    :type stoplist_file: str or Path or None
    :return: Path of the instance list.
    :rtype: Path
    """
    source = require_file(sourcefile, label="Import file")
    command = build_import_command(
        Path(mallet_home) / "bin",
        source,
        destfile,
        stoplist_file=stoplist_file,
        preserve_case=config.preserve_case,
        token_regexp=config.token_regexp,
    )
    run_mallet(command, verbose=config.verbose)
    return Path(destfile)


def train_with_cli(
    instance_file: PathLike,
    destfile: PathLike,
    *,
    mallet_home: PathLike,
    config: TrainConfig,
    verbose: bool = True,
) -> Path:
    """
    Train a topic model with ``mallet train-topics`` and return the model path.

    :param instance_file: Stored instance list.
    :type instance_file: str or Path
    :param destfile: Where the model is written.
    :type destfile: str or Path
    :param mallet_home: MALLET installation directory.
    :type mallet_home: str or Path
    :param config: Training configuration.
    :type config: TrainConfig
    :param verbose: Whether to report progress on standard error.
    :type verbose: bool
    :return: Path of the written model.
    :rtype: Path
    """
    source = require_file(instance_file, label="Instance list")
    command = build_train_command(
        Path(mallet_home) / "bin", source, destfile, **train_options(config)
    )
    run_mallet(command, verbose=verbose)
    return Path(destfile)
