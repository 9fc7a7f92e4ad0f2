from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from malletbridge.cli import main as malletbridge_main

ENVIRONMENT_KEYS = (
    "MALLET_HOME",
    "MALLETBRIDGE_CLASS_PATH",
    "MALLETBRIDGE_JVM_OPTIONS",
    "MALLETBRIDGE_JVM_PATH",
)


def _repo_root() -> Path:
    """
    Resolve the repository root directory.

    :return: Repository root path.
    :rtype: Path
    """
    return Path(__file__).resolve().parent.parent


def before_scenario(context, scenario) -> None:
    """
    Behave hook executed before each scenario.

    :param context: Behave context object.
    :type context: object
    :param scenario: Behave scenario.
    :type scenario: object
    :return: None.
    :rtype: None
    """
    context._tmp = tempfile.TemporaryDirectory(prefix="malletbridge-bdd-")
    context.workdir = Path(context._tmp.name)
    context.repo_root = _repo_root()
    context.last_result = None
    context.last_output = None
    if "integration" in scenario.effective_tags:
        context._prior_env = {}
    else:
        context._prior_env = {key: os.environ.pop(key, None) for key in ENVIRONMENT_KEYS}


def after_scenario(context, scenario) -> None:
    """
    Behave hook executed after each scenario.

    :param context: Behave context object.
    :type context: object
    :param scenario: Behave scenario.
    :type scenario: object
    :return: None.
    :rtype: None
    """
    for key, value in getattr(context, "_prior_env", {}).items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value
    if getattr(context, "_tmp", None) is not None:
        context._tmp.cleanup()
        context._tmp = None


@dataclass
class RunResult:
    """
    Captured command-line interface execution result.

    :ivar returncode: Process exit code.
    :vartype returncode: int
    :ivar stdout: Captured standard output.
    :vartype stdout: str
    :ivar stderr: Captured standard error.
    :vartype stderr: str
    """

    returncode: int
    stdout: str
    stderr: str


def run_malletbridge(
    context,
    args: Sequence[str],
) -> RunResult:
    """
    Run the malletbridge command-line interface in-process.

    :param context: Behave context object.
    :type context: object
    :param args: Command-line interface argument list.
    :type args: Sequence[str]
    :return: Captured execution result.
    :rtype: RunResult
    """
    import contextlib
    import io

    out = io.StringIO()
    err = io.StringIO()

    prev_cwd = os.getcwd()

    try:
        os.chdir(str(context.workdir))
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            try:
                code = int(malletbridge_main(list(args)) or 0)
            except SystemExit as e:
                if isinstance(e.code, int):
                    code = e.code
                else:
                    code = 1
    finally:
        os.chdir(prev_cwd)

    result = RunResult(returncode=code, stdout=out.getvalue(), stderr=err.getvalue())
    context.last_result = result
    return result
