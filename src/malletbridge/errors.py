"""
Error types for malletbridge.
"""

from __future__ import annotations

from typing import Sequence


class MalletRuntimeError(RuntimeError):
    """
    The Java virtual machine hosting MALLET could not be started or configured.
    """


class MalletCommandError(RuntimeError):
    """
    A MALLET command-line invocation failed.

    :param command: Argument vector that was executed.
    :type command: Sequence[str]
    :param returncode: Process exit code, or None when the executable was not found.
    :type returncode: int or None
    :param stderr: Captured standard error output.
    :type stderr: str
    """

    def __init__(self, *, command: Sequence[str], returncode, stderr: str) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or "no error output"
        message = (
            "MALLET command failed"
            f": returncode={returncode} command={' '.join(self.command)}"
            f" stderr={detail}"
        )
        super().__init__(message)
