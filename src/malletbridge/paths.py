"""
Temporary file helpers.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Optional, Union


def temporary_path(suffix: str = "") -> Path:
    """
    Create an empty temporary file and return its path.

    The file is not removed automatically; callers own it.

    :param suffix: File name suffix.
    :type suffix: str
    :return: Path to the new file.
    :rtype: Path
    """
    with tempfile.NamedTemporaryFile(prefix="malletbridge-", suffix=suffix, delete=False) as handle:
        return Path(handle.name)


def resolve_destination(destfile: Optional[Union[str, Path]], *, suffix: str = "") -> Path:
    if destfile is None:
        return temporary_path(suffix)
    return Path(destfile)


def require_file(path: Union[str, Path], *, label: str) -> Path:
    candidate = Path(path)
    if not candidate.is_file():
        raise FileNotFoundError(f"{label} not found: {candidate}")
    return candidate
