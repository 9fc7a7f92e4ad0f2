"""
Runs the malletbridge unit tests and behave scenarios.
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
from pathlib import Path


def _repo_root() -> Path:
    """
    Resolve the repository root directory.

    :return: Repository root path.
    :rtype: Path
    """

    return Path(__file__).resolve().parent.parent


def _env_with_src() -> dict[str, str]:
    """
    Build an environment with src/ and the repository root on PYTHONPATH.

    :return: Environment mapping.
    :rtype: dict[str, str]
    """

    repo_root = _repo_root()
    env = dict(os.environ)
    entries = [str(repo_root / "src"), str(repo_root)]
    if env.get("PYTHONPATH"):
        entries.append(env["PYTHONPATH"])
    env["PYTHONPATH"] = os.pathsep.join(entries)
    return env


def _run(command: list[str], *, env: dict[str, str]) -> int:
    return subprocess.call(command, env=env, cwd=str(_repo_root()))


def main() -> int:
    """
    Run pytest and Behave under coverage and emit Hypertext Markup Language reports.

    By default, scenarios tagged ``@integration`` are excluded. They need a MALLET
    installation reachable through ``MALLET_HOME``; use ``--integration`` to include them.

    :return: Exit code.
    :rtype: int
    """

    parser = argparse.ArgumentParser(description="Run malletbridge tests under coverage.")
    parser.add_argument(
        "--integration",
        action="store_true",
        help="Include scenarios tagged @integration.",
    )
    args = parser.parse_args()

    repo_root = _repo_root()
    env = _env_with_src()
    htmlcov_dir = repo_root / "reports" / "htmlcov"

    _run([sys.executable, "-m", "coverage", "erase"], env=env)
    pytest_rc = _run([sys.executable, "-m", "coverage", "run", "-m", "pytest"], env=env)

    behave_args = [] if args.integration else ["--tags", "~@integration"]
    behave_rc = _run(
        [sys.executable, "-m", "coverage", "run", "--append", "-m", "behave", *behave_args],
        env=env,
    )
    _run([sys.executable, "-m", "coverage", "report", "-m"], env=env)
    _run([sys.executable, "-m", "coverage", "html", "-d", str(htmlcov_dir)], env=env)

    print(f"Coverage report in Hypertext Markup Language: {htmlcov_dir / 'index.html'}")
    return int(pytest_rc or behave_rc)


if __name__ == "__main__":
    raise SystemExit(main())
