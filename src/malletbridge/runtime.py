"""
Java virtual machine bridge for reaching MALLET objects in-process.
"""

from __future__ import annotations

import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Union

import numpy as np

from .constants import (
    DEFAULT_MALLET_HOME,
    MALLET_CLASS_DIR,
    MALLET_DEPS_JAR,
    PROGRESS_PREFIX,
)
from .errors import MalletRuntimeError
from .models import MalletRuntimeConfig


@dataclass(frozen=True)
class MalletSettings:
    """
    Resolved settings for the Java virtual machine hosting MALLET.

    :ivar mallet_home: MALLET installation directory.
    :ivar class_path: Class path entries added before the virtual machine starts.
    :ivar jvm_options: Virtual machine options such as -Xmx4g.
    :ivar jvm_path: Java virtual machine shared library, or None for the default.
    """

    mallet_home: str
    class_path: List[str]
    jvm_options: List[str]
    jvm_path: Optional[str]


def resolve_mallet_settings(*, config: Optional[MalletRuntimeConfig] = None) -> MalletSettings:
    """
    Resolve MALLET runtime settings from environment or configuration.

    Environment variables take precedence: ``MALLET_HOME``, ``MALLETBRIDGE_CLASS_PATH``
    (entries separated by ``os.pathsep``), ``MALLETBRIDGE_JVM_OPTIONS`` (whitespace separated)
    and ``MALLETBRIDGE_JVM_PATH``.

    :param config: Optional runtime configuration.
    :type config: MalletRuntimeConfig or None
    :return: Resolved settings.
    :rtype: MalletSettings
    """
    loaded = config or MalletRuntimeConfig()

    mallet_home = os.environ.get("MALLET_HOME") or loaded.mallet_home or DEFAULT_MALLET_HOME

    class_path_env = os.environ.get("MALLETBRIDGE_CLASS_PATH")
    if class_path_env:
        class_path = [entry for entry in class_path_env.split(os.pathsep) if entry]
    elif loaded.class_path is not None:
        class_path = list(loaded.class_path)
    else:
        home = Path(mallet_home)
        class_path = [str(home / MALLET_CLASS_DIR), str(home / MALLET_DEPS_JAR)]

    options_env = os.environ.get("MALLETBRIDGE_JVM_OPTIONS")
    jvm_options = options_env.split() if options_env else list(loaded.jvm_options)

    jvm_path = os.environ.get("MALLETBRIDGE_JVM_PATH") or loaded.jvm_path

    return MalletSettings(
        mallet_home=mallet_home,
        class_path=class_path,
        jvm_options=jvm_options,
        jvm_path=jvm_path,
    )


class MalletRuntime:
    """
    Access to MALLET's Java classes through JPype.

    The virtual machine is started on first use. A virtual machine can only be started
    once per process, so class path entries must be known before the first call.

    :param settings: Resolved runtime settings.
    :type settings: MalletSettings
    """

    def __init__(self, settings: MalletSettings) -> None:
        self.settings = settings
        self._jpype: Any = None

    def _module(self) -> Any:
        if self._jpype is not None:
            return self._jpype
        try:
            import jpype
        except ImportError as import_error:
            raise ValueError(
                "In-process MALLET access requires an optional dependency. "
                'Install it with pip install "malletbridge[jvm]".'
            ) from import_error
        self._jpype = jpype
        return jpype

    def start(self) -> None:
        """
        Start the Java virtual machine with MALLET on the class path.

        :return: None.
        :rtype: None
        :raises MalletRuntimeError: If the virtual machine cannot be started.
        """
        jpype = self._module()
        if jpype.isJVMStarted():
            return
        for entry in self.settings.class_path:
            if not Path(entry).exists():
                print(
                    f"{PROGRESS_PREFIX} class path entry does not exist: {entry}",
                    flush=True,
                    file=sys.stderr,
                )
            jpype.addClassPath(entry)
        jvm_path = self.settings.jvm_path or jpype.getDefaultJVMPath()
        try:
            jpype.startJVM(jvm_path, *self.settings.jvm_options, convertStrings=False)
        except (OSError, RuntimeError) as exc:
            raise MalletRuntimeError(f"Could not start the Java virtual machine: {exc}") from exc

    def jclass(self, name: str) -> Any:
        """
        Return a Java class by its fully qualified name.

        :param name: Class name such as ``cc.mallet.types.InstanceList``.
        :type name: str
        :return: JPype class proxy.
        :rtype: Any
        """
        self.start()
        return self._module().JClass(name)

    def java_file(self, path: Union[str, Path]) -> Any:
        return self.jclass("java.io.File")(str(path))

    def java_string(self, value: str) -> Any:
        self.start()
        return self._module().JString(value)

    def array_list(self, values: Iterable[Any] = ()) -> Any:
        array_list = self.jclass("java.util.ArrayList")()
        for value in values:
            array_list.add(value)
        return array_list

    @contextmanager
    def print_writer(self, path: Union[str, Path]) -> Iterator[Any]:
        """
        Open a ``java.io.PrintWriter`` on a file and close it afterwards.

        :param path: Destination file.
        :type path: str or Path
        :return: Context manager yielding the writer.
        :rtype: Iterator[Any]
        """
        writer = self.jclass("java.io.PrintWriter")(self.java_file(path), "UTF-8")
        try:
            yield writer
        finally:
            writer.close()


_RUNTIME: Optional[MalletRuntime] = None


def get_runtime(settings: Optional[MalletSettings] = None) -> MalletRuntime:
    """
    Return the process-wide MALLET runtime, creating it on first use.

    Settings that differ from those of an existing runtime cannot take effect, because
    the virtual machine is started only once; a warning is printed and the existing
    runtime is returned.

    :param settings: Settings for a runtime that has not been created yet.
    :type settings: MalletSettings or None
    :return: Shared runtime.
    :rtype: MalletRuntime
    """
    global _RUNTIME
    if _RUNTIME is None:
        _RUNTIME = MalletRuntime(settings or resolve_mallet_settings())
    elif settings is not None and settings != _RUNTIME.settings:
        print(
            f"{PROGRESS_PREFIX} runtime already created; ignoring new settings "
            f"(class path {os.pathsep.join(settings.class_path)})",
            flush=True,
            file=sys.stderr,
        )
    return _RUNTIME


def java_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def java_matrix_to_numpy(matrix: Sequence[Sequence[float]]) -> np.ndarray:
    """
    Convert a Java ``double[][]`` or a nested sequence to a two-dimensional array.

    :param matrix: Row-major matrix.
    :type matrix: Sequence[Sequence[float]]
    :return: Dense matrix.
    :rtype: numpy.ndarray
    """
    rows = [np.asarray(row, dtype=float) for row in matrix]
    if not rows:
        return np.zeros((0, 0), dtype=float)
    return np.vstack(rows)
