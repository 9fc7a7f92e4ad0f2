"""
Java virtual machine bridge tests against a stand-in jpype module.
"""

from __future__ import annotations

import sys
import types

import pytest

import malletbridge.runtime as runtime_module
from fakes import FakeArrayList
from malletbridge.errors import MalletRuntimeError
from malletbridge.runtime import MalletRuntime, MalletSettings, get_runtime

DEFAULT_JVM_PATH = "/usr/lib/jvm/default/libjvm.so"


class JavaPrintWriter:
    def __init__(self, file, encoding) -> None:
        self.file = file
        self.encoding = encoding
        self.closed = False

    def close(self) -> None:
        self.closed = True


def _java_class(module, name):
    if name == "java.io.File":
        return lambda path: ("File", path)
    if name == "java.io.PrintWriter":

        def open_writer(file, encoding):
            writer = JavaPrintWriter(file, encoding)
            module.writers.append(writer)
            return writer

        return open_writer
    if name == "java.util.ArrayList":
        return FakeArrayList
    return ("JClass", name)


def _fake_jpype(*, started=False, failure=None):
    module = types.ModuleType("jpype")
    module.started = started
    module.class_path = []
    module.start_calls = []
    module.writers = []

    def start_jvm(path, *options, convertStrings=True):
        if failure is not None:
            raise failure
        module.start_calls.append((path, options, convertStrings))
        module.started = True

    module.isJVMStarted = lambda: module.started
    module.addClassPath = module.class_path.append
    module.getDefaultJVMPath = lambda: DEFAULT_JVM_PATH
    module.startJVM = start_jvm
    module.JClass = lambda name: _java_class(module, name)
    module.JString = lambda value: ("JString", value)
    return module


def _settings(class_path, *, jvm_options=(), jvm_path=None):
    return MalletSettings(
        mallet_home="/opt/mallet",
        class_path=list(class_path),
        jvm_options=list(jvm_options),
        jvm_path=jvm_path,
    )


@pytest.fixture
def jpype_module(monkeypatch):
    module = _fake_jpype()
    monkeypatch.setitem(sys.modules, "jpype", module)
    return module


@pytest.fixture
def fresh_runtime_slot(monkeypatch):
    monkeypatch.setattr(runtime_module, "_RUNTIME", None)


def test_start_adds_class_path_and_starts_once(jpype_module, tmp_path, capsys):
    missing = tmp_path / "absent.jar"
    runtime = MalletRuntime(_settings([tmp_path, missing], jvm_options=["-Xmx1g"]))
    runtime.start()
    runtime.start()
    assert jpype_module.class_path == [tmp_path, missing]
    assert jpype_module.start_calls == [(DEFAULT_JVM_PATH, ("-Xmx1g",), False)]
    err = capsys.readouterr().err
    assert f"[mallet] class path entry does not exist: {missing}" in err


def test_start_uses_configured_jvm_path(jpype_module):
    MalletRuntime(_settings([], jvm_path="/srv/jvm/libjvm.so")).start()
    assert jpype_module.start_calls[0][0] == "/srv/jvm/libjvm.so"


def test_start_skips_running_virtual_machine(monkeypatch):
    module = _fake_jpype(started=True)
    monkeypatch.setitem(sys.modules, "jpype", module)
    MalletRuntime(_settings(["/srv/extra.jar"])).start()
    assert module.start_calls == []
    assert module.class_path == []


def test_start_failure_is_reported(monkeypatch):
    monkeypatch.setitem(
        sys.modules, "jpype", _fake_jpype(failure=OSError("libjvm.so: cannot open"))
    )
    with pytest.raises(MalletRuntimeError, match="Could not start the Java virtual machine"):
        MalletRuntime(_settings([])).start()


def test_missing_jpype_names_the_extra(monkeypatch):
    monkeypatch.setitem(sys.modules, "jpype", None)
    with pytest.raises(ValueError, match=r"malletbridge\[jvm\]"):
        MalletRuntime(_settings([])).jclass("cc.mallet.types.InstanceList")


def test_jclass_starts_the_virtual_machine(jpype_module):
    runtime = MalletRuntime(_settings([]))
    assert runtime.jclass("cc.mallet.types.InstanceList") == (
        "JClass",
        "cc.mallet.types.InstanceList",
    )
    assert jpype_module.started is True


def test_java_values(jpype_module, tmp_path):
    runtime = MalletRuntime(_settings([]))
    assert runtime.java_file(tmp_path / "docs.mallet") == ("File", str(tmp_path / "docs.mallet"))
    assert runtime.java_string("Bank") == ("JString", "Bank")
    assert runtime.array_list(["a", "b"]).items == ["a", "b"]


def test_print_writer_is_utf8_and_closed(jpype_module, tmp_path):
    runtime = MalletRuntime(_settings([]))
    with runtime.print_writer(tmp_path / "weights.txt") as writer:
        assert writer.encoding == "UTF-8"
        assert writer.file == ("File", str(tmp_path / "weights.txt"))
    assert writer.closed is True


def test_print_writer_closes_on_error(jpype_module, tmp_path):
    runtime = MalletRuntime(_settings([]))
    with pytest.raises(RuntimeError, match="report failed"):
        with runtime.print_writer(tmp_path / "report.xml"):
            raise RuntimeError("report failed")
    assert [writer.closed for writer in jpype_module.writers] == [True]


def test_get_runtime_is_shared(fresh_runtime_slot, capsys):
    settings = _settings(["/opt/mallet/class"])
    first = get_runtime(settings)
    assert get_runtime() is first
    assert get_runtime(_settings(["/opt/mallet/class"])) is first
    assert first.settings == settings
    assert capsys.readouterr().err == ""


def test_get_runtime_warns_about_ignored_settings(fresh_runtime_slot, capsys):
    first = get_runtime(_settings(["/opt/mallet/class"]))
    assert get_runtime(_settings(["/srv/other.jar"])) is first
    err = capsys.readouterr().err
    assert "[mallet] runtime already created; ignoring new settings" in err
    assert "/srv/other.jar" in err
