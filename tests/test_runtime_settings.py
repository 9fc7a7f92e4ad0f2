"""
Runtime settings resolution and Java value conversion tests.
"""

from __future__ import annotations

import os

import numpy as np
import pytest

from malletbridge.models import MalletRuntimeConfig
from malletbridge.runtime import java_matrix_to_numpy, java_text, resolve_mallet_settings

ENVIRONMENT_KEYS = (
    "MALLET_HOME",
    "MALLETBRIDGE_CLASS_PATH",
    "MALLETBRIDGE_JVM_OPTIONS",
    "MALLETBRIDGE_JVM_PATH",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for key in ENVIRONMENT_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_derive_class_path_from_home():
    settings = resolve_mallet_settings()
    assert settings.mallet_home == "/opt/mallet-2.0.8"
    assert settings.class_path == [
        os.path.join("/opt/mallet-2.0.8", "class"),
        os.path.join("/opt/mallet-2.0.8", "lib", "mallet-deps.jar"),
    ]
    assert settings.jvm_options == []
    assert settings.jvm_path is None


def test_configuration_values_are_used():
    config = MalletRuntimeConfig(
        mallet_home="/srv/mallet",
        class_path=["/srv/extra.jar"],
        jvm_options=["-Xmx4g"],
        jvm_path="/usr/lib/jvm/libjvm.so",
    )
    settings = resolve_mallet_settings(config=config)
    assert settings.mallet_home == "/srv/mallet"
    assert settings.class_path == ["/srv/extra.jar"]
    assert settings.jvm_options == ["-Xmx4g"]
    assert settings.jvm_path == "/usr/lib/jvm/libjvm.so"


def test_environment_overrides_configuration(monkeypatch):
    monkeypatch.setenv("MALLET_HOME", "/env/mallet")
    monkeypatch.setenv("MALLETBRIDGE_CLASS_PATH", os.pathsep.join(["/a.jar", "", "/b"]))
    monkeypatch.setenv("MALLETBRIDGE_JVM_OPTIONS", "-Xmx2g  -Dfile.encoding=UTF-8")
    config = MalletRuntimeConfig(mallet_home="/srv/mallet", jvm_options=["-Xmx4g"])
    settings = resolve_mallet_settings(config=config)
    assert settings.mallet_home == "/env/mallet"
    assert settings.class_path == ["/a.jar", "/b"]
    assert settings.jvm_options == ["-Xmx2g", "-Dfile.encoding=UTF-8"]


def test_java_matrix_to_numpy_stacks_rows():
    matrix = java_matrix_to_numpy([[1, 2], [3, 4], [5, 6]])
    assert matrix.shape == (3, 2)
    assert matrix.dtype == float
    assert np.array_equal(matrix[2], [5.0, 6.0])


def test_java_matrix_to_numpy_empty():
    assert java_matrix_to_numpy([]).shape == (0, 0)


def test_java_text():
    assert java_text(None) is None
    assert java_text(12) == "12"
