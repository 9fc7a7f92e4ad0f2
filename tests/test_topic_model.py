"""
Topic model persistence and in-process estimation tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from fakes import FakeRuntime
from malletbridge.constants import PARALLEL_TOPIC_MODEL_CLASS
from malletbridge.models import TrainConfig
from malletbridge.topic_model import estimate_topic_model, load_topic_model, write_topic_model


class RecordingTopicModel:
    def __init__(self, topics, alpha_sum, beta):
        self.arguments = (topics, alpha_sum, beta)
        self.calls = []

    def __getattr__(self, name):
        if name.startswith(("add", "set", "estimate")):
            return lambda *values: self.calls.append((name, values))
        raise AttributeError(name)

    @staticmethod
    def read(file):
        return ("read", file.path)

    def write(self, file):
        Path(file.path).write_text("model", encoding="utf-8")


@pytest.fixture
def model_runtime() -> FakeRuntime:
    return FakeRuntime({PARALLEL_TOPIC_MODEL_CLASS: RecordingTopicModel})


def test_estimate_configures_the_sampler(model_runtime):
    config = TrainConfig(topics=12, iterations=300, top_words=20, threads=4, alpha_sum=1.5)
    model = estimate_topic_model("instances", config, verbose=False, runtime=model_runtime)
    assert model.arguments == (12, 1.5, 0.01)
    assert model.calls == [
        ("addInstances", ("instances",)),
        ("setNumThreads", (4,)),
        ("setTopicDisplay", (50, 20)),
        ("setNumIterations", (300,)),
        ("estimate", ()),
    ]


def test_estimate_applies_optional_settings(model_runtime, capsys):
    config = TrainConfig(topics=3, iterations=2, optimize_interval=10, random_seed=7)
    model = estimate_topic_model("instances", config, runtime=model_runtime)
    names = [name for name, _ in model.calls]
    assert names[1] == "setNumThreads"
    assert model.calls[1] == ("setNumThreads", (1,))
    assert ("setOptimizeInterval", (10,)) in model.calls
    assert ("setRandomSeed", (7,)) in model.calls
    assert names[-1] == "estimate"
    err = capsys.readouterr().err
    assert "estimating topics=3 iterations=2" in err
    assert "estimate complete" in err


def test_load_topic_model_reads_file(model_runtime, tmp_path):
    path = tmp_path / "docs.model"
    path.write_text("model", encoding="utf-8")
    assert load_topic_model(path, runtime=model_runtime) == ("read", str(path))


def test_load_missing_topic_model(model_runtime, tmp_path):
    with pytest.raises(FileNotFoundError, match="Topic model not found"):
        load_topic_model(tmp_path / "absent.model", runtime=model_runtime)


def test_write_topic_model(model_runtime, tmp_path):
    model = RecordingTopicModel(3, 5.0, 0.01)
    destination = write_topic_model(model, tmp_path / "out.model", runtime=model_runtime)
    assert destination.read_text(encoding="utf-8") == "model"
