"""
Shared fixtures for malletbridge tests.
"""

from __future__ import annotations

import json

import pytest

from fakes import FakeRuntime, FakeTopicModel, import_pipe_classes
from malletbridge.models import PartitionBundle


@pytest.fixture
def bundle() -> PartitionBundle:
    return PartitionBundle.model_validate(
        {
            "partitions": [
                {
                    "name": "speech_1",
                    "p_attributes": {
                        "word": ["Die", "Deutsche", "Bank", "und", "die", "Steuer"],
                        "lemma": ["die", "deutsch", "Bank", "und", "die", "Steuer"],
                    },
                },
                {
                    "name": "speech_2",
                    "p_attributes": {
                        "word": ["Der", "Haushalt", "der", "Deutsche", "Bank"],
                        "lemma": ["der", "Haushalt", "der", "deutsch", "Bank"],
                    },
                },
            ]
        }
    )


@pytest.fixture
def bundle_file(tmp_path, bundle):
    path = tmp_path / "bundle.jsonl"
    lines = [json.dumps(partition.model_dump()) for partition in bundle.partitions]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def fake_runtime() -> FakeRuntime:
    return FakeRuntime(import_pipe_classes())


@pytest.fixture
def topic_model() -> FakeTopicModel:
    return FakeTopicModel(
        alphabet=["bank", "steuer", "haushalt", "wald"],
        counts=[
            [5, 3, 0, 0],
            [0, 1, 4, 2],
            [1, 0, 0, 6],
        ],
        document_topics=[
            [0.7, 0.2, 0.1],
            [0.1, 0.6, 0.3],
        ],
        document_names=["speech_1", "speech_2"],
    )
