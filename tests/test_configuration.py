"""
Configuration composition tests.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from malletbridge.configuration import (
    apply_overrides,
    load_mallet_configuration,
    parse_override_value,
    parse_overrides,
    read_configuration_files,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("true", True),
        ("False", False),
        ("none", None),
        ("12", 12),
        ("0.5", 0.5),
        ("german", "german"),
        ('["der", "die"]', ["der", "die"]),
        ("[broken", "[broken"),
        ("", ""),
    ],
)
def test_parse_override_value(raw, expected):
    assert parse_override_value(raw) == expected


def test_overrides_need_key_and_value():
    with pytest.raises(ValueError, match="section.key=value"):
        parse_overrides(["train.topics"])
    with pytest.raises(ValueError, match="empty part"):
        parse_overrides(["train..topics=3"])


def test_overrides_split_key_paths():
    assert parse_overrides(["train.topics = 25", "instances.verbose=false"]) == [
        (("train", "topics"), 25),
        (("instances", "verbose"), False),
    ]


def test_apply_overrides_creates_missing_sections():
    base = {"train": {"topics": 10}}
    updated = apply_overrides(
        base, parse_overrides(["train.iterations=20", "runtime.jvm_path=x"])
    )
    assert updated == {"train": {"topics": 10, "iterations": 20}, "runtime": {"jvm_path": "x"}}
    assert base == {"train": {"topics": 10}}


def test_apply_overrides_refuses_to_descend_into_values():
    with pytest.raises(ValueError, match="train.topics is not a section"):
        apply_overrides({"train": {"topics": 10}}, [(("train", "topics", "max"), 3)])


def test_later_files_override_earlier_files(tmp_path):
    first = tmp_path / "first.yml"
    second = tmp_path / "second.yml"
    first.write_text("train:\n  topics: 10\n  iterations: 100\n", encoding="utf-8")
    second.write_text("train:\n  topics: 20\n", encoding="utf-8")
    composed = read_configuration_files([str(first), str(second)])
    assert composed == {"train": {"topics": 20, "iterations": 100}}


def test_empty_file_contributes_nothing(tmp_path):
    empty = tmp_path / "empty.yml"
    empty.write_text("", encoding="utf-8")
    assert read_configuration_files([str(empty)]) == {}


def test_missing_file_is_reported(tmp_path):
    with pytest.raises(FileNotFoundError, match="Configuration file not found"):
        load_mallet_configuration([str(tmp_path / "absent.yml")])


def test_non_mapping_file_is_rejected(tmp_path):
    path = tmp_path / "list.yml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="mapping"):
        load_mallet_configuration([str(path)])


def test_overrides_apply_after_files(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("train:\n  topics: 10\ninstances:\n  preserve_case: true\n", encoding="utf-8")
    configuration = load_mallet_configuration(
        [str(path)],
        ["train.topics=25", "instances.preserve_case=false", 'instances.stopwords=["der"]'],
    )
    assert configuration.train.topics == 25
    assert configuration.instances.preserve_case is False
    assert configuration.instances.stopwords == ["der"]


def test_defaults_without_files():
    configuration = load_mallet_configuration()
    assert configuration.instances.p_attribute == "word"
    assert configuration.instances.stopwords_language == "german"


def test_invalid_values_raise_validation_error():
    with pytest.raises(ValidationError):
        load_mallet_configuration(None, ["train.topics=1"])
