"""
Instance list construction and persistence tests.
"""

from __future__ import annotations

import pytest

from fakes import FakeInstanceList
from malletbridge.instances import (
    instance_list_load,
    instance_list_store,
    make_instance_list,
    make_instance_list_from_config,
    write_import_file,
)
from malletbridge.models import InstanceListConfig, PartitionBundle, Phrases


def test_instance_list_has_one_instance_per_partition(bundle, fake_runtime):
    instance_list = make_instance_list(
        bundle, terms_to_drop=["und"], runtime=fake_runtime, verbose=False
    )
    assert isinstance(instance_list, FakeInstanceList)
    assert [instance.name for instance in instance_list.instances] == ["speech_1", "speech_2"]
    assert instance_list.instances[0].data == "Die\nDeutsche\nBank\nund\ndie\nSteuer"
    assert instance_list.instances[0].target is None


def test_import_pipe_preserves_case_by_default(bundle, fake_runtime):
    instance_list = make_instance_list(
        bundle, terms_to_drop=["und", "der"], runtime=fake_runtime, verbose=False
    )
    label, pipes = instance_list.pipe
    assert label == "SerialPipes"
    assert [pipe[0] for pipe in pipes] == [
        "CharSequence2TokenSequence",
        "TokenSequenceRemoveStopwords",
        "TokenSequence2FeatureSequence",
    ]
    assert pipes[0][1] == ("Pattern", "\\p{L}+")
    assert pipes[1][1:] == (["und", "der"], "UTF-8", False, False, False)


def test_import_pipe_lowercases_when_requested(bundle, fake_runtime):
    instance_list = make_instance_list(
        bundle,
        terms_to_drop=[],
        preserve_case=False,
        token_regexp="[A-Za-z]+",
        runtime=fake_runtime,
        verbose=False,
    )
    pipes = instance_list.pipe[1]
    assert pipes[0][1] == ("Pattern", "[A-Za-z]+")
    assert pipes[1] == ("TokenSequenceLowercase",)


def test_default_stopwords_are_german(bundle, fake_runtime, monkeypatch):
    import malletbridge.instances as instances_module

    monkeypatch.setattr(instances_module, "default_stopwords", lambda: ["die", "der"])
    instance_list = make_instance_list(bundle, runtime=fake_runtime, verbose=False)
    assert instance_list.pipe[1][1][1] == ["die", "der"]


def test_phrases_and_attribute_are_applied(bundle, fake_runtime):
    instance_list = make_instance_list(
        bundle,
        p_attribute="lemma",
        phrases=Phrases(phrases=[["deutsch", "Bank"]]),
        terms_to_drop=[],
        runtime=fake_runtime,
        verbose=False,
    )
    assert instance_list.instances[1].data == "der\nHaushalt\nder\ndeutsch_Bank"


def test_progress_is_reported(bundle, fake_runtime, capsys):
    make_instance_list(bundle, terms_to_drop=[], runtime=fake_runtime)
    err = capsys.readouterr().err
    assert "[mallet] preparing mallet object" in err
    assert "instance list documents=2" in err


def test_instance_list_from_config(bundle, fake_runtime):
    config = InstanceListConfig(
        p_attribute="lemma", stopwords=["der"], preserve_case=False, verbose=False
    )
    instance_list = make_instance_list_from_config(bundle, config, runtime=fake_runtime)
    pipes = instance_list.pipe[1]
    assert pipes[1] == ("TokenSequenceLowercase",)
    assert pipes[2][1] == ["der"]
    assert instance_list.instances[0].data.startswith("die\ndeutsch")


def test_store_and_load_round_trip(bundle, fake_runtime, tmp_path):
    instance_list = make_instance_list(
        bundle, terms_to_drop=[], runtime=fake_runtime, verbose=False
    )
    stored = instance_list_store(instance_list, tmp_path / "docs.mallet", runtime=fake_runtime)
    loaded = instance_list_load(stored, runtime=fake_runtime)
    assert [instance.name for instance in loaded.instances] == ["speech_1", "speech_2"]


def test_store_to_temporary_file(bundle, fake_runtime):
    instance_list = make_instance_list(
        bundle, terms_to_drop=[], runtime=fake_runtime, verbose=False
    )
    stored = instance_list_store(instance_list, runtime=fake_runtime)
    try:
        assert stored.suffix == ".mallet"
        assert stored.is_file()
    finally:
        stored.unlink()


def test_load_missing_instance_list(tmp_path, fake_runtime):
    with pytest.raises(FileNotFoundError, match="Instance list not found"):
        instance_list_load(tmp_path / "absent.mallet", runtime=fake_runtime)


def test_import_file_layout(tmp_path):
    bundle = PartitionBundle.model_validate(
        {
            "partitions": [
                {"name": "a\tb", "p_attributes": {"word": ["x", "y\tz"]}},
                {"name": "c", "p_attributes": {"word": ["New", "York"]}},
            ]
        }
    )
    path = write_import_file(
        bundle, tmp_path / "docs.tsv", phrases=Phrases(phrases=[["New", "York"]])
    )
    assert path.read_text(encoding="utf-8") == "a b\tX\tx y z\nc\tX\tNew_York\n"
