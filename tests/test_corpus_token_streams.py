"""
Token stream extraction and phrase concatenation tests.
"""

from __future__ import annotations

import pytest

from malletbridge.corpus import concatenate_phrases, get_token_stream
from malletbridge.models import Phrases


def test_token_streams_follow_partition_order(bundle):
    streams = get_token_stream(bundle, p_attribute="word", collapse="\n")
    assert streams == [
        "Die\nDeutsche\nBank\nund\ndie\nSteuer",
        "Der\nHaushalt\nder\nDeutsche\nBank",
    ]


def test_token_streams_use_requested_attribute_and_separator(bundle):
    streams = get_token_stream(bundle, p_attribute="lemma", collapse=" ")
    assert streams[1] == "der Haushalt der deutsch Bank"


def test_missing_attribute_names_known_attributes(bundle):
    with pytest.raises(KeyError) as excinfo:
        get_token_stream(bundle, p_attribute="pos")
    assert "lemma, word" in str(excinfo.value)


def test_phrases_are_concatenated_before_collapsing(bundle):
    phrases = Phrases(phrases=[["Deutsche", "Bank"]])
    streams = get_token_stream(bundle, p_attribute="word", phrases=phrases, collapse=" ")
    assert streams == [
        "Die Deutsche_Bank und die Steuer",
        "Der Haushalt der Deutsche_Bank",
    ]


def test_longest_phrase_wins_at_a_position():
    """
    Overlapping phrases starting at the same token prefer the longest match.
    """
    phrases = Phrases(phrases=[["New", "York"], ["New", "York", "City"]])
    tokens = ["in", "New", "York", "City", "and", "New", "York"]
    assert concatenate_phrases(tokens, phrases) == ["in", "New_York_City", "and", "New_York"]


def test_matched_tokens_are_consumed():
    phrases = Phrases(phrases=[["a", "b"], ["b", "c"]], separator="+")
    assert concatenate_phrases(["a", "b", "c"], phrases) == ["a+b", "c"]


def test_partial_phrase_at_end_is_left_alone():
    phrases = Phrases(phrases=[["Deutsche", "Bank"]])
    assert concatenate_phrases(["die", "Deutsche"], phrases) == ["die", "Deutsche"]


def test_empty_phrases_return_tokens_unchanged():
    assert concatenate_phrases(["a", "b"], Phrases()) == ["a", "b"]
