"""
Sparse topic-word count matrices from MALLET's XML topic report.

``topicXMLReport`` lists only the top words of every topic, so the result can be held as
a sparse matrix even for large vocabularies. Its values are raw counts: neither
normalized, smoothed nor logarithmized.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
from scipy import sparse

from .lda import alphabet_terms
from .matrices import LabeledSparseMatrix
from .paths import require_file, resolve_destination
from .runtime import MalletRuntime, get_runtime

_WORD_ELEMENT = re.compile(r"(<word\b[^>]*>)(.*?)(</word>)", re.DOTALL)
_BARE_AMPERSAND = re.compile(r"&(?!(?:amp|lt|gt|quot|apos|#\d+|#x[0-9a-fA-F]+);)")


@dataclass(frozen=True)
class TopicWordCount:
    """
    One word entry of a topic in the XML report.

    :ivar topic_id: Zero-based topic identifier.
    :ivar token: Word.
    :ivar count: Number of tokens assigned to the topic.
    :ivar rank: Rank of the word within the topic, if reported.
    """

    topic_id: int
    token: str
    count: int
    rank: Optional[int]


def _escape_word_text(match: "re.Match[str]") -> str:
    text = _BARE_AMPERSAND.sub("&amp;", match.group(2)).replace("<", "&lt;")
    return f"{match.group(1)}{text}{match.group(3)}"


def _parse_int(raw: Optional[str], *, label: str) -> int:
    if raw is None:
        raise ValueError(f"Topic report entry is missing the {label} attribute")
    try:
        return int(float(raw))
    except ValueError as exc:
        raise ValueError(f"Invalid {label} attribute in topic report: {raw!r}") from exc


def parse_topic_xml_report(path: Union[str, Path]) -> List[TopicWordCount]:
    """
    Parse the ``/topicModel/topic/word`` entries of an XML topic report.

    MALLET writes words without escaping XML special characters, so stray ampersands and
    angle brackets inside word elements are escaped before parsing.

    :param path: Report file.
    :type path: str or Path
    :return: Word entries in document order.
    :rtype: list[TopicWordCount]
    :raises FileNotFoundError: If the report does not exist.
    :raises ValueError: If the report is not well-formed.
    """
    source = require_file(path, label="Topic report")
    raw = source.read_text(encoding="utf-8")
    cleaned = _WORD_ELEMENT.sub(_escape_word_text, raw)
    try:
        root = ElementTree.fromstring(cleaned)
    except ElementTree.ParseError as exc:
        raise ValueError(f"Topic report is not well-formed XML: {exc}") from exc
    if root.tag != "topicModel":
        raise ValueError(f"Topic report root must be topicModel, got {root.tag}")

    entries: List[TopicWordCount] = []
    for topic_node in root.findall("topic"):
        topic_id = _parse_int(topic_node.get("id"), label="id")
        for word_node in topic_node.findall("word"):
            rank_raw = word_node.get("rank")
            entries.append(
                TopicWordCount(
                    topic_id=topic_id,
                    token=word_node.text or "",
                    count=_parse_int(word_node.get("count"), label="count"),
                    rank=_parse_int(rank_raw, label="rank") if rank_raw is not None else None,
                )
            )
    return entries


def build_sparse_word_counts(
    entries: Sequence[TopicWordCount],
    *,
    alphabet: List[str],
    num_topics: int,
) -> LabeledSparseMatrix:
    """
    Arrange report entries in a topics by alphabet sparse matrix.

    :param entries: Parsed report entries.
    :type entries: Sequence[TopicWordCount]
    :param alphabet: Model alphabet in index order.
    :type alphabet: list[str]
    :param num_topics: Number of topics of the model.
    :type num_topics: int
    :return: Sparse counts with rows ``"1".."K"`` and the alphabet as columns.
    :rtype: LabeledSparseMatrix
    :raises ValueError: If a token is missing from the alphabet or a topic is out of range.
    """
    token_index: Dict[str, int] = {}
    for index, token in enumerate(alphabet):
        token_index.setdefault(token, index)

    rows: List[int] = []
    columns: List[int] = []
    counts: List[int] = []
    for entry in entries:
        if not 0 <= entry.topic_id < num_topics:
            raise ValueError(f"Topic id {entry.topic_id} outside of 0..{num_topics - 1}")
        column = token_index.get(entry.token)
        if column is None:
            raise ValueError(f"Token {entry.token!r} from topic report is not in the alphabet")
        rows.append(entry.topic_id)
        columns.append(column)
        counts.append(entry.count)

    order = np.lexsort((np.asarray(columns, dtype=np.int64), np.asarray(rows, dtype=np.int64)))
    matrix = sparse.coo_matrix(
        (
            np.asarray(counts, dtype=np.int64)[order],
            (
                np.asarray(rows, dtype=np.int64)[order],
                np.asarray(columns, dtype=np.int64)[order],
            ),
        ),
        shape=(num_topics, len(alphabet)),
    ).tocsr()
    return LabeledSparseMatrix(
        matrix=matrix,
        row_names=[str(topic + 1) for topic in range(num_topics)],
        column_names=list(alphabet),
    )


def mallet_get_sparse_word_weights_matrix(
    model: Any,
    top_words: int = 50,
    destfile: Optional[Union[str, Path]] = None,
    *,
    runtime: Optional[MalletRuntime] = None,
) -> LabeledSparseMatrix:
    """
    Get the sparse beta matrix of a ``ParallelTopicModel`` from its XML topic report.

    :param model: Java ``cc.mallet.topics.ParallelTopicModel``.
    :type model: Any
    :param top_words: Number of top words reported for each topic.
    :type top_words: int
    :param destfile: Where the report is written; a new temporary file when omitted.
    :type destfile: str or Path or None
    :param runtime: Runtime to use.
    :type runtime: MalletRuntime or None
    :return: Topics by alphabet sparse count matrix.
    :rtype: LabeledSparseMatrix
    """
    if top_words < 1:
        raise ValueError("top_words must be at least 1")
    active = runtime or get_runtime()
    destination = resolve_destination(destfile, suffix=".xml")
    with active.print_writer(destination) as writer:
        model.topicXMLReport(writer, int(top_words))
    entries = parse_topic_xml_report(destination)
    return build_sparse_word_counts(
        entries,
        alphabet=alphabet_terms(model.getAlphabet()),
        num_topics=int(model.getNumTopics()),
    )
