"""
Topic-word weights exchanged through MALLET's tab-separated weights file.

The word weights matrix gets large with many topics and a big vocabulary. Writing it to
disk with ``printTopicWordWeights`` and reading it back as a sparse matrix avoids
marshalling a dense ``double[][]`` across the virtual machine boundary. Values in the
file are smoothed (beta is added) but not normalized, matching
``getTopicWords(false, true)``.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
from scipy import sparse

from .matrices import LabeledSparseMatrix
from .paths import require_file, resolve_destination
from .runtime import MalletRuntime, get_runtime


def mallet_save_word_weights(
    model: Any,
    destfile: Optional[Union[str, Path]] = None,
    *,
    runtime: Optional[MalletRuntime] = None,
) -> Path:
    """
    Write the topic-word weights of a ``ParallelTopicModel`` to a file.

    :param model: Java ``cc.mallet.topics.ParallelTopicModel``.
    :type model: Any
    :param destfile: Destination; a new temporary file when omitted.
    :type destfile: str or Path or None
    :param runtime: Runtime to use.
    :type runtime: MalletRuntime or None
    :return: Path of the weights file.
    :rtype: Path
    """
    active = runtime or get_runtime()
    destination = resolve_destination(destfile, suffix=".tsv")
    with active.print_writer(destination) as writer:
        model.printTopicWordWeights(writer)
    return destination


def mallet_load_word_weights(filename: Union[str, Path]) -> LabeledSparseMatrix:
    """
    Read a weights file into a words by topics sparse matrix.

    Rows are the distinct words in sorted order, columns are named ``"1"`` to
    ``str(max_topic + 1)`` after the one-based topic number.

    :param filename: File written by :func:`mallet_save_word_weights`.
    :type filename: str or Path
    :return: Sparse word weights.
    :rtype: LabeledSparseMatrix
    :raises FileNotFoundError: If the file does not exist.
    :raises ValueError: If a line does not hold topic, word and weight.
    """
    source = require_file(filename, label="Word weights file")
    topic_ids: List[int] = []
    words: List[str] = []
    weights: List[float] = []
    with source.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.reader(handle, delimiter="\t", quoting=csv.QUOTE_NONE)
        for line_number, row in enumerate(reader, start=1):
            if not row:
                continue
            if len(row) != 3:
                raise ValueError(
                    f"Expected topic, word and weight on line {line_number} of {source}"
                )
            try:
                topic_ids.append(int(row[0]))
                weights.append(float(row[2]))
            except ValueError as exc:
                raise ValueError(
                    f"Invalid topic or weight on line {line_number} of {source}"
                ) from exc
            words.append(row[1])
    if not topic_ids:
        raise ValueError(f"Word weights file is empty: {source}")

    vocabulary = sorted(set(words))
    word_index: Dict[str, int] = {word: index for index, word in enumerate(vocabulary)}
    topic_count = max(topic_ids) + 1
    matrix = sparse.coo_matrix(
        (
            np.asarray(weights, dtype=float),
            (
                np.fromiter((word_index[word] for word in words), dtype=np.int64, count=len(words)),
                np.asarray(topic_ids, dtype=np.int64),
            ),
        ),
        shape=(len(vocabulary), topic_count),
    ).tocsr()
    return LabeledSparseMatrix(
        matrix=matrix,
        row_names=vocabulary,
        column_names=[str(topic + 1) for topic in range(topic_count)],
    )
