"""
Document-topic proportions from MALLET's ``--output-doc-topics`` file.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

from .matrices import LabeledMatrix
from .paths import require_file

DOC_TOPICS_LAYOUTS = ("dense", "pairs")


def _split_fields(line: str) -> List[str]:
    fields = line.rstrip("\r\n").split("\t")
    while fields and fields[-1] == "":
        fields.pop()
    if len(fields) < 3:
        fields = line.split()
    return fields


def _read_rows(source: Path) -> List[Tuple[str, List[str]]]:
    rows: List[Tuple[str, List[str]]] = []
    with source.open("r", encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip() or line.startswith("#"):
                continue
            fields = _split_fields(line)
            if len(fields) < 2:
                raise ValueError(f"Expected document index and name on line {line_number}")
            rows.append((fields[1], fields[2:]))
    return rows


def load_doc_topics(
    filename: Union[str, Path],
    *,
    layout: str = "dense",
    num_topics: Optional[int] = None,
) -> LabeledMatrix:
    """
    Read a doc-topics file into a documents by topics matrix.

    The dense layout holds one proportion per topic after the document index and name.
    The pairs layout, written when a threshold or maximum is set, holds alternating topic
    numbers and proportions.

    :param filename: File written by ``mallet train-topics --output-doc-topics``.
    :type filename: str or Path
    :param layout: Either dense or pairs.
    :type layout: str
    :param num_topics: Number of topics; inferred from the file when omitted.
    :type num_topics: int or None
    :return: Proportions with document names as rows and ``"1".."K"`` as columns.
    :rtype: LabeledMatrix
    :raises FileNotFoundError: If the file does not exist.
    :raises ValueError: If the layout is unknown or rows are inconsistent.
    """
    if layout not in DOC_TOPICS_LAYOUTS:
        raise ValueError(f"layout must be one of {', '.join(DOC_TOPICS_LAYOUTS)}")
    source = require_file(filename, label="Doc-topics file")
    rows = _read_rows(source)
    names = [name for name, _ in rows]

    if layout == "dense":
        widths = {len(values) for _, values in rows}
        if len(widths) > 1:
            raise ValueError(f"Doc-topics rows have differing topic counts: {sorted(widths)}")
        width = widths.pop() if widths else (num_topics or 0)
        if num_topics is not None and width != num_topics:
            raise ValueError(f"Expected {num_topics} topics per row, found {width}")
        values = np.array(
            [[float(value) for value in row_values] for _, row_values in rows], dtype=float
        ).reshape(len(rows), width)
    else:
        parsed: List[List[Tuple[int, float]]] = []
        for name, row_values in rows:
            if len(row_values) % 2 != 0:
                raise ValueError(f"Unpaired topic proportion for document {name!r}")
            parsed.append(
                [
                    (int(row_values[index]), float(row_values[index + 1]))
                    for index in range(0, len(row_values), 2)
                ]
            )
        highest = max((topic for pairs in parsed for topic, _ in pairs), default=-1)
        width = num_topics if num_topics is not None else highest + 1
        if highest >= width:
            raise ValueError(f"Topic {highest} outside of 0..{width - 1}")
        values = np.zeros((len(rows), width), dtype=float)
        for row_index, pairs in enumerate(parsed):
            for topic, proportion in pairs:
                values[row_index, topic] = proportion

    return LabeledMatrix(
        values=values,
        row_names=names,
        column_names=[str(topic + 1) for topic in range(width)],
    )
