"""
Labeled dense and sparse matrices for topic model results.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Union

import numpy as np
from scipy import sparse


def _names_array(names: List[str]) -> np.ndarray:
    return np.array([str(name) for name in names], dtype=str)


def _check_names(shape: Tuple[int, int], row_names: List[str], column_names: List[str]) -> None:
    if len(row_names) != shape[0]:
        raise ValueError(f"Expected {shape[0]} row names, got {len(row_names)}")
    if len(column_names) != shape[1]:
        raise ValueError(f"Expected {shape[1]} column names, got {len(column_names)}")


@dataclass
class LabeledSparseMatrix:
    """
    Sparse matrix with row and column names.

    :ivar matrix: Compressed sparse row matrix.
    :vartype matrix: scipy.sparse.csr_matrix
    :ivar row_names: Names of the rows.
    :vartype row_names: list[str]
    :ivar column_names: Names of the columns.
    :vartype column_names: list[str]
    """

    matrix: sparse.csr_matrix
    row_names: List[str]
    column_names: List[str]

    def __post_init__(self) -> None:
        self.matrix = sparse.csr_matrix(self.matrix)
        _check_names(self.matrix.shape, self.row_names, self.column_names)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.matrix.shape

    @property
    def nnz(self) -> int:
        return int(self.matrix.nnz)

    def to_dense(self) -> "LabeledMatrix":
        return LabeledMatrix(
            values=self.matrix.toarray(),
            row_names=list(self.row_names),
            column_names=list(self.column_names),
        )

    def transpose(self) -> "LabeledSparseMatrix":
        return LabeledSparseMatrix(
            matrix=self.matrix.transpose().tocsr(),
            row_names=list(self.column_names),
            column_names=list(self.row_names),
        )

    def save(self, path: Union[str, Path]) -> Path:
        """
        Write the matrix and its names to a ``.npz`` archive.

        :param path: Destination file.
        :type path: str or Path
        :return: Written path.
        :rtype: Path
        """
        destination = Path(path)
        with destination.open("wb") as handle:
            np.savez_compressed(
                handle,
                data=self.matrix.data,
                indices=self.matrix.indices,
                indptr=self.matrix.indptr,
                shape=np.array(self.matrix.shape),
                row_names=_names_array(self.row_names),
                column_names=_names_array(self.column_names),
            )
        return destination

    @classmethod
    def load(cls, path: Union[str, Path]) -> "LabeledSparseMatrix":
        """
        Read a matrix written by :meth:`save`.

        :param path: Archive path.
        :type path: str or Path
        :return: Loaded matrix.
        :rtype: LabeledSparseMatrix
        :raises FileNotFoundError: If the archive does not exist.
        """
        source = Path(path)
        if not source.is_file():
            raise FileNotFoundError(f"Matrix archive not found: {source}")
        with np.load(source, allow_pickle=False) as archive:
            shape = tuple(int(value) for value in archive["shape"])
            matrix = sparse.csr_matrix(
                (archive["data"], archive["indices"], archive["indptr"]), shape=shape
            )
            return cls(
                matrix=matrix,
                row_names=[str(name) for name in archive["row_names"]],
                column_names=[str(name) for name in archive["column_names"]],
            )


@dataclass
class LabeledMatrix:
    """
    Dense matrix with row and column names.

    :ivar values: Two-dimensional array.
    :vartype values: numpy.ndarray
    :ivar row_names: Names of the rows.
    :vartype row_names: list[str]
    :ivar column_names: Names of the columns.
    :vartype column_names: list[str]
    """

    values: np.ndarray
    row_names: List[str]
    column_names: List[str]

    def __post_init__(self) -> None:
        self.values = np.atleast_2d(np.asarray(self.values))
        _check_names(self.values.shape, self.row_names, self.column_names)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    def row(self, name: str) -> np.ndarray:
        return self.values[self.row_names.index(name)]

    def to_sparse(self) -> LabeledSparseMatrix:
        return LabeledSparseMatrix(
            matrix=sparse.csr_matrix(self.values),
            row_names=list(self.row_names),
            column_names=list(self.column_names),
        )

    def save(self, path: Union[str, Path]) -> Path:
        destination = Path(path)
        with destination.open("wb") as handle:
            np.savez_compressed(
                handle,
                values=self.values,
                row_names=_names_array(self.row_names),
                column_names=_names_array(self.column_names),
            )
        return destination

    @classmethod
    def load(cls, path: Union[str, Path]) -> "LabeledMatrix":
        source = Path(path)
        if not source.is_file():
            raise FileNotFoundError(f"Matrix archive not found: {source}")
        with np.load(source, allow_pickle=False) as archive:
            return cls(
                values=archive["values"],
                row_names=[str(name) for name in archive["row_names"]],
                column_names=[str(name) for name in archive["column_names"]],
            )
