"""
Conversion of MALLET topic models into LDA (Gibbs sampling) result objects.
"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

import numpy as np

from .constants import PROGRESS_PREFIX
from .runtime import java_matrix_to_numpy, java_text


@dataclass
class LdaGibbsModel:
    """
    Result of LDA estimated by Gibbs sampling.

    :ivar dim: Number of documents and number of terms.
    :vartype dim: tuple[int, int]
    :ivar k: Number of topics.
    :vartype k: int
    :ivar terms: Vocabulary in alphabet order.
    :vartype terms: list[str]
    :ivar documents: Document names in instance order.
    :vartype documents: list[str]
    :ivar beta: Logarithmized topic-word distributions, topics by terms.
    :vartype beta: numpy.ndarray
    :ivar gamma: Posterior topic distributions, documents by topics.
    :vartype gamma: numpy.ndarray
    :ivar iter: Number of sampling iterations.
    :vartype iter: int
    """

    dim: Tuple[int, int]
    k: int
    terms: List[str]
    documents: List[str]
    beta: np.ndarray
    gamma: np.ndarray
    iter: int

    def __post_init__(self) -> None:
        self.beta = np.asarray(self.beta, dtype=float)
        self.gamma = np.asarray(self.gamma, dtype=float)
        documents, terms = self.dim
        if self.beta.shape != (self.k, terms):
            raise ValueError(
                f"beta must have shape ({self.k}, {terms}), got {self.beta.shape}"
            )
        if self.gamma.shape != (documents, self.k):
            raise ValueError(
                f"gamma must have shape ({documents}, {self.k}), got {self.gamma.shape}"
            )

    def top_terms(self, topic: int, n: int = 10) -> List[str]:
        """
        Return the most probable terms of a topic.

        :param topic: Zero-based topic index.
        :type topic: int
        :param n: Number of terms.
        :type n: int
        :return: Terms ordered by decreasing weight.
        :rtype: list[str]
        """
        order = np.argsort(-self.beta[topic], kind="stable")[:n]
        return [self.terms[index] for index in order]

    def save(self, path: Union[str, Path]) -> Path:
        destination = Path(path)
        with destination.open("wb") as handle:
            np.savez_compressed(
                handle,
                dim=np.array(self.dim),
                k=np.array(self.k),
                terms=np.array(self.terms, dtype=str),
                documents=np.array(self.documents, dtype=str),
                beta=self.beta,
                gamma=self.gamma,
                iter=np.array(self.iter),
            )
        return destination

    @classmethod
    def load(cls, path: Union[str, Path]) -> "LdaGibbsModel":
        source = Path(path)
        if not source.is_file():
            raise FileNotFoundError(f"LDA archive not found: {source}")
        with np.load(source, allow_pickle=False) as archive:
            dim = tuple(int(value) for value in archive["dim"])
            return cls(
                dim=(dim[0], dim[1]),
                k=int(archive["k"]),
                terms=[str(term) for term in archive["terms"]],
                documents=[str(document) for document in archive["documents"]],
                beta=archive["beta"],
                gamma=archive["gamma"],
                iter=int(archive["iter"]),
            )


def _progress(message: str, verbose: bool) -> None:
    if verbose:
        print(f"{PROGRESS_PREFIX} {message}", flush=True, file=sys.stderr)


def _class_name(model: Any) -> str:
    try:
        return str(model.getClass().getName())
    except AttributeError:
        return type(model).__name__


def alphabet_terms(alphabet: Any) -> List[str]:
    """
    Return the entries of a MALLET ``Alphabet`` in index order.

    :param alphabet: Java ``cc.mallet.types.Alphabet``.
    :type alphabet: Any
    :return: Alphabet entries.
    :rtype: list[str]
    """
    size = int(alphabet.size())
    terms = str(alphabet.toString()).split("\n")
    while terms and terms[-1] == "" and len(terms) > size:
        terms.pop()
    if len(terms) != size:
        # Entries containing newlines cannot be recovered from the string form.
        terms = [java_text(alphabet.lookupObject(index)) for index in range(size)]
    return terms


def _document_names(model: Any, documents: int, verbose: bool) -> List[str]:
    if documents <= 50:
        log_interval = 10
    elif documents <= 1000:
        log_interval = 100
    else:
        log_interval = 1000
    start_time = time.perf_counter()
    names: List[str] = []
    for index in range(documents):
        names.append(java_text(model.data.get(index).instance.getName()))
        completed = index + 1
        if verbose and (completed % log_interval == 0 or completed == documents):
            elapsed = time.perf_counter() - start_time
            print(
                f"{PROGRESS_PREFIX} document names {completed}/{documents} "
                f"elapsed={elapsed:.1f}s",
                flush=True,
                file=sys.stderr,
            )
    return names


def as_lda(
    model: Any,
    *,
    verbose: bool = True,
    beta: Optional[np.ndarray] = None,
    gamma: Optional[np.ndarray] = None,
) -> LdaGibbsModel:
    """
    Turn an estimated MALLET ``ParallelTopicModel`` into an :class:`LdaGibbsModel`.

    The gamma matrix holds normalized and smoothed document-topic proportions; beta is the
    logarithm of the normalized and smoothed topic-word weights. Either matrix can be
    supplied by the caller to skip the corresponding transfer from the Java side.

    :param model: Java ``cc.mallet.topics.ParallelTopicModel``.
    :type model: Any
    :param verbose: Whether to report progress on standard error.
    :type verbose: bool
    :param beta: Optional precomputed beta matrix, topics by terms.
    :type beta: numpy.ndarray or None
    :param gamma: Optional precomputed gamma matrix, documents by topics.
    :type gamma: numpy.ndarray or None
    :return: LDA result object.
    :rtype: LdaGibbsModel
    :raises ValueError: If the model is not a ParallelTopicModel.
    """
    if "ParallelTopicModel" not in _class_name(model):
        raise ValueError("incoming object needs to be class ParallelTopicModel")

    _progress("getting number of documents and number of terms", verbose)
    alphabet = model.getAlphabet()
    documents = int(model.data.size())
    dimensions = (documents, int(alphabet.size()))

    _progress("getting alphabet", verbose)
    terms = alphabet_terms(alphabet)

    _progress("getting document names", verbose)
    document_names = _document_names(model, documents, verbose)

    if gamma is None:
        _progress("getting topic probabilities (gamma matrix)", verbose)
        gamma = java_matrix_to_numpy(model.getDocumentTopics(True, True))
        if gamma.size == 0:
            gamma = np.zeros((documents, int(model.getNumTopics())))

    if beta is None:
        _progress("getting topic word weights (beta matrix)", verbose)
        beta = np.log(java_matrix_to_numpy(model.getTopicWords(True, True)))

    return LdaGibbsModel(
        dim=dimensions,
        k=int(model.getNumTopics()),
        terms=terms,
        documents=document_names,
        beta=beta,
        gamma=gamma,
        iter=int(model.numIterations),
    )
