"""
Stopword lists and stoplist files for MALLET's stopword removal pipe.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Union

from .constants import DEFAULT_STOPWORDS_LANGUAGE
from .models import InstanceListConfig


def _load_nltk_stopwords(language: str) -> List[str]:
    try:
        import nltk
        from nltk.corpus import stopwords
    except ImportError as import_error:
        raise ValueError(
            "Default stopword lists require an optional dependency. "
            'Install it with pip install "malletbridge[stopwords]".'
        ) from import_error
    try:
        nltk.data.find("corpora/stopwords")
    except LookupError:
        nltk.download("stopwords", quiet=True)
    try:
        return list(stopwords.words(language))
    except OSError as exc:
        raise ValueError(f"No stopword list available for language {language!r}") from exc


def default_stopwords(language: str = DEFAULT_STOPWORDS_LANGUAGE) -> List[str]:
    """
    Return the default stopword list for a language.

    :param language: Language name as used by the NLTK stopwords corpus.
    :type language: str
    :return: Stopwords.
    :rtype: list[str]
    :raises ValueError: If NLTK is missing or has no list for the language.
    """
    return _load_nltk_stopwords(language)


def resolve_stopwords(config: InstanceListConfig) -> List[str]:
    """
    Resolve the terms to drop for an instance list configuration.

    :param config: Instance list configuration.
    :type config: InstanceListConfig
    :return: Explicit stopwords when configured, otherwise the language default.
    :rtype: list[str]
    """
    if config.stopwords is not None:
        return list(config.stopwords)
    return default_stopwords(config.stopwords_language)


def write_stoplist(terms: Iterable[str], path: Union[str, Path]) -> Path:
    """
    Write terms to a newline-separated stoplist file.

    :param terms: Terms to drop.
    :type terms: Iterable[str]
    :param path: Destination path.
    :type path: str or Path
    :return: Written path.
    :rtype: Path
    """
    destination = Path(path)
    destination.write_text("\n".join(terms), encoding="utf-8")
    return destination
