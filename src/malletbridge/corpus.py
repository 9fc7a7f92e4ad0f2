"""
Token stream extraction from partition bundles.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from .models import PartitionBundle, Phrases


def _phrase_index(phrases: Phrases) -> Dict[str, List[Tuple[str, ...]]]:
    index: Dict[str, List[Tuple[str, ...]]] = {}
    for phrase in phrases.phrases:
        index.setdefault(phrase[0], []).append(tuple(phrase))
    for candidates in index.values():
        candidates.sort(key=len, reverse=True)
    return index


def concatenate_phrases(tokens: Sequence[str], phrases: Phrases) -> List[str]:
    """
    Replace phrase occurrences in a token stream with concatenated tokens.

    Matching runs left to right; at each position the longest matching phrase wins
    and matched tokens are consumed.

    :param tokens: Token stream.
    :type tokens: Sequence[str]
    :param phrases: Phrases to concatenate.
    :type phrases: Phrases
    :return: Token stream with phrases joined by the phrase separator.
    :rtype: list[str]
    """
    index = _phrase_index(phrases)
    if not index:
        return list(tokens)
    output: List[str] = []
    position = 0
    total = len(tokens)
    while position < total:
        token = tokens[position]
        matched: Optional[Tuple[str, ...]] = None
        for candidate in index.get(token, []):
            end = position + len(candidate)
            if end <= total and tuple(tokens[position:end]) == candidate:
                matched = candidate
                break
        if matched is None:
            output.append(token)
            position += 1
        else:
            output.append(phrases.separator.join(matched))
            position += len(matched)
    return output


def get_token_stream(
    bundle: PartitionBundle,
    *,
    p_attribute: str = "word",
    phrases: Optional[Phrases] = None,
    collapse: str = "\n",
) -> List[str]:
    """
    Return one collapsed token string per partition.

    :param bundle: Partition bundle.
    :type bundle: PartitionBundle
    :param p_attribute: Positional attribute to read tokens from.
    :type p_attribute: str
    :param phrases: Optional phrases to concatenate before collapsing.
    :type phrases: Phrases or None
    :param collapse: Separator placed between tokens.
    :type collapse: str
    :return: Token strings in partition order.
    :rtype: list[str]
    :raises KeyError: If a partition lacks the positional attribute.
    """
    streams: List[str] = []
    for partition in bundle.partitions:
        tokens = partition.tokens(p_attribute)
        if phrases is not None:
            tokens = concatenate_phrases(tokens, phrases)
        streams.append(collapse.join(tokens))
    return streams
