"""
Composition of malletbridge configuration from YAML files and command-line overrides.

Files are merged in order, nested sections key by key. Overrides such as
``train.topics=25`` or ``instances.stopwords=["der", "die"]`` are applied last.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import yaml

from .models import MalletConfiguration

Override = Tuple[Tuple[str, ...], object]

_KEYWORDS: Dict[str, object] = {"true": True, "false": False, "null": None, "none": None}


def _coerce_scalar(text: str) -> object:
    if text.lower() in _KEYWORDS:
        return _KEYWORDS[text.lower()]
    for number_type in (int, float):
        try:
            return number_type(text)
        except ValueError:
            continue
    return text


def parse_override_value(raw: str) -> object:
    """
    Turn the value part of an override into a Python value.

    JSON lists and objects are decoded; booleans, null and numbers are recognised;
    anything else stays a string.

    :param raw: Text after the equals sign.
    :type raw: str
    :return: Parsed value.
    :rtype: object
    """
    text = str(raw).strip()
    if text[:1] in ("[", "{"):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return raw
    if not text:
        return ""
    return _coerce_scalar(text)


def parse_overrides(pairs: Optional[Iterable[str]]) -> List[Override]:
    """
    Split ``section.key=value`` pairs into key paths and parsed values.

    :param pairs: Override pairs in the order given.
    :type pairs: Iterable[str] or None
    :return: Key paths with their values.
    :rtype: list[tuple[tuple[str, ...], object]]
    :raises ValueError: If a pair has no equals sign or an empty key.
    """
    overrides: List[Override] = []
    for pair in pairs or []:
        key, separator, raw = pair.partition("=")
        if not separator:
            raise ValueError(f"Override must look like section.key=value (got {pair!r})")
        path = tuple(part.strip() for part in key.split("."))
        if not all(path):
            raise ValueError(f"Override key has an empty part: {key!r}")
        overrides.append((path, parse_override_value(raw)))
    return overrides


def apply_overrides(data: Mapping[str, object], overrides: Iterable[Override]) -> Dict[str, object]:
    """
    Return a copy of ``data`` with each override set at its key path.

    Missing sections are created.

    :param data: Composed configuration mapping.
    :type data: Mapping[str, object]
    :param overrides: Parsed overrides.
    :type overrides: Iterable[tuple[tuple[str, ...], object]]
    :return: Updated mapping.
    :rtype: dict[str, object]
    :raises ValueError: If a key path runs through a value that is not a section.
    """
    updated: Dict[str, object] = copy.deepcopy(dict(data))
    for path, value in overrides:
        section = updated
        for depth, part in enumerate(path[:-1]):
            child = section.setdefault(part, {})
            if not isinstance(child, dict):
                walked = ".".join(path[: depth + 1])
                raise ValueError(f"Cannot override {'.'.join(path)}: {walked} is not a section")
            section = child
        section[path[-1]] = value
    return updated


def _merge_sections(base: Dict[str, object], overlay: Mapping[str, object]) -> Dict[str, object]:
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = _merge_sections(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def read_configuration_files(configuration_paths: Iterable[str]) -> Dict[str, object]:
    """
    Read YAML configuration files and merge them, later files winning.

    :param configuration_paths: Files in precedence order.
    :type configuration_paths: Iterable[str]
    :return: Merged mapping.
    :rtype: dict[str, object]
    :raises FileNotFoundError: If a file is missing.
    :raises ValueError: If a file holds something other than a mapping.
    """
    paths = [Path(str(path)) for path in configuration_paths]
    missing = [path for path in paths if not path.is_file()]
    if missing:
        raise FileNotFoundError(f"Configuration file not found: {missing[0]}")
    composed: Dict[str, object] = {}
    for path in paths:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        if loaded is None:
            continue
        if not isinstance(loaded, dict):
            raise ValueError(f"malletbridge configuration must be a mapping: {path}")
        composed = _merge_sections(composed, loaded)
    return composed


def load_mallet_configuration(
    configuration_paths: Optional[Iterable[str]] = None,
    overrides: Optional[Iterable[str]] = None,
) -> MalletConfiguration:
    """
    Compose configuration files and overrides into a validated configuration.

    :param configuration_paths: YAML files in precedence order, or None for defaults.
    :type configuration_paths: Iterable[str] or None
    :param overrides: Repeated key=value override pairs.
    :type overrides: Iterable[str] or None
    :return: Validated configuration.
    :rtype: MalletConfiguration
    :raises pydantic.ValidationError: If the composed values are invalid.
    """
    data = read_configuration_files(configuration_paths or [])
    return MalletConfiguration.model_validate(apply_overrides(data, parse_overrides(overrides)))
