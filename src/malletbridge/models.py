"""
Pydantic models for malletbridge domain concepts.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import DEFAULT_STOPWORDS_LANGUAGE, DEFAULT_TOKEN_REGEXP, SCHEMA_VERSION


class Partition(BaseModel):
    """
    A named slice of a corpus with one token stream per positional attribute.

    :ivar name: Partition name, used as the document identifier in MALLET.
    :vartype name: str
    :ivar p_attributes: Token streams keyed by positional attribute (for example word or lemma).
    :vartype p_attributes: dict[str, list[str]]
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    p_attributes: Dict[str, List[str]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_stream_lengths(self) -> "Partition":
        lengths = {len(tokens) for tokens in self.p_attributes.values()}
        if len(lengths) > 1:
            raise ValueError(
                f"Token streams of partition {self.name!r} must have equal lengths"
            )
        return self

    def tokens(self, p_attribute: str) -> List[str]:
        """
        Return the token stream for a positional attribute.

        :param p_attribute: Positional attribute name.
        :type p_attribute: str
        :return: Token stream.
        :rtype: list[str]
        :raises KeyError: If the partition has no such attribute.
        """
        if p_attribute not in self.p_attributes:
            known = ", ".join(sorted(self.p_attributes)) or "none"
            raise KeyError(
                f"Partition {self.name!r} has no p-attribute {p_attribute!r}. Known: {known}"
            )
        return self.p_attributes[p_attribute]


class PartitionBundle(BaseModel):
    """
    Ordered collection of partitions, the corpus representation handed to MALLET.

    :ivar partitions: Partitions in document order.
    :vartype partitions: list[Partition]
    """

    model_config = ConfigDict(extra="forbid")

    partitions: List[Partition] = Field(default_factory=list)

    @property
    def names(self) -> List[str]:
        return [partition.name for partition in self.partitions]

    @property
    def p_attributes(self) -> List[str]:
        if not self.partitions:
            return []
        common = set(self.partitions[0].p_attributes)
        for partition in self.partitions[1:]:
            common &= set(partition.p_attributes)
        return sorted(common)

    def __len__(self) -> int:
        return len(self.partitions)

    @classmethod
    def from_jsonl(cls, path: Union[str, Path]) -> "PartitionBundle":
        """
        Load a bundle from a JSON Lines file with one partition object per line.

        :param path: JSON Lines file path.
        :type path: str or Path
        :return: Parsed bundle.
        :rtype: PartitionBundle
        :raises FileNotFoundError: If the file does not exist.
        :raises ValueError: If a line is not valid JSON.
        """
        source = Path(path)
        if not source.is_file():
            raise FileNotFoundError(f"Partition bundle not found: {source}")
        partitions: List[Partition] = []
        with source.open("r", encoding="utf-8") as handle:
            for line_number, line in enumerate(handle, start=1):
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    payload = json.loads(stripped)
                except json.JSONDecodeError as exc:
                    raise ValueError(
                        f"Invalid JSON on line {line_number} of {source}: {exc.msg}"
                    ) from exc
                partitions.append(Partition.model_validate(payload))
        return cls(partitions=partitions)


class Phrases(BaseModel):
    """
    Multi-token expressions to be concatenated into single tokens.

    :ivar phrases: Token sequences, each with at least two tokens.
    :vartype phrases: list[list[str]]
    :ivar separator: String used to join the tokens of a phrase.
    :vartype separator: str
    """

    model_config = ConfigDict(extra="forbid")

    phrases: List[List[str]] = Field(default_factory=list)
    separator: str = "_"

    @field_validator("phrases", mode="after")
    @classmethod
    def _validate_phrases(cls, value: List[List[str]]) -> List[List[str]]:
        for phrase in value:
            if len(phrase) < 2:
                raise ValueError("phrases must contain at least two tokens each")
            if not all(token for token in phrase):
                raise ValueError("phrase tokens must be non-empty strings")
        return value

    @classmethod
    def from_lines(cls, lines: List[str], *, separator: str = "_") -> "Phrases":
        """
        Build phrases from whitespace-delimited lines, skipping blank lines.

        :param lines: One phrase per line.
        :type lines: list[str]
        :param separator: Join separator for concatenated tokens.
        :type separator: str
        :return: Phrases model.
        :rtype: Phrases
        """
        phrases = [line.split() for line in lines if line.strip()]
        return cls(phrases=phrases, separator=separator)


class MalletRuntimeConfig(BaseModel):
    """
    Java virtual machine settings for reaching MALLET in-process.

    :ivar mallet_home: MALLET installation directory.
    :vartype mallet_home: str or None
    :ivar class_path: Explicit class path entries; defaults are derived from mallet_home.
    :vartype class_path: list[str] or None
    :ivar jvm_options: Options passed to the Java virtual machine (for example -Xmx4g).
    :vartype jvm_options: list[str]
    :ivar jvm_path: Path to the Java virtual machine shared library.
    :vartype jvm_path: str or None
    """

    model_config = ConfigDict(extra="forbid")

    mallet_home: Optional[str] = None
    class_path: Optional[List[str]] = None
    jvm_options: List[str] = Field(default_factory=list)
    jvm_path: Optional[str] = None


class InstanceListConfig(BaseModel):
    """
    Settings for turning a partition bundle into a MALLET instance list.

    :ivar p_attribute: Positional attribute to read tokens from.
    :vartype p_attribute: str
    :ivar stopwords: Explicit terms to drop; None selects the language default.
    :vartype stopwords: list[str] or None
    :ivar stopwords_language: Language of the default stopword list.
    :vartype stopwords_language: str
    :ivar preserve_case: Whether to keep token case.
    :vartype preserve_case: bool
    :ivar token_regexp: Java regular expression recognising tokens.
    :vartype token_regexp: str
    :ivar verbose: Whether to report progress on standard error.
    :vartype verbose: bool
    """

    model_config = ConfigDict(extra="forbid")

    p_attribute: str = Field(default="word", min_length=1)
    stopwords: Optional[List[str]] = None
    stopwords_language: str = DEFAULT_STOPWORDS_LANGUAGE
    preserve_case: bool = True
    token_regexp: str = Field(default=DEFAULT_TOKEN_REGEXP, min_length=1)
    verbose: bool = True


class TrainConfig(BaseModel):
    """
    Settings for MALLET topic model training.

    :ivar topics: Number of topics.
    :vartype topics: int
    :ivar iterations: Number of sampling iterations.
    :vartype iterations: int
    :ivar top_words: Number of top words reported per topic.
    :vartype top_words: int
    :ivar threads: Number of sampler threads, or None for MALLET's default.
    :vartype threads: int or None
    :ivar alpha_sum: Sum of the Dirichlet document-topic prior.
    :vartype alpha_sum: float
    :ivar beta: Dirichlet topic-word prior.
    :vartype beta: float
    :ivar optimize_interval: Hyperparameter optimization interval, or None to disable.
    :vartype optimize_interval: int or None
    :ivar random_seed: Sampler seed, or None for MALLET's default.
    :vartype random_seed: int or None
    """

    model_config = ConfigDict(extra="forbid")

    topics: int = Field(default=50, gt=2)
    iterations: int = Field(default=2000, gt=1)
    top_words: int = Field(default=50, gt=2)
    threads: Optional[int] = Field(default=None, ge=1)
    alpha_sum: float = Field(default=5.0, gt=0)
    beta: float = Field(default=0.01, gt=0)
    optimize_interval: Optional[int] = Field(default=None, ge=1)
    random_seed: Optional[int] = None


class MalletConfiguration(BaseModel):
    """
    Composed configuration for a malletbridge workflow.

    :ivar schema_version: Configuration schema version.
    :vartype schema_version: int
    :ivar runtime: Java virtual machine settings.
    :vartype runtime: MalletRuntimeConfig
    :ivar instances: Instance list settings.
    :vartype instances: InstanceListConfig
    :ivar train: Training settings.
    :vartype train: TrainConfig
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: int = Field(default=SCHEMA_VERSION, ge=1)
    runtime: MalletRuntimeConfig = Field(default_factory=MalletRuntimeConfig)
    instances: InstanceListConfig = Field(default_factory=InstanceListConfig)
    train: TrainConfig = Field(default_factory=TrainConfig)

    @model_validator(mode="after")
    def _validate_schema_version(self) -> "MalletConfiguration":
        if self.schema_version != SCHEMA_VERSION:
            raise ValueError(f"Unsupported configuration schema version: {self.schema_version}")
        return self
