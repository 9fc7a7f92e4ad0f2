"""
Persistence and in-process estimation of MALLET ``ParallelTopicModel`` objects.
"""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Any, Optional, Union

from .constants import PARALLEL_TOPIC_MODEL_CLASS, PROGRESS_PREFIX
from .models import TrainConfig
from .paths import require_file, resolve_destination
from .runtime import MalletRuntime, get_runtime


def load_topic_model(
    filename: Union[str, Path], *, runtime: Optional[MalletRuntime] = None
) -> Any:
    """
    Load a topic model written by MALLET (``--output-model`` or ``ParallelTopicModel.write``).

    :param filename: Serialized model.
    :type filename: str or Path
    :param runtime: Runtime to use.
    :type runtime: MalletRuntime or None
    :return: Java ``cc.mallet.topics.ParallelTopicModel``.
    :rtype: Any
    :raises FileNotFoundError: If the file does not exist.
    """
    source = require_file(filename, label="Topic model")
    active = runtime or get_runtime()
    return active.jclass(PARALLEL_TOPIC_MODEL_CLASS).read(active.java_file(source))


def write_topic_model(
    model: Any,
    filename: Optional[Union[str, Path]] = None,
    *,
    runtime: Optional[MalletRuntime] = None,
) -> Path:
    """
    Serialize a topic model with ``ParallelTopicModel.write``.

    :param model: Java ``ParallelTopicModel``.
    :type model: Any
    :param filename: Destination; a new temporary file when omitted.
    :type filename: str or Path or None
    :param runtime: Runtime to use.
    :type runtime: MalletRuntime or None
    :return: Path of the written model.
    :rtype: Path
    """
    active = runtime or get_runtime()
    destination = resolve_destination(filename, suffix=".model")
    model.write(active.java_file(destination))
    return destination


def estimate_topic_model(
    instance_list: Any,
    config: TrainConfig,
    *,
    verbose: bool = True,
    runtime: Optional[MalletRuntime] = None,
) -> Any:
    """
    Train a ``ParallelTopicModel`` inside the Java virtual machine.

    :param instance_list: Java ``InstanceList`` with feature sequences.
    :type instance_list: Any
    :param config: Training configuration.
    :type config: TrainConfig
    :param verbose: Whether to report progress on standard error.
    :type verbose: bool
    :param runtime: Runtime to use.
    :type runtime: MalletRuntime or None
    :return: Estimated Java ``ParallelTopicModel``.
    :rtype: Any
    """
    active = runtime or get_runtime()
    model = active.jclass(PARALLEL_TOPIC_MODEL_CLASS)(
        int(config.topics), float(config.alpha_sum), float(config.beta)
    )
    model.addInstances(instance_list)
    model.setNumThreads(int(config.threads or 1))
    model.setTopicDisplay(50, int(config.top_words))
    model.setNumIterations(int(config.iterations))
    if config.optimize_interval is not None:
        model.setOptimizeInterval(int(config.optimize_interval))
    if config.random_seed is not None:
        model.setRandomSeed(int(config.random_seed))

    start_time = time.perf_counter()
    if verbose:
        print(
            f"{PROGRESS_PREFIX} estimating topics={config.topics} "
            f"iterations={config.iterations}",
            flush=True,
            file=sys.stderr,
        )
    model.estimate()
    if verbose:
        elapsed = time.perf_counter() - start_time
        print(
            f"{PROGRESS_PREFIX} estimate complete elapsed={elapsed:.1f}s",
            flush=True,
            file=sys.stderr,
        )
    return model
