"""
malletbridge public package interface.
"""

from .commands import build_import_command, build_train_command, mallet_cmd, run_mallet
from .corpus import get_token_stream
from .doc_topics import load_doc_topics
from .instances import (
    instance_list_load,
    instance_list_store,
    make_instance_list,
    write_import_file,
)
from .lda import LdaGibbsModel, as_lda
from .matrices import LabeledMatrix, LabeledSparseMatrix
from .models import (
    InstanceListConfig,
    MalletConfiguration,
    MalletRuntimeConfig,
    Partition,
    PartitionBundle,
    Phrases,
    TrainConfig,
)
from .runtime import MalletRuntime, get_runtime, resolve_mallet_settings
from .topic_model import estimate_topic_model, load_topic_model, write_topic_model
from .word_weights import mallet_load_word_weights, mallet_save_word_weights
from .xml_report import mallet_get_sparse_word_weights_matrix

__all__ = [
    "__version__",
    "InstanceListConfig",
    "LabeledMatrix",
    "LabeledSparseMatrix",
    "LdaGibbsModel",
    "MalletConfiguration",
    "MalletRuntime",
    "MalletRuntimeConfig",
    "Partition",
    "PartitionBundle",
    "Phrases",
    "TrainConfig",
    "as_lda",
    "build_import_command",
    "build_train_command",
    "estimate_topic_model",
    "get_runtime",
    "get_token_stream",
    "instance_list_load",
    "instance_list_store",
    "load_doc_topics",
    "load_topic_model",
    "make_instance_list",
    "mallet_cmd",
    "mallet_get_sparse_word_weights_matrix",
    "mallet_load_word_weights",
    "mallet_save_word_weights",
    "resolve_mallet_settings",
    "run_mallet",
    "write_import_file",
    "write_topic_model",
]

__version__ = "0.1.0"
