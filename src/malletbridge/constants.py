"""
Shared constants for malletbridge.
"""

SCHEMA_VERSION = 1
DEFAULT_MALLET_HOME = "/opt/mallet-2.0.8"
MALLET_CLASS_DIR = "class"
MALLET_DEPS_JAR = "lib/mallet-deps.jar"
MALLET_EXECUTABLE = "mallet"
DEFAULT_TOKEN_REGEXP = "\\p{L}+"
DEFAULT_STOPWORDS_LANGUAGE = "german"
STOPLIST_FILENAME = "stoplists.txt"
PARALLEL_TOPIC_MODEL_CLASS = "cc.mallet.topics.ParallelTopicModel"
INSTANCE_LIST_CLASS = "cc.mallet.types.InstanceList"
PROGRESS_PREFIX = "[mallet]"
