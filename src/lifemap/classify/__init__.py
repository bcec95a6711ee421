"""Classification oracles and the batched classifier."""

from lifemap.classify.batch import BatchClassifier, ClassificationRun
from lifemap.classify.oracle import KeywordOracle, LLMOracle, Oracle
