"""Errors raised by the classification core."""


class ClassifierError(Exception):
    """Base class for classifier failures."""


class EmptyTrainingData(ClassifierError, ValueError):
    """Raised when learning or calibration receives no samples."""


class NotLearned(ClassifierError, RuntimeError):
    """Raised when classifying before the learning phase has completed."""


class DataSourceError(ClassifierError):
    """Raised when the labeled corpus cannot be read."""


class ConfigError(ClassifierError):
    """Raised when the configuration file is missing or invalid."""


class IndeterminateWeight(RuntimeWarning):
    """Both classifiers scored 0 on a category, so its blend weight is 0/0."""
