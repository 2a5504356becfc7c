"""
Error types raised by the risk engine.

Bad inputs raise ``ValueError`` subclasses, inference on an unfitted forest
raises a ``RuntimeError`` subclass. All share ``MedRiskError`` so callers can
catch engine failures in one place.
"""


class MedRiskError(Exception):
    """Base class for all engine errors."""


class InvalidTrainingDataError(MedRiskError, ValueError):
    """Empty dataset, mismatched lengths, or malformed rows/labels in train()."""


class InvalidFeatureVectorError(MedRiskError, ValueError):
    """Feature vector of the wrong length or with non-finite values."""


class ModelNotTrainedError(MedRiskError, RuntimeError):
    """Inference requested before a successful train()."""


class InvalidArgumentError(MedRiskError, ValueError):
    """Argument outside its allowed domain (e.g. negative sample count)."""
