"""
Core infrastructure for glmpredict.

This module provides the shared abstractions used by the models,
prediction and diagnostics subpackages.

Key components:
    protocols: FittedModel protocol
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing
"""

from glmpredict.core.protocols import FittedModel
from glmpredict.core.result import Result
from glmpredict.core.exceptions import (
    GLMPredictError,
    InvalidArgument,
    DimensionError,
    PredictionFailed,
    NumericalError,
)

__all__ = [
    # Protocols
    "FittedModel",
    # Result
    "Result",
    # Exceptions
    "GLMPredictError",
    "InvalidArgument",
    "DimensionError",
    "PredictionFailed",
    "NumericalError",
]
