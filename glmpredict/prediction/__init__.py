"""
Predictions and confidence intervals for fitted GLMs.

Public API:
    estimate(model, new_data, level=0.95) -> IntervalSolution
    predict(model, new_data, type='link') -> PredictionSolution
    critical_value(level) -> float

Example:
    >>> from glmpredict.prediction import estimate
    >>> ci = estimate(model, new_data, level=0.90)
    >>> ci.to_frame()       # columns: fit, lwr, upr
"""

from glmpredict.prediction.design import PredictionDesign, NAN_POLICIES
from glmpredict.prediction.solution import (
    IntervalSolution, IntervalParams, PredictionSolution, PredictionParams,
)
from glmpredict.prediction.solvers import estimate, predict, PREDICTION_TYPES
from glmpredict.prediction._common import critical_value

__all__ = [
    "estimate",
    "predict",
    "critical_value",
    "PredictionDesign",
    "IntervalSolution",
    "IntervalParams",
    "PredictionSolution",
    "PredictionParams",
    "NAN_POLICIES",
    "PREDICTION_TYPES",
]
