"""
glmpredict: predictions and confidence intervals for fitted GLMs.

Turns a generalized linear model fitted elsewhere into response-scale
predictions with confidence intervals, and computes the deviance-based
quantities used to read GLM output.

Submodules:
    models: GLMModel handle, families and link functions
    prediction: estimate() intervals and predict() on link/response scale
    diagnostics: residuals, deviance, dispersion, AIC
"""

__version__ = "0.1.0"

from glmpredict.core.exceptions import (
    GLMPredictError,
    InvalidArgument,
    DimensionError,
    PredictionFailed,
    NumericalError,
)
from glmpredict.core.protocols import FittedModel
from glmpredict.models import GLMModel, resolve_family, resolve_link
from glmpredict.prediction import estimate, predict, critical_value
from glmpredict import diagnostics

__all__ = [
    "__version__",
    "GLMModel",
    "FittedModel",
    "estimate",
    "predict",
    "critical_value",
    "resolve_family",
    "resolve_link",
    "diagnostics",
    "GLMPredictError",
    "InvalidArgument",
    "DimensionError",
    "PredictionFailed",
    "NumericalError",
]
