"""
Diagnostics for interpreting GLM output.

Residuals, null and residual deviance, dispersion and AIC, computed
from observed responses and fitted means.

Usage:
    from glmpredict.diagnostics import residuals, summarize

    r = residuals(y, mu, 'poisson', type='deviance')
    print(summarize(y, mu, 'poisson', rank=3).summary())
"""

from glmpredict.diagnostics.residuals import (
    residuals, deviance, null_deviance, dispersion, aic,
    RESIDUAL_TYPES, DISPERSION_METHODS,
)
from glmpredict.diagnostics.solution import DevianceSummary
from glmpredict.diagnostics.solvers import summarize

__all__ = [
    "residuals",
    "deviance",
    "null_deviance",
    "dispersion",
    "aic",
    "summarize",
    "DevianceSummary",
    "RESIDUAL_TYPES",
    "DISPERSION_METHODS",
]
