"""
Residuals and deviance-based fit statistics for GLMs.

Everything here works from the observed response y, the fitted means μ
and a family, so it applies to any fit regardless of where it came from.

Residual types (matching R's residuals.glm):
    response:  y - μ
    pearson:   (y - μ)·√w / √V(μ)
    deviance:  sign(y - μ)·√(w·d(y, μ))
    working:   (y - μ) / (dμ/dη)
"""

from __future__ import annotations

from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from glmpredict.core.exceptions import InvalidArgument
from glmpredict.core.validation import (
    check_array, check_1d, check_finite, check_consistent_length,
    check_positive_weights, check_choice,
)
from glmpredict.models.families import Family, resolve_family

RESIDUAL_TYPES = ('response', 'pearson', 'deviance', 'working')
DISPERSION_METHODS = ('pearson', 'deviance')


def _prepare(
    y: ArrayLike,
    mu: ArrayLike,
    family: str | Family,
    weights: ArrayLike | None,
) -> tuple[NDArray, NDArray, Family, NDArray]:
    """Validate (y, μ, weights) and resolve the family."""
    fam = resolve_family(family)

    y_arr = check_array(y, 'y').astype(np.float64)
    mu_arr = check_array(mu, 'mu').astype(np.float64)
    check_1d(y_arr, 'y')
    check_1d(mu_arr, 'mu')
    check_finite(y_arr, 'y')
    check_finite(mu_arr, 'mu')
    check_consistent_length(y_arr, mu_arr, names=('y', 'mu'))

    if weights is None:
        wt = np.ones_like(y_arr)
    else:
        wt = check_array(weights, 'weights').astype(np.float64)
        check_1d(wt, 'weights')
        check_finite(wt, 'weights')
        check_consistent_length(y_arr, wt, names=('y', 'weights'))
        check_positive_weights(wt, 'weights')

    if not fam.validmu(mu_arr):
        raise InvalidArgument(
            f"mu: values outside the mean space of the {fam.name} family"
        )

    return y_arr, mu_arr, fam, wt


def residuals(
    y: ArrayLike,
    mu: ArrayLike,
    family: str | Family,
    type: str = 'deviance',
    weights: ArrayLike | None = None,
) -> NDArray[np.floating[Any]]:
    """
    GLM residuals of the requested type.

    Args:
        y: Observed response (n,)
        mu: Fitted means (n,)
        family: Family name or instance (its link is used for 'working')
        type: 'deviance' (default), 'pearson', 'response' or 'working'
        weights: Prior weights (n,), default 1

    Returns:
        Residuals, shape (n,)

    Raises:
        InvalidArgument: On an unknown type or invalid inputs
    """
    check_choice(type, RESIDUAL_TYPES, 'type')
    y_arr, mu_arr, fam, wt = _prepare(y, mu, family, weights)
    raw = y_arr - mu_arr

    if type == 'response':
        return raw
    if type == 'pearson':
        return raw * np.sqrt(wt) / np.sqrt(fam.variance(mu_arr))
    if type == 'deviance':
        d = wt * fam.unit_deviance(y_arr, mu_arr)
        return np.sign(raw) * np.sqrt(np.maximum(d, 0.0))
    # working
    eta = fam.link.link(mu_arr)
    return raw / fam.link.mu_eta(eta)


def deviance(
    y: ArrayLike,
    mu: ArrayLike,
    family: str | Family,
    weights: ArrayLike | None = None,
) -> float:
    """Residual deviance Σ w·d(y, μ)."""
    y_arr, mu_arr, fam, wt = _prepare(y, mu, family, weights)
    return fam.deviance(y_arr, mu_arr, wt)


def null_deviance(
    y: ArrayLike,
    family: str | Family,
    weights: ArrayLike | None = None,
    intercept: bool = True,
) -> float:
    """
    Deviance of the null model.

    With an intercept, the null model predicts the weighted mean of y
    for every observation. Without one, it predicts g⁻¹(0).
    """
    fam = resolve_family(family)
    y_arr = check_array(y, 'y').astype(np.float64)
    check_1d(y_arr, 'y')
    check_finite(y_arr, 'y')
    if weights is None:
        wt = np.ones_like(y_arr)
    else:
        wt = check_array(weights, 'weights').astype(np.float64)
        check_1d(wt, 'weights')
        check_consistent_length(y_arr, wt, names=('y', 'weights'))
        check_positive_weights(wt, 'weights')

    if y_arr.size == 0:
        return 0.0

    if intercept:
        mu0 = np.full_like(y_arr, np.sum(wt * y_arr) / np.sum(wt))
    else:
        mu0 = fam.link.linkinv(np.zeros_like(y_arr))
    return fam.deviance(y_arr, mu0, wt)


def dispersion(
    y: ArrayLike,
    mu: ArrayLike,
    family: str | Family,
    df_residual: int,
    weights: ArrayLike | None = None,
    method: str = 'pearson',
) -> float:
    """
    Dispersion parameter φ.

    Fixed-dispersion families (binomial, poisson) return 1. Otherwise:
        'pearson':  Σ w(y - μ)²/V(μ) / df_residual   (R's summary.glm)
        'deviance': deviance / df_residual

    Returns NaN when df_residual <= 0.
    """
    check_choice(method, DISPERSION_METHODS, 'method')
    y_arr, mu_arr, fam, wt = _prepare(y, mu, family, weights)

    if fam.dispersion_is_fixed:
        return 1.0
    if df_residual <= 0:
        return float('nan')

    if method == 'pearson':
        chi2 = float(np.sum(wt * (y_arr - mu_arr) ** 2 / fam.variance(mu_arr)))
        return chi2 / df_residual
    return fam.deviance(y_arr, mu_arr, wt) / df_residual


def aic(
    y: ArrayLike,
    mu: ArrayLike,
    family: str | Family,
    rank: int,
    weights: ArrayLike | None = None,
) -> float:
    """
    Akaike information criterion, -2·loglik + 2·(parameters).

    Follows R's family-specific conventions. NaN for quasi families.
    """
    y_arr, mu_arr, fam, wt = _prepare(y, mu, family, weights)
    if fam.dispersion_is_fixed:
        phi = 1.0
    else:
        phi = fam.deviance(y_arr, mu_arr, wt) / float(np.sum(wt))
    return fam.aic(y_arr, mu_arr, wt, rank, phi)
