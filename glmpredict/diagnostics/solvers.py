"""
Public entry point for GLM fit diagnostics.
"""

from numpy.typing import ArrayLike

from glmpredict.core.exceptions import InvalidArgument
from glmpredict.models.families import Family
from glmpredict.diagnostics.residuals import (
    _prepare, null_deviance, dispersion, aic,
)
from glmpredict.diagnostics.solution import DevianceSummary


def summarize(
    y: ArrayLike,
    mu: ArrayLike,
    family: str | Family,
    rank: int,
    *,
    weights: ArrayLike | None = None,
    intercept: bool = True,
) -> DevianceSummary:
    """
    Null/residual deviance, dispersion and AIC of a fitted GLM.

    Args:
        y: Observed response (n,)
        mu: Fitted means from the model (n,)
        family: Family name or instance
        rank: Number of estimated coefficients (including the intercept)
        weights: Prior weights (n,), default 1
        intercept: Whether the model has an intercept (sets the null model)

    Returns:
        DevianceSummary

    Raises:
        InvalidArgument: If inputs are invalid or rank is out of range

    Example:
        >>> s = summarize(y, res.fittedvalues, 'poisson', rank=len(res.params))
        >>> print(s.summary())
    """
    y_arr, mu_arr, fam, wt = _prepare(y, mu, family, weights)
    n = int(y_arr.shape[0])

    if isinstance(rank, bool) or not isinstance(rank, int) or rank < 0 or rank > n:
        raise InvalidArgument(f"rank must be an integer in [0, {n}], got {rank!r}")

    df_residual = n - rank
    dev = fam.deviance(y_arr, mu_arr, wt)

    return DevianceSummary(
        family_name=fam.name,
        link_name=fam.link.name,
        n_obs=n,
        rank=rank,
        null_deviance=null_deviance(y_arr, fam, wt, intercept=intercept),
        df_null=n - int(bool(intercept)),
        deviance=dev,
        df_residual=df_residual,
        dispersion=dispersion(y_arr, mu_arr, fam, df_residual, wt),
        dispersion_is_fixed=fam.dispersion_is_fixed,
        aic=aic(y_arr, mu_arr, fam, rank, wt),
    )
