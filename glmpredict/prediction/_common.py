"""
Shared helpers for prediction backends.

query_link() is the only place that calls the model's prediction query,
so every backend maps its failures to PredictionFailed the same way.
"""

from __future__ import annotations

from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from glmpredict.core.exceptions import PredictionFailed, NumericalError
from glmpredict.core.validation import check_level
from glmpredict.prediction.design import PredictionDesign


def critical_value(level: float) -> float:
    """
    Two-sided standard normal critical value.

    z = Φ⁻¹(1 - (1 - level) / 2), e.g. 1.959964 for level = 0.95.

    Raises:
        InvalidArgument: If level is not in (0, 1)
        NumericalError: If the quantile is not finite
    """
    level = check_level(level)
    z = float(sp_stats.norm.ppf(1.0 - (1.0 - level) / 2.0))
    if not np.isfinite(z):
        raise NumericalError(
            f"critical value for level={level} is not finite",
            quantity='critical_value',
            value=z,
        )
    return z


def query_link(
    design: PredictionDesign,
    check_se: bool = True,
) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]], list[str]]:
    """
    Ask the model for link-scale fits and standard errors.

    Args:
        design: Validated prediction design
        check_se: Apply design.nan_policy to undefined standard errors.
            When False they are set to NaN silently, for callers that
            discard the standard errors.

    Returns:
        (fit, se, warnings). Undefined standard errors are NaN when
        design.nan_policy is 'propagate'.

    Raises:
        PredictionFailed: If the query raises, returns a malformed
            payload, or returns undefined standard errors under
            nan_policy='raise'.
    """
    n = design.n
    warnings_list: list[str] = []

    if n == 0:
        empty = np.empty(0, dtype=np.float64)
        return empty, empty.copy(), warnings_list

    try:
        fit, se = design.model.predict_link(design.X.copy())
    except Exception as e:
        raise PredictionFailed(
            f"model prediction query failed for {n} row(s): {type(e).__name__}: {e}",
            n_rows=n,
        ) from e

    try:
        fit = np.asarray(fit, dtype=np.float64)
        se = np.asarray(se, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise PredictionFailed(
            f"model returned non-numeric predictions: {e}", n_rows=n
        ) from e

    if fit.shape != (n,) or se.shape != (n,):
        raise PredictionFailed(
            f"model returned fit with shape {fit.shape} and se with shape "
            f"{se.shape}; expected ({n},) for both",
            n_rows=n,
        )

    if not np.all(np.isfinite(fit)):
        n_bad = int(np.sum(~np.isfinite(fit)))
        raise PredictionFailed(
            f"model returned {n_bad} non-finite link-scale prediction(s)",
            n_rows=n,
        )

    if np.any(se < 0):
        raise PredictionFailed(
            f"model returned {int(np.sum(se < 0))} negative standard error(s)",
            n_rows=n,
        )

    undefined = ~np.isfinite(se)
    if np.any(undefined):
        n_undef = int(np.sum(undefined))
        if check_se and design.nan_policy == 'raise':
            raise PredictionFailed(
                f"standard error undefined for {n_undef} of {n} row(s)",
                n_rows=n,
            )
        se = np.where(undefined, np.nan, se)
        if check_se:
            warnings_list.append(
                f"standard error undefined for {n_undef} of {n} row(s); "
                f"bounds set to NaN"
            )

    return fit, se, warnings_list
