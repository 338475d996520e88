"""
Solver dispatch for GLM predictions.

This module provides the public entry points estimate() and predict().
Validation happens here, at the boundary; backends trust the design.
"""

import warnings
from typing import Any, Literal

from glmpredict.core.validation import check_choice
from glmpredict.prediction.design import PredictionDesign
from glmpredict.prediction.solution import IntervalSolution, PredictionSolution
from glmpredict.prediction.backends.cpu import CPUWaldBackend, CPUPredictBackend

PREDICTION_TYPES = ('link', 'response')

NanPolicy = Literal['propagate', 'raise']


def estimate(
    model: Any,
    new_data: Any,
    level: float = 0.95,
    *,
    nan_policy: NanPolicy = 'propagate',
) -> IntervalSolution:
    """
    Confidence intervals for GLM predictions on the response scale.

    The interval is built on the link scale, where the normal
    approximation holds, and mapped through the inverse link:

        fit = g⁻¹(η),  lwr/upr = g⁻¹(η ∓ z·se(η))

    Args:
        model: A fitted model satisfying FittedModel (e.g. GLMModel).
        new_data: Covariate rows: a pandas DataFrame or a mapping with
            the model's feature columns, or a 2-D array (n x p).
        level: Confidence level in (0, 1). Default 0.95.
        nan_policy: What to do when the model returns an undefined
            standard error for a row:
            - 'propagate': NaN bounds for that row, with a warning
            - 'raise': raise PredictionFailed

    Returns:
        IntervalSolution with fit, lwr, upr (one per input row, same order)

    Raises:
        InvalidArgument: If model, new_data, level or nan_policy is invalid
        DimensionError: If new_data has the wrong number of columns
        PredictionFailed: If the model's prediction query fails

    Example:
        >>> from glmpredict import GLMModel, estimate
        >>> model = GLMModel.build([0.5, 0.3], [[0.01, 0.0], [0.0, 0.004]],
        ...                        family='poisson', feature_names=['x'])
        >>> ci = estimate(model, {'x': [1.0, 2.0, 3.0]})
        >>> ci.to_frame()
    """
    design = PredictionDesign.build(
        model, new_data, level=level, nan_policy=nan_policy
    )

    result = CPUWaldBackend().solve(design)

    for message in result.warnings:
        warnings.warn(message, UserWarning, stacklevel=2)

    return IntervalSolution(_result=result, _design=design)


def predict(
    model: Any,
    new_data: Any,
    *,
    type: Literal['link', 'response'] = 'link',
    se_fit: bool = True,
    nan_policy: NanPolicy = 'propagate',
) -> PredictionSolution:
    """
    Point predictions on the link or response scale (R's predict.glm).

    Args:
        model: A fitted model satisfying FittedModel.
        new_data: Covariate rows, as for estimate().
        type: 'link' for η, 'response' for μ = g⁻¹(η).
        se_fit: Whether to return standard errors. On the response
            scale they come from the delta method, se(η)·|dμ/dη|.
        nan_policy: 'propagate' or 'raise' for undefined standard errors.

    Returns:
        PredictionSolution with fit and se_fit

    Raises:
        InvalidArgument: If any argument is invalid
        PredictionFailed: If the model's prediction query fails
    """
    check_choice(type, PREDICTION_TYPES, 'type')
    design = PredictionDesign.build(model, new_data, nan_policy=nan_policy)

    result = CPUPredictBackend(type=type, se_fit=bool(se_fit)).solve(design)

    for message in result.warnings:
        warnings.warn(message, UserWarning, stacklevel=2)

    return PredictionSolution(_result=result, _design=design)
