"""
Input validation utilities for glmpredict.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import math
from numbers import Real
from typing import Any, Iterable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from glmpredict.core.exceptions import InvalidArgument, DimensionError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to a floating-point numpy array.

    Rejects inputs that result in object dtype (mixed types) or any
    other non-numeric dtype.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with floating dtype

    Raises:
        InvalidArgument: If input cannot be converted to a numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise InvalidArgument(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise InvalidArgument(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    # bool is a numpy number subtype we don't want as covariates
    if result.dtype == np.bool_ or not np.issubdtype(result.dtype, np.number):
        raise InvalidArgument(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if not np.issubdtype(result.dtype, np.floating):
        result = result.astype(np.float64)

    return result


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Raises:
        InvalidArgument: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise InvalidArgument(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.

    Raises:
        DimensionError: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Verify array is 1-dimensional."""
    check_ndim(array, 1, name)


def check_2d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Verify array is 2-dimensional."""
    check_ndim(array, 2, name)


def check_consistent_length(
    *arrays: NDArray[np.floating[Any]],
    names: tuple[str, ...]
) -> None:
    """
    Verify all arrays have the same length (first dimension).

    Args:
        *arrays: Arrays to check
        names: Parameter names for error messages (must match number of arrays)

    Raises:
        ValueError: If number of names doesn't match number of arrays
        DimensionError: If arrays have inconsistent lengths
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )

    if len(arrays) < 2:
        return

    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(f"{name}={length}" for name, length in zip(names, lengths))
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_level(level: Any, name: str = 'level') -> float:
    """
    Validate a confidence level.

    Args:
        level: Candidate confidence level
        name: Parameter name for error messages

    Returns:
        The level as a float

    Raises:
        InvalidArgument: If level is not a real number in the open interval (0, 1)
    """
    if isinstance(level, bool) or not isinstance(level, Real):
        raise InvalidArgument(
            f"{name} must be a number in (0, 1), got {type(level).__name__}"
        )
    level = float(level)
    if math.isnan(level) or not (0.0 < level < 1.0):
        raise InvalidArgument(f"{name} must be in (0, 1), got {level}")
    return level


def check_choice(value: Any, choices: Iterable[str], name: str) -> str:
    """
    Verify a string option is one of the allowed choices.

    Raises:
        InvalidArgument: If value is not one of choices
    """
    choices = tuple(choices)
    if value not in choices:
        valid = ', '.join(repr(c) for c in sorted(choices))
        raise InvalidArgument(f"{name} must be one of {valid}, got {value!r}")
    return value


def check_positive_weights(weights: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify prior weights are non-negative and not all zero.

    Raises:
        InvalidArgument: If any weight is negative or all weights are zero
    """
    if np.any(weights < 0):
        n_neg = int(np.sum(weights < 0))
        raise InvalidArgument(f"{name}: {n_neg} negative weight(s)")
    if weights.size > 0 and not np.any(weights > 0):
        raise InvalidArgument(f"{name}: all weights are zero")
