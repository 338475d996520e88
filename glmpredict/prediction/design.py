"""
Prediction Design.

PredictionDesign pairs a fitted model with a validated covariate matrix
laid out in the model's feature order. It is built once at the public
boundary; backends trust it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
import numpy as np
import pandas as pd
from numpy.typing import NDArray

from glmpredict.core.exceptions import InvalidArgument, DimensionError
from glmpredict.core.protocols import FittedModel
from glmpredict.core.validation import (
    check_array, check_finite, check_ndim, check_consistent_length,
    check_level, check_choice,
)

NAN_POLICIES = ('propagate', 'raise')


@dataclass(frozen=True)
class PredictionDesign:
    """
    Frozen prediction request.

    Attributes:
        model: The fitted model handle
        X: Covariate matrix (n x p) in model.feature_names order
        index: Row labels of the input DataFrame, or None
        level: Confidence level, or None for plain prediction
        nan_policy: 'propagate' or 'raise' for undefined standard errors
    """
    model: FittedModel
    X: NDArray[np.floating[Any]]
    index: Any
    level: float | None
    nan_policy: str

    @classmethod
    def build(
        cls,
        model: Any,
        new_data: Any,
        *,
        level: Any = None,
        nan_policy: str = 'propagate',
    ) -> PredictionDesign:
        """
        Validate a model and a covariate table.

        Args:
            model: Must satisfy the FittedModel protocol.
            new_data: pandas DataFrame, mapping of column name -> 1-D array,
                or 2-D array-like with one column per feature.
            level: Confidence level in (0, 1), or None.
            nan_policy: 'propagate' or 'raise'.

        Returns:
            PredictionDesign ready for a backend

        Raises:
            InvalidArgument: Bad model handle, level, option or covariates.
            DimensionError: Covariate table with the wrong shape.
        """
        if not isinstance(model, FittedModel):
            raise InvalidArgument(
                f"model: expected a fitted model exposing feature_names, link_function, "
                f"inverse_link_function and predict_link; got {type(model).__name__}"
            )
        if level is not None:
            level = check_level(level)
        check_choice(nan_policy, NAN_POLICIES, 'nan_policy')

        feature_names = tuple(model.feature_names)
        X, index = _covariate_matrix(new_data, feature_names)

        return cls(
            model=model,
            X=X,
            index=index,
            level=level,
            nan_policy=nan_policy,
        )

    @property
    def n(self) -> int:
        """Number of covariate rows."""
        return self.X.shape[0]

    @property
    def p(self) -> int:
        """Number of covariates."""
        return self.X.shape[1]


def _covariate_matrix(
    new_data: Any, feature_names: tuple[str, ...]
) -> tuple[NDArray[np.floating[Any]], Any]:
    """Turn a table-like input into an (n, p) float matrix plus its row index."""
    p = len(feature_names)
    index = None

    if isinstance(new_data, pd.DataFrame):
        missing = [c for c in feature_names if c not in new_data.columns]
        if missing:
            raise InvalidArgument(
                f"new_data: missing columns {missing}; model expects {list(feature_names)}"
            )
        index = new_data.index
        if len(new_data) == 0:
            X = np.empty((0, p), dtype=np.float64)
        else:
            X = check_array(new_data.loc[:, list(feature_names)].to_numpy(), 'new_data')
    elif isinstance(new_data, Mapping):
        missing = [c for c in feature_names if c not in new_data]
        if missing:
            raise InvalidArgument(
                f"new_data: missing columns {missing}; model expects {list(feature_names)}"
            )
        columns = []
        for name in feature_names:
            col = check_array(new_data[name], f'new_data[{name!r}]')
            col = col.reshape(-1) if col.ndim == 0 else col
            check_ndim(col, 1, f'new_data[{name!r}]')
            columns.append(col)
        if columns:
            check_consistent_length(
                *columns, names=tuple(f'new_data[{n!r}]' for n in feature_names)
            )
            X = np.column_stack(columns)
        else:
            X = np.empty((0, 0), dtype=np.float64)
    else:
        X = check_array(new_data, 'new_data')
        if X.ndim == 1:
            if X.size == 0:
                X = X.reshape(0, p)
            elif p == 1:
                X = X.reshape(-1, 1)
            elif X.shape[0] == p:
                X = X.reshape(1, p)
        check_ndim(X, 2, 'new_data')
        if X.shape[1] != p:
            raise DimensionError(
                f"new_data: expected {p} columns {list(feature_names)}, got {X.shape[1]}"
            )

    # copy so the design never aliases the caller's array
    X = np.array(X, dtype=np.float64)
    check_finite(X, 'new_data')
    return X, index