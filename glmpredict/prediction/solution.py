"""
Prediction solution types.

Contains the parameter payloads produced by backends and the
user-facing solution wrappers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
import pandas as pd
from numpy.typing import NDArray

from glmpredict.core.result import Result

if TYPE_CHECKING:
    from glmpredict.prediction.design import PredictionDesign


@dataclass(frozen=True)
class IntervalParams:
    """
    Parameter payload for response-scale confidence intervals.

    All arrays have shape (n,), in input row order.
    """
    fit: NDArray[np.floating[Any]]        # g⁻¹(η)
    lwr: NDArray[np.floating[Any]]        # lower bound, response scale
    upr: NDArray[np.floating[Any]]        # upper bound, response scale
    link_fit: NDArray[np.floating[Any]]   # η
    link_se: NDArray[np.floating[Any]]    # se(η)
    link_lwr: NDArray[np.floating[Any]]   # η - z·se
    link_upr: NDArray[np.floating[Any]]   # η + z·se
    level: float
    critical_value: float


@dataclass(frozen=True)
class PredictionParams:
    """Parameter payload for point predictions on one scale."""
    fit: NDArray[np.floating[Any]]
    se_fit: NDArray[np.floating[Any]] | None
    type: str                              # 'link' | 'response'


def _frame_index(design: 'PredictionDesign', n: int) -> pd.Index:
    if design.index is not None:
        return design.index
    return pd.RangeIndex(n)


def _fmt_bound(value: float) -> str:
    # R prints missing bounds as NA; infinite bounds print as inf
    if np.isnan(value):
        return f"{'NA':>14}"
    return f"{value:14.6f}"


@dataclass
class IntervalSolution:
    """
    User-facing confidence interval results.

    One (fit, lwr, upr) triple per input row, on the response scale,
    plus the link-scale quantities they were built from.
    """
    _result: Result[IntervalParams]
    _design: 'PredictionDesign'

    @property
    def fit(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fit

    @property
    def lwr(self) -> NDArray[np.floating[Any]]:
        return self._result.params.lwr

    @property
    def upr(self) -> NDArray[np.floating[Any]]:
        return self._result.params.upr

    @property
    def link_fit(self) -> NDArray[np.floating[Any]]:
        return self._result.params.link_fit

    @property
    def link_se(self) -> NDArray[np.floating[Any]]:
        return self._result.params.link_se

    @property
    def link_lwr(self) -> NDArray[np.floating[Any]]:
        return self._result.params.link_lwr

    @property
    def link_upr(self) -> NDArray[np.floating[Any]]:
        return self._result.params.link_upr

    @property
    def level(self) -> float:
        return self._result.params.level

    @property
    def critical_value(self) -> float:
        return self._result.params.critical_value

    @property
    def n_rows(self) -> int:
        return len(self._result.params.fit)

    def __len__(self) -> int:
        return self.n_rows

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def to_frame(self) -> pd.DataFrame:
        """Table with columns fit, lwr, upr; one row per input row."""
        return pd.DataFrame(
            {'fit': self.fit, 'lwr': self.lwr, 'upr': self.upr},
            index=_frame_index(self._design, self.n_rows),
        )

    def summary(self) -> str:
        """Tabular summary of the intervals."""
        pct = f"{self.level * 100:g}%"
        lines = [
            "GLM Prediction Intervals (response scale)",
            "=" * 60,
            f"Rows: {self.n_rows}",
            f"Confidence level: {pct} (z = {self.critical_value:.4f})",
            "",
            f"{'Row':<8} {'fit':>14} {'lwr':>14} {'upr':>14}",
            "-" * 60,
        ]
        labels = _frame_index(self._design, self.n_rows)
        for label, f, lo, hi in zip(labels, self.fit, self.lwr, self.upr):
            lines.append(
                f"{str(label):<8} {_fmt_bound(f)} {_fmt_bound(lo)} {_fmt_bound(hi)}"
            )
        lines.append("-" * 60)
        lines.append(f"Backend: {self.backend_name}")
        for w in self.warnings:
            lines.append(f"Warning: {w}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"IntervalSolution(n={self.n_rows}, level={self.level}, "
            f"z={self.critical_value:.4f})"
        )


@dataclass
class PredictionSolution:
    """
    User-facing point predictions, on the link or response scale.
    """
    _result: Result[PredictionParams]
    _design: 'PredictionDesign'

    @property
    def fit(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fit

    @property
    def se_fit(self) -> NDArray[np.floating[Any]] | None:
        return self._result.params.se_fit

    @property
    def type(self) -> str:
        return self._result.params.type

    @property
    def n_rows(self) -> int:
        return len(self._result.params.fit)

    def __len__(self) -> int:
        return self.n_rows

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def to_frame(self) -> pd.DataFrame:
        """Table with column fit, plus se_fit when computed."""
        data = {'fit': self.fit}
        if self.se_fit is not None:
            data['se_fit'] = self.se_fit
        return pd.DataFrame(data, index=_frame_index(self._design, self.n_rows))

    def summary(self) -> str:
        lines = [
            f"GLM Predictions ({self.type} scale)",
            "=" * 44,
            f"{'Row':<8} {'fit':>16} {'se_fit':>16}",
            "-" * 44,
        ]
        labels = _frame_index(self._design, self.n_rows)
        se = self.se_fit if self.se_fit is not None else [np.nan] * self.n_rows
        for label, f, s in zip(labels, self.fit, se):
            s_str = f"{s:16.6f}" if not np.isnan(s) else f"{'NA':>16}"
            lines.append(f"{str(label):<8} {f:16.6f} {s_str}")
        lines.append("-" * 44)
        lines.append(f"Backend: {self.backend_name}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"PredictionSolution(n={self.n_rows}, type={self.type!r})"
