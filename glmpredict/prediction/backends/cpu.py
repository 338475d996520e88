"""
CPU backends for GLM predictions.

CPUWaldBackend builds Wald intervals on the link scale and maps them to
the response scale through the inverse link:

    η ± z·se(η)  →  [g⁻¹(η - z·se), g⁻¹(η + z·se)]

which is what R users get from predict(type = "link", se.fit = TRUE)
followed by linkinv. The resulting interval is asymmetric around g⁻¹(η)
for non-identity links and always stays inside the response domain.
Where the inverse link is only monotone on part of the link scale
(sqrt, inverse, inverse_squared) the link-scale interval is cut at the
domain boundary first, so lwr <= fit <= upr holds for every row.

CPUPredictBackend returns point predictions on either scale, with
delta-method standard errors on the response scale.
"""

from typing import Any
import numpy as np
from numpy.typing import NDArray

from glmpredict.core.exceptions import PredictionFailed
from glmpredict.core.result import Result
from glmpredict.models.families import Link
from glmpredict.core.compute.timing import Timer
from glmpredict.prediction.design import PredictionDesign
from glmpredict.prediction.solution import IntervalParams, PredictionParams
from glmpredict.prediction._common import critical_value, query_link


class CPUWaldBackend:
    """
    CPU backend for response-scale Wald confidence intervals.

    Stateless: all inputs arrive through the design.
    """

    @property
    def name(self) -> str:
        return 'cpu_wald'

    def solve(self, design: PredictionDesign) -> Result[IntervalParams]:
        """
        Compute (fit, lwr, upr) for every row of the design.

        Algorithm:
            1. η, se = model.predict_link(X)
            2. z = Φ⁻¹(1 - (1 - level)/2)
            3. η_lo = η - z·se, η_hi = η + z·se
            4. Apply g⁻¹ to η, η_lo, η_hi
            5. Order the bounds so lwr ≤ upr for decreasing links too,
               cutting intervals that leave the link's domain

        Raises:
            PredictionFailed: If the model's query fails, or a fit lies
                outside the domain of the model's link
        """
        timer = Timer()
        timer.start()

        level = design.level if design.level is not None else 0.95
        z = critical_value(level)

        with timer.section('query'):
            eta, se, warnings_list = query_link(design)

        with timer.section('bounds'):
            eta_lo = eta - z * se
            eta_hi = eta + z * se

        with timer.section('transform'):
            link = _model_link(design.model)
            _check_domain(link, eta, design.n)
            fit = _apply(design.model.inverse_link_function(), eta)
            if link is not None:
                lwr, upr, clamped = link.linkinv_interval(eta_lo, eta_hi, eta)
            else:
                b1 = _apply(design.model.inverse_link_function(), eta_lo)
                b2 = _apply(design.model.inverse_link_function(), eta_hi)
                # np.minimum keeps NaN, so undefined rows stay undefined
                lwr, upr = np.minimum(b1, b2), np.maximum(b1, b2)
                clamped = np.zeros(design.n, dtype=bool)
            lwr = np.asarray(lwr, dtype=np.float64)
            upr = np.asarray(upr, dtype=np.float64)

        n_clamped = int(np.sum(clamped))
        if n_clamped:
            warnings_list.append(
                f"link-scale interval leaves the domain of the {link.name} link "
                f"for {n_clamped} of {design.n} row(s); bounds cut at the boundary"
            )

        timer.stop()

        params = IntervalParams(
            fit=fit,
            lwr=lwr,
            upr=upr,
            link_fit=eta,
            link_se=se,
            link_lwr=eta_lo,
            link_upr=eta_hi,
            level=level,
            critical_value=z,
        )

        info: dict[str, Any] = {
            'method': 'wald_link',
            'level': level,
            'critical_value': z,
            'n_rows': design.n,
            'n_undefined_se': int(np.sum(np.isnan(se))),
            'n_clamped': n_clamped,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )


class CPUPredictBackend:
    """
    CPU backend for point predictions on the link or response scale.
    """

    def __init__(self, type: str = 'link', se_fit: bool = True):
        self._type = type
        self._se_fit = se_fit

    @property
    def name(self) -> str:
        return 'cpu_predict'

    def solve(self, design: PredictionDesign) -> Result[PredictionParams]:
        """
        Predict on the requested scale.

        Response-scale standard errors use the delta method:
            se(μ) = |dμ/dη| · se(η)

        Raises:
            PredictionFailed: If the model's query fails, or a response-scale
                fit lies outside the domain of the model's link
        """
        timer = Timer()
        timer.start()

        with timer.section('query'):
            eta, se, warnings_list = query_link(design, check_se=self._se_fit)

        with timer.section('transform'):
            if self._type == 'response':
                _check_domain(_model_link(design.model), eta, design.n)
                fit = _apply(design.model.inverse_link_function(), eta)
                se_out = np.abs(_mu_eta(design.model, eta)) * se
            else:
                fit = eta
                se_out = se

        timer.stop()

        params = PredictionParams(
            fit=fit,
            se_fit=se_out if self._se_fit else None,
            type=self._type,
        )

        return Result(
            params=params,
            info={
                'method': 'delta' if self._type == 'response' else 'linear_predictor',
                'type': self._type,
                'n_rows': design.n,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )


def _apply(fn, values: NDArray) -> NDArray[np.floating[Any]]:
    """Apply a link-type function elementwise and return a float array."""
    if values.size == 0:
        return np.empty(0, dtype=np.float64)
    return np.asarray(fn(values), dtype=np.float64).reshape(values.shape)


def _mu_eta(model: Any, eta: NDArray) -> NDArray[np.floating[Any]]:
    """
    dμ/dη for the delta method.

    Uses the model's analytic derivative when it has one, otherwise a
    central finite difference of the inverse link.
    """
    if eta.size == 0:
        return np.empty(0, dtype=np.float64)
    mu_eta = getattr(model, 'mu_eta', None)
    if callable(mu_eta):
        return np.asarray(mu_eta(eta), dtype=np.float64).reshape(eta.shape)
    linkinv = model.inverse_link_function()
    h = 1e-6 * np.maximum(1.0, np.abs(eta))
    return (_apply(linkinv, eta + h) - _apply(linkinv, eta - h)) / (2.0 * h)


def _model_link(model: Any) -> Link | None:
    """The model's Link object, when it exposes one."""
    link = getattr(model, 'link', None)
    return link if isinstance(link, Link) else None


def _check_domain(link: Link | None, eta: NDArray, n: int) -> None:
    """Raise PredictionFailed when a link-scale fit has no inverse-link image."""
    if link is not None and not link.valideta(eta):
        raise PredictionFailed(
            f"model returned link-scale prediction(s) outside the domain of "
            f"the {link.name} link",
            n_rows=n,
        )
