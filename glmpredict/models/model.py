"""
Fitted-model handle.

GLMModel holds what a prediction needs from a GLM fitted elsewhere:
coefficients, their covariance matrix, the family/link, and the
covariate schema. It never fits anything.

Construction:
    GLMModel.build(coef, vcov, family='poisson', feature_names=['x'])
    GLMModel.from_statsmodels(sm.GLM(y, X, family=...).fit())
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence
import numpy as np
from numpy.typing import ArrayLike, NDArray

from glmpredict.core.exceptions import InvalidArgument, DimensionError, NumericalError
from glmpredict.core.protocols import ArrayFunction
from glmpredict.core.validation import check_array, check_1d, check_2d, check_finite
from glmpredict.models.families import Family, Link, resolve_family

# Tolerance below which a negative prediction variance counts as rounding
_NEG_VAR_RTOL = 1e-10

_INTERCEPT_NAMES = ('const', 'Intercept', '(Intercept)')

# statsmodels class names → closed enumeration
_SM_LINKS = {
    'identity': 'identity',
    'log': 'log',
    'logit': 'logit',
    'probit': 'probit',
    'cloglog': 'cloglog',
    'inversepower': 'inverse',
    'inverse_power': 'inverse',
    'sqrt': 'sqrt',
    'inversesquared': 'inverse_squared',
    'inverse_squared': 'inverse_squared',
}

_SM_FAMILIES = {
    'gaussian': 'gaussian',
    'binomial': 'binomial',
    'poisson': 'poisson',
    'gamma': 'gamma',
    'inversegaussian': 'inverse_gaussian',
}


@dataclass(frozen=True)
class GLMModel:
    """
    Immutable handle to a fitted generalized linear model.

    Satisfies the FittedModel protocol. Coefficients are ordered with the
    intercept first (when present), then one per feature in
    feature_names order.
    """
    _coefficients: NDArray[np.floating[Any]]
    _vcov: NDArray[np.floating[Any]]
    _family: Family
    _feature_names: tuple[str, ...]
    _intercept: bool
    _dispersion: float
    _df_residual: int | None = None

    @classmethod
    def build(
        cls,
        coefficients: ArrayLike,
        vcov: ArrayLike,
        family: str | Family = 'poisson',
        *,
        link: str | Link | None = None,
        feature_names: Sequence[str] | None = None,
        intercept: bool = True,
        dispersion: float | None = None,
        df_residual: int | None = None,
    ) -> GLMModel:
        """
        Build a model handle with validation.

        Args:
            coefficients: Estimated coefficients (k,), intercept first.
            vcov: Covariance matrix of the coefficients (k, k), already
                scaled by the dispersion. NaN entries are allowed and
                produce NaN standard errors.
            family: Family name or instance.
            link: Optional link override, resolved here once.
            feature_names: Covariate names. Defaults to x0..x{p-1}.
            intercept: Whether coefficients[0] is an intercept.
            dispersion: Dispersion φ. Defaults to 1.0 for fixed-dispersion
                families, NaN otherwise.
            df_residual: Residual degrees of freedom, if known.

        Returns:
            Validated GLMModel

        Raises:
            InvalidArgument: On bad family/link names or non-finite coefficients.
            DimensionError: On shape mismatches.
        """
        coef = check_array(coefficients, 'coefficients').astype(np.float64)
        check_1d(coef, 'coefficients')
        check_finite(coef, 'coefficients')

        V = check_array(vcov, 'vcov').astype(np.float64)
        check_2d(V, 'vcov')
        k = coef.shape[0]
        if V.shape != (k, k):
            raise DimensionError(
                f"vcov: expected shape ({k}, {k}) to match coefficients, got {V.shape}"
            )

        p = k - 1 if intercept else k
        if p < 0:
            raise DimensionError("coefficients: intercept=True requires at least one coefficient")

        if feature_names is None:
            names = tuple(f'x{i}' for i in range(p))
        else:
            if isinstance(feature_names, str):
                raise InvalidArgument("feature_names must be a sequence of names, not a string")
            names = tuple(str(n) for n in feature_names)
            if len(names) != p:
                raise DimensionError(
                    f"feature_names: expected {p} names for {k} coefficients "
                    f"(intercept={intercept}), got {len(names)}"
                )
            if len(set(names)) != len(names):
                raise InvalidArgument(f"feature_names: duplicate names in {list(names)}")

        fam = resolve_family(family, link)

        if dispersion is None:
            dispersion = 1.0 if fam.dispersion_is_fixed else float('nan')

        return cls(
            _coefficients=coef,
            _vcov=V,
            _family=fam,
            _feature_names=names,
            _intercept=bool(intercept),
            _dispersion=float(dispersion),
            _df_residual=df_residual,
        )

    @classmethod
    def from_statsmodels(cls, results: Any) -> GLMModel:
        """
        Adapt a statsmodels GLMResults object.

        Reads params, cov_params(), the exog names, family, link, scale
        and df_resid. A leading 'const' / 'Intercept' column becomes the
        intercept and is dropped from feature_names.

        Raises:
            InvalidArgument: If results does not look like a GLM fit, or
                its family/link is outside the supported set.
        """
        try:
            sm_model = results.model
            params = np.asarray(results.params, dtype=np.float64)
            vcov = np.asarray(results.cov_params(), dtype=np.float64)
            sm_family = sm_model.family
        except AttributeError as e:
            raise InvalidArgument(
                f"results: expected a statsmodels GLMResults, got {type(results).__name__}"
            ) from e

        family_key = type(sm_family).__name__.lower()
        link_key = type(sm_family.link).__name__.lower()
        if family_key not in _SM_FAMILIES:
            raise InvalidArgument(f"Unsupported statsmodels family: {type(sm_family).__name__}")
        if link_key not in _SM_LINKS:
            raise InvalidArgument(f"Unsupported statsmodels link: {type(sm_family.link).__name__}")

        exog_names = list(getattr(sm_model, 'exog_names', None) or
                          [f'x{i}' for i in range(params.shape[0])])
        intercept = bool(exog_names) and exog_names[0] in _INTERCEPT_NAMES
        feature_names = exog_names[1:] if intercept else exog_names

        df_resid = getattr(results, 'df_resid', None)

        return cls.build(
            params,
            vcov,
            _SM_FAMILIES[family_key],
            link=_SM_LINKS[link_key],
            feature_names=feature_names,
            intercept=intercept,
            dispersion=float(results.scale),
            df_residual=int(round(df_resid)) if df_resid is not None else None,
        )

    # === Properties ===

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._coefficients

    @property
    def vcov(self) -> NDArray[np.floating[Any]]:
        return self._vcov

    @property
    def family(self) -> Family:
        return self._family

    @property
    def link(self) -> Link:
        return self._family.link

    @property
    def feature_names(self) -> tuple[str, ...]:
        return self._feature_names

    @property
    def intercept(self) -> bool:
        return self._intercept

    @property
    def dispersion(self) -> float:
        return self._dispersion

    @property
    def df_residual(self) -> int | None:
        return self._df_residual

    @property
    def n_features(self) -> int:
        return len(self._feature_names)

    # === FittedModel protocol ===

    def link_function(self) -> ArrayFunction:
        return self._family.link.link

    def inverse_link_function(self) -> ArrayFunction:
        return self._family.link.linkinv

    def mu_eta(self, eta: NDArray) -> NDArray:
        """dμ/dη at eta, for delta-method standard errors."""
        return self._family.link.mu_eta(eta)

    def predict_link(
        self, X: NDArray[np.floating[Any]]
    ) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
        """
        Linear predictor and its standard error.

        fit = X̃β and se = sqrt(diag(X̃ V X̃ᵀ)), where X̃ is X with a
        leading column of ones when the model has an intercept. The
        diagonal is computed row-wise without forming the n x n matrix.

        Raises:
            DimensionError: If X does not have n_features columns.
            NumericalError: If vcov yields a clearly negative variance.
        """
        X = np.asarray(X, dtype=np.float64)
        check_2d(X, 'X')
        if X.shape[1] != self.n_features:
            raise DimensionError(
                f"X: expected {self.n_features} columns {list(self._feature_names)}, "
                f"got {X.shape[1]}"
            )

        if self._intercept:
            X_full = np.column_stack([np.ones(X.shape[0]), X])
        else:
            X_full = X

        fit = X_full @ self._coefficients
        var = np.einsum('ij,jk,ik->i', X_full, self._vcov, X_full)

        # Rounding can push a zero variance slightly negative
        scale = np.einsum('ij,j,ij->i', X_full, np.abs(np.diag(self._vcov)), X_full)
        bad = var < -_NEG_VAR_RTOL * np.maximum(scale, 1.0)
        if np.any(bad):
            worst = float(np.nanmin(var))
            raise NumericalError(
                f"vcov is not positive semi-definite: {int(np.sum(bad))} row(s) "
                f"have negative prediction variance (min {worst:.3e})",
                quantity='prediction variance',
                value=worst,
            )
        se = np.sqrt(np.where(var < 0, 0.0, var))
        return fit, se

    def __repr__(self) -> str:
        return (
            f"GLMModel(family={self._family.name!r}, link={self.link.name!r}, "
            f"features={list(self._feature_names)}, intercept={self._intercept})"
        )
