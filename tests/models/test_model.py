"""
GLMModel handle tests.

Tests construction and validation, the FittedModel protocol surface,
and the link-scale prediction query.
"""

from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from glmpredict import GLMModel, FittedModel
from glmpredict.core.exceptions import DimensionError, InvalidArgument, NumericalError
from glmpredict.models.families import Gamma, LogLink


# =====================================================================
# Construction
# =====================================================================

class TestBuild:

    def test_defaults(self):
        model = GLMModel.build([1.0, 2.0, 3.0], np.eye(3) * 0.1)
        assert model.family.name == 'poisson'
        assert model.link.name == 'log'
        assert model.feature_names == ('x0', 'x1')
        assert model.intercept is True
        assert model.n_features == 2
        assert model.dispersion == 1.0
        assert model.df_residual is None

    def test_estimated_dispersion_defaults_to_nan(self):
        model = GLMModel.build([1.0, 0.5], np.eye(2), family='gamma')
        assert np.isnan(model.dispersion)

    def test_explicit_dispersion_and_df(self):
        model = GLMModel.build(
            [1.0, 0.5], np.eye(2), family='gaussian', dispersion=2.5, df_residual=40,
        )
        assert model.dispersion == 2.5
        assert model.df_residual == 40

    def test_no_intercept(self):
        model = GLMModel.build([0.3, 0.7], np.eye(2), intercept=False, feature_names=['a', 'b'])
        assert model.feature_names == ('a', 'b')
        assert model.intercept is False

    def test_link_override(self):
        model = GLMModel.build([0.0, 1.0], np.eye(2), family='binomial', link='probit')
        assert model.link.name == 'probit'

    def test_family_instance(self):
        model = GLMModel.build([0.0, 1.0], np.eye(2), family=Gamma(LogLink()))
        assert model.family.name == 'gamma'
        assert model.link.name == 'log'

    def test_vcov_shape_mismatch(self):
        with pytest.raises(DimensionError, match="vcov"):
            GLMModel.build([1.0, 2.0], np.eye(3))

    def test_feature_names_length_mismatch(self):
        with pytest.raises(DimensionError, match="feature_names"):
            GLMModel.build([1.0, 2.0], np.eye(2), feature_names=['a', 'b'])

    def test_duplicate_feature_names(self):
        with pytest.raises(InvalidArgument, match="duplicate"):
            GLMModel.build([1.0, 2.0, 3.0], np.eye(3), feature_names=['a', 'a'])

    def test_string_feature_names_rejected(self):
        with pytest.raises(InvalidArgument, match="not a string"):
            GLMModel.build([1.0, 2.0], np.eye(2), feature_names='x')

    def test_nonfinite_coefficients(self):
        with pytest.raises(InvalidArgument, match="coefficients"):
            GLMModel.build([1.0, np.nan], np.eye(2))

    def test_intercept_needs_a_coefficient(self):
        with pytest.raises(DimensionError, match="intercept"):
            GLMModel.build(np.zeros(0), np.zeros((0, 0)))

    def test_unknown_family(self):
        with pytest.raises(InvalidArgument, match="Unknown family"):
            GLMModel.build([1.0, 2.0], np.eye(2), family='tweedie')

    def test_frozen(self, poisson_model):
        with pytest.raises(FrozenInstanceError):
            poisson_model._intercept = False

    def test_repr(self, poisson_model):
        r = repr(poisson_model)
        assert "poisson" in r
        assert "'x'" in r

    def test_from_statsmodels_rejects_other_objects(self):
        with pytest.raises(InvalidArgument, match="GLMResults"):
            GLMModel.from_statsmodels(object())


# =====================================================================
# FittedModel protocol
# =====================================================================

class TestProtocol:

    def test_satisfies_fitted_model(self, poisson_model):
        assert isinstance(poisson_model, FittedModel)

    def test_link_functions(self, poisson_model):
        g = poisson_model.link_function()
        ginv = poisson_model.inverse_link_function()
        mu = np.array([0.5, 1.0, 4.0])
        np.testing.assert_allclose(ginv(g(mu)), mu)

    def test_mu_eta(self, logit_model):
        eta = np.array([-1.0, 0.0, 2.0])
        p = 1.0 / (1.0 + np.exp(-eta))
        np.testing.assert_allclose(logit_model.mu_eta(eta), p * (1 - p))


class TestPredictLink:

    def test_matches_explicit_quadratic_form(self, logit_model, rng):
        X = rng.standard_normal((6, 2))
        fit, se = logit_model.predict_link(X)

        X_full = np.column_stack([np.ones(6), X])
        np.testing.assert_allclose(fit, X_full @ logit_model.coefficients)
        expected_var = np.diag(X_full @ logit_model.vcov @ X_full.T)
        np.testing.assert_allclose(se, np.sqrt(expected_var))

    def test_no_intercept(self):
        model = GLMModel.build(
            [2.0, -1.0], [[0.5, 0.1], [0.1, 0.2]],
            family='gaussian', intercept=False, feature_names=['a', 'b'],
        )
        fit, se = model.predict_link(np.array([[1.0, 1.0]]))
        assert fit[0] == pytest.approx(1.0)
        assert se[0] == pytest.approx(np.sqrt(0.5 + 0.2 + 2 * 0.1))

    def test_intercept_only_row(self, poisson_model):
        fit, se = poisson_model.predict_link(np.array([[0.0]]))
        assert fit[0] == pytest.approx(0.5)
        assert se[0] == pytest.approx(0.2)

    def test_wrong_column_count(self, poisson_model):
        with pytest.raises(DimensionError, match="expected 1 columns"):
            poisson_model.predict_link(np.ones((3, 2)))

    def test_negative_variance_raises(self):
        model = GLMModel.build([0.0, 1.0], [[1.0, 0.0], [0.0, -1.0]], family='gaussian')
        with pytest.raises(NumericalError) as exc_info:
            model.predict_link(np.array([[2.0]]))
        assert exc_info.value.quantity == 'prediction variance'
        assert exc_info.value.value == pytest.approx(-3.0)

    def test_rounding_negative_variance_clipped(self):
        eps = 1e-14
        model = GLMModel.build([0.0, 1.0], [[1.0, -1.0], [-1.0, 1.0 - eps]], family='gaussian')
        _, se = model.predict_link(np.array([[1.0]]))
        assert se[0] == 0.0

    def test_nan_vcov_gives_nan_se(self):
        model = GLMModel.build([0.0, 1.0], [[np.nan, 0.0], [0.0, 0.1]], family='poisson')
        fit, se = model.predict_link(np.array([[1.0], [2.0]]))
        assert np.all(np.isfinite(fit))
        assert np.all(np.isnan(se))
