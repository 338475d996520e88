"""
Point prediction tests.

Tests predict() on the link and response scales, delta-method
standard errors, and the solution interface.
"""

import warnings

import numpy as np
import pytest

from glmpredict import GLMModel, predict, InvalidArgument, PredictionFailed
from glmpredict.prediction import PredictionSolution


class TestLinkScale:

    def test_matches_model_query(self, logit_model, rng):
        X = rng.standard_normal((5, 2))
        pred = predict(logit_model, X)
        eta, se = logit_model.predict_link(X)

        assert pred.type == 'link'
        np.testing.assert_allclose(pred.fit, eta)
        np.testing.assert_allclose(pred.se_fit, se)
        assert pred.info['method'] == 'linear_predictor'


class TestResponseScale:

    def test_poisson_delta_method(self, poisson_model):
        x = np.array([0.0, 1.0, 2.0])
        pred = predict(poisson_model, {'x': x}, type='response')
        eta, se = poisson_model.predict_link(x.reshape(-1, 1))

        np.testing.assert_allclose(pred.fit, np.exp(eta))
        np.testing.assert_allclose(pred.se_fit, np.exp(eta) * se)
        assert pred.info['method'] == 'delta'

    def test_logit_delta_method(self, logit_model, rng):
        X = rng.standard_normal((4, 2))
        pred = predict(logit_model, X, type='response')
        eta, se = logit_model.predict_link(X)
        p = 1.0 / (1.0 + np.exp(-eta))

        np.testing.assert_allclose(pred.fit, p)
        np.testing.assert_allclose(pred.se_fit, p * (1 - p) * se)

    def test_decreasing_link_se_positive(self, gamma_model):
        pred = predict(gamma_model, {'x': [0.0, 1.0]}, type='response')
        assert np.all(pred.se_fit > 0)

    def test_finite_difference_without_mu_eta(self, stub_model):
        """A model without mu_eta gets a numerical derivative."""
        pred = predict(stub_model([2.0], [0.5]), {'x': [0.0]}, type='response')
        assert pred.fit[0] == pytest.approx(np.exp(2.0))
        assert pred.se_fit[0] == pytest.approx(np.exp(2.0) * 0.5, rel=1e-6)


class TestOptions:

    def test_se_fit_false(self, poisson_model):
        pred = predict(poisson_model, {'x': [1.0]}, se_fit=False)
        assert pred.se_fit is None
        assert list(pred.to_frame().columns) == ['fit']

    def test_invalid_type(self, poisson_model):
        with pytest.raises(InvalidArgument, match="type"):
            predict(poisson_model, {'x': [1.0]}, type='terms')

    def test_empty(self, stub_model):
        model = stub_model([], [])
        pred = predict(model, {'x': []}, type='response')
        assert len(pred) == 0
        assert model.calls == 0

    def test_nan_se_warns(self, stub_model):
        with pytest.warns(UserWarning, match="undefined"):
            pred = predict(stub_model([1.0], [np.nan]), {'x': [0.0]})
        assert np.isnan(pred.se_fit[0])
        assert pred.fit[0] == 1.0

    def test_nan_se_silent_without_se_fit(self, stub_model):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            pred = predict(stub_model([1.0], [np.nan]), {'x': [0.0]}, se_fit=False)
        assert pred.se_fit is None

    def test_nan_se_raise(self, stub_model):
        with pytest.raises(PredictionFailed):
            predict(stub_model([1.0], [np.nan]), {'x': [0.0]}, nan_policy='raise')

    def test_nan_se_raise_ignored_without_se_fit(self, stub_model):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            pred = predict(
                stub_model([1.0], [np.nan]), {'x': [0.0]},
                se_fit=False, nan_policy='raise',
            )
        assert pred.se_fit is None
        assert pred.fit[0] == 1.0

    def test_response_fit_outside_link_domain(self):
        model = GLMModel.build(
            [-0.5], [[0.01]], family='poisson', link='sqrt', feature_names=[],
        )
        with pytest.raises(PredictionFailed, match="sqrt link"):
            predict(model, np.empty((1, 0)), type='response')
        # the link scale has no domain to leave
        assert predict(model, np.empty((1, 0))).fit[0] == -0.5

    def test_query_failure(self, stub_model):
        with pytest.raises(PredictionFailed):
            predict(stub_model([1.0], [0.1], error=ValueError("x")), {'x': [0.0]})


class TestSolution:

    def test_interface(self, poisson_model):
        pred = predict(poisson_model, {'x': [1.0, 2.0]}, type='response')
        assert isinstance(pred, PredictionSolution)
        assert pred.backend_name == 'cpu_predict'
        assert pred.n_rows == 2
        assert list(pred.to_frame().columns) == ['fit', 'se_fit']
        assert repr(pred) == "PredictionSolution(n=2, type='response')"

    def test_summary_marks_missing_se(self, stub_model):
        with pytest.warns(UserWarning):
            pred = predict(stub_model([1.0, 2.0], [0.1, np.nan]), {'x': [0.0, 0.0]})
        s = pred.summary()
        assert "link scale" in s
        assert "NA" in s
