"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from glmpredict import GLMModel


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def poisson_model():
    """Poisson/log model with one covariate and a diagonal vcov."""
    return GLMModel.build(
        [0.5, 0.3],
        [[0.04, 0.0], [0.0, 0.01]],
        family='poisson',
        feature_names=['x'],
    )


@pytest.fixture
def logit_model():
    """Binomial/logit model with two covariates and correlated estimates."""
    return GLMModel.build(
        [-0.4, 1.2, -0.7],
        [[0.09, -0.01, 0.005],
         [-0.01, 0.04, -0.002],
         [0.005, -0.002, 0.025]],
        family='binomial',
        feature_names=['age', 'dose'],
    )


@pytest.fixture
def gamma_model():
    """Gamma model with the canonical (decreasing) inverse link."""
    return GLMModel.build(
        [0.5, 0.1],
        [[0.0025, 0.0], [0.0, 0.0004]],
        family='gamma',
        feature_names=['x'],
        dispersion=0.2,
    )


class StubModel:
    """
    Minimal FittedModel that returns fixed link-scale predictions.

    Used to pin exact (fit, se) values and to simulate failing queries.
    """

    def __init__(self, fit, se, link='log', feature_names=('x',), error=None):
        self._fit = np.asarray(fit, dtype=float)
        self._se = np.asarray(se, dtype=float)
        self._link = link
        self._feature_names = tuple(feature_names)
        self._error = error
        self.calls = 0

    @property
    def feature_names(self):
        return self._feature_names

    def link_function(self):
        return {'log': np.log, 'identity': lambda mu: mu}[self._link]

    def inverse_link_function(self):
        return {'log': np.exp, 'identity': lambda eta: eta}[self._link]

    def predict_link(self, X):
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._fit[: X.shape[0]], self._se[: X.shape[0]]


@pytest.fixture
def stub_model():
    """Factory for StubModel instances."""
    return StubModel
