"""
DevianceSummary tests, including agreement with statsmodels.
"""

import numpy as np
import pytest
from scipy import stats as sp_stats

from glmpredict.core.exceptions import InvalidArgument
from glmpredict.diagnostics import summarize, deviance, residuals, DevianceSummary


@pytest.fixture
def poisson_fit(rng):
    n = 80
    x = rng.uniform(0, 2, n)
    y = rng.poisson(np.exp(0.3 + 0.6 * x)).astype(float)
    # Fitted means of a plausible model (not the MLE)
    mu = np.exp(0.35 + 0.55 * x)
    return y, mu


class TestSummarize:

    def test_fields(self, poisson_fit):
        y, mu = poisson_fit
        s = summarize(y, mu, 'poisson', rank=2)

        assert isinstance(s, DevianceSummary)
        assert s.family_name == 'poisson'
        assert s.link_name == 'log'
        assert s.n_obs == 80
        assert s.df_null == 79
        assert s.df_residual == 78
        assert s.deviance == pytest.approx(deviance(y, mu, 'poisson'))
        assert s.dispersion == 1.0
        assert s.dispersion_is_fixed

    def test_no_intercept(self, poisson_fit):
        y, mu = poisson_fit
        s = summarize(y, mu, 'poisson', rank=2, intercept=False)
        assert s.df_null == 80

    def test_overdispersion_ratio(self, poisson_fit):
        y, mu = poisson_fit
        s = summarize(y, mu, 'poisson', rank=2)
        assert s.overdispersion_ratio == pytest.approx(s.deviance / 78)

    def test_p_values(self, poisson_fit):
        y, mu = poisson_fit
        s = summarize(y, mu, 'poisson', rank=2)
        assert s.gof_p_value == pytest.approx(sp_stats.chi2.sf(s.deviance, 78))
        assert s.lr_p_value == pytest.approx(sp_stats.chi2.sf(s.null_deviance - s.deviance, 1))
        # x has a strong effect
        assert s.lr_p_value < 0.01

    def test_estimated_dispersion(self, poisson_fit):
        y, mu = poisson_fit
        s = summarize(y, mu, 'quasipoisson', rank=2)
        assert not s.dispersion_is_fixed
        assert s.dispersion == pytest.approx(np.sum((y - mu) ** 2 / mu) / 78)
        assert np.isnan(s.aic)

    def test_saturated_has_nan_ratios(self):
        y = np.array([1.0, 2.0])
        s = summarize(y, y, 'poisson', rank=2)
        assert s.df_residual == 0
        assert np.isnan(s.overdispersion_ratio)
        assert np.isnan(s.gof_p_value)

    @pytest.mark.parametrize("rank", [-1, 81, 1.5, True])
    def test_invalid_rank(self, poisson_fit, rank):
        y, mu = poisson_fit
        with pytest.raises(InvalidArgument, match="rank"):
            summarize(y, mu, 'poisson', rank=rank)

    def test_summary_text(self, poisson_fit):
        y, mu = poisson_fit
        text = summarize(y, mu, 'poisson', rank=2).summary()
        assert "Dispersion parameter for poisson family taken to be 1" in text
        assert "Null deviance:" in text
        assert "on 79  degrees of freedom" in text
        assert "Residual deviance:" in text
        assert "AIC:" in text

    def test_summary_text_quasi(self, poisson_fit):
        y, mu = poisson_fit
        assert "AIC: NA" in summarize(y, mu, 'quasipoisson', rank=2).summary()


class TestAgainstStatsmodels:

    @pytest.fixture
    def sm(self):
        return pytest.importorskip("statsmodels.api")

    def test_poisson(self, sm, rng):
        n = 120
        x = rng.standard_normal((n, 2))
        y = rng.poisson(np.exp(0.4 + x @ np.array([0.3, -0.5])))
        res = sm.GLM(y, sm.add_constant(x), family=sm.families.Poisson()).fit()

        s = summarize(y, res.fittedvalues, 'poisson', rank=3)
        assert s.deviance == pytest.approx(res.deviance, rel=1e-8)
        assert s.null_deviance == pytest.approx(res.null_deviance, rel=1e-6)
        assert s.aic == pytest.approx(res.aic, rel=1e-8)
        assert s.df_residual == int(res.df_resid)

        np.testing.assert_allclose(
            residuals(y, res.fittedvalues, 'poisson'), res.resid_deviance, rtol=1e-8
        )
        np.testing.assert_allclose(
            residuals(y, res.fittedvalues, 'poisson', type='pearson'),
            res.resid_pearson, rtol=1e-8,
        )
        np.testing.assert_allclose(
            residuals(y, res.fittedvalues, 'poisson', type='working'),
            res.resid_working, rtol=1e-8,
        )

    def test_gamma_dispersion(self, sm, rng):
        n = 100
        x = rng.uniform(0, 2, n)
        y = rng.gamma(shape=4.0, scale=np.exp(0.5 + 0.3 * x) / 4.0)
        family = sm.families.Gamma(link=sm.families.links.Log())
        res = sm.GLM(y, sm.add_constant(x), family=family).fit()

        s = summarize(y, res.fittedvalues, 'gamma', rank=2)
        assert s.dispersion == pytest.approx(res.scale, rel=1e-8)
        assert s.deviance == pytest.approx(res.deviance, rel=1e-8)
