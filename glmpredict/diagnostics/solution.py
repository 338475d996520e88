"""
Deviance summary for a fitted GLM.

DevianceSummary holds the footer of R's summary.glm (dispersion, null
and residual deviance, AIC) plus the chi-square tests usually read off
those numbers.
"""

from __future__ import annotations

from dataclasses import dataclass
import numpy as np
from scipy import stats as sp_stats


@dataclass(frozen=True)
class DevianceSummary:
    """
    Goodness-of-fit quantities for a GLM.

    Attributes:
        family_name: Family of the fit
        link_name: Link of the fit
        n_obs: Number of observations
        rank: Number of estimated coefficients
        null_deviance: Deviance of the intercept-only (or empty) model
        df_null: n - intercept
        deviance: Residual deviance of the fit
        df_residual: n - rank
        dispersion: φ (1 for fixed-dispersion families, Pearson estimate otherwise)
        dispersion_is_fixed: Whether φ was taken as known
        aic: Akaike information criterion (NaN for quasi families)
    """
    family_name: str
    link_name: str
    n_obs: int
    rank: int
    null_deviance: float
    df_null: int
    deviance: float
    df_residual: int
    dispersion: float
    dispersion_is_fixed: bool
    aic: float

    @property
    def overdispersion_ratio(self) -> float:
        """Residual deviance per residual degree of freedom.

        Well above 1 for a Poisson or binomial fit suggests overdispersion.
        """
        if self.df_residual <= 0:
            return float('nan')
        return self.deviance / self.df_residual

    @property
    def deviance_reduction(self) -> float:
        """Null deviance minus residual deviance."""
        return self.null_deviance - self.deviance

    @property
    def lr_p_value(self) -> float:
        """
        Likelihood-ratio test of the fit against the null model.

        χ² on (df_null - df_residual) degrees of freedom, applied to the
        deviance reduction scaled by the dispersion.
        """
        df = self.df_null - self.df_residual
        if df <= 0 or not np.isfinite(self.dispersion):
            return float('nan')
        return float(sp_stats.chi2.sf(self.deviance_reduction / self.dispersion, df))

    @property
    def gof_p_value(self) -> float:
        """
        Deviance goodness-of-fit test: P(χ²_df_residual > deviance / φ).

        Only meaningful for fixed-dispersion families with large expected counts.
        """
        if self.df_residual <= 0 or not np.isfinite(self.dispersion):
            return float('nan')
        return float(sp_stats.chi2.sf(self.deviance / self.dispersion, self.df_residual))

    def summary(self) -> str:
        """R-style summary.glm footer."""
        if self.dispersion_is_fixed:
            disp = f"(Dispersion parameter for {self.family_name} family taken to be {self.dispersion:g})"
        else:
            disp = f"(Dispersion parameter for {self.family_name} family taken to be {self.dispersion:.6g})"
        aic_str = "NA" if np.isnan(self.aic) else f"{self.aic:.2f}"
        return "\n".join([
            disp,
            "",
            f"    Null deviance: {self.null_deviance:10.3f}  on {self.df_null}  degrees of freedom",
            f"Residual deviance: {self.deviance:10.3f}  on {self.df_residual}  degrees of freedom",
            f"AIC: {aic_str}",
        ])

    def __repr__(self) -> str:
        return (
            f"DevianceSummary(family={self.family_name!r}, deviance={self.deviance:.4f}, "
            f"df_residual={self.df_residual}, aic={self.aic:.4f})"
        )
