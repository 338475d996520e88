"""
GLM family and link function definitions.

Each Link defines:
- g(μ) → η  (link)
- g⁻¹(η) → μ  (inverse link)
- dμ/dη  (derivative of inverse link, for delta-method standard errors
  and working residuals)

Each Family defines:
- A variance function V(μ) relating variance to the mean
- A default link function
- Unit deviance d(y, μ), summed into the deviance
- A log-likelihood for AIC (NaN for quasi families)
- Whether the dispersion is fixed a priori

The set of supported links and families is closed: names are resolved
once, when a model handle is built, and never inside the estimators.

References:
    McCullagh, P., & Nelder, J. A. (1989). Generalized Linear Models (2nd ed.)
    R Core Team. stats::family, stats::make.link
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats
from scipy.special import gammaln

from glmpredict.core.exceptions import InvalidArgument

_EPS = np.finfo(np.float64).eps


# =====================================================================
# Link functions
# =====================================================================

class Link(ABC):
    """Abstract link function g(μ) mapping mean to linear predictor."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def link(self, mu: NDArray) -> NDArray:
        """g(μ) → η."""
        ...

    @abstractmethod
    def linkinv(self, eta: NDArray) -> NDArray:
        """g⁻¹(η) → μ."""
        ...

    @abstractmethod
    def mu_eta(self, eta: NDArray) -> NDArray:
        """dμ/dη = (g⁻¹)'(η)."""
        ...

    def valideta(self, eta: NDArray) -> bool:
        """Whether every η is inside the link's domain (R's make.link valideta)."""
        return bool(np.all(np.isfinite(eta)))

    def linkinv_interval(
        self, lo: NDArray, hi: NDArray, eta: NDArray
    ) -> tuple[NDArray, NDArray, NDArray]:
        """
        Map a link-scale interval [lo, hi] around η to the response scale.

        The bounds are ordered so lwr <= g⁻¹(η) <= upr for increasing and
        decreasing links alike. Links whose inverse is only monotone on
        part of the real line clamp the interval to the branch holding η.

        Returns:
            (lwr, upr, clamped), where clamped marks rows whose interval
            left the domain and was cut at its boundary
        """
        b1 = self.linkinv(lo)
        b2 = self.linkinv(hi)
        # np.minimum keeps NaN, so undefined rows stay undefined
        return np.minimum(b1, b2), np.maximum(b1, b2), np.zeros(np.shape(eta), dtype=bool)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class IdentityLink(Link):
    """Identity link: g(μ) = μ. Default for Gaussian family."""

    @property
    def name(self) -> str:
        return 'identity'

    def link(self, mu: NDArray) -> NDArray:
        return np.array(mu, dtype=np.float64, copy=True)

    def linkinv(self, eta: NDArray) -> NDArray:
        return np.array(eta, dtype=np.float64, copy=True)

    def mu_eta(self, eta: NDArray) -> NDArray:
        return np.ones_like(eta, dtype=np.float64)


class LogLink(Link):
    """Log link: g(μ) = log(μ). Default for Poisson family."""

    @property
    def name(self) -> str:
        return 'log'

    def link(self, mu: NDArray) -> NDArray:
        return np.log(np.maximum(mu, 1e-300))

    def linkinv(self, eta: NDArray) -> NDArray:
        # Clip to prevent overflow
        eta = np.clip(eta, -700, 700)
        return np.exp(eta)

    def mu_eta(self, eta: NDArray) -> NDArray:
        eta = np.clip(eta, -700, 700)
        return np.exp(eta)


class LogitLink(Link):
    """Logit link: g(μ) = log(μ/(1-μ)). Default for Binomial family."""

    @property
    def name(self) -> str:
        return 'logit'

    def link(self, mu: NDArray) -> NDArray:
        mu = np.clip(mu, 1e-15, 1 - 1e-15)
        return np.log(mu / (1 - mu))

    def linkinv(self, eta: NDArray) -> NDArray:
        # Clip to prevent overflow in exp
        eta = np.clip(eta, -500, 500)
        return 1.0 / (1.0 + np.exp(-eta))

    def mu_eta(self, eta: NDArray) -> NDArray:
        eta = np.clip(eta, -500, 500)
        p = 1.0 / (1.0 + np.exp(-eta))
        return np.maximum(p * (1.0 - p), _EPS)


class ProbitLink(Link):
    """Probit link: g(μ) = Φ⁻¹(μ). Alternative for Binomial family."""

    @property
    def name(self) -> str:
        return 'probit'

    def link(self, mu: NDArray) -> NDArray:
        mu = np.clip(mu, 1e-15, 1 - 1e-15)
        return sp_stats.norm.ppf(mu)

    def linkinv(self, eta: NDArray) -> NDArray:
        return sp_stats.norm.cdf(eta)

    def mu_eta(self, eta: NDArray) -> NDArray:
        return np.maximum(sp_stats.norm.pdf(eta), _EPS)


class CLogLogLink(Link):
    """Complementary log-log link: g(μ) = log(-log(1-μ))."""

    @property
    def name(self) -> str:
        return 'cloglog'

    def link(self, mu: NDArray) -> NDArray:
        mu = np.clip(mu, 1e-15, 1 - 1e-15)
        return np.log(-np.log1p(-mu))

    def linkinv(self, eta: NDArray) -> NDArray:
        eta = np.clip(eta, -500, 500)
        return np.clip(-np.expm1(-np.exp(eta)), _EPS, 1 - _EPS)

    def mu_eta(self, eta: NDArray) -> NDArray:
        eta = np.clip(eta, -500, 500)
        return np.maximum(np.exp(eta - np.exp(eta)), _EPS)


class InverseLink(Link):
    """Inverse link: g(μ) = 1/μ. Default for Gamma family. Decreasing."""

    @property
    def name(self) -> str:
        return 'inverse'

    def link(self, mu: NDArray) -> NDArray:
        return 1.0 / np.asarray(mu, dtype=np.float64)

    def linkinv(self, eta: NDArray) -> NDArray:
        return 1.0 / np.asarray(eta, dtype=np.float64)

    def mu_eta(self, eta: NDArray) -> NDArray:
        return -1.0 / np.asarray(eta, dtype=np.float64) ** 2

    def valideta(self, eta: NDArray) -> bool:
        return bool(np.all(np.isfinite(eta)) and np.all(eta != 0))

    def linkinv_interval(
        self, lo: NDArray, hi: NDArray, eta: NDArray
    ) -> tuple[NDArray, NDArray, NDArray]:
        """1/η has a pole at 0: an interval reaching it is unbounded on that side."""
        pos = eta > 0
        crosses_pos = pos & (lo <= 0)
        crosses_neg = ~pos & (hi >= 0)
        with np.errstate(divide='ignore'):
            b1 = self.linkinv(lo)
            b2 = self.linkinv(hi)
        lwr = np.minimum(b1, b2)
        upr = np.maximum(b1, b2)
        lwr = np.where(crosses_pos, b2, np.where(crosses_neg, -np.inf, lwr))
        upr = np.where(crosses_pos, np.inf, np.where(crosses_neg, b1, upr))
        return lwr, upr, crosses_pos | crosses_neg


class SqrtLink(Link):
    """Square-root link: g(μ) = √μ. Variance-stabilising for counts."""

    @property
    def name(self) -> str:
        return 'sqrt'

    def link(self, mu: NDArray) -> NDArray:
        return np.sqrt(mu)

    def linkinv(self, eta: NDArray) -> NDArray:
        return np.asarray(eta, dtype=np.float64) ** 2

    def mu_eta(self, eta: NDArray) -> NDArray:
        return 2.0 * np.asarray(eta, dtype=np.float64)

    def valideta(self, eta: NDArray) -> bool:
        return bool(np.all(np.isfinite(eta)) and np.all(eta > 0))

    def linkinv_interval(
        self, lo: NDArray, hi: NDArray, eta: NDArray
    ) -> tuple[NDArray, NDArray, NDArray]:
        """η² is only increasing for η >= 0, so the lower bound stops at μ = 0."""
        clamped = lo < 0
        lwr = self.linkinv(np.where(clamped, 0.0, lo))
        upr = self.linkinv(hi)
        return lwr, upr, clamped


class InverseSquaredLink(Link):
    """Inverse-squared link: g(μ) = 1/μ². Default for inverse Gaussian. Decreasing."""

    @property
    def name(self) -> str:
        return 'inverse_squared'

    def link(self, mu: NDArray) -> NDArray:
        return 1.0 / np.asarray(mu, dtype=np.float64) ** 2

    def linkinv(self, eta: NDArray) -> NDArray:
        return 1.0 / np.sqrt(eta)

    def mu_eta(self, eta: NDArray) -> NDArray:
        return -1.0 / (2.0 * np.asarray(eta, dtype=np.float64) ** 1.5)

    def valideta(self, eta: NDArray) -> bool:
        return bool(np.all(np.isfinite(eta)) and np.all(eta > 0))

    def linkinv_interval(
        self, lo: NDArray, hi: NDArray, eta: NDArray
    ) -> tuple[NDArray, NDArray, NDArray]:
        """1/√η is defined for η > 0 only: an interval reaching 0 has no upper bound."""
        clamped = lo <= 0
        lwr = self.linkinv(hi)
        upr = np.where(clamped, np.inf, self.linkinv(np.where(clamped, 1.0, lo)))
        return lwr, upr, clamped


# =====================================================================
# Link name → class mapping
# =====================================================================

_LINK_CLASSES: dict[str, type[Link]] = {
    'identity': IdentityLink,
    'log': LogLink,
    'logit': LogitLink,
    'probit': ProbitLink,
    'cloglog': CLogLogLink,
    'inverse': InverseLink,
    'sqrt': SqrtLink,
    'inverse_squared': InverseSquaredLink,
}

SUPPORTED_LINKS = frozenset(_LINK_CLASSES)


def resolve_link(link: str | Link | None, default: Link | None = None) -> Link:
    """Resolve a link argument to a Link instance.

    Args:
        link: A link name, a Link instance (passed through), or None.
        default: Returned when link is None.

    Raises:
        InvalidArgument: If the name is unknown, the type is wrong, or
            link is None without a default.
    """
    if link is None:
        if default is None:
            raise InvalidArgument("link is required when no default is available")
        return default
    if isinstance(link, Link):
        return link
    if isinstance(link, str):
        cls = _LINK_CLASSES.get(link.lower())
        if cls is None:
            valid = ', '.join(sorted(SUPPORTED_LINKS))
            raise InvalidArgument(f"Unknown link: {link!r}. Valid links: {valid}")
        return cls()
    raise InvalidArgument(f"link must be str or Link, got {type(link).__name__}")


# =====================================================================
# Family base class
# =====================================================================

class Family(ABC):
    """
    GLM family definition.

    Defines the relationship between the mean and variance of the
    response distribution, along with a link function.
    """

    def __init__(self, link: str | Link | None = None):
        self._link = resolve_link(link, self._default_link())

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def _default_link(self) -> Link:
        ...

    @property
    def link(self) -> Link:
        return self._link

    @abstractmethod
    def variance(self, mu: NDArray) -> NDArray:
        """Variance function V(μ)."""
        ...

    @abstractmethod
    def unit_deviance(self, y: NDArray, mu: NDArray) -> NDArray:
        """Per-observation deviance contribution d(y_i, μ_i), before weighting."""
        ...

    def deviance(self, y: NDArray, mu: NDArray, wt: NDArray) -> float:
        """Total deviance Σ wt_i · d(y_i, μ_i).

        Twice the log-likelihood gap between the saturated model and
        the fitted one.
        """
        return float(np.sum(wt * self.unit_deviance(y, mu)))

    def validmu(self, mu: NDArray) -> bool:
        """Whether every μ is inside the family's mean space."""
        return bool(np.all(np.isfinite(mu)))

    @property
    def dispersion_is_fixed(self) -> bool:
        """Whether the dispersion parameter is known a priori.

        True for Binomial (φ=1) and Poisson (φ=1). False for families
        where φ is estimated from the data.
        """
        return False

    @abstractmethod
    def log_likelihood(
        self, y: NDArray, mu: NDArray, wt: NDArray, dispersion: float
    ) -> float:
        """Log-likelihood used for AIC. NaN when no likelihood exists."""
        ...

    def aic(
        self, y: NDArray, mu: NDArray, wt: NDArray,
        rank: int, dispersion: float
    ) -> float:
        """Compute AIC = -2 * loglik + 2 * rank.

        Families with estimated dispersion follow R and override this.
        """
        ll = self.log_likelihood(y, mu, wt, dispersion)
        return -2.0 * ll + 2.0 * rank

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(link={self._link.name!r})"


# =====================================================================
# Concrete families
# =====================================================================

class Gaussian(Family):
    """Gaussian (Normal) family. Default link: identity.

    V(μ) = 1
    d(y, μ) = (y - μ)²
    """

    @property
    def name(self) -> str:
        return 'gaussian'

    def _default_link(self) -> Link:
        return IdentityLink()

    def variance(self, mu: NDArray) -> NDArray:
        return np.ones_like(mu, dtype=np.float64)

    def unit_deviance(self, y: NDArray, mu: NDArray) -> NDArray:
        return (y - mu) ** 2

    def log_likelihood(
        self, y: NDArray, mu: NDArray, wt: NDArray, dispersion: float
    ) -> float:
        n = float(np.sum(wt > 0))
        rss = float(np.sum(wt * (y - mu) ** 2))
        return -0.5 * (rss / dispersion + n * np.log(2 * np.pi * dispersion))

    def aic(
        self, y: NDArray, mu: NDArray, wt: NDArray,
        rank: int, dispersion: float
    ) -> float:
        """AIC matching R's gaussian family.

        R uses the MLE dispersion (deviance / n, not deviance / df) and
        counts the dispersion as one extra parameter.
        """
        n = float(np.sum(wt > 0))
        rss = float(np.sum(wt * (y - mu) ** 2))
        sigma_mle_sq = rss / n
        ll = -0.5 * (rss / sigma_mle_sq + n * np.log(2 * np.pi * sigma_mle_sq))
        return -2.0 * ll + 2.0 + 2.0 * rank


class Binomial(Family):
    """Binomial family. Default link: logit.

    y is the observed proportion and the prior weight is the number of
    trials (1 for binary data).

    V(μ) = μ(1-μ)
    d(y, μ) = 2 * [y log(y/μ) + (1-y) log((1-y)/(1-μ))]
    """

    @property
    def name(self) -> str:
        return 'binomial'

    def _default_link(self) -> Link:
        return LogitLink()

    def variance(self, mu: NDArray) -> NDArray:
        mu = np.clip(mu, 1e-15, 1 - 1e-15)
        return mu * (1.0 - mu)

    def validmu(self, mu: NDArray) -> bool:
        return bool(np.all(np.isfinite(mu)) and np.all((mu > 0) & (mu < 1)))

    def unit_deviance(self, y: NDArray, mu: NDArray) -> NDArray:
        mu = np.clip(mu, 1e-15, 1 - 1e-15)
        # 0*log(0) = 0. np.where evaluates both branches, so suppress
        # harmless warnings from the unused one.
        with np.errstate(divide='ignore', invalid='ignore'):
            term1 = np.where(y > 0, y * np.log(y / mu), 0.0)
            term2 = np.where(y < 1, (1 - y) * np.log((1 - y) / (1 - mu)), 0.0)
        return 2.0 * (term1 + term2)

    def log_likelihood(
        self, y: NDArray, mu: NDArray, wt: NDArray, dispersion: float
    ) -> float:
        # Σ [log C(m, m·y) + m·y·log(μ) + m·(1-y)·log(1-μ)], m = trials
        mu = np.clip(mu, 1e-15, 1 - 1e-15)
        m = wt
        k = np.round(m * y)
        log_choose = gammaln(m + 1) - gammaln(k + 1) - gammaln(m - k + 1)
        return float(np.sum(log_choose + k * np.log(mu) + (m - k) * np.log(1 - mu)))

    @property
    def dispersion_is_fixed(self) -> bool:
        return True


class Poisson(Family):
    """Poisson family. Default link: log.

    V(μ) = μ
    d(y, μ) = 2 * [y log(y/μ) - (y - μ)]
    """

    @property
    def name(self) -> str:
        return 'poisson'

    def _default_link(self) -> Link:
        return LogLink()

    def variance(self, mu: NDArray) -> NDArray:
        return np.maximum(mu, 1e-300)

    def validmu(self, mu: NDArray) -> bool:
        return bool(np.all(np.isfinite(mu)) and np.all(mu > 0))

    def unit_deviance(self, y: NDArray, mu: NDArray) -> NDArray:
        mu = np.maximum(mu, 1e-300)
        with np.errstate(divide='ignore', invalid='ignore'):
            term = np.where(y > 0, y * np.log(y / mu), 0.0)
        return 2.0 * (term - (y - mu))

    def log_likelihood(
        self, y: NDArray, mu: NDArray, wt: NDArray, dispersion: float
    ) -> float:
        # Σ wt_i * [y_i log(μ_i) - μ_i - log(y_i!)]
        mu = np.maximum(mu, 1e-300)
        return float(np.sum(wt * (y * np.log(mu) - mu - gammaln(y + 1))))

    @property
    def dispersion_is_fixed(self) -> bool:
        return True


class QuasiPoisson(Poisson):
    """Quasi-Poisson family. Poisson mean/variance shape, estimated dispersion.

    There is no likelihood, so log-likelihood and AIC are NaN.
    """

    @property
    def name(self) -> str:
        return 'quasipoisson'

    def log_likelihood(
        self, y: NDArray, mu: NDArray, wt: NDArray, dispersion: float
    ) -> float:
        return float('nan')

    def aic(
        self, y: NDArray, mu: NDArray, wt: NDArray,
        rank: int, dispersion: float
    ) -> float:
        return float('nan')

    @property
    def dispersion_is_fixed(self) -> bool:
        return False


class Gamma(Family):
    """Gamma family. Default link: inverse.

    V(μ) = μ²
    d(y, μ) = 2 * [-log(y/μ) + (y - μ)/μ]
    """

    @property
    def name(self) -> str:
        return 'gamma'

    def _default_link(self) -> Link:
        return InverseLink()

    def variance(self, mu: NDArray) -> NDArray:
        return np.asarray(mu, dtype=np.float64) ** 2

    def validmu(self, mu: NDArray) -> bool:
        return bool(np.all(np.isfinite(mu)) and np.all(mu > 0))

    def unit_deviance(self, y: NDArray, mu: NDArray) -> NDArray:
        with np.errstate(divide='ignore', invalid='ignore'):
            log_term = np.where(y > 0, np.log(y / mu), 0.0)
        return 2.0 * (-log_term + (y - mu) / mu)

    def log_likelihood(
        self, y: NDArray, mu: NDArray, wt: NDArray, dispersion: float
    ) -> float:
        return float(np.sum(
            wt * sp_stats.gamma.logpdf(y, a=1.0 / dispersion, scale=mu * dispersion)
        ))

    def aic(
        self, y: NDArray, mu: NDArray, wt: NDArray,
        rank: int, dispersion: float
    ) -> float:
        """AIC matching R's Gamma family: dispersion = deviance / Σwt, +2 for φ."""
        disp = self.deviance(y, mu, wt) / float(np.sum(wt))
        ll = self.log_likelihood(y, mu, wt, disp)
        return -2.0 * ll + 2.0 + 2.0 * rank


class InverseGaussian(Family):
    """Inverse Gaussian family. Default link: 1/μ².

    V(μ) = μ³
    d(y, μ) = (y - μ)² / (y μ²)
    """

    @property
    def name(self) -> str:
        return 'inverse_gaussian'

    def _default_link(self) -> Link:
        return InverseSquaredLink()

    def variance(self, mu: NDArray) -> NDArray:
        return np.asarray(mu, dtype=np.float64) ** 3

    def validmu(self, mu: NDArray) -> bool:
        return bool(np.all(np.isfinite(mu)) and np.all(mu > 0))

    def unit_deviance(self, y: NDArray, mu: NDArray) -> NDArray:
        return (y - mu) ** 2 / (y * mu ** 2)

    def log_likelihood(
        self, y: NDArray, mu: NDArray, wt: NDArray, dispersion: float
    ) -> float:
        return float(np.sum(wt * (
            -0.5 * np.log(2 * np.pi * dispersion * y ** 3)
            - (y - mu) ** 2 / (2 * dispersion * y * mu ** 2)
        )))

    def aic(
        self, y: NDArray, mu: NDArray, wt: NDArray,
        rank: int, dispersion: float
    ) -> float:
        """AIC matching R's inverse.gaussian family."""
        sum_wt = float(np.sum(wt))
        disp = self.deviance(y, mu, wt) / sum_wt
        minus_2ll = (
            sum_wt * (np.log(disp * 2 * np.pi) + 1)
            + 3.0 * float(np.sum(np.log(y) * wt))
        )
        return minus_2ll + 2.0 + 2.0 * rank


# =====================================================================
# Family name → class mapping + resolver
# =====================================================================

_FAMILY_CLASSES: dict[str, type[Family]] = {
    'gaussian': Gaussian,
    'normal': Gaussian,
    'binomial': Binomial,
    'poisson': Poisson,
    'quasipoisson': QuasiPoisson,
    'gamma': Gamma,
    'inverse_gaussian': InverseGaussian,
}

SUPPORTED_FAMILIES = frozenset(k for k in _FAMILY_CLASSES if k != 'normal')


def resolve_family(family: str | Family, link: str | Link | None = None) -> Family:
    """Resolve a family argument to a Family instance.

    Args:
        family: A family name (e.g. 'poisson') or a Family instance.
        link: Optional link override. With a Family instance, a new
              instance of the same class is built with this link.

    Returns:
        Family instance.

    Raises:
        InvalidArgument: If the name is unknown or the type is wrong.
    """
    if isinstance(family, Family):
        if link is None:
            return family
        return type(family)(link)
    if isinstance(family, str):
        cls = _FAMILY_CLASSES.get(family.lower())
        if cls is None:
            valid = ', '.join(sorted(SUPPORTED_FAMILIES))
            raise InvalidArgument(
                f"Unknown family: {family!r}. Valid families: {valid}"
            )
        return cls(link)
    raise InvalidArgument(
        f"family must be str or Family, got {type(family).__name__}"
    )
