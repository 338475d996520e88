"""
Fitted-model handles and the GLM family/link enumeration.

Models are fitted elsewhere; GLMModel carries what prediction needs.
"""

from glmpredict.models.families import (
    Link, IdentityLink, LogLink, LogitLink, ProbitLink, CLogLogLink,
    InverseLink, SqrtLink, InverseSquaredLink,
    Family, Gaussian, Binomial, Poisson, QuasiPoisson, Gamma, InverseGaussian,
    SUPPORTED_LINKS, SUPPORTED_FAMILIES,
    resolve_link, resolve_family,
)
from glmpredict.models.model import GLMModel

__all__ = [
    "GLMModel",
    "Link",
    "IdentityLink",
    "LogLink",
    "LogitLink",
    "ProbitLink",
    "CLogLogLink",
    "InverseLink",
    "SqrtLink",
    "InverseSquaredLink",
    "Family",
    "Gaussian",
    "Binomial",
    "Poisson",
    "QuasiPoisson",
    "Gamma",
    "InverseGaussian",
    "SUPPORTED_LINKS",
    "SUPPORTED_FAMILIES",
    "resolve_link",
    "resolve_family",
]
