"""
Exception hierarchy for glmpredict.

All exceptions inherit from GLMPredictError so callers can catch any
library-specific error in one place.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Failures from collaborators are chained, never flattened
"""


class GLMPredictError(Exception):
    """Base exception for all glmpredict errors."""
    pass


class InvalidArgument(GLMPredictError):
    """
    Input validation failed.

    Raised for an invalid model handle, a malformed covariate table,
    an out-of-range confidence level, or an unknown option string.
    """
    pass


class DimensionError(InvalidArgument):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when a covariate table has the wrong number of columns or
    when paired vectors have different lengths.
    """
    pass


class PredictionFailed(GLMPredictError):
    """
    The fitted model's prediction query failed.

    The original exception, if any, is available as ``__cause__``.

    Attributes:
        n_rows: Number of covariate rows in the failed request
    """

    def __init__(self, message: str, n_rows: int | None = None):
        super().__init__(message)
        self.n_rows = n_rows


class NumericalError(GLMPredictError):
    """
    Numerical computation failed.

    Raised for issues such as a covariance matrix that yields clearly
    negative prediction variances.

    Attributes:
        quantity: Name of the offending quantity, if known
        value: The offending value, if known
    """

    def __init__(
        self,
        message: str,
        quantity: str | None = None,
        value: float | None = None,
    ):
        super().__init__(message)
        self.quantity = quantity
        self.value = value
