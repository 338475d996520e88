"""
Core protocols for glmpredict.

These define the structural interface a fitted model must satisfy to be
used by the prediction solvers. We use Protocol (structural typing)
rather than ABC (nominal typing) so that adapters around any fitting
library qualify without inheriting from a glmpredict class.
"""

from typing import Protocol, Callable, runtime_checkable

import numpy as np
from numpy.typing import NDArray

ArrayFunction = Callable[[NDArray[np.floating]], NDArray[np.floating]]


@runtime_checkable
class FittedModel(Protocol):
    """
    Minimal protocol for a fitted generalized linear model.

    The model was fitted elsewhere. glmpredict only needs the link
    function, its inverse, and a link-scale prediction query that also
    returns standard errors.

    GLMModel is the in-package implementation; any object with these
    members works.
    """

    @property
    def feature_names(self) -> tuple[str, ...]:
        """Expected covariate columns, in the order predict_link wants them."""
        ...

    def link_function(self) -> ArrayFunction:
        """g: response-scale mean -> link scale."""
        ...

    def inverse_link_function(self) -> ArrayFunction:
        """g⁻¹: link scale -> response-scale mean."""
        ...

    def predict_link(
        self, X: NDArray[np.floating]
    ) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
        """
        Link-scale point estimates and standard errors.

        Args:
            X: Covariate matrix (n x p), columns in feature_names order,
               without an intercept column.

        Returns:
            (fit, se), each of shape (n,)
        """
        ...
