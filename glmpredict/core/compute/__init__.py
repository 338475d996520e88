"""
Shared compute infrastructure for glmpredict.

Domain-specific backends live in {domain}/backends/. This module holds
the numeric utilities they share.
"""

from glmpredict.core.compute.timing import Timer

__all__ = [
    "Timer",
]
