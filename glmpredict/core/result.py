"""
Generic result container for all glmpredict computations.

The Result class is the envelope every backend returns. Timing and
warnings travel with the numbers, so solutions can report them without
a separate logging channel.

Design decisions:
    - Generic over parameter payload P
    - info dict for flexible metadata (method, critical value, counts)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True)
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for glmpredict computations.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific payload (fits, bounds, standard errors)
        info: Structured metadata (method, level, critical value)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> Result(
        ...     params=IntervalParams(...),
        ...     info={'method': 'wald', 'level': 0.95},
        ...     timing={'total_seconds': 0.001},
        ...     backend_name='cpu_wald'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
