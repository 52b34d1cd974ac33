"""PERT statistics for a single task."""

import math
from dataclasses import dataclass
from typing import Tuple

from ..errors import InvalidDurationError


@dataclass(frozen=True)
class Estimate:
    """Derived duration statistics for a three-point estimate (hours)."""

    optimistic: float
    most_likely: float
    pessimistic: float
    expected: float
    std_dev: float
    variance: float
    ci68: Tuple[float, float]
    ci95: Tuple[float, float]

    def to_dict(self) -> dict:
        """Convert estimate to dictionary for JSON export."""
        return {
            'optimistic': self.optimistic,
            'most_likely': self.most_likely,
            'pessimistic': self.pessimistic,
            'expected': self.expected,
            'std_dev': self.std_dev,
            'variance': self.variance,
            'ci68': list(self.ci68),
            'ci95': list(self.ci95),
        }


def validate_durations(optimistic: float, most_likely: float, pessimistic: float) -> None:
    """Raise InvalidDurationError unless 0 < optimistic <= most_likely <= pessimistic."""
    values = (optimistic, most_likely, pessimistic)
    if any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in values):
        raise InvalidDurationError(*values, reason="durations must be numbers")
    if any(math.isnan(v) or math.isinf(v) for v in values):
        raise InvalidDurationError(*values, reason="durations must be finite")
    if min(values) <= 0:
        raise InvalidDurationError(*values, reason="durations must be positive")
    if not optimistic <= most_likely <= pessimistic:
        raise InvalidDurationError(
            *values, reason="expected optimistic <= most likely <= pessimistic"
        )


def estimate(optimistic: float, most_likely: float, pessimistic: float) -> Estimate:
    """Compute expected duration, spread and confidence intervals.

    expected = (O + 4M + P) / 6 and std_dev = (P - O) / 6. The 68% and 95%
    intervals are expected +/- one and two standard deviations.
    """
    validate_durations(optimistic, most_likely, pessimistic)

    expected = (optimistic + 4 * most_likely + pessimistic) / 6
    std_dev = (pessimistic - optimistic) / 6

    return Estimate(
        optimistic=optimistic,
        most_likely=most_likely,
        pessimistic=pessimistic,
        expected=expected,
        std_dev=std_dev,
        variance=std_dev ** 2,
        ci68=(expected - std_dev, expected + std_dev),
        ci95=(expected - 2 * std_dev, expected + 2 * std_dev),
    )
