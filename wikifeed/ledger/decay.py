"""Exponential half-life decay."""

import sys


def decay_multiplier(age_ms: float, half_life_ms: float) -> float:
    """Compute ``0.5 ** (age / half_life)``.

    Negative ages (clock skew) count as zero. After roughly a thousand
    half-lives the power underflows, so the result is floored at the
    smallest normal float and never reaches zero.

    Args:
        age_ms: Elapsed time since the last update.
        half_life_ms: Age at which the multiplier is 0.5.

    Returns:
        Multiplier in (0, 1].
    """
    multiplier = 0.5 ** (max(age_ms, 0.0) / half_life_ms)
    return max(multiplier, sys.float_info.min)
