"""Retry helpers — backoff timing and parameter degradation between attempts."""

from __future__ import annotations

import random

from mathtile.types import RetryStrategy

_MAX_WAIT = 60.0  # seconds


def compute_wait(
    attempt: int,
    strategy: RetryStrategy = RetryStrategy.LINEAR,
    base_delay: float = 0.25,
    jitter: bool = False,
) -> float:
    """Compute the wait after a failed attempt (attempt numbers start at 1)."""
    attempt = max(attempt, 1)
    if strategy == RetryStrategy.EXPONENTIAL:
        wait = base_delay * (2 ** (attempt - 1))
    elif strategy == RetryStrategy.LINEAR:
        wait = base_delay * attempt
    else:  # FIXED
        wait = base_delay

    if jitter:
        wait += random.uniform(0, wait * 0.25)

    return min(wait, _MAX_WAIT)


def degrade_density(density: float, floor: float = 1.0) -> float:
    """Halve the pixel density for the next attempt, never going below ``floor``.

    Densities already at or below the floor are returned unchanged.
    """
    if density <= floor:
        return density
    return max(floor, density / 2)
