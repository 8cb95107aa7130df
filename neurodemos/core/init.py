"""Random sources and variance-scaled weight initialisers."""

from __future__ import annotations

import math

import numpy as np


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Return a :class:`numpy.random.Generator` seeded with ``seed``."""

    return np.random.default_rng(seed)


def _rng(rng: np.random.Generator | None) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def random_in_range(lo: float, hi: float, rng: np.random.Generator | None = None) -> float:
    return float(_rng(rng).uniform(lo, hi))


def random_int(lo: int, hi: int, rng: np.random.Generator | None = None) -> int:
    """Uniform integer in ``[lo, hi)``."""

    if hi <= lo:
        raise ValueError(f"random_int requires lo < hi, got [{lo}, {hi})")
    return int(_rng(rng).integers(lo, hi))


def random_normal(
    mean: float = 0.0, std: float = 1.0, rng: np.random.Generator | None = None
) -> float:
    return float(_rng(rng).normal(mean, std))


def xavier_limit(fan_in: int, fan_out: int) -> float:
    if fan_in <= 0 or fan_out <= 0:
        raise ValueError("xavier_init requires positive fan_in and fan_out")
    return math.sqrt(6.0 / (fan_in + fan_out))


def xavier_init(fan_in: int, fan_out: int, rng: np.random.Generator | None = None) -> float:
    """Glorot uniform sample in ``±sqrt(6 / (fan_in + fan_out))``."""

    limit = xavier_limit(fan_in, fan_out)
    return random_in_range(-limit, limit, rng)


def he_std(fan_in: int) -> float:
    if fan_in <= 0:
        raise ValueError("he_init requires a positive fan_in")
    return math.sqrt(2.0 / fan_in)


def he_init(fan_in: int, rng: np.random.Generator | None = None) -> float:
    """He normal sample with standard deviation ``sqrt(2 / fan_in)``."""

    return random_normal(0.0, he_std(fan_in), rng)


__all__ = [
    "he_init",
    "he_std",
    "make_rng",
    "random_in_range",
    "random_int",
    "random_normal",
    "xavier_init",
    "xavier_limit",
]
