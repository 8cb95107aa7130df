"""Descriptive statistics and scalar helpers shared by the demos."""

from __future__ import annotations

from typing import Iterable

import numpy as np

from .types import Array


def _values(values: Iterable[float], operation: str) -> Array:
    if not isinstance(values, np.ndarray):
        values = list(values)
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        raise ValueError(f"{operation} requires at least one value")
    return arr.reshape(-1)


def mean(values: Iterable[float]) -> float:
    return float(np.mean(_values(values, "mean")))


def variance(values: Iterable[float]) -> float:
    """Population variance."""

    arr = _values(values, "variance")
    return float(np.mean((arr - np.mean(arr)) ** 2))


def standard_deviation(values: Iterable[float]) -> float:
    return float(np.sqrt(variance(values)))


def min_max_normalize(
    values: Iterable[float], new_min: float = 0.0, new_max: float = 1.0
) -> Array:
    """Rescale ``values`` into ``[new_min, new_max]``.

    A constant input has no range to stretch, so every element maps to
    ``new_min``.
    """

    arr = _values(values, "min_max_normalize")
    lo, hi = float(np.min(arr)), float(np.max(arr))
    span = hi - lo
    if span == 0:
        return np.full_like(arr, new_min)
    return new_min + (arr - lo) / span * (new_max - new_min)


def z_score_normalize(values: Iterable[float]) -> Array:
    arr = _values(values, "z_score_normalize")
    std = float(np.std(arr))
    if std == 0:
        return np.zeros_like(arr)
    return (arr - np.mean(arr)) / std


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * clamp(t, 0.0, 1.0)


def map_range(
    value: float, in_min: float, in_max: float, out_min: float, out_max: float
) -> float:
    if in_max == in_min:
        raise ValueError("map_range input range must be non-empty")
    return out_min + (value - in_min) / (in_max - in_min) * (out_max - out_min)


def approximately(a: float, b: float, eps: float = 1e-10) -> bool:
    return abs(a - b) < eps


def arange(start: float, end: float, step: float = 1.0) -> Array:
    if step <= 0:
        raise ValueError("arange step must be positive")
    return np.arange(start, end, step, dtype=np.float64)


def linspace(start: float, end: float, count: int) -> Array:
    if count < 2:
        raise ValueError("linspace requires at least two points")
    return np.linspace(start, end, count, dtype=np.float64)


__all__ = [
    "approximately",
    "arange",
    "clamp",
    "lerp",
    "linspace",
    "map_range",
    "mean",
    "min_max_normalize",
    "standard_deviation",
    "variance",
    "z_score_normalize",
]
