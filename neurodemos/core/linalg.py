"""Shape-checked matrix and vector helpers.

Every helper coerces its operands with :func:`numpy.asarray`, validates shapes
up front and returns a freshly allocated result; inputs are never modified.
"""

from __future__ import annotations

import numpy as np

from .types import Array, DimensionMismatchError


def _matrix(value, operation: str) -> Array:
    m = np.asarray(value, dtype=np.float64)
    if m.ndim != 2:
        raise DimensionMismatchError(operation, m.shape, ("rows", "cols"))
    return m


def _vector(value, operation: str) -> Array:
    v = np.asarray(value, dtype=np.float64)
    if v.ndim != 1:
        raise DimensionMismatchError(operation, v.shape, ("n",))
    return v


def _same_shape(a: Array, b: Array, operation: str) -> None:
    if a.shape != b.shape:
        raise DimensionMismatchError(operation, a.shape, b.shape)


def matrix_multiply(a, b) -> Array:
    left = _matrix(a, "matrix_multiply")
    right = _matrix(b, "matrix_multiply")
    if left.shape[1] != right.shape[0]:
        raise DimensionMismatchError("matrix_multiply", left.shape, right.shape)
    return left @ right


def matrix_transpose(matrix) -> Array:
    return _matrix(matrix, "matrix_transpose").T.copy()


def matrix_add(a, b) -> Array:
    left = _matrix(a, "matrix_add")
    right = _matrix(b, "matrix_add")
    _same_shape(left, right, "matrix_add")
    return left + right


def matrix_subtract(a, b) -> Array:
    left = _matrix(a, "matrix_subtract")
    right = _matrix(b, "matrix_subtract")
    _same_shape(left, right, "matrix_subtract")
    return left - right


def matrix_scale(matrix, scalar: float) -> Array:
    return _matrix(matrix, "matrix_scale") * float(scalar)


def dot(a, b) -> float:
    left = _vector(a, "dot")
    right = _vector(b, "dot")
    _same_shape(left, right, "dot")
    return float(left @ right)


def magnitude(vector) -> float:
    """Euclidean norm of ``vector``."""

    v = _vector(vector, "magnitude")
    return float(np.sqrt(np.sum(v * v)))


def normalize(vector) -> Array:
    """Scale ``vector`` to unit length; the zero vector is returned unchanged."""

    v = _vector(vector, "normalize")
    norm = magnitude(v)
    if norm == 0.0:
        return v.copy()
    return v / norm


def euclidean_distance(a, b) -> float:
    left = _vector(a, "euclidean_distance")
    right = _vector(b, "euclidean_distance")
    _same_shape(left, right, "euclidean_distance")
    return magnitude(left - right)


def manhattan_distance(a, b) -> float:
    left = _vector(a, "manhattan_distance")
    right = _vector(b, "manhattan_distance")
    _same_shape(left, right, "manhattan_distance")
    return float(np.sum(np.abs(left - right)))


__all__ = [
    "dot",
    "euclidean_distance",
    "magnitude",
    "manhattan_distance",
    "matrix_add",
    "matrix_multiply",
    "matrix_scale",
    "matrix_subtract",
    "matrix_transpose",
    "normalize",
]
