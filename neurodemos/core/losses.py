"""Pointwise loss functions and their gradients with respect to the prediction."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict

import numpy as np

from .types import Array, DimensionMismatchError

PROBABILITY_EPS = 1e-15

LossFn = Callable[..., object]


def _pair(predicted, actual, operation: str) -> tuple[Array, Array]:
    p = np.asarray(predicted, dtype=np.float64)
    a = np.asarray(actual, dtype=np.float64)
    if p.shape != a.shape:
        raise DimensionMismatchError(operation, p.shape, a.shape)
    return p, a


def _clip_probability(p: Array) -> Array:
    return np.clip(p, PROBABILITY_EPS, 1.0 - PROBABILITY_EPS)


def _out(value, like):
    if np.ndim(like) == 0:
        return float(value)
    return value


def mean_squared_error(predicted, actual) -> float:
    """Half squared error for scalars, mean squared error for vectors."""

    p, a = _pair(predicted, actual, "mean_squared_error")
    if p.ndim == 0:
        return float(0.5 * (p - a) ** 2)
    return float(np.mean((p - a) ** 2))


def mse_gradient(predicted, actual):
    p, a = _pair(predicted, actual, "mse_gradient")
    return _out(p - a, predicted)


def mean_absolute_error(predicted, actual) -> float:
    p, a = _pair(predicted, actual, "mean_absolute_error")
    if p.ndim == 0:
        return float(np.abs(p - a))
    return float(np.mean(np.abs(p - a)))


def mae_gradient(predicted, actual):
    p, a = _pair(predicted, actual, "mae_gradient")
    return _out(np.where(p > a, 1.0, -1.0), predicted)


def binary_cross_entropy(predicted, actual) -> float:
    """Binary cross-entropy on a probability clipped into ``[eps, 1 - eps]``."""

    p, a = _pair(predicted, actual, "binary_cross_entropy")
    clipped = _clip_probability(p)
    losses = -(a * np.log(clipped) + (1.0 - a) * np.log(1.0 - clipped))
    return float(np.mean(losses))


def binary_cross_entropy_gradient(predicted, actual):
    p, a = _pair(predicted, actual, "binary_cross_entropy_gradient")
    clipped = _clip_probability(p)
    return _out((clipped - a) / (clipped * (1.0 - clipped)), predicted)


def categorical_cross_entropy(predicted, actual) -> float:
    """Cross-entropy between a probability vector and a one-hot target."""

    p, a = _pair(predicted, actual, "categorical_cross_entropy")
    clipped = _clip_probability(p)
    return float(-np.sum(a * np.log(clipped)))


def categorical_cross_entropy_gradient(predicted, actual):
    p, a = _pair(predicted, actual, "categorical_cross_entropy_gradient")
    return _out(-a / _clip_probability(p), predicted)


def huber_loss(predicted, actual, delta: float = 1.0) -> float:
    p, a = _pair(predicted, actual, "huber_loss")
    error = np.abs(p - a)
    losses = np.where(error <= delta, 0.5 * error**2, delta * error - 0.5 * delta**2)
    return float(np.mean(losses))


def huber_gradient(predicted, actual, delta: float = 1.0):
    p, a = _pair(predicted, actual, "huber_gradient")
    error = p - a
    return _out(np.where(np.abs(error) <= delta, error, delta * np.sign(error)), predicted)


class LossKind(str, Enum):
    MSE = "mse"
    MAE = "mae"
    BINARY_CROSS_ENTROPY = "binary_cross_entropy"
    CATEGORICAL_CROSS_ENTROPY = "categorical_cross_entropy"
    HUBER = "huber"


@dataclass(frozen=True)
class LossFunction:
    """Loss wrapper exposing both the loss value and dL/dŷ."""

    kind: LossKind
    label: str
    use_case: str
    loss: LossFn
    gradient: LossFn

    def __call__(self, predicted, actual) -> float:
        return self.loss(predicted, actual)


def get_loss(kind: LossKind) -> LossFunction:
    """Return the :class:`LossFunction` for ``kind``."""

    if kind is LossKind.MSE:
        return LossFunction(
            kind, "Mean Squared Error", "Regression", mean_squared_error, mse_gradient
        )
    if kind is LossKind.MAE:
        return LossFunction(
            kind, "Mean Absolute Error", "Robust Regression",
            mean_absolute_error, mae_gradient,
        )
    if kind is LossKind.BINARY_CROSS_ENTROPY:
        return LossFunction(
            kind, "Binary Cross-Entropy", "Binary Classification",
            binary_cross_entropy, binary_cross_entropy_gradient,
        )
    if kind is LossKind.CATEGORICAL_CROSS_ENTROPY:
        return LossFunction(
            kind, "Categorical Cross-Entropy", "Multiclass Classification",
            categorical_cross_entropy, categorical_cross_entropy_gradient,
        )
    if kind is LossKind.HUBER:
        return LossFunction(
            kind, "Huber Loss", "Robust Regression", huber_loss, huber_gradient
        )
    raise ValueError(f"Unknown loss: {kind!r}")


LOSSES: Dict[LossKind, LossFunction] = {kind: get_loss(kind) for kind in LossKind}


__all__ = [
    "LOSSES",
    "LossFunction",
    "LossKind",
    "binary_cross_entropy",
    "binary_cross_entropy_gradient",
    "categorical_cross_entropy",
    "categorical_cross_entropy_gradient",
    "get_loss",
    "huber_gradient",
    "huber_loss",
    "mae_gradient",
    "mean_absolute_error",
    "mean_squared_error",
    "mse_gradient",
]
