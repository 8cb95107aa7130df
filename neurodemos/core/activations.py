"""Activation functions, their derivatives and the activation catalog."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Tuple

import numpy as np

from .types import Array

SIGMOID_CLAMP = 250.0

ScalarFn = Callable[[object], object]


def _out(value: Array, like) -> object:
    if np.ndim(like) == 0:
        return float(value)
    return value


def sigmoid(x):
    """Logistic sigmoid with the argument clamped to ``[-250, 250]``."""

    z = np.clip(np.asarray(x, dtype=np.float64), -SIGMOID_CLAMP, SIGMOID_CLAMP)
    return _out(1.0 / (1.0 + np.exp(-z)), x)


def sigmoid_derivative(x):
    s = np.asarray(sigmoid(x), dtype=np.float64)
    return _out(s * (1.0 - s), x)


def relu(x):
    """Return ``max(0, x)``."""

    return _out(np.maximum(np.asarray(x, dtype=np.float64), 0.0), x)


def relu_derivative(x):
    return _out((np.asarray(x, dtype=np.float64) > 0).astype(np.float64), x)


def leaky_relu(x, alpha: float = 0.01):
    z = np.asarray(x, dtype=np.float64)
    return _out(np.where(z > 0, z, alpha * z), x)


def leaky_relu_derivative(x, alpha: float = 0.01):
    z = np.asarray(x, dtype=np.float64)
    return _out(np.where(z > 0, 1.0, alpha), x)


def tanh(x):
    return _out(np.tanh(np.asarray(x, dtype=np.float64)), x)


def tanh_derivative(x):
    return _out(1.0 - np.tanh(np.asarray(x, dtype=np.float64)) ** 2, x)


def elu(x, alpha: float = 1.0):
    z = np.asarray(x, dtype=np.float64)
    negative = alpha * np.expm1(np.minimum(z, 0.0))
    return _out(np.where(z > 0, z, negative), x)


def elu_derivative(x, alpha: float = 1.0):
    z = np.asarray(x, dtype=np.float64)
    return _out(np.where(z > 0, 1.0, alpha * np.exp(np.minimum(z, 0.0))), x)


def softmax(vector) -> Array:
    """Return the softmax of a 1-D ``vector`` (max-shifted for stability)."""

    z = np.asarray(vector, dtype=np.float64)
    if z.ndim != 1 or z.size == 0:
        raise ValueError("softmax expects a non-empty 1-D vector")
    shifted = z - np.max(z)
    exp = np.exp(shifted)
    return exp / np.sum(exp)


class ActivationKind(str, Enum):
    SIGMOID = "sigmoid"
    RELU = "relu"
    TANH = "tanh"
    LEAKY_RELU = "leaky_relu"
    ELU = "elu"


@dataclass(frozen=True)
class ActivationFunction:
    """A named nonlinearity with its analytic derivative."""

    kind: ActivationKind
    label: str
    formula: str
    apply: ScalarFn
    derivative: ScalarFn
    output_range: Tuple[float, float]

    def __call__(self, x):
        return self.apply(x)


def get_activation(kind: ActivationKind) -> ActivationFunction:
    """Return the :class:`ActivationFunction` for ``kind``."""

    if kind is ActivationKind.SIGMOID:
        return ActivationFunction(
            kind, "Sigmoid", "σ(x) = 1 / (1 + e^(-x))",
            sigmoid, sigmoid_derivative, (0.0, 1.0),
        )
    if kind is ActivationKind.RELU:
        return ActivationFunction(
            kind, "ReLU", "f(x) = max(0, x)", relu, relu_derivative, (0.0, 6.0)
        )
    if kind is ActivationKind.TANH:
        return ActivationFunction(
            kind, "Tanh", "tanh(x) = (e^x - e^(-x)) / (e^x + e^(-x))",
            tanh, tanh_derivative, (-1.0, 1.0),
        )
    if kind is ActivationKind.LEAKY_RELU:
        return ActivationFunction(
            kind, "Leaky ReLU", "f(x) = x if x > 0, else αx (α = 0.01)",
            leaky_relu, leaky_relu_derivative, (-0.3, 6.0),
        )
    if kind is ActivationKind.ELU:
        return ActivationFunction(
            kind, "ELU", "f(x) = x if x > 0, else α(e^x - 1)",
            elu, elu_derivative, (-1.0, 6.0),
        )
    raise ValueError(f"Unknown activation: {kind!r}")


ACTIVATIONS: Dict[ActivationKind, ActivationFunction] = {
    kind: get_activation(kind) for kind in ActivationKind
}


__all__ = [
    "ACTIVATIONS",
    "ActivationFunction",
    "ActivationKind",
    "elu",
    "elu_derivative",
    "get_activation",
    "leaky_relu",
    "leaky_relu_derivative",
    "relu",
    "relu_derivative",
    "sigmoid",
    "sigmoid_derivative",
    "softmax",
    "tanh",
    "tanh_derivative",
]
