"""Single neuron: weighted sum followed by an activation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

import numpy as np

from ..core.activations import ActivationKind, get_activation
from ..core.linalg import dot
from ..core.stats import clamp
from ..core.types import DimensionMismatchError

VALUE_LIMIT = 2.0


def _clamped(value: float) -> float:
    return clamp(value, -VALUE_LIMIT, VALUE_LIMIT)


@dataclass(frozen=True)
class Perceptron:
    inputs: Tuple[float, ...] = (0.5, 0.3)
    weights: Tuple[float, ...] = (0.7, 0.4)
    bias: float = 0.2
    activation: ActivationKind = ActivationKind.SIGMOID

    def __post_init__(self) -> None:
        if len(self.inputs) != len(self.weights):
            raise DimensionMismatchError(
                "Perceptron", (len(self.inputs),), (len(self.weights),)
            )

    def weighted_sum(self) -> float:
        return dot(self.inputs, self.weights) + self.bias

    def forward(self) -> float:
        return float(get_activation(self.activation).apply(self.weighted_sum()))

    def nudge_input(self, index: int, delta: float) -> "Perceptron":
        values = list(self.inputs)
        values[index] = _clamped(values[index] + delta)
        return replace(self, inputs=tuple(values))

    def nudge_weight(self, index: int, delta: float) -> "Perceptron":
        values = list(self.weights)
        values[index] = _clamped(values[index] + delta)
        return replace(self, weights=tuple(values))

    def nudge_bias(self, delta: float) -> "Perceptron":
        return replace(self, bias=_clamped(self.bias + delta))

    def randomized(self, rng: np.random.Generator) -> "Perceptron":
        n = len(self.inputs)
        return replace(
            self,
            inputs=tuple(float(v) for v in rng.uniform(-1.0, 1.0, size=n)),
            weights=tuple(float(v) for v in rng.uniform(-1.0, 1.0, size=n)),
            bias=float(rng.uniform(-1.0, 1.0)),
        )


__all__ = ["Perceptron", "VALUE_LIMIT"]
