"""Fully connected network used by the architecture demo's forward pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, MutableSequence, Sequence

import numpy as np

from ..core.activations import ActivationKind, get_activation, sigmoid
from ..core.init import he_std, xavier_limit
from ..core.types import Array, DimensionMismatchError

DEFAULT_LAYERS = (4, 6, 4, 2)
MIN_LAYERS = 2
MAX_LAYERS = 6
MIN_WIDTH = 1
MAX_WIDTH = 10

_RELU_FAMILY = {ActivationKind.RELU, ActivationKind.LEAKY_RELU, ActivationKind.ELU}


@dataclass
class FeedForwardNetwork:
    """Dense network with per-layer activations exposed for display.

    Hidden layers use ``activation``; the output layer is squashed through a
    sigmoid so every displayed activation sits in a comparable range.
    """

    layer_sizes: Sequence[int] = DEFAULT_LAYERS
    activation: ActivationKind = ActivationKind.RELU
    seed: int = 0
    weights: MutableSequence[Array] = field(init=False, repr=False)
    biases: MutableSequence[Array] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.layer_sizes = [int(size) for size in self.layer_sizes]
        self._validate(self.layer_sizes)
        self._rng = np.random.default_rng(self.seed)
        self.reset(self.seed)

    @staticmethod
    def _validate(sizes: Sequence[int]) -> None:
        if not MIN_LAYERS <= len(sizes) <= MAX_LAYERS:
            raise ValueError(f"network needs {MIN_LAYERS}..{MAX_LAYERS} layers, got {len(sizes)}")
        for size in sizes:
            if not MIN_WIDTH <= size <= MAX_WIDTH:
                raise ValueError(f"layer width must be in [{MIN_WIDTH}, {MAX_WIDTH}], got {size}")

    def reset(self, seed: int) -> None:
        rng = np.random.default_rng(seed)
        weights: list[Array] = []
        biases: list[Array] = []
        for in_dim, out_dim in zip(self.layer_sizes[:-1], self.layer_sizes[1:]):
            if self.activation in _RELU_FAMILY:
                W = rng.normal(0.0, he_std(in_dim), size=(in_dim, out_dim))
            else:
                limit = xavier_limit(in_dim, out_dim)
                W = rng.uniform(-limit, limit, size=(in_dim, out_dim))
            weights.append(W)
            biases.append(np.zeros(out_dim))
        self.weights = weights
        self.biases = biases

    def forward(self, inputs) -> List[Array]:
        """Return the activations of every layer, input layer first."""

        x = np.asarray(inputs, dtype=np.float64).reshape(-1)
        if x.shape[0] != self.layer_sizes[0]:
            raise DimensionMismatchError("forward", x.shape, (self.layer_sizes[0],))
        hidden = get_activation(self.activation)
        layers = [x]
        last = len(self.weights) - 1
        for idx, (W, b) in enumerate(zip(self.weights, self.biases)):
            z = x @ W + b
            x = np.asarray(sigmoid(z) if idx == last else hidden.apply(z))
            layers.append(x)
        return layers

    def random_forward(self) -> List[Array]:
        """Forward pass of a uniform ``[0, 1)`` input sample."""

        return self.forward(self._rng.random(self.layer_sizes[0]))

    def parameter_count(self) -> int:
        return int(sum(W.size + b.size for W, b in zip(self.weights, self.biases)))

    # ------------------------------------------------------------------
    # Architecture editing

    def _rebuild(self, sizes: List[int]) -> None:
        self._validate(sizes)
        self.layer_sizes = sizes
        self.reset(self.seed)

    def add_layer(self) -> None:
        """Insert a hidden layer of random width 2..7 before the output."""

        if len(self.layer_sizes) >= MAX_LAYERS:
            return
        sizes = list(self.layer_sizes)
        sizes.insert(len(sizes) - 1, int(self._rng.integers(2, 8)))
        self._rebuild(sizes)

    def remove_layer(self) -> None:
        """Drop the last hidden layer; input and output always remain."""

        if len(self.layer_sizes) <= MIN_LAYERS:
            return
        sizes = list(self.layer_sizes)
        del sizes[-2]
        self._rebuild(sizes)

    def resize_layer(self, index: int, delta: int) -> None:
        sizes = list(self.layer_sizes)
        sizes[index] = max(MIN_WIDTH, min(MAX_WIDTH, sizes[index] + delta))
        self._rebuild(sizes)


__all__ = ["DEFAULT_LAYERS", "FeedForwardNetwork"]
