"""Stateless optimizer update rules over 2-D points.

Accumulators live in explicit, immutable state values owned by the caller: a
step takes ``(point, gradient, lr, state)`` and returns ``(point, state)``.
Nothing is stored on module-level catalogs, so independent runs never share
momentum or moment estimates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Union

import numpy as np

from ..core.types import Array, as_point
from ..core.updates import adam_update, rmsprop_update

MOMENTUM_BETA = 0.9
RMSPROP_ALPHA = 0.9
ADAM_BETA1 = 0.9
ADAM_BETA2 = 0.999
EPSILON = 1e-8


def _zeros() -> Array:
    return np.zeros(2, dtype=np.float64)


class OptimizerKind(str, Enum):
    SGD = "sgd"
    MOMENTUM = "momentum"
    RMSPROP = "rmsprop"
    ADAM = "adam"


@dataclass(frozen=True)
class SGDState:
    """Plain gradient descent carries no accumulator."""


@dataclass(frozen=True, eq=False)
class MomentumState:
    velocity: Array = field(default_factory=_zeros)


@dataclass(frozen=True, eq=False)
class RMSpropState:
    square_avg: Array = field(default_factory=_zeros)


@dataclass(frozen=True, eq=False)
class AdamState:
    m: Array = field(default_factory=_zeros)
    v: Array = field(default_factory=_zeros)
    t: int = 0


OptimizerState = Union[SGDState, MomentumState, RMSpropState, AdamState]

_STATE_TYPES: Dict[OptimizerKind, type] = {
    OptimizerKind.SGD: SGDState,
    OptimizerKind.MOMENTUM: MomentumState,
    OptimizerKind.RMSPROP: RMSpropState,
    OptimizerKind.ADAM: AdamState,
}

DESCRIPTIONS: Dict[OptimizerKind, str] = {
    OptimizerKind.SGD: "Stochastic Gradient Descent",
    OptimizerKind.MOMENTUM: "SGD with Momentum (β=0.9)",
    OptimizerKind.RMSPROP: "RMSprop (α=0.9, ε=1e-8)",
    OptimizerKind.ADAM: "Adam Optimizer (β1=0.9, β2=0.999)",
}


def initial_state(kind: OptimizerKind) -> OptimizerState:
    """Return a zeroed accumulator for ``kind``."""

    try:
        return _STATE_TYPES[kind]()
    except KeyError as exc:
        raise ValueError(f"Unknown optimizer: {kind!r}") from exc


def step(
    kind: OptimizerKind,
    point,
    gradient,
    lr: float,
    state: OptimizerState,
) -> tuple[Array, OptimizerState]:
    """Apply one update of ``kind`` and return the new point and state."""

    expected = _STATE_TYPES.get(kind)
    if expected is None:
        raise ValueError(f"Unknown optimizer: {kind!r}")
    if not isinstance(state, expected):
        raise TypeError(
            f"{kind.value} optimizer expects {expected.__name__}, "
            f"got {type(state).__name__}"
        )
    p = as_point(point)
    g = as_point(gradient)

    if kind is OptimizerKind.SGD:
        return p - lr * g, state
    if kind is OptimizerKind.MOMENTUM:
        velocity = MOMENTUM_BETA * state.velocity + lr * g
        return p - velocity, MomentumState(velocity=velocity)
    if kind is OptimizerKind.RMSPROP:
        square_avg, update = rmsprop_update(
            state.square_avg, g, alpha=RMSPROP_ALPHA, eps=EPSILON
        )
        return p - lr * update, RMSpropState(square_avg=square_avg)
    if kind is OptimizerKind.ADAM:
        m, v, t, update = adam_update(
            state.m, state.v, state.t, g,
            beta1=ADAM_BETA1, beta2=ADAM_BETA2, eps=EPSILON,
        )
        return p - lr * update, AdamState(m=m, v=v, t=t)
    raise ValueError(f"Unknown optimizer: {kind!r}")  # pragma: no cover - guardrail


__all__ = [
    "AdamState",
    "DESCRIPTIONS",
    "MomentumState",
    "OptimizerKind",
    "OptimizerState",
    "RMSpropState",
    "SGDState",
    "initial_state",
    "step",
]
