"""In-process entry points consumed by a rendering layer.

Each function accepts either the enum member or its string value for ``kind``
arguments, computes one result, and leaves its inputs untouched.
"""

from __future__ import annotations

import functools
import threading
from enum import Enum
from typing import Any, Sequence, Type, TypeVar

import numpy as np

from .core.activations import ActivationKind, get_activation
from .core.losses import LossKind, get_loss
from .demos.kmeans import Cluster, DataPoint, KMeansStepResult
from .demos.kmeans import kmeans_step as _kmeans_step
from .optim.engine import OptimizerStepResult
from .optim.engine import optimizer_step as _optimizer_step
from .optim.optimizers import OptimizerKind, OptimizerState
from .optim.surfaces import LossSurface, SurfaceKind, get_surface
from .som.datasets import InputDataset
from .som.engine import SOMGrid, SOMStepResult
from .som.engine import som_training_step as _som_training_step

E = TypeVar("E", bound=Enum)


def parse_kind(enum_type: Type[E], value: E | str) -> E:
    """Resolve ``value`` into a member of ``enum_type``."""

    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value).lower())
    except ValueError:
        valid = ", ".join(member.value for member in enum_type)
        raise ValueError(
            f"Unknown {enum_type.__name__} {value!r}. Valid values: {valid}"
        ) from None


def compute_activation(kind: ActivationKind | str, x):
    return get_activation(parse_kind(ActivationKind, kind)).apply(x)


def compute_activation_derivative(kind: ActivationKind | str, x):
    return get_activation(parse_kind(ActivationKind, kind)).derivative(x)


def compute_loss(kind: LossKind | str, predicted, actual) -> float:
    return get_loss(parse_kind(LossKind, kind)).loss(predicted, actual)


def compute_loss_gradient(kind: LossKind | str, predicted, actual):
    return get_loss(parse_kind(LossKind, kind)).gradient(predicted, actual)


def optimizer_step(
    kind: OptimizerKind | str,
    point: Sequence[float],
    surface: LossSurface | SurfaceKind | str,
    learning_rate: float,
    state: OptimizerState,
) -> OptimizerStepResult:
    if not isinstance(surface, LossSurface):
        surface = get_surface(parse_kind(SurfaceKind, surface))
    return _optimizer_step(
        parse_kind(OptimizerKind, kind), point, surface, learning_rate, state
    )


def som_training_step(
    grid: SOMGrid,
    dataset: InputDataset,
    iteration: int,
    learning_rate: float,
    radius: float,
    max_iterations: int,
    rng: np.random.Generator | None = None,
) -> SOMStepResult:
    return _som_training_step(
        grid, dataset, iteration, learning_rate, radius, max_iterations, rng
    )


def kmeans_step(
    points: Sequence[DataPoint], centroids: Sequence[Cluster]
) -> KMeansStepResult:
    return _kmeans_step(points, centroids)


class SerializedEngine:
    """Give callers sharing one engine instance single-writer access.

    Every method call on the wrapped engine runs under one lock. Plain data
    attributes and properties are read without it.
    """

    def __init__(self, engine: Any) -> None:
        self._engine = engine
        self._lock = threading.RLock()

    @property
    def engine(self) -> Any:
        return self._engine

    def tick(self):
        with self._lock:
            return self._engine.tick()

    def reset(self) -> None:
        with self._lock:
            self._engine.reset()

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._engine, name)
        if not callable(attr):
            return attr

        @functools.wraps(attr)
        def locked(*args: Any, **kwargs: Any) -> Any:
            with self._lock:
                return attr(*args, **kwargs)

        return locked


__all__ = [
    "SerializedEngine",
    "compute_activation",
    "compute_activation_derivative",
    "compute_loss",
    "compute_loss_gradient",
    "kmeans_step",
    "optimizer_step",
    "parse_kind",
    "som_training_step",
]
