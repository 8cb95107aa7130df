"""Tick-driven gradient descent runs over a :class:`LossSurface`."""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

import numpy as np

from ..core.types import Array, as_point
from . import optimizers
from .optimizers import OptimizerKind, OptimizerState
from .surfaces import LossSurface, SurfaceKind, get_surface

DEFAULT_START = (-2.0, 0.0)
DEFAULT_LEARNING_RATE = 0.1
CONVERGENCE_TOLERANCE = 1e-3
MAX_ITERATIONS = 1000


def validate_learning_rate(lr: float) -> float:
    lr = float(lr)
    if not math.isfinite(lr) or lr <= 0:
        raise ValueError(f"learning rate must be a positive finite number, got {lr}")
    return lr


@dataclass(frozen=True, eq=False)
class OptimizerStepResult:
    """Outcome of one optimizer update.

    ``loss`` and ``gradient_magnitude`` describe the incoming point, i.e. the
    position whose gradient produced ``point``.
    """

    point: Array
    state: OptimizerState
    loss: float
    gradient_magnitude: float


def optimizer_step(
    kind: OptimizerKind,
    point,
    surface: LossSurface,
    learning_rate: float,
    state: OptimizerState,
) -> OptimizerStepResult:
    """Evaluate ``surface`` at ``point`` and apply one ``kind`` update."""

    lr = validate_learning_rate(learning_rate)
    current = as_point(point)
    gradient = surface.gradient(current)
    loss = surface.value(current)
    new_point, new_state = optimizers.step(kind, current, gradient, lr, state)
    return OptimizerStepResult(
        point=new_point,
        state=new_state,
        loss=loss,
        gradient_magnitude=float(np.hypot(gradient[0], gradient[1])),
    )


class RunStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    CONVERGED = "converged"
    DIVERGED = "diverged"


@dataclass(frozen=True, eq=False)
class TickResult:
    status: RunStatus
    iteration: int
    point: Array
    loss: float
    gradient_magnitude: float


class OptimizerRun:
    """Drive one optimizer over one surface, a single iteration per tick.

    The run owns its accumulator, path and counters exclusively.  Changing the
    surface, the optimizer or the start point discards all three.
    """

    def __init__(
        self,
        surface: SurfaceKind = SurfaceKind.QUADRATIC,
        optimizer: OptimizerKind = OptimizerKind.SGD,
        learning_rate: float = DEFAULT_LEARNING_RATE,
        start: Sequence[float] = DEFAULT_START,
        *,
        tolerance: float = CONVERGENCE_TOLERANCE,
        max_iterations: int = MAX_ITERATIONS,
    ) -> None:
        if max_iterations < 0:
            raise ValueError("max_iterations must be non-negative")
        self.surface = get_surface(SurfaceKind(surface))
        self.optimizer = OptimizerKind(optimizer)
        self.learning_rate = validate_learning_rate(learning_rate)
        self.tolerance = float(tolerance)
        self.max_iterations = int(max_iterations)
        self.start_point = as_point(start)
        self._clear()

    # ------------------------------------------------------------------
    # Lifecycle

    def _clear(self) -> None:
        self.state: OptimizerState = optimizers.initial_state(self.optimizer)
        self.point = self.start_point.copy()
        self.path: List[Array] = []
        self.iteration = 0
        self.status = RunStatus.IDLE
        self.final_loss: float | None = None

    def start(self) -> None:
        """Begin a run from the current start point."""

        self._clear()
        self.path = [self.point.copy()]
        self.status = RunStatus.RUNNING

    def reset(self) -> None:
        """Return to the default start point with fresh accumulators."""

        self.start_point = as_point(DEFAULT_START)
        self._clear()

    def reposition(self, point: Sequence[float]) -> None:
        """Move the start point; ignored while a run is in progress."""

        if self.status is RunStatus.RUNNING:
            return
        self.start_point = as_point(point)
        self._clear()

    def set_surface(self, surface: SurfaceKind) -> None:
        self.surface = get_surface(SurfaceKind(surface))
        self._clear()

    def set_optimizer(self, optimizer: OptimizerKind) -> None:
        self.optimizer = OptimizerKind(optimizer)
        self._clear()

    def set_learning_rate(self, learning_rate: float) -> None:
        self.learning_rate = validate_learning_rate(learning_rate)

    # ------------------------------------------------------------------
    # Stepping

    @property
    def loss(self) -> float:
        return self.surface.value(self.point)

    @property
    def gradient(self) -> Array:
        return self.surface.gradient(self.point)

    @property
    def done(self) -> bool:
        return self.status in {RunStatus.CONVERGED, RunStatus.DIVERGED}

    def tick(self) -> TickResult:
        """Advance one iteration, or settle into a terminal state."""

        if self.status is RunStatus.IDLE:
            self.start()
        if self.done:
            return self._snapshot()

        current_loss = self.loss
        if not math.isfinite(current_loss):
            self.status = RunStatus.DIVERGED
            self.final_loss = current_loss
            warnings.warn(
                f"{self.optimizer.value} diverged on {self.surface.kind.value} "
                f"after {self.iteration} iterations (lr={self.learning_rate})",
                RuntimeWarning,
                stacklevel=2,
            )
            return self._snapshot()
        if current_loss < self.tolerance or self.iteration > self.max_iterations:
            self.status = RunStatus.CONVERGED
            self.final_loss = current_loss
            return self._snapshot()

        with np.errstate(over="ignore", invalid="ignore"):
            result = optimizer_step(
                self.optimizer, self.point, self.surface, self.learning_rate, self.state
            )
        self.point = result.point
        self.state = result.state
        self.path.append(result.point.copy())
        self.iteration += 1
        return self._snapshot()

    def run_to_completion(self, max_ticks: int | None = None) -> TickResult:
        """Tick until a terminal state (or ``max_ticks`` ticks) is reached."""

        budget = max_ticks if max_ticks is not None else self.max_iterations + 2
        result = self.tick()
        ticks = 1
        while not self.done and ticks < budget:
            result = self.tick()
            ticks += 1
        return result

    def _snapshot(self) -> TickResult:
        with np.errstate(over="ignore", invalid="ignore"):
            gradient = self.gradient
            loss = self.loss
        return TickResult(
            status=self.status,
            iteration=self.iteration,
            point=self.point.copy(),
            loss=loss,
            gradient_magnitude=float(np.hypot(gradient[0], gradient[1])),
        )


__all__ = [
    "CONVERGENCE_TOLERANCE",
    "DEFAULT_START",
    "MAX_ITERATIONS",
    "OptimizerRun",
    "OptimizerStepResult",
    "RunStatus",
    "TickResult",
    "optimizer_step",
    "validate_learning_rate",
]
