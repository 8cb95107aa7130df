"""Gradient descent playground: loss surfaces, optimizers and tick-driven runs."""

from .engine import OptimizerRun, OptimizerStepResult, RunStatus, optimizer_step
from .optimizers import OptimizerKind, initial_state
from .surfaces import SURFACES, LossSurface, SurfaceKind, get_surface

__all__ = [
    "LossSurface",
    "OptimizerKind",
    "OptimizerRun",
    "OptimizerStepResult",
    "RunStatus",
    "SURFACES",
    "SurfaceKind",
    "get_surface",
    "initial_state",
    "optimizer_step",
]
