"""Core typing contracts for neurodemos."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np

Array = np.ndarray
Point = Tuple[float, float]


class DimensionMismatchError(ValueError):
    """Raised when array operands have incompatible shapes."""

    def __init__(self, operation: str, left: Tuple[int, ...], right: Tuple[int, ...]):
        self.operation = operation
        self.left = tuple(left)
        self.right = tuple(right)
        super().__init__(
            f"{operation}: incompatible shapes {self.left} and {self.right}"
        )


class StepStatus(str, Enum):
    """Outcome of a single engine tick."""

    OK = "ok"
    NO_DATA = "no_data"
    CONVERGED = "converged"
    DIVERGED = "diverged"
    FINISHED = "finished"


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`neurodemos.simulations.pipelines.run_pipeline`."""

    engine: str
    steps: int
    status: str
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    final_metrics: dict | None = None


def as_point(value) -> Array:
    """Return ``value`` as a fresh float64 ``(x, y)`` array."""

    point = np.array(value, dtype=np.float64).reshape(-1)
    if point.shape != (2,):
        raise DimensionMismatchError("as_point", point.shape, (2,))
    return point


__all__ = [
    "Array",
    "DimensionMismatchError",
    "Point",
    "RunResult",
    "StepStatus",
    "as_point",
]
