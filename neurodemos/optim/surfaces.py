"""Toy 2-D loss surfaces with closed-form gradients."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Tuple

import numpy as np

from ..core.types import Array, as_point

DOMAIN: Tuple[float, float, float, float] = (-3.0, 3.0, -3.0, 3.0)

SurfaceFn = Callable[[float, float], float]
GradientFn = Callable[[float, float], Tuple[float, float]]


class SurfaceKind(str, Enum):
    QUADRATIC = "quadratic"
    ROSENBROCK = "rosenbrock"
    HIMMELBLAU = "himmelblau"
    BEALE = "beale"


@dataclass(frozen=True)
class LossSurface:
    """A scalar field ``z = f(x, y)`` used as an optimisation target."""

    kind: SurfaceKind
    label: str
    fn: SurfaceFn
    grad: GradientFn
    minimum: Tuple[float, float, float]
    description: str

    def value(self, point) -> float:
        # numpy scalars overflow to inf where Python floats would raise
        x, y = as_point(point)
        with np.errstate(over="ignore", invalid="ignore"):
            return float(self.fn(x, y))

    def gradient(self, point) -> Array:
        x, y = as_point(point)
        with np.errstate(over="ignore", invalid="ignore"):
            return np.asarray(self.grad(x, y), dtype=np.float64)

    def grid(self, resolution: int = 100) -> tuple[Array, Array, Array]:
        """Sample the surface over :data:`DOMAIN` for contour rendering."""

        x_min, x_max, y_min, y_max = DOMAIN
        xs = np.linspace(x_min, x_max, resolution)
        ys = np.linspace(y_min, y_max, resolution)
        X, Y = np.meshgrid(xs, ys)
        Z = np.vectorize(self.fn)(X, Y)
        return X, Y, Z


def _quadratic(x: float, y: float) -> float:
    return x * x + y * y


def _quadratic_grad(x: float, y: float) -> Tuple[float, float]:
    return 2 * x, 2 * y


def _rosenbrock(x: float, y: float) -> float:
    return 100 * (y - x * x) ** 2 + (1 - x) ** 2


def _rosenbrock_grad(x: float, y: float) -> Tuple[float, float]:
    return -400 * x * (y - x * x) - 2 * (1 - x), 200 * (y - x * x)


def _himmelblau(x: float, y: float) -> float:
    return (x * x + y - 11) ** 2 + (x + y * y - 7) ** 2


def _himmelblau_grad(x: float, y: float) -> Tuple[float, float]:
    a = x * x + y - 11
    b = x + y * y - 7
    return 4 * x * a + 2 * b, 2 * a + 4 * y * b


def _beale(x: float, y: float) -> float:
    return (
        (1.5 - x + x * y) ** 2
        + (2.25 - x + x * y * y) ** 2
        + (2.625 - x + x * y**3) ** 2
    )


def _beale_grad(x: float, y: float) -> Tuple[float, float]:
    t1 = 1.5 - x + x * y
    t2 = 2.25 - x + x * y * y
    t3 = 2.625 - x + x * y**3
    dx = 2 * t1 * (y - 1) + 2 * t2 * (y * y - 1) + 2 * t3 * (y**3 - 1)
    dy = 2 * t1 * x + 2 * t2 * 2 * x * y + 2 * t3 * 3 * x * y * y
    return dx, dy


SURFACES: Dict[SurfaceKind, LossSurface] = {
    SurfaceKind.QUADRATIC: LossSurface(
        SurfaceKind.QUADRATIC,
        "Quadratic Bowl",
        _quadratic,
        _quadratic_grad,
        (0.0, 0.0, 0.0),
        "Simple convex function with global minimum at origin",
    ),
    SurfaceKind.ROSENBROCK: LossSurface(
        SurfaceKind.ROSENBROCK,
        "Rosenbrock Function",
        _rosenbrock,
        _rosenbrock_grad,
        (1.0, 1.0, 0.0),
        "Banana-shaped valley that tests optimizer robustness",
    ),
    SurfaceKind.HIMMELBLAU: LossSurface(
        SurfaceKind.HIMMELBLAU,
        "Himmelblau Function",
        _himmelblau,
        _himmelblau_grad,
        (3.0, 2.0, 0.0),
        "Multi-modal function with four global minima",
    ),
    SurfaceKind.BEALE: LossSurface(
        SurfaceKind.BEALE,
        "Beale Function",
        _beale,
        _beale_grad,
        (3.0, 0.5, 0.0),
        "Narrow valley leading to global minimum",
    ),
}


def get_surface(kind: SurfaceKind) -> LossSurface:
    try:
        return SURFACES[kind]
    except KeyError as exc:
        available = ", ".join(k.value for k in SurfaceKind)
        raise ValueError(f"Unknown loss surface {kind!r}. Available: {available}") from exc


__all__ = ["DOMAIN", "LossSurface", "SURFACES", "SurfaceKind", "get_surface"]
