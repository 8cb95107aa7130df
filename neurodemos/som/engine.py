"""Kohonen self-organizing map with a global Gaussian neighbourhood."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple

import numpy as np

from ..core.types import Array, DimensionMismatchError, StepStatus
from .datasets import InputDataset, get_dataset

DEFAULT_GRID_SIZE = 10
DEFAULT_LEARNING_RATE = 0.5
DEFAULT_RADIUS = 3.0
MAX_ITERATIONS = 1000


@dataclass(frozen=True, eq=False)
class Neuron:
    i: int
    j: int
    weights: Array


@dataclass(frozen=True)
class BestMatchingUnit:
    i: int
    j: int
    distance: float


@dataclass(frozen=True, eq=False)
class SOMGrid:
    """``rows x cols`` neurons, each holding a ``dimensions``-wide weight vector."""

    weights: Array

    def __post_init__(self) -> None:
        weights = np.asarray(self.weights, dtype=np.float64)
        if weights.ndim != 3:
            raise ValueError(f"SOM weights must be (rows, cols, d), got {weights.shape}")
        object.__setattr__(self, "weights", weights)

    @classmethod
    def random(
        cls, rows: int, cols: int, dimensions: int, rng: np.random.Generator
    ) -> "SOMGrid":
        if rows < 1 or cols < 1 or dimensions < 1:
            raise ValueError("SOM grid needs at least one neuron and one dimension")
        return cls(rng.random((rows, cols, dimensions)))

    @property
    def shape(self) -> Tuple[int, int]:
        return int(self.weights.shape[0]), int(self.weights.shape[1])

    @property
    def dimensions(self) -> int:
        return int(self.weights.shape[2])

    def neuron(self, i: int, j: int) -> Neuron:
        return Neuron(i, j, self.weights[i, j].copy())

    def neurons(self) -> Iterator[Neuron]:
        rows, cols = self.shape
        for i in range(rows):
            for j in range(cols):
                yield self.neuron(i, j)

    def coordinates(self) -> Array:
        """``(rows, cols, 2)`` array of integer grid coordinates ``(i, j)``."""

        rows, cols = self.shape
        ii, jj = np.meshgrid(np.arange(rows), np.arange(cols), indexing="ij")
        return np.stack([ii, jj], axis=-1).astype(np.float64)


@dataclass(frozen=True, eq=False)
class SOMStepResult:
    grid: SOMGrid
    bmu: BestMatchingUnit | None
    current_input: Array | None
    status: StepStatus
    learning_rate: float = 0.0
    radius: float = 0.0


def _check_width(grid: SOMGrid, vector: Array, operation: str) -> None:
    if vector.shape[-1] != grid.dimensions:
        raise DimensionMismatchError(operation, vector.shape, (grid.dimensions,))


def find_bmu(grid: SOMGrid, sample) -> BestMatchingUnit:
    """Closest neuron to ``sample`` in weight space; ties go to row-major order."""

    x = np.asarray(sample, dtype=np.float64).reshape(-1)
    _check_width(grid, x, "find_bmu")
    distances = np.sqrt(np.sum((grid.weights - x) ** 2, axis=-1))
    flat = int(np.argmin(distances))
    i, j = np.unravel_index(flat, distances.shape)
    return BestMatchingUnit(int(i), int(j), float(distances[i, j]))


def decayed_parameters(
    iteration: int, learning_rate: float, radius: float, max_iterations: int
) -> Tuple[float, float]:
    """Exponentially decayed ``(eta(t), sigma(t))``."""

    if max_iterations <= 0:
        raise ValueError("max_iterations must be positive")
    eta = learning_rate * math.exp(-iteration / (max_iterations / 5))
    sigma = radius * math.exp(-iteration / (max_iterations / 3))
    return eta, sigma


def neighborhood(grid: SOMGrid, bmu: BestMatchingUnit, radius: float) -> Array:
    """Gaussian influence of ``bmu`` on every neuron, by grid distance."""

    coords = grid.coordinates()
    sq = np.sum((coords - np.array([bmu.i, bmu.j], dtype=np.float64)) ** 2, axis=-1)
    if radius <= 0:
        return (sq == 0).astype(np.float64)
    return np.exp(-sq / (2.0 * radius**2))


def update_weights(
    grid: SOMGrid,
    sample,
    bmu: BestMatchingUnit,
    learning_rate: float,
    radius: float,
) -> SOMGrid:
    """Return a new grid with ``w += eta * h * (x - w)`` applied to all neurons."""

    x = np.asarray(sample, dtype=np.float64).reshape(-1)
    _check_width(grid, x, "update_weights")
    influence = neighborhood(grid, bmu, radius)[..., np.newaxis]
    weights = grid.weights + learning_rate * influence * (x - grid.weights)
    return SOMGrid(weights)


def som_training_step(
    grid: SOMGrid,
    dataset: InputDataset,
    iteration: int,
    learning_rate: float,
    radius: float,
    max_iterations: int = MAX_ITERATIONS,
    rng: np.random.Generator | None = None,
) -> SOMStepResult:
    """Sample an input, find its BMU and pull the whole map towards it."""

    if iteration < 0:
        raise ValueError(f"iteration must be non-negative, got {iteration}")
    if not math.isfinite(learning_rate) or learning_rate <= 0:
        raise ValueError(f"learning_rate must be finite and positive, got {learning_rate}")
    if not math.isfinite(radius) or radius < 0:
        raise ValueError(f"radius must be finite and non-negative, got {radius}")
    if dataset.empty:
        return SOMStepResult(grid=grid, bmu=None, current_input=None, status=StepStatus.NO_DATA)
    if dataset.dimensions != grid.dimensions:
        raise DimensionMismatchError(
            "som_training_step", (dataset.dimensions,), (grid.dimensions,)
        )
    rng = rng if rng is not None else np.random.default_rng()
    sample = dataset.vectors[int(rng.integers(0, len(dataset)))].copy()
    bmu = find_bmu(grid, sample)
    eta, sigma = decayed_parameters(iteration, learning_rate, radius, max_iterations)
    new_grid = update_weights(grid, sample, bmu, eta, sigma)
    return SOMStepResult(
        grid=new_grid,
        bmu=bmu,
        current_input=sample,
        status=StepStatus.OK,
        learning_rate=eta,
        radius=sigma,
    )


def quantization_error(grid: SOMGrid, dataset: InputDataset) -> float:
    """Mean distance between each input and its best matching unit."""

    if dataset.empty:
        return 0.0
    flat = grid.weights.reshape(-1, grid.dimensions)
    diffs = dataset.vectors[:, np.newaxis, :] - flat[np.newaxis, :, :]
    distances = np.sqrt(np.sum(diffs**2, axis=-1))
    return float(np.mean(np.min(distances, axis=1)))


def topographic_error(grid: SOMGrid, dataset: InputDataset) -> float:
    """Fraction of inputs whose two closest units are not grid neighbours."""

    rows, cols = grid.shape
    if dataset.empty or rows * cols < 2:
        return 0.0
    flat = grid.weights.reshape(-1, grid.dimensions)
    diffs = dataset.vectors[:, np.newaxis, :] - flat[np.newaxis, :, :]
    distances = np.sum(diffs**2, axis=-1)
    order = np.argsort(distances, axis=1, kind="stable")[:, :2]
    first = np.stack(np.unravel_index(order[:, 0], (rows, cols)), axis=-1)
    second = np.stack(np.unravel_index(order[:, 1], (rows, cols)), axis=-1)
    adjacent = np.max(np.abs(first - second), axis=1) <= 1
    return float(np.mean(~adjacent))


class SOMStatus(str, Enum):
    IDLE = "idle"
    TRAINING = "training"
    FINISHED = "finished"


class SelfOrganizingMap:
    """Stateful training loop advanced one sample per :meth:`tick`."""

    def __init__(
        self,
        dataset: str = "colors",
        grid_size: int = DEFAULT_GRID_SIZE,
        learning_rate: float = DEFAULT_LEARNING_RATE,
        radius: float = DEFAULT_RADIUS,
        max_iterations: int = MAX_ITERATIONS,
        seed: int | None = None,
    ) -> None:
        if grid_size < 1:
            raise ValueError("grid_size must be at least 1")
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if not math.isfinite(learning_rate) or learning_rate <= 0:
            raise ValueError(f"learning rate must be positive, got {learning_rate}")
        if not math.isfinite(radius) or radius <= 0:
            raise ValueError(f"neighbourhood radius must be positive, got {radius}")
        self.dataset_name = dataset
        self.grid_size = int(grid_size)
        self.learning_rate = float(learning_rate)
        self.radius = float(radius)
        self.max_iterations = int(max_iterations)
        self.seed = seed
        self.rng = np.random.default_rng(seed)
        self.initialize()

    def initialize(self) -> None:
        """Regenerate the dataset and draw fresh random weights."""

        self.dataset = get_dataset(self.dataset_name, rng=self.rng)
        self.grid = SOMGrid.random(
            self.grid_size, self.grid_size, self.dataset.dimensions, self.rng
        )
        self.iteration = 0
        self.status = SOMStatus.IDLE
        self.last_bmu: BestMatchingUnit | None = None
        self.current_input: Array | None = None

    reset = initialize

    def switch_dataset(self, name: str) -> None:
        self.dataset_name = name
        self.initialize()

    def resize(self, grid_size: int) -> None:
        if grid_size < 1:
            raise ValueError("grid_size must be at least 1")
        self.grid_size = int(grid_size)
        self.initialize()

    def tick(self) -> SOMStepResult:
        if self.status is SOMStatus.FINISHED:
            return SOMStepResult(
                grid=self.grid,
                bmu=self.last_bmu,
                current_input=self.current_input,
                status=StepStatus.FINISHED,
            )
        result = som_training_step(
            self.grid,
            self.dataset,
            self.iteration,
            self.learning_rate,
            self.radius,
            self.max_iterations,
            self.rng,
        )
        if result.status is StepStatus.NO_DATA:
            return result
        self.status = SOMStatus.TRAINING
        self.grid = result.grid
        self.last_bmu = result.bmu
        self.current_input = result.current_input
        self.iteration += 1
        if self.iteration >= self.max_iterations:
            self.status = SOMStatus.FINISHED
        return result

    def quantization_error(self) -> float:
        return quantization_error(self.grid, self.dataset)

    def topographic_error(self) -> float:
        return topographic_error(self.grid, self.dataset)


__all__ = [
    "BestMatchingUnit",
    "Neuron",
    "SOMGrid",
    "SOMStatus",
    "SOMStepResult",
    "SelfOrganizingMap",
    "decayed_parameters",
    "find_bmu",
    "neighborhood",
    "quantization_error",
    "som_training_step",
    "topographic_error",
    "update_weights",
]
