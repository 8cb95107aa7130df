"""Synthetic input datasets for the self-organizing map."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, MutableMapping, Sequence

import numpy as np

from ..core.types import Array


@dataclass(frozen=True, eq=False)
class InputDataset:
    """An immutable collection of fixed-dimensionality input vectors.

    Attributes
    ----------
    name:
        Registry identifier, e.g. ``"colors"``.
    label:
        Human readable name shown next to the map.
    dimensions:
        Length of every vector; the SOM grid is built with the same width.
    vectors:
        ``(n, dimensions)`` float array.  Marked read-only on construction.
    provenance:
        Generator parameters recorded in run manifests.
    """

    name: str
    label: str
    dimensions: int
    vectors: Array
    description: str = ""
    provenance: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        vectors = np.array(self.vectors, dtype=np.float64)
        if vectors.size == 0:
            vectors = vectors.reshape(0, self.dimensions)
        if vectors.ndim != 2 or vectors.shape[1] != self.dimensions:
            raise ValueError(
                f"Dataset {self.name!r} expects vectors of width {self.dimensions}, "
                f"got shape {vectors.shape}"
            )
        vectors.setflags(write=False)
        object.__setattr__(self, "vectors", vectors)

    def __len__(self) -> int:
        return int(self.vectors.shape[0])

    @property
    def empty(self) -> bool:
        return len(self) == 0


DatasetFactory = Callable[..., InputDataset]

_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(name: str, factory: DatasetFactory | None = None):
    """Register a dataset factory, directly or as a decorator."""

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[name] = func
        return func

    if factory is not None:
        return _decorator(factory)
    return _decorator


def get_dataset(name: str, rng: np.random.Generator | None = None, **options: Any) -> InputDataset:
    """Generate the dataset registered under ``name``."""

    if name not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset {name!r}. Available datasets: {available}")
    rng = rng if rng is not None else np.random.default_rng()
    return _REGISTRY[name](rng=rng, **options)


def available_datasets() -> Iterable[str]:
    return sorted(_REGISTRY)


def _jittered_blobs(
    rng: np.random.Generator,
    centers: Sequence[Sequence[float]],
    per_center: int,
    half_widths: Sequence[float],
) -> Array:
    centers_arr = np.asarray(centers, dtype=np.float64)
    widths = np.asarray(half_widths, dtype=np.float64)
    blocks = []
    for center in centers_arr:
        noise = rng.uniform(-1.0, 1.0, size=(per_center, centers_arr.shape[1])) * widths
        blocks.append(center + noise)
    return np.vstack(blocks)


COLOR_CENTERS = (
    (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0),
    (1.0, 1.0, 0.0), (1.0, 0.0, 1.0), (0.0, 1.0, 1.0),
    (0.5, 0.5, 0.5), (0.0, 0.0, 0.0), (1.0, 1.0, 1.0),
)
CLUSTER_CENTERS = ((-2.0, -2.0), (2.0, 2.0), (-2.0, 2.0), (2.0, -2.0), (0.0, 0.0))
IRIS_CENTERS = (
    (5.1, 3.5, 1.4, 0.2),
    (6.2, 2.8, 4.3, 1.3),
    (7.3, 3.0, 6.3, 1.8),
)


@register_dataset("colors")
def make_colors(rng: np.random.Generator, per_center: int = 20, jitter: float = 0.15) -> InputDataset:
    vectors = _jittered_blobs(rng, COLOR_CENTERS, per_center, (jitter,) * 3)
    return InputDataset(
        name="colors",
        label="RGB Colors",
        dimensions=3,
        vectors=np.clip(vectors, 0.0, 1.0),
        description="Learn color clustering in RGB space",
        provenance={"type": "synthetic", "per_center": per_center, "jitter": jitter},
    )


@register_dataset("clusters2d")
def make_clusters2d(rng: np.random.Generator, per_center: int = 30, jitter: float = 1.0) -> InputDataset:
    vectors = _jittered_blobs(rng, CLUSTER_CENTERS, per_center, (jitter, jitter))
    return InputDataset(
        name="clusters2d",
        label="2D Clusters",
        dimensions=2,
        vectors=vectors,
        description="Simple 2D clustering problem",
        provenance={"type": "synthetic", "per_center": per_center, "jitter": jitter},
    )


@register_dataset("iris")
def make_iris(rng: np.random.Generator, per_center: int = 50) -> InputDataset:
    half_widths = (0.75, 0.5, 1.0, 0.4)
    vectors = _jittered_blobs(rng, IRIS_CENTERS, per_center, half_widths)
    return InputDataset(
        name="iris",
        label="Iris-like Data",
        dimensions=4,
        vectors=np.maximum(vectors, 0.0),
        description="Multi-dimensional classification data",
        provenance={"type": "synthetic", "per_center": per_center},
    )


__all__ = [
    "InputDataset",
    "available_datasets",
    "get_dataset",
    "make_clusters2d",
    "make_colors",
    "make_iris",
    "register_dataset",
]
