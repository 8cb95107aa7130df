"""Step-by-step K-means on 2-D points."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Sequence, Tuple

import numpy as np

from ..core.types import StepStatus

BLOB_CENTERS: Tuple[Tuple[float, float], ...] = ((-2.0, -2.0), (2.0, 2.0), (-2.0, 2.0), (2.0, -2.0))
DEFAULT_K = 4
MAX_ITERATIONS = 20


@dataclass(frozen=True)
class Cluster:
    x: float
    y: float
    color: str


@dataclass(frozen=True)
class DataPoint:
    x: float
    y: float
    cluster: int = -1
    origin: int = -1


@dataclass(frozen=True)
class KMeansStepResult:
    points: Tuple[DataPoint, ...]
    centroids: Tuple[Cluster, ...]
    changed: bool
    status: StepStatus


def cluster_color(index: int) -> str:
    return f"hsl({index * 90}, 70%, 60%)"


def generate_blobs(
    rng: np.random.Generator,
    per_center: int = 25,
    centers: Sequence[Tuple[float, float]] = BLOB_CENTERS,
) -> List[DataPoint]:
    """Unassigned points jittered by ``±1`` around each of ``centers``."""

    points: List[DataPoint] = []
    for origin, (cx, cy) in enumerate(centers):
        offsets = rng.uniform(-1.0, 1.0, size=(per_center, 2))
        for dx, dy in offsets:
            points.append(DataPoint(cx + float(dx), cy + float(dy), -1, origin))
    return points


def initial_centroids(rng: np.random.Generator, k: int = DEFAULT_K) -> List[Cluster]:
    if k < 1:
        raise ValueError("k must be at least 1")
    positions = rng.uniform(-3.0, 3.0, size=(k, 2))
    return [Cluster(float(x), float(y), cluster_color(i)) for i, (x, y) in enumerate(positions)]


def kmeans_step(
    points: Sequence[DataPoint], centroids: Sequence[Cluster]
) -> KMeansStepResult:
    """Assign every point to its nearest centroid, then move centroids to means.

    A centroid with no assigned points keeps its position.  The result depends
    only on the arguments.
    """

    if not points or not centroids:
        return KMeansStepResult(tuple(points), tuple(centroids), False, StepStatus.NO_DATA)

    xy = np.array([(p.x, p.y) for p in points], dtype=np.float64)
    centers = np.array([(c.x, c.y) for c in centroids], dtype=np.float64)
    distances = np.sqrt(np.sum((xy[:, np.newaxis, :] - centers[np.newaxis, :, :]) ** 2, axis=-1))
    labels = np.argmin(distances, axis=1)

    new_points = tuple(
        replace(point, cluster=int(label)) for point, label in zip(points, labels)
    )
    changed = any(old.cluster != new.cluster for old, new in zip(points, new_points))

    new_centroids = []
    for index, centroid in enumerate(centroids):
        members = xy[labels == index]
        if members.shape[0] == 0:
            new_centroids.append(centroid)
            continue
        mx, my = members.mean(axis=0)
        new_centroids.append(replace(centroid, x=float(mx), y=float(my)))

    return KMeansStepResult(new_points, tuple(new_centroids), changed, StepStatus.OK)


def inertia(points: Sequence[DataPoint], centroids: Sequence[Cluster]) -> float:
    """Sum of squared distances from assigned points to their centroid."""

    total = 0.0
    for point in points:
        if point.cluster < 0:
            continue
        centroid = centroids[point.cluster]
        total += (point.x - centroid.x) ** 2 + (point.y - centroid.y) ** 2
    return total


class KMeansDemo:
    """Tick-driven K-means bounded by an iteration cap.

    With ``stop_when_stable`` the run also ends as soon as a step leaves every
    assignment unchanged.
    """

    def __init__(
        self,
        k: int = DEFAULT_K,
        per_center: int = 25,
        max_iterations: int = MAX_ITERATIONS,
        stop_when_stable: bool = True,
        seed: int | None = None,
    ) -> None:
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.k = int(k)
        self.per_center = int(per_center)
        self.max_iterations = int(max_iterations)
        self.stop_when_stable = stop_when_stable
        self.rng = np.random.default_rng(seed)
        self.generate()

    def generate(self) -> None:
        self.points: Tuple[DataPoint, ...] = tuple(generate_blobs(self.rng, self.per_center))
        self.centroids: Tuple[Cluster, ...] = tuple(initial_centroids(self.rng, self.k))
        self.iteration = 0
        self.finished = False

    reset = generate

    def tick(self) -> KMeansStepResult:
        if self.finished:
            return KMeansStepResult(self.points, self.centroids, False, StepStatus.FINISHED)
        result = kmeans_step(self.points, self.centroids)
        if result.status is StepStatus.NO_DATA:
            return result
        self.points = result.points
        self.centroids = result.centroids
        self.iteration += 1
        if self.iteration >= self.max_iterations or (
            self.stop_when_stable and not result.changed
        ):
            self.finished = True
        return result

    def inertia(self) -> float:
        return inertia(self.points, self.centroids)


__all__ = [
    "Cluster",
    "DataPoint",
    "KMeansDemo",
    "KMeansStepResult",
    "generate_blobs",
    "inertia",
    "initial_centroids",
    "kmeans_step",
]
