"""Headless-safe plotting adapters."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple


def _pyplot():
    import matplotlib

    matplotlib.use("Agg", force=True)
    import matplotlib.pyplot as plt  # imported lazily for headless safety

    return plt


class PlotAdapter:
    """Collect one metric per tick and optionally emit matplotlib figures."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False, metric: str = "loss"):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.metric = metric
        self._history: List[Tuple[int, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_step(self, step: int, metrics):
        if not self.enable_plots or self.metric not in metrics:
            return
        self._history.append((step, float(metrics[self.metric])))

    def close(self) -> None:
        if not self.enable_plots or not self._history:
            return
        plt = _pyplot()
        steps, values = zip(*self._history)
        fig, ax = plt.subplots()
        ax.plot(steps, values)
        ax.set_xlabel("Step")
        ax.set_ylabel(self.metric.replace("_", " ").title())
        ax.set_title(f"{self.metric} per tick")
        fig.savefig(self.run_dir / f"{self.metric}.png")
        plt.close(fig)

    __call__ = on_step


def plot_optimization_path(surface, path: Sequence[Sequence[float]], out_path: str | Path) -> str:
    """Draw ``path`` over the contour lines of ``surface``."""

    import numpy as np

    plt = _pyplot()
    X, Y, Z = surface.grid(120)
    fig, ax = plt.subplots(figsize=(6, 6))
    ax.contour(X, Y, np.log1p(Z), levels=20, cmap="viridis")
    if len(path):
        pts = np.asarray(path, dtype=np.float64)
        ax.plot(pts[:, 0], pts[:, 1], "-o", color="tab:red", markersize=2, linewidth=1)
        ax.plot(pts[-1, 0], pts[-1, 1], "o", color="tab:red", markersize=6)
    mx, my, _ = surface.minimum
    ax.plot(mx, my, "*", color="gold", markersize=12)
    ax.set_xlim(-3, 3)
    ax.set_ylim(-3, 3)
    ax.set_title(surface.label)
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out)
    plt.close(fig)
    return str(out)


def plot_som_grid(weights, out_path: str | Path) -> str:
    """Render a 3-D weight grid as an RGB image (first three dimensions, min-max scaled)."""

    import numpy as np

    plt = _pyplot()
    w = np.asarray(weights, dtype=np.float64)
    rgb = np.zeros(w.shape[:2] + (3,))
    channels = min(3, w.shape[2])
    rgb[..., :channels] = w[..., :channels]
    lo, hi = rgb.min(), rgb.max()
    if hi > lo:
        rgb = (rgb - lo) / (hi - lo)
    fig, ax = plt.subplots()
    ax.imshow(rgb, interpolation="nearest")
    ax.set_axis_off()
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out)
    plt.close(fig)
    return str(out)


__all__ = ["PlotAdapter", "plot_optimization_path", "plot_som_grid"]
