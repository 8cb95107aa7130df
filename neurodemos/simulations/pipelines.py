"""Pipeline assembly for neurodemos tick-driven simulations."""

from __future__ import annotations

import hashlib
import json
import time
from copy import deepcopy
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Tuple

import numpy as np

from ..core.types import RunResult, StepStatus
from ..demos.kmeans import KMeansDemo
from ..demos.training_curve import TrainingCurveSimulator
from ..optim.engine import OptimizerRun
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter, plot_optimization_path, plot_som_grid
from ..reporting.summary import write_summary
from ..som.engine import SelfOrganizingMap, SOMStatus

ENGINES = ("optimizer", "som", "kmeans", "training_curve")

_PRESETS: Dict[str, Mapping[str, object]] = {
    "optimizer-sgd-quadratic": {
        "engine": "optimizer",
        "params": {
            "optimizer": "sgd",
            "surface": "quadratic",
            "learning_rate": 0.1,
            "start": [-2.0, 0.0],
        },
        "run": {"seed": 0, "run_dir": "runs/optimizer-sgd-quadratic", "enable_plots": False},
    },
    "optimizer-adam-quadratic": {
        "engine": "optimizer",
        "params": {
            "optimizer": "adam",
            "surface": "quadratic",
            "learning_rate": 0.1,
            "start": [-2.0, 0.0],
        },
        "run": {"seed": 0, "run_dir": "runs/optimizer-adam-quadratic", "enable_plots": False},
    },
    "optimizer-momentum-rosenbrock": {
        "engine": "optimizer",
        "params": {
            "optimizer": "momentum",
            "surface": "rosenbrock",
            "learning_rate": 0.0005,
            "start": [-1.5, 1.5],
        },
        "run": {
            "seed": 0,
            "run_dir": "runs/optimizer-momentum-rosenbrock",
            "enable_plots": False,
        },
    },
    "som-colors": {
        "engine": "som",
        "params": {
            "dataset": "colors",
            "grid_size": 10,
            "learning_rate": 0.5,
            "radius": 3.0,
            "max_iterations": 1000,
        },
        "run": {"seed": 7, "run_dir": "runs/som-colors", "enable_plots": False},
    },
    "som-iris": {
        "engine": "som",
        "params": {
            "dataset": "iris",
            "grid_size": 8,
            "learning_rate": 0.5,
            "radius": 2.5,
            "max_iterations": 600,
        },
        "run": {"seed": 11, "run_dir": "runs/som-iris", "enable_plots": False},
    },
    "kmeans-blobs": {
        "engine": "kmeans",
        "params": {"k": 4, "per_center": 25, "max_iterations": 20, "stop_when_stable": True},
        "run": {"seed": 3, "run_dir": "runs/kmeans-blobs", "enable_plots": False},
    },
    "training-curve": {
        "engine": "training_curve",
        "params": {"learning_rate": 0.01, "max_epochs": 100, "window": 50},
        "run": {"seed": 5, "run_dir": "runs/training-curve", "enable_plots": False},
    },
    "optimizer-sweep": {
        "sweep": {
            "optimizers": ["sgd", "momentum", "rmsprop", "adam"],
            "surfaces": ["quadratic", "himmelblau", "beale"],
        },
        "engine": "optimizer",
        "params": {"learning_rate": 0.01, "start": [-2.0, 0.0]},
        "run": {"seed": 0, "run_dir": "runs/optimizer-sweep", "enable_plots": False},
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_PRESET_SUFFIXES = (".json", ".yaml", ".yml")
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def _decode_preset(path: Path) -> object:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text) if text.strip() else {}
    try:
        import yaml  # type: ignore
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(f"PyYAML is required to read preset {path.name}") from exc
    return yaml.safe_load(text) or {}


def _check_preset(path: Path, data: object) -> Dict[str, object]:
    """Reject preset files that ``run_pipeline`` could not drive."""

    if not isinstance(data, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    missing = sorted({"engine", "params"} - set(data))
    if missing:
        raise KeyError(f"Preset {path.name} is missing required sections: {', '.join(missing)}")
    if data["engine"] not in ENGINES:
        raise ValueError(
            f"Preset {path.name} names unknown engine {data['engine']!r}; "
            f"expected one of {', '.join(ENGINES)}"
        )
    for section in ("params", "run", "sweep"):
        if section in data and not isinstance(data[section], Mapping):
            raise TypeError(f"Preset {path.name}: '{section}' must be a mapping")
    # file presets carry JSON values only
    return json.loads(json.dumps(data))


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        files = sorted(_PRESET_DIR.iterdir()) if _PRESET_DIR.is_dir() else []
        for path in files:
            if path.suffix.lower() not in _PRESET_SUFFIXES:
                continue
            if path.stem in found:
                raise ValueError(f"Preset {path.stem} is defined by more than one file")
            found[path.stem] = _check_preset(path, _decode_preset(path))
        _FILE_PRESETS_CACHE = found
    return _FILE_PRESETS_CACHE


def presets() -> Mapping[str, Mapping[str, object]]:
    """Built-in presets, overlaid by the files in ``configs/presets``."""

    merged = {**_PRESETS, **_file_presets()}
    return {name: deepcopy(cfg) for name, cfg in sorted(merged.items())}


def load_preset(name: str) -> Mapping[str, object]:
    source = _file_presets().get(name, _PRESETS.get(name))
    if source is None:
        raise KeyError(f"Unknown preset: {name}. Available: {', '.join(presets())}")
    return deepcopy(source)


def _canonical(value: object) -> object:
    if isinstance(value, Enum):
        return _canonical(value.value)
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, Mapping):
        return {str(k): _canonical(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    if isinstance(value, Path):
        return value.as_posix()
    return value


def config_hash(config: Mapping[str, object]) -> str:
    """Return a 12-character run id for ``config``.

    Key order does not matter, and an enum hashes like its string value, so
    ``"adam"`` and ``OptimizerKind.ADAM`` name one run.
    """

    canonical = json.dumps(_canonical(config), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:12]


def run_pipeline(config: Mapping[str, object]) -> RunResult | List[RunResult]:
    if "sweep" in config:
        return _run_sweep(config)
    return _run_single(config)


def _run_sweep(config: Mapping[str, object]) -> List[RunResult]:
    sweep_cfg = config["sweep"]
    base_dir = Path(config.get("run", {}).get("run_dir", "runs/sweep"))
    combos: List[Tuple[Mapping[str, object], str]] = []
    if config.get("engine") == "optimizer" and "optimizers" in sweep_cfg:
        for optimizer in sweep_cfg["optimizers"]:
            for surface in sweep_cfg.get("surfaces", ["quadratic"]):
                combos.append(
                    ({"params": {"optimizer": optimizer, "surface": surface}}, f"{optimizer}-{surface}")
                )
    for seed in sweep_cfg.get("seeds", []):
        combos.append(({"run": {"seed": seed}}, f"seed-{seed}"))
    if not combos:
        raise ValueError("Sweep section expands to no runs")

    results: List[RunResult] = []
    for override, label in combos:
        cfg = deepcopy(dict(config))
        cfg.pop("sweep", None)
        for section, values in override.items():
            cfg.setdefault(section, {}).update(values)
        cfg.setdefault("run", {})["run_dir"] = str(base_dir / label)
        results.append(_run_single(cfg))
    return results


class _Driver:
    """Engine adapter: one ``advance`` per tick returning metrics and a done flag."""

    def __init__(
        self,
        engine: object,
        advance: Callable[[], Tuple[Dict[str, object], bool]],
        provenance: Mapping[str, object],
        plot_metric: str,
        budget: int,
    ) -> None:
        self.engine = engine
        self.advance = advance
        self.provenance = provenance
        self.plot_metric = plot_metric
        self.budget = budget


def _build_driver(engine: str, params: Mapping[str, object], seed: int) -> _Driver:
    if engine == "optimizer":
        run = OptimizerRun(
            surface=str(params.get("surface", "quadratic")),
            optimizer=str(params.get("optimizer", "sgd")),
            learning_rate=float(params.get("learning_rate", 0.1)),
            start=params.get("start", (-2.0, 0.0)),
            tolerance=float(params.get("tolerance", 1e-3)),
            max_iterations=int(params.get("max_iterations", 1000)),
        )

        def advance() -> Tuple[Dict[str, object], bool]:
            tick = run.tick()
            metrics = {
                "iteration": tick.iteration,
                "x": float(tick.point[0]),
                "y": float(tick.point[1]),
                "loss": tick.loss,
                "gradient_magnitude": tick.gradient_magnitude,
                "learning_rate": run.learning_rate,
                "status": tick.status.value,
            }
            return metrics, run.done

        provenance = {
            "surface": run.surface.kind.value,
            "minimum": list(run.surface.minimum),
            "start": run.start_point.tolist(),
        }
        return _Driver(run, advance, provenance, "loss", run.max_iterations + 2)

    if engine == "som":
        som = SelfOrganizingMap(
            dataset=str(params.get("dataset", "colors")),
            grid_size=int(params.get("grid_size", 10)),
            learning_rate=float(params.get("learning_rate", 0.5)),
            radius=float(params.get("radius", 3.0)),
            max_iterations=int(params.get("max_iterations", 1000)),
            seed=seed,
        )
        every = max(1, int(params.get("error_every", 50)))

        def advance() -> Tuple[Dict[str, object], bool]:
            result = som.tick()
            metrics: Dict[str, object] = {
                "iteration": som.iteration,
                "learning_rate": result.learning_rate,
                "radius": result.radius,
                "status": result.status.value,
            }
            if result.bmu is not None:
                metrics["bmu_distance"] = result.bmu.distance
            done = som.status is SOMStatus.FINISHED or result.status is StepStatus.NO_DATA
            if done or som.iteration % every == 0:
                metrics["quantization_error"] = som.quantization_error()
            return metrics, done

        provenance = dict(som.dataset.provenance)
        provenance.update({"name": som.dataset.name, "samples": len(som.dataset)})
        return _Driver(som, advance, provenance, "quantization_error", som.max_iterations)

    if engine == "kmeans":
        demo = KMeansDemo(
            k=int(params.get("k", 4)),
            per_center=int(params.get("per_center", 25)),
            max_iterations=int(params.get("max_iterations", 20)),
            stop_when_stable=bool(params.get("stop_when_stable", True)),
            seed=seed,
        )

        def advance() -> Tuple[Dict[str, object], bool]:
            result = demo.tick()
            metrics = {
                "iteration": demo.iteration,
                "inertia": demo.inertia(),
                "changed": int(result.changed),
                "status": result.status.value,
            }
            return metrics, demo.finished or result.status is StepStatus.NO_DATA

        provenance = {"generator": "gaussian_blobs", "points": len(demo.points), "k": demo.k}
        return _Driver(demo, advance, provenance, "inertia", demo.max_iterations)

    if engine == "training_curve":
        sim = TrainingCurveSimulator(
            learning_rate=float(params.get("learning_rate", 0.01)),
            max_epochs=int(params.get("max_epochs", 100)),
            window=int(params.get("window", 50)),
            seed=seed,
        )

        def advance() -> Tuple[Dict[str, object], bool]:
            record = sim.tick()
            metrics = {
                "epoch": record.epoch,
                "loss": record.loss,
                "accuracy": record.accuracy,
                "status": record.status.value,
            }
            return metrics, sim.finished

        provenance = {"generator": "exponential_decay_with_noise"}
        return _Driver(sim, advance, provenance, "loss", sim.max_epochs)

    raise ValueError(f"Unknown engine: {engine}. Expected one of {', '.join(ENGINES)}")


def _run_single(config: Mapping[str, object]) -> RunResult:
    engine = str(config.get("engine", ""))
    params = dict(config.get("params", {}))
    run_cfg = dict(config.get("run", {}))
    seed = int(run_cfg.get("seed", 0))

    driver = _build_driver(engine, params, seed)
    max_ticks = run_cfg.get("max_ticks")
    budget = int(max_ticks) if max_ticks is not None else driver.budget

    run_dir = _resolve_run_dir(run_cfg, engine, config)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(engine=engine, params=params, seed=seed, budget=budget, run_dir=run_dir)

    jsonl = JsonlSink(run_dir / f"metrics_{engine}.jsonl", engine=engine, seed=seed)
    csv_sink = CsvSink(run_dir / f"metrics_{engine}.csv", engine=engine)
    plots = PlotAdapter(
        run_dir, enable_plots=bool(run_cfg.get("enable_plots", False)), metric=driver.plot_metric
    )
    sinks = [jsonl, csv_sink, plots]

    steps = 0
    metrics: Dict[str, object] = {}
    done = False
    while not done and steps < budget:
        metrics, done = driver.advance()
        steps += 1
        for sink in sinks:
            sink.on_step(steps, metrics)

    plots.close()
    if plots.enable_plots:
        _engine_plots(engine, driver.engine, run_dir)

    status = str(metrics.get("status", "idle"))
    final_metrics = {k: v for k, v in metrics.items() if k != "status"}
    safe_config = json.loads(json.dumps(config))

    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        engine=engine,
        dataset_provenance=driver.provenance,
        final_metrics=final_metrics,
    )
    summary_tail = int(run_cfg.get("summary_tail", 32))
    summary_path = write_summary(jsonl.path, run_dir / "summary.json", tail=summary_tail)

    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))
    (run_dir / "metrics.jsonl").write_text(jsonl.path.read_text())
    (run_dir / "metrics.csv").write_text(csv_sink.path.read_text())

    return RunResult(
        engine=engine,
        steps=steps,
        status=status,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=str(summary_path),
        final_metrics=final_metrics,
    )


def _engine_plots(engine: str, instance: object, run_dir: Path) -> None:
    if engine == "optimizer":
        plot_optimization_path(instance.surface, instance.path, run_dir / "path.png")
    elif engine == "som":
        plot_som_grid(instance.grid.weights, run_dir / "som_grid.png")


def _resolve_run_dir(run_cfg: Mapping[str, object], engine: str, config: Mapping[str, object]) -> Path:
    if "run_dir" in run_cfg:
        return Path(run_cfg["run_dir"])
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / engine / config_hash(config)


def _print_startup_summary(
    *,
    engine: str,
    params: Mapping[str, object],
    seed: int,
    budget: int,
    run_dir: Path,
) -> None:
    print("=== neurodemos run ===")
    print(f"Engine        : {engine}")
    for key in sorted(params):
        print(f"{key:<14}: {params[key]}")
    print(f"Seed          : {seed}")
    print(f"Tick budget   : {budget}")
    print(f"Run dir       : {run_dir}")
    print("======================")


__all__ = ["ENGINES", "config_hash", "load_preset", "presets", "run_pipeline"]
