from __future__ import annotations

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import numpy as np
import pytest

from neurodemos.simulations import pipelines


def _config(name: str, tmp_path: Path) -> dict:
    config = json.loads(json.dumps(pipelines.load_preset(name)))
    config["run"]["run_dir"] = str(tmp_path / name)
    return config


def test_pipeline_smoke_optimizer(tmp_path):
    config = _config("optimizer-sgd-quadratic", tmp_path)
    result = pipelines.run_pipeline(config)
    assert not isinstance(result, list)
    assert result.engine == "optimizer"
    assert result.status == "converged"
    assert result.final_metrics["loss"] < 1e-3
    run_dir = Path(config["run"]["run_dir"])
    for name in ("metrics.jsonl", "metrics.csv", "manifest.json", "summary.json", "config.json"):
        assert (run_dir / name).exists(), name


def test_metrics_records_follow_ticks(tmp_path):
    config = _config("optimizer-adam-quadratic", tmp_path)
    result = pipelines.run_pipeline(config)
    lines = Path(result.metrics_path).read_text().splitlines()
    assert len(lines) == result.steps
    records = [json.loads(line) for line in lines]
    assert [r["step"] for r in records] == list(range(1, result.steps + 1))
    assert records[0]["engine"] == "optimizer"
    assert records[0]["seed"] == 0
    assert records[-1]["status"] == "converged"
    iterations = [r["iteration"] for r in records]
    assert iterations == sorted(iterations)


def test_max_ticks_bounds_the_run(tmp_path):
    config = _config("som-colors", tmp_path)
    config["run"]["max_ticks"] = 15
    result = pipelines.run_pipeline(config)
    assert result.steps == 15
    assert result.status == "ok"


@pytest.mark.parametrize("name", ["kmeans-blobs", "training-curve", "som-clusters2d"])
def test_engine_presets_finish(tmp_path, name):
    config = _config(name, tmp_path)
    if config["engine"] == "som":
        config["params"]["max_iterations"] = 60
    result = pipelines.run_pipeline(config)
    assert result.status == "ok" or result.status == "finished"
    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["engine"] == config["engine"]
    assert manifest["environment"]["numpy"] == np.__version__
    summary = json.loads(Path(result.summary_path).read_text())
    assert summary["records"] == result.steps


def test_sweep_expands_optimizers_and_surfaces(tmp_path):
    config = _config("optimizer-sweep", tmp_path)
    config["sweep"] = {"optimizers": ["sgd", "adam"], "surfaces": ["quadratic", "beale"]}
    config["run"]["max_ticks"] = 20
    results = pipelines.run_pipeline(config)
    assert isinstance(results, list)
    assert len(results) == 4
    dirs = {Path(r.metrics_path).parent.name for r in results}
    assert dirs == {"sgd-quadratic", "sgd-beale", "adam-quadratic", "adam-beale"}


def test_seed_sweep(tmp_path):
    config = _config("training-curve", tmp_path)
    config["sweep"] = {"seeds": [0, 1]}
    config["params"]["max_epochs"] = 10
    first, second = pipelines.run_pipeline(config)
    assert Path(first.metrics_path).read_text() != Path(second.metrics_path).read_text()


def test_plots_are_written_when_enabled(tmp_path):
    pytest.importorskip("matplotlib")
    config = _config("optimizer-momentum-rosenbrock", tmp_path)
    config["run"]["enable_plots"] = True
    config["run"]["max_ticks"] = 30
    pipelines.run_pipeline(config)
    run_dir = Path(config["run"]["run_dir"])
    assert (run_dir / "loss.png").exists()
    assert (run_dir / "path.png").exists()


def test_unknown_engine_and_preset_raise(tmp_path):
    with pytest.raises(ValueError):
        pipelines.run_pipeline({"engine": "hopfield", "params": {}, "run": {"run_dir": str(tmp_path)}})
    with pytest.raises(KeyError):
        pipelines.load_preset("does-not-exist")
