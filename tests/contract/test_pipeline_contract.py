import json
from pathlib import Path

import pytest

from neurodemos.optim.optimizers import OptimizerKind
from neurodemos.simulations import pipelines


def test_summary_outputs_are_deterministic(tmp_path):
    config = pipelines.load_preset("som-iris")
    config["params"]["max_iterations"] = 80
    config["run"]["run_dir"] = str(tmp_path / "run_a")

    first = pipelines.run_pipeline(config)
    summary_a = Path(first.summary_path).read_bytes()
    metrics_a = Path(first.metrics_path).read_bytes()

    config["run"]["run_dir"] = str(tmp_path / "run_b")
    second = pipelines.run_pipeline(config)
    summary_b = Path(second.summary_path).read_bytes()
    metrics_b = Path(second.metrics_path).read_bytes()

    assert metrics_a == metrics_b
    assert summary_a == summary_b


def test_config_hash_is_stable_under_key_order():
    base = {
        "engine": "optimizer",
        "params": {"optimizer": "adam", "surface": "beale"},
        "run": {"seed": 11},
    }
    reordered = {
        "run": {"seed": 11},
        "params": {"surface": "beale", "optimizer": "adam"},
        "engine": "optimizer",
    }
    assert pipelines.config_hash(base) == pipelines.config_hash(reordered)
    assert len(pipelines.config_hash(base)) == 12


def test_config_hash_changes_on_seed():
    config = pipelines.load_preset("kmeans-blobs")
    baseline = pipelines.config_hash(config)
    config["run"]["seed"] += 1
    assert pipelines.config_hash(config) != baseline


def test_presets_are_isolated_copies():
    first = pipelines.load_preset("optimizer-adam-quadratic")
    first["params"]["learning_rate"] = 99.0
    second = pipelines.load_preset("optimizer-adam-quadratic")
    assert second["params"]["learning_rate"] == 0.1


def test_file_presets_are_merged():
    available = pipelines.presets()
    assert "som-clusters2d" in available
    assert available["som-clusters2d"]["params"]["dataset"] == "clusters2d"
    for name, config in available.items():
        assert config["engine"] in pipelines.ENGINES, name
        json.dumps(config)


def test_config_hash_treats_enums_as_their_values():
    by_name = {"engine": "optimizer", "params": {"optimizer": "adam", "start": [-2.0, 0.0]}}
    by_enum = {"engine": "optimizer", "params": {"optimizer": OptimizerKind.ADAM, "start": (-2.0, 0.0)}}
    assert pipelines.config_hash(by_name) == pipelines.config_hash(by_enum)


def _use_preset_dir(monkeypatch, directory):
    monkeypatch.setattr(pipelines, "_PRESET_DIR", directory)
    monkeypatch.setattr(pipelines, "_FILE_PRESETS_CACHE", None)


def test_file_preset_with_unknown_engine_is_rejected(tmp_path, monkeypatch):
    (tmp_path / "bad.json").write_text(json.dumps({"engine": "hopfield", "params": {}}))
    _use_preset_dir(monkeypatch, tmp_path)
    with pytest.raises(ValueError, match="bad.json"):
        pipelines.presets()


def test_file_preset_missing_params_is_rejected(tmp_path, monkeypatch):
    (tmp_path / "partial.json").write_text(json.dumps({"engine": "som"}))
    _use_preset_dir(monkeypatch, tmp_path)
    with pytest.raises(KeyError, match="params"):
        pipelines.load_preset("partial")


def test_file_preset_overrides_builtin(tmp_path, monkeypatch):
    override = {"engine": "kmeans", "params": {"k": 2}, "run": {"seed": 9}}
    (tmp_path / "kmeans-blobs.json").write_text(json.dumps(override))
    (tmp_path / "notes.txt").write_text("ignored")
    _use_preset_dir(monkeypatch, tmp_path)
    assert pipelines.load_preset("kmeans-blobs") == override
    assert "notes" not in pipelines.presets()
