"""Command line entry point for neurodemos simulations."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from neurodemos.simulations import pipelines


def _format_result(result, run_id: str | None = None) -> str:
    payload = {
        "engine": result.engine,
        "steps": result.steps,
        "status": result.status,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
    }
    if getattr(result, "summary_path", ""):
        payload["summary"] = result.summary_path
    if run_id is not None:
        payload["run_id"] = run_id
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="optimizer-adam-quadratic",
        help="Preset configuration to execute",
    )
    parser.add_argument(
        "--config", type=Path, help="Optional JSON/YAML config override"
    )
    parser.add_argument(
        "--enable-plots",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Write matplotlib figures into the run directory",
    )
    parser.add_argument("--seed", type=int, help="Seed for every random source of the run")
    parser.add_argument(
        "--max-ticks", type=int, help="Stop after this many ticks even if not finished"
    )
    parser.add_argument("--run-dir", type=Path, help="Directory receiving run artifacts")
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        try:
            import yaml  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        return yaml.safe_load(text) or {}
    return json.loads(text)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))
    if args.config:
        override = _load_override(args.config)
        if {"engine", "params"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = _merge(config, override)

    run_cfg = config.setdefault("run", {})
    if args.enable_plots is not None:
        run_cfg["enable_plots"] = bool(args.enable_plots)
    if args.seed is not None:
        run_cfg["seed"] = int(args.seed)
    if args.max_ticks is not None:
        run_cfg["max_ticks"] = int(args.max_ticks)

    run_id = pipelines.config_hash(config)
    if args.run_dir is not None:
        run_cfg["run_dir"] = str(args.run_dir)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)

    if isinstance(result, list):
        for item in result:
            print(_format_result(item, run_id=run_id))
    else:
        print(_format_result(result, run_id=run_id))


if __name__ == "__main__":
    main()
