"""Per-tick metric sinks for simulation runs."""

from __future__ import annotations

import csv
import json
import math
import subprocess
from pathlib import Path
from typing import Mapping


def _git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
        return out.decode().strip()
    except Exception:  # pragma: no cover - git may be unavailable in tests
        return "unknown"


def _numeric(metrics: Mapping[str, object]) -> dict:
    out = {}
    for key, value in metrics.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        value = float(value)
        # JSON has no literal for inf/nan; keep the record parseable.
        out[key] = value if math.isfinite(value) else None
    return out


class JsonlSink:
    """Append-only JSONL writer, one record per engine tick."""

    def __init__(
        self,
        path: str | Path,
        *,
        engine: str,
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.engine = engine
        self.seed = seed
        self.sha = sha or _git_sha()

    def on_step(self, step: int, metrics: Mapping[str, object]) -> None:
        record = {
            "step": int(step),
            "engine": self.engine,
            "seed": self.seed,
            "sha": self.sha,
        }
        record.update(_numeric(metrics))
        status = metrics.get("status")
        if isinstance(status, str):
            record["status"] = status
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_step


class CsvSink:
    """Write numeric per-tick metrics to CSV with a header taken from the first row."""

    def __init__(self, path: str | Path, *, engine: str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.engine = engine
        self._fieldnames: list[str] | None = None

    def on_step(self, step: int, metrics: Mapping[str, object]) -> None:
        row = {"step": int(step), "engine": self.engine}
        row.update(_numeric(metrics))
        if self._fieldnames is None:
            self._fieldnames = sorted(row.keys())
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=self._fieldnames, extrasaction="ignore")
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)

    __call__ = on_step


__all__ = ["CsvSink", "JsonlSink"]
