"""Per-run digests of the tick metrics written by :class:`JsonlSink`."""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import numpy as np

# bookkeeping columns and tick counters, not metrics
_COUNTERS = frozenset({"step", "seed", "iteration", "epoch"})

_trapezoid = getattr(np, "trapezoid", None) or np.trapz


def compute_auc(points: Sequence[float]) -> float:
    """Area under ``points`` with one unit between consecutive ticks."""

    if len(points) == 0:
        return 0.0
    return float(_trapezoid(np.asarray(points, dtype=np.float64), dx=1.0))


def _series(records: Sequence[Mapping[str, object]]) -> Dict[str, List[float]]:
    # JsonlSink stores a non-finite loss as null; keep it as NaN so the
    # series stays aligned with the ticks.
    series: Dict[str, List[float]] = {}
    for record in records:
        for key, value in record.items():
            if key in _COUNTERS or isinstance(value, bool):
                continue
            if value is None:
                series.setdefault(key, []).append(float("nan"))
            elif isinstance(value, (int, float)):
                series.setdefault(key, []).append(float(value))
    return series


def _describe(values: List[float], tail: int) -> Dict[str, object]:
    arr = np.asarray(values, dtype=np.float64)
    finite = arr[np.isfinite(arr)]
    tail_values = arr[-tail:] if tail else arr[:0]
    tail_values = tail_values[np.isfinite(tail_values)]
    if finite.size == 0:
        return {"non_finite": int(arr.size), "tail_auc": 0.0}
    return {
        "min": float(finite.min()),
        "max": float(finite.max()),
        "mean": float(finite.mean()),
        "first": float(finite[0]),
        "last": float(finite[-1]),
        "non_finite": int(arr.size - finite.size),
        "tail_auc": compute_auc(tail_values),
    }


def summarise(records: Sequence[Mapping[str, object]], tail: int = 32) -> Mapping[str, object]:
    """Digest a run: per-metric statistics plus the status trail.

    ``tail_auc`` integrates the last ``tail`` ticks of each metric, which is
    the part of a curve that shows whether a demo settled.
    """

    tail_window = min(tail, len(records))
    statuses = [r["status"] for r in records if isinstance(r.get("status"), str)]
    return {
        "version": 1,
        "records": len(records),
        "tail_window": tail_window,
        "final_status": statuses[-1] if statuses else None,
        "status_counts": dict(sorted(Counter(statuses).items())),
        "metrics": {
            name: _describe(values, tail_window)
            for name, values in sorted(_series(records).items())
        },
    }


def _read_jsonl(path: Path) -> List[Mapping[str, object]]:
    if not path.exists():
        return []
    with path.open(encoding="utf-8") as handle:
        return [json.loads(line) for line in handle if line.strip()]


def write_summary(metrics_jsonl: str | Path, out_summary_json: str | Path, *, tail: int = 32) -> str:
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = summarise(_read_jsonl(Path(metrics_jsonl)), tail)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["compute_auc", "summarise", "write_summary"]
