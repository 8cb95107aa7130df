"""Tick-driven simulation pipelines and presets."""

from .pipelines import ENGINES, config_hash, load_preset, presets, run_pipeline

__all__ = ["ENGINES", "config_hash", "load_preset", "presets", "run_pipeline"]
