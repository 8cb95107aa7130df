"""Core numerical primitives for neurodemos."""

from . import activations, init, linalg, losses, stats, types, updates

__all__ = ["activations", "init", "linalg", "losses", "stats", "types", "updates"]
