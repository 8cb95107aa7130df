"""neurodemos public API."""

from .core import activations  # noqa: F401
from .core import losses  # noqa: F401
from .core import types  # noqa: F401
from .core.types import DimensionMismatchError, RunResult, StepStatus
from .demos import FeedForwardNetwork, KMeansDemo, Perceptron, TrainingCurveSimulator
from .optim import OptimizerRun
from .simulations.pipelines import load_preset, presets, run_pipeline
from .som import SelfOrganizingMap

__all__ = [
    "DimensionMismatchError",
    "FeedForwardNetwork",
    "KMeansDemo",
    "OptimizerRun",
    "Perceptron",
    "RunResult",
    "SelfOrganizingMap",
    "StepStatus",
    "TrainingCurveSimulator",
    "activations",
    "load_preset",
    "losses",
    "presets",
    "run_pipeline",
    "types",
]
