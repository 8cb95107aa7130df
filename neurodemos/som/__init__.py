"""Self-organizing map engine and its synthetic datasets."""

from .datasets import InputDataset, available_datasets, get_dataset, register_dataset
from .engine import (
    BestMatchingUnit,
    SOMGrid,
    SelfOrganizingMap,
    find_bmu,
    som_training_step,
)

__all__ = [
    "BestMatchingUnit",
    "InputDataset",
    "SOMGrid",
    "SelfOrganizingMap",
    "available_datasets",
    "find_bmu",
    "get_dataset",
    "register_dataset",
    "som_training_step",
]
