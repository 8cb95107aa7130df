"""Synthetic loss/accuracy curves for the training-process walkthrough."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Deque, List

import numpy as np

from ..core.stats import clamp
from ..core.types import StepStatus

INITIAL_LOSS = 2.5
INITIAL_ACCURACY = 0.1
LOSS_FLOOR = 0.01
ACCURACY_CEILING = 0.98


@dataclass(frozen=True)
class EpochRecord:
    epoch: int
    loss: float
    accuracy: float
    status: StepStatus = StepStatus.OK


def expected_loss(epoch: int, learning_rate: float) -> float:
    return INITIAL_LOSS * math.exp(-epoch * learning_rate * 2)


def expected_accuracy(epoch: int, learning_rate: float) -> float:
    return 1 - math.exp(-epoch * learning_rate * 1.5)


class TrainingCurveSimulator:
    """Noisy exponential decay of loss and rise of accuracy, one epoch per tick."""

    def __init__(
        self,
        learning_rate: float = 0.01,
        max_epochs: int = 100,
        window: int = 50,
        seed: int | None = None,
    ) -> None:
        if not math.isfinite(learning_rate) or learning_rate <= 0:
            raise ValueError(f"learning rate must be positive, got {learning_rate}")
        if max_epochs < 1 or window < 1:
            raise ValueError("max_epochs and window must be at least 1")
        self.learning_rate = float(learning_rate)
        self.max_epochs = int(max_epochs)
        self.window = int(window)
        self.rng = np.random.default_rng(seed)
        self.reset()

    def reset(self) -> None:
        self.epoch = 0
        self.loss = INITIAL_LOSS
        self.accuracy = INITIAL_ACCURACY
        self.loss_history: Deque[float] = deque(maxlen=self.window)
        self.accuracy_history: Deque[float] = deque(maxlen=self.window)

    @property
    def finished(self) -> bool:
        return self.epoch >= self.max_epochs

    def tick(self) -> EpochRecord:
        if self.finished:
            return EpochRecord(self.epoch, self.loss, self.accuracy, StepStatus.FINISHED)
        epoch = self.epoch + 1
        loss_noise = (self.rng.random() - 0.5) * 0.1
        acc_noise = (self.rng.random() - 0.5) * 0.05
        self.loss = max(LOSS_FLOOR, expected_loss(epoch, self.learning_rate) + loss_noise)
        self.accuracy = clamp(
            expected_accuracy(epoch, self.learning_rate) + acc_noise,
            INITIAL_ACCURACY,
            ACCURACY_CEILING,
        )
        self.epoch = epoch
        self.loss_history.append(self.loss)
        self.accuracy_history.append(self.accuracy)
        return EpochRecord(epoch, self.loss, self.accuracy)

    def history(self) -> List[EpochRecord]:
        start = self.epoch - len(self.loss_history) + 1
        return [
            EpochRecord(start + offset, loss, acc)
            for offset, (loss, acc) in enumerate(zip(self.loss_history, self.accuracy_history))
        ]


__all__ = [
    "EpochRecord",
    "TrainingCurveSimulator",
    "expected_accuracy",
    "expected_loss",
]
