"""Shared pieces: weight initialisation kinds, activation and k-fold splitting."""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from enum import Enum
from typing import TypeVar

T = TypeVar("T")


class InitType(Enum):
    """Weight initialisation scheme for a network."""

    BASIC = "basic"
    XAVIER = "xavier"
    HE = "he"

    def label(self) -> str:
        """Short human-readable name of the scheme."""
        return self.value


def sigmoid(x: float) -> float:
    """Logistic activation, mapping any real number into (0, 1)."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def sigmoid_derivative(y: float) -> float:
    """Derivative of the sigmoid expressed through its output ``y``."""
    return y * (1.0 - y)


def kfold_splits(samples: Sequence[T], k: int) -> Iterator[tuple[list[T], list[T]]]:
    """Yield ``(train, test)`` pairs for each of ``k`` folds.

    Every fold holds ``len(samples) // k`` consecutive test samples; samples
    left over by the integer division always stay in the training part.
    """
    if k <= 0:
        raise ValueError("k must be positive")
    items = list(samples)
    fold_size = len(items) // k
    for fold in range(k):
        start, stop = fold * fold_size, (fold + 1) * fold_size
        yield items[:start] + items[stop:], items[start:stop]