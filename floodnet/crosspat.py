"""Binary classification of the cross pattern with a configurable MLP and grid search."""

from __future__ import annotations

import argparse
import math
import random
import re
import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from os import PathLike
from typing import TextIO

from .core import InitType, kfold_splits, sigmoid, sigmoid_derivative
from .data import DatasetError, Sample

INPUT_SIZE = 2
OUTPUT_SIZE = 1
EPOCHS = 1000
K_FOLD = 10
MSE_THRESHOLD = 0.02

HIDDEN_LAYER_OPTIONS: tuple[tuple[int, ...], ...] = ((10,), (15,), (10, 5), (15, 10))
LEARNING_RATES: tuple[float, ...] = (0.01, 0.05, 0.1)
MOMENTUM_VALUES: tuple[float, ...] = (0.5, 0.9)
INIT_METHODS: tuple[InitType, ...] = (InitType.BASIC, InitType.XAVIER, InitType.HE)

_FLOAT = r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
_INPUT_LINE = re.compile(rf"\s*({_FLOAT}),?\s*({_FLOAT})")
_TARGET_LINE = re.compile(r"\s*([+-]?\d+)")


class Network:
    """Fully connected sigmoid network with per-neuron biases and momentum."""

    def __init__(
        self,
        layers: Sequence[int],
        learning_rate: float,
        momentum: float,
        init: InitType = InitType.BASIC,
        rng: random.Random | None = None,
    ) -> None:
        if len(layers) < 2 or any(size <= 0 for size in layers):
            raise ValueError("a network needs at least two layers of positive size")
        rng = rng or random.Random()
        self.layers = list(layers)
        self.learning_rate = learning_rate
        self.momentum = momentum
        self.init = init
        self.neurons = [[0.0] * size for size in self.layers]
        self.deltas = [[0.0] * size for size in self.layers]
        # weights[i][j] feeds neuron j of layer i + 1; the last entry is its bias.
        self.weights = [
            [[self._initial_weight(fan_in, fan_out, rng) for _ in range(fan_in + 1)]
             for _ in range(fan_out)]
            for fan_in, fan_out in zip(self.layers, self.layers[1:])
        ]
        self.prev_deltas = [
            [[0.0] * (fan_in + 1) for _ in range(fan_out)]
            for fan_in, fan_out in zip(self.layers, self.layers[1:])
        ]

    def _initial_weight(self, fan_in: int, fan_out: int, rng: random.Random) -> float:
        if self.init is InitType.XAVIER:
            return rng.uniform(-1.0, 1.0) * math.sqrt(6.0 / (fan_in + fan_out))
        if self.init is InitType.HE:
            return rng.gauss(0.0, 1.0) * math.sqrt(2.0 / fan_in)
        return rng.uniform(-1.0, 1.0) * 0.1

    def forward(self, inputs: Sequence[float]) -> list[float]:
        """Propagate ``inputs`` through every layer and return the outputs."""
        if len(inputs) != self.layers[0]:
            raise ValueError(f"expected {self.layers[0]} inputs, got {len(inputs)}")
        self.neurons[0] = list(inputs)
        for i, layer_weights in enumerate(self.weights):
            previous = self.neurons[i]
            self.neurons[i + 1] = [
                sigmoid(row[-1] + sum(w * x for w, x in zip(row, previous)))
                for row in layer_weights
            ]
        return list(self.neurons[-1])

    def backward(self, target: Sequence[float]) -> float:
        """Backpropagate from the last forward pass and return its mean squared error."""
        outputs = self.neurons[-1]
        if len(target) < len(outputs):
            raise ValueError(f"expected {len(outputs)} target values, got {len(target)}")
        errors = [t - o for t, o in zip(target, outputs)]
        self.deltas[-1] = [e * sigmoid_derivative(o) for e, o in zip(errors, outputs)]

        for i in range(len(self.layers) - 2, 0, -1):
            following = self.deltas[i + 1]
            self.deltas[i] = [
                sum(row[j] * d for row, d in zip(self.weights[i], following))
                * sigmoid_derivative(value)
                for j, value in enumerate(self.neurons[i])
            ]

        for i, (layer_weights, layer_prev) in enumerate(zip(self.weights, self.prev_deltas)):
            sources = self.neurons[i] + [1.0]
            for row, prev_row, delta_j in zip(layer_weights, layer_prev, self.deltas[i + 1]):
                for k, source in enumerate(sources):
                    delta = self.learning_rate * delta_j * source + self.momentum * prev_row[k]
                    row[k] += delta
                    prev_row[k] = delta

        return sum(e * e for e in errors) / self.layers[-1]

    def train(
        self, samples: Sequence[Sample], mse_threshold: float, epochs: int = EPOCHS
    ) -> int:
        """Train until the epoch's mean error drops below the threshold.

        Returns the number of epochs used, or ``epochs`` if it never converged.
        """
        for epoch in range(1, epochs + 1):
            total = 0.0
            for sample in samples:
                self.forward(sample.inputs)
                total += self.backward(sample.outputs)
            if samples and total / len(samples) < mse_threshold:
                return epoch
        return epochs

    def predict(self, inputs: Sequence[float]) -> int:
        """Classify ``inputs`` as 1 when the first output reaches 0.5, else 0."""
        return 1 if self.forward(inputs)[0] >= 0.5 else 0


@dataclass
class ConfusionMatrix:
    """Counts of binary classification outcomes."""

    tp: int = 0
    fp: int = 0
    tn: int = 0
    fn: int = 0

    def add(self, predicted: int, actual: int) -> None:
        """Record one prediction; pairs outside {0, 1} are ignored."""
        if predicted == 1 and actual == 1:
            self.tp += 1
        elif predicted == 1 and actual == 0:
            self.fp += 1
        elif predicted == 0 and actual == 0:
            self.tn += 1
        elif predicted == 0 and actual == 1:
            self.fn += 1

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.tn + self.fn

    def accuracy(self) -> float:
        """Percentage of correct predictions, NaN when nothing was recorded."""
        if self.total == 0:
            return math.nan
        return 100.0 * (self.tp + self.tn) / self.total

    def __add__(self, other: ConfusionMatrix) -> ConfusionMatrix:
        return ConfusionMatrix(
            self.tp + other.tp, self.fp + other.fp, self.tn + other.tn, self.fn + other.fn
        )

    def format(self) -> str:
        return (
            f"| TruePositive : {self.tp}  | FalseNegative : {self.fn} |\n"
            f"| FalsePositive: {self.fp}  | TrueNegative : {self.tn} |"
        )


@dataclass
class TrialResult:
    """Outcome of cross-validating one hyper-parameter combination."""

    init: InitType
    hidden: tuple[int, ...]
    learning_rate: float
    momentum: float
    accuracy: float
    avg_epochs: int
    confusion: ConfusionMatrix = field(default_factory=ConfusionMatrix)

    def _settings(self) -> str:
        hidden = "".join(f"{size} " for size in self.hidden)
        return (
            f"[Hidden layers {hidden}, LR {self.learning_rate:g}, "
            f"Momentum {self.momentum:g}] Accuracy: {self.accuracy:g}%, "
            f"Epochs to converge: {self.avg_epochs}"
        )


def parse_patterns(lines: Iterable[str]) -> list[Sample]:
    """Parse pattern records: an input line of two numbers followed by a target line.

    Empty lines and lines starting with ``p`` before an input line are skipped;
    an input line with no target line after it is dropped.
    """
    rows = iter(lines)
    samples = []
    for raw in rows:
        line = raw.rstrip("\r\n")
        if not line or line.startswith("p"):
            continue
        match = _INPUT_LINE.match(line)
        if match is None:
            raise DatasetError(f"Invalid input line: {line}")
        target_raw = next(rows, None)
        if target_raw is None:
            break
        target_match = _TARGET_LINE.match(target_raw)
        if target_match is None:
            raise DatasetError(f"Invalid target line: {target_raw.rstrip()}")
        samples.append(
            Sample(
                [float(match.group(1)), float(match.group(2))],
                [float(int(target_match.group(1)))],
            )
        )
    return samples


def load_patterns(path: str | PathLike[str]) -> list[Sample]:
    """Read and parse a pattern file."""
    try:
        with open(path, encoding="utf-8") as handle:
            return parse_patterns(handle)
    except OSError as exc:
        raise DatasetError(f"Cannot open file {path}") from exc


def cross_validate(
    samples: Sequence[Sample],
    mse_threshold: float = MSE_THRESHOLD,
    epochs: int = EPOCHS,
    k: int = K_FOLD,
    rng: random.Random | None = None,
    out: TextIO | None = None,
) -> TrialResult:
    """Grid-search initialisation, hidden layers, learning rate and momentum.

    Every combination is scored by k-fold cross validation; progress and
    confusion matrices are written to ``out`` and the most accurate
    combination is returned.
    """
    if k <= 0:
        raise ValueError("k must be positive")
    if len(samples) < k:
        raise ValueError(f"need at least {k} samples, got {len(samples)}")
    rng = rng or random.Random()
    out = out or sys.stdout
    data = list(samples)
    best: TrialResult | None = None

    for init in INIT_METHODS:
        init_total = ConfusionMatrix()
        for hidden in HIDDEN_LAYER_OPTIONS:
            for learning_rate in LEARNING_RATES:
                for momentum in MOMENTUM_VALUES:
                    rng.shuffle(data)
                    confusion = ConfusionMatrix()
                    total_epochs = 0
                    for train_data, test_data in kfold_splits(data, k):
                        layers = [INPUT_SIZE, *hidden, OUTPUT_SIZE]
                        net = Network(layers, learning_rate, momentum, init, rng)
                        total_epochs += net.train(train_data, mse_threshold, epochs)
                        for sample in test_data:
                            confusion.add(net.predict(sample.inputs), int(sample.outputs[0]))
                    init_total = init_total + confusion
                    result = TrialResult(
                        init,
                        hidden,
                        learning_rate,
                        momentum,
                        confusion.accuracy(),
                        total_epochs // k,
                        confusion,
                    )
                    print(f"[Weight: {init.label()} ] {result._settings()}", file=out)
                    if best is None or result.accuracy > best.accuracy:
                        best = result

        print(f"======= Confusion Matrix for {init.label()}  =======", file=out)
        print(init_total.format(), file=out)
        print(file=out)

    assert best is not None
    print("========= BEST RESULT =========", file=out)
    print("Train with: Cross.pat => Cross.csv", file=out)
    print(f"[{best.init.label()} ] {best._settings()}", file=out)
    print("======= Confusion Matrix (Best) =======", file=out)
    print(best.confusion.format(), file=out)
    return best


def main(argv: Sequence[str] | None = None) -> int:
    """Cross-validate every configuration on a pattern file and report the best."""
    parser = argparse.ArgumentParser(description="Grid search of MLPs on the cross pattern.")
    parser.add_argument("path", nargs="?", default="cross.csv")
    parser.add_argument("--threshold", type=float, default=MSE_THRESHOLD)
    parser.add_argument("--epochs", type=int, default=EPOCHS)
    parser.add_argument("--folds", type=int, default=K_FOLD)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args(argv)

    try:
        samples = load_patterns(args.path)
    except DatasetError:
        samples = []
    if not samples:
        print("Failed to load dataset.", file=sys.stderr)
        return 1

    print(f"\n MSE Threshold = {args.threshold:g}")
    try:
        cross_validate(
            samples,
            mse_threshold=args.threshold,
            epochs=args.epochs,
            k=args.folds,
            rng=random.Random(args.seed),
        )
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())