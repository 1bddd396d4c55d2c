"""Deep sigmoid network for flood regression with a hyper-parameter grid search."""

from __future__ import annotations

import argparse
import math
import random
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TextIO

from .core import InitType, kfold_splits, sigmoid, sigmoid_derivative
from .data import DatasetError, Sample, load_dataset, normalize_dataset

INPUT_SIZE = 8
OUTPUT_SIZE = 1
HIDDEN_SIZES: tuple[int, ...] = (10, 5)
LEARNING_RATE = 0.01
MOMENTUM = 0.9
EPOCHS = 1000
K_FOLD = 10

HIDDEN_LAYER_OPTIONS: tuple[tuple[int, ...], ...] = ((10,), (15,), (10, 5), (15, 10))
LEARNING_RATES: tuple[float, ...] = (0.01, 0.05, 0.1)
MOMENTUM_VALUES: tuple[float, ...] = (0.5, 0.9)
INIT_METHODS: tuple[InitType, ...] = (InitType.BASIC, InitType.XAVIER, InitType.HE)


class DeepMLP:
    """Multi-layer perceptron with any number of hidden layers and no biases."""

    def __init__(
        self,
        input_size: int,
        hidden_sizes: Sequence[int] = HIDDEN_SIZES,
        output_size: int = OUTPUT_SIZE,
        learning_rate: float = LEARNING_RATE,
        momentum: float = MOMENTUM,
        init: InitType = InitType.BASIC,
        rng: random.Random | None = None,
    ) -> None:
        sizes = [input_size, *hidden_sizes, output_size]
        if any(size <= 0 for size in sizes):
            raise ValueError("every layer needs a positive size")
        rng = rng or random.Random()
        self.learning_rate = learning_rate
        self.momentum = momentum
        self.init = init
        self.sizes = sizes
        # weights[l][i][j] links node i of layer l to node j of layer l + 1.
        self.weights = [
            [[self._initial_weight(prev, curr, rng) for _ in range(curr)] for _ in range(prev)]
            for prev, curr in zip(sizes, sizes[1:])
        ]
        self.delta_weights = [
            [[0.0] * curr for _ in range(prev)] for prev, curr in zip(sizes, sizes[1:])
        ]
        self.layers = [[0.0] * size for size in sizes]
        self.errors = [[0.0] * size for size in sizes[1:]]

    def _initial_weight(self, prev: int, curr: int, rng: random.Random) -> float:
        if self.init is InitType.XAVIER:
            limit = math.sqrt(6.0 / (prev + curr))
            return rng.uniform(-limit, limit)
        if self.init is InitType.HE:
            return rng.gauss(0.0, math.sqrt(2.0 / prev))
        return rng.random() * 0.2 - 0.1

    def forward(self, inputs: Sequence[float]) -> list[float]:
        """Propagate ``inputs`` through all layers and return the outputs."""
        if len(inputs) != self.sizes[0]:
            raise ValueError(f"expected {self.sizes[0]} inputs, got {len(inputs)}")
        self.layers[0] = list(inputs)
        for l, layer_weights in enumerate(self.weights):
            previous = self.layers[l]
            self.layers[l + 1] = [
                sigmoid(sum(x * w for x, w in zip(previous, column)))
                for column in zip(*layer_weights)
            ]
        return list(self.layers[-1])

    def backward(self, target: Sequence[float]) -> None:
        """Backpropagate from the last forward pass and update the weights."""
        outputs = self.layers[-1]
        if len(target) < len(outputs):
            raise ValueError(f"expected {len(outputs)} target values, got {len(target)}")
        self.errors[-1] = [(t - o) * sigmoid_derivative(o) for t, o in zip(target, outputs)]

        for l in range(len(self.errors) - 2, -1, -1):
            following = self.errors[l + 1]
            self.errors[l] = [
                sum(e * w for e, w in zip(following, row)) * sigmoid_derivative(value)
                for row, value in zip(self.weights[l + 1], self.layers[l + 1])
            ]

        for l, (layer_weights, layer_deltas) in enumerate(zip(self.weights, self.delta_weights)):
            errors = self.errors[l]
            for source, w_row, d_row in zip(self.layers[l], layer_weights, layer_deltas):
                for j, error in enumerate(errors):
                    delta = self.learning_rate * error * source + self.momentum * d_row[j]
                    w_row[j] += delta
                    d_row[j] = delta

    def mse(self, target: Sequence[float]) -> float:
        """Mean squared error of the last outputs against ``target``."""
        outputs = self.layers[-1]
        return sum((t - o) ** 2 for t, o in zip(target, outputs)) / len(target)


@dataclass
class SearchResult:
    """Average error of one hyper-parameter combination."""

    hidden_layers: tuple[int, ...]
    learning_rate: float
    momentum: float
    avg_mse: float
    init: InitType

    def rmse(self) -> float:
        """Root of the average mean squared error."""
        return math.sqrt(self.avg_mse)


def evaluate(
    samples: Sequence[Sample],
    hidden_sizes: Sequence[int] = HIDDEN_SIZES,
    learning_rate: float = LEARNING_RATE,
    momentum: float = MOMENTUM,
    init: InitType = InitType.BASIC,
    epochs: int = EPOCHS,
    k: int = K_FOLD,
    rng: random.Random | None = None,
) -> float:
    """Shuffle, k-fold train fresh networks and return the mean test MSE over folds.

    A fold with no test samples makes the result NaN.
    """
    if k <= 0:
        raise ValueError("k must be positive")
    rng = rng or random.Random()
    data = list(samples)
    rng.shuffle(data)
    input_size = len(data[0].inputs) if data else INPUT_SIZE
    output_size = len(data[0].outputs) if data else OUTPUT_SIZE
    total = 0.0
    for train_set, test_set in kfold_splits(data, k):
        net = DeepMLP(
            input_size, hidden_sizes, output_size, learning_rate, momentum, init, rng
        )
        for _ in range(epochs):
            for sample in train_set:
                net.forward(sample.inputs)
                net.backward(sample.outputs)
        if not test_set:
            total += math.nan
            continue
        error = 0.0
        for sample in test_set:
            net.forward(sample.inputs)
            error += net.mse(sample.outputs)
        total += error / len(test_set)
    return total / k


def _describe(hidden: Sequence[int]) -> str:
    return "".join(f"{size} " for size in hidden)


def grid_search(
    samples: Sequence[Sample],
    epochs: int = EPOCHS,
    k: int = K_FOLD,
    rng: random.Random | None = None,
    out: TextIO | None = None,
) -> SearchResult:
    """Evaluate every combination of settings and return the one with least error."""
    if k <= 0:
        raise ValueError("k must be positive")
    rng = rng or random.Random()
    out = out or sys.stdout
    results = []
    for init in INIT_METHODS:
        for hidden in HIDDEN_LAYER_OPTIONS:
            for learning_rate in LEARNING_RATES:
                for momentum in MOMENTUM_VALUES:
                    avg_mse = evaluate(
                        samples, hidden, learning_rate, momentum, init, epochs, k, rng
                    )
                    print(
                        f"[Weight: {init.label()} init] [Hidden layers {_describe(hidden)}"
                        f", LR {learning_rate:g}, Momentum {momentum:g}] "
                        f"AVG MSE: {avg_mse:g}",
                        file=out,
                    )
                    results.append(
                        SearchResult(hidden, learning_rate, momentum, avg_mse, init)
                    )

    best = results[0]
    for result in results[1:]:
        if result.avg_mse < best.avg_mse:
            best = result

    print("\n========= BEST RESULT =========", file=out)
    print(
        f"[Weight: {best.init.label()} init] Hidden layers: {_describe(best.hidden_layers)}"
        f", LR: {best.learning_rate:g}, Momentum: {best.momentum:g}, "
        f"AVG MSE: {best.avg_mse:g}| RMSE: {best.rmse():g}",
        file=out,
    )
    return best


def main(argv: Sequence[str] | None = None) -> int:
    """Grid-search network settings on a flood dataset and print the best."""
    parser = argparse.ArgumentParser(description="Grid search of deep MLPs on flood data.")
    parser.add_argument("path", nargs="?", default="Flood_dataset.csv")
    parser.add_argument("--epochs", type=int, default=EPOCHS)
    parser.add_argument("--folds", type=int, default=K_FOLD)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args(argv)

    try:
        samples = normalize_dataset(load_dataset(args.path, INPUT_SIZE))
    except DatasetError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        grid_search(samples, epochs=args.epochs, k=args.folds, rng=random.Random(args.seed))
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())