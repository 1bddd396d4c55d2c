"""Single-hidden-layer perceptron for flood water-level regression."""

from __future__ import annotations

import argparse
import math
import random
import sys
from collections.abc import Sequence

from .core import kfold_splits, sigmoid, sigmoid_derivative
from .data import DatasetError, Sample, load_dataset, normalize_dataset

INPUT_SIZE = 8
OUTPUT_SIZE = 1
HIDDEN_SIZE = 10
LEARNING_RATE = 0.01
MOMENTUM = 0.9
EPOCHS = 1000
K_FOLD = 10


class MLP:
    """Multi-layer perceptron with one hidden layer, no biases, trained with momentum."""

    def __init__(
        self,
        input_size: int,
        hidden_size: int,
        output_size: int,
        learning_rate: float = LEARNING_RATE,
        momentum: float = MOMENTUM,
        rng: random.Random | None = None,
    ) -> None:
        rng = rng or random.Random()
        self.learning_rate = learning_rate
        self.momentum = momentum
        self.w_input_hidden = [
            [rng.uniform(-1.0, 1.0) for _ in range(hidden_size)] for _ in range(input_size)
        ]
        self.w_hidden_output = [
            [rng.uniform(-1.0, 1.0) for _ in range(output_size)] for _ in range(hidden_size)
        ]
        self.delta_input_hidden = [[0.0] * hidden_size for _ in range(input_size)]
        self.delta_hidden_output = [[0.0] * output_size for _ in range(hidden_size)]
        self.hidden = [0.0] * hidden_size
        self.output = [0.0] * output_size

    def _check_inputs(self, inputs: Sequence[float]) -> None:
        if len(inputs) != len(self.w_input_hidden):
            raise ValueError(
                f"expected {len(self.w_input_hidden)} inputs, got {len(inputs)}"
            )

    def forward(self, inputs: Sequence[float]) -> list[float]:
        """Propagate ``inputs`` through the network and return the outputs."""
        self._check_inputs(inputs)
        self.hidden = [
            sigmoid(sum(x * w for x, w in zip(inputs, column)))
            for column in zip(*self.w_input_hidden)
        ]
        self.output = [
            sigmoid(sum(h * w for h, w in zip(self.hidden, column)))
            for column in zip(*self.w_hidden_output)
        ]
        return list(self.output)

    def backward(self, inputs: Sequence[float], target: Sequence[float]) -> None:
        """Adjust weights by backpropagation from the last forward pass."""
        self._check_inputs(inputs)
        error_output = [
            (t - o) * sigmoid_derivative(o) for t, o in zip(target, self.output)
        ]
        error_hidden = [
            sum(e * w for e, w in zip(error_output, row)) * sigmoid_derivative(h)
            for row, h in zip(self.w_hidden_output, self.hidden)
        ]
        self._update(self.w_hidden_output, self.delta_hidden_output, self.hidden, error_output)
        self._update(self.w_input_hidden, self.delta_input_hidden, inputs, error_hidden)

    def _update(
        self,
        weights: list[list[float]],
        deltas: list[list[float]],
        sources: Sequence[float],
        errors: Sequence[float],
    ) -> None:
        for source, w_row, d_row in zip(sources, weights, deltas):
            for k, error in enumerate(errors):
                delta = self.learning_rate * error * source + self.momentum * d_row[k]
                w_row[k] += delta
                d_row[k] = delta

    def mse(self, target: Sequence[float]) -> float:
        """Mean squared error of the last outputs against ``target``."""
        return sum((t - o) ** 2 for t, o in zip(target, self.output)) / len(target)


def k_fold_train(
    samples: Sequence[Sample],
    hidden_size: int = HIDDEN_SIZE,
    learning_rate: float = LEARNING_RATE,
    momentum: float = MOMENTUM,
    epochs: int = EPOCHS,
    k: int = K_FOLD,
    rng: random.Random | None = None,
) -> list[float]:
    """Shuffle, then train a fresh network per fold; return each fold's test MSE.

    A fold with no test samples reports NaN.
    """
    rng = rng or random.Random()
    data = list(samples)
    rng.shuffle(data)
    results = []
    for train_set, test_set in kfold_splits(data, k):
        input_size = len(data[0].inputs) if data else INPUT_SIZE
        output_size = len(data[0].outputs) if data else OUTPUT_SIZE
        net = MLP(input_size, hidden_size, output_size, learning_rate, momentum, rng)
        for _ in range(epochs):
            for sample in train_set:
                net.forward(sample.inputs)
                net.backward(sample.inputs, sample.outputs)
        total = 0.0
        for sample in test_set:
            net.forward(sample.inputs)
            total += net.mse(sample.outputs)
        results.append(total / len(test_set) if test_set else math.nan)
    return results


def main(argv: Sequence[str] | None = None) -> int:
    """Train on a flood dataset with k-fold cross validation and print fold errors."""
    parser = argparse.ArgumentParser(description="K-fold training of a flood-level MLP.")
    parser.add_argument("path", nargs="?", default="Flood_dataset.csv")
    parser.add_argument("--hidden-size", type=int, default=HIDDEN_SIZE)
    parser.add_argument("--learning-rate", type=float, default=LEARNING_RATE)
    parser.add_argument("--momentum", type=float, default=MOMENTUM)
    parser.add_argument("--epochs", type=int, default=EPOCHS)
    parser.add_argument("--folds", type=int, default=K_FOLD)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args(argv)

    try:
        samples = normalize_dataset(load_dataset(args.path, INPUT_SIZE))
    except DatasetError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    errors = k_fold_train(
        samples,
        hidden_size=args.hidden_size,
        learning_rate=args.learning_rate,
        momentum=args.momentum,
        epochs=args.epochs,
        k=args.folds,
        rng=random.Random(args.seed),
    )
    for fold, error in enumerate(errors, start=1):
        print(f"Fold {fold} MSE: {error:g}")
    return 0


if __name__ == "__main__":
    sys.exit(main())