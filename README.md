# floodnet

Small multi-layer perceptrons that train by backpropagation with momentum.
Each one is scored by k-fold cross-validation. The package needs only the
Python standard library. It has three commands:

- **`floodnet-flood`** trains a network with one hidden layer and no biases.
  It has 8 inputs and 1 output, and predicts a normalised water level from
  a flood dataset. It prints the mean squared error of each fold, as
  `Fold N MSE: ...`.
- **`floodnet-crosspat`** is a two-class classifier for two-input patterns.
  Every neuron has a bias, and training stops early once the mean error of
  an epoch falls below a threshold (0.02 by default). The command tries
  every combination of these settings:
  - hidden layers `10`, `15`, `10 5` and `15 10`;
  - learning rates 0.01, 0.05 and 0.1;
  - momentum 0.5 and 0.9;
  - weight initialisation basic, Xavier and He.

  For each combination it prints the accuracy and the average number of
  epochs used. It prints a confusion matrix summed over each
  initialisation method, and then the best combination with its own
  confusion matrix.
- **`floodnet-dts`** trains a regression network for the flood dataset with
  any number of hidden layers and no biases. It runs the same search over
  settings and prints the average MSE of each combination. It then prints
  the combination with the lowest average MSE, with its RMSE.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Data files

### Flood dataset

`floodnet-flood` and `floodnet-dts` read `Flood_dataset.csv` by default.

- The first two lines are headers.
- Each later non-empty line holds eight comma-separated input values,
  followed by the water level.
- Any fields after the water level are ignored.
- Whitespace around a value is ignored.

Every column is min–max scaled to the range 0–1 before training, the
inputs and the output alike. A column whose values are all the same
becomes NaN.

### Pattern file

`floodnet-crosspat` reads `cross.csv` by default.

- Empty lines and lines that start with `p` are skipped.
- A line with two input values follows, separated by a comma (the comma
  may be left out).
- The next line holds the class as an integer, `0` or `1`.

An input line at the very end of the file, with no class line after it,
is dropped.

## Running

Each command takes the data file as an optional first argument. Its
defaults are the file names above. These options are available:

| Option | Commands | Default |
| --- | --- | --- |
| `--epochs N` | all | 1000 |
| `--folds K` | all | 10 |
| `--seed N` | all | none |
| `--hidden-size N` | `floodnet-flood` | 10 |
| `--learning-rate X` | `floodnet-flood` | 0.01 |
| `--momentum X` | `floodnet-flood` | 0.9 |
| `--threshold X` | `floodnet-crosspat` | 0.02 |

`--seed` seeds the random number generator. With the same seed, a run can
be repeated exactly. Without it, weights start at random values and the
samples are shuffled at random, so results differ from run to run.

```
floodnet-flood
floodnet-crosspat --seed 1
floodnet-dts Flood_dataset.csv --epochs 200
```

A command exits with status 1 in these cases:

- the data file cannot be read or parsed;
- `floodnet-crosspat` finds no patterns;
- `floodnet-crosspat` has fewer patterns than folds.

Folds each hold `len(samples) // k` samples. Samples left over by this
division always stay in the training part. If a fold has no test samples,
its error is reported as NaN.

## Using the library

```python
import random

from floodnet.data import load_dataset, normalize_dataset
from floodnet.flood import k_fold_train

samples = normalize_dataset(load_dataset("Flood_dataset.csv", 8))
fold_errors = k_fold_train(samples, 10, 0.01, 0.9, 1000, 10, random.Random(42))
```

`normalize_dataset` returns new, scaled samples. It leaves its input
unchanged.

Modules:

- `floodnet.core` holds these shared pieces:
  - `sigmoid` and `sigmoid_derivative`;
  - `kfold_splits(samples, k)`, which yields `(train, test)` pairs;
  - the `InitType` enumeration (`BASIC`, `XAVIER`, `HE`).
- `floodnet.data` holds `Sample` (`inputs`, `outputs`), `parse_dataset`,
  `load_dataset`, `normalize_dataset` and `DatasetError`.
- `floodnet.flood` holds `MLP` (`forward`, `backward`, `mse`) and
  `k_fold_train`. `k_fold_train` returns a list with the test MSE of each
  fold.
- `floodnet.crosspat` holds these:
  - `Network` (`forward`, `backward`, `train`, `predict`);
  - `ConfusionMatrix` (`add`, `accuracy`);
  - `TrialResult`, `parse_patterns` and `load_patterns`;
  - `cross_validate`, which writes progress to a text stream and returns
    the best `TrialResult`.
- `floodnet.dts` holds these:
  - `DeepMLP` (`forward`, `backward`, `mse`);
  - `evaluate`, which returns the mean test MSE over the folds;
  - `grid_search`, which returns the best `SearchResult`. A
    `SearchResult` has an `rmse()` method.

Malformed data files raise `floodnet.data.DatasetError`.

## What it does not do

These networks exist to compare training settings. They do not:

- save a trained network or load one back;
- predict on new data from the command line.

Every run trains from scratch and reports only error or accuracy figures.