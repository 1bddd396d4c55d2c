import copy
import math
import random

import pytest

from floodnet.data import Sample
from floodnet.flood import MLP, k_fold_train, main


def _samples(count=20):
    rng = random.Random(7)
    out = []
    for _ in range(count):
        inputs = [rng.random() for _ in range(8)]
        out.append(Sample(inputs, [sum(inputs) / 8]))
    return out


def test_forward_outputs_in_unit_interval():
    net = MLP(8, 10, 1, rng=random.Random(1))
    output = net.forward([0.3] * 8)
    assert len(output) == 1
    assert 0.0 < output[0] < 1.0
    assert len(net.hidden) == 10


def test_same_seed_same_network():
    a = MLP(8, 5, 1, rng=random.Random(3))
    b = MLP(8, 5, 1, rng=random.Random(3))
    assert a.forward([0.5] * 8) == b.forward([0.5] * 8)


def test_weights_within_initial_range():
    net = MLP(4, 6, 2, rng=random.Random(2))
    weights = [w for row in net.w_input_hidden + net.w_hidden_output for w in row]
    assert all(-1.0 <= w <= 1.0 for w in weights)
    assert len(net.w_input_hidden) == 4 and len(net.w_hidden_output) == 6


def test_input_size_mismatch():
    net = MLP(8, 4, 1, rng=random.Random(0))
    with pytest.raises(ValueError):
        net.forward([1.0, 2.0])


def test_mse_zero_for_own_output():
    net = MLP(3, 4, 2, rng=random.Random(5))
    output = net.forward([0.1, 0.2, 0.3])
    assert net.mse(output) == 0.0


def test_zero_rates_leave_weights_unchanged():
    net = MLP(3, 4, 1, learning_rate=0.0, momentum=0.0, rng=random.Random(4))
    before = copy.deepcopy(net.w_input_hidden), copy.deepcopy(net.w_hidden_output)
    net.forward([0.2, 0.4, 0.6])
    net.backward([0.2, 0.4, 0.6], [1.0])
    assert (net.w_input_hidden, net.w_hidden_output) == before


def test_training_reduces_error():
    net = MLP(2, 4, 1, learning_rate=0.5, momentum=0.0, rng=random.Random(9))
    inputs, target = [0.2, 0.8], [0.9]
    net.forward(inputs)
    first = net.mse(target)
    for _ in range(200):
        net.forward(inputs)
        net.backward(inputs, target)
    net.forward(inputs)
    assert net.mse(target) < first


def test_k_fold_train_returns_one_error_per_fold():
    errors = k_fold_train(_samples(), epochs=3, k=10, rng=random.Random(0))
    assert len(errors) == 10
    assert all(0.0 <= e <= 1.0 for e in errors)


def test_k_fold_train_is_reproducible_and_keeps_input():
    data = _samples()
    snapshot = copy.deepcopy(data)
    a = k_fold_train(data, epochs=2, k=5, rng=random.Random(11))
    b = k_fold_train(data, epochs=2, k=5, rng=random.Random(11))
    assert a == b
    assert data == snapshot


def test_k_fold_train_empty_folds_are_nan():
    errors = k_fold_train(_samples(3), epochs=1, k=10, rng=random.Random(0))
    assert len(errors) == 10
    assert all(math.isnan(e) for e in errors)


def test_main_prints_fold_errors(tmp_path, capsys):
    path = tmp_path / "Flood_dataset.csv"
    rows = [",".join(str(v) for v in s.inputs + s.outputs) for s in _samples()]
    path.write_text("\n".join(["title", "header"] + rows) + "\n", encoding="utf-8")
    assert main([str(path), "--epochs", "2", "--seed", "1"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 10
    assert lines[0].startswith("Fold 1 MSE: ")
    assert lines[9].startswith("Fold 10 MSE: ")


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "absent.csv")]) == 1
    assert "Cannot open file" in capsys.readouterr().err