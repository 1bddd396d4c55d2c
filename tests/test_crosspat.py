import io
import math
import random

import pytest

from floodnet.core import InitType
from floodnet.crosspat import (
    ConfusionMatrix,
    Network,
    TrialResult,
    cross_validate,
    load_patterns,
    main,
    parse_patterns,
)
from floodnet.data import DatasetError, Sample


def _samples(n, seed=3):
    rng = random.Random(seed)
    result = []
    for _ in range(n):
        a, b = rng.random(), rng.random()
        result.append(Sample([a, b], [1.0 if a > b else 0.0]))
    return result


def test_parse_patterns_reads_pairs_of_lines():
    lines = ["p0\n", "0.1,0.2\n", "1\n", "p1\n", "0.3 0.4\n", "0 1\n"]
    samples = parse_patterns(lines)
    assert [s.inputs for s in samples] == [[0.1, 0.2], [0.3, 0.4]]
    assert [s.outputs for s in samples] == [[1.0], [0.0]]


def test_parse_patterns_skips_blank_lines_and_drops_incomplete_record():
    samples = parse_patterns(["\n", "0.5,0.6\n", "1\n", "\n", "0.7,0.8\n"])
    assert len(samples) == 1
    assert samples[0].inputs == [0.5, 0.6]


def test_parse_patterns_rejects_bad_input_line():
    with pytest.raises(DatasetError):
        parse_patterns(["abc\n", "1\n"])


def test_parse_patterns_rejects_bad_target_line():
    with pytest.raises(DatasetError):
        parse_patterns(["0.1,0.2\n", "x\n"])


def test_load_patterns_round_trip(tmp_path):
    path = tmp_path / "cross.csv"
    path.write_text("p0\n0.25,0.75\n0\n")
    samples = load_patterns(path)
    assert samples == [Sample([0.25, 0.75], [0.0])]


def test_load_patterns_missing_file(tmp_path):
    with pytest.raises(DatasetError):
        load_patterns(tmp_path / "absent.csv")


def test_confusion_matrix_counts_and_accuracy():
    matrix = ConfusionMatrix()
    for predicted, actual in [(1, 1), (1, 0), (0, 0), (0, 1), (1, 1), (0, 0), (2, 1)]:
        matrix.add(predicted, actual)
    assert (matrix.tp, matrix.fp, matrix.tn, matrix.fn) == (2, 1, 2, 1)
    assert matrix.total == 6
    assert matrix.accuracy() == pytest.approx(100.0 * 4 / 6)


def test_confusion_matrix_empty_accuracy_is_nan():
    matrix = ConfusionMatrix()
    accuracy = matrix.accuracy()
    assert matrix.total == 0
    assert str(accuracy) == "nan"
    assert math.isnan(accuracy)


def test_confusion_matrix_addition():
    total = ConfusionMatrix(1, 2, 3, 4) + ConfusionMatrix(4, 3, 2, 1)
    assert total == ConfusionMatrix(5, 5, 5, 5)


def test_network_weight_shapes_include_bias():
    net = Network([2, 3, 1], 0.1, 0.5, InitType.BASIC, random.Random(1))
    assert len(net.weights) == 2
    assert len(net.weights[0]) == 3
    assert all(len(row) == 3 for row in net.weights[0])
    assert all(len(row) == 4 for row in net.weights[1])


def test_basic_init_range():
    net = Network([2, 15, 10, 1], 0.1, 0.5, InitType.BASIC, random.Random(2))
    assert all(abs(w) <= 0.1 for layer in net.weights for row in layer for w in row)


def test_xavier_init_range():
    net = Network([2, 3, 1], 0.1, 0.5, InitType.XAVIER, random.Random(2))
    limit = math.sqrt(6.0 / 5)
    assert all(abs(w) <= limit for row in net.weights[0] for w in row)


def test_network_rejects_too_few_layers():
    with pytest.raises(ValueError):
        Network([2], 0.1, 0.5, InitType.BASIC, random.Random(0))


def test_forward_outputs_in_unit_interval():
    net = Network([2, 10, 5, 1], 0.1, 0.5, InitType.HE, random.Random(4))
    out = net.forward([0.3, 0.9])
    assert len(out) == 1
    assert 0.0 < out[0] < 1.0


def test_forward_rejects_wrong_input_size():
    net = Network([2, 3, 1], 0.1, 0.5, InitType.BASIC, random.Random(0))
    with pytest.raises(ValueError):
        net.forward([0.1, 0.2, 0.3])


def test_backward_returns_squared_error_of_forward():
    net = Network([2, 4, 1], 0.1, 0.5, InitType.XAVIER, random.Random(5))
    output = net.forward([0.2, 0.4])[0]
    assert net.backward([1.0]) == pytest.approx((1.0 - output) ** 2)


def test_backward_moves_output_toward_target():
    net = Network([2, 4, 1], 0.5, 0.0, InitType.XAVIER, random.Random(6))
    before = net.forward([0.2, 0.4])[0]
    for _ in range(50):
        net.forward([0.2, 0.4])
        net.backward([1.0])
    after = net.forward([0.2, 0.4])[0]
    assert after > before


def test_zero_weights_predict_one():
    net = Network([2, 3, 1], 0.1, 0.5, InitType.BASIC, random.Random(0))
    net.weights = [[[0.0] * len(row) for row in layer] for layer in net.weights]
    assert net.forward([0.4, 0.6]) == [0.5]
    assert net.predict([0.4, 0.6]) == 1


def test_train_without_convergence_uses_all_epochs():
    net = Network([2, 3, 1], 0.1, 0.5, InitType.BASIC, random.Random(0))
    assert net.train(_samples(5), 0.0, epochs=7) == 7


def test_train_converges_immediately_with_loose_threshold():
    net = Network([2, 3, 1], 0.1, 0.5, InitType.BASIC, random.Random(0))
    assert net.train(_samples(5), 1.0, epochs=7) == 1


def test_train_on_empty_data_never_converges():
    net = Network([2, 3, 1], 0.1, 0.5, InitType.BASIC, random.Random(0))
    assert net.train([], 1.0, epochs=4) == 4


def test_network_learns_or():
    data = [
        Sample([0.0, 0.0], [0.0]),
        Sample([0.0, 1.0], [1.0]),
        Sample([1.0, 0.0], [1.0]),
        Sample([1.0, 1.0], [1.0]),
    ]
    net = Network([2, 4, 1], 0.5, 0.5, InitType.XAVIER, random.Random(11))
    net.train(data, 0.005, epochs=3000)
    assert [net.predict(s.inputs) for s in data] == [0, 1, 1, 1]


def test_cross_validate_reports_every_configuration():
    out = io.StringIO()
    best = cross_validate(_samples(20), 0.02, epochs=2, k=2, rng=random.Random(7), out=out)
    text = out.getvalue()
    assert isinstance(best, TrialResult)
    assert best.confusion.total == 20
    assert 0.0 <= best.accuracy <= 100.0
    assert text.count("Accuracy:") == 3 * 4 * 3 * 2 + 1
    assert "========= BEST RESULT =========" in text
    assert "[Weight: xavier ]" in text
    assert "Confusion Matrix for he " in text


def test_cross_validate_is_reproducible_with_seed():
    first = cross_validate(_samples(10), 0.02, epochs=1, k=2, rng=random.Random(9), out=io.StringIO())
    second = cross_validate(_samples(10), 0.02, epochs=1, k=2, rng=random.Random(9), out=io.StringIO())
    assert first == second


def test_cross_validate_does_not_reorder_caller_list():
    samples = _samples(10)
    original = list(samples)
    cross_validate(samples, 0.02, epochs=1, k=2, rng=random.Random(1), out=io.StringIO())
    assert samples == original


def test_cross_validate_needs_enough_samples():
    with pytest.raises(ValueError):
        cross_validate(_samples(3), 0.02, epochs=1, k=5, rng=random.Random(0), out=io.StringIO())


def test_main_runs_on_file(tmp_path, capsys):
    path = tmp_path / "cross.csv"
    body = "".join(
        f"p{i}\n{s.inputs[0]},{s.inputs[1]}\n{int(s.outputs[0])}\n"
        for i, s in enumerate(_samples(8))
    )
    path.write_text(body)
    code = main([str(path), "--epochs", "1", "--folds", "2", "--seed", "1"])
    captured = capsys.readouterr()
    assert code == 0
    assert "MSE Threshold = 0.02" in captured.out
    assert "Train with: Cross.pat => Cross.csv" in captured.out


def test_main_fails_on_missing_file(tmp_path, capsys):
    code = main([str(tmp_path / "absent.csv")])
    assert code == 1
    assert "Failed to load dataset." in capsys.readouterr().err