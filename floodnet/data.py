"""Loading and min-max normalisation of the flood dataset."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from os import PathLike

HEADER_LINES = 2
_WHITESPACE = " \t\n\v\f\r"
_NUMBER = re.compile(
    r"[+-]?(?:inf(?:inity)?|nan|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)",
    re.IGNORECASE,
)


class DatasetError(ValueError):
    """Raised when a dataset cannot be read or parsed."""


@dataclass
class Sample:
    """One row of data: input features and target values."""

    inputs: list[float] = field(default_factory=list)
    outputs: list[float] = field(default_factory=list)


def _parse_number(text: str, line: str) -> float:
    match = _NUMBER.match(text.strip(_WHITESPACE))
    if match is None:
        raise DatasetError(f"Invalid number format at line: {line}")
    token = match.group(0)
    value = float(token)
    if math.isinf(value) and "inf" not in token.lower():
        raise DatasetError(f"Number out of range at line: {line}")
    return value


def parse_dataset(lines: Iterable[str], input_size: int = 8) -> list[Sample]:
    """Parse comma-separated rows after two header lines.

    Each row holds ``input_size`` input values followed by one output value;
    extra fields are ignored and empty lines are skipped.
    """
    rows = iter(lines)
    for _ in range(HEADER_LINES):
        if next(rows, None) is None:
            raise DatasetError("File doesn't have enough header lines")

    samples = []
    for raw in rows:
        line = raw.rstrip("\n")
        if not line:
            continue
        fields = line.split(",")
        if len(fields) < input_size:
            raise DatasetError(f"Missing input value at line: {line}")
        if len(fields) < input_size + 1:
            raise DatasetError(f"Missing output value at line: {line}")
        inputs = [_parse_number(text, line) for text in fields[:input_size]]
        output = _parse_number(fields[input_size], line)
        samples.append(Sample(inputs, [output]))
    return samples


def load_dataset(path: str | PathLike[str], input_size: int = 8) -> list[Sample]:
    """Read and parse a dataset file."""
    try:
        with open(path, encoding="utf-8") as handle:
            return parse_dataset(handle, input_size)
    except OSError as exc:
        raise DatasetError(f"Cannot open file {path}") from exc


def _scale(value: float, low: float, high: float) -> float:
    span = high - low
    offset = value - low
    if span == 0:
        if offset == 0 or math.isnan(offset):
            return math.nan
        return math.copysign(math.inf, offset)
    return offset / span


def normalize_dataset(samples: Iterable[Sample]) -> list[Sample]:
    """Return the samples with every input and output column scaled to [0, 1].

    A column whose values are all equal cannot be scaled and becomes NaN.
    """
    items = list(samples)
    if not items:
        return []
    n_inputs = len(items[0].inputs)
    columns = []
    for column in zip(*(s.inputs + s.outputs for s in items)):
        low = min(1e9, *column)
        high = max(-1e9, *column)
        columns.append([_scale(v, low, high) for v in column])
    return [Sample(list(row[:n_inputs]), list(row[n_inputs:])) for row in zip(*columns)]