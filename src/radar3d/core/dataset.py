from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, NamedTuple

import numpy as np
import pandas as pd

from radar3d.core.errors import (
    ColorTableError,
    DimensionCountError,
    MissingColorError,
    SeriesAlignmentError,
)

MIN_DIMENSIONS = 3

_HEX_COLOR = re.compile(r"^[0-9a-fA-F]{6}$")


@dataclass(frozen=True)
class DataPoint:
    dimension: str
    time_label: str
    raw_value: int


class Color(NamedTuple):
    r: int
    g: int
    b: int

    @classmethod
    def from_hex(cls, hex_code: str) -> "Color":
        """Parse an RGB color written as six hex digits without a leading '#'."""
        text = str(hex_code).strip()
        if not _HEX_COLOR.match(text):
            raise ColorTableError(f"Invalid hex color '{hex_code}'; expected six hex digits like 'ff00ff'.")
        return cls(int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))

    @property
    def hex(self) -> str:
        return f"{self.r:02x}{self.g:02x}{self.b:02x}"

    def to_rgba(self, alpha: int = 255) -> tuple[int, int, int, int]:
        return (self.r, self.g, self.b, max(0, min(255, int(alpha))))

    def css(self, alpha: int = 255) -> str:
        r, g, b, a = self.to_rgba(alpha)
        return f"rgba({r},{g},{b},{a / 255.0:.3f})"


class ColorMap(Mapping[str, Color]):
    """Read-only dimension -> color lookup."""

    def __init__(self, colors: Mapping[str, Color]) -> None:
        self._colors = dict(colors)

    def __getitem__(self, dimension: str) -> Color:
        return self._colors[dimension]

    def __iter__(self):
        return iter(self._colors)

    def __len__(self) -> int:
        return len(self._colors)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v.hex}" for k, v in self._colors.items())
        return f"ColorMap({inner})"


class Dataset:
    """Dimension-keyed time series, validated once and read-only afterwards.

    Dimensions keep their first-seen order. Every series has the same length and
    the same time label at each index, so an index addresses one time slice
    across all dimensions.
    """

    def __init__(self, series: Mapping[str, Iterable[DataPoint]]) -> None:
        frozen = {str(dim): tuple(points) for dim, points in series.items()}
        validate_series(frozen)
        self._series = MappingProxyType(frozen)

    @property
    def series(self) -> Mapping[str, tuple[DataPoint, ...]]:
        return self._series

    @property
    def dimensions(self) -> list[str]:
        return list(self._series.keys())

    @property
    def dimension_count(self) -> int:
        return len(self._series)

    @property
    def series_length(self) -> int:
        return len(next(iter(self._series.values())))

    @property
    def min_index(self) -> int:
        return 0

    @property
    def max_index(self) -> int:
        return self.series_length - 1

    @property
    def time_labels(self) -> list[str]:
        first = next(iter(self._series.values()))
        return [p.time_label for p in first]

    def __getitem__(self, dimension: str) -> tuple[DataPoint, ...]:
        return self._series[dimension]

    def __iter__(self):
        return iter(self._series)

    def __contains__(self, dimension: object) -> bool:
        return dimension in self._series

    def __len__(self) -> int:
        return len(self._series)

    def time_label(self, index: int) -> str:
        self._check_index(index)
        return self.time_labels[index]

    def slice_at(self, index: int) -> list[DataPoint]:
        self._check_index(index)
        return [points[index] for points in self._series.values()]

    def value_matrix(self) -> np.ndarray:
        """Raw values as a (dimensions x time) integer array."""
        return np.array(
            [[p.raw_value for p in points] for points in self._series.values()],
            dtype=np.int64,
        )

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {"dimension": p.dimension, "time": p.time_label, "value": p.raw_value}
            for points in self._series.values()
            for p in points
        ]
        return pd.DataFrame(rows, columns=["dimension", "time", "value"])

    def _check_index(self, index: int) -> None:
        if not 0 <= index <= self.max_index:
            raise IndexError(f"Time index {index} outside 0..{self.max_index}.")


def validate_dimension_count(count: int) -> None:
    if count < MIN_DIMENSIONS:
        raise DimensionCountError(count, MIN_DIMENSIONS)


def validate_series(series: Mapping[str, tuple[DataPoint, ...]]) -> None:
    validate_dimension_count(len(series))
    lengths = {dim: len(points) for dim, points in series.items()}
    if any(n == 0 for n in lengths.values()):
        empty = [dim for dim, n in lengths.items() if n == 0]
        raise SeriesAlignmentError("Dimension(s) without data points: " + ", ".join(empty))
    if len(set(lengths.values())) > 1:
        detail = ", ".join(f"{dim}={n}" for dim, n in lengths.items())
        raise SeriesAlignmentError(f"All dimensions must have the same number of time points ({detail}).")

    reference_dim, reference = next(iter(series.items()))
    for dim, points in series.items():
        for i, (a, b) in enumerate(zip(reference, points)):
            if a.time_label != b.time_label:
                raise SeriesAlignmentError(
                    f"Time label mismatch at index {i}: "
                    f"{reference_dim}='{a.time_label}' vs {dim}='{b.time_label}'."
                )


def validate_color_coverage(dataset: Dataset, colors: Mapping[str, Color]) -> None:
    missing = [dim for dim in dataset.dimensions if dim not in colors]
    if missing:
        raise MissingColorError(missing)
