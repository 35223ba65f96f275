from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, NamedTuple, Optional

import numpy as np

from radar3d.core.config import ChartConfig
from radar3d.core.dataset import Color, ColorMap, Dataset, validate_color_coverage
from radar3d.core.transform import transform_values

# Opaque service turning a 2D outline (n x 2 array) into a renderable mesh.
Triangulate = Callable[[np.ndarray], Any]


class RenderPoint(NamedTuple):
    coordinate: float
    display_value: float
    color: Color


def clamp_index(index: int, series_length: int) -> int:
    if series_length < 1:
        raise ValueError("series_length must be at least 1.")
    return max(0, min(series_length - 1, int(index)))


def coordinate_for_index(index: int, config: ChartConfig, series_length: Optional[int] = None) -> float:
    """Position of a time index along the chart's time axis (chart-local)."""
    if series_length is not None:
        index = clamp_index(index, series_length)
    return float(index) * config.point_distance * config.chart_scale


def index_for_coordinate(coordinate: float, series_length: int, config: ChartConfig) -> int:
    """
    Closest time index for a time-axis position given in world space.

    The chart origin offset is removed first. Ties round half to even (Python's
    round), and the result saturates to 0..series_length-1.
    """
    local = (float(coordinate) - config.chart_origin_offset) / config.index_step
    return clamp_index(round(local), series_length)


def dimension_angles(count: int) -> np.ndarray:
    """Rotation in degrees of each dimension's polygon around the time axis."""
    if count < 1:
        raise ValueError("count must be at least 1.")
    return 360.0 / count * np.arange(count, dtype=float)


def rotate_vector(x, y, degrees):
    """Rotate (x, y) counter-clockwise by degrees; accepts scalars or arrays."""
    radian = np.deg2rad(degrees)
    sin = np.sin(radian)
    cos = np.cos(radian)
    return x * cos - y * sin, x * sin + y * cos


def time_slice_outline(values) -> np.ndarray:
    """Radar outline of one time slice: vertex i is (0, value_i) rotated by 360/n*i."""
    v = np.asarray(values, dtype=float)
    x, y = rotate_vector(np.zeros_like(v), v, dimension_angles(len(v)))
    return np.column_stack([x, y])


def frequency_polygon_outline(coordinates, values, start: int, end: int, baseline: float = 0.0) -> np.ndarray:
    """
    Closed 2D outline of one dimension's polygon over start..end (inclusive).

    The outline starts and ends on the baseline below the first and last point
    so the area under the series can be filled.
    """
    x = np.asarray(coordinates, dtype=float)
    y = np.asarray(values, dtype=float)
    if not 0 <= start <= end < len(x):
        raise IndexError(f"Range {start}..{end} outside 0..{len(x) - 1}.")
    xs = x[start:end + 1]
    ys = y[start:end + 1]
    return np.vstack([
        [xs[0], baseline],
        np.column_stack([xs, ys]),
        [xs[-1], baseline],
    ])


@dataclass
class ChartLayout:
    """Coordinates, display values and colors for every dimension of a dataset."""

    dimensions: list[str]
    coordinates: np.ndarray
    display_values: dict[str, np.ndarray] = field(default_factory=dict)
    colors: dict[str, Color] = field(default_factory=dict)

    @classmethod
    def build(cls, dataset: Dataset, colors: ColorMap, config: ChartConfig) -> "ChartLayout":
        validate_color_coverage(dataset, colors)
        matrix = dataset.value_matrix()
        coordinates = np.arange(dataset.series_length, dtype=float) * config.index_step
        display = {
            dim: transform_values(matrix[row], config)
            for row, dim in enumerate(dataset.dimensions)
        }
        return cls(
            dimensions=dataset.dimensions,
            coordinates=coordinates,
            display_values=display,
            colors={dim: colors[dim] for dim in dataset.dimensions},
        )

    @property
    def series_length(self) -> int:
        return int(self.coordinates.size)

    @property
    def axis_length(self) -> float:
        """Length of the time axis: position of the last time index."""
        return float(self.coordinates[-1])

    @property
    def angles(self) -> np.ndarray:
        return dimension_angles(len(self.dimensions))

    def point(self, dimension: str, index: int) -> RenderPoint:
        return RenderPoint(
            coordinate=float(self.coordinates[index]),
            display_value=float(self.display_values[dimension][index]),
            color=self.colors[dimension],
        )

    def slice_values(self, index: int) -> np.ndarray:
        return np.array([self.display_values[dim][index] for dim in self.dimensions], dtype=float)

    def time_slice_outline(self, index: int) -> np.ndarray:
        return time_slice_outline(self.slice_values(index))

    def polygon_outline(self, dimension: str, start: int, end: int) -> np.ndarray:
        return frequency_polygon_outline(self.coordinates, self.display_values[dimension], start, end)

    def time_slice_mesh(self, index: int, triangulate: Triangulate) -> Any:
        return triangulate(self.time_slice_outline(index))

    def polygon_mesh(self, dimension: str, start: int, end: int, triangulate: Triangulate) -> Any:
        return triangulate(self.polygon_outline(dimension, start, end))
