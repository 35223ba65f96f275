from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Optional

from radar3d.core import selection as sel
from radar3d.core.config import ChartConfig
from radar3d.core.dataset import Color, ColorMap, Dataset, validate_color_coverage
from radar3d.core.errors import LoadError, Radar3DError
from radar3d.core.layout import ChartLayout, coordinate_for_index, index_for_coordinate
from radar3d.core.selection import RangeSelectionState, SelectionState
from radar3d.data.fetch import FetchText, fetch_text
from radar3d.data.loaders import parse_color_table, parse_dataset_table
from radar3d.utils.log import log_event, log_exception

RANGE_LABEL_SEPARATOR = "  --  "


@dataclass
class SliceEntry:
    dimension: str
    time_label: str
    raw_value: int
    display_value: float
    color: Color


class ChartSession:
    """
    One radar chart instance: owns the loaded data, its layout and the
    selection state, and translates input gestures into selection operations.
    """

    def __init__(self, config: Optional[ChartConfig] = None, fetch: Optional[FetchText] = None):
        self.config = config or ChartConfig()
        self._fetch = fetch or partial(fetch_text, timeout=self.config.fetch_timeout)

        self.colors: Optional[ColorMap] = None
        self.dataset: Optional[Dataset] = None
        self.layout: Optional[ChartLayout] = None
        self.selection: Optional[SelectionState] = None
        self.parse_errors: list[str] = []
        self.is_initialized = False
        self.is_activated = False

    # ---------------- loading ----------------

    async def load(self, color_source: Optional[str] = None, data_source: Optional[str] = None) -> None:
        """Fetch and parse colors, then data, then build layout and selection."""
        color_source = color_source if color_source is not None else self.config.color_source
        data_source = data_source if data_source is not None else self.config.data_source

        color_text = await self._run_fetch("fetch colors", color_source)
        colors = self._run_stage("parse colors", parse_color_table, color_text)
        data_text = await self._run_fetch("fetch data", data_source)
        self._initialize(colors, data_text)

    def load_texts(self, color_text: str, data_text: str) -> None:
        colors = self._run_stage("parse colors", parse_color_table, color_text)
        self._initialize(colors, data_text)

    async def _run_fetch(self, stage: str, source: str) -> str:
        try:
            return await self._fetch(source)
        except Exception as exc:
            # fetchers are pluggable; any failure stops the pipeline
            log_event(f"ChartSession.load[{stage}]", f"source={source!r}: {type(exc).__name__}: {exc}")
            raise LoadError(stage, str(exc)) from exc

    def _run_stage(self, stage: str, func, *args):
        try:
            return func(*args)
        except Radar3DError as exc:
            log_exception(f"ChartSession.load[{stage}]")
            raise LoadError(stage, str(exc)) from exc

    def _initialize(self, colors: ColorMap, data_text: str) -> None:
        result = self._run_stage(
            "parse data", parse_dataset_table, data_text, self.config.invalid_value_policy
        )
        dataset = result.dataset
        self._run_stage("validate colors", validate_color_coverage, dataset, colors)
        layout = ChartLayout.build(dataset, colors, self.config)

        self.colors = colors
        self.dataset = dataset
        self.layout = layout
        self.parse_errors = list(result.errors)
        self.selection = sel.initialize_selection(
            dataset.max_index // 2,
            dataset.min_index,
            dataset.max_index,
            dataset.min_index,
            dataset.max_index,
        )
        sel.force_update(self.selection, self.selection.selected_index)
        self.is_activated = False
        self.is_initialized = True

    def _require(self) -> SelectionState:
        if not self.is_initialized or self.selection is None:
            raise RuntimeError("Chart session has not been loaded.")
        return self.selection

    # ---------------- activation ----------------

    def set_activation(self, activated: bool) -> None:
        state = self._require()
        self.is_activated = bool(activated)
        if not self.is_activated and state.range_state is RangeSelectionState.FIRST_INDEX_SELECTED:
            sel.abort_range_selection(state)

    def toggle_activation(self) -> bool:
        self.set_activation(not self.is_activated)
        return self.is_activated

    # ---------------- time slice ----------------

    def select_index(self, index: int) -> bool:
        return sel.try_update(self._require(), index)

    def select_coordinate(self, coordinate: float) -> bool:
        """Move the time slice to the index closest to a time-axis position."""
        state = self._require()
        return sel.try_update(state, self.index_for_coordinate(coordinate))

    def step_up(self) -> bool:
        if not self.is_activated:
            return False
        return sel.step(self._require(), 1)

    def step_down(self) -> bool:
        if not self.is_activated:
            return False
        return sel.step(self._require(), -1)

    # ---------------- time range ----------------

    def iterate_range_selection(self) -> bool:
        if not self.is_activated:
            return False
        return sel.iterate_range_selection(self._require())

    def abort_range_selection(self) -> None:
        sel.abort_range_selection(self._require())

    def apply_pinch_range(self, coordinate_a: float, coordinate_b: float) -> bool:
        """
        Two-handed range gesture: both ends are picked at once from two
        time-axis positions. The slice then jumps to the middle of the range.
        """
        return self.apply_index_range(
            self.index_for_coordinate(coordinate_a),
            self.index_for_coordinate(coordinate_b),
        )

    def apply_index_range(self, index_a: int, index_b: int) -> bool:
        """Apply a range chosen in one step, outside the three-step cycle."""
        state = self._require()
        if state.range_state is RangeSelectionState.FIRST_INDEX_SELECTED:
            sel.abort_range_selection(state)
        lo, hi = state.dataset_min_index, state.dataset_max_index
        index_a = max(lo, min(hi, int(index_a)))
        index_b = max(lo, min(hi, int(index_b)))
        if index_a == index_b:
            return False
        sel.apply_range(state, index_a, index_b)
        sel.try_update(state, sel.midpoint_index(state))
        return True

    # ---------------- queries ----------------

    def index_for_coordinate(self, coordinate: float) -> int:
        self._require()
        return index_for_coordinate(coordinate, self.dataset.series_length, self.config)

    def coordinate_for_index(self, index: int) -> float:
        self._require()
        return coordinate_for_index(index, self.config, self.dataset.series_length)

    def time_label_for_index(self, index: int) -> str:
        self._require()
        return self.dataset.time_label(index)

    def current_time_label(self) -> str:
        return self.time_label_for_index(self._require().selected_index)

    def range_label(self, index_a: int, index_b: int) -> str:
        lo, hi = sorted((index_a, index_b))
        return self.time_label_for_index(lo) + RANGE_LABEL_SEPARATOR + self.time_label_for_index(hi)

    def selectable_time_labels(self) -> list[str]:
        lo, hi = self._require().bounds
        return self.dataset.time_labels[lo:hi + 1]

    def slice_at(self, index: int) -> list[SliceEntry]:
        self._require()
        out = []
        for point in self.dataset.slice_at(index):
            rp = self.layout.point(point.dimension, index)
            out.append(
                SliceEntry(
                    dimension=point.dimension,
                    time_label=point.time_label,
                    raw_value=point.raw_value,
                    display_value=rp.display_value,
                    color=rp.color,
                )
            )
        return out

    def current_slice(self) -> list[SliceEntry]:
        return self.slice_at(self._require().selected_index)
