from __future__ import annotations

import asyncio

import pytest

from radar3d.core.config import ChartConfig
from radar3d.core.dataset import Color
from radar3d.core.errors import LoadError
from radar3d.core.selection import RangeSelectionState
from radar3d.core.session import ChartSession


def _fetcher(texts: dict[str, str], calls: list[str]):
    async def fetch(source: str) -> str:
        calls.append(source)
        if source not in texts:
            raise FileNotFoundError(source)
        return texts[source]

    return fetch


def _loaded(color_text: str, data_text: str, config: ChartConfig | None = None) -> ChartSession:
    session = ChartSession(config)
    session.load_texts(color_text, data_text)
    return session


def test_async_load_initializes_selection(color_text: str, data_text: str) -> None:
    calls: list[str] = []
    session = ChartSession(
        ChartConfig(color_source="colors.csv", data_source="data.csv"),
        fetch=_fetcher({"colors.csv": color_text, "data.csv": data_text}, calls),
    )

    asyncio.run(session.load())
    state = session.selection

    assert calls == ["colors.csv", "data.csv"]
    assert session.is_initialized is True
    assert session.is_activated is False
    assert state.selected_index == 2
    assert state.bounds == (0, 4)
    assert (state.dataset_min_index, state.dataset_max_index) == (0, 4)
    assert state.range_state is RangeSelectionState.NOTHING_SELECTED
    assert session.current_time_label() == "2020-03"


def test_load_arguments_override_config_sources(color_text: str, data_text: str) -> None:
    calls: list[str] = []
    session = ChartSession(
        ChartConfig(color_source="unused", data_source="unused"),
        fetch=_fetcher({"c": color_text, "d": data_text}, calls),
    )

    asyncio.run(session.load("c", "d"))

    assert calls == ["c", "d"]


def test_color_fetch_failure_stops_before_data(data_text: str) -> None:
    calls: list[str] = []
    session = ChartSession(fetch=_fetcher({"data.csv": data_text}, calls))

    with pytest.raises(LoadError) as info:
        asyncio.run(session.load("missing.csv", "data.csv"))

    assert info.value.stage == "fetch colors"
    assert calls == ["missing.csv"]
    assert session.is_initialized is False


def test_data_fetch_failure_after_colors(color_text: str, log_path) -> None:
    calls: list[str] = []
    session = ChartSession(fetch=_fetcher({"colors.csv": color_text}, calls))

    with pytest.raises(LoadError) as info:
        asyncio.run(session.load("colors.csv", "gone.csv"))

    assert info.value.stage == "fetch data"
    assert calls == ["colors.csv", "gone.csv"]
    assert session.is_initialized is False
    assert session.selection is None
    logged = log_path.read_text(encoding="utf-8")
    assert "ChartSession.load[fetch data]" in logged
    assert "gone.csv" in logged


def test_load_files_saved_with_bom(tmp_path, color_text: str, data_text: str) -> None:
    colors = tmp_path / "colors.csv"
    data = tmp_path / "data.csv"
    colors.write_text(color_text, encoding="utf-8-sig")
    data.write_text(data_text, encoding="utf-8-sig")
    session = ChartSession()

    asyncio.run(session.load(str(colors), str(data)))

    assert session.dataset.dimensions == ["A", "B", "C"]
    assert list(session.colors) == ["A", "B", "C"]


def test_too_few_dimensions_fails_parse_stage(color_text: str, log_path) -> None:
    session = ChartSession()

    with pytest.raises(LoadError) as info:
        session.load_texts(color_text, "A,t1,1\nB,t1,2\n")

    assert info.value.stage == "parse data"
    assert session.is_initialized is False
    assert "ChartSession.load[parse data]" in log_path.read_text(encoding="utf-8")


def test_missing_color_fails_validate_stage(data_text: str) -> None:
    session = ChartSession()

    with pytest.raises(LoadError) as info:
        session.load_texts("A,ff0000\nB,00ff00\n", data_text)

    assert info.value.stage == "validate colors"


def test_queries_before_load_raise() -> None:
    session = ChartSession()

    with pytest.raises(RuntimeError):
        session.select_index(1)


def test_two_step_range_selection(color_text: str, data_text: str) -> None:
    session = _loaded(color_text, data_text)
    session.set_activation(True)

    assert session.select_index(1) is True
    assert session.iterate_range_selection() is True
    assert session.select_index(4) is True
    assert session.iterate_range_selection() is True

    state = session.selection
    assert state.range_state is RangeSelectionState.SECOND_INDEX_SELECTED
    assert state.bounds == (1, 4)
    assert session.selectable_time_labels() == ["2020-02", "2020-03", "2020-04", "2020-05"]
    assert session.select_index(0) is False


def test_range_selection_needs_activation(color_text: str, data_text: str) -> None:
    session = _loaded(color_text, data_text)

    assert session.iterate_range_selection() is False
    assert session.selection.range_state is RangeSelectionState.NOTHING_SELECTED


def test_deactivation_aborts_in_progress_range(color_text: str, data_text: str) -> None:
    session = _loaded(color_text, data_text)
    session.set_activation(True)
    session.iterate_range_selection()

    session.set_activation(False)

    state = session.selection
    assert state.range_state is RangeSelectionState.NOTHING_SELECTED
    assert state.feedback_active is False
    assert state.bounds == (0, 4)


def test_deactivation_keeps_applied_range(color_text: str, data_text: str) -> None:
    session = _loaded(color_text, data_text)
    session.set_activation(True)
    session.iterate_range_selection()
    session.select_index(0)
    session.iterate_range_selection()

    assert session.toggle_activation() is False
    assert session.selection.bounds == (0, 2)


def test_step_only_while_activated(color_text: str, data_text: str) -> None:
    session = _loaded(color_text, data_text)

    assert session.step_up() is False
    assert session.selection.selected_index == 2

    session.set_activation(True)
    assert session.step_up() is True
    assert session.step_up() is True
    assert session.step_up() is False
    assert session.step_down() is True
    assert session.selection.selected_index == 3


def test_select_coordinate(color_text: str, data_text: str) -> None:
    session = _loaded(color_text, data_text, ChartConfig(point_distance=2.0, chart_origin_offset=1.0))

    assert session.select_coordinate(7.2) is True
    assert session.selection.selected_index == 3
    assert session.coordinate_for_index(3) == 6.0
    assert session.coordinate_for_index(99) == 8.0


def test_pinch_range_moves_slice_to_middle(color_text: str, data_text: str) -> None:
    session = _loaded(color_text, data_text)
    session.select_index(4)

    assert session.apply_pinch_range(2.4, 0.0) is True
    assert session.selection.bounds == (0, 2)
    assert session.selection.selected_index == 1


def test_pinch_range_same_index_rejected(color_text: str, data_text: str) -> None:
    session = _loaded(color_text, data_text)

    assert session.apply_pinch_range(1.1, 0.9) is False
    assert session.selection.bounds == (0, 4)


def test_pinch_range_aborts_cycle_in_progress(color_text: str, data_text: str) -> None:
    session = _loaded(color_text, data_text)
    session.set_activation(True)
    session.iterate_range_selection()

    assert session.apply_pinch_range(1.0, 3.0) is True
    state = session.selection
    assert state.range_state is RangeSelectionState.NOTHING_SELECTED
    assert state.feedback_active is False
    assert state.bounds == (1, 3)


def test_current_slice_entries(color_text: str, data_text: str) -> None:
    session = _loaded(color_text, data_text)

    entries = session.current_slice()

    assert [e.dimension for e in entries] == ["A", "B", "C"]
    assert [e.raw_value for e in entries] == [4, 5, 20]
    assert [e.display_value for e in entries] == [4.0, 5.0, 20.0]
    assert entries[2].color == Color(0, 0, 255)
    assert {e.time_label for e in entries} == {"2020-03"}


def test_range_label_is_ordered(color_text: str, data_text: str) -> None:
    session = _loaded(color_text, data_text)

    assert session.range_label(3, 1) == "2020-02  --  2020-04"
    assert session.range_label(1, 3) == session.range_label(3, 1)
