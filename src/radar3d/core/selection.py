from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

UNSET_INDEX = -1


class RangeSelectionState(int, Enum):
    NOTHING_SELECTED = 0  # whole dataset selectable
    FIRST_INDEX_SELECTED = 1  # start captured, selection in progress
    SECOND_INDEX_SELECTED = 2  # range applied


class SelectionEvent(str, Enum):
    INDEX_CHANGED = "index_changed"
    FEEDBACK_BEGIN = "feedback_begin"
    FEEDBACK_UPDATE = "feedback_update"
    FEEDBACK_END = "feedback_end"
    BOUNDS_CHANGED = "bounds_changed"


Listener = Callable[[SelectionEvent, "SelectionState"], None]


@dataclass
class SelectionState:
    """Time index selection for one chart. Mutate only through this module."""

    selected_index: int = 0
    previous_selected_index: int = 0
    min_selectable_index: int = 0
    max_selectable_index: int = 0
    dataset_min_index: int = 0
    dataset_max_index: int = 0
    range_state: RangeSelectionState = RangeSelectionState.NOTHING_SELECTED
    range_start_index: int = UNSET_INDEX
    range_end_index: int = UNSET_INDEX
    feedback_active: bool = False
    listeners: list[Listener] = field(default_factory=list, repr=False, compare=False)

    @property
    def bounds(self) -> tuple[int, int]:
        return self.min_selectable_index, self.max_selectable_index

    @property
    def is_range_restricted(self) -> bool:
        return self.bounds != (self.dataset_min_index, self.dataset_max_index)


def _emit(state: SelectionState, event: SelectionEvent) -> None:
    for listener in list(state.listeners):
        listener(event, state)


def subscribe(state: SelectionState, listener: Listener) -> None:
    if listener not in state.listeners:
        state.listeners.append(listener)


def unsubscribe(state: SelectionState, listener: Listener) -> None:
    if listener in state.listeners:
        state.listeners.remove(listener)


def initialize_selection(
    selected_index: int,
    min_selectable_index: int,
    max_selectable_index: int,
    dataset_min_index: int,
    dataset_max_index: int,
) -> SelectionState:
    if dataset_min_index > dataset_max_index:
        raise ValueError("dataset_min_index must not exceed dataset_max_index.")
    return SelectionState(
        selected_index=selected_index,
        previous_selected_index=selected_index,
        min_selectable_index=min_selectable_index,
        max_selectable_index=max_selectable_index,
        dataset_min_index=dataset_min_index,
        dataset_max_index=dataset_max_index,
    )


def midpoint_index(state: SelectionState) -> int:
    lo, hi = state.bounds
    return lo + (hi - lo) // 2


# ---------------- single index ----------------

def force_update(state: SelectionState, index: int) -> bool:
    """Set the selected index without any bounds check."""
    state.previous_selected_index = state.selected_index
    state.selected_index = int(index)
    _emit(state, SelectionEvent.INDEX_CHANGED)
    if state.range_state is RangeSelectionState.FIRST_INDEX_SELECTED:
        _emit(state, SelectionEvent.FEEDBACK_UPDATE)
    return True


def try_update(state: SelectionState, new_index: int) -> bool:
    if new_index == state.selected_index:
        return False
    if not state.min_selectable_index <= new_index <= state.max_selectable_index:
        return False
    return force_update(state, new_index)


def step(state: SelectionState, delta: int) -> bool:
    return try_update(state, state.selected_index + delta)


# ---------------- range selection ----------------

def apply_range(state: SelectionState, start: int, end: int) -> bool:
    """Restrict the selectable bounds to start..end (either order)."""
    if start > end:
        start, end = end, start
    state.min_selectable_index = int(start)
    state.max_selectable_index = int(end)
    _end_feedback(state)
    _emit(state, SelectionEvent.BOUNDS_CHANGED)
    return True


def reset_range(state: SelectionState) -> bool:
    state.range_start_index = UNSET_INDEX
    state.range_end_index = UNSET_INDEX
    state.min_selectable_index = state.dataset_min_index
    state.max_selectable_index = state.dataset_max_index
    _emit(state, SelectionEvent.BOUNDS_CHANGED)
    return True


def abort_range_selection(state: SelectionState) -> None:
    state.range_state = RangeSelectionState.NOTHING_SELECTED
    reset_range(state)
    _end_feedback(state)


def iterate_range_selection(state: SelectionState) -> bool:
    """
    Advance the range selection cycle by one step.

    NothingSelected -> FirstIndexSelected: capture the selected index as start.
    FirstIndexSelected -> SecondIndexSelected: capture the end and apply the
        range; rejected while the selected index still equals the start.
    SecondIndexSelected -> NothingSelected: restore the full dataset bounds.

    Returns False when the transition was rejected; the state is then unchanged.
    """
    if state.range_state is RangeSelectionState.NOTHING_SELECTED:
        state.range_start_index = state.selected_index
        state.range_end_index = UNSET_INDEX
        state.range_state = RangeSelectionState.FIRST_INDEX_SELECTED
        state.feedback_active = True
        _emit(state, SelectionEvent.FEEDBACK_BEGIN)
        return True

    if state.range_state is RangeSelectionState.FIRST_INDEX_SELECTED:
        if state.selected_index == state.range_start_index:
            return False
        state.range_end_index = state.selected_index
        state.range_state = RangeSelectionState.SECOND_INDEX_SELECTED
        apply_range(state, state.range_start_index, state.range_end_index)
        return True

    state.range_state = RangeSelectionState.NOTHING_SELECTED
    reset_range(state)
    return True


def _end_feedback(state: SelectionState) -> None:
    if state.feedback_active:
        state.feedback_active = False
        _emit(state, SelectionEvent.FEEDBACK_END)
