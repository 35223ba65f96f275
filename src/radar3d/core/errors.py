"""
Exception types raised while configuring and loading a radar chart.

Fatal input problems (unreadable tables, too few dimensions, misaligned
series, missing colors) derive from DataFormatError. Fetch problems raise
FetchError. ChartSession wraps whichever of these stops its pipeline in a
LoadError that records the failing stage.

Selection operations never raise; they report failure by returning False.
"""

from __future__ import annotations

__all__ = [
    "Radar3DError",
    "ConfigError",
    "DataFormatError",
    "ColorTableError",
    "DatasetFormatError",
    "DimensionCountError",
    "SeriesAlignmentError",
    "MissingColorError",
    "ValueParseError",
    "FetchError",
    "LoadError",
]


class Radar3DError(Exception):
    """Base class for all errors raised by radar3d."""


class ConfigError(Radar3DError, ValueError):
    """Invalid or unsupported chart configuration."""


class DataFormatError(Radar3DError, ValueError):
    """Input text could not be turned into a valid dataset or color map."""


class ColorTableError(DataFormatError):
    """Malformed color table row, bad hex color, or duplicate dimension."""


class DatasetFormatError(DataFormatError):
    """Malformed dataset row (missing fields)."""


class DimensionCountError(DataFormatError):
    """Fewer than the minimum number of distinct dimensions."""

    def __init__(self, found: int, required: int) -> None:
        super().__init__(
            f"Detected {found} dimension(s); at least {required} are required for a radar chart."
        )
        self.found = found
        self.required = required


class SeriesAlignmentError(DataFormatError):
    """Series differ in length or in their time labels."""


class MissingColorError(DataFormatError):
    """One or more dataset dimensions have no color entry."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__("No color defined for dimension(s): " + ", ".join(missing))
        self.missing = list(missing)


class ValueParseError(DataFormatError):
    """A value field is not an integer and the policy is to fail."""


class FetchError(Radar3DError, OSError):
    """Retrieving a color table or dataset text failed."""


class LoadError(Radar3DError):
    """The load pipeline stopped; ``stage`` names the step that failed."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"[{stage}] {message}")
        self.stage = stage
