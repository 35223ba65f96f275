import csv
import io
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import pandas as pd

from radar3d.core.config import ChartConfig, InvalidValuePolicy
from radar3d.core.dataset import (
    Color,
    ColorMap,
    DataPoint,
    Dataset,
    validate_color_coverage,
    validate_dimension_count,
)
from radar3d.core.errors import ColorTableError, DataFormatError, DatasetFormatError, ValueParseError
from radar3d.utils.log import log_event

HEADER_FIELD = "dimension"
DELIMITER = ","
DEFAULT_VALUE = 0  # value kept for rows whose value field is not an integer
BOM = "\ufeff"


@dataclass
class ParseResult:
    dataset: Dataset
    errors: List[str] = field(default_factory=list)


def strip_quotes(values: pd.Series) -> pd.Series:
    """Remove one surrounding pair of double quotes from every field that has one."""
    s = values.astype(str)
    quoted = (s.str.len() >= 2) & s.str.startswith('"') & s.str.endswith('"')
    return s.where(~quoted, s.str.slice(1, -1))


def read_table(text: str, width: int) -> pd.DataFrame:
    """
    Read comma separated text into a frame of `width` string columns (0..width-1).

    Quotes are left to strip_quotes rather than the CSV reader. Missing trailing
    fields come back as "". Blank rows and header rows (first field
    "dimension", wherever they occur) are dropped. The index is the 1-based row
    number among non-blank rows, used in error messages.
    """
    text = str(text)
    if text.startswith(BOM):
        text = text[len(BOM):]
    columns = list(range(width))
    try:
        frame = pd.read_csv(
            io.StringIO(text),
            sep=DELIMITER,
            header=None,
            names=columns,
            index_col=False,
            dtype=str,
            quoting=csv.QUOTE_NONE,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        frame = pd.DataFrame(columns=columns, dtype=object)
    except pd.errors.ParserError as exc:
        raise DataFormatError(f"Malformed table: {exc}") from exc

    frame = frame.fillna("")
    for col in columns:
        frame[col] = strip_quotes(frame[col])
    frame.index = pd.RangeIndex(1, len(frame) + 1)

    blank = (frame[0].str.strip() == "") & (frame[columns[1:]] == "").all(axis=1)
    return frame[~blank & (frame[0] != HEADER_FIELD)]


def parse_color_table(text: str) -> ColorMap:
    """
    Parse a `dimension,color` table.

    The color is an RGB hex string without the leading '#', e.g. "ff00ff".
    Any malformed row fails the whole table.
    """
    frame = read_table(text, 2)
    colors: Dict[str, Color] = {}
    for row, dimension, hex_code in frame.itertuples(name=None):
        if hex_code == "":
            raise ColorTableError(f"Row {row}: expected 'dimension,color', got {dimension!r}.")
        if dimension in colors:
            raise ColorTableError(f"Row {row}: duplicate color entry for dimension '{dimension}'.")
        try:
            colors[dimension] = Color.from_hex(hex_code)
        except ColorTableError as exc:
            raise ColorTableError(f"Row {row}: {exc}") from None
    return ColorMap(colors)


def _dimensions(frame: pd.DataFrame) -> List[str]:
    return [str(d) for d in pd.unique(frame[0])]


def detect_dimensions(text: str) -> List[str]:
    """First pass: distinct dimension names in first-seen order."""
    return _dimensions(read_table(text, 3))


def parse_dataset_table(
    text: str,
    invalid_value_policy: InvalidValuePolicy = InvalidValuePolicy.DEFAULT,
) -> ParseResult:
    """
    Parse a `dimension,time,value` table into a Dataset.

    Pass 1 detects the dimensions and rejects tables with fewer than three.
    Pass 2 appends each row to its dimension's series in row order, which is
    expected to be chronological.

    A value that is not an integer is a per-record problem handled by
    `invalid_value_policy`:
      default -> log it and keep the row with value 0 (legacy behaviour)
      skip    -> log it and drop that time index from every dimension
      fail    -> raise ValueParseError
    """
    policy = InvalidValuePolicy(invalid_value_policy)
    frame = read_table(text, 3)
    dimensions = _dimensions(frame)
    validate_dimension_count(len(dimensions))

    missing = frame[2] == ""
    if missing.any():
        row = missing[missing].index[0]
        raise DatasetFormatError(
            f"Row {row}: expected 'dimension,time,value', no value given for {frame.at[row, 0]!r}."
        )

    numeric = pd.to_numeric(frame[2], errors="coerce")
    invalid = numeric.isna() | ~frame[2].str.strip().str.fullmatch(r"[+-]?\d+")
    errors: List[str] = []
    if invalid.any():
        messages = [
            f"Row {row}: cannot parse integer value {raw!r} for {dimension} at {time_label}."
            for row, dimension, time_label, raw in frame[invalid].itertuples(name=None)
        ]
        if policy is InvalidValuePolicy.FAIL:
            raise ValueParseError(messages[0])

        if policy is InvalidValuePolicy.SKIP:
            # series stay aligned only if the whole time index goes
            position = frame.groupby(0, sort=False).cumcount()
            dropped = sorted(set(position[invalid]))
            messages += [f"Time index {i} dropped from every dimension." for i in dropped]
            keep = ~position.isin(dropped)
            frame, numeric = frame[keep], numeric[keep]
        else:
            numeric = numeric.mask(invalid, DEFAULT_VALUE)

        for msg in messages:
            log_event("parse_dataset_table", msg)
        errors.extend(messages)

    series: Dict[str, List[DataPoint]] = {dim: [] for dim in dimensions}
    for dimension, time_label, value in zip(frame[0], frame[1], numeric.astype("int64")):
        series[dimension].append(DataPoint(dimension, time_label, int(value)))

    return ParseResult(dataset=Dataset(series), errors=errors)


def load_dataset(data_text: str, color_text: str, config: ChartConfig) -> Tuple[Dataset, ColorMap, List[str]]:
    """Parse both tables and check that every dimension has a color."""
    colors = parse_color_table(color_text)
    result = parse_dataset_table(data_text, config.invalid_value_policy)
    validate_color_coverage(result.dataset, colors)
    return result.dataset, colors, result.errors
