from __future__ import annotations

import argparse
import asyncio
import os
import sys

from radar3d.core.config import ChartConfig, load_config
from radar3d.core.errors import Radar3DError
from radar3d.core.session import ChartSession
from radar3d.utils.log import log_exception
from radar3d.version import __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="radar3d",
        description="Load a time-series dataset as a 3D radar chart and inspect its time slices.",
    )
    parser.add_argument("--colors", default=None, help="Color table path or URL (dimension,color).")
    parser.add_argument("--data", default=None, help="Dataset path or URL (dimension,time,value).")
    parser.add_argument("--config", default="", help="Chart config JSON file.")
    parser.add_argument("--index", type=int, default=None, help="Move the time slice to this index.")
    parser.add_argument("--range", type=int, nargs=2, metavar=("START", "END"), default=None,
                        help="Restrict the selectable time range.")
    parser.add_argument("--html", default="", help="Write plotly figures to this HTML file.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def polygons_html_path(path: str) -> str:
    base, ext = os.path.splitext(path)
    return f"{base}_polygons{ext or '.html'}"


def format_summary(session: ChartSession) -> str:
    dataset = session.dataset
    state = session.selection
    lo, hi = state.bounds
    lines = [
        f"Dimensions ({dataset.dimension_count}): {', '.join(dataset.dimensions)}",
        f"Time points: {dataset.series_length} ({session.range_label(dataset.min_index, dataset.max_index)})",
        f"Selectable range: {lo}..{hi} ({session.range_label(lo, hi)})",
        f"Selected index: {state.selected_index} ({session.current_time_label()})",
    ]
    for entry in session.current_slice():
        lines.append(
            f"  {entry.dimension:<20} raw={entry.raw_value:<10} display={entry.display_value:.4g}  #{entry.color.hex}"
        )
    if session.parse_errors:
        lines.append(f"Recovered value errors: {len(session.parse_errors)}")
        lines.extend(f"  {msg}" for msg in session.parse_errors)
    return "\n".join(lines)


def run(args: argparse.Namespace) -> int:
    config = load_config(args.config) if args.config else ChartConfig()
    session = ChartSession(config)
    asyncio.run(session.load(args.colors, args.data))

    if args.range is not None:
        start, end = args.range
        if not session.apply_index_range(start, end):
            print(f"Range {start}..{end} is empty; keeping the full dataset.", file=sys.stderr)
    if args.index is not None and not session.select_index(args.index):
        print(f"Index {args.index} not selectable; keeping {session.selection.selected_index}.", file=sys.stderr)

    print(format_summary(session))

    if args.html:
        from radar3d.plotting.figures import (
            frequency_polygons_figure,
            time_slice_figure,
            write_figure_html,
        )

        write_figure_html(time_slice_figure(session), args.html)
        write_figure_html(frequency_polygons_figure(session), polygons_html_path(args.html))
        print(f"Figures written to {args.html} and {polygons_html_path(args.html)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    try:
        return run(args)
    except Radar3DError as exc:
        log_exception(f"radar3d.app colors={args.colors!r} data={args.data!r} config={args.config!r}")
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
