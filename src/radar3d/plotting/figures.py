from __future__ import annotations

from typing import Optional

import numpy as np
import plotly.graph_objects as go
import plotly.io as pio

from radar3d.core.session import ChartSession


def time_slice_figure(session: ChartSession, index: Optional[int] = None) -> go.Figure:
    """Radar view of one time slice: one spoke per dimension."""
    if index is None:
        index = session.selection.selected_index
    entries = session.slice_at(index)
    labels = [e.dimension for e in entries]
    r = np.asarray([e.display_value for e in entries], dtype=float)
    theta = session.layout.angles

    fig = go.Figure()
    # close the loop back to the first dimension
    fig.add_scatterpolar(
        theta=np.concatenate([theta, [theta[0]]]),
        r=np.concatenate([r, [r[0]]]),
        mode="lines",
        name=session.time_label_for_index(index),
        line=dict(color="#797979", width=1.5),
        fill="toself",
        fillcolor="rgba(165,165,165,0.3)",
    )
    for e, angle in zip(entries, theta):
        fig.add_scatterpolar(
            theta=[angle],
            r=[e.display_value],
            mode="markers",
            name=e.dimension,
            marker=dict(size=8, color=e.color.css(session.config.point_alpha)),
            hovertext=f"{e.dimension}: {e.raw_value}",
        )

    fig.update_layout(
        title=f"Time slice {session.time_label_for_index(index)}",
        polar=dict(
            angularaxis=dict(
                direction="clockwise",
                rotation=90,
                tickmode="array",
                tickvals=list(theta),
                ticktext=labels,
                showgrid=True,
                showline=True,
            ),
            radialaxis=dict(showgrid=True, showline=True),
        ),
        showlegend=True,
    )
    return fig


def frequency_polygons_figure(session: ChartSession) -> go.Figure:
    """Every dimension's frequency polygon over the currently selectable range."""
    lo, hi = session.selection.bounds
    layout = session.layout
    fig = go.Figure()
    for dim in layout.dimensions:
        outline = layout.polygon_outline(dim, lo, hi)
        color = layout.colors[dim]
        fig.add_scatter(
            x=outline[:, 0],
            y=outline[:, 1],
            mode="lines",
            name=dim,
            line=dict(color=color.css(session.config.point_alpha), width=1.5),
            fill="toself",
            fillcolor=color.css(session.config.polygon_alpha),
        )
    slice_x = float(layout.coordinates[session.selection.selected_index])
    fig.add_vline(x=slice_x, line_dash="dash", line_color="#A5A5A5")
    fig.update_layout(
        title=f"{session.range_label(lo, hi)}",
        xaxis_title="Time",
        yaxis_title="Value",
        showlegend=True,
    )
    return fig


def write_figure_html(fig: go.Figure, path: str) -> str:
    pio.write_html(fig, file=path, auto_open=False, include_plotlyjs="cdn")
    return path
