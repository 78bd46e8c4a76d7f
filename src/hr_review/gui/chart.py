"""Plotly figures for the review console.

The builders are pure: they take samples plus view state and return a
``go.Figure``. Every clickable trace carries the sample's sequence index in
``customdata`` so a click can be mapped back to the sample to toggle.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Sequence

import numpy as np
import plotly.graph_objects as go

from hr_review.io.session_payload import Sample
from hr_review.view.overview import anomaly_runs, heart_rate_domain
from hr_review.view.window import DEFAULT_AXIS_PADDING, ViewWindow, axis_range, format_duration

PLOT_COLORS = {
    "primary": "#dc2626",
    "anomaly": "#b91c1c",
    "average": "#f59e0b",
    "maximum": "#ef4444",
    "secondary": "#6366f1",
    "grid": "#e2e8f0",
    "text": "#475569",
}

HEART_RATE_TRACE = "Heart Rate"
ANOMALY_TRACE = "Anomalies"


def _finite(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


def _channel_points(
    samples: Sequence[Sample], elapsed: np.ndarray, channel: str
) -> tuple[list[float], list[float], list[int]]:
    xs, ys, indices = [], [], []
    for sample in samples:
        value = _finite(sample.value(channel))
        if value is None:
            continue
        xs.append(float(elapsed[sample.sequence_index]))
        ys.append(value)
        indices.append(sample.sequence_index)
    return xs, ys, indices


def build_session_figure(
    samples: Sequence[Sample],
    elapsed: Sequence[float],
    *,
    window: ViewWindow | None = None,
    metadata: Mapping[str, Any] | None = None,
    channel: str = "heart_rate",
    extra_channels: Sequence[str] = (),
    padding: float = DEFAULT_AXIS_PADDING,
    height: int = 600,
) -> go.Figure:
    """Heart-rate line with anomaly markers and session reference lines.

    Args:
        samples: The operator's working copy, so markers reflect unsaved edits
        elapsed: Elapsed seconds per sample, same length as ``samples``
        window: Visible range; ``None`` shows the whole recording
        metadata: Session metadata; ``avg_heart_rate``/``max_heart_rate``
            are drawn as dashed reference lines when present
        extra_channels: Further channels plotted against a secondary y-axis
    """

    values = np.asarray(elapsed, dtype=float)
    metadata = metadata or {}
    fig = go.Figure()

    xs, ys, indices = _channel_points(samples, values, channel)
    fig.add_trace(go.Scatter(
        x=xs,
        y=ys,
        customdata=indices,
        mode="lines+markers",
        marker=dict(size=4, color=PLOT_COLORS["primary"]),
        line=dict(width=1.5, color=PLOT_COLORS["primary"]),
        name=HEART_RATE_TRACE,
        hovertemplate="%{y:.0f} bpm<br>sample %{customdata}<extra></extra>",
    ))

    flagged = [
        (x, y, index)
        for x, y, index in zip(xs, ys, indices)
        if samples[index].anomaly == 1
    ]
    fig.add_trace(go.Scatter(
        x=[point[0] for point in flagged],
        y=[point[1] for point in flagged],
        customdata=[point[2] for point in flagged],
        mode="markers",
        marker=dict(size=10, color=PLOT_COLORS["anomaly"], symbol="circle-open", line=dict(width=2)),
        name=f"{ANOMALY_TRACE} ({len(flagged)})",
        hovertemplate="Anomaly at sample %{customdata}<extra></extra>",
    ))

    for extra in extra_channels:
        ex, ey, eidx = _channel_points(samples, values, extra)
        if not ex:
            continue
        fig.add_trace(go.Scatter(
            x=ex,
            y=ey,
            customdata=eidx,
            mode="lines",
            line=dict(width=1, color=PLOT_COLORS["secondary"]),
            name=extra.replace("_", " ").title(),
            yaxis="y2",
        ))

    (low_hr, high_hr), has_data = heart_rate_domain(samples, channel)
    for key, color, label in (
        ("avg_heart_rate", PLOT_COLORS["average"], "Avg"),
        ("max_heart_rate", PLOT_COLORS["maximum"], "Max"),
    ):
        level = _finite(metadata.get(key))
        if level is None:
            continue
        fig.add_hline(
            y=level,
            line=dict(color=color, width=1, dash="dash"),
            annotation_text=f"{label}: {level:g}",
            annotation_position="right",
        )

    x_range = axis_range(window, values, padding=padding)
    xaxis: dict[str, Any] = dict(
        title=dict(text="Elapsed Time (s)"),
        showgrid=True,
        gridcolor=PLOT_COLORS["grid"],
        zeroline=False,
    )
    if x_range.is_full_extent:
        xaxis["autorange"] = True
    else:
        xaxis["range"] = [x_range.low, x_range.high]

    fig.update_layout(
        xaxis=xaxis,
        yaxis=dict(
            title=dict(text="Heart Rate (bpm)"),
            range=[low_hr, high_hr],
            showgrid=True,
            gridcolor=PLOT_COLORS["grid"],
            zeroline=False,
        ),
        height=height,
        margin=dict(l=60, r=60, t=40, b=60),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="left", x=0),
        hovermode="closest",
        clickmode="event",
    )
    if extra_channels:
        fig.update_layout(yaxis2=dict(overlaying="y", side="right", showgrid=False))
    if not has_data:
        fig.add_annotation(
            text="Heart Rate data not available.",
            xref="paper",
            yref="paper",
            x=0.5,
            y=0.5,
            showarrow=False,
            font=dict(size=16, color=PLOT_COLORS["text"]),
        )
    return fig


def build_timeline_figure(samples: Sequence[Sample], elapsed: Sequence[float]) -> go.Figure:
    """Thin overview bar with one block per anomaly run."""

    values = np.asarray(elapsed, dtype=float)
    fig = go.Figure()
    for number, run in enumerate(anomaly_runs(samples)):
        start_s = float(values[run.start_index])
        end_s = float(values[run.end_index])
        fig.add_trace(go.Bar(
            x=[max(end_s - start_s, 1.0)],
            y=["anomalies"],
            base=[start_s],
            orientation="h",
            marker=dict(color=PLOT_COLORS["anomaly"]),
            customdata=[[run.start_index, run.end_index]],
            name=f"run {number + 1}",
            hovertemplate=(
                f"{format_duration(start_s)} – {format_duration(end_s)}<extra></extra>"
            ),
            showlegend=False,
        ))
    fig.update_layout(
        height=90,
        margin=dict(l=60, r=60, t=10, b=20),
        xaxis=dict(range=[0, float(values[-1]) if values.size else 1.0], showgrid=False),
        yaxis=dict(showticklabels=False),
        barmode="overlay",
    )
    return fig


def clicked_sequence_index(fig: go.Figure, point: Mapping[str, Any]) -> int | None:
    """Map a ``plotly_events`` click back to the sample's sequence index.

    Only clicks on the heart-rate and anomaly traces count; anything else
    returns None.
    """

    curve = point.get("curveNumber")
    position = point.get("pointIndex", point.get("pointNumber"))
    if not isinstance(curve, int) or not isinstance(position, int):
        return None
    if curve < 0 or curve >= len(fig.data):
        return None
    trace = fig.data[curve]
    if trace.name != HEART_RATE_TRACE and not str(trace.name).startswith(ANOMALY_TRACE):
        return None
    customdata = trace.customdata
    if customdata is None or position < 0 or position >= len(customdata):
        return None
    return int(customdata[position])


def clicked_run(fig: go.Figure, point: Mapping[str, Any]) -> ViewWindow | None:
    """Anomaly run behind a click on the timeline figure."""

    curve = point.get("curveNumber")
    if not isinstance(curve, int) or curve < 0 or curve >= len(fig.data):
        return None
    customdata = fig.data[curve].customdata
    if customdata is None or len(customdata) == 0:
        return None
    start_index, end_index = customdata[0]
    return ViewWindow(int(start_index), int(end_index))


__all__ = [
    "ANOMALY_TRACE",
    "HEART_RATE_TRACE",
    "PLOT_COLORS",
    "build_session_figure",
    "build_timeline_figure",
    "clicked_run",
    "clicked_sequence_index",
]
