"""Streamlit review console and its Plotly figures."""

from hr_review.gui.chart import (
    build_session_figure,
    build_timeline_figure,
    clicked_run,
    clicked_sequence_index,
)

__all__: list[str] = [
    "build_session_figure",
    "build_timeline_figure",
    "clicked_run",
    "clicked_sequence_index",
    "main",
]


def __getattr__(name: str):
    """Lazy import to avoid loading app.py on package import."""
    if name == "main":
        from hr_review.gui.app import main
        return main
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
