"""Streamlit review console for heart-rate sessions.

Run with ``streamlit run src/hr_review/gui/app.py``.
"""

from __future__ import annotations

import asyncio
import json
import logging

import streamlit as st
from streamlit_plotly_events import plotly_events

from hr_review.annotations import EditState, SaveStatus, save_changes
from hr_review.config import load_settings
from hr_review.export import export_session, samples_to_frame
from hr_review.gui.chart import (
    build_session_figure,
    build_timeline_figure,
    clicked_run,
    clicked_sequence_index,
)
from hr_review.io import (
    ADMIN_LABELS,
    SessionClient,
    SessionLoader,
    SessionServiceError,
    elapsed_seconds,
    normalize_session,
)
from hr_review.io.session_payload import Session
from hr_review.prep import summarize_session
from hr_review.segments import Segmentation, SplitPolicy, SplitView
from hr_review.view import InvalidRange, ViewWindowManager, format_duration, zoom_to_run

log = logging.getLogger(__name__)

SPLIT_LABELS = {
    SplitPolicy.COUNT: "Number of segments",
    SplitPolicy.TIME: "Segment duration (s)",
    SplitPolicy.POINTS: "Heart-rate points per segment",
}


def init_state() -> None:
    """Create the per-browser-tab state once."""

    if "settings" in st.session_state:
        return
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)
    client = SessionClient.from_settings(settings)
    st.session_state.settings = settings
    st.session_state.client = client
    st.session_state.loader = SessionLoader(client)
    st.session_state.session = None
    st.session_state.edit_state = None
    st.session_state.elapsed = None
    st.session_state.split_view = SplitView(ViewWindowManager())
    st.session_state.pending_reset = None
    st.session_state.chart_nonce = 0
    st.session_state.timeline_nonce = 0


def adopt_session(session: Session) -> None:
    """Make ``session`` the one under review, discarding previous edits."""

    st.session_state.session = session
    st.session_state.edit_state = EditState.from_samples(session.samples)
    st.session_state.elapsed = elapsed_seconds(session.samples)
    st.session_state.split_view = SplitView(ViewWindowManager(len(session.samples)))
    st.session_state.pending_reset = None
    log.info("Reviewing session %s (%d samples)", session.session_id, len(session.samples))


def render_sidebar() -> None:
    settings = st.session_state.settings
    with st.sidebar:
        st.header("Session")
        source = st.radio("Source", ["Backend", "JSON file"], horizontal=True)

        if source == "Backend":
            st.caption(f"API: {settings.api_base_url}")
            session_id = st.text_input("Session id")
            if st.button("Load", use_container_width=True, disabled=not session_id.strip()):
                loader: SessionLoader = st.session_state.loader
                try:
                    session = asyncio.run(loader.navigate(session_id.strip()))
                except SessionServiceError as exc:
                    st.error(f"Could not load session {session_id}: {exc}")
                else:
                    if session is not None:
                        adopt_session(session)
        else:
            uploaded = st.file_uploader("Session payload", type=["json"])
            if uploaded is not None and st.button("Open file", use_container_width=True):
                try:
                    payload = json.loads(uploaded.getvalue().decode("utf-8"))
                except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                    st.error(f"Not a valid session file: {exc}")
                else:
                    adopt_session(normalize_session(payload))

        state: EditState | None = st.session_state.edit_state
        if state is not None and state.has_changes:
            st.warning(f"{state.pending_count} unsaved label change(s)")


def render_metrics(session: Session, state: EditState) -> None:
    summary = summarize_session(
        session, state.working, channel=st.session_state.settings.primary_channel
    )
    col1, col2, col3, col4, col5 = st.columns(5)
    col1.metric("Samples", summary.sample_count)
    col2.metric("Duration", format_duration(summary.duration_s))
    col3.metric(
        "Heart rate",
        "N/A" if summary.hr_min is None else f"{summary.hr_min:.0f}–{summary.hr_max:.0f} bpm",
    )
    col4.metric("Avg pace", summary.avg_pace)
    col5.metric("Anomalies", summary.anomaly_count, f"{summary.anomaly_ratio * 100:.1f}%", delta_color="off")
    with st.expander("More statistics"):
        st.write(
            {
                "Mean heart rate": None if summary.hr_mean is None else round(summary.hr_mean, 1),
                "Fastest pace": summary.fastest_pace,
                "Slowest pace": summary.slowest_pace,
                "Elevation gain (m)": summary.total_ascent_m,
                "Elevation loss (m)": summary.total_descent_m,
                "Model predictions": summary.prediction_counts,
                "Admin label": session.metadata.get("admin_label"),
            }
        )


def render_view_controls(state: EditState) -> None:
    split_view: SplitView = st.session_state.split_view
    elapsed = st.session_state.elapsed
    settings = st.session_state.settings

    range_col, split_col = st.columns(2)
    with range_col:
        st.subheader("Time range")
        with st.form("time_range"):
            start_text = st.text_input("Start (HH:MM:SS)", "00:00")
            end_text = st.text_input("End (HH:MM:SS)", format_duration(float(elapsed[-1])))
            apply_range = st.form_submit_button("Apply range")
        if apply_range:
            result = split_view.by_time_string(start_text, end_text, elapsed)
            if isinstance(result, InvalidRange):
                st.error(result.reason)
        if st.button("Show full recording"):
            split_view.clear()

    with split_col:
        st.subheader("Split")
        policy = st.selectbox("Method", SplitPolicy.ALL, format_func=lambda p: SPLIT_LABELS[p])
        value = st.number_input(SPLIT_LABELS[policy], min_value=0.0, value=4.0, step=1.0)
        if st.button("Apply split"):
            number = int(value) if value == int(value) else value
            outcome = split_view.apply(
                policy,
                number,
                state.working,
                channel=settings.primary_channel,
                elapsed=elapsed,
            )
            if not isinstance(outcome, Segmentation):
                st.info(outcome.message)

        segmentation = split_view.segmentation
        if segmentation is not None:
            prev_col, label_col, next_col = st.columns([1, 2, 1])
            if prev_col.button("Previous", disabled=segmentation.is_first):
                split_view.previous()
            if next_col.button("Next", disabled=segmentation.is_last):
                split_view.next()
            label_col.markdown(f"**{segmentation.label}**")


def render_timeline(state: EditState) -> None:
    elapsed = st.session_state.elapsed
    fig = build_timeline_figure(state.working, elapsed)
    if not fig.data:
        return
    st.caption("Anomaly timeline: click a block to zoom in")
    points = plotly_events(
        fig,
        click_event=True,
        hover_event=False,
        select_event=False,
        override_height=90,
        key=f"timeline_{st.session_state.timeline_nonce}",
    )
    if points:
        run = clicked_run(fig, points[0])
        if run is not None:
            window = zoom_to_run(
                run,
                state.working,
                window_points=st.session_state.settings.timeline_zoom_points,
                channel=st.session_state.settings.primary_channel,
            )
            if window is not None:
                st.session_state.split_view.set_window(window.start_index, window.end_index)
        st.session_state.timeline_nonce += 1
        st.rerun()


def render_chart(session: Session, state: EditState) -> None:
    settings = st.session_state.settings
    split_view: SplitView = st.session_state.split_view
    fig = build_session_figure(
        state.working,
        st.session_state.elapsed,
        window=split_view.manager.window,
        metadata=session.metadata,
        channel=settings.primary_channel,
        padding=settings.axis_padding,
        height=settings.chart_height,
    )
    st.info("💡 Click a heart-rate point to toggle its anomaly label")
    points = plotly_events(
        fig,
        click_event=True,
        hover_event=False,
        select_event=False,
        override_height=settings.chart_height,
        key=f"chart_{st.session_state.chart_nonce}",
    )
    if points:
        index = clicked_sequence_index(fig, points[0])
        if index is not None:
            state.toggle(index)
        # Fresh component key so the same click is not replayed on rerun
        st.session_state.chart_nonce += 1
        st.rerun()


def render_actions(session: Session, state: EditState) -> None:
    client: SessionClient = st.session_state.client
    save_col, reset_col, label_col, export_col = st.columns(4)

    with save_col:
        can_save = session.session_id is not None and state.has_changes
        if st.button("Save changes", type="primary", disabled=not can_save):
            result = asyncio.run(save_changes(state, session.session_id, client))
            if result.status == SaveStatus.SAVED:
                st.success(f"{result.message} ({len(result.changes)} label(s))")
            elif result.status == SaveStatus.NO_CHANGES:
                st.info(result.message)
            else:
                hint = " Try again." if result.retryable else ""
                st.error(f"{result.message}{hint}")

    with reset_col:
        pending = st.session_state.pending_reset
        if pending is None:
            if st.button("Reset all labels"):
                st.session_state.pending_reset = state.request_reset_all()
                st.rerun()
        else:
            st.warning(f"Clear {pending.labels_to_clear} anomaly label(s)?")
            confirm_col, cancel_col = st.columns(2)
            if confirm_col.button("Confirm reset"):
                cleared = state.reset_all(pending)
                st.session_state.pending_reset = None
                st.toast(f"Cleared {cleared} label(s)")
                st.rerun()
            if cancel_col.button("Cancel"):
                state.cancel_reset_all()
                st.session_state.pending_reset = None
                st.rerun()

    with label_col:
        current = session.metadata.get("admin_label")
        options = list(ADMIN_LABELS)
        choice = st.selectbox(
            "Admin label",
            options,
            index=options.index(current) if current in options else 0,
        )
        if st.button("Update label", disabled=session.session_id is None or choice == current):
            try:
                stored = asyncio.run(client.set_admin_label(session.session_id, choice))
            except SessionServiceError as exc:
                st.error(f"Failed to update label: {exc}")
            else:
                session.metadata["admin_label"] = stored
                st.success(f"Label set to {stored}")

    with export_col:
        settings = st.session_state.settings
        export_file = export_session(session, state.working, delimiter=settings.export_delimiter)
        if export_file is not None:
            st.download_button(
                label="Download CSV",
                data=export_file.content,
                file_name=export_file.filename,
                mime=export_file.media_type,
                use_container_width=True,
            )


def render_table(state: EditState) -> None:
    window = st.session_state.split_view.manager.window
    rows = state.working[window.as_slice()] if window is not None else state.working
    with st.expander(f"Raw data ({len(rows)} rows)"):
        st.dataframe(samples_to_frame(rows), use_container_width=True, hide_index=True)


def main():
    """Main Streamlit app."""
    st.set_page_config(page_title="HR Review", page_icon="❤️", layout="wide")
    init_state()
    render_sidebar()

    session: Session | None = st.session_state.session
    state: EditState | None = st.session_state.edit_state
    if session is None or state is None:
        st.title("HR Review")
        st.markdown("Load a session from the sidebar to start reviewing.")
        return

    title = session.subject_name or f"Session {session.session_id}"
    st.title(f"❤️ {title}")
    if session.is_empty:
        st.info("This session has no samples.")
        return

    render_metrics(session, state)
    render_view_controls(state)
    render_timeline(state)
    render_chart(session, state)
    render_actions(session, state)
    render_table(state)


if __name__ == "__main__":
    main()
