"""Streamlit front end for the refund request form."""

from __future__ import annotations

import html
import time
from typing import Any, Dict, List, Optional

import streamlit as st

from refunddesk import runtime
from refunddesk.engine.session import HIGHLIGHTS, INSIGHTS, RefundFormSession
from refunddesk.engine.timers import ManualTimers
from refunddesk.models.attachment import SelectedFile
from refunddesk.models.dispute import DisputeStatus
from refunddesk.models.form import REASON, REASON_OPTIONS
from refunddesk.utils.errors import DisputeDataError, SideEffectError
from refunddesk.utils.response_formatter import ResponseFormatter


APP_TITLE = "Refund Desk - Payment Dispute Intake"

FIELD_LABELS: Dict[str, str] = {
    "customerName": "Customer name",
    "transactionId": "Transaction ID",
    "orderId": "Order ID",
    "customerEmail": "Customer email",
    "reason": "Dispute reason",
    "description": "Describe what happened",
}

STATUS_COLORS: Dict[str, str] = {
    "OPEN": "#e11d48",
    "IN_PROGRESS": "#d97706",
    "RESOLVED": "#059669",
}

FILTER_OPTIONS = ["All", "OPEN", "IN_PROGRESS", "RESOLVED"]

# Rerun interval of the rotating panels
LIVE_REFRESH_SECONDS = 1.0


def init_state() -> None:
    if "form_session" not in st.session_state:
        timers = ManualTimers(start=time.monotonic())
        st.session_state.timers = timers
        st.session_state.form_session = runtime.create_session(timers)
    st.session_state.setdefault("dispute_filter", "All")


def get_session() -> RefundFormSession:
    return st.session_state.form_session


def advance_clock() -> None:
    """Fire every timer that came due since the previous rerun."""
    st.session_state.timers.advance_to(time.monotonic())


# --------------------------- CALLBACKS ---------------------------

def on_field_change(field: str) -> None:
    session = get_session()
    session.set_field(field, st.session_state[f"input_{field}"])
    session.blur_field(field)


def on_file_change(widget_key: str) -> None:
    session = get_session()
    uploaded = st.session_state.get(widget_key)
    if uploaded is None:
        session.attach(None)
        return
    selected = SelectedFile.from_bytes(
        name=uploaded.name,
        data=uploaded.getvalue(),
        content_type=uploaded.type or "application/octet-stream",
    )
    job = session.attach(selected)
    if job is not None:
        session.attachments.complete_preview(job.stamp, job.decode())


def on_submit() -> None:
    get_session().submit()


def on_remove_attachment() -> None:
    get_session().remove_attachment()


def on_highlight_click(title: str) -> None:
    session = get_session()
    session.interact(HIGHLIGHTS, title)
    session.release(HIGHLIGHTS)


def on_insight_click(key: str) -> None:
    session = get_session()
    session.interact(INSIGHTS, key)
    session.release(INSIGHTS)


def on_slider_change() -> None:
    get_session().set_sliders(
        evidence_confidence=st.session_state.slider_evidence,
        merchant_response_hours=st.session_state.slider_hours,
    )


def on_copy() -> None:
    get_session().copy_case_id()


# --------------------------- RENDERING ---------------------------

@st.fragment(run_every=LIVE_REFRESH_SECONDS)
def live_highlights() -> None:
    advance_clock()
    render_highlights(ResponseFormatter.session_payload(get_session()))


@st.fragment(run_every=LIVE_REFRESH_SECONDS)
def live_insights() -> None:
    advance_clock()
    render_insights(ResponseFormatter.session_payload(get_session()))


def render_highlights(snapshot: Dict[str, Any]) -> None:
    """Render the reassurance cards with the active card emphasised."""

    group = snapshot["highlights"]
    columns = st.columns(len(group["cards"]))
    for col, card in zip(columns, group["cards"]):
        active = card["title"] == group["activeKey"]
        border = "#0ea5e9" if active else "#e5e7eb"
        col.markdown(
            f"""
            <div class="highlight-card" style="border-color:{border}">
                <div class="highlight-card__icon">{html.escape(card['icon'])}</div>
                <div class="highlight-card__title">{html.escape(card['title'])}</div>
            </div>
            """,
            unsafe_allow_html=True,
        )
        col.button(
            "Details",
            key=f"highlight_{card['title']}",
            on_click=on_highlight_click,
            args=(card["title"],),
            use_container_width=True,
        )
    if group["activeDescription"]:
        st.caption(group["activeDescription"])


def render_field(field: Dict[str, Any]) -> None:
    name = field["name"]
    label = FIELD_LABELS.get(name, name)
    if field["required"]:
        label += " *"
    key = f"input_{name}"
    if key not in st.session_state or st.session_state[key] != field["value"]:
        st.session_state[key] = field["value"]

    if name == REASON:
        options = [""] + list(REASON_OPTIONS)
        st.selectbox(
            label,
            options,
            key=key,
            format_func=lambda option: option or "Select a reason",
            on_change=on_field_change,
            args=(name,),
            help=field["hint"],
        )
    elif name == "description":
        st.text_area(label, key=key, on_change=on_field_change, args=(name,), help=field["hint"])
    else:
        st.text_input(label, key=key, on_change=on_field_change, args=(name,), help=field["hint"])

    if field["error"]:
        st.markdown(
            f"<div class='field-error' id='{name}-error'>{html.escape(field['error'])}</div>",
            unsafe_allow_html=True,
        )


def render_attachment(snapshot: Dict[str, Any]) -> None:
    accept = [ext.lstrip(".") for ext in snapshot["fileAccept"].split(",")]
    widget_key = f"proof_upload_{snapshot['fileInputKey']}"
    st.file_uploader(
        "Proof of purchase or conversation",
        type=accept,
        key=widget_key,
        on_change=on_file_change,
        args=(widget_key,),
        help=next(f["hint"] for f in snapshot["fields"] if f["name"] == "proofFileName"),
    )

    attachment = snapshot["attachment"]
    if snapshot["attachmentError"]:
        st.markdown(
            f"<div class='field-error' id='proofFileName-error'>{html.escape(snapshot['attachmentError'])}</div>",
            unsafe_allow_html=True,
        )
    if attachment:
        col_file, col_remove = st.columns([3, 1])
        with col_file:
            size_kb = attachment["sizeBytes"] / 1024
            st.markdown(f"**{attachment['fileName']}** ({size_kb:.1f} KB, {attachment['kind']})")
            if attachment["kind"] == "image":
                if attachment["previewLoaded"] and attachment["previewData"]:
                    st.image(attachment["previewData"], width=240)
                else:
                    st.caption("Preparing preview...")
        with col_remove:
            st.button("Remove", key="remove_attachment", on_click=on_remove_attachment)


def render_form(snapshot: Dict[str, Any]) -> None:
    st.subheader("Submit a refund request")
    for field in snapshot["fields"]:
        if field["name"] == "proofFileName":
            continue
        render_field(field)
    render_attachment(snapshot)

    st.button(
        "Submit request",
        key="submit_request",
        type="primary",
        on_click=on_submit,
        disabled=not snapshot["isFormValid"],
        use_container_width=True,
    )
    if not snapshot["isFormValid"]:
        st.caption("Complete the required fields to submit.")


def render_success(snapshot: Dict[str, Any]) -> None:
    if not snapshot["successMessage"]:
        return
    st.success(snapshot["successMessage"])
    last = snapshot["lastSubmission"]
    if last:
        col_id, col_copy = st.columns([3, 1])
        with col_id:
            st.code(last["caseId"], language=None)
        with col_copy:
            st.button("Copy case ID", key="copy_case_id", on_click=on_copy)
            if snapshot["copied"]:
                st.caption("Copied!")


def render_insights(snapshot: Dict[str, Any]) -> None:
    """Render the estimator sliders and the rotating insight widgets."""

    st.subheader("Outcome estimator")
    sliders = snapshot["sliders"]
    st.slider(
        "Evidence confidence",
        min_value=10,
        max_value=100,
        value=int(sliders["evidenceConfidence"]),
        key="slider_evidence",
        on_change=on_slider_change,
    )
    st.slider(
        "Merchant response time (hours)",
        min_value=12,
        max_value=72,
        value=int(sliders["merchantResponseHours"]),
        key="slider_hours",
        on_change=on_slider_change,
    )

    group = snapshot["insights"]
    widgets: List[Dict[str, Any]] = group["widgets"]
    columns = st.columns(len(widgets))
    for col, widget in zip(columns, widgets):
        active = widget["key"] == group["activeKey"]
        col.markdown(
            f"""
            <div class="kpi-card{' kpi-card--active' if active else ''}" style="border-top-color:{widget['accent']}">
                <div class="kpi-card__value">{widget['value']}</div>
                <div class="kpi-card__label">{widget['label']}</div>
                <div class="kpi-card__caption">{widget['caption']}</div>
            </div>
            """,
            unsafe_allow_html=True,
        )
        col.button(
            "Focus",
            key=f"insight_{widget['key']}",
            on_click=on_insight_click,
            args=(widget["key"],),
            use_container_width=True,
        )


def render_disputes() -> None:
    st.subheader("Dispute queue")
    choice = st.selectbox(
        "Status",
        FILTER_OPTIONS,
        key="dispute_filter",
        format_func=lambda value: "All" if value == "All" else DisputeStatus(value).label,
    )
    status: Optional[DisputeStatus] = None if choice == "All" else DisputeStatus(choice)
    try:
        records = runtime.get_dispute_provider().list_disputes(status)
    except DisputeDataError as exc:
        st.error(f"Dispute list unavailable: {exc}")
        return

    payload = ResponseFormatter.disputes_payload(records, choice)
    if not payload["disputes"]:
        st.info(payload["emptyMessage"])
        return

    for item in payload["disputes"]:
        color = STATUS_COLORS.get(item["status"], "#6b7280")
        st.markdown(
            f"""
            <div class="dispute-card">
                <div class="dispute-card__header">
                    <strong>#{item['id']} {html.escape(item['customerName'])}</strong>
                    <span class="badge" style="background:{color}">{item['statusLabel']}</span>
                </div>
                <div>{html.escape(item['issue'])}</div>
                <div class="small">Filed {item['filedDisplay']} · Updated {item['updatedDisplay']}</div>
            </div>
            """,
            unsafe_allow_html=True,
        )


def render_history() -> None:
    try:
        entries = runtime.get_history().entries()
    except SideEffectError as exc:
        st.warning(f"History unavailable: {exc}")
        return
    if not entries:
        st.caption("No submissions yet.")
        return
    for entry in entries:
        st.markdown(f"- **{entry['caseId']}** · {entry.get('reason', '')} · {entry['submittedAt']}")


# --------------------------- PAGE ---------------------------

def main() -> None:
    st.set_page_config(page_title=APP_TITLE, layout="wide")
    init_state()
    advance_clock()
    snapshot = ResponseFormatter.session_payload(get_session())

    st.markdown(
        """
        <style>
        .small { font-size: 0.85rem; color:#58606b; }
        .field-error { color:#b91c1c; font-size:0.85rem; margin-top:-0.5rem; margin-bottom:0.75rem; }
        .highlight-card { border:2px solid; border-radius:12px; padding:0.75rem 1rem; margin-bottom:0.5rem; }
        .highlight-card__icon { font-size:0.75rem; text-transform:uppercase; color:#64748b; }
        .highlight-card__title { font-weight:600; }
        .kpi-card { border-top:4px solid; border-radius:12px; padding:0.75rem 1rem; background:white;
                    box-shadow:0 4px 12px rgba(15,23,42,0.04); margin-bottom:0.5rem; }
        .kpi-card--active { box-shadow:0 6px 18px rgba(14,165,233,0.25); }
        .kpi-card__value { font-size:1.6rem; font-weight:700; }
        .kpi-card__label { font-weight:600; }
        .kpi-card__caption { font-size:0.8rem; color:#64748b; }
        .dispute-card { border:1px solid #e5e7eb; border-radius:12px; padding:0.75rem 1rem; margin-bottom:0.5rem; }
        .dispute-card__header { display:flex; justify-content:space-between; align-items:center; }
        .badge { color:white; border-radius:999px; padding:0.1rem 0.6rem; font-size:0.75rem; }
        </style>
        """,
        unsafe_allow_html=True,
    )

    st.title(APP_TITLE)
    live_highlights()

    form_tab, queue_tab = st.tabs(["Refund request", "Dispute queue"])
    with form_tab:
        col_form, col_side = st.columns([1.4, 1])
        with col_form:
            render_success(snapshot)
            render_form(snapshot)
        with col_side:
            live_insights()
            with st.expander("Recent submissions"):
                render_history()
    with queue_tab:
        render_disputes()


main()
