"""FastAPI backend for the refund request form."""

from __future__ import annotations

import asyncio
import logging
import threading
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from refunddesk import runtime
from refunddesk.engine.session import RefundFormSession
from refunddesk.engine.timers import AsyncioTimers
from refunddesk.models.attachment import SelectedFile
from refunddesk.models.dispute import DisputeStatus
from refunddesk.utils.errors import (
    DisputeDataError,
    EngineUsageError,
    SideEffectError,
)
from refunddesk.utils.response_formatter import ResponseFormatter


APP_TITLE = "Refund Desk - Payment Dispute Intake"

logger = logging.getLogger(__name__)

sessions: Dict[str, RefundFormSession] = {}
sessions_lock = threading.Lock()


@asynccontextmanager
async def lifespan(app: FastAPI):
    runtime.get_config()
    logger.info(f"{APP_TITLE} starting")
    yield
    with sessions_lock:
        closing = list(sessions.values())
        sessions.clear()
    for session in closing:
        session.teardown()
    logger.info(f"Tore down {len(closing)} form sessions on shutdown")


app = FastAPI(title=APP_TITLE, lifespan=lifespan)


@app.exception_handler(EngineUsageError)
async def engine_usage_handler(request: Request, exc: EngineUsageError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": exc.to_dict()})


@app.exception_handler(DisputeDataError)
async def dispute_data_handler(request: Request, exc: DisputeDataError) -> JSONResponse:
    logger.error(f"Dispute data unavailable: {exc}")
    return JSONResponse(status_code=500, content={"detail": exc.to_dict()})


def _register_session(session: RefundFormSession) -> RefundFormSession:
    with sessions_lock:
        sessions[session.session_id] = session
    return session


def _get_session(session_id: str) -> RefundFormSession:
    with sessions_lock:
        session = sessions.get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Form session not found.")
    return session


def _session_response(session: RefundFormSession, **extra: Any) -> JSONResponse:
    payload = ResponseFormatter.session_payload(session)
    payload.update(extra)
    return JSONResponse(jsonable_encoder(payload))


async def _read_upload(file: UploadFile) -> SelectedFile:
    data = await file.read()
    return SelectedFile.from_bytes(
        name=file.filename or "upload",
        data=data,
        content_type=file.content_type or "application/octet-stream",
    )


def _parse_status(status: Optional[str]) -> Optional[DisputeStatus]:
    if not status or status.lower() == "all":
        return None
    try:
        return DisputeStatus(status.upper().replace(" ", "_"))
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown dispute status '{status}'.",
        ) from None


# Sessions

@app.post("/api/sessions")
async def create_session() -> JSONResponse:
    timers = AsyncioTimers(asyncio.get_running_loop())
    session = _register_session(runtime.create_session(timers))
    logger.info(f"Created form session {session.session_id}")
    payload = ResponseFormatter.session_payload(session)
    return JSONResponse(jsonable_encoder(payload), status_code=201)


@app.get("/api/sessions/{session_id}")
async def session_status(session_id: str) -> JSONResponse:
    return _session_response(_get_session(session_id))


@app.delete("/api/sessions/{session_id}")
async def close_session(session_id: str) -> JSONResponse:
    with sessions_lock:
        session = sessions.pop(session_id, None)
    if not session:
        raise HTTPException(status_code=404, detail="Form session not found.")
    session.teardown()
    logger.info(f"Closed form session {session_id}")
    return JSONResponse({"status": "closed", "sessionId": session_id})


# Fields

@app.post("/api/sessions/{session_id}/fields/{field}")
async def update_field(session_id: str, field: str, value: str = Form(default="")) -> JSONResponse:
    session = _get_session(session_id)
    session.set_field(field, value)
    return _session_response(session)


@app.post("/api/sessions/{session_id}/fields/{field}/blur")
async def blur_field(session_id: str, field: str) -> JSONResponse:
    session = _get_session(session_id)
    session.blur_field(field)
    return _session_response(session)


@app.post("/api/sessions/{session_id}/fields/{field}/focus")
async def focus_field(session_id: str, field: str) -> JSONResponse:
    session = _get_session(session_id)
    session.focus_field(field)
    return _session_response(session)


# Attachment

@app.post("/api/sessions/{session_id}/attachment")
async def upload_attachment(
    session_id: str,
    file: Optional[UploadFile] = File(default=None),
) -> JSONResponse:
    session = _get_session(session_id)
    selected = await _read_upload(file) if file is not None else None
    await session.attach_with_preview(selected)
    return _session_response(session)


@app.delete("/api/sessions/{session_id}/attachment")
async def remove_attachment(session_id: str) -> JSONResponse:
    session = _get_session(session_id)
    session.remove_attachment()
    return _session_response(session)


@app.post("/api/sessions/{session_id}/attachment/drag")
async def drag_attachment(session_id: str, active: bool = Form(default=True)) -> JSONResponse:
    session = _get_session(session_id)
    if active:
        session.attachments.drag_enter()
    else:
        session.attachments.drag_leave()
    return _session_response(session)


# Submission

@app.post("/api/sessions/{session_id}/submit")
async def submit_form(session_id: str) -> JSONResponse:
    session = _get_session(session_id)
    record = session.submit()
    return _session_response(
        session,
        accepted=record is not None,
        submission=record.to_dict() if record else None,
    )


@app.post("/api/sessions/{session_id}/copy")
async def copy_case_id(session_id: str) -> JSONResponse:
    session = _get_session(session_id)
    if session.submissions.last_submission is None:
        raise HTTPException(status_code=400, detail="No case ID to copy yet.")
    session.copy_case_id()
    return _session_response(session)


# Rotation groups

@app.post("/api/sessions/{session_id}/rotation/{group}/interact")
async def interact(session_id: str, group: str, key: str = Form(...)) -> JSONResponse:
    session = _get_session(session_id)
    session.interact(group, key)
    return _session_response(session)


@app.post("/api/sessions/{session_id}/rotation/{group}/release")
async def release(session_id: str, group: str) -> JSONResponse:
    session = _get_session(session_id)
    session.release(group)
    return _session_response(session)


# Estimator

@app.post("/api/sessions/{session_id}/estimate")
async def update_estimate(
    session_id: str,
    evidence_confidence: Optional[float] = Form(default=None),
    merchant_response_hours: Optional[float] = Form(default=None),
) -> JSONResponse:
    session = _get_session(session_id)
    session.set_sliders(evidence_confidence, merchant_response_hours)
    return _session_response(session)


# Read-only views

@app.get("/api/disputes")
async def list_disputes(status: Optional[str] = None) -> JSONResponse:
    selected = _parse_status(status)
    records = runtime.get_dispute_provider().list_disputes(selected)
    payload = ResponseFormatter.disputes_payload(records, selected.value if selected else None)
    return JSONResponse(jsonable_encoder(payload))


@app.get("/api/history")
async def submission_history() -> JSONResponse:
    try:
        entries = runtime.get_history().entries()
    except SideEffectError as exc:
        logger.warning(f"History unavailable: {exc}")
        raise HTTPException(status_code=503, detail=exc.to_dict()) from exc
    return JSONResponse(jsonable_encoder({"entries": entries}))


@app.get("/healthz")
async def healthcheck() -> Dict[str, str]:
    return {"status": "ok"}
