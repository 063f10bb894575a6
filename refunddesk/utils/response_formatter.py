"""Serialization of engine state for the HTTP and Streamlit shells."""

from typing import Any, Dict, Iterable, List, Optional

from ..engine.file_checker import picker_accept
from ..engine.rotation import RotationScheduler
from ..engine.session import RefundFormSession
from ..models.dispute import DisputeRecord
from ..models.form import REASON_OPTIONS
from ..models.highlights import HIGHLIGHT_CARDS, build_insights


class ResponseFormatter:
    """
    Builds JSON-ready payloads from engine objects.

    Field errors are emitted only for touched fields, so a payload can be
    rendered directly without re-implementing the visibility rule.
    """

    @staticmethod
    def rotation_payload(scheduler: RotationScheduler) -> Dict[str, Any]:
        state = scheduler.state
        return {
            "members": list(scheduler.members),
            "activeKey": state.active_key,
            "autoRotateEnabled": state.auto_rotate_enabled,
            "idleResumeDeadline": state.idle_resume_deadline,
            "mode": scheduler.mode.value,
        }

    @staticmethod
    def fields_payload(session: RefundFormSession) -> List[Dict[str, Any]]:
        store = session.store
        schema = store.schema
        payload = []
        for name in schema.fields:
            payload.append({
                "name": name,
                "value": store.get(name),
                "required": name in schema.required_fields,
                "touched": store.touched[name],
                "state": store.field_state(name).value,
                "error": store.visible_error(name),
                "hint": schema.hint(name),
                "describedBy": store.described_by(name),
                "focused": store.focused_field == name,
            })
        return payload

    @staticmethod
    def session_payload(session: RefundFormSession) -> Dict[str, Any]:
        """
        Snapshot a form session.

        Args:
            session: Form session to serialize

        Returns:
            Dictionary safe to pass to json.dumps / jsonable_encoder
        """
        store = session.store
        attachment = session.attachments.attachment
        last = session.submissions.last_submission
        active_card = session.active_highlight
        estimate = session.estimate

        return {
            "sessionId": session.session_id,
            "variant": store.schema.name,
            "fields": ResponseFormatter.fields_payload(session),
            "reasonOptions": list(REASON_OPTIONS),
            "isFormValid": store.is_form_valid,
            "successMessage": store.success_message,
            "attachment": attachment.to_dict() if attachment else None,
            "attachmentError": store.attachment_error,
            "isDraggingFile": session.attachments.is_dragging,
            "fileInputKey": store.file_input_key,
            "fileAccept": picker_accept(session.config.form.accepted_extensions),
            "highlights": {
                **ResponseFormatter.rotation_payload(session.highlights),
                "cards": [
                    {"title": c.title, "description": c.description, "icon": c.icon}
                    for c in HIGHLIGHT_CARDS
                ],
                "activeDescription": active_card.description if active_card else None,
            },
            "insights": {
                **ResponseFormatter.rotation_payload(session.insights),
                "widgets": build_insights(estimate),
            },
            "sliders": {
                "evidenceConfidence": session.sliders.evidence_confidence,
                "merchantResponseHours": session.sliders.merchant_response_hours,
            },
            "estimate": estimate.to_dict(),
            "lastSubmission": last.to_dict() if last else None,
            "copied": session.copier.copied,
            "closed": session.closed,
        }

    @staticmethod
    def disputes_payload(records: Iterable[DisputeRecord], status: Optional[str] = None) -> Dict[str, Any]:
        items = [record.to_dict() for record in records]
        return {
            "status": status or "all",
            "count": len(items),
            "disputes": items,
            "emptyMessage": None if items else "No disputes match this status yet.",
        }
