"""Form engine: field state, attachments, submission, rotation and estimates."""

from .attachment import FileAttachmentController, PreviewJob
from .estimator import estimate_outcome
from .form_store import FormStateStore
from .rotation import RotationMode, RotationScheduler
from .session import RefundFormSession
from .submission import SubmissionController, generate_case_id
from .timers import AsyncioTimers, ManualTimers

__all__ = [
    "AsyncioTimers",
    "FileAttachmentController",
    "FormStateStore",
    "ManualTimers",
    "PreviewJob",
    "RefundFormSession",
    "RotationMode",
    "RotationScheduler",
    "SubmissionController",
    "estimate_outcome",
    "generate_case_id",
]
