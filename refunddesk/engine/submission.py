"""Form submission: validation gate, case IDs and reset."""

import logging
import random
import string
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Callable, Optional, Set

from ..models.form import SubmissionRecord
from ..storage.history import SubmissionHistory
from ..utils.errors import SideEffectError, handle_side_effect_error
from ..utils.logging import with_context
from .attachment import FileAttachmentController
from .form_store import FormStateStore

logger = logging.getLogger(__name__)

CASE_ID_ALPHABET = string.digits + string.ascii_uppercase
CASE_ID_PREFIX = "RFD"
CASE_ID_LENGTH = 5
SLA_HOURS = 48


def generate_case_id(
    rng: Optional[random.Random] = None,
    prefix: str = CASE_ID_PREFIX,
    length: int = CASE_ID_LENGTH,
) -> str:
    """
    Draw a case identifier such as ``RFD-7K2QZ``.

    Each character is drawn independently and uniformly from 0-9A-Z. The
    identifier is informational and not suitable as a secret.
    """
    rng = rng or random
    suffix = "".join(rng.choice(CASE_ID_ALPHABET) for _ in range(length))
    return f"{prefix}-{suffix}"


def success_message(case_id: str, sla_hours: int = SLA_HOURS) -> str:
    return (
        f"Refund request submitted. Your Case ID is {case_id}. "
        f"We'll get back to you within {sla_hours} hours."
    )


class SubmissionController:
    """
    Runs the submit flow for one form.

    A blocked submit changes nothing beyond installing validation errors.
    A successful submit emits exactly one SubmissionRecord, records it in
    the history (best effort), then clears the form and the attachment.

    Args:
        store: Form state store
        attachments: Attachment controller sharing the same store
        history: Optional submission history sink
        rng: Random source for case IDs
        prefix: Case ID prefix
        length: Number of random case ID characters
        sla_hours: Response window quoted in the success message
        clock: Returns the submission timestamp
    """

    def __init__(
        self,
        store: FormStateStore,
        attachments: FileAttachmentController,
        history: Optional[SubmissionHistory] = None,
        rng: Optional[random.Random] = None,
        prefix: str = CASE_ID_PREFIX,
        length: int = CASE_ID_LENGTH,
        sla_hours: int = SLA_HOURS,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.store = store
        self.attachments = attachments
        self.history = history
        self.rng = rng or random.Random()
        self.prefix = prefix
        self.length = length
        self.sla_hours = sla_hours
        self.clock = clock
        self.last_submission: Optional[SubmissionRecord] = None
        self._issued: Set[str] = set()

    def next_case_id(self) -> str:
        """Draw a case ID not yet issued by this controller."""
        case_id = generate_case_id(self.rng, self.prefix, self.length)
        while case_id in self._issued:
            case_id = generate_case_id(self.rng, self.prefix, self.length)
        self._issued.add(case_id)
        return case_id

    @with_context(component="submission")
    def submit(self) -> Optional[SubmissionRecord]:
        """
        Validate and, if clean, submit the form.

        Returns:
            SubmissionRecord on success, None when validation blocked the submit
        """
        if not self.store.validate_all():
            logger.debug(f"Submission blocked by errors in {sorted(self.store.errors)}")
            return None

        case_id = self.next_case_id()
        message = success_message(case_id, self.sla_hours)
        record = SubmissionRecord(
            case_id=case_id,
            submitted_at=self.clock(),
            values=MappingProxyType(self.store.values),
            message=message,
        )

        if self.history is not None:
            try:
                self.history.record(record)
            except SideEffectError as e:
                handle_side_effect_error(e, "history write", logger)

        self.attachments.discard()
        self.store.reset()
        self.store.announce(message)
        self.last_submission = record

        logger.info(f"Submission accepted as {case_id}")
        return record
