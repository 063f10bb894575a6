"""One refund form instance: every engine piece behind a single entry point."""

import logging
import random
import uuid
from typing import Optional

from ..models.attachment import SelectedFile
from ..models.estimate import EstimatorOutputs, SliderInputs
from ..models.form import SubmissionRecord, get_schema
from ..models.highlights import HIGHLIGHT_CARDS, INSIGHT_KEYS, HighlightCard, find_card
from ..storage.history import SubmissionHistory
from ..utils.clipboard import CaseIdCopier, ClipboardSink, MemoryClipboard
from ..utils.config import Config
from ..utils.errors import EngineUsageError
from ..utils.logging import log_context, with_session_context
from .attachment import FileAttachmentController, PreviewJob
from .estimator import clamp_inputs, estimate_outcome
from .form_store import FormStateStore
from .rotation import RotationScheduler
from .submission import SubmissionController
from .timers import TimerBackend

logger = logging.getLogger(__name__)

HIGHLIGHTS = "highlights"
INSIGHTS = "insights"


class RefundFormSession:
    """
    Aggregate owning the form store, attachment, submission, rotation groups
    and slider inputs of one form.

    Shells talk to this object only. After teardown() every mutating call
    raises EngineUsageError and no timer of the session fires.

    Args:
        config: Loaded configuration
        timers: Timer backend for rotation and the copied flag
        history: Optional submission history
        clipboard: Clipboard sink for copying case IDs
        session_id: Identifier; generated when omitted
        rng: Random source for case IDs
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        timers: Optional[TimerBackend] = None,
        history: Optional[SubmissionHistory] = None,
        clipboard: Optional[ClipboardSink] = None,
        session_id: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ):
        if timers is None:
            raise ValueError("RefundFormSession needs a timer backend")
        self.config = config or Config()
        self.timers = timers
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.closed = False

        form_cfg = self.config.form
        rotation_cfg = self.config.rotation

        self.store = FormStateStore(get_schema(form_cfg.variant))
        self.attachments = FileAttachmentController(
            self.store,
            max_size=form_cfg.max_file_size_bytes,
            preview_max_dimension=self.config.preview.max_dimension,
        )
        self.submissions = SubmissionController(
            self.store,
            self.attachments,
            history=history,
            rng=rng,
            prefix=form_cfg.case_id_prefix,
            length=form_cfg.case_id_length,
            sla_hours=form_cfg.sla_hours,
        )
        self.highlights = RotationScheduler(
            HIGHLIGHTS,
            [card.title for card in HIGHLIGHT_CARDS],
            timers,
            tick_seconds=rotation_cfg.tick_ms / 1000,
            idle_seconds=rotation_cfg.idle_ms / 1000,
        )
        self.insights = RotationScheduler(
            INSIGHTS,
            INSIGHT_KEYS,
            timers,
            tick_seconds=rotation_cfg.tick_ms / 1000,
            idle_seconds=rotation_cfg.idle_ms / 1000,
        )
        self.copier = CaseIdCopier(
            clipboard or MemoryClipboard(),
            timers,
            flash_seconds=rotation_cfg.copied_flash_ms / 1000,
        )
        self.sliders = SliderInputs()

    # Lifecycle

    @with_session_context
    def mount(self) -> "RefundFormSession":
        self._check_open()
        self.highlights.mount()
        self.insights.mount()
        logger.debug(f"Mounted form session {self.session_id}")
        return self

    @with_session_context
    def teardown(self) -> None:
        if self.closed:
            return
        self.highlights.teardown()
        self.insights.teardown()
        self.copier.cancel()
        self.closed = True
        logger.debug(f"Tore down form session {self.session_id}")

    # Fields

    @with_session_context
    def set_field(self, field: str, value: str) -> Optional[str]:
        self._check_open()
        return self.store.set_field(field, value)

    @with_session_context
    def blur_field(self, field: str) -> Optional[str]:
        self._check_open()
        return self.store.blur_field(field)

    @with_session_context
    def focus_field(self, field: str) -> None:
        self._check_open()
        self.store.focus_field(field)

    @property
    def is_form_valid(self) -> bool:
        return self.store.is_form_valid

    # Attachment

    @with_session_context
    def attach(self, file: Optional[SelectedFile]) -> Optional[PreviewJob]:
        self._check_open()
        return self.attachments.attach(file)

    @with_session_context
    def remove_attachment(self) -> None:
        self._check_open()
        self.attachments.remove()

    async def attach_with_preview(self, file: Optional[SelectedFile]) -> Optional[PreviewJob]:
        """Attach and, for images, decode the preview before returning."""
        job = self.attach(file)
        if job is not None:
            with log_context(session_id=self.session_id):
                await self.attachments.load_preview(job)
        return job

    # Submission

    @with_session_context
    def submit(self) -> Optional[SubmissionRecord]:
        self._check_open()
        record = self.submissions.submit()
        if record is not None:
            self.copier.cancel()
        return record

    @with_session_context
    def copy_case_id(self) -> bool:
        """Copy the last case ID to the clipboard; False if nothing was copied."""
        self._check_open()
        record = self.submissions.last_submission
        if record is None:
            return False
        return self.copier.copy(record.case_id)

    # Rotation groups

    def rotation(self, group: str) -> RotationScheduler:
        if group == HIGHLIGHTS:
            return self.highlights
        if group == INSIGHTS:
            return self.insights
        raise EngineUsageError.unknown_member("rotation groups", group)

    @with_session_context
    def interact(self, group: str, key: str) -> None:
        self._check_open()
        self.rotation(group).interact(key)

    @with_session_context
    def release(self, group: str) -> None:
        self._check_open()
        self.rotation(group).release()

    @property
    def active_highlight(self) -> Optional[HighlightCard]:
        if self.highlights.active_key is None:
            return None
        return find_card(self.highlights.active_key)

    # Estimator

    @with_session_context
    def set_sliders(
        self,
        evidence_confidence: Optional[float] = None,
        merchant_response_hours: Optional[float] = None,
    ) -> EstimatorOutputs:
        self._check_open()
        self.sliders = clamp_inputs(SliderInputs(
            evidence_confidence=(
                self.sliders.evidence_confidence
                if evidence_confidence is None else evidence_confidence
            ),
            merchant_response_hours=(
                self.sliders.merchant_response_hours
                if merchant_response_hours is None else merchant_response_hours
            ),
        ))
        return self.estimate

    @property
    def estimate(self) -> EstimatorOutputs:
        return estimate_outcome(self.sliders)

    def _check_open(self) -> None:
        if self.closed:
            raise EngineUsageError.session_closed(self.session_id)
