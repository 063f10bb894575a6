"""Attachment state and image preview decoding."""

from __future__ import annotations

import asyncio
import base64
import io
import logging
from dataclasses import dataclass
from typing import Optional

from PIL import Image

from ..models.attachment import Attachment, FileKind, SelectedFile
from ..utils.errors import SideEffectError, handle_side_effect_error
from ..utils.logging import with_context
from .file_checker import MAX_FILE_SIZE, check_file
from .form_store import FormStateStore

logger = logging.getLogger(__name__)


def encoded_image(data: bytes, content_type: str) -> str:
    b64 = base64.b64encode(data).decode("utf-8")
    return f"data:{content_type};base64,{b64}"


def decode_preview(file: SelectedFile, max_dimension: int = 480) -> str:
    """
    Decode an image into a downscaled PNG data URL.

    Undecodable images fall back to a data URL of the original bytes.

    Args:
        file: Attached image
        max_dimension: Longest edge of the preview in pixels

    Returns:
        Data URL suitable for an <img> source
    """
    buffer = io.BytesIO()
    try:
        with Image.open(io.BytesIO(file.data)) as img:
            preview = img.convert("RGBA")
            preview.thumbnail((max_dimension, max_dimension), Image.LANCZOS)
            preview.save(buffer, format="PNG")
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        handle_side_effect_error(
            SideEffectError.preview_decode_failed(file.name, exc),
            "preview decode",
            logger,
        )
        return encoded_image(file.data, file.content_type)
    return encoded_image(buffer.getvalue(), "image/png")


@dataclass(frozen=True)
class PreviewJob:
    """A pending preview decode, stamped with the attachment it was issued for."""

    stamp: int
    file: SelectedFile
    max_dimension: int = 480

    def decode(self) -> str:
        return decode_preview(self.file, self.max_dimension)


class FileAttachmentController:
    """
    Owns the attached proof file and mirrors it into the form store.

    Every attach or removal advances an internal stamp. Preview decodes carry
    the stamp they were issued under and are dropped on completion if the
    attachment has moved on since.
    """

    def __init__(
        self,
        store: FormStateStore,
        max_size: int = MAX_FILE_SIZE,
        preview_max_dimension: int = 480,
    ):
        self.store = store
        self.max_size = max_size
        self.preview_max_dimension = preview_max_dimension
        self.attachment: Optional[Attachment] = None
        self.is_dragging = False
        self._stamp = 0

    @property
    def error(self) -> Optional[str]:
        return self.store.attachment_error

    @with_context(component="attachment")
    def attach(self, file: Optional[SelectedFile]) -> Optional[PreviewJob]:
        """
        Attach a newly selected file.

        A cancelled picker (``file is None``) behaves exactly like remove().

        Args:
            file: Selected file, or None when the picker was cancelled

        Returns:
            PreviewJob to run when the file is an image, otherwise None
        """
        if file is None:
            self.remove()
            return None

        self.is_dragging = False
        self._stamp += 1
        result = check_file(file, self.max_size)

        if not result.accepted:
            logger.info(
                f"Rejected attachment {file.name} ({file.size_bytes} bytes): {result.error}"
            )
            self.attachment = None
            self.store.set_attachment("", result.error)
            self.store.bump_file_input()
            return None

        is_image = result.kind is FileKind.IMAGE
        self.attachment = Attachment(
            file_name=file.name,
            size_bytes=file.size_bytes,
            kind=result.kind,
            stamp=self._stamp,
            preview_loaded=not is_image,
        )
        self.store.set_attachment(file.name)
        logger.debug(f"Attached {file.name} as {result.kind.value}")

        if is_image:
            return PreviewJob(self._stamp, file, self.preview_max_dimension)
        return None

    def complete_preview(self, stamp: int, preview_data: str) -> bool:
        """
        Install a decoded preview if it still belongs to the current attachment.

        Returns:
            True if installed, False if the result was stale and discarded
        """
        if self.attachment is None or self.attachment.stamp != stamp:
            logger.debug(f"Discarded stale preview for attachment stamp {stamp}")
            return False
        self.attachment.preview_data = preview_data
        self.attachment.preview_loaded = True
        return True

    async def load_preview(self, job: PreviewJob) -> bool:
        """Decode ``job`` off the event loop and install the result."""
        loop = asyncio.get_running_loop()
        preview = await loop.run_in_executor(None, job.decode)
        return self.complete_preview(job.stamp, preview)

    def remove(self) -> None:
        self.discard()
        self.store.clear_attachment()
        self.store.bump_file_input()

    def discard(self) -> None:
        """Forget the current attachment without touching the form store."""
        self._stamp += 1
        self.attachment = None
        self.is_dragging = False

    def drag_enter(self) -> None:
        self.is_dragging = True

    def drag_leave(self) -> None:
        self.is_dragging = False
