"""Best-effort clipboard copy with a transient confirmation flag."""

import logging
from typing import Optional, Protocol

from .errors import SideEffectError, handle_side_effect_error
from .logging import with_context

logger = logging.getLogger(__name__)

COPIED_FLASH_SECONDS = 2.0


class ClipboardSink(Protocol):
    def write_text(self, text: str) -> None: ...


class MemoryClipboard:
    """Clipboard stand-in for shells without access to the user's clipboard."""

    def __init__(self):
        self.text: Optional[str] = None

    def write_text(self, text: str) -> None:
        self.text = text


class CaseIdCopier:
    """
    Copies text to a clipboard sink and raises ``copied`` briefly on success.

    Failures are logged and leave ``copied`` False; they never reach the form.

    Args:
        clipboard: Clipboard sink
        timers: Timer backend used to clear the confirmation
        flash_seconds: How long ``copied`` stays True
    """

    def __init__(self, clipboard: ClipboardSink, timers, flash_seconds: float = COPIED_FLASH_SECONDS):
        self.clipboard = clipboard
        self.timers = timers
        self.flash_seconds = flash_seconds
        self.copied = False
        self._handle = None

    @with_context(component="clipboard")
    def copy(self, text: str) -> bool:
        self.cancel()
        try:
            self.clipboard.write_text(text)
        except Exception as exc:  # pylint: disable=broad-except
            handle_side_effect_error(
                SideEffectError.clipboard_unavailable(exc), "clipboard copy", logger
            )
            return False

        self.copied = True
        self._handle = self.timers.call_later(self.flash_seconds, self._clear)
        return True

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.copied = False

    def _clear(self) -> None:
        self._handle = None
        self.copied = False
