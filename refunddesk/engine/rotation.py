"""Timer-driven rotation of an active member within a group.

A group cycles its ``active_key`` on a repeating tick. Interaction with a
member pins it and pauses the tick; an idle timer, restarted by every new
interaction, resumes rotation once it runs out. The two timers are held as
handles so that superseding interaction and teardown can cancel them.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from ..utils.errors import EngineUsageError
from .timers import TimerBackend, TimerHandle

logger = logging.getLogger(__name__)

TICK_SECONDS = 6.0
IDLE_SECONDS = 12.0


class RotationMode(Enum):
    UNMOUNTED = "unmounted"
    AUTO_ROTATING = "auto-rotating"
    PAUSED_INTERACTING = "paused-interacting"
    PAUSED_IDLE_COUNTDOWN = "paused-idle-countdown"
    TORN_DOWN = "torn-down"


@dataclass(frozen=True)
class RotationState:
    """
    Snapshot of a rotation group.

    Attributes:
        active_key: Currently highlighted member, None for an empty group
        auto_rotate_enabled: Whether the repeating tick is live
        idle_resume_deadline: Clock reading at which rotation resumes, while paused
    """
    active_key: Optional[str]
    auto_rotate_enabled: bool
    idle_resume_deadline: Optional[float]


class RotationScheduler:
    """
    Rotates the active member of a group and pauses on interaction.

    Args:
        name: Group name, used in logs and errors
        members: Member keys in rotation order
        timers: Timer backend providing call_later() and time()
        tick_seconds: Period of the rotation tick
        idle_seconds: Quiet period after interaction before rotation resumes
        on_change: Optional callback invoked with the new active key
    """

    def __init__(
        self,
        name: str,
        members: Sequence[str],
        timers: TimerBackend,
        tick_seconds: float = TICK_SECONDS,
        idle_seconds: float = IDLE_SECONDS,
        on_change: Optional[Callable[[str], None]] = None,
    ):
        if len(set(members)) != len(members):
            raise ValueError(f"Rotation group '{name}' has duplicate members")
        self.name = name
        self.members = tuple(members)
        self.timers = timers
        self.tick_seconds = tick_seconds
        self.idle_seconds = idle_seconds
        self.on_change = on_change

        self.active_key: Optional[str] = self.members[0] if self.members else None
        self.mode = RotationMode.UNMOUNTED
        self.idle_resume_deadline: Optional[float] = None
        self._tick_handle: Optional[TimerHandle] = None
        self._idle_handle: Optional[TimerHandle] = None

    @property
    def auto_rotate_enabled(self) -> bool:
        return self.mode is RotationMode.AUTO_ROTATING

    @property
    def state(self) -> RotationState:
        return RotationState(
            active_key=self.active_key,
            auto_rotate_enabled=self.auto_rotate_enabled,
            idle_resume_deadline=self.idle_resume_deadline,
        )

    def mount(self) -> None:
        """Start rotating. Has no effect once mounted or torn down."""
        if self.mode is not RotationMode.UNMOUNTED:
            return
        self.mode = RotationMode.AUTO_ROTATING
        self._schedule_tick()

    def interact(self, key: str) -> None:
        """
        Pin ``key`` as the active member and pause rotation.

        Pointer-enter, focus and click all map here. Each call restarts the
        idle countdown.

        Raises:
            EngineUsageError: If ``key`` is not a member of the group
        """
        if key not in self.members:
            raise EngineUsageError.unknown_member(self.name, key)
        if self.mode is RotationMode.TORN_DOWN:
            return

        self._set_active(key)
        if self.mode is RotationMode.UNMOUNTED:
            return

        if self.mode is RotationMode.AUTO_ROTATING:
            logger.debug(f"Rotation '{self.name}' paused on {key}")
        self._cancel_tick()
        self.mode = RotationMode.PAUSED_INTERACTING
        self._restart_idle()

    def release(self) -> None:
        """Pointer-leave or blur: the idle countdown restarts from now."""
        if self.mode is not RotationMode.PAUSED_INTERACTING:
            return
        self.mode = RotationMode.PAUSED_IDLE_COUNTDOWN
        self._restart_idle()

    def advance(self) -> Optional[str]:
        """Move to the next member in declared order, wrapping around."""
        if not self.members:
            return None
        try:
            index = self.members.index(self.active_key)
            next_index = (index + 1) % len(self.members)
        except ValueError:
            next_index = 0
        self._set_active(self.members[next_index])
        return self.active_key

    def teardown(self) -> None:
        """Cancel both timers. No callback of this group fires afterwards."""
        self._cancel_tick()
        self._cancel_idle()
        self.mode = RotationMode.TORN_DOWN

    # Timer callbacks

    def _on_tick(self) -> None:
        self._tick_handle = None
        if self.mode is not RotationMode.AUTO_ROTATING:
            return
        self.advance()
        self._schedule_tick()

    def _on_idle(self) -> None:
        self._idle_handle = None
        self.idle_resume_deadline = None
        if self.mode not in (RotationMode.PAUSED_INTERACTING, RotationMode.PAUSED_IDLE_COUNTDOWN):
            return
        self.mode = RotationMode.AUTO_ROTATING
        logger.debug(f"Rotation '{self.name}' resumed from {self.active_key}")
        self._schedule_tick()

    # Internals

    def _set_active(self, key: str) -> None:
        changed = key != self.active_key
        self.active_key = key
        if changed and self.on_change is not None:
            self.on_change(key)

    def _schedule_tick(self) -> None:
        self._cancel_tick()
        if len(self.members) > 1:
            self._tick_handle = self.timers.call_later(self.tick_seconds, self._on_tick)

    def _restart_idle(self) -> None:
        self._cancel_idle()
        self.idle_resume_deadline = self.timers.time() + self.idle_seconds
        self._idle_handle = self.timers.call_later(self.idle_seconds, self._on_idle)

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _cancel_idle(self) -> None:
        if self._idle_handle is not None:
            self._idle_handle.cancel()
            self._idle_handle = None
        self.idle_resume_deadline = None
