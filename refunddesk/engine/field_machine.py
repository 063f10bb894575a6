"""Explicit state table for a single form field.

States are ``untouched``, ``touched-valid`` and ``touched-invalid``. Every
event except ``reset`` lands in one of the touched states, picked by the
validation outcome of the field's current value; ``reset`` always returns
to ``untouched``.
"""

from typing import Dict, Tuple

from ..models.form import FieldEvent, FieldState


_TOUCHED = (FieldState.TOUCHED_VALID, FieldState.TOUCHED_INVALID)

# (state, event, value_is_valid) -> next state
TRANSITIONS: Dict[Tuple[FieldState, FieldEvent, bool], FieldState] = {}

for _state in FieldState:
    for _event in (FieldEvent.EDIT, FieldEvent.BLUR, FieldEvent.VALIDATE):
        TRANSITIONS[(_state, _event, True)] = FieldState.TOUCHED_VALID
        TRANSITIONS[(_state, _event, False)] = FieldState.TOUCHED_INVALID
    TRANSITIONS[(_state, FieldEvent.RESET, True)] = FieldState.UNTOUCHED
    TRANSITIONS[(_state, FieldEvent.RESET, False)] = FieldState.UNTOUCHED


def transition(state: FieldState, event: FieldEvent, valid: bool) -> FieldState:
    """Return the state a field moves to after ``event``."""
    return TRANSITIONS[(state, event, valid)]


def is_touched(state: FieldState) -> bool:
    return state in _TOUCHED
