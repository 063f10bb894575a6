"""Form field values, touch state and the error map."""

import logging
from typing import Dict, Iterable, List, Optional

from ..models.form import REFUND_FORM, FieldEvent, FieldState, FormSchema
from ..utils.errors import EngineUsageError
from .field_machine import is_touched, transition
from .validation import validate_field

logger = logging.getLogger(__name__)


class FormStateStore:
    """
    Owns the values, per-field states and errors of one form.

    Mutation goes through the methods below only. ``errors`` carries a key
    for a field exactly while that field has a known error; a missing key
    means no error is known, not that the field was checked. Validity is
    derived from the current values on every read and never cached.
    """

    def __init__(self, schema: FormSchema = REFUND_FORM):
        self.schema = schema
        self._values: Dict[str, str] = schema.empty_values()
        self._states: Dict[str, FieldState] = {
            name: FieldState.UNTOUCHED for name in schema.fields
        }
        self._errors: Dict[str, str] = {}
        self.success_message: Optional[str] = None
        self.focused_field: Optional[str] = None
        self.file_input_key = 0

    # Reads

    @property
    def values(self) -> Dict[str, str]:
        return dict(self._values)

    @property
    def errors(self) -> Dict[str, str]:
        return dict(self._errors)

    @property
    def touched(self) -> Dict[str, bool]:
        return {name: is_touched(state) for name, state in self._states.items()}

    def get(self, field: str) -> str:
        self._check_field(field)
        return self._values[field]

    def field_state(self, field: str) -> FieldState:
        self._check_field(field)
        return self._states[field]

    def visible_error(self, field: str) -> Optional[str]:
        """Return the field's error once the field has been touched."""
        self._check_field(field)
        if not is_touched(self._states[field]):
            return None
        return self._errors.get(field)

    def described_by(self, field: str) -> str:
        """Return the ids of the hint (and visible error) describing a field."""
        ids = [f"{field}-hint"]
        if self.visible_error(field):
            ids.append(f"{field}-error")
        return " ".join(ids)

    @property
    def attachment_error(self) -> Optional[str]:
        return self._errors.get(self.schema.attachment_field)

    @property
    def is_form_valid(self) -> bool:
        """True when every required field validates clean and no attachment error is set."""
        for name in self.schema.required_fields:
            if validate_field(name, self._values[name]) is not None:
                return False
        return self.attachment_error is None

    # Field events

    def set_field(self, field: str, value: str) -> Optional[str]:
        """
        Commit a new value for a field and re-validate it.

        Args:
            field: Field name
            value: New raw value

        Returns:
            The field's error after the edit, or None
        """
        self._check_field(field)
        if field == self.schema.attachment_field:
            raise EngineUsageError.managed_field(field)

        self.success_message = None
        self._values[field] = value
        return self._revalidate(field, FieldEvent.EDIT)

    def blur_field(self, field: str) -> Optional[str]:
        """Mark a field touched and re-validate its current value."""
        self._check_field(field)
        if self.focused_field == field:
            self.focused_field = None

        if field == self.schema.attachment_field:
            self._states[field] = transition(
                self._states[field], FieldEvent.BLUR, self.attachment_error is None
            )
            return self.attachment_error

        return self._revalidate(field, FieldEvent.BLUR)

    def focus_field(self, field: str) -> None:
        self._check_field(field)
        self.focused_field = field

    def validate_all(self, required_fields: Optional[Iterable[str]] = None) -> bool:
        """
        Validate the required fields in one pass and mark them touched.

        Args:
            required_fields: Fields to check; defaults to the schema's required set

        Returns:
            True when the required fields are error-free and the attachment
            field carries no error
        """
        fields: List[str] = list(
            required_fields if required_fields is not None else self.schema.required_fields
        )
        clean = True
        for name in fields:
            self._check_field(name)
            if self._revalidate(name, FieldEvent.VALIDATE) is not None:
                clean = False
        return clean and self.attachment_error is None

    def reset(self) -> None:
        """Return every field to empty and untouched and clear all messages."""
        self._values = self.schema.empty_values()
        for name in self._states:
            self._states[name] = transition(self._states[name], FieldEvent.RESET, True)
        self._errors.clear()
        self.success_message = None
        self.focused_field = None
        self.bump_file_input()

    def announce(self, message: str) -> None:
        self.success_message = message

    # Attachment slot, driven by FileAttachmentController

    def set_attachment(self, file_name: str, error: Optional[str] = None) -> None:
        """Record the attachment projection and mark the attachment field touched."""
        name = self.schema.attachment_field
        self.success_message = None
        self._values[name] = file_name
        if error:
            self._errors[name] = error
        else:
            self._errors.pop(name, None)
        self._states[name] = transition(self._states[name], FieldEvent.EDIT, error is None)

    def clear_attachment(self) -> None:
        """Drop the attachment projection, its error and its touched flag."""
        name = self.schema.attachment_field
        self._values[name] = ""
        self._errors.pop(name, None)
        self._states[name] = transition(self._states[name], FieldEvent.RESET, True)

    def bump_file_input(self) -> int:
        self.file_input_key += 1
        return self.file_input_key

    # Internals

    def _revalidate(self, field: str, event: FieldEvent) -> Optional[str]:
        error = validate_field(field, self._values[field])
        if error:
            self._errors[field] = error
        else:
            self._errors.pop(field, None)
        self._states[field] = transition(self._states[field], event, error is None)
        return error

    def _check_field(self, field: str) -> None:
        if field not in self._values:
            raise EngineUsageError.unknown_field(field, self._values.keys())
