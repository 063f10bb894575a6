"""Tests for the form state store and the per-field state table."""

import pytest

from refunddesk.engine.field_machine import TRANSITIONS, is_touched, transition
from refunddesk.engine.form_store import FormStateStore
from refunddesk.engine.validation import (
    EMAIL_INVALID,
    REASON_REQUIRED,
    TRANSACTION_ID_REQUIRED,
)
from refunddesk.models.form import EXTENDED_FORM, FieldEvent, FieldState
from refunddesk.utils.errors import EngineUsageError


def fill_valid(store: FormStateStore) -> None:
    store.set_field("transactionId", "TXN-1001")
    store.set_field("customerEmail", "jordan@example.com")
    store.set_field("reason", "Duplicate charge")


def test_state_table_is_complete():
    for state in FieldState:
        for event in FieldEvent:
            for valid in (True, False):
                assert (state, event, valid) in TRANSITIONS


def test_state_table_transitions():
    assert transition(FieldState.UNTOUCHED, FieldEvent.EDIT, True) is FieldState.TOUCHED_VALID
    assert transition(FieldState.UNTOUCHED, FieldEvent.BLUR, False) is FieldState.TOUCHED_INVALID
    assert transition(FieldState.TOUCHED_VALID, FieldEvent.VALIDATE, False) is FieldState.TOUCHED_INVALID
    assert transition(FieldState.TOUCHED_INVALID, FieldEvent.EDIT, True) is FieldState.TOUCHED_VALID
    assert transition(FieldState.TOUCHED_INVALID, FieldEvent.RESET, False) is FieldState.UNTOUCHED
    assert not is_touched(FieldState.UNTOUCHED)
    assert is_touched(FieldState.TOUCHED_VALID)


def test_initial_state():
    store = FormStateStore()
    assert set(store.values) == {
        "transactionId", "customerEmail", "reason", "description", "proofFileName"
    }
    assert all(value == "" for value in store.values.values())
    assert store.errors == {}
    assert not any(store.touched.values())
    assert store.is_form_valid is False
    assert store.visible_error("transactionId") is None


def test_edit_marks_touched_and_records_error():
    store = FormStateStore()
    error = store.set_field("customerEmail", "not-an-email")

    assert error == EMAIL_INVALID
    assert store.errors["customerEmail"] == EMAIL_INVALID
    assert store.field_state("customerEmail") is FieldState.TOUCHED_INVALID
    assert store.visible_error("customerEmail") == EMAIL_INVALID


def test_edit_then_clear_reinstates_required_error():
    store = FormStateStore()
    store.set_field("transactionId", "TXN-1")
    assert "transactionId" not in store.errors

    store.set_field("transactionId", "")
    assert store.errors["transactionId"] == TRANSACTION_ID_REQUIRED

    store.set_field("transactionId", "TXN-1")
    assert "transactionId" not in store.errors
    assert store.field_state("transactionId") is FieldState.TOUCHED_VALID


def test_blur_on_untouched_field_shows_error():
    store = FormStateStore()
    store.focus_field("reason")
    assert store.focused_field == "reason"

    assert store.blur_field("reason") == REASON_REQUIRED
    assert store.focused_field is None
    assert store.visible_error("reason") == REASON_REQUIRED


def test_blur_keeps_other_focus():
    store = FormStateStore()
    store.focus_field("customerEmail")
    store.blur_field("reason")
    assert store.focused_field == "customerEmail"


def test_validity_is_derived_without_touching():
    store = FormStateStore()
    fill_valid(store)
    assert store.is_form_valid is True

    store.set_field("customerEmail", "broken@")
    assert store.is_form_valid is False


def test_optional_fields_do_not_affect_validity():
    store = FormStateStore()
    fill_valid(store)
    store.set_field("description", "")
    assert store.is_form_valid is True


def test_attachment_error_blocks_validity():
    store = FormStateStore()
    fill_valid(store)
    store.set_attachment("", "File must be 5MB or smaller.")
    assert store.is_form_valid is False
    assert store.attachment_error == "File must be 5MB or smaller."

    store.clear_attachment()
    assert store.is_form_valid is True


def test_validate_all_marks_required_fields_touched():
    store = FormStateStore()
    store.set_field("customerEmail", "jordan@example.com")

    assert store.validate_all() is False
    assert store.errors == {
        "transactionId": TRANSACTION_ID_REQUIRED,
        "reason": REASON_REQUIRED,
    }
    assert store.touched["transactionId"]
    assert store.touched["reason"]
    assert not store.touched["description"]


def test_validate_all_on_clean_form():
    store = FormStateStore()
    fill_valid(store)
    assert store.validate_all() is True
    assert store.errors == {}


def test_reset_returns_to_pristine():
    store = FormStateStore()
    fill_valid(store)
    store.set_field("description", "Charged twice")
    store.set_attachment("", "File must be 5MB or smaller.")
    store.announce("done")
    key_before = store.file_input_key

    store.reset()

    assert all(value == "" for value in store.values.values())
    assert store.errors == {}
    assert not any(store.touched.values())
    assert store.success_message is None
    assert store.focused_field is None
    assert store.file_input_key == key_before + 1


def test_edit_clears_success_message():
    store = FormStateStore()
    store.announce("Refund request submitted.")
    store.set_field("description", "More detail")
    assert store.success_message is None


def test_described_by_follows_visible_error():
    store = FormStateStore()
    assert store.described_by("transactionId") == "transactionId-hint"

    store.blur_field("transactionId")
    assert store.described_by("transactionId") == "transactionId-hint transactionId-error"

    store.set_field("transactionId", "TXN-9")
    assert store.described_by("transactionId") == "transactionId-hint"


def test_unknown_field_is_rejected():
    store = FormStateStore()
    with pytest.raises(EngineUsageError):
        store.set_field("favouriteColour", "blue")
    with pytest.raises(ValueError):
        store.blur_field("favouriteColour")


def test_attachment_field_is_not_directly_editable():
    store = FormStateStore()
    with pytest.raises(EngineUsageError):
        store.set_field("proofFileName", "receipt.pdf")


def test_reads_return_copies():
    store = FormStateStore()
    values = store.values
    values["transactionId"] = "tampered"
    assert store.get("transactionId") == ""


def test_extended_variant_keeps_same_required_set():
    store = FormStateStore(EXTENDED_FORM)
    assert "customerName" in store.values
    assert "orderId" in store.values
    fill_valid(store)
    assert store.is_form_valid is True
    store.blur_field("customerName")
    assert store.visible_error("customerName") is None
