"""Form data models: field names, variants and submission records."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Tuple


TRANSACTION_ID = "transactionId"
CUSTOMER_EMAIL = "customerEmail"
REASON = "reason"
DESCRIPTION = "description"
PROOF_FILE_NAME = "proofFileName"
CUSTOMER_NAME = "customerName"
ORDER_ID = "orderId"

REASON_OPTIONS: Tuple[str, ...] = (
    "Product not received",
    "Service issue",
    "Duplicate charge",
    "Unauthorized charge",
    "Fraud",
    "Other",
)

FIELD_HINTS: Dict[str, str] = {
    TRANSACTION_ID: "Enter the transaction number from your statement so we can fast-track the lookup.",
    CUSTOMER_EMAIL: "Provide the email tied to the purchase. We use it to send updates and confirm ownership.",
    REASON: "Choose the best fitting dispute type. This routes the request to the correct specialist.",
    DESCRIPTION: "Share helpful context (dates, conversations, or product details) to strengthen your case.",
    PROOF_FILE_NAME: "Upload receipts, chat transcripts, or screenshots that support your claim (max 5MB).",
    CUSTOMER_NAME: "The name on the account or card used for the purchase.",
    ORDER_ID: "Order number from the merchant's confirmation email, if you have one.",
}


class FieldState(Enum):
    """Per-field validation state."""
    UNTOUCHED = "untouched"
    TOUCHED_VALID = "touched-valid"
    TOUCHED_INVALID = "touched-invalid"


class FieldEvent(Enum):
    """Events that drive the per-field state table."""
    EDIT = "edit"
    BLUR = "blur"
    VALIDATE = "validate"
    RESET = "reset"


@dataclass(frozen=True)
class FormSchema:
    """
    Shape of one form variant.

    Attributes:
        name: Variant name
        fields: Field names in display order
        required_fields: Fields that must validate clean before submission
        attachment_field: Field holding the attached file's name
    """
    name: str
    fields: Tuple[str, ...]
    required_fields: Tuple[str, ...]
    attachment_field: str = PROOF_FILE_NAME

    def empty_values(self) -> Dict[str, str]:
        return {name: "" for name in self.fields}

    def hint(self, name: str) -> str:
        return FIELD_HINTS.get(name, "")


REFUND_FORM = FormSchema(
    name="refund",
    fields=(TRANSACTION_ID, CUSTOMER_EMAIL, REASON, DESCRIPTION, PROOF_FILE_NAME),
    required_fields=(TRANSACTION_ID, CUSTOMER_EMAIL, REASON),
)

EXTENDED_FORM = FormSchema(
    name="extended",
    fields=(
        CUSTOMER_NAME,
        TRANSACTION_ID,
        ORDER_ID,
        CUSTOMER_EMAIL,
        REASON,
        DESCRIPTION,
        PROOF_FILE_NAME,
    ),
    required_fields=(TRANSACTION_ID, CUSTOMER_EMAIL, REASON),
)

FORM_VARIANTS: Dict[str, FormSchema] = {
    REFUND_FORM.name: REFUND_FORM,
    EXTENDED_FORM.name: EXTENDED_FORM,
}


def get_schema(variant: str) -> FormSchema:
    """
    Look up a form variant by name.

    Args:
        variant: Variant name ("refund" or "extended")

    Returns:
        FormSchema for the variant

    Raises:
        ValueError: If the variant is not known
    """
    try:
        return FORM_VARIANTS[variant]
    except KeyError:
        raise ValueError(
            f"Unknown form variant '{variant}'. Expected one of {sorted(FORM_VARIANTS)}"
        ) from None


@dataclass(frozen=True)
class SubmissionRecord:
    """
    Snapshot produced by a successful submission.

    Attributes:
        case_id: Generated case identifier (RFD-XXXXX)
        submitted_at: UTC timestamp of the submission
        values: Read-only copy of the form values at submit time
        message: Success notification shown to the customer
    """
    case_id: str
    submitted_at: datetime
    values: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    message: str = ""

    def to_dict(self) -> Dict[str, str]:
        payload = {
            "caseId": self.case_id,
            "submittedAt": self.submitted_at.isoformat().replace("+00:00", "Z"),
        }
        payload.update(self.values)
        return payload
