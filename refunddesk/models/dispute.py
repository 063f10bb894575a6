"""Dispute list data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class DisputeStatus(Enum):
    """Lifecycle status of a dispute shown in the operator list."""
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


@dataclass(frozen=True)
class DisputeRecord:
    """
    A dispute as supplied by the dispute list provider.

    Attributes:
        id: Dispute identifier
        customer_name: Customer who raised the dispute
        issue: Free-text summary of the problem
        status: Current status
        created_at: When the dispute was filed
        updated_at: When the dispute last changed
    """
    id: int
    customer_name: str
    issue: str
    status: DisputeStatus
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customerName": self.customer_name,
            "issue": self.issue,
            "status": self.status.value,
            "statusLabel": self.status.label,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "filedDisplay": format_display_date(self.created_at),
            "updatedDisplay": format_display_date(self.updated_at),
        }


def format_display_date(value: datetime) -> str:
    """Format a timestamp as e.g. ``Sep 5, 2023``."""
    return f"{value.strftime('%b')} {value.day}, {value.year}"
