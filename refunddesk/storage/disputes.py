"""Read-only dispute list provider for the operator view."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import yaml

from ..models.dispute import DisputeRecord, DisputeStatus
from ..utils.errors import DisputeDataError

logger = logging.getLogger(__name__)


def _parse_timestamp(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def parse_dispute(raw: Dict[str, Any]) -> DisputeRecord:
    """
    Build a DisputeRecord from a mapping using the provider's field names.

    Args:
        raw: Mapping with id, customerName, issue, status, createdAt, updatedAt

    Returns:
        DisputeRecord

    Raises:
        KeyError: If a field is missing
        ValueError: If the status or a timestamp cannot be parsed
    """
    return DisputeRecord(
        id=int(raw["id"]),
        customer_name=str(raw["customerName"]),
        issue=str(raw["issue"]),
        status=DisputeStatus(str(raw["status"]).upper()),
        created_at=_parse_timestamp(raw["createdAt"]),
        updated_at=_parse_timestamp(raw["updatedAt"]),
    )


def filter_disputes(
    records: Iterable[DisputeRecord],
    status: Optional[DisputeStatus] = None,
) -> List[DisputeRecord]:
    """Keep records with ``status`` (all when None), oldest first."""
    selected = [r for r in records if status is None or r.status is status]
    return sorted(selected, key=lambda r: r.created_at)


class DisputeListProvider:
    """
    Supplies dispute records loaded from a YAML file.

    The file holds a top-level ``disputes`` list. Records are loaded once
    and served from memory.
    """

    def __init__(self, path: str = "data/disputes.yaml"):
        self.path = Path(path)
        self._records: Optional[List[DisputeRecord]] = None

    @classmethod
    def from_records(cls, records: Sequence[DisputeRecord]) -> "DisputeListProvider":
        provider = cls(path="<memory>")
        provider._records = list(records)
        return provider

    def load(self) -> List[DisputeRecord]:
        if not self.path.exists():
            logger.warning(f"Dispute data not found at {self.path}; list is empty")
            return []

        with open(self.path, 'r', encoding='utf-8') as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise DisputeDataError.invalid_file(str(self.path), e) from e

        if not isinstance(data, dict):
            raise DisputeDataError.invalid_file(
                str(self.path), TypeError("top-level YAML value must be a mapping")
            )
        raw_records = data.get("disputes") or []
        if not isinstance(raw_records, list):
            raise DisputeDataError.invalid_file(
                str(self.path), TypeError("'disputes' must be a list")
            )

        records = []
        for index, raw in enumerate(raw_records):
            try:
                records.append(parse_dispute(raw))
            except (KeyError, TypeError, ValueError) as e:
                raise DisputeDataError.invalid_record(str(self.path), index, e) from e

        logger.info(f"Loaded {len(records)} disputes from {self.path}")
        return records

    def list_disputes(self, status: Optional[DisputeStatus] = None) -> List[DisputeRecord]:
        if self._records is None:
            self._records = self.load()
        return filter_disputes(self._records, status)
