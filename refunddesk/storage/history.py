"""Local submission history kept in a key-value sink."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from ..models.form import SubmissionRecord
from ..utils.errors import SideEffectError

logger = logging.getLogger(__name__)

HISTORY_KEY = "refund-history"
HISTORY_LIMIT = 20


class KeyValueSink(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemorySink:
    """In-process key-value sink."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileSink:
    """
    Key-value sink backed by a single JSON file.

    The file holds one JSON object mapping keys to string values and is
    rewritten on every set.
    """

    def __init__(self, path: str = "data/history.json"):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        return data

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        logger.debug(f"Wrote {key} to {self.path}")


class SubmissionHistory:
    """
    Most-recent-first list of submissions stored under a fixed key.

    Args:
        sink: Key-value sink to persist into
        key: Key the history is stored under
        limit: Number of entries kept
    """

    def __init__(self, sink: KeyValueSink, key: str = HISTORY_KEY, limit: int = HISTORY_LIMIT):
        self.sink = sink
        self.key = key
        self.limit = limit

    def entries(self) -> List[Dict[str, Any]]:
        """
        Read the stored entries.

        Raises:
            SideEffectError: If the sink cannot be read or holds garbage
        """
        try:
            raw = self.sink.get(self.key)
            if not raw:
                return []
            entries = json.loads(raw)
        except Exception as e:  # pylint: disable=broad-except
            raise SideEffectError.history_unavailable(self.key, e) from e
        if not isinstance(entries, list):
            return []
        return entries

    def record(self, submission: SubmissionRecord) -> List[Dict[str, Any]]:
        """
        Prepend a submission and trim to the newest ``limit`` entries.

        Returns:
            The stored entries after the write

        Raises:
            SideEffectError: If the sink cannot be read or written
        """
        entries = [submission.to_dict()] + self.entries()
        entries = entries[:self.limit]
        try:
            self.sink.set(self.key, json.dumps(entries))
        except Exception as e:  # pylint: disable=broad-except
            raise SideEffectError.history_unavailable(self.key, e) from e
        logger.info(f"Recorded submission {submission.case_id} ({len(entries)} in history)")
        return entries
