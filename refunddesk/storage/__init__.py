"""Storage layer for submission history and the dispute list."""

from .history import JsonFileSink, MemorySink, SubmissionHistory
from .disputes import DisputeListProvider

__all__ = ['JsonFileSink', 'MemorySink', 'SubmissionHistory', 'DisputeListProvider']
