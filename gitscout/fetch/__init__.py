"""Fetch orchestration, paged fetchers and result sinks."""

from __future__ import annotations

from .cancellation import CancellationToken
from .context import FetchContext, IdentityResult
from .errors import FetchCancelledError, FetchError
from .events import EventsFetcher
from .filesystem_sink import FilesystemOutcomeSink
from .freshness import is_cache_valid, is_store_fresh
from .observability import (
    ErrorCategory,
    FetchEventLogger,
    FetchEventType,
    FetchRunContext,
    categorize_error,
)
from .orchestrator import (
    FetchMetadata,
    FetchOrchestrator,
    FetchOutcome,
    FetchState,
    sort_events,
    sort_work_items,
)
from .progress import ProgressTracker, ProgressUpdate
from .search import SEARCH_KINDS, SearchFetcher, build_combined_query
from .sink import EVENTS_KEY, WORK_ITEMS_KEY, OutcomeSink, SinkMetadata

__all__ = [
    "EVENTS_KEY",
    "SEARCH_KINDS",
    "WORK_ITEMS_KEY",
    "CancellationToken",
    "ErrorCategory",
    "EventsFetcher",
    "FetchCancelledError",
    "FetchContext",
    "FetchError",
    "FetchEventLogger",
    "FetchEventType",
    "FetchMetadata",
    "FetchOrchestrator",
    "FetchOutcome",
    "FetchRunContext",
    "FetchState",
    "FilesystemOutcomeSink",
    "IdentityResult",
    "OutcomeSink",
    "ProgressTracker",
    "ProgressUpdate",
    "SearchFetcher",
    "SinkMetadata",
    "build_combined_query",
    "categorize_error",
    "is_cache_valid",
    "is_store_fresh",
    "sort_events",
    "sort_work_items",
]
