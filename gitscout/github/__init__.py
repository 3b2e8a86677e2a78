"""GitHub REST client primitives and domain models."""

from __future__ import annotations

from .client import GitHubActivityAPI, GitHubRestClient, SearchPage
from .errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
    GitHubTransportError,
    PaginationLimitReachedError,
)
from .models import ActivityEvent, WorkItem, event_from_record, work_item_from_record

__all__ = [
    "ActivityEvent",
    "GitHubAPIError",
    "GitHubActivityAPI",
    "GitHubConfigError",
    "GitHubResponseShapeError",
    "GitHubRestClient",
    "GitHubTransportError",
    "PaginationLimitReachedError",
    "SearchPage",
    "WorkItem",
    "event_from_record",
    "work_item_from_record",
]
