"""Observability primitives for GitHub activity fetches.

Provides structured logging and error categorization for fetch runs,
pagination cut-offs and partial failures. All events are emitted as
bracket-tagged log lines suitable for parsing by log aggregators.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import typing as typ

from gitscout.github.errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
    GitHubTransportError,
)
from gitscout.validation import RequestValidationError

from .errors import FetchCancelledError

if typ.TYPE_CHECKING:
    import datetime as dt

logger = logging.getLogger(__name__)

# HTTP status code threshold for server errors (5xx)
_HTTP_SERVER_ERROR_THRESHOLD = 500
_RATE_LIMIT_STATUSES = frozenset({403, 429})


class FetchEventType(enum.StrEnum):
    """Structured log event types for fetch observability."""

    RUN_STARTED = "fetch.run.started"
    RUN_COMPLETED = "fetch.run.completed"
    RUN_FAILED = "fetch.run.failed"
    VALIDATION_FAILED = "fetch.validation.failed"
    IDENTITY_FAILED = "fetch.identity.failed"
    PAGINATION_LIMITED = "fetch.pagination.limited"
    PAGINATION_CEILING = "fetch.pagination.ceiling"
    SEARCH_PARTIAL = "fetch.search.partial"


class ErrorCategory(enum.StrEnum):
    """Categories for error classification in alerts."""

    TRANSIENT = "transient"
    RATE_LIMITED = "rate_limited"
    CLIENT_ERROR = "client_error"
    SCHEMA_DRIFT = "schema_drift"
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


@dataclasses.dataclass(frozen=True, slots=True)
class FetchRunContext:
    """Shared context for a single fetch request."""

    identities: tuple[str, ...]
    start_date: str
    end_date: str
    started_at: dt.datetime


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (GitHubTransportError, ErrorCategory.TRANSIENT),
    (GitHubResponseShapeError, ErrorCategory.SCHEMA_DRIFT),
    (GitHubConfigError, ErrorCategory.CONFIGURATION),
    (RequestValidationError, ErrorCategory.VALIDATION),
    (FetchCancelledError, ErrorCategory.CANCELLED),
)


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize an exception for alerting purposes.

    Returns:
        ErrorCategory indicating the type of failure for alert routing.

    """
    # GitHubAPIError requires special handling for status code distinction
    if isinstance(exc, GitHubAPIError) and exc.status_code is not None:
        if exc.status_code >= _HTTP_SERVER_ERROR_THRESHOLD:
            return ErrorCategory.TRANSIENT
        if exc.status_code in _RATE_LIMIT_STATUSES:
            return ErrorCategory.RATE_LIMITED
        return ErrorCategory.CLIENT_ERROR

    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category

    if isinstance(exc, GitHubAPIError):
        return ErrorCategory.CLIENT_ERROR
    return ErrorCategory.UNKNOWN


class FetchEventLogger:
    """Emit structured fetch events via Python logging.

    Events are emitted at INFO level for success, WARNING for truncation and
    partial results, and ERROR for failures.
    """

    def log_run_started(self, context: FetchRunContext) -> None:
        """Log fetch run start."""
        logger.info(
            "[%s] identities=%s start_date=%s end_date=%s started_at=%s",
            FetchEventType.RUN_STARTED,
            ",".join(context.identities),
            context.start_date,
            context.end_date,
            context.started_at.isoformat(),
        )

    def log_run_completed(  # noqa: PLR0913
        self,
        context: FetchRunContext,
        *,
        events: int,
        work_items: int,
        failed_identities: int,
        requests: int,
        duration: dt.timedelta,
    ) -> None:
        """Log successful fetch run completion with counts."""
        logger.info(
            "[%s] identities=%s duration_seconds=%.3f events=%d work_items=%d "
            "failed_identities=%d requests=%d",
            FetchEventType.RUN_COMPLETED,
            ",".join(context.identities),
            duration.total_seconds(),
            events,
            work_items,
            failed_identities,
            requests,
        )

    def log_run_failed(
        self,
        context: FetchRunContext,
        error: BaseException,
        duration: dt.timedelta,
    ) -> None:
        """Log failed fetch run with error categorization."""
        category = categorize_error(error)
        logger.error(
            "[%s] identities=%s duration_seconds=%.3f "
            "error_type=%s error_category=%s error_message=%s",
            FetchEventType.RUN_FAILED,
            ",".join(context.identities),
            duration.total_seconds(),
            type(error).__name__,
            category,
            str(error),
            exc_info=error,
        )

    def log_validation_failed(self, issues: typ.Sequence[str]) -> None:
        """Log rejected input without a traceback."""
        logger.warning(
            "[%s] issue_count=%d issues=%s",
            FetchEventType.VALIDATION_FAILED,
            len(issues),
            "; ".join(issues),
        )

    def log_identity_failed(self, identity: str, error: BaseException) -> None:
        """Log an identity whose events fetch failed."""
        logger.warning(
            "[%s] identity=%s error_type=%s error_category=%s error_message=%s",
            FetchEventType.IDENTITY_FAILED,
            identity,
            type(error).__name__,
            categorize_error(error),
            str(error),
        )

    def log_pagination_limited(self, unit: str, page: int, collected: int) -> None:
        """Log GitHub refusing to serve further pages."""
        logger.warning(
            "[%s] unit=%s page=%d collected=%d",
            FetchEventType.PAGINATION_LIMITED,
            unit,
            page,
            collected,
        )

    def log_pagination_ceiling(self, unit: str, max_pages: int, collected: int) -> None:
        """Log a unit of work stopped by the local page ceiling."""
        logger.warning(
            "[%s] unit=%s max_pages=%d collected=%d",
            FetchEventType.PAGINATION_CEILING,
            unit,
            max_pages,
            collected,
        )

    def log_search_partial(
        self, unit: str, page: int, kept: int, error: BaseException
    ) -> None:
        """Log a search failure that still returned previously fetched items."""
        logger.warning(
            "[%s] unit=%s page=%d kept=%d error_type=%s error_category=%s "
            "error_message=%s",
            FetchEventType.SEARCH_PARTIAL,
            unit,
            page,
            kept,
            type(error).__name__,
            categorize_error(error),
            str(error),
        )
