"""Unit tests for fetch observability."""

from __future__ import annotations

import datetime as dt
import logging

import pytest

from gitscout.fetch import (
    ErrorCategory,
    FetchCancelledError,
    FetchEventLogger,
    FetchEventType,
    FetchRunContext,
    categorize_error,
)
from gitscout.github.errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
    GitHubTransportError,
)
from gitscout.validation import RequestValidationError

_LOGGER_NAME = "gitscout.fetch.observability"


class TestCategorizeError:
    """Tests for error categorization."""

    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            pytest.param(
                GitHubAPIError.http_error(502), ErrorCategory.TRANSIENT, id="5xx"
            ),
            pytest.param(
                GitHubAPIError.http_error(403), ErrorCategory.RATE_LIMITED, id="403"
            ),
            pytest.param(
                GitHubAPIError.http_error(429), ErrorCategory.RATE_LIMITED, id="429"
            ),
            pytest.param(
                GitHubAPIError.http_error(404), ErrorCategory.CLIENT_ERROR, id="404"
            ),
            pytest.param(
                GitHubTransportError("GitHub request failed: ConnectError"),
                ErrorCategory.TRANSIENT,
                id="transport",
            ),
            pytest.param(
                GitHubResponseShapeError.missing("items"),
                ErrorCategory.SCHEMA_DRIFT,
                id="shape",
            ),
            pytest.param(
                GitHubConfigError.empty_base_url(),
                ErrorCategory.CONFIGURATION,
                id="config",
            ),
            pytest.param(
                RequestValidationError(["Please enter at least one username"]),
                ErrorCategory.VALIDATION,
                id="validation",
            ),
            pytest.param(
                FetchCancelledError.during("search"),
                ErrorCategory.CANCELLED,
                id="cancelled",
            ),
            pytest.param(ValueError("boom"), ErrorCategory.UNKNOWN, id="unknown"),
        ],
    )
    def test_categories(self, exc: BaseException, expected: ErrorCategory) -> None:
        """Each error type maps to its alert category."""
        assert categorize_error(exc) == expected


class TestFetchEventLogger:
    """Tests for structured fetch log lines."""

    @pytest.fixture
    def run_context(self) -> FetchRunContext:
        """Return a context for a two-identity request."""
        return FetchRunContext(
            identities=("octo", "hubot"),
            start_date="2024-01-01",
            end_date="2024-01-31",
            started_at=dt.datetime(2024, 2, 1, tzinfo=dt.UTC),
        )

    def test_run_started_lists_identities(
        self, run_context: FetchRunContext, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Run start is logged at INFO with the request parameters."""
        with caplog.at_level(logging.INFO, logger=_LOGGER_NAME):
            FetchEventLogger().log_run_started(run_context)

        (record,) = caplog.records
        assert record.levelno == logging.INFO
        assert FetchEventType.RUN_STARTED in record.getMessage()
        assert "identities=octo,hubot" in record.getMessage()
        assert "start_date=2024-01-01" in record.getMessage()

    def test_run_completed_includes_counts(
        self, run_context: FetchRunContext, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Completion carries result counts and duration."""
        with caplog.at_level(logging.INFO, logger=_LOGGER_NAME):
            FetchEventLogger().log_run_completed(
                run_context,
                events=12,
                work_items=5,
                failed_identities=1,
                requests=7,
                duration=dt.timedelta(seconds=1.5),
            )

        message = caplog.records[0].getMessage()
        assert "events=12" in message
        assert "work_items=5" in message
        assert "failed_identities=1" in message
        assert "requests=7" in message
        assert "duration_seconds=1.500" in message

    def test_run_failed_is_error_with_category(
        self, run_context: FetchRunContext, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Failures are logged at ERROR with their category and traceback."""
        error = GitHubAPIError.http_error(503)

        with caplog.at_level(logging.INFO, logger=_LOGGER_NAME):
            FetchEventLogger().log_run_failed(
                run_context, error, dt.timedelta(seconds=2)
            )

        (record,) = caplog.records
        assert record.levelno == logging.ERROR
        assert "error_category=transient" in record.getMessage()
        assert record.exc_info is not None

    def test_validation_failure_joins_issues(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Validation failures are warnings listing every issue."""
        with caplog.at_level(logging.INFO, logger=_LOGGER_NAME):
            FetchEventLogger().log_validation_failed(["first", "second"])

        (record,) = caplog.records
        assert record.levelno == logging.WARNING
        assert "issue_count=2 issues=first; second" in record.getMessage()

    def test_pagination_events_name_the_unit(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Pagination cut-offs identify the unit of work they ended."""
        event_logger = FetchEventLogger()

        with caplog.at_level(logging.INFO, logger=_LOGGER_NAME):
            event_logger.log_pagination_limited("events:octo", 4, 300)
            event_logger.log_pagination_ceiling("search:issue", 10, 1000)

        limited, ceiling = (record.getMessage() for record in caplog.records)
        assert limited.startswith(f"[{FetchEventType.PAGINATION_LIMITED}]")
        assert "unit=events:octo page=4 collected=300" in limited
        assert ceiling.startswith(f"[{FetchEventType.PAGINATION_CEILING}]")
        assert "max_pages=10 collected=1000" in ceiling
