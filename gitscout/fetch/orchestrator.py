"""Fetch orchestration for GitHub activity requests.

A request moves through ``VALIDATING → FETCHING → AGGREGATING → COMMITTING``
and back to ``IDLE``. Validation failures end in ``FAILED`` before any network
call. Within ``FETCHING`` the combined search runs once for all identities,
then each identity's events are fetched in order; the two are never run
concurrently because they share one rate-limited credential.

An identity whose events fetch fails is reported and skipped. Collections
that end up empty are not committed, so a failed refresh never overwrites
previously stored data with nothing.
"""

from __future__ import annotations

import asyncio
import dataclasses
import enum
import typing as typ

from gitscout.common.time import utcnow
from gitscout.config import FetchConfig
from gitscout.github.client import GitHubRestClient
from gitscout.github.errors import GitHubAPIError, GitHubResponseShapeError
from gitscout.validation import RequestValidationError, validate_search_input

from .cancellation import CancellationToken
from .context import FetchContext, IdentityResult
from .events import EventsFetcher
from .observability import FetchEventLogger, FetchRunContext
from .progress import ProgressTracker
from .search import SearchFetcher
from .sink import EVENTS_KEY, WORK_ITEMS_KEY, SinkMetadata

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from gitscout.github.client import GitHubActivityAPI
    from gitscout.github.models import ActivityEvent, WorkItem
    from gitscout.validation import SearchRequest

    from .progress import ProgressCallback
    from .sink import OutcomeSink

    type ClientFactory = cabc.Callable[[str | None], GitHubActivityAPI]
    type ErrorCallback = cabc.Callable[[str], None]
    type Sleep = cabc.Callable[[float], cabc.Awaitable[None]]

SUCCESS_MESSAGE = "Data fetch completed successfully!"
_UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class FetchState(enum.StrEnum):
    """Lifecycle states of a fetch request."""

    IDLE = "idle"
    VALIDATING = "validating"
    FETCHING = "fetching"
    AGGREGATING = "aggregating"
    COMMITTING = "committing"
    FAILED = "failed"


@dataclasses.dataclass(frozen=True, slots=True)
class FetchMetadata:
    """Identifying metadata for a completed request."""

    fetched_at: dt.datetime
    identities: tuple[str, ...]
    start_date: str
    end_date: str


@dataclasses.dataclass(frozen=True, slots=True)
class FetchOutcome:
    """Merged result of a request.

    ``events`` are newest first by ``created_at`` and ``work_items`` most
    recently updated first. ``errors`` holds one message per identity whose
    events could not be fetched.
    """

    events: tuple[ActivityEvent, ...]
    work_items: tuple[WorkItem, ...]
    metadata: FetchMetadata
    errors: tuple[str, ...] = ()


def sort_events(events: cabc.Iterable[ActivityEvent]) -> list[ActivityEvent]:
    """Return events newest first, keeping arrival order for equal timestamps."""
    return sorted(events, key=lambda event: event.created_at, reverse=True)


def sort_work_items(items: cabc.Iterable[WorkItem]) -> list[WorkItem]:
    """Return items most recently updated first, keeping arrival order on ties."""
    return sorted(items, key=lambda item: item.updated_at, reverse=True)


def identity_error_message(result: IdentityResult) -> str:
    """Return the user-facing message for a failed identity."""
    detail = str(result.error) if result.error is not None else ""
    return f"Error fetching data for {result.identity}: {detail or 'Unknown error'}"


def _default_client_factory(config: FetchConfig) -> ClientFactory:
    def _factory(token: str | None) -> GitHubActivityAPI:
        return GitHubRestClient(config, token=token)

    return _factory


class FetchOrchestrator:
    """Validate, fetch, merge and commit one request at a time.

    The orchestrator assumes at most one active request. Callers that allow
    repeated submission must cancel the previous request (see
    :class:`gitscout.fetch.cancellation.CancellationToken`) before starting a
    new one.
    """

    def __init__(  # noqa: PLR0913
        self,
        sink: OutcomeSink,
        *,
        config: FetchConfig | None = None,
        client_factory: ClientFactory | None = None,
        sleep: Sleep = asyncio.sleep,
        event_logger: FetchEventLogger | None = None,
        clock: cabc.Callable[[], dt.datetime] = utcnow,
    ) -> None:
        """Create an orchestrator writing to ``sink``.

        ``client_factory`` receives the request's credential (or ``None``)
        and returns the API client used for that request.
        """
        self._sink = sink
        self._config = config or FetchConfig()
        self._client_factory = client_factory or _default_client_factory(
            self._config
        )
        self._sleep = sleep
        self._event_logger = event_logger or FetchEventLogger()
        self._clock = clock
        self._state = FetchState.IDLE

    @property
    def state(self) -> FetchState:
        """Return the current lifecycle state."""
        return self._state

    async def run(  # noqa: PLR0913
        self,
        identities_raw: str,
        start_raw: str,
        end_raw: str,
        *,
        token: str | None = None,
        on_progress: ProgressCallback | None = None,
        on_error: ErrorCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> FetchOutcome | None:
        """Run a request from raw trigger input.

        Returns the committed outcome, or ``None`` when validation fails or
        the request aborts. Every failure is reported through ``on_error``;
        this method does not raise for request failures.
        """
        self._state = FetchState.VALIDATING
        try:
            request = validate_search_input(
                identities_raw,
                start_raw,
                end_raw,
                token=token or self._config.token,
                max_identities=self._config.max_identities,
            )
        except RequestValidationError as exc:
            self._state = FetchState.FAILED
            self._event_logger.log_validation_failed(exc.issues)
            _emit_error(on_error, str(exc))
            return None

        return await self.run_request(
            request, on_progress=on_progress, on_error=on_error, cancel=cancel
        )

    async def run_request(
        self,
        request: SearchRequest,
        *,
        on_progress: ProgressCallback | None = None,
        on_error: ErrorCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> FetchOutcome | None:
        """Run an already validated request."""
        context = FetchContext(request=request, cancel=cancel or CancellationToken())
        started_at = self._clock()
        run_context = FetchRunContext(
            identities=request.identities,
            start_date=request.start.isoformat(),
            end_date=request.end.isoformat(),
            started_at=started_at,
        )
        self._event_logger.log_run_started(run_context)

        try:
            outcome = await self._execute(context, on_progress, on_error)
        except Exception as exc:  # noqa: BLE001 - request-level failure boundary
            self._event_logger.log_run_failed(
                run_context, exc, self._clock() - started_at
            )
            _emit_error(on_error, str(exc) or _UNEXPECTED_ERROR_MESSAGE)
            self._state = FetchState.IDLE
            return None

        self._event_logger.log_run_completed(
            run_context,
            events=len(outcome.events),
            work_items=len(outcome.work_items),
            failed_identities=len(outcome.errors),
            requests=context.requests_issued,
            duration=self._clock() - started_at,
        )
        self._state = FetchState.IDLE
        return outcome

    async def _execute(
        self,
        context: FetchContext,
        on_progress: ProgressCallback | None,
        on_error: ErrorCallback | None,
    ) -> FetchOutcome:
        request = context.request
        updating = await self._sink.has_stored_data()
        progress = ProgressTracker(
            1 + len(request.identities), on_progress, updating=updating
        )
        progress.announce(
            "Updating data in background..." if updating else "Starting search..."
        )
        if not updating:
            await self._sink.clear_events()
            await self._sink.clear_work_items()

        self._state = FetchState.FETCHING
        await self._fetch_all(context, progress)

        errors = tuple(
            identity_error_message(result) for result in context.failed_identities
        )
        for message in errors:
            _emit_error(on_error, message)

        self._state = FetchState.AGGREGATING
        events = sort_events(context.events)
        work_items = sort_work_items(context.work_items)

        context.cancel.raise_if_cancelled("commit")
        self._state = FetchState.COMMITTING
        metadata = FetchMetadata(
            fetched_at=self._clock(),
            identities=request.identities,
            start_date=request.start.isoformat(),
            end_date=request.end.isoformat(),
        )
        await self._commit(events, work_items, metadata)
        progress.announce(SUCCESS_MESSAGE)

        return FetchOutcome(
            events=tuple(events),
            work_items=tuple(work_items),
            metadata=metadata,
            errors=errors,
        )

    async def _fetch_all(
        self, context: FetchContext, progress: ProgressTracker
    ) -> None:
        client = self._client_factory(context.request.token)
        try:
            search_fetcher = SearchFetcher.from_config(
                client, self._config, sleep=self._sleep, event_logger=self._event_logger
            )
            events_fetcher = EventsFetcher.from_config(
                client, self._config, sleep=self._sleep, event_logger=self._event_logger
            )

            context.cancel.raise_if_cancelled("search")
            items = await search_fetcher.fetch(context)
            progress.advance(f"{len(items)} issues/PRs")

            for identity in context.request.identities:
                context.cancel.raise_if_cancelled(f"events:{identity}")
                result = await self._fetch_identity(events_fetcher, identity, context)
                context.record_identity(result)
                if result.ok:
                    progress.advance(f"{len(result.events)} events for {identity}")
                else:
                    progress.advance(f"events for {identity} failed")
        finally:
            await client.aclose()

    async def _fetch_identity(
        self, fetcher: EventsFetcher, identity: str, context: FetchContext
    ) -> IdentityResult:
        try:
            events = await fetcher.fetch(identity, context)
        except (GitHubAPIError, GitHubResponseShapeError) as exc:
            self._event_logger.log_identity_failed(identity, exc)
            return IdentityResult(identity=identity, error=exc)
        return IdentityResult(identity=identity, events=tuple(events))

    async def _commit(
        self,
        events: list[ActivityEvent],
        work_items: list[WorkItem],
        metadata: FetchMetadata,
    ) -> None:
        if events:
            await self._sink.store_events(
                EVENTS_KEY, events, _sink_metadata(metadata, "events")
            )
        if work_items:
            await self._sink.store_work_items(
                WORK_ITEMS_KEY, work_items, _sink_metadata(metadata, "search")
            )


def _sink_metadata(
    metadata: FetchMetadata, api_mode: typ.Literal["events", "search"]
) -> SinkMetadata:
    return SinkMetadata(
        last_fetch=metadata.fetched_at,
        identities=metadata.identities,
        api_mode=api_mode,
        start_date=metadata.start_date,
        end_date=metadata.end_date,
    )


def _emit_error(callback: ErrorCallback | None, message: str) -> None:
    if callback is not None:
        callback(message)
