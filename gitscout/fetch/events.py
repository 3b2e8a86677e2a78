"""Paged fetcher for a single identity's public activity feed."""

from __future__ import annotations

import asyncio
import logging
import typing as typ

from gitscout.github.errors import GitHubResponseShapeError, PaginationLimitReachedError
from gitscout.github.models import ActivityEvent, event_from_record

from .observability import FetchEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from gitscout.config import FetchConfig
    from gitscout.github.client import GitHubActivityAPI

    from .context import FetchContext

    type Sleep = cabc.Callable[[float], cabc.Awaitable[None]]

logger = logging.getLogger(__name__)


def _events_in_window(
    records: list[typ.Any], context: FetchContext
) -> list[ActivityEvent]:
    """Convert records to events, dropping malformed and out-of-window entries.

    Out-of-window events are filtered rather than treated as a stop signal
    because the feed's chronological order is not strict across pages.
    """
    window = context.window
    events: list[ActivityEvent] = []
    for record in records:
        if not isinstance(record, dict):
            logger.debug("Skipping non-object event record: %r", record)
            continue
        try:
            event = event_from_record(record)
        except GitHubResponseShapeError as exc:
            logger.debug("Skipping malformed event record: %s", exc)
            continue
        if window.contains(event.created_at):
            events.append(event)
    return events


class EventsFetcher:
    """Fetch one identity's events within a date window.

    Pages are requested in order until a short page signals the end of data
    or ``max_pages`` pages have been read. GitHub does not guarantee stable
    pagination of this feed beyond a few pages, so the ceiling trades
    completeness for consistency.
    """

    def __init__(  # noqa: PLR0913
        self,
        client: GitHubActivityAPI,
        *,
        per_page: int = 100,
        max_pages: int = 3,
        request_delay_s: float = 0.1,
        sleep: Sleep = asyncio.sleep,
        event_logger: FetchEventLogger | None = None,
    ) -> None:
        """Bind the fetcher to a client and pagination settings."""
        self._client = client
        self._per_page = per_page
        self._max_pages = max_pages
        self._request_delay_s = request_delay_s
        self._sleep = sleep
        self._event_logger = event_logger or FetchEventLogger()

    @classmethod
    def from_config(
        cls,
        client: GitHubActivityAPI,
        config: FetchConfig,
        *,
        sleep: Sleep = asyncio.sleep,
        event_logger: FetchEventLogger | None = None,
    ) -> EventsFetcher:
        """Build a fetcher using pagination settings from ``config``."""
        return cls(
            client,
            per_page=config.per_page,
            max_pages=config.events_max_pages,
            request_delay_s=config.request_delay_s,
            sleep=sleep,
            event_logger=event_logger,
        )

    async def fetch(self, identity: str, context: FetchContext) -> list[ActivityEvent]:
        """Return ``identity``'s events inside the request window.

        A pagination-limit response ends the fetch and returns what was
        collected. Any other error propagates to the caller.
        """
        unit = f"events:{identity}"
        collected: list[ActivityEvent] = []
        for page in range(1, self._max_pages + 1):
            if page > 1:
                await self._sleep(self._request_delay_s)
            context.cancel.raise_if_cancelled(f"{unit} page {page}")

            context.requests_issued += 1
            try:
                records = await self._client.list_user_events(
                    identity, page=page, per_page=self._per_page
                )
            except PaginationLimitReachedError:
                self._event_logger.log_pagination_limited(unit, page, len(collected))
                return collected

            collected.extend(_events_in_window(records, context))
            if len(records) < self._per_page:
                return collected

        self._event_logger.log_pagination_ceiling(
            unit, self._max_pages, len(collected)
        )
        return collected
