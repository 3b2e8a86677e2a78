"""Paged fetcher for issues and pull requests involving a set of identities.

Instead of one search per identity, every identity is folded into a single
query per item kind::

    is:issue updated:2024-01-01..2024-01-31 involves:octo OR
    is:issue updated:2024-01-01..2024-01-31 involves:hubot

GitHub's search grammar binds the implicit AND between qualifiers tighter
than ``OR``, so the combined query returns the union of the per-identity
queries while costing two paginated searches per request regardless of how
many identities are involved.
"""

from __future__ import annotations

import asyncio
import logging
import typing as typ

from gitscout.github.errors import (
    GitHubAPIError,
    GitHubResponseShapeError,
    PaginationLimitReachedError,
)
from gitscout.github.models import WorkItem, work_item_from_record

from .observability import FetchEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from gitscout.common.time import DateWindow
    from gitscout.config import FetchConfig
    from gitscout.github.client import GitHubActivityAPI

    from .context import FetchContext

    type Sleep = cabc.Callable[[float], cabc.Awaitable[None]]

logger = logging.getLogger(__name__)

SearchKind = typ.Literal["issue", "pr"]
SEARCH_KINDS: tuple[SearchKind, ...] = ("issue", "pr")


def build_combined_query(
    kind: SearchKind, identities: typ.Sequence[str], window: DateWindow
) -> str:
    """Build one OR-of-ANDs search query covering every identity.

    Examples
    --------
    >>> import datetime as dt
    >>> from gitscout.common.time import DateWindow
    >>> window = DateWindow(dt.date(2024, 1, 1), dt.date(2024, 1, 31))
    >>> build_combined_query("pr", ["octo", "hubot"], window)
    'is:pr updated:2024-01-01..2024-01-31 involves:octo OR is:pr updated:2024-01-01..2024-01-31 involves:hubot'

    """
    if not identities:
        msg = "at least one identity is required to build a search query"
        raise ValueError(msg)
    updated = f"updated:{window.search_range()}"
    return " OR ".join(
        f"is:{kind} {updated} involves:{identity}" for identity in identities
    )


class SearchFetcher:
    """Fetch issues and pull requests for all identities of a request.

    Items are deduplicated on arrival against the request's seen-id set, so
    an item returned by both queries, or repeated across pages, is kept once
    in first-seen form. Stop conditions use raw page sizes, not the number of
    items kept after deduplication.
    """

    def __init__(  # noqa: PLR0913
        self,
        client: GitHubActivityAPI,
        *,
        per_page: int = 100,
        max_pages: int = 10,
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
    ) -> SearchFetcher:
        """Build a fetcher using pagination settings from ``config``."""
        return cls(
            client,
            per_page=config.per_page,
            max_pages=config.search_max_pages,
            request_delay_s=config.request_delay_s,
            sleep=sleep,
            event_logger=event_logger,
        )

    async def fetch(self, context: FetchContext) -> list[WorkItem]:
        """Run the issue and pull request queries and return the kept items.

        When a query fails for any reason other than a pagination limit, the
        items collected so far are returned as a partial result. If nothing
        has been collected yet the error propagates, so callers can tell a
        failed fetch from an empty one.
        """
        kept: list[WorkItem] = []
        for kind in SEARCH_KINDS:
            query = build_combined_query(
                kind, context.request.identities, context.window
            )
            try:
                await self._fetch_query(kind, query, context, kept)
            except (GitHubAPIError, GitHubResponseShapeError) as exc:
                if not context.work_items:
                    raise
                self._event_logger.log_search_partial(
                    f"search:{kind}", context.requests_issued, len(kept), exc
                )
                return kept
        return kept

    async def _fetch_query(
        self,
        kind: SearchKind,
        query: str,
        context: FetchContext,
        kept: list[WorkItem],
    ) -> None:
        """Paginate a single query, appending newly seen items to ``kept``."""
        unit = f"search:{kind}"
        fetched = 0
        for page in range(1, self._max_pages + 1):
            if page > 1:
                await self._sleep(self._request_delay_s)
            context.cancel.raise_if_cancelled(f"{unit} page {page}")

            context.requests_issued += 1
            try:
                result = await self._client.search_issues(
                    query, page=page, per_page=self._per_page
                )
            except PaginationLimitReachedError:
                self._event_logger.log_pagination_limited(unit, page, fetched)
                return

            fetched += len(result.items)
            for record in result.items:
                if not isinstance(record, dict):
                    logger.debug("Skipping non-object search item: %r", record)
                    continue
                try:
                    item = work_item_from_record(record)
                except GitHubResponseShapeError as exc:
                    logger.debug("Skipping malformed search item: %s", exc)
                    continue
                if context.add_work_item(item):
                    kept.append(item)

            if len(result.items) < self._per_page or fetched >= result.total_count:
                return

        self._event_logger.log_pagination_ceiling(unit, self._max_pages, fetched)
