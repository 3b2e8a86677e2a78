"""Per-request aggregation state shared by the orchestrator and fetchers."""

from __future__ import annotations

import dataclasses
import typing as typ

from .cancellation import CancellationToken

if typ.TYPE_CHECKING:
    from gitscout.common.time import DateWindow
    from gitscout.github.models import ActivityEvent, WorkItem
    from gitscout.validation import SearchRequest


@dataclasses.dataclass(frozen=True, slots=True)
class IdentityResult:
    """Outcome of fetching one identity's events.

    Exactly one of ``events`` and ``error`` is meaningful: ``error`` is
    ``None`` on success.
    """

    identity: str
    events: tuple[ActivityEvent, ...] = ()
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        """Return True when the identity was fetched without error."""
        return self.error is None


@dataclasses.dataclass(slots=True)
class FetchContext:
    """Mutable buffers for a single in-flight request.

    Created and owned by :class:`gitscout.fetch.orchestrator.FetchOrchestrator`
    and passed explicitly to each fetcher. A context must never be shared
    between requests.
    """

    request: SearchRequest
    cancel: CancellationToken = dataclasses.field(default_factory=CancellationToken)
    events: list[ActivityEvent] = dataclasses.field(default_factory=list)
    work_items: list[WorkItem] = dataclasses.field(default_factory=list)
    seen_item_ids: set[int] = dataclasses.field(default_factory=set)
    identity_results: list[IdentityResult] = dataclasses.field(default_factory=list)
    requests_issued: int = 0

    @property
    def window(self) -> DateWindow:
        """Return the request's date window."""
        return self.request.window

    def add_work_item(self, item: WorkItem) -> bool:
        """Record ``item`` unless its id was already seen.

        Returns True when the item was kept.
        """
        if item.id in self.seen_item_ids:
            return False
        self.seen_item_ids.add(item.id)
        self.work_items.append(item)
        return True

    def record_identity(self, result: IdentityResult) -> None:
        """Store an identity outcome and keep its events on success."""
        self.identity_results.append(result)
        if result.ok:
            self.events.extend(result.events)

    @property
    def failed_identities(self) -> list[IdentityResult]:
        """Return outcomes that ended in an error, in fetch order."""
        return [result for result in self.identity_results if not result.ok]
