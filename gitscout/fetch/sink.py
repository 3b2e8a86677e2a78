"""OutcomeSink protocol for persisting merged fetch results.

This module defines the port (in hexagonal architecture terms) for fetch
output. The orchestrator only depends on the store/clear capability described
here; adapters decide where data lives and how they degrade when a backend is
unavailable.

The protocol is ``runtime_checkable`` to support ``isinstance`` checks for
dependency injection and testing scenarios.

Usage
-----
Type-check a concrete adapter:

>>> from pathlib import Path
>>> from gitscout.fetch.filesystem_sink import FilesystemOutcomeSink
>>> isinstance(FilesystemOutcomeSink(Path(".")), OutcomeSink)
True

"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt  # noqa: TC003 - msgspec resolves annotations at runtime
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from gitscout.github.models import ActivityEvent, WorkItem

EVENTS_KEY = "github-events"
WORK_ITEMS_KEY = "github-search-items"

ApiMode = typ.Literal["events", "search"]


@dc.dataclass(frozen=True, slots=True)
class SinkMetadata:
    """Metadata stored alongside a committed collection.

    Attributes
    ----------
    last_fetch
        When the request that produced the collection finished fetching.
    identities
        Identities covered by the request, in request order.
    api_mode
        Which source produced the collection: ``events`` or ``search``.
    start_date
        ISO date string (YYYY-MM-DD) of the window start.
    end_date
        ISO date string (YYYY-MM-DD) of the window end, inclusive.

    """

    last_fetch: dt.datetime
    identities: tuple[str, ...]
    api_mode: ApiMode
    start_date: str
    end_date: str


@typ.runtime_checkable
class OutcomeSink(typ.Protocol):
    """Protocol for storing merged events and work items.

    Store operations are idempotent: storing the same key twice replaces the
    earlier collection.
    """

    async def has_stored_data(self) -> bool:
        """Return True when either collection already holds data."""
        ...

    async def store_events(
        self,
        key: str,
        events: cabc.Sequence[ActivityEvent],
        metadata: SinkMetadata,
    ) -> None:
        """Persist an event collection under ``key``."""
        ...

    async def store_work_items(
        self,
        key: str,
        items: cabc.Sequence[WorkItem],
        metadata: SinkMetadata,
    ) -> None:
        """Persist a work item collection under ``key``."""
        ...

    async def clear_events(self) -> None:
        """Remove any stored event collection."""
        ...

    async def clear_work_items(self) -> None:
        """Remove any stored work item collection."""
        ...
