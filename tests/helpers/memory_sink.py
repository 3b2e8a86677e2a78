"""In-memory OutcomeSink used by orchestrator tests."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from gitscout.fetch.sink import SinkMetadata
    from gitscout.github.models import ActivityEvent, WorkItem


class MemoryOutcomeSink:
    """Keep stored collections in dictionaries and record every call."""

    def __init__(
        self,
        *,
        events: list[ActivityEvent] | None = None,
        work_items: list[WorkItem] | None = None,
    ) -> None:
        """Optionally seed previously stored collections."""
        self.events: dict[str, list[ActivityEvent]] = {}
        self.work_items: dict[str, list[WorkItem]] = {}
        self.metadata: dict[str, SinkMetadata] = {}
        self.calls: list[str] = []
        if events is not None:
            self.events["github-events"] = events
        if work_items is not None:
            self.work_items["github-search-items"] = work_items

    async def has_stored_data(self) -> bool:
        """Return True when any collection is stored."""
        self.calls.append("has_stored_data")
        return bool(self.events or self.work_items)

    async def store_events(
        self,
        key: str,
        events: cabc.Sequence[ActivityEvent],
        metadata: SinkMetadata,
    ) -> None:
        """Replace the event collection under ``key``."""
        self.calls.append(f"store_events:{key}")
        self.events[key] = list(events)
        self.metadata[key] = metadata

    async def store_work_items(
        self,
        key: str,
        items: cabc.Sequence[WorkItem],
        metadata: SinkMetadata,
    ) -> None:
        """Replace the work item collection under ``key``."""
        self.calls.append(f"store_work_items:{key}")
        self.work_items[key] = list(items)
        self.metadata[key] = metadata

    async def clear_events(self) -> None:
        """Drop stored events."""
        self.calls.append("clear_events")
        self.events.clear()

    async def clear_work_items(self) -> None:
        """Drop stored work items."""
        self.calls.append("clear_work_items")
        self.work_items.clear()
