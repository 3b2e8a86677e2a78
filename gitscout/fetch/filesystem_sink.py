r"""Filesystem adapter for the OutcomeSink protocol.

Writes each committed collection as a JSON document with a predictable
layout::

    {base_path}/github-events.json
    {base_path}/github-search-items.json

Each document holds ``{"metadata": {...}, "items": [...]}``.

Usage
-----
Create a sink and check for previously stored data:

>>> import asyncio
>>> from pathlib import Path
>>> from gitscout.fetch.filesystem_sink import FilesystemOutcomeSink
>>>
>>> sink = FilesystemOutcomeSink(Path("/var/lib/gitscout"))
>>> asyncio.run(sink.has_stored_data())
False

"""

from __future__ import annotations

import asyncio
import typing as typ

import msgspec

from .sink import EVENTS_KEY, WORK_ITEMS_KEY, SinkMetadata

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from gitscout.github.models import ActivityEvent, WorkItem


class _StoredMetadata(msgspec.Struct):
    """Envelope used to read only the metadata of a stored document."""

    metadata: SinkMetadata


class FilesystemOutcomeSink:
    """Store fetch outcomes on the local filesystem.

    Parameters
    ----------
    base_path
        Directory holding one JSON document per collection key. Created on
        first write.

    """

    def __init__(self, base_path: Path) -> None:
        """Initialise the sink with a base directory path."""
        self._base_path = base_path

    def path_for(self, key: str) -> Path:
        """Return the document path for ``key``."""
        return self._base_path / f"{key}.json"

    async def has_stored_data(self) -> bool:
        """Return True when either collection document exists."""
        for key in (EVENTS_KEY, WORK_ITEMS_KEY):
            if await asyncio.to_thread(self.path_for(key).exists):
                return True
        return False

    async def store_events(
        self,
        key: str,
        events: cabc.Sequence[ActivityEvent],
        metadata: SinkMetadata,
    ) -> None:
        """Write events and metadata to ``{key}.json``."""
        await self._write(key, list(events), metadata)

    async def store_work_items(
        self,
        key: str,
        items: cabc.Sequence[WorkItem],
        metadata: SinkMetadata,
    ) -> None:
        """Write work items and metadata to ``{key}.json``."""
        await self._write(key, list(items), metadata)

    async def clear_events(self) -> None:
        """Delete the stored event document, if any."""
        await asyncio.to_thread(self.path_for(EVENTS_KEY).unlink, missing_ok=True)

    async def clear_work_items(self) -> None:
        """Delete the stored work item document, if any."""
        await asyncio.to_thread(
            self.path_for(WORK_ITEMS_KEY).unlink, missing_ok=True
        )

    async def load_metadata(self, key: str) -> SinkMetadata | None:
        """Return the metadata stored under ``key``, or ``None`` if absent.

        Unreadable documents are treated as absent so a corrupt file never
        blocks a fresh fetch.
        """
        path = self.path_for(key)
        try:
            raw = await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            return None
        try:
            return msgspec.json.decode(raw, type=_StoredMetadata).metadata
        except msgspec.DecodeError:
            return None

    async def _write(
        self, key: str, items: list[typ.Any], metadata: SinkMetadata
    ) -> None:
        await asyncio.to_thread(self._base_path.mkdir, parents=True, exist_ok=True)
        document = msgspec.json.encode({"metadata": metadata, "items": items})
        path = self.path_for(key)
        staging = path.with_suffix(".json.tmp")
        await asyncio.to_thread(staging.write_bytes, document)
        await asyncio.to_thread(staging.replace, path)
