"""Freshness checks for previously stored fetch results."""

from __future__ import annotations

import datetime as dt
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from gitscout.validation import SearchRequest

    from .sink import SinkMetadata

DEFAULT_CACHE_TTL = dt.timedelta(hours=1)


def is_cache_valid(
    stored: SinkMetadata | None,
    request: SearchRequest,
    *,
    now: dt.datetime,
    ttl: dt.timedelta = DEFAULT_CACHE_TTL,
) -> bool:
    """Return True when ``stored`` answers ``request`` and is younger than ``ttl``.

    Identities are compared case-insensitively and in order, matching how
    :func:`gitscout.validation.parse_identity_list` normalises them.
    """
    if stored is None:
        return False
    same_identities = [name.lower() for name in stored.identities] == [
        name.lower() for name in request.identities
    ]
    return (
        same_identities
        and stored.start_date == request.start.isoformat()
        and stored.end_date == request.end.isoformat()
        and now - stored.last_fetch < ttl
    )


def is_store_fresh(
    stored: cabc.Sequence[SinkMetadata],
    request: SearchRequest,
    *,
    now: dt.datetime,
    ttl: dt.timedelta = DEFAULT_CACHE_TTL,
) -> bool:
    """Return True when every stored collection answers ``request``.

    Empty collections are never committed, so the events and work item
    documents may come from different requests. The store only counts as
    fresh when all of them match.
    """
    return bool(stored) and all(
        is_cache_valid(metadata, request, now=now, ttl=ttl) for metadata in stored
    )
