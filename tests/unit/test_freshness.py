"""Unit tests for stored result freshness checks."""

from __future__ import annotations

import datetime as dt

import pytest

from gitscout.fetch import SinkMetadata, is_cache_valid, is_store_fresh
from gitscout.validation import validate_search_input

_NOW = dt.datetime(2024, 2, 1, 12, 0, tzinfo=dt.UTC)


def _stored(
    *,
    identities: tuple[str, ...] = ("octo", "hubot"),
    age: dt.timedelta = dt.timedelta(minutes=10),
    start_date: str = "2024-01-01",
) -> SinkMetadata:
    return SinkMetadata(
        last_fetch=_NOW - age,
        identities=identities,
        api_mode="search",
        start_date=start_date,
        end_date="2024-01-31",
    )


_REQUEST = validate_search_input("octo,hubot", "2024-01-01", "2024-01-31")


def test_recent_matching_result_is_fresh() -> None:
    """Same parameters within the TTL are served from storage."""
    assert is_cache_valid(_stored(), _REQUEST, now=_NOW)


def test_identity_case_is_ignored() -> None:
    """Account names compare case-insensitively."""
    assert is_cache_valid(_stored(identities=("Octo", "HUBOT")), _REQUEST, now=_NOW)


@pytest.mark.parametrize(
    "stored",
    [
        pytest.param(None, id="nothing_stored"),
        pytest.param(_stored(age=dt.timedelta(hours=1)), id="expired"),
        pytest.param(_stored(identities=("hubot", "octo")), id="reordered"),
        pytest.param(_stored(identities=("octo",)), id="subset"),
        pytest.param(_stored(start_date="2023-12-01"), id="different_window"),
    ],
)
def test_mismatched_or_stale_results_are_not_fresh(
    stored: SinkMetadata | None,
) -> None:
    """Any parameter mismatch or expiry forces a refetch."""
    assert not is_cache_valid(stored, _REQUEST, now=_NOW)


def test_ttl_is_configurable() -> None:
    """A shorter TTL expires results sooner."""
    assert not is_cache_valid(
        _stored(), _REQUEST, now=_NOW, ttl=dt.timedelta(minutes=5)
    )


class TestStoreFreshness:
    """Tests for freshness across every stored collection."""

    def test_all_matching_collections_are_fresh(self) -> None:
        """Events and work items from the same request are reused."""
        assert is_store_fresh([_stored(), _stored()], _REQUEST, now=_NOW)

    def test_nothing_stored_is_not_fresh(self) -> None:
        """An empty store always forces a fetch."""
        assert not is_store_fresh([], _REQUEST, now=_NOW)

    def test_collection_from_another_request_is_not_fresh(self) -> None:
        """One mismatched collection makes the whole store stale."""
        other = _stored(identities=("bob",), age=dt.timedelta(minutes=5))

        assert not is_store_fresh([_stored(), other], _REQUEST, now=_NOW)
