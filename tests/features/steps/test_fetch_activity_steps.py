"""Behavioural tests for fetching activity across several accounts."""

from __future__ import annotations

import asyncio
import datetime as dt
import typing as typ

import pytest
from pytest_bdd import given, parsers, scenario, then, when

from gitscout.config import FetchConfig
from gitscout.fetch import EVENTS_KEY, WORK_ITEMS_KEY, FetchOrchestrator
from gitscout.github.client import SearchPage
from gitscout.github.errors import GitHubAPIError
from tests.helpers.github_records import (
    FakeActivityClient,
    RecordingSleep,
    event_record,
    item_record,
)
from tests.helpers.memory_sink import MemoryOutcomeSink

if typ.TYPE_CHECKING:
    from gitscout.fetch import FetchOutcome, ProgressUpdate


def run_async[T](coro: typ.Coroutine[typ.Any, typ.Any, T]) -> T:
    """Run async coroutines in sync BDD step functions."""
    return asyncio.run(coro)


def _jan(day: int) -> dt.datetime:
    return dt.datetime(2024, 1, day, 12, 0, tzinfo=dt.UTC)


class FetchScenarioContext(typ.TypedDict, total=False):
    """Shared state used by fetch BDD steps."""

    events: dict[str, list[typ.Any]]
    search: dict[str, list[typ.Any]]
    client: FakeActivityClient
    sink: MemoryOutcomeSink
    outcome: FetchOutcome | None
    progress: list[ProgressUpdate]
    errors: list[str]


@scenario(
    "../fetch_activity.feature",
    "Activity for two accounts is merged and stored",
)
def test_activity_is_merged_and_stored() -> None:
    """Behavioural test: two accounts produce one merged, sorted result."""


@scenario(
    "../fetch_activity.feature",
    "A failing account does not block the others",
)
def test_failing_account_does_not_block_others() -> None:
    """Behavioural test: per-account failures are reported and skipped."""


@scenario(
    "../fetch_activity.feature",
    "Invalid input is rejected before any request",
)
def test_invalid_input_is_rejected() -> None:
    """Behavioural test: validation happens before any network call."""


@pytest.fixture
def fetch_context() -> FetchScenarioContext:
    """Provide fresh scenario state."""
    return {}


@given(
    parsers.parse('GitHub has activity for "{first}" and "{second}" in January 2024')
)
def github_has_activity(
    fetch_context: FetchScenarioContext, first: str, second: str
) -> None:
    """Script events and search results for two accounts."""
    fetch_context["events"] = {
        first: [[event_record(f"{first}-1", actor=first, created_at=_jan(3))]],
        second: [
            [
                event_record(f"{second}-1", actor=second, created_at=_jan(20)),
                event_record(f"{second}-2", actor=second, created_at=_jan(8)),
            ]
        ],
    }
    fetch_context["search"] = {
        "issue": [
            SearchPage(
                total_count=2,
                items=[
                    item_record(11, updated_at=_jan(5), user=first),
                    item_record(12, updated_at=_jan(25), user=second),
                ],
            )
        ],
        "pr": [
            SearchPage(
                total_count=2,
                items=[
                    item_record(12, updated_at=_jan(25), user=second),
                    item_record(13, updated_at=_jan(15), pull_request=True),
                ],
            )
        ],
    }


@given(parsers.parse('fetching events for "{identity}" fails with HTTP {status:d}'))
def events_fail_for_identity(
    fetch_context: FetchScenarioContext, identity: str, status: int
) -> None:
    """Replace an account's events with an HTTP failure."""
    fetch_context["events"][identity] = [
        GitHubAPIError.http_error(status, "Not Found")
    ]


@when(
    parsers.parse(
        'a fetch is requested for "{identities}" from "{start}" to "{end}"'
    )
)
def request_fetch(
    fetch_context: FetchScenarioContext, identities: str, start: str, end: str
) -> None:
    """Run the orchestrator against the scripted client."""
    client = FakeActivityClient(
        events=fetch_context["events"], search=fetch_context["search"]
    )
    sink = MemoryOutcomeSink()
    progress: list[ProgressUpdate] = []
    errors: list[str] = []
    orchestrator = FetchOrchestrator(
        sink,
        config=FetchConfig(),
        client_factory=lambda _token: client,
        sleep=RecordingSleep(),
    )

    fetch_context["outcome"] = run_async(
        orchestrator.run(
            identities,
            start,
            end,
            on_progress=progress.append,
            on_error=errors.append,
        )
    )
    fetch_context["client"] = client
    fetch_context["sink"] = sink
    fetch_context["progress"] = progress
    fetch_context["errors"] = errors


@then(parsers.parse("{count:d} search queries are issued covering both accounts"))
def search_queries_issued(fetch_context: FetchScenarioContext, count: int) -> None:
    """Assert one combined query per item kind."""
    calls = fetch_context["client"].search_calls
    assert len(calls) == count, f"Expected {count} search calls, got {len(calls)}"
    for call in calls:
        assert "involves:user1" in call.query
        assert "involves:user2" in call.query
        assert " OR " in call.query


@then("the stored events are ordered newest first")
def events_newest_first(fetch_context: FetchScenarioContext) -> None:
    """Assert committed events are sorted by creation time."""
    stored = fetch_context["sink"].events[EVENTS_KEY]
    assert [event.id for event in stored] == ["user2-1", "user2-2", "user1-1"]


@then("the stored issues and pull requests are ordered by last update")
def items_by_update(fetch_context: FetchScenarioContext) -> None:
    """Assert committed work items are deduplicated and sorted."""
    stored = fetch_context["sink"].work_items[WORK_ITEMS_KEY]
    assert [item.id for item in stored] == [12, 13, 11]


@then("progress reaches 100 percent")
def progress_complete(fetch_context: FetchScenarioContext) -> None:
    """Assert the final progress update is complete."""
    percents = [update.percent for update in fetch_context["progress"]]
    assert percents == sorted(percents), f"Progress regressed: {percents}"
    assert percents[-1] == 100


@then(parsers.parse('the request completes with events only for "{identity}"'))
def events_only_for(fetch_context: FetchScenarioContext, identity: str) -> None:
    """Assert the outcome holds only the surviving account's events."""
    outcome = fetch_context["outcome"]
    assert outcome is not None, "Request should complete"
    assert {event.actor for event in outcome.events} == {identity}


@then(parsers.parse('the error "{message}" is reported'))
def error_reported(fetch_context: FetchScenarioContext, message: str) -> None:
    """Assert the error callback received ``message``."""
    assert message in fetch_context["errors"], (
        f"Expected {message!r} in {fetch_context['errors']}"
    )


@then("no GitHub request is made")
def no_request(fetch_context: FetchScenarioContext) -> None:
    """Assert validation stopped the request before the network."""
    client = fetch_context["client"]
    assert client.events_calls == []
    assert client.search_calls == []
    assert fetch_context["outcome"] is None
