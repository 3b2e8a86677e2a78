"""Typed domain models for GitHub activity and work items."""

from __future__ import annotations

import dataclasses
import datetime as dt
import typing as typ

from .errors import GitHubResponseShapeError


@dataclasses.dataclass(frozen=True, slots=True)
class ActivityEvent:
    """A single entry from a user's public activity feed."""

    id: str
    type: str
    actor: str
    created_at: dt.datetime
    repo: str | None
    payload: dict[str, typ.Any]
    raw: dict[str, typ.Any]


@dataclasses.dataclass(frozen=True, slots=True)
class WorkItem:
    """An issue or pull request returned by the search API.

    ``original`` keeps the untouched search payload so callers can render a
    raw view later. ``assignee`` and ``assignees`` are always present, even
    when GitHub omits them.
    """

    id: int
    number: int
    title: str
    state: str
    created_at: dt.datetime
    updated_at: dt.datetime
    user: str | None
    assignee: dict[str, typ.Any] | None
    assignees: tuple[dict[str, typ.Any], ...]
    is_pull_request: bool
    original: dict[str, typ.Any]


def parse_github_datetime(value: str) -> dt.datetime:
    """Parse an ISO-8601 GitHub timestamp into an aware UTC datetime."""
    text = value.replace("Z", "+00:00")
    parsed = dt.datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        msg = f"GitHub datetime missing timezone: {value}"
        raise ValueError(msg)
    return parsed.astimezone(dt.UTC)


def _required_str(record: dict[str, typ.Any], field: str) -> str:
    value = record.get(field)
    if not isinstance(value, str):
        raise GitHubResponseShapeError.missing(field)
    return value


def _required_int(record: dict[str, typ.Any], field: str) -> int:
    value = record.get(field)
    if not isinstance(value, int) or isinstance(value, bool):
        raise GitHubResponseShapeError.missing(field)
    return value


def _timestamp(record: dict[str, typ.Any], field: str) -> dt.datetime:
    raw = _required_str(record, field)
    try:
        return parse_github_datetime(raw)
    except ValueError as exc:
        raise GitHubResponseShapeError.missing(field) from exc


def _maybe_login(user: object) -> str | None:
    if not isinstance(user, dict):
        return None
    login = user.get("login")
    return login if isinstance(login, str) else None


def event_from_record(record: dict[str, typ.Any]) -> ActivityEvent:
    """Build an :class:`ActivityEvent` from an events API record."""
    raw_id = record.get("id")
    if not isinstance(raw_id, str | int) or isinstance(raw_id, bool):
        raise GitHubResponseShapeError.missing("id")
    actor = _maybe_login(record.get("actor"))
    if actor is None:
        raise GitHubResponseShapeError.missing("actor.login")
    repo = record.get("repo")
    repo_name = repo.get("name") if isinstance(repo, dict) else None
    payload = record.get("payload")
    return ActivityEvent(
        id=str(raw_id),
        type=_required_str(record, "type"),
        actor=actor,
        created_at=_timestamp(record, "created_at"),
        repo=repo_name if isinstance(repo_name, str) else None,
        payload=payload if isinstance(payload, dict) else {},
        raw=record,
    )


def work_item_from_record(record: dict[str, typ.Any]) -> WorkItem:
    """Build a :class:`WorkItem` from a search API item.

    Missing ``assignee`` becomes ``None`` and missing ``assignees`` becomes an
    empty tuple.
    """
    assignee = record.get("assignee")
    raw_assignees = record.get("assignees") or []
    assignees = tuple(entry for entry in raw_assignees if isinstance(entry, dict))
    return WorkItem(
        id=_required_int(record, "id"),
        number=_required_int(record, "number"),
        title=_required_str(record, "title"),
        state=_required_str(record, "state"),
        created_at=_timestamp(record, "created_at"),
        updated_at=_timestamp(record, "updated_at"),
        user=_maybe_login(record.get("user")),
        assignee=assignee if isinstance(assignee, dict) else None,
        assignees=assignees,
        is_pull_request=isinstance(record.get("pull_request"), dict),
        original=record,
    )
