"""Validation of raw fetch input before any network call is made.

A submit trigger carries three raw strings: a comma-separated identity list
and two ``YYYY-MM-DD`` dates. :func:`validate_search_input` turns them into a
:class:`SearchRequest` or raises :class:`RequestValidationError` listing every
problem found, in input order.

Examples
--------
>>> request = validate_search_input(" octo, hubot ,octo", "2024-01-01", "2024-01-31")
>>> request.identities
('octo', 'hubot')

"""

from __future__ import annotations

import dataclasses
import datetime as dt
import re

from gitscout.common.time import DateWindow

DEFAULT_MAX_IDENTITIES = 15
MAX_IDENTITY_LENGTH = 39

_IDENTITY_PATTERN = re.compile(r"^[A-Za-z0-9]+(?:-[A-Za-z0-9]+)*$")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

EMPTY_IDENTITIES_MESSAGE = "Please enter at least one username"
DATE_ORDER_MESSAGE = "Start date must be before end date"


class RequestValidationError(ValueError):
    """Raised when raw fetch input fails validation.

    Attributes
    ----------
    issues
        Human-readable problems in the order they were detected. Never empty.

    """

    issues: tuple[str, ...]

    def __init__(self, issues: list[str]) -> None:
        """Initialise with the detected issues."""
        self.issues = tuple(issues)
        super().__init__("\n".join(self.issues))


@dataclasses.dataclass(frozen=True, slots=True)
class SearchRequest:
    """A validated, normalised fetch request."""

    identities: tuple[str, ...]
    start: dt.date
    end: dt.date
    token: str | None = dataclasses.field(default=None, repr=False)

    @property
    def window(self) -> DateWindow:
        """Return the request's date window."""
        return DateWindow(self.start, self.end)


def validate_identity(name: str) -> str | None:
    """Return a reason why ``name`` is not a valid account name, or ``None``.

    Examples
    --------
    >>> validate_identity("octo-cat") is None
    True
    >>> validate_identity("octo--cat")
    'Username cannot contain consecutive hyphens'

    """
    if not name:
        return "Username cannot be empty"
    if len(name) > MAX_IDENTITY_LENGTH:
        return f"Username cannot be longer than {MAX_IDENTITY_LENGTH} characters"
    if name.startswith("-"):
        return "Username cannot begin with a hyphen"
    if name.endswith("-"):
        return "Username cannot end with a hyphen"
    if "--" in name:
        return "Username cannot contain consecutive hyphens"
    if not _IDENTITY_PATTERN.match(name):
        return "Username may only contain alphanumeric characters or single hyphens"
    return None


def parse_identity_list(raw: str) -> list[str]:
    """Split a comma-separated identity string into trimmed, unique names.

    Empty segments are ignored. Duplicates are compared case-insensitively,
    because GitHub account names are, and the first spelling wins.
    """
    seen: set[str] = set()
    identities: list[str] = []
    for segment in raw.split(","):
        name = segment.strip()
        if not name:
            continue
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        identities.append(name)
    return identities


def _parse_date(raw: str, label: str, issues: list[str]) -> dt.date | None:
    text = raw.strip()
    message = f"Invalid {label} date format. Please use YYYY-MM-DD"
    if not _DATE_PATTERN.match(text):
        issues.append(message)
        return None
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        issues.append(message)
        return None


def validate_search_input(
    identities_raw: str,
    start_raw: str,
    end_raw: str,
    *,
    token: str | None = None,
    max_identities: int = DEFAULT_MAX_IDENTITIES,
) -> SearchRequest:
    """Validate raw trigger input and return a normalised request.

    Raises
    ------
    RequestValidationError
        If any identity is malformed, there are no identities or too many,
        either date is malformed, or the start date is not before the end date.

    """
    issues: list[str] = []

    identities = parse_identity_list(identities_raw or "")
    if not identities:
        issues.append(EMPTY_IDENTITIES_MESSAGE)
    for name in identities:
        reason = validate_identity(name)
        if reason is not None:
            issues.append(f"Invalid username {name!r}: {reason}")
    if len(identities) > max_identities:
        issues.append(
            f"Too many usernames. Please limit to {max_identities} usernames "
            "at a time."
        )

    start = _parse_date(start_raw or "", "start", issues)
    end = _parse_date(end_raw or "", "end", issues)
    if start is not None and end is not None and start >= end:
        issues.append(DATE_ORDER_MESSAGE)

    if issues or start is None or end is None:
        raise RequestValidationError(issues)

    return SearchRequest(
        identities=tuple(identities),
        start=start,
        end=end,
        token=token or None,
    )
