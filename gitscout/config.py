"""Configuration for the GitHub activity fetch engine.

Usage
-----
Create a configuration with defaults:

>>> config = FetchConfig()
>>> config.per_page
100

Or load from environment variables:

>>> import os
>>> os.environ["GITSCOUT_REQUEST_DELAY_MS"] = "250"
>>> FetchConfig.from_env().request_delay_ms
250

"""

from __future__ import annotations

import dataclasses as dc
import os

from gitscout.github.errors import GitHubConfigError

_DEFAULT_API_BASE_URL = "https://api.github.com"
_DEFAULT_TIMEOUT_S = 30.0
_DEFAULT_PER_PAGE = 100
_DEFAULT_REQUEST_DELAY_MS = 100
_DEFAULT_MAX_IDENTITIES = 15
_DEFAULT_EVENTS_MAX_PAGES = 3
_DEFAULT_SEARCH_MAX_PAGES = 10
_DEFAULT_CACHE_TTL_S = 3600

# GitHub caps per_page at 100 for both endpoints
_MAX_PER_PAGE = 100


@dc.dataclass(frozen=True, slots=True)
class FetchConfig:
    """Runtime knobs for fetching GitHub activity.

    Attributes
    ----------
    token
        Optional GitHub token sent as a bearer credential.
    api_base_url
        Root of the GitHub REST API.
    timeout_s
        Per-request timeout in seconds.
    per_page
        Page size requested from both paginated endpoints.
    request_delay_ms
        Pause between consecutive page requests.
    max_identities
        Maximum number of identities accepted in one request.
    events_max_pages
        Page ceiling for the events feed. GitHub does not paginate that feed
        reliably beyond a few pages.
    search_max_pages
        Page ceiling for each search query (1000 results at 100 per page).
    cache_ttl_s
        Age after which a stored result is considered stale.
    log_level
        Log level passed to :func:`gitscout.logging.configure_logging`.

    """

    token: str | None = None
    api_base_url: str = _DEFAULT_API_BASE_URL
    timeout_s: float = _DEFAULT_TIMEOUT_S
    per_page: int = _DEFAULT_PER_PAGE
    request_delay_ms: int = _DEFAULT_REQUEST_DELAY_MS
    max_identities: int = _DEFAULT_MAX_IDENTITIES
    events_max_pages: int = _DEFAULT_EVENTS_MAX_PAGES
    search_max_pages: int = _DEFAULT_SEARCH_MAX_PAGES
    cache_ttl_s: int = _DEFAULT_CACHE_TTL_S
    log_level: str = "INFO"

    @property
    def request_delay_s(self) -> float:
        """Return the pacing delay in seconds."""
        return self.request_delay_ms / 1000

    @staticmethod
    def _parse_positive_int(env_var: str, default: int) -> int:
        """Read a positive integer env var, falling back to a default."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            raise GitHubConfigError.invalid_value(
                env_var, raw, "an integer"
            ) from exc
        if value < 1:
            raise GitHubConfigError.invalid_value(env_var, raw, "positive")
        return value

    @staticmethod
    def _parse_non_negative_int(env_var: str, default: int) -> int:
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            raise GitHubConfigError.invalid_value(
                env_var, raw, "an integer"
            ) from exc
        if value < 0:
            raise GitHubConfigError.invalid_value(env_var, raw, "zero or more")
        return value

    @staticmethod
    def _parse_timeout() -> float:
        raw = os.environ.get("GITSCOUT_TIMEOUT_S", "")
        if not raw.strip():
            return _DEFAULT_TIMEOUT_S
        try:
            value = float(raw)
        except ValueError as exc:
            raise GitHubConfigError.invalid_value(
                "GITSCOUT_TIMEOUT_S", raw, "a number"
            ) from exc
        if value <= 0:
            raise GitHubConfigError.invalid_value(
                "GITSCOUT_TIMEOUT_S", raw, "positive"
            )
        return value

    @classmethod
    def from_env(cls) -> FetchConfig:
        """Create configuration from ``GITSCOUT_*`` environment variables.

        Raises
        ------
        GitHubConfigError
            If a numeric variable cannot be parsed or is out of range, or if
            the API base URL is blank.

        """
        token = os.environ.get("GITSCOUT_GITHUB_TOKEN", "").strip() or None
        api_base_url = os.environ.get(
            "GITSCOUT_API_BASE_URL", _DEFAULT_API_BASE_URL
        ).strip()
        if not api_base_url:
            raise GitHubConfigError.empty_base_url()

        per_page = cls._parse_positive_int("GITSCOUT_PER_PAGE", _DEFAULT_PER_PAGE)
        if per_page > _MAX_PER_PAGE:
            raise GitHubConfigError.invalid_value(
                "GITSCOUT_PER_PAGE", str(per_page), f"at most {_MAX_PER_PAGE}"
            )

        return cls(
            token=token,
            api_base_url=api_base_url.rstrip("/"),
            timeout_s=cls._parse_timeout(),
            per_page=per_page,
            request_delay_ms=cls._parse_non_negative_int(
                "GITSCOUT_REQUEST_DELAY_MS", _DEFAULT_REQUEST_DELAY_MS
            ),
            max_identities=cls._parse_positive_int(
                "GITSCOUT_MAX_IDENTITIES", _DEFAULT_MAX_IDENTITIES
            ),
            events_max_pages=cls._parse_positive_int(
                "GITSCOUT_EVENTS_MAX_PAGES", _DEFAULT_EVENTS_MAX_PAGES
            ),
            search_max_pages=cls._parse_positive_int(
                "GITSCOUT_SEARCH_MAX_PAGES", _DEFAULT_SEARCH_MAX_PAGES
            ),
            cache_ttl_s=cls._parse_non_negative_int(
                "GITSCOUT_CACHE_TTL_S", _DEFAULT_CACHE_TTL_S
            ),
            log_level=os.environ.get("GITSCOUT_LOG_LEVEL", "INFO"),
        )
