"""GitHub REST client used by the paged fetchers.

The client issues exactly one HTTP request per call and translates the
response into plain JSON structures or into the error taxonomy defined in
:mod:`gitscout.github.errors`. Pagination, pacing and retry policy live in the
fetchers, not here.
"""

from __future__ import annotations

import dataclasses
import typing as typ

import httpx

from .errors import (
    GitHubAPIError,
    GitHubResponseShapeError,
    GitHubTransportError,
    PaginationLimitReachedError,
)

if typ.TYPE_CHECKING:
    from gitscout.config import FetchConfig

_HTTP_ERROR_STATUS_THRESHOLD = 400
_USER_AGENT = "gitscout/0.1"


@dataclasses.dataclass(frozen=True, slots=True)
class SearchPage:
    """One page of search results."""

    total_count: int
    items: list[typ.Any]


class GitHubActivityAPI(typ.Protocol):
    """Interface for the page-level GitHub calls the fetchers rely on."""

    async def list_user_events(
        self, identity: str, *, page: int, per_page: int
    ) -> list[typ.Any]:
        """Return one page of an identity's public events."""
        ...

    async def search_issues(
        self, query: str, *, page: int, per_page: int
    ) -> SearchPage:
        """Return one page of issue/pull request search results."""
        ...

    async def aclose(self) -> None:
        """Release any resources held by the client."""
        ...


def _error_detail(response: httpx.Response) -> str | None:
    """Extract GitHub's ``message`` field from an error response, if any."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or None
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str):
            return message
    return None


def _record_list(items: object, *, field: str) -> list[typ.Any]:
    """Return ``items`` unchanged after checking it is a JSON array.

    Entries are not filtered here; the fetchers count the raw page length
    before skipping entries they cannot parse.
    """
    if not isinstance(items, list):
        raise GitHubResponseShapeError.missing(field)
    return items


class GitHubRestClient:
    """GitHub REST implementation of :class:`GitHubActivityAPI`."""

    def __init__(
        self,
        config: FetchConfig,
        *,
        token: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client.

        ``token`` overrides the configured token for a single request, which
        is how a credential supplied with a submit trigger reaches the API.
        """
        self._config = config
        self._owns_client = http_client is None
        resolved_token = token or config.token
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": _USER_AGENT,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if resolved_token:
            headers["Authorization"] = f"Bearer {resolved_token}"
        if http_client is None:
            self._client = httpx.AsyncClient(
                base_url=config.api_base_url,
                timeout=config.timeout_s,
                headers=headers,
            )
        else:
            self._client = http_client
            self._client.headers.update(headers)
            if not str(self._client.base_url):
                self._client.base_url = httpx.URL(config.api_base_url)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> typ.Self:
        """Return the client for use as an async context manager."""
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        """Close owned resources on exit."""
        await self.aclose()

    async def list_user_events(
        self, identity: str, *, page: int, per_page: int
    ) -> list[typ.Any]:
        """Return one page of ``/users/{identity}/events``."""
        payload = await self._get(
            f"/users/{identity}/events",
            {"per_page": per_page, "page": page},
        )
        return _record_list(payload, field="events")

    async def search_issues(
        self, query: str, *, page: int, per_page: int
    ) -> SearchPage:
        """Return one page of ``/search/issues`` sorted by last update."""
        payload = await self._get(
            "/search/issues",
            {
                "q": query,
                "per_page": per_page,
                "page": page,
                "sort": "updated",
                "order": "desc",
            },
        )
        if not isinstance(payload, dict):
            raise GitHubResponseShapeError.missing("response")
        total_count = payload.get("total_count")
        if not isinstance(total_count, int):
            raise GitHubResponseShapeError.missing("total_count")
        return SearchPage(
            total_count=total_count,
            items=_record_list(payload.get("items"), field="items"),
        )

    async def _get(self, path: str, params: dict[str, typ.Any]) -> object:
        """Execute a GET request and return the decoded JSON body."""
        try:
            response = await self._client.get(path, params=params)
        except httpx.RequestError as exc:
            raise GitHubTransportError.from_exception(exc) from exc

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            detail = _error_detail(response)
            if PaginationLimitReachedError.matches(response.status_code, detail):
                raise PaginationLimitReachedError.for_status(
                    response.status_code, detail or ""
                )
            raise GitHubAPIError.http_error(response.status_code, detail)

        try:
            return response.json()
        except ValueError as exc:
            raise GitHubResponseShapeError.missing("json body") from exc
