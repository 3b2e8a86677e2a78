"""GitHub REST errors raised by the client and paged fetchers."""

from __future__ import annotations

_PAGINATION_LIMIT_STATUS = 422
_PAGINATION_LIMIT_MARKER = "pagination is limited"


class GitHubAPIError(RuntimeError):
    """Raised when GitHub returns an error response or cannot be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(
        cls, status_code: int, detail: str | None = None
    ) -> GitHubAPIError:
        """Return an error for non-2xx HTTP responses."""
        message = f"GitHub REST HTTP {status_code}"
        if detail:
            message = f"{message}: {detail}"
        return cls(message, status_code=status_code)


class PaginationLimitReachedError(GitHubAPIError):
    """Raised when GitHub refuses to serve further pages for a query.

    Callers treat this as the end of data for the current unit of work rather
    than as a failure.
    """

    @classmethod
    def for_status(cls, status_code: int, detail: str) -> PaginationLimitReachedError:
        """Return a pagination limit error for the given response."""
        return cls(
            f"GitHub pagination limit reached (HTTP {status_code}): {detail}",
            status_code=status_code,
        )

    @staticmethod
    def matches(status_code: int, detail: str | None) -> bool:
        """Return True when a response signals the pagination window is exhausted."""
        return (
            status_code == _PAGINATION_LIMIT_STATUS
            and detail is not None
            and _PAGINATION_LIMIT_MARKER in detail.lower()
        )


class GitHubTransportError(GitHubAPIError):
    """Raised when the HTTP request fails before a response is received."""

    @classmethod
    def from_exception(cls, exc: BaseException) -> GitHubTransportError:
        """Wrap a transport-level exception."""
        return cls(f"GitHub request failed: {type(exc).__name__}: {exc}")


class GitHubResponseShapeError(RuntimeError):
    """Raised when GitHub REST responses are missing expected fields."""

    @classmethod
    def missing(cls, field: str) -> GitHubResponseShapeError:
        """Return an error for a missing response field."""
        return cls(f"GitHub REST response missing expected field: {field}")


class GitHubConfigError(RuntimeError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def invalid_value(cls, name: str, raw: str, expected: str) -> GitHubConfigError:
        """Return an error for an unparseable configuration value."""
        return cls(f"{name} must be {expected}, got: {raw!r}")

    @classmethod
    def empty_base_url(cls) -> GitHubConfigError:
        """Return an error when the API base URL is blank."""
        return cls("GitHub API base URL must be non-empty")
