"""Cooperative cancellation for in-flight fetch requests."""

from __future__ import annotations

from .errors import FetchCancelledError


class CancellationToken:
    """Flag a caller sets to abandon a request.

    The orchestrator and fetchers poll the token between units of work and
    between pages; an HTTP round trip already in progress is allowed to
    finish.
    """

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        """Create a token in the not-cancelled state."""
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        """Return True once :meth:`cancel` has been called."""
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._cancelled = True

    def raise_if_cancelled(self, stage: str) -> None:
        """Raise :class:`FetchCancelledError` if cancellation was requested."""
        if self._cancelled:
            raise FetchCancelledError.during(stage)
