"""Errors specific to the fetch orchestration layer."""

from __future__ import annotations


class FetchError(RuntimeError):
    """Base class for fetch orchestration errors."""


class FetchCancelledError(FetchError):
    """Raised when a caller cancels a request that is still in flight."""

    @classmethod
    def during(cls, stage: str) -> FetchCancelledError:
        """Return an error describing where cancellation was observed."""
        return cls(f"Fetch cancelled during {stage}")
