"""Progress reporting over units of work in a fetch request."""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    type ProgressCallback = cabc.Callable[[ProgressUpdate], None]


@dataclasses.dataclass(frozen=True, slots=True)
class ProgressUpdate:
    """A status message plus the unit counters it was reported at."""

    message: str
    completed: int
    total: int

    @property
    def percent(self) -> int:
        """Return completion as a whole percentage."""
        if self.total <= 0:
            return 100
        return round(self.completed / self.total * 100)


class ProgressTracker:
    """Count completed units and forward updates to a caller callback.

    One unit is the combined search fetch; one more unit per identity's
    events fetch. The counter only moves forward, so reported percentages
    never decrease.
    """

    def __init__(
        self,
        total: int,
        callback: ProgressCallback | None,
        *,
        updating: bool = False,
    ) -> None:
        """Create a tracker for ``total`` units.

        ``updating`` selects the wording used when a previous result is being
        refreshed rather than fetched for the first time.
        """
        self._total = total
        self._completed = 0
        self._callback = callback
        self._prefix = "Updating" if updating else "Fetching"

    @property
    def completed(self) -> int:
        """Return the number of completed units."""
        return self._completed

    @property
    def total(self) -> int:
        """Return the number of units in the request."""
        return self._total

    def announce(self, message: str) -> None:
        """Report ``message`` verbatim without advancing."""
        self._emit(message)

    def advance(self, message: str) -> None:
        """Mark one unit complete and report ``message`` with a percentage."""
        self._completed = min(self._completed + 1, self._total)
        update = self._update(message)
        self._emit(f"{self._prefix} {message} ({update.percent}%)")

    def _update(self, message: str) -> ProgressUpdate:
        return ProgressUpdate(
            message=message, completed=self._completed, total=self._total
        )

    def _emit(self, message: str) -> None:
        if self._callback is not None:
            self._callback(self._update(message))
