"""Command-line entry point for fetching GitHub activity.

Usage:
    gitscout fetch octo,hubot --start 2024-01-01 --end 2024-01-31
    gitscout fetch octo --start 2024-01-01 --end 2024-01-31 --output data --force

Environment variables (see :class:`gitscout.config.FetchConfig`):
    GITSCOUT_GITHUB_TOKEN  - Token used when ``--token`` is not given
    GITSCOUT_LOG_LEVEL     - Log level (default: INFO)
"""

from __future__ import annotations

import asyncio
import datetime as dt
import typing as typ
from pathlib import Path

from cyclopts import App, Parameter

from gitscout import __version__
from gitscout.common.time import utcnow
from gitscout.config import FetchConfig
from gitscout.fetch import (
    EVENTS_KEY,
    WORK_ITEMS_KEY,
    FetchEventLogger,
    FetchOrchestrator,
    FilesystemOutcomeSink,
    is_store_fresh,
)
from gitscout.github.errors import GitHubConfigError
from gitscout.logging import configure_logging, get_logger, log_error, log_info
from gitscout.validation import RequestValidationError, validate_search_input

if typ.TYPE_CHECKING:
    from gitscout.fetch import ProgressUpdate, SinkMetadata

app = App(
    name="gitscout",
    help="Fetch GitHub events, issues and pull requests for a set of accounts.",
    version=__version__,
)

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FETCH_FAILED = 1
EXIT_CONFIG_ERROR = 2


async def _stored_metadata(sink: FilesystemOutcomeSink) -> list[SinkMetadata]:
    """Return the metadata of every stored collection."""
    stored: list[SinkMetadata] = []
    for key in (EVENTS_KEY, WORK_ITEMS_KEY):
        metadata = await sink.load_metadata(key)
        if metadata is not None:
            stored.append(metadata)
    return stored


async def run_fetch(  # noqa: PLR0913
    identities: str,
    *,
    start: str,
    end: str,
    output: Path,
    token: str | None = None,
    force: bool = False,
    config: FetchConfig | None = None,
) -> int:
    """Run one fetch request and return a process exit code."""
    resolved = config or FetchConfig.from_env()
    sink = FilesystemOutcomeSink(output)

    try:
        request = validate_search_input(
            identities,
            start,
            end,
            token=token or resolved.token,
            max_identities=resolved.max_identities,
        )
    except RequestValidationError as exc:
        FetchEventLogger().log_validation_failed(exc.issues)
        for issue in exc.issues:
            print(f"  - {issue}")
        return EXIT_FETCH_FAILED

    if not force:
        stored = await _stored_metadata(sink)
        ttl = dt.timedelta(seconds=resolved.cache_ttl_s)
        if is_store_fresh(stored, request, now=utcnow(), ttl=ttl):
            print(f"Stored results in {output} are fresh; use --force to refetch.")
            return EXIT_OK

    failures: list[str] = []

    def _on_progress(update: ProgressUpdate) -> None:
        log_info(logger, "%s", update.message)
        print(update.message)

    def _on_error(message: str) -> None:
        log_error(logger, "%s", message)
        failures.append(message)
        print(f"error: {message}")

    orchestrator = FetchOrchestrator(sink, config=resolved)
    outcome = await orchestrator.run_request(
        request, on_progress=_on_progress, on_error=_on_error
    )
    if outcome is None:
        return EXIT_FETCH_FAILED

    print(
        f"{len(outcome.events)} events and {len(outcome.work_items)} issues/PRs "
        f"stored in {output}"
        + (f" ({len(outcome.errors)} account(s) failed)" if outcome.errors else "")
    )
    return EXIT_OK


@app.command
def fetch(  # noqa: PLR0913
    identities: str,
    *,
    start: str,
    end: str,
    output: Path = Path(".gitscout"),
    token: typ.Annotated[str | None, Parameter(env_var="GITSCOUT_GITHUB_TOKEN")] = None,
    force: bool = False,
) -> int:
    """Fetch activity for comma-separated IDENTITIES between START and END.

    Parameters
    ----------
    identities
        Comma-separated GitHub account names.
    start
        First day of the window, YYYY-MM-DD.
    end
        Last day of the window (inclusive), YYYY-MM-DD.
    output
        Directory receiving the stored JSON collections.
    token
        GitHub token; raises the API rate limit.
    force
        Refetch even when stored results for the same request are fresh.

    """
    try:
        config = FetchConfig.from_env()
    except GitHubConfigError as exc:
        print(f"Invalid configuration: {exc}")
        return EXIT_CONFIG_ERROR

    level, invalid = configure_logging(config.log_level)
    if invalid:
        log_error(logger, "Invalid GITSCOUT_LOG_LEVEL; using %s", level)

    return asyncio.run(
        run_fetch(
            identities,
            start=start,
            end=end,
            output=output,
            token=token,
            force=force,
            config=config,
        )
    )


def main() -> None:
    """Console script entry point."""
    raise SystemExit(app())


if __name__ == "__main__":
    main()
