"""Fleet run — check every configured project, one outcome per project."""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any, Iterable, Iterator

from .errors import WorkstatError
from .models import ProjectEntry, ProjectOutcome, WorkspaceOptions
from .scanner import check_project

logger = logging.getLogger(__name__)


def _check(entry: ProjectEntry, options: WorkspaceOptions) -> ProjectOutcome:
    """Run one check, capturing workstat errors into the outcome."""
    try:
        result = check_project(
            entry.name,
            entry.path,
            auto_init=options.auto_init,
            count_untracked=options.count_untracked,
        )
    except WorkstatError as e:
        logger.debug("%s", e)
        return ProjectOutcome(entry=entry, error=e)
    return ProjectOutcome(entry=entry, result=result)


def _iter_sequential(entries: list[ProjectEntry], options: WorkspaceOptions) -> Iterator[ProjectOutcome]:
    for entry in entries:
        outcome = _check(entry, options)
        yield outcome
        if not outcome.ok and options.fail_fast:
            return


def _iter_pooled(entries: list[ProjectEntry], options: WorkspaceOptions) -> Iterator[ProjectOutcome]:
    """Bounded pool; outcomes are yielded from the caller's thread as they complete."""
    with ThreadPoolExecutor(max_workers=options.jobs) as pool:
        pending: set[Future] = {pool.submit(_check, e, options) for e in entries}
        stopping = False
        while pending:
            done, pending = wait(pending, return_when=FIRST_COMPLETED)
            for fut in sorted(done, key=lambda f: f.result().entry.name):
                outcome = fut.result()
                yield outcome
                if not outcome.ok and options.fail_fast and not stopping:
                    stopping = True
                    # Queued checks never start; running ones finish and are reported
                    pending = {f for f in pending if not f.cancel()}


def iter_outcomes(
    entries: Iterable[ProjectEntry],
    options: WorkspaceOptions | None = None,
) -> Iterator[ProjectOutcome]:
    """
    Yield a ProjectOutcome per project, entries processed in name order.
    With fail_fast, nothing new is started after the first failure.
    """
    options = options or WorkspaceOptions()
    ordered = sorted(entries, key=lambda e: e.name)
    if options.jobs > 1 and len(ordered) > 1:
        return _iter_pooled(ordered, options)
    return _iter_sequential(ordered, options)


def scan(
    entries: Iterable[ProjectEntry],
    options: WorkspaceOptions | None = None,
) -> list[ProjectOutcome]:
    """Collect all outcomes, sorted by project name."""
    return sorted(iter_outcomes(entries, options), key=lambda o: o.entry.name)


def summarize(outcomes: list[ProjectOutcome]) -> dict[str, Any]:
    """Counts for the summary line and JSON output."""
    failed = sum(1 for o in outcomes if not o.ok)
    dirty = sum(1 for o in outcomes if o.ok and o.result.dirty)
    return {
        "total": len(outcomes),
        "dirty": dirty,
        "clean": len(outcomes) - failed - dirty,
        "failed": failed,
    }
