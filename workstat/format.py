"""Terminal and JSON output for project outcomes."""

import json
from typing import List

import click

from .models import ProjectOutcome, Verdict

_VERDICT_COLORS = {Verdict.CLEAN: "green", Verdict.DIRTY: "yellow"}


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def format_outcome(outcome: ProjectOutcome, verbose: bool = False) -> str:
    """All lines for one project as a single string, printed in one call."""
    entry = outcome.entry
    lines = [f"\tLooking at {entry.name} in {entry.path}..."]

    if not outcome.ok:
        lines.append(click.style(f"\t\tFatal Error: {outcome.error}", fg="red"))
        return "\n".join(lines)

    result = outcome.result
    color = _VERDICT_COLORS[result.verdict]
    if result.dirty:
        msg = f"\t\t{entry.name} has {_plural(result.files_changed, 'changed file')}, action needed"
    else:
        msg = f"\t\t{entry.name} has no changes, skipping"
    lines.append(click.style(msg, fg=color))

    if verbose:
        if result.initialized:
            lines.append(click.style(f"\t\t  initialized git metadata in {result.path}", dim=True))
        for f in result.changed_files:
            lines.append(click.style(f"\t\t  {f}", dim=True))
    return "\n".join(lines)


def format_summary(summary: dict) -> str:
    """One-line totals, e.g. 'Checked 4 projects. 1 dirty. 2 clean. 1 failed.'"""
    text = (
        f"Checked {_plural(summary['total'], 'project')}. "
        f"{summary['dirty']} dirty. {summary['clean']} clean."
    )
    if summary["failed"]:
        text += f" {summary['failed']} failed."
        return click.style(text, fg="red")
    return text


def outcome_to_dict(outcome: ProjectOutcome) -> dict:
    data = {
        "name": outcome.entry.name,
        "path": str(outcome.entry.path),
    }
    if outcome.ok:
        r = outcome.result
        data.update({
            "verdict": r.verdict.value,
            "files_changed": r.files_changed,
            "changed_files": r.changed_files,
            "initialized": r.initialized,
        })
    else:
        data.update({
            "verdict": None,
            "error": {"kind": type(outcome.error).__name__, "message": str(outcome.error)},
        })
    return data


def format_json(outcomes: List[ProjectOutcome], summary: dict) -> str:
    """JSON document for piping/CI."""
    return json.dumps(
        {"summary": summary, "projects": [outcome_to_dict(o) for o in outcomes]},
        indent=2,
    )
