"""CLI entry point — load workspace config, check every project, report."""

import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import NoReturn, Optional

import typer

from .config import load_config, resolve_config_path
from .errors import ConfigUnavailable, WorkstatError
from .fleet import iter_outcomes, summarize
from .format import format_json, format_outcome, format_summary
from .models import WorkspaceConfig, WorkspaceOptions
from .scanner import ensure_tracked

logger = logging.getLogger(__name__)

app = typer.Typer(help="Report which local project checkouts have uncommitted changes.")


def _err(msg: str) -> NoReturn:
    """Raise a styled usage error (red box)."""
    raise typer.BadParameter(msg)


def _fatal(error: WorkstatError) -> NoReturn:
    """Print the error and stop the run with a failure status."""
    typer.echo("Fatal Error:")
    typer.echo(str(error))
    raise typer.Exit(1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # git.cmd logs every subprocess at DEBUG
    logging.getLogger("git").setLevel(logging.WARNING)


def _load(config_path: Optional[Path]) -> WorkspaceConfig:
    try:
        return load_config(resolve_config_path(config_path))
    except ConfigUnavailable as e:
        _fatal(e)


def _apply_flags(
    options: WorkspaceOptions,
    jobs: Optional[int],
    init: Optional[bool],
    untracked: Optional[bool],
    fail_fast: Optional[bool],
) -> WorkspaceOptions:
    """CLI flags win over the config [options] table; None means not given."""
    overrides = {
        "jobs": jobs,
        "auto_init": init,
        "count_untracked": untracked,
        "fail_fast": fail_fast,
    }
    return replace(options, **{k: v for k, v in overrides.items() if v is not None})


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Config file (default: ~/.config/workspace.toml; WORKSPACE_CONFIG overrides)"
    ),
    json_out: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging and list changed files"),
    jobs: Optional[int] = typer.Option(None, "--jobs", "-J", min=1, help="Check this many projects at once (output stays in name order)"),
    init: Optional[bool] = typer.Option(
        None, "--init/--no-init", help="Create git metadata in untracked directories (default: on)"
    ),
    untracked: Optional[bool] = typer.Option(
        None, "--untracked/--no-untracked", help="Count files git does not track (default: off)"
    ),
    fail_fast: Optional[bool] = typer.Option(
        None, "--fail-fast/--keep-going", help="Stop at the first failing project (default: on)"
    ),
) -> None:
    """Check every configured project for uncommitted changes."""
    _configure_logging(verbose)
    ctx.obj = {"config": config}
    if ctx.invoked_subcommand is not None:
        return

    workspace = _load(config)
    options = _apply_flags(workspace.options, jobs, init, untracked, fail_fast)
    logger.info("Options: %s", options)
    if not json_out:
        typer.echo(f"Using config: {workspace.path}")

    # Pooled checks finish in any order; buffer them and print by name
    stream = not json_out and options.jobs == 1
    outcomes = []
    for outcome in iter_outcomes(workspace.entries(), options):
        outcomes.append(outcome)
        if stream:
            typer.echo(format_outcome(outcome, verbose=verbose))
    outcomes.sort(key=lambda o: o.entry.name)
    if not json_out and not stream:
        for outcome in outcomes:
            typer.echo(format_outcome(outcome, verbose=verbose))

    summary = summarize(outcomes)
    if json_out:
        typer.echo(format_json(outcomes, summary))
    elif outcomes and (not summary["failed"] or not options.fail_fast):
        typer.echo()
        typer.echo(format_summary(summary))

    if summary["failed"]:
        raise typer.Exit(1)


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    json_out: bool = typer.Option(False, "-j", help="JSON output"),
) -> None:
    """List configured projects and their paths."""
    workspace = _load(ctx.obj["config"])
    entries = workspace.entries()
    if json_out:
        import json
        typer.echo(json.dumps({e.name: str(e.path) for e in entries}, indent=2))
        return
    if not entries:
        typer.echo(f"No projects in {workspace.path}.")
        return
    width = max(len(e.name) for e in entries)
    for e in entries:
        typer.echo(f"  {e.name.ljust(width)}  {e.path}")


@app.command("track")
def track_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Configured project name"),
) -> None:
    """Create git metadata for one configured project if it has none."""
    workspace = _load(ctx.obj["config"])
    if name not in workspace.projects:
        _err(f"Unknown project: {name}\nAvailable: {', '.join(sorted(workspace.projects)) or '(none)'}")
    path = workspace.projects[name]
    try:
        created = ensure_tracked(path, name)
    except WorkstatError as e:
        _fatal(e)
    if created:
        typer.echo(f"Initialized git metadata for {name} in {path}")
    else:
        typer.echo(f"{name} in {path} is already tracked")


def _main() -> None:
    app()


if __name__ == "__main__":
    _main()
