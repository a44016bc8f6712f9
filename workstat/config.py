"""Workspace config — locate, parse and validate the project list."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

import yaml

from .errors import ConfigUnavailable
from .models import WorkspaceConfig, WorkspaceOptions

logger = logging.getLogger(__name__)

ENV_VAR = "WORKSPACE_CONFIG"
DEFAULT_RELATIVE = Path(".config") / "workspace.toml"
YAML_SUFFIXES = {".yaml", ".yml"}

_BOOL_OPTIONS = ("auto_init", "count_untracked", "fail_fast")


def resolve_config_path(
    cli_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    """
    Pick the config file path, in order:
      1. WORKSPACE_CONFIG environment variable
      2. --config passed on the command line
      3. $HOME/.config/workspace.toml
    Raises ConfigUnavailable when none of these is available.
    """
    env = os.environ if environ is None else environ
    if env.get(ENV_VAR):
        path = Path(env[ENV_VAR])
        source = ENV_VAR
    elif cli_path is not None:
        path = Path(cli_path)
        source = "--config"
    elif env.get("HOME"):
        path = Path(env["HOME"]) / DEFAULT_RELATIVE
        source = "default"
    else:
        raise ConfigUnavailable(
            f"No config file passed via {ENV_VAR} or --config, and HOME not defined"
        )
    path = path.expanduser()
    logger.debug("Using config %s (from %s)", path, source)
    return path


def _parse(path: Path, text: str) -> Any:
    if path.suffix.lower() in YAML_SUFFIXES:
        return yaml.safe_load(text)
    return tomllib.loads(text)


def _parse_options(raw: Any, path: Path) -> WorkspaceOptions:
    """Validate the optional [options] table."""
    if raw is None:
        return WorkspaceOptions()
    if not isinstance(raw, dict):
        raise ConfigUnavailable(f"{path}: 'options' must be a table")
    unknown = set(raw) - set(_BOOL_OPTIONS) - {"jobs"}
    if unknown:
        raise ConfigUnavailable(f"{path}: unknown option(s): {', '.join(sorted(unknown))}")
    opts = WorkspaceOptions()
    for key in _BOOL_OPTIONS:
        if key in raw:
            if not isinstance(raw[key], bool):
                raise ConfigUnavailable(f"{path}: option '{key}' must be true or false")
            setattr(opts, key, raw[key])
    if "jobs" in raw:
        jobs = raw["jobs"]
        if isinstance(jobs, bool) or not isinstance(jobs, int) or jobs < 1:
            raise ConfigUnavailable(f"{path}: option 'jobs' must be a positive integer")
        opts.jobs = jobs
    return opts


def _parse_projects(raw: Any, path: Path) -> dict[str, Path]:
    """Validate the [projects] table: name -> path string."""
    if raw is None:
        raise ConfigUnavailable(f"{path}: missing 'projects' table")
    if not isinstance(raw, dict):
        raise ConfigUnavailable(f"{path}: 'projects' must be a table of name = path")
    projects: dict[str, Path] = {}
    for name, value in raw.items():
        if not isinstance(value, str) or not value:
            raise ConfigUnavailable(f"{path}: project '{name}' must map to a path string")
        projects[str(name)] = Path(value).expanduser()
    return projects


def load_config(path: Path) -> WorkspaceConfig:
    """Read and validate a workspace config file (TOML, or YAML by suffix)."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ConfigUnavailable(f"Malformed config {path}: {e}") from e
    except OSError as e:
        raise ConfigUnavailable(f"Cannot read config {path}: {e}") from e
    try:
        data = _parse(path, text)
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise ConfigUnavailable(f"Malformed config {path}: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigUnavailable(f"Malformed config {path}: top level must be a table")

    config = WorkspaceConfig(
        path=path,
        projects=_parse_projects(data.get("projects"), path),
        options=_parse_options(data.get("options"), path),
    )
    logger.info("Loaded %d project(s) from %s", len(config.projects), path)
    return config
