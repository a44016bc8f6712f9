"""Working tree status — open or create git metadata, diff index vs workdir."""

from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import git
from git.exc import GitError, InvalidGitRepositoryError, NoSuchPathError

from ..errors import DiffComputeFailed, NotTracked, TreeOpenFailed
from ..models import StatusResult

logger = logging.getLogger(__name__)

# Variables that would redirect git away from the path being checked
GIT_LOCATION_VARS = (
    "GIT_DIR",
    "GIT_WORK_TREE",
    "GIT_INDEX_FILE",
    "GIT_OBJECT_DIRECTORY",
    "GIT_COMMON_DIR",
)

_env_lock = threading.Lock()
_env_users = 0
_saved_env: dict[str, str] = {}


@contextmanager
def _path_scoped_git_env() -> Iterator[None]:
    """
    Hide GIT_DIR and friends while any check is running; restored when the
    last concurrent check finishes.
    """
    global _env_users
    with _env_lock:
        if _env_users == 0:
            for key in GIT_LOCATION_VARS:
                if key in os.environ:
                    _saved_env[key] = os.environ.pop(key)
        _env_users += 1
    try:
        yield
    finally:
        with _env_lock:
            _env_users -= 1
            if _env_users == 0:
                os.environ.update(_saved_env)
                _saved_env.clear()


def _label(name: str | None, path: Path) -> str:
    return f"{name} ({path})" if name else str(path)


def ensure_tracked(path: str | Path, name: str | None = None) -> bool:
    """
    Make sure path holds git metadata, running `git init` there if it doesn't.
    Creates the directory when missing. Never touches an existing repository.
    Returns True if metadata was created.
    """
    root = Path(path)
    with _path_scoped_git_env():
        return _ensure_tracked(root, name)


def _ensure_tracked(root: Path, name: str | None) -> bool:
    try:
        with git.Repo(root):
            return False
    except (NoSuchPathError, InvalidGitRepositoryError):
        pass
    except (GitError, OSError) as e:
        raise TreeOpenFailed(f"Failed to open repo for {_label(name, root)}: {e}") from e

    try:
        git.Repo.init(root, mkdir=True).close()
    except (GitError, OSError) as e:
        raise TreeOpenFailed(f"Failed to init repo for {_label(name, root)}: {e}") from e
    logger.info("Initialized git metadata at %s", root)
    return True


def _changed_paths(repo: git.Repo, count_untracked: bool) -> set[str]:
    # index.diff(None) compares the index against the working tree only
    changed = {d.a_path or d.b_path for d in repo.index.diff(None)}
    if count_untracked:
        changed.update(repo.untracked_files)
    return changed


def compute_status(name: str, path: str | Path, count_untracked: bool = False) -> StatusResult:
    """Read-only status check. Raises NotTracked if path has no git metadata."""
    with _path_scoped_git_env():
        return _compute_status(name, Path(path), count_untracked)


def _compute_status(name: str, root: Path, count_untracked: bool) -> StatusResult:
    label = _label(name, root)
    if not root.is_dir():
        raise TreeOpenFailed(f"Failed to open repo for {label}: not an accessible directory")
    try:
        repo = git.Repo(root)
    except NoSuchPathError as e:
        raise TreeOpenFailed(f"Failed to open repo for {label}: {e}") from e
    except InvalidGitRepositoryError as e:
        raise NotTracked(f"{label} is not a git working tree") from e
    except (GitError, OSError) as e:
        raise TreeOpenFailed(f"Failed to open repo for {label}: {e}") from e

    with repo:
        if repo.bare:
            raise DiffComputeFailed(f"Failed to get diff for {label}: bare repository has no working tree")
        try:
            changed = _changed_paths(repo, count_untracked)
        except (GitError, OSError, ValueError) as e:
            raise DiffComputeFailed(f"Failed to get diff for {label}: {e}") from e

    logger.debug("%s: %d changed file(s)", name, len(changed))
    return StatusResult(
        name=name,
        path=str(root),
        files_changed=len(changed),
        changed_files=sorted(changed),
    )


def check_project(
    name: str,
    path: str | Path,
    auto_init: bool = True,
    count_untracked: bool = False,
) -> StatusResult:
    """
    Status of one project. With auto_init, a plain directory is turned into a
    git working tree first; without it, such a directory raises NotTracked.
    """
    initialized = ensure_tracked(path, name) if auto_init else False
    result = compute_status(name, path, count_untracked=count_untracked)
    result.initialized = initialized
    return result
