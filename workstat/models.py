"""Structured types for projects, options and status results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from .errors import WorkstatError


class Verdict(str, Enum):
    CLEAN = "CLEAN"
    DIRTY = "DIRTY"


@dataclass(frozen=True)
class ProjectEntry:
    """One configured project: unique name -> working tree path."""

    name: str
    path: Path


@dataclass
class StatusResult:
    """Outcome of a single successful status check."""

    name: str
    path: str
    files_changed: int = 0
    changed_files: list[str] = field(default_factory=list)  # sorted, relative to path
    initialized: bool = False  # metadata was created by this check

    @property
    def verdict(self) -> Verdict:
        return Verdict.DIRTY if self.files_changed > 0 else Verdict.CLEAN

    @property
    def dirty(self) -> bool:
        return self.verdict == Verdict.DIRTY


@dataclass
class ProjectOutcome:
    """Result-or-error for one project; exactly one of result/error is set."""

    entry: ProjectEntry
    result: Optional[StatusResult] = None
    error: Optional[WorkstatError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class WorkspaceOptions:
    """Run options, from the config [options] table and CLI flags."""

    auto_init: bool = True  # create git metadata in untracked directories
    count_untracked: bool = False  # count files git does not know about
    jobs: int = 1  # >1 runs checks on a thread pool
    fail_fast: bool = True  # stop starting checks after the first failure


@dataclass
class WorkspaceConfig:
    """Parsed workspace config file."""

    path: Path
    projects: dict[str, Path] = field(default_factory=dict)
    options: WorkspaceOptions = field(default_factory=WorkspaceOptions)

    def entries(self) -> list[ProjectEntry]:
        """Projects as entries, sorted by name."""
        return [ProjectEntry(name, self.projects[name]) for name in sorted(self.projects)]
