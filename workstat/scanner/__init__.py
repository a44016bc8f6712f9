"""Working tree scanner — per-project git status checks."""

from .repo import check_project, compute_status, ensure_tracked

__all__ = ["check_project", "compute_status", "ensure_tracked"]
