"""Error types raised by config loading and status checks."""


class WorkstatError(Exception):
    """Base class for every error workstat reports."""


class ConfigUnavailable(WorkstatError):
    """Config file could not be located, read or parsed."""


class TreeOpenFailed(WorkstatError):
    """Working tree path is inaccessible or metadata could not be created."""


class NotTracked(WorkstatError):
    """Path has no git metadata and initialization was not requested."""


class DiffComputeFailed(WorkstatError):
    """Index vs working directory comparison failed."""
