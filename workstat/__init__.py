"""workstat — uncommitted-change status across many local checkouts."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("workstat")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"
