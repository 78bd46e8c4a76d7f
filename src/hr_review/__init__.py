"""Top-level package for the heart-rate session review toolkit."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("hr-review")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"


__all__ = ["__version__"]
