"""dirguard: rule-driven directory scanner with composable pass/fail policies."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("dirguard")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0-dev"

__all__ = ["__version__"]
