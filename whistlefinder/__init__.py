"""WhistleFinder Python package: listen for a sustained whistle and raise an alarm."""

from importlib.metadata import version, PackageNotFoundError

__all__ = [
    "get_version",
]


def get_version() -> str:
    """Return package version if installed as distribution."""
    try:
        return version("whistlefinder")
    except PackageNotFoundError:
        return "0.0.0"
