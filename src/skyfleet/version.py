"""Version information for SkyFleet.

This module provides version information from the installed distribution
metadata, with a fallback for source checkouts.
"""

from importlib import metadata

# Version info
__version__ = "0.1.0"  # Fallback version
__license__ = "MIT"


def get_version() -> str:
    """Get the current version string.

    Reads the installed package metadata or falls back to __version__.

    Returns:
        Version string (e.g., "0.1.0").
    """
    try:
        return metadata.version("skyfleet")
    except metadata.PackageNotFoundError:
        return __version__


def get_about_info() -> dict[str, str]:
    """Get complete about information.

    Returns:
        Dictionary with name, version, license and description.
    """
    return {
        "name": "SkyFleet",
        "version": get_version(),
        "license": __license__,
        "description": "Multi-flight dynamics simulator",
    }
