"""SkyFleet - Multi-flight dynamics simulator."""

from skyfleet.version import __version__

__all__ = ["__version__"]
