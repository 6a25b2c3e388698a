"""Core infrastructure shared by all SkyFleet packages."""

from skyfleet.core.logging_system import get_logger, initialize_logging

__all__ = ["get_logger", "initialize_logging"]
