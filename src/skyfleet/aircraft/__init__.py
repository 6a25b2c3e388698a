"""Aircraft performance data."""

from skyfleet.aircraft.performance import (
    DEFAULT_AIRCRAFT,
    AircraftPerformanceCatalog,
    get_catalog,
    reset_catalog,
)
from skyfleet.aircraft.profile import AircraftPerformanceProfile

__all__ = [
    "AircraftPerformanceCatalog",
    "AircraftPerformanceProfile",
    "DEFAULT_AIRCRAFT",
    "get_catalog",
    "reset_catalog",
]
