"""User settings management for SkyFleet.

This package provides persistent settings for the simulation scheduler,
telemetry recorder and persistence adapters.
"""

from skyfleet.settings.simulation_settings import (
    DEFAULT_SETTINGS_PATH,
    SimulationSettings,
    get_simulation_settings,
    reset_simulation_settings,
)

__all__ = [
    "DEFAULT_SETTINGS_PATH",
    "SimulationSettings",
    "get_simulation_settings",
    "reset_simulation_settings",
]
