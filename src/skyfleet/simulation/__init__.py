"""Simulation scheduling and persistence."""

from skyfleet.simulation.repository import (
    FlightRepository,
    HttpFlightRepository,
    InMemoryFlightRepository,
    PersistenceError,
)
from skyfleet.simulation.scheduler import SimulationScheduler

__all__ = [
    "FlightRepository",
    "HttpFlightRepository",
    "InMemoryFlightRepository",
    "PersistenceError",
    "SimulationScheduler",
]
