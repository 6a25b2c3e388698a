"""Flight state, phases and the physics engine."""

from skyfleet.flight.engine import FlightPhysicsEngine, cruise_altitude_for_distance
from skyfleet.flight.phase import FlightPhase, can_transition, status_for_phase
from skyfleet.flight.state import FlightState, format_duration

__all__ = [
    "FlightPhase",
    "FlightPhysicsEngine",
    "FlightState",
    "can_transition",
    "cruise_altitude_for_distance",
    "format_duration",
    "status_for_phase",
]
