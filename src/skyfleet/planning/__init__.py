"""Flight planning: airports, routes and initial flight state."""

from skyfleet.planning.flight_plan import Airport, FlightPlan, plan_flight

__all__ = ["Airport", "FlightPlan", "plan_flight"]
