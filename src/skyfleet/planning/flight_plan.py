"""Flight planning.

Builds FlightState records from airport definitions, an aircraft
assignment and a start offset. The initial heading is the great-circle
bearing from origin to destination.

Typical usage:
    from skyfleet.planning import Airport, plan_flight

    lhr = Airport("LHR", "London Heathrow", 51.4700, -0.4543)
    jfk = Airport("JFK", "New York JFK", 40.6413, -73.7781)
    flight = plan_flight("BAW117", lhr, jfk, "A350-900", "Airbus")
"""

import math
from dataclasses import dataclass
from datetime import UTC, datetime

from skyfleet.flight.state import FlightState
from skyfleet.physics import geodesy


@dataclass(frozen=True)
class Airport:
    """Airport reference point.

    Attributes:
        code: Airport code (e.g., "LHR").
        name: Display name.
        lat: Latitude in degrees.
        lon: Longitude in degrees.
    """

    code: str
    name: str
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not self.code:
            raise ValueError("airport code required")
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"{self.code}: latitude {self.lat} out of range")
        if not -180.0 <= self.lon <= 180.0:
            raise ValueError(f"{self.code}: longitude {self.lon} out of range")


@dataclass(frozen=True)
class FlightPlan:
    """Route and aircraft assignment of one flight."""

    callsign: str
    origin: Airport
    destination: Airport
    aircraft_model: str
    aircraft_manufacturer: str = ""
    aircraft_tail: str = ""
    start_offset_seconds: float = 0.0

    @property
    def distance(self) -> float:
        """Great-circle route length in meters."""
        return geodesy.great_circle_distance(
            self.origin.lat, self.origin.lon, self.destination.lat, self.destination.lon
        )

    @property
    def distance_nm(self) -> float:
        return self.distance / geodesy.METERS_PER_NM

    @property
    def initial_bearing(self) -> float:
        """Departure great-circle bearing in radians."""
        return geodesy.initial_bearing(
            self.origin.lat, self.origin.lon, self.destination.lat, self.destination.lon
        )

    def waypoints(self, count: int) -> list[tuple[float, float]]:
        """Evenly spaced points along the great-circle track.

        Args:
            count: Number of points including both endpoints (at least 2).

        Returns:
            (lat, lon) pairs in degrees from origin to destination.
        """
        if count < 2:
            raise ValueError("waypoint count must be at least 2")

        return [
            geodesy.intermediate_point(
                self.origin.lat,
                self.origin.lon,
                self.destination.lat,
                self.destination.lon,
                i / (count - 1),
            )
            for i in range(count)
        ]

    def to_flight_state(self, now: datetime | None = None) -> FlightState:
        """Create the initial FlightState for this plan.

        Args:
            now: Simulation start; the flight starts at now + offset.
        """
        flight = FlightState(
            callsign=self.callsign,
            origin_code=self.origin.code,
            destination_code=self.destination.code,
            origin_name=self.origin.name,
            destination_name=self.destination.name,
            aircraft_tail=self.aircraft_tail,
            aircraft_model=self.aircraft_model,
            aircraft_manufacturer=self.aircraft_manufacturer,
            origin_lat=self.origin.lat,
            origin_lon=self.origin.lon,
            dest_lat=self.destination.lat,
            dest_lon=self.destination.lon,
            start_offset_seconds=self.start_offset_seconds,
        )
        flight.reset(now or datetime.now(UTC))
        return flight


def plan_flight(
    callsign: str,
    origin: Airport,
    destination: Airport,
    aircraft_model: str,
    aircraft_manufacturer: str = "",
    aircraft_tail: str = "",
    start_offset_seconds: float = 0.0,
    now: datetime | None = None,
) -> FlightState:
    """Build a ready-to-schedule flight.

    Args:
        callsign: Flight identifier.
        origin: Departure airport.
        destination: Arrival airport.
        aircraft_model: Aircraft model (e.g., "A350-900").
        aircraft_manufacturer: Aircraft manufacturer (e.g., "Airbus").
        aircraft_tail: Registration.
        start_offset_seconds: Delay of the departure after ``now``.
        now: Simulation start. Defaults to the current UTC time.

    Returns:
        FlightState in PREFLIGHT positioned at the origin.

    Raises:
        ValueError: If callsign is empty, the offset is negative, or origin
            and destination coincide.
    """
    if not callsign.strip():
        raise ValueError("callsign required")
    if start_offset_seconds < 0 or math.isnan(start_offset_seconds):
        raise ValueError(f"{callsign}: start offset must be non-negative")
    if origin.code == destination.code:
        raise ValueError(f"{callsign}: origin and destination are both {origin.code}")

    plan = FlightPlan(
        callsign=callsign.strip(),
        origin=origin,
        destination=destination,
        aircraft_model=aircraft_model,
        aircraft_manufacturer=aircraft_manufacturer,
        aircraft_tail=aircraft_tail,
        start_offset_seconds=start_offset_seconds,
    )
    return plan.to_flight_state(now)
