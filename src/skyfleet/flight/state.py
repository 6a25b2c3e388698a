"""Flight state aggregate.

FlightState holds everything the physics engine knows about one flight:
identity and route, phase, kinematics, forces, controls, mass, progress
and running statistics. Angles are radians, distances meters, speeds m/s,
masses kg. Unit-converted views are exposed as read-only properties.
"""

import dataclasses
import math
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from skyfleet.flight.phase import STATUS_WAITING, FlightPhase
from skyfleet.physics import geodesy

METERS_TO_FEET = 3.28084
MPS_TO_FPM = 196.85
MPS_TO_KNOTS = 1.94384

# Fields that Reset restores to their defaults. Identity and route data
# (callsign, endpoints, aircraft, start offset) are never touched.
_RESETTABLE_DEFAULTS: dict[str, Any] = {
    "phase": FlightPhase.PREFLIGHT,
    "status": STATUS_WAITING,
    "altitude": 0.0,
    "pitch": 0.0,
    "roll": 0.0,
    "angle_of_attack": 0.0,
    "true_airspeed": 0.0,
    "indicated_airspeed": 0.0,
    "ground_speed": 0.0,
    "mach": 0.0,
    "vertical_speed": 0.0,
    "lift": 0.0,
    "drag": 0.0,
    "thrust": 0.0,
    "lift_to_drag": 0.0,
    "throttle": 0.0,
    "target_altitude": 0.0,
    "target_speed": 0.0,
    "gross_weight": 0.0,
    "fuel_remaining": 0.0,
    "fuel_consumed": 0.0,
    "fuel_flow": 0.0,
    "progress": 0.0,
    "total_route_distance": 0.0,
    "distance_flown": 0.0,
    "distance_remaining": 0.0,
    "max_altitude": 0.0,
    "max_speed": 0.0,
    "max_mach": 0.0,
    "max_vertical_speed": 0.0,
    "average_speed": 0.0,
    "average_altitude": 0.0,
    "average_mach": 0.0,
    "average_vertical_speed": 0.0,
    "average_fuel_flow": 0.0,
    "total_samples": 0,
    "flight_time": 0.0,
    "time_in_phase": 0.0,
    "landing_time": None,
}


@dataclass
class FlightState:
    """Mutable state of one simulated flight.

    Attributes:
        callsign: Flight identifier (e.g., "BAW117").
        origin_code: Departure airport code.
        destination_code: Arrival airport code.
        origin_lat: Departure latitude in degrees.
        origin_lon: Departure longitude in degrees.
        dest_lat: Arrival latitude in degrees.
        dest_lon: Arrival longitude in degrees.
        start_time: Scheduled start (UTC).
        start_offset_seconds: Start delay relative to simulation start/reset.
        phase: Current flight phase.
        status: Legacy status label derived from phase.
        heading: True heading in radians (0 = north).
        throttle: Throttle setting, 0..1.
        progress: Route progress, 0..1.
    """

    # Identity
    callsign: str
    origin_code: str = ""
    destination_code: str = ""
    origin_name: str = ""
    destination_name: str = ""
    aircraft_tail: str = ""
    aircraft_model: str = ""
    aircraft_manufacturer: str = ""

    # Route
    origin_lat: float = 0.0
    origin_lon: float = 0.0
    dest_lat: float = 0.0
    dest_lon: float = 0.0
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    start_offset_seconds: float = 0.0

    # Phase
    phase: FlightPhase = FlightPhase.PREFLIGHT
    status: str = STATUS_WAITING

    # Position and attitude
    current_lat: float = 0.0
    current_lon: float = 0.0
    altitude: float = 0.0
    heading: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0
    angle_of_attack: float = 0.0

    # Velocities
    true_airspeed: float = 0.0
    indicated_airspeed: float = 0.0
    ground_speed: float = 0.0
    mach: float = 0.0
    vertical_speed: float = 0.0

    # Forces
    lift: float = 0.0
    drag: float = 0.0
    thrust: float = 0.0
    lift_to_drag: float = 0.0

    # Controls / autopilot targets
    throttle: float = 0.0
    target_altitude: float = 0.0
    target_speed: float = 0.0
    target_heading: float = 0.0

    # Mass and fuel
    gross_weight: float = 0.0
    fuel_remaining: float = 0.0
    fuel_consumed: float = 0.0
    fuel_flow: float = 0.0

    # Progress and distances
    progress: float = 0.0
    total_route_distance: float = 0.0
    distance_flown: float = 0.0
    distance_remaining: float = 0.0

    # Running statistics
    max_altitude: float = 0.0
    max_speed: float = 0.0
    max_mach: float = 0.0
    max_vertical_speed: float = 0.0
    average_speed: float = 0.0
    average_altitude: float = 0.0
    average_mach: float = 0.0
    average_vertical_speed: float = 0.0
    average_fuel_flow: float = 0.0
    total_samples: int = 0

    # Timing
    flight_time: float = 0.0
    time_in_phase: float = 0.0
    landing_time: datetime | None = None

    def reset(self, now: datetime) -> None:
        """Reinitialize all mutable fields for a fresh departure.

        The result depends only on ``now``, the route and the start offset,
        so calling it twice with the same ``now`` yields identical state.

        Args:
            now: Current UTC time; the new start is now + start offset.
        """
        for name, value in _RESETTABLE_DEFAULTS.items():
            setattr(self, name, value)

        self.current_lat = self.origin_lat
        self.current_lon = self.origin_lon
        self.heading = geodesy.initial_bearing(
            self.origin_lat, self.origin_lon, self.dest_lat, self.dest_lon
        )
        self.target_heading = self.heading
        self.start_time = now + timedelta(seconds=self.start_offset_seconds)

    def copy(self) -> "FlightState":
        """Independent copy for snapshots. All fields are immutable values."""
        return dataclasses.replace(self)

    def enforce_invariants(self) -> None:
        """Clamp fields to their physical bounds."""
        self.throttle = max(0.0, min(1.0, self.throttle))
        self.altitude = max(0.0, self.altitude)
        self.progress = max(0.0, min(1.0, self.progress))
        self.fuel_remaining = max(0.0, self.fuel_remaining)

    @property
    def is_started(self) -> bool:
        """True once the flight has left PREFLIGHT."""
        return self.phase is not FlightPhase.PREFLIGHT

    @property
    def has_arrived(self) -> bool:
        """True once the flight reached ARRIVED."""
        return self.phase is FlightPhase.ARRIVED

    @property
    def heading_degrees(self) -> float:
        """Heading in degrees, 0-360."""
        return (math.degrees(self.heading) + 360.0) % 360.0

    @property
    def pitch_degrees(self) -> float:
        return math.degrees(self.pitch)

    @property
    def roll_degrees(self) -> float:
        return math.degrees(self.roll)

    @property
    def altitude_feet(self) -> float:
        return self.altitude * METERS_TO_FEET

    @property
    def vertical_speed_fpm(self) -> float:
        return self.vertical_speed * MPS_TO_FPM

    @property
    def speed_knots(self) -> float:
        """True airspeed in knots."""
        return self.true_airspeed * MPS_TO_KNOTS

    @property
    def flight_time_formatted(self) -> str:
        """Flight time as HH:MM:SS."""
        return format_duration(self.flight_time)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        data = dataclasses.asdict(self)
        data["phase"] = self.phase.value
        data["start_time"] = self.start_time.isoformat()
        data["landing_time"] = self.landing_time.isoformat() if self.landing_time else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FlightState":
        """Rebuild a flight from to_dict() output. Unknown keys are ignored.

        Raises:
            ValueError: If callsign is missing or phase is unknown.
        """
        if not data.get("callsign"):
            raise ValueError("callsign required for flight state")

        names = {f.name for f in dataclasses.fields(cls)}
        values = {key: value for key, value in data.items() if key in names}
        if "phase" in values:
            values["phase"] = FlightPhase(values["phase"])
        for key in ("start_time", "landing_time"):
            if isinstance(values.get(key), str):
                values[key] = datetime.fromisoformat(values[key])
        return cls(**values)


def format_duration(seconds: float) -> str:
    """Format seconds as HH:MM:SS."""
    total = int(max(0.0, seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
