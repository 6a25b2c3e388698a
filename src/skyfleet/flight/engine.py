"""Phase-based flight physics engine.

Advances a FlightState by a time step using the point-mass model: each
phase has its own handler that flies the aircraft like a simple autopilot
and returns the next phase, then the cross-cutting steps (aerodynamic
forces, fuel burn, great-circle position, distances, statistics) run for
every phase.

Typical usage example:
    from skyfleet.flight.engine import FlightPhysicsEngine

    engine = FlightPhysicsEngine()
    engine.add_transition_listener(on_phase_change)
    engine.advance(flight, dt=5.0)
"""

import math
from collections.abc import Callable
from datetime import UTC, datetime

from skyfleet.aircraft.performance import AircraftPerformanceCatalog, get_catalog
from skyfleet.aircraft.profile import AircraftPerformanceProfile
from skyfleet.core.logging_system import get_logger
from skyfleet.flight.phase import FlightPhase, can_transition, status_for_phase
from skyfleet.flight.state import FlightState
from skyfleet.physics import aerodynamics, atmosphere, geodesy
from skyfleet.physics.atmosphere import GRAVITY

logger = get_logger(__name__)

# Preflight
INITIAL_FUEL_FRACTION = 0.70
SHORT_HAUL_ALTITUDE = 8000.0  # m

# Takeoff
ROLLING_FRICTION = 0.02  # paved runway
MAX_GROUND_ACCELERATION = 4.0  # m/s²
V2_FACTOR = 1.2  # V2 = 1.2 * VS0
ROTATE_FACTOR = 0.9  # Vr = 0.9 * V2
PITCH_UP_RATE = 0.02  # rad/s
MAX_TAKEOFF_PITCH = 0.15  # rad, ~8.6°
INITIAL_CLIMB_RATE = 10.0  # m/s, ~2000 fpm
CLIMB_TRANSITION_ALTITUDE = 450.0  # m, ~1500 ft

# Climb
CLIMB_SPEED_FACTOR = 0.9
CLIMB_THROTTLE = 0.95
CLIMB_ACCELERATION = 2.0  # m/s²
CEILING_CLIMB_REDUCTION = 0.6
MAX_CLIMB_GRADIENT = 0.15
CLIMB_AOA_FACTOR = 0.7
CRUISE_CAPTURE_FRACTION = 0.98

# Cruise
CRUISE_ACCELERATION = 1.0  # m/s²
MIN_CRUISE_THROTTLE = 0.3
MAX_CRUISE_THROTTLE = 0.9

# Descent
DESCENT_THROTTLE = 0.1
GLIDE_GRADIENT = 0.052  # ~3°
DESCENT_SPEED_FACTOR = 1.5  # bleed toward 1.5 * VS0
DESCENT_SPEED_BLEED = 0.01  # fraction of excess per second
DESCENT_AOA = 0.05
APPROACH_ALTITUDE = 900.0  # m, ~3000 ft
APPROACH_DISTANCE = 92600.0  # m, 50 nm

# Approach
APPROACH_THROTTLE = 0.25
VREF_FACTOR = 1.3
VREF_ADDITIVE = 5.0  # m/s
APPROACH_ACCELERATION = 2.0  # m/s²
APPROACH_AOA = 0.08
LANDING_ALTITUDE = 60.0  # m, ~200 ft

# Landing
FLARE_MIN_VERTICAL_SPEED = -2.0  # m/s
FLARE_PITCH = 0.05
LANDING_DECELERATION = 3.0  # m/s²

# Navigation
MAX_TURN_RATE = 0.05  # rad/s, ~3°/s
MAX_ROLL = 0.44  # rad, ~25°
MIN_TURN = 0.001  # rad

# Force model is only meaningful above this airspeed
MIN_AERO_AIRSPEED = 10.0  # m/s

TransitionListener = Callable[[FlightState, FlightPhase, FlightPhase], None]
PhaseHandler = Callable[[FlightState, AircraftPerformanceProfile, float, datetime], FlightPhase]


def _approach(current: float, target: float, max_step: float) -> float:
    """Move current toward target by at most max_step."""
    diff = target - current
    return current + math.copysign(min(abs(diff), max_step), diff)


class FlightPhysicsEngine:
    """Advances flights through the phase state machine.

    The engine holds no per-flight state; everything lives in the
    FlightState passed to advance(), so one engine serves every flight.
    """

    def __init__(self, catalog: AircraftPerformanceCatalog | None = None) -> None:
        """Initialize the engine.

        Args:
            catalog: Performance catalog. Defaults to the packaged catalog.
        """
        self.catalog = catalog or get_catalog()
        self._listeners: list[TransitionListener] = []
        self._handlers: dict[FlightPhase, PhaseHandler] = {
            FlightPhase.PREFLIGHT: self._update_preflight,
            FlightPhase.TAXI: self._update_taxi,
            FlightPhase.TAKEOFF: self._update_takeoff,
            FlightPhase.CLIMB: self._update_climb,
            FlightPhase.CRUISE: self._update_cruise,
            FlightPhase.DESCENT: self._update_descent,
            FlightPhase.APPROACH: self._update_approach,
            FlightPhase.LANDING: self._update_landing,
            FlightPhase.ARRIVED: self._update_arrived,
        }

    def add_transition_listener(self, listener: TransitionListener) -> None:
        """Register a callback invoked as listener(flight, old, new)."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_transition_listener(self, listener: TransitionListener) -> None:
        """Unregister a transition callback."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def advance(self, flight: FlightState, dt: float, now: datetime | None = None) -> FlightPhase:
        """Advance a flight by one simulated time step.

        Args:
            flight: Flight to mutate in place.
            dt: Simulated seconds (real seconds × speed multiplier).
            now: Current UTC time, used for the scheduled start and the
                landing timestamp. Defaults to the system clock.

        Returns:
            The flight's phase after the step.
        """
        if dt <= 0 or flight.phase is FlightPhase.ARRIVED:
            return flight.phase

        now = now or datetime.now(UTC)
        profile = self.catalog.profile_for_flight(flight)

        if flight.phase is not FlightPhase.PREFLIGHT:
            flight.flight_time += dt
            flight.time_in_phase += dt

        next_phase = self._handlers[flight.phase](flight, profile, dt, now)
        if next_phase is not flight.phase:
            self.transition(flight, next_phase)

        self._update_forces(flight, profile)
        self._burn_fuel(flight, profile, dt)
        self._update_position(flight, dt)
        self._update_distances(flight)
        self._update_statistics(flight)

        flight.status = status_for_phase(flight.phase)
        flight.enforce_invariants()
        return flight.phase

    def transition(self, flight: FlightState, new_phase: FlightPhase) -> None:
        """Move a flight to a later phase and notify listeners.

        Raises:
            ValueError: If new_phase does not come after the current phase.
        """
        old_phase = flight.phase
        if not can_transition(old_phase, new_phase):
            raise ValueError(
                f"{flight.callsign}: invalid transition {old_phase.name} -> {new_phase.name}"
            )

        flight.phase = new_phase
        flight.time_in_phase = 0.0
        logger.debug("%s: %s -> %s", flight.callsign, old_phase.name, new_phase.name)

        for listener in self._listeners:
            listener(flight, old_phase, new_phase)

    # -- Phase handlers -------------------------------------------------------

    def _update_preflight(
        self, flight: FlightState, profile: AircraftPerformanceProfile, dt: float, now: datetime
    ) -> FlightPhase:
        if flight.gross_weight <= 0:
            flight.fuel_remaining = profile.max_fuel * INITIAL_FUEL_FRACTION
            flight.gross_weight = profile.empty_weight + flight.fuel_remaining

        flight.total_route_distance = geodesy.great_circle_distance(
            flight.origin_lat, flight.origin_lon, flight.dest_lat, flight.dest_lon
        )
        flight.target_altitude = cruise_altitude_for_distance(
            profile, flight.total_route_distance
        )
        flight.target_speed = atmosphere.mach_to_tas(profile.cruise_mach, flight.target_altitude)

        if now >= flight.start_time:
            return FlightPhase.TAKEOFF
        return FlightPhase.PREFLIGHT

    def _update_taxi(
        self, flight: FlightState, profile: AircraftPerformanceProfile, dt: float, now: datetime
    ) -> FlightPhase:
        # Reserved phase: a record restored in TAXI lines up and departs
        flight.ground_speed = 0.0
        flight.true_airspeed = 0.0
        return FlightPhase.TAKEOFF

    def _update_takeoff(
        self, flight: FlightState, profile: AircraftPerformanceProfile, dt: float, now: datetime
    ) -> FlightPhase:
        flight.throttle = 1.0

        v2 = profile.vs0 * V2_FACTOR
        v_rotate = v2 * ROTATE_FACTOR

        atm = atmosphere.get_atmosphere(flight.altitude)
        flight.thrust = (
            profile.max_thrust_sea_level
            * atm.density_ratio**profile.thrust_lapse_rate
            * flight.throttle
        )

        weight = flight.gross_weight * GRAVITY
        rolling_drag = ROLLING_FRICTION * weight
        dynamic_pressure = 0.5 * atm.density * flight.ground_speed * flight.ground_speed
        flight.drag = rolling_drag + dynamic_pressure * profile.wing_area * profile.cd0

        if flight.ground_speed < v_rotate:
            # Ground roll
            acceleration = (flight.thrust - flight.drag) / flight.gross_weight
            acceleration = max(0.0, min(acceleration, MAX_GROUND_ACCELERATION))
            flight.ground_speed += acceleration * dt
            flight.true_airspeed = flight.ground_speed
            flight.altitude = 0.0
            flight.pitch = 0.0
            flight.fuel_flow = flight.thrust * profile.tsfc
        else:
            # Rotate and fly the initial climb at V2
            flight.pitch = min(flight.pitch + PITCH_UP_RATE * dt, MAX_TAKEOFF_PITCH)
            flight.angle_of_attack = flight.pitch
            flight.true_airspeed = v2
            flight.ground_speed = v2
            flight.vertical_speed = INITIAL_CLIMB_RATE
            flight.altitude += flight.vertical_speed * dt
            flight.mach = flight.true_airspeed / atm.speed_of_sound
            flight.indicated_airspeed = atmosphere.tas_to_ias(
                flight.true_airspeed, flight.altitude
            )

        if flight.altitude > CLIMB_TRANSITION_ALTITUDE:
            return FlightPhase.CLIMB
        return FlightPhase.TAKEOFF

    def _update_climb(
        self, flight: FlightState, profile: AircraftPerformanceProfile, dt: float, now: datetime
    ) -> FlightPhase:
        climb_speed = (
            aerodynamics.best_cruise_speed(profile, flight.altitude, flight.gross_weight)
            * CLIMB_SPEED_FACTOR
        )
        flight.true_airspeed = _approach(
            flight.true_airspeed, climb_speed, CLIMB_ACCELERATION * dt
        )
        flight.throttle = CLIMB_THROTTLE

        max_climb = aerodynamics.max_climb_rate(
            profile, flight.true_airspeed, flight.altitude, flight.gross_weight, flight.throttle
        )
        altitude_factor = max(
            0.0, 1.0 - (flight.altitude / profile.service_ceiling) * CEILING_CLIMB_REDUCTION
        )
        flight.vertical_speed = min(max_climb, profile.max_climb_rate) * altitude_factor
        flight.altitude += flight.vertical_speed * dt

        if flight.true_airspeed > 0:
            flight.pitch = math.asin(
                min(flight.vertical_speed / flight.true_airspeed, MAX_CLIMB_GRADIENT)
            )
        else:
            flight.pitch = 0.0
        flight.angle_of_attack = flight.pitch * CLIMB_AOA_FACTOR
        flight.ground_speed = flight.true_airspeed * math.cos(flight.pitch)

        self._steer_towards_destination(flight, dt)

        next_phase = FlightPhase.CLIMB
        if flight.altitude >= flight.target_altitude * CRUISE_CAPTURE_FRACTION:
            flight.altitude = flight.target_altitude
            next_phase = FlightPhase.CRUISE

        if flight.distance_remaining <= geodesy.top_of_descent_distance(flight.altitude):
            next_phase = FlightPhase.DESCENT

        return next_phase

    def _update_cruise(
        self, flight: FlightState, profile: AircraftPerformanceProfile, dt: float, now: datetime
    ) -> FlightPhase:
        flight.vertical_speed = 0.0
        flight.altitude = flight.target_altitude
        flight.pitch = 0.0

        flight.true_airspeed = _approach(
            flight.true_airspeed, flight.target_speed, CRUISE_ACCELERATION * dt
        )

        # Match last tick's drag with the thrust available at altitude
        max_thrust = aerodynamics.available_thrust(profile, flight.altitude)
        required = flight.drag / max_thrust if max_thrust > 0 else MAX_CRUISE_THROTTLE
        flight.throttle = max(MIN_CRUISE_THROTTLE, min(required, MAX_CRUISE_THROTTLE))

        flight.angle_of_attack = aerodynamics.level_flight_aoa(
            profile, flight.true_airspeed, flight.altitude, flight.gross_weight
        )
        flight.ground_speed = flight.true_airspeed

        self._steer_towards_destination(flight, dt)

        if flight.distance_remaining <= geodesy.top_of_descent_distance(flight.altitude):
            return FlightPhase.DESCENT
        return FlightPhase.CRUISE

    def _update_descent(
        self, flight: FlightState, profile: AircraftPerformanceProfile, dt: float, now: datetime
    ) -> FlightPhase:
        flight.throttle = DESCENT_THROTTLE

        target_rate = flight.true_airspeed * GLIDE_GRADIENT
        flight.vertical_speed = -min(target_rate, profile.max_descent_rate)
        flight.altitude = max(0.0, flight.altitude + flight.vertical_speed * dt)

        approach_speed = profile.vs0 * DESCENT_SPEED_FACTOR
        flight.true_airspeed -= (flight.true_airspeed - approach_speed) * DESCENT_SPEED_BLEED * dt
        flight.true_airspeed = max(flight.true_airspeed, approach_speed)

        flight.pitch = -GLIDE_GRADIENT
        flight.angle_of_attack = DESCENT_AOA
        flight.ground_speed = flight.true_airspeed * math.cos(abs(flight.pitch))

        self._steer_towards_destination(flight, dt)

        if flight.altitude <= APPROACH_ALTITUDE or flight.distance_remaining <= APPROACH_DISTANCE:
            return FlightPhase.APPROACH
        return FlightPhase.DESCENT

    def _update_approach(
        self, flight: FlightState, profile: AircraftPerformanceProfile, dt: float, now: datetime
    ) -> FlightPhase:
        flight.throttle = APPROACH_THROTTLE

        target_speed = profile.vs1 * VREF_FACTOR + VREF_ADDITIVE
        flight.true_airspeed = _approach(
            flight.true_airspeed, target_speed, APPROACH_ACCELERATION * dt
        )

        flight.vertical_speed = -flight.true_airspeed * GLIDE_GRADIENT
        flight.altitude = max(0.0, flight.altitude + flight.vertical_speed * dt)

        flight.pitch = -GLIDE_GRADIENT
        flight.angle_of_attack = APPROACH_AOA
        flight.ground_speed = flight.true_airspeed * math.cos(abs(flight.pitch))

        self._steer_towards_destination(flight, dt)

        if flight.altitude <= LANDING_ALTITUDE:
            return FlightPhase.LANDING
        return FlightPhase.APPROACH

    def _update_landing(
        self, flight: FlightState, profile: AircraftPerformanceProfile, dt: float, now: datetime
    ) -> FlightPhase:
        flight.throttle = 0.0

        if flight.altitude > 0:
            # Flare
            flight.vertical_speed = max(flight.vertical_speed, FLARE_MIN_VERTICAL_SPEED)
            flight.pitch = FLARE_PITCH
            flight.altitude = max(0.0, flight.altitude + flight.vertical_speed * dt)
            return FlightPhase.LANDING

        # Rollout
        flight.altitude = 0.0
        flight.vertical_speed = 0.0
        flight.pitch = 0.0
        flight.ground_speed -= LANDING_DECELERATION * dt
        flight.true_airspeed = flight.ground_speed

        if flight.ground_speed <= 0:
            flight.ground_speed = 0.0
            flight.true_airspeed = 0.0
            flight.landing_time = now
            return FlightPhase.ARRIVED
        return FlightPhase.LANDING

    def _update_arrived(
        self, flight: FlightState, profile: AircraftPerformanceProfile, dt: float, now: datetime
    ) -> FlightPhase:
        return FlightPhase.ARRIVED

    # -- Cross-cutting steps --------------------------------------------------

    def _update_forces(self, flight: FlightState, profile: AircraftPerformanceProfile) -> None:
        if flight.true_airspeed <= MIN_AERO_AIRSPEED or flight.altitude <= 0:
            return

        forces = aerodynamics.calculate_forces(
            profile,
            flight.true_airspeed,
            flight.altitude,
            flight.gross_weight,
            flight.angle_of_attack,
            flight.throttle,
            flaps_extended=flight.phase in (FlightPhase.APPROACH, FlightPhase.LANDING),
        )
        flight.lift = forces.lift
        flight.drag = forces.drag
        flight.thrust = forces.thrust
        flight.lift_to_drag = forces.lift_to_drag
        flight.mach = forces.mach
        flight.indicated_airspeed = forces.indicated_airspeed
        flight.fuel_flow = forces.fuel_flow

    def _burn_fuel(
        self, flight: FlightState, profile: AircraftPerformanceProfile, dt: float
    ) -> None:
        if flight.throttle <= 0 or flight.fuel_remaining <= 0:
            return

        burned = min(flight.fuel_flow * dt, flight.fuel_remaining)
        flight.fuel_remaining = max(0.0, flight.fuel_remaining - burned)
        flight.fuel_consumed += burned
        flight.gross_weight = profile.empty_weight + flight.fuel_remaining

    def _update_position(self, flight: FlightState, dt: float) -> None:
        if flight.ground_speed <= 0:
            return

        distance = flight.ground_speed * dt
        flight.current_lat, flight.current_lon = geodesy.destination_point(
            flight.current_lat, flight.current_lon, flight.heading, distance
        )
        flight.distance_flown += distance

    def _update_distances(self, flight: FlightState) -> None:
        flight.distance_remaining = geodesy.great_circle_distance(
            flight.current_lat, flight.current_lon, flight.dest_lat, flight.dest_lon
        )
        if flight.total_route_distance > 0:
            progress = 1.0 - flight.distance_remaining / flight.total_route_distance
            flight.progress = max(0.0, min(1.0, progress))

    def _update_statistics(self, flight: FlightState) -> None:
        flight.total_samples += 1
        n = flight.total_samples
        vertical = abs(flight.vertical_speed)

        flight.max_altitude = max(flight.max_altitude, flight.altitude)
        flight.max_speed = max(flight.max_speed, flight.true_airspeed)
        flight.max_mach = max(flight.max_mach, flight.mach)
        flight.max_vertical_speed = max(flight.max_vertical_speed, vertical)

        flight.average_speed += (flight.true_airspeed - flight.average_speed) / n
        flight.average_altitude += (flight.altitude - flight.average_altitude) / n
        flight.average_mach += (flight.mach - flight.average_mach) / n
        flight.average_vertical_speed += (vertical - flight.average_vertical_speed) / n
        flight.average_fuel_flow += (flight.fuel_flow - flight.average_fuel_flow) / n

    def _steer_towards_destination(self, flight: FlightState, dt: float) -> None:
        """Turn toward the destination at a capped rate and derive bank."""
        bearing = geodesy.initial_bearing(
            flight.current_lat, flight.current_lon, flight.dest_lat, flight.dest_lon
        )
        heading_diff = geodesy.normalize_angle(bearing - flight.heading)
        turn = math.copysign(min(abs(heading_diff), MAX_TURN_RATE * dt), heading_diff)
        flight.heading = geodesy.normalize_angle(flight.heading + turn)

        if abs(turn) > MIN_TURN and flight.true_airspeed > 0:
            roll = aerodynamics.bank_angle(flight.true_airspeed, turn / dt)
            flight.roll = max(-MAX_ROLL, min(roll, MAX_ROLL))
        else:
            flight.roll = 0.0

        flight.target_heading = bearing


def cruise_altitude_for_distance(profile: AircraftPerformanceProfile, distance: float) -> float:
    """Target cruise altitude for a route length.

    Args:
        profile: Aircraft performance profile.
        distance: Great-circle route distance in meters.

    Returns:
        Cruise altitude in meters: full cruise altitude above 3000 nm,
        95% above 1500 nm, 85% above 500 nm, else a short-haul 8000 m.
    """
    distance_nm = distance / geodesy.METERS_PER_NM
    if distance_nm > 3000:
        return profile.cruise_altitude
    if distance_nm > 1500:
        return profile.cruise_altitude * 0.95
    if distance_nm > 500:
        return profile.cruise_altitude * 0.85
    return SHORT_HAUL_ALTITUDE
