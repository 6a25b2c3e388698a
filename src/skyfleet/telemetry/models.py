"""Telemetry samples and post-flight reports.

A TelemetrySample is a flat, immutable snapshot of a flight at one instant.
A FlightReport summarizes a completed flight from its final FlightState and
the recorded sample history.

Typical usage example:
    from skyfleet.telemetry.models import FlightReport

    report = FlightReport.generate(flight, samples)
    print(report.flight_duration_formatted, report.fuel_efficiency)
"""

import dataclasses
import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import numpy as np

from skyfleet.flight.phase import FlightPhase
from skyfleet.flight.state import (
    METERS_TO_FEET,
    MPS_TO_FPM,
    MPS_TO_KNOTS,
    FlightState,
    format_duration,
)
from skyfleet.physics.geodesy import METERS_PER_NM

REPORT_VERSION = "1.0"


@dataclass(frozen=True)
class TelemetrySample:
    """One recorded instant of a flight.

    Angles are radians, altitude meters, speeds m/s, forces newtons and
    masses kilograms.
    """

    callsign: str
    timestamp: datetime
    elapsed_seconds: float

    latitude: float
    longitude: float
    altitude: float

    heading: float
    pitch: float
    roll: float
    angle_of_attack: float

    true_airspeed: float
    indicated_airspeed: float
    ground_speed: float
    vertical_speed: float
    mach: float

    lift: float
    drag: float
    thrust: float
    lift_to_drag: float

    throttle: float
    fuel_remaining: float
    fuel_flow: float
    gross_weight: float

    phase: FlightPhase
    status: str

    progress: float
    distance_flown: float
    distance_remaining: float

    @classmethod
    def from_flight(cls, flight: FlightState, timestamp: datetime) -> "TelemetrySample":
        """Capture the current state of a flight."""
        return cls(
            callsign=flight.callsign,
            timestamp=timestamp,
            elapsed_seconds=flight.flight_time,
            latitude=flight.current_lat,
            longitude=flight.current_lon,
            altitude=flight.altitude,
            heading=flight.heading,
            pitch=flight.pitch,
            roll=flight.roll,
            angle_of_attack=flight.angle_of_attack,
            true_airspeed=flight.true_airspeed,
            indicated_airspeed=flight.indicated_airspeed,
            ground_speed=flight.ground_speed,
            vertical_speed=flight.vertical_speed,
            mach=flight.mach,
            lift=flight.lift,
            drag=flight.drag,
            thrust=flight.thrust,
            lift_to_drag=flight.lift_to_drag,
            throttle=flight.throttle,
            fuel_remaining=flight.fuel_remaining,
            fuel_flow=flight.fuel_flow,
            gross_weight=flight.gross_weight,
            phase=flight.phase,
            status=flight.status,
            progress=flight.progress,
            distance_flown=flight.distance_flown,
            distance_remaining=flight.distance_remaining,
        )

    @property
    def altitude_feet(self) -> float:
        return self.altitude * METERS_TO_FEET

    @property
    def heading_degrees(self) -> float:
        return (math.degrees(self.heading) + 360.0) % 360.0

    @property
    def vertical_speed_fpm(self) -> float:
        return self.vertical_speed * MPS_TO_FPM

    @property
    def speed_knots(self) -> float:
        return self.true_airspeed * MPS_TO_KNOTS

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        data = dataclasses.asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        data["phase"] = self.phase.value
        return data


@dataclass(frozen=True)
class PhaseRecord:
    """Statistics for one contiguous run of a flight phase.

    Attributes:
        phase: The phase.
        duration_seconds: Flight time spent in the phase.
        distance_covered: Meters flown during the phase.
        fuel_consumed: Kilograms burned during the phase.
        start_altitude: Altitude at the first sample of the phase.
        end_altitude: Altitude at the sample that ended the phase.
    """

    phase: FlightPhase
    duration_seconds: float
    distance_covered: float
    fuel_consumed: float
    start_altitude: float
    end_altitude: float

    @property
    def distance_covered_nm(self) -> float:
        return self.distance_covered / METERS_PER_NM

    @property
    def duration_formatted(self) -> str:
        return format_duration(self.duration_seconds)

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["phase"] = self.phase.value
        data["distance_covered_nm"] = self.distance_covered_nm
        data["duration_formatted"] = self.duration_formatted
        return data


@dataclass
class FlightReport:
    """Post-flight summary.

    Distances are meters (with nautical-mile companions), altitudes meters,
    speeds m/s, vertical rates m/s, fuel kilograms, angles degrees.
    """

    # Identification
    callsign: str
    aircraft_tail: str = ""
    aircraft_model: str = ""
    aircraft_manufacturer: str = ""

    # Route
    origin_code: str = ""
    origin_name: str = ""
    origin_lat: float = 0.0
    origin_lon: float = 0.0
    destination_code: str = ""
    destination_name: str = ""
    destination_lat: float = 0.0
    destination_lon: float = 0.0
    great_circle_distance: float = 0.0
    great_circle_distance_nm: float = 0.0

    # Timing
    departure_time: datetime | None = None
    arrival_time: datetime | None = None
    flight_duration_seconds: float = 0.0
    flight_duration_formatted: str = "00:00:00"

    # Distance
    distance_flown: float = 0.0
    distance_flown_nm: float = 0.0
    route_efficiency: float = 1.0  # great-circle / flown

    # Altitude
    max_altitude: float = 0.0
    max_altitude_feet: float = 0.0
    average_altitude: float = 0.0
    cruise_altitude: float = 0.0

    # Speed
    max_speed: float = 0.0
    max_speed_knots: float = 0.0
    max_mach: float = 0.0
    average_speed: float = 0.0
    average_speed_knots: float = 0.0
    average_mach: float = 0.0

    # Vertical performance
    max_climb_rate: float = 0.0
    max_climb_rate_fpm: float = 0.0
    max_descent_rate: float = 0.0
    max_descent_rate_fpm: float = 0.0
    average_climb_rate: float = 0.0
    average_descent_rate: float = 0.0

    # Fuel
    initial_fuel: float = 0.0
    final_fuel: float = 0.0
    total_fuel_consumed: float = 0.0
    average_fuel_flow: float = 0.0
    fuel_efficiency: float = 0.0  # kg per 100 nm

    # Aerodynamics
    max_lift_to_drag: float = 0.0
    average_lift_to_drag: float = 0.0
    max_angle_of_attack: float = 0.0
    max_bank_angle: float = 0.0

    phase_breakdown: list[PhaseRecord] = field(default_factory=list)

    # Telemetry
    total_samples: int = 0
    sample_interval_seconds: float = 1.0
    telemetry: list[TelemetrySample] = field(default_factory=list)

    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    report_version: str = REPORT_VERSION

    @classmethod
    def generate(cls, flight: FlightState, samples: list[TelemetrySample]) -> "FlightReport":
        """Build a report from a finished flight and its sample history.

        Args:
            flight: Flight state at arrival.
            samples: Recorded samples in chronological order (may be empty).

        Returns:
            The report. Sample-derived statistics stay zero without samples.
        """
        report = cls(
            callsign=flight.callsign,
            aircraft_tail=flight.aircraft_tail,
            aircraft_model=flight.aircraft_model,
            aircraft_manufacturer=flight.aircraft_manufacturer,
            origin_code=flight.origin_code,
            origin_name=flight.origin_name,
            origin_lat=flight.origin_lat,
            origin_lon=flight.origin_lon,
            destination_code=flight.destination_code,
            destination_name=flight.destination_name,
            destination_lat=flight.dest_lat,
            destination_lon=flight.dest_lon,
            great_circle_distance=flight.total_route_distance,
            great_circle_distance_nm=flight.total_route_distance / METERS_PER_NM,
            departure_time=flight.start_time,
            arrival_time=flight.landing_time or datetime.now(UTC),
            flight_duration_seconds=flight.flight_time,
            flight_duration_formatted=format_duration(flight.flight_time),
            distance_flown=flight.distance_flown,
            distance_flown_nm=flight.distance_flown / METERS_PER_NM,
            route_efficiency=(
                flight.total_route_distance / flight.distance_flown
                if flight.distance_flown > 0
                else 1.0
            ),
            max_altitude=flight.max_altitude,
            max_altitude_feet=flight.max_altitude * METERS_TO_FEET,
            average_altitude=flight.average_altitude,
            max_speed=flight.max_speed,
            max_speed_knots=flight.max_speed * MPS_TO_KNOTS,
            max_mach=flight.max_mach,
            average_speed=flight.average_speed,
            average_speed_knots=flight.average_speed * MPS_TO_KNOTS,
            average_mach=flight.average_mach,
            max_climb_rate=flight.max_vertical_speed,
            max_climb_rate_fpm=flight.max_vertical_speed * MPS_TO_FPM,
            initial_fuel=flight.fuel_remaining + flight.fuel_consumed,
            final_fuel=flight.fuel_remaining,
            total_fuel_consumed=flight.fuel_consumed,
            average_fuel_flow=flight.average_fuel_flow,
            total_samples=len(samples),
            telemetry=list(samples),
        )

        if report.distance_flown_nm > 0:
            report.fuel_efficiency = report.total_fuel_consumed / report.distance_flown_nm * 100

        if samples:
            report._apply_sample_statistics(samples)
        return report

    def _apply_sample_statistics(self, samples: list[TelemetrySample]) -> None:
        elapsed = np.array([s.elapsed_seconds for s in samples])
        altitude = np.array([s.altitude for s in samples])
        vertical = np.array([s.vertical_speed for s in samples])
        lift_to_drag = np.array([s.lift_to_drag for s in samples])
        aoa = np.array([s.angle_of_attack for s in samples])
        roll = np.array([s.roll for s in samples])
        phases = np.array([s.phase.value for s in samples])

        if len(samples) > 1:
            self.sample_interval_seconds = float((elapsed[-1] - elapsed[0]) / (len(samples) - 1))

        cruise = altitude[phases == FlightPhase.CRUISE.value]
        self.cruise_altitude = float(cruise.mean()) if cruise.size else 0.0

        self.max_lift_to_drag = float(lift_to_drag.max())
        self.average_lift_to_drag = float(lift_to_drag.mean())
        self.max_angle_of_attack = math.degrees(float(aoa.max()))
        self.max_bank_angle = math.degrees(float(np.abs(roll).max()))

        descending = vertical[vertical < 0]
        self.max_descent_rate = float(np.abs(descending).max()) if descending.size else 0.0
        self.max_descent_rate_fpm = self.max_descent_rate * MPS_TO_FPM

        climb = vertical[(phases == FlightPhase.CLIMB.value) & (vertical > 0)]
        self.average_climb_rate = float(climb.mean()) if climb.size else 0.0

        descent = vertical[(phases == FlightPhase.DESCENT.value) & (vertical < 0)]
        self.average_descent_rate = float(np.abs(descent).mean()) if descent.size else 0.0

        self.phase_breakdown = calculate_phase_breakdown(samples)

    def to_dict(self, include_telemetry: bool = False) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary.

        Args:
            include_telemetry: Include the full sample list (can be large).
        """
        data = {
            f.name: getattr(self, f.name)
            for f in dataclasses.fields(self)
            if f.name not in ("phase_breakdown", "telemetry")
        }
        for key in ("departure_time", "arrival_time", "generated_at"):
            value = data[key]
            data[key] = value.isoformat() if value else None

        data["phase_breakdown"] = [record.to_dict() for record in self.phase_breakdown]
        if include_telemetry:
            data["telemetry"] = [sample.to_dict() for sample in self.telemetry]
        return data


def calculate_phase_breakdown(samples: list[TelemetrySample]) -> list[PhaseRecord]:
    """Split a sample history into contiguous phase runs.

    A run ends at the first sample of the next phase, so the boundary
    sample's distance, fuel and altitude close the previous run.

    Args:
        samples: Samples in chronological order.

    Returns:
        One PhaseRecord per run, in order.
    """
    records: list[PhaseRecord] = []
    if not samples:
        return records

    start = samples[0]
    for sample in samples[1:]:
        if sample.phase is not start.phase:
            records.append(_phase_record(start, sample))
            start = sample

    records.append(_phase_record(start, samples[-1]))
    return records


def _phase_record(start: TelemetrySample, end: TelemetrySample) -> PhaseRecord:
    return PhaseRecord(
        phase=start.phase,
        duration_seconds=end.elapsed_seconds - start.elapsed_seconds,
        distance_covered=end.distance_flown - start.distance_flown,
        fuel_consumed=start.fuel_remaining - end.fuel_remaining,
        start_altitude=start.altitude,
        end_altitude=end.altitude,
    )
