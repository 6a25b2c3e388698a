"""Tests for telemetry samples and flight reports."""

from datetime import UTC, datetime, timedelta

import pytest

from skyfleet.flight.phase import FlightPhase
from skyfleet.flight.state import FlightState
from skyfleet.physics.geodesy import METERS_PER_NM
from skyfleet.telemetry.models import (
    FlightReport,
    TelemetrySample,
    calculate_phase_breakdown,
)

T0 = datetime(2025, 6, 1, 8, 0, tzinfo=UTC)

# (phase, elapsed s, altitude m, vertical speed m/s, distance m, fuel kg, L/D, roll rad)
PROFILE = [
    (FlightPhase.TAKEOFF, 0.0, 0.0, 0.0, 0.0, 100000.0, 0.0, 0.0),
    (FlightPhase.CLIMB, 60.0, 500.0, 12.0, 6000.0, 99500.0, 14.0, 0.1),
    (FlightPhase.CLIMB, 120.0, 1200.0, 10.0, 18000.0, 99000.0, 15.0, -0.2),
    (FlightPhase.CRUISE, 180.0, 11000.0, 0.0, 30000.0, 98600.0, 18.0, 0.0),
    (FlightPhase.CRUISE, 240.0, 11200.0, 0.0, 45000.0, 98300.0, 19.0, 0.0),
    (FlightPhase.DESCENT, 300.0, 9000.0, -14.0, 60000.0, 98200.0, 16.0, 0.0),
    (FlightPhase.APPROACH, 360.0, 500.0, -4.0, 70000.0, 98100.0, 9.0, 0.0),
]


def make_samples() -> list[TelemetrySample]:
    """Synthetic sample history covering several phases."""
    flight = FlightState(callsign="TEST1")
    samples = []
    for phase, elapsed, altitude, vs, distance, fuel, ld, roll in PROFILE:
        flight.phase = phase
        flight.flight_time = elapsed
        flight.altitude = altitude
        flight.vertical_speed = vs
        flight.distance_flown = distance
        flight.fuel_remaining = fuel
        flight.lift_to_drag = ld
        flight.roll = roll
        flight.angle_of_attack = 0.05
        samples.append(TelemetrySample.from_flight(flight, T0 + timedelta(seconds=elapsed)))
    return samples


@pytest.fixture
def arrived_flight() -> FlightState:
    """Flight state at arrival."""
    return FlightState(
        callsign="TEST1",
        origin_code="AAA",
        destination_code="BBB",
        aircraft_model="A350-900",
        aircraft_manufacturer="Airbus",
        start_time=T0,
        phase=FlightPhase.ARRIVED,
        landing_time=T0 + timedelta(hours=2),
        flight_time=7200.0,
        total_route_distance=900.0 * METERS_PER_NM,
        distance_flown=1000.0 * METERS_PER_NM,
        fuel_remaining=80000.0,
        fuel_consumed=20000.0,
        max_altitude=11200.0,
        max_speed=250.0,
        max_vertical_speed=14.0,
    )


class TestTelemetrySample:
    """Tests for TelemetrySample."""

    def test_from_flight(self) -> None:
        """Test a sample copies state and converts units."""
        flight = FlightState(callsign="TEST1", altitude=1000.0, true_airspeed=100.0)
        flight.phase = FlightPhase.CLIMB
        flight.flight_time = 42.0

        sample = TelemetrySample.from_flight(flight, T0)

        assert sample.elapsed_seconds == 42.0
        assert sample.altitude_feet == pytest.approx(3280.84)
        assert sample.speed_knots == pytest.approx(194.384)
        assert sample.to_dict()["phase"] == "climb"
        assert sample.to_dict()["timestamp"] == T0.isoformat()

        flight.altitude = 2000.0
        assert sample.altitude == 1000.0


class TestPhaseBreakdown:
    """Tests for calculate_phase_breakdown()."""

    def test_empty(self) -> None:
        """Test no samples gives no records."""
        assert calculate_phase_breakdown([]) == []

    def test_contiguous_runs(self) -> None:
        """Test each phase run closes at the first sample of the next phase."""
        records = calculate_phase_breakdown(make_samples())

        assert [r.phase for r in records] == [
            FlightPhase.TAKEOFF,
            FlightPhase.CLIMB,
            FlightPhase.CRUISE,
            FlightPhase.DESCENT,
            FlightPhase.APPROACH,
        ]

        climb = records[1]
        assert climb.duration_seconds == 120.0
        assert climb.distance_covered == 24000.0
        assert climb.fuel_consumed == 900.0
        assert climb.start_altitude == 500.0
        assert climb.end_altitude == 11000.0

        assert records[-1].duration_seconds == 0.0
        assert records[0].to_dict()["phase"] == "takeoff"
        assert climb.duration_formatted == "00:02:00"

    def test_single_sample(self) -> None:
        """Test one sample gives one zero-length record."""
        records = calculate_phase_breakdown(make_samples()[:1])

        assert len(records) == 1
        assert records[0].duration_seconds == 0.0


class TestFlightReport:
    """Tests for FlightReport.generate()."""

    def test_summary_from_flight(self, arrived_flight: FlightState) -> None:
        """Test route, timing, distance and fuel figures."""
        report = FlightReport.generate(arrived_flight, [])

        assert report.callsign == "TEST1"
        assert report.departure_time == T0
        assert report.arrival_time == T0 + timedelta(hours=2)
        assert report.flight_duration_formatted == "02:00:00"
        assert report.great_circle_distance_nm == pytest.approx(900.0)
        assert report.distance_flown_nm == pytest.approx(1000.0)
        assert report.route_efficiency == pytest.approx(0.9)
        assert report.initial_fuel == 100000.0
        assert report.final_fuel == 80000.0
        assert report.total_fuel_consumed == 20000.0
        assert report.fuel_efficiency == pytest.approx(2000.0)
        assert report.max_climb_rate == 14.0

    def test_without_samples(self, arrived_flight: FlightState) -> None:
        """Test sample-derived statistics stay zero with no samples."""
        report = FlightReport.generate(arrived_flight, [])

        assert report.total_samples == 0
        assert report.cruise_altitude == 0.0
        assert report.phase_breakdown == []
        assert report.max_lift_to_drag == 0.0

    def test_route_efficiency_when_nothing_flown(self, arrived_flight: FlightState) -> None:
        """Test efficiency is 1.0 when no distance was flown."""
        arrived_flight.distance_flown = 0.0

        report = FlightReport.generate(arrived_flight, [])

        assert report.route_efficiency == 1.0
        assert report.fuel_efficiency == 0.0

    def test_sample_statistics(self, arrived_flight: FlightState) -> None:
        """Test statistics computed from the sample history."""
        report = FlightReport.generate(arrived_flight, make_samples())

        assert report.total_samples == 7
        assert report.sample_interval_seconds == pytest.approx(60.0)
        assert report.cruise_altitude == pytest.approx(11100.0)
        assert report.max_lift_to_drag == 19.0
        assert report.max_bank_angle == pytest.approx(11.459, abs=1e-3)
        assert report.max_angle_of_attack == pytest.approx(2.865, abs=1e-3)
        assert report.max_descent_rate == 14.0
        assert report.average_climb_rate == pytest.approx(11.0)
        assert report.average_descent_rate == pytest.approx(14.0)
        assert len(report.phase_breakdown) == 5

    def test_to_dict(self, arrived_flight: FlightState) -> None:
        """Test serialization with and without telemetry."""
        report = FlightReport.generate(arrived_flight, make_samples())

        data = report.to_dict()
        assert data["departure_time"] == T0.isoformat()
        assert "telemetry" not in data
        assert len(data["phase_breakdown"]) == 5
        assert data["report_version"] == "1.0"

        full = report.to_dict(include_telemetry=True)
        assert len(full["telemetry"]) == 7
