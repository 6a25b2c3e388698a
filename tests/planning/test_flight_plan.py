"""Tests for flight planning."""

from datetime import UTC, datetime, timedelta

import pytest

from skyfleet.flight.phase import FlightPhase
from skyfleet.physics import geodesy
from skyfleet.planning.flight_plan import Airport, FlightPlan, plan_flight

T0 = datetime(2025, 6, 1, 8, 0, tzinfo=UTC)


@pytest.fixture
def lhr() -> Airport:
    return Airport("LHR", "London Heathrow", 51.4700, -0.4543)


@pytest.fixture
def jfk() -> Airport:
    return Airport("JFK", "New York JFK", 40.6413, -73.7781)


class TestAirport:
    """Tests for Airport validation."""

    @pytest.mark.parametrize(
        ("code", "lat", "lon"),
        [("", 0.0, 0.0), ("BAD", 91.0, 0.0), ("BAD", 0.0, -180.5)],
    )
    def test_invalid(self, code: str, lat: float, lon: float) -> None:
        """Test empty codes and out-of-range coordinates are rejected."""
        with pytest.raises(ValueError):
            Airport(code, "Bad", lat, lon)


class TestFlightPlan:
    """Tests for FlightPlan."""

    def test_route_geometry(self, lhr: Airport, jfk: Airport) -> None:
        """Test distance and bearing of the plan."""
        plan = FlightPlan("BAW117", lhr, jfk, "A350-900", "Airbus")

        assert plan.distance_nm == pytest.approx(2991, rel=0.01)
        assert plan.initial_bearing == pytest.approx(
            geodesy.initial_bearing(lhr.lat, lhr.lon, jfk.lat, jfk.lon)
        )

    def test_waypoints(self, lhr: Airport, jfk: Airport) -> None:
        """Test waypoints run from origin to destination along the track."""
        plan = FlightPlan("BAW117", lhr, jfk, "A350-900")

        points = plan.waypoints(5)

        assert len(points) == 5
        assert points[0] == pytest.approx((lhr.lat, lhr.lon))
        assert points[-1] == pytest.approx((jfk.lat, jfk.lon))
        # Great-circle track bulges north of both endpoints
        assert points[2][0] > jfk.lat

    def test_waypoints_need_two_points(self, lhr: Airport, jfk: Airport) -> None:
        """Test fewer than two waypoints is an error."""
        with pytest.raises(ValueError):
            FlightPlan("BAW117", lhr, jfk, "A350-900").waypoints(1)


class TestPlanFlight:
    """Tests for plan_flight()."""

    def test_initial_state(self, lhr: Airport, jfk: Airport) -> None:
        """Test the planned flight waits at the origin facing the destination."""
        flight = plan_flight(
            " BAW117 ", lhr, jfk, "A350-900", "Airbus", "G-XWBA", 300.0, now=T0
        )

        assert flight.callsign == "BAW117"
        assert flight.phase is FlightPhase.PREFLIGHT
        assert (flight.current_lat, flight.current_lon) == (lhr.lat, lhr.lon)
        assert (flight.origin_name, flight.destination_code) == ("London Heathrow", "JFK")
        assert flight.aircraft_tail == "G-XWBA"
        assert flight.heading == pytest.approx(
            geodesy.initial_bearing(lhr.lat, lhr.lon, jfk.lat, jfk.lon)
        )
        assert flight.start_time == T0 + timedelta(seconds=300)

    def test_empty_callsign(self, lhr: Airport, jfk: Airport) -> None:
        """Test a blank callsign is rejected."""
        with pytest.raises(ValueError, match="callsign"):
            plan_flight("  ", lhr, jfk, "A350-900")

    def test_negative_offset(self, lhr: Airport, jfk: Airport) -> None:
        """Test negative start offsets are rejected."""
        with pytest.raises(ValueError, match="offset"):
            plan_flight("BAW117", lhr, jfk, "A350-900", start_offset_seconds=-1.0)

    def test_same_airport(self, lhr: Airport) -> None:
        """Test origin and destination must differ."""
        with pytest.raises(ValueError, match="LHR"):
            plan_flight("BAW117", lhr, lhr, "A350-900")
