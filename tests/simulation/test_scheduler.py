"""Tests for the simulation tick scheduler."""

import logging
import threading
from datetime import UTC, datetime, timedelta
from unittest.mock import Mock, patch

import pytest

from skyfleet.aircraft.performance import AircraftPerformanceCatalog
from skyfleet.flight.engine import FlightPhysicsEngine
from skyfleet.flight.phase import FlightPhase
from skyfleet.flight.state import FlightState
from skyfleet.settings.simulation_settings import SimulationSettings
from skyfleet.simulation.repository import (
    FlightRepository,
    InMemoryFlightRepository,
    PersistenceError,
)
from skyfleet.simulation.scheduler import SimulationScheduler

T0 = datetime(2025, 6, 1, 8, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_flight(callsign: str = "BAW117", start_offset: float = 0.0) -> FlightState:
    """LHR-JFK flight reset at T0."""
    flight = FlightState(
        callsign=callsign,
        origin_code="LHR",
        destination_code="JFK",
        origin_lat=51.4700,
        origin_lon=-0.4543,
        dest_lat=40.6413,
        dest_lon=-73.7781,
        aircraft_manufacturer="Airbus",
        aircraft_model="A350-900",
        start_offset_seconds=start_offset,
    )
    flight.reset(T0)
    return flight


def make_rolling_out(callsign: str = "BAW117") -> FlightState:
    """Flight on the landing rollout, seconds from arrival."""
    flight = make_flight(callsign)
    flight.phase = FlightPhase.LANDING
    flight.ground_speed = 100.0
    flight.true_airspeed = 100.0
    flight.gross_weight = 200000.0
    return flight


class TestSimulationScheduler:
    """Tests for SimulationScheduler."""

    @pytest.fixture
    def clock(self) -> FakeClock:
        """Fake clock fixture."""
        return FakeClock()

    @pytest.fixture
    def settings(self) -> SimulationSettings:
        """Explicit default settings, independent of the user's file."""
        return SimulationSettings(tick_interval=0.01)

    @pytest.fixture
    def repository(self) -> InMemoryFlightRepository:
        """In-memory repository fixture."""
        return InMemoryFlightRepository()

    @pytest.fixture
    def scheduler(
        self,
        clock: FakeClock,
        settings: SimulationSettings,
        repository: InMemoryFlightRepository,
    ) -> SimulationScheduler:
        """Scheduler with a fake clock and in-memory persistence."""
        engine = FlightPhysicsEngine(AircraftPerformanceCatalog.from_yaml())
        return SimulationScheduler(
            engine=engine, repository=repository, settings=settings, clock=clock
        )

    def test_flight_collection(self, scheduler: SimulationScheduler) -> None:
        """Test lookup is case-insensitive and returns copies."""
        scheduler.add_flights([make_flight("BAW117"), make_flight("UAE1", start_offset=60)])
        scheduler.add_flight(make_flight("baw117"))

        assert len(scheduler) == 2
        copy = scheduler.get_flight("Baw117")
        assert copy is not None
        copy.altitude = 9999.0
        assert scheduler.get_flight("BAW117").altitude == 0.0
        assert scheduler.get_flight("NOPE") is None
        assert scheduler.phase_counts() == {FlightPhase.PREFLIGHT: 2}

    def test_paused_does_not_advance(self, scheduler: SimulationScheduler) -> None:
        """Test ticks while paused leave flights untouched."""
        scheduler.add_flight(make_flight())
        before = scheduler.get_flight("BAW117").to_dict()

        scheduler.tick(T0 + timedelta(seconds=5))

        assert not scheduler.is_running
        assert scheduler.get_flight("BAW117").to_dict() == before

    def test_running_advances(self, scheduler: SimulationScheduler) -> None:
        """Test a running scheduler moves due flights into takeoff."""
        scheduler.add_flight(make_flight())
        scheduler.start()

        snapshot = scheduler.tick(T0 + timedelta(seconds=1))

        assert snapshot[0].phase is FlightPhase.TAKEOFF
        assert scheduler.phase_counts() == {FlightPhase.TAKEOFF: 1}

    def test_waiting_flights_skipped(self, scheduler: SimulationScheduler) -> None:
        """Test flights are not advanced before their start time."""
        scheduler.add_flight(make_flight(start_offset=600.0))
        scheduler.start()

        scheduler.tick(T0 + timedelta(seconds=1))
        waiting = scheduler.get_flight("BAW117")
        assert waiting.phase is FlightPhase.PREFLIGHT
        assert waiting.gross_weight == 0.0

        scheduler.tick(T0 + timedelta(seconds=601))
        assert scheduler.get_flight("BAW117").phase is FlightPhase.TAKEOFF

    def test_speed_multiplier_scales_time(self, scheduler: SimulationScheduler) -> None:
        """Test simulated time is real time multiplied by the speed."""
        scheduler.add_flight(make_flight())
        scheduler.start()
        scheduler.tick(T0 + timedelta(seconds=1))

        scheduler.set_speed(10.0)
        scheduler.tick(T0 + timedelta(seconds=2))

        assert scheduler.get_flight("BAW117").flight_time == pytest.approx(10.0)

    def test_set_speed_clamped(self, scheduler: SimulationScheduler) -> None:
        """Test the multiplier is clamped to the configured range."""
        assert scheduler.set_speed(5000.0) == 1000.0
        assert scheduler.set_speed(0.0) == pytest.approx(0.1)
        assert scheduler.set_speed(25.0) == 25.0
        assert scheduler.speed_multiplier == 25.0

    def test_start_stop(self, scheduler: SimulationScheduler) -> None:
        """Test pause and resume toggle the running flag."""
        scheduler.start()
        scheduler.start()
        assert scheduler.is_running

        scheduler.stop()
        scheduler.stop()
        assert not scheduler.is_running

    def test_resume_does_not_replay_pause(
        self, scheduler: SimulationScheduler, clock: FakeClock
    ) -> None:
        """Test time spent paused is not simulated after resuming."""
        scheduler.add_flight(make_flight())
        scheduler.set_speed(10.0)
        scheduler.start()
        scheduler.tick(T0 + timedelta(seconds=1))
        scheduler.tick(T0 + timedelta(seconds=2))
        scheduler.stop()
        before = scheduler.get_flight("BAW117").flight_time
        assert before == pytest.approx(10.0)

        clock.now = T0 + timedelta(seconds=500)
        scheduler.start()
        scheduler.tick(T0 + timedelta(seconds=501))

        assert scheduler.get_flight("BAW117").flight_time - before == pytest.approx(10.0)

    def test_arrival_generates_report(self, scheduler: SimulationScheduler) -> None:
        """Test arrivals are reported once with their samples."""
        listener = Mock()
        scheduler.add_arrival_listener(listener)
        scheduler.add_flight(make_rolling_out())
        scheduler.start()

        scheduler.tick(T0 + timedelta(seconds=1))
        assert scheduler.recorder.get_recording_status("BAW117") is not None

        scheduler.set_speed(1000.0)
        scheduler.tick(T0 + timedelta(seconds=2))

        listener.assert_called_once()
        flight, samples = listener.call_args.args
        assert flight.phase is FlightPhase.ARRIVED
        assert len(samples) == 1

        report = scheduler.recorder.get_report("BAW117")
        assert report is not None
        assert report.total_samples == 1
        assert report.arrival_time == T0 + timedelta(seconds=2)

        scheduler.tick(T0 + timedelta(seconds=3))
        listener.assert_called_once()

    def test_failing_arrival_listener(
        self, scheduler: SimulationScheduler, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test one failing listener neither stops the tick nor other listeners."""
        failing = Mock(side_effect=RuntimeError("boom"))
        healthy = Mock()
        scheduler.add_arrival_listener(failing)
        scheduler.add_arrival_listener(healthy)
        scheduler.add_flight(make_rolling_out())
        scheduler.set_speed(1000.0)
        scheduler.start()

        with caplog.at_level(logging.ERROR, logger="skyfleet.simulation.scheduler"):
            scheduler.tick(T0 + timedelta(seconds=1))

        healthy.assert_called_once()
        assert "Arrival listener failed" in caplog.text

    def test_remove_arrival_listener(self, scheduler: SimulationScheduler) -> None:
        """Test removed listeners are not notified."""
        listener = Mock()
        scheduler.add_arrival_listener(listener)
        scheduler.remove_arrival_listener(listener)
        scheduler.add_flight(make_rolling_out())
        scheduler.set_speed(1000.0)
        scheduler.start()

        scheduler.tick(T0 + timedelta(seconds=1))

        listener.assert_not_called()

    def test_persistence_cadence(
        self, scheduler: SimulationScheduler, repository: InMemoryFlightRepository
    ) -> None:
        """Test snapshots are persisted at most once per interval."""
        scheduler.add_flight(make_flight())
        scheduler.start()

        scheduler.tick(T0 + timedelta(seconds=0.25))
        scheduler.tick(T0 + timedelta(seconds=0.5))
        assert repository.upsert_count == 1

        scheduler.tick(T0 + timedelta(seconds=1.25))
        assert repository.upsert_count == 2
        assert repository.get("BAW117").phase is FlightPhase.TAKEOFF

    def test_failing_repository_logged(
        self,
        clock: FakeClock,
        settings: SimulationSettings,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test persistence failures are logged and never raised."""
        repository = Mock(spec=FlightRepository)
        repository.bulk_upsert.side_effect = PersistenceError("store down")
        repository.reset_flights.side_effect = RuntimeError("unexpected")
        scheduler = SimulationScheduler(
            engine=FlightPhysicsEngine(AircraftPerformanceCatalog.from_yaml()),
            repository=repository,
            settings=settings,
            clock=clock,
        )
        scheduler.add_flight(make_flight())
        scheduler.start()

        with caplog.at_level(logging.ERROR, logger="skyfleet.simulation.scheduler"):
            scheduler.tick(T0 + timedelta(seconds=1))
            scheduler.reset(T0 + timedelta(seconds=2))

        assert "store down" in caplog.text
        assert "Unexpected error persisting reset flights" in caplog.text
        assert scheduler.get_flight("BAW117").phase is FlightPhase.PREFLIGHT

    def test_reset(
        self, scheduler: SimulationScheduler, repository: InMemoryFlightRepository
    ) -> None:
        """Test reset returns every flight to preflight with a new start."""
        scheduler.add_flights([make_flight("A1"), make_flight("B2", start_offset=300.0)])
        scheduler.start()
        scheduler.tick(T0 + timedelta(seconds=1))
        scheduler.tick(T0 + timedelta(seconds=2))
        assert scheduler.recorder.get_recording_status("A1") is not None

        reset_at = T0 + timedelta(hours=1)
        snapshot = scheduler.reset(reset_at)

        assert {f.phase for f in snapshot} == {FlightPhase.PREFLIGHT}
        assert scheduler.get_flight("A1").start_time == reset_at
        assert scheduler.get_flight("B2").start_time == reset_at + timedelta(seconds=300)
        assert scheduler.recorder.get_recording_status("A1") is None
        assert repository.get("A1").phase is FlightPhase.PREFLIGHT

    def test_reset_during_tick_not_overwritten(
        self, scheduler: SimulationScheduler, repository: InMemoryFlightRepository
    ) -> None:
        """Test a tick's snapshot taken before a reset is not persisted after it."""
        scheduler.add_flight(make_rolling_out())
        scheduler.set_speed(1000.0)
        scheduler.start()
        reset_at = T0 + timedelta(hours=1)

        # Arrival listeners run after the tick releases the lock, before it persists
        scheduler.add_arrival_listener(lambda flight, samples: scheduler.reset(reset_at))
        scheduler.tick(T0 + timedelta(seconds=1))

        assert repository.upsert_count == 1
        stored = repository.get("BAW117")
        assert stored.phase is FlightPhase.PREFLIGHT
        assert stored.start_time == reset_at

        scheduler.tick(reset_at + timedelta(seconds=2))
        assert repository.upsert_count == 2

    def test_reset_while_paused(self, scheduler: SimulationScheduler) -> None:
        """Test reset leaves the running flag alone."""
        scheduler.add_flight(make_flight())

        scheduler.reset(T0)

        assert not scheduler.is_running

    def test_background_loop(self, scheduler: SimulationScheduler) -> None:
        """Test the loop keeps ticking after a failed tick and shuts down."""
        ticked = threading.Event()
        calls = []

        def fake_tick() -> None:
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("first tick fails")
            ticked.set()

        with patch.object(scheduler, "tick", side_effect=fake_tick):
            scheduler.start_loop()
            scheduler.start_loop()
            assert ticked.wait(timeout=2.0)
            scheduler.shutdown()

        assert len(calls) >= 2
        assert scheduler._thread is None
