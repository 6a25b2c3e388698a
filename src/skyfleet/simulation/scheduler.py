"""Concurrent tick scheduler.

The scheduler owns every FlightState, advances them on a fixed cadence
from a background thread, and hands out copied snapshots so readers never
see a flight mid-update. Persistence and arrival hooks run outside the
flight lock and their failures never stop the tick loop.

Typical usage:
    scheduler = SimulationScheduler(repository=InMemoryFlightRepository())
    scheduler.add_flights(flights)
    scheduler.add_arrival_listener(on_arrival)
    scheduler.start()
    scheduler.start_loop()
    ...
    scheduler.shutdown()
"""

import threading
from collections import Counter
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from skyfleet.core.logging_system import get_logger
from skyfleet.flight.engine import FlightPhysicsEngine
from skyfleet.flight.phase import FlightPhase
from skyfleet.flight.state import FlightState
from skyfleet.settings.simulation_settings import SimulationSettings, get_simulation_settings
from skyfleet.simulation.repository import FlightRepository, PersistenceError
from skyfleet.telemetry.models import TelemetrySample
from skyfleet.telemetry.recorder import FlightDataRecorder

logger = get_logger(__name__)

Clock = Callable[[], datetime]
ArrivalListener = Callable[[FlightState, list[TelemetrySample]], object]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class SimulationScheduler:
    """Advances all flights on a fixed cadence with time scaling and pause.

    All flight mutation happens under one lock, either from the background
    loop or from an explicit tick() call.

    Attributes:
        engine: Physics engine used to advance flights.
        recorder: Telemetry recorder fed after every advance.
        repository: Optional persistence target for snapshots.
        settings: Tick, persistence and speed configuration.
    """

    def __init__(
        self,
        engine: FlightPhysicsEngine | None = None,
        recorder: FlightDataRecorder | None = None,
        repository: FlightRepository | None = None,
        settings: SimulationSettings | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            engine: Physics engine. Defaults to one using the packaged catalog.
            recorder: Telemetry recorder. Defaults to one using the settings'
                sample interval and this scheduler's clock.
            repository: Persistence target, or None to skip persistence.
            settings: Simulation settings. Defaults to the global settings.
            clock: Source of the current UTC time.
        """
        self.settings = settings or get_simulation_settings()
        self._clock = clock or _utc_now
        self.engine = engine or FlightPhysicsEngine()
        self.recorder = recorder or FlightDataRecorder(
            sample_interval=self.settings.sample_interval, clock=self._clock
        )
        self.repository = repository

        self._flights: dict[str, FlightState] = {}
        self._lock = threading.Lock()
        self._is_running = False
        self._speed_multiplier = self.settings.clamp_speed(self.settings.speed_multiplier)
        self._last_tick: datetime | None = None
        self._last_persist: datetime | None = None

        # Bumped by reset(); snapshots from an older generation are not persisted
        self._generation = 0
        self._persist_lock = threading.Lock()

        self._arrival_listeners: list[ArrivalListener] = []
        self.add_arrival_listener(self.recorder.generate_report)

        self._shutdown_event = threading.Event()
        self._thread: threading.Thread | None = None

    # -- Flight collection ----------------------------------------------------

    def add_flight(self, flight: FlightState) -> None:
        """Register a flight. A flight with the same callsign is replaced."""
        with self._lock:
            self._flights[flight.callsign.upper()] = flight

    def add_flights(self, flights: Iterable[FlightState]) -> None:
        with self._lock:
            for flight in flights:
                self._flights[flight.callsign.upper()] = flight

    def get_flight(self, callsign: str) -> FlightState | None:
        """Copy of one flight, looked up case-insensitively."""
        with self._lock:
            flight = self._flights.get(callsign.upper())
            return flight.copy() if flight else None

    def snapshot(self) -> list[FlightState]:
        """Consistent copies of every flight."""
        with self._lock:
            return [flight.copy() for flight in self._flights.values()]

    def phase_counts(self) -> dict[FlightPhase, int]:
        """Number of flights in each phase."""
        with self._lock:
            return dict(Counter(flight.phase for flight in self._flights.values()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._flights)

    # -- Listeners ------------------------------------------------------------

    def add_arrival_listener(self, listener: ArrivalListener) -> None:
        """Register a callback invoked as listener(flight, samples) on arrival."""
        if listener not in self._arrival_listeners:
            self._arrival_listeners.append(listener)

    def remove_arrival_listener(self, listener: ArrivalListener) -> None:
        if listener in self._arrival_listeners:
            self._arrival_listeners.remove(listener)

    # -- Control surface ------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def speed_multiplier(self) -> float:
        return self._speed_multiplier

    def start(self) -> None:
        """Resume advancing flights. Time spent paused is not simulated."""
        with self._lock:
            if self._is_running:
                return
            self._is_running = True
            self._last_tick = self._clock()
        logger.info("Simulation started at %.1fx", self._speed_multiplier)

    def stop(self) -> None:
        """Pause the simulation."""
        with self._lock:
            if not self._is_running:
                return
            self._is_running = False
        logger.info("Simulation paused")

    def set_speed(self, multiplier: float) -> float:
        """Set the time scaling factor.

        Args:
            multiplier: Simulated seconds per real second.

        Returns:
            The applied multiplier, clamped to the configured bounds.
        """
        clamped = self.settings.clamp_speed(multiplier)
        with self._lock:
            self._speed_multiplier = clamped
        logger.info("Simulation speed set to %.1fx", clamped)
        return clamped

    def reset(self, now: datetime | None = None) -> list[FlightState]:
        """Return every flight to Preflight with a fresh start time.

        Args:
            now: Reset time. Each flight starts at now + its start offset.

        Returns:
            Snapshot of the reset flights.
        """
        now = now or self._clock()
        with self._lock:
            for flight in self._flights.values():
                flight.reset(now)
            self.recorder.reset_recordings()
            self._last_tick = now
            self._generation += 1
            generation = self._generation
            snapshot = [flight.copy() for flight in self._flights.values()]

        logger.info("Simulation reset: %d flights", len(snapshot))

        if self.repository is not None:
            self._persist(self.repository.reset_flights, snapshot, generation, "reset flights")

        return snapshot

    # -- Ticking --------------------------------------------------------------

    def tick(self, now: datetime | None = None) -> list[FlightState]:
        """Advance every active flight by the elapsed time since the last tick.

        Args:
            now: Tick time. Defaults to the scheduler clock.

        Returns:
            Snapshot taken at the end of the tick.
        """
        now = now or self._clock()
        arrivals: list[tuple[FlightState, list[TelemetrySample]]] = []

        with self._lock:
            delta = self.settings.tick_interval
            if self._last_tick is not None:
                elapsed = (now - self._last_tick).total_seconds()
                if elapsed > 0:
                    delta = elapsed
            self._last_tick = now

            if self._is_running:
                dt = delta * self._speed_multiplier
                for flight in self._flights.values():
                    if flight.phase is FlightPhase.ARRIVED:
                        continue
                    if flight.phase is FlightPhase.PREFLIGHT and now < flight.start_time:
                        continue

                    self.engine.advance(flight, dt, now)
                    self.recorder.record_sample(flight, now)

                    if flight.phase is FlightPhase.ARRIVED:
                        samples = self.recorder.pop_samples(flight.callsign)
                        arrivals.append((flight.copy(), samples))

            generation = self._generation
            snapshot = [flight.copy() for flight in self._flights.values()]

        for flight, samples in arrivals:
            logger.info("Flight %s arrived at %s", flight.callsign, flight.destination_code)
            self._notify_arrival(flight, samples)

        self._maybe_persist(snapshot, now, generation)
        return snapshot

    def _notify_arrival(self, flight: FlightState, samples: list[TelemetrySample]) -> None:
        for listener in list(self._arrival_listeners):
            try:
                listener(flight, samples)
            except Exception:
                logger.exception("Arrival listener failed for %s", flight.callsign)

    def _maybe_persist(
        self, snapshot: list[FlightState], now: datetime, generation: int
    ) -> None:
        if self.repository is None:
            return
        if (
            self._last_persist is not None
            and (now - self._last_persist).total_seconds() < self.settings.persistence_interval
        ):
            return

        self._last_persist = now
        self._persist(self.repository.bulk_upsert, snapshot, generation, "flights")

    def _persist(
        self,
        write: Callable[[list[FlightState]], None],
        snapshot: list[FlightState],
        generation: int,
        label: str,
    ) -> None:
        """Write a snapshot unless a reset has happened since it was taken."""
        with self._persist_lock:
            if generation != self._generation:
                logger.debug("Discarding %s snapshot taken before a reset", label)
                return
            try:
                write(snapshot)
            except PersistenceError as e:
                logger.error("Failed to persist %s: %s", label, e)
            except Exception:
                logger.exception("Unexpected error persisting %s", label)

    # -- Background loop ------------------------------------------------------

    def start_loop(self) -> None:
        """Start the background tick thread."""
        if self._thread and self._thread.is_alive():
            logger.warning("Simulation loop already running")
            return

        self._shutdown_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="Simulation-Scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info("Simulation loop started (tick %.3fs)", self.settings.tick_interval)

    def _run_loop(self) -> None:
        while not self._shutdown_event.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("Simulation tick failed")
            self._shutdown_event.wait(self.settings.tick_interval)

        logger.info("Simulation loop ended")

    def shutdown(self, timeout: float = 2.0) -> None:
        """Stop the background thread and wait for it to exit."""
        self._shutdown_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        self._thread = None
        logger.info("Simulation scheduler shut down")
