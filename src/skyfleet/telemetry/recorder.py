"""Flight data recorder.

Samples flight state at a fixed wall-clock interval while a flight is
active and turns the history into a FlightReport when the flight arrives.
Safe to call from the tick thread and from readers concurrently.

Typical usage example:
    recorder = FlightDataRecorder(sample_interval=1.0)
    recorder.record_sample(flight)  # every tick
    ...
    samples = recorder.pop_samples(flight.callsign)
    report = recorder.generate_report(flight, samples)
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from skyfleet.core.logging_system import get_logger
from skyfleet.flight.phase import FlightPhase
from skyfleet.flight.state import FlightState, format_duration
from skyfleet.telemetry.models import FlightReport, TelemetrySample

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class FlightRecording:
    """Sample history of one active flight."""

    callsign: str
    started_at: datetime
    last_sample_time: datetime | None = None
    samples: list[TelemetrySample] = field(default_factory=list)


class FlightDataRecorder:
    """Records telemetry samples and keeps completed flight reports.

    Attributes:
        sample_interval: Minimum wall-clock seconds between samples.
    """

    def __init__(self, sample_interval: float = 1.0, clock: Clock | None = None) -> None:
        """Initialize the recorder.

        Args:
            sample_interval: Minimum seconds between samples of one flight.
            clock: Source of the current UTC time. Defaults to the system clock.
        """
        if sample_interval < 0:
            raise ValueError("sample_interval must be non-negative")

        self.sample_interval = sample_interval
        self._clock = clock or _utc_now
        self._recordings: dict[str, FlightRecording] = {}
        self._reports: dict[str, FlightReport] = {}
        self._lock = threading.Lock()

    def record_sample(self, flight: FlightState, now: datetime | None = None) -> bool:
        """Record a sample if the flight is active and the interval elapsed.

        Args:
            flight: Flight to sample.
            now: Sample time. Defaults to the recorder clock.

        Returns:
            True if a sample was appended.
        """
        if flight.phase in (FlightPhase.PREFLIGHT, FlightPhase.ARRIVED):
            return False

        now = now or self._clock()
        key = flight.callsign.upper()
        with self._lock:
            recording = self._recordings.get(key)
            if recording is None:
                recording = FlightRecording(callsign=flight.callsign, started_at=now)
                self._recordings[key] = recording

            if (
                recording.last_sample_time is not None
                and (now - recording.last_sample_time).total_seconds() < self.sample_interval
            ):
                return False

            recording.samples.append(TelemetrySample.from_flight(flight, now))
            recording.last_sample_time = now
            return True

    def get_samples(self, callsign: str) -> list[TelemetrySample]:
        """Copy of the samples recorded so far for an active flight."""
        with self._lock:
            recording = self._recordings.get(callsign.upper())
            return list(recording.samples) if recording else []

    def pop_samples(self, callsign: str) -> list[TelemetrySample]:
        """Finish a recording and return its samples.

        Returns:
            Recorded samples, or an empty list if nothing was recorded.
        """
        with self._lock:
            recording = self._recordings.pop(callsign.upper(), None)

        if recording is None:
            logger.warning("No recording found for flight %s", callsign)
            return []
        return recording.samples

    def generate_report(
        self, flight: FlightState, samples: list[TelemetrySample] | None = None
    ) -> FlightReport:
        """Build and store the report for a completed flight.

        Args:
            flight: Flight at arrival.
            samples: Sample history. When omitted the flight's active
                recording is finished and used.

        Returns:
            The stored report.
        """
        if samples is None:
            samples = self.pop_samples(flight.callsign)

        logger.info(
            "Generating report for flight %s: %d samples over %s",
            flight.callsign,
            len(samples),
            format_duration(flight.flight_time),
        )

        report = FlightReport.generate(flight, samples)
        with self._lock:
            self._reports[flight.callsign.upper()] = report
        return report

    def get_report(self, callsign: str) -> FlightReport | None:
        """Report of a completed flight, if any."""
        with self._lock:
            return self._reports.get(callsign.upper())

    def get_all_reports(self) -> list[FlightReport]:
        """All stored reports."""
        with self._lock:
            return list(self._reports.values())

    def get_recording_status(self, callsign: str) -> tuple[int, float] | None:
        """Monitoring view of an active recording.

        Returns:
            (sample_count, seconds since recording started), or None when the
            flight has no active recording.
        """
        with self._lock:
            recording = self._recordings.get(callsign.upper())
            if recording is None:
                return None
            count = len(recording.samples)
            started_at = recording.started_at

        return count, (self._clock() - started_at).total_seconds()

    def clear_report(self, callsign: str) -> bool:
        """Remove one report. Returns True if it existed."""
        with self._lock:
            return self._reports.pop(callsign.upper(), None) is not None

    def clear_all_reports(self) -> None:
        with self._lock:
            self._reports.clear()
        logger.info("Cleared all flight reports")

    def reset_recordings(self) -> None:
        """Drop every active recording (used on simulation reset)."""
        with self._lock:
            self._recordings.clear()
        logger.info("Cleared all active flight recordings")
