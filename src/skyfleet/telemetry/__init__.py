"""Telemetry recording and post-flight reports."""

from skyfleet.telemetry.models import (
    FlightReport,
    PhaseRecord,
    TelemetrySample,
    calculate_phase_breakdown,
)
from skyfleet.telemetry.recorder import FlightDataRecorder, FlightRecording

__all__ = [
    "FlightDataRecorder",
    "FlightRecording",
    "FlightReport",
    "PhaseRecord",
    "TelemetrySample",
    "calculate_phase_breakdown",
]
