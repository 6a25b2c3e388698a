"""SkyFleet - Multi-flight dynamics simulator.

Main entry point for the command-line runner. Loads a scenario, starts the
scheduler loop, logs periodic fleet status and prints a summary of each
generated flight report.

Typical usage:
    python -m skyfleet.main --scenario demo.yaml
    python -m skyfleet.main --scenario demo.yaml --speed 200 --duration 600
"""

import argparse
import sys
import threading
from pathlib import Path

from skyfleet.aircraft.performance import AircraftPerformanceCatalog
from skyfleet.core.logging_system import get_logger, initialize_logging
from skyfleet.flight.engine import FlightPhysicsEngine
from skyfleet.flight.phase import FlightPhase
from skyfleet.flight.state import FlightState
from skyfleet.scenario.scenario import load_scenario
from skyfleet.settings.simulation_settings import SimulationSettings
from skyfleet.simulation.repository import (
    FlightRepository,
    HttpFlightRepository,
    InMemoryFlightRepository,
)
from skyfleet.simulation.scheduler import SimulationScheduler
from skyfleet.telemetry.models import TelemetrySample
from skyfleet.version import get_version

logger = get_logger(__name__)

STATUS_INTERVAL = 10.0  # seconds


class SkyFleet:
    """Command-line application: runs one scenario until done or interrupted."""

    def __init__(self, args: argparse.Namespace, settings: SimulationSettings) -> None:
        self.args = args
        self.settings = settings
        self._done = threading.Event()

        catalog = AircraftPerformanceCatalog.from_yaml(
            default_key=settings.default_aircraft,
            warn_on_fallback=settings.warn_on_fallback,
        )
        self.scheduler = SimulationScheduler(
            engine=FlightPhysicsEngine(catalog),
            repository=self._create_repository(),
            settings=settings,
        )
        self.scheduler.add_arrival_listener(self._on_arrival)

    def _create_repository(self) -> FlightRepository:
        if self.settings.repository_url:
            logger.info("Persisting flights to %s", self.settings.repository_url)
            return HttpFlightRepository(
                self.settings.repository_url, timeout=self.settings.request_timeout
            )
        return InMemoryFlightRepository()

    def run(self) -> None:
        """Load the scenario and run until every flight arrives or time is up."""
        scenario = load_scenario(self.args.scenario)
        flights = scenario.create_flights()
        if not flights:
            logger.warning("Scenario %r has no flights", scenario.name)
            return

        self.scheduler.add_flights(flights)
        if self.args.speed is not None:
            self.scheduler.set_speed(self.args.speed)

        self.scheduler.start()
        self.scheduler.start_loop()

        remaining = self.args.duration
        try:
            while not self._done.is_set():
                wait = STATUS_INTERVAL if remaining is None else min(STATUS_INTERVAL, remaining)
                if self._done.wait(wait):
                    break
                self._log_status()
                if remaining is not None:
                    remaining -= wait
                    if remaining <= 0:
                        logger.info("Duration elapsed, stopping")
                        break
        except KeyboardInterrupt:
            logger.info("Interrupted, stopping")
        finally:
            self.shutdown()

    def _log_status(self) -> None:
        counts = self.scheduler.phase_counts()
        summary = ", ".join(
            f"{phase.value}={count}"
            for phase, count in sorted(counts.items(), key=lambda item: item[0].order)
        )
        logger.info("Fleet status (%.0fx): %s", self.scheduler.speed_multiplier, summary)

    def _on_arrival(self, flight: FlightState, samples: list[TelemetrySample]) -> None:
        report = self.scheduler.recorder.get_report(flight.callsign)
        if report is not None:
            print(
                f"{report.callsign:<8} {report.origin_code}->{report.destination_code}  "
                f"{report.flight_duration_formatted}  "
                f"{report.distance_flown_nm:8.0f} nm  "
                f"fuel {report.total_fuel_consumed:9.0f} kg  "
                f"cruise {report.cruise_altitude:6.0f} m  "
                f"eff {report.route_efficiency:.3f}"
            )

        counts = self.scheduler.phase_counts()
        if counts.get(FlightPhase.ARRIVED, 0) == len(self.scheduler):
            logger.info("All flights arrived")
            self._done.set()

    def shutdown(self) -> None:
        """Stop the scheduler loop."""
        self.scheduler.stop()
        self.scheduler.shutdown()
        logger.info("Shutdown complete")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="SkyFleet - Multi-flight dynamics simulator")

    parser.add_argument(
        "--scenario",
        type=str,
        default="demo.yaml",
        help="Scenario YAML file (packaged scenarios can be named directly, e.g. demo.yaml)",
    )

    parser.add_argument(
        "--speed",
        type=float,
        help="Simulation speed multiplier (simulated seconds per real second)",
    )

    parser.add_argument(
        "--duration",
        type=float,
        help="Stop after this many real seconds",
    )

    parser.add_argument(
        "--settings",
        type=Path,
        help="Simulation settings YAML file (default: ~/.skyfleet/simulation.yaml)",
    )

    parser.add_argument(
        "--log-config",
        type=Path,
        help="Logging configuration YAML file",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {get_version()}",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success).
    """
    args = parse_args(argv)
    initialize_logging(args.log_config)

    settings = SimulationSettings()
    settings.load(args.settings)

    try:
        app = SkyFleet(args, settings)
        app.run()
        return 0
    except (FileNotFoundError, ValueError) as e:
        logger.error("Cannot run scenario: %s", e)
        return 2
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.exception("Fatal error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
