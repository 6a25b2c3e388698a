"""Simulation scenario management.

A scenario names a set of airports and the flights planned between them.
Scenarios are defined in YAML files or built programmatically.

Scenario file format:
    name: Transatlantic
    airports:
      LHR: {name: London Heathrow, lat: 51.4700, lon: -0.4543}
      JFK: {name: New York JFK, lat: 40.6413, lon: -73.7781}
    flights:
      - callsign: BAW117
        from: LHR
        to: JFK
        aircraft: Airbus A350-900      # or manufacturer: / model: keys
        tail: G-XWBA
        start_offset: 0                # seconds after simulation start

Typical usage:
    from skyfleet.scenario import ScenarioBuilder, load_scenario

    scenario = load_scenario("demo.yaml")

    scenario = ScenarioBuilder() \\
        .with_airport("LHR", "London Heathrow", 51.47, -0.4543) \\
        .with_airport("JFK", "New York JFK", 40.6413, -73.7781) \\
        .with_flight("BAW117", "LHR", "JFK", "Airbus A350-900") \\
        .build()

    flights = scenario.create_flights()
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import yaml

from skyfleet.flight.state import FlightState
from skyfleet.planning.flight_plan import Airport, FlightPlan

logger = logging.getLogger(__name__)

SCENARIO_DIR = Path(__file__).resolve().parent.parent / "config" / "scenarios"


def split_aircraft_name(name: str) -> tuple[str, str]:
    """Split "Manufacturer Model" into its parts.

    Examples:
        >>> split_aircraft_name("Boeing 777-300ER")
        ('Boeing', '777-300ER')
        >>> split_aircraft_name("A380")
        ('', 'A380')
    """
    manufacturer, _, model = name.strip().partition(" ")
    if not model:
        return "", manufacturer
    return manufacturer, model.strip()


@dataclass
class Scenario:
    """Simulation scenario.

    Attributes:
        name: Scenario name.
        airports: Airports keyed by code.
        flights: Planned flights.
    """

    name: str = "Unnamed"
    airports: dict[str, Airport] = field(default_factory=dict)
    flights: list[FlightPlan] = field(default_factory=list)

    def create_flights(self, now: datetime | None = None) -> list[FlightState]:
        """Create the initial FlightState of every planned flight.

        Args:
            now: Simulation start. Defaults to the current UTC time.
        """
        now = now or datetime.now(UTC)
        return [plan.to_flight_state(now) for plan in self.flights]


class ScenarioBuilder:
    """Builder for creating Scenario instances.

    Provides a fluent API for constructing scenarios with validation.
    """

    def __init__(self) -> None:
        """Initialize scenario builder with defaults."""
        self._name = "Unnamed"
        self._airports: dict[str, Airport] = {}
        self._flights: list[dict[str, Any]] = []

    def with_name(self, name: str) -> "ScenarioBuilder":
        self._name = name
        return self

    def with_airport(self, code: str, name: str, lat: float, lon: float) -> "ScenarioBuilder":
        """Add an airport.

        Args:
            code: Airport code (case-insensitive, stored upper-case).
            name: Display name.
            lat: Latitude in degrees.
            lon: Longitude in degrees.

        Returns:
            Self for chaining
        """
        code = code.upper()
        self._airports[code] = Airport(code=code, name=name, lat=lat, lon=lon)
        return self

    def with_flight(
        self,
        callsign: str,
        origin: str,
        destination: str,
        aircraft: str,
        tail: str = "",
        start_offset: float = 0.0,
    ) -> "ScenarioBuilder":
        """Add a flight between two airports of this scenario.

        Args:
            callsign: Flight identifier.
            origin: Departure airport code.
            destination: Arrival airport code.
            aircraft: "Manufacturer Model" name (e.g., "Boeing 777-300ER").
            tail: Registration.
            start_offset: Departure delay in seconds after simulation start.

        Returns:
            Self for chaining
        """
        manufacturer, model = split_aircraft_name(aircraft)
        self._flights.append(
            {
                "callsign": callsign,
                "origin": origin.upper(),
                "destination": destination.upper(),
                "manufacturer": manufacturer,
                "model": model,
                "tail": tail,
                "start_offset": start_offset,
            }
        )
        return self

    def build(self) -> Scenario:
        """Build the scenario.

        Returns:
            Configured scenario instance

        Raises:
            ValueError: If a flight references an unknown airport, repeats a
                callsign, or is otherwise invalid.
        """
        plans: list[FlightPlan] = []
        seen: set[str] = set()
        for entry in self._flights:
            callsign = entry["callsign"].strip()
            if not callsign:
                raise ValueError("flight callsign required")
            if callsign.upper() in seen:
                raise ValueError(f"duplicate callsign {callsign!r}")
            seen.add(callsign.upper())

            for key in ("origin", "destination"):
                if entry[key] not in self._airports:
                    raise ValueError(f"{callsign}: unknown airport code {entry[key]!r}")
            if entry["origin"] == entry["destination"]:
                raise ValueError(f"{callsign}: origin and destination are both {entry['origin']}")
            if entry["start_offset"] < 0:
                raise ValueError(f"{callsign}: start_offset must be non-negative")

            plans.append(
                FlightPlan(
                    callsign=callsign,
                    origin=self._airports[entry["origin"]],
                    destination=self._airports[entry["destination"]],
                    aircraft_model=entry["model"],
                    aircraft_manufacturer=entry["manufacturer"],
                    aircraft_tail=entry["tail"],
                    start_offset_seconds=float(entry["start_offset"]),
                )
            )

        return Scenario(name=self._name, airports=dict(self._airports), flights=plans)


def load_scenario(path: str | Path) -> Scenario:
    """Load a scenario from a YAML file.

    Relative names that do not exist are also looked up in the packaged
    scenarios directory (e.g., "demo.yaml").

    Args:
        path: Scenario file path.

    Returns:
        Loaded scenario.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is malformed or references unknown airports.
    """
    path = Path(path)
    if not path.exists() and not path.is_absolute() and (SCENARIO_DIR / path).exists():
        path = SCENARIO_DIR / path

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"{path}: invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"{path}: scenario must be a mapping")

    builder = ScenarioBuilder().with_name(str(data.get("name", path.stem)))

    airports = data.get("airports") or {}
    if not isinstance(airports, dict):
        raise ValueError(f"{path}: 'airports' must be a mapping of code to airport")
    for code, values in airports.items():
        try:
            builder.with_airport(
                str(code), str(values.get("name", code)), float(values["lat"]), float(values["lon"])
            )
        except (AttributeError, KeyError, TypeError) as e:
            raise ValueError(f"{path}: airport {code!r} needs lat and lon") from e

    flights = data.get("flights") or []
    if not isinstance(flights, list):
        raise ValueError(f"{path}: 'flights' must be a list")
    for entry in flights:
        if not isinstance(entry, dict) or not entry.get("callsign"):
            raise ValueError(f"{path}: every flight needs a callsign")
        try:
            origin = str(entry["from"])
            destination = str(entry["to"])
        except KeyError as e:
            raise ValueError(f"{path}: flight {entry['callsign']!r} missing {e.args[0]!r}") from e

        aircraft = entry.get("aircraft") or " ".join(
            part for part in (entry.get("manufacturer", ""), entry.get("model", "")) if part
        )
        builder.with_flight(
            callsign=str(entry["callsign"]),
            origin=origin,
            destination=destination,
            aircraft=str(aircraft),
            tail=str(entry.get("tail", "")),
            start_offset=float(entry.get("start_offset", 0.0)),
        )

    scenario = builder.build()
    logger.info(
        "Loaded scenario %r: %d airports, %d flights",
        scenario.name,
        len(scenario.airports),
        len(scenario.flights),
    )
    return scenario
