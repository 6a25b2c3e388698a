"""Scenario definitions and loading."""

from skyfleet.scenario.scenario import (
    SCENARIO_DIR,
    Scenario,
    ScenarioBuilder,
    load_scenario,
    split_aircraft_name,
)

__all__ = ["SCENARIO_DIR", "Scenario", "ScenarioBuilder", "load_scenario", "split_aircraft_name"]
