"""Simulation settings management.

This module manages the tunable parameters of the simulation: tick
cadence, persistence cadence, time scaling limits, telemetry sampling,
aircraft fallback behavior and the optional remote flight store.

Settings are stored in ~/.skyfleet/simulation.yaml.

Typical usage:
    from skyfleet.settings import get_simulation_settings

    settings = get_simulation_settings()
    settings.set_speed_multiplier(10.0)
    settings.save()
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".skyfleet" / "simulation.yaml"


@dataclass
class SimulationSettings:
    """Simulation settings with persistence.

    Attributes:
        tick_interval: Seconds between scheduler ticks.
        persistence_interval: Minimum seconds between snapshot persists.
        speed_multiplier: Initial simulated seconds per real second.
        min_speed: Lower bound of the speed multiplier.
        max_speed: Upper bound of the speed multiplier.
        sample_interval: Seconds between telemetry samples of one flight.
        default_aircraft: Catalog key used when an aircraft is unknown.
        warn_on_fallback: Log aircraft fallbacks at WARNING level.
        repository_url: Remote flight store URL ("" for in-memory storage).
        request_timeout: HTTP timeout for the remote flight store.
    """

    tick_interval: float = 0.05
    persistence_interval: float = 1.0
    speed_multiplier: float = 1.0
    min_speed: float = 0.1
    max_speed: float = 1000.0
    sample_interval: float = 1.0
    default_aircraft: str = "Airbus A350-900"
    warn_on_fallback: bool = True
    repository_url: str = ""
    request_timeout: float = 5.0
    _settings_path: Path = field(default_factory=lambda: DEFAULT_SETTINGS_PATH)
    _dirty: bool = field(default=False, repr=False)

    def set_tick_interval(self, seconds: float) -> None:
        """Set the scheduler tick interval.

        Args:
            seconds: Positive interval in seconds.

        Raises:
            ValueError: If seconds is not positive.
        """
        if seconds <= 0:
            raise ValueError("tick_interval must be positive")
        self.tick_interval = seconds
        self._dirty = True

    def set_persistence_interval(self, seconds: float) -> None:
        """Set the minimum interval between persistence calls.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError("persistence_interval must be non-negative")
        self.persistence_interval = seconds
        self._dirty = True

    def set_speed_multiplier(self, multiplier: float) -> None:
        """Set the initial speed multiplier, clamped to [min_speed, max_speed]."""
        self.speed_multiplier = self.clamp_speed(multiplier)
        self._dirty = True

    def set_speed_limits(self, min_speed: float, max_speed: float) -> None:
        """Set the speed multiplier bounds.

        Raises:
            ValueError: If min_speed is not positive or exceeds max_speed.
        """
        if min_speed <= 0 or min_speed > max_speed:
            raise ValueError("speed limits must satisfy 0 < min_speed <= max_speed")
        self.min_speed = min_speed
        self.max_speed = max_speed
        self.speed_multiplier = self.clamp_speed(self.speed_multiplier)
        self._dirty = True

    def set_sample_interval(self, seconds: float) -> None:
        """Set the telemetry sample interval.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError("sample_interval must be non-negative")
        self.sample_interval = seconds
        self._dirty = True

    def set_default_aircraft(self, key: str, warn_on_fallback: bool | None = None) -> None:
        """Set the fallback aircraft and, optionally, its log level flag."""
        if not key.strip():
            raise ValueError("default_aircraft must not be empty")
        self.default_aircraft = key.strip()
        if warn_on_fallback is not None:
            self.warn_on_fallback = warn_on_fallback
        self._dirty = True

    def set_repository(self, url: str, timeout: float | None = None) -> None:
        """Set the remote flight store. An empty URL selects in-memory storage."""
        if timeout is not None:
            if timeout <= 0:
                raise ValueError("request_timeout must be positive")
            self.request_timeout = timeout
        self.repository_url = url.strip()
        self._dirty = True

    def clamp_speed(self, multiplier: float) -> float:
        """Clamp a speed multiplier to the configured bounds."""
        return max(self.min_speed, min(multiplier, self.max_speed))

    def load(self, path: Path | str | None = None) -> bool:
        """Load settings from file.

        Args:
            path: Optional path to settings file.
                 Defaults to ~/.skyfleet/simulation.yaml.

        Returns:
            True if loaded successfully, False otherwise (defaults kept).
        """
        if path is not None:
            self._settings_path = Path(path)

        if not self._settings_path.exists():
            logger.info("No settings file found, using simulation defaults")
            return False

        try:
            with open(self._settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            if not isinstance(data, dict):
                raise ValueError("settings file must contain a mapping")

            sim = data.get("simulation", data)
            loaded = SimulationSettings(
                tick_interval=float(sim.get("tick_interval", 0.05)),
                persistence_interval=float(sim.get("persistence_interval", 1.0)),
                speed_multiplier=float(sim.get("speed_multiplier", 1.0)),
                min_speed=float(sim.get("min_speed", 0.1)),
                max_speed=float(sim.get("max_speed", 1000.0)),
                sample_interval=float(sim.get("sample_interval", 1.0)),
                default_aircraft=str(sim.get("default_aircraft", "Airbus A350-900")),
                warn_on_fallback=bool(sim.get("warn_on_fallback", True)),
                repository_url=str(sim.get("repository_url", "") or ""),
                request_timeout=float(sim.get("request_timeout", 5.0)),
            )
            loaded.validate()

        except (OSError, yaml.YAMLError, TypeError, ValueError) as e:
            logger.error("Failed to load simulation settings: %s", e)
            return False

        for key, value in loaded.to_dict().items():
            setattr(self, key, value)
        self._dirty = False
        logger.info("Loaded simulation settings from %s", self._settings_path)
        return True

    def save(self, path: Path | str | None = None) -> bool:
        """Save settings to file if they changed or the file does not exist.

        Args:
            path: Optional path to settings file.
                 Defaults to ~/.skyfleet/simulation.yaml.

        Returns:
            True if the file is up to date, False if writing failed.
        """
        if path is not None:
            self._settings_path = Path(path)

        if not self._dirty and self._settings_path.exists():
            return True

        try:
            self._settings_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._settings_path, "w", encoding="utf-8") as f:
                yaml.safe_dump({"simulation": self.to_dict()}, f, sort_keys=False)

        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to save simulation settings: %s", e)
            return False

        self._dirty = False
        logger.info("Saved simulation settings to %s", self._settings_path)
        return True

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ValueError: Naming the first offending key.
        """
        if self.tick_interval <= 0:
            raise ValueError("tick_interval must be positive")
        if self.persistence_interval < 0:
            raise ValueError("persistence_interval must be non-negative")
        if self.min_speed <= 0 or self.min_speed > self.max_speed:
            raise ValueError("min_speed/max_speed must satisfy 0 < min_speed <= max_speed")
        if not self.min_speed <= self.speed_multiplier <= self.max_speed:
            raise ValueError("speed_multiplier must lie within [min_speed, max_speed]")
        if self.sample_interval < 0:
            raise ValueError("sample_interval must be non-negative")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")

    @property
    def is_dirty(self) -> bool:
        """Check if settings have unsaved changes."""
        return self._dirty

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization.

        Returns:
            Dictionary representation of settings.
        """
        return {
            "tick_interval": self.tick_interval,
            "persistence_interval": self.persistence_interval,
            "speed_multiplier": self.speed_multiplier,
            "min_speed": self.min_speed,
            "max_speed": self.max_speed,
            "sample_interval": self.sample_interval,
            "default_aircraft": self.default_aircraft,
            "warn_on_fallback": self.warn_on_fallback,
            "repository_url": self.repository_url,
            "request_timeout": self.request_timeout,
        }


# Global singleton instance
_global_settings: SimulationSettings | None = None


def get_simulation_settings() -> SimulationSettings:
    """Get the global simulation settings singleton.

    Loads settings from disk on first access.

    Returns:
        SimulationSettings instance.
    """
    global _global_settings
    if _global_settings is None:
        _global_settings = SimulationSettings()
        _global_settings.load()
    return _global_settings


def reset_simulation_settings() -> None:
    """Reset the global simulation settings singleton.

    Forces reload on next access.
    """
    global _global_settings
    _global_settings = None
