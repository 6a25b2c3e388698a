"""Aircraft performance catalog.

Loads the fixed table of aircraft performance profiles from YAML and
resolves free-form aircraft names to a profile. Lookup is total: exact
key first, then a substring match in either direction, then the
configured default profile.

Typical usage:
    from skyfleet.aircraft.performance import get_catalog

    catalog = get_catalog()
    profile = catalog.lookup("Boeing 777-300ER")
    profile = catalog.lookup("777")  # fuzzy match
"""

import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from skyfleet.aircraft.profile import AircraftPerformanceProfile
from skyfleet.core.logging_system import get_logger

if TYPE_CHECKING:
    from skyfleet.flight.state import FlightState

logger = get_logger(__name__)

DEFAULT_CATALOG_PATH = (
    Path(__file__).resolve().parent.parent / "config" / "aircraft_performance.yaml"
)
DEFAULT_AIRCRAFT = "Airbus A350-900"


class AircraftPerformanceCatalog:
    """Keyed registry of aircraft performance profiles.

    Intended as configuration data: profiles are loaded once and never
    change at runtime. Resolved lookups are memoized because the physics
    engine resolves the profile of every flight on every tick.

    Attributes:
        default_key: Key of the profile returned when nothing matches.
        warn_on_fallback: Log unmatched names at WARNING instead of DEBUG.
    """

    def __init__(
        self,
        profiles: dict[str, AircraftPerformanceProfile],
        default_key: str = DEFAULT_AIRCRAFT,
        warn_on_fallback: bool = True,
    ) -> None:
        """Initialize the catalog.

        Args:
            profiles: Mapping of "Manufacturer Model" keys to profiles.
            default_key: Key of the fallback profile.
            warn_on_fallback: Whether fallbacks are logged as warnings.

        Raises:
            ValueError: If profiles is empty or default_key is unknown.
        """
        if not profiles:
            raise ValueError("at least one aircraft profile required")

        self._profiles: dict[str, AircraftPerformanceProfile] = {}
        self._keys: dict[str, str] = {}  # lower-case key -> display key
        for key, profile in profiles.items():
            self._profiles[key] = profile
            self._keys[key.lower()] = key

        if default_key.lower() not in self._keys:
            raise ValueError(f"default aircraft {default_key!r} not in catalog")

        self.default_key = self._keys[default_key.lower()]
        self.warn_on_fallback = warn_on_fallback
        self._resolved: dict[str, AircraftPerformanceProfile] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_yaml(
        cls,
        path: str | Path | None = None,
        default_key: str | None = None,
        warn_on_fallback: bool = True,
    ) -> "AircraftPerformanceCatalog":
        """Load a catalog from a YAML file.

        Args:
            path: YAML file path. Defaults to the packaged catalog.
            default_key: Overrides the file's ``default`` entry.
            warn_on_fallback: Whether fallbacks are logged as warnings.

        Returns:
            Loaded catalog.

        Raises:
            ValueError: If the file has no ``aircraft`` section or a profile
                is invalid.
        """
        path = Path(path) if path is not None else DEFAULT_CATALOG_PATH
        with open(path, encoding="utf-8") as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}

        entries = data.get("aircraft")
        if not isinstance(entries, dict) or not entries:
            raise ValueError(f"{path}: 'aircraft' section missing or empty")

        profiles: dict[str, AircraftPerformanceProfile] = {}
        for key, values in entries.items():
            try:
                profiles[str(key)] = AircraftPerformanceProfile.from_dict(values)
            except (TypeError, ValueError) as e:
                raise ValueError(f"{path}: invalid profile {key!r}: {e}") from e

        default = default_key or data.get("default") or DEFAULT_AIRCRAFT
        logger.info("Loaded %d aircraft profiles from %s", len(profiles), path)
        return cls(profiles, default_key=default, warn_on_fallback=warn_on_fallback)

    @property
    def default_profile(self) -> AircraftPerformanceProfile:
        """The fallback profile."""
        return self._profiles[self.default_key]

    def keys(self) -> list[str]:
        """Catalog keys in definition order."""
        return list(self._profiles.keys())

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, key: str) -> bool:
        return key.lower() in self._keys

    def get(self, key: str) -> AircraftPerformanceProfile | None:
        """Exact (case-insensitive) lookup without fallback."""
        display_key = self._keys.get(key.lower())
        return self._profiles[display_key] if display_key else None

    def lookup(self, name: str) -> AircraftPerformanceProfile:
        """Resolve an aircraft name to a profile. Never fails.

        Args:
            name: Free-form aircraft name (e.g., "Airbus A350-900", "A380").

        Returns:
            Exact match, else first substring match in either direction,
            else the default profile.
        """
        cache_key = name.strip().lower()
        with self._lock:
            cached = self._resolved.get(cache_key)
            if cached is not None:
                return cached

            profile = self._match(cache_key)
            if profile is None:
                profile = self.default_profile
                log = logger.warning if self.warn_on_fallback else logger.debug
                log("No performance profile for %r, using %s", name, self.default_key)

            self._resolved[cache_key] = profile
            return profile

    def _match(self, name: str) -> AircraftPerformanceProfile | None:
        if not name:
            return None

        display_key = self._keys.get(name)
        if display_key is not None:
            return self._profiles[display_key]

        for lower_key, display_key in self._keys.items():
            if lower_key in name or name in lower_key:
                return self._profiles[display_key]

        return None

    def profile_for_flight(self, flight: "FlightState") -> AircraftPerformanceProfile:
        """Resolve the profile assigned to a flight (manufacturer + model)."""
        key = f"{flight.aircraft_manufacturer} {flight.aircraft_model}".strip()
        return self.lookup(key or flight.aircraft_model)


# Global singleton instance
_global_catalog: AircraftPerformanceCatalog | None = None


def get_catalog() -> AircraftPerformanceCatalog:
    """Get the global catalog, loading the packaged YAML on first access."""
    global _global_catalog
    if _global_catalog is None:
        _global_catalog = AircraftPerformanceCatalog.from_yaml()
    return _global_catalog


def reset_catalog() -> None:
    """Drop the global catalog so the next access reloads it."""
    global _global_catalog
    _global_catalog = None
