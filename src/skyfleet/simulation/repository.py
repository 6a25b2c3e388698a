"""Flight persistence adapters.

The scheduler persists snapshots through the FlightRepository contract on
a best-effort basis. Two adapters are provided: an in-memory store for
tests and single-process runs, and an HTTP adapter that posts JSON
snapshots to a remote flight store.
"""

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable

import requests

from skyfleet.core.logging_system import get_logger
from skyfleet.flight.state import FlightState

logger = get_logger(__name__)


class PersistenceError(Exception):
    """Raised when a repository cannot read or write flights."""


class FlightRepository(ABC):
    """Bulk persistence contract for flight records."""

    @abstractmethod
    def get_all(self) -> list[FlightState]:
        """Load every stored flight."""

    @abstractmethod
    def bulk_upsert(self, flights: Iterable[FlightState]) -> None:
        """Insert or replace flights keyed by callsign."""

    @abstractmethod
    def reset_flights(self, flights: Iterable[FlightState]) -> None:
        """Replace the stored state of flights after a simulation reset."""


class InMemoryFlightRepository(FlightRepository):
    """Dictionary-backed repository keyed by upper-cased callsign."""

    def __init__(self, flights: Iterable[FlightState] = ()) -> None:
        self._flights: dict[str, FlightState] = {}
        self._lock = threading.Lock()
        self.upsert_count = 0
        self.bulk_upsert(flights)
        self.upsert_count = 0

    def get_all(self) -> list[FlightState]:
        with self._lock:
            return [flight.copy() for flight in self._flights.values()]

    def get(self, callsign: str) -> FlightState | None:
        with self._lock:
            flight = self._flights.get(callsign.upper())
            return flight.copy() if flight else None

    def bulk_upsert(self, flights: Iterable[FlightState]) -> None:
        with self._lock:
            for flight in flights:
                self._flights[flight.callsign.upper()] = flight.copy()
            self.upsert_count += 1

    def reset_flights(self, flights: Iterable[FlightState]) -> None:
        self.bulk_upsert(flights)

    def __len__(self) -> int:
        with self._lock:
            return len(self._flights)


class HttpFlightRepository(FlightRepository):
    """Repository backed by a remote HTTP flight store.

    Endpoints, relative to base_url:
        GET  /flights        -> list of flight dictionaries
        POST /flights/bulk   <- list of flight dictionaries
        POST /flights/reset  <- list of flight dictionaries

    Attributes:
        base_url: Store root URL without trailing slash.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url required for HTTP repository")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def get_all(self) -> list[FlightState]:
        payload = self._request("GET", "/flights")
        if not isinstance(payload, list):
            raise PersistenceError(f"{self.base_url}/flights: expected a list of flights")

        try:
            return [FlightState.from_dict(item) for item in payload]
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Invalid flight record from {self.base_url}: {e}") from e

    def bulk_upsert(self, flights: Iterable[FlightState]) -> None:
        self._request("POST", "/flights/bulk", [flight.to_dict() for flight in flights])

    def reset_flights(self, flights: Iterable[FlightState]) -> None:
        self._request("POST", "/flights/reset", [flight.to_dict() for flight in flights])

    def close(self) -> None:
        self._session.close()

    def _request(self, method: str, path: str, payload: list | None = None) -> list | None:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(method, url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.Timeout as e:
            raise PersistenceError(f"{method} {url} timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise PersistenceError(f"{method} {url} failed: {e}") from e

        if method == "GET":
            try:
                return response.json()
            except ValueError as e:
                raise PersistenceError(f"{method} {url} returned invalid JSON") from e
        return None
