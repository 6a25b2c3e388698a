"""Flight phase state machine definitions.

Phases form a total order from PREFLIGHT to ARRIVED. A flight may only
move forward through that order (skipping phases is allowed); the single
way back is a full reset to PREFLIGHT performed by the scheduler.
"""

from enum import Enum


class FlightPhase(Enum):
    """Flight lifecycle phases, declared in forward order."""

    PREFLIGHT = "preflight"  # Waiting for scheduled start
    TAXI = "taxi"  # Reserved, never entered by the engine
    TAKEOFF = "takeoff"  # Ground roll, rotation and initial climb
    CLIMB = "climb"  # Climbing to cruise altitude
    CRUISE = "cruise"  # Level flight at cruise altitude
    DESCENT = "descent"  # Descending from top of descent
    APPROACH = "approach"  # Final approach on the glideslope
    LANDING = "landing"  # Flare, touchdown and rollout
    ARRIVED = "arrived"  # Terminal

    @property
    def order(self) -> int:
        """Position of this phase in the forward order."""
        return PHASE_ORDER[self]

    @property
    def is_terminal(self) -> bool:
        """True for ARRIVED."""
        return self is FlightPhase.ARRIVED

    @property
    def is_airborne_phase(self) -> bool:
        """True for phases where the aircraft is normally off the ground."""
        return self in AIRBORNE_PHASES

    def __lt__(self, other: "FlightPhase") -> bool:
        if not isinstance(other, FlightPhase):
            return NotImplemented
        return self.order < other.order

    def __le__(self, other: "FlightPhase") -> bool:
        if not isinstance(other, FlightPhase):
            return NotImplemented
        return self.order <= other.order


PHASE_ORDER: dict[FlightPhase, int] = {phase: i for i, phase in enumerate(FlightPhase)}

AIRBORNE_PHASES = frozenset(
    {FlightPhase.CLIMB, FlightPhase.CRUISE, FlightPhase.DESCENT, FlightPhase.APPROACH}
)

# Phases never entered by the engine. TAXI is declared for data compatibility only.
RESERVED_PHASES = frozenset({FlightPhase.TAXI})

# Legacy status labels for consumers that predate the phase model
STATUS_WAITING = "WAITING"
STATUS_ACTIVE = "ACTIVE"
STATUS_LANDED = "LANDED"


def can_transition(current: FlightPhase, new_phase: FlightPhase) -> bool:
    """Check whether a transition moves strictly forward.

    Args:
        current: Current phase.
        new_phase: Requested phase.

    Returns:
        True if new_phase comes after current and is not reserved.
    """
    if new_phase in RESERVED_PHASES:
        return False
    return new_phase.order > current.order


def status_for_phase(phase: FlightPhase) -> str:
    """Simplified status label for a phase."""
    if phase in (FlightPhase.PREFLIGHT, FlightPhase.TAXI):
        return STATUS_WAITING
    if phase is FlightPhase.ARRIVED:
        return STATUS_LANDED
    return STATUS_ACTIVE
