"""Aircraft performance profile.

Immutable aerodynamic, mass and propulsion parameters for one aircraft
type. All values are SI: meters, kilograms, Newtons, seconds, radians.
"""

from dataclasses import dataclass, fields
from typing import Any


@dataclass(frozen=True)
class AircraftPerformanceProfile:
    """Performance characteristics used by the physics engine.

    Attributes:
        manufacturer: Manufacturer name (e.g., "Airbus").
        model: Model designation (e.g., "A350-900").
        wing_area: Reference wing area in m².
        wing_span: Wing span in m.
        empty_weight: Operating empty mass in kg.
        max_fuel: Maximum fuel capacity in kg.
        max_takeoff_weight: MTOW in kg.
        max_landing_weight: MLW in kg.
        cd0: Zero-lift drag coefficient.
        oswald_factor: Oswald efficiency factor (e).
        cl_max: Maximum lift coefficient, clean.
        cl_max_flaps: Maximum lift coefficient, flaps extended.
        max_thrust_sea_level: Total sea-level static thrust in N.
        thrust_lapse_rate: Exponent applied to density ratio for thrust lapse.
        tsfc: Thrust-specific fuel consumption in kg/(N·s).
        number_of_engines: Engine count.
        service_ceiling: Maximum operating altitude in m.
        cruise_altitude: Typical cruise altitude in m.
        cruise_mach: Typical cruise Mach.
        max_mach: Maximum operating Mach (MMO).
        vne: Never-exceed speed (IAS) in m/s.
        vs0: Stall speed, clean at MTOW, in m/s.
        vs1: Stall speed, landing configuration, in m/s.
        max_climb_rate: Maximum sea-level climb rate in m/s.
        max_descent_rate: Maximum descent rate in m/s.
        climb_angle_max: Maximum climb angle in radians.
        max_bank_angle: Maximum bank angle in radians.
        max_load_factor: Maximum load factor in g.
    """

    manufacturer: str
    model: str
    wing_area: float
    wing_span: float
    empty_weight: float
    max_fuel: float
    max_takeoff_weight: float
    max_landing_weight: float
    cd0: float
    oswald_factor: float
    cl_max: float
    cl_max_flaps: float
    max_thrust_sea_level: float
    thrust_lapse_rate: float
    tsfc: float
    number_of_engines: int
    service_ceiling: float
    cruise_altitude: float
    cruise_mach: float
    max_mach: float
    vne: float
    vs0: float
    vs1: float
    max_climb_rate: float
    max_descent_rate: float
    climb_angle_max: float
    max_bank_angle: float
    max_load_factor: float

    @property
    def aspect_ratio(self) -> float:
        """Wing aspect ratio (span² / area)."""
        return self.wing_span * self.wing_span / self.wing_area

    @property
    def key(self) -> str:
        """Catalog key, "Manufacturer Model"."""
        return f"{self.manufacturer} {self.model}".strip()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AircraftPerformanceProfile":
        """Create a profile from a configuration mapping.

        Thrust may be given either as ``max_thrust_sea_level`` (total) or as
        ``thrust_per_engine`` multiplied by ``number_of_engines``.

        Raises:
            ValueError: If a required parameter is missing or not positive
                where it must be.
        """
        values = dict(data)
        if "max_thrust_sea_level" not in values and "thrust_per_engine" in values:
            values["max_thrust_sea_level"] = float(values["thrust_per_engine"]) * int(
                values.get("number_of_engines", 1)
            )
        values.pop("thrust_per_engine", None)

        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in values:
                raise ValueError(f"{f.name} required for aircraft profile")
            raw = values[f.name]
            if f.name in ("manufacturer", "model"):
                kwargs[f.name] = str(raw)
            elif f.name == "number_of_engines":
                kwargs[f.name] = int(raw)
            else:
                kwargs[f.name] = float(raw)

        for name in ("wing_area", "wing_span", "empty_weight", "cl_max", "cl_max_flaps"):
            if kwargs[name] <= 0:
                raise ValueError(f"{name} must be positive")

        return cls(**kwargs)
