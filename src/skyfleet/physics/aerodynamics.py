"""Aerodynamic force calculations for the point-mass flight model.

Computes lift, drag, thrust and fuel flow for an aircraft profile at a
given flight condition, plus derived performance helpers (stall speed,
climb rate, best-range speed, turn geometry).

Physics model:
- Lift = q * S * CL, with CL = CLα * α clamped to ±CLmax
- Drag = q * S * CD, with CD = CD0 + CL²/(π·e·AR) + high-AoA + wave drag
- Thrust = Tmax_SL * σ^lapse * throttle
- Fuel flow = Thrust * TSFC

Typical usage example:
    from skyfleet.physics import aerodynamics

    forces = aerodynamics.calculate_forces(profile, 250.0, 11000.0, 240000.0, 0.05, 0.8)
    print(forces.lift_to_drag)
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from skyfleet.physics import atmosphere
from skyfleet.physics.atmosphere import GRAVITY

if TYPE_CHECKING:
    from skyfleet.aircraft.profile import AircraftPerformanceProfile

HIGH_AOA_THRESHOLD = 0.15  # rad, ~8.6°
HIGH_AOA_DRAG_FACTOR = 0.01
WAVE_DRAG_ONSET_MACH = 0.75
WAVE_DRAG_MACH_SPAN = 0.15
WAVE_DRAG_MAX = 0.02
LEVEL_FLIGHT_AOA_LIMIT = 0.26  # rad, ~15°
CARSON_FACTOR = 1.32


@dataclass(frozen=True)
class AeroForces:
    """Aerodynamic forces and related values for one flight condition.

    Attributes:
        lift: Lift force in N.
        drag: Drag force in N.
        thrust: Thrust force in N.
        dynamic_pressure: q in Pa.
        lift_coefficient: CL.
        drag_coefficient: CD.
        lift_to_drag: L/D ratio.
        fuel_flow: Fuel flow in kg/s.
        mach: Mach number.
        true_airspeed: TAS in m/s.
        indicated_airspeed: IAS in m/s.
    """

    lift: float
    drag: float
    thrust: float
    dynamic_pressure: float
    lift_coefficient: float
    drag_coefficient: float
    lift_to_drag: float
    fuel_flow: float
    mach: float
    true_airspeed: float
    indicated_airspeed: float

    @property
    def net_thrust(self) -> float:
        """Net force along the flight path (thrust - drag) in N."""
        return self.thrust - self.drag

    @property
    def specific_excess_power(self) -> float:
        """Excess power (net thrust × TAS) in W."""
        return self.net_thrust * self.true_airspeed


def lift_curve_slope(aspect_ratio: float) -> float:
    """Finite-wing lift curve slope CLα = 2π·AR/(AR + 2), per radian."""
    return 2 * math.pi * aspect_ratio / (aspect_ratio + 2)


def available_thrust(profile: "AircraftPerformanceProfile", altitude: float) -> float:
    """Maximum thrust available at an altitude, after lapse, in N."""
    density_ratio = atmosphere.get_atmosphere(altitude).density_ratio
    return profile.max_thrust_sea_level * density_ratio**profile.thrust_lapse_rate


def calculate_forces(
    profile: "AircraftPerformanceProfile",
    true_airspeed: float,
    altitude: float,
    gross_weight: float,
    angle_of_attack: float,
    throttle: float,
    flaps_extended: bool = False,
) -> AeroForces:
    """Calculate all aerodynamic forces for the current flight condition.

    Args:
        profile: Aircraft performance profile.
        true_airspeed: TAS in m/s.
        altitude: Geometric altitude in m.
        gross_weight: Current mass in kg (kept for interface symmetry; the
            forces here do not depend on it).
        angle_of_attack: AoA in radians.
        throttle: Throttle setting, clamped to [0, 1].
        flaps_extended: Use the flaps-extended CLmax.

    Returns:
        AeroForces for this condition.
    """
    atm = atmosphere.get_atmosphere(altitude)
    throttle = max(0.0, min(1.0, throttle))
    aspect_ratio = profile.aspect_ratio

    dynamic_pressure = 0.5 * atm.density * true_airspeed * true_airspeed

    cl_max = profile.cl_max_flaps if flaps_extended else profile.cl_max
    cl = lift_curve_slope(aspect_ratio) * angle_of_attack
    cl = max(-cl_max, min(cl, cl_max))
    lift = dynamic_pressure * profile.wing_area * cl

    # Parabolic polar
    induced_factor = 1.0 / (math.pi * profile.oswald_factor * aspect_ratio)
    cd = profile.cd0 + cl * cl * induced_factor

    if abs(angle_of_attack) > HIGH_AOA_THRESHOLD:
        cd += HIGH_AOA_DRAG_FACTOR * (abs(angle_of_attack) - HIGH_AOA_THRESHOLD) ** 2

    mach = true_airspeed / atm.speed_of_sound
    if mach > WAVE_DRAG_ONSET_MACH:
        mach_factor = ((mach - WAVE_DRAG_ONSET_MACH) / WAVE_DRAG_MACH_SPAN) ** 2
        cd += WAVE_DRAG_MAX * min(1.0, mach_factor)

    drag = dynamic_pressure * profile.wing_area * cd

    max_thrust = profile.max_thrust_sea_level * atm.density_ratio**profile.thrust_lapse_rate
    thrust = max_thrust * throttle

    return AeroForces(
        lift=lift,
        drag=drag,
        thrust=thrust,
        dynamic_pressure=dynamic_pressure,
        lift_coefficient=cl,
        drag_coefficient=cd,
        lift_to_drag=cl / cd if cd > 0 else 0.0,
        fuel_flow=thrust * profile.tsfc,
        mach=mach,
        true_airspeed=true_airspeed,
        indicated_airspeed=true_airspeed * math.sqrt(atm.density_ratio),
    )


def level_flight_aoa(
    profile: "AircraftPerformanceProfile",
    true_airspeed: float,
    altitude: float,
    gross_weight: float,
) -> float:
    """Angle of attack needed for lift = weight, clamped to ±15°."""
    atm = atmosphere.get_atmosphere(altitude)
    dynamic_pressure = 0.5 * atm.density * true_airspeed * true_airspeed
    if dynamic_pressure <= 0:
        return 0.0

    required_cl = gross_weight * GRAVITY / (dynamic_pressure * profile.wing_area)
    aoa = required_cl / lift_curve_slope(profile.aspect_ratio)
    return max(-LEVEL_FLIGHT_AOA_LIMIT, min(aoa, LEVEL_FLIGHT_AOA_LIMIT))


def stall_speed(
    profile: "AircraftPerformanceProfile",
    altitude: float,
    gross_weight: float,
    flaps_extended: bool = False,
) -> float:
    """Stall TAS in m/s: V = sqrt(2W / (ρ·S·CLmax))."""
    atm = atmosphere.get_atmosphere(altitude)
    cl_max = profile.cl_max_flaps if flaps_extended else profile.cl_max
    weight = gross_weight * GRAVITY
    return math.sqrt(2 * weight / (atm.density * profile.wing_area * cl_max))


def max_climb_rate(
    profile: "AircraftPerformanceProfile",
    true_airspeed: float,
    altitude: float,
    gross_weight: float,
    throttle: float = 1.0,
) -> float:
    """Maximum sustainable climb rate (excess power / weight) in m/s, >= 0."""
    aoa = level_flight_aoa(profile, true_airspeed, altitude, gross_weight)
    forces = calculate_forces(profile, true_airspeed, altitude, gross_weight, aoa, throttle)

    weight = gross_weight * GRAVITY
    if weight <= 0:
        return 0.0
    return max(0.0, forces.specific_excess_power / weight)


def best_cruise_speed(
    profile: "AircraftPerformanceProfile", altitude: float, gross_weight: float
) -> float:
    """Best-range cruise TAS for jets (Carson speed) in m/s.

    Best L/D occurs at CL = sqrt(CD0·π·e·AR); Carson speed is ~1.32 times
    the best L/D speed.
    """
    atm = atmosphere.get_atmosphere(altitude)
    weight = gross_weight * GRAVITY
    cl_best_ld = math.sqrt(profile.cd0 * math.pi * profile.oswald_factor * profile.aspect_ratio)
    speed_best_ld = math.sqrt(2 * weight / (atm.density * profile.wing_area * cl_best_ld))
    return speed_best_ld * CARSON_FACTOR


def bank_angle(true_airspeed: float, turn_rate: float) -> float:
    """Bank angle (rad) for a coordinated turn: tan φ = V·ω / g."""
    return math.atan(true_airspeed * turn_rate / GRAVITY)


def turn_rate(true_airspeed: float, bank: float) -> float:
    """Turn rate (rad/s) for a bank angle: ω = g·tan φ / V.

    Returns 0 at zero or negative airspeed, where the rate is undefined.
    """
    if true_airspeed <= 0:
        return 0.0
    return GRAVITY * math.tan(bank) / true_airspeed


def load_factor(bank: float) -> float:
    """Load factor in a level coordinated turn: n = 1 / cos φ."""
    return 1.0 / math.cos(bank)
