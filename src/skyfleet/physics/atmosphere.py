"""International Standard Atmosphere (ISA) model.

Computes static temperature, pressure, density and speed of sound for a
geometric altitude using the seven ICAO layers up to 86 km. All functions
are pure and stateless; altitudes outside the modeled range are clamped.

Typical usage example:
    from skyfleet.physics import atmosphere

    state = atmosphere.get_atmosphere(11000.0)
    print(state.density, state.speed_of_sound)
    mach = atmosphere.tas_to_mach(250.0, 11000.0)
"""

import math
from dataclasses import dataclass

# ISA sea level reference values
SEA_LEVEL_TEMPERATURE = 288.15  # K (15°C)
SEA_LEVEL_PRESSURE = 101325.0  # Pa
SEA_LEVEL_DENSITY = 1.225  # kg/m³

# Physical constants
GRAVITY = 9.80665  # m/s²
GAS_CONSTANT = 287.05287  # J/(kg·K), dry air
SPECIFIC_HEAT_RATIO = 1.4  # γ for air

MIN_ALTITUDE = 0.0
MAX_ALTITUDE = 86000.0

# (base altitude m, lapse rate K/m, base temperature K)
LAYERS: tuple[tuple[float, float, float], ...] = (
    (0.0, -0.0065, 288.15),  # Troposphere
    (11000.0, 0.0, 216.65),  # Tropopause
    (20000.0, 0.001, 216.65),  # Lower stratosphere
    (32000.0, 0.0028, 228.65),  # Upper stratosphere
    (47000.0, 0.0, 270.65),  # Stratopause
    (51000.0, -0.0028, 270.65),  # Lower mesosphere
    (71000.0, -0.002, 214.65),  # Upper mesosphere
)

_ISOTHERMAL_EPSILON = 1e-10

# Sutherland's law constants
_SUTHERLAND_MU0 = 1.716e-5  # Pa·s
_SUTHERLAND_T0 = 273.15  # K
_SUTHERLAND_S = 110.4  # K


@dataclass(frozen=True)
class AtmosphereState:
    """Atmospheric conditions at one altitude.

    Attributes:
        altitude: Geometric altitude in meters (after clamping).
        temperature: Static air temperature in Kelvin.
        pressure: Static pressure in Pascals.
        density: Air density in kg/m³.
        speed_of_sound: Local speed of sound in m/s.
        density_ratio: σ = ρ/ρ₀.
        pressure_ratio: δ = P/P₀.
        temperature_ratio: θ = T/T₀.
    """

    altitude: float
    temperature: float
    pressure: float
    density: float
    speed_of_sound: float
    density_ratio: float
    pressure_ratio: float
    temperature_ratio: float

    @property
    def temperature_celsius(self) -> float:
        """Static temperature in degrees Celsius."""
        return self.temperature - 273.15

    @property
    def dynamic_viscosity(self) -> float:
        """Dynamic viscosity in Pa·s (Sutherland's law)."""
        return (
            _SUTHERLAND_MU0
            * (self.temperature / _SUTHERLAND_T0) ** 1.5
            * (_SUTHERLAND_T0 + _SUTHERLAND_S)
            / (self.temperature + _SUTHERLAND_S)
        )


def clamp_altitude(altitude: float) -> float:
    """Clamp an altitude to the modeled range [0, 86000] m."""
    return max(MIN_ALTITUDE, min(altitude, MAX_ALTITUDE))


def _layer_pressure_ratio(delta_h: float, lapse_rate: float, base_temp: float) -> float:
    """Pressure ratio across delta_h meters of a single layer."""
    if abs(lapse_rate) < _ISOTHERMAL_EPSILON:
        return math.exp(-GRAVITY * delta_h / (GAS_CONSTANT * base_temp))
    top_temp = base_temp + lapse_rate * delta_h
    exponent = -GRAVITY / (lapse_rate * GAS_CONSTANT)
    return (top_temp / base_temp) ** exponent


def temperature_and_pressure(altitude: float) -> tuple[float, float]:
    """Integrate temperature and pressure from sea level to an altitude.

    Args:
        altitude: Geometric altitude in meters (clamped).

    Returns:
        Tuple of (temperature K, pressure Pa).
    """
    altitude = clamp_altitude(altitude)
    temperature = SEA_LEVEL_TEMPERATURE
    pressure = SEA_LEVEL_PRESSURE

    for i, (layer_base, lapse_rate, base_temp) in enumerate(LAYERS):
        layer_top = LAYERS[i + 1][0] if i < len(LAYERS) - 1 else MAX_ALTITUDE

        if altitude <= layer_top:
            delta_h = altitude - layer_base
            temperature = base_temp + lapse_rate * delta_h
            pressure *= _layer_pressure_ratio(delta_h, lapse_rate, base_temp)
            break

        # Whole layer traversed, carry pressure at its top
        pressure *= _layer_pressure_ratio(layer_top - layer_base, lapse_rate, base_temp)

    return temperature, pressure


def get_atmosphere(altitude: float) -> AtmosphereState:
    """Calculate atmospheric properties at a geometric altitude.

    Args:
        altitude: Geometric altitude in meters. Values outside [0, 86000]
            are clamped.

    Returns:
        AtmosphereState for the clamped altitude.
    """
    altitude = clamp_altitude(altitude)
    temperature, pressure = temperature_and_pressure(altitude)
    density = pressure / (GAS_CONSTANT * temperature)
    speed_of_sound = math.sqrt(SPECIFIC_HEAT_RATIO * GAS_CONSTANT * temperature)

    return AtmosphereState(
        altitude=altitude,
        temperature=temperature,
        pressure=pressure,
        density=density,
        speed_of_sound=speed_of_sound,
        density_ratio=density / SEA_LEVEL_DENSITY,
        pressure_ratio=pressure / SEA_LEVEL_PRESSURE,
        temperature_ratio=temperature / SEA_LEVEL_TEMPERATURE,
    )


def tas_to_ias(tas: float, altitude: float) -> float:
    """Convert true airspeed to indicated airspeed (m/s)."""
    return tas * math.sqrt(get_atmosphere(altitude).density_ratio)


def ias_to_tas(ias: float, altitude: float) -> float:
    """Convert indicated airspeed to true airspeed (m/s)."""
    return ias / math.sqrt(get_atmosphere(altitude).density_ratio)


def tas_to_mach(tas: float, altitude: float) -> float:
    """Convert true airspeed (m/s) to Mach number."""
    return tas / get_atmosphere(altitude).speed_of_sound


def mach_to_tas(mach: float, altitude: float) -> float:
    """Convert Mach number to true airspeed (m/s)."""
    return mach * get_atmosphere(altitude).speed_of_sound


def pressure_altitude(
    geometric_altitude: float, local_pressure: float = SEA_LEVEL_PRESSURE
) -> float:
    """Pressure altitude from geometric altitude and local pressure.

    Assumes a standard troposphere.

    Args:
        geometric_altitude: Geometric altitude in meters.
        local_pressure: Local static pressure in Pascals.

    Returns:
        Pressure altitude in meters.
    """
    pressure_ratio = local_pressure / SEA_LEVEL_PRESSURE
    offset = SEA_LEVEL_TEMPERATURE / 0.0065 * (1 - pressure_ratio**0.190284)
    return geometric_altitude + offset


def density_altitude(pressure_alt: float, outside_air_temp: float) -> float:
    """Density altitude using the 120-per-degree rule of thumb.

    Args:
        pressure_alt: Pressure altitude.
        outside_air_temp: Outside air temperature in Kelvin.

    Returns:
        Density altitude in the same unit as pressure_alt.
    """
    standard_temp = SEA_LEVEL_TEMPERATURE - 0.0065 * pressure_alt
    return pressure_alt + 120 * (outside_air_temp - standard_temp)
