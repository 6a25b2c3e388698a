"""Tests for the ISA atmosphere model."""

import pytest

from skyfleet.physics import atmosphere
from skyfleet.physics.atmosphere import (
    LAYERS,
    MAX_ALTITUDE,
    SEA_LEVEL_DENSITY,
    SEA_LEVEL_PRESSURE,
    SEA_LEVEL_TEMPERATURE,
    get_atmosphere,
)


class TestGetAtmosphere:
    """Tests for get_atmosphere()."""

    def test_sea_level_standard_values(self) -> None:
        """Test sea level matches the ISA reference values."""
        atm = get_atmosphere(0.0)

        assert atm.temperature == pytest.approx(SEA_LEVEL_TEMPERATURE)
        assert atm.pressure == pytest.approx(SEA_LEVEL_PRESSURE)
        assert atm.density == pytest.approx(SEA_LEVEL_DENSITY, rel=1e-4)
        assert atm.speed_of_sound == pytest.approx(340.29, abs=0.05)
        assert atm.density_ratio == pytest.approx(1.0, rel=1e-4)
        assert atm.pressure_ratio == pytest.approx(1.0)
        assert atm.temperature_ratio == pytest.approx(1.0)

    def test_tropopause_values(self) -> None:
        """Test conditions at 11 km."""
        atm = get_atmosphere(11000.0)

        assert atm.temperature == pytest.approx(216.65, abs=0.01)
        assert atm.pressure == pytest.approx(22632, rel=1e-3)
        assert atm.density == pytest.approx(0.3639, rel=1e-3)
        assert atm.speed_of_sound == pytest.approx(295.07, abs=0.1)

    def test_isothermal_layer_keeps_temperature(self) -> None:
        """Test temperature is constant between 11 and 20 km."""
        assert get_atmosphere(12000.0).temperature == pytest.approx(216.65)
        assert get_atmosphere(19999.0).temperature == pytest.approx(216.65)

    def test_temperature_falls_in_troposphere(self) -> None:
        """Test the -6.5 K/km lapse rate."""
        atm = get_atmosphere(5000.0)
        assert atm.temperature == pytest.approx(288.15 - 32.5)

    def test_density_monotonic(self) -> None:
        """Test density never increases with altitude."""
        previous = get_atmosphere(0.0).density
        for altitude in range(100, int(MAX_ALTITUDE) + 1, 100):
            density = get_atmosphere(float(altitude)).density
            assert density <= previous
            previous = density

    def test_continuous_across_layer_boundaries(self) -> None:
        """Test no jumps in density or pressure at layer bases."""
        for base, _, _ in LAYERS[1:]:
            below = get_atmosphere(base - 1e-6)
            above = get_atmosphere(base + 1e-6)
            assert abs(above.density - below.density) / below.density < 1e-6
            assert abs(above.pressure - below.pressure) / below.pressure < 1e-6

    def test_negative_altitude_clamped(self) -> None:
        """Test altitudes below sea level are clamped to 0."""
        atm = get_atmosphere(-500.0)
        assert atm.altitude == 0.0
        assert atm.density == get_atmosphere(0.0).density

    def test_altitude_above_model_clamped(self) -> None:
        """Test altitudes above 86 km are clamped."""
        atm = get_atmosphere(120000.0)
        assert atm.altitude == MAX_ALTITUDE
        assert atm.pressure == get_atmosphere(MAX_ALTITUDE).pressure

    def test_derived_properties(self) -> None:
        """Test Celsius temperature and Sutherland viscosity."""
        atm = get_atmosphere(0.0)
        assert atm.temperature_celsius == pytest.approx(15.0)
        assert atm.dynamic_viscosity == pytest.approx(1.789e-5, rel=1e-3)


class TestSpeedConversions:
    """Tests for airspeed and Mach conversions."""

    @pytest.mark.parametrize("altitude", [0.0, 3000.0, 9000.0, 13000.0])
    @pytest.mark.parametrize("speed", [50.0, 150.0, 300.0])
    def test_ias_tas_inverse(self, speed: float, altitude: float) -> None:
        """Test IAS -> TAS undoes TAS -> IAS."""
        ias = atmosphere.tas_to_ias(speed, altitude)
        assert atmosphere.ias_to_tas(ias, altitude) == pytest.approx(speed)

    def test_ias_lower_than_tas_at_altitude(self) -> None:
        """Test IAS reads low in thin air."""
        assert atmosphere.tas_to_ias(250.0, 11000.0) < 250.0
        assert atmosphere.tas_to_ias(250.0, 0.0) == pytest.approx(250.0, rel=1e-4)

    def test_mach_round_trip(self) -> None:
        """Test Mach <-> TAS conversion at cruise altitude."""
        tas = atmosphere.mach_to_tas(0.85, 11000.0)
        assert tas == pytest.approx(0.85 * 295.07, rel=1e-3)
        assert atmosphere.tas_to_mach(tas, 11000.0) == pytest.approx(0.85)


class TestAltitudeHelpers:
    """Tests for pressure and density altitude."""

    def test_standard_pressure_gives_geometric_altitude(self) -> None:
        """Test pressure altitude equals geometric altitude at 1013.25 hPa."""
        assert atmosphere.pressure_altitude(1500.0) == pytest.approx(1500.0)

    def test_low_pressure_raises_pressure_altitude(self) -> None:
        """Test a low-pressure day raises pressure altitude."""
        assert atmosphere.pressure_altitude(0.0, 100000.0) > 0.0

    def test_hot_day_raises_density_altitude(self) -> None:
        """Test density altitude grows with temperature above standard."""
        standard = atmosphere.density_altitude(1000.0, SEA_LEVEL_TEMPERATURE - 6.5)
        hot = atmosphere.density_altitude(1000.0, SEA_LEVEL_TEMPERATURE + 10.0)
        assert standard == pytest.approx(1000.0)
        assert hot > standard
