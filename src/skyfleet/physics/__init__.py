"""Atmosphere, aerodynamics and navigation math for the flight model."""
