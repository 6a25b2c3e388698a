"""Spherical-earth navigation helpers.

Angles passed in and out of the route functions are degrees for
latitude/longitude and radians for headings, matching FlightState.
"""

import math

EARTH_RADIUS_M = 6371000.0
METERS_PER_NM = 1852.0
METERS_PER_FOOT = 0.3048


def great_circle_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance between two points in meters."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dlat = phi2 - phi1
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(max(0.0, 1 - a)))
    return EARTH_RADIUS_M * c


def initial_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Forward azimuth from point 1 to point 2.

    Returns:
        Bearing in radians in (-π, π], 0 = north, clockwise positive.
    """
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dlon = math.radians(lon2 - lon1)

    y = math.sin(dlon) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlon)
    return math.atan2(y, x)


def destination_point(
    lat: float, lon: float, heading: float, distance: float
) -> tuple[float, float]:
    """Move along a great circle from a start point.

    Args:
        lat: Start latitude in degrees.
        lon: Start longitude in degrees.
        heading: True heading in radians.
        distance: Distance to travel in meters.

    Returns:
        (latitude, longitude) in degrees, longitude normalized to [-180, 180).
    """
    phi1 = math.radians(lat)
    lambda1 = math.radians(lon)
    delta = distance / EARTH_RADIUS_M

    phi2 = math.asin(
        math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(heading)
    )
    lambda2 = lambda1 + math.atan2(
        math.sin(heading) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )

    lon2 = (math.degrees(lambda2) + 540.0) % 360.0 - 180.0
    return math.degrees(phi2), lon2


def intermediate_point(
    lat1: float, lon1: float, lat2: float, lon2: float, fraction: float
) -> tuple[float, float]:
    """Point at a fraction of the great circle between two points.

    Falls back to straight lat/lon interpolation when the points are
    (nearly) coincident, where the spherical formula divides by zero.
    """
    fraction = max(0.0, min(1.0, fraction))
    delta = great_circle_distance(lat1, lon1, lat2, lon2) / EARTH_RADIUS_M
    sin_delta = math.sin(delta)

    if abs(sin_delta) < 1e-12:
        return lat1 + (lat2 - lat1) * fraction, lon1 + (lon2 - lon1) * fraction

    phi1, lambda1 = math.radians(lat1), math.radians(lon1)
    phi2, lambda2 = math.radians(lat2), math.radians(lon2)

    a = math.sin((1 - fraction) * delta) / sin_delta
    b = math.sin(fraction * delta) / sin_delta
    x = a * math.cos(phi1) * math.cos(lambda1) + b * math.cos(phi2) * math.cos(lambda2)
    y = a * math.cos(phi1) * math.sin(lambda1) + b * math.cos(phi2) * math.sin(lambda2)
    z = a * math.sin(phi1) + b * math.sin(phi2)

    return math.degrees(math.atan2(z, math.hypot(x, y))), math.degrees(math.atan2(y, x))


def normalize_angle(angle: float) -> float:
    """Wrap an angle in radians to [-π, π]."""
    while angle > math.pi:
        angle -= 2 * math.pi
    while angle < -math.pi:
        angle += 2 * math.pi
    return angle


def top_of_descent_distance(altitude: float) -> float:
    """Distance needed to descend from an altitude using the 3:1 rule.

    Three nautical miles per 1000 ft to lose; independent of speed and wind.

    Args:
        altitude: Altitude to lose in meters.

    Returns:
        Distance in meters.
    """
    distance_nm = (altitude / (1000 * METERS_PER_FOOT)) * 3.0
    return distance_nm * METERS_PER_NM
