"""Shared geospatial utilities."""

from math import radians, degrees, cos, sin, asin, sqrt, pi

EARTH_RADIUS_KM = 6371.0


def haversine_km(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """Calculate the great circle distance in kilometers between two points on earth.

    Args:
        lon1: Longitude of point 1 (decimal degrees)
        lat1: Latitude of point 1 (decimal degrees)
        lon2: Longitude of point 2 (decimal degrees)
        lat2: Latitude of point 2 (decimal degrees)

    Returns:
        Distance in kilometers.
    """
    lon1, lat1, lon2, lat2 = map(radians, [lon1, lat1, lon2, lat2])
    dlon = lon2 - lon1
    dlat = lat2 - lat1
    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * asin(sqrt(a))
    return c * EARTH_RADIUS_KM


def valid_coordinates(latitude: float, longitude: float) -> bool:
    return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0

def bounding_box(latitude: float, longitude: float, radius_km: float):
    """Latitude bounds and longitude intervals enclosing a circle on the sphere.

    Returns:
        (min_lat, max_lat, [(min_lng, max_lng), ...]). The longitude box is
        split in two when it crosses the antimeridian and covers every
        longitude when the circle contains a pole.
    """
    angular = radius_km / EARTH_RADIUS_KM
    lat = radians(latitude)
    min_lat, max_lat = lat - angular, lat + angular

    if min_lat <= -pi / 2 or max_lat >= pi / 2 or angular >= pi / 2:
        return max(degrees(min_lat), -90.0), min(degrees(max_lat), 90.0), [(-180.0, 180.0)]

    delta = degrees(asin(sin(angular) / cos(lat)))
    west, east = longitude - delta, longitude + delta
    if west < -180.0:
        ranges = [(west + 360.0, 180.0), (-180.0, east)]
    elif east > 180.0:
        ranges = [(west, 180.0), (-180.0, east - 360.0)]
    else:
        ranges = [(west, east)]
    return degrees(min_lat), degrees(max_lat), ranges
