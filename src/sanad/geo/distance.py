"""Geographic distance and travel-time helpers.

Haversine distance between pickup and dropoff is what the client uses to
price a ride when no routing backend is available.
"""

from math import atan2, cos, radians, sin, sqrt

EARTH_RADIUS_KM = 6371.0
DEFAULT_SPEED_KMH = 40.0


def haversine_distance_km(
    lat1: float,
    lng1: float,
    lat2: float,
    lng2: float,
) -> float:
    """Calculate the great-circle distance between two points in kilometers.

    Args:
        lat1: Latitude of first point in degrees
        lng1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lng2: Longitude of second point in degrees

    Returns:
        Distance between the two points in kilometers
    """
    lat1, lng1, lat2, lng2 = map(radians, [lat1, lng1, lat2, lng2])
    dlat = lat2 - lat1
    dlng = lng2 - lng1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlng / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def is_within_radius(
    lat1: float,
    lng1: float,
    lat2: float,
    lng2: float,
    radius_km: float,
) -> bool:
    """Check whether two points are at most radius_km apart."""
    return haversine_distance_km(lat1, lng1, lat2, lng2) <= radius_km


def estimate_eta_minutes(distance_km: float, average_speed_kmh: float = DEFAULT_SPEED_KMH) -> int:
    """Estimate travel time in whole minutes at a constant average speed."""
    if average_speed_kmh <= 0:
        raise ValueError("Average speed must be positive")
    return round(distance_km / average_speed_kmh * 60)


def format_distance(distance_km: float) -> str:
    if distance_km < 1:
        return f"{round(distance_km * 1000)} m"
    return f"{distance_km:.1f} km"


def format_eta(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} min"
    hours, remaining = divmod(minutes, 60)
    return f"{hours}h {remaining}m"
