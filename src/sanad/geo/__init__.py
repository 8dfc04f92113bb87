from .distance import (
    estimate_eta_minutes,
    format_distance,
    format_eta,
    haversine_distance_km,
    is_within_radius,
)
from .locations import (
    KUWAIT_CITIES,
    POPULAR_LOCATIONS,
    City,
    Location,
    PopularLocation,
    default_location,
    find_city,
    find_popular_location,
)

__all__ = [
    "City",
    "KUWAIT_CITIES",
    "Location",
    "POPULAR_LOCATIONS",
    "PopularLocation",
    "default_location",
    "estimate_eta_minutes",
    "find_city",
    "find_popular_location",
    "format_distance",
    "format_eta",
    "haversine_distance_km",
    "is_within_radius",
]
