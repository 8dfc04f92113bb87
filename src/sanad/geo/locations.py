"""Location model and static reference data for Kuwait."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Location(BaseModel):
    """A geographic point with optional human-readable address."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)
    address: str | None = None
    city: str | None = None
    country: str | None = None


class City(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    arabic_name: str
    location: Location


class PopularLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    name_ar: str
    address: str
    location: Location
    type: Literal["airport", "mall", "landmark", "hospital", "other"]


def _city(city_id: str, name: str, arabic_name: str, lat: float, lng: float) -> City:
    return City(
        id=city_id,
        name=name,
        arabic_name=arabic_name,
        location=Location(lat=lat, lng=lng, city=name, country="Kuwait"),
    )


def _place(
    place_id: str,
    name: str,
    name_ar: str,
    address: str,
    lat: float,
    lng: float,
    place_type: Literal["airport", "mall", "landmark", "hospital", "other"],
) -> PopularLocation:
    return PopularLocation(
        id=place_id,
        name=name,
        name_ar=name_ar,
        address=address,
        location=Location(lat=lat, lng=lng, address=f"{name}, {address}", country="Kuwait"),
        type=place_type,
    )


KUWAIT_CITIES: tuple[City, ...] = (
    _city("1", "Kuwait City", "مدينة الكويت", 29.3759, 47.9774),
    _city("2", "Hawalli", "حولي", 29.3333, 48.0289),
    _city("3", "Salmiya", "السالمية", 29.3344, 48.0761),
    _city("4", "Farwaniya", "الفروانية", 29.2772, 47.9586),
    _city("5", "Jahra", "الجهراء", 29.3375, 47.6581),
    _city("6", "Ahmadi", "الأحمدي", 29.0769, 48.0839),
    _city("7", "Mangaf", "المنقف", 29.1006, 48.1297),
    _city("8", "Fahaheel", "الفحيحيل", 29.0828, 48.13),
    _city("9", "Sabah Al Salem", "صباح السالم", 29.2478, 48.0683),
    _city("10", "Jleeb Al-Shuyoukh", "جليب الشيوخ", 29.2894, 47.9319),
)

POPULAR_LOCATIONS: tuple[PopularLocation, ...] = (
    _place(
        "1",
        "Kuwait International Airport",
        "مطار الكويت الدولي",
        "Airport Road, Farwaniya",
        29.2266,
        47.9689,
        "airport",
    ),
    _place("2", "The Avenues Mall", "الأفنيوز مول", "5th Ring Road, Rai", 29.3069, 47.9339, "mall"),
    _place("3", "Kuwait Towers", "أبراج الكويت", "Arabian Gulf Street", 29.3797, 47.9906, "landmark"),
    _place("4", "Grand Mosque", "المسجد الكبير", "Abdullah Al-Mubarak St", 29.3697, 47.9783, "landmark"),
    _place("5", "Al-Amiri Hospital", "مستشفى الأميري", "Arabian Gulf Street", 29.3792, 47.9906, "hospital"),
    _place("6", "Mubarak Al-Kabeer Hospital", "مستشفى مبارك الكبير", "Jabriya", 29.3094, 48.0189, "hospital"),
    _place("7", "360 Mall", "مول 360", "Al Zahra", 29.3011, 48.087, "mall"),
)

DEFAULT_CITY = KUWAIT_CITIES[0]


def default_location() -> Location:
    return Location(
        lat=DEFAULT_CITY.location.lat,
        lng=DEFAULT_CITY.location.lng,
        address="Kuwait City, Kuwait",
        city=DEFAULT_CITY.name,
        country="Kuwait",
    )


def find_city(name: str) -> City | None:
    """Case-insensitive lookup by English or Arabic name."""
    needle = name.strip().casefold()
    for city in KUWAIT_CITIES:
        if needle in (city.name.casefold(), city.arabic_name):
            return city
    return None


def find_popular_location(name: str) -> PopularLocation | None:
    needle = name.strip().casefold()
    for place in POPULAR_LOCATIONS:
        if needle in (place.name.casefold(), place.name_ar):
            return place
    return None
