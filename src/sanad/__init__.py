"""Sanad client core: fare estimation and offline-capable entity stores."""

from .appointment import Appointment, AppointmentCreate, AppointmentStatus, AppointmentUpdate
from .client import SanadClient
from .fare import FareBreakdown, FareCalculator, FareLineItem, RouteEstimate, estimate_fare
from .geo.locations import Location
from .ride import Ride, RideCreate, RideStatus, RideUpdate
from .settings import Settings, get_settings
from .store import AppointmentStore, CollectionStore, RideStore

__all__ = [
    "Appointment",
    "AppointmentCreate",
    "AppointmentStatus",
    "AppointmentStore",
    "AppointmentUpdate",
    "CollectionStore",
    "FareBreakdown",
    "FareCalculator",
    "FareLineItem",
    "Location",
    "Ride",
    "RideCreate",
    "RideStatus",
    "RideStore",
    "RideUpdate",
    "RouteEstimate",
    "SanadClient",
    "Settings",
    "estimate_fare",
    "get_settings",
]
