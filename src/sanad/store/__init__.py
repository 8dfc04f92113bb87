from .appointments import AppointmentStore
from .collection import SCHEMA_VERSION, CollectionStore
from .rides import RideStats, RideStore

__all__ = [
    "SCHEMA_VERSION",
    "AppointmentStore",
    "CollectionStore",
    "RideStats",
    "RideStore",
]
