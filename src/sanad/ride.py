"""Ride entity, lifecycle and request payloads."""

from enum import Enum
from typing import ClassVar

from pydantic import Field

from .core.time import UtcDatetime
from .entity import EntityKind, PersistedEntity, WireModel
from .geo.locations import Location


class RideStatus(str, Enum):
    """Ride lifecycle states."""

    REQUESTED = "requested"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


VALID_TRANSITIONS: dict[RideStatus, frozenset[RideStatus]] = {
    RideStatus.REQUESTED: frozenset({RideStatus.ACCEPTED, RideStatus.CANCELLED}),
    RideStatus.ACCEPTED: frozenset({RideStatus.IN_PROGRESS, RideStatus.CANCELLED}),
    RideStatus.IN_PROGRESS: frozenset({RideStatus.COMPLETED, RideStatus.CANCELLED}),
    RideStatus.COMPLETED: frozenset(),
    RideStatus.CANCELLED: frozenset(),
}


class RideCreate(WireModel):
    pickup_location: Location
    dropoff_location: Location
    scheduled_time: UtcDatetime | None = None
    needs_wheelchair: bool | None = None
    needs_patient_bed: bool | None = None
    wheelchair_type: str | None = None
    passengers: int | None = Field(default=None, ge=1, le=8)
    special_requirements: str | None = None
    price: float | None = Field(default=None, ge=0)
    distance: float | None = Field(default=None, ge=0)
    duration: float | None = Field(default=None, ge=0)


class RideUpdate(WireModel):
    """Partial ride update; only fields explicitly set are applied."""

    pickup_location: Location | None = None
    dropoff_location: Location | None = None
    scheduled_time: UtcDatetime | None = None
    needs_wheelchair: bool | None = None
    needs_patient_bed: bool | None = None
    wheelchair_type: str | None = None
    passengers: int | None = Field(default=None, ge=1, le=8)
    special_requirements: str | None = None
    status: RideStatus | None = None


class RideRating(WireModel):
    rating: int = Field(ge=1, le=5)
    review: str | None = None


class Ride(PersistedEntity):
    """A booked ride owned by the user who requested it."""

    INITIAL_STATUS: ClassVar[RideStatus] = RideStatus.REQUESTED
    TRANSITIONS: ClassVar[dict[RideStatus, frozenset[RideStatus]]] = VALID_TRANSITIONS

    status: RideStatus = RideStatus.REQUESTED
    rider_id: str | None = None
    pickup_location: Location
    dropoff_location: Location
    price: float | None = Field(default=None, ge=0)
    distance: float | None = Field(default=None, ge=0)
    duration: float | None = Field(default=None, ge=0)
    scheduled_time: UtcDatetime | None = None
    start_time: UtcDatetime | None = None
    end_time: UtcDatetime | None = None
    rating: int | None = Field(default=None, ge=1, le=5)
    review: str | None = None
    needs_wheelchair: bool | None = None
    needs_patient_bed: bool | None = None
    wheelchair_type: str | None = None
    passengers: int | None = None
    special_requirements: str | None = None
    cancellation_reason: str | None = None


RIDE_KIND = EntityKind(
    name="ride",
    plural="rides",
    model=Ride,
    create_model=RideCreate,
    update_model=RideUpdate,
    storage_key="rides",
    id_prefix="ride",
    collection_path="/rides",
    list_path="/rides/my-rides",
    update_method="PATCH",
    status_path="/rides/{id}/status",
)
