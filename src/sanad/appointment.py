"""Appointment entity, lifecycle and request payloads."""

import datetime as dt
from enum import Enum
from typing import ClassVar

from .entity import EntityKind, PersistedEntity, WireModel


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


VALID_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset(
        {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}


class AppointmentCreate(WireModel):
    title: str
    date: dt.date
    time: dt.time
    description: str | None = None
    ride_id: str | None = None


class AppointmentUpdate(WireModel):
    title: str | None = None
    date: dt.date | None = None
    time: dt.time | None = None
    description: str | None = None
    status: AppointmentStatus | None = None


class Appointment(PersistedEntity):
    INITIAL_STATUS: ClassVar[AppointmentStatus] = AppointmentStatus.PENDING
    TRANSITIONS: ClassVar[dict[AppointmentStatus, frozenset[AppointmentStatus]]] = (
        VALID_TRANSITIONS
    )

    status: AppointmentStatus = AppointmentStatus.PENDING
    title: str
    date: dt.date
    time: dt.time
    description: str | None = None
    ride_id: str | None = None


APPOINTMENT_KIND = EntityKind(
    name="appointment",
    plural="appointments",
    model=Appointment,
    create_model=AppointmentCreate,
    update_model=AppointmentUpdate,
    storage_key="appointments",
    id_prefix="appointment",
    collection_path="/appointments",
    list_path="/appointments",
    update_method="PUT",
)
