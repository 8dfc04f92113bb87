"""Appointment-specific store operations."""

import datetime as dt
from collections import defaultdict

from ..api.client import ApiClient
from ..appointment import APPOINTMENT_KIND, Appointment, AppointmentStatus
from ..core.time import utc_now
from ..storage.base import KeyValueStorage
from .collection import CollectionStore


def _chronological(appointment: Appointment) -> tuple[dt.date, dt.time]:
    return appointment.date, appointment.time


class AppointmentStore(CollectionStore[Appointment]):
    def __init__(
        self,
        storage: KeyValueStorage,
        api: ApiClient | None = None,
        api_enabled: bool = False,
        owner_id: str | None = None,
    ):
        super().__init__(
            APPOINTMENT_KIND, storage, api=api, api_enabled=api_enabled, owner_id=owner_id
        )

    async def confirm(self, appointment_id: str) -> Appointment:
        return await self.transition(appointment_id, AppointmentStatus.CONFIRMED)

    async def complete(self, appointment_id: str) -> Appointment:
        return await self.transition(appointment_id, AppointmentStatus.COMPLETED)

    async def cancel(self, appointment_id: str) -> Appointment:
        return await self.transition(appointment_id, AppointmentStatus.CANCELLED)

    async def upcoming(self, today: dt.date | None = None) -> list[Appointment]:
        today = today or utc_now().date()
        appointments = [
            appointment
            for appointment in await self.list()
            if not appointment.is_terminal and appointment.date >= today
        ]
        return sorted(appointments, key=_chronological)

    async def by_date(self, day: dt.date) -> list[Appointment]:
        return sorted(
            (appointment for appointment in await self.list() if appointment.date == day),
            key=_chronological,
        )

    async def by_month(self, year: int, month: int) -> dict[str, list[Appointment]]:
        """Appointments in the month grouped by ISO date, for calendar views."""
        if not 1 <= month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {month}")
        grouped: dict[str, list[Appointment]] = defaultdict(list)
        for appointment in sorted(await self.list(), key=_chronological):
            if appointment.date.year == year and appointment.date.month == month:
                grouped[appointment.date.isoformat()].append(appointment)
        return dict(grouped)
