import itertools
import json
import re
from datetime import date, time
from typing import Any

import httpx
import pytest
import respx

from sanad.api.client import ApiClient
from sanad.api.tokens import TokenStore
from sanad.appointment import AppointmentCreate
from sanad.core.time import utc_now
from sanad.geo.locations import Location
from sanad.ride import RideCreate
from sanad.storage.memory import MemoryStorage
from sanad.store.appointments import AppointmentStore
from sanad.store.rides import RideStore

BASE_URL = "http://api.test/api/v1"


class FakeBackend:
    """In-memory REST backend mounted on a respx router.

    Mirrors the production response shapes: rides come back under their
    own name (and status changes inside a ``{"success", "data"}`` wrapper),
    appointments come back bare and are listed inside ``data``.
    """

    def __init__(self, router: respx.MockRouter):
        self.router = router
        self.rides: dict[str, dict[str, Any]] = {}
        self.appointments: dict[str, dict[str, Any]] = {}
        self.unavailable = False
        self._ids = itertools.count(1)

        base = re.escape(BASE_URL)
        item = r"(?P<entity_id>[^/]+)"

        router.post(f"{BASE_URL}/rides").mock(side_effect=self._guard(self._create_ride))
        router.get(f"{BASE_URL}/rides/my-rides").mock(side_effect=self._guard(self._list_rides))
        router.route(method="PUT", url__regex=rf"{base}/rides/{item}/status$").mock(
            side_effect=self._guard(self._ride_status)
        )
        router.route(method="POST", url__regex=rf"{base}/rides/{item}/rate$").mock(
            side_effect=self._guard(self._rate_ride)
        )
        router.route(method="PATCH", url__regex=rf"{base}/rides/{item}$").mock(
            side_effect=self._guard(self._update_ride)
        )
        router.route(method="DELETE", url__regex=rf"{base}/rides/{item}$").mock(
            side_effect=self._guard(self._delete_ride)
        )

        router.post(f"{BASE_URL}/appointments").mock(
            side_effect=self._guard(self._create_appointment)
        )
        router.get(f"{BASE_URL}/appointments").mock(
            side_effect=self._guard(self._list_appointments)
        )
        router.route(method="PUT", url__regex=rf"{base}/appointments/{item}$").mock(
            side_effect=self._guard(self._update_appointment)
        )
        router.route(method="DELETE", url__regex=rf"{base}/appointments/{item}$").mock(
            side_effect=self._guard(self._delete_appointment)
        )

    def _guard(self, handler):
        def wrapped(request: httpx.Request, **kwargs: Any) -> httpx.Response:
            if self.unavailable:
                return httpx.Response(503, json={"message": "Service unavailable"})
            return handler(request, **kwargs)

        return wrapped

    @staticmethod
    def _body(request: httpx.Request) -> dict[str, Any]:
        return json.loads(request.content) if request.content else {}

    def _new_record(self, body: dict[str, Any], status: str) -> dict[str, Any]:
        return {
            **body,
            "_id": f"srv-{next(self._ids)}",
            "status": status,
            "userId": "user-1",
            "createdAt": utc_now().isoformat(),
        }

    @staticmethod
    def _not_found(label: str) -> httpx.Response:
        return httpx.Response(404, json={"success": False, "message": f"{label} not found"})

    def _create_ride(self, request: httpx.Request) -> httpx.Response:
        record = self._new_record(self._body(request), "requested")
        self.rides[record["_id"]] = record
        return httpx.Response(201, json={"ride": record})

    def _list_rides(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"rides": list(self.rides.values())})

    def _update_ride(self, request: httpx.Request, entity_id: str) -> httpx.Response:
        if entity_id not in self.rides:
            return self._not_found("Ride")
        self.rides[entity_id].update(self._body(request), updatedAt=utc_now().isoformat())
        return httpx.Response(200, json={"ride": self.rides[entity_id]})

    def _ride_status(self, request: httpx.Request, entity_id: str) -> httpx.Response:
        if entity_id not in self.rides:
            return self._not_found("Ride")
        self.rides[entity_id].update(self._body(request), updatedAt=utc_now().isoformat())
        return httpx.Response(200, json={"success": True, "data": {"ride": self.rides[entity_id]}})

    def _rate_ride(self, request: httpx.Request, entity_id: str) -> httpx.Response:
        if entity_id not in self.rides:
            return self._not_found("Ride")
        self.rides[entity_id].update(self._body(request))
        return httpx.Response(200, json={"ride": self.rides[entity_id]})

    def _delete_ride(self, request: httpx.Request, entity_id: str) -> httpx.Response:
        if self.rides.pop(entity_id, None) is None:
            return self._not_found("Ride")
        return httpx.Response(204)

    def _create_appointment(self, request: httpx.Request) -> httpx.Response:
        record = self._new_record(self._body(request), "pending")
        self.appointments[record["_id"]] = record
        return httpx.Response(201, json=record)

    def _list_appointments(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"success": True, "data": list(self.appointments.values())}
        )

    def _update_appointment(self, request: httpx.Request, entity_id: str) -> httpx.Response:
        if entity_id not in self.appointments:
            return self._not_found("Appointment")
        self.appointments[entity_id].update(self._body(request), updatedAt=utc_now().isoformat())
        return httpx.Response(200, json={"appointment": self.appointments[entity_id]})

    def _delete_appointment(self, request: httpx.Request, entity_id: str) -> httpx.Response:
        if self.appointments.pop(entity_id, None) is None:
            return self._not_found("Appointment")
        return httpx.Response(200, json={"success": True, "message": "Appointment deleted"})


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def token_store(memory_storage: MemoryStorage) -> TokenStore:
    return TokenStore(memory_storage)


@pytest.fixture
async def api_client(token_store: TokenStore):
    client = ApiClient(BASE_URL, timeout=5.0, token_store=token_store)
    yield client
    await client.aclose()


@pytest.fixture
def backend():
    """Fake REST backend; every httpx request in the test is routed to it."""
    with respx.mock(assert_all_called=False) as router:
        yield FakeBackend(router)


@pytest.fixture
def kuwait_city() -> Location:
    return Location(lat=29.3759, lng=47.9774, address="Kuwait City, Kuwait")


@pytest.fixture
def airport() -> Location:
    return Location(lat=29.2266, lng=47.9689, address="Kuwait International Airport")


@pytest.fixture
def ride_payload(kuwait_city: Location, airport: Location) -> RideCreate:
    return RideCreate(pickup_location=kuwait_city, dropoff_location=airport, passengers=1)


@pytest.fixture
def appointment_payload() -> AppointmentCreate:
    return AppointmentCreate(
        title="Dialysis session",
        date=date(2026, 11, 2),
        time=time(9, 30),
        description="Al-Amiri Hospital, 2nd floor",
    )


@pytest.fixture
def local_rides(memory_storage: MemoryStorage) -> RideStore:
    return RideStore(memory_storage, owner_id="user-1")


@pytest.fixture
def remote_rides(memory_storage: MemoryStorage, api_client: ApiClient, backend: FakeBackend) -> RideStore:
    return RideStore(memory_storage, api=api_client, api_enabled=True)


@pytest.fixture
def local_appointments(memory_storage: MemoryStorage) -> AppointmentStore:
    return AppointmentStore(memory_storage, owner_id="user-1")


@pytest.fixture
def remote_appointments(
    memory_storage: MemoryStorage, api_client: ApiClient, backend: FakeBackend
) -> AppointmentStore:
    return AppointmentStore(memory_storage, api=api_client, api_enabled=True)
