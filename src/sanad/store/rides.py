"""Ride-specific store operations."""

from datetime import datetime

from pydantic import BaseModel

from ..api.client import ApiClient
from ..core.exceptions import StateError
from ..core.time import as_utc, utc_now
from ..ride import RIDE_KIND, Ride, RideRating, RideStatus
from ..storage.base import KeyValueStorage
from .collection import CollectionStore, _coerce


class RideStats(BaseModel):
    total_rides: int
    completed_rides: int
    cancelled_rides: int
    total_spent: float
    average_rating: float | None


class RideStore(CollectionStore[Ride]):
    def __init__(
        self,
        storage: KeyValueStorage,
        api: ApiClient | None = None,
        api_enabled: bool = False,
        owner_id: str | None = None,
    ):
        super().__init__(RIDE_KIND, storage, api=api, api_enabled=api_enabled, owner_id=owner_id)

    async def accept(self, ride_id: str, rider_id: str | None = None) -> Ride:
        extra = {"rider_id": rider_id} if rider_id else {}
        return await self.transition(ride_id, RideStatus.ACCEPTED, **extra)

    async def start(self, ride_id: str) -> Ride:
        return await self.transition(ride_id, RideStatus.IN_PROGRESS, start_time=utc_now())

    async def complete(self, ride_id: str) -> Ride:
        return await self.transition(ride_id, RideStatus.COMPLETED, end_time=utc_now())

    async def cancel(self, ride_id: str, reason: str | None = None) -> Ride:
        extra = {"cancellation_reason": reason} if reason else {}
        return await self.transition(ride_id, RideStatus.CANCELLED, **extra)

    async def rate(self, ride_id: str, rating: int, review: str | None = None) -> Ride:
        """Attach a 1-5 rating to a completed ride."""
        payload = _coerce(RideRating, {"rating": rating, "review": review})

        def require_completed(current: Ride) -> None:
            if current.status != RideStatus.COMPLETED:
                raise StateError(
                    f"Only completed rides can be rated (ride is {current.status.value})",
                    details={"id": ride_id, "status": current.status.value},
                )

        if self.api_enabled:
            return await self._remote_write(
                ride_id,
                "POST",
                f"{self.kind.item_path(ride_id)}/rate",
                payload.to_wire(),
                precheck=require_completed,
            )

        def build(current: Ride) -> Ride:
            require_completed(current)
            changes = payload.model_dump(exclude_none=True)
            return self._merge(current, {**changes, "updated_at": utc_now()})

        return await self._local_write(ride_id, build)

    async def active_ride(self) -> Ride | None:
        """Most recently requested ride that has not finished."""
        open_rides = [ride for ride in await self.list() if not ride.is_terminal]
        if not open_rides:
            return None
        return max(open_rides, key=lambda ride: ride.created_at)

    async def history(
        self,
        status: RideStatus | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
    ) -> list[Ride]:
        """Rides newest first, optionally filtered by status and creation window."""
        start = as_utc(start) if start is not None else None
        end = as_utc(end) if end is not None else None
        rides = [
            ride
            for ride in await self.list()
            if (status is None or ride.status == status)
            and (start is None or ride.created_at >= start)
            and (end is None or ride.created_at <= end)
        ]
        rides.sort(key=lambda ride: ride.created_at, reverse=True)
        return rides[:limit] if limit is not None else rides

    async def upcoming(self, now: datetime | None = None) -> list[Ride]:
        """Scheduled rides still ahead of ``now``, soonest first."""
        now = as_utc(now) if now is not None else utc_now()
        rides = [
            ride
            for ride in await self.list()
            if not ride.is_terminal and ride.scheduled_time is not None and ride.scheduled_time > now
        ]
        rides.sort(key=lambda ride: ride.scheduled_time or now)
        return rides

    async def stats(self) -> RideStats:
        rides = await self.list()
        completed = [ride for ride in rides if ride.status == RideStatus.COMPLETED]
        ratings = [ride.rating for ride in completed if ride.rating is not None]
        return RideStats(
            total_rides=len(rides),
            completed_rides=len(completed),
            cancelled_rides=sum(1 for ride in rides if ride.status == RideStatus.CANCELLED),
            total_spent=sum(ride.price or 0.0 for ride in completed),
            average_rating=sum(ratings) / len(ratings) if ratings else None,
        )
