"""Client-side fare estimation.

Prices are computed from already-known distance/duration values. The
seven-step arithmetic in ``estimate_fare`` is the contract the booking
screens rely on; the same inputs must always produce the same breakdown.
"""

from datetime import datetime
from typing import Literal
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field

from .core.time import utc_now
from .geo.distance import estimate_eta_minutes, haversine_distance_km
from .geo.locations import Location
from .settings import FareSettings


class FareLineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["base", "distance", "time", "peak", "minimum", "total"]
    label: str
    amount: float


class FareBreakdown(BaseModel):
    """Detailed breakdown of fare components."""

    model_config = ConfigDict(frozen=True)

    distance_km: float = Field(ge=0)
    duration_minutes: float | None = Field(default=None, ge=0)
    base_fare: float = Field(ge=0)
    price_per_km: float = Field(ge=0)
    price_per_minute: float = Field(ge=0)
    distance_fare: float = Field(ge=0)
    time_fare: float = Field(ge=0)
    peak_multiplier: float = Field(ge=1.0)
    peak_charge: float = Field(ge=0)
    subtotal: float = Field(ge=0)
    minimum_fare: float = Field(ge=0)
    total: float = Field(ge=0)
    minimum_fare_applied: bool

    @property
    def total_before_minimum(self) -> float:
        return self.subtotal + self.peak_charge

    def line_items(self, currency_symbol: str = "د.ك") -> list[FareLineItem]:
        """Itemized rows for display.

        Time is listed only when it contributed, the peak row only when a
        multiplier above 1 was in effect, and the minimum-fare note only
        when the floor raised the price.
        """

        def money(amount: float) -> str:
            return format_currency(amount, currency_symbol)

        items = [
            FareLineItem(kind="base", label="Base Fare", amount=self.base_fare),
            FareLineItem(
                kind="distance",
                label=f"Distance ({self.distance_km:.1f} km × {money(self.price_per_km)}/km)",
                amount=self.distance_fare,
            ),
        ]
        if self.duration_minutes and self.time_fare > 0:
            items.append(
                FareLineItem(
                    kind="time",
                    label=(
                        f"Time ({round(self.duration_minutes)} min × "
                        f"{money(self.price_per_minute)}/min)"
                    ),
                    amount=self.time_fare,
                )
            )
        if self.peak_multiplier > 1:
            items.append(
                FareLineItem(
                    kind="peak",
                    label=f"Peak Hour Charge ({self.peak_multiplier:g}x)",
                    amount=self.peak_charge,
                )
            )
        if self.minimum_fare_applied:
            items.append(
                FareLineItem(
                    kind="minimum",
                    label=f"Minimum fare applied: {money(self.minimum_fare)}",
                    amount=self.minimum_fare,
                )
            )
        items.append(FareLineItem(kind="total", label="Total Fare", amount=self.total))
        return items


def estimate_fare(
    distance_km: float,
    duration_minutes: float | None,
    base_fare: float,
    price_per_km: float,
    price_per_minute: float,
    peak_multiplier: float,
    minimum_fare: float,
) -> FareBreakdown:
    """Compute a ride's price breakdown with a minimum-fare floor.

    Raises:
        ValueError: distance or duration is negative, or the peak
            multiplier is below 1.0.
    """
    if distance_km < 0:
        raise ValueError("Distance must be non-negative")
    if duration_minutes is not None and duration_minutes < 0:
        raise ValueError("Duration must be non-negative")
    if peak_multiplier < 1.0:
        raise ValueError("Peak multiplier must be >= 1.0")

    distance_fare = distance_km * price_per_km
    time_fare = duration_minutes * price_per_minute if duration_minutes is not None else 0.0
    subtotal = base_fare + distance_fare + time_fare
    peak_charge = subtotal * (peak_multiplier - 1)
    raw_total = subtotal + peak_charge
    total = max(raw_total, minimum_fare)
    minimum_fare_applied = total == minimum_fare and raw_total < minimum_fare

    return FareBreakdown(
        distance_km=distance_km,
        duration_minutes=duration_minutes,
        base_fare=base_fare,
        price_per_km=price_per_km,
        price_per_minute=price_per_minute,
        distance_fare=distance_fare,
        time_fare=time_fare,
        peak_multiplier=peak_multiplier,
        peak_charge=peak_charge,
        subtotal=subtotal,
        minimum_fare=minimum_fare,
        total=total,
        minimum_fare_applied=minimum_fare_applied,
    )


def format_currency(amount: float, symbol: str = "د.ك") -> str:
    return f"{symbol} {amount:.3f}"


class RouteEstimate(BaseModel):
    """Offline price quote for a pickup/dropoff pair."""

    model_config = ConfigDict(frozen=True)

    pickup: Location
    dropoff: Location
    distance_km: float
    duration_minutes: int
    fare: FareBreakdown
    currency_symbol: str = "د.ك"

    @property
    def price(self) -> float:
        return self.fare.total

    @property
    def display_price(self) -> str:
        return format_currency(self.price, self.currency_symbol)

    def line_items(self) -> list[FareLineItem]:
        return self.fare.line_items(self.currency_symbol)


class FareCalculator:
    """Binds the configured tariff to ``estimate_fare``."""

    def __init__(self, settings: FareSettings | None = None):
        self.settings = settings or FareSettings()

    def calculate(
        self,
        distance_km: float,
        duration_minutes: float | None = None,
        peak_multiplier: float | None = None,
    ) -> FareBreakdown:
        return estimate_fare(
            distance_km=distance_km,
            duration_minutes=duration_minutes,
            base_fare=self.settings.base_fare,
            price_per_km=self.settings.price_per_km,
            price_per_minute=self.settings.price_per_minute,
            peak_multiplier=1.0 if peak_multiplier is None else peak_multiplier,
            minimum_fare=self.settings.minimum_fare,
        )

    def peak_multiplier_at(self, when: datetime) -> float:
        """Return the peak multiplier if ``when`` falls in a peak window, else 1.0.

        Aware datetimes are converted to the tariff's zone first; naive ones
        are taken as already local.
        """
        if when.tzinfo is not None:
            when = when.astimezone(ZoneInfo(self.settings.timezone))
        if any(window.contains(when.hour) for window in self.settings.peak_windows):
            return self.settings.peak_multiplier
        return 1.0

    def estimate_route(
        self,
        pickup: Location,
        dropoff: Location,
        when: datetime | None = None,
    ) -> RouteEstimate:
        """Quote a ride from straight-line distance and an average-speed ETA."""
        distance_km = haversine_distance_km(pickup.lat, pickup.lng, dropoff.lat, dropoff.lng)
        duration_minutes = estimate_eta_minutes(distance_km, self.settings.average_speed_kmh)
        multiplier = self.peak_multiplier_at(when or utc_now())

        return RouteEstimate(
            pickup=pickup,
            dropoff=dropoff,
            distance_km=distance_km,
            duration_minutes=duration_minutes,
            fare=self.calculate(distance_km, duration_minutes, multiplier),
            currency_symbol=self.settings.currency_symbol,
        )
