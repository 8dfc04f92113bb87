"""Composition root wiring settings, storage, API client and stores."""

import logging

from .api.client import ApiClient
from .api.tokens import TokenStore
from .fare import FareCalculator
from .settings import Settings, get_settings
from .storage import KeyValueStorage, create_storage
from .store.appointments import AppointmentStore
from .store.rides import RideStore

logger = logging.getLogger(__name__)


class SanadClient:
    """Everything the app screens talk to, built from one Settings object."""

    def __init__(
        self,
        settings: Settings,
        storage: KeyValueStorage,
        api: ApiClient | None = None,
    ):
        self.settings = settings
        self.storage = storage
        self.tokens = TokenStore(storage)
        self.api = api
        api_enabled = settings.store.api_enabled
        owner_id = settings.store.owner_id
        self.rides = RideStore(storage, api=api, api_enabled=api_enabled, owner_id=owner_id)
        self.appointments = AppointmentStore(
            storage, api=api, api_enabled=api_enabled, owner_id=owner_id
        )
        self.fares = FareCalculator(settings.fare)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SanadClient":
        settings = settings or get_settings()
        storage = create_storage(settings.store)
        api = None
        if settings.store.api_enabled:
            api = ApiClient(
                settings.api.base_url,
                timeout=settings.api.timeout_seconds,
                token_store=TokenStore(storage),
            )
        mode = "remote" if api is not None else "local-only"
        logger.info(f"Sanad client ready ({mode}, {settings.store.backend} storage)")
        return cls(settings, storage, api=api)

    async def load(self) -> None:
        """Prime both collections from the device cache."""
        await self.rides.load()
        await self.appointments.load()

    async def aclose(self) -> None:
        if self.api is not None:
            await self.api.aclose()

    async def __aenter__(self) -> "SanadClient":
        await self.load()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
