"""Generic offline-capable collection store.

One store instance owns one entity collection (rides, appointments, ...).
In local-only mode every mutation is applied to the in-memory list and the
whole collection is rewritten to the key-value storage. With the API
enabled, mutations go to the backend first and only the server's
representation is cached.

All operations that touch the collection run under a per-store
asyncio.Lock, so concurrent callers cannot interleave their
read-modify-write sequences.
"""

import asyncio
import json
import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, Generic, TypeVar, cast

import pydantic
from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python

from ..api.client import ApiClient
from ..api.envelope import unwrap_collection, unwrap_record
from ..app_logging import log_entity_context
from ..core.exceptions import (
    ConfigurationError,
    NotFoundError,
    RemoteError,
    StorageError,
    ValidationError,
)
from ..core.ids import generate_local_id
from ..core.time import utc_now
from ..entity import EntityKind, PersistedEntity, WireModel
from ..storage.base import KeyValueStorage

E = TypeVar("E", bound=PersistedEntity)
P = TypeVar("P", bound=WireModel)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def _coerce(model: type[P], data: P | Mapping[str, Any]) -> P:
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(
            f"Invalid {model.__name__}: {e.error_count()} error(s)",
            details={"errors": e.errors(include_url=False)},
        ) from e


class CollectionStore(Generic[E]):
    """CRUD over one persisted collection, local-only or API-backed."""

    def __init__(
        self,
        kind: EntityKind,
        storage: KeyValueStorage,
        api: ApiClient | None = None,
        api_enabled: bool = False,
        owner_id: str | None = None,
    ):
        if api_enabled and api is None:
            raise ConfigurationError(f"{kind.plural} store needs an ApiClient when the API is enabled")
        self.kind = kind
        self.storage = storage
        self.api = api
        self.api_enabled = api_enabled
        self.owner_id = owner_id
        self._items: list[E] = []
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def model(self) -> type[E]:
        return cast(type[E], self.kind.model)

    @property
    def mode(self) -> str:
        return "online" if self.api_enabled else "offline"

    # ------------------------------------------------------------------
    # Cache

    async def load(self) -> list[E]:
        """Read the persisted collection into memory. Never calls the API."""
        async with self._lock:
            self._items = self._read_cache()
            self._loaded = True
            return list(self._items)

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self._items = self._read_cache()
            self._loaded = True

    def _read_cache(self) -> list[E]:
        raw = self.storage.get(self.kind.storage_key)
        if raw is None:
            return []

        try:
            blob = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Discarding unparseable {self.kind.plural} cache: {e}")
            return []

        if isinstance(blob, list):
            # Bare array written before the versioned envelope existed
            records = blob
        elif isinstance(blob, dict) and isinstance(blob.get("items"), list):
            version = blob.get("schema_version")
            if version != SCHEMA_VERSION:
                logger.warning(
                    f"Discarding {self.kind.plural} cache with unsupported schema_version {version!r}"
                )
                return []
            records = blob["items"]
        else:
            logger.warning(f"Discarding {self.kind.plural} cache with unexpected layout")
            return []

        items: list[E] = []
        seen: set[str] = set()
        for record in records:
            try:
                item = self.model.model_validate(record)
            except pydantic.ValidationError as e:
                logger.warning(f"Skipping invalid cached {self.kind.name}: {e.error_count()} error(s)")
                continue
            if item.id in seen:
                logger.warning(f"Skipping duplicate cached {self.kind.name} {item.id}")
                continue
            seen.add(item.id)
            items.append(item)
        return items

    def _commit(self, items: list[E]) -> None:
        """Persist ``items`` and, only once that succeeded, make them current."""
        try:
            blob = json.dumps(
                {"schema_version": SCHEMA_VERSION, "items": [item.to_wire() for item in items]},
                ensure_ascii=False,
            )
        except (TypeError, ValueError) as e:
            raise StorageError(f"Failed to serialize {self.kind.plural}: {e}") from e
        self.storage.set(self.kind.storage_key, blob)
        self._items = items

    def _index(self, entity_id: str) -> int | None:
        for i, item in enumerate(self._items):
            if item.id == entity_id:
                return i
        return None

    def _require(self, entity_id: str) -> E:
        index = self._index(entity_id)
        if index is None:
            raise NotFoundError(
                f"{self.kind.name.capitalize()} {entity_id} not found",
                details={"id": entity_id, "entity": self.kind.name},
            )
        return self._items[index]

    def _upsert(self, record: E) -> list[E]:
        index = self._index(record.id)
        items = list(self._items)
        if index is None:
            items.append(record)
        else:
            items[index] = record
        return items

    def _parse_record(self, body: Any) -> E:
        try:
            return self.model.model_validate(unwrap_record(body, self.kind))
        except pydantic.ValidationError as e:
            raise RemoteError(
                f"Malformed {self.kind.name} response: {e.error_count()} error(s)",
                details={"errors": e.errors(include_url=False)},
            ) from e

    def _remote(self) -> ApiClient:
        if self.api is None:
            raise ConfigurationError(f"{self.kind.plural} store has no ApiClient")
        return self.api

    # ------------------------------------------------------------------
    # Operations

    async def refresh(self) -> list[E]:
        """Replace memory and cache with the server's list. Raises on failure."""
        api = self._remote()
        async with self._lock:
            self._ensure_loaded()
            body = await api.get(self.kind.list_path)
            try:
                items = [self.model.model_validate(r) for r in unwrap_collection(body, self.kind)]
            except pydantic.ValidationError as e:
                raise RemoteError(
                    f"Malformed {self.kind.plural} response: {e.error_count()} error(s)"
                ) from e
            self._commit(items)
            logger.debug(f"Refreshed {len(items)} {self.kind.plural}")
            return list(items)

    async def get(self, entity_id: str) -> E:
        async with self._lock:
            self._ensure_loaded()
            return self._require(entity_id)

    async def create(self, data: WireModel | Mapping[str, Any]) -> E:
        payload = _coerce(self.kind.create_model, data)

        async with self._lock:
            self._ensure_loaded()
            if self.api_enabled:
                body = await self._remote().post(self.kind.collection_path, payload.to_wire())
                record = self._parse_record(body)
            else:
                now = utc_now()
                fields = payload.model_dump(exclude_none=True)
                fields.update(
                    id=generate_local_id(self.kind.id_prefix),
                    status=self.kind.initial_status,
                    user_id=self.owner_id,
                    created_at=now,
                    updated_at=now,
                )
                record = self.model.model_validate(fields)

            with log_entity_context(self.kind.name, record.id, store_mode=self.mode):
                self._commit(self._upsert(record))
                logger.info(f"Created {self.kind.name} {record.id}")
            return record

    async def update(self, entity_id: str, data: WireModel | Mapping[str, Any]) -> E:
        """Apply a partial update; fields not set in ``data`` are left alone."""
        payload = _coerce(self.kind.update_model, data)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("status") is None:
            changes.pop("status", None)

        if self.api_enabled:
            body = payload.model_dump(mode="json", by_alias=True, exclude_unset=True)
            return await self._remote_write(
                entity_id,
                self.kind.update_method,
                self.kind.item_path(entity_id),
                body,
                precheck=self._status_precheck(changes.get("status")),
            )

        def build(current: E) -> E:
            if "status" in changes and changes["status"] != current.status:
                self.model.check_transition(current.status, changes["status"])
            return self._merge(current, {**changes, "updated_at": utc_now()})

        return await self._local_write(entity_id, build)

    async def remove(self, entity_id: str, missing_ok: bool = False) -> None:
        """Delete a record.

        An unknown id raises NotFoundError (remote 404 when the API is
        enabled) unless ``missing_ok`` is set. With the API enabled the
        local copy is dropped only after the server confirmed the delete.
        """
        async with self._lock:
            self._ensure_loaded()
            with log_entity_context(self.kind.name, entity_id, store_mode=self.mode):
                if self.api_enabled:
                    try:
                        await self._remote().delete(self.kind.item_path(entity_id))
                    except NotFoundError:
                        if not missing_ok:
                            raise
                elif self._index(entity_id) is None:
                    if missing_ok:
                        return
                    self._require(entity_id)

                if self._index(entity_id) is not None:
                    self._commit([item for item in self._items if item.id != entity_id])
                logger.info(f"Removed {self.kind.name} {entity_id}")

    async def transition(self, entity_id: str, status: Enum, **extra: Any) -> E:
        """Move a record to ``status``, enforcing the lifecycle table.

        ``extra`` holds fields that accompany the change (e.g. a
        cancellation reason) and is merged into the record.
        """
        if self.api_enabled:
            body = {"status": status.value}
            body.update({to_camel(k): to_jsonable_python(v) for k, v in extra.items()})
            method = "PUT" if self.kind.status_path else self.kind.update_method
            return await self._remote_write(
                entity_id,
                method,
                self.kind.transition_path(entity_id),
                body,
                precheck=self._status_precheck(status),
            )

        def build(current: E) -> E:
            self.model.check_transition(current.status, status)
            return self._merge(current, {**extra, "status": status, "updated_at": utc_now()})

        return await self._local_write(entity_id, build)

    # ------------------------------------------------------------------
    # Write paths shared by subclasses

    def _merge(self, current: E, changes: Mapping[str, Any]) -> E:
        try:
            return current.merged(changes)
        except pydantic.ValidationError as e:
            raise ValidationError(
                f"Invalid {self.kind.name} update: {e.error_count()} error(s)",
                details={"errors": e.errors(include_url=False)},
            ) from e

    def _status_precheck(self, status: Enum | None) -> Callable[[E], None] | None:
        if status is None:
            return None

        def check(current: E) -> None:
            if current.status != status:
                self.model.check_transition(current.status, status)

        return check

    async def _local_write(self, entity_id: str, build: Callable[[E], E]) -> E:
        async with self._lock:
            self._ensure_loaded()
            with log_entity_context(self.kind.name, entity_id, store_mode=self.mode):
                record = build(self._require(entity_id))
                self._commit(self._upsert(record))
                logger.info(f"Updated {self.kind.name} {entity_id} (local)")
                return record

    async def _remote_write(
        self,
        entity_id: str,
        method: str,
        path: str,
        body: Any,
        precheck: Callable[[E], None] | None = None,
    ) -> E:
        """Send a write to the API and cache the server's representation."""
        api = self._remote()
        async with self._lock:
            self._ensure_loaded()
            with log_entity_context(self.kind.name, entity_id, store_mode=self.mode):
                index = self._index(entity_id)
                if precheck is not None and index is not None:
                    precheck(self._items[index])
                response = await api.request(method, path, body=body)  # type: ignore[arg-type]
                record = self._parse_record(response)
                self._commit(self._upsert(record))
                logger.info(f"Updated {self.kind.name} {entity_id} (server)")
                return record

    # Keep last: the name shadows builtin ``list`` for annotations below it.
    async def list(self) -> list[E]:
        """Current collection; refreshed from the API when it is enabled.

        A failed refresh keeps the cached collection rather than clearing it.
        """
        if self.api_enabled:
            try:
                return await self.refresh()
            except (RemoteError, NotFoundError) as e:
                logger.warning(f"Refreshing {self.kind.plural} failed, serving cached copy: {e.message}")
        async with self._lock:
            self._ensure_loaded()
            return [*self._items]
