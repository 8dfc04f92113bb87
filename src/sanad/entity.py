"""Generic persisted-entity base and per-type descriptor for the stores."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Literal, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .core.exceptions import StateError
from .core.time import UtcDatetime


class WireModel(BaseModel):
    """Model serialized as camelCase JSON, accepting snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PersistedEntity(WireModel):
    """Identified record with a status lifecycle.

    Subclasses declare ``status`` with their own enum and fill in the
    lifecycle class variables.
    """

    INITIAL_STATUS: ClassVar[Enum]
    TRANSITIONS: ClassVar[Mapping[Enum, frozenset[Enum]]]

    id: str = Field(alias="_id")
    user_id: str | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime | None = None

    @classmethod
    def terminal_statuses(cls) -> frozenset[Enum]:
        return frozenset(s for s, targets in cls.TRANSITIONS.items() if not targets)

    @classmethod
    def check_transition(cls, current: Enum, new: Enum) -> None:
        """Raise StateError unless ``current -> new`` is a legal move."""
        if current in cls.terminal_statuses():
            raise StateError(
                f"Cannot transition from terminal state {current.value}",
                details={"from": current.value, "to": new.value},
            )
        if new not in cls.TRANSITIONS[current]:
            raise StateError(
                f"Invalid transition from {current.value} to {new.value}",
                details={"from": current.value, "to": new.value},
            )

    @property
    def is_terminal(self) -> bool:
        return self.status in self.terminal_statuses()

    def merged(self, changes: Mapping[str, Any]) -> Self:
        """Return a validated copy with ``changes`` (field names) applied."""
        data = self.model_dump()
        data.update(changes)
        return type(self).model_validate(data)


@dataclass(frozen=True)
class EntityKind:
    """Everything the generic store needs to know about one entity type."""

    name: str
    plural: str
    model: type[PersistedEntity]
    create_model: type[WireModel]
    update_model: type[WireModel]
    storage_key: str
    id_prefix: str
    collection_path: str
    list_path: str
    update_method: Literal["PUT", "PATCH"] = "PUT"
    status_path: str | None = None

    def item_path(self, entity_id: str) -> str:
        return f"{self.collection_path}/{entity_id}"

    def transition_path(self, entity_id: str) -> str:
        if self.status_path is None:
            return self.item_path(entity_id)
        return self.status_path.format(id=entity_id)

    @property
    def initial_status(self) -> Enum:
        return self.model.INITIAL_STATUS
