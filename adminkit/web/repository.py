"""
In-memory entity storage and the per-entity admin registration.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Callable, Dict, List, Optional, Type

from ..schema import AdminModel

# Path segments used by the admin routes themselves
RESERVED_NAMES = frozenset({"settings", "login"})


def get_member(entity: Any, name: str) -> Any:
    if isinstance(entity, dict):
        return entity.get(name)
    return getattr(entity, name, None)


def set_member(entity: Any, name: str, value: Any) -> None:
    if isinstance(entity, dict):
        entity[name] = value
    else:
        setattr(entity, name, value)


class InMemoryRepository:
    """
    Entities kept in a dict keyed by integer id.

    Entities may be plain objects (dataclasses) or dicts. ``get`` and
    ``list`` hand out copies, so callers only change stored state through
    ``save`` and ``delete``.

    Args:
        factory: Creates an empty entity for a new record (``dict`` by default)
        id_field: Name of the id member
    """

    def __init__(self, factory: Callable[[], Any] = dict, id_field: str = "id"):
        self.factory = factory
        self.id_field = id_field
        self._items: Dict[int, Any] = {}
        self._last_id = 0
        self._lock = threading.Lock()

    def new(self) -> Any:
        return self.factory()

    def id_of(self, entity: Any) -> Any:
        return get_member(entity, self.id_field)

    def next_id(self) -> int:
        with self._lock:
            self._last_id += 1
            return self._last_id

    def list(self) -> List[Any]:
        return [copy.deepcopy(item) for _, item in sorted(self._items.items())]

    def get(self, entity_id: int) -> Optional[Any]:
        item = self._items.get(entity_id)
        return copy.deepcopy(item) if item is not None else None

    def save(self, entity: Any) -> Any:
        """Store ``entity``; one without an id is given the next id."""
        entity_id = get_member(entity, self.id_field)
        if entity_id is None:
            entity_id = self.next_id()
            set_member(entity, self.id_field, entity_id)
        else:
            with self._lock:
                self._last_id = max(self._last_id, entity_id)
        self._items[entity_id] = copy.deepcopy(entity)
        return entity

    def delete(self, entity_id: int) -> bool:
        return self._items.pop(entity_id, None) is not None

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._items

    def __len__(self) -> int:
        return len(self._items)


class EntityAdmin:
    """An entity type exposed on the admin panel through its admin model."""

    def __init__(
        self,
        name: str,
        model_type: Type[AdminModel],
        repository: InMemoryRepository,
        title: Optional[str] = None,
    ):
        if not name.isidentifier():
            raise ValueError(f"Entity name must be an identifier, got '{name}'")
        if name in RESERVED_NAMES:
            raise ValueError(f"Entity name '{name}' is reserved")
        self.name = name
        self.model_type = model_type
        self.repository = repository
        self.title = title or name.replace("_", " ").title()

    def __repr__(self) -> str:
        return f"EntityAdmin({self.name!r}, {self.model_type.__name__})"
