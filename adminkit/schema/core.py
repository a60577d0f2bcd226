"""
Schema - the ordered, immutable field metadata of one admin model.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from ..faults import SchemaFault
from ..fields import FieldDescriptor, FieldRole, type_name


class Schema:
    """
    Ordered tuple of ``FieldDescriptor`` for one model.

    Validated on construction:
    - field names are unique identifiers not starting with ``_``
    - display labels are unique
    - every widget can edit its field's declared value type
    """

    __slots__ = ("model_name", "_fields", "_by_name")

    def __init__(self, model_name: str, fields: Iterable[FieldDescriptor] = ()):
        self.model_name = model_name
        self._fields: Tuple[FieldDescriptor, ...] = tuple(fields)
        self._by_name: Dict[str, FieldDescriptor] = {}
        self._validate()

    def _validate(self) -> None:
        labels: Dict[str, str] = {}

        for descriptor in self._fields:
            name = descriptor.name
            if not name.isidentifier() or name.startswith("_"):
                raise SchemaFault(
                    self.model_name,
                    f"'{name}' is not a valid field name",
                    code="SCHEMA_INVALID_NAME",
                    field=name,
                )

            if name in self._by_name:
                raise SchemaFault(
                    self.model_name,
                    f"Field '{name}' is declared more than once",
                    code="SCHEMA_DUPLICATE_FIELD",
                    field=name,
                )
            self._by_name[name] = descriptor

            label = descriptor.display_label
            if label in labels:
                raise SchemaFault(
                    self.model_name,
                    f"Display label '{label}' is used by both "
                    f"'{labels[label]}' and '{name}'",
                    code="SCHEMA_DUPLICATE_LABEL",
                    field=name,
                )
            labels[label] = name

            if not descriptor.widget.accepts_type(descriptor.value_type):
                raise SchemaFault(
                    self.model_name,
                    f"Field '{name}': {type(descriptor.widget).__name__} "
                    f"cannot edit values of type {type_name(descriptor.value_type)}",
                    code="SCHEMA_TYPE_MISMATCH",
                    field=name,
                )

    # ── Sequence protocol ────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self._fields)

    def __getitem__(self, index: int) -> FieldDescriptor:
        return self._fields[index]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    @property
    def fields(self) -> Tuple[FieldDescriptor, ...]:
        return self._fields

    def names(self) -> List[str]:
        return [d.name for d in self._fields]

    def get(self, name: str, default: Optional[FieldDescriptor] = None) -> Optional[FieldDescriptor]:
        return self._by_name.get(name, default)

    def by_role(self, role: FieldRole) -> Optional[FieldDescriptor]:
        """First field carrying ``role``, if any."""
        return next((d for d in self._fields if d.role is role), None)

    def list_columns(self) -> List[FieldDescriptor]:
        """List-visible fields ordered by priority, then declaration order."""
        columns = [d for d in self._fields if d.list_visible]
        return sorted(columns, key=lambda d: d.list_settings.priority)

    # ── Derivation ───────────────────────────────────────────────────

    def extend(self, model_name: str, fields: Iterable[FieldDescriptor]) -> "Schema":
        """New schema: this schema's fields followed by ``fields``."""
        return Schema(model_name, self._fields + tuple(fields))

    # ── Export ───────────────────────────────────────────────────────

    def to_list(self) -> List[Dict[str, Any]]:
        return [d.to_dict() for d in self._fields]

    def to_dict(self) -> Dict[str, Any]:
        return {"modelName": self.model_name, "fields": self.to_list()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return self.model_name == other.model_name and self._fields == other._fields

    def __hash__(self) -> int:
        return hash((self.model_name, tuple(self.names())))

    def __repr__(self) -> str:
        return f"<Schema '{self.model_name}' fields={self.names()}>"
