"""
AdminModel - base class of every model edited through the admin panel.

A model type declares its own fields in a ``declare_fields`` classmethod.
Its schema is the nearest AdminModel parent's schema followed by those
declarations, built once per type and cached for the process lifetime.
Subclasses can only add fields; inherited fields cannot be redeclared.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Type, TypeVar

from ..faults import FieldValueFault, SchemaFault
from .builder import SchemaBuilder
from .core import Schema

logger = logging.getLogger("adminkit.schema")

M = TypeVar("M", bound="AdminModel")


class SchemaCache:
    """
    Per-type schema cache.

    First builds are not synchronised; call ``warm()`` with every model
    type before serving concurrent traffic.
    """

    def __init__(self):
        self._schemas: Dict[type, Schema] = {}

    def get(self, model_type: Type["AdminModel"]) -> Schema:
        schema = self._schemas.get(model_type)
        if schema is None:
            schema = self._build(model_type)
            self._schemas[model_type] = schema
        return schema

    def warm(self, *model_types: Type["AdminModel"]) -> None:
        for model_type in model_types:
            self.get(model_type)

    def clear(self) -> None:
        self._schemas.clear()

    def __contains__(self, model_type: object) -> bool:
        return model_type in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def _build(self, model_type: Type["AdminModel"]) -> Schema:
        parent = next(
            (
                base for base in model_type.__mro__[1:]
                if isinstance(base, type) and issubclass(base, AdminModel)
            ),
            None,
        )
        base_schema = self.get(parent) if parent is not None else None

        builder = SchemaBuilder(model_type.__name__, base=base_schema)
        try:
            if "declare_fields" in vars(model_type):
                model_type.declare_fields(builder)
            schema = builder.build()
            self._check_shadowing(model_type, schema)
        except SchemaFault as fault:
            fault.log(logger)
            raise
        return schema

    @staticmethod
    def _check_shadowing(model_type: type, schema: Schema) -> None:
        for name in schema.names():
            if hasattr(model_type, name):
                raise SchemaFault(
                    model_type.__name__,
                    f"Field '{name}' shadows the {model_type.__name__}.{name} attribute",
                    code="SCHEMA_INVALID_NAME",
                    field=name,
                )


# Process-wide cache
schema_cache = SchemaCache()


@dataclass(frozen=True)
class SaveContext:
    """Information passed to the model hooks while mapping."""

    now: datetime
    current_user_id: Any = None
    is_new: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)


class AdminModel:
    """
    Base admin model.

    Instances hold one value per schema field, initialised from the field
    defaults, with attribute access::

        settings = SystemSettings(is_site_locked=True)
        settings.is_site_locked          # True
        settings.to_dict(storage=True)   # {"is_site_locked": True}
    """

    def __init__(self, **values: Any):
        schema = type(self).schema()
        data = {d.name: d.initial_value() for d in schema}

        unknown = [key for key in values if key not in data]
        if unknown:
            raise TypeError(
                f"{type(self).__name__} has no field(s): {', '.join(unknown)}"
            )

        data.update(values)
        object.__setattr__(self, "_values", data)

    # ── Declaration ──────────────────────────────────────────────────

    @classmethod
    def declare_fields(cls, fields: SchemaBuilder) -> None:
        """Register this class's own fields. Override in subclasses."""

    @classmethod
    def schema(cls) -> Schema:
        return schema_cache.get(cls)

    # ── Value access ─────────────────────────────────────────────────

    def __getattr__(self, name: str) -> Any:
        try:
            values = object.__getattribute__(self, "_values")
        except AttributeError:
            raise AttributeError(name) from None
        if name in values:
            return values[name]
        raise AttributeError(f"'{type(self).__name__}' object has no field '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        values = self.__dict__.get("_values")
        if values is not None and name in values:
            values[name] = value
        else:
            object.__setattr__(self, name, value)

    def values(self) -> Dict[str, Any]:
        return dict(self._values)

    def to_dict(self, storage: bool = False) -> Dict[str, Any]:
        """Field values; ``storage=True`` converts them to JSON-safe values."""
        if not storage:
            return dict(self._values)
        return {
            d.name: d.widget.to_storage(self._values[d.name])
            for d in type(self).schema()
        }

    @classmethod
    def from_dict(cls: Type[M], data: Dict[str, Any]) -> M:
        """
        Build an instance from raw (stored or posted) values.

        Keys that are not fields are ignored. Values that cannot be
        converted are collected and raised together as ``FieldValueFault``.
        """
        converted: Dict[str, Any] = {}
        errors: Dict[str, List[str]] = {}

        for descriptor in cls.schema():
            if descriptor.name not in data:
                continue
            try:
                converted[descriptor.name] = descriptor.widget.to_model(data[descriptor.name])
            except FieldValueFault as fault:
                for nested, messages in fault.field_errors.items():
                    errors.setdefault(f"{descriptor.name}.{nested}", []).extend(messages)
            except (ValueError, TypeError) as exc:
                errors.setdefault(descriptor.name, []).append(str(exc))

        if errors:
            raise FieldValueFault(errors, metadata={"model": cls.__name__})

        return cls(**converted)

    def validate(self) -> Dict[str, List[str]]:
        """Widget validation of every field; empty when valid."""
        errors: Dict[str, List[str]] = {}
        for descriptor in type(self).schema():
            messages = descriptor.widget.validate(self._values[descriptor.name], descriptor)
            if messages:
                errors[descriptor.name] = messages
        return errors

    # ── Hooks ────────────────────────────────────────────────────────

    def before_save(self, entity: Any, context: SaveContext) -> None:
        """Called after the values are written to ``entity`` and before it is stored."""

    def after_load(self, entity: Any, context: SaveContext) -> None:
        """Called after the model is filled from ``entity``."""

    # ── Dunder ───────────────────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._values == other._values

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        values = ", ".join(f"{k}={v!r}" for k, v in self._values.items())
        return f"{type(self).__name__}({values})"

