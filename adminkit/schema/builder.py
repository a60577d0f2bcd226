"""
SchemaBuilder - explicit, declarative field registration.

Models register their fields one call at a time, in display order::

    @classmethod
    def declare_fields(cls, fields: SchemaBuilder) -> None:
        fields.tab("General")
        fields.container("Identity")
        fields.field("name", "Name", TextWidget(max_length=200), required=True, list=True)
        fields.field("slug", "Slug", TextWidget())
        fields.end_container()
        fields.end_tab()

Section markers (``container``/``tab``) attach to the next registered
field; end markers attach to the previous one. Nothing is inspected by
reflection: the builder sees exactly what was registered.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..faults import SchemaFault
from ..fields import (
    FieldDescriptor,
    FieldRole,
    FieldWidth,
    ListSettings,
    Section,
    SectionEnd,
    SectionKind,
    Visibility,
    Widget,
    WidgetKind,
    widgets,
)
from .core import Schema

logger = logging.getLogger("adminkit.schema")


class SchemaBuilder:
    """Collects field registrations for one model and freezes them into a ``Schema``."""

    def __init__(self, model_name: str, base: Optional[Schema] = None):
        self.model_name = model_name
        self.base = base
        self._entries: List[Dict[str, Any]] = []
        self._pending: List[Section] = []

    def field(
        self,
        name: str,
        label: str,
        widget: Widget | WidgetKind | str,
        *,
        value_type: Any = None,
        tooltip: Optional[str] = None,
        required: bool = False,
        read_only: bool = False,
        visible: bool = True,
        searchable: bool = True,
        default: Any = None,
        width: FieldWidth = FieldWidth.FULL,
        list: bool | ListSettings | None = None,
        visibility: Optional[Visibility] = None,
        role: Optional[FieldRole] = None,
    ) -> "SchemaBuilder":
        """
        Register one field.

        Args:
            name: Attribute name of the field
            label: Display label, unique within the model
            widget: Widget instance, or a kind created through the widget registry
            value_type: Python value type; defaults to the widget's natural type
            list: ``True`` for default list settings, or explicit ``ListSettings``
            role: Reserved meaning stamped on save (save date, updated by, ...)
        """
        if self.base is not None and name in self.base:
            raise SchemaFault(
                self.model_name,
                f"Field '{name}' is inherited from {self.base.model_name} "
                "and cannot be redeclared",
                code="SCHEMA_REDECLARED_FIELD",
                field=name,
            )

        if not isinstance(widget, Widget):
            widget = widgets.create(widget)

        if list is True:
            list_settings: Optional[ListSettings] = ListSettings()
        elif isinstance(list, ListSettings):
            list_settings = list
        else:
            list_settings = None

        self._entries.append({
            "name": name,
            "display_label": label,
            "widget": widget,
            "value_type": value_type if value_type is not None else widget.natural_type,
            "tooltip": tooltip,
            "required": required,
            "read_only": read_only,
            "visible": visible,
            "searchable": searchable,
            "default": default,
            "width": FieldWidth(width),
            "list_settings": list_settings,
            "visibility": visibility or Visibility(),
            "role": FieldRole(role) if role is not None else None,
            "opens": tuple(self._pending),
            "closes": [],
        })
        self._pending.clear()
        return self

    # ── Section markers ──────────────────────────────────────────────

    def container(
        self,
        title: str,
        *,
        width: FieldWidth = FieldWidth.FULL,
        collapsible: bool = False,
    ) -> "SchemaBuilder":
        self._pending.append(Section(SectionKind.CONTAINER, title, FieldWidth(width), collapsible))
        return self

    def tab(self, title: str) -> "SchemaBuilder":
        self._pending.append(Section(SectionKind.TAB, title))
        return self

    def end_container(self) -> "SchemaBuilder":
        return self._end(SectionKind.CONTAINER)

    def end_tab(self) -> "SchemaBuilder":
        return self._end(SectionKind.TAB)

    def _end(self, kind: SectionKind) -> "SchemaBuilder":
        if self._pending:
            raise SchemaFault(
                self.model_name,
                f"Section '{self._pending[-1].title}' has no fields",
                code="SCHEMA_DANGLING_SECTION",
            )
        if not self._entries:
            raise SchemaFault(
                self.model_name,
                f"end_{kind.value}() called before any field was registered",
                code="SCHEMA_DANGLING_SECTION",
            )
        self._entries[-1]["closes"].append(SectionEnd(kind))
        return self

    # ── Build ────────────────────────────────────────────────────────

    def build(self) -> Schema:
        """Validate and freeze the registrations."""
        if self._pending:
            raise SchemaFault(
                self.model_name,
                f"Section '{self._pending[0].title}' is opened after the last field",
                code="SCHEMA_DANGLING_SECTION",
            )

        descriptors = [
            FieldDescriptor(**{**entry, "closes": tuple(entry["closes"])})
            for entry in self._entries
        ]

        if self.base is not None:
            schema = self.base.extend(self.model_name, descriptors)
        else:
            schema = Schema(self.model_name, descriptors)

        logger.debug(
            "Built schema %s (%d fields, %d own)",
            self.model_name, len(schema), len(descriptors),
        )
        return schema
