"""
Field descriptors - the immutable metadata of one admin-model field.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .kinds import ColumnFilter, FieldRole, FieldWidth, MainFilter, WidgetKind
from .widgets import Widget, type_name


__all__ = [
    "SectionKind",
    "Section",
    "SectionEnd",
    "ListSettings",
    "Visibility",
    "FieldDescriptor",
]


class SectionKind(str, Enum):
    CONTAINER = "container"
    TAB = "tab"


@dataclass(frozen=True)
class Section:
    """A container or tab opened right before a field."""

    kind: SectionKind
    title: str
    width: FieldWidth = FieldWidth.FULL
    collapsible: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "width": self.width.value,
            "collapsible": self.collapsible,
        }


@dataclass(frozen=True)
class SectionEnd:
    """End marker closing the innermost open section of ``kind``."""

    kind: SectionKind


@dataclass(frozen=True)
class ListSettings:
    """How a field appears as a column of the list (grid) page."""

    allow_sort: bool = True
    column_filter: ColumnFilter = ColumnFilter.DEFAULT
    main_filter: MainFilter = MainFilter.DEFAULT
    hide_in_table: bool = False
    fixed_column: bool = False
    inline_edit: bool = False
    priority: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allowSort": self.allow_sort,
            "columnFilter": self.column_filter.value,
            "mainFilter": self.main_filter.value,
            "hideInTable": self.hide_in_table,
            "fixedColumn": self.fixed_column,
            "inlineEdit": self.inline_edit,
            "priority": self.priority,
        }


@dataclass(frozen=True)
class Visibility:
    show_on_create: bool = True
    show_on_edit: bool = True
    show_on_view: bool = True

    def to_dict(self) -> Dict[str, bool]:
        return {
            "showOnCreate": self.show_on_create,
            "showOnEdit": self.show_on_edit,
            "showOnView": self.show_on_view,
        }


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Metadata of one field exposed to the admin client.

    Created once per declared field when a schema is built and never
    mutated afterwards.

    Attributes:
        name:          Field (attribute) name, unique within a model
        display_label: Label shown by the client, unique within a model
        widget:        Widget rendering and converting the value
        value_type:    Python type of the value (``Optional[X]`` allowed)
        list_settings: Column settings; ``None`` keeps the field off the list page
        role:          Reserved meaning stamped by the save pipeline
        opens:         Sections opened before this field
        closes:        Sections closed after this field
    """

    name: str
    display_label: str
    widget: Widget
    value_type: Any
    tooltip: Optional[str] = None
    required: bool = False
    read_only: bool = False
    visible: bool = True
    searchable: bool = True
    default: Any = None
    width: FieldWidth = FieldWidth.FULL
    list_settings: Optional[ListSettings] = None
    visibility: Visibility = field(default_factory=Visibility)
    role: Optional[FieldRole] = None
    opens: Tuple[Section, ...] = ()
    closes: Tuple[SectionEnd, ...] = ()

    @property
    def widget_kind(self) -> WidgetKind:
        return self.widget.kind

    @property
    def list_visible(self) -> bool:
        return self.list_settings is not None and not self.list_settings.hide_in_table

    def initial_value(self) -> Any:
        """Fresh value for a new model instance."""
        if self.default is not None:
            return copy.deepcopy(self.default)
        return self.widget.empty_value()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "displayLabel": self.display_label,
            "tooltip": self.tooltip,
            "widgetKind": self.widget_kind.value,
            "valueType": type_name(self.value_type),
            "required": self.required,
            "readOnly": self.read_only,
            "visible": self.visible,
            "searchable": self.searchable,
            "default": None if self.default is None else self.widget.to_storage(self.default),
            "width": self.width.value,
            "listVisible": self.list_visible,
            "listSettings": self.list_settings.to_dict() if self.list_settings else None,
            "visibility": self.visibility.to_dict(),
            "role": self.role.value if self.role else None,
            "attributes": self.widget.attributes(),
        }

    def __repr__(self) -> str:
        return f"<FieldDescriptor '{self.name}' ({self.widget_kind.value})>"
