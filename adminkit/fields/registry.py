"""
Widget registry - kind → widget class and client template macro.

The schema builder creates widgets by kind through the registry, and the
admin shell looks up the macro that renders each kind. Applications may
register their own widget classes (and macros) for a kind.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, Optional, Tuple, Type

from .kinds import WidgetKind
from .widgets import (
    CheckboxWidget,
    ColorPickerWidget,
    ComplexWidget,
    DateTimeWidget,
    ExternalVideoWidget,
    FileWidget,
    MultiSelectWidget,
    NumberWidget,
    PasswordWidget,
    PictureWidget,
    RichTextWidget,
    SelectWidget,
    TextAreaWidget,
    TextWidget,
    UrlWidget,
    Widget,
)

logger = logging.getLogger("adminkit.schema")


class WidgetRegistry:
    """Maps a ``WidgetKind`` to its widget class and template macro."""

    def __init__(self):
        self._entries: Dict[WidgetKind, Tuple[Type[Widget], str]] = {}

    def register(
        self,
        widget_cls: Type[Widget],
        *,
        macro: Optional[str] = None,
        kind: Optional[WidgetKind] = None,
    ) -> Type[Widget]:
        """Register ``widget_cls`` for its kind (or ``kind``); replaces any previous entry."""
        kind = WidgetKind(kind or widget_cls.kind)
        previous = self._entries.get(kind)
        if previous is not None and previous[0] is not widget_cls:
            logger.debug("Widget for kind %s replaced: %s -> %s",
                         kind.value, previous[0].__name__, widget_cls.__name__)
        self._entries[kind] = (widget_cls, macro or f"{kind.value}_input")
        return widget_cls

    def widget_class(self, kind: WidgetKind | str) -> Type[Widget]:
        return self._entry(kind)[0]

    def macro_for(self, kind: WidgetKind | str) -> str:
        return self._entry(kind)[1]

    def create(self, kind: WidgetKind | str, *args: Any, **options: Any) -> Widget:
        """Instantiate the widget registered for ``kind``."""
        return self.widget_class(kind)(*args, **options)

    def _entry(self, kind: WidgetKind | str) -> Tuple[Type[Widget], str]:
        try:
            return self._entries[WidgetKind(kind)]
        except (KeyError, ValueError):
            raise KeyError(f"No widget registered for kind '{kind}'") from None

    def kinds(self) -> Iterator[WidgetKind]:
        return iter(self._entries)

    def __contains__(self, kind: object) -> bool:
        try:
            return WidgetKind(kind) in self._entries
        except ValueError:
            return False

    def __len__(self) -> int:
        return len(self._entries)


def default_registry() -> WidgetRegistry:
    registry = WidgetRegistry()
    registry.register(TextWidget, macro="text_input")
    registry.register(TextAreaWidget, macro="textarea_input")
    registry.register(RichTextWidget, macro="textarea_input")
    registry.register(PasswordWidget, macro="password_input")
    registry.register(UrlWidget, macro="text_input")
    registry.register(ExternalVideoWidget, macro="text_input")
    registry.register(NumberWidget, macro="number_input")
    registry.register(CheckboxWidget, macro="checkbox_input")
    registry.register(DateTimeWidget, macro="date_time_input")
    registry.register(SelectWidget, macro="select_input")
    registry.register(MultiSelectWidget, macro="select_input")
    registry.register(ColorPickerWidget, macro="color_input")
    registry.register(FileWidget, macro="file_input")
    registry.register(PictureWidget, macro="file_input")
    registry.register(ComplexWidget, macro="complex_input")
    return registry


# Process-wide registry
widgets = default_registry()
