"""
adminkit fields - widgets and field descriptors.

Core exports:
- Widget and the concrete widgets (TextWidget, CheckboxWidget, ...)
- WidgetKind and the other field enumerations
- FieldDescriptor, ListSettings, Visibility, Section, SectionEnd
- widgets: the process-wide WidgetRegistry
"""

from .kinds import (
    ColumnFilter,
    DateTimePickerType,
    FieldRole,
    FieldWidth,
    ForcePictureFormat,
    MainFilter,
    RichTextEditor,
    SelectViewType,
    WidgetKind,
)
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
    type_name,
    unwrap_optional,
)
from .descriptor import (
    FieldDescriptor,
    ListSettings,
    Section,
    SectionEnd,
    SectionKind,
    Visibility,
)
from .registry import WidgetRegistry, default_registry, widgets

__all__ = [
    # Enumerations
    "ColumnFilter",
    "DateTimePickerType",
    "FieldRole",
    "FieldWidth",
    "ForcePictureFormat",
    "MainFilter",
    "RichTextEditor",
    "SelectViewType",
    "WidgetKind",

    # Widgets
    "Widget",
    "TextWidget",
    "TextAreaWidget",
    "RichTextWidget",
    "PasswordWidget",
    "UrlWidget",
    "ExternalVideoWidget",
    "NumberWidget",
    "CheckboxWidget",
    "DateTimeWidget",
    "SelectWidget",
    "MultiSelectWidget",
    "ColorPickerWidget",
    "FileWidget",
    "PictureWidget",
    "ComplexWidget",
    "type_name",
    "unwrap_optional",

    # Descriptors
    "FieldDescriptor",
    "ListSettings",
    "Section",
    "SectionEnd",
    "SectionKind",
    "Visibility",

    # Registry
    "WidgetRegistry",
    "default_registry",
    "widgets",
]
