"""
Enumerations shared by widgets and field descriptors.
"""

from __future__ import annotations

from enum import Enum


__all__ = [
    "WidgetKind",
    "FieldWidth",
    "FieldRole",
    "ColumnFilter",
    "MainFilter",
    "DateTimePickerType",
    "SelectViewType",
    "RichTextEditor",
    "ForcePictureFormat",
]


class WidgetKind(str, Enum):
    """The UI control used to render/edit a field."""
    TEXT = "text"
    TEXTAREA = "textarea"
    RICH_TEXT = "rich_text"
    PASSWORD = "password"
    URL = "url"
    EXTERNAL_VIDEO = "external_video"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    DATE_TIME = "date_time"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    COLOR_PICKER = "color_picker"
    FILE = "file"
    PICTURE = "picture"
    COMPLEX = "complex"


class FieldWidth(int, Enum):
    """Width of a field inside the edit page, in percent (0 = auto)."""
    AUTO = 0
    QUARTER = 25
    THIRD = 33
    HALF = 50
    TWO_THIRDS = 66
    THREE_QUARTERS = 75
    FULL = 100


class FieldRole(str, Enum):
    """Reserved meaning of a field, stamped by the save pipeline."""
    SORT_INDEX = "sort_index"
    SAVE_DATE = "save_date"
    LAST_UPDATE_DATE = "last_update_date"
    UPDATED_BY = "updated_by"
    DELETION_INDICATOR = "deletion_indicator"
    ARCHIVE_INDICATOR = "archive_indicator"


class ColumnFilter(str, Enum):
    DEFAULT = "default"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    RANGE = "range"
    CHECKBOXES = "checkboxes"


class MainFilter(str, Enum):
    DEFAULT = "default"
    DATE_RANGE = "date_range"
    TEXT_SEARCH = "text_search"
    DROPDOWN = "dropdown"


class DateTimePickerType(str, Enum):
    DATE = "date"
    TIME = "time"
    DATE_TIME = "date_time"


class SelectViewType(str, Enum):
    DROPDOWN = "dropdown"
    RADIO_BUTTONS = "radio_buttons"
    SEARCHABLE_DROPDOWN = "searchable_dropdown"
    TAGS = "tags"
    CHECKBOXES = "checkboxes"


class RichTextEditor(str, Enum):
    QUILL = "quill"
    CKEDITOR = "ckeditor"


class ForcePictureFormat(str, Enum):
    NO_FORCE = "no_force"
    JPG = "jpg"
    PNG = "png"
    WEBP = "webp"
