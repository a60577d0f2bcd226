"""
Widgets: conversion, validation, attributes and the widget registry.
"""

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import List, Optional

import pytest

from adminkit.fields import (
    CheckboxWidget,
    ColorPickerWidget,
    DateTimePickerType,
    DateTimeWidget,
    ExternalVideoWidget,
    FieldDescriptor,
    FileWidget,
    MultiSelectWidget,
    NumberWidget,
    PasswordWidget,
    PictureWidget,
    SelectWidget,
    TextWidget,
    UrlWidget,
    WidgetKind,
    WidgetRegistry,
    default_registry,
    type_name,
    unwrap_optional,
    widgets,
)


def describe(widget, value_type=str, *, required=False, label="Value", name="value"):
    return FieldDescriptor(
        name=name,
        display_label=label,
        widget=widget,
        value_type=value_type,
        required=required,
    )


class Color(Enum):
    RED = "red"
    GREEN = "green"


class Priority(Enum):
    LOW = 1
    HIGH = 2


# ============================================================================
# Type helpers
# ============================================================================

class TestTypeHelpers:

    def test_unwrap_optional(self):
        assert unwrap_optional(Optional[int]) is int
        assert unwrap_optional(int | None) is int
        assert unwrap_optional(int) is int

    def test_type_name(self):
        assert type_name(Optional[str]) == "str"
        assert type_name(List[int]) == "list[int]"


# ============================================================================
# Text widgets
# ============================================================================

class TestTextWidgets:

    def test_required_empty_value(self):
        widget = TextWidget()
        d = describe(widget, required=True, label="Forum Name")
        assert widget.validate("  ", d) == ["Forum Name is required"]
        assert widget.validate(None, describe(widget)) == []

    def test_max_length(self):
        widget = TextWidget(max_length=3)
        assert widget.validate("abcd", describe(widget, label="Code")) == [
            "Code must be at most 3 characters"
        ]
        assert widget.validate("abc", describe(widget)) == []

    def test_to_model_rejects_structures(self):
        with pytest.raises(ValueError):
            TextWidget().to_model({"a": 1})
        assert TextWidget().to_model(5) == "5"

    def test_attributes_only_include_set_options(self):
        assert TextWidget().attributes() == {}
        assert TextWidget(placeholder="Name", prefix="@").attributes() == {
            "placeholder": "Name",
            "prefix": "@",
        }

    def test_password_attributes(self):
        assert PasswordWidget(confirm=True).attributes() == {"confirm": True}
        assert PasswordWidget.kind is WidgetKind.PASSWORD

    def test_url(self):
        widget = UrlWidget()
        assert widget.validate("https://example.com/a", describe(widget)) == []
        assert widget.validate("ftp://example", describe(widget, label="Link")) == [
            "Link must be a valid URL"
        ]

    def test_external_video_hosts(self):
        widget = ExternalVideoWidget()
        assert widget.validate("https://www.youtube.com/watch?v=1", describe(widget)) == []
        errors = widget.validate("https://example.com/v", describe(widget, label="Video"))
        assert errors and errors[0].startswith("Video must link to one of")


# ============================================================================
# Numbers and checkboxes
# ============================================================================

class TestNumberWidget:

    def test_to_model_integer(self):
        widget = NumberWidget()
        assert widget.to_model("42") == 42
        assert widget.to_model(" ") is None
        with pytest.raises(ValueError):
            widget.to_model("4.5")
        with pytest.raises(ValueError):
            widget.to_model("abc")
        with pytest.raises(ValueError):
            widget.to_model(True)

    def test_to_model_decimal(self):
        assert NumberWidget(is_decimal=True).to_model("4.5") == 4.5

    def test_non_finite_rejected(self):
        with pytest.raises(ValueError):
            NumberWidget(is_decimal=True).to_model("NaN")

    def test_range(self):
        widget = NumberWidget(min=1, max=65535)
        d = describe(widget, int, label="Port")
        assert widget.validate(0, d) == ["Port must be at least 1"]
        assert widget.validate(70000, d) == ["Port must be at most 65535"]
        assert widget.validate(25, d) == []

    def test_decimal_places(self):
        widget = NumberWidget(is_decimal=True, decimal_places=2)
        d = describe(widget, float, label="Price")
        assert widget.validate(1.234, d) == ["Price must have at most 2 decimal places"]
        assert widget.to_storage(1.005) == round(1.005, 2)

    def test_natural_type(self):
        assert NumberWidget().natural_type is int
        assert NumberWidget(is_decimal=True).natural_type is float

    def test_does_not_accept_bool(self):
        assert NumberWidget().accepts_type(int)
        assert not NumberWidget().accepts_type(bool)


class TestCheckboxWidget:

    @pytest.mark.parametrize("raw, expected", [
        (True, True),
        ("on", True),
        ("Yes", True),
        (1, True),
        ("off", False),
        ("", False),
        (None, False),
    ])
    def test_to_model(self, raw, expected):
        assert CheckboxWidget().to_model(raw) is expected

    def test_invalid(self):
        with pytest.raises(ValueError):
            CheckboxWidget().to_model("maybe")

    def test_accepts_only_bool(self):
        assert CheckboxWidget().accepts_type(bool)
        assert CheckboxWidget().accepts_type(Optional[bool])
        assert not CheckboxWidget().accepts_type(str)

    def test_empty_value(self):
        assert CheckboxWidget().empty_value() is False


# ============================================================================
# Dates
# ============================================================================

class TestDateTimeWidget:

    def test_datetime_with_z_suffix(self):
        value = DateTimeWidget().to_model("2024-05-01T12:00:00Z")
        assert value == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)

    def test_date(self):
        widget = DateTimeWidget(date_type=DateTimePickerType.DATE)
        assert widget.to_model("2024-05-01") == date(2024, 5, 1)
        assert widget.to_model(datetime(2024, 5, 1, 9)) == date(2024, 5, 1)
        assert widget.natural_type is date

    def test_time(self):
        widget = DateTimeWidget(date_type="time")
        assert widget.to_model("08:30") == time(8, 30)

    def test_invalid(self):
        with pytest.raises(ValueError, match="not a valid ISO 8601"):
            DateTimeWidget().to_model("yesterday")

    def test_to_storage(self):
        assert DateTimeWidget().to_storage(datetime(2024, 5, 1)) == "2024-05-01T00:00:00"
        assert DateTimeWidget().to_storage(None) is None


# ============================================================================
# Selects
# ============================================================================

class TestSelectWidgets:

    def test_enum_options(self):
        widget = SelectWidget(Color)
        assert widget.resolve_options() == [
            {"value": "red", "label": "Red"},
            {"value": "green", "label": "Green"},
        ]
        assert widget.to_model("red") is Color.RED
        assert widget.to_model("GREEN") is Color.GREEN
        assert widget.to_storage(Color.RED) == "red"

    def test_int_enum_from_string(self):
        assert SelectWidget(Priority).to_model("2") is Priority.HIGH

    def test_invalid_enum_value(self):
        with pytest.raises(ValueError, match="not a valid Color"):
            SelectWidget(Color).to_model("blue")

    def test_mapping_and_pairs(self):
        assert SelectWidget({1: "One"}).resolve_options() == [{"value": 1, "label": "One"}]
        assert SelectWidget([(1, "One"), "two"]).resolve_options() == [
            {"value": 1, "label": "One"},
            {"value": "two", "label": "two"},
        ]

    def test_string_converted_to_option_type(self):
        assert SelectWidget([1, 2, 3]).to_model("2") == 2

    def test_check_against_options(self):
        widget = SelectWidget(["a", "b"])
        assert widget.validate("c", describe(widget, label="Letter")) == [
            "Letter: 'c' is not a valid option"
        ]

    def test_dynamic_options_are_evaluated_each_time(self):
        source = ["a"]
        widget = SelectWidget(options_source=lambda: list(source))
        assert len(widget.resolve_options()) == 1
        source.append("b")
        assert len(widget.resolve_options()) == 2
        assert widget.attributes()["dynamicOptions"] is True

    def test_options_and_source_are_exclusive(self):
        with pytest.raises(ValueError):
            SelectWidget(["a"], options_source=lambda: ["b"])

    def test_multi_select(self):
        widget = MultiSelectWidget(Color)
        assert widget.to_model("red, green") == [Color.RED, Color.GREEN]
        assert widget.to_model('["red"]') == [Color.RED]
        assert widget.to_model(None) == []
        assert widget.to_storage([Color.GREEN]) == ["green"]
        assert widget.accepts_type(List[str])


# ============================================================================
# Colors and files
# ============================================================================

class TestColorAndFiles:

    def test_color(self):
        widget = ColorPickerWidget()
        assert widget.to_model(" #FFAA00 ") == "#ffaa00"
        assert widget.validate("#ffaa00", describe(widget)) == []
        assert widget.validate("red", describe(widget, label="Accent")) == [
            "Accent must be a hex color"
        ]
        assert ColorPickerWidget(allow_alpha=True).validate("#ffaa0080", describe(widget)) == []

    def test_file_extensions_normalised(self):
        widget = FileWidget(allowed_extensions=["PDF", ".txt"])
        assert widget.allowed_extensions == (".pdf", ".txt")
        assert widget.validate("a.PDF", describe(widget)) == []
        assert widget.validate("a.exe", describe(widget, label="Doc"))

    def test_single_file(self):
        widget = FileWidget()
        assert widget.to_model(["a.txt"]) == "a.txt"
        with pytest.raises(ValueError):
            widget.to_model(["a.txt", "b.txt"])

    def test_multiple_files(self):
        widget = FileWidget(multiple=True)
        assert widget.to_model("a.txt") == ["a.txt"]
        assert widget.empty_value() == []
        assert widget.natural_type is list

    def test_picture_attributes(self):
        attrs = PictureWidget(max_size=4, crop_ratio="1:1").attributes()
        assert attrs["maxSize"] == 4
        assert attrs["forceFormat"] == "no_force"
        assert attrs["cropRatio"] == "1:1"
        assert ".png" in attrs["allowedExtensions"]


# ============================================================================
# Registry
# ============================================================================

class TestWidgetRegistry:

    def test_default_registry_covers_every_kind(self):
        registry = default_registry()
        assert set(registry.kinds()) == set(WidgetKind)
        assert len(registry) == len(WidgetKind)

    def test_macro_lookup(self):
        assert widgets.macro_for(WidgetKind.CHECKBOX) == "checkbox_input"
        assert widgets.macro_for("rich_text") == "textarea_input"

    def test_create(self):
        widget = widgets.create("number", min=1)
        assert isinstance(widget, NumberWidget)
        assert widget.min == 1

    def test_unknown_kind(self):
        registry = WidgetRegistry()
        with pytest.raises(KeyError):
            registry.widget_class(WidgetKind.TEXT)
        assert "nope" not in registry

    def test_custom_widget_replaces_kind(self):
        class UpperTextWidget(TextWidget):
            def to_model(self, raw):
                value = super().to_model(raw)
                return value.upper() if value else value

        registry = default_registry()
        registry.register(UpperTextWidget)
        assert registry.widget_class("text") is UpperTextWidget
        assert registry.macro_for("text") == "text_input"
        assert registry.create("text").to_model("abc") == "ABC"
