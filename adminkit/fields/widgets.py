"""
adminkit widgets - the field-type plugins of an admin model.

A Widget decides how a field is rendered and how its values travel:

    inbound:   raw_value → to_model() → validate() → model value
    outbound:  model value → to_storage() → stored / JSON value

Each widget also declares which Python value types it can edit
(``accepts``); the schema builder refuses a field whose declared value
type the widget cannot represent (a checkbox needs a ``bool``).
"""

from __future__ import annotations

import json
import re
import types
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
    TYPE_CHECKING,
    get_args,
    get_origin,
)
from urllib.parse import urlsplit

from .kinds import (
    DateTimePickerType,
    ForcePictureFormat,
    RichTextEditor,
    SelectViewType,
    WidgetKind,
)

if TYPE_CHECKING:
    from .descriptor import FieldDescriptor


__all__ = [
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
    "unwrap_optional",
    "type_name",
]


# ── Type helpers ─────────────────────────────────────────────────────────

def unwrap_optional(tp: Any) -> Any:
    """``Optional[X]`` → ``X``; anything else is returned unchanged."""
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def type_name(tp: Any) -> str:
    """Readable name of a (possibly generic) value type."""
    tp = unwrap_optional(tp)
    origin = get_origin(tp)
    if origin is not None:
        args = ", ".join(type_name(a) for a in get_args(tp))
        return f"{getattr(origin, '__name__', str(origin))}[{args}]"
    return getattr(tp, "__name__", str(tp))


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, (list, tuple, set, frozenset, dict)) and not value:
        return True
    return False


# ── Base ─────────────────────────────────────────────────────────────────

class Widget:
    """
    Base widget.

    Attributes:
        kind:         The ``WidgetKind`` rendered by the client
        accepts:      Python types this widget can edit
        natural_type: Value type assumed when a field does not declare one
    """

    kind: WidgetKind = WidgetKind.TEXT
    accepts: Tuple[type, ...] = (object,)
    natural_type: Any = str

    def accepts_type(self, value_type: Any) -> bool:
        """Whether a field of ``value_type`` can be edited with this widget."""
        tp = unwrap_optional(value_type)
        origin = get_origin(tp) or tp
        if not isinstance(origin, type):
            return False
        # bool subclasses int; only widgets that name bool may edit it
        if origin is bool and bool not in self.accepts:
            return False
        return issubclass(origin, self.accepts)

    def attributes(self) -> Dict[str, Any]:
        """JSON-friendly widget configuration sent to the client."""
        return {}

    def empty_value(self) -> Any:
        """Value of a field that has no default."""
        return None

    def validate(self, value: Any, descriptor: FieldDescriptor) -> List[str]:
        """Return the list of problems with ``value`` (empty when valid)."""
        if _is_empty(value):
            if descriptor.required:
                return [f"{descriptor.display_label} is required"]
            return []
        return self.check(value, descriptor)

    def check(self, value: Any, descriptor: FieldDescriptor) -> List[str]:
        """Kind-specific rules for a non-empty value."""
        return []

    def to_model(self, raw: Any) -> Any:
        """
        Convert a stored or posted value into the Python value.

        Raise ``ValueError`` when the value cannot be converted.
        """
        return raw

    def to_storage(self, value: Any) -> Any:
        """Convert a Python value into a JSON-safe stored value."""
        return value

    def __repr__(self) -> str:
        attrs = ", ".join(f"{k}={v!r}" for k, v in self.attributes().items())
        return f"{type(self).__name__}({attrs})"


# ── Text Widgets ─────────────────────────────────────────────────────────

class TextWidget(Widget):
    """Single-line text input."""

    kind = WidgetKind.TEXT
    accepts = (str,)
    natural_type = str

    def __init__(
        self,
        *,
        placeholder: str | None = None,
        max_length: int | None = None,
        prefix: str | None = None,
        suffix: str | None = None,
        masking: str | None = None,
    ):
        self.placeholder = placeholder
        self.max_length = max_length
        self.prefix = prefix
        self.suffix = suffix
        self.masking = masking

    def attributes(self) -> Dict[str, Any]:
        attrs: Dict[str, Any] = {}
        if self.placeholder is not None:
            attrs["placeholder"] = self.placeholder
        if self.max_length is not None:
            attrs["maxLength"] = self.max_length
        if self.prefix is not None:
            attrs["prefix"] = self.prefix
        if self.suffix is not None:
            attrs["suffix"] = self.suffix
        if self.masking is not None:
            attrs["masking"] = self.masking
        return attrs

    def check(self, value: Any, descriptor: FieldDescriptor) -> List[str]:
        if self.max_length is not None and len(str(value)) > self.max_length:
            return [
                f"{descriptor.display_label} must be at most "
                f"{self.max_length} characters"
            ]
        return []

    def to_model(self, raw: Any) -> str | None:
        if raw is None:
            return None
        if isinstance(raw, (dict, list)):
            raise ValueError(f"Expected text, got {type(raw).__name__}")
        return str(raw)


class TextAreaWidget(TextWidget):
    kind = WidgetKind.TEXTAREA

    def __init__(self, *, rows: int = 3, **kwargs):
        super().__init__(**kwargs)
        self.rows = rows

    def attributes(self) -> Dict[str, Any]:
        return {**super().attributes(), "rows": self.rows}


class RichTextWidget(TextWidget):
    kind = WidgetKind.RICH_TEXT

    def __init__(self, *, editor: RichTextEditor = RichTextEditor.QUILL, **kwargs):
        super().__init__(**kwargs)
        self.editor = RichTextEditor(editor)

    def attributes(self) -> Dict[str, Any]:
        return {**super().attributes(), "editor": self.editor.value}


class PasswordWidget(TextWidget):
    """Password input; never echoes a stored value back to the client."""

    kind = WidgetKind.PASSWORD

    def __init__(self, *, confirm: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.confirm = confirm

    def attributes(self) -> Dict[str, Any]:
        return {**super().attributes(), "confirm": self.confirm}


class UrlWidget(TextWidget):
    kind = WidgetKind.URL

    _URL_RE = re.compile(
        r"^https?://"
        r"(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)*"
        r"[a-zA-Z]{2,}"
        r"(?::\d+)?"
        r"(?:/[^\s]*)?$"
    )

    def check(self, value: Any, descriptor: FieldDescriptor) -> List[str]:
        errors = super().check(value, descriptor)
        if not self._URL_RE.match(str(value)):
            errors.append(f"{descriptor.display_label} must be a valid URL")
        return errors


class ExternalVideoWidget(UrlWidget):
    """Link to a video hosted elsewhere (YouTube, Vimeo, ...)."""

    kind = WidgetKind.EXTERNAL_VIDEO

    def __init__(
        self,
        *,
        allowed_hosts: Sequence[str] = ("youtube.com", "youtu.be", "vimeo.com"),
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.allowed_hosts = tuple(h.lower() for h in allowed_hosts)

    def attributes(self) -> Dict[str, Any]:
        return {**super().attributes(), "allowedHosts": list(self.allowed_hosts)}

    def check(self, value: Any, descriptor: FieldDescriptor) -> List[str]:
        errors = super().check(value, descriptor)
        if errors or not self.allowed_hosts:
            return errors
        host = (urlsplit(str(value)).hostname or "").lower()
        if not any(host == h or host.endswith("." + h) for h in self.allowed_hosts):
            errors.append(
                f"{descriptor.display_label} must link to one of: "
                f"{', '.join(self.allowed_hosts)}"
            )
        return errors


# ── Number Widget ────────────────────────────────────────────────────────

class NumberWidget(Widget):
    """
    Numeric input.

    Non-decimal numbers are stored as integers; decimal numbers are rounded
    to ``decimal_places`` when stored.
    """

    kind = WidgetKind.NUMBER
    accepts = (int, float, Decimal)

    def __init__(
        self,
        *,
        is_decimal: bool = False,
        show_thousands_comma: bool = False,
        decimal_places: int | None = None,
        min: float | None = None,
        max: float | None = None,
        step: float | None = None,
    ):
        self.is_decimal = is_decimal
        self.show_thousands_comma = show_thousands_comma
        self.decimal_places = decimal_places
        self.min = min
        self.max = max
        self.step = step

    @property
    def natural_type(self) -> type:
        return float if self.is_decimal else int

    def attributes(self) -> Dict[str, Any]:
        attrs: Dict[str, Any] = {
            "isDecimal": self.is_decimal,
            "showThousandsComma": self.show_thousands_comma,
        }
        for key, value in (
            ("decimalPlaces", self.decimal_places),
            ("min", self.min),
            ("max", self.max),
            ("step", self.step),
        ):
            if value is not None:
                attrs[key] = value
        return attrs

    def check(self, value: Any, descriptor: FieldDescriptor) -> List[str]:
        label = descriptor.display_label
        errors: List[str] = []
        if not self.is_decimal and value != int(value):
            errors.append(f"{label} must be a whole number")
        if self.min is not None and value < self.min:
            errors.append(f"{label} must be at least {self.min}")
        if self.max is not None and value > self.max:
            errors.append(f"{label} must be at most {self.max}")
        if self.is_decimal and self.decimal_places is not None:
            exponent = Decimal(str(value)).as_tuple().exponent
            if isinstance(exponent, int) and -exponent > self.decimal_places:
                errors.append(
                    f"{label} must have at most {self.decimal_places} decimal places"
                )
        return errors

    def to_model(self, raw: Any) -> int | float | None:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None
        if isinstance(raw, bool):
            raise ValueError("Expected a number, got bool")
        try:
            number = Decimal(str(raw).strip())
        except InvalidOperation as exc:
            raise ValueError(f"'{raw}' is not a number") from exc
        if not number.is_finite():
            raise ValueError(f"'{raw}' is not a finite number")
        if self.is_decimal:
            return float(number)
        if number != number.to_integral_value():
            raise ValueError(f"'{raw}' is not a whole number")
        return int(number)

    def to_storage(self, value: Any) -> int | float | None:
        if value is None:
            return None
        if not self.is_decimal:
            return int(round(value))
        if self.decimal_places is not None:
            return round(float(value), self.decimal_places)
        return float(value)


# ── Checkbox Widget ──────────────────────────────────────────────────────

class CheckboxWidget(Widget):
    kind = WidgetKind.CHECKBOX
    accepts = (bool,)
    natural_type = bool

    _TRUE_VALUES = {"true", "1", "yes", "on"}
    _FALSE_VALUES = {"false", "0", "no", "off", ""}

    def __init__(self, *, allow_list_toggle: bool = False):
        self.allow_list_toggle = allow_list_toggle

    def attributes(self) -> Dict[str, Any]:
        return {"allowListToggle": self.allow_list_toggle}

    def empty_value(self) -> bool:
        return False

    def to_model(self, raw: Any) -> bool:
        if raw is None:
            return False
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, int) and raw in (0, 1):
            return bool(raw)
        if isinstance(raw, str):
            lower = raw.strip().lower()
            if lower in self._TRUE_VALUES:
                return True
            if lower in self._FALSE_VALUES:
                return False
        raise ValueError(f"Expected a boolean, got {raw!r}")

    def to_storage(self, value: Any) -> bool:
        return bool(value)


# ── Date/Time Widget ─────────────────────────────────────────────────────

class DateTimeWidget(Widget):
    """Date, time or date-time picker (ISO 8601 on the wire)."""

    kind = WidgetKind.DATE_TIME
    accepts = (datetime, date, time)

    def __init__(
        self,
        *,
        date_type: DateTimePickerType = DateTimePickerType.DATE_TIME,
        is_range: bool = False,
        is_utc: bool = False,
    ):
        self.date_type = DateTimePickerType(date_type)
        self.is_range = is_range
        self.is_utc = is_utc

    @property
    def natural_type(self) -> type:
        return {
            DateTimePickerType.DATE: date,
            DateTimePickerType.TIME: time,
            DateTimePickerType.DATE_TIME: datetime,
        }[self.date_type]

    def attributes(self) -> Dict[str, Any]:
        return {
            "dateType": self.date_type.value,
            "isRange": self.is_range,
            "isUtc": self.is_utc,
        }

    def to_model(self, raw: Any) -> date | time | datetime | None:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None

        if self.date_type is DateTimePickerType.TIME:
            if isinstance(raw, time):
                return raw
            parse = time.fromisoformat
        elif self.date_type is DateTimePickerType.DATE:
            if isinstance(raw, datetime):
                return raw.date()
            if isinstance(raw, date):
                return raw
            parse = date.fromisoformat
        else:
            if isinstance(raw, datetime):
                return raw
            if isinstance(raw, date):
                return datetime(raw.year, raw.month, raw.day)
            parse = datetime.fromisoformat

        if not isinstance(raw, str):
            raise ValueError(f"Expected ISO 8601 {self.date_type.value}, got {type(raw).__name__}")
        text = raw.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return parse(text)
        except ValueError as exc:
            raise ValueError(f"'{raw}' is not a valid ISO 8601 {self.date_type.value}") from exc

    def to_storage(self, value: Any) -> str | None:
        if value is None:
            return None
        return value.isoformat()


# ── Select Widgets ───────────────────────────────────────────────────────

OptionsSpec = Union[type, Dict[Any, str], Iterable[Any]]


class SelectWidget(Widget):
    """
    Single choice from a list of options.

    ``options`` may be an ``Enum`` class, a ``{value: label}`` mapping, or a
    sequence of values / ``(value, label)`` pairs. ``options_source`` is a
    callable returning the same, evaluated each time the options are needed.
    """

    kind = WidgetKind.SELECT
    accepts = (str, int, Enum)
    natural_type = str

    def __init__(
        self,
        options: OptionsSpec | None = None,
        *,
        options_source: Callable[[], OptionsSpec] | None = None,
        search_enabled: bool = False,
        view_type: SelectViewType = SelectViewType.DROPDOWN,
    ):
        if options is not None and options_source is not None:
            raise ValueError("Pass either options or options_source, not both")
        self.options = options
        self.options_source = options_source
        self.search_enabled = search_enabled
        self.view_type = SelectViewType(view_type)

    @property
    def enum_type(self) -> type | None:
        if isinstance(self.options, type) and issubclass(self.options, Enum):
            return self.options
        return None

    def resolve_options(self) -> List[Dict[str, Any]]:
        """Options as ``[{"value": ..., "label": ...}]``."""
        spec = self.options_source() if self.options_source is not None else self.options
        if spec is None:
            return []
        if isinstance(spec, type) and issubclass(spec, Enum):
            return [
                {"value": member.value, "label": member.name.replace("_", " ").title()}
                for member in spec
            ]
        if isinstance(spec, dict):
            return [{"value": v, "label": str(label)} for v, label in spec.items()]

        resolved = []
        for item in spec:
            if isinstance(item, dict):
                resolved.append({"value": item["value"], "label": str(item.get("label", item["value"]))})
            elif isinstance(item, tuple) and len(item) == 2:
                resolved.append({"value": item[0], "label": str(item[1])})
            else:
                resolved.append({"value": item, "label": str(item)})
        return resolved

    def attributes(self) -> Dict[str, Any]:
        return {
            "searchEnabled": self.search_enabled,
            "viewType": self.view_type.value,
            "dynamicOptions": self.options_source is not None,
        }

    def _option_values(self) -> List[Any]:
        return [option["value"] for option in self.resolve_options()]

    def _raw_value(self, value: Any) -> Any:
        return value.value if isinstance(value, Enum) else value

    def check(self, value: Any, descriptor: FieldDescriptor) -> List[str]:
        values = self._option_values()
        if values and self._raw_value(value) not in values:
            return [f"{descriptor.display_label}: '{self._raw_value(value)}' is not a valid option"]
        return []

    def _convert_one(self, raw: Any) -> Any:
        if self.enum_type is not None:
            if isinstance(raw, self.enum_type):
                return raw
            try:
                return self.enum_type(raw)
            except ValueError:
                if isinstance(raw, str) and raw.strip().lstrip("-").isdigit():
                    try:
                        return self.enum_type(int(raw))
                    except ValueError:
                        pass
                by_name = self.enum_type.__members__.get(str(raw))
                if by_name is None:
                    raise ValueError(f"'{raw}' is not a valid {self.enum_type.__name__}")
                return by_name
        if isinstance(raw, str):
            for option in self._option_values():
                if not isinstance(option, str) and str(option) == raw:
                    return option
        return raw

    def to_model(self, raw: Any) -> Any:
        if _is_empty(raw):
            return None
        return self._convert_one(raw)

    def to_storage(self, value: Any) -> Any:
        return self._raw_value(value)


class MultiSelectWidget(SelectWidget):
    """Several choices; stored as a JSON list."""

    kind = WidgetKind.MULTI_SELECT
    accepts = (list, tuple, set, frozenset)
    natural_type = list

    def empty_value(self) -> list:
        return []

    def check(self, value: Any, descriptor: FieldDescriptor) -> List[str]:
        errors: List[str] = []
        for item in value:
            errors.extend(super().check(item, descriptor))
        return errors

    def to_model(self, raw: Any) -> list:
        if _is_empty(raw):
            return []
        if isinstance(raw, str):
            text = raw.strip()
            if text.startswith("["):
                try:
                    raw = json.loads(text)
                except json.JSONDecodeError as exc:
                    raise ValueError(f"'{raw}' is not a JSON list") from exc
            else:
                raw = [part.strip() for part in text.split(",") if part.strip()]
        if not isinstance(raw, (list, tuple, set, frozenset)):
            raise ValueError(f"Expected a list, got {type(raw).__name__}")
        return [self._convert_one(item) for item in raw]

    def to_storage(self, value: Any) -> list:
        if value is None:
            return []
        return [self._raw_value(item) for item in value]


# ── Color Picker ─────────────────────────────────────────────────────────

class ColorPickerWidget(Widget):
    kind = WidgetKind.COLOR_PICKER
    accepts = (str,)
    natural_type = str

    _HEX_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
    _HEX_ALPHA_RE = re.compile(r"^#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")

    def __init__(self, *, allow_alpha: bool = False):
        self.allow_alpha = allow_alpha

    def attributes(self) -> Dict[str, Any]:
        return {"allowAlpha": self.allow_alpha}

    def check(self, value: Any, descriptor: FieldDescriptor) -> List[str]:
        pattern = self._HEX_ALPHA_RE if self.allow_alpha else self._HEX_RE
        if not pattern.match(str(value)):
            return [f"{descriptor.display_label} must be a hex color"]
        return []

    def to_model(self, raw: Any) -> str | None:
        if _is_empty(raw):
            return None
        return str(raw).strip().lower()


# ── File Widgets ─────────────────────────────────────────────────────────

class FileWidget(Widget):
    """
    Uploaded file reference(s).

    Values are paths relative to the uploads folder; ``multiple`` files are
    kept as a list. ``max_size`` is in megabytes and enforced by the upload
    endpoint, not here.
    """

    kind = WidgetKind.FILE
    accepts = (str, list, tuple)

    def __init__(
        self,
        *,
        allowed_extensions: Sequence[str] | None = None,
        max_size: float | None = None,
        multiple: bool = False,
        drag_drop: bool = True,
    ):
        self.allowed_extensions = tuple(
            ext.lower() if ext.startswith(".") else "." + ext.lower()
            for ext in (allowed_extensions or ())
        )
        self.max_size = max_size
        self.multiple = multiple
        self.drag_drop = drag_drop

    @property
    def natural_type(self) -> type:
        return list if self.multiple else str

    def attributes(self) -> Dict[str, Any]:
        attrs: Dict[str, Any] = {
            "allowedExtensions": list(self.allowed_extensions),
            "multiple": self.multiple,
            "dragDrop": self.drag_drop,
        }
        if self.max_size is not None:
            attrs["maxSize"] = self.max_size
        return attrs

    def empty_value(self) -> Any:
        return [] if self.multiple else None

    def check(self, value: Any, descriptor: FieldDescriptor) -> List[str]:
        if not self.allowed_extensions:
            return []
        files = value if isinstance(value, (list, tuple)) else [value]
        errors = []
        for name in files:
            if not str(name).lower().endswith(self.allowed_extensions):
                errors.append(
                    f"{descriptor.display_label}: '{name}' must be one of "
                    f"{', '.join(self.allowed_extensions)}"
                )
        return errors

    def to_model(self, raw: Any) -> Any:
        if self.multiple:
            if _is_empty(raw):
                return []
            if isinstance(raw, str):
                return [raw]
            return [str(item) for item in raw]
        if _is_empty(raw):
            return None
        if isinstance(raw, (list, tuple)):
            if len(raw) != 1:
                raise ValueError("Expected a single file")
            raw = raw[0]
        return str(raw)

    def to_storage(self, value: Any) -> Any:
        if self.multiple:
            return list(value or [])
        return value


class PictureWidget(FileWidget):
    kind = WidgetKind.PICTURE

    def __init__(
        self,
        *,
        force_format: ForcePictureFormat = ForcePictureFormat.NO_FORCE,
        force_crop: bool = False,
        crop_ratio: str | None = None,
        resolution_hint: str | None = None,
        allowed_extensions: Sequence[str] = (".jpg", ".jpeg", ".png", ".gif", ".webp"),
        **kwargs,
    ):
        super().__init__(allowed_extensions=allowed_extensions, **kwargs)
        self.force_format = ForcePictureFormat(force_format)
        self.force_crop = force_crop
        self.crop_ratio = crop_ratio
        self.resolution_hint = resolution_hint

    def attributes(self) -> Dict[str, Any]:
        attrs = super().attributes()
        attrs["forceFormat"] = self.force_format.value
        attrs["forceCrop"] = self.force_crop
        if self.crop_ratio is not None:
            attrs["cropRatio"] = self.crop_ratio
        if self.resolution_hint is not None:
            attrs["resolutionHint"] = self.resolution_hint
        return attrs


# ── Complex Widget ───────────────────────────────────────────────────────

class ComplexWidget(Widget):
    """
    A nested admin model (or a list of them) edited inline.

    ``model_type`` must be an ``AdminModel`` subclass.
    """

    kind = WidgetKind.COMPLEX

    def __init__(self, model_type: type, *, many: bool = False):
        self.model_type = model_type
        self.many = many

    @property
    def accepts(self) -> Tuple[type, ...]:
        return (list, tuple) if self.many else (self.model_type,)

    @property
    def natural_type(self) -> Any:
        return List[self.model_type] if self.many else self.model_type

    def accepts_type(self, value_type: Any) -> bool:
        tp = unwrap_optional(value_type)
        if not self.many:
            return isinstance(tp, type) and issubclass(tp, self.model_type)
        origin = get_origin(tp)
        if origin not in (list, tuple):
            return False
        args = [a for a in get_args(tp) if a is not Ellipsis]
        return len(args) == 1 and isinstance(args[0], type) and issubclass(args[0], self.model_type)

    def attributes(self) -> Dict[str, Any]:
        return {"modelType": self.model_type.__name__, "many": self.many}

    def empty_value(self) -> Any:
        return [] if self.many else None

    def check(self, value: Any, descriptor: FieldDescriptor) -> List[str]:
        items = list(enumerate(value)) if self.many else [(None, value)]
        errors: List[str] = []
        for index, item in items:
            prefix = descriptor.name if index is None else f"{descriptor.name}[{index}]"
            for field_name, messages in item.validate().items():
                errors.extend(f"{prefix}.{field_name}: {m}" for m in messages)
        return errors

    def _convert_one(self, raw: Any) -> Any:
        if isinstance(raw, self.model_type):
            return raw
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Expected a JSON object for {self.model_type.__name__}") from exc
        if not isinstance(raw, dict):
            raise ValueError(f"Expected an object for {self.model_type.__name__}, got {type(raw).__name__}")
        return self.model_type.from_dict(raw)

    def to_model(self, raw: Any) -> Any:
        if self.many:
            if _is_empty(raw):
                return []
            if isinstance(raw, str):
                raw = json.loads(raw)
            return [self._convert_one(item) for item in raw]
        if _is_empty(raw):
            return None
        return self._convert_one(raw)

    def to_storage(self, value: Any) -> Any:
        if self.many:
            return [item.to_dict(storage=True) for item in value or []]
        if value is None:
            return None
        return value.to_dict(storage=True)
