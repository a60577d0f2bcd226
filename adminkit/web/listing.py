"""
List retrieval - text search, column filters, sorting and paging.

The list endpoint takes its parameters as a JSON body (POST) or from the
query string (GET)::

    {
        "filter": "news",
        "pageIndex": 0,
        "pageSize": 25,
        "sortColumns": [{"propertyName": "name", "direction": "desc"}],
        "advancedFilters": [
            {"propertyName": "active", "matchAll": true,
             "rules": [{"operator": "equals", "value": "true"}]}
        ]
    }

    GET /api/forums/list?filter=news&pageSize=25&sort=-name,id&showArchive=true

Rows are filtered on admin-model values, so filter values go through the
column's widget exactly like posted form values. Models with an archive
or deletion indicator only list rows whose flag matches ``showArchive`` /
``showDeleted`` (both false by default). Without sort columns, rows are
ordered by the sort-index field when the model has one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..faults import FieldValueFault
from ..fields import ColumnFilter, FieldDescriptor, FieldRole, MainFilter
from ..schema import AdminModel, Schema
from .http import BadRequest


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class FilterOperator(str, Enum):
    STARTS_WITH = "startsWith"
    CONTAINS = "contains"
    ENDS_WITH = "endsWith"
    EQUALS = "equals"
    NOT_CONTAINS = "notContains"
    NOT_EQUALS = "notEquals"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    IS_NULL = "null"
    IS_NOT_NULL = "notNull"
    IN = "in"
    DATE_IS = "dateIs"
    DATE_IS_NOT = "dateIsNot"
    DATE_IS_BEFORE = "dateIsBefore"
    DATE_IS_AFTER = "dateIsAfter"
    BETWEEN = "between"
    IS_EMPTY = "empty"
    IS_NOT_EMPTY = "notEmpty"


# Operator used by a rule that names none
DEFAULT_OPERATORS = {
    ColumnFilter.DEFAULT: FilterOperator.EQUALS,
    ColumnFilter.CONTAINS: FilterOperator.CONTAINS,
    ColumnFilter.STARTS_WITH: FilterOperator.STARTS_WITH,
    ColumnFilter.ENDS_WITH: FilterOperator.ENDS_WITH,
    ColumnFilter.RANGE: FilterOperator.BETWEEN,
    ColumnFilter.CHECKBOXES: FilterOperator.IN,
}

_TEXT = frozenset({
    FilterOperator.STARTS_WITH,
    FilterOperator.CONTAINS,
    FilterOperator.ENDS_WITH,
    FilterOperator.NOT_CONTAINS,
})


@dataclass(frozen=True)
class SortColumn:
    name: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class FilterRule:
    operator: Optional[FilterOperator] = None
    value: Any = None
    value2: Any = None


@dataclass(frozen=True)
class ColumnFilterParams:
    """Rules on one column, combined with AND (``match_all``) or OR."""

    name: str
    rules: Tuple[FilterRule, ...] = ()
    match_all: bool = True


# ============================================================================
# Parameter parsing
# ============================================================================

def _as_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "1", "yes", "false", "0", "no", ""):
        return value.lower() in ("true", "1", "yes")
    raise BadRequest(f"'{name}' must be a boolean")


def _as_count(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise BadRequest(f"'{name}' must be a non-negative integer")
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value)
    if not isinstance(value, int) or value < 0:
        raise BadRequest(f"'{name}' must be a non-negative integer")
    return value


def _parse_sort(item: Any) -> SortColumn:
    if isinstance(item, str):
        name = item.strip()
        if name.startswith("-"):
            return SortColumn(name[1:], SortDirection.DESC)
        return SortColumn(name.lstrip("+"))
    if isinstance(item, dict) and isinstance(item.get("propertyName"), str):
        try:
            direction = SortDirection(str(item.get("direction", "asc")).lower())
        except ValueError:
            raise BadRequest(f"Unknown sort direction '{item.get('direction')}'") from None
        return SortColumn(item["propertyName"], direction)
    raise BadRequest("Each sort column needs a 'propertyName'")


def _parse_rule(item: Any) -> FilterRule:
    if not isinstance(item, dict):
        raise BadRequest("Each filter rule must be an object")
    operator = item.get("operator")
    if operator is not None:
        try:
            operator = FilterOperator(operator)
        except ValueError:
            raise BadRequest(f"Unknown filter operator '{operator}'") from None
    return FilterRule(operator, item.get("value"), item.get("value2"))


def _parse_filter(item: Any) -> ColumnFilterParams:
    if not isinstance(item, dict) or not isinstance(item.get("propertyName"), str):
        raise BadRequest("Each advanced filter needs a 'propertyName'")
    rules = item.get("rules") or []
    if not isinstance(rules, list):
        raise BadRequest("Filter 'rules' must be a list")
    return ColumnFilterParams(
        name=item["propertyName"],
        rules=tuple(_parse_rule(rule) for rule in rules),
        match_all=_as_bool(item.get("matchAll", True), "matchAll"),
    )


@dataclass(frozen=True)
class ListParams:
    """
    What to list: search text, column filters, sort order and page.

    ``page_size`` 0 returns every matching row.
    """

    filter: str = ""
    page_index: int = 0
    page_size: int = 0
    sort_columns: Tuple[SortColumn, ...] = ()
    filters: Tuple[ColumnFilterParams, ...] = ()
    show_archive: bool = False
    show_deleted: bool = False

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> "ListParams":
        sort = query.get("sort", "")
        return cls(
            filter=query.get("filter", ""),
            page_index=_as_count(query.get("pageIndex", 0), "pageIndex"),
            page_size=_as_count(query.get("pageSize", 0), "pageSize"),
            sort_columns=tuple(_parse_sort(part) for part in sort.split(",") if part.strip()),
            show_archive=_as_bool(query.get("showArchive", False), "showArchive"),
            show_deleted=_as_bool(query.get("showDeleted", False), "showDeleted"),
        )

    @classmethod
    def from_payload(cls, payload: Any, query: Optional[Mapping[str, str]] = None) -> "ListParams":
        """Parameters from a JSON body; archive/deleted flags may also come from ``query``."""
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise BadRequest(f"Expected a JSON object, got {type(payload).__name__}")
        query = query or {}

        search = payload.get("filter") or ""
        if not isinstance(search, str):
            raise BadRequest("'filter' must be a string")
        sort_columns = payload.get("sortColumns") or []
        filters = payload.get("advancedFilters") or []
        if not isinstance(sort_columns, list) or not isinstance(filters, list):
            raise BadRequest("'sortColumns' and 'advancedFilters' must be lists")

        return cls(
            filter=search,
            page_index=_as_count(payload.get("pageIndex", 0), "pageIndex"),
            page_size=_as_count(payload.get("pageSize", 0), "pageSize"),
            sort_columns=tuple(_parse_sort(item) for item in sort_columns),
            filters=tuple(_parse_filter(item) for item in filters),
            show_archive=_as_bool(query.get("showArchive", payload.get("showArchive", False)), "showArchive"),
            show_deleted=_as_bool(query.get("showDeleted", payload.get("showDeleted", False)), "showDeleted"),
        )


# ============================================================================
# Evaluation
# ============================================================================

def _align(a: Any, b: Any) -> Tuple[Any, Any]:
    """Make aware and naive datetimes comparable (naive is taken as UTC)."""
    if isinstance(a, datetime) and isinstance(b, datetime):
        if a.tzinfo is None and b.tzinfo is not None:
            a = a.replace(tzinfo=timezone.utc)
        elif b.tzinfo is None and a.tzinfo is not None:
            b = b.replace(tzinfo=timezone.utc)
    return a, b


def _equals(actual: Any, expected: Any) -> bool:
    actual, expected = _align(actual, expected)
    return actual == expected


def _day(value: Any) -> Any:
    return value.date() if isinstance(value, datetime) else value


def _ordered(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def check(actual: Any, expected: Any) -> bool:
        if actual is None or expected is None:
            return False
        return compare(*_align(actual, expected))
    return check


def _text(compare: Callable[[str, str], bool]) -> Callable[[Any, Any], bool]:
    def check(actual: Any, expected: Any) -> bool:
        if not isinstance(actual, str):
            return False
        return compare(actual.casefold(), str(expected).casefold())
    return check


_CHECKS: Dict[FilterOperator, Callable[[Any, Any], bool]] = {
    FilterOperator.EQUALS: _equals,
    FilterOperator.NOT_EQUALS: lambda a, e: not _equals(a, e),
    FilterOperator.LT: _ordered(lambda a, e: a < e),
    FilterOperator.LTE: _ordered(lambda a, e: a <= e),
    FilterOperator.GT: _ordered(lambda a, e: a > e),
    FilterOperator.GTE: _ordered(lambda a, e: a >= e),
    FilterOperator.STARTS_WITH: _text(lambda a, e: a.startswith(e)),
    FilterOperator.CONTAINS: _text(lambda a, e: e in a),
    FilterOperator.ENDS_WITH: _text(lambda a, e: a.endswith(e)),
    FilterOperator.NOT_CONTAINS: lambda a, e: not _text(lambda x, y: y in x)(a, e),
    FilterOperator.DATE_IS: _ordered(lambda a, e: _day(a) == _day(e)),
    FilterOperator.DATE_IS_NOT: lambda a, e: not _ordered(lambda x, y: _day(x) == _day(y))(a, e),
    FilterOperator.DATE_IS_BEFORE: _ordered(lambda a, e: a < e),
    FilterOperator.DATE_IS_AFTER: _ordered(lambda a, e: a > e),
}


class RowMatcher:
    """One column filter compiled against its descriptor."""

    def __init__(self, descriptor: FieldDescriptor, params: ColumnFilterParams):
        self.descriptor = descriptor
        self.match_all = params.match_all
        default = DEFAULT_OPERATORS[descriptor.list_settings.column_filter]
        self.rules = [self._compile(rule, default) for rule in params.rules]

    def _convert(self, raw: Any) -> Any:
        try:
            return self.descriptor.widget.to_model(raw)
        except (FieldValueFault, ValueError, TypeError) as exc:
            raise BadRequest(
                f"Invalid filter value {raw!r} for '{self.descriptor.name}': {exc}"
            ) from exc

    def _compile(self, rule: FilterRule, default: FilterOperator) -> Callable[[Any], bool]:
        operator = rule.operator or default

        if operator is FilterOperator.IS_NULL:
            return lambda actual: actual is None
        if operator is FilterOperator.IS_NOT_NULL:
            return lambda actual: actual is not None
        if operator is FilterOperator.IS_EMPTY:
            return lambda actual: actual is None or actual == "" or actual == []
        if operator is FilterOperator.IS_NOT_EMPTY:
            return lambda actual: not (actual is None or actual == "" or actual == [])

        if rule.value is None or rule.value == "":
            raise BadRequest(f"Filter '{operator.value}' on '{self.descriptor.name}' needs a value")

        if operator is FilterOperator.IN:
            raw_values = rule.value.split(",") if isinstance(rule.value, str) else rule.value
            if not isinstance(raw_values, list):
                raise BadRequest(f"Filter 'in' on '{self.descriptor.name}' needs a list of values")
            allowed = [self._convert(v.strip() if isinstance(v, str) else v) for v in raw_values]
            return lambda actual: any(_equals(actual, v) for v in allowed)

        if operator is FilterOperator.BETWEEN:
            if rule.value2 is None or rule.value2 == "":
                raise BadRequest(f"Filter 'between' on '{self.descriptor.name}' needs value2")
            low, high = self._convert(rule.value), self._convert(rule.value2)
            gte, lte = _CHECKS[FilterOperator.GTE], _CHECKS[FilterOperator.LTE]
            return lambda actual: gte(actual, low) and lte(actual, high)

        # Text operators compare against the raw text
        expected = str(rule.value) if operator in _TEXT else self._convert(rule.value)
        check = _CHECKS[operator]
        return lambda actual: check(actual, expected)

    def __call__(self, values: Dict[str, Any]) -> bool:
        if not self.rules:
            return True
        actual = values.get(self.descriptor.name)
        results = (rule(actual) for rule in self.rules)
        return all(results) if self.match_all else any(results)


def _list_column(schema: Schema, name: str, purpose: str) -> FieldDescriptor:
    descriptor = schema.get(name)
    if descriptor is None:
        raise BadRequest(f"Unknown column '{name}' for {purpose}")
    if descriptor.list_settings is None:
        raise BadRequest(f"'{name}' is not a list column")
    return descriptor


def search_fields(schema: Schema) -> List[FieldDescriptor]:
    """
    Fields searched by the free-text filter.

    List columns whose main filter is text search when there are any,
    otherwise every searchable field.
    """
    main = [
        d for d in schema
        if d.list_settings is not None and d.list_settings.main_filter is MainFilter.TEXT_SEARCH
    ]
    return main or [d for d in schema if d.searchable]


def _sort_key(name: str) -> Callable[[Dict[str, Any]], Tuple[bool, Any]]:
    def key(values: Dict[str, Any]) -> Tuple[bool, Any]:
        value = values.get(name)
        if isinstance(value, str):
            value = value.casefold()
        elif isinstance(value, datetime) and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        elif isinstance(value, Enum):
            value = value.value
        return value is not None, value
    return key


@dataclass
class ListPage:
    """
    One page of a list.

    Attributes:
        rows:             Stored (JSON-safe) values of the rows on this page
        records_total:    Rows in the current archive/deleted view
        records_filtered: Of those, rows matching the search and column filters
    """

    rows: List[Dict[str, Any]]
    records_total: int
    records_filtered: int
    page_index: int = 0
    page_size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": self.rows,
            "recordsTotal": self.records_total,
            "recordsFiltered": self.records_filtered,
            "pageIndex": self.page_index,
            "pageSize": self.page_size,
        }


def list_models(models: Sequence[AdminModel], schema: Schema, params: ListParams) -> ListPage:
    """Filter, sort and page ``models`` (all of one admin-model type)."""
    sort_columns = [
        (_list_column(schema, column.name, "sorting"), column.direction)
        for column in params.sort_columns
    ]
    for descriptor, _ in sort_columns:
        if not descriptor.list_settings.allow_sort:
            raise BadRequest(f"Column '{descriptor.name}' cannot be sorted")
    matchers = [
        RowMatcher(_list_column(schema, column.name, "filtering"), column)
        for column in params.filters
    ]

    rows = [model.values() for model in models]

    archive = schema.by_role(FieldRole.ARCHIVE_INDICATOR)
    if archive is not None:
        rows = [r for r in rows if bool(r.get(archive.name)) == params.show_archive]
    deletion = schema.by_role(FieldRole.DELETION_INDICATOR)
    if deletion is not None:
        rows = [r for r in rows if bool(r.get(deletion.name)) == params.show_deleted]
    total = len(rows)

    term = params.filter.strip().casefold()
    if term:
        names = [d.name for d in search_fields(schema)]
        rows = [
            r for r in rows
            if any(isinstance(r.get(n), str) and term in r[n].casefold() for n in names)
        ]

    for matcher in matchers:
        rows = [r for r in rows if matcher(r)]

    if sort_columns:
        # Stable sorts applied last-to-first give a multi-column order
        for descriptor, direction in reversed(sort_columns):
            rows.sort(key=_sort_key(descriptor.name), reverse=direction is SortDirection.DESC)
    else:
        sort_index = schema.by_role(FieldRole.SORT_INDEX)
        if sort_index is not None:
            rows.sort(key=_sort_key(sort_index.name))

    filtered = len(rows)
    if params.page_size:
        start = params.page_index * params.page_size
        rows = rows[start:start + params.page_size]

    return ListPage(
        rows=[
            {d.name: d.widget.to_storage(r[d.name]) for d in schema}
            for r in rows
        ],
        records_total=total,
        records_filtered=filtered,
        page_index=params.page_index,
        page_size=params.page_size,
    )
