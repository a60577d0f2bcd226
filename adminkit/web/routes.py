"""
Route table - named routes with ``{param}`` segments and reverse URLs.

Matching is two-tier:
1. Static routes: O(1) dict lookup per method
2. Parameterized routes: compiled regex, most specific first

Every page and API endpoint has a name; links are always built with
``url_for(name, **params)`` rather than hardcoded paths.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Pattern, Tuple
from urllib.parse import quote, urlencode

from ..faults import RouteNotFoundFault
from ..utils.urls import join_paths, normalize_path

_PARAM_RE = re.compile(r"^\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::(?P<conv>int|str))?\}$")

_CONVERTERS: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "str": (r"[^/]+", str),
    "int": (r"-?\d+", int),
}


@dataclass
class Route:
    name: str
    method: str
    pattern: str
    handler: Callable[..., Any]
    param_names: List[str] = field(default_factory=list)
    converters: Dict[str, Callable[[str], Any]] = field(default_factory=dict)
    regex: Optional[Pattern[str]] = None
    specificity: Tuple[int, ...] = ()

    @property
    def is_static(self) -> bool:
        return not self.param_names

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "method": self.method, "path": self.pattern}


def compile_route(name: str, method: str, pattern: str, handler: Callable[..., Any]) -> Route:
    pattern = normalize_path(pattern)
    route = Route(name=name, method=method.upper(), pattern=pattern, handler=handler)

    regex_parts = []
    specificity = []
    for segment in pattern.strip("/").split("/") if pattern != "/" else []:
        match = _PARAM_RE.match(segment)
        if match is None:
            if "{" in segment or "}" in segment:
                raise ValueError(f"Route '{name}': malformed segment '{segment}' in {pattern}")
            regex_parts.append(re.escape(segment))
            specificity.append(1)
            continue

        param, conv = match.group("name"), match.group("conv") or "str"
        if param in route.param_names:
            raise ValueError(f"Route '{name}': duplicate parameter '{param}' in {pattern}")
        expr, caster = _CONVERTERS[conv]
        regex_parts.append(f"(?P<{param}>{expr})")
        route.param_names.append(param)
        route.converters[param] = caster
        specificity.append(0)

    route.regex = re.compile("^/" + "/".join(regex_parts) + "$")
    route.specificity = tuple(specificity)
    return route


class RouteTable:
    """Named routes for one application."""

    def __init__(self, prefix: str = ""):
        self.prefix = prefix
        self._routes: Dict[str, Route] = {}
        self._static: Dict[str, Dict[str, Route]] = {}
        self._dynamic: Dict[str, List[Route]] = {}

    def add(self, name: str, method: str, pattern: str, handler: Callable[..., Any]) -> Route:
        if name in self._routes:
            raise ValueError(f"Route name '{name}' is already registered")

        route = compile_route(name, method, join_paths(self.prefix, pattern), handler)
        self._routes[name] = route

        if route.is_static:
            self._static.setdefault(route.method, {})[route.pattern] = route
        else:
            dynamic = self._dynamic.setdefault(route.method, [])
            dynamic.append(route)
            # stable: equal specificity keeps registration order
            dynamic.sort(key=lambda r: r.specificity, reverse=True)
        return route

    def match(self, method: str, path: str) -> Optional[Tuple[Route, Dict[str, Any]]]:
        """``(route, params)`` for the request, or ``None``."""
        method = method.upper()
        path = normalize_path(path)

        hit = self._static.get(method, {}).get(path)
        if hit is not None:
            return hit, {}

        for route in self._dynamic.get(method, ()):
            m = route.regex.match(path)
            if m is None:
                continue
            try:
                params = {
                    name: route.converters[name](m.group(name))
                    for name in route.param_names
                }
            except ValueError:
                continue
            return route, params

        return None

    def url_for(self, name: str, /, **params: Any) -> str:
        """
        Build the URL of route ``name``.

        Path parameters are substituted; remaining keyword arguments become
        the query string.
        """
        route = self._routes.get(name)
        if route is None:
            raise RouteNotFoundFault(name)

        missing = [p for p in route.param_names if params.get(p) is None]
        if missing:
            raise RouteNotFoundFault(name, f"missing parameter(s): {', '.join(missing)}")

        path = route.pattern
        for param in route.param_names:
            value = params.pop(param)
            path = re.sub(r"\{" + param + r"(?::\w+)?\}", quote(str(value), safe=""), path)

        query = {k: v for k, v in params.items() if v is not None}
        if query:
            path += "?" + urlencode(query)
        return path

    def __contains__(self, name: object) -> bool:
        return name in self._routes

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes.values())

    def __len__(self) -> int:
        return len(self._routes)
