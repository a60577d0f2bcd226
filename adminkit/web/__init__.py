"""
adminkit web - the admin client shell and its ASGI application.

Provides:
- RouteTable: named routes and reverse URLs
- AdminShell: Jinja2 rendering of layouts, pages and field macros
- AdminApp: ASGI application (JSON API + pages)
- EntityAdmin / InMemoryRepository: entity registration and storage
"""

from .app import AdminApp, envelope
from .http import BadRequest, Request, Response
from .repository import EntityAdmin, InMemoryRepository
from .routes import Route, RouteTable, compile_route
from .shell import AdminShell

__all__ = [
    "AdminApp",
    "AdminShell",
    "BadRequest",
    "EntityAdmin",
    "InMemoryRepository",
    "Request",
    "Response",
    "Route",
    "RouteTable",
    "compile_route",
    "envelope",
]
