"""
Admin Shell - Jinja2 rendering of the admin client pages.

Provides:
- Sandboxed, autoescaped environment over the package templates
- ``url_for`` and ``current_year()`` globals for layouts and pages
- Widget-kind to macro lookup for edit forms
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from jinja2 import BaseLoader, PackageLoader, select_autoescape
from jinja2.sandbox import SandboxedEnvironment

from ..faults import RouteNotFoundFault
from ..fields import WidgetRegistry, widgets
from .routes import RouteTable

logger = logging.getLogger("adminkit.web")


class AdminShell:
    """
    Renders the admin client pages.

    Args:
        routes: Route table used by ``url_for`` (can be attached later)
        site_title: Title shown in layouts
        loader: Template loader (package templates by default)
        registry: Widget registry mapping kinds to field macros
        clock: Time source for ``current_year()``

    Example:
        shell = AdminShell(app.routes, site_title="Forum Admin")
        html = await shell.render("pages/home.html", entities=[])
    """

    def __init__(
        self,
        routes: Optional[RouteTable] = None,
        *,
        site_title: str = "Admin",
        loader: Optional[BaseLoader] = None,
        registry: Optional[WidgetRegistry] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.routes = routes
        self.site_title = site_title
        self.registry = registry or widgets
        self._clock = clock or datetime.now

        self.env = SandboxedEnvironment(
            loader=loader or PackageLoader("adminkit.web", "templates"),
            autoescape=select_autoescape(
                enabled_extensions=["html", "htm", "xml"],
                default_for_string=True,
            ),
            enable_async=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.globals.update(
            url_for=self.url_for,
            current_year=self.current_year,
            macro_for=self.registry.macro_for,
            site_title=site_title,
        )

    def attach(self, routes: RouteTable) -> None:
        self.routes = routes

    def url_for(self, name: str, /, **params: Any) -> str:
        if self.routes is None:
            raise RouteNotFoundFault(name, "no route table attached")
        return self.routes.url_for(name, **params)

    def current_year(self) -> int:
        return self._clock().year

    async def render(self, template_name: str, **context: Any) -> str:
        template = self.env.get_template(template_name)
        logger.debug("Rendering %s", template_name)
        return await template.render_async(**context)

