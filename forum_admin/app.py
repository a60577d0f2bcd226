"""
Forum admin application.

Run with::

    adminkit serve forum_admin.app:create_app --reload
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Optional

from adminkit.settings import InMemorySettingsStore, SettingsProvider
from adminkit.web import AdminApp, AdminShell, EntityAdmin, InMemoryRepository, Request, Response, envelope

from .config import ApiConfig, load_config
from .mapping import ForumDto, ForumMapperConfig
from .models import (
    AdminForumModel,
    AdminForumUserModel,
    AdminSiteSettingsModel,
    AdminUserModel,
    Forum,
    ForumUser,
    SiteSettings,
)
from .settings import MasterSettings, SystemSettings

logger = logging.getLogger("forum_admin")


def create_app(config: Optional[ApiConfig] = None) -> AdminApp:
    """Wire the forum entities and settings into an ``AdminApp``."""
    config = config or load_config()

    settings = SettingsProvider(InMemorySettingsStore())
    settings.register(SystemSettings, MasterSettings)

    app = AdminApp(config, shell=AdminShell(site_title="Forum Admin"), settings=settings)
    app.register(EntityAdmin("forums", AdminForumModel, InMemoryRepository(Forum)))
    app.register(EntityAdmin("forum_users", AdminForumUserModel, InMemoryRepository(ForumUser),
                             title="Forum Users"))
    app.register(EntityAdmin("site_settings", AdminSiteSettingsModel, InMemoryRepository(SiteSettings),
                             title="Site Settings"))
    app.register(EntityAdmin("admin_users", AdminUserModel, InMemoryRepository(), title="Admin Users"))

    mapper = ForumMapperConfig().create_mapper()
    forums = app.entities["forums"].repository

    async def forum_lookup(request: Request) -> Response:
        if config.service_settings.disable_services:
            return Response.json(envelope(error="Services are disabled"), status=503)
        active = [forum for forum in forums.list() if forum.active and not forum.is_deleted]
        return Response.json(envelope([asdict(dto) for dto in mapper.map_many(active, ForumDto)]))

    app.routes.add("api.forums.lookup", "GET", "/api/forums/lookup", forum_lookup)

    logger.info("Forum admin ready (%d entities, %d settings pages)",
                len(app.entities), len(settings.types()))
    return app
