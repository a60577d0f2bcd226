"""
AdminApp - ASGI application serving the admin API and client pages.

Every endpoint is a named route; pages link to each other through
``url_for``. API responses use one envelope::

    {"success": true, "data": {...}, "error": null}

Public faults (field validation, unknown settings, broken form
structure) are answered with ``success: false`` and their message; field
faults also carry ``errors``. Anything else is logged with its traceback
and answered with a 500 envelope.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

from ..config import ApiConfig
from ..faults import Fault, FieldValueFault
from ..fields import FieldDescriptor, FieldRole
from ..mapping import AdminModelMapper
from ..schema import schema_cache, build_structure
from ..settings import SettingsProvider
from .http import BadRequest, Request, Response
from .listing import ListPage, ListParams, list_models
from .repository import EntityAdmin, get_member, set_member
from .routes import RouteTable
from .shell import AdminShell

# Header carrying the id of the signed-in admin user (set by the fronting auth layer)
USER_HEADER = "x-admin-user"


def envelope(data: Any = None, error: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    return {"success": error is None, "data": data, "error": error, **extra}


class AdminApp:
    """
    Admin panel as an ASGI application.

    Args:
        config: API configuration (CORS origins, base URLs)
        shell: Page renderer (an ``AdminShell`` on the package templates by default)
        settings: Settings provider; settings routes answer empty without one
        mapper: Admin-model mapper shared by entity endpoints

    Example:
        app = AdminApp(ApiConfig(), settings=provider)
        app.register(EntityAdmin("forum", AdminForumModel, InMemoryRepository(Forum)))
        uvicorn.run(app)
    """

    def __init__(
        self,
        config: ApiConfig,
        shell: Optional[AdminShell] = None,
        settings: Optional[SettingsProvider] = None,
        mapper: Optional[AdminModelMapper] = None,
    ):
        self.config = config
        self.settings = settings
        self.mapper = mapper or (settings.mapper if settings is not None else AdminModelMapper())
        self.routes = RouteTable()
        self.shell = shell or AdminShell()
        self.shell.attach(self.routes)
        self.entities: Dict[str, EntityAdmin] = {}
        self.logger = logging.getLogger("adminkit.web")
        self._cors_origins = config.cors_origins()
        self._register_routes()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, entity: EntityAdmin) -> EntityAdmin:
        if entity.name in self.entities:
            raise ValueError(f"Entity '{entity.name}' is already registered")
        entity.model_type.schema()
        self.entities[entity.name] = entity
        self.logger.debug("Registered entity %s (%s)", entity.name, entity.model_type.__name__)
        return entity

    def warm(self) -> None:
        """Build every schema up front; called on lifespan startup."""
        model_types = [entity.model_type for entity in self.entities.values()]
        if self.settings is not None:
            model_types.extend(self.settings.types())
        schema_cache.warm(*model_types)

    def _register_routes(self) -> None:
        add = self.routes.add
        add("api.settings.index", "GET", "/api/settings", self.settings_index)
        add("api.settings.structure", "GET", "/api/settings/{name}", self.settings_structure)
        add("api.settings.save", "POST", "/api/settings/{name}", self.settings_save)
        add("api.entity.list", "GET", "/api/{entity}/list", self.entity_list)
        add("api.entity.query", "POST", "/api/{entity}/list", self.entity_query)
        add("api.entity.structure", "GET", "/api/{entity}/structure", self.entity_structure)
        add("api.entity.edit", "GET", "/api/{entity}/structure/{id:int}", self.entity_edit)
        add("api.entity.save", "POST", "/api/{entity}/save", self.entity_save)
        add("api.entity.delete", "POST", "/api/{entity}/delete/{id:int}", self.entity_delete)
        add("api.entity.archive", "POST", "/api/{entity}/archive/{id:int}", self.entity_archive)
        add("api.entity.reorder", "POST", "/api/{entity}/reorder", self.entity_reorder)
        add("admin.home", "GET", "/admin", self.home_page)
        add("admin.login", "GET", "/admin/login", self.login_page)
        add("admin.list", "GET", "/admin/{entity}", self.list_page)
        add("admin.edit", "GET", "/admin/{entity}/edit/{id:int}", self.edit_page)
        add("admin.create", "GET", "/admin/{entity}/new", self.create_page)
        add("admin.settings", "GET", "/admin/settings/{name}", self.settings_page)

    # ------------------------------------------------------------------
    # ASGI entry point
    # ------------------------------------------------------------------

    async def __call__(self, scope: dict, receive: Callable, send: Callable):
        scope_type = scope["type"]
        if scope_type == "http":
            await self.handle_http(scope, receive, send)
        elif scope_type == "lifespan":
            await self.handle_lifespan(scope, receive, send)

    async def handle_http(self, scope: dict, receive: Callable, send: Callable):
        request = Request(scope, receive)
        started = time.perf_counter()

        if request.method == "OPTIONS":
            response = Response(status=204)
        else:
            response = await self._dispatch(request)

        self._apply_cors(request, response)
        await response.send_asgi(send)

        self.logger.info(
            "%s %s %d %.1fms",
            request.method, request.path, response.status,
            (time.perf_counter() - started) * 1000,
        )

    async def _dispatch(self, request: Request) -> Response:
        match = self.routes.match(request.method, request.path)
        if match is None:
            return self._not_found(f"No route matches {request.method} {request.path}")

        route, params = match
        try:
            return await route.handler(request, **params)
        except FieldValueFault as fault:
            fault.log(self.logger)
            return Response.json(envelope(error=fault.message, errors=fault.field_errors))
        except Fault as fault:
            fault.log(self.logger)
            if fault.public:
                return Response.json(envelope(error=fault.message))
            return Response.json(envelope(error="Internal server error"), status=500)
        except BadRequest as exc:
            return Response.json(envelope(error=str(exc)), status=400)
        except Exception as e:
            self.logger.error(f"Error handling {request.method} {request.path}: {e}", exc_info=True)
            return Response.json(envelope(error="Internal server error"), status=500)

    def _apply_cors(self, request: Request, response: Response) -> None:
        origin = request.header("origin")
        if not origin or not self._cors_origins:
            return
        if "*" in self._cors_origins:
            response.set_header("access-control-allow-origin", "*")
        elif origin in self._cors_origins:
            response.set_header("access-control-allow-origin", origin)
            response.set_header("vary", "Origin")
        else:
            return
        response.set_header("access-control-allow-methods", "GET, POST, OPTIONS")
        response.set_header("access-control-allow-headers", f"content-type, {USER_HEADER}")

    async def handle_lifespan(self, scope: dict, receive: Callable, send: Callable):
        """Handle ASGI lifespan events."""
        while True:
            message = await receive()

            if message["type"] == "lifespan.startup":
                try:
                    self.warm()
                    self.logger.debug("Admin startup complete (%d routes)", len(self.routes))
                    await send({"type": "lifespan.startup.complete"})
                except Exception as e:
                    self.logger.error(f"Startup error: {e}", exc_info=True)
                    await send({"type": "lifespan.startup.failed", "message": str(e)})
                    raise

            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                break

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _not_found(message: str) -> Response:
        return Response.json(envelope(error=message), status=404)

    @staticmethod
    def _current_user(request: Request) -> Any:
        value = request.header(USER_HEADER)
        if value is None or value == "":
            return None
        if not value.isdigit():
            raise BadRequest(f"{USER_HEADER} must be a numeric user id")
        return int(value)

    def _navigation(self) -> Dict[str, Any]:
        return {
            "entities": [
                {"name": e.name, "title": e.title, "count": len(e.repository)}
                for e in self.entities.values()
            ],
            "settings_pages": self.settings.summary() if self.settings is not None else [],
        }

    async def _page(self, template: str, status: int = 200, **context: Any) -> Response:
        html = await self.shell.render(template, **self._navigation(), **context)
        return Response.html(html, status=status)

    def _list(self, entity: EntityAdmin, params: ListParams) -> ListPage:
        models = [
            self.mapper.to_admin_model(item, entity.model_type)
            for item in entity.repository.list()
        ]
        return list_models(models, entity.model_type.schema(), params)

    @staticmethod
    def _store(entity: EntityAdmin, item: Any, descriptor: FieldDescriptor, value: Any) -> None:
        set_member(item, descriptor.name, descriptor.widget.to_storage(value))
        entity.repository.save(item)

    # ------------------------------------------------------------------
    # Settings API
    # ------------------------------------------------------------------

    async def settings_index(self, request: Request) -> Response:
        summary = self.settings.summary() if self.settings is not None else []
        return Response.json(envelope(summary))

    async def settings_structure(self, request: Request, name: str) -> Response:
        if self.settings is None:
            return self._not_found("No settings are registered")
        return Response.json(envelope(self.settings.structure(name).to_dict()))

    async def settings_save(self, request: Request, name: str) -> Response:
        if self.settings is None:
            return self._not_found("No settings are registered")
        saved = self.settings.save_payload(
            name, await request.json(), current_user_id=self._current_user(request),
        )
        return Response.json(envelope(saved.to_dict(storage=True)))

    # ------------------------------------------------------------------
    # Entity API
    # ------------------------------------------------------------------

    async def entity_list(self, request: Request, entity: str) -> Response:
        return self._list_response(entity, ListParams.from_query(request.query_params))

    async def entity_query(self, request: Request, entity: str) -> Response:
        params = ListParams.from_payload(await request.json(), request.query_params)
        return self._list_response(entity, params)

    def _list_response(self, entity: str, params: ListParams) -> Response:
        admin = self.entities.get(entity)
        if admin is None:
            return self._not_found(f"Unknown entity '{entity}'")
        schema = admin.model_type.schema()
        page = self._list(admin, params)
        return Response.json(envelope({
            "columns": [column.to_dict() for column in schema.list_columns()],
            **page.to_dict(),
        }))

    async def entity_structure(self, request: Request, entity: str) -> Response:
        admin = self.entities.get(entity)
        if admin is None:
            return self._not_found(f"Unknown entity '{entity}'")
        model = admin.model_type()
        return Response.json(envelope(build_structure(admin.model_type, model).to_dict()))

    async def entity_edit(self, request: Request, entity: str, id: int) -> Response:
        admin = self.entities.get(entity)
        if admin is None:
            return self._not_found(f"Unknown entity '{entity}'")
        item = admin.repository.get(id)
        if item is None:
            return self._not_found(f"{admin.title} {id} not found")
        model = self.mapper.to_admin_model(item, admin.model_type)
        return Response.json(envelope(build_structure(admin.model_type, model).to_dict()))

    async def entity_save(self, request: Request, entity: str) -> Response:
        admin = self.entities.get(entity)
        if admin is None:
            return self._not_found(f"Unknown entity '{entity}'")

        payload = await request.json()
        model = self.mapper.from_payload(payload, admin.model_type)

        repository = admin.repository
        entity_id = model.values().get(repository.id_field)
        target = repository.get(entity_id) if entity_id is not None else None
        if entity_id is not None and target is None:
            return self._not_found(f"{admin.title} {entity_id} not found")

        is_new = target is None
        if is_new:
            target = repository.new()
        self.mapper.to_entity(
            model, target, current_user_id=self._current_user(request), is_new=is_new,
        )
        repository.save(target)
        self.logger.info("%s %s %s", "Created" if is_new else "Updated", entity, repository.id_of(target))

        saved = self.mapper.to_admin_model(target, admin.model_type)
        return Response.json(envelope(saved.to_dict(storage=True)))

    async def entity_delete(self, request: Request, entity: str, id: int) -> Response:
        admin = self.entities.get(entity)
        if admin is None:
            return self._not_found(f"Unknown entity '{entity}'")
        item = admin.repository.get(id)
        deletion = admin.model_type.schema().by_role(FieldRole.DELETION_INDICATOR)
        # A soft-deleted row is gone as far as the API is concerned
        if item is None or (deletion is not None and get_member(item, deletion.name)):
            return self._not_found(f"{admin.title} {id} not found")

        if deletion is None:
            admin.repository.delete(id)
            self.logger.info("Deleted %s %s", entity, id)
        else:
            self._store(admin, item, deletion, True)
            self.logger.info("Soft-deleted %s %s", entity, id)
        return Response.json(envelope({"id": id, "softDeleted": deletion is not None}))

    async def entity_archive(self, request: Request, entity: str, id: int) -> Response:
        admin = self.entities.get(entity)
        if admin is None:
            return self._not_found(f"Unknown entity '{entity}'")
        archive = admin.model_type.schema().by_role(FieldRole.ARCHIVE_INDICATOR)
        if archive is None:
            return Response.json(envelope(error=f"{admin.title} does not support archiving"))
        item = admin.repository.get(id)
        if item is None:
            return self._not_found(f"{admin.title} {id} not found")
        if get_member(item, archive.name):
            return Response.json(envelope(error=f"{admin.title} {id} is already archived"))

        self._store(admin, item, archive, True)
        self.logger.info("Archived %s %s", entity, id)
        return Response.json(envelope({"id": id, "archived": True}))

    async def entity_reorder(self, request: Request, entity: str) -> Response:
        """Give the posted ids consecutive sort indexes, in the posted order."""
        admin = self.entities.get(entity)
        if admin is None:
            return self._not_found(f"Unknown entity '{entity}'")
        sort_index = admin.model_type.schema().by_role(FieldRole.SORT_INDEX)
        if sort_index is None:
            return Response.json(envelope(error=f"{admin.title} cannot be reordered"))

        ids = await request.json()
        if (not isinstance(ids, list)
                or not all(isinstance(i, int) and not isinstance(i, bool) for i in ids)
                or len(set(ids)) != len(ids)):
            raise BadRequest("Expected a JSON list of distinct entity ids")

        items = []
        for entity_id in ids:
            item = admin.repository.get(entity_id)
            if item is None:
                return self._not_found(f"{admin.title} {entity_id} not found")
            items.append(item)

        # The reordered block keeps its lowest existing position
        start = min((get_member(item, sort_index.name) or 0 for item in items), default=0)
        order = []
        for offset, item in enumerate(items):
            self._store(admin, item, sort_index, start + offset)
            order.append({"id": admin.repository.id_of(item), "sortIndex": start + offset})
        self.logger.info("Reordered %d %s", len(order), entity)
        return Response.json(envelope(order))

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    async def home_page(self, request: Request) -> Response:
        return await self._page("pages/home.html")

    async def login_page(self, request: Request) -> Response:
        return Response.html(await self.shell.render("pages/login.html"))

    async def list_page(self, request: Request, entity: str) -> Response:
        admin = self.entities.get(entity)
        if admin is None:
            return self._not_found(f"Unknown entity '{entity}'")
        schema = admin.model_type.schema()
        params = ListParams.from_query(request.query_params)
        page = self._list(admin, params)
        return await self._page(
            "pages/list.html",
            entity=admin,
            columns=[column.to_dict() for column in schema.list_columns()],
            rows=page.rows,
            id_field=admin.repository.id_field,
            params=params,
            has_archive=schema.by_role(FieldRole.ARCHIVE_INDICATOR) is not None,
            has_deleted=schema.by_role(FieldRole.DELETION_INDICATOR) is not None,
        )

    async def edit_page(self, request: Request, entity: str, id: int) -> Response:
        admin = self.entities.get(entity)
        if admin is None:
            return self._not_found(f"Unknown entity '{entity}'")
        item = admin.repository.get(id)
        if item is None:
            return self._not_found(f"{admin.title} {id} not found")
        model = self.mapper.to_admin_model(item, admin.model_type)
        return await self._edit_page(admin, model, heading=f"Edit {admin.title}")

    async def create_page(self, request: Request, entity: str) -> Response:
        admin = self.entities.get(entity)
        if admin is None:
            return self._not_found(f"Unknown entity '{entity}'")
        return await self._edit_page(admin, admin.model_type(), heading=f"New {admin.title}")

    async def _edit_page(self, admin: EntityAdmin, model: Any, heading: str) -> Response:
        return await self._page(
            "pages/edit.html",
            entity=admin,
            heading=heading,
            structure=build_structure(admin.model_type, model).to_dict(),
            action=self.routes.url_for("api.entity.save", entity=admin.name),
            cancel_url=self.routes.url_for("admin.list", entity=admin.name),
        )

    async def settings_page(self, request: Request, name: str) -> Response:
        if self.settings is None:
            return self._not_found("No settings are registered")
        structure = self.settings.structure(name).to_dict()
        page = next(p for p in self.settings.summary() if p["name"] == name)
        return await self._page("pages/settings.html", page=page, structure=structure)
