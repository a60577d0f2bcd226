"""
Admin shell: Jinja2 environment, globals and page rendering.
"""

from datetime import datetime

import pytest

from adminkit.faults import RouteNotFoundFault
from adminkit.schema import build_structure
from adminkit.settings import EmailSettingsConfig
from adminkit.web import AdminShell, RouteTable
from forum_admin.models import AdminForumUserModel
from forum_admin.settings import MasterSettings, SystemSettings


def noop(request, **params):
    return None


@pytest.fixture
def routes():
    table = RouteTable()
    table.add("admin.home", "GET", "/admin", noop)
    table.add("admin.login", "GET", "/admin/login", noop)
    table.add("admin.list", "GET", "/admin/{entity}", noop)
    table.add("admin.create", "GET", "/admin/{entity}/new", noop)
    table.add("admin.edit", "GET", "/admin/{entity}/edit/{id:int}", noop)
    table.add("admin.settings", "GET", "/admin/settings/{name}", noop)
    table.add("api.entity.list", "GET", "/api/{entity}/list", noop)
    table.add("api.settings.save", "POST", "/api/settings/{name}", noop)
    return table


@pytest.fixture
def shell(routes):
    return AdminShell(routes, site_title="Forum Admin", clock=lambda: datetime(2031, 1, 1))


def edit_context(model_type, instance=None):
    return {
        "entities": [],
        "settings_pages": [],
        "heading": "Edit",
        "structure": build_structure(model_type, instance).to_dict(),
        "action": "/api/x/save",
        "cancel_url": None,
    }


class TestGlobals:

    def test_current_year_uses_clock(self, shell):
        assert shell.current_year() == 2031

    def test_default_clock(self):
        assert AdminShell().current_year() == datetime.now().year

    def test_url_for_without_routes(self):
        with pytest.raises(RouteNotFoundFault, match="no route table attached"):
            AdminShell().url_for("admin.home")

    def test_attach(self, routes):
        shell = AdminShell()
        shell.attach(routes)
        assert shell.url_for("admin.list", entity="forums") == "/admin/forums"

    def test_url_for_name_parameter(self, routes):
        shell = AdminShell()
        shell.attach(routes)
        assert shell.url_for("api.settings.save", name="SystemSettings") == "/api/settings/SystemSettings"

    def test_environment_is_sandboxed_and_async(self, shell):
        from jinja2.sandbox import SandboxedEnvironment

        assert isinstance(shell.env, SandboxedEnvironment)
        assert shell.env.is_async


class TestLayouts:

    @pytest.mark.asyncio
    async def test_login_footer(self, shell):
        html = await shell.render("pages/login.html")
        assert "&copy; 2031 Forum Admin" in html
        assert 'action="/admin/login"' in html

    @pytest.mark.asyncio
    async def test_site_title_is_escaped(self, routes):
        shell = AdminShell(routes, site_title="<b>Admin</b>")
        html = await shell.render("pages/login.html")
        assert "<b>Admin</b>" not in html
        assert "&lt;b&gt;Admin&lt;/b&gt;" in html

    @pytest.mark.asyncio
    async def test_navigation(self, shell):
        html = await shell.render(
            "pages/home.html",
            entities=[{"name": "forums", "title": "Forums", "count": 2}],
            settings_pages=[{"name": "SystemSettings", "title": "System Settings",
                             "updateDate": None, "updateBy": None}],
        )
        assert 'href="/admin/forums"' in html
        assert 'href="/admin/settings/SystemSettings"' in html
        assert "&copy; 2031 Forum Admin" in html


class TestPages:

    @pytest.mark.asyncio
    async def test_list_page(self, shell):
        html = await shell.render(
            "pages/list.html",
            entities=[], settings_pages=[],
            entity={"name": "forums", "title": "Forums"},
            columns=[{"name": "name", "displayLabel": "Forum Name",
                      "listSettings": {"allowSort": True, "fixedColumn": False}}],
            rows=[{"id": 4, "name": "<General>"}, {"name": "unsaved"}],
            id_field="id",
        )
        assert "Forum Name" in html
        assert "&lt;General&gt;" in html
        assert 'href="/admin/forums/edit/4"' in html
        assert html.count("/admin/forums/edit/") == 1
        assert 'href="/admin/forums/new"' in html

    @pytest.mark.asyncio
    async def test_empty_list_page(self, shell):
        html = await shell.render(
            "pages/list.html",
            entities=[], settings_pages=[],
            entity={"name": "forums", "title": "Forums"},
            columns=[], rows=[], id_field="id",
        )
        assert "No records" in html

    @pytest.mark.asyncio
    async def test_edit_page_renders_widgets(self, shell):
        html = await shell.render("pages/edit.html", **edit_context(SystemSettings, SystemSettings(is_site_locked=True)))
        assert 'type="checkbox" id="is_site_locked" name="is_site_locked" value="true" checked' in html
        assert "When locked, all public forum operations are blocked." in html

    @pytest.mark.asyncio
    async def test_edit_page_never_renders_passwords(self, shell):
        model = AdminForumUserModel(name="ann", password_hash="hunter2")
        html = await shell.render("pages/edit.html", **edit_context(AdminForumUserModel, model))
        assert 'type="password" id="password_hash"' in html
        assert "hunter2" not in html
        assert 'value="ann"' in html

    @pytest.mark.asyncio
    async def test_nested_model_inputs_are_prefixed(self, shell):
        settings = MasterSettings(email_settings=EmailSettingsConfig(smtp_port=465))
        html = await shell.render("pages/edit.html", **edit_context(MasterSettings, settings))
        assert 'name="email_settings.smtp_port"' in html
        assert 'value="465"' in html
        assert 'data-title="Email"' in html

    @pytest.mark.asyncio
    async def test_settings_page(self, shell):
        html = await shell.render(
            "pages/settings.html",
            entities=[], settings_pages=[],
            page={"name": "SystemSettings", "title": "System Settings",
                  "updateDate": "2024-05-01T12:00:00+00:00", "updateBy": 3},
            structure=build_structure(SystemSettings, SystemSettings()).to_dict(),
        )
        assert 'action="/api/settings/SystemSettings"' in html
        assert "Last updated 2024-05-01T12:00:00+00:00 by 3" in html
