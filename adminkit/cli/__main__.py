"""adminkit CLI - Main Entry Point."""

from __future__ import annotations

import importlib
import json
import logging
import sys
from typing import Any, Tuple

import click

from .. import __version__
from ..faults import Fault
from ..schema import AdminModel, build_structure
from ..web import AdminApp
from ..web.http import _json_default_serializer
from . import __cli_name__

logger = logging.getLogger("adminkit.cli")


def load_target(target: str) -> Any:
    """Import ``module:attribute`` (dotted attribute paths allowed)."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise click.BadParameter(f"expected MODULE:NAME, got '{target}'")
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise click.BadParameter(f"cannot import '{module_name}': {exc}") from exc
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise click.BadParameter(f"'{module_name}' has no attribute '{attr_path}'") from None
    return obj


def load_app(target: str) -> Tuple[AdminApp, bool]:
    """The ``AdminApp`` named by ``target`` and whether it came from a factory."""
    obj = load_target(target)
    if isinstance(obj, AdminApp):
        return obj, False
    if callable(obj):
        app = obj()
        if isinstance(app, AdminApp):
            return app, True
    raise click.BadParameter(f"'{target}' is neither an AdminApp nor a factory returning one")


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level",
)
@click.pass_context
def cli(ctx, log_level: str):
    """Admin panel schema tooling and development server."""
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ============================================================================
# Commands
# ============================================================================

@cli.command("schema")
@click.argument("target")
@click.option("--structure", is_flag=True, help="Print the form structure instead of the field list")
@click.option("--indent", type=int, default=2, show_default=True, help="JSON indentation")
def schema_cmd(target: str, structure: bool, indent: int):
    """
    Print the schema of an admin model as JSON.

    Examples:
      adminkit schema forum_admin.settings:SystemSettings
      adminkit schema forum_admin.models:AdminForumModel --structure
    """
    model_type = load_target(target)
    if not (isinstance(model_type, type) and issubclass(model_type, AdminModel)):
        raise click.BadParameter(f"'{target}' is not an AdminModel subclass")

    try:
        if structure:
            data = build_structure(model_type, model_type()).to_dict()
        else:
            data = model_type.schema().to_dict()
    except Fault as fault:
        click.echo(f"Error: {fault}", err=True)
        sys.exit(1)

    click.echo(json.dumps(data, indent=indent or None, default=_json_default_serializer))


@cli.command("routes")
@click.argument("target")
def routes_cmd(target: str):
    """List the named routes of an admin app."""
    app, _ = load_app(target)
    routes = list(app.routes)
    width = max((len(route.name) for route in routes), default=0) + 2
    for route in routes:
        click.echo(f"{route.name.ljust(width)}{route.method.ljust(6)} {route.pattern}")


@cli.command("serve")
@click.argument("target")
@click.option("--host", default="127.0.0.1", show_default=True, help="Server host")
@click.option("--port", default=8000, type=int, show_default=True, help="Server port")
@click.option("--reload", is_flag=True, help="Restart on code changes")
def serve_cmd(target: str, host: str, port: int, reload: bool):
    """Run an admin app with uvicorn."""
    import uvicorn

    _, is_factory = load_app(target)
    logger.info("Serving %s on %s:%d", target, host, port)
    uvicorn.run(
        target,
        factory=is_factory,
        host=host,
        port=port,
        reload=reload,
        log_level=logging.getLevelName(logging.getLogger().level).lower(),
    )


def main():
    """Entry point for the `adminkit` command."""
    cli(obj={})


if __name__ == "__main__":
    main()
