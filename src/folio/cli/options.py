# ABOUTME: Shared Click options and context helpers for Folio CLI commands.
# ABOUTME: Provides the --db flag and builds the lookup service on first use.

from pathlib import Path

import click

from folio.config import DEFAULT_DB_PATH, Settings
from folio.core.service import LookupService, create_lookup_service

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path),
    default=None,
    help=f"Path to catalog database (default: {DEFAULT_DB_PATH})",
)


def get_settings(ctx: click.Context) -> Settings:
    """Settings for this invocation, with the --db override applied."""
    obj = ctx.ensure_object(dict)
    if "settings" not in obj:
        settings = Settings.from_env()
        if obj.get("db_path"):
            settings.db_path = obj["db_path"]
        obj["settings"] = settings
    return obj["settings"]


def get_service(ctx: click.Context) -> LookupService:
    """Return the invocation's LookupService, creating it once.

    Tests inject a ready-made service through ``obj={"service": ...}``.
    """
    obj = ctx.ensure_object(dict)
    if "service" not in obj:
        service = create_lookup_service(get_settings(ctx))
        ctx.find_root().call_on_close(service.close)
        obj["service"] = service
    return obj["service"]
