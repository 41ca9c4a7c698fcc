# ABOUTME: The `folio serve` command for running the HTTP API under uvicorn.
# ABOUTME: Host, port, and log level default to FOLIO_* settings.

import click
import uvicorn

from folio.api import create_app
from folio.cli.options import get_settings
from folio.logging_config import configure_logging


@click.command("serve")
@click.option("--host", default=None, help="Bind address (default: FOLIO_HOST or 127.0.0.1).")
@click.option("--port", type=int, default=None, help="Port (default: FOLIO_PORT or 8000).")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Serve the ISBN lookup API."""
    settings = get_settings(ctx)
    configure_logging(settings.log_level)
    app = create_app(settings=settings)
    uvicorn.run(
        app,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )
