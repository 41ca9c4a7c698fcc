# ABOUTME: Logging setup for the CLI and the HTTP server.
# ABOUTME: Routes stdlib logging through Rich's handler so CLI and server output share one format.

import logging

from rich.logging import RichHandler

_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str | int = "INFO") -> None:
    """Install a RichHandler on the root logger at the given level.

    Idempotent: calling it again only adjusts the level.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root.addHandler(handler)

    # httpx logs every request at INFO; keep it out of normal output.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
