"""
Logging setup for the API process.

Modules log through `logging.getLogger(__name__)`; this module only decides
where records go and how they look. It is called once from app.main.

Never log passwords, password hashes, or verification codes: the latter are
bearer credentials for account activation.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_handler: logging.Handler | None = None


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stdout handler to the `app` logger hierarchy."""
    global _handler

    app_logger = logging.getLogger("app")
    app_logger.setLevel(level.upper())

    # Repeated calls (e.g. uvicorn --reload) must not stack handlers
    if _handler is not None and _handler in app_logger.handlers:
        return

    _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    app_logger.addHandler(_handler)
