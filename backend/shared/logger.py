"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``; this configures the
root "gatehouse" handler once at application startup.
"""

import logging
import sys

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] (%(name)s) - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a stdout handler to the root logger if none is configured yet."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    if any(getattr(h, "_gatehouse", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._gatehouse = True  # type: ignore[attr-defined]
    root.addHandler(handler)
