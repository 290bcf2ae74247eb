from __future__ import annotations

"""Basic logging configuration."""

import logging


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for the mock API."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # uvicorn installs its own handlers; keep its access log at our level
    logging.getLogger("uvicorn.access").setLevel(level)
