"""
delta.__main__ — Entry point for ``python -m delta``
======================================================

Wiring:
1. Configure logging.
2. Load .env (secrets) and config.yaml (port).
3. Serve :data:`delta.api.main.app` with uvicorn.

Run with::

    python -m delta
"""

from __future__ import annotations

import logging

import uvicorn
from dotenv import load_dotenv

from delta.config import load_config

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("delta")


def main() -> None:
    """Start the dashboard API on the configured port."""
    load_dotenv()
    cfg = load_config()
    logger.info("Starting Delta API on port %d…", cfg.dashboard_port)
    uvicorn.run("delta.api.main:app", host="0.0.0.0", port=cfg.dashboard_port)


if __name__ == "__main__":
    main()
