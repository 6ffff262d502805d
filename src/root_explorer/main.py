#!/usr/bin/env python3
"""
Root Explorer - Bootstrap and entry point.

Provides bootstrap() for the WSGI worker (root_explorer.wsgi). The server is
started via run_server.py (Gunicorn); do not run Flask's built-in server.

Run the app with: python run_server.py
"""

import logging
import sys
from pathlib import Path

from root_explorer.config import load_config
from root_explorer.constants import LOGGER_NAME
from root_explorer.logging_utils import setup_logging
from root_explorer.orchestrator import ExplorerOrchestrator

# Early logging for config loading (reconfigured after config is loaded)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(LOGGER_NAME)


def _load_version() -> str:
    """Load version from version.txt next to the package or at the project root."""
    try:
        pkg_dir = Path(__file__).resolve().parent
        for candidate in (
            pkg_dir / "version.txt",
            pkg_dir.parent.parent / "version.txt",
        ):
            if candidate.exists():
                return candidate.read_text().strip()
    except OSError:
        pass
    return "unknown"


def bootstrap() -> tuple[dict, ExplorerOrchestrator]:
    """Load config, setup logging, create and return (config, orchestrator).

    Used by the WSGI entry point (wsgi.py). Does not start the web server.
    """
    config = load_config()
    setup_logging(config.get("LOG_LEVEL", "INFO"))

    version = _load_version()
    logger.info("VERSION = %s", version)

    orchestrator = ExplorerOrchestrator(config)
    return config, orchestrator


def main():
    """Entry point: direct user to run_server.py (Gunicorn is the only server)."""
    logger.error(
        "Root Explorer must be started with run_server.py (Gunicorn). "
        "Do not use python -m root_explorer.main to run the server."
    )
    sys.exit(1)


if __name__ == "__main__":
    main()
