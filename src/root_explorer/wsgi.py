"""Gunicorn entry point: ``root_explorer.wsgi:application``.

Sessions live in process memory, so the app refuses to start unless
run_server.py has marked the launch as single-worker.
"""

import logging
import os
import signal

from root_explorer.constants import LOGGER_NAME
from root_explorer.main import bootstrap

logger = logging.getLogger(LOGGER_NAME)

_orchestrator = None


def _shutdown_handler(signum: int, frame) -> None:
    logger.info("Received signal %s, stopping explorer", signum)
    if _orchestrator:
        _orchestrator.stop()
    raise SystemExit(0)


def create_application():
    global _orchestrator

    if os.environ.get("ROOT_EXPLORER_SINGLE_WORKER") != "1":
        raise RuntimeError(
            "Root Explorer keeps sessions in memory and needs exactly one Gunicorn worker. "
            "Start it with run_server.py, or set ROOT_EXPLORER_SINGLE_WORKER=1 when running gunicorn -w 1."
        )

    _config, _orchestrator = bootstrap()
    _orchestrator.start_services()

    signal.signal(signal.SIGTERM, _shutdown_handler)
    signal.signal(signal.SIGINT, _shutdown_handler)
    return _orchestrator.flask_app


application = create_application()
