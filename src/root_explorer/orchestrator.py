"""
Explorer Orchestrator - Main coordinator for Root Explorer.

Wires the root registry, user store, sessions, policy and file services,
owns the Flask app, and runs periodic maintenance on a background thread.
"""

import logging
import threading
import time

import schedule

from root_explorer.constants import DEFAULT_ROOTS_REFRESH_INTERVAL_SECONDS, LOGGER_NAME
from root_explorer.managers import RootRegistry, RootsConfigFile, SessionManager, UserStore
from root_explorer.services import AccessPolicy, BrowseService, MutationService, PathResolver

logger = logging.getLogger(LOGGER_NAME)


class ExplorerOrchestrator:
    """Main orchestrator coordinating all components."""

    def __init__(self, config: dict):
        self.config = config
        self._shutdown = False
        self._start_time = time.time()

        self.registry = RootRegistry(
            RootsConfigFile(config["ROOTS_CONFIG_PATH"]),
            default_root_dir=config.get("DEFAULT_ROOT_DIR", "."),
        )
        self.registry.load()

        self.user_store = UserStore(config["USERS_DB_PATH"])
        self.user_store.init_db(config.get("INITIAL_ROOT_PASSWORD"))

        self.sessions = SessionManager(ttl_seconds=config["SESSION_TTL_SECONDS"])

        self.policy = AccessPolicy(self.registry)
        self.resolver = PathResolver(self.registry)
        self.browse_service = BrowseService(
            self.resolver,
            max_tree_depth=config["MAX_TREE_DEPTH"],
            preview_max_bytes=config["PREVIEW_MAX_BYTES"],
        )
        self.mutation_service = MutationService(self.resolver, self.policy)

        # Flask app (lazy import to avoid circular deps)
        from root_explorer.web.server import create_app

        self.flask_app = create_app(self)

        # Scheduler thread
        self._scheduler = schedule.Scheduler()
        self._scheduler_thread = None

    @property
    def uptime_seconds(self) -> float:
        return time.time() - self._start_time

    def _run_scheduler(self):
        """Background thread for scheduled tasks."""
        interval = int(
            self.config.get("ROOTS_REFRESH_INTERVAL_SECONDS", DEFAULT_ROOTS_REFRESH_INTERVAL_SECONDS)
        )
        self._scheduler.every(interval).seconds.do(self._refresh_roots)
        self._scheduler.every(5).minutes.do(self._purge_sessions)
        logger.info(f"Scheduled root existence refresh every {interval} second(s)")

        while not self._shutdown:
            self._scheduler.run_pending()
            time.sleep(1)

    def _refresh_roots(self):
        """Re-check root directories so removed or mounted volumes are noticed."""
        try:
            snapshot = self.registry.refresh_existence()
        except Exception as e:
            logger.exception(f"Root existence refresh error: {e}")
            return
        missing = [r.id for r in snapshot.all if not r.exists]
        if missing:
            logger.debug("Roots currently missing on disk: %s", ", ".join(missing))

    def _purge_sessions(self):
        purged = self.sessions.purge_expired()
        if purged:
            logger.info("Purged %d expired session(s)", purged)

    def start_services(self):
        """Log the effective configuration and start the scheduler thread."""
        logger.info("=" * 60)
        logger.info("Starting Root Explorer")
        logger.info("=" * 60)
        logger.info(f"Roots config: {self.registry.source.file_path}")
        logger.info(f"Users DB: {self.user_store.file_path}")
        logger.info(f"Max tree depth: {self.browse_service.max_tree_depth}")
        logger.info(f"Preview cap: {self.browse_service.preview_max_bytes} bytes")
        logger.info(f"Session TTL: {self.sessions.ttl_seconds}s")
        logger.info(f"Log Level: {self.config.get('LOG_LEVEL', 'INFO')}")
        logger.info("=" * 60)

        self._scheduler_thread = threading.Thread(
            target=self._run_scheduler, daemon=True
        )
        self._scheduler_thread.start()

    def stop(self):
        """Graceful shutdown."""
        logger.info("Shutting down orchestrator...")
        self._shutdown = True
        self._scheduler.clear()
