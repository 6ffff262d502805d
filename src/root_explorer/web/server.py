"""Flask app for the Root Explorer JSON API."""

import logging

from flask import Flask, jsonify

from root_explorer.constants import LOGGER_NAME
from root_explorer.errors import RootExplorerError
from root_explorer.web.routes import (
    create_auth_bp,
    create_files_bp,
    create_paths_bp,
    create_status_bp,
    create_users_bp,
)

logger = logging.getLogger(LOGGER_NAME)

# Error kind -> HTTP status.
STATUS_BY_KIND = {
    "InvalidArgument": 400,
    "NotADirectory": 400,
    "IsADirectory": 400,
    "Unauthorized": 401,
    "Forbidden": 403,
    "PathTraversal": 403,
    "NotFound": 404,
    "RootNotFound": 404,
    "AlreadyExists": 409,
    "DuplicateId": 409,
    "OperationFailed": 500,
    "RootNotConfigured": 503,
}


def status_for(error: RootExplorerError) -> int:
    return STATUS_BY_KIND.get(error.kind, 500)


def create_app(orchestrator):
    """Create Flask app with all API blueprints. Routes close over orchestrator."""
    app = Flask(__name__)

    app.register_blueprint(create_auth_bp(orchestrator), url_prefix="/api")
    app.register_blueprint(create_files_bp(orchestrator), url_prefix="/api")
    app.register_blueprint(create_users_bp(orchestrator), url_prefix="/api")
    app.register_blueprint(create_paths_bp(orchestrator), url_prefix="/api")
    app.register_blueprint(create_status_bp(orchestrator), url_prefix="/api")

    @app.errorhandler(RootExplorerError)
    def _explorer_error(e: RootExplorerError):
        status = status_for(e)
        if status >= 500:
            logger.error("%s: %s", e.kind, e.message)
        else:
            logger.debug("%s: %s", e.kind, e.message)
        return jsonify(e.to_dict()), status

    return app
