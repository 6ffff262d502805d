"""Users blueprint: root-only account management."""

import logging

from flask import Blueprint, jsonify, request

from root_explorer.constants import LOGGER_NAME
from root_explorer.errors import InvalidArgumentError
from root_explorer.web.auth import require_user_admin

logger = logging.getLogger(LOGGER_NAME)


def create_bp(orchestrator):
    """Create users blueprint with routes closed over orchestrator."""
    bp = Blueprint("users", __name__)
    user_store = orchestrator.user_store
    sessions = orchestrator.sessions

    @bp.route("/users")
    def list_users():
        require_user_admin(orchestrator)
        return jsonify(user_store.list_users())

    @bp.route("/users/<username>")
    def get_user(username):
        require_user_admin(orchestrator)
        return jsonify(user_store.get_user(username))

    @bp.route("/users", methods=["POST"])
    def create_user():
        require_user_admin(orchestrator)
        body = request.get_json(silent=True) or {}
        username = body.get("username")
        user_store.add_user(username, body.get("password"), body.get("role"))
        return jsonify({"success": True, "message": f"User {username} created successfully"})

    @bp.route("/users/<username>", methods=["PUT"])
    def update_user(username):
        require_user_admin(orchestrator)
        body = request.get_json(silent=True) or {}
        user_store.update_user(username, password=body.get("password"), role=body.get("role"))
        return jsonify({"success": True, "message": f"User {username} updated successfully"})

    @bp.route("/users/<username>", methods=["DELETE"])
    def delete_user(username):
        identity = require_user_admin(orchestrator)
        if username == identity.username:
            raise InvalidArgumentError("Cannot delete your own account")
        user_store.delete_user(username)
        dropped = sessions.destroy_user(username)
        if dropped:
            logger.info("Dropped %d session(s) of deleted user %s", dropped, username)
        return jsonify({"success": True, "message": f"User {username} deleted successfully"})

    return bp
