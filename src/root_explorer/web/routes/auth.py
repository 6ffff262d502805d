"""Auth blueprint: login, logout, session check."""

import logging

from flask import Blueprint, jsonify, request

from root_explorer.constants import LOGGER_NAME, SESSION_COOKIE_NAME
from root_explorer.errors import InvalidArgumentError, UnauthorizedError
from root_explorer.web.auth import current_identity

logger = logging.getLogger(LOGGER_NAME)


def create_bp(orchestrator):
    """Create auth blueprint with routes closed over orchestrator."""
    bp = Blueprint("auth", __name__)
    sessions = orchestrator.sessions
    user_store = orchestrator.user_store

    @bp.route("/auth/login", methods=["POST"])
    def login():
        body = request.get_json(silent=True) or {}
        username = body.get("username")
        password = body.get("password")
        if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
            raise InvalidArgumentError("Username and password required")
        if not user_store.verify_password(username, password):
            logger.info("Failed login for %s", username)
            raise UnauthorizedError("Invalid credentials")

        session_id = sessions.create(username)
        logger.info("User %s logged in", username)
        resp = jsonify({"success": True, "username": username})
        resp.set_cookie(
            SESSION_COOKIE_NAME,
            session_id,
            max_age=sessions.ttl_seconds,
            httponly=True,
            secure=bool(orchestrator.config.get("SESSION_COOKIE_SECURE", False)),
            samesite="Lax",
        )
        return resp

    @bp.route("/auth/logout", methods=["POST"])
    def logout():
        sessions.destroy(request.cookies.get(SESSION_COOKIE_NAME))
        resp = jsonify({"success": True})
        resp.delete_cookie(SESSION_COOKIE_NAME)
        return resp

    @bp.route("/auth/check")
    def check():
        identity = current_identity(orchestrator)
        if not identity.is_authenticated:
            return jsonify({"authenticated": False}), 401
        return jsonify({
            "authenticated": True,
            "username": identity.username,
            "role": identity.role.value,
        })

    return bp
