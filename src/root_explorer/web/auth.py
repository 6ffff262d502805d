"""Request identity from the session cookie, plus role guards for routes."""

from flask import request

from root_explorer.constants import SESSION_COOKIE_NAME
from root_explorer.errors import UnauthorizedError
from root_explorer.models import Identity


def current_identity(orchestrator) -> Identity:
    """Identity for the current request; anonymous when the cookie is missing or stale."""
    username = orchestrator.sessions.validate(request.cookies.get(SESSION_COOKIE_NAME))
    if username is None:
        return Identity.anonymous()
    return Identity(username=username, role=orchestrator.user_store.get_role(username))


def require_identity(orchestrator) -> Identity:
    identity = current_identity(orchestrator)
    if not identity.is_authenticated:
        raise UnauthorizedError("Unauthorized")
    return identity


def require_user_admin(orchestrator) -> Identity:
    identity = require_identity(orchestrator)
    orchestrator.policy.require_manage_users(identity)
    return identity


def require_path_admin(orchestrator) -> Identity:
    identity = require_identity(orchestrator)
    orchestrator.policy.require_manage_paths(identity)
    return identity
