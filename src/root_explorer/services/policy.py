"""Role-based root visibility and action permissions."""

import logging

from root_explorer.constants import LOGGER_NAME
from root_explorer.errors import ForbiddenError
from root_explorer.managers.roots import RootRegistry
from root_explorer.models import Identity, Role, Root

logger = logging.getLogger(LOGGER_NAME)


class AccessPolicy:
    """Decides which roots an identity sees and which actions it may take.

    ROOT sees and may open everything. Every other role is confined to
    user-class roots, whose top level ("/") is that user's home rather than
    a machine root.
    """

    def __init__(self, registry: RootRegistry):
        self._registry = registry

    def visible_roots(self, identity: Identity) -> list[Root]:
        snapshot = self._registry.snapshot
        if not identity.is_authenticated:
            return [r for r in snapshot.user if r.exists]
        role = identity.role
        if role is Role.ROOT:
            return [r for r in snapshot.all if r.exists]
        if role in (Role.ADMIN, Role.USER, Role.ANONYMOUS):
            return [r for r in snapshot.user if r.exists]
        raise AssertionError(f"unhandled role {role!r}")

    def can_access_root(self, identity: Identity, root_id: str | None) -> bool:
        if identity.role is Role.ROOT:
            return True
        if not root_id:
            return False
        root = self._registry.snapshot.find_exact(root_id)
        if root is None:
            return False
        return root.is_user_root

    def can_open_root_path(self, identity: Identity, root_id: str | None) -> bool:
        """Whether the literal path "/" of the target root may be opened."""
        if identity.role is Role.ROOT:
            return True
        root = self._registry.snapshot.find_exact(root_id)
        return root is not None and root.is_user_root

    def can_delete(self, identity: Identity) -> bool:
        return identity.role is Role.ROOT

    def can_manage_paths(self, identity: Identity) -> bool:
        return identity.role in (Role.ROOT, Role.ADMIN)

    def can_manage_users(self, identity: Identity) -> bool:
        return identity.role is Role.ROOT

    def require_root_access(self, identity: Identity, root_id: str | None, request_path: str) -> None:
        """Root access check plus the "/" rule used by list/tree/preview."""
        if not self.can_access_root(identity, root_id):
            raise ForbiddenError("Forbidden: You don't have access to this path")
        if request_path == "/" and not self.can_open_root_path(identity, root_id):
            raise ForbiddenError("Forbidden: Root access required to view root path")

    def require_delete(self, identity: Identity) -> None:
        if not self.can_delete(identity):
            logger.info("Delete denied for %s (%s)", identity.username, identity.role.value)
            raise ForbiddenError("Forbidden: Root access required")

    def require_manage_paths(self, identity: Identity) -> None:
        if not self.can_manage_paths(identity):
            raise ForbiddenError("Forbidden: Root or Admin access required")

    def require_manage_users(self, identity: Identity) -> None:
        if not self.can_manage_users(identity):
            raise ForbiddenError("Forbidden: Root access required")
