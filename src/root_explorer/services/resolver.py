"""
Safe path resolution: the single chokepoint between request paths and disk.

A request path is always interpreted relative to a root ("." + path), never
as an absolute filesystem path. The normalized result must equal the root
directory or lie under it at a path-segment boundary, both lexically and
after symlink resolution, so "/data-evil" never matches root "/data" and a
symlink inside the root cannot lead outside it.
"""

import logging
import os
import posixpath

from root_explorer.constants import LOGGER_NAME
from root_explorer.errors import PathTraversalError
from root_explorer.managers.roots import RootRegistry
from root_explorer.models import ResolvedPath

logger = logging.getLogger(LOGGER_NAME)


def is_within(base: str, candidate: str) -> bool:
    """True when candidate equals base or is a descendant at a separator boundary."""
    if candidate == base:
        return True
    prefix = base if base.endswith(os.sep) else base + os.sep
    return candidate.startswith(prefix)


class PathResolver:
    """Maps (request path, root id) to a ResolvedPath confined to that root."""

    def __init__(self, registry: RootRegistry):
        self._registry = registry

    def resolve(
        self, request_path: str | None, root_id: str | None = None, follow_leaf: bool = True
    ) -> ResolvedPath:
        """Confine ``request_path`` to the root.

        With ``follow_leaf`` false only the parent directory is resolved through
        symlinks, so a link inside the root can be addressed as itself.
        """
        root = self._registry.find(root_id)
        normalized = request_path or "/"
        if "\x00" in normalized:
            self._reject(normalized, root.id, "null byte")
        if not normalized.startswith("/"):
            normalized = "/" + normalized

        base = root.resolved_path
        target = os.path.normpath(os.path.join(base, "." + normalized))
        if not is_within(base, target):
            self._reject(request_path, root.id, "escapes root")

        real_base = os.path.realpath(base)
        if follow_leaf or target == base:
            real_target = os.path.realpath(target)
        else:
            real_target = os.path.join(os.path.realpath(os.path.dirname(target)), os.path.basename(target))
        if not is_within(real_base, real_target):
            self._reject(request_path, root.id, "symlink escapes root")

        relative = os.path.relpath(target, base)
        rel_posix = "/" if relative == "." else "/" + relative.replace(os.sep, "/")
        return ResolvedPath(full_path=target, root=root, request_path=rel_posix)

    def resolve_child(self, parent: ResolvedPath, name: str) -> ResolvedPath:
        """Resolve ``name`` inside an already-resolved directory of the same root."""
        child = posixpath.join(parent.request_path, name)
        return self.resolve(child, parent.root.id)

    @staticmethod
    def _reject(request_path, root_id: str, reason: str):
        logger.warning(
            "Rejected path traversal attempt (%s): path=%r root=%r", reason, request_path, root_id
        )
        raise PathTraversalError("Forbidden path")
