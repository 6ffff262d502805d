"""Upload, create-directory, delete, and download lookup.

Conflict checks use exclusive-create primitives (open "xb", os.mkdir) so a
name that already exists is never overwritten, even under concurrent writers.
"""

import logging
import os
import shutil

from root_explorer.constants import LOGGER_NAME
from root_explorer.errors import (
    AlreadyExistsError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    TargetIsADirectoryError,
    TargetNotADirectoryError,
    wrap_os_error,
)
from root_explorer.models import Identity, ResolvedPath
from root_explorer.services.policy import AccessPolicy
from root_explorer.services.resolver import PathResolver

logger = logging.getLogger(LOGGER_NAME)


def validate_entry_name(name: str | None, what: str) -> str:
    """A single, non-empty path segment (no separators, not "." or "..")."""
    if not name or not name.strip():
        raise InvalidArgumentError(f"{what} is required")
    if "/" in name or "\\" in name or "\x00" in name or name in (".", ".."):
        raise InvalidArgumentError(f"Invalid {what.lower()}: {name!r}")
    return name


class MutationService:
    """Write-side file operations. Every path passes through PathResolver."""

    def __init__(self, resolver: PathResolver, policy: AccessPolicy):
        self._resolver = resolver
        self._policy = policy

    def _target_directory(self, request_path: str, root_id: str | None) -> ResolvedPath:
        resolved = self._resolver.resolve(request_path, root_id)
        try:
            is_dir = os.path.isdir(resolved.full_path)
            exists = is_dir or os.path.exists(resolved.full_path)
        except OSError as e:
            raise wrap_os_error(e, "Cannot access target") from e
        if not exists:
            raise NotFoundError(f"Path not found: {resolved.request_path}")
        if not is_dir:
            raise TargetNotADirectoryError("Target path must be a directory")
        return resolved

    def upload(self, request_path: str, root_id: str | None, filename: str, data: bytes) -> ResolvedPath:
        """Write ``data`` as a new file; never overwrites."""
        validate_entry_name(filename, "Filename")
        directory = self._target_directory(request_path, root_id)
        target = self._resolver.resolve_child(directory, filename)
        try:
            with open(target.full_path, "xb") as f:
                f.write(data)
        except FileExistsError:
            raise AlreadyExistsError(f'File "{filename}" already exists in this directory') from None
        except OSError as e:
            raise wrap_os_error(e, f"Cannot write {target.request_path}") from e
        logger.info("Uploaded %s (%d bytes) to root %r", target.request_path, len(data), target.root.id)
        return target

    def create_directory(self, request_path: str, root_id: str | None, name: str) -> ResolvedPath:
        """Create one new directory; missing parents are not created."""
        name = validate_entry_name((name or "").strip(), "Directory name")
        directory = self._target_directory(request_path, root_id)
        target = self._resolver.resolve_child(directory, name)
        try:
            os.mkdir(target.full_path)
        except FileExistsError:
            raise AlreadyExistsError(f'Directory "{name}" already exists in this location') from None
        except OSError as e:
            raise wrap_os_error(e, f"Cannot create {target.request_path}") from e
        logger.info("Created directory %s in root %r", target.request_path, target.root.id)
        return target

    def delete(self, identity: Identity, request_path: str, root_id: str | None) -> ResolvedPath:
        """Recursive, forced removal. Absent targets are not an error."""
        self._policy.require_delete(identity)
        if not request_path:
            raise InvalidArgumentError("path is required")
        resolved = self._resolver.resolve(request_path, root_id, follow_leaf=False)
        if resolved.is_root_dir:
            raise ForbiddenError("Cannot delete the root directory itself")
        full_path = resolved.full_path
        try:
            if os.path.isdir(full_path) and not os.path.islink(full_path):
                shutil.rmtree(full_path)
            else:
                os.unlink(full_path)
        except FileNotFoundError:
            logger.debug("Delete of absent path %s ignored", resolved.request_path)
            return resolved
        except OSError as e:
            logger.error("Error deleting %s: %s", resolved.request_path, e)
            raise wrap_os_error(e, f"Cannot delete {resolved.request_path}") from e
        logger.info("User %s deleted %s from root %r", identity.username, resolved.request_path, resolved.root.id)
        return resolved

    def locate_download(self, request_path: str, root_id: str | None) -> ResolvedPath:
        """Validate a download target; the HTTP layer streams the bytes."""
        if not request_path:
            raise InvalidArgumentError("path is required")
        resolved = self._resolver.resolve(request_path, root_id)
        try:
            is_dir = os.path.isdir(resolved.full_path)
            is_file = os.path.isfile(resolved.full_path)
        except OSError as e:
            raise wrap_os_error(e, "Cannot access target") from e
        if is_dir:
            raise TargetIsADirectoryError("Cannot download directories")
        if not is_file:
            raise NotFoundError(f"File not found: {resolved.request_path}")
        return resolved
