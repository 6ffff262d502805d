"""Root registry: loads roots.json, serves the current root snapshot.

The snapshot is an immutable RootSet swapped by a single reference
assignment, so request threads resolving paths never observe a
half-updated partition. Writers (reload, refresh, add/update/remove) are
serialized by one lock; readers never lock.
"""

import json
import logging
import os
import tempfile
import threading

from root_explorer.constants import (
    DEFAULT_ROOT_ID,
    DEFAULT_ROOT_NAME,
    LOGGER_NAME,
    RESERVED_ROOT_ID,
)
from root_explorer.errors import (
    DuplicateIdError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    OperationFailedError,
    RootNotConfiguredError,
    RootNotFoundError,
)
from root_explorer.models import Root, RootClass, RootSet

logger = logging.getLogger(LOGGER_NAME)


class RootsConfigError(Exception):
    """Raised when roots.json cannot be read or is not a JSON object."""


class RootsConfigFile:
    """Read/write of roots.json with atomic replacement on write."""

    def __init__(self, file_path: str) -> None:
        self._file_path = os.path.abspath(file_path)

    @property
    def file_path(self) -> str:
        return self._file_path

    def exists(self) -> bool:
        return os.path.isfile(self._file_path)

    def read(self) -> dict:
        """Parse the file; raise RootsConfigError if missing, unreadable, or not an object."""
        try:
            with open(self._file_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RootsConfigError(f"Could not read {self._file_path}: {e}") from e
        if not isinstance(data, dict):
            raise RootsConfigError(f"{self._file_path} must contain a JSON object")
        return data

    def write(self, data: dict) -> None:
        """Write data as JSON atomically; creates the parent dir if needed."""
        parent = os.path.dirname(self._file_path)
        os.makedirs(parent, exist_ok=True)
        tmp_fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=parent,
            delete=False,
            suffix=".tmp",
            encoding="utf-8",
        )
        tmp_path = tmp_fd.name
        try:
            json.dump(data, tmp_fd, indent=2)
            tmp_fd.close()
            os.replace(tmp_path, self._file_path)
        except Exception:
            tmp_fd.close()
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise


def endpoint_name(declared_path: str) -> str:
    """Last non-empty segment of a declared path ("root" when there is none)."""
    parts = [p for p in declared_path.replace("\\", "/").split("/") if p]
    return parts[-1] if parts else "root"


def directory_exists(resolved_path: str) -> bool:
    """True when the path exists and is a directory. Any stat failure counts as absent."""
    try:
        return os.path.isdir(resolved_path)
    except (OSError, ValueError):
        return False


def _build_root(entry, root_class: RootClass, derive_name: bool, section: str) -> Root | None:
    if not isinstance(entry, dict):
        logger.warning("Skipping malformed %s entry (not an object): %r", section, entry)
        return None
    root_id = entry.get("id")
    declared = entry.get("path")
    if not isinstance(root_id, str) or not root_id or not isinstance(declared, str) or not declared:
        logger.warning("Skipping malformed %s entry (id and path required): %r", section, entry)
        return None
    name = entry.get("name")
    if derive_name or not isinstance(name, str) or not name:
        name = endpoint_name(declared)
    resolved = os.path.abspath(declared)
    return Root(
        id=root_id,
        name=name,
        path=declared,
        resolved_path=resolved,
        root_class=root_class,
        exists=directory_exists(resolved),
    )


def build_root_set(config: dict) -> RootSet:
    """Assemble a RootSet from a parsed roots.json object.

    Unknown or malformed entries are skipped; an id already seen earlier in
    system, user, legacy order is skipped with a warning.
    """
    seen: set[str] = set()

    def _section(key: str, root_class: RootClass, derive_name: bool) -> tuple[Root, ...]:
        entries = config.get(key) or []
        if not isinstance(entries, list):
            logger.warning("Ignoring %s: expected a list, got %s", key, type(entries).__name__)
            return ()
        roots = []
        for entry in entries:
            root = _build_root(entry, root_class, derive_name, key)
            if root is None:
                continue
            if root.id in seen:
                logger.warning("Skipping duplicate root id %r in %s", root.id, key)
                continue
            seen.add(root.id)
            roots.append(root)
        return tuple(roots)

    return RootSet(
        system=_section("systemPaths", RootClass.SYSTEM, derive_name=False),
        user=_section("userPaths", RootClass.USER, derive_name=True),
        legacy=_section("roots", RootClass.SYSTEM, derive_name=False),
    )


def _describe(roots: tuple[Root, ...]) -> str:
    return ", ".join(
        f"{r.name} ({r.path}){'' if r.exists else ' [NOT FOUND]'}" for r in roots
    ) or "none"


class RootRegistry:
    """Holds the current RootSet and mutates roots.json on add/update/remove."""

    def __init__(self, source: RootsConfigFile, default_root_dir: str = ".") -> None:
        self._source = source
        self._default_root_dir = default_root_dir or "."
        self._snapshot = RootSet()
        self._lock = threading.Lock()

    @property
    def snapshot(self) -> RootSet:
        return self._snapshot

    @property
    def source(self) -> RootsConfigFile:
        return self._source

    def load(self) -> RootSet:
        """Initial load. Unreadable config falls back to a single default system root."""
        with self._lock:
            try:
                config = self._source.read()
            except RootsConfigError as e:
                logger.warning("%s; using default root %r", e, self._default_root_dir)
                config = {
                    "systemPaths": [
                        {"id": DEFAULT_ROOT_ID, "name": DEFAULT_ROOT_NAME, "path": self._default_root_dir}
                    ],
                    "userPaths": [],
                }
            self._snapshot = build_root_set(config)
            self._log_snapshot("Loaded")
            return self._snapshot

    def reload(self) -> RootSet:
        """Re-parse roots.json and swap the snapshot; keep the old one on failure."""
        with self._lock:
            return self._reload_locked()

    def _reload_locked(self) -> RootSet:
        try:
            config = self._source.read()
        except RootsConfigError as e:
            logger.error("Error reloading paths configuration: %s", e)
            raise OperationFailedError(f"Error reloading paths configuration: {e}") from e
        self._snapshot = build_root_set(config)
        self._log_snapshot("Reloaded")
        return self._snapshot

    def refresh_existence(self) -> RootSet:
        """Re-check every root directory; ids and resolved paths are unchanged."""
        with self._lock:
            current = self._snapshot

            def _recheck(roots: tuple[Root, ...]) -> tuple[Root, ...]:
                return tuple(r.with_exists(directory_exists(r.resolved_path)) for r in roots)

            refreshed = RootSet(
                system=_recheck(current.system),
                user=_recheck(current.user),
                legacy=_recheck(current.legacy),
            )
            for before, after in zip(current.all, refreshed.all):
                if before.exists != after.exists:
                    logger.info(
                        "Root %r (%s) is now %s",
                        after.id, after.resolved_path, "available" if after.exists else "missing",
                    )
            self._snapshot = refreshed
            return refreshed

    def find(self, root_id: str | None = None) -> Root:
        """Root by id, or the first root when the id is omitted or unknown."""
        snapshot = self._snapshot
        root = snapshot.find_exact(root_id)
        if root is not None:
            return root
        roots = snapshot.all
        if not roots:
            raise RootNotConfiguredError("No root configured")
        return roots[0]

    def get(self, root_id: str) -> Root:
        """Strict lookup by id."""
        root = self._snapshot.find_exact(root_id)
        if root is None:
            raise RootNotFoundError(f'Root "{root_id}" not found')
        return root

    def add(self, root_class: str, root_id: str, path: str, name: str | None = None) -> Root:
        """Append a root to roots.json and reload."""
        if not root_class or not isinstance(root_id, str) or not root_id.strip() \
                or not isinstance(path, str) or not path.strip():
            raise InvalidArgumentError("Type, id, and path are required")
        try:
            cls = RootClass(root_class)
        except ValueError:
            raise InvalidArgumentError("Type must be 'system' or 'user'") from None
        with self._lock:
            if root_id in self._snapshot.ids():
                raise DuplicateIdError(f'Path with id "{root_id}" already exists')
            config = self._read_for_update()
            if cls is RootClass.SYSTEM:
                config.setdefault("systemPaths", []).append(
                    {"id": root_id, "name": name or endpoint_name(path), "path": path}
                )
            else:
                config.setdefault("userPaths", []).append({"id": root_id, "path": path})
            self._write(config)
            self._reload_locked()
            logger.info("Added %s root %r -> %s", cls.value, root_id, path)
            return self._snapshot.find_exact(root_id)

    def update(self, root_id: str, name: str | None = None, path: str | None = None) -> Root | None:
        """Update name/path of a system root, or path of a user root, then reload."""
        if path is not None and (not isinstance(path, str) or not path.strip()):
            raise InvalidArgumentError("path must be a non-empty string")
        with self._lock:
            config = self._read_for_update()
            entry = _find_entry(config.get("systemPaths"), root_id)
            if entry is not None:
                if name is not None:
                    entry["name"] = name
                if path is not None:
                    entry["path"] = path
            else:
                entry = _find_entry(config.get("userPaths"), root_id)
                if entry is None:
                    raise NotFoundError("Path not found")
                if path is not None:
                    entry["path"] = path
            self._write(config)
            self._reload_locked()
            logger.info("Updated root %r", root_id)
            return self._snapshot.find_exact(root_id)

    def remove(self, root_id: str) -> None:
        """Remove a system or user root from roots.json, then reload."""
        if root_id == RESERVED_ROOT_ID:
            raise ForbiddenError("Cannot delete the system root path")
        with self._lock:
            config = self._read_for_update()
            removed = False
            for key in ("systemPaths", "userPaths"):
                entries = config.get(key)
                entry = _find_entry(entries, root_id)
                if entry is not None:
                    entries.remove(entry)
                    removed = True
                    break
            if not removed:
                raise NotFoundError("Path not found")
            self._write(config)
            self._reload_locked()
            logger.info("Removed root %r", root_id)

    def _read_for_update(self) -> dict:
        # A missing file starts a fresh config; a corrupt one must not be overwritten.
        if not self._source.exists():
            return {"systemPaths": [], "userPaths": []}
        try:
            return self._source.read()
        except RootsConfigError as e:
            raise OperationFailedError(str(e)) from e

    def _write(self, config: dict) -> None:
        try:
            self._source.write(config)
        except OSError as e:
            raise OperationFailedError(f"Could not write {self._source.file_path}: {e}") from e

    def _log_snapshot(self, verb: str) -> None:
        snapshot = self._snapshot
        logger.info("%s paths configuration from %s", verb, self._source.file_path)
        logger.info("System paths: %s", _describe(snapshot.system + snapshot.legacy))
        logger.info("User paths: %s", _describe(snapshot.user))


def _find_entry(entries, root_id: str) -> dict | None:
    if not isinstance(entries, list):
        return None
    for entry in entries:
        if isinstance(entry, dict) and entry.get("id") == root_id:
            return entry
    return None
