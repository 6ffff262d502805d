"""Read-only filesystem queries: directory listing, bounded tree, preview."""

import logging
import os
import posixpath
import stat as stat_mod
from datetime import datetime, timezone

from root_explorer.constants import (
    DEFAULT_MAX_TREE_DEPTH,
    DEFAULT_PREVIEW_MAX_BYTES,
    IMAGE_MIME_SUBTYPES,
    LOGGER_NAME,
)
from root_explorer.errors import (
    NotFoundError,
    TargetNotADirectoryError,
    wrap_os_error,
)
from root_explorer.models import FileItem, FilePreview, ResolvedPath, TreeNode
from root_explorer.services.resolver import PathResolver, is_within

logger = logging.getLogger(LOGGER_NAME)


def iso_timestamp(ts: float) -> str:
    """UTC ISO-8601 with millisecond precision and a trailing Z."""
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def file_extension(name: str, is_directory: bool) -> str | None:
    """Lowercase text after the last dot; None for directories and extensionless names."""
    if is_directory or "." not in name:
        return None
    ext = name.rsplit(".", 1)[1].lower()
    return ext or None


def to_file_item(entry_path: str, root_path: str, st: os.stat_result) -> FileItem:
    name = os.path.basename(entry_path)
    relative = os.path.relpath(entry_path, root_path)
    rel_posix = "/" if relative == "." else "/" + relative.replace(os.sep, "/")
    is_directory = stat_mod.S_ISDIR(st.st_mode)
    return FileItem(
        name=name,
        path=rel_posix,
        is_directory=is_directory,
        size=st.st_size,
        modified=iso_timestamp(st.st_mtime),
        created=iso_timestamp(st.st_ctime),
        extension=file_extension(name, is_directory),
        permissions=format(st.st_mode & 0o777, "o"),
    )


class BrowseService:
    """Listing, tree, and preview built on PathResolver."""

    def __init__(
        self,
        resolver: PathResolver,
        max_tree_depth: int = DEFAULT_MAX_TREE_DEPTH,
        preview_max_bytes: int = DEFAULT_PREVIEW_MAX_BYTES,
    ):
        self._resolver = resolver
        self.max_tree_depth = max_tree_depth
        self.preview_max_bytes = preview_max_bytes

    def _resolve_directory(self, request_path: str, root_id: str | None) -> ResolvedPath:
        resolved = self._resolver.resolve(request_path, root_id)
        if not os.path.exists(resolved.full_path):
            raise NotFoundError(f"Path not found: {resolved.request_path}")
        if not os.path.isdir(resolved.full_path):
            raise TargetNotADirectoryError(f"Not a directory: {resolved.request_path}")
        return resolved

    def list_directory(self, request_path: str, root_id: str | None = None) -> dict:
        """Direct children of a directory with stat details. Unordered."""
        resolved = self._resolve_directory(request_path, root_id)
        root_path = resolved.root.resolved_path
        real_root = os.path.realpath(root_path)
        items = []
        try:
            with os.scandir(resolved.full_path) as it:
                for entry in it:
                    # Links leading outside the root describe the link itself.
                    follow = not entry.is_symlink() or is_within(real_root, os.path.realpath(entry.path))
                    try:
                        st = entry.stat(follow_symlinks=follow)
                    except FileNotFoundError:
                        st = entry.stat(follow_symlinks=False)
                    items.append(to_file_item(entry.path, root_path, st))
        except OSError as e:
            raise wrap_os_error(e, f"Cannot list {resolved.request_path}") from e
        return {
            "path": resolved.request_path,
            "items": [i.to_dict() for i in items],
            "total": len(items),
        }

    def build_tree(self, request_path: str, depth: int, root_id: str | None = None) -> list[TreeNode]:
        """Directory-only tree; depth 0 lists children without expanding them."""
        if depth < 0:
            return []
        resolved = self._resolve_directory(request_path, root_id)
        nodes = []
        try:
            with os.scandir(resolved.full_path) as it:
                names = [e.name for e in it if e.is_dir(follow_symlinks=False)]
        except OSError as e:
            raise wrap_os_error(e, f"Cannot read {resolved.request_path}") from e
        for name in names:
            child_path = posixpath.join(resolved.request_path, name)
            children = None
            if depth > 0:
                children = self.build_tree(child_path, depth - 1, resolved.root.id)
            nodes.append(TreeNode(name=name, path=child_path, children=children))
        return nodes

    def root_tree(self, request_path: str, root_id: str | None = None) -> list[dict]:
        """Tree wrapped in a single node for the root, at the configured depth."""
        root = self._resolver.resolve(request_path, root_id).root
        children = self.build_tree(request_path, self.max_tree_depth, root_id)
        return [{"name": root.name, "path": "/", "children": [c.to_dict() for c in children]}]

    def get_preview(self, request_path: str, root_id: str | None = None) -> FilePreview:
        resolved = self._resolver.resolve(request_path, root_id)
        shown_path = resolved.request_path
        try:
            st = os.stat(resolved.full_path)
        except OSError as e:
            raise wrap_os_error(e, f"Cannot preview {resolved.request_path}") from e
        size = st.st_size
        if not stat_mod.S_ISREG(st.st_mode):
            return FilePreview(path=shown_path, type="unsupported", size=size)

        ext = os.path.splitext(resolved.full_path)[1].lstrip(".").lower()
        subtype = IMAGE_MIME_SUBTYPES.get(ext)
        if subtype:
            return FilePreview(path=shown_path, type="image", size=size, mime_type=f"image/{subtype}")

        if size > self.preview_max_bytes:
            return FilePreview(path=shown_path, type="unsupported", size=size)

        try:
            with open(resolved.full_path, "rb") as f:
                data = f.read(self.preview_max_bytes + 1)
        except OSError as e:
            raise wrap_os_error(e, f"Cannot read {resolved.request_path}") from e
        # st_size can understate (procfs) or the file can grow after stat.
        if len(data) > self.preview_max_bytes:
            return FilePreview(path=shown_path, type="unsupported", size=size)
        content = data.decode("utf-8", errors="replace")
        kind = "json" if ext == "json" else "text"
        return FilePreview(path=shown_path, type=kind, size=size, content=content)

