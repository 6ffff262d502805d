"""Roots, identities, resolved paths, and file listing models."""

from dataclasses import dataclass, replace
from enum import Enum


class Role(str, Enum):
    """Resolved role of the caller. Unknown role strings map to ANONYMOUS."""
    ROOT = "root"
    ADMIN = "admin"
    USER = "user"
    ANONYMOUS = "anonymous"

    @classmethod
    def parse(cls, value: str | None) -> "Role":
        if not value:
            return cls.ANONYMOUS
        try:
            role = cls(str(value).strip().lower())
        except ValueError:
            return cls.ANONYMOUS
        return role


class RootClass(str, Enum):
    """Visibility class of a root."""
    SYSTEM = "system"
    USER = "user"


@dataclass(frozen=True, slots=True)
class Root:
    """A named base directory. Immutable; existence refresh makes a new value."""
    id: str
    name: str
    path: str            # as declared in roots.json
    resolved_path: str   # absolute, normalized against the working directory
    root_class: RootClass
    exists: bool = False

    @property
    def is_user_root(self) -> bool:
        return self.root_class is RootClass.USER

    def with_exists(self, exists: bool) -> "Root":
        return replace(self, exists=exists)

    def to_summary(self) -> dict:
        """Public shape used by /api/roots."""
        return {"id": self.id, "name": self.name, "path": self.path}

    def to_admin_dict(self) -> dict:
        """Shape used by /api/paths (includes the existence flag)."""
        return {"id": self.id, "name": self.name, "path": self.path, "exists": self.exists}


@dataclass(frozen=True, slots=True)
class RootSet:
    """Immutable snapshot of the configured roots, partitioned by origin.

    Legacy entries (old "roots" array) carry RootClass.SYSTEM but are kept in
    their own partition so iteration order stays system, user, legacy.
    """
    system: tuple[Root, ...] = ()
    user: tuple[Root, ...] = ()
    legacy: tuple[Root, ...] = ()

    @property
    def all(self) -> tuple[Root, ...]:
        return self.system + self.user + self.legacy

    def find_exact(self, root_id: str | None) -> Root | None:
        if root_id is None:
            return None
        for root in self.all:
            if root.id == root_id:
                return root
        return None

    def ids(self) -> set[str]:
        return {r.id for r in self.all}


@dataclass(frozen=True, slots=True)
class Identity:
    """Authenticated username (None when anonymous) plus resolved role."""
    username: str | None = None
    role: Role = Role.ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return self.username is not None

    @classmethod
    def anonymous(cls) -> "Identity":
        return cls()


@dataclass(frozen=True, slots=True)
class ResolvedPath:
    """Absolute path confined to ``root.resolved_path``.

    ``request_path`` is the normalized root-relative form (leading "/").
    """
    full_path: str
    root: Root
    request_path: str = "/"

    @property
    def is_root_dir(self) -> bool:
        return self.request_path == "/"


@dataclass(slots=True)
class FileItem:
    """One entry of a directory listing."""
    name: str
    path: str
    is_directory: bool
    size: int
    modified: str
    created: str
    extension: str | None
    permissions: str

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "path": self.path,
            "isDirectory": self.is_directory,
            "size": self.size,
            "modified": self.modified,
            "created": self.created,
            "extension": self.extension,
            "permissions": self.permissions,
        }


@dataclass(slots=True)
class TreeNode:
    """Directory-only tree node; children is None when not expanded."""
    name: str
    path: str
    children: list["TreeNode"] | None = None

    def to_dict(self) -> dict:
        out: dict = {"name": self.name, "path": self.path}
        if self.children is not None:
            out["children"] = [c.to_dict() for c in self.children]
        return out


@dataclass(slots=True)
class FilePreview:
    """Preview classification: text, json, image, or unsupported."""
    path: str
    type: str
    size: int
    content: str | None = None
    mime_type: str | None = None

    def to_dict(self) -> dict:
        out: dict = {"path": self.path, "type": self.type, "size": self.size}
        if self.content is not None:
            out["content"] = self.content
        if self.mime_type is not None:
            out["mimeType"] = self.mime_type
        return out
