"""Exception hierarchy for path resolution, access checks, and file operations.

Every error carries a ``kind`` string so callers (the HTTP layer) can map it
to a transport status without inspecting messages.
"""


class RootExplorerError(Exception):
    """Base exception for all Root Explorer errors."""

    kind = "OperationFailed"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.kind

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind}


class RootNotConfiguredError(RootExplorerError):
    """Raised when no roots exist at all."""

    kind = "RootNotConfigured"


class RootNotFoundError(RootExplorerError):
    """Raised when a requested root id does not exist in the registry."""

    kind = "RootNotFound"


class PathTraversalError(RootExplorerError):
    """Raised when a resolved path escapes its root directory."""

    kind = "PathTraversal"


class ForbiddenError(RootExplorerError):
    """Raised when a role or ownership check fails."""

    kind = "Forbidden"


class UnauthorizedError(RootExplorerError):
    """Raised when an operation needs a session and none is present."""

    kind = "Unauthorized"


class TargetNotADirectoryError(RootExplorerError):
    """Raised when an operation needs a directory but got something else."""

    kind = "NotADirectory"


class TargetIsADirectoryError(RootExplorerError):
    """Raised when an operation needs a file but got a directory."""

    kind = "IsADirectory"


class AlreadyExistsError(RootExplorerError):
    """Raised when an upload or mkdir target name is already taken."""

    kind = "AlreadyExists"


class NotFoundError(RootExplorerError):
    """Raised when a referenced user, path entry, or file is absent."""

    kind = "NotFound"


class DuplicateIdError(RootExplorerError):
    """Raised when adding a root whose id is already in use."""

    kind = "DuplicateId"


class InvalidArgumentError(RootExplorerError):
    """Raised on missing or malformed request input (empty names, bad types)."""

    kind = "InvalidArgument"


class OperationFailedError(RootExplorerError):
    """Raised on I/O failures (permission denied, disk errors)."""

    kind = "OperationFailed"


def wrap_os_error(exc: OSError, context: str) -> RootExplorerError:
    """Translate an OSError into the matching error kind, keeping its message."""
    detail = exc.strerror or str(exc)
    if isinstance(exc, FileNotFoundError):
        return NotFoundError(f"{context}: {detail}")
    if isinstance(exc, FileExistsError):
        return AlreadyExistsError(f"{context}: {detail}")
    if isinstance(exc, IsADirectoryError):
        return TargetIsADirectoryError(f"{context}: {detail}")
    if isinstance(exc, NotADirectoryError):
        return TargetNotADirectoryError(f"{context}: {detail}")
    return OperationFailedError(f"{context}: {detail}")
