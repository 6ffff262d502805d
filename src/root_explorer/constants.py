"""
Shared constants for roots, previews, sessions, and logging.

Centralizes defaults so config, services, and routes do not duplicate magic
numbers. Config values (MAX_TREE_DEPTH, PREVIEW_MAX_BYTES, ...) override the
defaults here at runtime.
"""

# Name of the single application logger used by every module.
LOGGER_NAME: str = "root-explorer"

# Identifier of the conventional system root; the paths API refuses to remove it.
RESERVED_ROOT_ID: str = "root"

# Fallback root used when roots.json cannot be read or parsed.
DEFAULT_ROOT_ID: str = "default"
DEFAULT_ROOT_NAME: str = "Root"

# Directory tree expansion depth (0 = immediate children only).
DEFAULT_MAX_TREE_DEPTH: int = 3

# Files larger than this are never read for text/json preview.
DEFAULT_PREVIEW_MAX_BYTES: int = 64 * 1024

# Extensions previewed as images without reading file bytes. Values are the
# MIME subtype after "image/".
IMAGE_MIME_SUBTYPES: dict[str, str] = {
    "png": "png",
    "jpg": "jpeg",
    "jpeg": "jpeg",
    "gif": "gif",
    "webp": "webp",
    "svg": "svg+xml",
}

# Session lifetime and cookie.
DEFAULT_SESSION_TTL_SECONDS: int = 24 * 60 * 60
SESSION_COOKIE_NAME: str = "sessionId"

# How often the scheduler re-checks root directories for existence.
DEFAULT_ROOTS_REFRESH_INTERVAL_SECONDS: int = 60

# Error buffer for /api/status: max number of recent ERROR/WARNING entries.
ERROR_BUFFER_MAX_SIZE: int = 10
