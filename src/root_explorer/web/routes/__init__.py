"""Flask blueprints for the web app. Each module exposes create_bp(orchestrator)."""

from root_explorer.web.routes.auth import create_bp as create_auth_bp
from root_explorer.web.routes.files import create_bp as create_files_bp
from root_explorer.web.routes.paths import create_bp as create_paths_bp
from root_explorer.web.routes.status import create_bp as create_status_bp
from root_explorer.web.routes.users import create_bp as create_users_bp

__all__ = [
    "create_auth_bp",
    "create_files_bp",
    "create_paths_bp",
    "create_status_bp",
    "create_users_bp",
]
