"""Manager modules for roots, users, and sessions."""

from root_explorer.managers.roots import RootRegistry, RootsConfigFile
from root_explorer.managers.sessions import SessionManager
from root_explorer.managers.users import UserStore

__all__ = [
    "RootRegistry",
    "RootsConfigFile",
    "SessionManager",
    "UserStore",
]
