"""Service modules: access policy, path resolution, browse and mutation operations."""

from root_explorer.services.browse import BrowseService
from root_explorer.services.mutations import MutationService
from root_explorer.services.policy import AccessPolicy
from root_explorer.services.resolver import PathResolver

__all__ = [
    "AccessPolicy",
    "BrowseService",
    "MutationService",
    "PathResolver",
]
