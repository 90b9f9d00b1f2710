"""Repository provider access — uniform capability over GitHub and GitLab."""

from devdashboard.repository.base import FileEntry, RepoInfo, RepositoryAccess
from devdashboard.repository.factory import ProviderKind, create_client, supported_providers

__all__ = [
    "FileEntry",
    "ProviderKind",
    "RepoInfo",
    "RepositoryAccess",
    "create_client",
    "supported_providers",
]
