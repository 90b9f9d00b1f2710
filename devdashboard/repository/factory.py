"""Provider registry — map a provider name to a :class:`RepositoryAccess` client."""

from __future__ import annotations

from enum import Enum

from devdashboard.exceptions import UnsupportedProviderError
from devdashboard.repository.base import RepositoryAccess
from devdashboard.repository.github import GitHubClient
from devdashboard.repository.gitlab import GitLabClient


class ProviderKind(str, Enum):
    """Supported repository hosting providers."""

    GITHUB = "github"
    GITLAB = "gitlab"


_CLIENTS = {
    ProviderKind.GITHUB: GitHubClient,
    ProviderKind.GITLAB: GitLabClient,
}


def supported_providers() -> list[str]:
    return [kind.value for kind in ProviderKind]


def create_client(
    provider: str,
    token: str | None = None,
    base_url: str | None = None,
) -> RepositoryAccess:
    """Create a client for *provider* (case-sensitive exact match).

    Raises UnsupportedProviderError for any name outside :class:`ProviderKind`.
    """
    try:
        kind = ProviderKind(provider)
    except ValueError:
        raise UnsupportedProviderError(provider, supported_providers()) from None
    return _CLIENTS[kind](token=token, base_url=base_url)
