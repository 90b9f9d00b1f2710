"""Provider-neutral repository access contract."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class FileEntry:
    """One file or directory in a repository tree."""

    path: str
    name: str
    type: str  # "file" | "dir" | "symlink" | ...
    size: int = 0
    sha: str = ""
    url: str = ""


@dataclass(frozen=True)
class RepoInfo:
    """Repository metadata."""

    id: str
    name: str
    full_name: str
    description: str = ""
    default_branch: str = ""
    url: str = ""


@runtime_checkable
class RepositoryAccess(Protocol):
    """Interface that every provider client must satisfy.

    An empty *ref* means the repository's default branch.
    """

    async def get_repository_info(self, owner: str, repo: str) -> RepoInfo: ...

    async def list_files(self, owner: str, repo: str, ref: str, path: str) -> list[FileEntry]: ...

    async def list_files_recursive(self, owner: str, repo: str, ref: str) -> list[FileEntry]: ...

    async def get_file_content(self, owner: str, repo: str, ref: str, path: str) -> str: ...

    async def close(self) -> None: ...


def basename(path: str) -> str:
    """Return the last component of a ``/``-separated repository path."""
    return path.rstrip("/").rsplit("/", 1)[-1]
