"""Shared pytest fixtures for DevDashboard tests."""

from __future__ import annotations

import asyncio

import pytest

from devdashboard.core.config import RepoConfig
from devdashboard.exceptions import NotFoundError
from devdashboard.repository.base import FileEntry, RepoInfo, basename


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeRepositoryAccess:
    """In-memory RepositoryAccess that records every call it receives.

    *files* maps path -> content. A content value that is an Exception is
    raised on fetch instead of returned. *tree_error* makes the recursive
    listing fail; *delay* makes every call sleep first.
    """

    def __init__(
        self,
        files: dict[str, str | Exception] | None = None,
        *,
        tree_error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.files = dict(files or {})
        self.tree_error = tree_error
        self.delay = delay
        self.calls: list[tuple] = []
        self.closed = False

    def _record(self, *call) -> None:
        self.calls.append(call)

    def calls_to(self, method: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == method]

    async def _pause(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)

    async def get_repository_info(self, owner, repo):
        self._record("get_repository_info", owner, repo)
        await self._pause()
        return RepoInfo(id="1", name=repo, full_name=f"{owner}/{repo}", default_branch="main")

    async def list_files(self, owner, repo, ref, path):
        self._record("list_files", owner, repo, ref, path)
        await self._pause()
        prefix = path.strip("/") + "/" if path else ""
        return [
            FileEntry(path=p, name=basename(p), type="file")
            for p in self.files
            if p.startswith(prefix) and "/" not in p[len(prefix):]
        ]

    async def list_files_recursive(self, owner, repo, ref):
        self._record("list_files_recursive", owner, repo, ref)
        await self._pause()
        if self.tree_error is not None:
            raise self.tree_error
        return [FileEntry(path=p, name=basename(p), type="file") for p in self.files]

    async def get_file_content(self, owner, repo, ref, path):
        self._record("get_file_content", owner, repo, ref, path)
        await self._pause()
        if path not in self.files:
            raise NotFoundError(f"file not found: {path}")
        content = self.files[path]
        if isinstance(content, Exception):
            raise content
        return content

    async def close(self):
        self.closed = True


def make_repo(
    repository: str = "api",
    *,
    provider: str = "github",
    owner: str = "acme",
    analyzer: str = "poetry",
    packages: list[str] | None = None,
    paths: list[str] | None = None,
    ref: str = "main",
    base_url: str | None = None,
) -> RepoConfig:
    return RepoConfig(
        provider=provider,
        owner=owner,
        repository=repository,
        ref=ref,
        analyzer=analyzer,
        packages=packages if packages is not None else ["django"],
        paths=paths or [],
        base_url=base_url,
    )


POETRY_LOCK = """\
[[package]]
name = "django"
version = "4.2.0"
description = "A high-level Python web framework"
optional = false
python-versions = ">=3.8"
groups = ["main"]

[[package]]
name = "requests"
version = "2.31.0"
optional = false
python-versions = ">=3.7"
groups = ["main"]

[[package]]
name = "pytest"
version = "7.4.0"
optional = false
python-versions = ">=3.7"
groups = ["dev"]
"""

PIPFILE_LOCK = """\
{
    "_meta": {"hash": {"sha256": "abc"}, "pipfile-spec": 6},
    "default": {
        "django": {"hashes": [], "version": "==4.2.0"},
        "mylib": {"git": "https://github.com/acme/mylib.git", "ref": "a1b2c3"}
    },
    "develop": {
        "pytest": {"hashes": [], "version": "==7.4.0"}
    }
}
"""

UV_LOCK = """\
version = 1
requires-python = ">=3.11"

[[package]]
name = "acme-api"
version = "0.1.0"
source = { editable = "." }
dependencies = [
    { name = "django" },
]

[package.dev-dependencies]
dev = [
    { name = "pytest" },
]

[[package]]
name = "django"
version = "5.0.1"
source = { registry = "https://pypi.org/simple" }

[[package]]
name = "pytest"
version = "8.0.0"
source = { registry = "https://pypi.org/simple" }
"""


# ── fixtures ─────────────────────────────────────────────────────────────


@pytest.fixture
def fake_access():
    """The FakeRepositoryAccess class, for building per-test clients."""
    return FakeRepositoryAccess


@pytest.fixture
def repo_config():
    """Factory for RepoConfig with test defaults."""
    return make_repo


@pytest.fixture
def poetry_lock():
    return POETRY_LOCK


@pytest.fixture
def pipfile_lock():
    return PIPFILE_LOCK


@pytest.fixture
def uv_lock():
    return UV_LOCK
