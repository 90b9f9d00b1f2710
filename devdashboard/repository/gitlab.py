"""Async GitLab REST client implementing :class:`RepositoryAccess`."""

from __future__ import annotations

import base64
import binascii
from typing import Any
from urllib.parse import quote

import httpx

from devdashboard.exceptions import RepositoryError
from devdashboard.repository.base import FileEntry, RepoInfo, basename
from devdashboard.repository.http import BaseHTTPClient

DEFAULT_API_URL = "https://gitlab.com/api/v4"

_PER_PAGE = 100
_MAX_PAGES = 50

# GitLab tree node types -> FileEntry types
_NODE_TYPES = {"blob": "file", "tree": "dir"}


class GitLabClient(BaseHTTPClient):
    """gitlab.com / self-hosted GitLab repository access."""

    provider = "gitlab"

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers: dict[str, str] = {"Accept": "application/json"}
        if token:
            headers["PRIVATE-TOKEN"] = token
        super().__init__(
            base_url or DEFAULT_API_URL, headers, timeout=timeout, transport=transport
        )

    # ── RepositoryAccess ───────────────────────────────────────────────────

    async def get_repository_info(self, owner: str, repo: str) -> RepoInfo:
        data = await self._get_json(f"/projects/{self._project_id(owner, repo)}")
        return RepoInfo(
            id=str(data.get("id", "")),
            name=data.get("name", repo),
            full_name=data.get("path_with_namespace", f"{owner}/{repo}"),
            description=data.get("description") or "",
            default_branch=data.get("default_branch") or "",
            url=data.get("web_url") or "",
        )

    async def list_files(self, owner: str, repo: str, ref: str, path: str) -> list[FileEntry]:
        params: dict[str, Any] = {}
        if path:
            params["path"] = path
        if ref:
            params["ref"] = ref
        nodes = await self._list_tree(owner, repo, params)
        return [self._to_entry(owner, repo, ref, node) for node in nodes]

    async def list_files_recursive(self, owner: str, repo: str, ref: str) -> list[FileEntry]:
        tree_ref = ref or await self._default_branch(owner, repo)
        nodes = await self._list_tree(owner, repo, {"recursive": "true", "ref": tree_ref})
        return [
            self._to_entry(owner, repo, tree_ref, node)
            for node in nodes
            if node.get("type") == "blob"
        ]

    async def get_file_content(self, owner: str, repo: str, ref: str, path: str) -> str:
        file_ref = ref or await self._default_branch(owner, repo)
        data = await self._get_json(
            f"/projects/{self._project_id(owner, repo)}"
            f"/repository/files/{quote(path.strip('/'), safe='')}",
            {"ref": file_ref},
        )
        content = data.get("content", "")
        if data.get("encoding", "base64") != "base64":
            return content
        try:
            return base64.b64decode(content).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise RepositoryError(f"failed to decode content of {path}: {exc}") from exc

    # ── internal ───────────────────────────────────────────────────────────

    @staticmethod
    def _project_id(owner: str, repo: str) -> str:
        return quote(f"{owner}/{repo}", safe="")

    async def _default_branch(self, owner: str, repo: str) -> str:
        return (await self.get_repository_info(owner, repo)).default_branch

    async def _list_tree(
        self, owner: str, repo: str, params: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Fetch all pages of ``/repository/tree``, following ``X-Next-Page``."""
        path = f"/projects/{self._project_id(owner, repo)}/repository/tree"
        nodes: list[dict[str, Any]] = []
        page: int | None = 1
        fetched = 0
        while page and fetched < _MAX_PAGES:
            response = await self._get(path, {**params, "per_page": _PER_PAGE, "page": page})
            nodes.extend(response.json())
            page = self._parse_header_int(response.headers.get("X-Next-Page") or None)
            fetched += 1
        return nodes

    def _to_entry(self, owner: str, repo: str, ref: str, node: dict[str, Any]) -> FileEntry:
        path = node.get("path", "")
        node_type = node.get("type", "")
        url = ""
        if ref:
            url = f"{self._web_root()}/{owner}/{repo}/-/blob/{ref}/{path}"
        return FileEntry(
            path=path,
            name=node.get("name") or basename(path),
            type=_NODE_TYPES.get(node_type, node_type),
            sha=node.get("id", ""),
            url=url,
        )

    def _web_root(self) -> str:
        return self.base_url.removesuffix("/api/v4")
