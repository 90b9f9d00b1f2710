"""Async GitHub REST client implementing :class:`RepositoryAccess`."""

from __future__ import annotations

import base64
import binascii
import time
from urllib.parse import quote

import httpx
import structlog

from devdashboard.exceptions import RepositoryError
from devdashboard.repository.base import FileEntry, RepoInfo, basename
from devdashboard.repository.http import BaseHTTPClient

log = structlog.get_logger("devdashboard.repository")

DEFAULT_API_URL = "https://api.github.com"


class GitHubClient(BaseHTTPClient):
    """GitHub / GitHub Enterprise repository access."""

    provider = "github"

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        super().__init__(
            base_url or DEFAULT_API_URL, headers, timeout=timeout, transport=transport
        )

    # ── RepositoryAccess ───────────────────────────────────────────────────

    async def get_repository_info(self, owner: str, repo: str) -> RepoInfo:
        data = await self._get_json(f"/repos/{owner}/{repo}")
        return RepoInfo(
            id=str(data.get("id", "")),
            name=data.get("name", repo),
            full_name=data.get("full_name", f"{owner}/{repo}"),
            description=data.get("description") or "",
            default_branch=data.get("default_branch") or "",
            url=data.get("html_url") or "",
        )

    async def list_files(self, owner: str, repo: str, ref: str, path: str) -> list[FileEntry]:
        """List a single directory level (or the single file at *path*)."""
        data = await self._get_json(
            self._contents_path(owner, repo, path), self._ref_params(ref)
        )
        items = data if isinstance(data, list) else [data]
        return [
            FileEntry(
                path=item.get("path", ""),
                name=item.get("name", ""),
                type=item.get("type", ""),
                size=int(item.get("size") or 0),
                sha=item.get("sha", ""),
                url=item.get("html_url") or "",
            )
            for item in items
        ]

    async def list_files_recursive(self, owner: str, repo: str, ref: str) -> list[FileEntry]:
        """Return every blob in the tree at *ref* via the recursive trees API."""
        tree_ref = ref or (await self.get_repository_info(owner, repo)).default_branch
        data = await self._get_json(
            f"/repos/{owner}/{repo}/git/trees/{quote(tree_ref)}",
            {"recursive": "1"},
        )
        if data.get("truncated"):
            log.warning("github.tree_truncated", owner=owner, repo=repo, ref=tree_ref)

        files: list[FileEntry] = []
        for entry in data.get("tree", []):
            if entry.get("type") != "blob":
                continue
            path = entry.get("path", "")
            files.append(
                FileEntry(
                    path=path,
                    name=basename(path),
                    type="file",
                    size=int(entry.get("size") or 0),
                    sha=entry.get("sha", ""),
                    url=f"https://github.com/{owner}/{repo}/blob/{tree_ref}/{path}",
                )
            )
        return files

    async def get_file_content(self, owner: str, repo: str, ref: str, path: str) -> str:
        contents_path = self._contents_path(owner, repo, path)
        data = await self._get_json(contents_path, self._ref_params(ref))
        if isinstance(data, list) or data.get("type") not in (None, "file"):
            raise RepositoryError(f"path is not a file: {path}")

        if data.get("encoding") == "base64":
            try:
                return base64.b64decode(data.get("content", "")).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError) as exc:
                raise RepositoryError(f"failed to decode content of {path}: {exc}") from exc

        # Files above 1 MB come back without inline content; ask for the raw body.
        response = await self._get(
            contents_path,
            self._ref_params(ref),
            headers={"Accept": "application/vnd.github.raw+json"},
        )
        return response.text

    # ── internal ───────────────────────────────────────────────────────────

    @staticmethod
    def _contents_path(owner: str, repo: str, path: str) -> str:
        return f"/repos/{owner}/{repo}/contents/{quote(path.strip('/'))}"

    @staticmethod
    def _ref_params(ref: str) -> dict[str, str] | None:
        return {"ref": ref} if ref else None

    def _rate_limit_wait(self, response: httpx.Response) -> int | None:
        if response.status_code not in (403, 429) or not self._is_rate_limited(response):
            return None
        return self._get_rate_limit_wait(response)

    @staticmethod
    def _is_rate_limited(response: httpx.Response) -> bool:
        """Check if a 403/429 response is due to rate limiting."""
        remaining = response.headers.get("X-RateLimit-Remaining")
        if remaining is not None:
            try:
                return int(remaining) == 0
            except (ValueError, TypeError):
                pass
        # GitHub also uses Retry-After header for abuse rate limits
        return "Retry-After" in response.headers

    @staticmethod
    def _get_rate_limit_wait(response: httpx.Response) -> int:
        """Calculate how long to wait based on rate-limit headers."""
        retry_after = response.headers.get("Retry-After")
        if retry_after is not None:
            try:
                return max(int(retry_after), 1)
            except (ValueError, TypeError):
                pass
        reset_ts = response.headers.get("X-RateLimit-Reset")
        if reset_ts is not None:
            try:
                return max(int(reset_ts) - int(time.time()), 1)
            except (ValueError, TypeError):
                pass
        return 60
