"""
GitHub Contents Client

Thin synchronous client over the GitHub REST API providing exactly what the
context collectors need: pull request details, the changed files of a pull
request, file contents at a ref, and repository code search.
"""

import base64
import binascii
from typing import Any, Dict, List, Optional

import httpx

from src.core.config import settings
from src.services.github.exceptions import GitHubAPIException, GitHubNotFoundException
from src.utils.logging import get_logger

logger = get_logger(__name__)

FILES_PER_PAGE = 100
# GitHub stops listing pull request files after 3000 entries
MAX_FILE_PAGES = 30


class GitHubContentsClient:
    """
    Implements the collector sources (``PullRequestSource``,
    ``FileContentSource`` and ``CodeSearchSource``) against api.github.com.

    Args:
        token: Installation or personal access token; falls back to settings
        http_client: Pre-configured ``httpx.Client`` (tests pass one with a
            ``MockTransport``)
    """

    def __init__(
        self,
        token: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        config = settings.github
        token = token or config.token or settings.GITHUB_TOKEN or None

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        if http_client is None:
            http_client = httpx.Client(
                base_url=api_url or config.api_url,
                timeout=timeout or config.timeout_seconds,
            )
        http_client.headers.update(headers)
        self._client = http_client

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitHubContentsClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def get_pull_request(self, owner: str, repo: str, number: int) -> Dict[str, Any]:
        return self._get_json(f"/repos/{owner}/{repo}/pulls/{number}")

    def get_pull_request_files(self, owner: str, repo: str, number: int) -> List[Dict[str, Any]]:
        files: List[Dict[str, Any]] = []
        for page in range(1, MAX_FILE_PAGES + 1):
            batch = self._get_json(
                f"/repos/{owner}/{repo}/pulls/{number}/files",
                params={"per_page": FILES_PER_PAGE, "page": page},
            )
            if not isinstance(batch, list):
                raise GitHubAPIException(
                    "Unexpected response format for pull request files",
                    details={"owner": owner, "repo": repo, "number": number},
                )
            files.extend(batch)
            if len(batch) < FILES_PER_PAGE:
                break
        return files

    def get_file_content(
        self,
        owner: str,
        repo: str,
        path: str,
        ref: Optional[str] = None,
        max_size: Optional[int] = None,
    ) -> Optional[str]:
        """
        Decoded text of a file, or None when the path does not exist, is a
        directory, exceeds ``max_size`` bytes or cannot be decoded.
        """
        params = {"ref": ref} if ref else None
        try:
            data = self._get_json(f"/repos/{owner}/{repo}/contents/{path.lstrip('/')}", params=params)
        except GitHubNotFoundException:
            logger.debug(f"File {path} not found in {owner}/{repo}")
            return None

        if not isinstance(data, dict) or data.get("type", "file") != "file":
            return None

        size = data.get("size") or 0
        if max_size is not None and size > max_size:
            logger.debug(f"Skipping {path}: {size} bytes exceeds {max_size}")
            return None

        content = data.get("content")
        if not isinstance(content, str):
            return None

        if data.get("encoding", "base64") != "base64":
            return content

        try:
            return base64.b64decode(content.replace("\n", ""), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            logger.debug(f"Could not decode contents of {path}")
            return None

    def search_code(self, owner: str, repo: str, query: str, limit: int = 50) -> List[Dict[str, Any]]:
        """
        Keyword search within one repository.

        Returns ``file_path``, ``content`` (matched fragment) and ``score``
        clamped to [0, 1] per hit.
        """
        data = self._get_json(
            "/search/code",
            params={"q": f'"{query}" repo:{owner}/{repo}', "per_page": min(limit, 100)},
            accept="application/vnd.github.text-match+json",
        )
        results = []
        for item in (data or {}).get("items", [])[:limit]:
            fragments = [match.get("fragment", "") for match in item.get("text_matches") or []]
            results.append({
                "file_path": item.get("path", ""),
                "content": "\n".join(fragment for fragment in fragments if fragment),
                "score": min(1.0, max(0.0, float(item.get("score") or 0.0))),
            })
        return results

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None, accept: Optional[str] = None) -> Any:
        headers = {"Accept": accept} if accept else None
        try:
            response = self._client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"GitHub request to {url} failed: {e}")
            raise GitHubAPIException(str(e), url=url) from e

        if response.status_code == 404:
            raise GitHubNotFoundException(url)

        if response.status_code >= 400:
            logger.error(f"GitHub API returned {response.status_code} for {url}: {response.text[:200]}")
            raise GitHubAPIException(response.text[:200], status_code=response.status_code, url=url)

        return response.json()
