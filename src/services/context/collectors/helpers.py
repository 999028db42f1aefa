from typing import Optional

from src.models.schemas.pr_review.context_bag import ContextBag
from src.services.context.contracts import BuildParams, FileContentSource
from src.services.github.exceptions import GitHubAPIException
from src.utils.logging import get_logger

logger = get_logger(__name__)


def head_sha(bag: ContextBag, params: BuildParams) -> Optional[str]:
    """Head commit of the pull request, from the request or the fetched PR."""
    sha = params.get("head_sha") or bag.pull_request.get("head_sha")
    return sha if isinstance(sha, str) and sha else None


def fetch_text(
    source: FileContentSource,
    owner: str,
    repo: str,
    path: str,
    ref: Optional[str] = None,
    max_size: Optional[int] = None,
) -> Optional[str]:
    """File contents, or None when the file is missing, too large or the request fails."""
    try:
        return source.get_file_content(owner, repo, path, ref=ref, max_size=max_size)
    except GitHubAPIException as e:
        logger.debug(f"Failed to fetch {path} from {owner}/{repo}: {e}")
        return None


def truncate_at_boundary(content: str, limit: int, notice: str) -> str:
    """
    Cut ``content`` to ``limit`` characters, preferring a paragraph break in the
    last 20% or a line break in the last 10%, and append ``notice``.
    """
    if len(content) <= limit:
        return content

    truncated = content[:limit]
    last_paragraph = truncated.rfind("\n\n")
    last_line = truncated.rfind("\n")

    if last_paragraph != -1 and last_paragraph > limit * 0.8:
        truncated = truncated[:last_paragraph]
    elif last_line != -1 and last_line > limit * 0.9:
        truncated = truncated[:last_line]

    return f"{truncated}\n\n{notice}"
