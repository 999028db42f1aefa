from typing import Dict, Optional, Sequence

from src.models.schemas.pr_review.context_bag import ContextBag, ContextSection
from src.services.context.collectors.helpers import fetch_text, truncate_at_boundary
from src.services.context.contracts import (
    BuildParams,
    ContextCollector,
    FileContentSource,
    has_review_target,
    split_repository,
)
from src.utils.logging import get_logger

logger = get_logger(__name__)

README_FILES = ("README.md", "readme.md", "README.MD", "README", "README.txt")
CONTRIBUTING_FILES = (
    "CONTRIBUTING.md",
    "contributing.md",
    ".github/CONTRIBUTING.md",
    "docs/CONTRIBUTING.md",
    "CONTRIBUTING",
)


class RepositoryContextCollector(ContextCollector):
    """
    Adds the repository's README and CONTRIBUTING guide (default branch).

    The paths the documents came from are recorded in
    ``metadata["repository_context_paths"]`` so path rules can drop them.
    """

    name = "repository_context"
    priority = 50

    MAX_CONTENT_LENGTH = 16000

    def __init__(self, source: FileContentSource):
        self.source = source

    def should_collect(self, params: BuildParams) -> bool:
        return has_review_target(params)

    def collect(self, bag: ContextBag, params: BuildParams) -> None:
        owner, repo = split_repository(params)
        context: Dict[str, str] = {}
        paths: Dict[str, str] = {}

        for key, candidates, label in (
            ("readme", README_FILES, "README"),
            ("contributing", CONTRIBUTING_FILES, "CONTRIBUTING"),
        ):
            found = self._first_available(owner, repo, candidates)
            if found is None:
                continue
            path, content = found
            context[key] = truncate_at_boundary(
                content, self.MAX_CONTENT_LENGTH, f"[{label} truncated due to length]"
            )
            paths[key] = path

        bag.set_section(ContextSection.REPOSITORY_CONTEXT, context)
        bag.metadata["repository_context_paths"] = paths

        logger.info(
            "RepositoryContextCollector: Collected repository context",
            extra={
                "repository": params["repository"],
                "has_readme": "readme" in context,
                "has_contributing": "contributing" in context,
            },
        )

    def _first_available(self, owner: str, repo: str, candidates: Sequence[str]) -> Optional[tuple]:
        for path in candidates:
            content = fetch_text(self.source, owner, repo, path)
            if content:
                return path, content
        return None
