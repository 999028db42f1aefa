import posixpath
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from src.core.config import GuidelinesConfig, settings
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


class GuidelineReference(BaseModel):
    """One entry of ``guidelines`` in the repository's review configuration."""

    path: str = Field(..., min_length=1)
    description: Optional[str] = None


class GuidelinesCollector(ContextCollector):
    """
    Fetches team guideline documents listed in
    ``metadata["sentinel_config"]["guidelines"]``.

    Only markdown documents are read, at most ``max_guidelines`` of them;
    documents over ``max_file_size`` bytes are truncated.
    """

    name = "guidelines"
    priority = 45

    def __init__(self, source: FileContentSource, config: Optional[GuidelinesConfig] = None):
        self.source = source
        self.config = config or settings.guidelines

    def should_collect(self, params: BuildParams) -> bool:
        return has_review_target(params)

    def collect(self, bag: ContextBag, params: BuildParams) -> None:
        references = self.configured_guidelines(bag)
        if not references:
            return

        owner, repo = split_repository(params)
        guidelines: List[Dict[str, Any]] = []

        for reference in references:
            if len(guidelines) >= self.config.max_guidelines:
                logger.info(
                    "GuidelinesCollector: Maximum guidelines limit reached",
                    extra={"limit": self.config.max_guidelines, "total_configured": len(references)},
                )
                break

            if not self.is_allowed_file_type(reference.path):
                logger.debug(f"GuidelinesCollector: Skipping unsupported file type {reference.path}")
                continue

            content = fetch_text(self.source, owner, repo, reference.path)
            if content is None:
                continue

            guidelines.append({
                "path": reference.path,
                "description": reference.description,
                "content": self._limit_size(content, reference.path),
            })

        bag.set_section(ContextSection.GUIDELINES, guidelines)

        logger.info(
            "GuidelinesCollector: Collected guidelines",
            extra={"configured": len(references), "fetched": len(guidelines)},
        )

    @staticmethod
    def configured_guidelines(bag: ContextBag) -> List[GuidelineReference]:
        sentinel_config = bag.metadata.get("sentinel_config")
        if not isinstance(sentinel_config, dict):
            return []

        references = []
        for entry in sentinel_config.get("guidelines") or []:
            try:
                references.append(GuidelineReference.model_validate(entry))
            except ValidationError:
                logger.warning(f"GuidelinesCollector: Ignoring malformed guideline entry {entry!r}")
        return references

    def is_allowed_file_type(self, path: str) -> bool:
        lower = path.lower()
        return any(lower.endswith(f".{extension}") for extension in self.config.allowed_extensions)

    def _limit_size(self, content: str, path: str) -> str:
        size = len(content.encode("utf-8"))
        if size <= self.config.max_file_size:
            return content

        logger.info(
            "GuidelinesCollector: Truncating oversized guideline",
            extra={"path": path, "original_size": size, "max_size": self.config.max_file_size},
        )
        return truncate_at_boundary(
            content,
            int(self.config.max_file_size * 0.9),
            f"[{posixpath.basename(path)} truncated due to size limit]",
        )
