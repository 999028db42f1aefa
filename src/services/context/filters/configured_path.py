from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from src.models.schemas.pr_review.context_bag import ContextBag, ContextSection
from src.services.context.contracts import ContextFilter
from src.services.context.path_matcher import matches_any
from src.utils.logging import get_logger

logger = get_logger(__name__)


class PathsConfig(BaseModel):
    """``paths`` block of a repository's review configuration."""

    ignore: List[str] = Field(default_factory=list)
    include: List[str] = Field(default_factory=list)
    sensitive: List[str] = Field(default_factory=list)

    @field_validator("ignore", "include", "sensitive", mode="before")
    @classmethod
    def coerce_patterns(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [str(pattern) for pattern in v if pattern]

    def is_included(self, path: str) -> bool:
        if self.ignore and matches_any(path, self.ignore):
            return False
        if self.include and not matches_any(path, self.include):
            return False
        return True


class ConfiguredPathFilter(ContextFilter):
    """
    Applies repository path rules from ``metadata["paths_config"]``.

    ``ignore`` globs remove files, a non-empty ``include`` list keeps only
    matching files, and ``sensitive`` globs mark files so that later filters
    and the review engine treat them carefully. Path-keyed sections (file
    contents, semantics, guidelines, repository docs) follow the same rules.
    """

    name = "configured_path"
    order = 15

    def filter(self, bag: ContextBag) -> None:
        paths_config = self._get_paths_config(bag)
        if paths_config is None:
            return

        original_count = len(bag.files)
        bag.files = [file for file in bag.files if paths_config.is_included(file.filename)]

        sensitive_count = self._mark_sensitive_files(bag, paths_config)
        removed_sections = self._filter_sections(bag, paths_config)

        bag.recalculate_metrics()

        removed_count = original_count - len(bag.files)
        if removed_count or sensitive_count or removed_sections:
            logger.debug(
                "ConfiguredPathFilter: Applied path rules",
                extra={
                    "original_files": original_count,
                    "removed_files": removed_count,
                    "sensitive_files": sensitive_count,
                    "remaining_files": len(bag.files),
                    "removed_section_entries": removed_sections,
                },
            )

    @staticmethod
    def _get_paths_config(bag: ContextBag) -> Optional[PathsConfig]:
        data = bag.metadata.get("paths_config")
        if isinstance(data, PathsConfig):
            return data
        if not isinstance(data, dict):
            return None
        try:
            return PathsConfig.model_validate(data)
        except (ValidationError, TypeError) as e:
            logger.warning(f"Ignoring malformed paths config: {e}")
            return None

    @staticmethod
    def _mark_sensitive_files(bag: ContextBag, paths_config: PathsConfig) -> int:
        if not paths_config.sensitive:
            return 0

        sensitive_files = []
        for file in bag.files:
            if matches_any(file.filename, paths_config.sensitive):
                file.is_sensitive = True
                sensitive_files.append(file.filename)

        if sensitive_files:
            bag.metadata["sensitive_files"] = sensitive_files
        return len(sensitive_files)

    def _filter_sections(self, bag: ContextBag, paths_config: PathsConfig) -> int:
        removed = 0

        for section in (ContextSection.FILE_CONTENTS, ContextSection.SEMANTICS):
            entries: Dict[str, Any] = bag.get_section(section)
            if not entries:
                continue
            kept = {path: value for path, value in entries.items() if paths_config.is_included(path)}
            removed += len(entries) - len(kept)
            bag.set_section(section, kept)

        guidelines = bag.get_section(ContextSection.GUIDELINES)
        if guidelines:
            kept_guidelines = [item for item in guidelines if paths_config.is_included(item["path"])]
            removed += len(guidelines) - len(kept_guidelines)
            bag.set_section(ContextSection.GUIDELINES, kept_guidelines)

        removed += self._filter_repository_context(bag, paths_config)
        return removed

    @staticmethod
    def _filter_repository_context(bag: ContextBag, paths_config: PathsConfig) -> int:
        context = bag.get_section(ContextSection.REPOSITORY_CONTEXT)
        paths = bag.metadata.get("repository_context_paths")
        if not context or not isinstance(paths, dict):
            return 0

        removed = 0
        for key in ("readme", "contributing"):
            path = paths.get(key)
            if key in context and isinstance(path, str) and not paths_config.is_included(path):
                del context[key]
                del paths[key]
                removed += 1

        if not paths:
            bag.metadata.pop("repository_context_paths", None)
        return removed
