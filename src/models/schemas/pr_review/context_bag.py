"""
Context Bag Model

Mutable aggregate that collectors fill and filters trim for one pull request
review. Created empty per request, never persisted.
"""

import json
import math
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel, Field

from .pr_patch import ChangedFile

TOKENS_PER_CHAR = 0.25


class ContextSection(str, Enum):
    """Well-known names of the extra sections a collector may contribute."""
    IMPACTED_FILES = "impacted_files"
    GUIDELINES = "guidelines"
    FILE_CONTENTS = "file_contents"
    SEMANTICS = "semantics"
    REPOSITORY_CONTEXT = "repository_context"
    LINKED_ISSUES = "linked_issues"
    PR_COMMENTS = "pr_comments"
    REVIEW_HISTORY = "review_history"
    PROJECT_CONTEXT = "project_context"


class CharTokenEstimator(Protocol):
    def estimate_from_chars(self, chars: int) -> int:
        ...


def _section_key(name) -> str:
    return name.value if isinstance(name, ContextSection) else name


def text_length(value: Any) -> int:
    """Character count of all text carried by a section value."""
    if value is None:
        return 0
    if isinstance(value, str):
        return len(value)
    if isinstance(value, BaseModel):
        return text_length(value.model_dump())
    if isinstance(value, dict):
        return sum(text_length(item) for item in value.values())
    if isinstance(value, (list, tuple)):
        return sum(text_length(item) for item in value)
    return len(str(value))


class ContextBag(BaseModel):
    """
    All context gathered for one review.

    ``sections`` is open ended: collectors add named extras (see
    ``ContextSection``) and filters may shrink or drop them. ``metadata``
    carries request parameters such as ``context_token_budget`` and
    ``paths_config``.
    """

    pull_request: Dict[str, Any] = Field(default_factory=dict)
    files: List[ChangedFile] = Field(default_factory=list)
    metrics: Dict[str, int] = Field(default_factory=dict)
    sections: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def total_chars(self) -> int:
        total = len(json.dumps(self.pull_request, default=str))
        for file in self.files:
            total += len(file.filename)
            total += len(file.patch or "")
        total += len(json.dumps(self.metrics))
        total += sum(text_length(value) for value in self.sections.values())
        return total

    def estimate_tokens(self, counter: Optional[CharTokenEstimator] = None) -> int:
        """Approximate token count of everything the review engine will see."""
        chars = self.total_chars()
        if counter is not None:
            return counter.estimate_from_chars(chars)
        return int(math.ceil(chars * TOKENS_PER_CHAR))

    def files_with_patch_count(self) -> int:
        return sum(1 for file in self.files if file.patch is not None)

    def recalculate_metrics(self) -> None:
        self.metrics = {
            "files_changed": len(self.files),
            "lines_added": sum(file.additions for file in self.files),
            "lines_deleted": sum(file.deletions for file in self.files),
        }

    def get_section(self, name, default: Any = None) -> Any:
        return self.sections.get(_section_key(name), default)

    def set_section(self, name, value: Any) -> None:
        self.sections[_section_key(name)] = value

    def has_section(self, name) -> bool:
        """True when the section exists and is non-empty."""
        return bool(self.sections.get(_section_key(name)))

    def drop_section(self, name) -> None:
        self.sections.pop(_section_key(name), None)

    def get_file(self, filename: str) -> Optional[ChangedFile]:
        for file in self.files:
            if file.filename == filename:
                return file
        return None

    def filenames(self) -> List[str]:
        return [file.filename for file in self.files]

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "pull_request": self.pull_request,
            "files": [file.model_dump(mode="json") for file in self.files],
            "metrics": self.metrics,
            "metadata": self.metadata,
        }
        for name, value in self.sections.items():
            if isinstance(value, list):
                value = [item.to_dict() if hasattr(item, "to_dict") else item for item in value]
            data[name] = value
        return data
