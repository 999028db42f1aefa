"""
PR Patch and Diff Models

Contains Pydantic schemas for the files changed by a pull request and their
parsed diff hunks.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class ChangeType(str, Enum):
    """File change types in a PR, as reported by GitHub."""
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"
    COPIED = "copied"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


class DiffHunk(BaseModel):
    """Represents a single diff hunk within a file patch."""

    hunk_id: str = Field(..., description="Deterministic hunk identifier")
    header: str = Field(
        ...,
        description="Hunk header in format @@ -a,b +c,d @@",
        pattern=r'@@\s*-\d+(?:,\d+)?\s*\+\d+(?:,\d+)?\s*@@'
    )

    old_start: int = Field(..., description="Starting line number in old file", ge=0)
    old_count: int = Field(..., description="Number of lines in old file context", ge=0)
    new_start: int = Field(..., description="Starting line number in new file", ge=0)
    new_count: int = Field(..., description="Number of lines in new file context", ge=0)

    lines: List[str] = Field(..., description="Raw hunk lines with +/-/ prefixes")
    new_changed_lines: List[int] = Field(
        ...,
        description="Line numbers in PR head that were changed (additions/modifications)"
    )

    @field_validator('new_changed_lines')
    @classmethod
    def validate_changed_lines(cls, v):
        # GitHub diffs can have header/content inconsistencies, so only normalize
        return sorted(set(v))

    @field_validator('hunk_id')
    @classmethod
    def validate_hunk_id_format(cls, v):
        if not v.strip():
            raise ValueError('Hunk ID cannot be empty')
        return v


class ChangedFile(BaseModel):
    """One file touched by a pull request, as carried in the context bag."""

    filename: str = Field(..., description="Relative path from repository root")
    status: ChangeType = Field(ChangeType.MODIFIED, description="Type of change made to this file")
    additions: int = Field(default=0, description="Number of lines added", ge=0)
    deletions: int = Field(default=0, description="Number of lines deleted", ge=0)
    changes: int = Field(default=0, description="Total changed lines", ge=0)
    patch: Optional[str] = Field(None, description="Raw unified diff patch text from GitHub")
    previous_filename: Optional[str] = Field(
        None,
        description="Previous filename if file was renamed"
    )
    is_sensitive: bool = Field(
        default=False,
        description="Marked by path configuration as holding sensitive data"
    )

    @field_validator('status', mode='before')
    @classmethod
    def normalize_status(cls, v):
        """Unknown GitHub statuses are treated as modifications."""
        if isinstance(v, ChangeType):
            return v
        try:
            return ChangeType(str(v).lower())
        except ValueError:
            return ChangeType.MODIFIED

    @field_validator('filename')
    @classmethod
    def validate_filename(cls, v):
        v = v.strip().replace('\\', '/').strip('/')
        if not v:
            raise ValueError('File path cannot be empty')
        return v

    @classmethod
    def from_github(cls, data: Dict[str, Any]) -> "ChangedFile":
        """Build from an item of GitHub's ``/pulls/{number}/files`` response."""
        additions = int(data.get('additions') or 0)
        deletions = int(data.get('deletions') or 0)
        return cls(
            filename=data['filename'],
            status=data.get('status') or ChangeType.MODIFIED,
            additions=additions,
            deletions=deletions,
            changes=int(data.get('changes') or additions + deletions),
            patch=data.get('patch'),
            previous_filename=data.get('previous_filename'),
        )

    @property
    def has_patch(self) -> bool:
        return self.patch is not None

    @property
    def extension(self) -> str:
        basename = self.filename.rsplit('/', 1)[-1]
        if '.' not in basename:
            return ''
        return basename.rsplit('.', 1)[-1].lower()
