"""
Unit tests for ChangedFile and ChangeType handling.
"""

import pytest
from pydantic import ValidationError

from src.models.schemas.pr_review.pr_patch import (
    ChangeType,
    ChangedFile,
    DiffHunk,
)


class TestChangedFile:

    def test_from_github(self, sample_github_pr_files):
        changed = ChangedFile.from_github(sample_github_pr_files[0])

        assert changed.filename == "src/orders/processor.py"
        assert changed.status is ChangeType.MODIFIED
        assert changed.additions == 3
        assert changed.deletions == 1
        assert changed.changes == 4
        assert changed.has_patch
        assert not changed.is_sensitive

    def test_from_github_without_patch(self, sample_github_pr_files):
        changed = ChangedFile.from_github(sample_github_pr_files[2])
        assert changed.patch is None
        assert changed.status is ChangeType.ADDED

    def test_changes_default_to_additions_plus_deletions(self):
        changed = ChangedFile.from_github({"filename": "a.py", "additions": 2, "deletions": 3})
        assert changed.changes == 5

    def test_unknown_status_is_modified(self):
        assert ChangedFile(filename="a.py", status="mystery").status is ChangeType.MODIFIED
        assert ChangedFile(filename="a.py", status="REMOVED").status is ChangeType.REMOVED

    def test_filename_is_normalized(self):
        assert ChangedFile(filename="/src\\app.py ").filename == "src/app.py"

    def test_empty_filename_is_rejected(self):
        with pytest.raises(ValidationError):
            ChangedFile(filename="  ")

    @pytest.mark.parametrize(
        "filename, extension",
        [("src/app.PY", "py"), ("Makefile", ""), ("a/b.min.js", "js"), (".env", "env")],
    )
    def test_extension(self, filename, extension):
        assert ChangedFile(filename=filename).extension == extension


class TestDiffHunk:

    def test_changed_lines_are_sorted_and_unique(self):
        hunk = DiffHunk(
            hunk_id="hunk_abc",
            header="@@ -1,2 +1,3 @@",
            old_start=1,
            old_count=2,
            new_start=1,
            new_count=3,
            lines=["@@ -1,2 +1,3 @@", "+a"],
            new_changed_lines=[3, 1, 3],
        )
        assert hunk.new_changed_lines == [1, 3]

    def test_rejects_bad_header(self):
        with pytest.raises(ValidationError):
            DiffHunk(
                hunk_id="hunk_abc",
                header="not a header",
                old_start=1,
                old_count=1,
                new_start=1,
                new_count=1,
                lines=[],
                new_changed_lines=[],
            )
