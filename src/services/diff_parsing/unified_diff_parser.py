"""
Unified Diff Parser

Parses the ``patch`` field GitHub returns for each pull request file into
DiffHunk objects, and answers which lines of the head revision a patch touches.
"""

import hashlib
import re
from dataclasses import dataclass
from typing import List, Set, Tuple

from src.models.schemas.pr_review.pr_patch import DiffHunk
from src.services.diff_parsing.exceptions import HunkParsingError
from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class HunkInfo:
    """Parsed hunk header information."""
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    context_line: str


class UnifiedDiffParser:
    """
    Parse GitHub unified diffs into structured hunks.

    Hunk ids are deterministic (file path + header) so findings can be
    anchored to the same hunk across runs.
    """

    HUNK_HEADER_PATTERN = re.compile(r'^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$')
    BINARY_DIFF_PATTERN = re.compile(r'Binary files? .* differ')

    def parse_patch_to_hunks(self, patch_text: str, file_path: str) -> List[DiffHunk]:
        """
        Parse patch text into structured hunk objects.

        Args:
            patch_text: Unified diff patch content
            file_path: File path used for hunk ids and error reporting

        Returns:
            List of DiffHunk objects, empty for blank or binary patches

        Raises:
            HunkParsingError: If a hunk header is malformed
        """
        if not patch_text or not patch_text.strip():
            return []
        if self.is_binary_patch(patch_text):
            return []

        hunks = []
        lines = patch_text.split('\n')
        i = 0

        # Skip diff header lines (until we find first hunk)
        while i < len(lines) and not lines[i].startswith('@@'):
            i += 1

        while i < len(lines):
            if lines[i].startswith('@@'):
                hunk, consumed = self._parse_single_hunk(lines[i:], file_path)
                hunks.append(hunk)
                i += consumed
            else:
                i += 1

        logger.debug(f"Parsed {len(hunks)} hunks for {file_path}")
        return hunks

    def changed_lines(self, patch_text: str, file_path: str = "") -> Set[int]:
        """Line numbers in the head revision added or modified by the patch."""
        lines: Set[int] = set()
        for hunk in self.parse_patch_to_hunks(patch_text, file_path):
            lines.update(hunk.new_changed_lines)
        return lines

    def changed_ranges(self, patch_text: str, file_path: str = "") -> List[Tuple[int, int]]:
        """Head-revision line span ``(start, end)`` of every hunk."""
        return [
            (hunk.new_start, hunk.new_start + max(hunk.new_count, 1) - 1)
            for hunk in self.parse_patch_to_hunks(patch_text, file_path)
        ]

    def _parse_single_hunk(self, lines: List[str], file_path: str) -> Tuple[DiffHunk, int]:
        header_line = lines[0]
        match = self.HUNK_HEADER_PATTERN.match(header_line)
        if not match:
            raise HunkParsingError(file_path, header_line)

        info = HunkInfo(
            old_start=int(match.group(1)),
            old_count=int(match.group(2) or '1'),
            new_start=int(match.group(3)),
            new_count=int(match.group(4) or '1'),
            context_line=match.group(5).strip()
        )

        hunk_lines = [header_line]
        new_changed_lines = []
        new_line_number = info.new_start
        i = 1

        while i < len(lines):
            line = lines[i]
            if line.startswith('@@') or line.startswith('diff '):
                break

            hunk_lines.append(line)
            if line.startswith('+'):
                new_changed_lines.append(new_line_number)
                new_line_number += 1
            elif line.startswith('\\'):
                # "\ No newline at end of file"
                pass
            elif not line.startswith('-'):
                new_line_number += 1
            i += 1

        return DiffHunk(
            hunk_id=self.generate_hunk_id(file_path, header_line),
            header=header_line,
            old_start=info.old_start,
            old_count=info.old_count,
            new_start=info.new_start,
            new_count=info.new_count,
            lines=hunk_lines,
            new_changed_lines=new_changed_lines
        ), i

    def generate_hunk_id(self, file_path: str, hunk_header: str) -> str:
        """
        Generate deterministic hunk ID for diff anchoring.

        Args:
            file_path: Path of the file
            hunk_header: Hunk header line (e.g., "@@ -1,4 +1,6 @@ function")

        Returns:
            ``hunk_`` followed by 12 hex chars of sha256(path::header)
        """
        content = f"{file_path}::{hunk_header}"
        short_hash = hashlib.sha256(content.encode('utf-8')).hexdigest()[:12]
        return f"hunk_{short_hash}"

    def is_binary_patch(self, patch_text: str) -> bool:
        return bool(self.BINARY_DIFF_PATTERN.search(patch_text or ''))
