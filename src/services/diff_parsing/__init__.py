"""
Diff Parsing Services

Services for parsing and processing unified diff formats.
"""

from .exceptions import DiffParsingError, HunkParsingError
from .unified_diff_parser import UnifiedDiffParser

__all__ = ["DiffParsingError", "HunkParsingError", "UnifiedDiffParser"]
