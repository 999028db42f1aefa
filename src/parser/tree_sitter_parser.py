"""
Tree-sitter-based code parsing module.

Parses in-memory source text (file contents fetched from GitHub, never the
local filesystem) with the grammars shipped by tree_sitter_language_pack.
"""

from typing import Tuple

from tree_sitter import Tree
from tree_sitter_language_pack import get_parser as get_ts_parser

from src.parser.exceptions import ParseError, UnsupportedLanguageError
from src.parser.file_types import FileTypes

FILE_TYPE_TO_LANG = {
    FileTypes.PYTHON: "python",
    FileTypes.JAVASCRIPT: "javascript",
    FileTypes.TYPESCRIPT: "typescript",
    FileTypes.TSX: "tsx",
    FileTypes.JAVA: "java",
    FileTypes.GO: "go",
    FileTypes.PHP: "php",
}


def support_file(path: str) -> bool:
    """Check if the file is supported by tree-sitter."""
    return FileTypes.from_path(path) in FILE_TYPE_TO_LANG


def parse_source(content: str, path: str) -> Tuple[Tree, FileTypes, bytes]:
    """Parse source text using the grammar matching ``path``'s extension.

    Args:
        content: Source text.
        path: Repository path, used only for language detection and errors.

    Returns:
        Tuple of (parsed Tree-sitter Tree, detected file type, encoded source).

    Raises:
        UnsupportedLanguageError: If the file type is not supported.
        ParseError: If the grammar cannot be loaded or parsing fails.
    """
    file_type = FileTypes.from_path(path)
    lang = FILE_TYPE_TO_LANG.get(file_type)

    if lang is None:
        raise UnsupportedLanguageError(path)

    source = content.encode("utf-8", errors="replace")
    try:
        tree = get_ts_parser(lang).parse(source)
    except Exception as e:
        raise ParseError(f"Failed to parse source: {e}", file_path=path) from e

    return tree, file_type, source
