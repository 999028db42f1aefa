"""
Custom exceptions for source parsing and semantic analysis.
"""


class ParseError(Exception):
    """Exception raised when tree-sitter cannot parse a source.

    Attributes:
        message: Explanation of the error
        file_path: The file being parsed (if available)
    """

    def __init__(self, message: str, file_path: str | None = None):
        self.message = message
        self.file_path = file_path

        full_message = message
        if file_path:
            full_message = f"{message} [file={file_path}]"

        super().__init__(full_message)


class UnsupportedLanguageError(Exception):
    """Exception raised when a file's language has no tree-sitter grammar here.

    Attributes:
        file_path: The file that was rejected
    """

    def __init__(self, file_path: str):
        self.file_path = file_path
        super().__init__(f"Unsupported file type for tree-sitter parsing: {file_path}")


class SemanticAnalysisError(Exception):
    """Exception raised when walking a syntax tree fails.

    This can occur when:
      - Recursion depth is exceeded on deeply nested sources
      - The grammar produces an unexpected node structure

    Attributes:
        message: Explanation of the error
        language: The language being analyzed (if available)
        file_path: The file being analyzed (if available)
    """

    def __init__(
        self,
        message: str,
        language: str | None = None,
        file_path: str | None = None,
    ):
        self.message = message
        self.language = language
        self.file_path = file_path

        details = []
        if language:
            details.append(f"language={language}")
        if file_path:
            details.append(f"file={file_path}")

        full_message = message
        if details:
            full_message = f"{message} [{', '.join(details)}]"

        super().__init__(full_message)
