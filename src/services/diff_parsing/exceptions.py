"""
Diff Parsing Exceptions

Raised when a patch from GitHub does not follow the unified diff format.
Callers treat these as data errors: log and skip the file, do not abort.
"""


class DiffParsingError(Exception):
    """Base exception for unified diff parsing failures."""

    def __init__(self, message: str, file_path: str | None = None):
        self.message = message
        self.file_path = file_path

        full_message = message
        if file_path:
            full_message = f"{message} [file={file_path}]"

        super().__init__(full_message)


class HunkParsingError(DiffParsingError):
    """Exception raised when a hunk header cannot be parsed.

    Attributes:
        header: The offending ``@@ ... @@`` line
    """

    def __init__(self, file_path: str, header: str):
        self.header = header
        super().__init__(f"Malformed hunk header '{header}'", file_path=file_path)
