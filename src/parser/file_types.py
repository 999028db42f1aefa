from pathlib import PurePosixPath
import enum


class FileTypes(enum.StrEnum):
    """Source languages the semantic analyzer understands"""

    PYTHON = "python"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    TSX = "tsx"
    JAVA = "java"
    GO = "go"
    PHP = "php"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_path(cls, path):
        match PurePosixPath(str(path)).suffix.lower():
            case ".py":
                return cls.PYTHON
            case ".js" | ".mjs" | ".cjs" | ".jsx":
                return cls.JAVASCRIPT
            case ".ts" | ".mts" | ".cts":
                return cls.TYPESCRIPT
            case ".tsx":
                return cls.TSX
            case ".java":
                return cls.JAVA
            case ".go":
                return cls.GO
            case ".php":
                return cls.PHP
            case _:
                return cls.UNKNOWN

    @property
    def display_name(self) -> str:
        """Language name reported to reviewers; TSX is reported as TypeScript."""
        return FileTypes.TYPESCRIPT.value if self is FileTypes.TSX else self.value
