"""
Context Assembly Exception Hierarchy

Errors raised while building the review context. Context assembly is
all-or-nothing: a failing collector or filter aborts the build and surfaces
as one of these, chained to the original exception.
"""

from datetime import datetime
from typing import Any, Dict, Optional


class ContextAssemblyError(Exception):
    """Base exception for all context assembly errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.recoverable = recoverable
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "timestamp": self.timestamp.isoformat()
        }

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


class ContextCollectionError(ContextAssemblyError):
    """Raised when a collector fails while gathering context."""

    def __init__(self, collector_name: str, original_error: Exception):
        super().__init__(
            message=f"Collector '{collector_name}' failed: {original_error}",
            error_code="CONTEXT_COLLECTION_FAILED",
            details={
                "collector": collector_name,
                "original_error": str(original_error),
                "original_error_type": type(original_error).__name__,
            },
            recoverable=False
        )
        self.collector_name = collector_name


class ContextFilterError(ContextAssemblyError):
    """Raised when a filter fails while transforming the context bag."""

    def __init__(self, filter_name: str, original_error: Exception):
        super().__init__(
            message=f"Filter '{filter_name}' failed: {original_error}",
            error_code="CONTEXT_FILTER_FAILED",
            details={
                "filter": filter_name,
                "original_error": str(original_error),
                "original_error_type": type(original_error).__name__,
            },
            recoverable=False
        )
        self.filter_name = filter_name
