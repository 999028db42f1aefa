"""
Queue Routing Exception Hierarchy

Errors raised while resolving a job to an execution lane. These signal
programmer errors (misbehaving rules, misconfigured lanes); a well-formed rule
set never makes resolution fail.
"""

from datetime import datetime
from typing import Any, Dict, Optional


class QueueRoutingError(Exception):
    """Base exception for all queue routing errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


class InvalidRuleResultError(QueueRoutingError):
    """Raised when a rule's evaluate() returns something other than a QueueRuleResult."""

    def __init__(self, rule_name: str, result: Any):
        super().__init__(
            message=f"Rule '{rule_name}' returned {type(result).__name__}, expected QueueRuleResult",
            error_code="INVALID_RULE_RESULT",
            details={
                "rule": rule_name,
                "result_type": type(result).__name__,
            },
        )


class UnknownQueueError(QueueRoutingError):
    """Raised when a string does not name a known queue."""

    def __init__(self, value: str):
        super().__init__(
            message=f"Unknown queue '{value}'",
            error_code="UNKNOWN_QUEUE",
            details={"value": value},
        )
