"""
Impacted File Model

A file outside the pull request that references a symbol the pull request
modifies. Produced by impact analysis.
"""

import math
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, computed_field

_REASON_TEMPLATES = {
    "function_call": "Calls function `{}()`",
    "class_instantiation": "Instantiates class `{}`",
    "method_call": "Calls method `{}()`",
    "extends": "Extends class `{}`",
    "implements": "Implements interface `{}`",
}


def _coerce_score(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        score = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return 0.0 if math.isnan(score) else score


def _coerce_count(value: Any) -> int:
    try:
        if isinstance(value, float) and not math.isfinite(value):
            return 1
        return max(1, int(value))
    except (TypeError, ValueError, OverflowError):
        return 1


class ImpactedFile(BaseModel):
    """Cross-reference hit for a modified symbol."""

    model_config = ConfigDict(frozen=True)

    file_path: str = Field(..., description="Path to the impacted file")
    content: str = Field("", description="Relevant content excerpt")
    matched_symbol: str = Field(..., description="The symbol being referenced")
    match_type: str = Field(
        "unknown",
        description="function_call, class_instantiation, method_call, extends, implements"
    )
    score: float = Field(0.0, ge=0.0, le=1.0, description="Relevance score")
    match_count: int = Field(1, ge=1, description="References to the symbol in this file")

    @computed_field
    @property
    def reason(self) -> str:
        template = _REASON_TEMPLATES.get(self.match_type, "References `{}`")
        return template.format(self.matched_symbol)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImpactedFile":
        """Lenient constructor for untrusted payloads; never raises."""
        score = min(1.0, max(0.0, _coerce_score(data.get("score", 0.0))))
        return cls(
            file_path=str(data.get("file_path") or ""),
            content=str(data.get("content") or ""),
            matched_symbol=str(data.get("matched_symbol") or ""),
            match_type=str(data.get("match_type") or "unknown"),
            score=score,
            match_count=_coerce_count(data.get("match_count", 1)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
