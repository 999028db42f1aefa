import math
from typing import Protocol, runtime_checkable

from src.core.config import settings


@runtime_checkable
class TokenCounter(Protocol):
    """Estimates how many model tokens a piece of text costs."""

    def count(self, text: str) -> int:
        ...

    def estimate_from_chars(self, chars: int) -> int:
        ...


class HeuristicTokenCounter:
    """Character based estimate: ceil(chars * tokens_per_char)."""

    def __init__(self, tokens_per_char: float = None):
        self.tokens_per_char = (
            settings.context.tokens_per_char if tokens_per_char is None else tokens_per_char
        )

    def count(self, text: str) -> int:
        return self.estimate_from_chars(len(text or ""))

    def estimate_from_chars(self, chars: int) -> int:
        return int(math.ceil(chars * self.tokens_per_char))

    def chars_for_tokens(self, tokens: int) -> int:
        """Inverse of the estimate, used to truncate text to a token budget."""
        return int(tokens / self.tokens_per_char)
