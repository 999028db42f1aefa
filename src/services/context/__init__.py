"""
Context Engine

Assembles the review context for a pull request from pluggable collectors and
filters.
"""

from src.services.context.contracts import ContextCollector, ContextFilter
from src.services.context.engine import ContextEngine
from src.services.context.exceptions import (
    ContextAssemblyError,
    ContextCollectionError,
    ContextFilterError,
)
from src.services.context.factory import ContextEngineFactory

__all__ = [
    "ContextAssemblyError",
    "ContextCollectionError",
    "ContextCollector",
    "ContextEngine",
    "ContextEngineFactory",
    "ContextFilter",
    "ContextFilterError",
]
