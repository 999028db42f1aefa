from .diff import DiffCollector
from .file_context import FileContextCollector
from .guidelines import GuidelineReference, GuidelinesCollector
from .impact_analysis import ImpactAnalysisCollector, ModifiedSymbol
from .repository_context import RepositoryContextCollector
from .semantic import SemanticCollector

__all__ = [
    "DiffCollector",
    "FileContextCollector",
    "GuidelineReference",
    "GuidelinesCollector",
    "ImpactAnalysisCollector",
    "ModifiedSymbol",
    "RepositoryContextCollector",
    "SemanticCollector",
]
