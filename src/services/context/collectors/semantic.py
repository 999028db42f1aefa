from typing import Dict

from src.models.schemas.pr_review.context_bag import ContextBag, ContextSection
from src.parser.semantic_analyzer import SemanticAnalyzer
from src.services.context.contracts import BuildParams, ContextCollector, has_review_target
from src.utils.logging import get_logger

logger = get_logger(__name__)


class SemanticCollector(ContextCollector):
    """
    Summarizes the structure (functions, classes, methods, imports) of the file
    contents fetched by FileContextCollector.
    """

    name = "semantic"
    priority = 80

    MAX_FILES = 15
    MAX_FILE_SIZE = 100000

    def __init__(self, analyzer: SemanticAnalyzer = None):
        self.analyzer = analyzer or SemanticAnalyzer()

    def should_collect(self, params: BuildParams) -> bool:
        return has_review_target(params)

    def collect(self, bag: ContextBag, params: BuildParams) -> None:
        contents = bag.get_section(ContextSection.FILE_CONTENTS) or {}
        if not contents:
            logger.debug("SemanticCollector: No file contents available")
            return

        files = self.select_files(contents)
        if not files:
            logger.debug("SemanticCollector: No suitable files to analyze")
            return

        semantics = self.analyzer.analyze_files(files)
        bag.set_section(ContextSection.SEMANTICS, semantics)

        logger.info(
            "SemanticCollector: Analyzed files",
            extra={"files_analyzed": len(semantics), "files_requested": len(files)},
        )

    def select_files(self, contents: Dict[str, str]) -> Dict[str, str]:
        selected = {}
        for path, content in contents.items():
            if len(selected) >= self.MAX_FILES:
                break
            if len(content) <= self.MAX_FILE_SIZE:
                selected[path] = content
        return selected
