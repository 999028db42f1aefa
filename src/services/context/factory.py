from typing import Optional

from src.core.config import Settings, settings
from src.parser.semantic_analyzer import SemanticAnalyzer
from src.services.context.collectors import (
    DiffCollector,
    FileContextCollector,
    GuidelinesCollector,
    ImpactAnalysisCollector,
    RepositoryContextCollector,
    SemanticCollector,
)
from src.services.context.engine import ContextEngine
from src.services.context.filters import (
    BinaryFileFilter,
    ConfiguredPathFilter,
    RelevanceFilter,
    SensitiveDataFilter,
    TokenLimitFilter,
    VendorPathFilter,
)
from src.services.context.token_counting import HeuristicTokenCounter, TokenCounter
from src.services.github.contents_client import GitHubContentsClient


class ContextEngineFactory:
    """Builds the context engine used for pull request reviews."""

    @staticmethod
    def create_default(
        github=None,
        analyzer: Optional[SemanticAnalyzer] = None,
        token_counter: Optional[TokenCounter] = None,
        config: Optional[Settings] = None,
    ) -> ContextEngine:
        """
        Engine with every collector and filter registered.

        Args:
            github: Object implementing ``PullRequestSource``,
                ``FileContentSource`` and ``CodeSearchSource``; defaults to a
                ``GitHubContentsClient`` configured from settings
            analyzer: Semantic analyzer for changed files
            token_counter: Counter used by the token limit filter
            config: Settings overriding the module-level singleton
        """
        config = config or settings
        github = github or GitHubContentsClient()
        token_counter = token_counter or HeuristicTokenCounter(config.context.tokens_per_char)
        limits = config.context

        engine = ContextEngine()
        (
            engine
            .register_collector(DiffCollector(github))
            .register_collector(FileContextCollector(github))
            .register_collector(SemanticCollector(analyzer))
            .register_collector(ImpactAnalysisCollector(github, github, config=config.impact_analysis))
            .register_collector(RepositoryContextCollector(github))
            .register_collector(GuidelinesCollector(github, config=config.guidelines))
        )
        (
            engine
            .register_filter(VendorPathFilter())
            .register_filter(ConfiguredPathFilter())
            .register_filter(BinaryFileFilter())
            .register_filter(SensitiveDataFilter())
            .register_filter(RelevanceFilter(max_files=limits.max_files))
            .register_filter(
                TokenLimitFilter(
                    token_counter=token_counter,
                    default_max_tokens=limits.default_max_context_tokens,
                    min_context_tokens=limits.min_context_tokens,
                    min_section_tokens=limits.min_section_tokens,
                )
            )
        )
        return engine
