"""
Context Engine

Builds the review context for one pull request: runs every registered
collector that wants to collect (highest priority first), then every
registered filter (lowest order first), and returns the bag.
"""

from typing import Dict, List, Optional

from src.models.schemas.pr_review.context_bag import ContextBag
from src.services.context.contracts import BuildParams, ContextCollector, ContextFilter
from src.services.context.exceptions import ContextCollectionError, ContextFilterError
from src.utils.logging import get_logger

logger = get_logger(__name__)


class ContextEngine:
    """
    Orchestrates collectors and filters.

    Registration is keyed by name: registering a second component with an
    existing name replaces the first one in place. The engine keeps no
    per-build state, so one instance can serve concurrent builds as long as
    its components are themselves stateless.
    """

    def __init__(self):
        self._collectors: Dict[str, ContextCollector] = {}
        self._filters: Dict[str, ContextFilter] = {}

    def register_collector(self, collector: ContextCollector) -> "ContextEngine":
        self._collectors[collector.name] = collector
        return self

    def register_filter(self, context_filter: ContextFilter) -> "ContextEngine":
        self._filters[context_filter.name] = context_filter
        return self

    def build(self, params: BuildParams) -> ContextBag:
        bag = ContextBag()

        self._run_collectors(bag, params)
        self._run_filters(bag)

        logger.debug(
            "Context engine built context",
            extra={
                "estimated_tokens": bag.estimate_tokens(),
                "files_with_patches": bag.files_with_patch_count(),
                "sections": sorted(bag.sections),
            },
        )
        return bag

    def get_collector_names(self, params: Optional[BuildParams] = None) -> List[str]:
        """Collector names in run order; only those that would collect when params are given."""
        collectors = self._sorted_collectors()
        if params is not None:
            collectors = [collector for collector in collectors if collector.should_collect(params)]
        return [collector.name for collector in collectors]

    def get_filter_names(self) -> List[str]:
        return [context_filter.name for context_filter in self._sorted_filters()]

    def _run_collectors(self, bag: ContextBag, params: BuildParams) -> None:
        for collector in self._sorted_collectors():
            if not collector.should_collect(params):
                logger.debug(f"Skipping collector {collector.name}")
                continue

            try:
                collector.collect(bag, params)
            except Exception as e:
                logger.error(
                    f"Collector {collector.name} failed: {e}",
                    extra={"collector": collector.name, "error_type": type(e).__name__},
                )
                raise ContextCollectionError(collector.name, e) from e

            logger.debug(f"Collector {collector.name} completed")

    def _run_filters(self, bag: ContextBag) -> None:
        for context_filter in self._sorted_filters():
            try:
                context_filter.filter(bag)
            except Exception as e:
                logger.error(
                    f"Filter {context_filter.name} failed: {e}",
                    extra={"filter": context_filter.name, "error_type": type(e).__name__},
                )
                raise ContextFilterError(context_filter.name, e) from e

            logger.debug(f"Filter {context_filter.name} completed")

    def _sorted_collectors(self) -> List[ContextCollector]:
        # sorted() is stable, so equal priorities keep registration order
        return sorted(self._collectors.values(), key=lambda collector: -collector.priority)

    def _sorted_filters(self) -> List[ContextFilter]:
        return sorted(self._filters.values(), key=lambda context_filter: context_filter.order)
