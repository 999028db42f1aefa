from typing import Optional

from src.core.config import Settings, settings
from src.services.queue.resolver import QueueResolver
from src.services.queue.rules import (
    AnnotationJobRule,
    DedicatedLaneRule,
    LongRunningJobRule,
    ReviewJobTierRule,
    SystemJobRule,
    WebhookJobRule,
)


class QueueResolverFactory:
    """Builds the resolver used by job dispatch."""

    @staticmethod
    def create_default(config: Optional[Settings] = None) -> QueueResolver:
        """
        Resolver with the standard rule set, in evaluation order:
        system, webhook, annotation, briefing, command, review tier, long running.
        """
        config = config or settings
        queue_config = config.queue

        rules = [
            SystemJobRule(),
            WebhookJobRule(),
            AnnotationJobRule(),
            DedicatedLaneRule.briefings(),
            DedicatedLaneRule.commands(),
            ReviewJobTierRule(boost=queue_config.review_tier_boost),
            LongRunningJobRule(
                long_running_threshold=queue_config.long_running_threshold_seconds,
                bulk_threshold=queue_config.bulk_threshold_seconds,
                boost=queue_config.long_running_boost,
            ),
        ]

        return QueueResolver(
            rules=rules,
            default_queue=queue_config.default_queue,
            debug_mode=queue_config.debug_mode and not config.is_production,
        )
