from src.core.config import settings
from src.models.schemas.queue_routing import JobContext, Queue, QueueRuleResult
from src.services.queue.rules.base import QueueRule

REVIEW_JOBS = frozenset({"ExecuteReviewRun"})


class ReviewJobTierRule(QueueRule):
    """
    Boost the review lane that matches the workspace tier.

    The enterprise and paid lanes are only used when the workspace has the
    priority queue feature (``metadata.priority_queue``); everyone else shares
    the default review lane.
    """

    name = "review_job_tier"

    def __init__(self, boost: int = None):
        self.boost = settings.queue.review_tier_boost if boost is None else boost

    def applies(self, context: JobContext) -> bool:
        return context.job_name in REVIEW_JOBS

    def evaluate(self, context: JobContext) -> QueueRuleResult:
        if context.get_meta("priority_queue", False):
            queue = Queue.review_queue_for_tier(context.tier)
        else:
            queue = Queue.REVIEWS_DEFAULT

        return QueueRuleResult.boost(
            queue,
            self.boost,
            f"Review job for tier '{context.tier or 'none'}'",
        )
