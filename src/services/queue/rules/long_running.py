from src.core.config import settings
from src.models.schemas.queue_routing import JobContext, Queue, QueueRuleResult
from src.services.queue.rules.base import QueueRule


class LongRunningJobRule(QueueRule):
    """Move slow jobs off the general lanes based on their duration estimate."""

    name = "long_running_job"

    def __init__(
        self,
        long_running_threshold: int = None,
        bulk_threshold: int = None,
        boost: int = None,
    ):
        config = settings.queue
        self.long_running_threshold = (
            config.long_running_threshold_seconds
            if long_running_threshold is None else long_running_threshold
        )
        self.bulk_threshold = config.bulk_threshold_seconds if bulk_threshold is None else bulk_threshold
        self.boost = config.long_running_boost if boost is None else boost

    def applies(self, context: JobContext) -> bool:
        return context.estimated_duration_seconds is not None

    def evaluate(self, context: JobContext) -> QueueRuleResult:
        duration = context.estimated_duration_seconds

        if duration > self.bulk_threshold:
            return QueueRuleResult.boost(Queue.BULK, self.boost, f"Estimated {duration}s exceeds bulk threshold")

        if context.is_long_running(self.long_running_threshold):
            return QueueRuleResult.boost(
                Queue.LONG_RUNNING,
                self.boost,
                f"Estimated {duration}s exceeds long-running threshold",
            )

        return QueueRuleResult.skip("Short job")
