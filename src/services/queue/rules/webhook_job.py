from src.models.schemas.queue_routing import JobContext, Queue, QueueRuleResult
from src.services.queue.rules.base import QueueRule


class WebhookJobRule(QueueRule):
    """Jobs created from inbound webhooks run on the webhooks lane."""

    name = "webhook_job"

    def applies(self, context: JobContext) -> bool:
        return context.get_meta("source") == "webhook"

    def evaluate(self, context: JobContext) -> QueueRuleResult:
        return QueueRuleResult.force(Queue.WEBHOOKS, "Webhook processing job")
