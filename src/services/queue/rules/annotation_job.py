from src.models.schemas.queue_routing import JobContext, Queue, QueueRuleResult
from src.services.queue.rules.base import QueueRule

ANNOTATION_JOBS = frozenset({"PostRunAnnotations"})


class AnnotationJobRule(QueueRule):
    name = "annotation_job"

    def applies(self, context: JobContext) -> bool:
        return context.job_name in ANNOTATION_JOBS

    def evaluate(self, context: JobContext) -> QueueRuleResult:
        return QueueRuleResult.force(Queue.ANNOTATIONS, "Annotation posting job")
