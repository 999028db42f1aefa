from typing import Iterable

from src.models.schemas.queue_routing import JobContext, Queue, QueueRuleResult
from src.services.queue.rules.base import QueueRule

BRIEFING_JOBS = (
    "ProcessBriefingGeneration",
    "GenerateScheduledBriefings",
    "DeliverBriefing",
    "RenderBriefingPdf",
)

COMMAND_JOBS = ("ExecuteCommandRun",)


class DedicatedLaneRule(QueueRule):
    """
    Force a fixed set of jobs onto one lane.

    Jobs are matched on their short name so that ``app.jobs.DeliverBriefing``
    and ``App\\Jobs\\Briefings\\DeliverBriefing`` are treated alike.
    """

    def __init__(self, name: str, queue: Queue, job_names: Iterable[str]):
        self.name = name
        self.queue = queue
        self.job_names = frozenset(job_names)

    @classmethod
    def briefings(cls) -> "DedicatedLaneRule":
        return cls("briefing_job", Queue.BRIEFINGS_DEFAULT, BRIEFING_JOBS)

    @classmethod
    def commands(cls) -> "DedicatedLaneRule":
        return cls("command_job", Queue.COMMANDS, COMMAND_JOBS)

    def applies(self, context: JobContext) -> bool:
        return context.job_name in self.job_names

    def evaluate(self, context: JobContext) -> QueueRuleResult:
        return QueueRuleResult.force(self.queue, f"{context.job_name} runs on {self.queue.label}")
