from .job_context import JobContext
from .queue import Queue
from .resolution import QueueResolution, RuleTraceEntry
from .rule_result import QueueRuleResult, RuleResultKind

__all__ = [
    "JobContext",
    "Queue",
    "QueueResolution",
    "QueueRuleResult",
    "RuleResultKind",
    "RuleTraceEntry",
]
