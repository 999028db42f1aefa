"""
Queue Models

Execution lanes a job can be dispatched to, with their routing metadata.

Lower base priority values are processed first. Lanes are grouped as:
- System operations (critical internal tasks)
- Webhooks (external event intake)
- Reviews (AI code review execution, tier based)
- Briefings, commands and post-processing
- General workloads (sync, default, code indexing)
- Long-running and bulk tasks
"""

from enum import Enum
from typing import Dict, List


class Queue(str, Enum):
    """Closed set of execution lanes. Declaration order is the tie-break order."""

    # System & critical
    SYSTEM = "system"
    WEBHOOKS = "webhooks"

    # Reviews, tier based
    REVIEWS_ENTERPRISE = "reviews-enterprise"
    REVIEWS_PAID = "reviews-paid"
    REVIEWS_DEFAULT = "reviews-default"

    # Briefings and commands
    BRIEFINGS_DEFAULT = "briefings-default"
    COMMANDS = "commands"

    # Post-processing
    ANNOTATIONS = "annotations"
    NOTIFICATIONS = "notifications"

    # General
    SYNC = "sync"
    DEFAULT = "default"
    CODE_INDEXING = "code-indexing"

    # Long-running & bulk
    LONG_RUNNING = "long-running"
    BULK = "bulk"

    @property
    def priority(self) -> int:
        """Base priority; lower values are processed first."""
        return _PRIORITIES[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def timeout(self) -> int:
        """Job timeout in seconds for this lane."""
        return _TIMEOUTS[self]

    @property
    def tries(self) -> int:
        """Maximum attempts for jobs on this lane."""
        return _TRIES[self]

    def is_review_queue(self) -> bool:
        return self in _REVIEW_QUEUES

    def is_high_priority(self) -> bool:
        return self.priority <= 10

    def is_long_running(self) -> bool:
        return self in (Queue.LONG_RUNNING, Queue.BULK)

    @classmethod
    def by_priority(cls) -> List["Queue"]:
        """All queues sorted by base priority (most urgent first)."""
        return sorted(cls, key=lambda queue: queue.priority)

    @classmethod
    def all_names(cls) -> List[str]:
        """Queue names in priority order, as a worker pool would listen on them."""
        return [queue.value for queue in cls.by_priority()]

    @classmethod
    def review_queue_for_tier(cls, tier: str) -> "Queue":
        """Map a workspace tier to its review lane."""
        return _TIER_REVIEW_QUEUES.get((tier or "").lower(), cls.REVIEWS_DEFAULT)


_PRIORITIES: Dict[Queue, int] = {
    Queue.SYSTEM: 1,
    Queue.WEBHOOKS: 5,
    Queue.REVIEWS_ENTERPRISE: 20,
    Queue.REVIEWS_PAID: 30,
    Queue.REVIEWS_DEFAULT: 40,
    Queue.BRIEFINGS_DEFAULT: 45,
    Queue.COMMANDS: 48,
    Queue.ANNOTATIONS: 50,
    Queue.NOTIFICATIONS: 55,
    Queue.SYNC: 70,
    Queue.DEFAULT: 80,
    Queue.CODE_INDEXING: 85,
    Queue.LONG_RUNNING: 90,
    Queue.BULK: 100,
}

_LABELS: Dict[Queue, str] = {
    Queue.SYSTEM: "System",
    Queue.WEBHOOKS: "Webhooks",
    Queue.REVIEWS_ENTERPRISE: "Reviews (Enterprise)",
    Queue.REVIEWS_PAID: "Reviews (Paid)",
    Queue.REVIEWS_DEFAULT: "Reviews (Default)",
    Queue.BRIEFINGS_DEFAULT: "Briefings",
    Queue.COMMANDS: "Commands",
    Queue.ANNOTATIONS: "Annotations",
    Queue.NOTIFICATIONS: "Notifications",
    Queue.SYNC: "Sync",
    Queue.DEFAULT: "Default",
    Queue.CODE_INDEXING: "Code Indexing",
    Queue.LONG_RUNNING: "Long Running",
    Queue.BULK: "Bulk Operations",
}

_TIMEOUTS: Dict[Queue, int] = {
    Queue.SYSTEM: 60,
    Queue.WEBHOOKS: 30,
    Queue.REVIEWS_ENTERPRISE: 300,
    Queue.REVIEWS_PAID: 300,
    Queue.REVIEWS_DEFAULT: 300,
    Queue.BRIEFINGS_DEFAULT: 300,
    Queue.COMMANDS: 300,
    Queue.ANNOTATIONS: 60,
    Queue.NOTIFICATIONS: 30,
    Queue.SYNC: 120,
    Queue.DEFAULT: 60,
    Queue.CODE_INDEXING: 300,
    Queue.LONG_RUNNING: 600,
    Queue.BULK: 900,
}

_TRIES: Dict[Queue, int] = {
    Queue.SYSTEM: 3,
    Queue.WEBHOOKS: 5,
    Queue.REVIEWS_ENTERPRISE: 3,
    Queue.REVIEWS_PAID: 3,
    Queue.REVIEWS_DEFAULT: 3,
    Queue.BRIEFINGS_DEFAULT: 3,
    Queue.COMMANDS: 2,
    Queue.ANNOTATIONS: 3,
    Queue.NOTIFICATIONS: 3,
    Queue.SYNC: 3,
    Queue.DEFAULT: 3,
    Queue.CODE_INDEXING: 2,
    Queue.LONG_RUNNING: 2,
    Queue.BULK: 2,
}

_REVIEW_QUEUES = frozenset({
    Queue.REVIEWS_ENTERPRISE,
    Queue.REVIEWS_PAID,
    Queue.REVIEWS_DEFAULT,
})

_TIER_REVIEW_QUEUES: Dict[str, Queue] = {
    "enterprise": Queue.REVIEWS_ENTERPRISE,
    "sanctum": Queue.REVIEWS_ENTERPRISE,
    "paid": Queue.REVIEWS_PAID,
    "pro": Queue.REVIEWS_PAID,
    "team": Queue.REVIEWS_PAID,
    "illuminate": Queue.REVIEWS_PAID,
}
