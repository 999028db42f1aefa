from .annotation_job import AnnotationJobRule
from .base import QueueRule
from .dedicated_lane import DedicatedLaneRule
from .long_running import LongRunningJobRule
from .review_tier import ReviewJobTierRule
from .system_job import SystemJobRule
from .webhook_job import WebhookJobRule

__all__ = [
    "AnnotationJobRule",
    "DedicatedLaneRule",
    "LongRunningJobRule",
    "QueueRule",
    "ReviewJobTierRule",
    "SystemJobRule",
    "WebhookJobRule",
]
