from .exceptions import InvalidRuleResultError, QueueRoutingError, UnknownQueueError
from .factory import QueueResolverFactory
from .resolver import QueueResolver, parse_queue

__all__ = [
    "InvalidRuleResultError",
    "QueueResolver",
    "QueueResolverFactory",
    "QueueRoutingError",
    "UnknownQueueError",
    "parse_queue",
]
