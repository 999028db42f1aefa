from .cache import InMemoryTTLCache, MessageCache
from .message_service import Greeting, MessageCatalog, MessageCatalogError, MessageService

__all__ = [
    "Greeting",
    "InMemoryTTLCache",
    "MessageCache",
    "MessageCatalog",
    "MessageCatalogError",
    "MessageService",
]
