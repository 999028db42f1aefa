"""
Message Service

Friendly messages Sentinel posts on pull requests: greetings, branding
footers and the standard "review skipped/failed" comments.

The message catalog lives in ``src/resources/messages/greetings.json`` and is
cached through an injected ``MessageCache``. A cached catalog that no longer
has the expected structure is discarded and reloaded from the resource.
"""

import json
import random
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError

from src.core.config import settings
from src.services.messages.cache import InMemoryTTLCache, MessageCache
from src.utils.logging import get_logger

logger = get_logger(__name__)

CACHE_KEY = "sentinel:messages"
DEFAULT_MESSAGES_PATH = Path(__file__).resolve().parents[2] / "resources" / "messages" / "greetings.json"


class Greeting(BaseModel):
    emoji: str
    message: str = Field(..., min_length=1)


class MessageCatalog(BaseModel):
    greetings: List[Greeting] = Field(..., min_length=1)
    branding: List[str] = Field(..., min_length=1)


class MessageCatalogError(Exception):
    """Raised when the bundled message resource is missing or malformed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Invalid message catalog {path}: {reason}")


class MessageService:
    def __init__(
        self,
        cache: Optional[MessageCache] = None,
        messages_path: Optional[Path] = None,
        ttl_seconds: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ):
        self.cache = cache if cache is not None else InMemoryTTLCache()
        self.messages_path = Path(messages_path) if messages_path else DEFAULT_MESSAGES_PATH
        self.ttl_seconds = settings.messages.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._rng = rng or random.Random()

    def get_random_greeting(self) -> Greeting:
        return self._rng.choice(self.load_messages().greetings)

    def get_random_branding(self) -> str:
        return self._rng.choice(self.load_messages().branding)

    def build_greeting_comment(self) -> str:
        greeting = self.get_random_greeting()
        return f"{greeting.emoji} {greeting.message}\n\n---\n<sub>{self.get_random_branding()}</sub>"

    def build_review_sign_off(self, run_url: str) -> str:
        return (
            "\n---\n"
            f"📊 [View full analysis]({run_url})\n\n"
            f"<sub>{self.get_random_branding()}</sub>"
        )

    def build_config_error_comment(self, error: str) -> str:
        return (
            "⚠️ **Sentinel Configuration Error**\n\n"
            "Your `.sentinel/config.yaml` file contains an error:\n\n"
            f"```\n{error}\n```\n\n"
            "Review has been skipped until this is resolved. "
            "Please fix the configuration and push again.\n\n"
            f"---\n<sub>{self.get_random_branding()}</sub>"
        )

    def build_run_failed_comment(self, error_type: str) -> str:
        return (
            "❌ **Review Failed**\n\n"
            "Sentinel encountered an error while reviewing this pull request.\n\n"
            f"**Error Type:** `{error_type}`\n\n"
            "You can try pushing a new commit to trigger a new review.\n\n"
            f"---\n<sub>{self.get_random_branding()}</sub>"
        )

    def build_plan_limit_reached_comment(self, message: Optional[str] = None) -> str:
        details = message or "Your current plan has reached its limit."
        return (
            "⚠️ **Review Skipped - Plan Limit Reached**\n\n"
            f"{details}\n\n"
            "Upgrade your plan in the Sentinel dashboard to continue running reviews.\n\n"
            f"---\n<sub>{self.get_random_branding()}</sub>"
        )

    def load_messages(self) -> MessageCatalog:
        """Cached catalog, reloading from the resource when missing or invalid."""
        cached = self.cache.get(CACHE_KEY)
        if cached is not None:
            catalog = self._validate(cached)
            if catalog is not None:
                return catalog
            logger.warning("Cached message catalog is invalid, reloading from resource")
            self.cache.forget(CACHE_KEY)

        catalog = self._read_resource()
        self.cache.put(CACHE_KEY, catalog.model_dump(), self.ttl_seconds)
        return catalog

    @staticmethod
    def _validate(data: Any) -> Optional[MessageCatalog]:
        try:
            return MessageCatalog.model_validate(data)
        except ValidationError:
            return None

    def _read_resource(self) -> MessageCatalog:
        try:
            data = json.loads(self.messages_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise MessageCatalogError(self.messages_path, str(e)) from e

        try:
            return MessageCatalog.model_validate(data)
        except ValidationError as e:
            raise MessageCatalogError(self.messages_path, str(e)) from e
