import os
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class QueueRoutingConfig(BaseModel):
    """Queue resolver defaults and rule thresholds."""

    default_queue: str = "default"
    debug_mode: bool = True

    long_running_threshold_seconds: int = Field(default=120, ge=0)
    bulk_threshold_seconds: int = Field(default=300, ge=0)

    review_tier_boost: int = Field(default=100, ge=0)
    long_running_boost: int = Field(default=50, ge=0)


class ContextLimitsConfig(BaseModel):
    """Token budgets used by the context filters."""

    default_max_context_tokens: int = Field(default=80000, ge=1)
    min_context_tokens: int = Field(default=8000, ge=1)
    min_section_tokens: int = Field(default=500, ge=0)
    max_files: int = Field(default=50, ge=1)
    tokens_per_char: float = Field(default=0.25, gt=0.0)


class ImpactAnalysisConfig(BaseModel):
    max_symbols: int = Field(default=25, ge=1)
    max_files: int = Field(default=20, ge=1)
    max_file_size: int = Field(default=50000, ge=1)
    search_limit_per_symbol: int = Field(default=50, ge=1)
    min_relevance_score: float = Field(default=0.3, ge=0.0, le=1.0)


class GuidelinesConfig(BaseModel):
    max_guidelines: int = Field(default=5, ge=0)
    max_file_size: int = Field(default=51200, ge=1)
    allowed_extensions: List[str] = Field(default_factory=lambda: ["md", "mdx"])


class GitHubConfig(BaseModel):
    api_url: str = "https://api.github.com"
    token: Optional[str] = None
    timeout_seconds: float = 30.0


class MessagesConfig(BaseModel):
    cache_ttl_seconds: int = Field(default=3600, ge=0)


class Settings(BaseSettings):
    app_name: str = "sentinel-review-core"

    env: str = "development"
    log_level: str = "INFO"

    GITHUB_TOKEN: str = os.getenv("GITHUB_TOKEN", "")

    queue: QueueRoutingConfig = Field(default_factory=QueueRoutingConfig)
    context: ContextLimitsConfig = Field(default_factory=ContextLimitsConfig)
    impact_analysis: ImpactAnalysisConfig = Field(default_factory=ImpactAnalysisConfig)
    guidelines: GuidelinesConfig = Field(default_factory=GuidelinesConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    messages: MessagesConfig = Field(default_factory=MessagesConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.env == "production"


def create_development_config() -> Settings:
    """Settings with debug routing enabled, used by tests and local runs."""
    config = Settings()
    config.queue.debug_mode = True
    return config


settings = Settings()
