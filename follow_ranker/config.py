"""
Application configuration using Pydantic settings.

Usage:
    from follow_ranker.config import get_settings
    settings = get_settings()

For constants, import from follow_ranker.constants:
    from follow_ranker.constants import GITHUB_API_BASE, SCORE_EPSILON
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from follow_ranker.constants import (
    DEFAULT_CACHE_DIR,
    DEFAULT_ENRICHMENT_CONCURRENCY,
    DEFAULT_PAGE_SIZE,
    DEFAULT_RELATIONS_TTL_SECONDS,
    DEFAULT_SCORE_STRATEGY,
    GITHUB_API_BASE,
    MAX_PAGE_SIZE,
    RELATIONS_CACHE_NAME,
    SCORE_EPSILON,
    USER_CACHE_NAME,
)
from follow_ranker.exceptions import MissingCredentialError


class Settings(BaseSettings):
    """
    Unified application settings loaded from environment variables and .env file.

    Required at runtime:
        - GITHUB_TOKEN (personal access token for the GitHub API)
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    app_name: str = "Follow Ranker"
    debug: bool = Field(default=False, validation_alias="DEBUG")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # GitHub API
    github_token: Optional[str] = Field(default=None, validation_alias="GITHUB_TOKEN")
    github_api_base: str = Field(default=GITHUB_API_BASE, validation_alias="GITHUB_API_BASE")
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, validation_alias="PAGE_SIZE")
    request_timeout: int = Field(default=30, ge=1, validation_alias="REQUEST_TIMEOUT")
    max_retries: int = Field(default=3, ge=1, validation_alias="MAX_RETRIES")
    max_concurrent_requests: int = Field(default=5, ge=1, validation_alias="MAX_CONCURRENT_REQUESTS")

    # Cache
    cache_dir: Path = Field(default=Path(DEFAULT_CACHE_DIR), validation_alias="FOLLOW_RANKER_CACHE_DIR")
    relations_ttl_seconds: int = Field(
        default=DEFAULT_RELATIONS_TTL_SECONDS, ge=0, validation_alias="RELATIONS_TTL_SECONDS"
    )

    # Enrichment / scoring
    enrichment_concurrency: int = Field(
        default=DEFAULT_ENRICHMENT_CONCURRENCY, ge=1, validation_alias="ENRICHMENT_CONCURRENCY"
    )
    score_strategy: str = Field(default=DEFAULT_SCORE_STRATEGY, validation_alias="SCORE_STRATEGY")
    score_epsilon: float = Field(default=SCORE_EPSILON, gt=0, validation_alias="SCORE_EPSILON")

    @field_validator("score_strategy")
    @classmethod
    def validate_score_strategy(cls, v: str) -> str:
        """Reject strategies that are not registered."""
        from follow_ranker.scoring import SCORING_STRATEGIES

        name = v.strip().lower()
        if name not in SCORING_STRATEGIES:
            raise ValueError(
                f"Unknown SCORE_STRATEGY '{v}'. Expected one of: {', '.join(sorted(SCORING_STRATEGIES))}"
            )
        return name

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def resolved_cache_dir(self) -> Path:
        """Cache directory with the user's home expanded."""
        return self.cache_dir.expanduser()

    @property
    def relations_cache_path(self) -> Path:
        return self.resolved_cache_dir / f"{RELATIONS_CACHE_NAME}.json"

    @property
    def user_cache_path(self) -> Path:
        return self.resolved_cache_dir / f"{USER_CACHE_NAME}.json"

    def require_token(self) -> str:
        """
        Return the GitHub token or fail.

        Raises:
            MissingCredentialError: If GITHUB_TOKEN is unset or blank
        """
        if not self.github_token or not self.github_token.strip():
            raise MissingCredentialError("GITHUB_TOKEN")
        return self.github_token.strip()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


__all__ = ["Settings", "get_settings"]
