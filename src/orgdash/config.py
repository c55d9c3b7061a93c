"""Console configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import AnyHttpUrl, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from orgdash.core.constants import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    MAX_PAGE_SIZE,
    NEW_ORGANIZATION_WINDOW_DAYS,
)


class Settings(BaseSettings):
    """Console settings loaded from ``ORGDASH_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ORGDASH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    environment: str = "development"  # development, staging, production

    # API
    graphql_url: AnyHttpUrl = AnyHttpUrl("http://localhost:4000/graphql")
    api_token: str | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS

    # Organizations
    page_size: int = DEFAULT_PAGE_SIZE
    new_org_window_days: int = NEW_ORGANIZATION_WINDOW_DAYS
    refetch_after_membership_change: bool = False

    # Observability
    log_level: str = "INFO"

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        """Validate that the organization page size is usable.

        Args:
            v: The page size value

        Returns:
            The validated page size

        Raises:
            ValueError: If the page size is not positive or exceeds the maximum
        """
        if v < 1 or v > MAX_PAGE_SIZE:
            raise ValueError(f"PAGE_SIZE must be between 1 and {MAX_PAGE_SIZE}")
        return v

    @field_validator("request_timeout", "new_org_window_days")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Reject zero or negative durations."""
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case the log level name."""
        return v.upper()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
