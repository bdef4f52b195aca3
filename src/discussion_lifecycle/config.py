"""Configuration settings for discussion lifecycle automation."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RateLimitConfig(BaseModel):
    """Configuration for rate limit monitoring.

    Controls thresholds for health status determination. The monitor only
    observes; nothing in the engine throttles on these values.
    """

    healthy_threshold_pct: float = Field(
        default=50.0,
        ge=0.0,
        le=100.0,
        description="% remaining above which status is HEALTHY",
    )
    warning_threshold_pct: float = Field(
        default=20.0,
        ge=0.0,
        le=100.0,
        description="% remaining above which status is WARNING (below healthy)",
    )
    critical_threshold_pct: float = Field(
        default=5.0,
        ge=0.0,
        le=100.0,
        description="% remaining above which status is CRITICAL (below warning)",
    )
    track_from_headers: bool = Field(
        default=True,
        description="Passively track limits from response headers",
    )


class PaginationConfig(BaseModel):
    """Configuration for cursor pagination."""

    page_size: int = Field(
        default=50,
        ge=1,
        le=100,
        description="Nodes requested per page (GitHub caps connections at 100)",
    )
    max_pages: int = Field(
        default=100,
        ge=1,
        description="Safety bound on pages fetched by a single query",
    )


class LifecycleConfig(BaseModel):
    """Configuration for the two-stage dormancy policy.

    A discussion is labelled inactive after ``dormant_after_days`` without
    activity, and closed once it has stayed labelled and untouched for a
    further ``close_after_days``.
    """

    bot_login: str = Field(
        default="github-actions",
        description="Login of the automation identity posting comments",
    )
    inactive_label: str = Field(
        default="inactive",
        description="Governed label marking dormant discussions",
    )
    question_label: str = Field(
        default="Question",
        description="Governed label marking questions",
    )
    dormant_after_days: int = Field(
        default=60,
        ge=1,
        description="Days without activity before a discussion is labelled inactive",
    )
    close_after_days: int = Field(
        default=30,
        ge=1,
        description="Days a discussion stays labelled inactive before it is closed",
    )
    unanswered_max_age_days: int = Field(
        default=30,
        ge=1,
        description="Window for reporting unanswered questions",
    )
    inactive_comment: str = Field(
        default=(
            "This discussion has been automatically marked as inactive because it "
            "has not had recent activity. It will be closed if no further activity "
            "occurs. Thank you for your contributions."
        ),
        description="Comment posted alongside the inactivity label",
    )
    close_comment: str = Field(
        default=(
            "This discussion has been automatically closed because it was marked as "
            "inactive and had no further activity."
        ),
        description="Comment posted before closing an inactive discussion",
    )


class IncidentConfig(BaseModel):
    """Configuration for incident discussions."""

    category: str = Field(
        default="Incidents",
        description="Discussion category holding incident discussions",
    )
    open_label: str = Field(default="incident: open")
    update_label: str = Field(default="incident: update")
    resolved_label: str = Field(default="incident: resolved")
    closed_label: str = Field(default="incident: closed")
    resolved_comment: str = Field(
        default="This incident has been resolved. Thank you for your patience.",
        description="Status summary posted when an incident is resolved",
    )
    closed_comment: str = Field(
        default="This incident is now closed. Please open a new discussion for related issues.",
        description="Status summary posted when an incident is closed",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # GitHub API
    # --------------------------------------------------------------------------
    github_token: str = Field(
        default="",
        description="GitHub token used to sign GraphQL requests",
    )
    github_repository: str = Field(
        default="",
        description="Repository owning the discussions, in owner/name form",
    )
    graphql_base_url: str = Field(
        default="https://api.github.com",
        description="API base URL (the /graphql endpoint is appended)",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Bounded wait for a single GraphQL request",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # Nested Configuration
    # --------------------------------------------------------------------------
    rate_limit: RateLimitConfig = Field(
        default_factory=RateLimitConfig,
        description="Rate limit monitoring configuration",
    )
    pagination: PaginationConfig = Field(
        default_factory=PaginationConfig,
        description="Cursor pagination configuration",
    )
    lifecycle: LifecycleConfig = Field(
        default_factory=LifecycleConfig,
        description="Dormancy policy configuration",
    )
    incident: IncidentConfig = Field(
        default_factory=IncidentConfig,
        description="Incident discussion configuration",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )

    @field_validator("github_repository")
    @classmethod
    def _validate_repository(cls, value: str) -> str:
        if value and value.count("/") != 1:
            raise ValueError("github_repository must be in owner/name form")
        return value

    @property
    def repository_owner(self) -> str:
        """Owner part of ``github_repository``."""
        return self.github_repository.partition("/")[0]

    @property
    def repository_name(self) -> str:
        """Name part of ``github_repository``."""
        return self.github_repository.partition("/")[2]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
