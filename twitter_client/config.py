"""
Configuration management for the Twitter client.
"""

from functools import lru_cache
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigValidationError

USERNAME_PATTERN = r"^[A-Za-z0-9_]{1,15}$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class TwitterIdentity(BaseModel):
    """Login identity tuple used by both session init and credential validation."""

    model_config = ConfigDict(frozen=True)

    username: str = Field(min_length=1)
    password: str = Field(default="", repr=False)
    email: str = ""
    two_factor_secret: str | None = Field(default=None, repr=False)

    @classmethod
    def from_secrets(cls, secrets: dict[str, Any]) -> "TwitterIdentity":
        """Build from a host secrets mapping (``twitter2faSecret`` naming)."""
        return cls(
            username=secrets.get("username") or "",
            password=secrets.get("password") or "",
            email=secrets.get("email") or "",
            two_factor_secret=secrets.get("twitter2faSecret") or secrets.get("two_factor_secret"),
        )


class TwitterSettings(BaseSettings):
    """Twitter client settings loaded from the host runtime or environment."""

    # Identity
    username: str = Field(alias="TWITTER_USERNAME", pattern=USERNAME_PATTERN)
    password: str = Field(alias="TWITTER_PASSWORD", min_length=1, repr=False)
    email: str = Field(alias="TWITTER_EMAIL", pattern=EMAIL_PATTERN)
    two_factor_secret: str | None = Field(default=None, alias="TWITTER_2FA_SECRET", repr=False)

    # Feature flags
    search_enabled: bool = Field(default=False, alias="TWITTER_SEARCH_ENABLE")
    spaces_enabled: bool = Field(default=False, alias="TWITTER_SPACES_ENABLE")
    dry_run: bool = Field(default=False, alias="TWITTER_DRY_RUN")

    # Session
    retry_limit: int = Field(default=5, ge=1, alias="TWITTER_RETRY_LIMIT")
    session_poll_interval: float = Field(default=1.0, gt=0, alias="TWITTER_SESSION_POLL_INTERVAL")

    # Interactions
    poll_interval: int = Field(default=120, ge=1, alias="TWITTER_POLL_INTERVAL")
    target_users: str = Field(default="", alias="TWITTER_TARGET_USERS")

    # Posting
    post_interval_min: int = Field(default=90, ge=1, alias="POST_INTERVAL_MIN")
    post_interval_max: int = Field(default=180, ge=1, alias="POST_INTERVAL_MAX")
    post_immediately: bool = Field(default=False, alias="POST_IMMEDIATELY")
    max_tweet_length: int = Field(default=280, ge=1, alias="MAX_TWEET_LENGTH")

    # Search
    search_interval_min: int = Field(default=60, ge=1, alias="TWITTER_SEARCH_INTERVAL_MIN")
    search_interval_max: int = Field(default=120, ge=1, alias="TWITTER_SEARCH_INTERVAL_MAX")

    # Spaces
    spaces_check_interval: int = Field(default=300, ge=1, alias="TWITTER_SPACES_CHECK_INTERVAL")
    stop_spaces_on_shutdown: bool = Field(default=False, alias="TWITTER_SPACES_STOP_ON_SHUTDOWN")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @model_validator(mode="after")
    def _check_intervals(self) -> "TwitterSettings":
        if self.post_interval_min > self.post_interval_max:
            raise ValueError("POST_INTERVAL_MIN must not exceed POST_INTERVAL_MAX")
        if self.search_interval_min > self.search_interval_max:
            raise ValueError("TWITTER_SEARCH_INTERVAL_MIN must not exceed TWITTER_SEARCH_INTERVAL_MAX")
        return self

    @property
    def identity(self) -> TwitterIdentity:
        return TwitterIdentity(
            username=self.username,
            password=self.password,
            email=self.email,
            two_factor_secret=self.two_factor_secret,
        )

    @property
    def target_user_list(self) -> list[str]:
        """``TWITTER_TARGET_USERS`` split on commas, ``@`` stripped."""
        return [u.strip().lstrip("@") for u in self.target_users.split(",") if u.strip()]


class SettingsSource(Protocol):
    def get_setting(self, key: str) -> Any: ...


def setting_names() -> list[str]:
    """All recognised option names (the field aliases)."""
    return [field.alias or name for name, field in TwitterSettings.model_fields.items()]


def validate_twitter_config(source: SettingsSource | None = None) -> TwitterSettings:
    """
    Resolve and validate settings.

    Values from ``source.get_setting`` win over the process environment;
    anything the source does not know falls back to env / ``.env``.

    Raises:
        ConfigValidationError: 配置缺失或不合法
    """
    overrides: dict[str, Any] = {}
    if source is not None:
        for name in setting_names():
            value = source.get_setting(name)
            if value is not None:
                overrides[name] = value

    try:
        return TwitterSettings(**overrides)
    except ValidationError as e:
        raise ConfigValidationError(
            f"Twitter configuration validation failed: {e.error_count()} error(s)",
            errors=[{"loc": err["loc"], "msg": err["msg"]} for err in e.errors()],
            cause=e,
        ) from e


@lru_cache
def get_settings() -> TwitterSettings:
    """Get cached settings instance (environment only)."""
    return validate_twitter_config()
