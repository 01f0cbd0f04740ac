"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

DEFAULT_NETGSM_API_URL = "https://api.netgsm.com.tr/sms/rest/v2/send"
DEFAULT_TWILIO_API_BASE_URL = "https://api.twilio.com/2010-04-01"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding=ENV_FILE_ENCODING,
        extra="ignore",
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used to stamp event and notification timestamps",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    notification_batch_size: int = Field(
        default=10,
        description="Maximum number of events processed per scheduler invocation",
        gt=0,
    )
    notification_max_retries: int = Field(
        default=3,
        description="Events whose retry count reaches this ceiling are never picked again",
        gt=0,
    )
    notification_retry_failed_events: bool = Field(
        default=True,
        description="Whether failed events below the retry ceiling are eligible for new batches",
    )
    notification_max_concurrent_events: int = Field(
        default=10,
        description="Upper bound of events processed concurrently inside a batch",
        gt=0,
    )
    notification_occupancy_threshold: float = Field(
        default=90,
        description="Occupancy percentage from which warehouse owners are alerted",
        ge=0,
        le=100,
    )
    notification_channels: list[str] = Field(
        default_factory=lambda: ["email", "push"],
        description="Channels requested for every notification built from an event",
    )
    notification_persist_records: bool = Field(
        default=True,
        description="Persist an in-app notification row for every dispatch",
    )
    provider_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout applied to each channel provider call",
        gt=0,
    )

    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending transactional emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of transactional messages",
        min_length=3,
    )
    sendgrid_sender_name: str = Field(
        default="TSmart Warehouse",
        description="Display name attached to the sender address",
    )

    netgsm_username: str | None = Field(default=None, description="NetGSM API user")
    netgsm_password: str | None = Field(default=None, description="NetGSM API password")
    netgsm_header: str = Field(
        default="TALYA SMART", description="Registered NetGSM message header"
    )
    netgsm_api_url: str = Field(default=DEFAULT_NETGSM_API_URL)

    twilio_account_sid: str | None = Field(default=None)
    twilio_auth_token: str | None = Field(default=None)
    twilio_phone_number: str | None = Field(
        default=None, description="Sender number used for Twilio messages"
    )
    twilio_api_base_url: str = Field(default=DEFAULT_TWILIO_API_BASE_URL)

    push_gateway_url: str | None = Field(
        default=None,
        description="Expo-compatible push gateway endpoint; push is disabled when unset",
    )
    push_gateway_access_token: str | None = Field(default=None)

    cron_secret: str | None = Field(
        default=None,
        description="Shared secret expected in the X-Cron-Secret header of trigger requests",
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self

    @model_validator(mode="after")
    def _validate_netgsm_pair(self) -> "Settings":
        if bool(self.netgsm_username) ^ bool(self.netgsm_password):
            raise ValueError(
                "NETGSM_USERNAME and NETGSM_PASSWORD must both be provided to enable NetGSM"
            )
        return self

    @property
    def netgsm_configured(self) -> bool:
        return bool(self.netgsm_username and self.netgsm_password)

    @property
    def twilio_configured(self) -> bool:
        return bool(
            self.twilio_account_sid and self.twilio_auth_token and self.twilio_phone_number
        )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
