"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

Provider credentials are all optional: a transport whose credentials are
missing reports ConfigurationMissing at send time and the orchestrator moves
on to the next one, so the service always boots.
"""

from __future__ import annotations

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "rental"


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_secret: str = ""
    jwt_issuer: str = "frental"
    jwt_audience: str = "frental.api"
    access_token_ttl_seconds: int = 604800


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Primary: Brevo transactional API
    brevo_api_key: str = ""
    brevo_sender_email: str = ""
    brevo_sender_name: str = "FRENTAL"

    # Fallback: direct SMTP submission
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_start_tls: bool = True

    # Simulate every send (non-production environments)
    skip_emails: bool = False

    @property
    def brevo_configured(self) -> bool:
        return bool(self.brevo_api_key and self.brevo_sender_email)

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_username and self.smtp_password)


class DeliverySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    delivery_max_retries: int = 3
    delivery_retry_delay_seconds: float = 2.0
    delivery_send_timeout_seconds: float = 10.0
    delivery_shutdown_timeout_seconds: float = 5.0


class TokenSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    verify_token_ttl_hours: int = 24
    reset_token_ttl_hours: int = 1
    min_resend_interval_seconds: int = 60
    short_code_length: int = 6
    max_code_attempts: int = 5


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: str = "development"
    app_name: str = "FRENTAL"
    app_url: str = "https://frental.app"

    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    jwt: Optional[JWTSettings] = None
    email: Optional[EmailSettings] = None
    delivery: Optional[DeliverySettings] = None
    tokens: Optional[TokenSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.db is None:
            self.db = DatabaseSettings()
        if self.jwt is None:
            self.jwt = JWTSettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.delivery is None:
            self.delivery = DeliverySettings()
        if self.tokens is None:
            self.tokens = TokenSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()
        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
