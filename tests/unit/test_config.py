"""Unit tests for AppSettings and sub-configs."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from config import (
    AppSettings,
    DatabaseSettings,
    DeliverySettings,
    EmailSettings,
    JWTSettings,
    TokenSettings,
)

_EMAIL_VARS = (
    "BREVO_API_KEY",
    "BREVO_SENDER_EMAIL",
    "BREVO_SENDER_NAME",
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_USERNAME",
    "SMTP_PASSWORD",
    "SKIP_EMAILS",
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def with_mongo(monkeypatch):
    """Set the required MONGODB_URI so AppSettings can be instantiated."""
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
    return monkeypatch


@pytest.fixture
def clean_email_env(monkeypatch):
    for var in _EMAIL_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


# ---------------------------------------------------------------------------
# DatabaseSettings
# ---------------------------------------------------------------------------


class TestDatabaseSettings:
    def test_loads_mongodb_uri(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        assert DatabaseSettings().mongodb_uri == "mongodb://localhost:27017/"

    def test_default_db_name(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        monkeypatch.delenv("DB_NAME", raising=False)
        assert DatabaseSettings().db_name == "rental"

    def test_missing_mongodb_uri_raises(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        with pytest.raises(PydanticValidationError):
            DatabaseSettings()


# ---------------------------------------------------------------------------
# JWTSettings
# ---------------------------------------------------------------------------


class TestJWTSettings:
    def test_defaults(self, monkeypatch):
        for var in ("JWT_ISSUER", "JWT_AUDIENCE", "ACCESS_TOKEN_TTL_SECONDS", "JWT_SECRET"):
            monkeypatch.delenv(var, raising=False)
        s = JWTSettings()
        assert s.jwt_issuer == "frental"
        assert s.jwt_audience == "frental.api"
        assert s.access_token_ttl_seconds == 604800
        assert s.jwt_secret == ""


# ---------------------------------------------------------------------------
# EmailSettings
# ---------------------------------------------------------------------------


class TestEmailSettings:
    def test_defaults(self, clean_email_env):
        s = EmailSettings()
        assert s.brevo_sender_name == "FRENTAL"
        assert s.smtp_host == "smtp.gmail.com"
        assert s.smtp_port == 587
        assert s.skip_emails is False

    def test_nothing_configured_by_default(self, clean_email_env):
        s = EmailSettings()
        assert s.brevo_configured is False
        assert s.smtp_configured is False

    @pytest.mark.parametrize(
        "api_key, sender, expected",
        [
            ("xkeysib-123", "noreply@frental.com", True),
            ("xkeysib-123", "", False),
            ("", "noreply@frental.com", False),
        ],
        ids=["complete", "no_sender", "no_key"],
    )
    def test_brevo_configured(self, clean_email_env, api_key, sender, expected):
        clean_email_env.setenv("BREVO_API_KEY", api_key)
        clean_email_env.setenv("BREVO_SENDER_EMAIL", sender)
        assert EmailSettings().brevo_configured is expected

    @pytest.mark.parametrize(
        "username, password, expected",
        [("mailer@gmail.com", "app-pass", True), ("mailer@gmail.com", "", False)],
        ids=["complete", "no_password"],
    )
    def test_smtp_configured(self, clean_email_env, username, password, expected):
        clean_email_env.setenv("SMTP_USERNAME", username)
        clean_email_env.setenv("SMTP_PASSWORD", password)
        assert EmailSettings().smtp_configured is expected

    @pytest.mark.parametrize(
        "raw, expected",
        [("true", True), ("1", True), ("false", False)],
        ids=["true", "one", "false"],
    )
    def test_skip_emails_parsed(self, clean_email_env, raw, expected):
        clean_email_env.setenv("SKIP_EMAILS", raw)
        assert EmailSettings().skip_emails is expected


# ---------------------------------------------------------------------------
# DeliverySettings / TokenSettings
# ---------------------------------------------------------------------------


def test_delivery_defaults(monkeypatch):
    for var in (
        "DELIVERY_MAX_RETRIES",
        "DELIVERY_RETRY_DELAY_SECONDS",
        "DELIVERY_SEND_TIMEOUT_SECONDS",
        "DELIVERY_SHUTDOWN_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(var, raising=False)
    s = DeliverySettings()
    assert s.delivery_max_retries == 3
    assert s.delivery_retry_delay_seconds == 2.0
    assert s.delivery_send_timeout_seconds == 10.0
    assert s.delivery_shutdown_timeout_seconds == 5.0


def test_delivery_overrides(monkeypatch):
    monkeypatch.setenv("DELIVERY_MAX_RETRIES", "5")
    monkeypatch.setenv("DELIVERY_RETRY_DELAY_SECONDS", "0.5")
    s = DeliverySettings()
    assert s.delivery_max_retries == 5
    assert s.delivery_retry_delay_seconds == 0.5


def test_token_defaults(monkeypatch):
    for var in (
        "VERIFY_TOKEN_TTL_HOURS",
        "RESET_TOKEN_TTL_HOURS",
        "MIN_RESEND_INTERVAL_SECONDS",
        "SHORT_CODE_LENGTH",
        "MAX_CODE_ATTEMPTS",
    ):
        monkeypatch.delenv(var, raising=False)
    s = TokenSettings()
    assert s.verify_token_ttl_hours == 24
    assert s.reset_token_ttl_hours == 1
    assert s.min_resend_interval_seconds == 60
    assert s.short_code_length == 6
    assert s.max_code_attempts == 5


# ---------------------------------------------------------------------------
# AppSettings
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "env, expected",
    [("production", True), ("development", False)],
    ids=["production", "development"],
)
def test_is_production(with_mongo, env, expected):
    with_mongo.setenv("ENV", env)
    assert AppSettings().is_production is expected


class TestAppSettings:
    def test_sub_configs_populated(self, with_mongo):
        s = AppSettings()
        for attr in ("db", "jwt", "email", "delivery", "tokens", "logging", "sentry"):
            assert getattr(s, attr) is not None, f"sub-config '{attr}' is None"

    def test_cors_origins_default(self, with_mongo):
        with_mongo.delenv("CORS_ORIGINS", raising=False)
        assert AppSettings().cors_origins == ["*"]

    def test_explicit_sub_config_kept(self, with_mongo):
        email = EmailSettings(skip_emails=True)
        assert AppSettings(email=email).email is email

    def test_app_name_default(self, with_mongo):
        with_mongo.delenv("APP_NAME", raising=False)
        assert AppSettings().app_name == "FRENTAL"
