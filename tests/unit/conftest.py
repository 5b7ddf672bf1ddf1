"""
Unit test configuration.

A developer .env usually carries real BREVO_API_KEY / SMTP_* credentials and
often SKIP_EMAILS=true. Read by pydantic-settings, those would flip
brevo_configured / smtp_configured and skip mode underneath the config and
transport tests. dotenv is patched out so each test sets its environment
with monkeypatch.setenv() or passes settings explicitly.
"""

import pytest


@pytest.fixture(autouse=True)
def ignore_local_env_file(monkeypatch):
    """Make every settings class see an empty .env file."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})
