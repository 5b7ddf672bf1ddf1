"""Jinja2 rendering of notification emails, one template per purpose."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from schemas.models.delivery import DeliveryPurpose

_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)

_TEMPLATES = {
    DeliveryPurpose.VERIFICATION: ("verification.html", "Verify Your Email - {app_name}"),
    DeliveryPurpose.PASSWORD_RESET: ("password_reset.html", "Reset Your Password - {app_name}"),
    DeliveryPurpose.PASSWORD_CHANGED: ("password_changed.html", "Password Changed - {app_name}"),
}


class EmailRenderer:
    def __init__(
        self,
        app_name: str = "FRENTAL",
        support_email: str = "support@frental.com",
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._app_name = app_name
        self._support_email = support_email
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def render(self, purpose: DeliveryPurpose, **context: Any) -> tuple[str, str]:
        """Return ``(subject, html_body)`` for *purpose*."""
        template_name, subject = _TEMPLATES[purpose]
        template = self._jinja.get_template(template_name)
        html_body = template.render(
            app_name=self._app_name,
            support_email=self._support_email,
            year=datetime.now(timezone.utc).year,
            **context,
        )
        return subject.format(app_name=self._app_name), html_body
