"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.brevo import BrevoTransport
from infrastructure.email.renderer import EmailRenderer
from infrastructure.email.smtp import SmtpTransport
from infrastructure.http_client import HttpClient
from repositories.account_repository import AccountRepository
from routes.auth_routes import router as auth_router
from routes.health_routes import router as health_router
from services.account_service import AccountService
from services.delivery_orchestrator import DeliveryOrchestrator
from services.delivery_queue import DeliveryQueue
from services.notification_service import NotificationService
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def build_delivery_stack(
    settings: AppSettings, http_client: HttpClient
) -> tuple[DeliveryOrchestrator, DeliveryQueue, NotificationService]:
    """Wire transports → orchestrator → queue → notification service."""
    delivery = settings.delivery
    orchestrator = DeliveryOrchestrator(
        BrevoTransport(settings.email, http_client),
        SmtpTransport(settings.email, timeout=delivery.delivery_send_timeout_seconds),
        skip=settings.email.skip_emails,
        send_timeout=delivery.delivery_send_timeout_seconds,
    )
    queue = DeliveryQueue(
        orchestrator,
        max_retries=delivery.delivery_max_retries,
        retry_delay=delivery.delivery_retry_delay_seconds,
    )
    notifications = NotificationService(
        queue,
        EmailRenderer(app_name=settings.app_name),
        app_url=settings.app_url,
        verify_ttl_hours=settings.tokens.verify_token_ttl_hours,
        reset_ttl_hours=settings.tokens.reset_token_ttl_hours,
    )
    return orchestrator, queue, notifications


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(
        settings.logging.log_level, settings.logging.log_format, env=settings.env
    )

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        app.state.mongo_client = mongo_client
        app.state.db = mongo_client[settings.db.db_name]

        repository = AccountRepository(app.state.db)
        await repository.ensure_indexes()

        http_client = HttpClient(timeout=settings.delivery.delivery_send_timeout_seconds)
        orchestrator, queue, notifications = build_delivery_stack(settings, http_client)
        queue.start()

        app.state.http_client = http_client
        app.state.delivery_queue = queue
        app.state.notifications = notifications
        app.state.account_service = AccountService(
            repository, notifications, settings.tokens, settings.jwt
        )

        log.info(
            "email_configuration",
            brevo_configured=settings.email.brevo_configured,
            smtp_configured=settings.email.smtp_configured,
            skip_emails=settings.email.skip_emails,
            transports=orchestrator.transport_names,
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await queue.stop(timeout=settings.delivery.delivery_shutdown_timeout_seconds)
        await http_client.aclose()
        await mongo_client.close()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(auth_router)

    return app
