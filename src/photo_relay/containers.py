"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from photo_relay.adapters.http_fetcher import HttpxResourceFetcher
from photo_relay.adapters.smtp_mailer import SmtpMailer
from photo_relay.adapters.telegram_client import (
    HttpxTelegramClient,
    TelegramClient,
)
from photo_relay.adapters.telegram_file_client import (
    HttpxTelegramFileClient,
    TelegramFileClient,
)
from photo_relay.config import Settings, parse_ttl
from photo_relay.services.commands import StartCommandHandler
from photo_relay.services.delivery import EmailDeliveryService
from photo_relay.services.dispatcher import UpdateDispatcher
from photo_relay.services.photo_history import InMemoryPhotoHistory
from photo_relay.services.session_store import InMemorySessionStore
from photo_relay.services.uploads import UploadCoordinator

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    telegram_client: TelegramClient
    telegram_file_client: TelegramFileClient
    session_store: InMemorySessionStore
    photo_history: InMemoryPhotoHistory
    upload_coordinator: UploadCoordinator
    dispatcher: UpdateDispatcher
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    session_store = InMemorySessionStore(
        ttl_seconds=parse_ttl(resolved_settings.session_ttl_seconds)
    )
    photo_history = InMemoryPhotoHistory()
    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
    telegram_file_client = HttpxTelegramFileClient.create(
        resolved_settings.telegram_bot_token
    )
    fetcher: HttpxResourceFetcher | None = None
    delivery_service: EmailDeliveryService | None = None
    recipient = resolved_settings.resolved_email_recipient
    if resolved_settings.email_enabled and recipient:
        fetcher = HttpxResourceFetcher.create()
        delivery_service = EmailDeliveryService(
            fetcher=fetcher,
            mailer=SmtpMailer(
                host=resolved_settings.smtp_host,
                port=resolved_settings.smtp_port,
                username=resolved_settings.gmail_user or "",
                password=resolved_settings.gmail_pass or "",
            ),
            recipient=recipient,
        )
    else:
        logger.warning("Gmail credentials not set - email delivery disabled")
    upload_coordinator = UploadCoordinator(
        session_store=session_store,
        photo_history=photo_history,
        photo_sender=delivery_service,
    )
    dispatcher = UpdateDispatcher(
        telegram_client=telegram_client,
        telegram_file_client=telegram_file_client,
        coordinator=upload_coordinator,
        start_command_handler=StartCommandHandler(
            telegram_client=telegram_client,
            email_enabled=upload_coordinator.delivery_enabled,
        ),
        environment=resolved_settings.environment,
    )

    async def close_resources() -> None:
        await telegram_client.close()
        await telegram_file_client.close()
        if fetcher is not None:
            await fetcher.close()

    return AppContainer(
        settings=resolved_settings,
        telegram_client=telegram_client,
        telegram_file_client=telegram_file_client,
        session_store=session_store,
        photo_history=photo_history,
        upload_coordinator=upload_coordinator,
        dispatcher=dispatcher,
        close_resources=close_resources,
    )
