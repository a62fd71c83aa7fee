"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from photo_relay.adapters.telegram_client import TelegramClient
from photo_relay.adapters.telegram_file_client import TelegramFile, TelegramFileClient
from photo_relay.config import Settings
from photo_relay.containers import AppContainer
from photo_relay.domain.uploads import DeliveryReceipt
from photo_relay.services.commands import StartCommandHandler
from photo_relay.services.delivery import MailAttachment, Mailer, ResourceFetcher
from photo_relay.services.dispatcher import UpdateDispatcher
from photo_relay.services.photo_history import InMemoryPhotoHistory
from photo_relay.services.session_store import InMemorySessionStore
from photo_relay.services.uploads import PhotoSender, UploadCoordinator


@dataclass
class FakeTelegramClient(TelegramClient):
    """Fake Telegram client that records calls."""

    messages: list[tuple[int, str]] = field(default_factory=list)
    markups: list[dict | None] = field(default_factory=list)
    callbacks: list[tuple[str, str | None]] = field(default_factory=list)
    deleted: list[tuple[int, int]] = field(default_factory=list)
    commands: list[dict[str, str]] | None = None
    menu_button: dict[str, object] | None = None
    fail_delete: bool = False

    async def send_message(
        self, chat_id: int, text: str, reply_markup: dict | None = None
    ) -> None:
        self.messages.append((chat_id, text))
        self.markups.append(reply_markup)

    async def answer_callback_query(
        self, callback_query_id: str, text: str | None = None
    ) -> None:
        self.callbacks.append((callback_query_id, text))

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        if self.fail_delete:
            raise RuntimeError("message can't be deleted")
        self.deleted.append((chat_id, message_id))

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        self.commands = commands

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        self.menu_button = menu_button


@dataclass
class FakeTelegramFileClient(TelegramFileClient):
    """Fake file client that resolves every file to a static URL."""

    url: str = "https://files.example/abc.jpg"
    file_size: int | None = 2048
    error: Exception | None = None
    requested: list[str] = field(default_factory=list)

    async def get_file(self, file_id: str) -> TelegramFile:
        self.requested.append(file_id)
        if self.error is not None:
            raise self.error
        return TelegramFile(file_id=file_id, url=self.url, file_size=self.file_size)


@dataclass
class FakePhotoSender(PhotoSender):
    """Photo sender that fails a configurable number of times."""

    failures_left: int = 0
    sent: list[str] = field(default_factory=list)

    async def send_photo(self, locator: str) -> DeliveryReceipt:
        if self.failures_left > 0:
            self.failures_left -= 1
            raise RuntimeError("smtp unavailable")
        self.sent.append(locator)
        return DeliveryReceipt(recipient="me@example.com", filename="photo_1.jpg")


@dataclass
class FakeResourceFetcher(ResourceFetcher):
    """Fetcher returning static bytes."""

    content: bytes = b"fake-image-bytes"
    error: Exception | None = None

    async def fetch_bytes(self, url: str) -> bytes:
        if self.error is not None:
            raise self.error
        return self.content


@dataclass
class FakeMailer(Mailer):
    """Mailer that records outgoing emails."""

    sent: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None

    async def send(
        self, recipient: str, subject: str, body: str, attachment: MailAttachment
    ) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(
            {
                "recipient": recipient,
                "subject": subject,
                "body": body,
                "attachment": attachment,
            }
        )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        telegram_bot_token="test-token",
        gmail_user="me@example.com",
        gmail_pass="app-password",
        environment="test",
    )


@pytest.fixture
def telegram_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def telegram_file_client() -> FakeTelegramFileClient:
    return FakeTelegramFileClient()


@pytest.fixture
def photo_sender() -> FakePhotoSender:
    return FakePhotoSender()


@pytest.fixture
def container(
    settings: Settings,
    telegram_client: FakeTelegramClient,
    telegram_file_client: FakeTelegramFileClient,
    photo_sender: FakePhotoSender,
) -> AppContainer:
    session_store = InMemorySessionStore()
    photo_history = InMemoryPhotoHistory()
    coordinator = UploadCoordinator(
        session_store=session_store,
        photo_history=photo_history,
        photo_sender=photo_sender,
    )
    dispatcher = UpdateDispatcher(
        telegram_client=telegram_client,
        telegram_file_client=telegram_file_client,
        coordinator=coordinator,
        start_command_handler=StartCommandHandler(
            telegram_client=telegram_client, email_enabled=True
        ),
        environment=settings.environment,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        telegram_client=telegram_client,
        telegram_file_client=telegram_file_client,
        session_store=session_store,
        photo_history=photo_history,
        upload_coordinator=coordinator,
        dispatcher=dispatcher,
        close_resources=close_resources,
    )
