"""Email delivery of resolved photos."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from photo_relay.domain.errors import DeliveryError
from photo_relay.domain.uploads import DeliveryReceipt

logger = logging.getLogger(__name__)


class ResourceFetcher(Protocol):
    """Interface for downloading a file by URL."""

    async def fetch_bytes(self, url: str) -> bytes:
        """Download the resource and return its bytes."""


@dataclass(frozen=True)
class MailAttachment:
    """Binary attachment for an outgoing email."""

    filename: str
    content: bytes
    maintype: str = "image"
    subtype: str = "jpeg"


class Mailer(Protocol):
    """Interface for sending an email with one attachment."""

    async def send(
        self, recipient: str, subject: str, body: str, attachment: MailAttachment
    ) -> None:
        """Send the email."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class EmailDeliveryService:
    """Download a photo and email it as an attachment."""

    fetcher: ResourceFetcher
    mailer: Mailer
    recipient: str
    clock: Callable[[], datetime] = _utc_now

    async def send_photo(self, locator: str) -> DeliveryReceipt:
        """Send the photo at the locator, raising DeliveryError on failure."""
        now = self.clock()
        filename = f"photo_{int(now.timestamp() * 1000)}.jpg"
        try:
            content = await self.fetcher.fetch_bytes(locator)
        except Exception as exc:
            raise DeliveryError(f"Failed to download file: {exc}") from exc
        try:
            await self.mailer.send(
                recipient=self.recipient,
                subject=f"Telegram Photo - {filename}",
                body=_build_body(filename, now),
                attachment=MailAttachment(filename=filename, content=content),
            )
        except Exception as exc:
            raise DeliveryError(f"Failed to send email: {exc}") from exc
        logger.info(
            "Photo emailed", extra={"attachment": filename, "size": len(content)}
        )
        return DeliveryReceipt(recipient=self.recipient, filename=filename)


def _build_body(filename: str, sent_at: datetime) -> str:
    return (
        "Photo uploaded from Telegram Bot\n"
        f"File: {filename}\n"
        f"Time: {sent_at.strftime('%Y-%m-%d %H:%M:%S %Z')}"
    )
