"""Upload session lifecycle: register, confirm and cancel."""

import asyncio
import logging
import weakref
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from photo_relay.domain.uploads import (
    ConfirmResult,
    DeliveryReceipt,
    PhotoRecord,
    UploadOutcome,
)
from photo_relay.services.photo_history import PhotoHistory
from photo_relay.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class PhotoSender(Protocol):
    """Capability that delivers the photo behind a locator by email."""

    async def send_photo(self, locator: str) -> DeliveryReceipt:
        """Deliver the photo and return what was sent where."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class UploadCoordinator:
    """State machine for upload sessions.

    Each upload is ACTIVE once registered and ends either CONSUMED (a
    successful confirm) or CANCELLED (the user closed the message). A failed
    delivery leaves the upload ACTIVE so the user can press the button again.
    """

    session_store: SessionStore
    photo_history: PhotoHistory
    photo_sender: PhotoSender | None = None
    clock: Callable[[], datetime] = _utc_now
    _confirm_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = field(
        default_factory=weakref.WeakValueDictionary, repr=False
    )

    @property
    def delivery_enabled(self) -> bool:
        """Return true when a photo sender is configured."""
        return self.photo_sender is not None

    def on_photo_received(self, user_id: int, locator: str) -> str:
        """Open an upload session for a resolved photo and return its id."""
        upload_id = self.session_store.register(locator)
        self.photo_history.append(
            user_id,
            PhotoRecord(
                upload_id=upload_id,
                locator=locator,
                received_at=self.clock(),
                user_id=user_id,
            ),
        )
        logger.info(
            "Upload session opened", extra={"upload_id": upload_id, "user_id": user_id}
        )
        return upload_id

    async def on_confirm(self, upload_id: str) -> ConfirmResult:
        """Email the photo for an upload and retire it once delivered."""
        lock = self._confirm_locks.get(upload_id)
        if lock is None:
            lock = asyncio.Lock()
            self._confirm_locks[upload_id] = lock
        async with lock:
            return await self._confirm(upload_id)

    async def _confirm(self, upload_id: str) -> ConfirmResult:
        locator = self.session_store.resolve(upload_id)
        if locator is None:
            return ConfirmResult(outcome=UploadOutcome.EXPIRED)
        if self.photo_sender is None:
            logger.warning(
                "Confirm received without a photo sender",
                extra={"upload_id": upload_id},
            )
            return ConfirmResult(outcome=UploadOutcome.DELIVERY_FAILED)
        try:
            receipt = await self.photo_sender.send_photo(locator)
        except Exception:
            logger.exception("Photo delivery failed", extra={"upload_id": upload_id})
            return ConfirmResult(outcome=UploadOutcome.DELIVERY_FAILED)
        self.session_store.retire(upload_id)
        return ConfirmResult(outcome=UploadOutcome.DELIVERED, receipt=receipt)

    def on_cancel(self, user_id: int) -> None:
        """Retire the user's most recent upload, if any."""
        latest = self.photo_history.latest(user_id)
        if latest is None:
            return
        if self.session_store.retire(latest.upload_id):
            logger.info(
                "Upload session cancelled",
                extra={"upload_id": latest.upload_id, "user_id": user_id},
            )
