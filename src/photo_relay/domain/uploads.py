"""Domain models for photo upload sessions."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class UploadSession:
    """A live, resolvable mapping from an upload id to a download URL."""

    id: str
    locator: str
    created_at: datetime


@dataclass(frozen=True)
class PhotoRecord:
    """Permanent history entry for a photo the bot resolved."""

    upload_id: str
    locator: str
    received_at: datetime
    user_id: int


class UploadOutcome(Enum):
    """Terminal result of attempting to consume an upload session."""

    DELIVERED = "delivered"
    EXPIRED = "expired"
    DELIVERY_FAILED = "delivery_failed"


@dataclass(frozen=True)
class DeliveryReceipt:
    """Details of a photo that was sent by email."""

    recipient: str
    filename: str


@dataclass(frozen=True)
class ConfirmResult:
    """Outcome of a confirm action, with the receipt when delivered."""

    outcome: UploadOutcome
    receipt: DeliveryReceipt | None = None
