"""Inbound events recognised by the webhook dispatcher."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NewPhoto:
    """A user sent a photo."""

    chat_id: int
    user_id: int
    file_id: str
    file_size: int | None = None


@dataclass(frozen=True)
class ConfirmAction:
    """A user pressed the email button for an upload."""

    callback_query_id: str
    chat_id: int
    upload_id: str


@dataclass(frozen=True)
class CancelAction:
    """A user pressed the close button on a photo message."""

    callback_query_id: str
    chat_id: int
    message_id: int
    user_id: int


@dataclass(frozen=True)
class PlainText:
    """Anything else, answered with help text when a chat is known."""

    chat_id: int | None = None
    text: str | None = None
    callback_query_id: str | None = None


InboundEvent = NewPhoto | ConfirmAction | CancelAction | PlainText
