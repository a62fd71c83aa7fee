"""Routing of Telegram webhook updates to the upload coordinator."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from photo_relay.adapters.telegram_client import TelegramClient
from photo_relay.adapters.telegram_file_client import TelegramFileClient
from photo_relay.api.telegram_models import (
    TelegramCallbackQuery,
    TelegramChat,
    TelegramPhotoSize,
    TelegramUpdate,
)
from photo_relay.domain.events import (
    CancelAction,
    ConfirmAction,
    InboundEvent,
    NewPhoto,
    PlainText,
)
from photo_relay.domain.uploads import ConfirmResult, UploadOutcome
from photo_relay.services.commands import StartCommandHandler
from photo_relay.services.uploads import UploadCoordinator

logger = logging.getLogger(__name__)

CONFIRM_PREFIX = "gmail_"
CANCEL_DATA = "cancel"


def classify_update(payload: object) -> InboundEvent:
    """Turn a raw webhook payload into exactly one inbound event."""
    try:
        update = TelegramUpdate.model_validate(payload)
    except ValidationError:
        logger.warning("Treating malformed Telegram update as plain text")
        return PlainText(chat_id=_salvage_chat_id(payload))
    if update.callback_query:
        return _classify_callback(update.callback_query)
    message = update.message
    if message is None:
        return PlainText()
    if message.photo:
        photo = _select_largest_photo(message.photo)
        user_id = message.from_user.id if message.from_user else message.chat.id
        return NewPhoto(
            chat_id=message.chat.id,
            user_id=user_id,
            file_id=photo.file_id,
            file_size=photo.file_size,
        )
    return PlainText(chat_id=message.chat.id, text=message.text)


def _classify_callback(callback: TelegramCallbackQuery) -> InboundEvent:
    message = callback.message
    if message is None:
        return PlainText(callback_query_id=callback.id)
    data = callback.data or ""
    if data == CANCEL_DATA:
        return CancelAction(
            callback_query_id=callback.id,
            chat_id=message.chat.id,
            message_id=message.message_id,
            user_id=callback.from_user.id,
        )
    if data.startswith(CONFIRM_PREFIX) and len(data) > len(CONFIRM_PREFIX):
        return ConfirmAction(
            callback_query_id=callback.id,
            chat_id=message.chat.id,
            upload_id=data.removeprefix(CONFIRM_PREFIX),
        )
    return PlainText(chat_id=message.chat.id, callback_query_id=callback.id)


def _salvage_chat_id(payload: object) -> int | None:
    """Find the chat of an update that failed validation, if it names one."""
    if not isinstance(payload, dict):
        return None
    message = payload.get("message")
    callback = payload.get("callback_query")
    if message is None and isinstance(callback, dict):
        message = callback.get("message")
    if not isinstance(message, dict):
        return None
    try:
        return TelegramChat.model_validate(message.get("chat")).id
    except ValidationError:
        return None


def _select_largest_photo(photos: list[TelegramPhotoSize]) -> TelegramPhotoSize:
    """Select the largest photo size, preferring the last one on ties."""
    _, photo = max(
        enumerate(photos), key=lambda item: (item[1].width * item[1].height, item[0])
    )
    return photo


@dataclass
class UpdateDispatcher:
    """Handle one Telegram update end to end."""

    telegram_client: TelegramClient
    telegram_file_client: TelegramFileClient
    coordinator: UploadCoordinator
    start_command_handler: StartCommandHandler
    environment: str = "local"

    async def dispatch(self, payload: object) -> InboundEvent:
        """Classify the payload, act on it and return the event."""
        event = classify_update(payload)
        if isinstance(event, NewPhoto):
            await self._handle_photo(event)
        elif isinstance(event, ConfirmAction):
            await self._handle_confirm(event)
        elif isinstance(event, CancelAction):
            await self._handle_cancel(event)
        else:
            await self._handle_plain_text(event)
        return event

    async def _handle_photo(self, event: NewPhoto) -> None:
        try:
            telegram_file = await self.telegram_file_client.get_file(event.file_id)
        except Exception as exc:
            logger.exception(
                "Failed to resolve Telegram photo", extra={"file_id": event.file_id}
            )
            await self.telegram_client.send_message(
                chat_id=event.chat_id,
                text=self._format_error(exc, "❌ Couldn't get a link for that photo."),
            )
            return
        upload_id = self.coordinator.on_photo_received(event.user_id, telegram_file.url)
        await self.telegram_client.send_message(
            chat_id=event.chat_id,
            text=_format_photo_received(
                telegram_file.url, telegram_file.file_size or event.file_size
            ),
            reply_markup=_photo_keyboard(upload_id, self.coordinator.delivery_enabled),
        )

    async def _handle_confirm(self, event: ConfirmAction) -> None:
        await self.telegram_client.answer_callback_query(
            event.callback_query_id, text="📧 Sending to email..."
        )
        if not self.coordinator.delivery_enabled:
            await self.telegram_client.send_message(
                chat_id=event.chat_id, text="📧 Email delivery is not configured."
            )
            return
        result = await self.coordinator.on_confirm(event.upload_id)
        await self.telegram_client.send_message(
            chat_id=event.chat_id, text=_format_confirm_result(result)
        )

    async def _handle_cancel(self, event: CancelAction) -> None:
        await self.telegram_client.answer_callback_query(
            event.callback_query_id, text="Closed"
        )
        try:
            await self.telegram_client.delete_message(event.chat_id, event.message_id)
        except Exception:
            logger.exception(
                "Failed to delete photo message",
                extra={"chat_id": event.chat_id, "message_id": event.message_id},
            )
        self.coordinator.on_cancel(event.user_id)

    async def _handle_plain_text(self, event: PlainText) -> None:
        if event.callback_query_id is not None:
            await self.telegram_client.answer_callback_query(event.callback_query_id)
        if event.chat_id is None:
            return
        await self.start_command_handler.handle(event.chat_id)

    def _format_error(self, exc: Exception, fallback: str) -> str:
        """Return a user-facing error message with local debug info."""
        if self.environment == "local":
            detail = f"{type(exc).__name__}: {exc}".strip()
            if detail:
                return f"{fallback} (debug: {detail})"
        return fallback


def _format_photo_received(url: str, file_size: int | None) -> str:
    lines = ["✅ Photo Received!", "", "🔗 File URL:", url]
    if file_size is not None:
        lines.extend(["", f"📊 Size: {file_size / 1024:.1f} KB"])
    return "\n".join(lines)


def _photo_keyboard(upload_id: str, delivery_enabled: bool) -> dict:
    rows: list[list[dict[str, str]]] = []
    if delivery_enabled:
        rows.append(
            [
                {
                    "text": "📧 Upload to Gmail",
                    "callback_data": f"{CONFIRM_PREFIX}{upload_id}",
                }
            ]
        )
    rows.append([{"text": "❌ Close", "callback_data": CANCEL_DATA}])
    return {"inline_keyboard": rows}


def _format_confirm_result(result: ConfirmResult) -> str:
    if result.outcome is UploadOutcome.EXPIRED:
        return "❌ Upload session expired. Please send the photo again."
    if result.outcome is UploadOutcome.DELIVERY_FAILED or result.receipt is None:
        return "❌ Failed to send the photo by email. Tap the button to try again."
    return (
        "✅ Sent by email!\n\n"
        f"📧 Sent to: {result.receipt.recipient}\n"
        f"📎 File: {result.receipt.filename}"
    )
