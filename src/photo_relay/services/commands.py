"""Command handlers for Telegram updates."""

from dataclasses import dataclass

from photo_relay.adapters.telegram_client import TelegramClient


@dataclass
class StartCommandHandler:
    """Answer /start and any unrecognised message with the bot intro."""

    telegram_client: TelegramClient
    email_enabled: bool

    async def handle(self, chat_id: int) -> None:
        """Send the welcome message."""
        await self.telegram_client.send_message(
            chat_id=chat_id, text=welcome_text(self.email_enabled)
        )


def welcome_text(email_enabled: bool) -> str:
    """Return the intro text, mentioning email when it is available."""
    text = "📸 Photo Upload Bot\n\nSend me a photo and I'll give you the file link!"
    if email_enabled:
        text += "\n📧 I can also send it to your email!"
    return text
