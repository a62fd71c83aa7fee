"""Telegram file metadata client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from photo_relay.domain.errors import ResourceResolutionError


@dataclass(frozen=True)
class TelegramFile:
    """Downloadable Telegram file."""

    file_id: str
    url: str
    file_size: int | None = None


class TelegramFileClient(Protocol):
    """Interface for resolving Telegram files to download links."""

    async def get_file(self, file_id: str) -> TelegramFile:
        """Return the download URL and size for a file id."""


@dataclass
class HttpxTelegramFileClient(TelegramFileClient):
    """Telegram file client using httpx."""

    bot_token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, bot_token: str) -> "HttpxTelegramFileClient":
        """Create a Telegram file client with a managed httpx session."""
        return cls(bot_token=bot_token, http_client=httpx.AsyncClient())

    async def get_file(self, file_id: str) -> TelegramFile:
        """Resolve a file id via getFile."""
        get_file_url = f"https://api.telegram.org/bot{self.bot_token}/getFile"
        try:
            response = await self.http_client.get(
                get_file_url, params={"file_id": file_id}, timeout=10
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ResourceResolutionError(file_id, str(exc)) from exc
        payload = response.json()
        if not payload.get("ok"):
            raise ResourceResolutionError(
                file_id, str(payload.get("description") or "getFile failed")
            )
        result = payload.get("result") or {}
        file_path = result.get("file_path")
        if not file_path:
            raise ResourceResolutionError(file_id, "file is not downloadable")
        return TelegramFile(
            file_id=file_id,
            url=f"https://api.telegram.org/file/bot{self.bot_token}/{file_path}",
            file_size=result.get("file_size"),
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
