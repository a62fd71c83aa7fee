"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from photo_relay.adapters.http_fetcher import HttpxResourceFetcher
from photo_relay.adapters.telegram_client import HttpxTelegramClient
from photo_relay.adapters.telegram_file_client import HttpxTelegramFileClient
from photo_relay.domain.errors import ResourceResolutionError


def test_telegram_client_send_callback_and_delete() -> None:
    seen: dict[str, dict[str, object]] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", maxsplit=1)[-1]
        seen[method] = json.loads(request.content.decode())
        return httpx.Response(200, json={"ok": True, "result": True})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramClient(bot_token="token", http_client=async_client)

    asyncio.run(
        client.send_message(
            chat_id=1,
            text="Hi",
            reply_markup={"inline_keyboard": [[{"text": "x", "callback_data": "y"}]]},
        )
    )
    asyncio.run(client.answer_callback_query(callback_query_id="cbq-1", text="Closed"))
    asyncio.run(client.delete_message(chat_id=1, message_id=5))

    assert seen["sendMessage"]["reply_markup"] == {
        "inline_keyboard": [[{"text": "x", "callback_data": "y"}]]
    }
    assert seen["answerCallbackQuery"] == {
        "callback_query_id": "cbq-1",
        "text": "Closed",
    }
    assert seen["deleteMessage"] == {"chat_id": 1, "message_id": 5}


def test_telegram_client_raises_on_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"ok": False})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramClient(bot_token="token", http_client=async_client)

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.delete_message(chat_id=1, message_id=5))


def test_telegram_client_commands_and_menu_button() -> None:
    seen_paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_paths.append(request.url.path)
        payload = json.loads(request.content.decode())
        if request.url.path.endswith("/setMyCommands"):
            assert payload["commands"][0]["command"] == "start"
        if request.url.path.endswith("/setChatMenuButton"):
            assert payload["menu_button"]["type"] == "commands"
        return httpx.Response(200, json={"ok": True, "result": True})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramClient(bot_token="token", http_client=async_client)

    asyncio.run(
        client.set_my_commands(
            [{"command": "start", "description": "Show what the bot can do"}]
        )
    )
    asyncio.run(client.set_chat_menu_button())

    assert any(path.endswith("/setMyCommands") for path in seen_paths)
    assert any(path.endswith("/setChatMenuButton") for path in seen_paths)


def test_telegram_file_client_builds_download_url() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/getFile")
        assert request.url.params["file_id"] == "file-id"
        return httpx.Response(
            200,
            json={
                "ok": True,
                "result": {"file_path": "photos/file.jpg", "file_size": 51200},
            },
        )

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramFileClient(bot_token="token", http_client=async_client)

    telegram_file = asyncio.run(client.get_file("file-id"))

    assert telegram_file.url == "https://api.telegram.org/file/bottoken/photos/file.jpg"
    assert telegram_file.file_size == 51200


def test_telegram_file_client_raises_resolution_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"ok": False, "description": "Bad Request: invalid file_id"}
        )

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramFileClient(bot_token="token", http_client=async_client)

    with pytest.raises(ResourceResolutionError, match="invalid file_id"):
        asyncio.run(client.get_file("file-id"))


def test_telegram_file_client_wraps_http_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502)

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramFileClient(bot_token="token", http_client=async_client)

    with pytest.raises(ResourceResolutionError):
        asyncio.run(client.get_file("file-id"))


def test_resource_fetcher_downloads_bytes() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"image-bytes")

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    fetcher = HttpxResourceFetcher(http_client=async_client)

    data = asyncio.run(fetcher.fetch_bytes("https://files.example/abc.jpg"))

    assert data == b"image-bytes"


def test_resource_fetcher_raises_on_missing_file() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    fetcher = HttpxResourceFetcher(http_client=async_client)

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(fetcher.fetch_bytes("https://files.example/missing.jpg"))
