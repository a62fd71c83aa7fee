"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from json import JSONDecodeError

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from photo_relay.app_logging import configure_logging
from photo_relay.containers import AppContainer
from photo_relay.telegram_commands import CHAT_MENU_BUTTON, telegram_commands

WEBHOOK_PATHS = ("/", "/telegram/webhook")


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.container.telegram_client.set_my_commands(
                telegram_commands()
            )
            await app.state.container.telegram_client.set_chat_menu_button(
                CHAT_MENU_BUTTON
            )
        except Exception:
            logger.exception("Failed to sync Telegram bot commands")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS", "PATCH", "DELETE", "POST", "PUT"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        """Render 405 responses in the webhook's error envelope."""
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": "Method not allowed"},
            )
        return await http_exception_handler(request, exc)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    async def webhook_status(request: Request) -> dict[str, object]:
        """Report tracked users, pending uploads and email availability."""
        state_container: AppContainer = request.app.state.container
        return {
            "status": "Bot is running!",
            "users_tracked": state_container.photo_history.user_count(),
            "gmail_enabled": state_container.upload_coordinator.delivery_enabled,
            "pending_uploads": state_container.session_store.pending_count(),
        }

    async def telegram_webhook(request: Request) -> JSONResponse:
        """Handle Telegram webhook updates.

        Failures are reported with a 200 status so Telegram does not keep
        redelivering the same update.
        """
        state_container: AppContainer = request.app.state.container
        try:
            try:
                payload = await request.json()
            except (JSONDecodeError, UnicodeDecodeError):
                payload = None
            await state_container.dispatcher.dispatch(payload)
        except Exception as exc:
            logger.exception("Webhook processing error")
            return JSONResponse(
                status_code=status.HTTP_200_OK,
                content={"error": str(exc), "acknowledged": True},
            )
        return JSONResponse(content={"ok": True})

    for path in WEBHOOK_PATHS:
        app.add_api_route(path, webhook_status, methods=["GET"])
        app.add_api_route(path, telegram_webhook, methods=["POST"])

    return app
