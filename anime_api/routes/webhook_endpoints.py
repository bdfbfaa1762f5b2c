"""Telegram webhook endpoint."""

import hmac
from typing import Any

from dependency_injector.wiring import Provide, inject
from fastapi import Body, Depends, Header, HTTPException
from loguru import logger

from anime_api.containers.containers import AppContainer
from anime_api.metrics.asgi_metrics import NOTIFICATIONS_PUBLISHED
from anime_api.routes.routers import telegram_router
from anime_bot.dispatcher import UpdateDispatcher

SECRET_TOKEN_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def verify_secret_token(received: str | None, expected: str | None) -> bool:
    """Check the webhook secret token in constant time.

    Args:
        received: Header value sent by Telegram.
        expected: Configured secret; verification is disabled when empty.

    Returns:
        True if the request may be processed.
    """
    if not expected:
        return True
    if not received:
        return False
    return hmac.compare_digest(received.encode("utf-8"), expected.encode("utf-8"))


@telegram_router.post("/webhook")
@inject
def receive_update(
    payload: Any = Body(...),  # noqa: B008
    secret_token: str | None = Header(None, alias=SECRET_TOKEN_HEADER),  # noqa: B008
    dispatcher: UpdateDispatcher = Depends(Provide[AppContainer.dispatcher]),  # noqa: B008
    webhook_secret: str | None = Depends(Provide[AppContainer.config.webhook_secret]),  # noqa: B008
) -> dict[str, str]:
    """Handle one Telegram update.

    The update is parsed into a message, inline query or callback query, the
    sender is resolved (and registered on first contact), the matching command
    runs, and its notification is published for the delivery worker.

    Args:
        payload: Telegram Update object.
        secret_token: Value of the X-Telegram-Bot-Api-Secret-Token header.
        dispatcher: Injected update pipeline.
        webhook_secret: Injected expected secret token.

    Returns:
        Status dict with "status": "ok" and the published notification type.

    Raises:
        HTTPException: 401 if the secret token does not match.
    """
    if not verify_secret_token(secret_token, webhook_secret):
        logger.warning("Rejected webhook call with a wrong secret token.")
        raise HTTPException(status_code=401, detail="Invalid secret token.")

    logger.debug(f"Telegram update: {payload}")
    notification = dispatcher.handle(payload)
    NOTIFICATIONS_PUBLISHED.labels(type=notification.type).inc()
    return {"status": "ok", "type": notification.type}
