import json
import logging
import secrets
from typing import Any

from fastapi import APIRouter, Request, status

from ..config import get_settings
from ..services.errors import InvalidInputError, NotFoundError, TransientError
from ..telegram.bot import bot_is_running, handle_update

logger = logging.getLogger(__name__)

router = APIRouter()


def verify_webhook_secret(secret: str) -> None:
    """Unknown or unconfigured secrets look like a missing route."""
    expected = get_settings().telegram_webhook_secret
    if not expected or not secrets.compare_digest(secret.encode(), expected.encode()):
        raise NotFoundError("Not found.")


async def _read_update(request: Request) -> dict[str, Any]:
    try:
        payload = await request.json()
    except json.JSONDecodeError as exc:
        raise InvalidInputError("Webhook body must be a JSON object.") from exc
    if not isinstance(payload, dict):
        raise InvalidInputError("Webhook body must be a JSON object.")
    return payload


@router.post("/webhook/{secret}", status_code=status.HTTP_204_NO_CONTENT)
async def telegram_webhook(secret: str, request: Request) -> None:
    verify_webhook_secret(secret)
    if not bot_is_running():
        logger.warning("Dropping Telegram update: the bot is not running")
        raise TransientError("The Telegram bot is not running.")
    payload = await _read_update(request)
    await handle_update(payload)
