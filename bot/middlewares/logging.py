from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject, Update

logger = structlog.get_logger(__name__)


def _inner_event(event: TelegramObject) -> TelegramObject:
    if isinstance(event, Update):
        return event.event
    return event


class UpdateLoggingMiddleware(BaseMiddleware):
    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        inner = _inner_event(event)
        user = getattr(inner, "from_user", None)
        context: dict[str, Any] = {
            "event_type": inner.__class__.__name__,
            "user_id": getattr(user, "id", None),
        }
        if isinstance(inner, CallbackQuery):
            context["callback_data"] = inner.data
        elif isinstance(inner, Message):
            context["chat_id"] = inner.chat.id

        fsm_state = data.get("raw_state")
        if fsm_state:
            context["fsm_state"] = fsm_state
        logger.info("update_received", **context)
        return await handler(event, data)
