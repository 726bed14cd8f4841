from __future__ import annotations

from typing import Set

from aiogram.enums import ChatMemberStatus
from loguru import logger

from giftcycle.core.config import load_settings
from giftcycle.services.participants import MatchSettings

# Exchanges with a match currently being generated.
matches_in_flight: Set[int] = set()


async def is_admin(bot, chat_id: int, user_id: int) -> bool:
    try:
        member = await bot.get_chat_member(chat_id, user_id)
    except Exception as exc:  # pragma: no cover - network dependent
        logger.bind(chat_id=chat_id, user_id=user_id).warning(
            "Failed to check admin status: {error}", error=str(exc)
        )
        return False
    return member.status in {ChatMemberStatus.ADMINISTRATOR, ChatMemberStatus.CREATOR}


def match_settings_for(exchange_id: int) -> MatchSettings:
    return load_settings().match_settings(exchange_id)


def log_handler_exception(action: str, user_id: int | None, chat_id: int | None, error: Exception) -> None:
    logger.bind(action=action, user_id=user_id, chat_id=chat_id).exception(
        "Handler error: {error}", error=str(error)
    )
