from __future__ import annotations

import html

from aiogram import Router, types
from aiogram.enums import ParseMode
from aiogram.filters import Command
from loguru import logger

from giftcycle.bot.keyboards import confirm_match_keyboard
from giftcycle.bot.utils import (
    is_admin,
    log_handler_exception,
    match_settings_for,
    matches_in_flight,
)
from giftcycle.db import get_session, repo
from giftcycle.db.store import load_participants
from giftcycle.services import exchange_flow
from giftcycle.services.exchange_flow import MatchError

router = Router()

NOT_ACTIVE = "This chat has no gift exchange yet. Send /start to create one."


@router.callback_query(lambda c: c.data == "join")
async def join_callback_handler(query: types.CallbackQuery) -> None:
    try:
        display_name = exchange_flow.format_participant_label(
            query.from_user.username,
            query.from_user.first_name,
            query.from_user.last_name,
            query.from_user.id,
        )
        with get_session() as session:
            result = exchange_flow.join_exchange(
                session,
                query.from_user.id,
                display_name,
                query.message.chat.id,
                query.message.chat.title,
            )

        await query.answer(result.message, show_alert=True)
        if result.added:
            await query.message.bot.send_message(
                query.message.chat.id,
                f"{html.escape(display_name)} joined the gift exchange!",
            )
    except Exception as exc:
        log_handler_exception("join", query.from_user.id, query.message.chat.id, exc)
        await query.answer("Error joining the gift exchange.", show_alert=True)


@router.message(Command("group"))
async def group_command_handler(message: types.Message) -> None:
    parts = message.text.split(maxsplit=1)
    group_name = parts[1].strip() if len(parts) > 1 else None

    try:
        with get_session() as session:
            exchange = repo.get_exchange_by_telegram_id(session, message.chat.id)
            if not exchange:
                await message.answer(NOT_ACTIVE)
                return
            participant = exchange_flow.set_group(session, exchange, message.from_user.id, group_name)

        if participant is None:
            await message.answer("Join the gift exchange first, then pick a group.")
        elif group_name:
            await message.answer(f"You are now in group {html.escape(group_name)}.")
        else:
            await message.answer("You are no longer in a group.")
    except Exception as exc:
        log_handler_exception("group", message.from_user.id, message.chat.id, exc)
        await message.answer("Something went wrong. Please try again later.")


@router.message(Command("list"))
async def list_command_handler(message: types.Message) -> None:
    try:
        with get_session() as session:
            exchange = repo.get_exchange_by_telegram_id(session, message.chat.id)
            if not exchange:
                await message.answer(NOT_ACTIVE)
                return
            lines = exchange_flow.list_participants(session, exchange)
            count = repo.count_exchange_participants(session, exchange.id)

        if not lines:
            await message.answer("Nobody has joined this gift exchange yet.")
            return
        await message.answer(f"Participants ({count}):\n" + "\n".join(lines))
    except Exception as exc:
        log_handler_exception("list", message.from_user.id, message.chat.id, exc)
        await message.answer("Something went wrong. Please try again later.")


@router.message(Command("check"))
async def check_command_handler(message: types.Message) -> None:
    try:
        with get_session() as session:
            exchange = repo.get_exchange_by_telegram_id(session, message.chat.id)
            if not exchange:
                await message.answer(NOT_ACTIVE)
                return
            report = exchange_flow.render_check(session, exchange, match_settings_for(exchange.id))
        await message.answer(report)
    except Exception as exc:
        log_handler_exception("check", message.from_user.id, message.chat.id, exc)
        await message.answer("Something went wrong. Please try again later.")


@router.message(Command("match"))
async def match_command_handler(message: types.Message) -> None:
    if message.chat.type not in {"group", "supergroup"}:
        await message.answer("This command can only be used in a group chat.")
        return

    if not await is_admin(message.bot, message.chat.id, message.from_user.id):
        await message.answer("Only group admins can make a new match.")
        return

    try:
        with get_session() as session:
            exchange = repo.get_exchange_by_telegram_id(session, message.chat.id)
            if not exchange:
                await message.answer(NOT_ACTIVE)
                return
            exchange_id = exchange.id
            current = exchange_flow.check_exchange(session, exchange, match_settings_for(exchange_id))

        if exchange_flow.should_confirm(current):
            await message.answer(
                "The current match is already valid. Making a new one will throw it out. Are you sure?",
                reply_markup=confirm_match_keyboard(),
            )
            return

        await _run_match(message.bot, message.chat.id, exchange_id)
    except Exception as exc:
        log_handler_exception("match", message.from_user.id, message.chat.id, exc)
        await message.answer("Something went wrong. Please try again later.")


@router.callback_query(lambda c: c.data == "confirm_match")
async def confirm_match_callback_handler(query: types.CallbackQuery) -> None:
    if not await is_admin(query.message.bot, query.message.chat.id, query.from_user.id):
        await query.answer("Only group admins can make a new match.", show_alert=True)
        return

    try:
        with get_session() as session:
            exchange = repo.get_exchange_by_telegram_id(session, query.message.chat.id)
            if not exchange:
                await query.answer(NOT_ACTIVE, show_alert=True)
                return
            exchange_id = exchange.id

        await query.answer()
        await _run_match(query.message.bot, query.message.chat.id, exchange_id)
    except Exception as exc:
        log_handler_exception("confirm_match", query.from_user.id, query.message.chat.id, exc)
        await query.answer("Something went wrong. Please try again later.", show_alert=True)


@router.callback_query(lambda c: c.data == "cancel_match")
async def cancel_match_callback_handler(query: types.CallbackQuery) -> None:
    await query.answer("The current match was kept.")


async def _run_match(bot, chat_id: int, exchange_id: int) -> None:
    if exchange_id in matches_in_flight:
        await bot.send_message(chat_id, "A match is already being made, please wait.")
        return

    matches_in_flight.add(exchange_id)
    try:
        settings = match_settings_for(exchange_id)
        try:
            outcome = await exchange_flow.run_match(None, exchange_id, settings)
        except MatchError as exc:
            await bot.send_message(chat_id, str(exc))
            return

        with get_session() as session:
            exchange = repo.get_exchange_by_id(session, exchange_id)
            report = exchange_flow.render_check(session, exchange, settings)
            participants = {p.id: p for p in load_participants(session, exchange_id)}
            telegram_ids = {
                row.id: row.telegram_id for row in repo.list_exchange_participants(session, exchange_id)
            }
    finally:
        matches_in_flight.discard(exchange_id)

    if not outcome.success:
        await bot.send_message(
            chat_id,
            f"Could not find a valid match after {outcome.attempts} attempts. "
            "The last attempt was stored anyway.\n\n" + report,
        )
        return

    for giver_id, recipient_id in outcome.edges:
        telegram_id = telegram_ids.get(giver_id)
        recipient = participants.get(recipient_id)
        if telegram_id is None or recipient is None:
            continue
        try:
            await bot.send_message(
                telegram_id,
                f"Gift exchange: you're giving a gift to {html.escape(recipient.name or '')}!",
                parse_mode=ParseMode.HTML,
            )
        except Exception as exc:  # pragma: no cover - network dependent
            logger.bind(user_id=telegram_id).warning(
                "Failed to send assignment DM: {error}", error=str(exc)
            )

    await bot.send_message(chat_id, report + "\nCheck your private messages.")


@router.message(Command("reset"))
async def reset_command_handler(message: types.Message) -> None:
    if not await is_admin(message.bot, message.chat.id, message.from_user.id):
        await message.answer("Only group admins can reset the match.")
        return

    try:
        with get_session() as session:
            exchange = repo.get_exchange_by_telegram_id(session, message.chat.id)
            if not exchange:
                await message.answer(NOT_ACTIVE)
                return
            if exchange.id in matches_in_flight:
                await message.answer("A match is being made right now, try again in a moment.")
                return
            exchange_flow.reset_exchange(session, exchange)
        await message.answer("The match has been cleared. Participants and groups are kept.")
    except Exception as exc:
        log_handler_exception("reset", message.from_user.id, message.chat.id, exc)
        await message.answer("Something went wrong. Please try again later.")
