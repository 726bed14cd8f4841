from aiogram import Router, types
from aiogram.filters import CommandStart

from giftcycle.bot.keyboards import join_keyboard
from giftcycle.bot.utils import log_handler_exception

router = Router()


@router.message(CommandStart())
async def command_start_handler(message: types.Message) -> None:
    try:
        if message.chat.type == "private":
            await message.answer(
                "Hello! I match people up for gift exchanges.\n\n"
                "Add me to a group chat and send /start there. Everyone who wants to take part "
                "clicks the join button.\n\n"
                "Use /group to say which household or team you belong to, so you are never "
                "matched with someone from the same group. /list shows who is in, /check "
                "reports problems with the current match and /match makes a new one."
            )
            return

        await message.answer(
            "Click the button below to join the gift exchange.",
            reply_markup=join_keyboard(),
        )
    except Exception as exc:
        log_handler_exception("start", message.from_user.id, message.chat.id, exc)
        await message.answer("Something went wrong. Please try again later.")
