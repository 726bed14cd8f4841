from aiogram.utils.keyboard import InlineKeyboardBuilder


def join_keyboard():
    keyboard = InlineKeyboardBuilder()
    keyboard.button(text="Join the gift exchange!", callback_data="join")
    return keyboard.as_markup()


def confirm_match_keyboard():
    keyboard = InlineKeyboardBuilder()
    keyboard.button(text="Yes, make a new match", callback_data="confirm_match")
    keyboard.button(text="Keep the current one", callback_data="cancel_match")
    return keyboard.as_markup()
