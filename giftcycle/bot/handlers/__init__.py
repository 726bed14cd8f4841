from aiogram import Router

from giftcycle.bot.handlers import exchange, start

router = Router()
router.include_router(start.router)
router.include_router(exchange.router)
