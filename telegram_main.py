import logging

from config import configure_logging, load_settings
from infrastructure.db.factory import create_ledger_store
from interfaces.telegram.handlers import create_telegram_bot, register_command_menu

logger = logging.getLogger(__name__)


def main() -> None:
    settings = load_settings("BOT_TOKEN")
    configure_logging(settings.log_level)

    store = create_ledger_store(settings.database_url)

    bot = create_telegram_bot(settings.bot_token, store)
    register_command_menu(bot)
    logger.info("Telegram bot polling")
    bot.infinity_polling()


if __name__ == "__main__":
    main()
