import logging

from config import configure_logging, load_settings
from infrastructure.db.factory import create_ledger_store
from interfaces.discord.handlers import create_discord_bot

logger = logging.getLogger(__name__)


def main() -> None:
    settings = load_settings("DISCORD_TOKEN")
    configure_logging(settings.log_level)

    store = create_ledger_store(settings.database_url)

    bot = create_discord_bot(store)
    logger.info("Starting Discord bot")
    # discord.py would otherwise install its own root handler over ours.
    bot.run(settings.bot_token, log_handler=None)


if __name__ == "__main__":
    main()
