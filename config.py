from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:./data/bot.db"
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    bot_token: str
    database_url: str
    log_level: str


def load_settings(token_var: str = "BOT_TOKEN") -> Settings:
    """
    Read settings from the environment (and a `.env` file, if present).

    `token_var` names the variable holding the chat platform token, so the
    Telegram and Discord entry points can share this loader.
    """

    load_dotenv()

    bot_token = os.environ.get(token_var, "").strip()
    if not bot_token:
        raise RuntimeError(f"{token_var} environment variable is not set.")

    return Settings(
        bot_token=bot_token,
        database_url=os.environ.get("DATABASE_URL") or DEFAULT_DATABASE_URL,
        log_level=(os.environ.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )


def configure_logging(level: str) -> None:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
