from __future__ import annotations

import logging

import telebot
from telebot.types import BotCommand
from telebot.util import extract_arguments, extract_command, smart_split

from application.router import COMMANDS, dispatch, help_text
from application.services import ExternalContext
from domain.repositories import LedgerStore

logger = logging.getLogger(__name__)

# Telegram rejects longer messages outright.
MAX_MESSAGE_LENGTH = 4096

MENU = [
    BotCommand("start", "register or show your UUID"),
    BotCommand("save", "save money: /save 12.34 [reason]"),
    BotCommand("adjust", "adjust balance: /adjust -5.50 [reason]"),
    BotCommand("allinvoo", "show your current total"),
    BotCommand("query", "list your last n entries"),
    BotCommand("help", "list commands"),
]


def _build_external_context(message) -> ExternalContext:
    """Extract a channel-agnostic context object from a Telegram message."""

    return ExternalContext(
        provider="telegram",
        provider_user_id=str(message.from_user.id),
        username=message.from_user.username,
        first_name=message.from_user.first_name,
        last_name=message.from_user.last_name,
    )


def send_reply(bot: telebot.TeleBot, chat_id, reply: str) -> None:
    for chunk in smart_split(reply, chars_per_string=MAX_MESSAGE_LENGTH):
        bot.send_message(chat_id, chunk)


def create_telegram_bot(bot_token: str, store: LedgerStore) -> telebot.TeleBot:
    """
    Configure and return a TeleBot instance wired to the command router.

    This module contains only Telegram-specific concerns: pulling the command
    and its arguments out of a message and sending the reply back.
    """

    bot = telebot.TeleBot(bot_token)

    @bot.message_handler(commands=list(COMMANDS))
    def handle_command(message):
        if message.from_user is None:
            bot.send_message(message.chat.id, "I can only respond to user messages.")
            return

        # extract_command drops the "@botname" suffix used in group chats.
        command = extract_command(message.text) or ""
        args = extract_arguments(message.text) or ""
        reply = dispatch(
            command,
            args,
            _build_external_context(message),
            store,
        )
        send_reply(bot, message.chat.id, reply)

    # Registered last: only reached when no known command matched.
    @bot.message_handler(func=lambda message: (message.text or "").startswith("/"))
    def handle_unknown_command(message):
        bot.send_message(message.chat.id, help_text())

    return bot


def register_command_menu(bot: telebot.TeleBot) -> None:
    """Publish the command list shown in Telegram's "/" menu."""

    if not bot.set_my_commands(MENU):
        logger.warning("Telegram refused the command menu update")
