from __future__ import annotations

import logging

import discord
from discord.ext import commands

from application.router import dispatch, help_text, split_reply
from application.services import ExternalContext
from domain.repositories import LedgerStore

logger = logging.getLogger(__name__)

PREFIX = "!"
# Discord rejects longer messages outright.
MAX_MESSAGE_LENGTH = 2000


def _build_external_context(user: discord.abc.User) -> ExternalContext:
    """Create an `ExternalContext` from a Discord user."""

    return ExternalContext(
        provider="discord",
        provider_user_id=str(user.id),
        username=user.name,
        first_name=user.display_name or user.name,
        last_name=None,
    )


async def send_reply(ctx: commands.Context, reply: str) -> None:
    for chunk in split_reply(reply, MAX_MESSAGE_LENGTH):
        await ctx.send(chunk)


def create_discord_bot(store: LedgerStore) -> commands.Bot:
    """
    Configure and return a Discord bot with the same commands as the
    Telegram interface, using the `!` prefix.
    """

    intents = discord.Intents.default()
    intents.message_content = True

    # Disable the default help command so we can provide our own `!help`.
    bot = commands.Bot(command_prefix=PREFIX, intents=intents, help_command=None)

    async def _reply(ctx: commands.Context, command: str, args: str) -> None:
        reply = dispatch(command, args, _build_external_context(ctx.author), store, prefix=PREFIX)
        await send_reply(ctx, reply)

    @bot.event
    async def on_ready():
        logger.info("Discord bot logged in as %s (id=%s)", bot.user, bot.user.id)

    @bot.event
    async def on_command_error(ctx: commands.Context, error: commands.CommandError):
        if isinstance(error, commands.CommandNotFound):
            await ctx.send(help_text(PREFIX))
            return
        logger.error("Command %s failed", ctx.command, exc_info=error)

    @bot.command(name="start")
    async def start_cmd(ctx: commands.Context):
        await _reply(ctx, "start", "")

    @bot.command(name="help")
    async def help_cmd(ctx: commands.Context):
        await ctx.send(help_text(PREFIX))

    @bot.command(name="save")
    async def save_cmd(ctx: commands.Context, *, args: str = ""):
        """!save <amount> [reason]"""
        await _reply(ctx, "save", args)

    @bot.command(name="adjust")
    async def adjust_cmd(ctx: commands.Context, *, args: str = ""):
        """!adjust <+/-amount> [reason]"""
        await _reply(ctx, "adjust", args)

    @bot.command(name="allinvoo")
    async def allinvoo_cmd(ctx: commands.Context):
        await _reply(ctx, "allinvoo", "")

    @bot.command(name="query")
    async def query_cmd(ctx: commands.Context, *, args: str = ""):
        await _reply(ctx, "query", args)

    return bot
