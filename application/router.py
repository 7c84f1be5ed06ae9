from __future__ import annotations

import logging
from datetime import timezone
from typing import Callable, Dict, List, Optional

from application.amounts import (
    format_cents,
    parse_query_limit,
    split_amount_and_reason,
)
from application.services import (
    ExternalContext,
    adjust,
    query,
    resolve_user,
    save,
    start,
    total_balance,
)
from domain.errors import InvalidAmount, StorageError, UnknownUser
from domain.models import Entry
from domain.repositories import LedgerStore

logger = logging.getLogger(__name__)

COMMANDS = ("start", "save", "adjust", "allinvoo", "query", "help")

FORMAT_HINT = "Format: {p}save 12.34 [reason] or {p}adjust -5.50 [reason]"
UNKNOWN_USER_REPLY = "I don't know you yet. Send {p}start first."
STORAGE_ERROR_REPLY = "Something went wrong, please try again."


def help_text(prefix: str = "/") -> str:
    p = prefix
    return (
        "Commands:\n"
        f"{p}start - register or show your UUID\n"
        f"{p}save {{amount}} [reason] - save money with optional reason\n"
        f"{p}adjust {{+/-amount}} [reason] - adjust balance with optional reason\n"
        f"{p}allinvoo - show your current total\n"
        f"{p}query [n] - list your last n entries (default 10)\n"
        f"{p}help - this help"
    )


def _reason_line(reason: Optional[str]) -> str:
    return f"Reason: {reason}\n" if reason else ""


def split_reply(text: str, limit: int) -> List[str]:
    """
    Cut a reply into pieces of at most `limit` characters.

    Cuts fall on line breaks where possible; a single line longer than
    `limit` is cut mid-line.
    """

    chunks: List[str] = []
    current: Optional[str] = None
    for line in text.split("\n"):
        while len(line) > limit:
            if current is not None:
                chunks.append(current)
                current = None
            chunks.append(line[:limit])
            line = line[limit:]
        if current is None:
            current = line
        elif len(current) + 1 + len(line) <= limit:
            current = f"{current}\n{line}"
        else:
            chunks.append(current)
            current = line
    if current is not None:
        chunks.append(current)
    # Chat platforms refuse empty messages.
    return [chunk for chunk in chunks if chunk]


def format_entry(entry: Entry) -> str:
    sign = "+" if entry.amount_cents >= 0 else "-"
    # Postgres hands back TIMESTAMPTZ in the session's zone.
    when = entry.created_at.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    line = f"{sign} {format_cents(abs(entry.amount_cents))} [{entry.kind}] {when}"
    if entry.reason:
        line += f" - {entry.reason}"
    return line


def _handle_start(ctx: ExternalContext, args: str, store: LedgerStore, prefix: str) -> str:
    user = start(ctx, store)
    return (
        f"Welcome, {user.display_name}!\n"
        f"Your user UUID: {user.id}\n"
        f"Use {prefix}save, {prefix}adjust, {prefix}allinvoo, {prefix}query."
    )


def _handle_save(ctx: ExternalContext, args: str, store: LedgerStore, prefix: str) -> str:
    user = resolve_user(ctx, store)
    amount_text, reason = split_amount_and_reason(args)
    entry = save(user, amount_text, reason, store)
    total = total_balance(user, store)
    return (
        f"Saved {format_cents(entry.amount_cents)}\n"
        f"{_reason_line(entry.reason)}"
        f"Total now: {format_cents(total)}"
    )


def _handle_adjust(ctx: ExternalContext, args: str, store: LedgerStore, prefix: str) -> str:
    user = resolve_user(ctx, store)
    amount_text, reason = split_amount_and_reason(args)
    entry = adjust(user, amount_text, reason, store)
    total = total_balance(user, store)
    verb = "added" if entry.amount_cents > 0 else "subtracted"
    return (
        f"Adjustment {verb} {format_cents(abs(entry.amount_cents))}\n"
        f"{_reason_line(entry.reason)}"
        f"Total now: {format_cents(total)}"
    )


def _handle_allinvoo(ctx: ExternalContext, args: str, store: LedgerStore, prefix: str) -> str:
    user = resolve_user(ctx, store)
    return f"Current total: {format_cents(total_balance(user, store))}"


def _handle_query(ctx: ExternalContext, args: str, store: LedgerStore, prefix: str) -> str:
    user = resolve_user(ctx, store)
    entries = query(user, store, parse_query_limit(args))
    if not entries:
        return f"No entries yet. Use {prefix}save to start!"

    lines: List[str] = [f"Last {len(entries)} entries for {user.display_name}:"]
    lines.extend(format_entry(e) for e in entries)
    lines.append("")
    lines.append(f"Current total: {format_cents(total_balance(user, store))}")
    return "\n".join(lines)


def _handle_help(ctx: ExternalContext, args: str, store: LedgerStore, prefix: str) -> str:
    return help_text(prefix)


_HANDLERS: Dict[str, Callable[[ExternalContext, str, LedgerStore, str], str]] = {
    "start": _handle_start,
    "save": _handle_save,
    "adjust": _handle_adjust,
    "allinvoo": _handle_allinvoo,
    "query": _handle_query,
    "help": _handle_help,
}


def dispatch(
    command: str,
    args: Optional[str],
    external_ctx: ExternalContext,
    store: LedgerStore,
    prefix: str = "/",
) -> str:
    """
    Run one chat command and return the text to reply with.

    Every domain error is turned into a reply here; nothing raised by a
    command escapes to the transport layer except programming errors.
    """

    name = (command or "").lstrip("/!").lower()
    handler = _HANDLERS.get(name)
    if handler is None:
        return help_text(prefix)

    logger.info("Command %s from %s", name, external_ctx.external_user_id)
    try:
        return handler(external_ctx, args or "", store, prefix)
    except InvalidAmount as exc:
        logger.debug("Rejected %s from %s: %s", name, external_ctx.external_user_id, exc)
        return f"{exc}\n{FORMAT_HINT.format(p=prefix)}"
    except UnknownUser:
        return UNKNOWN_USER_REPLY.format(p=prefix)
    except StorageError:
        logger.exception("Storage failure while handling %s", name)
        return STORAGE_ERROR_REPLY
