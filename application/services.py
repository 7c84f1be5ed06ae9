from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from application.amounts import (
    DEFAULT_QUERY_LIMIT,
    parse_positive_amount,
    parse_signed_amount,
)
from domain.errors import UnknownUser
from domain.models import KIND_ADJUST, KIND_SAVE, Entry, User
from domain.repositories import LedgerStore

logger = logging.getLogger(__name__)


@dataclass
class ExternalContext:
    """
    Information about the caller from a particular channel (Telegram, Discord).

    The application layer never depends on concrete SDK types; it only sees
    this small context object.
    """

    provider: str
    provider_user_id: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def external_user_id(self) -> str:
        # Namespaced so IDs from different platforms never collide.
        return f"{self.provider}:{self.provider_user_id}"


def _clean_reason(reason: Optional[str]) -> Optional[str]:
    if reason is None:
        return None
    return reason.strip() or None


def start(external_ctx: ExternalContext, store: LedgerStore) -> User:
    """
    Register the caller, or return the already registered user unchanged.
    """

    user = store.find_or_create_user(
        external_ctx.external_user_id,
        external_ctx.username,
        external_ctx.first_name,
        external_ctx.last_name,
    )
    logger.info("User %s bound to %s", user.id, external_ctx.external_user_id)
    return user


def resolve_user(external_ctx: ExternalContext, store: LedgerStore) -> User:
    """Return the registered user for the caller or raise `UnknownUser`."""

    user = store.find_user_by_external(external_ctx.external_user_id)
    if user is None:
        raise UnknownUser(external_ctx.external_user_id)
    return user


def save(
    user: User,
    amount_text: str,
    reason_text: Optional[str],
    store: LedgerStore,
) -> Entry:
    """
    Record money put aside.

    The amount must parse to a strictly positive number of cents; nothing is
    written otherwise.
    """

    amount_cents = parse_positive_amount(amount_text)
    return store.insert_entry(user.id, amount_cents, KIND_SAVE, _clean_reason(reason_text))


def adjust(
    user: User,
    signed_amount_text: str,
    reason_text: Optional[str],
    store: LedgerStore,
) -> Entry:
    """
    Record a signed correction to the balance ("+10", "-3.50").
    """

    delta_cents = parse_signed_amount(signed_amount_text)
    return store.insert_entry(user.id, delta_cents, KIND_ADJUST, _clean_reason(reason_text))


def total_balance(user: User, store: LedgerStore) -> int:
    return store.sum_entries_for_user(user.id)


def query(
    user: User,
    store: LedgerStore,
    limit: int = DEFAULT_QUERY_LIMIT,
) -> List[Entry]:
    """Return the user's most recent entries, newest first."""

    if not isinstance(limit, int) or limit <= 0:
        limit = DEFAULT_QUERY_LIMIT
    return store.list_recent_entries(user.id, limit)
