from dataclasses import dataclass
from datetime import datetime
from typing import Optional

KIND_SAVE = "save"
KIND_ADJUST = "adjust"
ENTRY_KINDS = (KIND_SAVE, KIND_ADJUST)


@dataclass(frozen=True)
class User:
    """
    Domain representation of a saver.

    `id` is the internal UUID; `external_user_id` is the identifier the chat
    platform gave us and is the natural key used to find the user again.
    """

    id: str
    external_user_id: str
    username: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]
    created_at: datetime

    @property
    def display_name(self) -> str:
        if self.username:
            return f"@{self.username}"
        return self.first_name or self.external_user_id


@dataclass(frozen=True)
class Entry:
    """
    A single immutable ledger line.

    `amount_cents` is signed: saves are always positive, adjustments carry
    their own sign.
    """

    id: int
    user_id: str
    amount_cents: int
    kind: str
    reason: Optional[str]
    created_at: datetime
