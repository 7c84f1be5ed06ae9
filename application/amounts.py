from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from domain.errors import InvalidAmount

# Plain decimal only: no thousands separators, no decimal comma, no exponent.
_AMOUNT_RE = re.compile(r"^(?P<sign>[+-])?(?P<number>[0-9]+(?:\.[0-9]+)?|\.[0-9]+)$")

# Largest magnitude accepted, in major units. Keeps cents inside a 64-bit column.
MAX_AMOUNT = Decimal("1000000000000")

DEFAULT_QUERY_LIMIT = 10
MAX_QUERY_LIMIT = 50


def parse_amount(text: str) -> int:
    """
    Parse a decimal money string into signed integer cents.

    Accepted: "12", "12.3", "12.345", ".5", "+5", "-3.50".
    Fractions of a cent are rounded half-up (away from zero).
    """

    candidate = (text or "").strip()
    match = _AMOUNT_RE.match(candidate)
    if match is None:
        raise InvalidAmount(f"'{candidate}' is not a valid amount.")

    value = Decimal(match.group("number"))
    if value > MAX_AMOUNT:
        raise InvalidAmount(f"'{candidate}' is too large.")
    if match.group("sign") == "-":
        value = -value

    cents = (value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(cents)


def parse_positive_amount(text: str) -> int:
    cents = parse_amount(text)
    if cents <= 0:
        raise InvalidAmount("Amount must be positive for /save.")
    return cents


def parse_signed_amount(text: str) -> int:
    cents = parse_amount(text)
    if cents == 0:
        raise InvalidAmount("Adjustment must be non-zero.")
    return cents


def split_amount_and_reason(args: str) -> tuple[str, Optional[str]]:
    """
    Split "amount [reason...]" into its two parts.

    The reason is everything after the first whitespace-delimited token,
    trimmed; an empty reason is returned as None.
    """

    parts = (args or "").strip().split(maxsplit=1)
    if not parts:
        raise InvalidAmount("Missing amount.")

    reason = parts[1].strip() if len(parts) > 1 else ""
    return parts[0], reason or None


def parse_query_limit(
    text: Optional[str],
    default: int = DEFAULT_QUERY_LIMIT,
    maximum: int = MAX_QUERY_LIMIT,
) -> int:
    try:
        limit = int((text or "").strip())
    except ValueError:
        return default
    if limit <= 0:
        return default
    return min(limit, maximum)


def format_cents(cents: int) -> str:
    sign = "-" if cents < 0 else ""
    whole, fraction = divmod(abs(cents), 100)
    return f"{sign}${whole:,}.{fraction:02d}"
