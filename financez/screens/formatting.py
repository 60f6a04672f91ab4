"""Display formatting for amounts, percentages and timestamps."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from financez.models.money import round_cents


HIDDEN_BALANCE = "••••••"


def format_money(amount: Decimal, symbol: str = "$") -> str:
    """'$1,234.50'; negative amounts as '-$1,234.50'."""
    value = round_cents(Decimal(str(amount)))
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_signed_amount(amount: Decimal, symbol: str = "$") -> str:
    """Transaction amounts: '+$25.00' for credits, '-$9.99' for debits."""
    value = round_cents(Decimal(str(amount)))
    sign = "+" if value > 0 else "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_balance(amount: Decimal, visible: bool = True, symbol: str = "$") -> str:
    return format_money(amount, symbol) if visible else HIDDEN_BALANCE


def format_percent(value: float, signed: bool = False) -> str:
    text = f"{value:.2f}%"
    if signed and value >= 0:
        return "+" + text
    return text


def time_ago(moment: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Coarse relative time with a suffix, e.g. '3 hours ago'."""
    if moment is None:
        return ""
    now = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)

    seconds = int((now - moment).total_seconds())
    if seconds < 0:
        return "in the future"
    if seconds < 45:
        return "less than a minute ago"

    for unit, size in (
        ("year", 365 * 86400),
        ("month", 30 * 86400),
        ("day", 86400),
        ("hour", 3600),
        ("minute", 60),
    ):
        count = round(seconds / size)
        if count >= 1 and seconds >= size * 0.75:
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
    return "1 minute ago"
