from __future__ import annotations

import math
from decimal import ROUND_HALF_EVEN, Decimal, localcontext

RUPEE = "₹"


def _group_indian(digits: str) -> str:
    # Last three digits form one group, the rest are grouped in pairs: 1,25,000.
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs: list[str] = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_currency(amount: float) -> str:
    value = float(amount)
    if math.isnan(value):
        return f"{RUPEE}NaN"
    if math.isinf(value):
        return f"-{RUPEE}∞" if value < 0 else f"{RUPEE}∞"
    exact = Decimal(repr(value))
    # Quantizing to units needs one digit per integer place.
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, exact.adjusted() + 2)
        rounded = exact.quantize(Decimal("1"), rounding=ROUND_HALF_EVEN)
    if rounded == 0:
        return f"{RUPEE}0"
    sign = "-" if rounded < 0 else ""
    return f"{sign}{RUPEE}{_group_indian(str(abs(int(rounded))))}"


def format_percentage(percent: float) -> str:
    prefix = "+" if percent > 0 else ""
    return f"{prefix}{percent:.2f}%"


def format_price(price: float) -> str:
    return f"{RUPEE}{price:.2f}"


def display_symbol(trading_symbol: str, suffix: str = "-EQ") -> str:
    if suffix:
        return trading_symbol.removesuffix(suffix)
    return trading_symbol
