from __future__ import annotations

from collections.abc import Sequence

from portfolio_dashboard.models.holding import Holding
from portfolio_dashboard.models.schemas import AggregateMetrics


DEFAULT_TOP_N = 3


def _token_key(token: str) -> tuple[int, int, str]:
    # Numeric tokens compare by value ("99" before "100") and sort ahead of other tokens.
    if token.isdigit():
        return (0, len(token.lstrip("0")), token.lstrip("0"))
    return (1, 0, token)


def compute_aggregate(holdings: Sequence[Holding]) -> AggregateMetrics:
    total_investment = sum(h.average_price * h.quantity for h in holdings)
    current_value = sum(h.last_traded_price * h.quantity for h in holdings)
    total_pnl = sum(h.profit_and_loss for h in holdings)
    total_pnl_percentage = (total_pnl / total_investment) * 100 if total_investment > 0 else 0.0
    return AggregateMetrics(
        total_investment=total_investment,
        current_value=current_value,
        total_pnl=total_pnl,
        total_pnl_percentage=total_pnl_percentage,
        gainers_count=sum(1 for h in holdings if h.profit_and_loss > 0),
        losers_count=sum(1 for h in holdings if h.profit_and_loss < 0),
        total_holdings=len(holdings),
    )


def top_gainers(holdings: Sequence[Holding], n: int = DEFAULT_TOP_N) -> list[Holding]:
    if n <= 0:
        return []
    gainers = [h for h in holdings if h.profit_and_loss > 0]
    gainers.sort(key=lambda h: (-h.pnl_percentage, _token_key(h.symbol_token)))
    return gainers[:n]


def top_losers(holdings: Sequence[Holding], n: int = DEFAULT_TOP_N) -> list[Holding]:
    if n <= 0:
        return []
    losers = [h for h in holdings if h.profit_and_loss < 0]
    losers.sort(key=lambda h: (h.pnl_percentage, _token_key(h.symbol_token)))
    return losers[:n]
