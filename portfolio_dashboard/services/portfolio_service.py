from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import Protocol

from portfolio_dashboard.config import Settings, get_settings
from portfolio_dashboard.integrations.smartapi_client import PortfolioSourceError, build_portfolio_client
from portfolio_dashboard.models.holding import Holding, InvalidHolding
from portfolio_dashboard.models.schemas import (
    AdditionalAssets,
    DashboardResponse,
    HoldingRow,
    LoadStatusResponse,
    MetricsResponse,
    PerformerItem,
)
from portfolio_dashboard.services.dashboard_state import DashboardSnapshot, DashboardState
from portfolio_dashboard.services.portfolio_metrics import compute_aggregate, top_gainers, top_losers
from portfolio_dashboard.utils.formatting import display_symbol, format_currency, format_percentage, format_price
from portfolio_dashboard.utils.time import format_clock

logger = logging.getLogger(__name__)


class HoldingsClient(Protocol):
    def get_holdings(self) -> list[Holding]: ...


class PortfolioService:
    def __init__(
        self,
        client: HoldingsClient | None = None,
        state: DashboardState | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.client = client or build_portfolio_client(self.settings)
        self.state = state or DashboardState()

    def refresh(self) -> DashboardSnapshot | None:
        """Run one load cycle. Returns None if another cycle is still running."""
        if not self.state.begin_load():
            logger.info("Portfolio load already in flight, skipping refresh")
            return None

        try:
            holdings = self.client.get_holdings()
        except (PortfolioSourceError, InvalidHolding) as exc:
            logger.warning("Portfolio load failed", extra={"error": str(exc)})
            return self.state.fail(str(exc))
        except Exception as exc:
            logger.exception("Portfolio load failed unexpectedly", extra={"error": str(exc)})
            return self.state.fail(f"Unexpected error: {exc}")

        snapshot = self.state.complete(holdings)
        logger.info("Portfolio loaded", extra={"holdings": len(snapshot.holdings)})
        return snapshot

    def refresh_in_background(self) -> threading.Thread:
        thread = threading.Thread(target=self.refresh, name="portfolio-load", daemon=True)
        thread.start()
        return thread

    def snapshot(self) -> DashboardSnapshot:
        return self.state.snapshot()

    def _symbol(self, holding: Holding) -> str:
        return display_symbol(holding.trading_symbol, self.settings.display_symbol_suffix)

    def _clock(self, snapshot: DashboardSnapshot) -> str | None:
        if snapshot.last_updated is None:
            return None
        return format_clock(snapshot.last_updated, self.settings.display_timezone)

    def _default_n(self, n: int | None) -> int:
        return self.settings.top_performers_limit if n is None else n

    def metrics(self, snapshot: DashboardSnapshot | None = None) -> MetricsResponse:
        snap = snapshot or self.snapshot()
        metrics = compute_aggregate(snap.holdings)
        return MetricsResponse(
            metrics=metrics,
            total_investment_display=format_currency(metrics.total_investment),
            current_value_display=format_currency(metrics.current_value),
            total_pnl_display=format_currency(metrics.total_pnl),
            total_pnl_percentage_display=format_percentage(metrics.total_pnl_percentage),
        )

    def holding_rows(self, snapshot: DashboardSnapshot | None = None) -> list[HoldingRow]:
        snap = snapshot or self.snapshot()
        return [
            HoldingRow(
                symbol_token=h.symbol_token,
                symbol=self._symbol(h),
                exchange=h.exchange,
                quantity=h.quantity,
                average_price=h.average_price,
                ltp=h.last_traded_price,
                current_value=h.current_value,
                pnl=h.profit_and_loss,
                pnl_percentage=h.pnl_percentage,
                is_profit=h.profit_and_loss >= 0,
                average_price_display=format_price(h.average_price),
                ltp_display=format_price(h.last_traded_price),
                current_value_display=format_currency(h.current_value),
                pnl_display=format_currency(h.profit_and_loss),
                pnl_percentage_display=format_percentage(h.pnl_percentage),
            )
            for h in snap.holdings
        ]

    def _performers(self, ranked: Sequence[Holding]) -> list[PerformerItem]:
        return [
            PerformerItem(
                rank=idx,
                symbol_token=h.symbol_token,
                symbol=self._symbol(h),
                pnl=h.profit_and_loss,
                pnl_percentage=h.pnl_percentage,
                pnl_display=format_currency(h.profit_and_loss),
                pnl_percentage_display=format_percentage(h.pnl_percentage),
            )
            for idx, h in enumerate(ranked, start=1)
        ]

    def top_gainers(self, n: int | None = None, snapshot: DashboardSnapshot | None = None) -> list[PerformerItem]:
        snap = snapshot or self.snapshot()
        return self._performers(top_gainers(snap.holdings, self._default_n(n)))

    def top_losers(self, n: int | None = None, snapshot: DashboardSnapshot | None = None) -> list[PerformerItem]:
        snap = snapshot or self.snapshot()
        return self._performers(top_losers(snap.holdings, self._default_n(n)))

    def additional_assets(self) -> AdditionalAssets:
        mutual_funds = self.settings.mutual_fund_value_inr
        wallet = self.settings.wallet_value_inr
        return AdditionalAssets(
            mutual_funds=mutual_funds,
            wallet=wallet,
            total=mutual_funds + wallet,
            mutual_funds_display=format_currency(mutual_funds),
            wallet_display=format_currency(wallet),
        )

    def status(self) -> LoadStatusResponse:
        snap = self.snapshot()
        return LoadStatusResponse(
            status=snap.status,
            reason=snap.reason,
            holdings_count=len(snap.holdings),
            last_updated=snap.last_updated,
            last_updated_display=self._clock(snap),
        )

    def dashboard(self) -> DashboardResponse:
        snap = self.snapshot()
        return DashboardResponse(
            status=snap.status,
            reason=snap.reason,
            last_updated=snap.last_updated,
            last_updated_display=self._clock(snap),
            summary=self.metrics(snap),
            holdings=self.holding_rows(snap),
            top_gainers=self.top_gainers(snapshot=snap),
            top_losers=self.top_losers(snapshot=snap),
            additional_assets=self.additional_assets(),
        )
