from __future__ import annotations

from collections.abc import Callable, Generator
from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from portfolio_dashboard.models.holding import Holding


class FakeHoldingsClient:
    def __init__(self, holdings: list[Holding] | None = None, error: Exception | None = None) -> None:
        self.holdings = list(holdings or [])
        self.error = error
        self.calls = 0

    def get_holdings(self) -> list[Holding]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.holdings)


def build_holding(
    token: str,
    symbol: str,
    quantity: int,
    avg: float,
    ltp: float,
    pnl: float,
    pct: float,
    exchange: str = "NSE",
) -> Holding:
    return Holding.model_validate(
        {
            "symboltoken": token,
            "tradingsymbol": symbol,
            "exchange": exchange,
            "quantity": quantity,
            "averageprice": avg,
            "ltp": ltp,
            "profitandloss": pnl,
            "pnlpercentage": pct,
        }
    )


@pytest.fixture
def make_holding() -> Callable[..., Holding]:
    return build_holding


@pytest.fixture
def fake_source() -> type[FakeHoldingsClient]:
    return FakeHoldingsClient


@pytest.fixture
def example_holdings() -> list[Holding]:
    return [
        build_holding("1001", "ALPHA-EQ", 10, 100.0, 120.0, 200.0, 20.0),
        build_holding("1002", "BETA-EQ", 5, 50.0, 40.0, -50.0, -20.0, exchange="BSE"),
    ]


@pytest.fixture
def test_settings():
    from portfolio_dashboard.config import settings

    return replace(
        settings,
        portfolio_source="sample",
        portfolio_load_on_startup=True,
        portfolio_load_in_background=False,
        top_performers_limit=3,
        display_symbol_suffix="-EQ",
        display_timezone="Asia/Kolkata",
        mutual_fund_value_inr=2230.0,
        wallet_value_inr=7978.0,
    )


@pytest.fixture
def test_ctx(monkeypatch, example_holdings, test_settings) -> Generator[dict, None, None]:
    import portfolio_dashboard.api.routes as routes_module
    import portfolio_dashboard.app as app_module
    from portfolio_dashboard.services.portfolio_service import PortfolioService

    source = FakeHoldingsClient(example_holdings)
    service = PortfolioService(client=source, settings=test_settings)

    monkeypatch.setattr(routes_module, "portfolio_service", service)
    monkeypatch.setattr(app_module, "settings", test_settings)

    with TestClient(app_module.app) as client:
        yield {
            "client": client,
            "service": service,
            "source": source,
        }
