from __future__ import annotations

from portfolio_dashboard.integrations.smartapi_client import PortfolioSourceError
from portfolio_dashboard.models.holding import InvalidHolding
from portfolio_dashboard.models.schemas import LoadStatus
from portfolio_dashboard.services.portfolio_service import PortfolioService


def test_refresh_loads_holdings(fake_source, example_holdings, test_settings) -> None:
    source = fake_source(example_holdings)
    service = PortfolioService(client=source, settings=test_settings)

    snapshot = service.refresh()

    assert snapshot is not None
    assert snapshot.status == LoadStatus.READY
    assert len(snapshot.holdings) == 2
    assert source.calls == 1


def test_failed_load_degrades_to_zero_metrics(fake_source, test_settings) -> None:
    source = fake_source(error=PortfolioSourceError("https://broker.test", "API responded with an error"))
    service = PortfolioService(client=source, settings=test_settings)

    snapshot = service.refresh()
    summary = service.metrics()

    assert snapshot.status == LoadStatus.FAILED
    assert "API responded with an error" in snapshot.reason
    assert summary.metrics.total_investment == 0
    assert summary.metrics.total_pnl_percentage == 0
    assert summary.total_pnl_display == "₹0"
    assert summary.total_pnl_percentage_display == "0.00%"


def test_invalid_holding_fails_the_load(fake_source, test_settings) -> None:
    service = PortfolioService(client=fake_source(error=InvalidHolding(3, "quantity must be >= 0")), settings=test_settings)

    snapshot = service.refresh()

    assert snapshot.status == LoadStatus.FAILED
    assert "index 3" in snapshot.reason


def test_unexpected_error_still_ends_the_load(fake_source, test_settings) -> None:
    service = PortfolioService(client=fake_source(error=KeyError("data")), settings=test_settings)

    snapshot = service.refresh()

    assert snapshot.status == LoadStatus.FAILED
    assert snapshot.reason.startswith("Unexpected error")
    assert not service.state.in_flight


def test_refresh_is_skipped_while_a_load_is_in_flight(fake_source, example_holdings, test_settings) -> None:
    source = fake_source(example_holdings)
    service = PortfolioService(client=source, settings=test_settings)
    service.state.begin_load()

    assert service.refresh() is None
    assert source.calls == 0


def test_background_refresh_completes(fake_source, example_holdings, test_settings) -> None:
    service = PortfolioService(client=fake_source(example_holdings), settings=test_settings)

    service.refresh_in_background().join(timeout=5)

    assert service.snapshot().status == LoadStatus.READY


def test_dashboard_view(fake_source, example_holdings, make_holding, test_settings) -> None:
    holdings = [
        *example_holdings,
        make_holding("1003", "GAMMA-EQ", 2, 500.0, 500.0, 0.0, 0.0),
        make_holding("1004", "DELTA-EQ", 1, 80.0, 100.0, 20.0, 25.0),
    ]
    service = PortfolioService(client=fake_source(holdings), settings=test_settings)
    service.refresh()

    view = service.dashboard()

    assert view.status == LoadStatus.READY
    assert view.last_updated_display is not None
    assert view.summary.metrics.total_holdings == 4
    assert [row.symbol for row in view.holdings] == ["ALPHA", "BETA", "GAMMA", "DELTA"]
    assert [item.symbol for item in view.top_gainers] == ["DELTA", "ALPHA"]
    assert [item.rank for item in view.top_gainers] == [1, 2]
    assert [item.symbol for item in view.top_losers] == ["BETA"]
    assert view.additional_assets.total == 10208.0
    assert view.additional_assets.mutual_funds_display == "₹2,230"


def test_holding_rows_carry_display_values(fake_source, example_holdings, test_settings) -> None:
    service = PortfolioService(client=fake_source(example_holdings), settings=test_settings)
    service.refresh()

    alpha, beta = service.holding_rows()

    assert alpha.average_price_display == "₹100.00"
    assert alpha.ltp_display == "₹120.00"
    assert alpha.current_value_display == "₹1,200"
    assert alpha.pnl_percentage_display == "+20.00%"
    assert alpha.is_profit
    assert beta.exchange == "BSE"
    assert beta.pnl_display == "-₹50"
    assert not beta.is_profit


def test_top_lists_default_to_configured_limit(fake_source, make_holding, test_settings) -> None:
    holdings = [make_holding(str(i), f"S{i}-EQ", 1, 10.0, 11.0, 1.0, float(i)) for i in range(1, 7)]
    service = PortfolioService(client=fake_source(holdings), settings=test_settings)
    service.refresh()

    assert [item.symbol for item in service.top_gainers()] == ["S6", "S5", "S4"]
    assert len(service.top_gainers(5)) == 5
    assert service.top_losers() == []


def test_metrics_render_for_very_large_and_overflowing_values(fake_source, make_holding, test_settings) -> None:
    holdings = [
        make_holding("61", "WHALE-EQ", 1, 1e28, 1e28, 0.0, 0.0),
        make_holding("62", "HUGE-EQ", 10, 1e308, 1e308, 1.0, 1.0),
    ]
    service = PortfolioService(client=fake_source(holdings[:1]), settings=test_settings)
    service.refresh()

    whale = service.dashboard()
    assert whale.summary.total_investment_display.replace(",", "") == "₹1" + "0" * 28
    assert whale.holdings[0].current_value_display.replace(",", "") == "₹1" + "0" * 28

    service.client = fake_source(holdings)
    service.refresh()

    summary = service.metrics()
    assert summary.total_investment_display == "₹∞"
    assert summary.current_value_display == "₹∞"
