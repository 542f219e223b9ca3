from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query

from portfolio_dashboard.models.schemas import (
    DashboardResponse,
    HoldingRow,
    LoadStatusResponse,
    MetricsResponse,
    PerformerItem,
)
from portfolio_dashboard.services.portfolio_service import PortfolioService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["portfolio-dashboard"])

portfolio_service = PortfolioService()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/portfolio", response_model=DashboardResponse)
def get_portfolio():
    return portfolio_service.dashboard()


@router.get("/portfolio/metrics", response_model=MetricsResponse)
def get_metrics():
    return portfolio_service.metrics()


@router.get("/portfolio/holdings", response_model=list[HoldingRow])
def get_holdings():
    return portfolio_service.holding_rows()


@router.get("/portfolio/top-gainers", response_model=list[PerformerItem])
def get_top_gainers(n: int | None = Query(None, ge=1, le=50, description="Number of gainers to return")):
    return portfolio_service.top_gainers(n)


@router.get("/portfolio/top-losers", response_model=list[PerformerItem])
def get_top_losers(n: int | None = Query(None, ge=1, le=50, description="Number of losers to return")):
    return portfolio_service.top_losers(n)


@router.get("/portfolio/status", response_model=LoadStatusResponse)
def get_status():
    return portfolio_service.status()


@router.post("/portfolio/refresh", response_model=LoadStatusResponse)
def refresh_portfolio():
    snapshot = portfolio_service.refresh()
    if snapshot is None:
        raise HTTPException(status_code=409, detail="A portfolio load is already in progress")
    logger.info("Portfolio refreshed on request", extra={"status": snapshot.status.value})
    return portfolio_service.status()
