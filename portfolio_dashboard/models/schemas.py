from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class LoadStatus(str, Enum):
    LOADING = "LOADING"
    READY = "READY"
    FAILED = "FAILED"


class PortfolioEnvelope(BaseModel):
    status: bool
    message: Optional[str] = None
    data: Optional[list[Any]] = None


class AggregateMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_investment: float
    current_value: float
    total_pnl: float
    total_pnl_percentage: float
    gainers_count: int
    losers_count: int
    total_holdings: int


class HoldingRow(BaseModel):
    symbol_token: str
    symbol: str
    exchange: str
    quantity: int
    average_price: float
    ltp: float
    current_value: float
    pnl: float
    pnl_percentage: float
    is_profit: bool
    average_price_display: str
    ltp_display: str
    current_value_display: str
    pnl_display: str
    pnl_percentage_display: str


class PerformerItem(BaseModel):
    rank: int
    symbol_token: str
    symbol: str
    pnl: float
    pnl_percentage: float
    pnl_display: str
    pnl_percentage_display: str


class AdditionalAssets(BaseModel):
    mutual_funds: float = 0.0
    wallet: float = 0.0
    total: float = 0.0
    mutual_funds_display: str
    wallet_display: str


class MetricsResponse(BaseModel):
    metrics: AggregateMetrics
    total_investment_display: str
    current_value_display: str
    total_pnl_display: str
    total_pnl_percentage_display: str


class LoadStatusResponse(BaseModel):
    status: LoadStatus
    reason: str | None = None
    holdings_count: int
    last_updated: dt.datetime | None = None
    last_updated_display: str | None = None


class DashboardResponse(BaseModel):
    status: LoadStatus
    reason: str | None = None
    last_updated: dt.datetime | None = None
    last_updated_display: str | None = None
    summary: MetricsResponse
    holdings: list[HoldingRow] = Field(default_factory=list)
    top_gainers: list[PerformerItem] = Field(default_factory=list)
    top_losers: list[PerformerItem] = Field(default_factory=list)
    additional_assets: AdditionalAssets
