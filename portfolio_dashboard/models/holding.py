from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class InvalidHolding(ValueError):
    def __init__(self, index: int, detail: str) -> None:
        super().__init__(f"Invalid holding at index {index}: {detail}")
        self.index = index
        self.detail = detail


class Holding(BaseModel):
    """One owned security as reported by the broker's holdings endpoint.

    Field aliases follow the provider's lowercase JSON keys. `profit_and_loss`
    and `pnl_percentage` are taken as supplied, never recomputed from prices.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    symbol_token: str = Field(alias="symboltoken")
    trading_symbol: str = Field(alias="tradingsymbol")
    exchange: str = ""
    quantity: int = Field(ge=0)
    average_price: float = Field(alias="averageprice", ge=0, allow_inf_nan=False)
    last_traded_price: float = Field(alias="ltp", ge=0, allow_inf_nan=False)
    profit_and_loss: float = Field(alias="profitandloss", allow_inf_nan=False)
    pnl_percentage: float = Field(alias="pnlpercentage", allow_inf_nan=False)

    isin: str | None = None
    product: str | None = None
    close: float | None = None

    @field_validator("symbol_token", mode="before")
    @classmethod
    def _coerce_token(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def current_value(self) -> float:
        return self.last_traded_price * self.quantity

    @property
    def investment(self) -> float:
        return self.average_price * self.quantity


def parse_holdings(rows: list[Any]) -> list[Holding]:
    holdings: list[Holding] = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            raise InvalidHolding(index, f"expected an object, got {type(row).__name__}")
        try:
            holdings.append(Holding.model_validate(row))
        except ValidationError as exc:
            raise InvalidHolding(index, str(exc)) from exc
    return holdings
