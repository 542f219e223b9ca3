from __future__ import annotations

import json
import logging
import time
from urllib.request import Request, urlopen

from pydantic import ValidationError

from portfolio_dashboard.config import Settings, get_settings
from portfolio_dashboard.models.holding import Holding, parse_holdings
from portfolio_dashboard.models.schemas import PortfolioEnvelope

logger = logging.getLogger(__name__)


class PortfolioSourceError(RuntimeError):
    def __init__(self, source: str, message: str) -> None:
        super().__init__(message)
        self.source = source


class SmartAPIPortfolioClient:
    """Reads holdings from a SmartAPI style `/portfolio` endpoint.

    The endpoint answers with `{"status": bool, "message": str, "data": [...]}`.
    Transport failures are retried with exponential backoff; a `status: false`
    answer is reported as-is without retrying.
    """

    def __init__(
        self,
        url: str | None = None,
        timeout_seconds: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        settings: Settings | None = None,
    ) -> None:
        cfg = settings or get_settings()
        self.url = url or cfg.portfolio_api_url
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else cfg.portfolio_api_timeout_seconds
        self.max_retries = max(0, max_retries if max_retries is not None else cfg.portfolio_api_max_retries)
        self.backoff_seconds = max(
            0.0, backoff_seconds if backoff_seconds is not None else cfg.portfolio_api_backoff_seconds
        )

    def _request_payload(self) -> str:
        req = Request(
            self.url,
            headers={
                "User-Agent": "Mozilla/5.0",
                "Accept": "application/json",
            },
        )
        with urlopen(req, timeout=self.timeout_seconds) as resp:
            return resp.read().decode("utf-8", errors="ignore").lstrip("\ufeff")

    def _fetch_raw(self) -> str:
        last_error: Exception | None = None

        for attempt in range(self.max_retries + 1):
            try:
                return self._request_payload()
            except OSError as exc:
                last_error = exc
                if attempt >= self.max_retries:
                    break

                sleep_for = self.backoff_seconds * (2**attempt)
                logger.warning(
                    "Portfolio fetch failed, retrying",
                    extra={"url": self.url, "attempt": attempt + 1, "error": str(exc)},
                )
                time.sleep(sleep_for)

        raise PortfolioSourceError(
            source=self.url,
            message=f"Failed to fetch portfolio from {self.url}: {last_error}",
        )

    def fetch_envelope(self) -> PortfolioEnvelope:
        payload = self._fetch_raw()
        try:
            return PortfolioEnvelope.model_validate(json.loads(payload))
        except json.JSONDecodeError as exc:
            raise PortfolioSourceError(source=self.url, message=f"Portfolio response is not JSON: {exc}") from exc
        except ValidationError as exc:
            raise PortfolioSourceError(source=self.url, message=f"Malformed portfolio envelope: {exc}") from exc

    def get_holdings(self) -> list[Holding]:
        envelope = self.fetch_envelope()
        if not envelope.status:
            raise PortfolioSourceError(
                source=self.url,
                message=f"Portfolio API responded with an error: {envelope.message or 'no message'}",
            )
        return parse_holdings(envelope.data or [])


class SampleHoldingsClient:
    """Offline holdings for demos and local runs without the broker endpoint."""

    def get_holdings(self) -> list[Holding]:
        return parse_holdings(
            [
                {
                    "symboltoken": "2885",
                    "tradingsymbol": "RELIANCE-EQ",
                    "exchange": "NSE",
                    "quantity": 8,
                    "averageprice": 2860.0,
                    "ltp": 2931.5,
                    "profitandloss": 572.0,
                    "pnlpercentage": 2.5,
                },
                {
                    "symboltoken": "11536",
                    "tradingsymbol": "TCS-EQ",
                    "exchange": "NSE",
                    "quantity": 10,
                    "averageprice": 3550.0,
                    "ltp": 3905.0,
                    "profitandloss": 3550.0,
                    "pnlpercentage": 10.0,
                },
                {
                    "symboltoken": "1594",
                    "tradingsymbol": "INFY-EQ",
                    "exchange": "NSE",
                    "quantity": 18,
                    "averageprice": 1540.0,
                    "ltp": 1463.0,
                    "profitandloss": -1386.0,
                    "pnlpercentage": -5.0,
                },
                {
                    "symboltoken": "1333",
                    "tradingsymbol": "HDFCBANK-EQ",
                    "exchange": "NSE",
                    "quantity": 12,
                    "averageprice": 1620.0,
                    "ltp": 1620.0,
                    "profitandloss": 0.0,
                    "pnlpercentage": 0.0,
                },
                {
                    "symboltoken": "3045",
                    "tradingsymbol": "SBIN-EQ",
                    "exchange": "BSE",
                    "quantity": 25,
                    "averageprice": 812.4,
                    "ltp": 790.1,
                    "profitandloss": -557.5,
                    "pnlpercentage": -2.74,
                },
            ]
        )


def build_portfolio_client(settings: Settings | None = None) -> SmartAPIPortfolioClient | SampleHoldingsClient:
    cfg = settings or get_settings()
    if cfg.portfolio_source == "sample":
        return SampleHoldingsClient()
    return SmartAPIPortfolioClient(settings=cfg)
