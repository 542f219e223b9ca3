from __future__ import annotations

import os
from dataclasses import dataclass


SUPPORTED_APP_ENVS = {"SIT", "UAT"}
SUPPORTED_PORTFOLIO_SOURCES = {"remote", "sample"}
DEFAULT_PORTFOLIO_API_URL = "https://angelone-smartapi.onrender.com/portfolio"


def _current_app_env() -> str:
    default_env = "UAT" if os.getenv("RAILWAY_ENVIRONMENT", "").strip() else "SIT"
    raw = os.getenv("APP_ENV", default_env).strip().upper()
    if not raw:
        return default_env
    if raw not in SUPPORTED_APP_ENVS:
        raise ValueError(f"Invalid APP_ENV: {raw}. Supported values: {sorted(SUPPORTED_APP_ENVS)}")
    return raw


def _get_first_set(*env_names: str) -> str:
    for env_name in env_names:
        value = os.getenv(env_name, "").strip()
        if value:
            return value
    return ""


def _build_portfolio_api_url() -> str:
    app_env = _current_app_env()
    return _get_first_set(f"{app_env}_PORTFOLIO_API_URL", "PORTFOLIO_API_URL") or DEFAULT_PORTFOLIO_API_URL


def _portfolio_source() -> str:
    raw = os.getenv("PORTFOLIO_SOURCE", "remote").strip().lower() or "remote"
    if raw not in SUPPORTED_PORTFOLIO_SOURCES:
        raise ValueError(
            f"Invalid PORTFOLIO_SOURCE: {raw}. Supported values: {sorted(SUPPORTED_PORTFOLIO_SOURCES)}"
        )
    return raw


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == "true"


@dataclass(frozen=True)
class Settings:
    app_env: str = _current_app_env()
    app_name: str = os.getenv("APP_NAME", "portfolio_dashboard")
    app_debug: bool = _env_flag("APP_DEBUG", "false")
    app_host: str = os.getenv("APP_HOST", "0.0.0.0")
    app_port: int = int(os.getenv("APP_PORT", "8004"))

    portfolio_source: str = _portfolio_source()
    portfolio_api_url: str = _build_portfolio_api_url()
    portfolio_api_timeout_seconds: float = float(os.getenv("PORTFOLIO_API_TIMEOUT_SECONDS", "20"))
    portfolio_api_max_retries: int = int(os.getenv("PORTFOLIO_API_MAX_RETRIES", "1"))
    portfolio_api_backoff_seconds: float = float(os.getenv("PORTFOLIO_API_BACKOFF_SECONDS", "0.5"))
    portfolio_load_on_startup: bool = _env_flag("PORTFOLIO_LOAD_ON_STARTUP", "true")
    portfolio_load_in_background: bool = _env_flag("PORTFOLIO_LOAD_IN_BACKGROUND", "true")

    top_performers_limit: int = int(os.getenv("TOP_PERFORMERS_LIMIT", "3"))
    display_symbol_suffix: str = os.getenv("DISPLAY_SYMBOL_SUFFIX", "-EQ")
    display_timezone: str = os.getenv("DISPLAY_TIMEZONE", "Asia/Kolkata")

    mutual_fund_value_inr: float = float(os.getenv("MUTUAL_FUND_VALUE_INR", "0"))
    wallet_value_inr: float = float(os.getenv("WALLET_VALUE_INR", "0"))


settings = Settings()


def get_settings() -> Settings:
    return settings
