from __future__ import annotations

import logging
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from portfolio_dashboard.api import routes as api_routes
from portfolio_dashboard.config import settings
from portfolio_dashboard.models.schemas import LoadStatus
from portfolio_dashboard.utils.formatting import format_currency, format_percentage

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

_PACKAGE_DIR = Path(__file__).resolve().parent

app = FastAPI(
    title="portfolio_dashboard",
    description="Holdings dashboard with aggregate P&L metrics and top performers",
    version="0.1.0",
    debug=settings.app_debug,
)
app.mount("/static", StaticFiles(directory=_PACKAGE_DIR / "static"), name="static")
templates = Jinja2Templates(directory=_PACKAGE_DIR / "templates")
templates.env.filters["currency"] = format_currency
templates.env.filters["percentage"] = format_percentage


@app.on_event("startup")
def startup_event() -> None:
    if not settings.portfolio_load_on_startup:
        return
    service = api_routes.portfolio_service
    if settings.portfolio_load_in_background:
        service.refresh_in_background()
        logging.info("Portfolio load started in background", extra={"source": settings.portfolio_source})
        return
    service.refresh()


app.include_router(api_routes.router)


@app.get("/", response_class=HTMLResponse)
def home(request: Request):
    service = api_routes.portfolio_service
    if service.snapshot().status == LoadStatus.LOADING:
        return templates.TemplateResponse(request, "loading.html", {"app_name": settings.app_name})
    return templates.TemplateResponse(
        request,
        "index.html",
        {"app_name": settings.app_name, "dashboard": service.dashboard()},
    )


def run() -> None:
    uvicorn.run(app, host=settings.app_host, port=settings.app_port)
