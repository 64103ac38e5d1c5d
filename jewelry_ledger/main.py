"""
Jewelry Ledger — FastAPI Application.

This is the entry point for the application.
All routers are registered here.
"""

import uvicorn
from fastapi import FastAPI

from jewelry_ledger.config import get_settings
from jewelry_ledger.logging_config import setup_logging
from jewelry_ledger.api.health import router as health_router
from jewelry_ledger.api.accounts import router as accounts_router
from jewelry_ledger.api.transactions import router as transactions_router
from jewelry_ledger.api.cost_centers import router as cost_centers_router
from jewelry_ledger.api.currencies import router as currencies_router
from jewelry_ledger.api.reports import router as reports_router
from jewelry_ledger.api.recurring import router as recurring_router

settings = get_settings()

setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Double-entry accounting core for a jewelry retail ERP",
)

# Register routers
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(transactions_router)
app.include_router(cost_centers_router)
app.include_router(currencies_router)
app.include_router(reports_router)
app.include_router(recurring_router)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        "jewelry_ledger.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
