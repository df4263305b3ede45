"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse

from . import __version__
from .api.reconcile import get_store
from .api.reconcile import router as reconcile_router
from .config import settings
from .health import get_health_status
from .services.session import SessionStore, session_store

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await session_store.close()


app = FastAPI(title="Wallet Reconciliation", version=__version__, lifespan=lifespan)
app.include_router(reconcile_router)


@app.get("/")
async def root():
    return {"message": "Wallet reconciliation running"}


@app.get("/health")
async def health():
    """Liveness check - always returns OK if app is running."""
    return {"status": "ok"}


@app.get("/health/ready")
async def health_ready(store: Annotated[SessionStore, Depends(get_store)]):
    """Readiness check - checks Redis and the spreadsheet engine."""
    status = await get_health_status(store)
    code = 200 if status["status"] == "healthy" else 503
    return JSONResponse(content=status, status_code=code)


@app.get("/health/full")
async def health_full(store: Annotated[SessionStore, Depends(get_store)]):
    """Full health check with details."""
    return await get_health_status(store)
