"""Health check endpoints."""

import asyncio
from typing import Any

import openpyxl

from .services.session import SessionStore


async def check_session_store(store: SessionStore) -> dict[str, Any]:
    """Check Redis connectivity of the session store."""
    try:
        await asyncio.wait_for(store.ping(), timeout=5.0)
        return {
            "status": "healthy",
            "active_sessions": await store.count(),
            "ttl_seconds": store.ttl,
        }
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}


def check_spreadsheet_engine() -> dict[str, Any]:
    """Check that workbooks can be created in memory."""
    try:
        workbook = openpyxl.Workbook()
        workbook.close()
        return {"status": "healthy", "version": openpyxl.__version__}
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}


async def get_health_status(store: SessionStore) -> dict[str, Any]:
    """Get overall health status."""
    sessions = await check_session_store(store)
    spreadsheet = check_spreadsheet_engine()

    all_healthy = all(s.get("status") == "healthy" for s in [sessions, spreadsheet])

    return {
        "status": "healthy" if all_healthy else "degraded",
        "services": {
            "sessions": sessions,
            "spreadsheet": spreadsheet,
        },
    }
