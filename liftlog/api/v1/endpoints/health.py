"""Health check endpoint for load balancers and monitoring."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.api.deps import get_registry
from liftlog.db.session import get_db
from liftlog.services.registry import SessionRegistry

router = APIRouter()


@router.get("")
async def health(registry: SessionRegistry = Depends(get_registry)):
    """Liveness check; also reports whether a workout is in progress."""
    active = registry.active
    return {
        "status": "ok",
        "active_workout": str(active.session_id) if active is not None else None,
    }


@router.get("/ready")
async def readiness(db: AsyncSession = Depends(get_db)):
    """Readiness: app + DB connectivity."""
    try:
        await db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected"}
    except SQLAlchemyError as e:
        return JSONResponse(
            status_code=500,
            content={"status": "error", "database": str(e)},
        )
