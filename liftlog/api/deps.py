"""Shared FastAPI dependencies: the session registry and the live workout."""

from fastapi import Depends, HTTPException, Request

from liftlog.services.active_session import ActiveWorkoutSession
from liftlog.services.registry import SessionRegistry


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_active_session(registry: SessionRegistry = Depends(get_registry)) -> ActiveWorkoutSession:
    """The live workout, or 404 when none is in progress."""
    session = registry.active
    if session is None:
        raise HTTPException(status_code=404, detail="No active workout")
    return session
