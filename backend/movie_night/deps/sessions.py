"""
Session dependencies — shared by every /sessions endpoint.

Usage in any route:
    from movie_night.deps.sessions import get_controller

    @router.get("/{session_id}/thing")
    async def thing(controller: NominationController = Depends(get_controller)):
        ...

Tests swap the registry with app.dependency_overrides[get_registry].
"""
from fastapi import Depends, HTTPException, status

from movie_night.core.config import settings
from movie_night.db.session import SessionLocal
from movie_night.services.nomination_store import NominationStore
from movie_night.services.session_registry import SessionNotFoundError, SessionRegistry
from movie_night.services.voting_controller import NominationController


def _new_controller() -> NominationController:
    return NominationController(store=NominationStore(SessionLocal))


registry = SessionRegistry(_new_controller, idle_ttl=settings.SESSION_IDLE_TTL_SECONDS)


def get_registry() -> SessionRegistry:
    return registry


def get_store() -> NominationStore:
    return NominationStore(SessionLocal)


def get_controller(
    session_id: str,
    sessions: SessionRegistry = Depends(get_registry),
) -> NominationController:
    """Resolve the path's *session_id*; 404 when it is unknown."""
    try:
        return sessions.get(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": {"code": "SESSION_NOT_FOUND", "message": str(exc)}},
        ) from exc
