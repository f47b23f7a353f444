"""
Nominations API — /nominations
───────────────────────────────
Read-only view of the shared list for clients without a session
(e.g. a TV screen showing the standings).

Endpoints:
  GET /nominations — All nominations, most votes first
"""
from fastapi import APIRouter, Depends, HTTPException, status

from movie_night.deps.sessions import get_store
from movie_night.schemas.nominations import Nomination
from movie_night.services.nomination_store import NominationStore, NominationStoreError
from movie_night.services.voting_controller import rank_nominations

router = APIRouter()


@router.get("", response_model=list[Nomination])
def list_nominations(store: NominationStore = Depends(get_store)) -> list[Nomination]:
    try:
        return rank_nominations(store.list_all())
    except NominationStoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": {"code": "STORE_UNAVAILABLE", "message": str(exc)}},
        ) from exc
