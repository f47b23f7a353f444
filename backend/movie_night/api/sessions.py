"""
Sessions API — /sessions
─────────────────────────
One session per participant tab. State is held server-side by a
NominationController; every response is a projection of that state.

Endpoints:
  POST   /sessions                                        — Open a session (fresh vote budget)
  GET    /sessions/{id}                                   — Refreshed session state
  DELETE /sessions/{id}                                   — Close a session
  PUT    /sessions/{id}/query                             — Search-as-you-type (debounced)
  GET    /sessions/{id}/search                            — Immediate search
  POST   /sessions/{id}/selection                         — Pick a candidate
  POST   /sessions/{id}/nominations                       — Nominate candidate / selection
  POST   /sessions/{id}/nominations/{nomination_id}/vote    — Set vote count
  POST   /sessions/{id}/nominations/{nomination_id}/watched — Toggle watched
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status

from movie_night.deps.sessions import get_controller, get_registry
from movie_night.schemas.nominations import (
    Nomination,
    QueryAcceptedResponse,
    QueryRequest,
    SearchCandidate,
    SearchResponse,
    SelectMovieRequest,
    SessionStateResponse,
    SubmitNominationRequest,
    VoteRequest,
    WatchedRequest,
)
from movie_night.services.nomination_store import NominationNotFoundError, NominationStoreError
from movie_night.services.session_registry import SessionRegistry
from movie_night.services.voting_controller import (
    CandidateNotFoundError,
    DuplicateNominationError,
    NegativeVoteError,
    NominationController,
    VoteBudgetExceededError,
)

router = APIRouter()


def _error(code: str, message: str) -> dict:
    """Standard error envelope."""
    return {"error": {"code": code, "message": message}}


def _state_response(session_id: str, controller: NominationController) -> SessionStateResponse:
    state = controller.state
    return SessionStateResponse(
        session_id=session_id,
        search_text=state.search_text,
        search_results=controller.search_view(),
        selected_movie=state.selected_movie,
        nominations=controller.ranked_nominations(),
        votes_used=state.votes_used,
        votes_remaining=state.votes_remaining,
        max_votes=state.max_votes,
    )


def _store_unavailable(exc: NominationStoreError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=_error("STORE_UNAVAILABLE", str(exc)),
    )


def _nomination_not_found(exc: NominationNotFoundError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=_error("NOMINATION_NOT_FOUND", str(exc)),
    )


# ── Routes ────────────────────────────────────────────────────────────────────

@router.post("", response_model=SessionStateResponse, status_code=status.HTTP_201_CREATED)
async def open_session(
    sessions: SessionRegistry = Depends(get_registry),
) -> SessionStateResponse:
    session_id, controller = sessions.create()
    await controller.refresh()
    return _state_response(session_id, controller)


@router.get("/{session_id}", response_model=SessionStateResponse)
async def get_session(
    session_id: str,
    controller: NominationController = Depends(get_controller),
) -> SessionStateResponse:
    """Re-poll the shared store and return this session's view."""
    await controller.refresh()
    return _state_response(session_id, controller)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    session_id: str,
    sessions: SessionRegistry = Depends(get_registry),
) -> None:
    if not sessions.close(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("SESSION_NOT_FOUND", f"Session {session_id} not found"),
        )


@router.put(
    "/{session_id}/query",
    response_model=QueryAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def update_query(
    payload: QueryRequest,
    controller: NominationController = Depends(get_controller),
) -> QueryAcceptedResponse:
    """
    Record typed text. The search runs once the text has been stable for the
    debounce window; poll GET /sessions/{id} for the candidates.
    """
    controller.set_search_text(payload.text)
    return QueryAcceptedResponse(
        search_text=payload.text,
        debounce_ms=round(controller.debounce_seconds * 1000),
    )


@router.get("/{session_id}/search", response_model=SearchResponse)
async def search_now(
    q: str = Query("", max_length=200, description="Movie title search"),
    controller: NominationController = Depends(get_controller),
) -> SearchResponse:
    await controller.search_now(q)
    return SearchResponse(query=q, items=controller.search_view())


@router.post("/{session_id}/selection", response_model=SearchCandidate)
async def select_candidate(
    payload: SelectMovieRequest,
    controller: NominationController = Depends(get_controller),
) -> SearchCandidate:
    try:
        return controller.select_movie(payload.imdb_id)
    except CandidateNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error("CANDIDATE_NOT_FOUND", str(exc)),
        ) from exc


@router.post(
    "/{session_id}/nominations",
    response_model=Nomination,
    status_code=status.HTTP_201_CREATED,
)
async def nominate(
    payload: SubmitNominationRequest | None = None,
    controller: NominationController = Depends(get_controller),
) -> Nomination:
    candidate = payload.candidate if payload is not None else None
    try:
        created = await controller.submit_nomination(candidate)
    except DuplicateNominationError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_error("ALREADY_NOMINATED", str(exc)),
        ) from exc
    except NominationStoreError as exc:
        raise _store_unavailable(exc) from exc

    if created is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error("NO_MOVIE_SELECTED", "Select a movie before nominating"),
        )
    return created


@router.post("/{session_id}/nominations/{nomination_id}/vote", response_model=SessionStateResponse)
async def vote(
    session_id: str,
    nomination_id: str,
    payload: VoteRequest,
    controller: NominationController = Depends(get_controller),
) -> SessionStateResponse:
    try:
        await controller.vote(nomination_id, payload.votes)
    except NegativeVoteError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_error("NEGATIVE_VOTE", str(exc)),
        ) from exc
    except VoteBudgetExceededError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_error("VOTE_BUDGET_EXCEEDED", str(exc)),
        ) from exc
    except NominationNotFoundError as exc:
        raise _nomination_not_found(exc) from exc
    except NominationStoreError as exc:
        raise _store_unavailable(exc) from exc

    return _state_response(session_id, controller)


@router.post("/{session_id}/nominations/{nomination_id}/watched", response_model=SessionStateResponse)
async def toggle_watched(
    session_id: str,
    nomination_id: str,
    payload: WatchedRequest,
    controller: NominationController = Depends(get_controller),
) -> SessionStateResponse:
    try:
        await controller.toggle_watched(nomination_id, payload.watched)
    except NominationNotFoundError as exc:
        raise _nomination_not_found(exc) from exc
    except NominationStoreError as exc:
        raise _store_unavailable(exc) from exc

    return _state_response(session_id, controller)
