"""
Nomination/voting controller.

One controller per participant session. It owns the session's
ControllerState, mediates between the OMDb search client and the shared
nomination store, and enforces the session vote budget and the
already-nominated advisory. Every mutating operation re-reads the whole
store afterwards; there is no incremental sync.
"""
import logging
from collections.abc import Callable

from movie_night.core.config import settings
from movie_night.schemas.nominations import (
    ControllerState,
    Nomination,
    SearchCandidate,
    SearchCandidateView,
)
from movie_night.services.debounce import Debouncer
from movie_night.services.nomination_store import (
    NominationNotFoundError,
    NominationStore,
    NominationStoreError,
)
from movie_night.services.omdb_client import OMDbConfigError, OMDbService, OMDbUpstreamError

logger = logging.getLogger(__name__)


class VoteRejectedError(Exception):
    """Base class for votes refused before anything is written."""


class NegativeVoteError(VoteRejectedError):
    """Raised when a vote would set a negative count."""


class VoteBudgetExceededError(VoteRejectedError):
    """Raised when an increment is attempted with the session budget spent."""


class DuplicateNominationError(Exception):
    """Raised when the cached snapshot already holds the candidate's imdbID."""


class CandidateNotFoundError(Exception):
    """Raised when selecting an imdbID that is not in the current results."""


def rank_nominations(nominations: list[Nomination]) -> list[Nomination]:
    """Most votes first; ties keep store (creation) order."""
    return sorted(nominations, key=lambda item: item.votes, reverse=True)


class NominationController:
    def __init__(
        self,
        store: NominationStore,
        search_client_factory: Callable[[], OMDbService] = OMDbService,
        max_votes: int | None = None,
        debounce_seconds: float | None = None,
    ) -> None:
        self.store = store
        self._search_client_factory = search_client_factory
        self.state = ControllerState(
            max_votes=max_votes if max_votes is not None else settings.MAX_VOTES_PER_SESSION,
        )
        if debounce_seconds is None:
            debounce_seconds = settings.search_debounce_seconds
        self._debouncer = Debouncer(self.search_movies, debounce_seconds)

    # ── Store sync ────────────────────────────────────────────────────────────

    async def refresh(self) -> list[Nomination]:
        """Re-read the whole collection; keep the old snapshot if the store is down."""
        try:
            self.state.nominations = self.store.list_all()
        except NominationStoreError as exc:
            logger.warning("Nomination refresh failed, keeping cached snapshot: %s", exc)
        return self.state.nominations

    def _cached(self, nomination_id: str) -> Nomination:
        for item in self.state.nominations:
            if item.id == nomination_id:
                return item
        raise NominationNotFoundError(f"Nomination {nomination_id} not found")

    # ── Search ────────────────────────────────────────────────────────────────

    def set_search_text(self, text: str) -> None:
        """Record the typed text and schedule a debounced search for it."""
        self.state.search_text = text
        self._debouncer.push(text)

    async def search_now(self, query: str) -> list[SearchCandidate]:
        """Search immediately, dropping any debounced text still waiting."""
        self._debouncer.cancel()
        self.state.search_text = query
        return await self.search_movies(query)

    async def search_movies(self, query: str) -> list[SearchCandidate]:
        """
        Run one catalog search and publish its candidates to the state.

        Each call takes a new sequence number; a response that comes back
        after a newer search was issued is dropped without touching state.
        """
        self.state.search_seq += 1
        seq = self.state.search_seq

        if not query or not query.strip():
            self.state.search_results = []
            self.state.selected_movie = None
            return []

        candidates = await self._fetch_candidates(query)

        if seq != self.state.search_seq:
            logger.debug("Discarding stale search %d for %r", seq, query)
            return candidates

        self.state.search_results = candidates
        if (
            self.state.selected_movie is not None
            and not any(c.imdb_id == self.state.selected_movie.imdb_id for c in candidates)
        ):
            self.state.selected_movie = None
        return candidates

    async def _fetch_candidates(self, query: str) -> list[SearchCandidate]:
        try:
            client = self._search_client_factory()
            return await client.search_movies(query)
        except OMDbConfigError as exc:
            logger.warning("Movie search unavailable: %s", exc)
        except OMDbUpstreamError as exc:
            logger.warning("Movie search failed for %r: %s", query, exc)
        return []

    def select_movie(self, imdb_id: str) -> SearchCandidate:
        for candidate in self.state.search_results:
            if candidate.imdb_id == imdb_id:
                self.state.selected_movie = candidate
                return candidate
        raise CandidateNotFoundError(f"{imdb_id} is not in the current search results")

    def is_already_nominated(self, imdb_id: str) -> bool:
        return any(item.imdb_id == imdb_id for item in self.state.nominations)

    def search_view(self) -> list[SearchCandidateView]:
        """Current candidates, flagged when the cached snapshot already has them."""
        return [
            SearchCandidateView(
                **candidate.model_dump(),
                already_nominated=self.is_already_nominated(candidate.imdb_id),
            )
            for candidate in self.state.search_results
        ]

    # ── Nominations ───────────────────────────────────────────────────────────

    async def submit_nomination(
        self,
        candidate: SearchCandidate | None = None,
    ) -> Nomination | None:
        """
        Nominate *candidate*, or the selected movie when none is given.

        Returns None when there is nothing to nominate. The duplicate check
        only sees this session's last snapshot.
        """
        candidate = candidate or self.state.selected_movie
        if candidate is None:
            return None

        if self.is_already_nominated(candidate.imdb_id):
            raise DuplicateNominationError(f"{candidate.title} is already nominated")

        new_id = self.store.create(
            movie=candidate.title,
            imdb_id=candidate.imdb_id,
            poster=candidate.poster,
            votes=0,
            watched=False,
        )

        self._debouncer.cancel()
        self.state.search_seq += 1
        self.state.search_text = ""
        self.state.search_results = []
        self.state.selected_movie = None

        await self.refresh()
        for item in self.state.nominations:
            if item.id == new_id:
                return item
        return Nomination(
            id=new_id,
            movie=candidate.title,
            imdb_id=candidate.imdb_id,
            poster=candidate.poster,
        )

    async def vote(self, nomination_id: str, requested_votes: int) -> Nomination:
        """
        Set a nomination's vote count to *requested_votes*.

        Increments spend one unit of the session budget per call no matter
        the step size; decrements never spend or refund budget.
        """
        if requested_votes < 0:
            logger.info("Rejected negative vote %d on %s", requested_votes, nomination_id)
            raise NegativeVoteError("Votes cannot go below zero")

        current = self._cached(nomination_id)
        is_increment = requested_votes > current.votes
        if is_increment and self.state.votes_used >= self.state.max_votes:
            logger.info("Rejected vote on %s: session budget spent", nomination_id)
            raise VoteBudgetExceededError(
                f"You have used all {self.state.max_votes} votes for this session"
            )

        self.store.update(nomination_id, {"votes": requested_votes})
        if is_increment:
            self.state.votes_used += 1

        await self.refresh()
        return self._cached_or(nomination_id, current)

    async def toggle_watched(self, nomination_id: str, current_value: bool) -> Nomination:
        """Flip the watched flag. Not subject to the vote budget."""
        self._cached(nomination_id)
        self.store.update(nomination_id, {"watched": not current_value})
        await self.refresh()
        return self._cached(nomination_id)

    def _cached_or(self, nomination_id: str, default: Nomination) -> Nomination:
        try:
            return self._cached(nomination_id)
        except NominationNotFoundError:
            return default

    # ── View ──────────────────────────────────────────────────────────────────

    @property
    def debounce_seconds(self) -> float:
        return self._debouncer.delay

    def ranked_nominations(self) -> list[Nomination]:
        return rank_nominations(self.state.nominations)

    def snapshot(self) -> ControllerState:
        return self.state.model_copy(deep=True)

    def close(self) -> None:
        """Cancel pending input and invalidate any search still in flight."""
        self._debouncer.close()
        self.state.search_seq += 1
