"""
Nomination store — the shared collection every session reads and writes.

No cross-operation transactions and no uniqueness on imdbID: each call opens
its own session, commits and closes. Last writer wins.
"""
import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from movie_night.db.models import Nomination as NominationRow
from movie_night.schemas.nominations import Nomination

logger = logging.getLogger(__name__)

# Fields a caller may merge into an existing nomination.
UPDATABLE_FIELDS = frozenset({"votes", "watched"})


class NominationStoreError(Exception):
    """Raised when the backing database cannot serve a store operation."""


class NominationNotFoundError(Exception):
    """Raised when an update targets an id the store does not hold."""


def map_nomination(row: NominationRow) -> Nomination | None:
    """Serialize a row, defaulting optional fields; rows without imdbID are skipped."""
    imdb_id = (row.imdb_id or "").strip()
    if not imdb_id:
        return None
    return Nomination(
        id=row.id,
        movie=row.movie or "",
        imdb_id=imdb_id,
        poster=row.poster or None,
        votes=max(0, row.votes or 0),
        watched=bool(row.watched),
    )


class NominationStore:
    """List, create and partial update over the nominations table."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def list_all(self) -> list[Nomination]:
        """Return every valid nomination in creation order."""
        try:
            with self._session_factory() as db:
                rows = (
                    db.query(NominationRow)
                    .order_by(NominationRow.created_at.asc(), NominationRow.id.asc())
                    .all()
                )
        except SQLAlchemyError as exc:
            raise NominationStoreError("Could not list nominations") from exc

        nominations: list[Nomination] = []
        for row in rows:
            item = map_nomination(row)
            if item is None:
                logger.debug("Skipping nomination %s without imdbID", row.id)
                continue
            nominations.append(item)
        return nominations

    def create(
        self,
        movie: str,
        imdb_id: str,
        poster: str | None = None,
        votes: int = 0,
        watched: bool = False,
    ) -> str:
        """Insert a nomination and return its store-assigned id."""
        row = NominationRow(
            movie=movie,
            imdb_id=imdb_id,
            poster=poster,
            votes=votes,
            watched=watched,
        )
        try:
            with self._session_factory() as db:
                db.add(row)
                db.commit()
                new_id = row.id
        except SQLAlchemyError as exc:
            raise NominationStoreError(f"Could not create nomination for {imdb_id}") from exc

        logger.info("Created nomination %s for %s", new_id, imdb_id)
        return new_id

    def update(self, nomination_id: str, fields: dict[str, Any]) -> None:
        """Merge *fields* into the nomination with *nomination_id*."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        try:
            with self._session_factory() as db:
                row = db.query(NominationRow).filter(NominationRow.id == nomination_id).first()
                if row is None:
                    raise NominationNotFoundError(f"Nomination {nomination_id} not found")
                for key, value in fields.items():
                    setattr(row, key, value)
                db.add(row)
                db.commit()
        except SQLAlchemyError as exc:
            raise NominationStoreError(f"Could not update nomination {nomination_id}") from exc
