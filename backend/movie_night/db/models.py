"""
SQLAlchemy ORM models.

The nominations table is the shared collection every session reads and
writes. Optional columns stay nullable so rows written by older clients
(no poster, no watched flag) still load; readers default them.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase


# ── Base ──────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Timestamp helper ──────────────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ── Models ────────────────────────────────────────────────────────────────────

class Nomination(Base):
    """
    One movie proposed for the shared viewing session.

    imdb_id is deliberately not unique: duplicate nominations are only
    advised against by the voting controller.
    """
    __tablename__ = "nominations"

    id = Column(String(36), primary_key=True, default=_new_id)
    movie = Column(String(500), nullable=False)
    imdb_id = Column("imdb_id", String(20), nullable=True, index=True)
    poster = Column(String(1000), nullable=True)
    votes = Column(Integer, default=0, nullable=True)
    watched = Column(Boolean, default=False, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("votes >= 0", name="chk_nominations_votes_non_negative"),
    )
