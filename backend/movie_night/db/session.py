"""
SQLAlchemy engine + session factory.
The nomination store opens one short-lived session from *SessionLocal* per operation.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from movie_night.core.config import settings

engine = create_engine(
    settings.DATABASE_URL,
    # Health-check connections before handing them to the app
    pool_pre_ping=True,
    # Log every SQL statement in dev; silence in production
    echo=settings.is_dev,
)

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,  # Rows are read after commit, outside the session
)
