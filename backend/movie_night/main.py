"""
Movie Night API — FastAPI application entry point.

Routers are registered here. Each resource lives in movie_night/api/.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from movie_night.api import nominations, sessions
from movie_night.core.config import settings
from movie_night.core.logging import configure_logging
from movie_night.deps.sessions import registry

configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    # Cancel pending debounced searches before the loop goes away.
    registry.close_all()


app = FastAPI(
    title="Movie Night API",
    description="Nominate movies for a shared viewing session and vote on them.",
    version="0.1.0",
    docs_url="/docs" if settings.ENABLE_DOCS else None,
    redoc_url="/redoc" if settings.ENABLE_DOCS else None,
    lifespan=lifespan,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(sessions.router,    prefix="/sessions",    tags=["sessions"])
app.include_router(nominations.router, prefix="/nominations", tags=["nominations"])


# ── Health check ──────────────────────────────────────────────────────────────
@app.get("/health", tags=["system"])
def health_check() -> dict:
    """Liveness probe. Returns 200 when the server is up."""
    return {"status": "ok", "version": app.version, "env": settings.APP_ENV}
