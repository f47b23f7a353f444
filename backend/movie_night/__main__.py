"""
Run the API with uvicorn: ``python -m movie_night`` or ``movie-night``.
Binds to settings.HOST / settings.PORT (App Runner / Cloud Run inject $PORT).
"""
import uvicorn

from movie_night.core.config import settings


def main() -> None:
    uvicorn.run(
        "movie_night.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_dev,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
