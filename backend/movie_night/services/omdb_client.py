"""
OMDb Search Client
──────────────────
Wraps the OMDb title search (``?s=``) used for nominate-as-you-type.

Flow:
  1. A session's debounced query text arrives at the voting controller.
  2. The controller calls OMDbService.search_movies().
  3. Any OMDbConfigError / OMDbUpstreamError is turned into "no results"
     by the controller, so callers never see an exception.
"""
from typing import Any

import httpx

from movie_night.core.config import settings
from movie_night.schemas.nominations import SearchCandidate

OMDB_TIMEOUT_SECONDS = 10.0
OMDB_MISSING_VALUE = "N/A"


class OMDbConfigError(Exception):
    """Raised when the OMDb client is used without an API key."""


class OMDbUpstreamError(Exception):
    """Raised for OMDb request/response errors."""


class OMDbService:
    """
    Thin async wrapper around the OMDb search endpoint.
    Uses httpx so the event loop stays responsive while a search is in flight.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.OMDB_API_KEY
        if not self.api_key:
            raise OMDbConfigError(
                "OMDB_API_KEY is not set. "
                "Add it to your .env file or pass it explicitly."
            )
        self.base_url = base_url or settings.OMDB_BASE_URL
        self._transport = transport

    async def search_movies(self, query: str) -> list[SearchCandidate]:
        """
        Search OMDb for movies whose title matches *query*.

        A payload without a ``Search`` field (``{"Response": "False",
        "Error": "Movie not found!"}`` and friends) means zero results.
        """
        cleaned_query = query.strip()
        if not cleaned_query:
            return []

        params = {
            "apikey": self.api_key,
            "s": cleaned_query,
            "type": "movie",
        }

        try:
            async with httpx.AsyncClient(
                timeout=OMDB_TIMEOUT_SECONDS,
                transport=self._transport,
            ) as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise OMDbUpstreamError(
                f"OMDb search failed with status {exc.response.status_code}"
            ) from exc
        except httpx.RequestError as exc:
            raise OMDbUpstreamError("OMDb search request failed") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise OMDbUpstreamError("OMDb returned a non-JSON body") from exc

        if not isinstance(payload, dict):
            return []
        results = payload.get("Search")
        if not isinstance(results, list):
            return []

        mapped: list[SearchCandidate] = []
        for raw in results:
            candidate = self._map_search_item(raw)
            if candidate is not None:
                mapped.append(candidate)
        return mapped

    def _clean(self, value: Any) -> str | None:
        """OMDb uses the literal "N/A" for missing strings."""
        if not isinstance(value, str):
            return None
        value = value.strip()
        if not value or value == OMDB_MISSING_VALUE:
            return None
        return value

    def _map_search_item(self, raw: Any) -> SearchCandidate | None:
        """Normalize one OMDb search row; rows without an imdbID are dropped."""
        if not isinstance(raw, dict):
            return None
        imdb_id = self._clean(raw.get("imdbID"))
        title = self._clean(raw.get("Title"))
        if not imdb_id or not title:
            return None
        return SearchCandidate(
            title=title,
            year=self._clean(raw.get("Year")),
            imdb_id=imdb_id,
            poster=self._clean(raw.get("Poster")),
        )
