"""
Nomination, search-candidate and session-state schemas.

Nominations and candidates keep the catalog's field names on the wire
(imdbID, Title, ...); Python code uses snake_case attributes.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchCandidate(BaseModel):
    """A movie returned by the catalog search. Never persisted."""

    title: str = Field(alias="Title")
    year: str | None = Field(default=None, alias="Year")
    imdb_id: str = Field(alias="imdbID")
    poster: str | None = Field(default=None, alias="Poster")

    model_config = ConfigDict(populate_by_name=True)


class SearchCandidateView(SearchCandidate):
    """Candidate annotated for display against the cached nominations."""

    already_nominated: bool = False


class Nomination(BaseModel):
    """A persisted nomination as seen by sessions."""

    id: str
    movie: str
    imdb_id: str = Field(alias="imdbID")
    poster: str | None = None
    votes: int = Field(default=0, ge=0)
    watched: bool = False

    model_config = ConfigDict(populate_by_name=True)


class ControllerState(BaseModel):
    """Everything one participant session holds in memory."""

    search_text: str = ""
    search_results: list[SearchCandidate] = Field(default_factory=list)
    selected_movie: SearchCandidate | None = None
    nominations: list[Nomination] = Field(default_factory=list)
    votes_used: int = Field(default=0, ge=0)
    max_votes: int = Field(default=5, ge=0)
    search_seq: int = 0

    @property
    def votes_remaining(self) -> int:
        return max(0, self.max_votes - self.votes_used)


class SessionStateResponse(BaseModel):
    """View of one session returned by /sessions endpoints."""

    session_id: str
    search_text: str
    search_results: list[SearchCandidateView]
    selected_movie: SearchCandidate | None = None
    nominations: list[Nomination]
    votes_used: int
    votes_remaining: int
    max_votes: int


class SearchResponse(BaseModel):
    """Response envelope for GET /sessions/{id}/search."""

    query: str
    items: list[SearchCandidateView]


class QueryRequest(BaseModel):
    """Payload for PUT /sessions/{id}/query (search-as-you-type)."""

    text: str = Field(default="", max_length=200)


class QueryAcceptedResponse(BaseModel):
    search_text: str
    debounce_ms: int


class SelectMovieRequest(BaseModel):
    """Payload for POST /sessions/{id}/selection."""

    imdb_id: str = Field(alias="imdbID", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class SubmitNominationRequest(BaseModel):
    """
    Payload for POST /sessions/{id}/nominations.

    When *candidate* is omitted the session's selected movie is nominated.
    """

    candidate: SearchCandidate | None = None


class VoteRequest(BaseModel):
    """Payload for POST /sessions/{id}/nominations/{nomination_id}/vote.

    *votes* is the full new count, not a delta. Negative values are rejected
    by the controller (with a 409 notice) rather than by schema validation.
    """

    votes: int


class WatchedRequest(BaseModel):
    """Payload for POST /sessions/{id}/nominations/{nomination_id}/watched.

    *watched* is the value the client currently displays; it is flipped.
    """

    watched: bool = False

    @field_validator("watched", mode="before")
    @classmethod
    def default_missing(cls, v: object) -> object:
        return False if v is None else v
