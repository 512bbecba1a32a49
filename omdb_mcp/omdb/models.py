"""
Typed views of OMDb API payloads.

Field names follow the upstream JSON (``Title``, ``imdbID``...) through
aliases; unknown fields are ignored so new upstream keys never break parsing.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

NOT_AVAILABLE = "N/A"


class _OmdbModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    response: str = Field(default="False", alias="Response")
    error: Optional[str] = Field(default=None, alias="Error")

    @property
    def found(self) -> bool:
        """True for a positive result, False for a domain-level miss."""
        return self.response.strip().lower() == "true"

    @property
    def miss_reason(self) -> str:
        return self.error or "Unknown error"


class SearchResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    title: Optional[str] = Field(default=None, alias="Title")
    year: Optional[str] = Field(default=None, alias="Year")
    imdb_id: Optional[str] = Field(default=None, alias="imdbID")
    type: Optional[str] = Field(default=None, alias="Type")
    poster: Optional[str] = Field(default=None, alias="Poster")


class SearchResponse(_OmdbModel):
    search: List[SearchResult] = Field(default_factory=list, alias="Search")
    total_results: Optional[str] = Field(default=None, alias="totalResults")


class Rating(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    source: Optional[str] = Field(default=None, alias="Source")
    value: Optional[str] = Field(default=None, alias="Value")


class Movie(_OmdbModel):
    title: Optional[str] = Field(default=None, alias="Title")
    year: Optional[str] = Field(default=None, alias="Year")
    rated: Optional[str] = Field(default=None, alias="Rated")
    released: Optional[str] = Field(default=None, alias="Released")
    runtime: Optional[str] = Field(default=None, alias="Runtime")
    genre: Optional[str] = Field(default=None, alias="Genre")
    director: Optional[str] = Field(default=None, alias="Director")
    writer: Optional[str] = Field(default=None, alias="Writer")
    actors: Optional[str] = Field(default=None, alias="Actors")
    plot: Optional[str] = Field(default=None, alias="Plot")
    language: Optional[str] = Field(default=None, alias="Language")
    country: Optional[str] = Field(default=None, alias="Country")
    awards: Optional[str] = Field(default=None, alias="Awards")
    poster: Optional[str] = Field(default=None, alias="Poster")
    ratings: List[Rating] = Field(default_factory=list, alias="Ratings")
    metascore: Optional[str] = Field(default=None, alias="Metascore")
    imdb_rating: Optional[str] = Field(default=None, alias="imdbRating")
    imdb_votes: Optional[str] = Field(default=None, alias="imdbVotes")
    imdb_id: Optional[str] = Field(default=None, alias="imdbID")
    type: Optional[str] = Field(default=None, alias="Type")
    box_office: Optional[str] = Field(default=None, alias="BoxOffice")
