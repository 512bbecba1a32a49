"""
Tool descriptors and the read-only registry served by ``tools/list``.

Descriptors are built once at import time and never mutated. Only the
presence of required arguments is enforced here; patterns, enums and length
bounds are advertised to clients as schema metadata.
"""

from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

SEARCH_MOVIES = "search_movies"
GET_MOVIE_DETAILS = "get_movie_details"
GET_MOVIE_BY_IMDB_ID = "get_movie_by_imdb_id"


class ToolProperty(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str = "string"
    description: str
    enum: Optional[Tuple[str, ...]] = None
    pattern: Optional[str] = None
    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    default: Optional[str] = None
    examples: Optional[Tuple[str, ...]] = None


class ToolInputSchema(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str = "object"
    properties: Dict[str, ToolProperty]
    required: Tuple[str, ...] = ()
    additional_properties: bool = Field(default=False, alias="additionalProperties")


class ToolDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str
    input_schema: ToolInputSchema = Field(alias="inputSchema")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


_YEAR = ToolProperty(
    description="Release year (optional)",
    pattern=r"^\d{4}$",
)
_PLOT = ToolProperty(
    description="Plot length: short or full (default: full)",
    enum=("short", "full"),
    default="full",
)

TOOL_DESCRIPTORS: Tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        name=SEARCH_MOVIES,
        description="Search for movies by title in the OMDB database",
        input_schema=ToolInputSchema(
            properties={
                "title": ToolProperty(
                    description="Movie title to search for",
                    min_length=1,
                    max_length=100,
                    examples=("The Matrix", "Inception", "Avatar"),
                ),
                "year": _YEAR,
                "type": ToolProperty(
                    description="Type of result to return: movie, series or episode (optional)",
                    enum=("movie", "series", "episode"),
                ),
            },
            required=("title",),
        ),
    ),
    ToolDescriptor(
        name=GET_MOVIE_DETAILS,
        description="Get detailed information about a specific movie by title",
        input_schema=ToolInputSchema(
            properties={
                "title": ToolProperty(
                    description="Exact movie title",
                    min_length=1,
                    max_length=100,
                ),
                "year": _YEAR,
                "plot": _PLOT,
            },
            required=("title",),
        ),
    ),
    ToolDescriptor(
        name=GET_MOVIE_BY_IMDB_ID,
        description="Get detailed information about a movie by IMDB ID",
        input_schema=ToolInputSchema(
            properties={
                "imdbId": ToolProperty(
                    description="IMDB identifier (e.g. tt0111161)",
                    pattern=r"^tt\d{7,8}$",
                    examples=("tt0111161", "tt0133093", "tt0468569"),
                ),
                "plot": _PLOT,
            },
            required=("imdbId",),
        ),
    ),
)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


class ToolRegistry:
    """Immutable, ordered collection of tool descriptors."""

    def __init__(self, descriptors: Iterable[ToolDescriptor] = TOOL_DESCRIPTORS):
        self._descriptors: Tuple[ToolDescriptor, ...] = tuple(descriptors)
        self._by_name: Dict[str, ToolDescriptor] = {}
        for descriptor in self._descriptors:
            if descriptor.name in self._by_name:
                raise ValueError(f"Duplicate tool name: {descriptor.name}")
            self._by_name[descriptor.name] = descriptor

    def list(self) -> Tuple[ToolDescriptor, ...]:
        return self._descriptors

    def get(self, name: str) -> Optional[ToolDescriptor]:
        return self._by_name.get(name)

    def names(self) -> Tuple[str, ...]:
        return tuple(self._by_name)

    def validate(self, name: str, arguments: Mapping[str, Any]) -> Optional[str]:
        """Return the first required argument that is missing or blank, else None."""
        descriptor = self._by_name.get(name)
        if descriptor is None:
            raise KeyError(f"Unknown tool: {name}")
        for field in descriptor.input_schema.required:
            if _is_blank(arguments.get(field)):
                return field
        return None
