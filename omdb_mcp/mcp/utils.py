import logging
from typing import List, Optional

from omdb_mcp.omdb.models import NOT_AVAILABLE, Movie, SearchResponse

logger = logging.getLogger("OmdbMcp.mcp.utils")

DEFAULT_TOOL_RESPONSE_MAX_CHARS = 32768
TRUNCATION_SUFFIX = "\n\n[Response truncated due to size limits]"


def _present(value: Optional[str]) -> Optional[str]:
    """OMDb uses "N/A" for unknown fields; treat it like a missing value."""
    if value is None:
        return None
    value = value.strip()
    if not value or value == NOT_AVAILABLE:
        return None
    return value


def _heading(title: Optional[str], year: Optional[str]) -> str:
    heading = _present(title) or "Untitled"
    year = _present(year)
    return f"{heading} ({year})" if year is not None else heading


def format_search_results(response: SearchResponse) -> str:
    """Render a search hit list as a numbered, human-readable block."""
    lines: List[str] = [f"Search Results ({response.total_results or len(response.search)} total):", ""]
    for index, hit in enumerate(response.search, start=1):
        lines.append(f"{index}. {_heading(hit.title, hit.year)}")
        for label, value in (("Type", hit.type), ("IMDB ID", hit.imdb_id)):
            present = _present(value)
            if present is not None:
                lines.append(f"   {label}: {present}")
        lines.append("")
    return "\n".join(lines) + "\n"


def format_movie_details(movie: Movie) -> str:
    """Render one movie record; unknown fields are skipped."""
    parts = [f"🎬 {_heading(movie.title, movie.year)}", ""]
    for label, value, suffix in (
        ("IMDB ID", movie.imdb_id, ""),
        ("Rating", movie.rated, ""),
        ("Runtime", movie.runtime, ""),
        ("Genre", movie.genre, ""),
        ("Director", movie.director, ""),
        ("Cast", movie.actors, ""),
        ("IMDB Rating", movie.imdb_rating, "/10"),
        ("Metacritic Score", movie.metascore, "/100"),
    ):
        present = _present(value)
        if present is not None:
            parts.append(f"{label}: {present}{suffix}")

    text = "\n".join(parts) + "\n\nPlot:\n" + (_present(movie.plot) or "No plot available")
    awards = _present(movie.awards)
    if awards is not None:
        text += f"\n\nAwards: {awards}"
    return text


def truncate_tool_text(text: str, name: str, max_chars: int = DEFAULT_TOOL_RESPONSE_MAX_CHARS) -> str:
    """Apply the tool response length limit."""
    if len(text) > max_chars:
        logger.info("Truncating response for tool '%s' (%d -> %d chars)", name, len(text), max_chars)
        cutoff = max(0, max_chars - len(TRUNCATION_SUFFIX))
        return text[:cutoff] + TRUNCATION_SUFFIX
    return text
