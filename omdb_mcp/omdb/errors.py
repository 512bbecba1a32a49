"""
OMDb client exceptions.
"""

from __future__ import annotations

from typing import Any, Optional


class OmdbError(RuntimeError):
    """Base class for upstream failures (never a domain-level "not found")."""


class OmdbConnectionError(OmdbError):
    """Raised when the OMDb API cannot be reached."""


class OmdbAPIError(OmdbError):
    """Raised when OMDb answers with an HTTP error or an unreadable payload."""

    def __init__(
        self,
        detail: str,
        *,
        status_code: Optional[int] = None,
        query: Optional[str] = None,
        payload: Optional[Any] = None,
    ) -> None:
        self.status_code = status_code
        self.query = query
        self.payload = payload
        status_hint = f" (status={status_code})" if status_code is not None else ""
        query_hint = f" [{query}]" if query else ""
        super().__init__(f"{detail}{status_hint}{query_hint}")
