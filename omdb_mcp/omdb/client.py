"""
Synchronous OMDb API client.

One HTTP call per method, no retries. Failures are classified into
``OmdbConnectionError`` (network) and ``OmdbAPIError`` (HTTP status or
unreadable body); a well-formed ``"Response": "False"`` payload is returned
as a model whose ``found`` is False.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type, TypeVar
from urllib.parse import urlparse

import requests
from pydantic import ValidationError

from omdb_mcp.omdb.errors import OmdbAPIError, OmdbConnectionError
from omdb_mcp.omdb.models import Movie, SearchResponse

logger = logging.getLogger("OmdbMcp.omdb.client")

DEFAULT_API_URL = "https://www.omdbapi.com/"

_ModelT = TypeVar("_ModelT", SearchResponse, Movie)


def _normalize_api_url(api_url: str) -> str:
    value = api_url.strip()
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid OMDb API URL: {api_url!r}")
    return value


def _describe_query(params: Dict[str, str]) -> str:
    return "&".join(f"{k}={v}" for k, v in params.items() if k != "apikey")


class OmdbClient:
    """
    Thin client for the OMDb REST API.

    Usage:
        with OmdbClient(api_key="...") as client:
            result = client.search("The Matrix", year="1999")
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.api_url = _normalize_api_url(api_url)
        self.timeout = timeout
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._session.headers.setdefault("Accept", "application/json")
        if not api_key:
            logger.warning("OMDb API key is empty; upstream calls will be rejected")

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "OmdbClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _request(self, params: Dict[str, str], model: Type[_ModelT]) -> _ModelT:
        query = _describe_query(params)
        try:
            response = self._session.request(
                method="GET",
                url=self.api_url,
                params={"apikey": self.api_key, **params},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise OmdbConnectionError(f"Failed to reach OMDb API at {self.api_url}: {exc}") from exc

        payload: Any
        try:
            payload = response.json()
        except ValueError:
            payload = response.text

        if response.status_code >= 400:
            detail = payload.get("Error") if isinstance(payload, dict) else None
            raise OmdbAPIError(
                detail or f"HTTP {response.status_code} error",
                status_code=response.status_code,
                query=query,
                payload=payload,
            )
        if not isinstance(payload, dict):
            raise OmdbAPIError(
                "OMDb API returned a non-JSON payload",
                status_code=response.status_code,
                query=query,
                payload=payload,
            )

        try:
            result = model.model_validate(payload)
        except ValidationError as exc:
            raise OmdbAPIError(
                f"OMDb API returned an unexpected payload: {exc.error_count()} validation error(s)",
                status_code=response.status_code,
                query=query,
                payload=payload,
            ) from exc

        logger.debug("OMDb %s -> found=%s", query, result.found)
        return result

    def search(self, title: str, year: Optional[str] = None, type: Optional[str] = None) -> SearchResponse:
        params = {"s": title}
        if year:
            params["y"] = year
        if type:
            params["type"] = type
        return self._request(params, SearchResponse)

    def get_by_title(self, title: str, year: Optional[str] = None, plot: str = "full") -> Movie:
        params = {"t": title}
        if year:
            params["y"] = year
        params["plot"] = plot
        return self._request(params, Movie)

    def get_by_imdb_id(self, imdb_id: str, plot: str = "full") -> Movie:
        return self._request({"i": imdb_id, "plot": plot}, Movie)
