"""Tests for the MCP ProtocolEngine dispatch and tool execution."""

import json

import pytest
import requests

from omdb_fixtures import DEEPLY_NESTED_JSON, INCORRECT_IMDB_ID, MOVIE_NOT_FOUND, omdb_responder
from omdb_mcp.mcp.models import JsonRpcRequest, JsonRpcResponse
from omdb_mcp.mcp.protocol import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    PROTOCOL_VERSION,
)


def _request(method, params=None, request_id="1"):
    return JsonRpcRequest(id=request_id, method=method, params=params)


def _call(engine, name, arguments, request_id="call-1"):
    return engine.handle(_request("tools/call", {"name": name, "arguments": arguments}, request_id))


def _text(response: JsonRpcResponse) -> str:
    content = response.result["content"]
    assert len(content) == 1
    assert content[0]["type"] == "text"
    return content[0]["text"]


class TestLifecycleMethods:
    def test_initialize(self, engine):
        response = engine.handle(
            _request(
                "initialize",
                {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {},
                    "clientInfo": {"name": "example-client", "version": "1.0.0"},
                },
            )
        )
        assert response.id == "1"
        assert response.error is None
        result = response.result
        assert result["protocolVersion"] == "2024-11-05"
        assert result["capabilities"]["tools"] == {"listChanged": False}
        assert result["capabilities"]["logging"] == {"level": "info"}
        assert result["serverInfo"]["name"] == "OMDB Movie Database Server"

    def test_initialize_tolerates_other_versions_and_unknown_fields(self, engine):
        response = engine.handle(_request("initialize", {"protocolVersion": "2099-01-01", "extra": True}))
        assert response.result["protocolVersion"] == PROTOCOL_VERSION

    def test_initialize_without_params(self, engine):
        assert engine.handle(_request("initialize")).error is None

    def test_ping(self, engine, omdb_session, runtime):
        response = engine.handle(_request("ping", request_id=7))
        assert response.id == 7
        assert response.result == {"pong": True}
        assert omdb_session.calls == []
        assert all(runtime.cache.stats(n).misses == 0 for n in runtime.cache.namespaces())

    def test_tools_list(self, engine):
        tools = engine.handle(_request("tools/list")).result["tools"]
        assert [t["name"] for t in tools] == ["search_movies", "get_movie_details", "get_movie_by_imdb_id"]
        assert all("inputSchema" in t for t in tools)

    def test_unknown_method(self, engine):
        response = engine.handle(_request("resources/list"))
        assert response.result is None
        assert response.error.code == METHOD_NOT_FOUND
        assert "resources/list" in response.error.message


class TestNotifications:
    def test_initialized_notification_has_no_response(self, engine):
        assert engine.handle(JsonRpcRequest(method="notifications/initialized")) is None

    def test_initialized_with_id_still_has_no_response(self, engine):
        assert engine.handle(_request("notifications/initialized")) is None

    def test_request_method_without_id_is_not_executed(self, engine, omdb_session):
        request = JsonRpcRequest(
            method="tools/call",
            params={"name": "search_movies", "arguments": {"title": "Alien"}},
        )
        assert engine.handle(request) is None
        assert omdb_session.calls == []

    def test_unknown_notification_ignored(self, engine):
        assert engine.handle(JsonRpcRequest(method="notifications/cancelled")) is None


class TestToolsCall:
    def test_search_movies_success(self, engine, omdb_session):
        response = _call(engine, "search_movies", {"title": "The Matrix", "year": "1999"})
        assert response.id == "call-1"
        text = _text(response)
        assert text.startswith("Search Results (2 total):")
        assert "1. The Matrix (1999)" in text
        assert omdb_session.calls[0]["params"]["s"] == "The Matrix"

    def test_get_movie_details_success(self, engine):
        text = _text(_call(engine, "get_movie_details", {"title": "The Matrix"}))
        assert text.startswith("🎬 The Matrix (1999)")

    def test_get_movie_by_imdb_id_success(self, engine, omdb_session):
        text = _text(_call(engine, "get_movie_by_imdb_id", {"imdbId": "tt0133093", "plot": "short"}))
        assert "IMDB ID: tt0133093" in text
        assert omdb_session.calls[0]["params"]["i"] == "tt0133093"
        assert omdb_session.calls[0]["params"]["plot"] == "short"

    def test_identical_calls_hit_upstream_once(self, engine, omdb_session, clock):
        _call(engine, "search_movies", {"title": "The Matrix"})
        _call(engine, "search_movies", {"title": "The Matrix"})
        assert len(omdb_session.calls) == 1
        clock.advance(3601)
        _call(engine, "search_movies", {"title": "The Matrix"})
        assert len(omdb_session.calls) == 2

    def test_numeric_year_is_accepted(self, engine, omdb_session):
        response = _call(engine, "search_movies", {"title": "The Matrix", "year": 1999})
        assert response.error is None
        assert omdb_session.calls[0]["params"]["y"] == "1999"

    @pytest.mark.parametrize("arguments", [{}, {"title": ""}, {"title": "   "}, {"title": None}])
    def test_missing_title(self, engine, omdb_session, arguments):
        response = _call(engine, "search_movies", arguments)
        assert response.error.code == INVALID_PARAMS
        assert response.error.message == "Title parameter is required"
        assert omdb_session.calls == []

    def test_missing_imdb_id(self, engine):
        response = _call(engine, "get_movie_by_imdb_id", {"imdbId": " "})
        assert response.error.code == INVALID_PARAMS
        assert response.error.message == "imdbId parameter is required"

    def test_unknown_tool(self, engine, omdb_session):
        response = _call(engine, "delete_movies", {"title": "x"})
        assert response.error.code == INVALID_PARAMS
        assert response.error.message == "Invalid tool name: delete_movies"
        assert omdb_session.calls == []

    @pytest.mark.parametrize(
        "params",
        [None, {}, {"name": 42}, {"name": "search_movies", "arguments": ["The Matrix"]}],
    )
    def test_malformed_call_params(self, engine, params):
        response = engine.handle(_request("tools/call", params))
        assert response.error.code == INVALID_PARAMS

    def test_wrongly_typed_argument(self, engine):
        response = _call(engine, "search_movies", {"title": {"nested": "object"}})
        assert response.error.code == INVALID_PARAMS

    def test_search_domain_miss_is_success(self, engine, omdb_session):
        omdb_session.responder = omdb_responder(search=MOVIE_NOT_FOUND)
        response = _call(engine, "search_movies", {"title": "zzzz"})
        assert response.error is None
        assert _text(response) == "No movies found: Movie not found!"

    def test_details_domain_miss_is_success(self, engine, omdb_session):
        omdb_session.responder = omdb_responder(by_id=INCORRECT_IMDB_ID)
        response = _call(engine, "get_movie_by_imdb_id", {"imdbId": "tt0000000"})
        assert _text(response) == "Movie not found: Incorrect IMDb ID."

    def test_upstream_failure_is_internal_error(self, engine, omdb_session):
        omdb_session.responder = requests.ConnectionError("network down")
        response = _call(engine, "get_movie_details", {"title": "The Matrix"})
        assert response.result is None
        assert response.error.code == INTERNAL_ERROR
        assert response.error.message.startswith("Internal error: ")
        assert "network down" in response.error.message

    def test_unexpected_exception_is_internal_error(self, engine, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("kaboom")

        monkeypatch.setattr(engine.service, "search", boom)
        response = _call(engine, "search_movies", {"title": "The Matrix"})
        assert response.error.code == INTERNAL_ERROR
        assert "kaboom" in response.error.message

    def test_long_text_is_truncated(self, engine):
        engine.tool_response_max_chars = 64
        text = _text(_call(engine, "get_movie_details", {"title": "The Matrix"}))
        assert len(text) == 64
        assert text.endswith("[Response truncated due to size limits]")


class TestHandleMessage:
    def test_raw_text_round_trip(self, engine):
        response = engine.handle_message(json.dumps({"jsonrpc": "2.0", "id": "abc", "method": "ping"}))
        assert response.to_wire() == {"jsonrpc": "2.0", "id": "abc", "result": {"pong": True}}

    def test_invalid_json_is_parse_error_with_null_id(self, engine):
        response = engine.handle_message(b"{not json")
        wire = response.to_wire()
        assert wire["id"] is None
        assert wire["error"]["code"] == PARSE_ERROR
        assert "result" not in wire

    def test_non_object_is_parse_error(self, engine):
        assert engine.handle_message("[1, 2, 3]").error.code == PARSE_ERROR

    def test_bad_envelope_keeps_recoverable_id(self, engine):
        response = engine.handle_message({"jsonrpc": "2.0", "id": "x-9", "method": 5})
        assert response.id == "x-9"
        assert response.error.code == PARSE_ERROR

    def test_notification_message_returns_none(self, engine):
        assert engine.handle_message({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None

    def test_too_deeply_nested_json_is_parse_error_with_null_id(self, engine):
        response = engine.handle_message(DEEPLY_NESTED_JSON)
        assert response.id is None
        assert response.error.code == PARSE_ERROR


def test_ping_is_idempotent_across_server_state(engine, runtime):
    first = engine.handle(_request("ping", request_id="p1"))

    assert _call(engine, "search_movies", {"title": "The Matrix"}).error is None
    assert _call(engine, "no_such_tool", {}).error.code == INVALID_PARAMS
    assert runtime.cache.stats("movieSearch").size == 1

    second = engine.handle(_request("ping", request_id="p1"))
    assert first.result == second.result == {"pong": True}
    assert first.to_wire() == second.to_wire()
