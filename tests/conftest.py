"""Shared fixtures for the OMDb MCP test suite."""

import pytest

from omdb_fixtures import FakeClock, StubSession, omdb_responder
from omdb_mcp.core.bootstrap import build_runtime
from omdb_mcp.core.config import OmdbMcpConfig


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def omdb_session() -> StubSession:
    return StubSession(omdb_responder())


@pytest.fixture
def omdb_config() -> OmdbMcpConfig:
    config = OmdbMcpConfig()
    config.omdb.api_key = "test-key"
    return config


@pytest.fixture
def runtime(omdb_config, omdb_session, clock):
    rt = build_runtime(omdb_config, session=omdb_session, clock=clock)
    yield rt
    rt.close()


@pytest.fixture
def engine(runtime):
    return runtime.engine
