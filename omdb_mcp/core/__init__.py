from omdb_mcp.core.config import OmdbMcpConfig

__all__ = ["OmdbMcpConfig", "build_engine", "build_runtime"]


def __getattr__(name):
    if name in ("build_engine", "build_runtime"):
        from omdb_mcp.core import bootstrap
        return getattr(bootstrap, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
