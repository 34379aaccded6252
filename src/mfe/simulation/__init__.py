from .runtime import MatchRuntime, RuntimePaths, match_view

__all__ = ["MatchRuntime", "RuntimePaths", "match_view"]
