"""Query language applied to scan results after a scan."""

from .query import (
    BUILTIN_KEYS,
    Filter,
    FilterKind,
    Query,
    QueryParseError,
    suggest_key,
)

__all__ = [
    "BUILTIN_KEYS",
    "Filter",
    "FilterKind",
    "Query",
    "QueryParseError",
    "suggest_key",
]
