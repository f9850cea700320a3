"""Window query engine: variants to overlapping genes."""

from snp2go.window.query import (
    HIT_FRAME_SCHEMA,
    QueryHit,
    WindowQueryEngine,
    WindowQueryResult,
    search_bounds,
)

__all__ = [
    "HIT_FRAME_SCHEMA",
    "QueryHit",
    "WindowQueryEngine",
    "WindowQueryResult",
    "search_bounds",
]
