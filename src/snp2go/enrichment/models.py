"""Data models for GO enrichment results."""

from typing import Literal

import polars as pl
from pydantic import BaseModel, ConfigDict, Field

# Table name for DuckDB storage (all namespaces, one table)
ENRICHMENT_TABLE_NAME = "enrichment_results"

NAMESPACE_ORDER = ("BP", "MF", "CC")

# Column order of every enrichment table, including empty ones
ENRICHMENT_SCHEMA = {
    "term_id": pl.Utf8,
    "namespace": pl.Utf8,
    "term_name": pl.Utf8,
    "query_count": pl.Int64,
    "background_count": pl.Int64,
    "universe_size": pl.Int64,
    "query_size": pl.Int64,
    "p_value": pl.Float64,
    "adjusted_p_value": pl.Float64,
}


class EnrichmentResult(BaseModel):
    """Over-representation test of one GO term in one namespace.

    Attributes:
        term_id: GO id (primary id when the annotation used an alt_id)
        namespace: BP, MF or CC
        term_name: Ontology name of the term
        query_count: k - query genes annotated with the term
        background_count: K - universe genes annotated with the term
        universe_size: N - genes in the background universe
        query_size: n - query genes present in the universe
        p_value: P(X >= k), X ~ Hypergeometric(N, K, n)
        adjusted_p_value: Benjamini-Hochberg adjusted p-value within the namespace
    """

    model_config = ConfigDict(frozen=True)

    term_id: str
    namespace: Literal["BP", "MF", "CC"]
    term_name: str
    query_count: int = Field(..., ge=0)
    background_count: int = Field(..., ge=0)
    universe_size: int = Field(..., ge=1)
    query_size: int = Field(..., ge=0)
    p_value: float = Field(..., ge=0.0, le=1.0)
    adjusted_p_value: float = Field(..., ge=0.0, le=1.0)


def empty_enrichment_frame() -> pl.DataFrame:
    """Header-only enrichment table."""
    return pl.DataFrame(schema=ENRICHMENT_SCHEMA)
