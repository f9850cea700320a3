"""Per-variant window lookup of overlapping genes."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Sequence

import polars as pl
import structlog

from snp2go.annotation.index import AnnotationIndex
from snp2go.annotation.models import GeneRecord
from snp2go.variants.models import Variant

logger = structlog.get_logger()

# Column order of the full traceability table
HIT_FRAME_SCHEMA = {
    "variant_contig": pl.Utf8,
    "variant_position": pl.Int64,
    "gene_contig": pl.Utf8,
    "start": pl.Int64,
    "end": pl.Int64,
    "id": pl.Utf8,
    "locus_tag": pl.Utf8,
    "ortholog": pl.Utf8,
    "description": pl.Utf8,
    "GO": pl.Utf8,
    "GO_names": pl.Utf8,
}


@dataclass(frozen=True)
class QueryHit:
    """One (variant, overlapping gene) pair.

    variant_index is the variant's position in the input, used to keep the
    full table in input order.
    """
    variant_index: int
    variant: Variant
    gene: GeneRecord


@dataclass
class WindowQueryResult:
    """All hits for a batch of variants.

    Attributes:
        hits: Hits ordered by variant input order, then gene id
        missed_variants: Variants with no overlapping gene
        variant_count: Number of variants queried
    """
    hits: list[QueryHit] = field(default_factory=list)
    missed_variants: list[Variant] = field(default_factory=list)
    variant_count: int = 0

    def gene_ids(self) -> list[str]:
        """Sorted, unique gene ids across all variants (enrichment input)."""
        return sorted({hit.gene.id for hit in self.hits})

    def to_frame(self, go_delimiter: str = ",", go_names_delimiter: str = ",") -> pl.DataFrame:
        """Full traceability table, one row per hit; schema kept when empty."""
        rows = [
            {
                "variant_contig": hit.variant.contig,
                "variant_position": hit.variant.position,
                "gene_contig": hit.gene.contig,
                "start": hit.gene.start,
                "end": hit.gene.end,
                "id": hit.gene.id,
                "locus_tag": hit.gene.locus_tag,
                "ortholog": hit.gene.ortholog,
                "description": hit.gene.description,
                "GO": go_delimiter.join(sorted(hit.gene.go_terms)) or None,
                "GO_names": go_names_delimiter.join(sorted(hit.gene.go_names)) or None,
            }
            for hit in self.hits
        ]
        return pl.DataFrame(rows, schema=HIT_FRAME_SCHEMA)


def search_bounds(position: int, window_bp: int) -> tuple[int, int]:
    """Window [max(0, position - window_bp), position + window_bp]."""
    return max(0, position - window_bp), position + window_bp


class WindowQueryEngine:
    """Find genes overlapping a symmetric window around each variant."""

    def __init__(self, index: AnnotationIndex, window_bp: int, workers: int = 1):
        """Initialize the engine.

        Args:
            index: Parsed annotation index
            window_bp: Half-width of the window in base pairs (>= 0)
            workers: Thread count for batch queries (1 = sequential)

        Raises:
            ValueError: If window_bp is negative or not an integer, or
                        workers < 1
        """
        if isinstance(window_bp, bool) or not isinstance(window_bp, int) or window_bp < 0:
            raise ValueError(f"Window size must be a non-negative integer, got {window_bp!r}")
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")

        self.index = index
        self.window_bp = window_bp
        self.workers = workers

    def query(self, variant: Variant) -> list[GeneRecord]:
        """Genes on the variant's contig overlapping its window, sorted by id."""
        search_start, search_end = search_bounds(variant.position, self.window_bp)
        return self.index.overlapping(variant.contig, search_start, search_end)

    def query_many(self, variants: Sequence[Variant]) -> WindowQueryResult:
        """Query every variant independently and merge in input order.

        With workers > 1 the lookups run on a thread pool; the merged
        result is identical to the sequential one.
        """
        logger.info(
            "window_query_start",
            variants=len(variants),
            window_bp=self.window_bp,
            workers=self.workers,
        )

        if self.workers > 1 and len(variants) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                per_variant = list(pool.map(self.query, variants))
        else:
            per_variant = [self.query(variant) for variant in variants]

        result = WindowQueryResult(variant_count=len(variants))
        for variant_index, (variant, genes) in enumerate(zip(variants, per_variant)):
            if not genes:
                result.missed_variants.append(variant)
                continue
            result.hits.extend(QueryHit(variant_index, variant, gene) for gene in genes)

        logger.info(
            "window_query_complete",
            hits=len(result.hits),
            unique_genes=len(result.gene_ids()),
            missed_variants=len(result.missed_variants),
        )
        if result.missed_variants:
            logger.warning(
                "variants_without_genes",
                count=len(result.missed_variants),
                examples=[str(v) for v in result.missed_variants[:5]],
            )

        return result
