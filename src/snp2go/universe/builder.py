"""Background universe and gene -> GO association table.

The universe is every annotated gene with at least one GO term, taken
from the whole annotation file rather than any variant window.
"""

from dataclasses import dataclass, field
from typing import Iterable

import polars as pl
import structlog

from snp2go.annotation.models import GeneRecord

logger = structlog.get_logger()

# Table names for DuckDB storage
BACKGROUND_TABLE_NAME = "background_genes"
ASSOCIATION_TABLE_NAME = "go_associations"

# Separator between GO ids in the exported association table
ASSOCIATION_TERM_SEPARATOR = ";"


@dataclass
class BackgroundUniverse:
    """Background gene set with its GO associations.

    Attributes:
        gene_ids: Sorted, unique ids of genes carrying >= 1 GO term
        associations: gene id -> GO ids; keys are exactly gene_ids
        genes_scanned: Gene records looked at
        genes_without_go: Gene records excluded for having no GO term
    """
    gene_ids: list[str] = field(default_factory=list)
    associations: dict[str, frozenset[str]] = field(default_factory=dict)
    genes_scanned: int = 0
    genes_without_go: int = 0

    def __len__(self) -> int:
        return len(self.gene_ids)

    def __contains__(self, gene_id: str) -> bool:
        return gene_id in self.associations

    @property
    def term_ids(self) -> list[str]:
        """Sorted GO ids seen anywhere in the universe."""
        return sorted(set().union(*self.associations.values())) if self.associations else []

    def restrict(self, gene_ids: Iterable[str]) -> list[str]:
        """Sorted subset of gene_ids that belong to the universe."""
        return sorted({g for g in gene_ids if g in self.associations})

    def background_frame(self) -> pl.DataFrame:
        return pl.DataFrame({"gene_id": self.gene_ids}, schema={"gene_id": pl.Utf8})

    def association_frame(self) -> pl.DataFrame:
        """One row per gene: gene_id, go_terms (sorted, ';'-joined)."""
        return pl.DataFrame(
            {
                "gene_id": self.gene_ids,
                "go_terms": [
                    ASSOCIATION_TERM_SEPARATOR.join(sorted(self.associations[g]))
                    for g in self.gene_ids
                ],
            },
            schema={"gene_id": pl.Utf8, "go_terms": pl.Utf8},
        )

    def to_frames(self) -> tuple[pl.DataFrame, pl.DataFrame]:
        """(background_frame, association_frame)."""
        return self.background_frame(), self.association_frame()


def build_universe(records: Iterable[GeneRecord]) -> BackgroundUniverse:
    """Scan gene records and collect the background universe.

    Args:
        records: All gene records of the annotation (any order)

    Returns:
        BackgroundUniverse with sorted ids and matching associations.
        Genes with an empty or missing GO attribute are excluded from both.
    """
    associations: dict[str, frozenset[str]] = {}
    scanned = 0
    without_go = 0

    for record in records:
        scanned += 1
        if not record.go_terms:
            without_go += 1
            continue
        # Parsed records have unique ids; repeated ids merge their terms
        associations[record.id] = associations.get(record.id, frozenset()) | record.go_terms

    universe = BackgroundUniverse(
        gene_ids=sorted(associations),
        associations=associations,
        genes_scanned=scanned,
        genes_without_go=without_go,
    )

    logger.info(
        "universe_build_complete",
        genes_scanned=scanned,
        universe_size=len(universe),
        genes_without_go=without_go,
        distinct_terms=len(universe.term_ids),
    )

    return universe
