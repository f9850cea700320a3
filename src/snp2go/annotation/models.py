"""Data models for annotated gene features."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Table name for DuckDB storage of the per-variant gene hits
GENE_HITS_TABLE_NAME = "gene_hits"


class GenomicInterval(BaseModel):
    """A 1-based, inclusive span on one contig."""

    model_config = ConfigDict(frozen=True)

    contig: str = Field(..., min_length=1)
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_order(self) -> "GenomicInterval":
        if self.start > self.end:
            raise ValueError(f"Interval start {self.start} exceeds end {self.end}")
        return self

    def overlaps(self, start: int, end: int) -> bool:
        """Inclusive overlap with [start, end]; partial coverage counts."""
        return self.start <= end and self.end >= start

    @property
    def length(self) -> int:
        return self.end - self.start + 1


class GeneRecord(BaseModel):
    """One gene feature parsed from the annotation file.

    Attributes:
        id: Value of the ID attribute (unique within the file)
        interval: Contig and 1-based inclusive coordinates
        locus_tag: locus_tag attribute - NULL if absent
        ortholog: Ortholog attribute - NULL if absent
        description: Description attribute (percent-decoded) - NULL if absent
        go_terms: GO ids from the GO attribute; empty when the gene has none
        go_names: Names from the GO_names attribute
        extra_attributes: Unrecognized attributes as sorted (key, value) pairs
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    interval: GenomicInterval
    locus_tag: str | None = None
    ortholog: str | None = None
    description: str | None = None
    go_terms: frozenset[str] = frozenset()
    go_names: frozenset[str] = frozenset()
    extra_attributes: tuple[tuple[str, str], ...] = ()

    @property
    def contig(self) -> str:
        return self.interval.contig

    @property
    def start(self) -> int:
        return self.interval.start

    @property
    def end(self) -> int:
        return self.interval.end

    @property
    def has_go(self) -> bool:
        return bool(self.go_terms)

    def attribute(self, key: str) -> str | None:
        """Value of an unrecognized attribute, or None."""
        return dict(self.extra_attributes).get(key)
