"""Data model for SNP variants."""

from pydantic import BaseModel, ConfigDict, Field


class Variant(BaseModel):
    """A single-position variant.

    Attributes:
        contig: Chromosome/contig name, matched exactly against the annotation
        position: 1-based coordinate
    """

    model_config = ConfigDict(frozen=True)

    contig: str = Field(..., min_length=1)
    position: int = Field(..., ge=0)

    def __str__(self) -> str:
        return f"{self.contig}:{self.position}"
