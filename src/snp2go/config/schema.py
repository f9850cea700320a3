"""Pydantic models for pipeline configuration."""

import hashlib
import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

Namespace = Literal["BP", "MF", "CC"]


class AnnotationConfig(BaseModel):
    """How the annotation file is read."""

    feature_type: str = Field(
        default="gene",
        min_length=1,
        description="Value of the feature-type column that yields gene records",
    )
    go_delimiter: str = Field(
        default=",",
        min_length=1,
        description="Separator between GO ids in the GO attribute",
    )
    go_names_delimiter: str = Field(
        default=",",
        min_length=1,
        description="Separator between names in the GO_names attribute",
    )


class WindowConfig(BaseModel):
    """Variant-to-gene window settings."""

    window_bp: int = Field(
        default=10000,
        ge=0,
        description="Symmetric window around each variant, in base pairs",
    )
    workers: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Worker threads for per-variant window queries",
    )


class EnrichmentConfig(BaseModel):
    """GO enrichment test settings."""

    obo_path: Path | None = Field(
        default=None,
        description="GO ontology in OBO format (go-basic.obo)",
    )
    namespaces: list[Namespace] = Field(
        default_factory=lambda: ["BP", "MF", "CC"],
        description="GO namespaces to test, each independently",
    )
    method: Literal["fdr_bh"] = Field(
        default="fdr_bh",
        description="Multiple-testing correction method",
    )
    alpha: float = Field(
        default=0.05,
        gt=0.0,
        le=1.0,
        description="Adjusted p-value cutoff used when counting significant terms",
    )
    min_query_count: int = Field(
        default=1,
        ge=0,
        description="Drop reported terms hit by fewer query genes (0 keeps all)",
    )
    propagate_counts: bool = Field(
        default=False,
        description="Count each annotation toward all ancestor terms as well",
    )
    top_n_plot: int = Field(
        default=15,
        ge=1,
        description="Number of terms shown per namespace in enrichment plots",
    )

    @field_validator("namespaces")
    @classmethod
    def dedupe_namespaces(cls, v: list[str]) -> list[str]:
        """Reject an empty list and drop repeated namespaces (order kept)."""
        if not v:
            raise ValueError("At least one GO namespace must be tested")
        return list(dict.fromkeys(v))


class PipelineConfig(BaseModel):
    """Main pipeline configuration."""

    output_dir: Path = Field(
        ...,
        description="Directory for run outputs",
    )
    duckdb_path: Path = Field(
        ...,
        description="Path to DuckDB database file",
    )
    annotation: AnnotationConfig = Field(
        default_factory=AnnotationConfig,
        description="Annotation file parsing settings",
    )
    window: WindowConfig = Field(
        default_factory=WindowConfig,
        description="Window query settings",
    )
    enrichment: EnrichmentConfig = Field(
        default_factory=EnrichmentConfig,
        description="Enrichment test settings",
    )

    @field_validator("output_dir")
    @classmethod
    def create_directory(cls, v: Path) -> Path:
        """Create directory if it doesn't exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values,
        useful for tracking which settings produced a run.
        """
        config_dict = self.model_dump(mode="python")
        # Path objects are serialized through default=str
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
