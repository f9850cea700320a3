"""Persistence layer for run tables and provenance tracking."""

from snp2go.persistence.duckdb_store import PipelineStore
from snp2go.persistence.provenance import ProvenanceTracker

__all__ = ["PipelineStore", "ProvenanceTracker"]
