"""GO enrichment: ontology lookups, hypergeometric tests, FDR adjustment."""

from snp2go.enrichment.models import (
    ENRICHMENT_SCHEMA,
    ENRICHMENT_TABLE_NAME,
    NAMESPACE_ORDER,
    EnrichmentResult,
    empty_enrichment_frame,
)
from snp2go.enrichment.ontology import NAMESPACE_CODES, GoOntology
from snp2go.enrichment.stats import (
    benjamini_hochberg,
    hypergeometric_sf,
    upper_tail_pvalue,
)
from snp2go.enrichment.engine import (
    EnrichmentReport,
    annotate_by_namespace,
    run_enrichment,
    score_namespace,
)

__all__ = [
    "ENRICHMENT_SCHEMA",
    "ENRICHMENT_TABLE_NAME",
    "NAMESPACE_ORDER",
    "EnrichmentResult",
    "empty_enrichment_frame",
    "NAMESPACE_CODES",
    "GoOntology",
    "benjamini_hochberg",
    "hypergeometric_sf",
    "upper_tail_pvalue",
    "EnrichmentReport",
    "annotate_by_namespace",
    "run_enrichment",
    "score_namespace",
]
