"""GO term over-representation testing per namespace."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np
import polars as pl
import structlog

from snp2go.config.schema import EnrichmentConfig
from snp2go.enrichment.models import (
    ENRICHMENT_SCHEMA,
    NAMESPACE_ORDER,
    EnrichmentResult,
    empty_enrichment_frame,
)
from snp2go.enrichment.ontology import GoOntology
from snp2go.enrichment.stats import benjamini_hochberg, hypergeometric_sf
from snp2go.universe.builder import BackgroundUniverse

logger = structlog.get_logger()


@dataclass
class EnrichmentReport:
    """Outcome of one enrichment run.

    Attributes:
        tables: namespace -> enrichment table (ENRICHMENT_SCHEMA), sorted by
                p_value then term_id; header-only when nothing was tested
        query_genes: Unique query gene ids given to the run
        study_genes: Query genes present in the universe (the tested set)
        universe_size: N
        unknown_terms: GO ids in the universe missing from the ontology
        nothing_to_test: True when no query gene carries a GO term
    """
    tables: dict[str, pl.DataFrame] = field(default_factory=dict)
    query_genes: list[str] = field(default_factory=list)
    study_genes: list[str] = field(default_factory=list)
    universe_size: int = 0
    unknown_terms: list[str] = field(default_factory=list)
    nothing_to_test: bool = False

    @property
    def query_size(self) -> int:
        return len(self.study_genes)

    @property
    def query_genes_without_go(self) -> list[str]:
        study = set(self.study_genes)
        return [g for g in self.query_genes if g not in study]

    def combined_frame(self) -> pl.DataFrame:
        """All namespaces in one table, namespaces in BP, MF, CC order."""
        frames = [self.tables[ns] for ns in NAMESPACE_ORDER if ns in self.tables]
        if not frames:
            return empty_enrichment_frame()
        return pl.concat(frames, how="vertical")

    def significant_counts(self, alpha: float = 0.05) -> dict[str, int]:
        """Terms per namespace with adjusted_p_value <= alpha."""
        return {
            ns: df.filter(pl.col("adjusted_p_value") <= alpha).height
            for ns, df in self.tables.items()
        }


def annotate_by_namespace(
    universe: BackgroundUniverse,
    ontology: GoOntology,
    namespaces: Iterable[str],
    propagate_counts: bool = False,
) -> tuple[dict[str, dict[str, set[str]]], set[str]]:
    """Split each universe gene's GO terms by namespace.

    Args:
        universe: Background universe with associations
        ontology: GO ontology for namespace/alt_id resolution
        namespaces: Namespaces to keep
        propagate_counts: Also credit every is_a ancestor of each term

    Returns:
        Tuple of (namespace -> gene id -> term ids, unknown term ids)
    """
    wanted = set(namespaces)
    by_namespace: dict[str, dict[str, set[str]]] = {ns: {} for ns in wanted}
    unknown: set[str] = set()

    for gene_id in universe.gene_ids:
        for raw_term in universe.associations[gene_id]:
            term_id = ontology.resolve(raw_term)
            if term_id is None:
                unknown.add(raw_term)
                continue

            namespace = ontology.namespace(term_id)
            if namespace not in wanted:
                continue

            terms = {term_id}
            if propagate_counts:
                terms |= ontology.ancestors(term_id)
            by_namespace[namespace].setdefault(gene_id, set()).update(terms)

    return by_namespace, unknown


def score_namespace(
    namespace: str,
    gene_terms: dict[str, set[str]],
    study_genes: list[str],
    universe_size: int,
    ontology: GoOntology,
    alpha: float = 0.05,
) -> pl.DataFrame:
    """Hypergeometric test of every term observed in one namespace.

    Every term gets a p-value (k = 0 included) so the BH adjustment runs
    over all m terms of the namespace.

    Returns:
        Enrichment table sorted by p_value, then term_id
    """
    background_counts: Counter = Counter()
    for terms in gene_terms.values():
        background_counts.update(terms)

    query_counts: Counter = Counter()
    for gene_id in study_genes:
        query_counts.update(gene_terms.get(gene_id, ()))

    term_ids = sorted(background_counts)
    query_size = len(study_genes)

    if not term_ids or query_size == 0:
        return empty_enrichment_frame()

    k = np.array([query_counts[t] for t in term_ids], dtype=np.int64)
    K = np.array([background_counts[t] for t in term_ids], dtype=np.int64)

    p_values = hypergeometric_sf(k, universe_size, K, query_size)
    adjusted = benjamini_hochberg(p_values, alpha=alpha)

    results = [
        EnrichmentResult(
            term_id=term_id,
            namespace=namespace,
            term_name=ontology.name(term_id),
            query_count=int(k[i]),
            background_count=int(K[i]),
            universe_size=universe_size,
            query_size=query_size,
            p_value=float(p_values[i]),
            adjusted_p_value=float(adjusted[i]),
        )
        for i, term_id in enumerate(term_ids)
    ]

    df = pl.DataFrame([r.model_dump() for r in results], schema=ENRICHMENT_SCHEMA)
    return df.sort(["p_value", "term_id"])


def run_enrichment(
    query_gene_ids: Iterable[str],
    universe: BackgroundUniverse,
    ontology: GoOntology,
    config: EnrichmentConfig | None = None,
) -> EnrichmentReport:
    """Test GO term over-representation among query genes.

    Args:
        query_gene_ids: Genes found near variants (any order, duplicates ok)
        universe: Background universe with associations
        ontology: GO ontology (namespaces, names, ancestors)
        config: Namespaces, propagation, alpha and report filter

    Returns:
        EnrichmentReport with one table per configured namespace

    Raises:
        ValueError: If the background universe is empty
    """
    config = config or EnrichmentConfig()

    if len(universe) == 0:
        raise ValueError(
            "Background universe is empty: no gene in the annotation carries a GO term"
        )

    query_genes = sorted(set(query_gene_ids))
    study_genes = universe.restrict(query_genes)
    universe_size = len(universe)

    logger.info(
        "enrichment_start",
        query_genes=len(query_genes),
        study_genes=len(study_genes),
        universe_size=universe_size,
        namespaces=config.namespaces,
        propagate_counts=config.propagate_counts,
    )

    by_namespace, unknown = annotate_by_namespace(
        universe, ontology, config.namespaces, propagate_counts=config.propagate_counts
    )

    report = EnrichmentReport(
        query_genes=query_genes,
        study_genes=study_genes,
        universe_size=universe_size,
        unknown_terms=sorted(unknown),
        nothing_to_test=not study_genes,
    )

    if unknown:
        logger.warning(
            "enrichment_unknown_terms",
            count=len(unknown),
            examples=report.unknown_terms[:5],
        )

    if report.nothing_to_test:
        logger.warning(
            "enrichment_nothing_to_test",
            query_genes=len(query_genes),
            message="No query gene has GO annotations",
        )
        report.tables = {ns: empty_enrichment_frame() for ns in config.namespaces}
        return report

    for namespace in config.namespaces:
        df = score_namespace(
            namespace,
            by_namespace[namespace],
            study_genes,
            universe_size,
            ontology,
            alpha=config.alpha,
        )
        tested = df.height
        df = df.filter(pl.col("query_count") >= config.min_query_count)
        report.tables[namespace] = df

        logger.info(
            "enrichment_namespace_complete",
            namespace=namespace,
            terms_tested=tested,
            terms_reported=df.height,
            significant=df.filter(pl.col("adjusted_p_value") <= config.alpha).height,
        )

    return report
