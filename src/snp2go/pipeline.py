"""End-to-end run: annotation + variants -> genes -> universe -> enrichment.

Each stage returns an in-memory result object; writing files and saving
tables are separate steps so the CLI commands can run any prefix of the
pipeline.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

import polars as pl
import structlog

from snp2go.annotation.index import AnnotationIndex, ParseReport
from snp2go.annotation.models import GENE_HITS_TABLE_NAME
from snp2go.config.schema import PipelineConfig
from snp2go.enrichment.engine import EnrichmentReport, run_enrichment
from snp2go.enrichment.models import ENRICHMENT_TABLE_NAME
from snp2go.enrichment.ontology import GoOntology
from snp2go.output.writers import (
    write_association_table,
    write_id_list,
    write_run_manifest,
    write_table,
)
from snp2go.persistence import PipelineStore
from snp2go.universe.builder import (
    ASSOCIATION_TABLE_NAME,
    BACKGROUND_TABLE_NAME,
    BackgroundUniverse,
    build_universe,
)
from snp2go.universe.validator import validate_universe
from snp2go.variants.models import Variant
from snp2go.variants.reader import VariantReadReport, read_variant_table, single_variant
from snp2go.window.query import WindowQueryEngine, WindowQueryResult

logger = structlog.get_logger()

QUERY_GENES_TABLE_NAME = "query_genes"


@dataclass
class PipelineResult:
    """Everything a run produced, plus the counts shown to the user.

    Attributes:
        parse_report: Annotation parse counts (skips per reason)
        variant_report: Variant table counts; None for a single coordinate
        window_result: Per-variant hits and missed variants
        universe: Background universe; None when only mapping ran
        enrichment: Enrichment report; None when only mapping ran
        warnings: Human-readable warnings collected along the way
    """
    parse_report: ParseReport
    window_result: WindowQueryResult
    variant_report: VariantReadReport | None = None
    universe: BackgroundUniverse | None = None
    enrichment: EnrichmentReport | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def gene_ids(self) -> list[str]:
        return self.window_result.gene_ids()

    def statistics(self) -> dict:
        """Plain-dict summary for the run manifest and CLI."""
        stats = {
            "annotation": {
                "feature_lines": self.parse_report.lines_read,
                "genes_parsed": self.parse_report.genes_parsed,
                "ignored_features": self.parse_report.ignored_features,
                "skipped": dict(sorted(self.parse_report.skipped.items())),
                "bad_attribute_tokens": self.parse_report.bad_attribute_tokens,
            },
            "variants": {
                "queried": self.window_result.variant_count,
                "without_genes": len(self.window_result.missed_variants),
            },
            "query_genes": len(self.gene_ids),
        }
        if self.variant_report is not None:
            stats["variants"].update({
                "rows_read": self.variant_report.rows_read,
                "skipped_rows": self.variant_report.skipped_rows,
                "header_detected": self.variant_report.header_detected,
            })
        if self.universe is not None:
            stats["universe_size"] = len(self.universe)
            stats["genes_without_go"] = self.universe.genes_without_go
        if self.enrichment is not None:
            stats["enrichment"] = {
                "study_genes": self.enrichment.query_size,
                "query_genes_without_go": len(self.enrichment.query_genes_without_go),
                "unknown_terms": len(self.enrichment.unknown_terms),
                "nothing_to_test": self.enrichment.nothing_to_test,
                "terms_reported": {ns: df.height for ns, df in self.enrichment.tables.items()},
            }
        stats["warnings"] = list(self.warnings)
        return stats


def resolve_variants(
    contig: str | None = None,
    position: int | None = None,
    variants_path: Path | str | None = None,
) -> tuple[list[Variant], VariantReadReport | None]:
    """Turn the two mutually exclusive input forms into a variant list.

    Args:
        contig: Contig of a single variant
        position: Position of a single variant
        variants_path: Two-column contig/position table

    Returns:
        Tuple of (variants, read_report); read_report is None for a
        single coordinate

    Raises:
        ValueError: If both forms, neither form, or only half of the
                    single coordinate is given
        FileNotFoundError: If the variant table doesn't exist
    """
    single_given = contig is not None or position is not None

    if single_given and variants_path is not None:
        raise ValueError("Give either a single variant (contig + position) or a variant table, not both")
    if not single_given and variants_path is None:
        raise ValueError("No variants given: pass contig + position or a variant table")

    if single_given:
        if contig is None or position is None:
            raise ValueError("A single variant needs both a contig and a position")
        return [single_variant(contig, position)], None

    return read_variant_table(variants_path)


def map_variants(
    annotation_path: Path | str,
    variants: Sequence[Variant],
    config: PipelineConfig,
    variant_report: VariantReadReport | None = None,
) -> tuple[AnnotationIndex, PipelineResult]:
    """Parse the annotation and find the genes near each variant.

    Returns:
        Tuple of (index, result); the index is reused for the universe

    Raises:
        ValueError: If the window size is invalid or the annotation has
                    no gene records
        FileNotFoundError: If the annotation file doesn't exist
    """
    # Window problems are configuration errors; fail before parsing
    if config.window.window_bp < 0:
        raise ValueError(f"Window size must be >= 0, got {config.window.window_bp}")

    index, parse_report = AnnotationIndex.from_file(annotation_path, config.annotation)
    engine = WindowQueryEngine(index, config.window.window_bp, workers=config.window.workers)
    window_result = engine.query_many(variants)

    result = PipelineResult(
        parse_report=parse_report,
        window_result=window_result,
        variant_report=variant_report,
    )

    if parse_report.total_skipped:
        result.warnings.append(
            f"{parse_report.total_skipped} annotation lines skipped: "
            + ", ".join(f"{reason}={count}" for reason, count in sorted(parse_report.skipped.items()))
        )
    if parse_report.bad_attribute_tokens:
        result.warnings.append(
            f"{parse_report.bad_attribute_tokens} attribute tokens without a key ignored"
        )
    if variant_report is not None and variant_report.skipped_rows:
        result.warnings.append(f"{variant_report.skipped_rows} malformed variant rows skipped")
    if window_result.missed_variants:
        result.warnings.append(
            f"{len(window_result.missed_variants)} of {window_result.variant_count} "
            "variants have no gene within the window"
        )
    if not window_result.hits:
        result.warnings.append("No genes found near any variant")

    return index, result


def run_pipeline(
    annotation_path: Path | str,
    variants: Sequence[Variant],
    config: PipelineConfig,
    ontology: GoOntology | None = None,
    variant_report: VariantReadReport | None = None,
) -> PipelineResult:
    """Run mapping, universe construction and enrichment.

    Args:
        annotation_path: Annotation file (9-column, .gz accepted)
        variants: Variants to map, in input order
        config: Pipeline configuration
        ontology: Loaded GO ontology; read from config.enrichment.obo_path
                  when None
        variant_report: Counts from reading the variant table, if any

    Returns:
        PipelineResult with every stage filled in

    Raises:
        ValueError: On configuration errors or an empty universe
        FileNotFoundError: If an input file doesn't exist
    """
    if ontology is None:
        if config.enrichment.obo_path is None:
            raise ValueError("No GO ontology configured: set enrichment.obo_path or pass --obo")
        ontology = GoOntology.from_obo(config.enrichment.obo_path)

    logger.info(
        "pipeline_start",
        annotation=str(annotation_path),
        variants=len(variants),
        window_bp=config.window.window_bp,
    )

    index, result = map_variants(annotation_path, variants, config, variant_report)

    universe = build_universe(index)
    validation = validate_universe(universe)
    if not validation.passed:
        failures = [m for m in validation.messages if m.startswith("FAILED")]
        raise ValueError("; ".join(failures))
    result.universe = universe

    enrichment = run_enrichment(result.gene_ids, universe, ontology, config.enrichment)
    result.enrichment = enrichment

    missing_go = enrichment.query_genes_without_go
    if missing_go:
        result.warnings.append(
            f"{len(missing_go)} query genes have no GO terms and were not tested"
        )
    if enrichment.unknown_terms:
        result.warnings.append(
            f"{len(enrichment.unknown_terms)} GO ids not found in the ontology were ignored"
        )
    if enrichment.nothing_to_test and result.gene_ids:
        result.warnings.append("No query gene carries a GO term; enrichment tables are empty")

    logger.info(
        "pipeline_complete",
        query_genes=len(result.gene_ids),
        universe_size=len(universe),
        warnings=len(result.warnings),
    )

    return result


def write_mapping_outputs(result: PipelineResult, config: PipelineConfig, output_dir: Path) -> list[Path]:
    """genes.txt and gene_hits.tsv/.parquet."""
    output_dir = Path(output_dir)
    paths = [write_id_list(result.gene_ids, output_dir / "genes.txt")]

    hits = result.window_result.to_frame(
        config.annotation.go_delimiter, config.annotation.go_names_delimiter
    )
    paths.extend(write_table(hits, output_dir, "gene_hits").values())
    return paths


def write_universe_outputs(universe: BackgroundUniverse, output_dir: Path) -> list[Path]:
    """background.txt and associations.tsv."""
    output_dir = Path(output_dir)
    return [
        write_id_list(universe.gene_ids, output_dir / "background.txt"),
        write_association_table(universe, output_dir / "associations.tsv"),
    ]


def write_enrichment_outputs(report: EnrichmentReport, output_dir: Path) -> list[Path]:
    """enrichment_<NS>.tsv/.parquet per tested namespace."""
    paths: list[Path] = []
    for namespace, df in report.tables.items():
        paths.extend(
            write_table(
                df, output_dir, f"enrichment_{namespace}", sort_by=["p_value", "term_id"]
            ).values()
        )
    return paths


def write_outputs(result: PipelineResult, config: PipelineConfig, output_dir: Path) -> list[Path]:
    """Write every available output of a run plus the run manifest.

    Returns:
        All written paths, manifest last
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = write_mapping_outputs(result, config, output_dir)
    if result.universe is not None:
        paths.extend(write_universe_outputs(result.universe, output_dir))
    if result.enrichment is not None:
        paths.extend(write_enrichment_outputs(result.enrichment, output_dir))

    paths.append(write_run_manifest(output_dir, paths, result.statistics()))
    return paths


def persist_results(result: PipelineResult, config: PipelineConfig, store: PipelineStore) -> list[str]:
    """Save run tables into DuckDB; returns the table names written."""
    tables = {
        GENE_HITS_TABLE_NAME: (
            result.window_result.to_frame(
                config.annotation.go_delimiter, config.annotation.go_names_delimiter
            ),
            "Genes within the window of each variant",
        ),
        QUERY_GENES_TABLE_NAME: (
            pl.DataFrame({"gene_id": result.gene_ids}, schema={"gene_id": pl.Utf8}),
            "Unique genes near any variant",
        ),
    }
    if result.universe is not None:
        tables[BACKGROUND_TABLE_NAME] = (
            result.universe.background_frame(),
            "Annotated genes with at least one GO term",
        )
        tables[ASSOCIATION_TABLE_NAME] = (
            result.universe.association_frame(),
            "Gene to GO term associations",
        )
    if result.enrichment is not None:
        tables[ENRICHMENT_TABLE_NAME] = (
            result.enrichment.combined_frame(),
            "Hypergeometric GO enrichment with BH-adjusted p-values",
        )

    saved = store.save_tables(tables)
    logger.info("results_persisted", db_path=str(store.db_path), tables=saved)
    return saved
