"""Run command: full variant -> gene -> GO enrichment pipeline.

Orchestrates:
- Annotation parsing and per-variant window queries
- Background universe and association table
- Per-namespace hypergeometric tests with BH correction
- TSV/Parquet/text outputs and run manifest
- DuckDB persistence and provenance sidecar
- Enrichment plots (unless --skip-viz)
"""

import logging
import sys
from pathlib import Path

import click

from snp2go.cli.options import (
    echo_parse_summary,
    echo_warnings,
    load_variants,
    variant_options,
)
from snp2go.config.loader import load_config_with_overrides
from snp2go.enrichment import GoOntology
from snp2go.output import generate_all_plots
from snp2go.persistence import PipelineStore, ProvenanceTracker
from snp2go.pipeline import persist_results, run_pipeline, write_outputs

logger = logging.getLogger(__name__)


@click.command('run')
@click.argument(
    'annotation',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@variant_options
@click.option(
    '--window',
    'window_bp',
    type=click.IntRange(min=0),
    default=None,
    help='Window half-width in bp (overrides window.window_bp)'
)
@click.option(
    '--obo',
    'obo_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='GO ontology OBO file (overrides enrichment.obo_path)'
)
@click.option(
    '--output-dir',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Output directory (overrides output_dir)'
)
@click.option(
    '--workers',
    type=click.IntRange(min=1, max=64),
    default=None,
    help='Worker threads for window queries (overrides window.workers)'
)
@click.option(
    '--propagate/--no-propagate',
    default=None,
    help='Count annotations toward ancestor terms (overrides enrichment.propagate_counts)'
)
@click.option(
    '--min-count',
    type=click.IntRange(min=0),
    default=None,
    help='Minimum query genes per reported term (overrides enrichment.min_query_count)'
)
@click.option(
    '--skip-viz',
    is_flag=True,
    help='Skip plot generation'
)
@click.pass_context
def run(ctx, annotation, contig, position, variants_path, window_bp, obo_path,
        output_dir, workers, propagate, min_count, skip_viz):
    """Map variants to genes and test GO term enrichment.

    Pipeline steps:
    1. Load the GO ontology
    2. Parse the annotation and query each variant's window
    3. Build the background universe from every gene with GO terms
    4. Test each namespace (BP, MF, CC) with a hypergeometric test
    5. Write outputs, save tables to DuckDB, record provenance
    6. Generate plots (unless --skip-viz)

    Examples:

        snp2go run genes.gff --variants snps.tsv --obo go-basic.obo

        snp2go run genes.gff --contig chr2 --position 48210 --window 20000 --skip-viz
    """
    config_path = ctx.obj['config_path']
    variants, variant_report = load_variants(contig, position, variants_path)

    click.echo(click.style("=== SNP to GO Enrichment ===", bold=True))
    click.echo()

    store = None
    try:
        # Load config
        click.echo("Loading configuration...")
        config = load_config_with_overrides(config_path, {
            'window.window_bp': window_bp,
            'window.workers': workers,
            'enrichment.obo_path': obo_path,
            'enrichment.propagate_counts': propagate,
            'enrichment.min_query_count': min_count,
            'output_dir': output_dir,
        })
        output_dir = Path(config.output_dir)
        click.echo(click.style(f"  Config loaded: {config_path}", fg='green'))
        click.echo(f"  Window: {config.window.window_bp} bp")
        click.echo(f"  Namespaces: {', '.join(config.enrichment.namespaces)}")
        click.echo()

        if config.enrichment.obo_path is None:
            raise click.UsageError("No GO ontology given: set enrichment.obo_path or pass --obo")

        store = PipelineStore.from_config(config)
        provenance = ProvenanceTracker.from_config(config)
        provenance.record_input("annotation", annotation)
        if variants_path is not None:
            provenance.record_input("variants", variants_path)

        # Step 1: Ontology
        click.echo(click.style("Step 1: Loading GO ontology...", bold=True))
        ontology = GoOntology.from_obo(config.enrichment.obo_path)
        provenance.record_input("ontology", config.enrichment.obo_path)
        click.echo(click.style(f"  Loaded {len(ontology)} terms", fg='green'))
        click.echo()
        provenance.record_step('load_ontology', {
            'obo_path': str(config.enrichment.obo_path),
            'terms': len(ontology),
        })

        # Steps 2-4: Mapping, universe, enrichment
        click.echo(click.style("Step 2: Mapping variants and testing enrichment...", bold=True))
        result = run_pipeline(
            annotation, variants, config, ontology=ontology, variant_report=variant_report
        )
        echo_parse_summary(result)
        click.echo(click.style(
            f"  Query genes: {len(result.gene_ids)} "
            f"(from {result.window_result.variant_count} variants)",
            fg='green'
        ))
        click.echo(f"  Universe size: {len(result.universe)}")
        click.echo()
        provenance.record_step('map_variants', {
            'annotation': str(annotation),
            'variants': result.window_result.variant_count,
            'query_genes': len(result.gene_ids),
            'missed_variants': len(result.window_result.missed_variants),
        })
        provenance.record_step('build_universe', {
            'universe_size': len(result.universe),
            'genes_without_go': result.universe.genes_without_go,
        })
        provenance.record_step('run_enrichment', {
            'study_genes': result.enrichment.query_size,
            'nothing_to_test': result.enrichment.nothing_to_test,
            'significant': result.enrichment.significant_counts(config.enrichment.alpha),
        })

        click.echo(click.style("Step 3: Enrichment results", bold=True))
        significant = result.enrichment.significant_counts(config.enrichment.alpha)
        for namespace, df in result.enrichment.tables.items():
            click.echo(
                f"  {namespace}: {df.height} terms reported, "
                f"{significant[namespace]} with adjusted p <= {config.enrichment.alpha}"
            )
        click.echo()

        # Step 4: Write outputs
        click.echo(click.style("Step 4: Writing outputs...", bold=True))
        paths = write_outputs(result, config, output_dir)
        for path in paths:
            click.echo(click.style(f"  {path}", fg='green'))
        click.echo()

        tables = persist_results(result, config, store)
        provenance.record_step('write_outputs', {
            'output_dir': str(output_dir),
            'files': len(paths),
            'duckdb_tables': tables,
        })

        # Step 5: Plots
        if not skip_viz:
            click.echo(click.style("Step 5: Generating plots...", bold=True))
            plot_paths = generate_all_plots(
                result.enrichment.tables,
                output_dir / "plots",
                top_n=config.enrichment.top_n_plot,
                alpha=config.enrichment.alpha,
            )
            for plot_name, plot_path in plot_paths.items():
                click.echo(click.style(f"  {plot_name}: {plot_path}", fg='green'))
            click.echo()
            provenance.record_step('generate_visualizations', {
                'plot_count': len(plot_paths),
            })
        else:
            click.echo(click.style("Step 5: Skipping plots (--skip-viz)", fg='yellow'))
            click.echo()

        # Save provenance
        provenance_path = provenance.save_sidecar(output_dir / "run.json")
        provenance.save_to_store(store)
        click.echo(f"Provenance saved: {provenance_path}")
        click.echo()

        echo_warnings(result.warnings)

        click.echo(click.style("=== Run Summary ===", bold=True))
        click.echo(f"Variants:      {result.window_result.variant_count}")
        click.echo(f"Query Genes:   {len(result.gene_ids)}")
        click.echo(f"Tested Genes:  {result.enrichment.query_size}")
        click.echo(f"Universe Size: {len(result.universe)}")
        click.echo(f"DuckDB Path:   {config.duckdb_path}")
        click.echo(f"Output:        {output_dir}")
        click.echo()
        click.echo(click.style("Run complete!", fg='green', bold=True))

    except click.UsageError:
        raise
    except Exception as e:
        click.echo(click.style(f"Run command failed: {e}", fg='red'), err=True)
        logger.exception("Run command failed")
        sys.exit(1)
    finally:
        if store is not None:
            store.close()
