"""Map command: list the genes within a window of each variant."""

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
from snp2go.pipeline import map_variants, write_mapping_outputs

logger = logging.getLogger(__name__)


@click.command('map')
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
    '--workers',
    type=click.IntRange(min=1, max=64),
    default=None,
    help='Worker threads for window queries (overrides window.workers)'
)
@click.option(
    '--output-dir',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Output directory (overrides output_dir)'
)
@click.pass_context
def map_genes(ctx, annotation, contig, position, variants_path, window_bp, workers, output_dir):
    """Find annotated genes within a window of each variant.

    Writes genes.txt (unique gene ids, sorted) and gene_hits.tsv/.parquet
    (one row per variant and overlapping gene).

    Examples:

        # One variant
        snp2go map genes.gff --contig chr1 --position 15000

        # A table of variants with a 5 kb window
        snp2go map genes.gff --variants snps.tsv --window 5000
    """
    config_path = ctx.obj['config_path']
    variants, variant_report = load_variants(contig, position, variants_path)

    click.echo(click.style("=== Variant to Gene Mapping ===", bold=True))
    click.echo()

    try:
        config = load_config_with_overrides(config_path, {
            'window.window_bp': window_bp,
            'window.workers': workers,
            'output_dir': output_dir,
        })
        output_dir = Path(config.output_dir)

        click.echo(f"Mapping {len(variants)} variants (window: {config.window.window_bp} bp)...")
        _, result = map_variants(annotation, variants, config, variant_report)
        echo_parse_summary(result)
        click.echo(click.style(
            f"  Found {len(result.gene_ids)} genes near {result.window_result.variant_count} variants",
            fg='green'
        ))
        click.echo()

        paths = write_mapping_outputs(result, config, output_dir)
        click.echo("Output Files:")
        for path in paths:
            click.echo(f"  {path}")
        click.echo()

        echo_warnings(result.warnings)
        click.echo(click.style("Mapping complete!", fg='green', bold=True))

    except Exception as e:
        click.echo(click.style(f"Map command failed: {e}", fg='red'), err=True)
        logger.exception("Map command failed")
        sys.exit(1)
