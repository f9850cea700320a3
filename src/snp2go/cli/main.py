"""Main CLI entry point for snp2go.

Provides command group with global options and subcommands for pipeline operations.
"""

import logging
from pathlib import Path

import click

from snp2go import __version__
from snp2go.config.loader import load_config
from snp2go.cli.map_cmd import map_genes
from snp2go.cli.universe_cmd import universe
from snp2go.cli.run_cmd import run


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@click.group()
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    default='config/default.yaml',
    help='Path to pipeline configuration YAML file'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, verbose):
    """snp2go: map variants to nearby genes and test their GO terms for enrichment.

    Finds annotated genes within a window of each variant, builds the GO
    background universe from the whole annotation, and runs per-namespace
    hypergeometric tests with Benjamini-Hochberg correction.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display pipeline information and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"snp2go v{__version__}")
    click.echo(f"Config: {config_path}")
    click.echo()

    try:
        config = load_config(config_path)

        config_hash = config.config_hash()
        click.echo(f"Config Hash: {config_hash[:16]}...")
        click.echo()

        click.echo(click.style("Annotation:", bold=True))
        click.echo(f"  Feature Type:       {config.annotation.feature_type}")
        click.echo(f"  GO Delimiter:       {config.annotation.go_delimiter!r}")
        click.echo(f"  GO Names Delimiter: {config.annotation.go_names_delimiter!r}")
        click.echo()

        click.echo(click.style("Window:", bold=True))
        click.echo(f"  Window Size: {config.window.window_bp} bp")
        click.echo(f"  Workers:     {config.window.workers}")
        click.echo()

        click.echo(click.style("Enrichment:", bold=True))
        click.echo(f"  Ontology:         {config.enrichment.obo_path}")
        click.echo(f"  Namespaces:       {', '.join(config.enrichment.namespaces)}")
        click.echo(f"  Correction:       {config.enrichment.method} (alpha={config.enrichment.alpha})")
        click.echo(f"  Min Query Count:  {config.enrichment.min_query_count}")
        click.echo(f"  Propagate Counts: {config.enrichment.propagate_counts}")
        click.echo()

        click.echo(click.style("Paths:", bold=True))
        click.echo(f"  Output Directory: {config.output_dir}")
        click.echo(f"  DuckDB Path:      {config.duckdb_path}")

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)


# Register commands
cli.add_command(map_genes)
cli.add_command(universe)
cli.add_command(run)


if __name__ == '__main__':
    cli()
