"""Universe command: export the GO background universe of an annotation."""

import logging
import sys
from pathlib import Path

import click

from snp2go.annotation.index import AnnotationIndex
from snp2go.config.loader import load_config_with_overrides
from snp2go.pipeline import write_universe_outputs
from snp2go.universe import build_universe, validate_universe

logger = logging.getLogger(__name__)


@click.command('universe')
@click.argument(
    'annotation',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    '--output-dir',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Output directory (overrides output_dir)'
)
@click.pass_context
def universe(ctx, annotation, output_dir):
    """Build the background universe and gene-to-GO association table.

    Every annotated gene with at least one GO term is in the universe.
    Writes background.txt and associations.tsv (gene_id<TAB>GO;GO;...).
    """
    config_path = ctx.obj['config_path']

    click.echo(click.style("=== Background Universe ===", bold=True))
    click.echo()

    try:
        config = load_config_with_overrides(config_path, {'output_dir': output_dir})
        output_dir = Path(config.output_dir)

        click.echo(f"Parsing {annotation}...")
        index, parse_report = AnnotationIndex.from_file(annotation, config.annotation)
        click.echo(click.style(f"  Parsed {parse_report.genes_parsed} genes", fg='green'))
        for reason, count in sorted(parse_report.skipped.items()):
            click.echo(click.style(f"  Skipped ({reason}): {count}", fg='yellow'))
        click.echo()

        background = build_universe(index)
        validation = validate_universe(background)
        for message in validation.messages:
            color = 'red' if message.startswith('FAILED') else 'green'
            click.echo(click.style(f"  {message}", fg=color))
        click.echo()

        if not validation.passed:
            click.echo(click.style("Universe validation failed", fg='red'), err=True)
            sys.exit(1)

        paths = write_universe_outputs(background, output_dir)
        click.echo("Output Files:")
        for path in paths:
            click.echo(f"  {path}")
        click.echo()
        click.echo(click.style("Universe complete!", fg='green', bold=True))

    except Exception as e:
        click.echo(click.style(f"Universe command failed: {e}", fg='red'), err=True)
        logger.exception("Universe command failed")
        sys.exit(1)
