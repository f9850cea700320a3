"""Options and echo helpers shared by the map and run commands."""

from pathlib import Path

import click

from snp2go.pipeline import PipelineResult, resolve_variants


def variant_options(func):
    """Attach --contig/--position/--variants to a command."""
    func = click.option(
        '--variants',
        'variants_path',
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help='Tab-separated contig/position table (optional header row)'
    )(func)
    func = click.option(
        '--position',
        type=click.IntRange(min=0),
        default=None,
        help='Position of a single variant (requires --contig)'
    )(func)
    func = click.option(
        '--contig',
        type=str,
        default=None,
        help='Contig of a single variant (requires --position)'
    )(func)
    return func


def load_variants(contig, position, variants_path):
    """resolve_variants with input errors reported as usage errors."""
    try:
        return resolve_variants(contig, position, variants_path)
    except ValueError as e:
        raise click.UsageError(str(e))


def echo_parse_summary(result: PipelineResult) -> None:
    report = result.parse_report
    click.echo(f"  Feature lines read: {report.lines_read}")
    click.echo(f"  Genes parsed:       {report.genes_parsed}")
    click.echo(f"  Other features:     {report.ignored_features}")
    if report.total_skipped:
        for reason, count in sorted(report.skipped.items()):
            click.echo(click.style(f"  Skipped ({reason}): {count}", fg='yellow'))


def echo_warnings(warnings: list[str]) -> None:
    if not warnings:
        return
    click.echo(click.style("Warnings:", bold=True))
    for warning in warnings:
        click.echo(click.style(f"  {warning}", fg='yellow'))
    click.echo()
