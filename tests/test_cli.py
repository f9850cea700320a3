"""Integration tests for CLI commands using CliRunner.

Tests:
- --help for the group and subcommands
- info config summary
- map with a single variant and a variant table
- universe exports
- run end-to-end with DuckDB and provenance outputs
- usage errors for conflicting or missing variant inputs
"""

import json

import duckdb
import pytest
from click.testing import CliRunner

from snp2go.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def variants_file(tmp_path):
    path = tmp_path / "snps.tsv"
    path.write_text("contig\tposition\ncontig1\t150\ncontig1\t9000\n")
    return path


def test_help(runner):
    result = runner.invoke(cli, ['--help'])

    assert result.exit_code == 0
    for command in ('info', 'map', 'universe', 'run'):
        assert command in result.output


def test_run_help(runner):
    result = runner.invoke(cli, ['run', '--help'])

    assert result.exit_code == 0
    assert '--window' in result.output
    assert '--obo' in result.output
    assert '--skip-viz' in result.output


def test_info(runner, config_file):
    result = runner.invoke(cli, ['--config', str(config_file), 'info'])

    assert result.exit_code == 0
    assert 'Config Hash:' in result.output
    assert 'Window Size: 50 bp' in result.output
    assert 'BP, MF, CC' in result.output


def test_map_single_variant(runner, config_file, scenario_gff, tmp_path):
    out = tmp_path / "map_out"

    result = runner.invoke(cli, [
        '--config', str(config_file),
        'map', str(scenario_gff),
        '--contig', 'contig1', '--position', '150',
        '--output-dir', str(out),
    ])

    assert result.exit_code == 0, result.output
    assert 'Found 1 genes' in result.output
    assert (out / "genes.txt").read_text() == "G1\n"
    assert (out / "gene_hits.tsv").exists()
    assert (out / "gene_hits.parquet").exists()


def test_map_window_override(runner, config_file, scenario_gff, tmp_path):
    out = tmp_path / "wide"

    result = runner.invoke(cli, [
        '--config', str(config_file),
        'map', str(scenario_gff),
        '--contig', 'contig1', '--position', '150',
        '--window', '5000',
        '--output-dir', str(out),
    ])

    assert result.exit_code == 0, result.output
    assert (out / "genes.txt").read_text() == "G1\nG2\n"


def test_map_variant_table_reports_missed(runner, config_file, scenario_gff, variants_file, tmp_path):
    out = tmp_path / "table_out"

    result = runner.invoke(cli, [
        '--config', str(config_file),
        'map', str(scenario_gff),
        '--variants', str(variants_file),
        '--output-dir', str(out),
    ])

    assert result.exit_code == 0, result.output
    assert '1 of 2 variants have no gene within the window' in result.output


def test_map_rejects_both_inputs(runner, config_file, scenario_gff, variants_file):
    result = runner.invoke(cli, [
        '--config', str(config_file),
        'map', str(scenario_gff),
        '--contig', 'contig1', '--position', '150',
        '--variants', str(variants_file),
    ])

    assert result.exit_code == 2
    assert 'not both' in result.output


def test_map_rejects_missing_inputs(runner, config_file, scenario_gff):
    result = runner.invoke(cli, ['--config', str(config_file), 'map', str(scenario_gff)])

    assert result.exit_code == 2
    assert 'No variants given' in result.output


def test_map_rejects_position_without_contig(runner, config_file, scenario_gff):
    result = runner.invoke(cli, [
        '--config', str(config_file), 'map', str(scenario_gff), '--position', '150',
    ])

    assert result.exit_code == 2


def test_map_rejects_negative_window(runner, config_file, scenario_gff):
    result = runner.invoke(cli, [
        '--config', str(config_file),
        'map', str(scenario_gff),
        '--contig', 'contig1', '--position', '150',
        '--window', '-1',
    ])

    assert result.exit_code == 2


def test_universe(runner, config_file, mixed_gff, tmp_path):
    out = tmp_path / "universe_out"

    result = runner.invoke(cli, [
        '--config', str(config_file), 'universe', str(mixed_gff), '--output-dir', str(out),
    ])

    assert result.exit_code == 0, result.output
    assert 'Skipped (missing_id): 1' in result.output
    assert (out / "background.txt").read_text() == "geneA\ngeneB\ngeneD\n"
    assert (out / "associations.tsv").read_text().splitlines()[0] == "geneA\tGO:0000001;GO:0005515"


def test_universe_without_go_fails(runner, config_file, tmp_path):
    gff = tmp_path / "nogo.gff"
    gff.write_text("contig1\tsrc\tgene\t100\t200\t.\t+\t.\tID=G1\n")

    result = runner.invoke(cli, ['--config', str(config_file), 'universe', str(gff)])

    assert result.exit_code == 1
    assert 'empty' in result.output


def test_run_end_to_end(runner, config_file, scenario_gff, tmp_path):
    out = tmp_path / "run_out"

    result = runner.invoke(cli, [
        '--config', str(config_file),
        'run', str(scenario_gff),
        '--contig', 'contig1', '--position', '150',
        '--output-dir', str(out),
        '--skip-viz',
    ])

    assert result.exit_code == 0, result.output
    assert 'Run complete!' in result.output
    assert 'BP: 1 terms reported' in result.output

    for filename in ("genes.txt", "gene_hits.tsv", "background.txt", "associations.tsv",
                     "enrichment_BP.tsv", "enrichment_MF.tsv", "enrichment_CC.tsv",
                     "run_manifest.yaml", "run.provenance.json"):
        assert (out / filename).exists(), filename
    assert not (out / "plots").exists()

    provenance = json.loads((out / "run.provenance.json").read_text())
    step_names = [s["step_name"] for s in provenance["processing_steps"]]
    assert step_names[:4] == ["load_ontology", "map_variants", "build_universe", "run_enrichment"]
    assert set(provenance["inputs"]) == {"annotation", "ontology"}

    conn = duckdb.connect(str(tmp_path / "results" / "test.duckdb"), read_only=True)
    try:
        tables = {row[0] for row in conn.execute("SELECT table_name FROM _checkpoints").fetchall()}
        assert {"gene_hits", "query_genes", "background_genes", "go_associations",
                "enrichment_results"} <= tables
    finally:
        conn.close()


def test_run_with_plots(runner, config_file, scenario_gff, tmp_path):
    out = tmp_path / "run_plots"

    result = runner.invoke(cli, [
        '--config', str(config_file),
        'run', str(scenario_gff),
        '--contig', 'contig1', '--position', '150',
        '--output-dir', str(out),
    ])

    assert result.exit_code == 0, result.output
    assert (out / "plots" / "top_terms_BP.png").exists()
    assert (out / "plots" / "namespace_summary.png").exists()


def test_run_variant_outside_genes(runner, config_file, scenario_gff, tmp_path):
    out = tmp_path / "run_empty"

    result = runner.invoke(cli, [
        '--config', str(config_file),
        'run', str(scenario_gff),
        '--contig', 'contig1', '--position', '3000',
        '--output-dir', str(out),
        '--skip-viz',
    ])

    assert result.exit_code == 0, result.output
    assert 'No genes found near any variant' in result.output
    assert len((out / "enrichment_BP.tsv").read_text().splitlines()) == 1


def test_run_propagate_flag(runner, config_file, scenario_gff, tmp_path):
    out = tmp_path / "run_prop"

    result = runner.invoke(cli, [
        '--config', str(config_file),
        'run', str(scenario_gff),
        '--contig', 'contig1', '--position', '150',
        '--output-dir', str(out),
        '--propagate', '--skip-viz',
    ])

    assert result.exit_code == 0, result.output
    assert 'GO:0008150' in (out / "enrichment_BP.tsv").read_text()


def test_run_requires_ontology(runner, tmp_path, scenario_gff):
    config_path = tmp_path / "no_obo.yaml"
    config_path.write_text(f"""
output_dir: {tmp_path}/results
duckdb_path: {tmp_path}/results/test.duckdb
""")

    result = runner.invoke(cli, [
        '--config', str(config_path),
        'run', str(scenario_gff),
        '--contig', 'contig1', '--position', '150',
    ])

    assert result.exit_code == 2
    assert 'No GO ontology' in result.output


def test_run_missing_annotation(runner, config_file, tmp_path):
    result = runner.invoke(cli, [
        '--config', str(config_file),
        'run', str(tmp_path / "missing.gff"),
        '--contig', 'contig1', '--position', '150',
    ])

    assert result.exit_code == 2
