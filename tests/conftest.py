"""Shared fixtures: small annotation, ontology and config files."""

from pathlib import Path

import pytest

from snp2go.config.loader import load_config
from snp2go.enrichment.ontology import GoOntology

OBO_TEXT = """format-version: 1.2
data-version: snp2go/test

[Term]
id: GO:0008150
name: biological_process
namespace: biological_process

[Term]
id: GO:0000001
name: mitochondrion inheritance
namespace: biological_process
alt_id: GO:0000099
is_a: GO:0008150 ! biological_process

[Term]
id: GO:0000002
name: mitochondrial genome maintenance
namespace: biological_process
is_a: GO:0008150 ! biological_process

[Term]
id: GO:0003674
name: molecular_function
namespace: molecular_function

[Term]
id: GO:0005515
name: protein binding
namespace: molecular_function
is_a: GO:0003674 ! molecular_function

[Term]
id: GO:0005575
name: cellular_component
namespace: cellular_component

[Term]
id: GO:0005739
name: mitochondrion
namespace: cellular_component
is_a: GO:0005575 ! cellular_component

[Term]
id: GO:0000005
name: obsolete ribosomal chaperone activity
namespace: molecular_function
is_obsolete: true
"""

# Two genes far apart on contig1 (G1 near position 150)
SCENARIO_GFF = (
    "##gff-version 3\n"
    "contig1\tsrc\tgene\t100\t200\t.\t+\t.\tID=G1;locus_tag=LT_0001;GO=GO:0000001\n"
    "contig1\tsrc\tgene\t5000\t5100\t.\t-\t.\tID=G2;locus_tag=LT_0002;GO=GO:0000002\n"
)

# Mixed annotation: valid genes, malformed lines, other features
MIXED_GFF = (
    "##gff-version 3\n"
    "# comment line\n"
    "chr1\tprokka\tgene\t1000\t2000\t.\t+\t.\tID=geneA;locus_tag=A_01;Ortholog=K00001;"
    "Description=DNA%20polymerase;GO=GO:0000001,GO:0005515;GO_names=mitochondrion inheritance,protein binding\n"
    "chr1\tprokka\tCDS\t1000\t2000\t.\t+\t0\tID=cds1;Parent=geneA\n"
    "chr1\tprokka\tgene\t2500\t3000\t.\t+\t.\tID=geneB;GO=GO:0005739\n"
    "chr1\tprokka\tgene\t8000\t9000\t.\t-\t.\tID=geneC;Description=hypothetical%20protein\n"
    "chr2\tprokka\tgene\t100\t400\t.\t+\t.\tID=geneD;GO=GO:0000002;note=x%3Dy\n"
    "chr2\tprokka\tgene\t500\t600\t.\t+\t.\tlocus_tag=NO_ID;GO=GO:0000001\n"
    "chr2\tprokka\tgene\tabc\t600\t.\t+\t.\tID=badStart\n"
    "chr2\tprokka\tgene\t700\t650\t.\t+\t.\tID=reversed\n"
    "chr2\tprokka\tgene\t700\t800\t.\t+\n"
    "chr2\tprokka\tgene\t900\t950\t.\t+\t.\tID=geneA;GO=GO:0005739\n"
    "##FASTA\n"
    ">chr1\n"
    "ACGTACGTACGT\n"
)


@pytest.fixture
def obo_file(tmp_path) -> Path:
    path = tmp_path / "go-test.obo"
    path.write_text(OBO_TEXT)
    return path


@pytest.fixture
def ontology(obo_file) -> GoOntology:
    return GoOntology.from_obo(obo_file)


@pytest.fixture
def scenario_gff(tmp_path) -> Path:
    path = tmp_path / "scenario.gff"
    path.write_text(SCENARIO_GFF)
    return path


@pytest.fixture
def mixed_gff(tmp_path) -> Path:
    path = tmp_path / "mixed.gff"
    path.write_text(MIXED_GFF)
    return path


@pytest.fixture
def config_file(tmp_path, obo_file) -> Path:
    """Config YAML pointing every output into tmp_path."""
    config_path = tmp_path / "test_config.yaml"
    config_path.write_text(f"""
output_dir: {tmp_path}/results
duckdb_path: {tmp_path}/results/test.duckdb

annotation:
  feature_type: gene
  go_delimiter: ","
  go_names_delimiter: ","

window:
  window_bp: 50
  workers: 1

enrichment:
  obo_path: {obo_file}
  namespaces: [BP, MF, CC]
  alpha: 0.05
  min_query_count: 1
  propagate_counts: false
""")
    return config_path


@pytest.fixture
def test_config(config_file):
    return load_config(config_file)
