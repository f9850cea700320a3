"""Tests for annotation parsing and the per-contig overlap index."""

import gzip

import polars as pl
import pytest
from pydantic import ValidationError

from snp2go.annotation import (
    AnnotationIndex,
    GeneRecord,
    GenomicInterval,
    ParseReport,
    iter_gene_records,
)
from snp2go.config.schema import AnnotationConfig


def make_gene(gene_id, start, end, contig="chr1", go=()):
    return GeneRecord(
        id=gene_id,
        interval=GenomicInterval(contig=contig, start=start, end=end),
        go_terms=frozenset(go),
    )


def test_interval_rejects_reversed_coordinates():
    with pytest.raises(ValueError):
        GenomicInterval(contig="chr1", start=10, end=5)


def test_interval_overlap_is_inclusive():
    interval = GenomicInterval(contig="chr1", start=100, end=200)

    assert interval.overlaps(200, 300)
    assert interval.overlaps(0, 100)
    assert not interval.overlaps(201, 300)
    assert interval.length == 101


def test_parse_report_counts(mixed_gff):
    """Test every skip reason is counted and valid genes are kept."""
    index, report = AnnotationIndex.from_file(mixed_gff)

    assert report.lines_read == 10
    assert report.genes_parsed == 4
    assert report.ignored_features == 1
    assert report.skipped["missing_id"] == 1
    assert report.skipped["bad_coordinates"] == 2
    assert report.skipped["wrong_column_count"] == 1
    assert report.skipped["duplicate_id"] == 1
    assert report.total_skipped == 5

    assert [r.id for r in index] == ["geneA", "geneB", "geneC", "geneD"]


def test_parsed_fields(mixed_gff):
    index, _ = AnnotationIndex.from_file(mixed_gff)

    gene_a = index.get("geneA")
    assert gene_a.contig == "chr1"
    assert (gene_a.start, gene_a.end) == (1000, 2000)
    assert gene_a.locus_tag == "A_01"
    assert gene_a.ortholog == "K00001"
    assert gene_a.description == "DNA polymerase"
    assert gene_a.go_terms == frozenset({"GO:0000001", "GO:0005515"})
    assert gene_a.go_names == frozenset({"mitochondrion inheritance", "protein binding"})

    gene_c = index.get("geneC")
    assert gene_c.has_go is False
    assert gene_c.locus_tag is None

    assert index.get("geneD").extra_attributes == (("note", "x=y"),)
    assert index.get("geneD").attribute("note") == "x=y"
    assert index.get("geneD").attribute("missing") is None


def test_records_are_hashable_and_immutable(mixed_gff):
    index, _ = AnnotationIndex.from_file(mixed_gff)

    records = set(index) | set(index)
    assert len(records) == len(index)

    gene_d = index.get("geneD")
    with pytest.raises(ValidationError):
        gene_d.extra_attributes = ()
    with pytest.raises(AttributeError):
        gene_d.extra_attributes.append(("note", "changed"))


def test_duplicate_id_keeps_first(mixed_gff):
    index, _ = AnnotationIndex.from_file(mixed_gff)

    assert index.get("geneA").contig == "chr1"
    assert index.get("geneA").go_terms != frozenset({"GO:0005739"})


def test_missing_id_record_absent(mixed_gff):
    index, _ = AnnotationIndex.from_file(mixed_gff)

    assert all(r.locus_tag != "NO_ID" for r in index)
    assert index.overlapping("chr2", 500, 600) == []


def test_id_with_control_characters_skipped():
    lines = [
        "chr1\tsrc\tgene\t1\t10\t.\t+\t.\tID=bad%0Aid\n",
        "chr1\tsrc\tgene\t20\t30\t.\t+\t.\tID=tab%09id\n",
        "chr1\tsrc\tgene\t40\t50\t.\t+\t.\tID=gene%20one\n",
    ]
    report = ParseReport()

    records = list(iter_gene_records(lines, report=report))

    assert [r.id for r in records] == ["gene one"]
    assert report.skipped["invalid_id"] == 2


def test_fasta_section_ends_features():
    lines = [
        "chr1\tsrc\tgene\t1\t10\t.\t+\t.\tID=g1\n",
        "##FASTA\n",
        "chr1\tsrc\tgene\t20\t30\t.\t+\t.\tID=g2\n",
    ]

    records = list(iter_gene_records(lines))

    assert [r.id for r in records] == ["g1"]


def test_custom_feature_type_and_delimiter():
    lines = [
        "chr1\tsrc\tCDS\t1\t10\t.\t+\t0\tID=c1;GO=GO:0000001|GO:0000002\n",
        "chr1\tsrc\tgene\t1\t10\t.\t+\t.\tID=g1;GO=GO:0000001\n",
    ]
    config = AnnotationConfig(feature_type="CDS", go_delimiter="|")
    report = ParseReport()

    records = list(iter_gene_records(lines, config=config, report=report))

    assert [r.id for r in records] == ["c1"]
    assert records[0].go_terms == frozenset({"GO:0000001", "GO:0000002"})
    assert report.ignored_features == 1


def test_bad_attribute_tokens_counted():
    report = ParseReport()
    list(iter_gene_records(["chr1\tsrc\tgene\t1\t10\t.\t+\t.\tID=g1;=bad;;\n"], report=report))

    assert report.genes_parsed == 1
    assert report.bad_attribute_tokens == 1


def test_gzip_input(tmp_path):
    path = tmp_path / "genes.gff.gz"
    with gzip.open(path, "wt") as f:
        f.write("chr1\tsrc\tgene\t1\t10\t.\t+\t.\tID=g1;GO=GO:0000001\n")

    index, report = AnnotationIndex.from_file(path)

    assert len(index) == 1
    assert report.genes_parsed == 1


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        AnnotationIndex.from_file(tmp_path / "missing.gff")


def test_no_gene_records_raises(tmp_path):
    path = tmp_path / "empty.gff"
    path.write_text("##gff-version 3\nchr1\tsrc\tCDS\t1\t10\t.\t+\t0\tID=c1\n")

    with pytest.raises(ValueError, match="no usable 'gene' records"):
        AnnotationIndex.from_file(path)


def test_overlapping_sorted_by_id():
    index = AnnotationIndex([
        make_gene("zeta", 100, 200),
        make_gene("alpha", 150, 160),
        make_gene("mid", 190, 400),
    ])

    assert [r.id for r in index.overlapping("chr1", 155, 195)] == ["alpha", "mid", "zeta"]


def test_overlapping_finds_long_gene_starting_far_left():
    """A long gene starting well before the window still overlaps it."""
    index = AnnotationIndex([
        make_gene("long", 10, 100000),
        make_gene("short1", 500, 600),
        make_gene("short2", 90000, 90100),
    ])

    assert [r.id for r in index.overlapping("chr1", 95000, 95100)] == ["long"]


def test_overlapping_boundaries_inclusive():
    index = AnnotationIndex([make_gene("g1", 100, 200)])

    assert [r.id for r in index.overlapping("chr1", 200, 300)] == ["g1"]
    assert [r.id for r in index.overlapping("chr1", 50, 100)] == ["g1"]
    assert index.overlapping("chr1", 201, 300) == []
    assert index.overlapping("chr1", 0, 99) == []


def test_overlapping_contig_must_match_exactly():
    index = AnnotationIndex([make_gene("g1", 100, 200, contig="chr1")])

    assert index.overlapping("Chr1", 100, 200) == []
    assert index.overlapping("chr10", 100, 200) == []


def test_contigs_and_membership():
    index = AnnotationIndex([make_gene("a", 1, 5, contig="chrB"), make_gene("b", 1, 5, contig="chrA")])

    assert index.contigs == ["chrA", "chrB"]
    assert "a" in index
    assert "c" not in index
    assert len(index) == 2


def test_to_frame(mixed_gff):
    index, _ = AnnotationIndex.from_file(mixed_gff)

    df = index.to_frame()

    assert isinstance(df, pl.DataFrame)
    assert df.columns == ["contig", "start", "end", "id", "locus_tag", "ortholog", "description", "GO", "GO_names"]
    assert df["id"].to_list() == ["geneA", "geneB", "geneC", "geneD"]
    assert df.filter(pl.col("id") == "geneA")["GO"][0] == "GO:0000001,GO:0005515"
    assert df.filter(pl.col("id") == "geneC")["GO"][0] is None
