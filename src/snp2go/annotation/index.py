"""Stream gene features from an annotation file into an overlap index."""

import gzip
from bisect import bisect_right
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, TextIO

import polars as pl
import structlog

from snp2go.annotation.attributes import decode_attributes
from snp2go.annotation.models import GeneRecord, GenomicInterval
from snp2go.config.schema import AnnotationConfig

logger = structlog.get_logger()

ANNOTATION_COLUMNS = 9

# Schema of AnnotationIndex.to_frame()
GENE_FRAME_SCHEMA = {
    "contig": pl.Utf8,
    "start": pl.Int64,
    "end": pl.Int64,
    "id": pl.Utf8,
    "locus_tag": pl.Utf8,
    "ortholog": pl.Utf8,
    "description": pl.Utf8,
    "GO": pl.Utf8,
    "GO_names": pl.Utf8,
}


@dataclass
class ParseReport:
    """Counts collected while reading an annotation file.

    Attributes:
        lines_read: Non-blank, non-comment feature lines seen
        genes_parsed: Gene records kept
        ignored_features: Lines with a different feature type
        skipped: Skip reason -> count (wrong_column_count, bad_coordinates,
                 missing_id, invalid_id, duplicate_id)
        bad_attribute_tokens: Attribute tokens dropped for having no key
    """
    lines_read: int = 0
    genes_parsed: int = 0
    ignored_features: int = 0
    skipped: Counter = field(default_factory=Counter)
    bad_attribute_tokens: int = 0

    @property
    def total_skipped(self) -> int:
        return sum(self.skipped.values())


def open_annotation(path: Path | str) -> TextIO:
    """Open an annotation file as text, transparently handling .gz."""
    path = Path(path)
    if path.suffix == ".gz":
        return gzip.open(path, "rt", encoding="utf-8")
    return open(path, "r", encoding="utf-8")


def _join_sorted(values: frozenset[str], delimiter: str) -> str | None:
    return delimiter.join(sorted(values)) if values else None


def iter_gene_records(
    lines: Iterable[str],
    config: AnnotationConfig | None = None,
    report: ParseReport | None = None,
) -> Iterator[GeneRecord]:
    """Yield GeneRecords from annotation lines, skipping malformed rows.

    Args:
        lines: Annotation lines (file handle or any iterable of str)
        config: Feature type and GO delimiters (defaults if None)
        report: ParseReport updated in place with counts

    Yields:
        GeneRecord for every valid line of the configured feature type,
        in file order. Later records reusing a seen ID are dropped.
    """
    config = config or AnnotationConfig()
    report = report if report is not None else ParseReport()
    seen_ids: set[str] = set()

    for line_number, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        if not line.strip():
            continue
        if line.startswith("##FASTA"):
            break
        if line.startswith("#"):
            continue

        report.lines_read += 1
        parts = line.split("\t")

        if len(parts) != ANNOTATION_COLUMNS:
            report.skipped["wrong_column_count"] += 1
            logger.debug("annotation_line_skipped", line=line_number, reason="wrong_column_count")
            continue

        contig, _source, feature_type, start, end, _score, _strand, _frame, attributes = parts

        if feature_type != config.feature_type:
            report.ignored_features += 1
            continue

        try:
            interval = GenomicInterval(contig=contig, start=int(start), end=int(end))
        except ValueError:
            # int() failures and pydantic ValidationError (a ValueError) alike
            report.skipped["bad_coordinates"] += 1
            logger.debug("annotation_line_skipped", line=line_number, reason="bad_coordinates")
            continue

        decoded = decode_attributes(attributes)
        report.bad_attribute_tokens += len(decoded.rejected_tokens)

        gene_id = decoded.get("ID")
        if not gene_id:
            report.skipped["missing_id"] += 1
            logger.debug("annotation_line_skipped", line=line_number, reason="missing_id")
            continue

        # Ids are written one per line; a decoded tab or newline would split them
        if not gene_id.isprintable():
            report.skipped["invalid_id"] += 1
            logger.debug("annotation_line_skipped", line=line_number, reason="invalid_id")
            continue

        if gene_id in seen_ids:
            report.skipped["duplicate_id"] += 1
            logger.debug(
                "annotation_line_skipped", line=line_number, reason="duplicate_id", gene_id=gene_id
            )
            continue
        seen_ids.add(gene_id)

        report.genes_parsed += 1
        yield GeneRecord(
            id=gene_id,
            interval=interval,
            locus_tag=decoded.get("locus_tag") or None,
            ortholog=decoded.get("Ortholog") or None,
            description=decoded.get("Description") or None,
            go_terms=decoded.get_multi("GO", config.go_delimiter),
            go_names=decoded.get_multi("GO_names", config.go_names_delimiter),
            extra_attributes=tuple(sorted(decoded.unrecognized().items())),
        )


class AnnotationIndex:
    """Gene records indexed per contig for window overlap queries.

    Records are kept in file order (for universe construction) and, per
    contig, sorted by start with the contig's longest feature length so a
    query only visits records that can reach the search window.
    """

    def __init__(self, records: Iterable[GeneRecord]):
        self.records: list[GeneRecord] = list(records)
        self._by_id = {record.id: record for record in self.records}

        by_contig: dict[str, list[GeneRecord]] = {}
        for record in self.records:
            by_contig.setdefault(record.contig, []).append(record)

        self._contigs: dict[str, list[GeneRecord]] = {}
        self._starts: dict[str, list[int]] = {}
        self._max_length: dict[str, int] = {}
        for contig, contig_records in by_contig.items():
            contig_records.sort(key=lambda r: (r.start, r.end, r.id))
            self._contigs[contig] = contig_records
            self._starts[contig] = [r.start for r in contig_records]
            self._max_length[contig] = max(r.end - r.start for r in contig_records)

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, gene_id: str) -> bool:
        return gene_id in self._by_id

    def __iter__(self) -> Iterator[GeneRecord]:
        return iter(self.records)

    @property
    def contigs(self) -> list[str]:
        return sorted(self._contigs)

    def get(self, gene_id: str) -> GeneRecord | None:
        return self._by_id.get(gene_id)

    def overlapping(self, contig: str, start: int, end: int) -> list[GeneRecord]:
        """Return records on contig with record.start <= end and record.end >= start.

        Results are sorted by gene id.
        """
        contig_records = self._contigs.get(contig)
        if not contig_records or start > end:
            return []

        starts = self._starts[contig]
        # Nothing starting after `end` can overlap
        hi = bisect_right(starts, end)
        # Nothing starting before start - max_length can reach `start`
        lo = bisect_right(starts, start - self._max_length[contig] - 1)

        hits = [r for r in contig_records[lo:hi] if r.end >= start]
        return sorted(hits, key=lambda r: r.id)

    def to_frame(self, go_delimiter: str = ",", go_names_delimiter: str = ",") -> pl.DataFrame:
        """Export all records, in file order, as a polars DataFrame."""
        rows = [
            {
                "contig": r.contig,
                "start": r.start,
                "end": r.end,
                "id": r.id,
                "locus_tag": r.locus_tag,
                "ortholog": r.ortholog,
                "description": r.description,
                "GO": _join_sorted(r.go_terms, go_delimiter),
                "GO_names": _join_sorted(r.go_names, go_names_delimiter),
            }
            for r in self.records
        ]
        return pl.DataFrame(rows, schema=GENE_FRAME_SCHEMA)

    @classmethod
    def from_file(
        cls,
        path: Path | str,
        config: AnnotationConfig | None = None,
    ) -> tuple["AnnotationIndex", ParseReport]:
        """Parse an annotation file into an index.

        Args:
            path: Annotation file (tab-delimited, 9 columns; .gz accepted)
            config: Feature type and GO delimiters

        Returns:
            Tuple of (index, parse_report)

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file yields no gene records
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Annotation file not found: {path}")

        config = config or AnnotationConfig()
        report = ParseReport()

        logger.info("annotation_parse_start", path=str(path), feature_type=config.feature_type)

        with open_annotation(path) as handle:
            index = cls(iter_gene_records(handle, config=config, report=report))

        if len(index) == 0:
            raise ValueError(
                f"Annotation file {path} contains no usable '{config.feature_type}' records "
                f"({report.lines_read} feature lines read, {report.total_skipped} skipped)"
            )

        logger.info(
            "annotation_parse_complete",
            genes=report.genes_parsed,
            contigs=len(index.contigs),
            ignored_features=report.ignored_features,
            skipped=dict(report.skipped),
            bad_attribute_tokens=report.bad_attribute_tokens,
        )

        return index, report
