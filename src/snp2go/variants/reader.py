"""Build variant lists from a single coordinate or a contig/position table."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import structlog

from snp2go.variants.models import Variant

logger = structlog.get_logger()


@dataclass
class VariantReadReport:
    """Counts collected while reading a variant table.

    Attributes:
        rows_read: Non-blank, non-comment rows seen (header included)
        variants: Variants kept
        skipped_rows: Rows dropped (too few columns or non-numeric position)
        header_detected: True if the first row was treated as a header
    """
    rows_read: int = 0
    variants: int = 0
    skipped_rows: int = 0
    header_detected: bool = False


def single_variant(contig: str, position: int) -> Variant:
    """Create the one-variant input from an explicit coordinate.

    Raises:
        ValueError: If contig is empty or position is negative
    """
    return Variant(contig=contig, position=position)


def parse_variant_rows(
    rows: Iterable[str],
    report: VariantReadReport | None = None,
) -> list[Variant]:
    """Parse contig<TAB>position rows.

    A row is data only if its second column is ASCII digits. A first
    row that is not data is taken as a header; later non-data rows are
    skipped and counted. Columns past the second are ignored.

    Args:
        rows: Table lines
        report: VariantReadReport updated in place

    Returns:
        Variants in input order (duplicates kept)
    """
    report = report if report is not None else VariantReadReport()
    variants: list[Variant] = []

    for line in rows:
        line = line.rstrip("\r\n")
        if not line.strip() or line.startswith("#"):
            continue

        report.rows_read += 1
        parts = line.split("\t")
        contig = parts[0].strip()
        position = parts[1].strip() if len(parts) > 1 else ""

        if contig and position.isascii() and position.isdigit():
            variants.append(Variant(contig=contig, position=int(position)))
            continue

        if report.rows_read == 1 and len(parts) > 1:
            report.header_detected = True
            continue

        report.skipped_rows += 1
        logger.debug("variant_row_skipped", row=report.rows_read, content=line[:80])

    report.variants = len(variants)
    return variants


def read_variant_table(path: Path | str) -> tuple[list[Variant], VariantReadReport]:
    """Read a two-column variant table from disk.

    Returns:
        Tuple of (variants, read_report)

    Raises:
        FileNotFoundError: If the table doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Variant table not found: {path}")

    report = VariantReadReport()
    with open(path, "r", encoding="utf-8") as handle:
        variants = parse_variant_rows(handle, report)

    logger.info(
        "variant_table_read",
        path=str(path),
        variants=report.variants,
        skipped_rows=report.skipped_rows,
        header=report.header_detected,
    )
    if report.skipped_rows:
        logger.warning("variant_rows_skipped", count=report.skipped_rows, path=str(path))

    return variants, report
