"""Variant input: single coordinates and contig/position tables."""

from snp2go.variants.models import Variant
from snp2go.variants.reader import (
    VariantReadReport,
    parse_variant_rows,
    read_variant_table,
    single_variant,
)

__all__ = [
    "Variant",
    "VariantReadReport",
    "parse_variant_rows",
    "read_variant_table",
    "single_variant",
]
