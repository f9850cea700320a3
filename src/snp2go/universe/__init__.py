"""Background universe and GO association table construction."""

from snp2go.universe.builder import (
    ASSOCIATION_TABLE_NAME,
    ASSOCIATION_TERM_SEPARATOR,
    BACKGROUND_TABLE_NAME,
    BackgroundUniverse,
    build_universe,
)
from snp2go.universe.validator import ValidationResult, validate_universe

__all__ = [
    "ASSOCIATION_TABLE_NAME",
    "ASSOCIATION_TERM_SEPARATOR",
    "BACKGROUND_TABLE_NAME",
    "BackgroundUniverse",
    "build_universe",
    "ValidationResult",
    "validate_universe",
]
