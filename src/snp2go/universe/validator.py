"""Validation gate for the background universe.

Enrichment cannot run without a universe; this check runs before any
statistics and produces actionable messages.
"""

import logging
from dataclasses import dataclass, field

from snp2go.universe.builder import BackgroundUniverse

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check.

    Attributes:
        passed: Whether validation passed
        messages: Validation messages (PASSED/FAILED lines and details)
    """
    passed: bool
    messages: list[str] = field(default_factory=list)


def validate_universe(universe: BackgroundUniverse) -> ValidationResult:
    """Validate background universe integrity.

    Checks:
    - Universe is non-empty
    - No duplicate gene ids
    - Association keys match the universe exactly

    Args:
        universe: BackgroundUniverse to validate

    Returns:
        ValidationResult with validation status and messages
    """
    messages: list[str] = []
    passed = True

    gene_count = len(universe.gene_ids)

    if gene_count == 0:
        messages.append(
            f"FAILED: Background universe is empty "
            f"({universe.genes_scanned} genes scanned, none with GO terms). "
            "Check the GO attribute and its delimiter."
        )
        passed = False
    else:
        messages.append(
            f"Universe contains {gene_count} genes with GO terms "
            f"({universe.genes_without_go} genes without GO excluded)"
        )

    unique_genes = set(universe.gene_ids)
    if len(unique_genes) < gene_count:
        messages.append(
            f"FAILED: Found {gene_count - len(unique_genes)} duplicate gene IDs"
        )
        passed = False
    else:
        messages.append("No duplicate gene IDs found")

    association_keys = set(universe.associations)
    if association_keys != unique_genes:
        extra = sorted(association_keys - unique_genes)
        missing = sorted(unique_genes - association_keys)
        messages.append(
            f"FAILED: Association table does not match universe "
            f"(extra: {extra[:5]}, missing: {missing[:5]})"
        )
        passed = False
    elif any(not terms for terms in universe.associations.values()):
        messages.append("FAILED: Association table contains genes without GO terms")
        passed = False
    else:
        messages.append("Association table matches universe")

    logger.info(
        f"Universe validation: {'PASSED' if passed else 'FAILED'} "
        f"({gene_count} genes)"
    )

    return ValidationResult(passed=passed, messages=messages)
