"""Hypergeometric over-representation p-values and FDR adjustment."""

import numpy as np
from scipy.stats import hypergeom
from statsmodels.stats.multitest import multipletests


def hypergeometric_sf(
    query_counts: np.ndarray,
    universe_size: int,
    background_counts: np.ndarray,
    query_size: int,
) -> np.ndarray:
    """Upper-tail hypergeometric p-values, P(X >= k).

    X counts annotated genes among query_size draws without replacement
    from universe_size genes of which background_counts are annotated.

    Args:
        query_counts: k per term
        universe_size: N
        background_counts: K per term
        query_size: n

    Returns:
        p-values clipped to [0, 1]; k = 0 gives 1.0
    """
    k = np.asarray(query_counts, dtype=np.int64)
    K = np.asarray(background_counts, dtype=np.int64)
    # sf(k - 1) = P(X > k - 1) = P(X >= k)
    p = hypergeom.sf(k - 1, universe_size, K, query_size)
    return np.clip(np.asarray(p, dtype=float), 0.0, 1.0)


def upper_tail_pvalue(query_count: int, universe_size: int, background_count: int, query_size: int) -> float:
    """Scalar form of hypergeometric_sf."""
    return float(
        hypergeometric_sf(np.array([query_count]), universe_size, np.array([background_count]), query_size)[0]
    )


def benjamini_hochberg(p_values: np.ndarray, alpha: float = 0.05) -> np.ndarray:
    """Benjamini-Hochberg adjusted p-values, in input order.

    Adjusted values are non-decreasing along ascending raw p-value rank,
    never below their raw p-value, and capped at 1.
    """
    p = np.asarray(p_values, dtype=float)
    if p.size == 0:
        return p
    _, adjusted, _, _ = multipletests(p, alpha=alpha, method="fdr_bh")
    return adjusted
