"""Enrichment plots for pipeline outputs."""

import logging
import math
from pathlib import Path

import matplotlib
import polars as pl

# Use Agg backend (non-interactive, safe for headless/CLI use)
matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import seaborn as sns  # noqa: E402

from snp2go.enrichment.models import NAMESPACE_ORDER  # noqa: E402

logger = logging.getLogger(__name__)

NAMESPACE_COLORS = {
    "BP": "#3498db",
    "MF": "#2ecc71",
    "CC": "#e67e22",
}

# Smallest p-value plotted; avoids -log10(0)
P_FLOOR = 1e-300


def plot_top_terms(
    df: pl.DataFrame,
    namespace: str,
    output_path: Path,
    top_n: int = 15,
    alpha: float = 0.05,
) -> Path:
    """
    Horizontal bar chart of the top terms by -log10(adjusted p).

    Args:
        df: Enrichment table for one namespace
        namespace: BP, MF or CC (title and color)
        output_path: Path where PNG will be saved
        top_n: Number of terms shown
        alpha: Significance cutoff drawn as a dashed line

    Returns:
        Path to the saved PNG file
    """
    top = df.sort(["p_value", "term_id"]).head(top_n)
    pdf = top.with_columns(
        (
            pl.col("term_id")
            + pl.lit(" ")
            + pl.col("term_name").fill_null("").str.slice(0, 50)
        ).alias("label"),
        (-pl.col("adjusted_p_value").clip(P_FLOOR, 1.0).log10()).alias("neg_log10_fdr"),
    ).to_pandas()

    sns.set_theme(style="whitegrid", context="paper")
    fig, ax = plt.subplots(figsize=(10, max(3, 0.4 * len(pdf) + 1)))

    if len(pdf) > 0:
        sns.barplot(
            data=pdf,
            x="neg_log10_fdr",
            y="label",
            color=NAMESPACE_COLORS.get(namespace, "#7f8c8d"),
            ax=ax,
        )
    ax.axvline(-math.log10(alpha), color="#c0392b", linestyle="--", linewidth=1)

    ax.set_xlabel("-log10(adjusted p-value)")
    ax.set_ylabel("")
    ax.set_title(f"Top {namespace} terms")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=300, bbox_inches="tight")

    # Close figure to release memory between plots
    plt.close(fig)

    logger.info(f"Saved {namespace} top-term plot to {output_path}")
    return output_path


def plot_namespace_summary(
    tables: dict[str, pl.DataFrame],
    output_path: Path,
    alpha: float = 0.05,
) -> Path:
    """
    Bar chart of reported vs significant term counts per namespace.

    Args:
        tables: namespace -> enrichment table
        output_path: Path where PNG will be saved
        alpha: Adjusted p-value cutoff for "significant"

    Returns:
        Path to the saved PNG file
    """
    rows = []
    for namespace in NAMESPACE_ORDER:
        if namespace not in tables:
            continue
        df = tables[namespace]
        rows.append({"namespace": namespace, "category": "reported", "count": df.height})
        rows.append({
            "namespace": namespace,
            "category": f"adj. p <= {alpha}",
            "count": df.filter(pl.col("adjusted_p_value") <= alpha).height,
        })

    pdf = pl.DataFrame(
        rows, schema={"namespace": pl.Utf8, "category": pl.Utf8, "count": pl.Int64}
    ).to_pandas()

    fig, ax = plt.subplots(figsize=(8, 6))
    if len(pdf) > 0:
        sns.barplot(data=pdf, x="namespace", y="count", hue="category", palette="viridis", ax=ax)

    ax.set_xlabel("GO namespace")
    ax.set_ylabel("Terms")
    ax.set_title("Enrichment Summary")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=300, bbox_inches="tight")
    plt.close(fig)

    logger.info(f"Saved namespace summary plot to {output_path}")
    return output_path


def generate_all_plots(
    tables: dict[str, pl.DataFrame],
    output_dir: Path,
    top_n: int = 15,
    alpha: float = 0.05,
) -> dict[str, Path]:
    """
    Generate all enrichment plots.

    Args:
        tables: namespace -> enrichment table
        output_dir: Directory where plots will be saved
        top_n: Terms per top-term plot
        alpha: Significance cutoff

    Returns:
        Dictionary mapping plot name to file path

    Notes:
        - Namespaces with an empty table get no top-term plot
        - Each plot is wrapped so one failure does not stop the others
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    plots = {}

    for namespace in NAMESPACE_ORDER:
        df = tables.get(namespace)
        if df is None or df.height == 0:
            continue
        try:
            plots[f"top_terms_{namespace}"] = plot_top_terms(
                df,
                namespace,
                output_dir / f"top_terms_{namespace}.png",
                top_n=top_n,
                alpha=alpha,
            )
        except Exception as e:
            logger.warning(f"Failed to create {namespace} top-term plot: {e}")

    try:
        plots["namespace_summary"] = plot_namespace_summary(
            tables,
            output_dir / "namespace_summary.png",
            alpha=alpha,
        )
    except Exception as e:
        logger.warning(f"Failed to create namespace summary plot: {e}")

    logger.info(f"Generated {len(plots)} plots in {output_dir}")
    return plots
