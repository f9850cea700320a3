"""Output generation: table writers, run manifest and enrichment plots."""

from snp2go.output.visualizations import (
    generate_all_plots,
    plot_namespace_summary,
    plot_top_terms,
)
from snp2go.output.writers import (
    write_association_table,
    write_id_list,
    write_run_manifest,
    write_table,
)

__all__ = [
    "generate_all_plots",
    "plot_namespace_summary",
    "plot_top_terms",
    "write_association_table",
    "write_id_list",
    "write_run_manifest",
    "write_table",
]
