"""TSV/Parquet/text writers and the YAML run manifest."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

import polars as pl
import yaml

from snp2go.universe.builder import BackgroundUniverse


def write_table(
    df: pl.DataFrame,
    output_dir: Path,
    filename_base: str,
    sort_by: list[str] | None = None,
    parquet: bool = True,
) -> dict[str, Path]:
    """
    Write a table as TSV (and Parquet) with a header, even when empty.

    Args:
        df: Table to write
        output_dir: Directory for the files (created if missing)
        filename_base: Base filename without extension
        sort_by: Columns to sort by before writing, for deterministic output
        parquet: Also write {filename_base}.parquet

    Returns:
        Dictionary with "tsv" (and "parquet") paths
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if sort_by:
        df = df.sort(sort_by, maintain_order=True)

    paths = {"tsv": output_dir / f"{filename_base}.tsv"}
    df.write_csv(paths["tsv"], separator="\t", include_header=True)

    if parquet:
        paths["parquet"] = output_dir / f"{filename_base}.parquet"
        df.write_parquet(paths["parquet"], compression="snappy")

    return paths


def write_id_list(ids: Iterable[str], output_path: Path) -> Path:
    """Write one id per line (sorted input is written as given)."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        for gene_id in ids:
            f.write(f"{gene_id}\n")
    return output_path


def write_association_table(universe: BackgroundUniverse, output_path: Path) -> Path:
    """Write gene_id<TAB>GO;GO;... for every universe gene, sorted by gene id.

    No header line, matching the association file layout GO tools read.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df = universe.association_frame()
    df.write_csv(output_path, separator="\t", include_header=False)
    return output_path


def write_run_manifest(
    output_dir: Path,
    output_files: list[Path],
    statistics: dict,
    filename: str = "run_manifest.yaml",
) -> Path:
    """
    Write a YAML manifest describing a run's outputs.

    Args:
        output_dir: Run output directory
        output_files: Files produced by the run
        statistics: Counts to record (genes, variants, skips, terms ...)
        filename: Manifest filename

    Returns:
        Path to the manifest
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    manifest_path = output_dir / filename

    manifest = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "output_files": sorted(
            str(Path(p).relative_to(output_dir)) if Path(p).is_relative_to(output_dir) else str(p)
            for p in output_files
        ),
        "statistics": statistics,
    }

    with open(manifest_path, "w") as f:
        yaml.dump(manifest, f, default_flow_style=False, sort_keys=False)

    return manifest_path
