"""DuckDB database holding the tables of the latest run."""

from pathlib import Path
from typing import Optional

import duckdb
import polars as pl

from snp2go.enrichment.models import ENRICHMENT_TABLE_NAME


class PipelineStore:
    """
    Run tables (hits, universe, associations, enrichment) in one DuckDB file.

    Every table written through the store gets a row in _checkpoints
    (row count, description, write time), so a later session can see what
    the last run produced and query it with SQL.
    """

    def __init__(self, db_path: Path):
        """
        Connect to the database file, creating it and its parent
        directories when missing.

        Args:
            db_path: Location of the DuckDB file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = duckdb.connect(str(self.db_path))

        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS _checkpoints (
                table_name VARCHAR PRIMARY KEY,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                row_count INTEGER,
                description VARCHAR
            )
        """)

    def save_dataframe(
        self,
        df: pl.DataFrame,
        table_name: str,
        description: str = "",
        replace: bool = True
    ) -> None:
        """
        Write a polars frame to a table and record it in _checkpoints.

        Args:
            df: Frame to store; a zero-row frame still creates its columns
            table_name: Target table
            description: Free text kept with the checkpoint row
            replace: Overwrite the table (True) or append rows to it (False)

        Raises:
            ValueError: If df is not a polars DataFrame
        """
        if not isinstance(df, pl.DataFrame):
            raise ValueError("df must be a polars.DataFrame")

        # DuckDB scans the local Arrow table by its variable name
        arrow_table = df.to_arrow()
        if replace:
            self.conn.execute(f"CREATE OR REPLACE TABLE {table_name} AS SELECT * FROM arrow_table")
        else:
            self.conn.execute(f"INSERT INTO {table_name} SELECT * FROM arrow_table")

        row_count = self.conn.execute(f"SELECT COUNT(*) FROM {table_name}").fetchone()[0]
        self.conn.execute("""
            INSERT OR REPLACE INTO _checkpoints (table_name, row_count, description, created_at)
            VALUES (?, ?, ?, CURRENT_TIMESTAMP)
        """, [table_name, row_count, description])

    def save_tables(self, tables: dict[str, tuple[pl.DataFrame, str]]) -> list[str]:
        """Save several frames at once; tables maps name -> (frame, description)."""
        for table_name, (df, description) in tables.items():
            self.save_dataframe(df, table_name, description)
        return list(tables)

    def load_dataframe(self, table_name: str) -> Optional[pl.DataFrame]:
        """Read a whole table back, or None if it was never written."""
        try:
            return self.conn.execute(f"SELECT * FROM {table_name}").pl()
        except duckdb.CatalogException:
            return None

    def has_checkpoint(self, table_name: str) -> bool:
        count = self.conn.execute(
            "SELECT COUNT(*) FROM _checkpoints WHERE table_name = ?",
            [table_name]
        ).fetchone()[0]
        return count > 0

    def list_checkpoints(self) -> list[dict]:
        """
        Checkpoint rows, most recent first.

        Returns:
            Dicts with table_name, created_at, row_count and description
        """
        rows = self.conn.execute("""
            SELECT table_name, created_at, row_count, description
            FROM _checkpoints
            ORDER BY created_at DESC, table_name
        """).fetchall()

        keys = ("table_name", "created_at", "row_count", "description")
        return [dict(zip(keys, row)) for row in rows]

    def delete_checkpoint(self, table_name: str) -> None:
        self.conn.execute(f"DROP TABLE IF EXISTS {table_name}")
        self.conn.execute(
            "DELETE FROM _checkpoints WHERE table_name = ?",
            [table_name]
        )

    def significant_terms(self, alpha: float = 0.05) -> pl.DataFrame:
        """
        Enrichment rows with adjusted_p_value <= alpha across namespaces.

        Returns:
            Rows ordered by namespace, adjusted p-value and term id; an
            empty frame when no enrichment table has been saved
        """
        if not self.has_checkpoint(ENRICHMENT_TABLE_NAME):
            return pl.DataFrame()
        return self.execute_query(
            f"""
            SELECT * FROM {ENRICHMENT_TABLE_NAME}
            WHERE adjusted_p_value <= ?
            ORDER BY namespace, adjusted_p_value, term_id
            """,
            [alpha],
        )

    def export_parquet(self, table_name: str, output_path: Path) -> None:
        """Write a stored table to Parquet with DuckDB's COPY."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn.execute(f"COPY {table_name} TO '{output_path}' (FORMAT PARQUET)")

    def execute_query(
        self,
        query: str,
        params: Optional[list] = None
    ) -> pl.DataFrame:
        """Run SQL against the store and return a polars frame."""
        result = self.conn.execute(query, params) if params else self.conn.execute(query)
        return result.pl()

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @classmethod
    def from_config(cls, config: "PipelineConfig") -> "PipelineStore":
        """Open the store at config.duckdb_path."""
        return cls(config.duckdb_path)
