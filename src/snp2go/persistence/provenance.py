"""Run provenance: version, settings, input checksums and step log."""

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


def file_sha256(path: Path, chunk_size: int = 1 << 20) -> str:
    """SHA-256 of a file's bytes, read in chunks."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


class ProvenanceTracker:
    """
    Collects what is needed to reproduce one run.

    The annotation, variant and ontology files are fingerprinted, the
    window and enrichment settings are copied from the config, and each
    stage appends a timestamped step with its counts.
    """

    def __init__(self, pipeline_version: str, config: "PipelineConfig"):
        self.pipeline_version = pipeline_version
        self.config_hash = config.config_hash()
        self.parameters = {
            "annotation": config.annotation.model_dump(mode="json"),
            "window": config.window.model_dump(mode="json"),
            "enrichment": config.enrichment.model_dump(mode="json"),
        }
        self.inputs: dict[str, dict] = {}
        self.processing_steps: list[dict] = []
        self.created_at = datetime.now(timezone.utc)

    def record_input(self, role: str, path: Path) -> None:
        """
        Fingerprint an input file.

        Args:
            role: What the file is for ("annotation", "variants", "ontology")
            path: File to hash
        """
        path = Path(path)
        self.inputs[role] = {
            "path": str(path),
            "sha256": file_sha256(path),
            "size_bytes": path.stat().st_size,
        }

    def record_step(self, step_name: str, details: Optional[dict] = None) -> None:
        """
        Append a stage to the step log.

        Args:
            step_name: Stage identifier (e.g. "map_variants")
            details: Counts or paths worth keeping for that stage
        """
        step = {
            "step_name": step_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if details:
            step["details"] = details
        self.processing_steps.append(step)

    def get_steps(self) -> list[dict]:
        return self.processing_steps

    def create_metadata(self) -> dict:
        return {
            "pipeline_version": self.pipeline_version,
            "config_hash": self.config_hash,
            "created_at": self.created_at.isoformat(),
            "parameters": self.parameters,
            "inputs": self.inputs,
            "processing_steps": self.processing_steps,
        }

    def save_sidecar(self, output_path: Path) -> Path:
        """
        Write the metadata as JSON next to an output.

        Args:
            output_path: Output the sidecar belongs to; its suffix is
                         replaced by .provenance.json (run.json ->
                         run.provenance.json)

        Returns:
            Path of the sidecar
        """
        sidecar_path = Path(output_path).with_suffix(".provenance.json")
        sidecar_path.parent.mkdir(parents=True, exist_ok=True)

        with open(sidecar_path, "w") as f:
            json.dump(self.create_metadata(), f, indent=2, default=str)
        return sidecar_path

    def save_to_store(self, store: "PipelineStore") -> None:
        """Append one row for this run to the store's _provenance table."""
        metadata = self.create_metadata()

        store.conn.execute("""
            CREATE TABLE IF NOT EXISTS _provenance (
                version VARCHAR,
                config_hash VARCHAR,
                created_at TIMESTAMP,
                inputs_json VARCHAR,
                steps_json VARCHAR
            )
        """)

        store.conn.execute("""
            INSERT INTO _provenance (version, config_hash, created_at, inputs_json, steps_json)
            VALUES (?, ?, ?, ?, ?)
        """, [
            metadata["pipeline_version"],
            metadata["config_hash"],
            metadata["created_at"],
            json.dumps(metadata["inputs"]),
            json.dumps(metadata["processing_steps"], default=str),
        ])

    @staticmethod
    def load_sidecar(sidecar_path: Path) -> dict:
        with open(sidecar_path) as f:
            return json.load(f)

    @classmethod
    def from_config(
        cls,
        config: "PipelineConfig",
        version: Optional[str] = None
    ) -> "ProvenanceTracker":
        """
        Build a tracker for config.

        Args:
            config: Loaded PipelineConfig
            version: Version to record; defaults to snp2go.__version__
        """
        if version is None:
            from snp2go import __version__
            version = __version__

        return cls(version, config)
