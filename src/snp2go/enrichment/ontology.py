"""GO ontology lookups backed by a goatools GODag."""

from pathlib import Path

import structlog
from goatools.obo_parser import GODag

logger = structlog.get_logger()

# OBO namespace -> short code used throughout the pipeline
NAMESPACE_CODES = {
    "biological_process": "BP",
    "molecular_function": "MF",
    "cellular_component": "CC",
}


class GoOntology:
    """Namespace, name and ancestor lookups for GO ids.

    Alternative ids resolve to their primary term; obsolete or unknown ids
    resolve to None.
    """

    def __init__(self, dag: GODag):
        self.dag = dag

    def __len__(self) -> int:
        # GODag also keys alt_ids; count primary terms only
        return len({term.id for term in self.dag.values()})

    def resolve(self, term_id: str) -> str | None:
        """Primary id for term_id, or None if the ontology lacks it."""
        term = self.dag.get(term_id)
        return term.id if term is not None else None

    def namespace(self, term_id: str) -> str | None:
        term = self.dag.get(term_id)
        if term is None:
            return None
        return NAMESPACE_CODES.get(term.namespace)

    def name(self, term_id: str) -> str:
        term = self.dag.get(term_id)
        return term.name if term is not None else ""

    def ancestors(self, term_id: str) -> set[str]:
        """All is_a ancestors of term_id (excluding itself)."""
        term = self.dag.get(term_id)
        return set(term.get_all_parents()) if term is not None else set()

    @classmethod
    def from_obo(cls, obo_path: Path | str) -> "GoOntology":
        """Load an OBO file (e.g. go-basic.obo).

        Raises:
            FileNotFoundError: If the OBO file doesn't exist
            ValueError: If the file holds no GO terms
        """
        obo_path = Path(obo_path)
        if not obo_path.exists():
            raise FileNotFoundError(f"GO ontology file not found: {obo_path}")

        logger.info("ontology_load_start", path=str(obo_path))
        dag = GODag(str(obo_path), optional_attrs=None, load_obsolete=False, prt=None)
        ontology = cls(dag)

        if len(ontology) == 0:
            raise ValueError(f"GO ontology file {obo_path} contains no terms")

        logger.info("ontology_load_complete", terms=len(ontology))
        return ontology
