"""Ontology triple sources."""

from .backend import (
    OntologySource,
    ClosureRow,
    NodeRow,
    ValueRow,
    ReferrerRow,
    ConceptRow,
    is_ontology_source,
    term_key,
)
from .sqlite_source import SQLiteOntologySource
from .graph_source import GraphOntologySource

__all__ = [
    "OntologySource",
    "ClosureRow",
    "NodeRow",
    "ValueRow",
    "ReferrerRow",
    "ConceptRow",
    "is_ontology_source",
    "term_key",
    "SQLiteOntologySource",
    "GraphOntologySource",
]
