"""ontoschema - ontology resolution runtime.

Materializes an RDF/OWL/SKOS ontology stored in a relational store (or read from
a remote graph) into an in-memory model for validating and describing metadata.

Architecture:
- model/: identities, class/property/restriction nodes, SKOS concepts
- source/: triple source protocol with SQLite and rdflib graph backends
- loaders/: class, property and restriction loaders (closure computation)
- merge.py: per-class property views with restriction overrides
- vocabulary.py: controlled vocabulary resolution and value lookup
- cache.py: JSON snapshot codec with atomic writes
- logging/: JSONL build events and optional MLflow tracking
"""

__version__ = "0.1.0"

from .config import SchemaConfig
from .errors import (
    OntologyError,
    SourceUnavailableError,
    CacheCorruptError,
    MalformedGraphWarning,
)
from .model import (
    EntityIdentity,
    ClassNode,
    PropertyDef,
    PropertyView,
    RestrictionDesc,
    VocabConcept,
    MatchStrategy,
)
from .ontology import Ontology
from .cache import OntologyCache, FileCacheStorage

__all__ = [
    "SchemaConfig",
    "OntologyError",
    "SourceUnavailableError",
    "CacheCorruptError",
    "MalformedGraphWarning",
    "EntityIdentity",
    "ClassNode",
    "PropertyDef",
    "PropertyView",
    "RestrictionDesc",
    "VocabConcept",
    "MatchStrategy",
    "Ontology",
    "OntologyCache",
    "FileCacheStorage",
]
