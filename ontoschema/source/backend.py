"""Triple source protocol and the row structures it returns.

Loaders and the vocabulary resolver only talk to an `OntologySource`; a source
may compute closures server-side (SQLite recursive query) or walk a graph
client-side (rdflib), as long as it returns the same rows.

Node ids are opaque strings identifying one stored resource. A resource may be
known under several URIs (its identifiers); blank nodes are addressed as
"_:<label>".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Protocol, runtime_checkable

from rdflib import BNode


def term_key(term) -> str:
    """Identifier string of an rdflib node ("_:<label>" for blank nodes)."""
    if isinstance(term, BNode):
        return f"_:{term}"
    return str(term)


@dataclass
class NodeRow:
    """A stored resource and all of its identifier URIs."""

    node_id: str
    uris: list[str] = field(default_factory=list)


@dataclass
class ClosureRow:
    """Transitive closure of one seed node.

    Attributes:
        node_id: Seed node id
        uris: Identifier URIs of the seed node
        kind: Seed type the node was matched by (e.g. owl:Class)
        ancestors: URI -> minimal depth, for every URI of every reached node
            (the seed's own URIs at depth 0)
        truncated: Whether the depth cap cut the traversal short
    """

    node_id: str
    uris: list[str]
    kind: str
    ancestors: dict[str, int] = field(default_factory=dict)
    truncated: bool = False


@dataclass
class ValueRow:
    """One (node, predicate, value) fact.

    Resource values produce one row per identifier URI of the target.
    Literals without a language tag have `lang == ""`.
    """

    node_id: str
    predicate: str
    value: str
    lang: str = ""
    is_resource: bool = False


@dataclass
class ReferrerRow:
    """`subject_uri` points at node `target_id` through the queried predicate."""

    target_id: str
    subject_uri: str


@dataclass
class ConceptRow:
    """One SKOS concept of a vocabulary.

    Attributes:
        node_id: Concept node id
        uris: Identifier URIs of the concept
        notation: skos:notation values
        pref_label: Preferred labels keyed by language
        alt_label: Alternate labels keyed by language
        broader_ids: Node ids of broader concepts (may lie outside the vocabulary)
        narrower_ids: Node ids of narrower concepts
    """

    node_id: str
    uris: list[str]
    notation: list[str] = field(default_factory=list)
    pref_label: dict[str, str] = field(default_factory=dict)
    alt_label: dict[str, str] = field(default_factory=dict)
    broader_ids: list[str] = field(default_factory=list)
    narrower_ids: list[str] = field(default_factory=list)


@runtime_checkable
class OntologySource(Protocol):
    """Protocol for ontology triple sources.

    All methods raise `SourceUnavailableError` when the underlying store cannot
    be read.
    """

    def resolve_closure(
        self,
        seed_types: Iterable[str],
        edge_predicates: Iterable[str],
        max_depth: int = 30,
    ) -> list[ClosureRow]:
        """Closures of every node typed with one of `seed_types`.

        Args:
            seed_types: rdf:type URIs selecting the seed nodes
            edge_predicates: Predicates followed from a node to its parents
            max_depth: Maximum number of edges followed from a seed

        Returns:
            One row per seed node
        """
        ...

    def fetch_typed_nodes(self, type_uris: Iterable[str]) -> list[NodeRow]:
        """Nodes having one of `type_uris` as rdf:type."""
        ...

    def fetch_values(
        self,
        node_ids: Iterable[str],
        predicates: Iterable[str],
    ) -> list[ValueRow]:
        """Literal and resource values of `predicates` on `node_ids`."""
        ...

    def fetch_referrers(
        self,
        predicate: str,
        node_ids: Iterable[str],
    ) -> list[ReferrerRow]:
        """URIs of subjects linked to `node_ids` through `predicate`."""
        ...

    def fetch_concepts(
        self,
        vocabulary_uri: str,
        *,
        in_scheme: str,
        notation: str,
        pref_label: str,
        alt_label: str,
        broader: str,
        narrower: str,
        concept_uri: Optional[str] = None,
    ) -> list[ConceptRow]:
        """Concepts linked to `vocabulary_uri` through `in_scheme`.

        Args:
            vocabulary_uri: Concept scheme URI
            in_scheme, notation, pref_label, alt_label, broader, narrower:
                SKOS predicate URIs to read
            concept_uri: Restrict the result to the concept with this URI

        Returns:
            Concept rows, empty for an unknown vocabulary
        """
        ...


def is_ontology_source(obj: Any) -> bool:
    """Check if an object implements the OntologySource protocol.

    Args:
        obj: Object to check

    Returns:
        True if obj implements OntologySource protocol
    """
    return isinstance(obj, OntologySource)
