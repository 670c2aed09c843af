"""rdflib graph-backed ontology source.

The whole graph is read once (from memory, a file or a remote SPARQL endpoint)
and indexed; closures are walked client-side breadth-first with a depth cap.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Union

from rdflib import Graph, Literal
from rdflib.namespace import OWL, RDF
from rdflib.plugins.stores.sparqlstore import SPARQLStore

from ..errors import SourceUnavailableError
from ..model.identity import IdentityResolver
from .backend import ClosureRow, ConceptRow, NodeRow, ReferrerRow, ValueRow, term_key

CONSTRUCT_ALL = "CONSTRUCT { ?s ?p ?o } WHERE { ?s ?p ?o }"


class GraphOntologySource:
    """rdflib-backed implementation of the OntologySource protocol.

    Subjects linked by owl:sameAs form one node; its node id is the first of
    its URIs. The graph must not change after the source is created.

    Attributes:
        graph: Wrapped rdflib graph
    """

    def __init__(self, graph: Graph):
        self.graph = graph
        self._uris: dict[str, list[str]] = {}
        self._node_of: dict[str, str] = {}
        self._relations: dict[str, dict[str, set[str]]] = {}
        self._referrers: dict[str, dict[str, set[str]]] = {}
        self._literals: dict[str, list[tuple[str, str, str]]] = {}
        self._index()

    @classmethod
    def from_file(cls, path: Union[str, Path], format: Optional[str] = None) -> "GraphOntologySource":
        """Parse an RDF file (format guessed from the extension when omitted).

        Raises:
            SourceUnavailableError: If the file cannot be read or parsed
        """
        graph = Graph()
        try:
            graph.parse(str(path), format=format)
        except Exception as e:
            raise SourceUnavailableError(f"Cannot read ontology file {path}: {e}") from e
        return cls(graph)

    @classmethod
    def from_endpoint(cls, endpoint: str, query: str = CONSTRUCT_ALL) -> "GraphOntologySource":
        """Bulk-read triples from a SPARQL endpoint into an in-memory graph.

        Args:
            endpoint: SPARQL query endpoint URL
            query: CONSTRUCT query selecting the ontology triples

        Raises:
            SourceUnavailableError: If the endpoint cannot be queried
        """
        remote = Graph(store=SPARQLStore(query_endpoint=endpoint))
        graph = Graph()
        try:
            for triple in remote.query(query):
                graph.add(triple)
        except Exception as e:
            raise SourceUnavailableError(f"Query failed on SPARQL endpoint {endpoint}: {e}") from e
        return cls(graph)

    def _index(self) -> None:
        resolver = IdentityResolver()
        for s, p, o in self.graph:
            resolver.add(term_key(s))
            if not isinstance(o, Literal):
                resolver.add(term_key(o))
        for s, o in self.graph.subject_objects(OWL.sameAs):
            if not isinstance(o, Literal):
                resolver.add_pair(term_key(s), term_key(o))

        for identity in resolver.groups():
            node_id = identity.canonical
            self._uris[node_id] = list(identity.uris)
            for uri in identity.uris:
                self._node_of[uri] = node_id

        for s, p, o in self.graph:
            if p == OWL.sameAs:
                continue
            subject = self._node_of[term_key(s)]
            predicate = str(p)
            if isinstance(o, Literal):
                self._literals.setdefault(subject, []).append(
                    (predicate, str(o), o.language or "")
                )
            else:
                target = self._node_of[term_key(o)]
                self._relations.setdefault(subject, {}).setdefault(predicate, set()).add(target)
                self._referrers.setdefault(target, {}).setdefault(predicate, set()).add(subject)

    def _typed(self, type_uris: Iterable[str]) -> dict[str, str]:
        """Node id -> smallest matching type URI, for nodes typed with `type_uris`."""
        wanted = set(type_uris)
        rdf_type = str(RDF.type)
        typed: dict[str, str] = {}
        for type_uri in sorted(wanted):
            type_node = self._node_of.get(type_uri)
            if type_node is None:
                continue
            for node in self._referrers.get(type_node, {}).get(rdf_type, ()):
                if node not in typed:
                    typed[node] = type_uri
        return typed

    def resolve_closure(
        self,
        seed_types: Iterable[str],
        edge_predicates: Iterable[str],
        max_depth: int = 30,
    ) -> list[ClosureRow]:
        edge_predicates = list(edge_predicates)
        rows = []
        for seed, kind in sorted(self._typed(seed_types).items()):
            depths = {seed: 0}
            frontier = [seed]
            truncated = False
            depth = 0
            while frontier:
                depth += 1
                reached = []
                for node in frontier:
                    edges = self._relations.get(node, {})
                    for predicate in edge_predicates:
                        for target in sorted(edges.get(predicate, ())):
                            if target in depths:
                                continue
                            if depth > max_depth:
                                truncated = True
                                continue
                            depths[target] = depth
                            reached.append(target)
                frontier = reached if depth <= max_depth else []

            ancestors: dict[str, int] = {}
            for node, node_depth in depths.items():
                for uri in self._uris[node]:
                    ancestors[uri] = node_depth
            rows.append(ClosureRow(
                node_id=seed,
                uris=list(self._uris[seed]),
                kind=kind,
                ancestors=ancestors,
                truncated=truncated,
            ))
        return rows

    def fetch_typed_nodes(self, type_uris: Iterable[str]) -> list[NodeRow]:
        return [
            NodeRow(node_id=node, uris=list(self._uris[node]))
            for node in sorted(self._typed(type_uris))
        ]

    def fetch_values(
        self,
        node_ids: Iterable[str],
        predicates: Iterable[str],
    ) -> list[ValueRow]:
        predicates = set(predicates)
        values = []
        for node in set(node_ids):
            for predicate, value, lang in self._literals.get(node, ()):
                if predicate in predicates:
                    values.append(ValueRow(node, predicate, value, lang))
            for predicate, targets in self._relations.get(node, {}).items():
                if predicate not in predicates:
                    continue
                for target in targets:
                    for uri in self._uris[target]:
                        values.append(ValueRow(node, predicate, uri, "", True))
        values.sort(key=lambda v: (v.node_id, v.predicate, v.value, v.lang))
        return values

    def fetch_referrers(self, predicate: str, node_ids: Iterable[str]) -> list[ReferrerRow]:
        referrers = []
        for node in sorted(set(node_ids)):
            uris = set()
            for subject in self._referrers.get(node, {}).get(predicate, ()):
                uris.update(self._uris[subject])
            referrers.extend(ReferrerRow(node, uri) for uri in sorted(uris))
        return referrers

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
        scheme = self._node_of.get(vocabulary_uri)
        if scheme is None:
            return []
        members = set(self._referrers.get(scheme, {}).get(in_scheme, ()))
        if concept_uri is not None:
            members &= {self._node_of.get(concept_uri)}

        concepts = []
        for node in sorted(members):
            concept = ConceptRow(node_id=node, uris=list(self._uris[node]))
            for value in self.fetch_values([node], [notation, pref_label, alt_label]):
                if value.is_resource:
                    continue
                if value.predicate == notation:
                    concept.notation.append(value.value)
                elif value.predicate == pref_label:
                    concept.pref_label.setdefault(value.lang, value.value)
                else:
                    concept.alt_label.setdefault(value.lang, value.value)
            edges = self._relations.get(node, {})
            concept.broader_ids = sorted(edges.get(broader, ()))
            concept.narrower_ids = sorted(edges.get(narrower, ()))
            concepts.append(concept)
        return concepts
