"""Controlled vocabulary (SKOS concept scheme) resolution and value lookup."""

from __future__ import annotations

from typing import Optional

from .config import SchemaConfig
from .errors import SourceUnavailableError
from .model.concepts import MatchStrategy, VocabConcept
from .model.identity import EntityIdentity
from .source.backend import ConceptRow, OntologySource

# Textual strategies, in the order they are tried
TEXT_STRATEGIES = [MatchStrategy.NOTATION, MatchStrategy.PREF_LABEL, MatchStrategy.ALT_LABEL]


def distinct_concepts(concepts: dict[str, VocabConcept]) -> list[VocabConcept]:
    seen = set()
    result = []
    for concept in concepts.values():
        if id(concept) not in seen:
            seen.add(id(concept))
            result.append(concept)
    return result


class VocabularyResolver:
    """Resolves vocabularies from an OntologySource.

    Each `resolve()` call returns a new snapshot: a dict mapping every concept
    URI to its VocabConcept, with broader/narrower edges pointing at concepts
    of the same snapshot.

    Example:
        resolver = VocabularyResolver(source, config)
        concepts = resolver.resolve("https://vocabs.example.org/licenses")
        resolver.find_value(vocab, "CC BY 4.0", MatchStrategy.PREF_LABEL)
    """

    def __init__(self, source: Optional[OntologySource], config: SchemaConfig):
        self.source = source
        self.config = config

    def _fetch(self, vocabulary_uri: str, concept_uri: Optional[str] = None) -> list[ConceptRow]:
        if self.source is None:
            raise SourceUnavailableError(f"No ontology source to resolve vocabulary {vocabulary_uri}")
        config = self.config
        return self.source.fetch_concepts(
            vocabulary_uri,
            in_scheme=config.in_scheme,
            notation=config.notation,
            pref_label=config.pref_label,
            alt_label=config.alt_label,
            broader=config.broader,
            narrower=config.narrower,
            concept_uri=concept_uri,
        )

    @staticmethod
    def _concept(row: ConceptRow) -> VocabConcept:
        identity = EntityIdentity.of(row.uris or [row.node_id])
        return VocabConcept(
            identity=identity,
            uri=identity.canonical,
            notation=list(row.notation),
            pref_label=dict(row.pref_label),
            alt_label=dict(row.alt_label),
        )

    def resolve(self, vocabulary_uri: str) -> dict[str, VocabConcept]:
        """All concepts of a vocabulary keyed by every concept URI.

        Edges to concepts outside the vocabulary are dropped.
        """
        rows = self._fetch(vocabulary_uri)
        by_node = {row.node_id: self._concept(row) for row in rows}
        for row in rows:
            concept = by_node[row.node_id]
            concept.broader = [by_node[n] for n in row.broader_ids if n in by_node]
            concept.narrower = [by_node[n] for n in row.narrower_ids if n in by_node]

        concepts: dict[str, VocabConcept] = {}
        for concept in by_node.values():
            for uri in concept.identity:
                concepts[uri] = concept
        return concepts

    def resolve_concept(self, vocabulary_uri: str, concept_uri: str) -> Optional[VocabConcept]:
        """A single concept of a vocabulary, without broader/narrower edges."""
        rows = self._fetch(vocabulary_uri, concept_uri)
        return self._concept(rows[0]) if rows else None

    def find_value(
        self,
        vocabulary_uri: str,
        value: str,
        strategy: MatchStrategy = MatchStrategy.ID,
        concepts: Optional[dict[str, VocabConcept]] = None,
    ) -> Optional[str]:
        """Identifier of the concept `value` denotes, or None.

        An identifier match returns `value` itself. Otherwise notation,
        preferred label and alternate label are tried in turn (as selected by
        `strategy`); a textual match counts only when exactly one concept
        matches.

        Args:
            vocabulary_uri: Concept scheme URI
            value: Identifier, notation or label to look up
            strategy: Combination of MatchStrategy flags
            concepts: Already resolved vocabulary snapshot to search

        Returns:
            Concept URI, or None when not found or ambiguous
        """
        if concepts is None:
            concepts = self.resolve(vocabulary_uri)
        if strategy & MatchStrategy.ID and value in concepts:
            return value
        if strategy <= MatchStrategy.ID:
            return None
        candidates = distinct_concepts(concepts)
        for text_strategy in TEXT_STRATEGIES:
            if not strategy & text_strategy:
                continue
            matches = [c for c in candidates if c.matches(value, text_strategy)]
            if len(matches) == 1:
                return matches[0].uri
        return None

    def get_value(
        self,
        vocabulary_uri: str,
        value: str,
        strategy: MatchStrategy = MatchStrategy.ID,
        concepts: Optional[dict[str, VocabConcept]] = None,
    ) -> Optional[VocabConcept]:
        """The concept `value` denotes (see `find_value`), or None."""
        if concepts is None:
            concepts = self.resolve(vocabulary_uri)
        uri = self.find_value(vocabulary_uri, value, strategy, concepts)
        return None if uri is None else concepts[uri]
