"""The resolved ontology model and its public operations."""

from __future__ import annotations

import time
from typing import Any, Callable, Iterable, Optional, Union, TYPE_CHECKING

from rdflib.namespace import RDF
from rdflib.resource import Resource

from .config import SchemaConfig
from .loaders import ClassIndex, ClassLoader, PropertyLoader, RestrictionLoader
from .merge import MergeEngine
from .model.concepts import MatchStrategy, VocabConcept
from .model.identity import NodeArena
from .model.nodes import ClassNode, PropertyDef, PropertyView, RestrictionDesc
from .source.backend import OntologySource
from .vocabulary import VocabularyResolver, distinct_concepts

if TYPE_CHECKING:
    from .cache import CacheStorage
    from .logging.events import BuildEventLogger

TypesArg = Union[None, str, Resource, Iterable[Any]]


class Ontology:
    """Classes, properties and restrictions of an ontology, fully resolved.

    Built once from an OntologySource (or restored from a cache snapshot) and
    not modified afterwards. Properties with a controlled vocabulary keep a
    reference to their Ontology and resolve the vocabulary through it on first
    access.

    Example:
        ontology = Ontology.build(SQLiteOntologySource("ontology.db"), config)
        ontology.is_instance_of(["ex:Collection"], "ex:RepoObject")
        view = ontology.get_property(["ex:Collection"], "ex:hasDepositor")
        view.min
    """

    def __init__(
        self,
        classes: ClassIndex,
        properties: NodeArena[PropertyDef],
        restrictions: NodeArena[RestrictionDesc],
        config: Optional[SchemaConfig] = None,
        source: Optional[OntologySource] = None,
        events: Optional["BuildEventLogger"] = None,
    ):
        self.classes = classes
        self.properties = properties
        self.restrictions = restrictions
        self.config = config or SchemaConfig()
        self.source = source
        self.events = events
        self.vocabularies = VocabularyResolver(source, self.config)
        self.attach_properties()

    @classmethod
    def build(
        cls,
        source: OntologySource,
        config: Optional[SchemaConfig] = None,
        events: Optional["BuildEventLogger"] = None,
    ) -> "Ontology":
        """Load classes, properties and restrictions from `source` and merge them.

        Raises:
            SourceUnavailableError: If the source cannot be read
        """
        config = config or SchemaConfig()
        started = time.perf_counter()
        if events:
            events.log_build_start(type(source).__name__, config.to_dict())

        def stage(name: str, run: Callable[[], Any], count: Callable[[Any], int]) -> Any:
            stage_started = time.perf_counter()
            result = run()
            if events:
                events.log_stage(name, count(result), time.perf_counter() - stage_started)
            return result

        classes = stage("classes", ClassLoader(source, config).load, len)
        properties = stage("properties", PropertyLoader(source, config).load, len)
        restrictions = stage("restrictions", RestrictionLoader(source, config).load, len)

        ontology = cls(classes, properties, restrictions, config, source, events)
        stage("merge", MergeEngine(classes, properties, restrictions).run, lambda _: ontology.view_count())

        if events:
            events.log_build_end(ontology.stats(), time.perf_counter() - started)
        return ontology

    @classmethod
    def load_or_build(
        cls,
        path: str,
        ttl: Optional[float],
        source: OntologySource,
        config: Optional[SchemaConfig] = None,
        events: Optional["BuildEventLogger"] = None,
        storage: Optional["CacheStorage"] = None,
    ) -> "Ontology":
        """Restore a fresh cache snapshot or build from `source` and cache it."""
        from .cache import OntologyCache

        cache = OntologyCache(storage, events)
        return cache.load_or_build(path, ttl, lambda: cls.build(source, config, events), source)

    def attach_properties(self) -> None:
        """Point every vocabulary-constrained property and view at this ontology."""
        for definition in self.properties:
            if definition.vocabulary_ref:
                definition.attach(self)
        for node in self.classes:
            for view in node.get_properties():
                if view.vocabulary_ref:
                    view.attach(self)

    # ===== Classes and properties =====

    @staticmethod
    def type_uris(types: TypesArg) -> list[str]:
        """Normalize a URI, an iterable of URIs or an rdflib Resource to URIs."""
        if types is None:
            return []
        if isinstance(types, Resource):
            return [str(t.identifier) for t in types.objects(RDF.type)]
        if isinstance(types, str):
            return [types]
        return [str(t.identifier) if isinstance(t, Resource) else str(t) for t in types]

    def is_instance_of(self, types: TypesArg, class_uri: str) -> bool:
        """Whether any of `types` is `class_uri` or inherits from it."""
        for type_uri in self.type_uris(types):
            if type_uri == class_uri:
                return True
            node = self.classes.get(type_uri)
            if node is not None and node.is_a(class_uri):
                return True
        return False

    def get_class(self, class_uri: str) -> Optional[ClassNode]:
        return self.classes.get(class_uri)

    def get_property(
        self,
        types: TypesArg,
        property_uri: str,
    ) -> Optional[Union[PropertyView, PropertyDef]]:
        """Description of a property for an entity of the given types.

        The first of `types` that is a known class carrying the property
        supplies its class-specific view. Without a match (or without types)
        the class-independent definition is returned.
        """
        for type_uri in self.type_uris(types):
            node = self.classes.get(type_uri)
            if node is not None and property_uri in node.properties:
                return node.properties[property_uri]
        return self.properties.get(property_uri)

    def get_classes(self) -> list[ClassNode]:
        return self.classes.distinct()

    def get_properties(self) -> list[PropertyDef]:
        return self.properties.distinct()

    def get_restrictions(self) -> list[RestrictionDesc]:
        return self.restrictions.distinct()

    # ===== Vocabularies =====

    def get_vocabulary_values(self, vocabulary_uri: str) -> dict[str, VocabConcept]:
        """All concepts of a vocabulary keyed by every concept URI.

        Raises:
            SourceUnavailableError: If the ontology has no source or it cannot be read
        """
        concepts = self.vocabularies.resolve(vocabulary_uri)
        if self.events:
            self.events.log_vocabulary(vocabulary_uri, len(distinct_concepts(concepts)))
        return concepts

    def find_vocabulary_value(
        self,
        vocabulary_uri: str,
        value: str,
        strategy: MatchStrategy = MatchStrategy.ID,
        concepts: Optional[dict[str, VocabConcept]] = None,
    ) -> Optional[str]:
        if concepts is None:
            concepts = self.get_vocabulary_values(vocabulary_uri)
        return self.vocabularies.find_value(vocabulary_uri, value, strategy, concepts)

    def check_vocabulary_value(
        self,
        vocabulary_uri: str,
        value: str,
        strategy: MatchStrategy = MatchStrategy.ID,
    ) -> Optional[str]:
        """Concept URI `value` denotes in the vocabulary, None if invalid or ambiguous."""
        return self.find_vocabulary_value(vocabulary_uri, value, strategy)

    def get_vocabulary_value(
        self,
        vocabulary_uri: str,
        value: str,
        strategy: MatchStrategy = MatchStrategy.ID,
    ) -> Optional[VocabConcept]:
        """Concept `value` denotes in the vocabulary, None if invalid or ambiguous."""
        concepts = self.get_vocabulary_values(vocabulary_uri)
        return self.vocabularies.get_value(vocabulary_uri, value, strategy, concepts)

    # ===== Statistics =====

    def view_count(self) -> int:
        return sum(len(node.get_properties()) for node in self.classes)

    def stats(self) -> dict[str, int]:
        """Counts of distinct entities and indexed URIs."""
        return {
            "classes": len(self.classes),
            "class_uris": len(self.classes.index),
            "properties": len(self.properties),
            "property_uris": len(self.properties.index),
            "restrictions": len(self.restrictions),
            "property_views": self.view_count(),
        }

    def __repr__(self) -> str:
        stats = self.stats()
        return (
            f"Ontology(classes={stats['classes']}, properties={stats['properties']}, "
            f"restrictions={stats['restrictions']})"
        )
