"""Class, property and restriction descriptions of the resolved model.

A `PropertyDef` is the class-independent definition of a property. The merge
step clones it into one `PropertyView` per class so that restrictions can
override cardinality and range for a single {class, property} pair.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, TYPE_CHECKING

from .identity import EntityIdentity
from .concepts import MatchStrategy, value_in_lang

if TYPE_CHECKING:
    from .concepts import VocabConcept


class VocabularyContext(Protocol):
    """Back-reference a property uses to resolve its vocabulary lazily."""

    def get_vocabulary_values(self, vocabulary_uri: str) -> dict[str, "VocabConcept"]:
        ...

    def find_vocabulary_value(
        self,
        vocabulary_uri: str,
        value: str,
        strategy: MatchStrategy,
        concepts: Optional[dict[str, "VocabConcept"]] = None,
    ) -> Optional[str]:
        ...


@dataclass
class ClassNode:
    """An ontology class with its full ancestor closure.

    Attributes:
        identity: All URIs of the class
        uri: Preferred URI (within the ontology namespace when possible)
        ancestors: Transitive closure including the class itself, most specific first
        label: Labels keyed by language
        comment: Comments keyed by language
        properties: Property views keyed by every property URI. A property known
            under several URIs appears several times, always as the same object;
            use `get_properties()` for a distinct list.
    """

    identity: EntityIdentity
    uri: str
    ancestors: list[str] = field(default_factory=list)
    label: dict[str, str] = field(default_factory=dict)
    comment: dict[str, str] = field(default_factory=dict)
    properties: dict[str, "PropertyView"] = field(default_factory=dict)

    def is_a(self, class_uri: str) -> bool:
        return class_uri in self.ancestors

    def get_property(self, property_uri: str) -> Optional["PropertyView"]:
        return self.properties.get(property_uri)

    def get_properties(self) -> list["PropertyView"]:
        """Distinct property views sorted by ordering, then URI."""
        seen = set()
        views = []
        for view in self.properties.values():
            if id(view) not in seen:
                seen.add(id(view))
                views.append(view)
        views.sort(key=lambda v: (v.ordering, v.uri))
        return views

    def get_label(self, lang: str, fallback_lang: str = "en") -> str:
        return value_in_lang(self.label, lang, fallback_lang)

    def get_comment(self, lang: str, fallback_lang: str = "en") -> str:
        return value_in_lang(self.comment, lang, fallback_lang)

    def to_dict(self) -> dict:
        """Serialize everything but the property views."""
        return {
            "identity": list(self.identity),
            "uri": self.uri,
            "ancestors": list(self.ancestors),
            "label": dict(self.label),
            "comment": dict(self.comment),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ClassNode":
        return cls(
            identity=EntityIdentity.of(data["identity"]),
            uri=data["uri"],
            ancestors=list(data["ancestors"]),
            label=dict(data.get("label") or {}),
            comment=dict(data.get("comment") or {}),
        )


@dataclass
class PropertyDef:
    """Class-independent property definition.

    Attributes:
        identity: All URIs of the property
        uri: Preferred URI
        kind: owl:DatatypeProperty or owl:ObjectProperty URI
        ancestors: Super-property closure including the property itself
        domain: Domain class URIs
        range: Range class or datatype URIs
        label, comment: Language-keyed texts
        ordering: Display order (unordered properties sort last)
        recommended_classes: Classes the property is recommended for
        vocabulary_ref: SKOS concept scheme URI constraining values
        is_language_tagged: Whether values must carry a language tag
        auto_fill: Whether values are filled automatically
        default_value: Default value
        example_values: Example values keyed by language
    """

    identity: EntityIdentity
    uri: str
    kind: str
    ancestors: list[str] = field(default_factory=list)
    domain: list[str] = field(default_factory=list)
    range: list[str] = field(default_factory=list)
    label: dict[str, str] = field(default_factory=dict)
    comment: dict[str, str] = field(default_factory=dict)
    ordering: int = 99999
    recommended_classes: list[str] = field(default_factory=list)
    vocabulary_ref: Optional[str] = None
    is_language_tagged: bool = False
    auto_fill: bool = False
    default_value: Optional[str] = None
    example_values: dict[str, str] = field(default_factory=dict)
    _context: Optional[VocabularyContext] = field(default=None, compare=False, repr=False)
    _vocabulary_values: Optional[dict] = field(default=None, compare=False, repr=False)

    @property
    def uris(self) -> tuple[str, ...]:
        return self.identity.uris

    def attach(self, context: Optional[VocabularyContext]) -> None:
        """Set the ontology used to resolve the vocabulary on first access."""
        self._context = context
        self._vocabulary_values = None

    @property
    def vocabulary_values(self) -> dict[str, "VocabConcept"]:
        """Concepts of the property's vocabulary keyed by every concept URI.

        Resolved on first access and memoized on this object.
        """
        if not self.vocabulary_ref:
            return {}
        if self._vocabulary_values is None:
            if self._context is None:
                from ..errors import SourceUnavailableError
                raise SourceUnavailableError(
                    f"Property {self.uri} is not attached to an ontology"
                )
            self._vocabulary_values = self._context.get_vocabulary_values(self.vocabulary_ref)
        return self._vocabulary_values

    def get_vocabulary_values(self, lang: str = "en") -> list["VocabConcept"]:
        """Distinct vocabulary concepts sorted by their label in `lang`."""
        seen = set()
        concepts = []
        for concept in self.vocabulary_values.values():
            if id(concept) not in seen:
                seen.add(id(concept))
                concepts.append(concept)
        concepts.sort(key=lambda c: (c.get_label(lang), c.uri))
        return concepts

    def check_vocabulary_value(
        self,
        value: str,
        strategy: MatchStrategy = MatchStrategy.ID,
    ) -> Optional[str]:
        """Validate `value` against the property's vocabulary.

        Returns:
            `value` itself when the property has no vocabulary, the matching
            concept URI, or None when the value is unknown or ambiguous
        """
        if not self.vocabulary_ref:
            return value
        concepts = self.vocabulary_values
        return self._context.find_vocabulary_value(
            self.vocabulary_ref, value, strategy, concepts
        )

    def get_label(self, lang: str, fallback_lang: str = "en") -> str:
        return value_in_lang(self.label, lang, fallback_lang)

    def get_comment(self, lang: str, fallback_lang: str = "en") -> str:
        return value_in_lang(self.comment, lang, fallback_lang)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization (context excluded)."""
        return {
            "identity": list(self.identity),
            "uri": self.uri,
            "kind": self.kind,
            "ancestors": list(self.ancestors),
            "domain": list(self.domain),
            "range": list(self.range),
            "label": dict(self.label),
            "comment": dict(self.comment),
            "ordering": self.ordering,
            "recommended_classes": list(self.recommended_classes),
            "vocabulary_ref": self.vocabulary_ref,
            "is_language_tagged": self.is_language_tagged,
            "auto_fill": self.auto_fill,
            "default_value": self.default_value,
            "example_values": dict(self.example_values),
        }

    @classmethod
    def _kwargs_from_dict(cls, data: dict) -> dict[str, Any]:
        return {
            "identity": EntityIdentity.of(data["identity"]),
            "uri": data["uri"],
            "kind": data["kind"],
            "ancestors": list(data["ancestors"]),
            "domain": list(data["domain"]),
            "range": list(data["range"]),
            "label": dict(data["label"]),
            "comment": dict(data["comment"]),
            "ordering": int(data["ordering"]),
            "recommended_classes": list(data["recommended_classes"]),
            "vocabulary_ref": data["vocabulary_ref"],
            "is_language_tagged": bool(data["is_language_tagged"]),
            "auto_fill": bool(data["auto_fill"]),
            "default_value": data["default_value"],
            "example_values": dict(data["example_values"]),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PropertyDef":
        return cls(**cls._kwargs_from_dict(data))


@dataclass
class PropertyView(PropertyDef):
    """Per-class clone of a PropertyDef.

    Attributes:
        min: Minimum cardinality for this class (None when unconstrained)
        max: Maximum cardinality for this class (None when unconstrained)
        recommended_for_class: Whether the class (or an ancestor) is among the
            property's recommended classes
    """

    min: Optional[int] = None
    max: Optional[int] = None
    recommended_for_class: bool = False

    @classmethod
    def from_definition(cls, definition: PropertyDef, recommended: bool = False) -> "PropertyView":
        """Clone `definition`; collections are copied, the vocabulary memo is not."""
        kwargs = cls._kwargs_from_dict(definition.to_dict())
        kwargs["identity"] = definition.identity
        view = cls(**kwargs, recommended_for_class=recommended)
        view._context = definition._context
        return view

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["min"] = self.min
        data["max"] = self.max
        data["recommended_for_class"] = self.recommended_for_class
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "PropertyView":
        return cls(
            **cls._kwargs_from_dict(data),
            min=data.get("min"),
            max=data.get("max"),
            recommended_for_class=bool(data.get("recommended_for_class", False)),
        )


@dataclass
class RestrictionDesc:
    """An owl:Restriction constraining one property on some classes.

    Attributes:
        identity: URIs of the restriction node
        applies_to_classes: URIs of classes declaring the restriction as a super class
        on_property: Restricted property URI (first one if several are given)
        range_override: Range replacing the property range (owl:onClass/owl:onDataRange)
        min: Minimum cardinality, None when not supplied
        max: Maximum cardinality, None when not supplied
    """

    identity: EntityIdentity
    on_property: str
    applies_to_classes: list[str] = field(default_factory=list)
    range_override: list[str] = field(default_factory=list)
    min: Optional[int] = None
    max: Optional[int] = None

    @property
    def uri(self) -> str:
        return self.identity.canonical

    def to_dict(self) -> dict[str, Any]:
        return {
            "identity": list(self.identity),
            "on_property": self.on_property,
            "applies_to_classes": list(self.applies_to_classes),
            "range_override": list(self.range_override),
            "min": self.min,
            "max": self.max,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RestrictionDesc":
        return cls(
            identity=EntityIdentity.of(data["identity"]),
            on_property=data["on_property"],
            applies_to_classes=list(data["applies_to_classes"]),
            range_override=list(data["range_override"]),
            min=data["min"],
            max=data["max"],
        )
