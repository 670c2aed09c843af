"""Schema configuration: the well-known predicate URIs used by every loader.

Nothing in the loaders hard-codes an annotation predicate; they all read the
`SchemaConfig` passed in at construction time.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Optional, Union

from rdflib.namespace import OWL, RDF, RDFS, SKOS

# PropertyDef field fed by each annotation predicate field of SchemaConfig
ANNOTATION_FIELDS = {
    "ordering": "ordering",
    "recommended_class": "recommended_classes",
    "vocabulary": "vocabulary_ref",
    "lang_tag": "is_language_tagged",
    "automated_fill": "auto_fill",
    "default_value": "default_value",
    "example_value": "example_values",
}


@dataclass(frozen=True)
class SchemaConfig:
    """Predicate URIs and limits describing how an ontology is stored.

    Attributes:
        ontology_namespace: Namespace preferred when picking an entity's `uri`
        parent: Predicate linking a class to its super classes and restrictions
        label: Label predicate for classes and properties
        comment: Comment predicate for classes and properties
        ordering: Annotation holding a property's display order
        recommended_class: Annotation listing classes a property is recommended for
        vocabulary: Annotation pointing to a SKOS concept scheme
        lang_tag: Annotation flagging language-tagged values
        automated_fill: Annotation flagging automatically filled properties
        default_value: Annotation holding a default value
        example_value: Annotation holding example values
        lang_string: Datatype URI of language-tagged strings
        in_scheme, notation, pref_label, alt_label, broader, narrower: SKOS predicates
        max_depth: Traversal depth cap for closures
        default_ordering: Ordering of properties without an ordering annotation
    """

    ontology_namespace: str = ""
    parent: str = str(RDFS.subClassOf)
    label: str = str(RDFS.label)
    comment: str = str(RDFS.comment)
    ordering: Optional[str] = None
    recommended_class: Optional[str] = None
    vocabulary: Optional[str] = None
    lang_tag: Optional[str] = None
    automated_fill: Optional[str] = None
    default_value: Optional[str] = None
    example_value: Optional[str] = None
    lang_string: str = str(RDF.langString)
    in_scheme: str = str(SKOS.inScheme)
    notation: str = str(SKOS.notation)
    pref_label: str = str(SKOS.prefLabel)
    alt_label: str = str(SKOS.altLabel)
    broader: str = str(SKOS.broader)
    narrower: str = str(SKOS.narrower)
    max_depth: int = 30
    default_ordering: int = 99999

    @classmethod
    def for_namespace(cls, namespace: str, **overrides: Any) -> "SchemaConfig":
        """Config whose annotation predicates live in `namespace`.

        Annotation local names follow the common convention (`ordering`,
        `recommendedClass`, `vocabs`, `langTag`, `automatedFill`,
        `defaultValue`, `exampleValue`); any of them can be overridden.
        """
        values = {
            "ontology_namespace": namespace,
            "ordering": namespace + "ordering",
            "recommended_class": namespace + "recommendedClass",
            "vocabulary": namespace + "vocabs",
            "lang_tag": namespace + "langTag",
            "automated_fill": namespace + "automatedFill",
            "default_value": namespace + "defaultValue",
            "example_value": namespace + "exampleValue",
        }
        values.update(overrides)
        return cls(**values)

    def annotation_fields(self) -> dict[str, str]:
        """Map configured annotation predicate URIs to PropertyDef field names."""
        mapping = {}
        for attr, field_name in ANNOTATION_FIELDS.items():
            predicate = getattr(self, attr)
            if predicate:
                mapping[predicate] = field_name
        return mapping

    @property
    def class_types(self) -> list[str]:
        return [str(OWL.Class)]

    @property
    def class_edges(self) -> list[str]:
        return sorted({self.parent, str(OWL.equivalentClass)})

    @property
    def property_types(self) -> list[str]:
        return [str(OWL.DatatypeProperty), str(OWL.ObjectProperty)]

    @property
    def property_edges(self) -> list[str]:
        return [str(RDFS.subPropertyOf), str(OWL.equivalentProperty)]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SchemaConfig":
        """Create SchemaConfig from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "SchemaConfig":
        """Load a SchemaConfig from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))
