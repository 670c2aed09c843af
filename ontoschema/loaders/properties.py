"""Property loader: one PropertyDef per property identity.

Domain, range, labels and the configured annotation predicates are read for
every node of an identity group and merged onto one definition.
"""

from __future__ import annotations

import warnings
from typing import Optional

from rdflib.namespace import OWL, RDFS

from ..config import SchemaConfig
from ..errors import MalformedGraphWarning
from ..model.identity import NodeArena
from ..model.nodes import PropertyDef
from ..source.backend import OntologySource, ValueRow
from .closure import (
    group_rows,
    language_map,
    merge_ancestors,
    ordered_set,
    values_by_node,
    warn_truncated,
)

TRUE_VALUES = ("true", "1")
FALSE_VALUES = ("false", "0")


def parse_flag(value: str) -> Optional[bool]:
    """Parse a boolean literal; None when the text is not a boolean."""
    text = value.strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    return None


class PropertyLoader:
    """Builds the property arena from an OntologySource."""

    def __init__(self, source: OntologySource, config: SchemaConfig):
        self.source = source
        self.config = config

    def load(self) -> NodeArena[PropertyDef]:
        config = self.config
        rows = self.source.resolve_closure(
            config.property_types, config.property_edges, config.max_depth
        )
        warn_truncated(rows, "Property", config.max_depth)

        node_ids = [row.node_id for row in rows]
        equivalences = self.source.fetch_values(node_ids, [str(OWL.equivalentProperty)])
        resolver, groups = group_rows(rows, equivalences)

        annotations = config.annotation_fields()
        predicates = [str(RDFS.domain), str(RDFS.range), config.label, config.comment, *annotations]
        values = values_by_node(self.source.fetch_values(node_ids, predicates))

        arena: NodeArena[PropertyDef] = NodeArena()
        for identity, group in groups:
            group_values = sorted(
                (v for row in group for v in values.get(row.node_id, [])),
                key=lambda v: (v.predicate, v.lang, v.value),
            )
            definition = PropertyDef(
                identity=identity,
                uri=identity.preferred(config.ontology_namespace),
                kind=min(row.kind for row in group),
                ancestors=merge_ancestors(identity, group, resolver),
                domain=self._resources(group_values, str(RDFS.domain)),
                range=self._resources(group_values, str(RDFS.range)),
                label=language_map(group_values, config.label),
                comment=language_map(group_values, config.comment),
                ordering=config.default_ordering,
            )
            for predicate, field_name in annotations.items():
                matching = [v for v in group_values if v.predicate == predicate]
                if matching:
                    self._apply_annotation(definition, field_name, matching)
            if config.lang_string in definition.range:
                definition.is_language_tagged = True
            arena.add(definition, identity.uris)
        return arena

    @staticmethod
    def _resources(values: list[ValueRow], predicate: str) -> list[str]:
        return ordered_set(v.value for v in values if v.predicate == predicate and v.is_resource)

    def _apply_annotation(self, definition: PropertyDef, field_name: str, values: list[ValueRow]) -> None:
        if field_name == "ordering":
            for value in values:
                try:
                    definition.ordering = int(value.value)
                    return
                except ValueError:
                    warnings.warn(
                        f"Ignoring non-integer ordering {value.value!r} on {definition.uri}",
                        MalformedGraphWarning,
                        stacklevel=3,
                    )
        elif field_name == "recommended_classes":
            definition.recommended_classes = ordered_set(v.value for v in values)
        elif field_name == "vocabulary_ref":
            definition.vocabulary_ref = values[0].value
        elif field_name in ("is_language_tagged", "auto_fill"):
            flag = parse_flag(values[0].value)
            if flag is None:
                warnings.warn(
                    f"Ignoring non-boolean {field_name} value {values[0].value!r} on {definition.uri}",
                    MalformedGraphWarning,
                    stacklevel=3,
                )
            else:
                setattr(definition, field_name, flag)
        elif field_name == "default_value":
            definition.default_value = values[0].value
        elif field_name == "example_values":
            definition.example_values = {}
            for value in values:
                definition.example_values.setdefault(value.lang, value.value)
