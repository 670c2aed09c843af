"""Restriction loader: cardinality and range restrictions on properties."""

from __future__ import annotations

import warnings
from typing import Optional

from rdflib.namespace import OWL

from ..config import SchemaConfig
from ..errors import MalformedGraphWarning
from ..model.identity import EntityIdentity, NodeArena
from ..model.nodes import RestrictionDesc
from ..source.backend import OntologySource, ValueRow
from .closure import ordered_set, values_by_node

# Most authoritative first
MIN_PRECEDENCE = [
    str(OWL.minQualifiedCardinality),
    str(OWL.qualifiedCardinality),
    str(OWL.minCardinality),
    str(OWL.cardinality),
]
MAX_PRECEDENCE = [
    str(OWL.maxQualifiedCardinality),
    str(OWL.qualifiedCardinality),
    str(OWL.maxCardinality),
    str(OWL.cardinality),
]
RESTRICTION_PREDICATES = [
    str(OWL.onProperty),
    str(OWL.onClass),
    str(OWL.onDataRange),
    *sorted(set(MIN_PRECEDENCE + MAX_PRECEDENCE)),
]


def parse_cardinality(value: str) -> Optional[int]:
    """Non-negative integer value of a cardinality literal, None otherwise."""
    try:
        number = int(value.strip())
    except ValueError:
        return None
    return number if number >= 0 else None


def pick_cardinality(values: list[ValueRow], precedence: list[str]) -> Optional[int]:
    """First parseable cardinality following `precedence`."""
    for predicate in precedence:
        for value in values:
            if value.predicate == predicate and not value.is_resource:
                number = parse_cardinality(value.value)
                if number is not None:
                    return number
    return None


class RestrictionLoader:
    """Builds the restriction arena from an OntologySource.

    `applies_to_classes` lists every URI of every node pointing at the
    restriction through the configured parent predicate.
    """

    def __init__(self, source: OntologySource, config: SchemaConfig):
        self.source = source
        self.config = config

    def load(self) -> NodeArena[RestrictionDesc]:
        nodes = self.source.fetch_typed_nodes([str(OWL.Restriction)])
        node_ids = [node.node_id for node in nodes]
        values = values_by_node(self.source.fetch_values(node_ids, RESTRICTION_PREDICATES))
        classes: dict[str, list[str]] = {}
        for referrer in self.source.fetch_referrers(self.config.parent, node_ids):
            classes.setdefault(referrer.target_id, []).append(referrer.subject_uri)

        arena: NodeArena[RestrictionDesc] = NodeArena()
        for node in sorted(nodes, key=lambda n: n.uris[0] if n.uris else n.node_id):
            identity = EntityIdentity.of(node.uris or [node.node_id])
            node_values = values.get(node.node_id, [])

            properties = sorted(
                v.value for v in node_values
                if v.predicate == str(OWL.onProperty) and v.is_resource
            )
            if not properties:
                warnings.warn(
                    f"Skipping restriction {identity.canonical} without owl:onProperty",
                    MalformedGraphWarning,
                    stacklevel=2,
                )
                continue

            range_override = self._resources(node_values, str(OWL.onClass))
            if not range_override:
                range_override = self._resources(node_values, str(OWL.onDataRange))
            minimum = pick_cardinality(node_values, MIN_PRECEDENCE)
            maximum = pick_cardinality(node_values, MAX_PRECEDENCE)
            if minimum is None and maximum is None and not range_override:
                warnings.warn(
                    f"Skipping restriction {identity.canonical} on {properties[0]} "
                    f"without cardinality or range",
                    MalformedGraphWarning,
                    stacklevel=2,
                )
                continue

            arena.add(RestrictionDesc(
                identity=identity,
                on_property=properties[0],
                applies_to_classes=ordered_set(sorted(classes.get(node.node_id, []))),
                range_override=range_override,
                min=minimum,
                max=maximum,
            ), identity.uris)
        return arena

    @staticmethod
    def _resources(values: list[ValueRow], predicate: str) -> list[str]:
        return ordered_set(v.value for v in values if v.predicate == predicate and v.is_resource)
