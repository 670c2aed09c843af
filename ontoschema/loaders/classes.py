"""Class loader: one ClassNode per class identity, with its ancestor closure."""

from __future__ import annotations

from rdflib.namespace import OWL

from ..config import SchemaConfig
from ..model.identity import NodeArena
from ..model.nodes import ClassNode
from ..source.backend import OntologySource
from .closure import group_rows, language_map, merge_ancestors, values_by_node, warn_truncated


class ClassIndex(NodeArena[ClassNode]):
    """Class nodes addressable by every URI, plus the reverse inheritance index.

    `descendants[uri]` lists every class having `uri` among its ancestors
    (the class itself included), each physical node once.
    """

    def __init__(self):
        super().__init__()
        self.descendants: dict[str, list[ClassNode]] = {}

    def add(self, node: ClassNode, uris=None) -> int:
        position = super().add(node, node.identity.uris if uris is None else uris)
        # ancestors hold distinct URIs, so a node lands in each bucket once
        for ancestor in node.ancestors:
            self.descendants.setdefault(ancestor, []).append(node)
        return position

    def descendants_of(self, uri: str) -> list[ClassNode]:
        return list(self.descendants.get(uri, []))


class ClassLoader:
    """Builds the ClassIndex from an OntologySource.

    Example:
        classes = ClassLoader(source, SchemaConfig()).load()
        classes["https://example.org/Collection"].ancestors
    """

    def __init__(self, source: OntologySource, config: SchemaConfig):
        self.source = source
        self.config = config

    def load(self) -> ClassIndex:
        config = self.config
        rows = self.source.resolve_closure(config.class_types, config.class_edges, config.max_depth)
        warn_truncated(rows, "Class", config.max_depth)

        node_ids = [row.node_id for row in rows]
        equivalences = self.source.fetch_values(node_ids, [str(OWL.equivalentClass)])
        resolver, groups = group_rows(rows, equivalences)

        values = values_by_node(self.source.fetch_values(node_ids, [config.label, config.comment]))

        index = ClassIndex()
        for identity, group in groups:
            group_values = sorted(
                (v for row in group for v in values.get(row.node_id, [])),
                key=lambda v: (v.predicate, v.lang, v.value),
            )
            index.add(ClassNode(
                identity=identity,
                uri=identity.preferred(config.ontology_namespace),
                ancestors=merge_ancestors(identity, group, resolver),
                label=language_map(group_values, config.label),
                comment=language_map(group_values, config.comment),
            ))
        return index
