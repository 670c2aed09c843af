"""Merge engine: per-class property views with restriction overrides.

Step 1 assigns every property to the classes inheriting from one of its
domain classes, cloning the definition once per class. Step 2 applies the
restrictions reachable from each class's ancestors to that class's clones.
"""

from __future__ import annotations

from typing import Iterable

from .loaders.classes import ClassIndex
from .model.identity import NodeArena
from .model.nodes import ClassNode, PropertyDef, PropertyView, RestrictionDesc


class MergeEngine:
    """Assigns property views to classes and applies restrictions.

    The result does not depend on the order of the inputs: properties and
    restrictions are processed in URI order, and restrictions are applied from
    the most general ancestor to the most specific one, so the most specific
    restriction wins. `run()` starts from empty property maps and can be
    repeated.

    Example:
        engine = MergeEngine(classes, properties, restrictions)
        classes = engine.run()
        classes["ex:Collection"].properties["ex:hasDepositor"].min
    """

    def __init__(
        self,
        classes: ClassIndex,
        properties: Iterable[PropertyDef],
        restrictions: Iterable[RestrictionDesc],
    ):
        self.classes = classes
        self.properties = self._distinct(properties)
        self.restrictions = self._distinct(restrictions)

    @staticmethod
    def _distinct(items) -> list:
        if isinstance(items, NodeArena):
            return items.distinct()
        seen = set()
        result = []
        for item in items:
            if id(item) not in seen:
                seen.add(id(item))
                result.append(item)
        return result

    def run(self) -> ClassIndex:
        for node in self.classes:
            node.properties = {}
        self.assign_properties()
        self.apply_restrictions()
        return self.classes

    def assign_properties(self) -> int:
        """Clone every property onto each class below one of its domains.

        Returns:
            Number of views created
        """
        created = 0
        for definition in sorted(self.properties, key=lambda p: p.identity.canonical):
            recommended = set(definition.recommended_classes)
            visited = set()
            for domain in definition.domain:
                for node in self.classes.descendants_of(domain):
                    if id(node) in visited:
                        continue
                    visited.add(id(node))
                    view = PropertyView.from_definition(
                        definition,
                        recommended=any(uri in recommended for uri in node.ancestors),
                    )
                    for uri in definition.identity:
                        node.properties[uri] = view
                    created += 1
        return created

    def apply_restrictions(self) -> int:
        """Apply each reachable restriction once per class.

        Returns:
            Number of (restriction, class) pairs that changed a view
        """
        bearing: dict[str, list[RestrictionDesc]] = {}
        for restriction in self.restrictions:
            for class_uri in restriction.applies_to_classes:
                bearing.setdefault(class_uri, []).append(restriction)

        applied = 0
        for node in self.classes:
            for restriction in self._restrictions_for(node, bearing):
                view = node.properties.get(restriction.on_property)
                if view is None:
                    continue
                apply_restriction(view, restriction)
                applied += 1
        return applied

    @staticmethod
    def _restrictions_for(
        node: ClassNode,
        bearing: dict[str, list[RestrictionDesc]],
    ) -> list[RestrictionDesc]:
        """Restrictions reachable from `node`, most general first."""
        position: dict[int, tuple[int, RestrictionDesc]] = {}
        for rank, uri in enumerate(node.ancestors):
            for restriction in bearing.get(uri, ()):
                if id(restriction) not in position:
                    position[id(restriction)] = (rank, restriction)
        ordered = sorted(position.values(), key=lambda item: (-item[0], item[1].uri))
        return [restriction for _, restriction in ordered]


def apply_restriction(view: PropertyView, restriction: RestrictionDesc) -> None:
    """Override the bounds and range a restriction supplies; 0 is a supplied bound."""
    if restriction.min is not None:
        view.min = restriction.min
    if restriction.max is not None:
        view.max = restriction.max
    if restriction.range_override:
        view.range = list(restriction.range_override)
