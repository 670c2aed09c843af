"""Helpers shared by the class and property loaders.

Closure rows describe single stored nodes; loaders turn them into one entry
per identity group, with ancestors merged across the group's rows.
"""

from __future__ import annotations

import warnings
from typing import Iterable

from ..errors import MalformedGraphWarning
from ..model.identity import EntityIdentity, IdentityResolver
from ..source.backend import ClosureRow, ValueRow


def is_blank(uri: str) -> bool:
    return uri.startswith("_:")


def group_rows(
    rows: list[ClosureRow],
    equivalences: Iterable[ValueRow],
) -> tuple[IdentityResolver, list[tuple[EntityIdentity, list[ClosureRow]]]]:
    """Partition closure rows into identity groups.

    Rows are grouped by their own URIs and by resource-valued equivalence
    facts (owl:equivalentClass / owl:equivalentProperty). Blank-node targets
    are class expressions, not names, and do not join a group.

    Returns:
        The resolver holding all groups, and (identity, rows) pairs ordered
        by canonical URI
    """
    resolver = IdentityResolver()
    by_node = {}
    for row in rows:
        resolver.add_group(row.uris)
        by_node[row.node_id] = row
    for fact in equivalences:
        row = by_node.get(fact.node_id)
        if row is None or not row.uris or not fact.is_resource or is_blank(fact.value):
            continue
        resolver.add_pair(row.uris[0], fact.value)

    grouped: dict[str, tuple[EntityIdentity, list[ClosureRow]]] = {}
    for row in rows:
        if not row.uris:
            continue
        identity = resolver.identity_of(row.uris[0])
        grouped.setdefault(identity.canonical, (identity, []))[1].append(row)
    return resolver, [grouped[k] for k in sorted(grouped)]


def merge_ancestors(
    identity: EntityIdentity,
    rows: list[ClosureRow],
    resolver: IdentityResolver,
) -> list[str]:
    """Ancestor URIs of an identity group, most specific first.

    The group's own URIs come first (depth 0); every alias of an ancestor is an
    ancestor at the same depth. Ties are broken by URI.
    """
    depths: dict[str, int] = {uri: 0 for uri in identity}
    for row in rows:
        for uri, depth in row.ancestors.items():
            if is_blank(uri):
                continue
            if uri not in depths or depth < depths[uri]:
                depths[uri] = depth
    for uri, depth in list(depths.items()):
        if uri in resolver:
            for alias in resolver.identity_of(uri):
                if alias not in depths or depth < depths[alias]:
                    depths[alias] = depth
    return sorted(depths, key=lambda uri: (depths[uri], uri))


def warn_truncated(rows: list[ClosureRow], what: str, max_depth: int) -> None:
    for row in rows:
        if row.truncated:
            warnings.warn(
                f"{what} closure of {row.uris[0] if row.uris else row.node_id} "
                f"truncated at depth {max_depth}",
                MalformedGraphWarning,
                stacklevel=3,
            )


def values_by_node(values: Iterable[ValueRow]) -> dict[str, list[ValueRow]]:
    grouped: dict[str, list[ValueRow]] = {}
    for value in values:
        grouped.setdefault(value.node_id, []).append(value)
    return grouped


def language_map(values: Iterable[ValueRow], predicate: str) -> dict[str, str]:
    """Literal values of `predicate` keyed by language ("" when untagged)."""
    texts: dict[str, str] = {}
    for value in values:
        if value.predicate == predicate and not value.is_resource:
            texts.setdefault(value.lang, value.value)
    return texts


def ordered_set(values: Iterable[str]) -> list[str]:
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result
