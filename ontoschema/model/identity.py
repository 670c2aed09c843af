"""Entity identities and the URI-keyed node arena.

An ontology entity can be known under several URIs (owl:equivalentClass,
owl:equivalentProperty, or several identifiers of one stored resource). The
`IdentityResolver` partitions URIs into identity groups; the `NodeArena` stores
one node per group and resolves every member URI to that same node.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class EntityIdentity:
    """Ordered set of distinct URIs naming the same ontology entity.

    URIs are kept sorted so an identity built from the same URIs in a different
    order compares equal.
    """

    uris: tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "uris", tuple(sorted(set(self.uris))))

    @classmethod
    def of(cls, uris: Iterable[str]) -> "EntityIdentity":
        return cls(tuple(uris))

    @property
    def canonical(self) -> str:
        """First URI of the identity ("" for an empty identity)."""
        return self.uris[0] if self.uris else ""

    def preferred(self, namespace: Optional[str] = None) -> str:
        """First URI within `namespace`, falling back to the canonical URI."""
        if namespace:
            for uri in self.uris:
                if uri.startswith(namespace):
                    return uri
        return self.canonical

    def __iter__(self) -> Iterator[str]:
        return iter(self.uris)

    def __contains__(self, uri: object) -> bool:
        return uri in self.uris

    def __len__(self) -> int:
        return len(self.uris)


class IdentityResolver:
    """Union-find over URIs.

    Equivalence is treated as symmetric and transitive even when the input
    graph only states one direction. Cycles and self-loops are no-ops.

    Example:
        resolver = IdentityResolver()
        resolver.add_pair("ex:A", "ex:B")
        resolver.add_pair("ex:B", "ex:C")
        resolver.identity_of("ex:C").uris  # ('ex:A', 'ex:B', 'ex:C')
    """

    def __init__(self):
        self._parent: dict[str, str] = {}
        self._groups: Optional[dict[str, EntityIdentity]] = None

    def add(self, uri: str) -> None:
        """Register a URI as (at least) its own identity."""
        if uri not in self._parent:
            self._parent[uri] = uri
            self._groups = None

    def add_group(self, uris: Iterable[str]) -> None:
        """Declare that all `uris` name the same entity."""
        uris = list(uris)
        for uri in uris:
            self.add(uri)
        for uri in uris[1:]:
            self.add_pair(uris[0], uri)

    def add_pair(self, subject: str, equivalent: str) -> None:
        """Declare `subject` and `equivalent` to be the same entity."""
        self.add(subject)
        self.add(equivalent)
        a = self.find(subject)
        b = self.find(equivalent)
        if a == b:
            return
        # smaller root wins so results do not depend on pair order
        if b < a:
            a, b = b, a
        self._parent[b] = a
        self._groups = None

    def find(self, uri: str) -> str:
        """Root URI of the group `uri` belongs to."""
        root = uri
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[uri] != root:
            self._parent[uri], uri = root, self._parent[uri]
        return root

    def _build_groups(self) -> dict[str, EntityIdentity]:
        members: dict[str, list[str]] = {}
        for uri in self._parent:
            members.setdefault(self.find(uri), []).append(uri)
        groups = {}
        for uris in members.values():
            identity = EntityIdentity.of(uris)
            for uri in uris:
                groups[uri] = identity
        return groups

    def identity_of(self, uri: str) -> EntityIdentity:
        """Identity group containing `uri`.

        Raises:
            KeyError: If the URI was never registered
        """
        if self._groups is None:
            self._groups = self._build_groups()
        return self._groups[uri]

    def groups(self) -> list[EntityIdentity]:
        """All distinct identity groups, ordered by canonical URI."""
        if self._groups is None:
            self._groups = self._build_groups()
        unique = {identity.canonical: identity for identity in self._groups.values()}
        return [unique[k] for k in sorted(unique)]

    def __contains__(self, uri: object) -> bool:
        return uri in self._parent

    def __len__(self) -> int:
        return len(self._parent)


class NodeArena(Generic[T]):
    """Nodes stored once, addressable by every URI of their identity.

    Lookups by any member URI are O(1) and return the identical object;
    `distinct()` lists each physical node exactly once, in insertion order.
    """

    def __init__(self):
        self.nodes: list[T] = []
        self.index: dict[str, int] = {}

    def add(self, node: T, uris: Iterable[str]) -> int:
        """Store `node` and index it under `uris`.

        Returns:
            Arena index of the node
        """
        position = len(self.nodes)
        self.nodes.append(node)
        for uri in uris:
            self.index[uri] = position
        return position

    def alias(self, uri: str, position: int) -> None:
        """Index an additional URI for the node at `position`."""
        self.index[uri] = position

    def get(self, uri: str) -> Optional[T]:
        position = self.index.get(uri)
        return None if position is None else self.nodes[position]

    def index_of(self, uri: str) -> Optional[int]:
        return self.index.get(uri)

    def distinct(self) -> list[T]:
        return list(self.nodes)

    def uris(self) -> list[str]:
        return list(self.index)

    def __getitem__(self, uri: str) -> T:
        return self.nodes[self.index[uri]]

    def __contains__(self, uri: object) -> bool:
        return uri in self.index

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[T]:
        return iter(self.nodes)
