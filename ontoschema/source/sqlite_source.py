"""SQLite-backed ontology source.

Implements the OntologySource protocol with:
- Server-side closures via recursive common table expressions
- Per-depth deduplication of reached nodes and a depth cap
- Multi-identifier resources (owl:sameAs merged on import)
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from rdflib import Graph, Literal
from rdflib.namespace import OWL, RDF

from ..errors import SourceUnavailableError
from ..model.identity import IdentityResolver
from .backend import ClosureRow, ConceptRow, NodeRow, ReferrerRow, ValueRow, term_key
from .sqlite_schema import SCHEMA_VERSION, ensure_schema_on_conn, get_schema_version

# Keeps IN (...) lists below SQLite's bound parameter limit
CHUNK_SIZE = 500

CLOSURE_QUERY = """
WITH RECURSIVE
seeds(id, kind) AS (
    SELECT r.id, MIN(i.ids)
    FROM relations r JOIN identifiers i ON i.id = r.target_id
    WHERE r.property = ? AND i.ids IN ({types})
    GROUP BY r.id
),
t(start, node, n) AS (
    SELECT id, id, 0 FROM seeds
  UNION
    SELECT t.start, r.target_id, t.n + 1
    FROM t JOIN relations r ON r.id = t.node
    WHERE r.property IN ({edges}) AND t.n <= ?
)
SELECT t.start, s.kind, t.node, MIN(t.n) AS depth
FROM t JOIN seeds s ON s.id = t.start
GROUP BY t.start, s.kind, t.node
"""


def _placeholders(count: int) -> str:
    return ", ".join("?" * count)


def _chunks(values: list, size: int = CHUNK_SIZE) -> Iterator[list]:
    for start in range(0, len(values), size):
        yield values[start:start + size]


class SQLiteOntologySource:
    """SQLite-backed implementation of the OntologySource protocol.

    Attributes:
        db_path: Path to SQLite database file
        conn: SQLite connection (persistent)
    """

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        """Open (and if needed initialize) a store.

        Args:
            db_path: Path to SQLite database file (or ":memory:" for in-memory)

        Raises:
            SourceUnavailableError: If the database cannot be opened or was
                written with a different schema version
        """
        self.db_path = str(db_path)
        try:
            self.conn = sqlite3.connect(self.db_path)
            self.conn.row_factory = sqlite3.Row
            version = get_schema_version(self.conn)
            if version not in (0, SCHEMA_VERSION):
                self.conn.close()
                raise SourceUnavailableError(
                    f"Ontology store {self.db_path} has schema version {version}, "
                    f"expected {SCHEMA_VERSION}"
                )
            ensure_schema_on_conn(self.conn)
        except sqlite3.Error as e:
            raise SourceUnavailableError(f"Cannot open ontology store {self.db_path}: {e}") from e

    @classmethod
    def from_graph(cls, graph: Graph, db_path: Union[str, Path] = ":memory:") -> "SQLiteOntologySource":
        """Create a store and import `graph` into it."""
        source = cls(db_path)
        source.import_graph(graph)
        return source

    def close(self) -> None:
        """Close the database connection."""
        if self.conn:
            self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _query(self, sql: str, params: Iterable = ()) -> list[sqlite3.Row]:
        try:
            return self.conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as e:
            raise SourceUnavailableError(f"Ontology store query failed: {e}") from e

    # ===== Import =====

    def import_graph(self, graph: Graph) -> int:
        """Store all triples of an rdflib graph.

        Subjects linked by owl:sameAs become one resource with several
        identifiers. Resource objects go to `relations`, literals to `metadata`.

        Returns:
            Number of stored resources after the import
        """
        resolver = IdentityResolver()
        for s, p, o in graph:
            resolver.add(term_key(s))
            if not isinstance(o, Literal):
                resolver.add(term_key(o))
        for s, o in graph.subject_objects(OWL.sameAs):
            if not isinstance(o, Literal):
                resolver.add_pair(term_key(s), term_key(o))

        try:
            cursor = self.conn.cursor()
            ids: dict[str, int] = {}
            for identity in resolver.groups():
                existing = self._existing_id(cursor, identity.uris)
                if existing is None:
                    cursor.execute("INSERT INTO resources DEFAULT VALUES")
                    existing = cursor.lastrowid
                cursor.executemany(
                    "INSERT OR IGNORE INTO identifiers (ids, id) VALUES (?, ?)",
                    [(uri, existing) for uri in identity.uris]
                )
                for uri in identity.uris:
                    ids[uri] = existing

            metadata = []
            relations = set()
            for s, p, o in graph:
                if p == OWL.sameAs:
                    continue
                subject_id = ids[term_key(s)]
                if isinstance(o, Literal):
                    metadata.append((
                        subject_id,
                        str(p),
                        str(o.datatype) if o.datatype else "",
                        o.language or "",
                        str(o),
                    ))
                else:
                    relations.add((subject_id, ids[term_key(o)], str(p)))

            cursor.executemany(
                "INSERT INTO metadata (id, property, type, lang, value) VALUES (?, ?, ?, ?, ?)",
                metadata
            )
            cursor.executemany(
                "INSERT OR IGNORE INTO relations (id, target_id, property) VALUES (?, ?, ?)",
                sorted(relations)
            )
            self.conn.commit()
            return cursor.execute("SELECT count(*) FROM resources").fetchone()[0]
        except sqlite3.Error as e:
            self.conn.rollback()
            raise SourceUnavailableError(f"Graph import failed: {e}") from e

    @staticmethod
    def _existing_id(cursor: sqlite3.Cursor, uris: Iterable[str]) -> Optional[int]:
        uris = list(uris)
        row = cursor.execute(
            f"SELECT MIN(id) FROM identifiers WHERE ids IN ({_placeholders(len(uris))})",
            uris
        ).fetchone()
        return row[0] if row else None

    # ===== OntologySource protocol =====

    def _identifiers(self, node_ids: Iterable[str]) -> dict[str, list[str]]:
        node_ids = sorted({int(n) for n in node_ids})
        result: dict[str, list[str]] = {}
        for chunk in _chunks(node_ids):
            rows = self._query(
                f"SELECT id, ids FROM identifiers WHERE id IN ({_placeholders(len(chunk))}) ORDER BY ids",
                chunk
            )
            for row in rows:
                result.setdefault(str(row["id"]), []).append(row["ids"])
        return result

    def resolve_closure(
        self,
        seed_types: Iterable[str],
        edge_predicates: Iterable[str],
        max_depth: int = 30,
    ) -> list[ClosureRow]:
        """Closures computed in one recursive query.

        The recursion runs one level past `max_depth`; nodes first reached
        there mark the row as truncated and are dropped.
        """
        seed_types = list(seed_types)
        edge_predicates = list(edge_predicates)
        if not seed_types:
            return []
        sql = CLOSURE_QUERY.format(
            types=_placeholders(len(seed_types)),
            edges=_placeholders(len(edge_predicates)) if edge_predicates else "NULL",
        )
        rows = self._query(sql, [str(RDF.type), *seed_types, *edge_predicates, max_depth])

        kinds: dict[str, str] = {}
        depths: dict[str, dict[str, int]] = {}
        truncated: set[str] = set()
        for row in rows:
            start = str(row["start"])
            kinds[start] = row["kind"]
            if row["depth"] > max_depth:
                truncated.add(start)
                continue
            depths.setdefault(start, {})[str(row["node"])] = row["depth"]

        identifiers = self._identifiers(
            {node for nodes in depths.values() for node in nodes}
        )
        result = []
        for start in sorted(depths, key=int):
            ancestors: dict[str, int] = {}
            for node, depth in depths[start].items():
                for uri in identifiers.get(node, []):
                    if uri not in ancestors or depth < ancestors[uri]:
                        ancestors[uri] = depth
            result.append(ClosureRow(
                node_id=start,
                uris=identifiers.get(start, []),
                kind=kinds[start],
                ancestors=ancestors,
                truncated=start in truncated,
            ))
        return result

    def fetch_typed_nodes(self, type_uris: Iterable[str]) -> list[NodeRow]:
        type_uris = list(type_uris)
        if not type_uris:
            return []
        rows = self._query(
            f"""
            SELECT DISTINCT r.id
            FROM relations r JOIN identifiers i ON i.id = r.target_id
            WHERE r.property = ? AND i.ids IN ({_placeholders(len(type_uris))})
            """,
            [str(RDF.type), *type_uris]
        )
        identifiers = self._identifiers(str(row["id"]) for row in rows)
        return [NodeRow(node_id=n, uris=identifiers[n]) for n in sorted(identifiers, key=int)]

    def fetch_values(
        self,
        node_ids: Iterable[str],
        predicates: Iterable[str],
    ) -> list[ValueRow]:
        node_ids = sorted({int(n) for n in node_ids})
        predicates = list(predicates)
        if not node_ids or not predicates:
            return []
        values = []
        for chunk in _chunks(node_ids):
            params = [*chunk, *predicates]
            where = (
                f"id IN ({_placeholders(len(chunk))}) "
                f"AND property IN ({_placeholders(len(predicates))})"
            )
            for row in self._query(f"SELECT id, property, value, lang FROM metadata WHERE {where}", params):
                values.append(ValueRow(
                    node_id=str(row["id"]),
                    predicate=row["property"],
                    value=row["value"],
                    lang=row["lang"],
                ))
            rows = self._query(
                f"""
                SELECT r.id, r.property, i.ids
                FROM relations r JOIN identifiers i ON i.id = r.target_id
                WHERE r.{where}
                """,
                params
            )
            for row in rows:
                values.append(ValueRow(
                    node_id=str(row["id"]),
                    predicate=row["property"],
                    value=row["ids"],
                    is_resource=True,
                ))
        values.sort(key=lambda v: (v.node_id, v.predicate, v.value, v.lang))
        return values

    def fetch_referrers(self, predicate: str, node_ids: Iterable[str]) -> list[ReferrerRow]:
        node_ids = sorted({int(n) for n in node_ids})
        referrers = []
        for chunk in _chunks(node_ids):
            rows = self._query(
                f"""
                SELECT r.target_id, i.ids
                FROM relations r JOIN identifiers i ON i.id = r.id
                WHERE r.property = ? AND r.target_id IN ({_placeholders(len(chunk))})
                ORDER BY r.target_id, i.ids
                """,
                [predicate, *chunk]
            )
            referrers.extend(
                ReferrerRow(target_id=str(row["target_id"]), subject_uri=row["ids"])
                for row in rows
            )
        return referrers

    def fetch_concepts(
        self,
        vocabulary_uri: str,
        *,
        in_scheme: str,
        notation: str,
        pref_label: str,
        alt_label: str,
        broader: str,
        narrower: str,
        concept_uri: Optional[str] = None,
    ) -> list[ConceptRow]:
        sql = """
            SELECT DISTINCT r.id
            FROM relations r JOIN identifiers i ON i.id = r.target_id
            WHERE r.property = ? AND i.ids = ?
        """
        params = [in_scheme, vocabulary_uri]
        if concept_uri is not None:
            sql += " AND r.id = (SELECT id FROM identifiers WHERE ids = ?)"
            params.append(concept_uri)
        concept_ids = [str(row["id"]) for row in self._query(sql, params)]
        if not concept_ids:
            return []

        identifiers = self._identifiers(concept_ids)
        concepts = {
            node_id: ConceptRow(node_id=node_id, uris=identifiers.get(node_id, []))
            for node_id in sorted(concept_ids, key=int)
        }
        literal_values = self.fetch_values(concept_ids, [notation, pref_label, alt_label])
        for value in literal_values:
            if value.is_resource:
                continue
            concept = concepts[value.node_id]
            if value.predicate == notation:
                concept.notation.append(value.value)
            elif value.predicate == pref_label:
                concept.pref_label.setdefault(value.lang, value.value)
            elif value.predicate == alt_label:
                concept.alt_label.setdefault(value.lang, value.value)

        for chunk in _chunks([int(n) for n in concept_ids]):
            rows = self._query(
                f"""
                SELECT id, target_id, property FROM relations
                WHERE id IN ({_placeholders(len(chunk))}) AND property IN (?, ?)
                ORDER BY id, target_id
                """,
                [*chunk, broader, narrower]
            )
            for row in rows:
                concept = concepts[str(row["id"])]
                if row["property"] == broader:
                    concept.broader_ids.append(str(row["target_id"]))
                else:
                    concept.narrower_ids.append(str(row["target_id"]))
        return list(concepts.values())
