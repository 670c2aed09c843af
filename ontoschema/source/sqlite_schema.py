"""SQLite schema for stored ontology triples.

Schema includes 4 core tables:
1. resources - One row per stored resource (class, property, concept, ...)
2. identifiers - URIs naming a resource; a resource may have several
3. metadata - Literal-valued triples (with datatype and language)
4. relations - Resource-valued triples between two stored resources
"""

import sqlite3

SCHEMA_VERSION = 1

RESOURCES_TABLE = """
CREATE TABLE IF NOT EXISTS resources (
    id INTEGER PRIMARY KEY
);
"""

IDENTIFIERS_TABLE = """
CREATE TABLE IF NOT EXISTS identifiers (
    ids TEXT PRIMARY KEY,
    id INTEGER NOT NULL,
    FOREIGN KEY (id) REFERENCES resources(id)
);
"""

METADATA_TABLE = """
CREATE TABLE IF NOT EXISTS metadata (
    mid INTEGER PRIMARY KEY AUTOINCREMENT,
    id INTEGER NOT NULL,
    property TEXT NOT NULL,
    type TEXT NOT NULL DEFAULT '',
    lang TEXT NOT NULL DEFAULT '',
    value TEXT NOT NULL,
    FOREIGN KEY (id) REFERENCES resources(id)
);
"""

RELATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS relations (
    id INTEGER NOT NULL,
    target_id INTEGER NOT NULL,
    property TEXT NOT NULL,
    PRIMARY KEY (id, target_id, property),
    FOREIGN KEY (id) REFERENCES resources(id),
    FOREIGN KEY (target_id) REFERENCES resources(id)
);
"""

INDICES = [
    "CREATE INDEX IF NOT EXISTS idx_identifiers_id ON identifiers(id);",
    "CREATE INDEX IF NOT EXISTS idx_metadata_id_property ON metadata(id, property);",
    "CREATE INDEX IF NOT EXISTS idx_metadata_property_value ON metadata(property, value);",
    "CREATE INDEX IF NOT EXISTS idx_relations_target_property ON relations(target_id, property);",
    "CREATE INDEX IF NOT EXISTS idx_relations_property ON relations(property);",
]

SCHEMA_VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL
);
"""


def ensure_schema_on_conn(conn: sqlite3.Connection) -> None:
    """Create schema on an existing connection.

    Args:
        conn: SQLite connection

    Raises:
        sqlite3.Error: If schema creation fails
    """
    cursor = conn.cursor()

    try:
        cursor.execute(RESOURCES_TABLE)
        cursor.execute(IDENTIFIERS_TABLE)
        cursor.execute(METADATA_TABLE)
        cursor.execute(RELATIONS_TABLE)

        for idx_sql in INDICES:
            cursor.execute(idx_sql)

        cursor.execute(SCHEMA_VERSION_TABLE)
        cursor.execute(
            "INSERT OR IGNORE INTO schema_version (version, applied_at) VALUES (?, datetime('now'))",
            (SCHEMA_VERSION,)
        )

        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Schema version recorded in the store, or 0 if not initialized."""
    try:
        row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    except sqlite3.OperationalError:
        return 0
    return row[0] or 0
