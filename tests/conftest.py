"""Shared test fixtures for the ontoschema test suite."""

import pytest
from pathlib import Path
from tempfile import TemporaryDirectory

from ontoschema import Ontology, SchemaConfig
from ontoschema.source import GraphOntologySource, SQLiteOntologySource
from tests.helpers.sample_ontology import ONTOLOGY_NAMESPACE, sample_graph as build_sample_graph


# ============================================================================
# Temporary Directory Fixtures
# ============================================================================

@pytest.fixture
def tmp_test_dir():
    """Create a temporary directory for test artifacts."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ============================================================================
# Ontology Fixtures
# ============================================================================

@pytest.fixture
def sample_graph():
    """Sample repository ontology as an rdflib Graph."""
    return build_sample_graph()


@pytest.fixture
def schema_config():
    """SchemaConfig with annotation predicates in the sample namespace."""
    return SchemaConfig.for_namespace(ONTOLOGY_NAMESPACE)


@pytest.fixture
def graph_source(sample_graph):
    """Graph-backed source over the sample ontology."""
    return GraphOntologySource(sample_graph)


@pytest.fixture
def sqlite_source(sample_graph):
    """In-memory SQLite source holding the sample ontology."""
    source = SQLiteOntologySource.from_graph(sample_graph)
    yield source
    source.close()


@pytest.fixture(params=["sqlite", "graph"])
def any_source(request, sample_graph):
    """Each source implementation in turn."""
    if request.param == "sqlite":
        source = SQLiteOntologySource.from_graph(sample_graph)
        yield source
        source.close()
    else:
        yield GraphOntologySource(sample_graph)


@pytest.fixture
def ontology(any_source, schema_config):
    """Sample ontology built from each source implementation."""
    return Ontology.build(any_source, schema_config)


@pytest.fixture
def sqlite_ontology(sqlite_source, schema_config):
    """Sample ontology built from the SQLite source."""
    return Ontology.build(sqlite_source, schema_config)


# ============================================================================
# Cache Fixtures
# ============================================================================

@pytest.fixture
def cache_path(tmp_test_dir):
    """Snapshot path inside a not yet existing subdirectory."""
    return tmp_test_dir / "cache" / "ontology.json"
