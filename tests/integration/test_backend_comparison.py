"""Backend comparison tests.

Builds the same ontology through both sources (SQLite recursive queries and
client-side rdflib traversal) to verify they produce identical models.
"""

import pytest

from ontoschema import MatchStrategy, Ontology
from ontoschema.source import GraphOntologySource, SQLiteOntologySource, is_ontology_source
from tests.helpers import LICENSES, assert_models_equal, parse_turtle


@pytest.fixture
def both_ontologies(sqlite_source, graph_source, schema_config):
    return (
        Ontology.build(sqlite_source, schema_config),
        Ontology.build(graph_source, schema_config),
    )


class TestBackendProtocolCompliance:
    """Test that both sources implement the protocol."""

    def test_sqlite_source_is_ontology_source(self, sqlite_source):
        assert is_ontology_source(sqlite_source)

    def test_graph_source_is_ontology_source(self, graph_source):
        assert is_ontology_source(graph_source)


class TestComparableModels:
    """Test that both sources produce the same model."""

    def test_same_model(self, both_ontologies):
        sqlite_ontology, graph_ontology = both_ontologies
        assert_models_equal(sqlite_ontology, graph_ontology)

    def test_same_stats(self, both_ontologies):
        sqlite_ontology, graph_ontology = both_ontologies
        assert sqlite_ontology.stats() == graph_ontology.stats()

    def test_same_vocabulary(self, both_ontologies):
        sqlite_ontology, graph_ontology = both_ontologies

        assert sqlite_ontology.get_vocabulary_values(LICENSES) == graph_ontology.get_vocabulary_values(LICENSES)
        for value in ("PD", "Public Domain", "CC-BY-4.0", "Namensnennung"):
            assert (
                sqlite_ontology.check_vocabulary_value(LICENSES, value, MatchStrategy.ALL)
                == graph_ontology.check_vocabulary_value(LICENSES, value, MatchStrategy.ALL)
            )

    def test_same_model_with_same_as(self):
        """owl:sameAs aliases resolve the same way in both sources."""
        graph = parse_turtle("""
            ex:A a owl:Class ; owl:sameAs <https://other.org/A> .
            ex:B a owl:Class ; rdfs:subClassOf <https://other.org/A> .
            ex:p a owl:DatatypeProperty ; rdfs:domain <https://other.org/A> .
        """)
        with SQLiteOntologySource.from_graph(graph) as sqlite_source:
            sqlite_ontology = Ontology.build(sqlite_source)
        graph_ontology = Ontology.build(GraphOntologySource(graph))

        assert_models_equal(sqlite_ontology, graph_ontology)
        assert graph_ontology.is_instance_of(["https://example.org/schema#B"], "https://other.org/A")
