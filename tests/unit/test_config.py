"""Unit tests for SchemaConfig."""

import json

from rdflib.namespace import OWL, RDFS

from ontoschema import SchemaConfig


NS = "https://example.org/schema#"


class TestDefaults:
    """Test the default configuration."""

    def test_standard_predicates(self):
        config = SchemaConfig()

        assert config.parent == str(RDFS.subClassOf)
        assert config.label == str(RDFS.label)
        assert config.max_depth == 30
        assert config.default_ordering == 99999

    def test_no_annotations_by_default(self):
        """Without a namespace no annotation predicate is read."""
        assert SchemaConfig().annotation_fields() == {}

    def test_class_edges_include_equivalence(self):
        config = SchemaConfig()
        assert str(OWL.equivalentClass) in config.class_edges
        assert config.parent in config.class_edges


class TestForNamespace:
    """Test namespace-derived annotation predicates."""

    def test_annotation_predicates(self):
        config = SchemaConfig.for_namespace(NS)

        assert config.ontology_namespace == NS
        assert config.ordering == NS + "ordering"
        assert config.vocabulary == NS + "vocabs"
        assert config.annotation_fields()[NS + "langTag"] == "is_language_tagged"
        assert len(config.annotation_fields()) == 7

    def test_overrides(self):
        config = SchemaConfig.for_namespace(NS, vocabulary=NS + "vocabulary", max_depth=5)

        assert config.vocabulary == NS + "vocabulary"
        assert config.max_depth == 5

    def test_disabled_annotation_is_skipped(self):
        config = SchemaConfig.for_namespace(NS, example_value=None)
        assert "example_values" not in config.annotation_fields().values()


class TestSerialization:
    """Test dict and JSON file round trips."""

    def test_dict_round_trip(self):
        config = SchemaConfig.for_namespace(NS, max_depth=7)
        assert SchemaConfig.from_dict(config.to_dict()) == config

    def test_unknown_keys_ignored(self):
        config = SchemaConfig.from_dict({"ontology_namespace": NS, "unknown": 1})
        assert config.ontology_namespace == NS

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "schema.json"
        path.write_text(json.dumps({"ontology_namespace": NS, "ordering": NS + "order"}))

        config = SchemaConfig.from_json_file(path)

        assert config.ordering == NS + "order"
        assert config.label == str(RDFS.label)
