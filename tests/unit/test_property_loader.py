"""Unit tests for the property loader."""

import pytest
from rdflib.namespace import OWL, RDF, XSD

from ontoschema import MalformedGraphWarning, SchemaConfig
from ontoschema.loaders import PropertyLoader
from ontoschema.loaders.properties import parse_flag
from ontoschema.source import GraphOntologySource
from tests.helpers import EX, OTHER, LICENSES, parse_turtle


@pytest.fixture
def properties(any_source, schema_config):
    return PropertyLoader(any_source, schema_config).load()


class TestParseFlag:
    """Test boolean annotation parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("true", True),
        (" TRUE ", True),
        ("1", True),
        ("false", False),
        ("0", False),
        ("yes", None),
        ("", None),
    ])
    def test_values(self, text, expected):
        assert parse_flag(text) is expected


class TestPropertyLoading:
    """Test property definitions built from the sample ontology."""

    def test_one_definition_per_identity(self, properties):
        assert len(properties) == 6
        assert properties[str(OTHER.identifier)] is properties[str(EX.hasIdentifier)]
        assert properties[str(EX.hasIdentifier)].uri == str(EX.hasIdentifier)

    def test_kind(self, properties):
        assert properties[str(EX.hasDepositor)].kind == str(OWL.ObjectProperty)
        assert properties[str(EX.hasTitle)].kind == str(OWL.DatatypeProperty)

    def test_domain_and_range(self, properties):
        definition = properties[str(EX.hasDepositor)]
        assert definition.domain == [str(EX.RepoObject)]
        assert definition.range == [str(EX.Agent)]

    def test_super_properties(self, properties):
        assert properties[str(EX.hasAlternativeTitle)].ancestors == [
            str(EX.hasAlternativeTitle),
            str(EX.hasTitle),
        ]

    def test_ordering(self, properties):
        assert properties[str(EX.hasTitle)].ordering == 10
        assert properties[str(EX.hasIdentifier)].ordering == 99999

    def test_annotations(self, properties):
        title = properties[str(EX.hasTitle)]
        assert title.recommended_classes == [str(EX.Collection)]
        assert title.example_values == {"en": "An example title", "de": "Ein Beispieltitel"}
        assert title.get_label("de") == "Titel"

        identifier = properties[str(EX.hasIdentifier)]
        assert identifier.auto_fill is True
        assert identifier.default_value == "n/a"

        assert properties[str(EX.hasLicense)].vocabulary_ref == LICENSES
        assert properties[str(EX.hasName)].vocabulary_ref is None

    def test_language_tagged(self, properties):
        """langString range or a langTag annotation flags a property."""
        assert properties[str(EX.hasTitle)].is_language_tagged
        assert properties[str(EX.hasAlternativeTitle)].is_language_tagged
        assert properties[str(EX.hasAlternativeTitle)].range == [str(XSD.string)]
        assert str(RDF.langString) in properties[str(EX.hasTitle)].range
        assert not properties[str(EX.hasName)].is_language_tagged

    def test_annotations_ignored_without_namespace(self, any_source):
        """With the default config no annotation predicate is read."""
        properties = PropertyLoader(any_source, SchemaConfig()).load()

        assert properties[str(EX.hasTitle)].ordering == 99999
        assert properties[str(EX.hasLicense)].vocabulary_ref is None


class TestMalformedAnnotations:
    """Test recovery from unusable annotation values."""

    def load(self, turtle):
        source = GraphOntologySource(parse_turtle(turtle))
        return PropertyLoader(source, SchemaConfig.for_namespace(str(EX))).load()

    def test_non_integer_ordering_warns(self):
        with pytest.warns(MalformedGraphWarning, match="ordering"):
            properties = self.load("""
                ex:p a owl:DatatypeProperty ; ex:ordering "first" .
            """)
        assert properties[str(EX.p)].ordering == 99999

    def test_first_integer_ordering_wins(self):
        with pytest.warns(MalformedGraphWarning):
            properties = self.load("""
                ex:p a owl:DatatypeProperty ; ex:ordering "10.5", "5" .
            """)
        assert properties[str(EX.p)].ordering == 5

    def test_non_boolean_flag_warns(self):
        with pytest.warns(MalformedGraphWarning, match="auto_fill"):
            properties = self.load("""
                ex:p a owl:DatatypeProperty ; ex:automatedFill "maybe" .
            """)
        assert properties[str(EX.p)].auto_fill is False

    def test_equivalent_property_merges_annotations(self):
        properties = self.load("""
            ex:p a owl:DatatypeProperty ; ex:ordering "3" .
            ex:q a owl:ObjectProperty ; owl:equivalentProperty ex:p ; ex:defaultValue "x" .
        """)

        definition = properties[str(EX.q)]
        assert definition is properties[str(EX.p)]
        assert definition.ordering == 3
        assert definition.default_value == "x"
        assert definition.kind == str(OWL.DatatypeProperty)
