"""Unit tests for the merge engine."""

import pytest

from ontoschema import SchemaConfig
from ontoschema.loaders import ClassLoader, PropertyLoader, RestrictionLoader
from ontoschema.merge import MergeEngine, apply_restriction
from ontoschema.model import EntityIdentity, PropertyDef, PropertyView, RestrictionDesc
from ontoschema.source import GraphOntologySource
from tests.helpers import EX, OTHER, parse_turtle


def load_parts(source, config):
    return (
        ClassLoader(source, config).load(),
        PropertyLoader(source, config).load(),
        RestrictionLoader(source, config).load(),
    )


def views_by_class(classes):
    return {
        node.uri: [view.to_dict() for view in node.get_properties()]
        for node in classes
    }


@pytest.fixture
def merged(any_source, schema_config):
    classes, properties, restrictions = load_parts(any_source, schema_config)
    return MergeEngine(classes, properties, restrictions).run()


class TestPropertyAssignment:
    """Test step 1: property views per class."""

    def test_inherited_domain(self, merged):
        """Properties of RepoObject appear on every subclass."""
        for uri in (EX.RepoObject, EX.Collection, EX.TopCollection, EX.Resource):
            assert str(EX.hasTitle) in merged[str(uri)].properties
        assert str(EX.hasTitle) not in merged[str(EX.Agent)].properties

    def test_aliases_counted_once(self, merged):
        """A property with two URIs has two keys but one view."""
        node = merged[str(EX.RepoObject)]

        assert len(node.properties) == 4
        assert len(node.get_properties()) == 3
        assert node.properties[str(OTHER.identifier)] is node.properties[str(EX.hasIdentifier)]

    def test_views_sorted_by_ordering(self, merged):
        assert [v.uri for v in merged[str(EX.Collection)].get_properties()] == [
            str(EX.hasTitle),
            str(EX.hasAlternativeTitle),
            str(EX.hasDepositor),
            str(EX.hasIdentifier),
        ]

    def test_views_not_shared_between_classes(self, merged):
        repo_view = merged[str(EX.RepoObject)].properties[str(EX.hasTitle)]
        collection_view = merged[str(EX.Collection)].properties[str(EX.hasTitle)]

        assert repo_view is not collection_view
        assert repo_view.range is not collection_view.range

    def test_recommended_for_class(self, merged):
        assert merged[str(EX.Collection)].properties[str(EX.hasTitle)].recommended_for_class
        assert merged[str(EX.TopCollection)].properties[str(EX.hasTitle)].recommended_for_class
        assert not merged[str(EX.RepoObject)].properties[str(EX.hasTitle)].recommended_for_class

    def test_domain_alias_reaches_equivalent_class(self):
        source = GraphOntologySource(parse_turtle("""
            ex:Person a owl:Class .
            <https://other.org/Human> a owl:Class ; owl:equivalentClass ex:Person .
            ex:name a owl:DatatypeProperty ; rdfs:domain <https://other.org/Human> .
        """))
        classes = MergeEngine(*load_parts(source, SchemaConfig())).run()

        assert str(EX.name) in classes[str(EX.Person)].properties
        assert len(classes) == 1


class TestRestrictions:
    """Test step 2: restriction overrides."""

    def test_restriction_on_declaring_class_only(self, merged):
        assert merged[str(EX.Collection)].properties[str(EX.hasDepositor)].min == 1
        assert merged[str(EX.RepoObject)].properties[str(EX.hasDepositor)].min is None
        assert merged[str(EX.Resource)].properties[str(EX.hasDepositor)].min is None

    def test_most_specific_restriction_wins(self, merged):
        view = merged[str(EX.TopCollection)].properties[str(EX.hasDepositor)]

        assert (view.min, view.max) == (2, 5)
        assert view.range == [str(EX.Person)]

    def test_range_override_leaves_definition_untouched(self, any_source, schema_config):
        classes, properties, restrictions = load_parts(any_source, schema_config)
        MergeEngine(classes, properties, restrictions).run()

        assert properties[str(EX.hasDepositor)].range == [str(EX.Agent)]
        assert classes[str(EX.Collection)].properties[str(EX.hasDepositor)].range == [str(EX.Agent)]

    def test_inherited_restriction(self):
        """A restriction on a superclass applies to its subclasses."""
        source = GraphOntologySource(parse_turtle("""
            ex:A a owl:Class ; rdfs:subClassOf [
                a owl:Restriction ; owl:onProperty ex:p ; owl:maxCardinality "0"
            ] .
            ex:B a owl:Class ; rdfs:subClassOf ex:A .
            ex:p a owl:DatatypeProperty ; rdfs:domain ex:A .
        """))
        classes = MergeEngine(*load_parts(source, SchemaConfig())).run()

        assert classes[str(EX.B)].properties[str(EX.p)].max == 0
        assert classes[str(EX.B)].properties[str(EX.p)].min is None

    def test_restriction_on_unassigned_property_ignored(self):
        source = GraphOntologySource(parse_turtle("""
            ex:A a owl:Class ; rdfs:subClassOf [
                a owl:Restriction ; owl:onProperty ex:p ; owl:minCardinality "1"
            ] .
            ex:p a owl:DatatypeProperty .
        """))
        classes, properties, restrictions = load_parts(source, SchemaConfig())

        assert MergeEngine(classes, properties, restrictions).apply_restrictions() == 0
        assert classes[str(EX.A)].properties == {}

    def test_apply_restriction_keeps_unsupplied_bounds(self):
        identity = EntityIdentity.of([str(EX.p)])
        view = PropertyView.from_definition(PropertyDef(identity, str(EX.p), "kind", range=["r"]))
        view.min, view.max = 1, 3

        apply_restriction(view, RestrictionDesc(EntityIdentity.of(["_:r"]), str(EX.p), min=0))

        assert (view.min, view.max) == (0, 3)
        assert view.range == ["r"]


class TestDeterminism:
    """Test that merging is order-independent and repeatable."""

    def test_input_order_does_not_matter(self, any_source, schema_config):
        classes, properties, restrictions = load_parts(any_source, schema_config)
        forward = views_by_class(MergeEngine(classes, properties, restrictions).run())

        classes, properties, restrictions = load_parts(any_source, schema_config)
        backward = views_by_class(MergeEngine(
            classes,
            list(reversed(properties.distinct())),
            list(reversed(restrictions.distinct())),
        ).run())

        assert forward == backward

    def test_run_is_idempotent(self, any_source, schema_config):
        classes, properties, restrictions = load_parts(any_source, schema_config)
        engine = MergeEngine(classes, properties, restrictions)

        first = views_by_class(engine.run())
        second = views_by_class(engine.run())

        assert first == second
        assert len(classes[str(EX.RepoObject)].get_properties()) == 3
