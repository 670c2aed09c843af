"""Test helper utilities for the ontoschema test suite."""

from .model_assertions import (
    snapshot_without_timestamp,
    assert_models_equal,
    assert_distinct_views,
    assert_aliases_shared,
)
from .sample_ontology import EX, OTHER, LIC, LICENSES, parse_turtle

__all__ = [
    'snapshot_without_timestamp',
    'assert_models_equal',
    'assert_distinct_views',
    'assert_aliases_shared',
    'EX',
    'OTHER',
    'LIC',
    'LICENSES',
    'parse_turtle',
]
