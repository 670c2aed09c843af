"""Resolved ontology model."""

from .identity import EntityIdentity, IdentityResolver, NodeArena
from .concepts import VocabConcept, MatchStrategy, value_in_lang
from .nodes import ClassNode, PropertyDef, PropertyView, RestrictionDesc, VocabularyContext

__all__ = [
    "EntityIdentity",
    "IdentityResolver",
    "NodeArena",
    "VocabConcept",
    "MatchStrategy",
    "value_in_lang",
    "ClassNode",
    "PropertyDef",
    "PropertyView",
    "RestrictionDesc",
    "VocabularyContext",
]
