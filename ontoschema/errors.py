"""Error taxonomy for ontology resolution.

Fatal conditions are exceptions; recoverable graph defects are warnings so the
affected entity can still be built from partial data.
"""


class OntologyError(Exception):
    """Base class for ontology resolution errors."""


class SourceUnavailableError(OntologyError):
    """The triple source or vocabulary source could not be reached or read."""


class CacheCorruptError(OntologyError):
    """A cache snapshot exists but cannot be decoded into a model."""


class MalformedGraphWarning(UserWarning):
    """A graph defect was recovered locally (truncated closure, skipped node)."""
