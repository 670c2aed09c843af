"""Loaders turning source rows into model nodes."""

from .classes import ClassIndex, ClassLoader
from .properties import PropertyLoader
from .restrictions import RestrictionLoader

__all__ = [
    "ClassIndex",
    "ClassLoader",
    "PropertyLoader",
    "RestrictionLoader",
]
