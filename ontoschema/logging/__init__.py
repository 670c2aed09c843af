"""Observability for ontology builds.

Provides JSONL build event logging plus optional MLflow integration.
"""

from .events import BuildEventLogger
from . import mlflow_integration

__all__ = [
    "BuildEventLogger",
    "mlflow_integration",
]
