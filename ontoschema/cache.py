"""Cache codec: JSON snapshots of a resolved Ontology.

Aliased entries (a class or property known under several URIs, a view
registered under every property URI) are stored once and referenced by arena
position, so a restored model has the same object sharing as the original.
The back-reference from vocabulary-constrained properties to their Ontology is
not stored; it is re-attached on load.
"""

from __future__ import annotations

import json
import os
import tempfile
import time
import warnings
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, Union, runtime_checkable, TYPE_CHECKING

from .config import SchemaConfig
from .errors import CacheCorruptError
from .loaders.classes import ClassIndex
from .model.identity import NodeArena
from .model.nodes import ClassNode, PropertyDef, PropertyView, RestrictionDesc
from .ontology import Ontology
from .source.backend import OntologySource

if TYPE_CHECKING:
    from .logging.events import BuildEventLogger

CACHE_FORMAT = "ontoschema-cache"
CACHE_VERSION = 1


@runtime_checkable
class CacheStorage(Protocol):
    """Path-keyed byte storage for cache snapshots."""

    def read(self, path: str) -> bytes:
        ...

    def write_atomic(self, path: str, data: bytes) -> None:
        """Replace the content at `path` so readers never see a partial write."""
        ...

    def mtime(self, path: str) -> float:
        ...

    def delete(self, path: str) -> None:
        ...

    def exists(self, path: str) -> bool:
        ...


class FileCacheStorage:
    """Local filesystem CacheStorage (temp file in the same directory + os.replace)."""

    def read(self, path: str) -> bytes:
        return Path(path).read_bytes()

    def write_atomic(self, path: str, data: bytes) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, target)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

    def mtime(self, path: str) -> float:
        return os.path.getmtime(path)

    def delete(self, path: str) -> None:
        if os.path.exists(path):
            os.unlink(path)

    def exists(self, path: str) -> bool:
        return os.path.isfile(path)


def _arena_to_dict(arena: NodeArena) -> tuple[list[dict], dict[str, int]]:
    return [node.to_dict() for node in arena.nodes], dict(arena.index)


def _restore_index(arena: NodeArena, index: dict[str, Any]) -> None:
    for uri, position in index.items():
        if not isinstance(position, int) or not 0 <= position < len(arena.nodes):
            raise CacheCorruptError(f"Index entry {uri!r} points outside the snapshot")
        arena.alias(uri, position)


class OntologyCache:
    """Reads and writes Ontology snapshots through a CacheStorage.

    Example:
        cache = OntologyCache()
        ontology = cache.load_or_build(
            "cache/ontology.json", ttl=3600,
            builder=lambda: Ontology.build(source, config),
            source=source,
        )
    """

    def __init__(
        self,
        storage: Optional[CacheStorage] = None,
        events: Optional["BuildEventLogger"] = None,
    ):
        self.storage = storage or FileCacheStorage()
        self.events = events

    # ===== Codec =====

    @staticmethod
    def encode(ontology: Ontology) -> dict[str, Any]:
        """Snapshot dict of a resolved model (JSON-serializable)."""
        properties, property_index = _arena_to_dict(ontology.properties)
        restrictions, restriction_index = _arena_to_dict(ontology.restrictions)

        classes = []
        for node in ontology.classes.nodes:
            data = node.to_dict()
            views = node.get_properties()
            positions = {id(view): i for i, view in enumerate(views)}
            data["views"] = [view.to_dict() for view in views]
            data["view_index"] = {uri: positions[id(view)] for uri, view in node.properties.items()}
            classes.append(data)

        return {
            "format": CACHE_FORMAT,
            "version": CACHE_VERSION,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "schema": ontology.config.to_dict(),
            "properties": properties,
            "property_index": property_index,
            "classes": classes,
            "class_index": dict(ontology.classes.index),
            "restrictions": restrictions,
            "restriction_index": restriction_index,
        }

    @staticmethod
    def decode(
        data: dict[str, Any],
        source: Optional[OntologySource] = None,
        events: Optional["BuildEventLogger"] = None,
    ) -> Ontology:
        """Restore an Ontology from a snapshot dict.

        Raises:
            CacheCorruptError: If the snapshot is not a valid snapshot
        """
        if not isinstance(data, dict) or data.get("format") != CACHE_FORMAT:
            raise CacheCorruptError("Not an ontology cache snapshot")
        if data.get("version") != CACHE_VERSION:
            raise CacheCorruptError(f"Unsupported snapshot version {data.get('version')!r}")
        try:
            config = SchemaConfig.from_dict(data["schema"])

            properties: NodeArena[PropertyDef] = NodeArena()
            for item in data["properties"]:
                properties.add(PropertyDef.from_dict(item), ())
            _restore_index(properties, data["property_index"])

            restrictions: NodeArena[RestrictionDesc] = NodeArena()
            for item in data["restrictions"]:
                restrictions.add(RestrictionDesc.from_dict(item), ())
            _restore_index(restrictions, data["restriction_index"])

            classes = ClassIndex()
            for item in data["classes"]:
                node = ClassNode.from_dict(item)
                views = [PropertyView.from_dict(view) for view in item["views"]]
                for uri, position in item["view_index"].items():
                    if not isinstance(position, int) or not 0 <= position < len(views):
                        raise CacheCorruptError(f"View entry {uri!r} points outside the snapshot")
                    node.properties[uri] = views[position]
                classes.add(node, ())
            _restore_index(classes, data["class_index"])
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CacheCorruptError(f"Malformed ontology cache snapshot: {e!r}") from e

        return Ontology(classes, properties, restrictions, config, source, events)

    # ===== Storage =====

    def save(self, ontology: Ontology, path: Union[str, Path]) -> None:
        """Write a snapshot atomically.

        Raises:
            OSError: If the snapshot cannot be written
        """
        payload = json.dumps(self.encode(ontology), ensure_ascii=False)
        self.storage.write_atomic(str(path), payload.encode("utf-8"))

    def load(self, path: Union[str, Path], source: Optional[OntologySource] = None) -> Ontology:
        """Restore an Ontology from a snapshot.

        Args:
            path: Snapshot path
            source: Source used for vocabulary resolution on the restored model

        Raises:
            FileNotFoundError: If there is no snapshot at `path`
            CacheCorruptError: If the snapshot cannot be read or decoded
        """
        path = str(path)
        if not self.storage.exists(path):
            raise FileNotFoundError(path)
        try:
            data = json.loads(self.storage.read(path).decode("utf-8"))
        except FileNotFoundError:
            raise
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CacheCorruptError(f"Cannot read ontology cache {path}: {e}") from e
        return self.decode(data, source, self.events)

    def is_fresh(self, path: Union[str, Path], ttl: Optional[float]) -> bool:
        """Whether a snapshot exists and is at most `ttl` seconds old (None: never stale)."""
        path = str(path)
        if not self.storage.exists(path):
            return False
        if ttl is None:
            return True
        return time.time() - self.storage.mtime(path) <= ttl

    def load_or_build(
        self,
        path: Union[str, Path],
        ttl: Optional[float],
        builder: Callable[[], Ontology],
        source: Optional[OntologySource] = None,
    ) -> Ontology:
        """Read-through cache around `builder`.

        A fresh snapshot is loaded; a missing, stale or corrupt one triggers
        `builder()` followed by an attempt to overwrite the snapshot. A failed
        write only warns.
        """
        path = str(path)
        if self.is_fresh(path, ttl):
            try:
                ontology = self.load(path, source)
                self._log(path, "hit")
                return ontology
            except FileNotFoundError:
                # Removed after the freshness check
                self._log(path, "miss", "missing")
            except CacheCorruptError as e:
                warnings.warn(f"Rebuilding ontology, cache {path} is corrupt: {e}", UserWarning)
                self._log(path, "rebuild", str(e))
        else:
            reason = "stale" if self.storage.exists(path) else "missing"
            self._log(path, "miss", reason)

        ontology = builder()
        try:
            self.save(ontology, path)
            self._log(path, "write")
        except (OSError, TypeError, ValueError) as e:
            warnings.warn(f"Failed to write ontology cache {path}: {e}", UserWarning)
            self._log(path, "write_failed", str(e))
        return ontology

    def _log(self, path: str, action: str, reason: Optional[str] = None) -> None:
        if self.events:
            self.events.log_cache(path, action, reason)
