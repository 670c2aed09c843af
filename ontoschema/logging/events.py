"""Build event logging for ontology resolution.

Logs build stages, cache hits and vocabulary resolutions as JSONL events.
"""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from datetime import datetime, timezone
from typing import Any, Optional


class BuildEventLogger:
    """Logger for ontology build events.

    Every event carries an ISO 8601 UTC timestamp and the build id. A failed
    write prints a warning and never interrupts the build.

    Example:
        events = BuildEventLogger(Path("logs/build.jsonl"))
        events.log_build_start(source="sqlite", config=config.to_dict())
        events.log_stage("classes", count=42, seconds=0.01)
        events.log_build_end(stats, seconds=0.2)
        events.close()
    """

    def __init__(
        self,
        log_path: Path | str,
        build_id: Optional[str] = None,
    ):
        """Initialize build event logger.

        Args:
            log_path: Path to JSONL output file (appended to)
            build_id: Build identifier (random when omitted)
        """
        self.log_path = Path(log_path)
        self.build_id = build_id or f"build-{uuid.uuid4().hex[:12]}"

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self.log_file = open(self.log_path, "a", encoding="utf-8")

    def _timestamp(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    def _write_event(self, event: dict[str, Any]) -> None:
        try:
            if "timestamp" not in event:
                event["timestamp"] = self._timestamp()
            if "build_id" not in event:
                event["build_id"] = self.build_id

            json.dump(event, self.log_file, ensure_ascii=False)
            self.log_file.write("\n")
            self.log_file.flush()
        except Exception as e:
            print(f"Warning: Failed to write build event: {e}")

    def log_build_start(self, source: str, config: Optional[dict] = None) -> None:
        """Log the start of a build.

        Args:
            source: Source type or location being read
            config: Schema configuration used for the build
        """
        self._write_event({
            "event": "build_start",
            "source": source,
            "config": config,
        })

    def log_stage(self, stage: str, count: int, seconds: float) -> None:
        """Log a finished build stage (classes, properties, restrictions, merge)."""
        self._write_event({
            "event": "stage",
            "stage": stage,
            "count": count,
            "seconds": round(seconds, 6),
        })

    def log_build_end(self, stats: dict[str, int], seconds: float) -> None:
        """Log the end of a build with the model statistics."""
        self._write_event({
            "event": "build_end",
            "stats": stats,
            "seconds": round(seconds, 6),
        })

    def log_cache(self, path: str, action: str, reason: Optional[str] = None) -> None:
        """Log a cache decision.

        Args:
            path: Cache snapshot path
            action: 'hit', 'miss', 'rebuild', 'write' or 'write_failed'
            reason: Why the cache was bypassed or a write failed
        """
        self._write_event({
            "event": "cache",
            "path": path,
            "action": action,
            "reason": reason,
        })

    def log_vocabulary(self, vocabulary_uri: str, concept_count: int) -> None:
        """Log a vocabulary resolution."""
        self._write_event({
            "event": "vocabulary",
            "vocabulary": vocabulary_uri,
            "concept_count": concept_count,
        })

    def close(self) -> None:
        """Close log file."""
        if hasattr(self, 'log_file') and self.log_file and not self.log_file.closed:
            self.log_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __del__(self):
        """Ensure log file is closed on deletion."""
        self.close()
