"""
filerecord Error Hierarchy — Structured exceptions for the record store.

Every error carries the record type, the relative path and the operation
that failed, so a failure can be logged as a single JSON object.

Hierarchy:
    FileRecordError
    ├── RecordNotFoundError        — No backing file/directory at a path
    ├── RecordExistsError          — Create/save would overwrite an existing record
    ├── PathMismatchError          — Path does not satisfy the type's match pattern
    ├── UngeneratablePathError     — No path can be synthesized (wildcards, no path given)
    ├── InvalidBaseDirectoryError  — Base directory exists and is not a directory
    ├── LocationSpecError          — Malformed location specification
    ├── AssociationError           — Association misdeclared or target type unknown
    ├── RecordTypeNotFoundError    — Record type not present in the registry
    └── FileRecordConfigError      — Invalid filerecord.yaml
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class FileRecordError(Exception):
    """
    Base error for all filerecord failures.
    All context is kept serializable to JSON.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.record_type: Optional[str] = context.get("record_type")
        self.path: Optional[str] = context.get("path")
        self.operation: Optional[str] = context.get("operation")
        self.error_type: str = self.__class__.__name__
        self.context: Dict[str, Any] = context
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to a JSON-compatible dict for logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "record_type": self.record_type,
            "path": self.path,
            "operation": self.operation,
            "timestamp": self.timestamp,
            "context": {
                k: str(v) for k, v in self.context.items()
                if k not in ("record_type", "path", "operation")
            },
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    def __repr__(self) -> str:
        parts = [f"{self.error_type}: {self.message}"]
        if self.record_type:
            parts.append(f"record_type={self.record_type}")
        if self.path is not None:
            parts.append(f"path={self.path}")
        return " | ".join(parts)


class RecordNotFoundError(FileRecordError):
    """Operation targets a path with no backing file or directory."""
    pass


class RecordExistsError(FileRecordError):
    """A record already exists at the target path."""
    pass


class PathMismatchError(FileRecordError):
    """
    A path fails the record type's anchored match pattern.
    Includes the pattern that rejected it.
    """

    def __init__(self, message: str, **context: Any):
        self.pattern: Optional[str] = context.get("pattern")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["pattern"] = self.pattern
        return d


class UngeneratablePathError(FileRecordError):
    """The location contains wildcards and no explicit path was supplied."""
    pass


class InvalidBaseDirectoryError(FileRecordError):
    """The registered base path exists and is not a directory."""
    pass


class LocationSpecError(FileRecordError):
    """Location specification is malformed (duplicate names, two '**', ...)."""

    def __init__(self, message: str, **context: Any):
        self.tokens: Optional[list] = context.get("tokens")
        super().__init__(message, **context)


class AssociationError(FileRecordError):
    """Association declared without from/to, or its target type is unknown."""

    def __init__(self, message: str, **context: Any):
        self.association: Optional[str] = context.get("association")
        self.target: Optional[str] = context.get("target")
        super().__init__(message, **context)


class RecordTypeNotFoundError(FileRecordError):
    """Record type name not found in the registry."""
    pass


class FileRecordConfigError(FileRecordError):
    """Configuration error — invalid filerecord.yaml."""
    pass
