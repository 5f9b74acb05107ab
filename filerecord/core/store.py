"""
filerecord Record Store — CRUD and find over one record type's base directory.

Handles:
- Enumeration with the compiled glob, filtered by the anchored match pattern
- Exact-match conjunctive conditions (no query language)
- Create / save / update / delete with collision checks
- Relocation of the backing file when identifying attributes change
- before_* / after_* lifecycle hooks and structured operation logs

All operations are synchronous blocking filesystem calls. There is no
locking: check-then-write sequences (save of a new record, create) are not
atomic, so concurrent writers on the same path can interleave.
"""

from __future__ import annotations

import enum
import glob
import logging
import os
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from filerecord.core.codec import derive_path, is_contained, normalize_path, parse, synthesize
from filerecord.core.record import Record, install_accessors
from filerecord.core.schema import RecordSchema
from filerecord.decorators.record import RecordEventManager, get_record_event_manager
from filerecord.engine.errors import (
    AssociationError,
    FileRecordError,
    PathMismatchError,
    RecordExistsError,
    RecordNotFoundError,
    UngeneratablePathError,
)
from filerecord.engine.logging import log, log_record_operation, log_record_performance

logger = logging.getLogger("filerecord.core.store")


class Selector(enum.Enum):
    """Non-literal find selectors."""
    ALL = "all"
    FIRST = "first"
    LAST = "last"


ALL = Selector.ALL
FIRST = Selector.FIRST
LAST = Selector.LAST


@dataclass
class Rejected:
    """
    Validation-style failure of save/delete.

    Falsy, so ``if not store.save(record)`` reads naturally. The reason is
    also appended to ``record.errors``.
    """
    record: Record
    reason: str
    error: Optional[FileRecordError] = None

    def __bool__(self) -> bool:
        return False


class RecordStore:
    """
    Store for one record type.

    Usage:
        schema = RecordSchema.define("scripts", ["scripts", "*", "{name}", "rb"], "/tmp/store")
        scripts = RecordStore(schema)
        helper = scripts.find({"name": "helper"})
        scripts.create("scripts/util/new.rb", {"body": "puts 1"})
    """

    def __init__(
        self,
        schema: RecordSchema,
        record_class: Optional[type] = None,
        events: Optional[RecordEventManager] = None,
    ):
        self.schema = schema
        self._events = events
        self.record_class = self._bind_record_class(record_class)

    def _bind_record_class(self, record_class: Optional[type]) -> type:
        if (
            record_class is None
            or record_class is Record
            or record_class.__dict__.get("objects") is not None
        ):
            # one store per class: generate a fresh subclass to bind
            base = record_class or Record
            class_name = "".join(part.capitalize() for part in self.schema.name.split("_")) or "Anonymous"
            record_class = type(f"{class_name}{base.__name__}", (base,), {})
        install_accessors(record_class, self.schema.attribute_names, self.schema.name)
        record_class.objects = self
        return record_class

    @property
    def name(self) -> str:
        return self.schema.name

    @property
    def events(self) -> RecordEventManager:
        return self._events if self._events is not None else get_record_event_manager()

    def __repr__(self) -> str:
        return f"<RecordStore({self.schema.name} @ {self.schema.base_directory}/{self.schema.glob_pattern})>"

    # -------------------------------------------------------------------
    # Filesystem primitives
    # -------------------------------------------------------------------

    def expand(self, path: str) -> Path:
        """Absolute path inside the base directory. Raises PathMismatchError for escaping paths."""
        rel = normalize_path(path)
        base = self.schema.base_directory
        full = base / rel
        # lexical check: symlinks placed inside the store are followed as is
        if not is_contained(rel) or not Path(os.path.normpath(full)).is_relative_to(base):
            raise PathMismatchError(
                f"{rel!r} is outside {base}",
                record_type=self.schema.name,
                path=rel,
                pattern=self.schema.match_pattern,
                operation="expand",
            )
        return full

    def exists(self, path: Optional[str]) -> bool:
        """True iff a file or directory exists at base/path."""
        if not path or not is_contained(path):
            return False
        return self.expand(path).exists()

    def _is_backing(self, full: Path) -> bool:
        return full.is_dir() if self.schema.is_directory else full.is_file()

    def ctime(self, path: Optional[str]) -> Optional[datetime]:
        if not self.exists(path):
            return None
        return datetime.fromtimestamp(self.expand(path).stat().st_ctime)

    def mtime(self, path: Optional[str]) -> Optional[datetime]:
        if not self.exists(path):
            return None
        return datetime.fromtimestamp(self.expand(path).stat().st_mtime)

    def _read_body(self, path: str) -> bytes:
        if self.schema.is_directory:
            return b""
        return self.expand(path).read_bytes()

    # -------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------

    def get(self, path: str) -> Record:
        """Load the record at ``path``. Raises RecordNotFoundError."""
        path = normalize_path(path)
        full = self.expand(path)
        if not full.exists() or not self._is_backing(full):
            raise RecordNotFoundError(
                f"Couldn't find {self.schema.name} at path={path}",
                record_type=self.schema.name,
                path=path,
                operation="get",
            )
        return self._instantiate(path)

    instance = get

    def _instantiate(self, path: str) -> Record:
        record = self.record_class(path=path)
        record.body = self._read_body(path)
        record.is_new = False
        return record

    def _enumerate(self) -> List[str]:
        """Relative paths of every backing entry, in glob listing order."""
        base = self.schema.base_directory
        location = self.schema.location
        paths = []
        for found in glob.glob(location.glob_pattern, root_dir=base, recursive=True):
            rel = normalize_path(found)
            if not location.matches(rel):
                continue
            if not self._is_backing(base / rel):
                continue
            paths.append(rel)
        return paths

    def _satisfies(self, attributes: Mapping[str, Optional[str]], conditions: Mapping[str, Any]) -> bool:
        for key, expected in conditions.items():
            if key not in attributes:
                return False
            if attributes[key] != (None if expected is None else str(expected)):
                return False
        return True

    def _candidates(self, conditions: Optional[Mapping[str, Any]] = None) -> List[str]:
        paths = self._enumerate()
        if not conditions:
            return paths
        location = self.schema.location
        return [
            p for p in paths
            if self._satisfies(parse(p, location, record_type=self.schema.name), conditions)
        ]

    def find_all(self, conditions: Optional[Mapping[str, Any]] = None) -> List[Record]:
        """Every record, optionally filtered by exact attribute equality."""
        return [self._instantiate(p) for p in self._candidates(conditions)]

    def find(
        self,
        selector: Union[Selector, Mapping[str, Any], str, "os.PathLike[str]"] = ALL,
        conditions: Optional[Mapping[str, Any]] = None,
    ) -> Union[Record, List[Record], None]:
        """
        Find records.

        Args:
            selector: ALL, FIRST, LAST, a conditions dict, or a literal path.
            conditions: Extra attribute equality filter for ALL/FIRST/LAST
                and literal selectors.

        Returns:
            A list for ALL and dict selectors, otherwise a record or None.
        """
        if isinstance(selector, Selector):
            records = self.find_all(conditions)
            if selector is ALL:
                return records
            if not records:
                return None
            return records[0] if selector is FIRST else records[-1]

        if isinstance(selector, Mapping):
            merged = dict(selector)
            merged.update(conditions or {})
            return self.find_all(merged)

        if isinstance(selector, (str, os.PathLike)):
            return self._find_literal(normalize_path(selector), conditions)

        raise TypeError(f"Unsupported selector for {self.schema.name}.find: {selector!r}")

    def _find_literal(self, literal: str, conditions: Optional[Mapping[str, Any]]) -> Optional[Record]:
        matching = [p for p in self._candidates(conditions) if literal in p]
        if len(matching) == 1:
            return self._instantiate(matching[0])
        if is_contained(literal) and self.schema.location.matches(literal):
            return self.get(literal)
        logger.debug(
            f"{self.schema.name}.find({literal!r}): {len(matching)} candidates, no exact match"
        )
        return None

    def all(self) -> List[Record]:
        return self.find(ALL)

    def first(self) -> Optional[Record]:
        return self.find(FIRST)

    def last(self) -> Optional[Record]:
        return self.find(LAST)

    def where(self, **conditions: Any) -> List[Record]:
        return self.find_all(conditions)

    def count(self, conditions: Optional[Mapping[str, Any]] = None) -> int:
        return len(self._candidates(conditions))

    def refresh(self, record: Record) -> Record:
        """Re-read ``body`` from disk. Path and attributes are untouched."""
        if not self.exists(record.path):
            raise RecordNotFoundError(
                f"Couldn't find {self.schema.name} at path={record.path}",
                record_type=self.schema.name,
                path=record.path,
                operation="refresh",
            )
        record.body = self._read_body(record.path)
        return record

    def entries(self, record: Record, subdir: Optional[str] = None) -> Optional[List[str]]:
        """Names inside the record's directory (or the directory holding its file)."""
        if record.path is None:
            return None
        if self.schema.is_directory:
            directory = self.expand(record.path)
        else:
            directory = self.expand(record.path).parent
        if subdir:
            directory = directory / subdir
        if not directory.is_dir():
            return None
        return sorted(os.listdir(directory))

    # -------------------------------------------------------------------
    # Path generation
    # -------------------------------------------------------------------

    def path_for(self, attributes: Mapping[str, Any]) -> str:
        """Path a record with ``attributes`` would live at."""
        path = synthesize(self.schema.location.spec, attributes)
        if path is None:
            raise UngeneratablePathError(
                f"Cannot generate a {self.schema.name} path: location "
                f"{self.schema.glob_pattern!r} contains wildcards",
                record_type=self.schema.name,
                operation="path_for",
            )
        return path

    def resolve_path(self, record: Record) -> str:
        """Path the record's current attributes lead to, without assigning it."""
        return derive_path(
            record.path, self.schema.location, record.attributes, record_type=self.schema.name
        )

    def update_path(self, record: Record) -> str:
        """Re-derive and assign the record's path from its attributes."""
        record.path = self.resolve_path(record)
        return record.path

    # -------------------------------------------------------------------
    # Write
    # -------------------------------------------------------------------

    def new(
        self,
        path: Optional[str] = None,
        body: Any = b"",
        attributes: Optional[Mapping[str, Any]] = None,
        **extra: Any,
    ) -> Record:
        """Build an unsaved record."""
        return self.record_class(path=path, body=body, attributes=attributes, **extra)

    def create(
        self,
        path: Optional[str] = None,
        attributes: Optional[Mapping[str, Any]] = None,
        body: Any = None,
    ) -> Union[Record, Rejected]:
        """
        Create and persist a record.

        An empty path means "derive it from the attributes".
        Raises RecordExistsError when something already exists at the
        explicit or resolved path.
        """
        if path and self.exists(path):
            raise RecordExistsError(
                f"{self.schema.name} already exists at {path}",
                record_type=self.schema.name,
                path=normalize_path(path),
                operation="create",
            )
        record = self.new(path=path or None, body=body, attributes=attributes)
        result = self.save(record)
        if isinstance(result, Rejected) and isinstance(result.error, RecordExistsError):
            raise result.error
        return result

    def update(self, path: str, attributes: Optional[Mapping[str, Any]] = None) -> Union[Record, Rejected]:
        """Load (or start) the record at ``path``, apply attributes and save."""
        if self.exists(path):
            record = self.get(path)
        else:
            record = self.new(path=path)
        record.apply_attributes(attributes or {})
        return self.save(record)

    def save(self, record: Record) -> Union[Record, Rejected]:
        """
        Persist ``record``.

        A new record whose resolved path is already occupied is rejected,
        never overwritten. The previous path of a moved record is left
        alone; see update_attributes() for relocation.
        """
        started = time.monotonic()
        name = self.schema.name
        action = "create" if record.is_new else "update"

        if not self.events.run_before(name, "save", record):
            return self._reject(record, f"before_save hook aborted save of {name}", "save")
        if not self.events.run_before(name, action, record):
            return self._reject(record, f"before_{action} hook aborted save of {name}", "save")

        # a rejected record keeps the path it had before save
        target = self.resolve_path(record)
        if record.is_new and self.exists(target):
            error = RecordExistsError(
                f"A {name} already exists at path='{target}'",
                record_type=name,
                path=target,
                operation="save",
            )
            return self._reject(record, error.message, "save", error)
        record.path = target

        full = self.expand(record.path)
        full.parent.mkdir(parents=True, exist_ok=True)
        if self.schema.is_directory:
            full.mkdir(exist_ok=True)
        else:
            full.write_bytes(record.body)
        record.is_new = False

        self.events.fire(name, f"after_{action}", record)
        self.events.fire(name, "after_save", record)
        self._log(action, record.path, started)
        logger.debug(f"Saved {name} at {record.path}")
        return record

    def update_attributes(self, record: Record, attributes: Mapping[str, Any]) -> Union[Record, Rejected]:
        """
        Apply attributes and move the backing file/directory when the path changes.

        The new location is written before the old one is removed, and an
        occupied new location is refused before anything is touched. When
        save is rejected (or raises), a moved directory is renamed back and
        the record keeps its old path.
        """
        old_path = record.path
        record.apply_attributes(attributes)
        moved = old_path is not None and record.path != old_path

        if moved and self.exists(record.path):
            target = record.path
            record.path = old_path
            error = RecordExistsError(
                f"Cannot move {self.schema.name} from '{old_path}' to '{target}': path is taken",
                record_type=self.schema.name,
                path=target,
                operation="update_attributes",
            )
            return self._reject(record, error.message, "update_attributes", error)

        new_path = record.path
        renamed = False
        if moved and self.schema.is_directory and self.exists(old_path):
            target = self.expand(new_path)
            target.parent.mkdir(parents=True, exist_ok=True)
            os.rename(self.expand(old_path), target)
            renamed = True
            logger.info(f"Moved {self.schema.name} directory {old_path} → {new_path}")

        result = None
        try:
            result = self.save(record)
        finally:
            # hook abort or failed write: put the directory and the path back
            if moved and not result:
                if renamed:
                    os.rename(self.expand(new_path), self.expand(old_path))
                    logger.info(f"Moved {self.schema.name} directory back {new_path} → {old_path}")
                record.path = old_path
        if not result:
            return result

        if moved and not self.schema.is_directory and self.exists(old_path):
            self.expand(old_path).unlink()
            logger.info(f"Moved {self.schema.name} {old_path} → {record.path}")
        return result

    def delete(self, path: Optional[str]) -> Union[Record, Rejected]:
        """
        Remove the file (or empty directory) at ``path``.

        Returns the record as it was before removal. Raises
        RecordNotFoundError when nothing backs ``path``.
        """
        started = time.monotonic()
        name = self.schema.name
        if path is not None:
            path = normalize_path(path)
        if not path or not self.exists(path):
            raise RecordNotFoundError(
                f"Couldn't find {name} with path={path}",
                record_type=name,
                path=path,
                operation="delete",
            )
        record = self.get(path)

        if not self.events.run_before(name, "destroy", record):
            return self._reject(record, f"before_destroy hook aborted delete of {name}", "delete")

        full = self.expand(path)
        if self.schema.is_directory:
            full.rmdir()
        else:
            full.unlink()

        self.events.fire(name, "after_destroy", record)
        self._log("delete", path, started)
        logger.debug(f"Deleted {name} at {path}")
        return record

    # -------------------------------------------------------------------
    # Associations
    # -------------------------------------------------------------------

    def related(self, record: Record, association_name: str) -> Union[Record, List[Record], None]:
        """Resolve one of the schema's associations for ``record``."""
        from filerecord.core.associations import relation_resolver

        association = self.schema.association(association_name)
        if association is None:
            raise AssociationError(
                f"{self.schema.name} has no association '{association_name}'",
                record_type=self.schema.name,
                association=association_name,
            )
        return relation_resolver.resolve(record, association)

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------

    def _reject(
        self,
        record: Record,
        reason: str,
        operation: str,
        error: Optional[FileRecordError] = None,
    ) -> Rejected:
        record.errors.append(reason)
        logger.info(f"Rejected {operation} of {self.schema.name}: {reason}")
        log(log_record_operation(
            operation=operation,
            record_type=self.schema.name,
            path=record.path,
            success=False,
            error=reason,
        ))
        return Rejected(record=record, reason=reason, error=error)

    def _log(self, operation: str, path: Optional[str], started: float) -> None:
        duration_ms = round((time.monotonic() - started) * 1000, 3)
        log(log_record_operation(
            operation=operation,
            record_type=self.schema.name,
            path=path,
            success=True,
            duration_ms=duration_ms,
        ))
        log(log_record_performance(operation, self.schema.name, duration_ms))

    def describe(self) -> Dict[str, Any]:
        from filerecord.core.location import describe

        info = describe(self.schema.location)
        info["name"] = self.schema.name
        info["base_directory"] = str(self.schema.base_directory)
        return info
