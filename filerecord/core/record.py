"""
filerecord Record — in-memory view of one file (or directory) on disk.

A record holds a relative ``path``, an opaque ``body`` and the attributes
parsed from the path. The attributes are never authoritative on their own:
assigning a path re-parses them, and assigning an attribute re-derives the
path (patching the existing one, or synthesizing one when possible).

Each record class is bound to exactly one RecordStore through its
``objects`` class attribute; per-attribute properties are installed on the
class once, when the store is created.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Union

from filerecord.core.codec import normalize_path, parse, patch, synthesize
from filerecord.engine.errors import LocationSpecError

if TYPE_CHECKING:
    from filerecord.core.schema import RecordSchema
    from filerecord.core.store import RecordStore, Rejected

logger = logging.getLogger("filerecord.core.record")

Body = Union[bytes, bytearray, str, None]


class Record:
    """A file-backed record. Use ``store.new()`` or a record class to build one."""

    objects: "RecordStore" = None  # set once per class by RecordStore

    def __init__(
        self,
        path: Optional[str] = None,
        body: Body = b"",
        attributes: Optional[Mapping[str, Any]] = None,
        **extra: Any,
    ):
        if type(self).objects is None:
            raise TypeError(
                f"{type(self).__name__} is not bound to a RecordStore; "
                f"create records through a store or a @record_type class"
            )
        self._path: Optional[str] = None
        self._attributes: Dict[str, Optional[str]] = dict.fromkeys(self.attribute_names)
        self._body: bytes = b""
        self.is_new: bool = True
        self.errors: List[str] = []

        self.body = body
        if path:
            self.path = path
        merged = dict(attributes or {})
        merged.update(extra)
        if merged:
            self.apply_attributes(merged)

    # -------------------------------------------------------------------
    # Schema access
    # -------------------------------------------------------------------

    @property
    def store(self) -> "RecordStore":
        return type(self).objects

    @property
    def schema(self) -> "RecordSchema":
        return type(self).objects.schema

    @property
    def attribute_names(self):
        return self.schema.attribute_names

    # -------------------------------------------------------------------
    # Path / attributes
    # -------------------------------------------------------------------

    @property
    def path(self) -> Optional[str]:
        return self._path

    @path.setter
    def path(self, new_path: Optional[str]) -> None:
        if new_path is None:
            self._path = None
            self._attributes = dict.fromkeys(self.attribute_names)
            return
        new_path = normalize_path(new_path)
        self._attributes = parse(new_path, self.schema.location, record_type=self.schema.name)
        self._path = new_path

    @property
    def attributes(self) -> Dict[str, Optional[str]]:
        """Copy of the attribute map; mutate through accessors or apply_attributes()."""
        return dict(self._attributes)

    def apply_attributes(self, attributes: Mapping[str, Any]) -> "Record":
        """
        Assign several attributes and re-derive the path once.

        ``path`` and ``body`` keys are honoured; other unknown keys are ignored.
        """
        attributes = dict(attributes)
        if "path" in attributes:
            self.path = attributes.pop("path")
        if "body" in attributes:
            self.body = attributes.pop("body")

        pending = dict(self._attributes)
        for key, value in attributes.items():
            if key not in pending:
                logger.debug(f"Ignoring unknown attribute '{key}' for {self.schema.name}")
                continue
            pending[key] = None if value is None else str(value)
        self._commit(pending)
        return self

    def update_attribute(self, name: str, value: Any) -> "Record":
        return self.apply_attributes({name: value})

    def update_attributes(self, attributes: Mapping[str, Any]) -> Union["Record", "Rejected"]:
        """Apply attributes, move the backing file if the path changed, and save."""
        return self.store.update_attributes(self, attributes)

    def _commit(self, pending: Dict[str, Optional[str]]) -> None:
        location = self.schema.location
        if self._path is not None:
            # path setter re-parses, so a rejected value leaves self untouched
            self.path = patch(self._path, location, pending, record_type=self.schema.name)
            return

        candidate = synthesize(location.spec, pending)
        if candidate is not None and location.matches(candidate):
            self.path = candidate
        else:
            self._attributes = pending

    def __getitem__(self, name: str) -> Optional[str]:
        if name not in self._attributes:
            raise KeyError(name)
        return self._attributes[name]

    def __setitem__(self, name: str, value: Any) -> None:
        if name not in self._attributes:
            raise KeyError(name)
        self.apply_attributes({name: value})

    def __contains__(self, name: str) -> bool:
        return name in self._attributes

    # -------------------------------------------------------------------
    # Body
    # -------------------------------------------------------------------

    @property
    def body(self) -> bytes:
        return self._body

    @body.setter
    def body(self, value: Body) -> None:
        if value is None:
            value = b""
        elif isinstance(value, str):
            value = value.encode("utf-8")
        self._body = bytes(value)

    @property
    def text(self) -> str:
        return self._body.decode("utf-8")

    # -------------------------------------------------------------------
    # Persistence (delegates to the store)
    # -------------------------------------------------------------------

    def save(self) -> Union["Record", "Rejected"]:
        return self.store.save(self)

    def destroy(self) -> Union["Record", "Rejected"]:
        return self.store.delete(self._path)

    def refresh(self) -> "Record":
        return self.store.refresh(self)

    def entries(self, subdir: Optional[str] = None) -> Optional[List[str]]:
        return self.store.entries(self, subdir)

    def ctime(self) -> Optional[datetime]:
        return self.store.ctime(self._path)

    def mtime(self) -> Optional[datetime]:
        return self.store.mtime(self._path)

    created_at = ctime
    updated_at = mtime

    @property
    def full_path(self) -> Optional[Path]:
        if self._path is None:
            return None
        return self.store.expand(self._path)

    @property
    def new_record(self) -> bool:
        """True while the record has no path at all."""
        return self._path is None

    # -------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------

    @property
    def id(self) -> Optional[str]:
        """External identifier: the path with its extension dot encoded."""
        from filerecord.helpers import encode_id

        if self._path is None:
            return None
        return encode_id(self._path)

    def to_param(self) -> Optional[str]:
        return self.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_type": self.schema.name,
            "path": self._path,
            "id": self.id,
            "attributes": dict(self._attributes),
            "is_new": self.is_new,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        if self._path is None or other._path is None:
            return self is other
        return self.store is other.store and self._path == other._path

    __hash__ = None

    def __str__(self) -> str:
        return self.id or ""

    def __repr__(self) -> str:
        attrs = ", ".join(f"{k}={v}" for k, v in self._attributes.items())
        if attrs:
            return f"<{type(self).__name__}:'{self._path}' {attrs}>"
        return f"<{type(self).__name__}:'{self._path}'>"


# ---------------------------------------------------------------------------
# Accessor generation (once per record class)
# ---------------------------------------------------------------------------

def attribute_property(name: str) -> property:
    """Property reading/writing one location attribute."""

    def getter(self: Record) -> Optional[str]:
        return self._attributes[name]

    def setter(self: Record, value: Any) -> None:
        self.apply_attributes({name: value})

    prop = property(getter, setter, doc=f"Location attribute '{name}'.")
    prop.fget._filerecord_attribute = name
    return prop


def _is_accessor(member: Any, name: str) -> bool:
    return (
        isinstance(member, property)
        and getattr(member.fget, "_filerecord_attribute", None) == name
    )


_MISSING = object()

# instance attributes assigned in Record.__init__
_INSTANCE_ATTRIBUTES = frozenset({"is_new", "errors"})


def install_accessors(record_class: type, names, record_type: str) -> None:
    """Attach one property per attribute name; refuse to shadow real members."""
    for name in names:
        existing = getattr(record_class, name, _MISSING)
        if existing is _MISSING and not name.startswith("_") and name not in _INSTANCE_ATTRIBUTES:
            setattr(record_class, name, attribute_property(name))
        elif not _is_accessor(existing, name):
            raise LocationSpecError(
                f"Placeholder '{name}' collides with {record_class.__name__}.{name}",
                record_type=record_type,
            )
