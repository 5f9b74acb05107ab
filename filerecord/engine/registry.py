"""
filerecord Schema Registry — one RecordStore per record type name.

Filled at registration time (``@record_type`` classes, ``bootstrap()`` from
filerecord.yaml). Associations resolve their target type through it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Optional

from filerecord.engine.errors import RecordTypeNotFoundError
from filerecord.engine.logging import log, log_schema_registered

if TYPE_CHECKING:
    from filerecord.core.store import RecordStore

logger = logging.getLogger("filerecord.engine.registry")


class SchemaRegistry:
    """
    In-memory registry of record stores.

    Usage:
        registry = SchemaRegistry()
        registry.register(store)
        scripts = registry.resolve("scripts")
    """

    def __init__(self):
        self._stores: Dict[str, "RecordStore"] = {}

    def register(self, store: "RecordStore") -> None:
        """Register a store under its schema name, replacing any previous one."""
        name = store.schema.name
        if name in self._stores and self._stores[name] is not store:
            logger.warning(f"Record type '{name}' re-registered; replacing previous store")
        self._stores[name] = store

        schema = store.schema
        log(log_schema_registered(
            record_type=name,
            glob_pattern=schema.glob_pattern,
            match_pattern=schema.match_pattern,
            base_directory=str(schema.base_directory),
            attributes=list(schema.attribute_names),
        ))
        logger.debug(f"Registered record type: {name} ({schema.glob_pattern})")

    def unregister(self, name: str) -> None:
        self._stores.pop(name, None)

    def resolve(self, name: str) -> Optional["RecordStore"]:
        return self._stores.get(name)

    def resolve_or_raise(self, name: str) -> "RecordStore":
        store = self.resolve(name)
        if store is None:
            raise RecordTypeNotFoundError(
                f"Record type not registered: {name}",
                record_type=name,
            )
        return store

    def names(self) -> List[str]:
        return sorted(self._stores)

    def get_all(self) -> List["RecordStore"]:
        return [self._stores[name] for name in self.names()]

    def contains(self, name: str) -> bool:
        return name in self._stores

    @property
    def count(self) -> int:
        return len(self._stores)

    def clear(self) -> None:
        self._stores.clear()

    def to_summary(self) -> Dict[str, str]:
        """Record type name → glob pattern."""
        return {name: self._stores[name].schema.glob_pattern for name in self.names()}


# Global registry singleton
schema_registry = SchemaRegistry()
