"""
filerecord Decorators — @record_type for declaring record classes.

The decorator:
1. Compiles the location and prepares the base directory (RecordSchema)
2. Binds a RecordStore to the class (``Klass.objects``) and installs one
   property per location attribute
3. Collects Association descriptors from the class body
4. Registers methods named after lifecycle events as hooks
5. Registers the store in the schema registry

Example:
    @record_type(location=["scripts", "*", "{name}", "rb"], base_directory="/srv/files")
    class Script(Record):
        def before_save(self):
            return bool(self.body)

    Script.objects.find({"name": "helper"})
"""

from __future__ import annotations

import inspect
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from filerecord.core.associations import Association
from filerecord.core.record import Record
from filerecord.core.schema import RecordSchema
from filerecord.core.store import RecordStore
from filerecord.decorators.record import RecordEvent, RecordEventManager, get_record_event_manager
from filerecord.engine.registry import SchemaRegistry, schema_registry
from filerecord.utilities.utils import tableize

logger = logging.getLogger("filerecord.decorators")


def default_location(class_name: str) -> List[Optional[str]]:
    """[<table name>, "*", no extension] — any file one level below the table dir."""
    return [tableize(class_name), "*", None]


def default_base_directory() -> Path:
    """Configured store.base_directory, relative paths taken from the project root."""
    from filerecord.engine.config import get_config, get_project_root

    base = Path(get_config().store.base_directory)
    if not base.is_absolute():
        base = get_project_root() / base
    return base


def _collect_associations(klass: type) -> List[Association]:
    found = []
    for base in reversed(klass.__mro__):
        for value in vars(base).values():
            if isinstance(value, Association) and value not in found:
                found.append(value)
    return found


def _register_event_methods(klass: type, type_name: str, events: RecordEventManager) -> int:
    count = 0
    for event in sorted(RecordEvent.ALL):
        method = getattr(klass, event, None)
        if method is not None and inspect.isfunction(method):
            events.register_hook(type_name, event, method)
            count += 1
    return count


def record_type(
    cls: Optional[type] = None,
    *,
    location: Optional[Iterable[Any]] = None,
    base_directory: Optional[Union[str, Path]] = None,
    name: Optional[str] = None,
    registry: Optional[SchemaRegistry] = None,
    events: Optional[RecordEventManager] = None,
) -> Any:
    """Decorator turning a Record subclass into a registered record type."""

    def decorator(klass: type) -> type:
        if not (isinstance(klass, type) and issubclass(klass, Record)):
            raise TypeError(f"@record_type expects a Record subclass, got {klass!r}")

        type_name = name or klass.__name__
        tokens = list(location) if location is not None else default_location(klass.__name__)
        base = base_directory if base_directory is not None else default_base_directory()

        schema = RecordSchema.define(
            type_name,
            tokens,
            base,
            associations=_collect_associations(klass),
        )
        manager = events if events is not None else get_record_event_manager()
        store = RecordStore(schema, record_class=klass, events=manager)
        hooks = _register_event_methods(klass, type_name, manager)
        (registry if registry is not None else schema_registry).register(store)

        logger.debug(
            f"Registered record type {type_name}: {schema.glob_pattern} "
            f"({len(schema.associations)} associations, {hooks} hooks)"
        )
        return klass

    if cls is not None:
        return decorator(cls)
    return decorator
