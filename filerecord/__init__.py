"""
filerecord — treat a directory tree as a structured record store.

A record type is declared by a location specification; its files are
enumerated with a glob, parsed into attributes with an anchored regex, and
written back to paths synthesized or patched from those attributes.

    from filerecord import RecordSchema, RecordStore

    scripts = RecordStore(RecordSchema.define(
        "scripts", ["scripts", "*", "{name}", "rb"], "/tmp/store"))
    scripts.find({"name": "helper"})
"""

__version__ = "0.3.0"

from filerecord.engine.errors import (  # noqa: F401
    AssociationError,
    FileRecordConfigError,
    FileRecordError,
    InvalidBaseDirectoryError,
    LocationSpecError,
    PathMismatchError,
    RecordExistsError,
    RecordNotFoundError,
    RecordTypeNotFoundError,
    UngeneratablePathError,
)
from filerecord.core import (  # noqa: F401
    ALL,
    DIRECTORY,
    FIRST,
    LAST,
    Association,
    CompiledLocation,
    LocationSpec,
    Placeholder,
    Record,
    RecordSchema,
    RecordStore,
    Rejected,
    Selector,
    belongs_to,
    compile_location,
    has_many,
    has_one,
)
from filerecord.decorators.core import record_type  # noqa: F401
from filerecord.engine.registry import schema_registry  # noqa: F401
