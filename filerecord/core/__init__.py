"""filerecord core — location compiler, path codec, records and stores."""

from filerecord.core.location import (  # noqa: F401
    DIRECTORY,
    RECURSIVE_WILDCARD,
    WILDCARD,
    CompiledLocation,
    LocationSpec,
    Placeholder,
    compile_location,
)
from filerecord.core.codec import derive_path, parse, patch, synthesize  # noqa: F401
from filerecord.core.record import Record  # noqa: F401
from filerecord.core.schema import RecordSchema  # noqa: F401
from filerecord.core.store import ALL, FIRST, LAST, RecordStore, Rejected, Selector  # noqa: F401
from filerecord.core.associations import (  # noqa: F401
    Association,
    RelationResolver,
    belongs_to,
    has_many,
    has_one,
)
