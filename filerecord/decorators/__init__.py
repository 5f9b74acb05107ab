"""
filerecord decorators — lifecycle hooks and the @record_type class decorator.

``record_type`` lives in ``filerecord.decorators.core``; it is not imported
here because the store itself depends on the hook manager in this package.
"""

from filerecord.decorators.record import (  # noqa: F401
    RecordEvent,
    RecordEventManager,
    RecordHook,
    get_record_event_manager,
)
