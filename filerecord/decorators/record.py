"""
filerecord Record Hooks — before/after callbacks around store operations.

Provides:
    - RecordEvent: the lifecycle event names
    - RecordEventManager: registry + dispatcher, keyed by record type name

Semantics:
    - before_* hooks run in priority order; one returning exactly False
      aborts the operation (the store returns a Rejected result)
    - after_* hooks run in priority order; a failing hook is logged and
      reported in the result list, the operation still counts as done

The @record_type decorator registers methods named after events
(``def before_save(self): ...``) automatically.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger("filerecord.decorators.record")


# ---------------------------------------------------------------------------
# Event types
# ---------------------------------------------------------------------------

class RecordEvent:
    """Enumeration of record lifecycle events."""
    BEFORE_SAVE = "before_save"
    AFTER_SAVE = "after_save"
    BEFORE_CREATE = "before_create"
    AFTER_CREATE = "after_create"
    BEFORE_UPDATE = "before_update"
    AFTER_UPDATE = "after_update"
    BEFORE_DESTROY = "before_destroy"
    AFTER_DESTROY = "after_destroy"

    ALL = {
        BEFORE_SAVE, AFTER_SAVE,
        BEFORE_CREATE, AFTER_CREATE,
        BEFORE_UPDATE, AFTER_UPDATE,
        BEFORE_DESTROY, AFTER_DESTROY,
    }


@dataclass
class RecordHook:
    """A registered lifecycle callback for a record type."""
    record_type: str                 # "scripts"
    event: str                       # "before_save", "after_destroy", ...
    callback: Callable[[Any], Any]   # called with the record
    priority: int = 0                # Lower = runs first

    @property
    def target(self) -> str:
        return getattr(self.callback, "__qualname__", repr(self.callback))

    def __repr__(self) -> str:
        return f"<RecordHook({self.record_type}.{self.event} → {self.target})>"


# ---------------------------------------------------------------------------
# Record Event Manager
# ---------------------------------------------------------------------------

class RecordEventManager:
    """
    Central registry and dispatcher for record lifecycle hooks.

    Usage:
        manager = RecordEventManager()
        manager.register_hook("scripts", "before_save", lambda r: bool(r.body))
        manager.register_hooks("scripts", {"after_destroy": [audit]})

        if manager.run_before("scripts", "save", record):
            ...
            manager.fire("scripts", "after_save", record)
    """

    def __init__(self):
        self._hooks: Dict[str, Dict[str, List[RecordHook]]] = {}
        # _hooks[record_type][event] = [RecordHook, ...]

    def register_hooks(
        self,
        record_type: str,
        hook_config: Dict[str, List[Callable[[Any], Any]]],
    ) -> int:
        """
        Register several hooks at once.

        Args:
            record_type: Record type name.
            hook_config: Dict of {event: [callbacks]}.

        Returns:
            Number of hooks registered.
        """
        count = 0
        for event, callbacks in hook_config.items():
            if event not in RecordEvent.ALL:
                logger.warning(f"Unknown event '{event}' for {record_type} — skipping")
                continue
            for callback in callbacks:
                self.register_hook(record_type, event, callback)
                count += 1
        return count

    def register_hook(
        self,
        record_type: str,
        event: str,
        callback: Callable[[Any], Any],
        priority: int = 0,
    ) -> RecordHook:
        """Register a single hook programmatically."""
        if event not in RecordEvent.ALL:
            raise ValueError(f"Unknown record event '{event}'. Valid: {sorted(RecordEvent.ALL)}")

        hook = RecordHook(
            record_type=record_type,
            event=event,
            callback=callback,
            priority=priority,
        )
        hooks = self._hooks.setdefault(record_type, {}).setdefault(event, [])
        hooks.append(hook)
        # stable sort keeps registration order within one priority
        hooks.sort(key=lambda h: h.priority)
        logger.debug(f"Registered hook: {record_type}.{event} → {hook.target}")
        return hook

    def run_before(self, record_type: str, action: str, record: Any) -> bool:
        """
        Run ``before_<action>`` hooks.

        Returns:
            False as soon as a hook returns exactly False, else True.
            Exceptions raised by hooks propagate to the caller.
        """
        for hook in self._get_hooks(record_type, f"before_{action}"):
            if hook.callback(record) is False:
                logger.info(f"Hook {hook.target} aborted {record_type}.{action}")
                return False
        return True

    def fire(self, record_type: str, event: str, record: Any) -> List[Dict[str, Any]]:
        """
        Fire all hooks for an event synchronously.

        Returns:
            List of {"hook", "status", "result" | "error"} per hook.
        """
        hooks = self._get_hooks(record_type, event)
        if not hooks:
            return []

        results: List[Dict[str, Any]] = []
        for hook in hooks:
            try:
                result = hook.callback(record)
                results.append({
                    "hook": hook.target,
                    "status": "success",
                    "result": result,
                })
            except Exception as e:
                logger.error(f"Hook failed: {hook.target} for {record_type}.{event}: {e}")
                results.append({
                    "hook": hook.target,
                    "status": "error",
                    "error": str(e),
                })
        return results

    def _get_hooks(self, record_type: str, event: str) -> List[RecordHook]:
        return self._hooks.get(record_type, {}).get(event, [])

    def get_hooks_for_record(self, record_type: str) -> Dict[str, List[RecordHook]]:
        """Get all hooks for a record type (all events)."""
        return dict(self._hooks.get(record_type, {}))

    def unregister(self, record_type: str) -> None:
        self._hooks.pop(record_type, None)

    def clear(self) -> None:
        self._hooks.clear()

    @property
    def hook_count(self) -> int:
        """Total number of registered hooks."""
        return sum(
            len(hooks)
            for events in self._hooks.values()
            for hooks in events.values()
        )


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_event_manager: Optional[RecordEventManager] = None


def get_record_event_manager() -> RecordEventManager:
    """Get or create the global RecordEventManager singleton."""
    global _event_manager
    if _event_manager is None:
        _event_manager = RecordEventManager()
    return _event_manager
