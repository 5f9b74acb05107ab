"""
filerecord Logging — Structured JSON-lines operation log with an async queue.

Implements:
- FileLogger: per-object-type, per-category files, one per day
    {log_dir}/{object_type}/{category}/{YYYY-MM-DD}.jsonl
- AsyncLogQueue: in-memory queue flushed by a background thread
- Entry builders for record operations, schema registration, system events

Module loggers (``logging.getLogger("filerecord.…")``) are used for
human-readable diagnostics; this module is for the machine-readable trail.
``log()`` is a no-op until ``init_logging()`` has been called.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from queue import Empty, Full, Queue
from typing import Any, Dict, List, Optional

logger = logging.getLogger("filerecord.engine.logging")

# Valid object types and their permitted categories
OBJECT_TYPE_CATEGORIES = {
    "records": ["execution", "performance"],
    "schemas": ["execution"],
    "system": ["execution"],
}


class LogEntry:
    """A structured log entry destined for a specific file."""

    __slots__ = ("object_type", "category", "data")

    def __init__(self, object_type: str, category: str, data: Dict[str, Any]):
        self.object_type = object_type
        self.category = category
        self.data = data

    def to_json(self) -> str:
        return json.dumps(self.data, default=str, separators=(",", ":"))


class FileLogger:
    """
    Writes structured JSON log entries to per-object-type, per-category files.

    Thread-safe — uses a lock per file path.
    """

    def __init__(self, log_dir: str = ".filerecord/logs"):
        self._log_dir = Path(log_dir)
        self._file_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._ensure_directories()

    def _ensure_directories(self) -> None:
        for obj_type, categories in OBJECT_TYPE_CATEGORIES.items():
            for cat in categories:
                (self._log_dir / obj_type / cat).mkdir(parents=True, exist_ok=True)

    def write(self, entry: LogEntry) -> None:
        """Write a single log entry to the appropriate file."""
        self.write_batch([entry])

    def write_batch(self, entries: List[LogEntry]) -> None:
        """Write a batch of entries, grouping by file path."""
        grouped: Dict[str, List[LogEntry]] = defaultdict(list)
        for entry in entries:
            grouped[str(self._resolve_path(entry.object_type, entry.category))].append(entry)

        for file_path, batch in grouped.items():
            with self._file_locks[file_path]:
                with open(file_path, "a", encoding="utf-8") as f:
                    for entry in batch:
                        f.write(entry.to_json())
                        f.write("\n")

    def _resolve_path(self, object_type: str, category: str) -> Path:
        if category not in OBJECT_TYPE_CATEGORIES.get(object_type, ()):
            raise ValueError(f"Invalid log destination: {object_type}/{category}")
        return self._log_dir / object_type / category / f"{date.today().isoformat()}.jsonl"

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def query(
        self,
        object_type: str,
        category: str,
        *,
        days: int = 7,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 500,
    ) -> List[Dict[str, Any]]:
        """
        Read entries back, newest day first, chronological within a day.

        Args:
            object_type: "records", "schemas" or "system".
            category: "execution" or "performance".
            days: How many days back to look (today included).
            filters: Exact-match key/value pairs on top-level entry keys.
            limit: Max number of entries to return.
        """
        base = self._log_dir / object_type / category
        if not base.exists():
            return []

        results: List[Dict[str, Any]] = []
        current = date.today()
        oldest = current - timedelta(days=days - 1)
        while current >= oldest and len(results) < limit:
            path = base / f"{current.isoformat()}.jsonl"
            if path.exists():
                results.extend(self._read_jsonl(path, filters, limit - len(results)))
            current -= timedelta(days=1)
        return results

    @staticmethod
    def _read_jsonl(
        path: Path,
        filters: Optional[Dict[str, Any]],
        remaining: int,
    ) -> List[Dict[str, Any]]:
        entries: List[Dict[str, Any]] = []
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        data = json.loads(line)
                    except json.JSONDecodeError:
                        continue
                    if filters and not all(data.get(k) == v for k, v in filters.items()):
                        continue
                    entries.append(data)
                    if len(entries) >= remaining:
                        break
        except OSError as exc:
            logger.warning("Could not read log file %s: %s", path, exc)
        return entries


class AsyncLogQueue:
    """
    In-memory queue with a background flush thread.

    Entries are pushed non-blocking and flushed to the FileLogger every
    flush_interval_ms or once flush_batch_size entries are waiting.
    """

    def __init__(
        self,
        file_logger: FileLogger,
        flush_interval_ms: int = 100,
        flush_batch_size: int = 50,
        max_queue_size: int = 10000,
    ):
        self._logger = file_logger
        self._flush_interval = flush_interval_ms / 1000.0
        self._flush_batch_size = flush_batch_size
        self._queue: Queue[LogEntry] = Queue(maxsize=max_queue_size)
        self._running = False
        self._flush_thread: Optional[threading.Thread] = None
        self._dropped_count = 0

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._flush_thread = threading.Thread(
            target=self._flush_loop,
            name="filerecord-log-flush",
            daemon=True,
        )
        self._flush_thread.start()
        logger.debug("Async log queue started")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the flush thread and drain remaining entries."""
        self._running = False
        if self._flush_thread and self._flush_thread.is_alive():
            self._flush_thread.join(timeout=timeout)
        self._drain()
        logger.debug(f"Async log queue stopped (dropped: {self._dropped_count})")

    def push(self, entry: LogEntry) -> bool:
        """Queue an entry; False if it was dropped because the queue is full."""
        try:
            self._queue.put_nowait(entry)
            return True
        except Full:
            self._dropped_count += 1
            return False

    def _flush_loop(self) -> None:
        while self._running:
            batch = self._collect_batch()
            if batch:
                try:
                    self._logger.write_batch(batch)
                except Exception as e:
                    logger.error(f"Log flush error: {e}")
            else:
                time.sleep(self._flush_interval)

    def _collect_batch(self) -> List[LogEntry]:
        batch: List[LogEntry] = []
        deadline = time.monotonic() + self._flush_interval
        while len(batch) < self._flush_batch_size:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            try:
                batch.append(self._queue.get(timeout=min(remaining, 0.01)))
            except Empty:
                if batch:
                    break
        return batch

    def _drain(self) -> None:
        batch: List[LogEntry] = []
        while True:
            try:
                batch.append(self._queue.get_nowait())
            except Empty:
                break
        if batch:
            try:
                self._logger.write_batch(batch)
            except Exception as e:
                logger.error(f"Log drain error: {e}")

    @property
    def pending_count(self) -> int:
        return self._queue.qsize()

    @property
    def dropped_count(self) -> int:
        return self._dropped_count


# ---------------------------------------------------------------------------
# Log Entry Builders
# ---------------------------------------------------------------------------

def _base_entry(event: str, level: str, **extra: Any) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "event": event,
    }
    entry.update({k: v for k, v in extra.items() if v is not None})
    return entry


def log_record_operation(
    operation: str,
    record_type: str,
    path: Optional[str],
    success: bool = True,
    duration_ms: Optional[float] = None,
    error: Optional[str] = None,
) -> LogEntry:
    """Build a record CRUD log entry (create/update/save/delete)."""
    data = _base_entry(
        event=f"record_{operation}",
        level="INFO" if success else "WARNING",
        record_type=record_type,
        path=path,
        operation=operation,
        success=success,
        duration_ms=duration_ms,
        error=error,
    )
    return LogEntry("records", "execution", data)


def log_record_performance(
    operation: str,
    record_type: str,
    duration_ms: float,
) -> LogEntry:
    """Build a record operation timing entry."""
    data = _base_entry(
        event="record_performance",
        level="INFO",
        record_type=record_type,
        operation=operation,
        duration_ms=duration_ms,
    )
    return LogEntry("records", "performance", data)


def log_schema_registered(
    record_type: str,
    glob_pattern: str,
    match_pattern: str,
    base_directory: str,
    attributes: List[str],
) -> LogEntry:
    """Build a schema registration log entry."""
    data = _base_entry(
        event="schema_registered",
        level="INFO",
        record_type=record_type,
        glob=glob_pattern,
        match=match_pattern,
        base_directory=base_directory,
        attributes=attributes,
    )
    return LogEntry("schemas", "execution", data)


def log_system_event(
    event: str,
    level: str = "INFO",
    details: Optional[Dict[str, Any]] = None,
) -> LogEntry:
    """Build a system event entry (bootstrap, shutdown, config problems)."""
    return LogEntry("system", "execution", _base_entry(event=event, level=level, details=details))


# ---------------------------------------------------------------------------
# Global Log Queue Singleton
# ---------------------------------------------------------------------------

_global_queue: Optional[AsyncLogQueue] = None


def init_logging(
    log_dir: str = ".filerecord/logs",
    flush_interval_ms: int = 100,
    flush_batch_size: int = 50,
    max_queue_size: int = 10000,
) -> AsyncLogQueue:
    """Initialize (or replace) the global async log queue."""
    global _global_queue
    if _global_queue is not None:
        _global_queue.stop()
    _global_queue = AsyncLogQueue(
        file_logger=FileLogger(log_dir=log_dir),
        flush_interval_ms=flush_interval_ms,
        flush_batch_size=flush_batch_size,
        max_queue_size=max_queue_size,
    )
    _global_queue.start()
    return _global_queue


def get_log_queue() -> Optional[AsyncLogQueue]:
    return _global_queue


def log(entry: LogEntry) -> bool:
    """Push an entry to the global queue. Non-blocking; no-op before init_logging()."""
    if _global_queue is None:
        return False
    return _global_queue.push(entry)


def shutdown_logging() -> None:
    """Flush and stop the global log queue."""
    global _global_queue
    if _global_queue:
        _global_queue.stop()
        _global_queue = None
