"""
filerecord Configuration — Load and validate filerecord.yaml, register the
record types it declares.

Example filerecord.yaml:

    name: Script Library
    environment: dev
    store:
      base_directory: db/files
    logging:
      enabled: true
      directory: .filerecord/logs
    record_types:
      - name: scripts
        location: [scripts, "*", "{name}", rb]
      - name: projects
        location: [projects, "{name}", "/"]
        base_directory: /srv/projects

Usage:
    from filerecord.engine.config import load_config, get_config, bootstrap
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from filerecord.engine.errors import FileRecordConfigError

logger = logging.getLogger("filerecord.engine.config")

CONFIG_FILE_NAME = "filerecord.yaml"


# ---------------------------------------------------------------------------
# Pydantic models for filerecord.yaml
# ---------------------------------------------------------------------------

class StoreConfig(BaseModel):
    base_directory: str = "db/files"


class LogAsyncQueueConfig(BaseModel):
    flush_interval_ms: int = 100
    flush_batch_size: int = 50
    max_queue_size: int = 10000


class LoggingConfig(BaseModel):
    level: str = "INFO"
    enabled: bool = False
    directory: str = ".filerecord/logs"
    async_queue: LogAsyncQueueConfig = LogAsyncQueueConfig()

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"logging level must be DEBUG/INFO/WARNING/ERROR/CRITICAL, got '{v}'")
        return v


class RecordTypeConfig(BaseModel):
    """One record type: name + location tokens (last token is the extension)."""
    name: str
    location: List[Optional[str]]
    base_directory: Optional[str] = None

    @field_validator("location")
    @classmethod
    def validate_location(cls, v: List[Optional[str]]) -> List[Optional[str]]:
        if len(v) < 2:
            raise ValueError("location needs at least one segment followed by an extension token")
        if any(token is None for token in v[:-1]):
            raise ValueError("only the extension token (last) may be null")
        return v


class FileRecordConfig(BaseModel):
    """Root model for filerecord.yaml."""
    name: str = "filerecord"
    environment: str = "dev"

    store: StoreConfig = StoreConfig()
    logging: LoggingConfig = LoggingConfig()
    record_types: List[RecordTypeConfig] = Field(default_factory=list)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if v not in ("dev", "staging", "prod"):
            raise ValueError(f"environment must be dev/staging/prod, got '{v}'")
        return v

    @field_validator("record_types")
    @classmethod
    def validate_unique_names(cls, v: List[RecordTypeConfig]) -> List[RecordTypeConfig]:
        names = [t.name for t in v]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate record type names: {duplicates}")
        return v


# ---------------------------------------------------------------------------
# Config Loading Functions
# ---------------------------------------------------------------------------

_config: Optional[FileRecordConfig] = None
_config_path: Optional[Path] = None


def _find_project_root() -> Path:
    """Walk up from CWD looking for filerecord.yaml."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        if (parent / CONFIG_FILE_NAME).exists():
            return parent
    return current


def get_project_root() -> Path:
    """Directory of the loaded config file, else the discovered project root."""
    if _config_path is not None:
        return _config_path.parent
    return _find_project_root()


def load_config(config_path: Optional[str] = None) -> FileRecordConfig:
    """
    Load and validate filerecord.yaml.

    Args:
        config_path: Explicit path. If None, auto-discovers from CWD upward.

    Returns:
        Validated FileRecordConfig (defaults when the file does not exist).

    Raises:
        FileRecordConfigError: unreadable YAML or failed validation.
    """
    global _config, _config_path

    if config_path is None:
        config_path = str(_find_project_root() / CONFIG_FILE_NAME)

    path = Path(config_path)
    if not path.exists():
        _config = FileRecordConfig()
        _config_path = None
        return _config

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise FileRecordConfigError(f"Cannot parse {path}: {exc}", path=str(path)) from exc

    if not isinstance(raw, dict):
        raise FileRecordConfigError(f"{path} must contain a mapping", path=str(path))

    try:
        _config = FileRecordConfig(**raw)
    except ValidationError as exc:
        raise FileRecordConfigError(
            f"Invalid {path.name}: {exc.error_count()} error(s)",
            path=str(path),
            validation_errors=exc.errors(),
        ) from exc

    _config_path = path.resolve()
    logger.debug(f"Loaded config from {_config_path}")
    return _config


def get_config() -> FileRecordConfig:
    """Get the loaded config, loading it if necessary."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def resolve_base_directory(type_config: RecordTypeConfig, config: FileRecordConfig, root: Path) -> Path:
    """Per-type base directory, else the store default; relative to ``root``."""
    base = Path(type_config.base_directory or config.store.base_directory).expanduser()
    return base if base.is_absolute() else root / base


# ---------------------------------------------------------------------------
# Bootstrap
# ---------------------------------------------------------------------------

def bootstrap(config: Optional[FileRecordConfig] = None, registry=None) -> List[Any]:
    """
    Register every record type declared in the config.

    Also applies the logging level and starts the structured log queue when
    ``logging.enabled`` is set.

    Returns:
        The created RecordStore objects, in config order.
    """
    from filerecord.core.schema import RecordSchema
    from filerecord.core.store import RecordStore
    from filerecord.engine.logging import init_logging, log, log_system_event
    from filerecord.engine.registry import schema_registry

    config = config or get_config()
    registry = registry if registry is not None else schema_registry
    root = get_project_root()

    logging.getLogger("filerecord").setLevel(config.logging.level)
    if config.logging.enabled:
        log_dir = Path(config.logging.directory)
        if not log_dir.is_absolute():
            log_dir = root / log_dir
        queue = config.logging.async_queue
        init_logging(
            log_dir=str(log_dir),
            flush_interval_ms=queue.flush_interval_ms,
            flush_batch_size=queue.flush_batch_size,
            max_queue_size=queue.max_queue_size,
        )

    stores = []
    for type_config in config.record_types:
        schema = RecordSchema.define(
            type_config.name,
            type_config.location,
            resolve_base_directory(type_config, config, root),
        )
        store = RecordStore(schema)
        registry.register(store)
        stores.append(store)

    log(log_system_event("bootstrap", details={
        "config": config.name,
        "record_types": [s.schema.name for s in stores],
    }))
    logger.info(f"Bootstrapped {len(stores)} record type(s) from config '{config.name}'")
    return stores
