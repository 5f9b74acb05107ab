"""
filerecord Test Suite — Shared fixtures and configuration.

Run:  pytest tests/ -v
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

import pytest


# ---------------------------------------------------------------------------
# Global state isolation (config cache, registry, hook manager, log queue)
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_globals():
    """Reset global singletons between tests."""
    import filerecord.decorators.record as hooks_mod
    import filerecord.engine.config as cfg_mod
    from filerecord.engine.logging import shutdown_logging
    from filerecord.engine.registry import schema_registry

    cfg_mod._config = None
    cfg_mod._config_path = None
    hooks_mod._event_manager = None
    schema_registry.clear()
    yield
    shutdown_logging()
    schema_registry.clear()


@pytest.fixture
def base_dir(tmp_path):
    """Base directory for record stores (created on registration)."""
    return tmp_path / "store"


@pytest.fixture
def write(base_dir):
    """Write a file (or create a directory when content is None) under base_dir."""

    def _write(rel: str, content: Union[bytes, str, None] = b"") -> Path:
        path = base_dir / rel
        if content is None:
            path.mkdir(parents=True, exist_ok=True)
            return path
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)
        return path

    return _write


@pytest.fixture
def events():
    """A private hook manager."""
    from filerecord.decorators.record import RecordEventManager

    return RecordEventManager()


@pytest.fixture
def make_store(base_dir, events):
    """Factory: make_store(tokens, name="items") → RecordStore rooted at base_dir."""
    from filerecord.core.schema import RecordSchema
    from filerecord.core.store import RecordStore

    def _make(tokens, name: str = "items"):
        return RecordStore(RecordSchema.define(name, tokens, base_dir), events=events)

    return _make


@pytest.fixture
def scripts(make_store):
    """['scripts', '*', '{name}', 'rb'] — wildcard location, file mode."""
    return make_store(["scripts", "*", "{name}", "rb"], name="scripts")


@pytest.fixture
def docs(make_store):
    """['{project}', '{title}', '{ext}'] — fully concrete location."""
    return make_store(["{project}", "{title}", "{ext}"], name="docs")


@pytest.fixture
def projects(make_store):
    """['projects', '{name}', '/'] — directory records."""
    return make_store(["projects", "{name}", "/"], name="projects")


@pytest.fixture
def project_root(tmp_path):
    """
    A project tree with filerecord.yaml declaring two record types.
    Returns the root Path.
    """
    root = tmp_path / "project"
    root.mkdir()
    (root / "filerecord.yaml").write_text(
        "name: TestLibrary\n"
        "environment: dev\n"
        "store:\n"
        "  base_directory: data\n"
        "logging:\n"
        "  level: debug\n"
        "record_types:\n"
        "  - name: scripts\n"
        "    location: [scripts, '*', '{name}', rb]\n"
        "  - name: notes\n"
        "    location: [notes, '{name}', md]\n"
        "    base_directory: notes_root\n",
        encoding="utf-8",
    )
    return root
