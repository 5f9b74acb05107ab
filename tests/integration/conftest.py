"""
Integration test fixtures — a full project tree on the real filesystem.
Mark with @pytest.mark.integration to skip in unit-only runs.

Run: pytest tests/integration/ -v -m integration
"""

from __future__ import annotations

import pytest


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: exercises several subsystems end to end")


@pytest.fixture
def integration_project(tmp_path):
    """
    Project with filerecord.yaml (logging enabled), a script library and a
    couple of project directories holding documents.
    """
    root = tmp_path / "project"
    root.mkdir()

    (root / "filerecord.yaml").write_text(
        "name: IntegrationLibrary\n"
        "environment: staging\n"
        "store:\n"
        "  base_directory: db/files\n"
        "logging:\n"
        "  enabled: true\n"
        "  directory: " + str(root / ".filerecord" / "logs") + "\n"
        "record_types:\n"
        "  - name: scripts\n"
        "    location: [scripts, '*', '{name}', rb]\n"
        "  - name: projects\n"
        "    location: [projects, '{name}', '/']\n"
        "  - name: documents\n"
        "    location: [projects, '{project}', '{title}', '{ext}']\n",
        encoding="utf-8",
    )

    files = root / "db" / "files"
    (files / "scripts" / "util").mkdir(parents=True)
    (files / "scripts" / "util" / "helper.rb").write_text("def helper; end\n")
    (files / "projects" / "alpha").mkdir(parents=True)
    (files / "projects" / "alpha" / "intro.md").write_text("# Alpha\n")
    (files / "projects" / "alpha" / "notes.txt").write_text("todo\n")
    (files / "projects" / "beta").mkdir()
    return root
