"""
Shared fixtures for core module tests.

This module provides reusable pytest fixtures for testing the record store,
including record factories and helpers that lay out a database on disk.
"""

from pathlib import Path

import pytest

from core.codec import encode_module, encode_project
from core.database import Database
from core.hashing import get_module_hash
from core.models import FlatpakModule, SoftwareModule, SoftwareProject


@pytest.fixture
def db_path(tmp_path):
    """Root directory of a database, not created yet."""
    return tmp_path / "db"


@pytest.fixture
def project_factory():
    """Factory for creating SoftwareProject instances with sensible defaults."""

    def _factory(project_id="org.example.App", **kwargs):
        kwargs.setdefault("vcs_url", f"https://git.example.org/{project_id}.git")
        kwargs.setdefault("name", project_id.rsplit(".", 1)[-1])
        return SoftwareProject(id=project_id, **kwargs)

    return _factory


@pytest.fixture
def module_factory():
    """Factory for creating FlatpakModule instances."""

    def _factory(name="libfoo", **kwargs):
        kwargs.setdefault("buildsystem", "meson")
        kwargs.setdefault(
            "sources",
            [{"type": "archive", "url": f"https://example.org/{name}.tar.xz"}],
        )
        return FlatpakModule(name=name, **kwargs)

    return _factory


@pytest.fixture
def write_project_file(db_path):
    """Write a project record straight to disk, bypassing the database."""

    def _write(project: SoftwareProject, file_name: str | None = None) -> Path:
        projects_dir = db_path / "projects"
        projects_dir.mkdir(parents=True, exist_ok=True)
        file_path = projects_dir / (file_name or f"{project.id}.yaml")
        file_path.write_text(encode_project(project), encoding="utf-8")
        return file_path

    return _write


@pytest.fixture
def write_module_file(db_path):
    """Write a module record straight to disk, named by its fingerprint."""

    def _write(module: FlatpakModule, project_id: str | None = None) -> Path:
        modules_dir = db_path / "modules"
        modules_dir.mkdir(parents=True, exist_ok=True)
        file_path = modules_dir / f"{get_module_hash(module)}.yaml"
        file_path.write_text(
            encode_module(SoftwareModule(module, project_id)), encoding="utf-8"
        )
        return file_path

    return _write


@pytest.fixture
def open_database(db_path):
    """Open (and load) the database at db_path."""

    def _open(**kwargs) -> Database:
        return Database.open(db_path, **kwargs)

    return _open
