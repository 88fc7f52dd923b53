"""
Tests for database statistics.
"""

import pytest

from core.database import Database
from core.models import FlatpakModule, SoftwareModule
from core.stats import DatabaseStats, compute_stats, format_stats


@pytest.fixture
def populated_database(db_path, project_factory):
    database = Database(db_path)
    for project in (
        project_factory(
            "org.example.A",
            root_hashes=["h1"],
            siblings={"org.example.A", "org.example.B"},
            build_systems={"meson"},
        ),
        project_factory(
            "org.example.B",
            root_hashes=["h1"],
            siblings={"org.example.A", "org.example.B"},
            build_systems={"meson", "cmake"},
        ),
        project_factory("org.example.C", last_updated="2024-01-01T00:00:00+00:00"),
        project_factory("org.example.D"),
    ):
        database.indexed_projects[project.id] = project
    database.modules = [
        SoftwareModule(
            FlatpakModule(name="libfoo", sources=[{"type": "archive", "x-checker-data": {}}])
        ),
        SoftwareModule(FlatpakModule(name="libbar")),
    ]
    return database


@pytest.mark.unit
def test_compute_stats(populated_database):
    stats = compute_stats(populated_database)

    assert stats.module_count == 2
    assert stats.updateable_module_count == 1
    assert stats.project_count == 4
    assert stats.unmined_projects == 1
    assert stats.inaccessible_projects == 1
    assert stats.projects_with_build_systems == 2
    assert stats.build_system_counts == {"meson": 2, "cmake": 1}
    assert stats.unique_root_signatures == 1
    assert stats.projects_with_siblings == 2
    assert stats.memory_size > 0


@pytest.mark.unit
def test_compute_stats_on_empty_database(db_path):
    assert compute_stats(Database(db_path)) == DatabaseStats()


@pytest.mark.unit
def test_format_stats():
    stats = DatabaseStats(
        module_count=2,
        updateable_module_count=1,
        project_count=4,
        memory_size=1536,
        unmined_projects=1,
        inaccessible_projects=1,
        projects_with_build_systems=2,
        build_system_counts={"meson": 2, "cmake": 1},
        unique_root_signatures=1,
        projects_with_siblings=2,
    )

    assert format_stats(stats) == (
        "Modules: 2.\n"
        "Modules supporting updates: 1.\n"
        "Projects: 4.\n"
        "Database in-memory size: 1.50KB.\n"
        "25.00% (1/4) of the projects are unmined.\n"
        "25.00% (1/4) of the projects are inaccessible.\n"
        "50.00% of the projects have a build system.\n"
        "25.00% Projects use cmake\n"
        "50.00% Projects use meson\n"
        "1 Unique root signatures.\n"
        "Projects with siblings   : 50.00% (2/4)\n"
    )


@pytest.mark.unit
def test_format_stats_without_projects():
    """Percentages of an empty database are zero rather than a division error."""
    output = format_stats(DatabaseStats())

    assert "0.00% (0/0) of the projects are unmined." in output
    assert "00.00% of the projects have a build system." in output
