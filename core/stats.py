"""
Statistics about the content of a database.
"""

from dataclasses import dataclass, field

from core.database import Database
from utils import format_bytes


@dataclass
class DatabaseStats:
    """
    Counters describing a loaded database.

    Attributes:
        module_count: Number of modules.
        updateable_module_count: Modules with at least one source tracked by
            flatpak-external-data-checker.
        project_count: Number of projects.
        memory_size: Approximate in-memory size of the records, in bytes.
        unmined_projects: Projects without root hashes that were never updated.
        inaccessible_projects: Projects without root hashes despite an update,
            i.e. whose repository could not be mined.
        projects_with_build_systems: Projects with at least one build system.
        build_system_counts: Number of projects using each build system.
        unique_root_signatures: Number of distinct root signatures.
        projects_with_siblings: Fingerprinted projects with a non-empty sibling set.
    """

    module_count: int = 0
    updateable_module_count: int = 0
    project_count: int = 0
    memory_size: int = 0
    unmined_projects: int = 0
    inaccessible_projects: int = 0
    projects_with_build_systems: int = 0
    build_system_counts: dict[str, int] = field(default_factory=dict)
    unique_root_signatures: int = 0
    projects_with_siblings: int = 0


def compute_stats(database: Database) -> DatabaseStats:
    stats = DatabaseStats(
        module_count=len(database.modules),
        updateable_module_count=sum(
            1
            for module in database.modules
            if module.flatpak_module.uses_external_data_checker()
        ),
        project_count=len(database.indexed_projects),
        memory_size=database.get_database_memory_size(),
    )

    root_signatures: set[str] = set()
    for project in database.iter_projects():
        if not project.root_hashes:
            if project.last_updated is not None:
                stats.inaccessible_projects += 1
            else:
                stats.unmined_projects += 1
        if project.build_systems:
            stats.projects_with_build_systems += 1
        for build_system in project.build_systems:
            stats.build_system_counts[build_system] = (
                stats.build_system_counts.get(build_system, 0) + 1
            )

        root_signature = project.get_root_signature()
        if not root_signature:
            continue
        root_signatures.add(root_signature)
        if project.siblings:
            stats.projects_with_siblings += 1

    stats.unique_root_signatures = len(root_signatures)
    return stats


def _percent(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return count / total * 100.0


def format_stats(stats: DatabaseStats) -> str:
    """
    Render the statistics as plain text, one fact per line.
    """
    total = stats.project_count
    lines = [
        f"Modules: {stats.module_count}.",
        f"Modules supporting updates: {stats.updateable_module_count}.",
        f"Projects: {total}.",
        f"Database in-memory size: {format_bytes(stats.memory_size)}.",
        f"{_percent(stats.unmined_projects, total):.2f}% "
        f"({stats.unmined_projects}/{total}) of the projects are unmined.",
        f"{_percent(stats.inaccessible_projects, total):.2f}% "
        f"({stats.inaccessible_projects}/{total}) of the projects are inaccessible.",
        f"{_percent(stats.projects_with_build_systems, total):05.2f}% "
        "of the projects have a build system.",
    ]
    for build_system in sorted(stats.build_system_counts):
        count = stats.build_system_counts[build_system]
        lines.append(f"{_percent(count, total):05.2f}% Projects use {build_system}")
    lines.append(f"{stats.unique_root_signatures} Unique root signatures.")
    lines.append(
        f"{'Projects with siblings': <25}: "
        f"{_percent(stats.projects_with_siblings, total):>5.2f}% "
        f"({stats.projects_with_siblings}/{total})"
    )
    return "\n".join(lines) + "\n"
