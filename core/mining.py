"""
Mining of local project checkouts.

Mining reads a project's git checkout and records what it reveals (root
commits, head commit, main branch, last update and build systems) on the
stored project, through the usual merge path.
"""

from pathlib import Path
from typing import Iterable

from adapters.git import GitClient
from constants import BUILD_SYSTEM_MARKERS
from core.database import Database
from core.exceptions import NotARepositoryError, ProjectNotFoundError
from core.models import SoftwareProject
from log import get_logger

logger = get_logger(__name__)


def detect_build_systems(file_paths: Iterable[Path]) -> set[str]:
    """
    Guess build systems from the marker files at the root of a checkout.

    Args:
        file_paths: Paths relative to the checkout root. Nested paths are ignored.

    Returns:
        The names of the detected build systems.
    """
    build_systems: set[str] = set()
    for file_path in file_paths:
        if len(file_path.parts) != 1:
            continue
        name = file_path.name
        for marker, build_system in BUILD_SYSTEM_MARKERS.items():
            if marker.startswith("*."):
                if name.endswith(marker[1:]):
                    build_systems.add(build_system)
            elif name == marker:
                build_systems.add(build_system)
    return build_systems


def mine_project(
    database: Database, project_id: str, git_client: GitClient
) -> SoftwareProject:
    """
    Fingerprint a project from its local checkout and store the findings.

    Root hashes already known for the project are kept; the other findings
    follow the merge rules (sets grow, scalars are replaced).

    Args:
        database: The database holding the project.
        project_id: ID of the project to mine.
        git_client: Client for the project's checkout.

    Returns:
        The project as stored after the update.

    Raises:
        ProjectNotFoundError: If the project is not in the database.
        NotARepositoryError: If the checkout is not a git working tree.
        GitCommandError: If reading the repository fails.
    """
    project = database.get_project(project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    if not git_client.is_repo():
        raise NotARepositoryError(str(git_client.root))

    findings = SoftwareProject(
        id=project.id,
        vcs_url=project.vcs_url,
        name=project.name,
        root_hashes=git_client.get_root_hashes(),
        last_known_commit=git_client.get_head_commit(),
        main_branch=git_client.get_current_branch(),
        last_updated=git_client.get_last_commit_date(),
        build_systems=detect_build_systems(git_client.stream_file_paths()),
    )
    logger.info(
        "Mined %s: %d root hash(es), build systems: %s.",
        project_id,
        len(findings.root_hashes),
        ", ".join(sorted(findings.build_systems)) or "none",
    )

    database.update_project(findings)
    # Same merge as the stored copy went through.
    project.merge(findings)
    return project
