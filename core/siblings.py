"""
Sibling detection.

Two projects are siblings when their root signatures (the concatenation of
their root commit hashes, in order) are identical: they were most likely
cloned or forked from the same history. Order matters, so the signature is a
concatenation rather than a set.

This is a heuristic. Unrelated repositories sharing a root hash by accident
would be grouped together; that risk is accepted.
"""

from typing import Iterable

from core.database import Database
from core.models import SoftwareProject
from log import get_logger

logger = get_logger(__name__)


def group_by_root_signature(projects: Iterable[SoftwareProject]) -> dict[str, set[str]]:
    """
    Map every root signature to the IDs of the projects that have it.

    Projects without root hashes have not been mined yet and are left out.
    """
    siblings_for_root_signature: dict[str, set[str]] = {}
    for project in projects:
        root_signature = project.get_root_signature()
        if not root_signature:
            continue
        siblings_for_root_signature.setdefault(root_signature, set()).add(project.id)
    return siblings_for_root_signature


def detect_siblings(database: Database) -> dict[str, set[str]]:
    """
    Record, on every project sharing its root signature with others, the full
    set of those projects (itself included).

    Each project is written separately through ``Database.update_project``.
    If one update fails the pass stops there: projects already handled keep
    their siblings, the others are left untouched, and running the pass again
    completes the work.

    Args:
        database: A loaded database.

    Returns:
        The sibling groups that were written, by root signature.

    Raises:
        DatabaseError: Whatever ``update_project`` raises.
    """
    groups = group_by_root_signature(database.iter_projects())

    sibling_groups: dict[str, set[str]] = {}
    for root_signature, siblings in groups.items():
        # A group of one is only the project itself.
        if len(siblings) <= 1:
            continue
        sibling_groups[root_signature] = siblings

        for sibling in sorted(siblings):
            project = database.get_project(sibling)
            if project is None:
                continue
            project.siblings = set(siblings)
            database.update_project(project)

    logger.info(
        "Found %d group(s) of siblings covering %d project(s).",
        len(sibling_groups),
        sum(len(siblings) for siblings in sibling_groups.values()),
    )
    return sibling_groups
