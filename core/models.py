"""
Core data models for the project registry.

This module defines the records kept by the database: software projects,
the Flatpak module descriptions they build, and the warnings collected while
loading records from disk.
"""

from dataclasses import dataclass, field
from typing import Any

from core.exceptions import ProjectIdentityError
from models import BuildSystem


@dataclass
class FlatpakModule:
    """
    A Flatpak module definition, as found in a build manifest.

    Only the keys the registry inspects are broken out; every other manifest
    key is preserved verbatim in ``extra`` so the module round-trips.

    Attributes:
        name: Module name.
        buildsystem: flatpak-builder build system, or None for the default.
        sources: Source entries (archives, git repositories, patches...).
        config_opts: Options passed to the configure step.
        build_commands: Commands for the ``simple`` build system.
        cleanup: Paths removed after the build.
        extra: Any other manifest key.
    """

    name: str
    buildsystem: str | None = None
    sources: list[dict[str, Any] | str] = field(default_factory=list)
    config_opts: list[str] = field(default_factory=list)
    build_commands: list[str] = field(default_factory=list)
    cleanup: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def uses_external_data_checker(self) -> bool:
        """True if any source can be updated by flatpak-external-data-checker."""
        return any(
            isinstance(source, dict) and "x-checker-data" in source
            for source in self.sources
        )


@dataclass
class SoftwareModule:
    """
    A stored module.

    Modules form a shared pool keyed by content fingerprint; ``project_id`` only
    remembers where a module was first seen.
    """

    flatpak_module: FlatpakModule
    project_id: str | None = None


@dataclass
class SoftwareProject:
    """
    A software codebase tracked by the registry.

    Attributes:
        id: Reverse-DNS identifier, derived from build manifests or from the
            VCS URL. Primary key of the database.
        vcs_url: Main VCS URL, the one the ID was derived from.
        name: Common name of the project.
        description: Description of the project.
        web_urls: Known homepages.
        vcs_urls: Known version-control locations, mirrors included.
        siblings: IDs of projects sharing the same root hashes fingerprint,
            self included. Only set by sibling detection.
        flatpak_app_manifests: Paths of Flatpak app manifests in the repository.
        flatpak_module_manifests: Paths of Flatpak module manifests in the repository.
        flatpak_sources_manifests: Paths of Flatpak sources manifests in the repository.
        tags: Provenance markers, e.g. which source discovered the project.
        build_systems: Build systems the project is known to support.
        main_branch: Name of the main branch.
        last_known_commit: Latest commit seen on the main branch.
        last_updated: ISO-8601 date of the last update of the main branch.
        root_hashes: Root commit hashes of the project's history. A list rather
            than a set since two ancestors may share a hash.
    """

    id: str = ""
    vcs_url: str = ""
    name: str = ""
    description: str | None = None
    web_urls: set[str] = field(default_factory=set)
    vcs_urls: set[str] = field(default_factory=set)
    siblings: set[str] | None = None
    flatpak_app_manifests: set[str] = field(default_factory=set)
    flatpak_module_manifests: set[str] = field(default_factory=set)
    flatpak_sources_manifests: set[str] = field(default_factory=set)
    tags: set[str] = field(default_factory=set)
    build_systems: set[str] = field(default_factory=set)
    main_branch: str | None = None
    last_known_commit: str | None = None
    last_updated: str | None = None
    root_hashes: list[str] = field(default_factory=list)

    def merge(self, other: "SoftwareProject") -> None:
        """
        Merge newly observed data about the same project into this one.

        Set fields are unioned. Optional scalar fields are overwritten whenever
        ``other`` has a value. Root hashes and siblings are only adopted when
        this project has none yet.

        Args:
            other: The incoming record. Never modified.

        Raises:
            ProjectIdentityError: If the IDs or the main VCS URLs differ. The
                check happens before anything is modified.
        """
        if self.id != other.id:
            raise ProjectIdentityError("IDs", self.id, other.id)
        if self.vcs_url != other.vcs_url:
            raise ProjectIdentityError("VCS URLs", self.vcs_url, other.vcs_url)

        # Copies, so that merging a project into itself is safe.
        self.web_urls |= set(other.web_urls)
        self.vcs_urls |= set(other.vcs_urls)
        self.build_systems |= set(other.build_systems)
        self.flatpak_app_manifests |= set(other.flatpak_app_manifests)
        self.flatpak_module_manifests |= set(other.flatpak_module_manifests)
        self.flatpak_sources_manifests |= set(other.flatpak_sources_manifests)
        self.tags |= set(other.tags)

        if not self.root_hashes:
            self.root_hashes = list(other.root_hashes)
        if other.siblings is not None and self.siblings is None:
            self.siblings = set(other.siblings)

        if other.description is not None:
            self.description = other.description
        if other.last_known_commit is not None:
            self.last_known_commit = other.last_known_commit
        if other.main_branch is not None:
            self.main_branch = other.main_branch
        # TODO keep the most recent of the two timestamps instead of the incoming one.
        if other.last_updated is not None:
            self.last_updated = other.last_updated

    def supports_flatpak(self) -> bool:
        return bool(
            self.flatpak_app_manifests
            or self.flatpak_module_manifests
            or self.flatpak_sources_manifests
        )

    def get_main_vcs_url(self) -> str:
        return self.vcs_url

    def get_root_signature(self) -> str:
        """
        Concatenate the root hashes, in order, into a single grouping key.

        Returns:
            The signature, or an empty string for a project that was never mined.
        """
        return "".join(self.root_hashes)

    def get_default_modules(self) -> list[FlatpakModule]:
        """
        Derive one Flatpak module per supported build system of the project.

        Each module is named after the project ID and builds from the main VCS
        URL (on the main branch when known). Build systems flatpak-builder does
        not know about are skipped.

        Returns:
            The derived modules, ordered by build system name.
        """
        git_source: dict[str, str] = {"type": "git", "url": self.vcs_url}
        if self.main_branch:
            git_source["branch"] = self.main_branch

        modules: list[FlatpakModule] = []
        for build_system in sorted(self.build_systems):
            try:
                buildsystem = BuildSystem(build_system)
            except ValueError:
                continue
            modules.append(
                FlatpakModule(
                    name=self.id,
                    buildsystem=str(buildsystem),
                    sources=[dict(git_source)],
                )
            )
        return modules


@dataclass(frozen=True)
class LoadWarning:
    """
    A record skipped while loading the database.

    Attributes:
        file_path: The file (or directory) that could not be used.
        reason: Why it was skipped.
    """

    file_path: str
    reason: str
