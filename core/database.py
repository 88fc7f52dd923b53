"""
The record store.

A ``Database`` owns the in-memory index of projects (keyed by ID) and the pool
of modules (keyed on disk by content fingerprint). Everything is loaded from
the storage root once; afterwards every mutation goes through ``add_project``,
``update_project`` or ``add_module`` and is written back to its file before
the call returns.

The files are the source of truth and the index is a cache over them. The two
must agree: an update for a project missing from either one is an error.
"""

import copy
import sys
import time
from pathlib import Path
from typing import Iterator

from adapters.filesystem import FilesystemPathLister, PathLister
from constants import RECORD_EXTENSION, RECORD_EXTENSIONS, STORAGE_LAYOUT
from core.codec import decode_module, decode_project, encode_module, encode_project
from core.exceptions import (
    CorruptProjectError,
    DatabaseInitError,
    FileReadError,
    InvalidProjectIdError,
    MissingProjectIdError,
    PathEnumerationError,
    ProjectNotFoundError,
    RecordDecodeError,
)
from core.file_io import (
    FileReader,
    FileWriter,
    FilesystemFileReader,
    FilesystemFileWriter,
)
from core.hashing import get_module_hash
from core.models import FlatpakModule, LoadWarning, SoftwareModule, SoftwareProject
from log import get_logger
from ui.progress_display import NoOpProgressDisplay, ProgressDisplay

logger = get_logger(__name__)


def check_project_id(project_id: str) -> None:
    """
    Reject IDs that would place the record file outside the projects directory.

    Raises:
        InvalidProjectIdError: If the ID contains a path separator or "..".
    """
    if "/" in project_id or "\\" in project_id or ".." in project_id:
        raise InvalidProjectIdError(project_id)


class Database:
    """
    In-memory index of projects and modules, mirrored to one file per record.

    Attributes:
        db_path: Root directory of the storage.
        indexed_projects: Projects by ID.
        project_paths: The file each indexed project is stored in, by ID.
        modules: Modules, in load then insertion order.
        warnings: Records skipped by the last load.
    """

    def __init__(
        self,
        db_path: Path,
        file_reader: FileReader | None = None,
        file_writer: FileWriter | None = None,
        path_lister: PathLister | None = None,
    ):
        self.db_path = db_path
        self.file_reader = file_reader if file_reader is not None else FilesystemFileReader()
        self.file_writer = file_writer if file_writer is not None else FilesystemFileWriter()
        self.path_lister = path_lister if path_lister is not None else FilesystemPathLister()
        self.indexed_projects: dict[str, SoftwareProject] = {}
        self.project_paths: dict[str, Path] = {}
        self.modules: list[SoftwareModule] = []
        self.warnings: list[LoadWarning] = []

    @classmethod
    def open(
        cls,
        db_path: Path,
        file_reader: FileReader | None = None,
        file_writer: FileWriter | None = None,
        path_lister: PathLister | None = None,
        progress_display: ProgressDisplay | None = None,
    ) -> "Database":
        """
        Create the storage directories if needed and load every record.

        Raises:
            DatabaseInitError: If the storage directories cannot be created.
            CorruptProjectError: If a project file cannot be decoded.
            FileReadError: If a project file cannot be read.
        """
        database = cls(db_path, file_reader, file_writer, path_lister)
        database.initialize()

        before_loading = time.monotonic()
        database.load(progress_display)
        loading_duration = time.monotonic() - before_loading
        if loading_duration < 1:
            logger.info("Loading the database took %dms.", loading_duration * 1000)
        else:
            logger.info("Loading the database took %ds.", loading_duration)

        return database

    @property
    def projects_path(self) -> Path:
        return self.db_path / STORAGE_LAYOUT["projects"]

    @property
    def modules_path(self) -> Path:
        return self.db_path / STORAGE_LAYOUT["modules"]

    @property
    def manifests_path(self) -> Path:
        return self.db_path / STORAGE_LAYOUT["manifests"]

    def initialize(self) -> None:
        """
        Create the storage subdirectories.

        Raises:
            DatabaseInitError: If one of them cannot be created.
        """
        for path in (self.projects_path, self.manifests_path, self.modules_path):
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise DatabaseInitError(
                    message=f"Could not initialize database directory {path}",
                    original_exception=e,
                ) from e

    def get_project_path(self, project_id: str) -> Path:
        return self.projects_path / f"{project_id}{RECORD_EXTENSION}"

    def get_stored_project_path(self, project_id: str) -> Path:
        """The file project_id was loaded from, or where a new one would go."""
        stored_path = self.project_paths.get(project_id)
        if stored_path is not None:
            return stored_path
        return self.get_project_path(project_id)

    def get_module_path(self, module_hash: str) -> Path:
        return self.modules_path / f"{module_hash}{RECORD_EXTENSION}"

    # ------------------------------------------------------------------
    # Loading

    def load(self, progress_display: ProgressDisplay | None = None) -> None:
        """
        Replace the in-memory index with the records found on disk.

        Modules that cannot be read or decoded are skipped and recorded in
        ``warnings``. Projects are not: a damaged project file aborts the load.

        Args:
            progress_display: Where to report progress. Defaults to no output.

        Raises:
            CorruptProjectError: If a project file cannot be decoded.
            FileReadError: If a project file cannot be read.
        """
        display = progress_display if progress_display is not None else NoOpProgressDisplay()
        self.warnings = []

        with display as pd:
            self.modules = self._load_modules(pd)
            loaded_projects = self._load_projects(pd)

        # Later files win over earlier ones with the same ID.
        self.indexed_projects = {project.id: project for _, project in loaded_projects}
        self.project_paths = {project.id: path for path, project in loaded_projects}

        if self.warnings:
            logger.warning("%d record(s) were skipped while loading.", len(self.warnings))

    def _load_projects(self, display: ProgressDisplay) -> list[tuple[Path, SoftwareProject]]:
        record_paths = self._list_record_paths(self.projects_path)
        display.on_start("Loading projects...", len(record_paths))

        projects: list[tuple[Path, SoftwareProject]] = []
        seen: dict[str, Path] = {}
        for project_path in record_paths:
            content = self.file_reader.read_file(project_path)
            try:
                project = decode_project(content, str(project_path))
            except RecordDecodeError as e:
                raise CorruptProjectError(str(project_path), original_exception=e) from e

            if project.id in seen:
                logger.warning(
                    "Project %s is defined in both %s and %s, keeping the latter.",
                    project.id,
                    seen[project.id],
                    project_path,
                )
            seen[project.id] = project_path
            projects.append((project_path, project))
            display.on_advance()

        display.on_complete(f"Loaded {len(projects)} projects.", len(projects))
        return projects

    def _load_modules(self, display: ProgressDisplay) -> list[SoftwareModule]:
        module_paths = self._list_record_paths(self.modules_path)
        display.on_start("Loading modules...", len(module_paths))

        modules: list[SoftwareModule] = []
        skipped = 0
        for module_path in module_paths:
            display.on_advance()
            try:
                content = self.file_reader.read_file(module_path)
                module = decode_module(content, str(module_path))
            except (FileReadError, RecordDecodeError) as e:
                logger.warning("Could not load module file at %s: %s", module_path, e.message)
                self.warnings.append(LoadWarning(str(module_path), e.message))
                skipped += 1
                continue
            modules.append(module)

        display.on_complete(f"Loaded {len(modules)} modules.", len(modules), skipped)
        return modules

    def _list_record_paths(self, directory: Path) -> list[Path]:
        """List the record files below directory, or nothing if it cannot be listed."""
        try:
            all_paths = self.path_lister.list_paths(directory)
        except PathEnumerationError as e:
            logger.error("Could not get paths under %s: %s", directory, e.message)
            self.warnings.append(LoadWarning(str(directory), e.message))
            return []

        record_paths: list[Path] = []
        for path in all_paths:
            # Don't even try to open it if it's not a yaml file.
            if path.suffix not in RECORD_EXTENSIONS:
                logger.debug("Skipping %s, not a record file.", path)
                continue
            record_paths.append(path)
        return record_paths

    # ------------------------------------------------------------------
    # Projects

    def iter_projects(self) -> Iterator[SoftwareProject]:
        """Yield the indexed projects ordered by ID."""
        for project_id in sorted(self.indexed_projects):
            yield self.indexed_projects[project_id]

    def get_project(self, project_id: str) -> SoftwareProject | None:
        """
        Look up a project by ID.

        Returns:
            A copy of the project. Changing it does not change the database; use
            update_project() for that.
        """
        project = self.indexed_projects.get(project_id)
        if project is None:
            return None
        return copy.deepcopy(project)

    def has_project(self, project_id: str) -> bool:
        return project_id in self.indexed_projects

    def search_projects(self, search_term: str) -> list[SoftwareProject]:
        """
        Find the projects whose name or one of whose VCS URLs contains search_term.

        The match is case-sensitive. Results are ordered by project ID.
        """
        projects: list[SoftwareProject] = []
        for project in self.iter_projects():
            if (
                search_term in project.name
                or search_term in project.vcs_url
                or any(search_term in vcs_url for vcs_url in project.vcs_urls)
            ):
                projects.append(project)
        return projects

    def add_project(self, project: SoftwareProject) -> None:
        """
        Store a newly discovered project.

        A project that is already indexed, or whose file already exists, is
        merged into the stored one instead of overwriting it.

        Raises:
            MissingProjectIdError: If the project has no ID.
            InvalidProjectIdError: If the ID cannot be used as a file name.
            ProjectNotFoundError: If the file exists but the project is not
                indexed, or the project is indexed but its file is gone.
            FileWriteError: If the project file cannot be written.
        """
        if not project.id:
            raise MissingProjectIdError("Trying to add a project to the db without an id!")
        check_project_id(project.id)

        project_path = self.get_stored_project_path(project.id)
        if self.has_project(project.id) or self.file_writer.file_exists(project_path):
            self.update_project(project)
            return

        logger.info("Adding project at %s", project_path)
        self.file_writer.write_file(project_path, encode_project(project))
        self.indexed_projects[project.id] = copy.deepcopy(project)
        self.project_paths[project.id] = project_path

    def update_project(self, project: SoftwareProject) -> None:
        """
        Merge project into the stored project with the same ID and persist the result.

        The result is written back to the file the project was loaded from.

        Raises:
            MissingProjectIdError: If the project has no ID.
            InvalidProjectIdError: If the ID cannot be used as a file name.
            ProjectNotFoundError: If no project with that ID is indexed, or its
                file does not exist. Nothing is written in that case.
            ProjectIdentityError: If the stored project has a different main
                VCS URL.
            FileWriteError: If the project file cannot be written.
        """
        if not project.id:
            raise MissingProjectIdError("Trying to update a project to the db without an id!")
        check_project_id(project.id)

        existing_project = self.indexed_projects.get(project.id)
        if existing_project is None:
            raise ProjectNotFoundError(project.id, f"Project {project.id} is not indexed")

        project_path = self.get_stored_project_path(project.id)
        if not self.file_writer.file_exists(project_path):
            raise ProjectNotFoundError(project.id)

        logger.info("Updating project at %s", project_path)
        existing_project.merge(project)
        self.file_writer.write_file(project_path, encode_project(existing_project))

    # ------------------------------------------------------------------
    # Modules

    def search_modules(self, search_term: str) -> list[SoftwareModule]:
        """Find the modules whose name contains search_term, ignoring case."""
        search_term = search_term.lower()
        return [
            module
            for module in self.modules
            if search_term in module.flatpak_module.name.lower()
        ]

    def add_module(self, new_module: FlatpakModule, project_id: str | None = None) -> str:
        """
        Store a module, unless a module with the same content is already stored.

        Args:
            new_module: The module definition.
            project_id: The project the module was found in, if any.

        Returns:
            The module's content fingerprint.

        Raises:
            FileWriteError: If the module file cannot be written.
        """
        module_hash = get_module_hash(new_module)
        module_path = self.get_module_path(module_hash)
        if self.file_writer.file_exists(module_path):
            # The path is derived from the content, the existing file is identical.
            logger.debug("Module %s is already stored.", module_hash)
            return module_hash

        logger.info("Adding module at %s", module_path)
        software_module = SoftwareModule(
            flatpak_module=copy.deepcopy(new_module), project_id=project_id
        )
        self.file_writer.write_file(module_path, encode_module(software_module))
        self.modules.append(software_module)
        return module_hash

    def remove_module(self, module_hash: str) -> None:
        raise NotImplementedError("Removing modules is not supported.")

    # ------------------------------------------------------------------

    def get_database_memory_size(self) -> int:
        """
        Approximate size of the loaded records, in bytes.

        Only the top-level objects are measured, not what they reference.
        """
        db_size = 0
        for module in self.modules:
            db_size += sys.getsizeof(module)
        for project_id, project in self.indexed_projects.items():
            db_size += sys.getsizeof(project_id)
            db_size += sys.getsizeof(project)
        return db_size
