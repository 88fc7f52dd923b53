"""
Application-wide constants.

This module defines the storage layout of a database root, the file names
recognized as records, the directories skipped while enumerating, and the
marker files used to guess a project's build systems.
"""

from typing import Final, Mapping
from models import StorageLayout


STORAGE_LAYOUT: Final[StorageLayout] = {
    "projects": "projects",
    "modules": "modules",
    "manifests": "manifests",
}

# Record documents are YAML. Anything else found next to them is ignored.
RECORD_EXTENSIONS: Final[frozenset[str]] = frozenset({".yaml", ".yml"})

# Extension used when writing new records.
RECORD_EXTENSION: Final[str] = ".yaml"

# Version-control and build-cache directories, skipped at any depth.
IGNORED_DIRS: Final[frozenset[str]] = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".bzr",
        ".flatpak-builder",
        "__pycache__",
        ".cache",
    }
)

DB_DIR_ENV_VAR: Final[str] = "FPM_DB_DIR"
DEFAULT_DB_DIRNAME: Final[str] = ".fpm-db"
LOG_LEVEL_ENV_VAR: Final[str] = "FPM_LOG_LEVEL"

# Top-level files that reveal the build system of a checkout. Keys are exact
# file names except for entries starting with "*.", which match a suffix.
BUILD_SYSTEM_MARKERS: Final[Mapping[str, str]] = {
    "meson.build": "meson",
    "CMakeLists.txt": "cmake",
    "configure.ac": "autotools",
    "configure.in": "autotools",
    "autogen.sh": "autotools",
    "*.pro": "qmake",
    "Cargo.toml": "cargo",
    "setup.py": "python",
    "pyproject.toml": "python",
    "Makefile": "make",
    "package.json": "npm",
}
