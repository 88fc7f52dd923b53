"""
Type definitions shared across the fpm registry.

This module contains the enums and TypedDict structures used by the storage
constants, the project model and the repository miner.
"""

from enum import StrEnum
from typing import TypedDict


class BuildSystem(StrEnum):
    """
    Build systems understood by flatpak-builder.

    Projects may record any build system name; only these can be turned into
    a Flatpak module definition.
    """

    AUTOTOOLS = "autotools"
    CMAKE = "cmake"
    CMAKE_NINJA = "cmake-ninja"
    MESON = "meson"
    QMAKE = "qmake"
    SIMPLE = "simple"


class StorageLayout(TypedDict):
    """
    Names of the subdirectories making up a database root.

    Attributes:
        projects: Directory holding one file per project, named by ID.
        modules: Directory holding one file per module, named by fingerprint.
        manifests: Directory reserved for imported manifests.
    """

    projects: str
    modules: str
    manifests: str
