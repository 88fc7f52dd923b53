"""
Custom exception classes for the fpm registry.

This module defines the errors raised while reading and writing record files,
loading the database, and mutating projects. They are split in two families:

- ``FileIOError`` and its subclasses describe a failed filesystem operation on
  a specific path.
- ``DatabaseError`` and its subclasses describe a violated invariant of the
  record store (missing IDs, unknown projects, corrupt records, identity
  mismatches). These are fatal for the operation that raised them.
"""

import os
from typing import Optional


class FileIOError(Exception):
    """
    Base exception for file I/O errors.

    Attributes:
        message: A human-readable error message describing what went wrong.
        file_path: The path of the file involved, if known.
        original_exception: The underlying exception that caused this error, if any.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        file_path: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.message = message or "A file operation failed"
        super().__init__(self.message)
        self.file_path = file_path
        self.original_exception = original_exception


class InvalidFilePathError(FileIOError):
    """Raised when a path cannot be used, e.g. its parent directory is missing."""


class FileReadError(FileIOError):
    """Raised when a record file exists but cannot be read."""


class FileWriteError(FileIOError):
    """Raised when a record file cannot be written."""


class PathEnumerationError(FileIOError):
    """
    Raised when a directory cannot be listed.

    The database treats this as a soft error: the directory is considered empty
    and a warning is recorded.
    """


class DatabaseError(Exception):
    """
    Base exception for record store errors.

    Attributes:
        message: A human-readable error message describing what went wrong.
    """

    def __init__(self, message: Optional[str] = None):
        self.message = message or "A database error occurred"
        super().__init__(self.message)


class DatabaseInitError(DatabaseError):
    """
    Raised when the storage directories cannot be created.

    Attributes:
        original_exception: The underlying exception that caused this error, if any.
        diagnostic_info: A dictionary containing the exception type, details
            and OS name, for error reports.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message or "Could not initialize the database directory")
        self.original_exception = original_exception
        self.diagnostic_info = {
            "type": (
                type(original_exception).__name__ if original_exception else "Unknown"
            ),
            "details": str(original_exception) if original_exception else "No details",
            "os_name": os.name,
        }


class RecordDecodeError(DatabaseError):
    """
    Raised when a document cannot be decoded into a project or module record.

    Attributes:
        file_path: The file the document was read from, if known.
        original_exception: The parser error, if the failure came from YAML itself.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        file_path: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message or "Could not decode record")
        self.file_path = file_path
        self.original_exception = original_exception


class CorruptProjectError(DatabaseError):
    """
    Raised at load time when a project file fails to decode.

    Unlike modules, projects are never skipped: a project silently missing from
    the index could be added again as a duplicate.
    """

    def __init__(
        self,
        file_path: str,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(f"Could not parse project file at {file_path}")
        self.file_path = file_path
        self.original_exception = original_exception


class MissingProjectIdError(DatabaseError):
    """Raised when a project without an ID is added or updated."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Trying to store a project without an id")


class ProjectNotFoundError(DatabaseError):
    """
    Raised when an update targets a project that is not indexed or not on disk.

    Attributes:
        project_id: The ID that could not be found.
    """

    def __init__(self, project_id: str, message: Optional[str] = None):
        super().__init__(message or f"Project {project_id} does not exist")
        self.project_id = project_id


class InvalidProjectIdError(DatabaseError):
    """
    Raised when a project ID cannot be used as a record file name.

    Attributes:
        project_id: The rejected ID.
    """

    def __init__(self, project_id: str, message: Optional[str] = None):
        super().__init__(message or f"Invalid project id: {project_id!r}")
        self.project_id = project_id


class ProjectIdentityError(DatabaseError):
    """
    Raised when two projects with different identities are merged.

    Attributes:
        field_name: The identity field that differs (``id`` or ``vcs_url``).
        left: The value on the project being merged into.
        right: The value on the incoming project.
    """

    def __init__(self, field_name: str, left: str, right: str):
        super().__init__(
            f"Cannot merge projects with different {field_name}! {left} != {right}"
        )
        self.field_name = field_name
        self.left = left
        self.right = right


class GitCommandError(Exception):
    """
    Raised when a git command fails while mining a checkout.

    Attributes:
        command: The git command line that failed.
        original_exception: The subprocess error, if any.
    """

    def __init__(
        self,
        command: list[str],
        original_exception: Optional[Exception] = None,
    ):
        self.command = command
        self.message = f"Git command failed: {' '.join(command)}"
        super().__init__(self.message)
        self.original_exception = original_exception


class NotARepositoryError(Exception):
    """Raised when a path handed to the miner is not a git working tree."""

    def __init__(self, path: str):
        self.path = path
        self.message = f"Not a git repository: {path}"
        super().__init__(self.message)
