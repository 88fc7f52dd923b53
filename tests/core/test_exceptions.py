"""
Comprehensive tests for the exceptions module using pytest.

Tests cover:
- FileIOError and its subclasses: messages, file paths, original exceptions
- DatabaseError and its subclasses: default messages and extra attributes
- DatabaseInitError: diagnostic info
- Git errors
"""

import os
import pytest

from core.exceptions import (
    CorruptProjectError,
    DatabaseError,
    DatabaseInitError,
    FileIOError,
    FileReadError,
    FileWriteError,
    GitCommandError,
    InvalidFilePathError,
    InvalidProjectIdError,
    MissingProjectIdError,
    NotARepositoryError,
    PathEnumerationError,
    ProjectIdentityError,
    ProjectNotFoundError,
    RecordDecodeError,
)


# ============================================================================
# Tests for FileIOError
# ============================================================================


@pytest.mark.unit
def test_file_io_error_default_message():
    """FileIOError should have a default message when none provided."""
    error = FileIOError()
    assert str(error) == "A file operation failed"
    assert error.file_path is None
    assert error.original_exception is None


@pytest.mark.unit
def test_file_io_error_with_all_parameters():
    """FileIOError should store message, path and original exception."""
    original = OSError("Disk full")
    error = FileIOError(message="Write failed", file_path="/db/a.yaml", original_exception=original)

    assert error.message == "Write failed"
    assert error.file_path == "/db/a.yaml"
    assert error.original_exception is original


@pytest.mark.unit
@pytest.mark.parametrize(
    "error_class",
    [InvalidFilePathError, FileReadError, FileWriteError, PathEnumerationError],
)
def test_file_io_error_subclasses(error_class):
    """All file errors should be catchable as FileIOError."""
    error = error_class(message="failed", file_path="/db")

    assert isinstance(error, FileIOError)
    assert not isinstance(error, DatabaseError)
    assert error.file_path == "/db"


# ============================================================================
# Tests for DatabaseError and subclasses
# ============================================================================


@pytest.mark.unit
def test_database_error_default_message():
    assert DatabaseError().message == "A database error occurred"


@pytest.mark.unit
def test_database_init_error_diagnostic_info():
    """DatabaseInitError should describe the original exception for reports."""
    original = PermissionError("Permission denied")
    error = DatabaseInitError(message="Could not initialize", original_exception=original)

    assert isinstance(error, DatabaseError)
    assert error.diagnostic_info == {
        "type": "PermissionError",
        "details": "Permission denied",
        "os_name": os.name,
    }


@pytest.mark.unit
def test_database_init_error_without_original_exception():
    error = DatabaseInitError()

    assert error.message == "Could not initialize the database directory"
    assert error.diagnostic_info["type"] == "Unknown"
    assert error.diagnostic_info["details"] == "No details"


@pytest.mark.unit
def test_record_decode_error():
    error = RecordDecodeError("Missing or invalid 'id' field", file_path="a.yaml")

    assert isinstance(error, DatabaseError)
    assert error.file_path == "a.yaml"
    assert error.original_exception is None


@pytest.mark.unit
def test_corrupt_project_error_message():
    cause = RecordDecodeError("Invalid YAML")
    error = CorruptProjectError("/db/projects/a.yaml", original_exception=cause)

    assert error.message == "Could not parse project file at /db/projects/a.yaml"
    assert error.original_exception is cause


@pytest.mark.unit
def test_missing_project_id_error_default_message():
    assert MissingProjectIdError().message == "Trying to store a project without an id"


@pytest.mark.unit
def test_project_not_found_error():
    error = ProjectNotFoundError("org.example.App")

    assert error.message == "Project org.example.App does not exist"
    assert error.project_id == "org.example.App"
    assert ProjectNotFoundError("x", "Project x is not indexed").message == "Project x is not indexed"


@pytest.mark.unit
def test_invalid_project_id_error():
    error = InvalidProjectIdError("../escaped")

    assert isinstance(error, DatabaseError)
    assert error.message == "Invalid project id: '../escaped'"
    assert error.project_id == "../escaped"


@pytest.mark.unit
def test_project_identity_error():
    error = ProjectIdentityError("IDs", "a", "b")

    assert error.message == "Cannot merge projects with different IDs! a != b"
    assert (error.field_name, error.left, error.right) == ("IDs", "a", "b")


# ============================================================================
# Tests for git errors
# ============================================================================


@pytest.mark.unit
def test_git_command_error():
    original = OSError("git not found")
    error = GitCommandError(["git", "rev-parse", "HEAD"], original_exception=original)

    assert error.message == "Git command failed: git rev-parse HEAD"
    assert error.command == ["git", "rev-parse", "HEAD"]
    assert error.original_exception is original


@pytest.mark.unit
def test_not_a_repository_error():
    error = NotARepositoryError("/tmp/app")

    assert str(error) == "Not a git repository: /tmp/app"
    assert error.path == "/tmp/app"
