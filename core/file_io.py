from pathlib import Path
from typing import Callable, Iterable, Protocol

from core.exceptions import (
    FileReadError,
    FileWriteError,
    InvalidFilePathError,
)


class FileReader(Protocol):
    """
    Protocol defining the interface for reading record files.

    This protocol allows the database to read from the filesystem in production
    and from canned contents in tests.
    """

    def read_file(self, file_path: Path) -> str:
        """
        Read the text content of a file as UTF-8.

        Args:
            file_path: The path to the file to read.

        Returns:
            The file content.

        Raises:
            FileReadError: If the file cannot be read.
        """


class FileWriter(Protocol):
    """
    Protocol defining the interface for writing record files.

    Every write fully replaces the previous content of the file.
    """

    def write_file(self, file_path: Path, data: str) -> None:
        """
        Write data to a file, truncating it first.

        Args:
            file_path: The path to the file to write.
            data: String data to write.
        """

    def file_exists(self, file_path: Path) -> bool:
        """
        Check whether a record file is already stored at file_path.

        Args:
            file_path: The path to check.
        """


class FilesystemFileReader:

    def read_file(self, file_path: Path) -> str:
        """
        Read the text content of a file as UTF-8.

        Records are read strictly: invalid UTF-8 is a read failure, not
        something to paper over, since a damaged record must not be loaded.

        Args:
            file_path: The path to the file to read.

        Returns:
            The file content.

        Raises:
            FileReadError: If the file is missing, unreadable or not valid UTF-8.
        """
        try:
            with file_path.open("r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise FileReadError(
                message=f"Failed to read file: {file_path}",
                file_path=str(file_path),
                original_exception=e,
            ) from e


class FilesystemFileWriter:

    def write_file(self, file_path: Path, data: str) -> None:
        """
        Writes data to a file, replacing its content.

        Args:
            file_path: The path to the file to write.
            data: String data to write.

        Raises:
            InvalidFilePathError: If the parent directory does not exist.
            FileWriteError: If writing to the file fails.
        """
        parent = file_path.parent
        if not parent.is_dir():
            raise InvalidFilePathError(
                message=f"Parent directory does not exist: {parent}",
                file_path=str(file_path),
            )

        try:
            with open(file_path, "w", encoding="utf-8") as f:
                f.write(data)
        except OSError as e:
            raise FileWriteError(
                message=f"Failed to write to file: {file_path}",
                file_path=str(file_path),
                original_exception=e,
            ) from e

    def file_exists(self, file_path: Path) -> bool:
        return file_path.is_file()


class MockFileReader:
    """
    Mock implementation of FileReader for testing.

    Returns configurable file contents, allowing tests to control file reading
    behavior without touching the filesystem.
    """

    def __init__(
        self,
        return_value: str | None = None,
        read_file_fn: Callable[[Path], str] | None = None,
    ):
        """
        Initialize MockFileReader with configurable reading behavior.

        Args:
            return_value: If provided, always returns this value regardless of input.
                Takes precedence over read_file_fn if both are provided.
            read_file_fn: Optional callable that takes a file path and returns file
                content. It may raise FileReadError to simulate failures.

        Attributes (for test inspection):
            read_file_calls: List of file paths passed to read_file()
        """
        self.return_value = return_value
        self.read_file_fn = read_file_fn
        self.read_file_calls: list[Path] = []

    def read_file(self, file_path: Path) -> str:
        self.read_file_calls.append(file_path)
        if self.return_value is not None:
            return self.return_value
        if self.read_file_fn is not None:
            return self.read_file_fn(file_path)
        return ""


class MockFileWriter:
    """
    Mock implementation of FileWriter for testing.

    Records every write without touching the filesystem. A path exists once it
    has been written, or if it was passed in existing_files.

    Attributes (for test inspection):
        write_file_calls: List of (file_path, data) tuples passed to write_file()
        written_files: The last data written to each path.
    """

    def __init__(self, existing_files: Iterable[Path] = ()) -> None:
        self.existing_files = set(existing_files)
        self.write_file_calls: list[tuple[Path, str]] = []
        self.written_files: dict[Path, str] = {}

    def write_file(self, file_path: Path, data: str) -> None:
        self.write_file_calls.append((file_path, data))
        self.written_files[file_path] = data

    def file_exists(self, file_path: Path) -> bool:
        return file_path in self.written_files or file_path in self.existing_files
