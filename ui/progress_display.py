"""
Progress reporting protocol for the database load.

The database reports its progress through this protocol so that it does not
depend on Rich: the CLI passes a ``RichProgressDisplay``, library callers and
tests get a ``NoOpProgressDisplay``.
"""

from types import TracebackType
from typing import Protocol

from rich.progress import Progress, TaskID
from ui.progress import (
    ProgressState,
    create_progress,
    create_task,
    finish_task,
)


class ProgressDisplay(Protocol):
    """
    Protocol for progress reporting.

    The lifecycle is:
    1. Context manager entry (__enter__)
    2. on_start() - once per batch of records
    3. on_advance() - once per record read
    4. on_complete() - once per batch
    5. Context manager exit (__exit__)
    """

    def __enter__(self) -> "ProgressDisplay":
        """Enter the progress context."""

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the progress context."""

    def on_start(self, description: str, total: int | None) -> None:
        """
        Start reporting a new batch.

        Args:
            description: Text displayed next to the bar.
            total: Number of files in the batch, or None if unknown.
        """

    def on_advance(self, count: int = 1) -> None:
        """Report that count more files were handled."""

    def on_complete(self, description: str, completed: int, skipped: int = 0) -> None:
        """
        Finish the current batch.

        Args:
            description: Final text displayed next to the bar.
            completed: Number of records loaded.
            skipped: Number of records skipped; a non-zero value is shown as a warning.
        """


class RichProgressDisplay:
    """
    Rich implementation of ProgressDisplay.

    Each batch gets its own task (one for projects, one for modules).
    """

    def __init__(self) -> None:
        """Initialize the display. The Progress instance is created on entry."""
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def __enter__(self) -> "RichProgressDisplay":
        self._progress = create_progress()
        self._progress.__enter__()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._progress:
            self._progress.__exit__(exc_type, exc_val, exc_tb)

    def on_start(self, description: str, total: int | None) -> None:
        """
        Create a new task in the progress bar.

        Raises:
            RuntimeError: If not used as a context manager.
        """
        self._task = create_task(self._require_progress(), description, total=total)

    def on_advance(self, count: int = 1) -> None:
        """
        Advance the current task.

        Raises:
            RuntimeError: If not used as a context manager or if on_start()
                was not called first.
        """
        progress = self._require_progress()
        if self._task is None:
            raise RuntimeError("on_start() must be called before on_advance()")
        progress.update(self._task, advance=count)

    def on_complete(self, description: str, completed: int, skipped: int = 0) -> None:
        """
        Mark the current task complete, in yellow if records were skipped.

        Raises:
            RuntimeError: If not used as a context manager or if on_start()
                was not called first.
        """
        progress = self._require_progress()
        if self._task is None:
            raise RuntimeError("on_start() must be called before on_complete()")

        state = ProgressState.WARNING if skipped else ProgressState.COMPLETE
        finish_task(progress, self._task, description, completed + skipped, state)
        self._task = None

    def _require_progress(self) -> Progress:
        if not self._progress:
            raise RuntimeError(
                "RichProgressDisplay must be used as a context manager. "
                "Use: with RichProgressDisplay() as rpd:"
            )
        return self._progress


class NoOpProgressDisplay:
    """
    No-op implementation of ProgressDisplay.

    Default for the database, so that loading from library code or tests
    prints nothing.
    """

    def __enter__(self) -> "NoOpProgressDisplay":
        return self

    def __exit__(self, *args) -> None:
        """Exit the progress context (no-op)."""

    def on_start(self, description: str, total: int | None) -> None:
        """No-op: does nothing."""

    def on_advance(self, count: int = 1) -> None:
        """No-op: does nothing."""

    def on_complete(self, description: str, completed: int, skipped: int = 0) -> None:
        """No-op: does nothing."""
