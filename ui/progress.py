"""
Progress bar helpers built on Rich.

The database load is the only long-running operation of the registry; these
helpers give it a spinner and a bar on stderr, colored by outcome, so that
stdout stays clean for command output.
"""

from enum import StrEnum
from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
)


class ProgressState(StrEnum):
    """
    Colors used for a task's description, by outcome.

    Attributes:
        IN_PROGRESS: Magenta while records are being read.
        COMPLETE: Green once every record was loaded.
        WARNING: Yellow when some records were skipped.
    """

    IN_PROGRESS = "magenta"
    COMPLETE = "green"
    WARNING = "yellow"


def create_progress(console: Optional[Console] = None) -> Progress:
    """
    Create a Rich Progress instance writing to stderr.

    Returns:
        Progress: A configured instance with a spinner, a description, a bar
        and an "n/total" counter.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console or Console(stderr=True),
    )


def create_task(progress: Progress, description: str, total: Optional[int]) -> TaskID:
    return progress.add_task(f"[{ProgressState.IN_PROGRESS}]{description}", total=total)


def finish_task(
    progress: Progress,
    task: TaskID,
    description: str,
    completed: int,
    progress_state: ProgressState = ProgressState.COMPLETE,
) -> None:
    """
    Fill the task's bar and recolor its description.

    Args:
        progress: The Rich Progress instance containing the task.
        task: The identifier of the task to finish.
        description: Final description text.
        completed: Number of items processed. Also used as the total, so the
            bar ends full even when the total was unknown.
        progress_state: Color of the final description.
    """
    progress.update(
        task,
        total=completed,
        completed=completed,
        description=f"[{progress_state}]{description}",
    )
