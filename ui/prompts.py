"""
Interactive user prompts for the fpm CLI.

Two flows need input from the user:

1. Project selection: when ``show`` is given an ID that is not in the
   database but a search finds several candidates, the user picks one.
2. Configuration: ``configure`` asks for the database location, pre-filled
   with the current value.

Dependencies:
    - inquirer: Interactive terminal prompts
    - rich: Terminal formatting and colors
    - typer: CLI framework integration
"""

from pathlib import Path
import inquirer  # type: ignore
from inquirer.themes import GreenPassion  # type: ignore
from rich import print as pr
import typer

from core.models import SoftwareProject


def select_project(candidates: list[SoftwareProject]) -> SoftwareProject:
    """
    Ask the user to pick one project among search results.

    Args:
        candidates: The projects to choose from. Must not be empty.

    Returns:
        SoftwareProject: The selected project. If there is a single candidate it
        is returned without asking.

    Raises:
        typer.Exit: If the prompt is cancelled.
    """
    if len(candidates) == 1:
        return candidates[0]

    pr(
        f"[bold green]Found {len(candidates)} matching projects. Which one?[/bold green]\n"
    )
    choices = [(f"{project.id} ({project.name})", project.id) for project in candidates]

    questions = [
        inquirer.List(
            "project_id",
            message="Hit [ENTER] to make your selection",
            choices=choices,
        ),
    ]

    answers = inquirer.prompt(questions, theme=GreenPassion())
    if not answers:
        raise typer.Exit()

    selected_id = answers["project_id"]
    for project in candidates:
        if project.id == selected_id:
            return project
    raise typer.Exit(code=1)


def prompt_db_path(current: Path) -> Path:
    """
    Ask the user for the database location, showing the current one.

    Returns:
        Path: The entered location, with ``~`` expanded.

    Raises:
        typer.Exit: If the prompt is cancelled or left empty.
    """
    pr("\n[bold green]Configure the database location.[/bold green]\n")

    questions = [
        inquirer.Text("db_path", message="Database directory", default=str(current)),
    ]

    answers = inquirer.prompt(questions, theme=GreenPassion())
    if not answers:
        raise typer.Exit(code=1)

    db_path = (answers.get("db_path") or "").strip()
    if not db_path:
        pr("\n[bold][red]Error:[/bold] The database directory is required.")
        raise typer.Exit(code=1)

    return Path(db_path).expanduser()
