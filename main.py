"""
fpm CLI Entry Point.

This module implements the command-line interface of the fpm registry, a local
database of software projects and the Flatpak modules that build them. Every
command opens the database (loading all records from disk), runs one query or
mutation, and exits.

Commands:

-   **stats**: Summary of the database content.
-   **search-projects / search-modules**: Substring search.
-   **show**: Print a project record, picking among search matches when the
    ID is not known.
-   **add-project / add-module**: Import a record from a YAML file. Existing
    projects are merged, existing modules are left alone.
-   **detect-siblings**: Group projects sharing their root commits.
-   **mine**: Fingerprint a project from a local git checkout.
-   **default-modules**: Derive Flatpak modules from a project's build systems.
-   **configure**: Choose where the database lives.

Usage:
    $ python main.py search-projects gnome
    $ python main.py --db-path ~/my-db stats

Dependencies:
    - Typer: CLI argument parsing and app structure.
    - Rich: Terminal UI, colors, tables and progress visualization.
    - Inquirer: Interactive terminal user prompts.
    - PyYAML: Record files.
"""

from contextlib import contextmanager
import logging
from pathlib import Path
from typing import Annotated, Iterator
import typer
from rich import print as pr

from adapters.git import GitClient
from core.codec import (
    decode_module_manifest,
    decode_project,
    encode_module_manifests,
    encode_project,
)
from core.config import get_db_path, save_config
from core.database import Database
from core.exceptions import (
    DatabaseError,
    DatabaseInitError,
    FileIOError,
    GitCommandError,
    NotARepositoryError,
)
from core.file_io import FilesystemFileReader
from core.mining import mine_project
from core.models import SoftwareProject
from core.siblings import detect_siblings
from core.stats import compute_stats, format_stats
from log import configure_logging
from ui.progress_display import RichProgressDisplay
from ui.prompts import prompt_db_path, select_project
from ui.tables import print_modules, print_projects

app = typer.Typer(no_args_is_help=True)

ExistingFile = Annotated[
    Path,
    typer.Argument(
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="YAML file to import",
    ),
]


@app.callback()
def main(
    ctx: typer.Context,
    db_path: Annotated[
        Path | None,
        typer.Option(
            "--db-path",
            file_okay=False,
            help="Database directory. Overrides FPM_DB_DIR and the settings file.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logs."),
    ] = False,
):
    """
    Local registry of software projects and their Flatpak modules.
    """
    configure_logging(logging.DEBUG if verbose else None)
    ctx.obj = {"db_path": db_path}


@app.command()
def stats(ctx: typer.Context):
    """Print statistics about the database."""
    database = open_database(ctx)
    typer.echo(format_stats(compute_stats(database)), nl=False)


@app.command("search-projects")
def search_projects(ctx: typer.Context, term: str):
    """Find projects whose name or VCS URL contains TERM (case-sensitive)."""
    database = open_database(ctx)
    print_projects(database.search_projects(term))


@app.command("search-modules")
def search_modules(ctx: typer.Context, term: str):
    """Find modules whose name contains TERM (case-insensitive)."""
    database = open_database(ctx)
    print_modules(database.search_modules(term))


@app.command()
def show(ctx: typer.Context, project_id: str):
    """
    Print a project record.

    If PROJECT_ID is not a known ID, it is used as a search term and the
    user picks among the matches.
    """
    database = open_database(ctx)
    project = database.get_project(project_id)
    if project is None:
        candidates = database.search_projects(project_id)
        if not candidates:
            pr(f"[red]Error:[/red] No project matching [green]'{project_id}'[/green]")
            raise typer.Exit(code=1)
        project = select_project(candidates)
    typer.echo(encode_project(project), nl=False)


@app.command("add-project")
def add_project(ctx: typer.Context, file: ExistingFile):
    """Add a project from a YAML record, merging it into an existing one."""
    database = open_database(ctx)
    with reporting_errors():
        project = decode_project(FilesystemFileReader().read_file(file), str(file))
        existed = database.has_project(project.id)
        database.add_project(project)
    verb = "Updated" if existed else "Added"
    pr(f"[green]{verb} project {project.id}.[/green]")


@app.command("add-module")
def add_module(
    ctx: typer.Context,
    file: ExistingFile,
    project_id: Annotated[
        str | None,
        typer.Option(help="Project the module was found in."),
    ] = None,
):
    """Add a module from a Flatpak module manifest."""
    database = open_database(ctx)
    with reporting_errors():
        module = decode_module_manifest(
            FilesystemFileReader().read_file(file), str(file)
        )
        module_count = len(database.modules)
        module_hash = database.add_module(module, project_id=project_id)
    if len(database.modules) == module_count:
        pr(f"[yellow]Module {module.name} is already stored as {module_hash}.[/yellow]")
    else:
        pr(f"[green]Added module {module.name} as {module_hash}.[/green]")


@app.command("detect-siblings")
def detect_siblings_command(ctx: typer.Context):
    """Group projects that share their root commits."""
    database = open_database(ctx)
    with reporting_errors():
        groups = detect_siblings(database)
    pr(f"[green]Found {len(groups)} group(s) of siblings.[/green]")
    for siblings in groups.values():
        pr(f"  {', '.join(sorted(siblings))}")


@app.command()
def mine(
    ctx: typer.Context,
    project_id: str,
    path: Annotated[
        Path,
        typer.Option(
            exists=True,
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
            help="Local git checkout of the project",
        ),
    ],
):
    """Record root commits, branch and build systems from a local checkout."""
    database = open_database(ctx)
    with reporting_errors():
        project = mine_project(database, project_id, GitClient(path))
    typer.echo(encode_project(project), nl=False)


@app.command("default-modules")
def default_modules(ctx: typer.Context, project_id: str):
    """Print the Flatpak modules derived from a project's build systems."""
    database = open_database(ctx)
    project = require_project(database, project_id)
    modules = project.get_default_modules()
    if not modules:
        pr(f"[yellow]No Flatpak build system known for {project_id}.[/yellow]")
        raise typer.Exit(code=1)
    typer.echo(encode_module_manifests(modules), nl=False)


@app.command()
def configure():
    """Choose the database directory (saved in ~/.fpm/settings.json)."""
    with reporting_errors():
        current_db_path = get_db_path()
    db_path = prompt_db_path(current_db_path)
    with reporting_errors():
        save_config(db_path)
    pr(f"[green]Config saved. Database directory: {db_path}[/green]\n")


def open_database(ctx: typer.Context) -> Database:
    """
    Load the database selected by --db-path, the environment or the settings.

    Raises:
        typer.Exit: If the database cannot be initialized or loaded.
    """
    with reporting_errors():
        db_path = (ctx.obj or {}).get("db_path") or get_db_path()
        database = Database.open(db_path, progress_display=RichProgressDisplay())
    for warning in database.warnings:
        pr(f"[yellow]⚠ Warning:[/yellow] Skipped {warning.file_path}: {warning.reason}")
    return database


def require_project(database: Database, project_id: str) -> SoftwareProject:
    project = database.get_project(project_id)
    if project is None:
        pr(f"[red]Error:[/red] Unknown project [green]'{project_id}'[/green]")
        raise typer.Exit(code=1)
    return project


@contextmanager
def reporting_errors() -> Iterator[None]:
    """
    Turn the registry's exceptions into friendly messages and exit code 1.
    """
    try:
        yield
    except DatabaseInitError as e:
        print_database_init_err(e)
    except DatabaseError as e:
        print_database_err(e)
    except FileIOError as e:
        print_file_io_err(e)
    except (GitCommandError, NotARepositoryError) as e:
        print_git_err(e)


def print_database_init_err(e: DatabaseInitError) -> None:
    """
    Displays a user-friendly error message when the database directory cannot be created.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]Database Error[/bold red]")
    pr(f"{e.message}.")
    pr(
        "\n[yellow]Quick Fix:[/yellow] Check FPM_DB_DIR or run `configure` to pick a writable directory."
    )

    pr("\n--- PLEASE REPORT THIS ---")
    pr(f"Diagnostics: {e.diagnostic_info}")
    raise typer.Exit(code=1) from e


def print_database_err(e: DatabaseError) -> None:
    """
    Displays a user-friendly error message for a violated database invariant.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]Database Error[/bold red]")
    pr(f"{e.message}")
    file_path = getattr(e, "file_path", None)
    if file_path:
        pr(f"File path: [yellow]{file_path}[/yellow]")
    original_exception = getattr(e, "original_exception", None)
    if original_exception:
        pr(f"\nTechnical details: {original_exception}")
    raise typer.Exit(code=1) from e


def print_file_io_err(e: FileIOError) -> None:
    """
    Displays a user-friendly error message for file I/O operation failures.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]File I/O Error[/bold red]")
    pr(f"The app encountered an error while working with files: {e.message}")
    if e.file_path:
        pr(f"File path: [yellow]{e.file_path}[/yellow]")

    pr("\n[yellow]Quick Fix:[/yellow] Check file permissions and available disk space.")
    if e.original_exception:
        pr(f"\nTechnical details: {e.original_exception}")

    raise typer.Exit(code=1) from e


def print_git_err(e: GitCommandError | NotARepositoryError) -> None:
    """
    Displays a user-friendly error message when a checkout cannot be mined.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]Git Error[/bold red]")
    pr(f"{e.message}")
    original_exception = getattr(e, "original_exception", None)
    if original_exception:
        pr(f"\nTechnical details: {original_exception}")
    raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
