"""
Rich rendering of projects and modules for the CLI.
"""

from rich.console import Console
from rich.table import Table

from core.models import SoftwareModule, SoftwareProject

console: Console = Console()


def projects_table(projects: list[SoftwareProject]) -> Table:
    table = Table(title=f"{len(projects)} project(s)")
    table.add_column("ID", style="green", no_wrap=True)
    table.add_column("Name")
    table.add_column("VCS URL", style="cyan")
    table.add_column("Build systems")
    for project in projects:
        table.add_row(
            project.id,
            project.name,
            project.vcs_url,
            ", ".join(sorted(project.build_systems)),
        )
    return table


def modules_table(modules: list[SoftwareModule]) -> Table:
    table = Table(title=f"{len(modules)} module(s)")
    table.add_column("Name", style="green")
    table.add_column("Build system")
    table.add_column("Sources", justify="right")
    table.add_column("Project")
    for module in modules:
        flatpak_module = module.flatpak_module
        table.add_row(
            flatpak_module.name,
            flatpak_module.buildsystem or "autotools",
            str(len(flatpak_module.sources)),
            module.project_id or "",
        )
    return table


def print_projects(projects: list[SoftwareProject]) -> None:
    console.print(projects_table(projects))


def print_modules(modules: list[SoftwareModule]) -> None:
    console.print(modules_table(modules))
