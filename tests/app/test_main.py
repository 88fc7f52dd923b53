"""
Tests for the fpm command-line interface.

Tests cover:
- Importing records (add-project, add-module) and reading them back
- Searches and show, including the interactive fallback
- detect-siblings, default-modules, stats
- Error reporting and exit codes
"""

import pytest
from typer.testing import CliRunner

from core.codec import decode_project
from core.exceptions import FileReadError
from main import app

runner = CliRunner()

PROJECT_A = """\
id: org.example.A
vcs_url: https://git.example.org/a.git
name: Alpha
build_systems:
  - meson
  - cargo
main_branch: main
root_hashes:
  - h1
"""

PROJECT_B = """\
id: org.example.B
vcs_url: https://git.example.org/b.git
name: Beta
root_hashes:
  - h1
"""

MODULE = """\
name: libfoo
buildsystem: cmake-ninja
sources:
  - type: archive
    url: https://example.org/libfoo.tar.xz
"""


@pytest.fixture
def db_args(tmp_path):
    return ["--db-path", str(tmp_path / "db")]


@pytest.fixture
def record_file(tmp_path):
    def _write(name: str, content: str):
        file_path = tmp_path / name
        file_path.write_text(content)
        return str(file_path)

    return _write


def invoke(db_args, *args):
    return runner.invoke(app, [*db_args, *args])


# ============================================================================
# Tests for add-project / show
# ============================================================================


@pytest.mark.unit
def test_add_project_then_show(db_args, record_file):
    result = invoke(db_args, "add-project", record_file("a.yaml", PROJECT_A))
    assert result.exit_code == 0
    assert "Added project org.example.A" in result.output

    result = invoke(db_args, "show", "org.example.A")
    assert result.exit_code == 0
    assert "name: Alpha" in result.output


@pytest.mark.unit
def test_add_project_twice_merges(db_args, record_file, tmp_path):
    invoke(db_args, "add-project", record_file("a.yaml", PROJECT_A))
    update = "id: org.example.A\nvcs_url: https://git.example.org/a.git\nname: Alpha\ntags: [flathub]\n"

    result = invoke(db_args, "add-project", record_file("a2.yaml", update))

    assert result.exit_code == 0
    assert "Updated project org.example.A" in result.output
    stored = decode_project((tmp_path / "db" / "projects" / "org.example.A.yaml").read_text())
    assert stored.tags == {"flathub"}
    assert stored.build_systems == {"meson", "cargo"}


@pytest.mark.unit
def test_add_project_identity_mismatch_fails(db_args, record_file):
    invoke(db_args, "add-project", record_file("a.yaml", PROJECT_A))
    conflicting = "id: org.example.A\nvcs_url: https://elsewhere.org/a.git\nname: Alpha\n"

    result = invoke(db_args, "add-project", record_file("a2.yaml", conflicting))

    assert result.exit_code == 1
    assert "Cannot merge projects" in result.output


@pytest.mark.unit
def test_add_invalid_project_file_fails(db_args, record_file):
    result = invoke(db_args, "add-project", record_file("bad.yaml", "name: [unclosed\n"))

    assert result.exit_code == 1
    assert "Database Error" in result.output


@pytest.mark.unit
def test_show_unknown_project_fails(db_args):
    result = invoke(db_args, "show", "org.example.Missing")

    assert result.exit_code == 1
    assert "No project matching" in result.output


@pytest.mark.mock
def test_show_falls_back_to_selection(db_args, record_file, mocker):
    invoke(db_args, "add-project", record_file("a.yaml", PROJECT_A))
    invoke(db_args, "add-project", record_file("b.yaml", PROJECT_B))
    mocker.patch("ui.prompts.inquirer.prompt", return_value={"project_id": "org.example.B"})

    result = invoke(db_args, "show", "git.example.org")

    assert result.exit_code == 0
    assert "name: Beta" in result.output


@pytest.mark.unit
def test_corrupt_project_in_database_fails(db_args, tmp_path):
    projects_dir = tmp_path / "db" / "projects"
    projects_dir.mkdir(parents=True)
    (projects_dir / "broken.yaml").write_text("id: [unclosed\n")

    result = invoke(db_args, "stats")

    assert result.exit_code == 1
    assert "Could not parse project file" in result.output


# ============================================================================
# Tests for searches
# ============================================================================


@pytest.mark.unit
def test_search_projects(db_args, record_file):
    invoke(db_args, "add-project", record_file("a.yaml", PROJECT_A))
    invoke(db_args, "add-project", record_file("b.yaml", PROJECT_B))

    result = invoke(db_args, "search-projects", "Beta")

    assert result.exit_code == 0
    assert "1 project(s)" in result.output
    assert "org.example.B" in result.output
    assert "org.example.A" not in result.output


@pytest.mark.unit
def test_add_module_twice_then_search(db_args, record_file, tmp_path):
    module_file = record_file("libfoo.yaml", MODULE)

    first = invoke(db_args, "add-module", module_file, "--project-id", "org.example.A")
    second = invoke(db_args, "add-module", module_file)

    assert first.exit_code == 0
    assert "Added module libfoo" in first.output
    assert second.exit_code == 0
    assert "already stored" in second.output
    assert len(list((tmp_path / "db" / "modules").iterdir())) == 1

    result = invoke(db_args, "search-modules", "LIBFOO")
    assert result.exit_code == 0
    assert "1 module(s)" in result.output


# ============================================================================
# Tests for detect-siblings, default-modules and stats
# ============================================================================


@pytest.mark.unit
def test_detect_siblings(db_args, record_file, tmp_path):
    invoke(db_args, "add-project", record_file("a.yaml", PROJECT_A))
    invoke(db_args, "add-project", record_file("b.yaml", PROJECT_B))

    result = invoke(db_args, "detect-siblings")

    assert result.exit_code == 0
    assert "Found 1 group(s) of siblings" in result.output
    stored = decode_project((tmp_path / "db" / "projects" / "org.example.B.yaml").read_text())
    assert stored.siblings == {"org.example.A", "org.example.B"}


@pytest.mark.unit
def test_default_modules(db_args, record_file):
    invoke(db_args, "add-project", record_file("a.yaml", PROJECT_A))

    result = invoke(db_args, "default-modules", "org.example.A")

    assert result.exit_code == 0
    assert "buildsystem: meson" in result.output
    assert "branch: main" in result.output
    assert "buildsystem: cargo" not in result.output


@pytest.mark.unit
def test_default_modules_without_known_build_system(db_args, record_file):
    invoke(db_args, "add-project", record_file("b.yaml", PROJECT_B))

    result = invoke(db_args, "default-modules", "org.example.B")

    assert result.exit_code == 1


@pytest.mark.unit
def test_default_modules_unknown_project(db_args):
    result = invoke(db_args, "default-modules", "org.example.Missing")

    assert result.exit_code == 1
    assert "Unknown project" in result.output


@pytest.mark.unit
def test_stats(db_args, record_file):
    invoke(db_args, "add-project", record_file("a.yaml", PROJECT_A))

    result = invoke(db_args, "stats")

    assert result.exit_code == 0
    assert "Projects: 1." in result.output
    assert "Modules: 0." in result.output


@pytest.mark.unit
def test_uncreatable_database_root_fails(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")

    result = runner.invoke(app, ["--db-path", str(blocker / "db"), "stats"])

    assert result.exit_code == 1
    assert "Database Error" in result.output


@pytest.mark.mock
def test_unreadable_settings_file_fails(mocker):
    mocker.patch(
        "main.get_db_path",
        side_effect=FileReadError("Failed to read file: settings.json", "settings.json"),
    )

    result = runner.invoke(app, ["stats"])

    assert result.exit_code == 1
    assert "File I/O Error" in result.output


@pytest.mark.unit
def test_add_project_with_path_in_id_fails(db_args, record_file, tmp_path):
    escaping = "id: ../escaped\nvcs_url: https://git.example.org/e.git\nname: Escaped\n"

    result = invoke(db_args, "add-project", record_file("e.yaml", escaping))

    assert result.exit_code == 1
    assert "Invalid project id" in result.output
    assert not (tmp_path / "db" / "escaped.yaml").exists()


# ============================================================================
# Tests for configure
# ============================================================================


@pytest.mark.mock
def test_configure_saves_db_path(mocker, tmp_path):
    mocker.patch("main.get_db_path", return_value=tmp_path / "old")
    mocker.patch("main.prompt_db_path", return_value=tmp_path / "new")
    mock_save = mocker.patch("main.save_config")

    result = runner.invoke(app, ["configure"])

    assert result.exit_code == 0
    mock_save.assert_called_once_with(tmp_path / "new")


@pytest.mark.mock
def test_configure_with_unreadable_settings_fails(mocker):
    mocker.patch(
        "main.get_db_path",
        side_effect=FileReadError("Failed to read file: settings.json", "settings.json"),
    )
    mock_prompt = mocker.patch("main.prompt_db_path")

    result = runner.invoke(app, ["configure"])

    assert result.exit_code == 1
    assert "File I/O Error" in result.output
    mock_prompt.assert_not_called()
