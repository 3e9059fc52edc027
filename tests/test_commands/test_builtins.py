"""Tests for the built-in commands (src.commands.builtins).

Covers:
- The built-in command table and its menu
- make:* argument parsing and flags
- project:slate, project:add_package, project:config and project:commands
- Custom commands cannot shadow built-ins
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from src.commands.builtins import CommandArgumentParser, build_command_table, build_menu
from src.commands.dispatcher import dispatch
from src.errors import ArgumentError, FileConflict, MissingDependency
from src.scaffolder.generators import ArtifactKind

pytestmark = pytest.mark.unit


@pytest.fixture
def table(generator):
    return build_command_table(generator)


def _run(table, *arguments):
    return dispatch(list(arguments), table, build_menu(table))


# ---------------------------------------------------------------------------
# Table and menu
# ---------------------------------------------------------------------------


class TestCommandTable:
    def test_make_command_for_every_kind(self, table):
        for kind in ArtifactKind:
            assert table.find("make", kind.value) is not None

    def test_project_commands(self, table):
        assert {c.name for c in table if c.category == "project"} == {
            "commands", "config", "slate", "add_package",
        }

    def test_menu_lists_commands(self, table):
        menu = build_menu(table)
        assert "metro <category>:<action>" in menu
        assert "make:controller" in menu
        assert "project:slate" in menu

    def test_custom_commands_included(self, generator, memory_fs):
        memory_fs.mkdir("lib/app/commands")
        memory_fs.files["lib/app/commands/custom_commands.json"] = json.dumps(
            [
                {"name": "seed", "script": "seed.dart"},
                {"name": "page", "category": "make", "script": "evil.dart"},
            ]
        )
        table = build_command_table(generator)
        assert table.find("app", "seed") is not None
        assert table.find("make", "page").description == "Create a new page"

    def test_without_custom_commands(self, generator, memory_fs):
        memory_fs.mkdir("lib/app/commands")
        memory_fs.files["lib/app/commands/custom_commands.json"] = "{broken"
        table = build_command_table(generator, include_custom=False)
        assert table.find("make", "page") is not None


class TestCommandArgumentParser:
    def test_error_raises(self):
        parser = CommandArgumentParser(prog="make:page")
        parser.add_argument("name")
        with pytest.raises(ArgumentError) as exc_info:
            parser.parse_args(["a", "--bogus"])
        assert exc_info.value.exit_code == 1
        assert "make:page" in exc_info.value.usage


# ---------------------------------------------------------------------------
# make:*
# ---------------------------------------------------------------------------


class TestMakeCommands:
    def test_make_controller(self, table, memory_fs):
        assert _run(table, "make:controller", "User") == 0
        text = memory_fs.files["lib/app/controllers/user_controller.dart"]
        assert "class UserController extends Controller" in text
        assert "UserController: () => UserController()" in memory_fs.files["lib/config/decoders.dart"]

    def test_conflict_raises(self, table):
        _run(table, "make:controller", "User")
        with pytest.raises(FileConflict):
            _run(table, "make:controller", "User")

    def test_force(self, table, memory_fs):
        _run(table, "make:controller", "User")
        memory_fs.files["lib/app/controllers/user_controller.dart"] = "// edited\n"
        assert _run(table, "make:controller", "User", "--force") == 0
        assert "class UserController" in memory_fs.files["lib/app/controllers/user_controller.dart"]

    def test_page_flags(self, table, memory_fs):
        _run(table, "make:page", "admin/dashboard", "--auth", "--initial")
        assert "lib/resources/pages/admin/dashboard_page.dart" in memory_fs.files
        assert (
            "router.add(DashboardPage.path, authenticatedRoute: true, initialRoute: true);"
            in memory_fs.files["lib/routes/router.dart"]
        )

    def test_no_route(self, table, memory_fs, router_dart):
        _run(table, "make:page", "About", "--no-route")
        assert memory_fs.files["lib/routes/router.dart"] == router_dart

    def test_no_config(self, table, memory_fs, decoders_dart):
        _run(table, "make:controller", "User", "--no-config")
        assert memory_fs.files["lib/config/decoders.dart"] == decoders_dart

    def test_stub_file(self, table, memory_fs, tmp_path: Path):
        stub = tmp_path / "custom.stub"
        stub.write_text("// custom stub\n")
        _run(table, "make:form", "Login", "--stub", str(stub))
        assert memory_fs.files["lib/app/forms/login_form.dart"] == "// custom stub\n"

    def test_missing_stub_file(self, table, tmp_path: Path):
        with pytest.raises(ArgumentError):
            _run(table, "make:form", "Login", "--stub", str(tmp_path / "nope.stub"))

    def test_theme_creates_colors(self, table, memory_fs):
        _run(table, "make:theme", "dark")
        assert "lib/resources/themes/dark_theme.dart" in memory_fs.files
        assert "lib/resources/themes/styles/dark_theme_colors.dart" in memory_fs.files
        assert "id: 'dark_theme'" in memory_fs.files["lib/config/theme.dart"]

    def test_nested_theme_imports_match_created_files(self, table, memory_fs):
        assert _run(table, "make:theme", "admin/dark") == 0
        assert "lib/resources/themes/admin/dark_theme.dart" in memory_fs.files
        assert "lib/resources/themes/styles/admin/dark_theme_colors.dart" in memory_fs.files
        theme = memory_fs.files["lib/config/theme.dart"]
        assert "import '/resources/themes/admin/dark_theme.dart';" in theme
        assert "import '/resources/themes/styles/admin/dark_theme_colors.dart';" in theme

    def test_command_category(self, table, memory_fs):
        _run(table, "make:command", "Seed", "--category", "db")
        manifest = json.loads(memory_fs.files["lib/app/commands/custom_commands.json"])
        assert manifest == [{"name": "seed", "category": "db", "script": "seed.dart"}]

    def test_missing_name(self, table):
        with pytest.raises(ArgumentError) as exc_info:
            _run(table, "make:page")
        assert "name is required" in str(exc_info.value)

    def test_unknown_flag(self, table):
        with pytest.raises(ArgumentError):
            _run(table, "make:controller", "User", "--auth")

    def test_help(self, table, memory_fs, capsys):
        before = dict(memory_fs.files)
        assert _run(table, "make:page", "--help") == 0
        assert "--initial" in capsys.readouterr().out
        assert memory_fs.files == before


# ---------------------------------------------------------------------------
# project:*
# ---------------------------------------------------------------------------


class TestProjectCommands:
    def test_list_commands(self, table, capsys):
        assert _run(table, "project:commands") == 0
        assert "make:controller" in capsys.readouterr().out

    def test_add_package(self, table, runner):
        assert _run(table, "project:add_package", "dio", "--dev") == 0
        assert runner.calls[0]["command"] == "flutter pub add --dev dio"

    def test_add_package_exit_code(self, table, runner):
        runner.returncode = 69
        assert _run(table, "project:add_package", "dio") == 69

    def test_slate(self, table, memory_fs, tmp_path: Path):
        slate = tmp_path / "slate.yaml"
        slate.write_text(
            "- name: auth\n"
            "  save_to: lib/app/controllers\n"
            "  stub: '// auth'\n"
            "  plugins_required: [nylo_framework]\n"
        )
        assert _run(table, "project:slate", str(slate)) == 0
        assert memory_fs.files["lib/app/controllers/auth_controller.dart"] == "// auth"

    def test_slate_missing_dependency(self, table, memory_fs, tmp_path: Path):
        slate = tmp_path / "slate.yaml"
        slate.write_text(
            "- name: chart\n"
            "  save_to: lib/resources/widgets\n"
            "  stub: ''\n"
            "  plugins_required: [fl_chart]\n"
        )
        with pytest.raises(MissingDependency):
            _run(table, "project:slate", str(slate))

    def test_slate_conflict_exit_code(self, table, memory_fs, tmp_path: Path):
        memory_fs.mkdir("lib/app/controllers")
        memory_fs.files["lib/app/controllers/auth_controller.dart"] = "// mine"
        slate = tmp_path / "slate.yaml"
        slate.write_text("- {name: auth, save_to: lib/app/controllers, stub: ''}\n")
        assert _run(table, "project:slate", str(slate)) == 1

    def test_slate_unreadable(self, table, tmp_path: Path):
        with pytest.raises(ArgumentError):
            _run(table, "project:slate", str(tmp_path / "missing.yaml"))

    def test_config_writes_settings(self, table, tmp_path: Path):
        assert _run(table, "project:config") == 0
        saved = json.loads((tmp_path / "metro.json").read_text())
        assert saved["script_interpreter"] == "dart run"
        assert saved["folders"]["pages"] == "lib/resources/pages"

    def test_config_refuses_existing_file(self, table, tmp_path: Path):
        (tmp_path / "metro.json").write_text("{}")
        with pytest.raises(FileConflict):
            _run(table, "project:config")
        assert (tmp_path / "metro.json").read_text() == "{}"
        assert _run(table, "project:config", "--force") == 0
        assert "router_file" in json.loads((tmp_path / "metro.json").read_text())

    def test_slate_blank_name_writes_nothing(self, table, memory_fs, tmp_path: Path):
        before = dict(memory_fs.files)
        slate = tmp_path / "slate.yaml"
        slate.write_text(
            "- {name: auth, save_to: lib/app/controllers, stub: '// auth'}\n"
            "- {name: '  ', save_to: lib/app/controllers, stub: '// blank'}\n"
        )
        with pytest.raises(ArgumentError) as exc_info:
            _run(table, "project:slate", str(slate))
        assert "name must not be empty" in str(exc_info.value)
        assert memory_fs.files == before
