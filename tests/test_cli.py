"""Tests for the metro command-line entry point (src.cli).

Drives ``run`` against a project tree on disk and checks exit codes and the
files left behind.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from src.cli import main, run
from src.config import MetroConfig

pytestmark = pytest.mark.integration


class TestExitCodes:
    def test_no_arguments_prints_menu(self, disk_config: MetroConfig, capsys):
        assert run([], disk_config) == 0
        assert "make:controller" in capsys.readouterr().out

    def test_malformed_command(self, disk_config: MetroConfig, capsys):
        assert run(["make"], disk_config) == 2
        assert "Invalid arguments" in capsys.readouterr().out

    def test_unknown_command(self, disk_config: MetroConfig):
        assert run(["make:spaceship", "x"], disk_config) == 1

    def test_missing_name_prints_usage(self, disk_config: MetroConfig, capsys):
        assert run(["make:controller"], disk_config) == 1
        out = capsys.readouterr().out
        assert "name is required" in out
        assert "usage: make:controller" in out

    def test_file_conflict(self, disk_config: MetroConfig, tmp_project_dir: Path, capsys):
        assert run(["make:controller", "User"], disk_config) == 0
        target = tmp_project_dir / "lib/app/controllers/user_controller.dart"
        target.write_text("// edited\n")

        assert run(["make:controller", "User"], disk_config) == 1

        assert "already exists" in capsys.readouterr().out
        assert target.read_text() == "// edited\n"


class TestScenarios:
    def test_controller_registered_once(self, disk_config: MetroConfig, tmp_project_dir: Path):
        assert run(["make:controller", "UserController"], disk_config) == 0
        assert run(["make:controller", "UserController", "--force"], disk_config) == 0

        decoders = (tmp_project_dir / "lib/config/decoders.dart").read_text()
        assert decoders.count("UserController: () => UserController()") == 1
        assert (tmp_project_dir / "lib/app/controllers/user_controller.dart").is_file()

    def test_nested_page(self, disk_config: MetroConfig, tmp_project_dir: Path):
        assert run(["make:page", "admin/sub/Settings", "--auth"], disk_config) == 0
        assert (tmp_project_dir / "lib/resources/pages/admin/sub/settings_page.dart").is_file()
        router = (tmp_project_dir / "lib/routes/router.dart").read_text()
        assert router.startswith("import '/resources/pages/admin/sub/settings_page.dart';\n")
        assert "router.add(SettingsPage.path, authenticatedRoute: true);" in router

    def test_custom_command_round_trip(self, disk_config: MetroConfig, tmp_project_dir: Path):
        assert run(["make:command", "seed"], disk_config) == 0
        manifest = tmp_project_dir / "lib/app/commands/custom_commands.json"
        assert json.loads(manifest.read_text()) == [
            {"name": "seed", "category": "app", "script": "seed.dart"}
        ]

        assert run(["make:command", "seed", "--force"], disk_config) == 0
        assert len(json.loads(manifest.read_text())) == 1

        completed = MagicMock(returncode=5)
        with patch("src.utils.subprocess.run", return_value=completed) as mock_run:
            assert run(["app:seed", "--fresh"], disk_config) == 5
        mock_run.assert_called_once_with(
            ["dart", "run", "lib/app/commands/seed.dart", "--fresh"],
            cwd=str(tmp_project_dir),
        )

    def test_corrupt_manifest_keeps_builtins(
        self, disk_config: MetroConfig, tmp_project_dir: Path, capsys
    ):
        manifest = tmp_project_dir / "lib/app/commands/custom_commands.json"
        manifest.parent.mkdir(parents=True)
        manifest.write_text("{broken")

        assert run(["make:form", "Login"], disk_config) == 0

        out = capsys.readouterr().out
        assert "custom_commands.json" in out
        assert (tmp_project_dir / "lib/app/forms/login_form.dart").is_file()

    def test_unhashable_command_name_keeps_builtins(
        self, disk_config: MetroConfig, tmp_project_dir: Path, capsys
    ):
        manifest = tmp_project_dir / "lib/app/commands/custom_commands.json"
        manifest.parent.mkdir(parents=True)
        manifest.write_text(json.dumps([{"name": ["seed"], "script": "seed.dart"}]))

        assert run(["make:form", "Login"], disk_config) == 0

        out = " ".join(capsys.readouterr().out.split())
        assert 'command "name" must be a string' in out
        assert (tmp_project_dir / "lib/app/forms/login_form.dart").is_file()

    def test_slate_missing_dependency(
        self, disk_config: MetroConfig, tmp_project_dir: Path, capsys
    ):
        slate = tmp_project_dir / "charts.yaml"
        slate.write_text(
            "templates:\n"
            "  - name: sales_chart\n"
            "    save_to: lib/resources/widgets\n"
            "    stub: ''\n"
            "    plugins_required: [fl_chart]\n"
        )
        assert run(["project:slate", str(slate)], disk_config) == 1
        out = capsys.readouterr().out
        assert "missing the fl_chart package" in out
        assert not (tmp_project_dir / "lib/resources/widgets").exists()


class TestMain:
    def test_main_exits_with_code(self, tmp_project_dir: Path):
        env = {"METRO_PROJECT_ROOT": str(tmp_project_dir)}
        with patch.dict(os.environ, env, clear=True), patch("sys.argv", ["metro", "make"]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 2
