"""Shared pytest fixtures for the Metro test suite.

Provides reusable fixtures for:
- Sample registration files (decoders, providers, events, theme, router)
- A project tree on disk and an in-memory file system
- A recording process runner
- Configured generators over either file system
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any

import pytest

from src.config import MetroConfig
from src.scaffolder.generators import ArtifactGenerator


# ---------------------------------------------------------------------------
# Sample registration files
# ---------------------------------------------------------------------------

DECODERS_DART = textwrap.dedent("""\
    import '/app/models/user.dart';
    import '/app/networking/api_service.dart';
    import '/app/controllers/home_controller.dart';

    /* Model decoders */
    final Map<Type, dynamic> modelDecoders = {
      List<User>: (data) => List.from(data).map((json) => User.fromJson(json)).toList(),

      User: (data) => User.fromJson(data),
    };

    /* API decoders */
    final Map<Type, dynamic> apiDecoders = {
      ApiService: ApiService(),
    };

    /* Controllers */
    final Map<Type, dynamic> controllers = {
      HomeController: () => HomeController(),
    };
    """)

PROVIDERS_DART = textwrap.dedent("""\
    import '/app/providers/app_provider.dart';
    import '/app/providers/route_provider.dart';
    import 'package:nylo_framework/nylo_framework.dart';

    final Map<Type, NyProvider> providers = {
      AppProvider: AppProvider(),
      RouteProvider: RouteProvider()
    };
    """)

EVENTS_DART = textwrap.dedent("""\
    import '/app/events/login_event.dart';
    import 'package:nylo_framework/nylo_framework.dart';

    final Map<Type, NyEvent> events = {
      LoginEvent: LoginEvent(),
      // SyncEvent: SyncEvent(),
    };
    """)

THEME_DART = textwrap.dedent("""\
    import '/resources/themes/light_theme.dart';
    import '/resources/themes/styles/light_theme_colors.dart';
    import 'package:nylo_framework/nylo_framework.dart';

    final List<BaseThemeConfig<ColorStyles>> appThemes = [
      BaseThemeConfig<ColorStyles>(
        id: 'light_theme',
        description: "Light theme",
        theme: lightTheme,
        colors: LightThemeColors(),
      ),
    ];
    """)

ROUTER_DART = textwrap.dedent("""\
    import '/resources/pages/home_page.dart';
    import 'package:nylo_framework/nylo_framework.dart';

    appRouter() => nyRoutes((router) {
      router.add(HomePage.path, initialRoute: true);
    });
    """)

PUBSPEC_YAML = textwrap.dedent("""\
    name: flutter_app
    description: A new Flutter project.

    dependencies:
      flutter:
        sdk: flutter
      nylo_framework: ^6.0.0
      http: ^1.2.0

    dev_dependencies:
      flutter_test:
        sdk: flutter
      lints: ^3.0.0
    """)


SAMPLE_FILES: dict[str, str] = {
    "lib/config/decoders.dart": DECODERS_DART,
    "lib/config/providers.dart": PROVIDERS_DART,
    "lib/config/events.dart": EVENTS_DART,
    "lib/config/theme.dart": THEME_DART,
    "lib/routes/router.dart": ROUTER_DART,
    "pubspec.yaml": PUBSPEC_YAML,
}


@pytest.fixture
def decoders_dart() -> str:
    return DECODERS_DART


@pytest.fixture
def router_dart() -> str:
    return ROUTER_DART


# ---------------------------------------------------------------------------
# File systems
# ---------------------------------------------------------------------------


class MemoryFileSystem:
    """In-memory ``FileSystem`` with the same semantics as the disk one."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.files: dict[str, str] = {}
        self.dirs: set[str] = set()
        self.writes: list[str] = []
        for path, content in (files or {}).items():
            self._add_parents(path)
            self.files[path] = content

    def _add_parents(self, path: str) -> None:
        parts = path.split("/")[:-1]
        for i in range(1, len(parts) + 1):
            self.dirs.add("/".join(parts[:i]))

    def read_text(self, path: str) -> str:
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def write_text(self, path: str, content: str) -> None:
        parent = path.rsplit("/", 1)[0] if "/" in path else ""
        if parent and parent not in self.dirs:
            raise FileNotFoundError(parent)
        self.files[path] = content
        self.writes.append(path)

    def exists(self, path: str) -> bool:
        return path in self.files or path in self.dirs

    def is_dir(self, path: str) -> bool:
        return path in self.dirs

    def mkdir(self, path: str) -> None:
        self._add_parents(f"{path}/x")


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    """In-memory file system pre-populated with the sample project files."""
    return MemoryFileSystem(dict(SAMPLE_FILES))


@pytest.fixture
def empty_fs() -> MemoryFileSystem:
    return MemoryFileSystem()


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Flutter-like project tree on disk (auto-cleanup)."""
    project_dir = tmp_path / "flutter_app"
    for relative, content in SAMPLE_FILES.items():
        target = project_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    yield project_dir


# ---------------------------------------------------------------------------
# Process runner
# ---------------------------------------------------------------------------


class RecordingRunner:
    """Stands in for ``run_process``; records calls and returns ``returncode``."""

    def __init__(self, returncode: int = 0) -> None:
        self.returncode = returncode
        self.calls: list[dict[str, Any]] = []

    def __call__(self, command: str | list[str], cwd: Any = None, check: bool = False) -> int:
        self.calls.append({"command": command, "cwd": cwd})
        return self.returncode


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


# ---------------------------------------------------------------------------
# Configured objects
# ---------------------------------------------------------------------------


@pytest.fixture
def metro_config(tmp_path: Path) -> MetroConfig:
    return MetroConfig(project_root=tmp_path)


@pytest.fixture
def generator(
    metro_config: MetroConfig, memory_fs: MemoryFileSystem, runner: RecordingRunner
) -> ArtifactGenerator:
    """Generator over the in-memory sample project."""
    return ArtifactGenerator(metro_config, fs=memory_fs, runner=runner)


@pytest.fixture
def disk_config(tmp_project_dir: Path) -> MetroConfig:
    return MetroConfig(project_root=tmp_project_dir)
