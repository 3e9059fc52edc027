"""Artifact generators.

Every ``make_*`` method is one fixed recipe: strip the kind's naming suffix,
create the folder and any nested creation path, resolve the file path, refuse
to overwrite unless forced, write the stub, and finally wire the artifact
into its registration file. Wiring is best-effort: when the registration
literal cannot be found the file is left untouched and a warning is printed.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, field_validator

from src.commands.registry import CommandRegistry, CustomCommandSpec
from src.config import MetroConfig
from src.scaffolder import schemas
from src.scaffolder.filesystem import FileMaterializer, FileSystem, LocalFileSystem
from src.scaffolder.paths import (
    ProjectFile,
    create_path_for_file,
    create_project_file,
    make_import_line,
    pascal_case,
    snake_case,
)
from src.scaffolder.patcher import (
    PatchOutcome,
    PatchStatus,
    RegistrationEdit,
    RegistrationPatcher,
)
from src.utils import print_success, print_warning, run_process


class ArtifactKind(str, enum.Enum):
    CONTROLLER = "controller"
    PAGE = "page"
    NAVIGATION_HUB = "navigation_hub"
    MODEL = "model"
    THEME = "theme"
    THEME_COLORS = "theme_colors"
    PROVIDER = "provider"
    EVENT = "event"
    API_SERVICE = "api_service"
    ROUTE_GUARD = "route_guard"
    FORM = "form"
    COMMAND = "command"
    STATELESS_WIDGET = "stateless_widget"
    STATEFUL_WIDGET = "stateful_widget"
    JOURNEY_WIDGET = "journey_widget"
    STATE_MANAGED_WIDGET = "state_managed_widget"
    INTERCEPTOR = "interceptor"
    CONFIG = "config"


@dataclass(frozen=True)
class KindSpec:
    """Naming conventions of one artifact kind.

    ``suffix`` is stripped from the requested name; ``file_suffix`` is
    appended to the generated file name.
    """

    label: str
    folder: str
    suffix: str | None
    file_suffix: str | None


KINDS: dict[ArtifactKind, KindSpec] = {
    ArtifactKind.CONTROLLER: KindSpec("Controller", "controllers", "controller", "controller"),
    ArtifactKind.PAGE: KindSpec("Page", "pages", "page", "page"),
    ArtifactKind.NAVIGATION_HUB: KindSpec(
        "Navigation Hub", "pages", "navigation_hub", "navigation_hub"
    ),
    ArtifactKind.MODEL: KindSpec("Model", "models", "model", None),
    ArtifactKind.THEME: KindSpec("Theme", "themes", "theme", "theme"),
    ArtifactKind.THEME_COLORS: KindSpec(
        "Theme Colors", "theme_colors", "theme_colors", "theme_colors"
    ),
    ArtifactKind.PROVIDER: KindSpec("Provider", "providers", "provider", "provider"),
    ArtifactKind.EVENT: KindSpec("Event", "events", "event", "event"),
    ArtifactKind.API_SERVICE: KindSpec("API Service", "networking", "api_service", "api_service"),
    ArtifactKind.ROUTE_GUARD: KindSpec("Route Guard", "route_guards", "route_guard", "route_guard"),
    ArtifactKind.FORM: KindSpec("Form", "forms", "form", "form"),
    ArtifactKind.COMMAND: KindSpec("Command", "commands", "command", None),
    ArtifactKind.STATELESS_WIDGET: KindSpec("Stateless Widget", "widgets", "widget", "widget"),
    ArtifactKind.STATEFUL_WIDGET: KindSpec("Stateful Widget", "widgets", "widget", "widget"),
    ArtifactKind.JOURNEY_WIDGET: KindSpec("Journey Widget", "widgets", "widget", "widget"),
    ArtifactKind.STATE_MANAGED_WIDGET: KindSpec(
        "State Managed Widget", "widgets", "widget", "widget"
    ),
    ArtifactKind.INTERCEPTOR: KindSpec("Interceptor", "interceptors", "interceptor", "interceptor"),
    ArtifactKind.CONFIG: KindSpec("Config", "config", "config", None),
}


class ArtifactRequest(BaseModel):
    """A single "create X" intent."""

    name: str
    kind: ArtifactKind
    stub: str = ""
    folder: str | None = None
    creation_path: str | None = None
    force: bool = False
    options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def _name_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be empty")
        return value.strip()


@dataclass
class ArtifactResult:
    kind: ArtifactKind
    path: str
    created: bool
    registration: PatchOutcome | None = None


class ArtifactGenerator:
    """Creates artifacts inside one project.

    Args:
        config: Project layout and tool configuration.
        fs: File system to operate on. Defaults to the real disk rooted at
            ``config.project_root``.
        runner: Process runner used for package installation.
    """

    def __init__(
        self,
        config: MetroConfig,
        fs: FileSystem | None = None,
        runner: Callable[..., int] = run_process,
    ) -> None:
        self.config = config
        self.fs = fs if fs is not None else LocalFileSystem(config.project_root)
        self.runner = runner
        self.materializer = FileMaterializer(self.fs)
        self.patcher = RegistrationPatcher(self.fs)
        self.commands = CommandRegistry(self.config, self.fs, runner=runner)

    # -- Shared recipe -----------------------------------------------------

    def folder_for(self, kind: ArtifactKind) -> str:
        return getattr(self.config.folders, KINDS[kind].folder)

    def resolve(
        self,
        kind: ArtifactKind,
        class_name: str,
        folder: str | None = None,
        creation_path: str | None = None,
    ) -> tuple[ProjectFile, str, str]:
        """Return the project file, its folder and its path. No side effects."""
        spec = KINDS[kind]
        folder = (folder or self.folder_for(kind)).rstrip("/")
        project_file = create_project_file(class_name, spec.suffix)
        if creation_path:
            project_file = ProjectFile(
                name=project_file.name, creation_path=creation_path.strip("/")
            )
        path = create_path_for_file(
            folder_path=folder,
            class_name=project_file.name,
            prefix=spec.file_suffix,
            creation_path=project_file.creation_path,
        )
        return project_file, folder, path

    def _create(
        self,
        kind: ArtifactKind,
        class_name: str,
        stub: str,
        folder: str | None = None,
        force: bool = False,
        creation_path: str | None = None,
    ) -> tuple[ProjectFile, str]:
        project_file, folder, path = self.resolve(kind, class_name, folder, creation_path)
        label = KINDS[kind].label

        self.materializer.ensure_directory(folder)
        self.materializer.create_directories_from_creation_path(
            project_file.creation_path, folder
        )
        self.materializer.assert_absent(path, force)
        stem = path.rsplit("/", 1)[-1].rsplit(".", 1)[0]
        self.materializer.write_file(
            path, stub, on_success=lambda: print_success(f"[{label}] {stem} created")
        )
        return project_file, path

    def _register(self, edit: RegistrationEdit) -> PatchOutcome:
        outcome = self.patcher.apply(edit)
        if outcome.status is PatchStatus.PATTERN_NOT_FOUND:
            print_warning(
                f"Could not find a known registration in {edit.target}; "
                f"add the import and entry manually."
            )
        return outcome

    # -- Controllers, models and decoders ----------------------------------

    def make_controller(
        self,
        class_name: str,
        stub: str,
        folder: str | None = None,
        force: bool = False,
        creation_path: str | None = None,
        add_to_config: bool = True,
    ) -> ArtifactResult:
        """Create a controller and register it in ``decoders.dart``."""
        project_file, path = self._create(
            ArtifactKind.CONTROLLER, class_name, stub, folder, force, creation_path
        )
        result = ArtifactResult(ArtifactKind.CONTROLLER, path, True)
        if add_to_config:
            result.registration = self._register(
                schemas.build_edit(
                    self.config.decoders_file,
                    make_import_line(path),
                    schemas.CONTROLLERS,
                    f"{pascal_case(project_file.name)}Controller",
                )
            )
        return result

    def make_model(
        self,
        class_name: str,
        stub: str,
        folder: str | None = None,
        force: bool = False,
        creation_path: str | None = None,
        add_to_config: bool = True,
        skip_if_exists: bool = False,
    ) -> ArtifactResult:
        """Create a model and register its decoders in ``decoders.dart``.

        With ``skip_if_exists`` an existing model file is left alone and
        nothing is registered.
        """
        project_file, _, path = self.resolve(
            ArtifactKind.MODEL, class_name, folder, creation_path
        )
        if skip_if_exists and self.materializer.has_file(path):
            return ArtifactResult(ArtifactKind.MODEL, path, False)

        project_file, path = self._create(
            ArtifactKind.MODEL, class_name, stub, folder, force, creation_path
        )
        result = ArtifactResult(ArtifactKind.MODEL, path, True)
        if add_to_config:
            result.registration = self._register(
                schemas.build_edit(
                    self.config.decoders_file,
                    make_import_line(path),
                    schemas.MODEL_DECODERS,
                    pascal_case(project_file.name),
                )
            )
        return result

    def make_api_service(
        self,
        class_name: str,
        stub: str,
        folder: str | None = None,
        force: bool = False,
        creation_path: str | None = None,
        add_to_config: bool = True,
    ) -> ArtifactResult:
        """Create an API service and register it in ``apiDecoders``."""
        project_file, path = self._create(
            ArtifactKind.API_SERVICE, class_name, stub, folder, force, creation_path
        )
        result = ArtifactResult(ArtifactKind.API_SERVICE, path, True)
        if add_to_config:
            result.registration = self._register(
                schemas.build_edit(
                    self.config.decoders_file,
                    make_import_line(path),
                    schemas.API_DECODERS,
                    f"{pascal_case(project_file.name)}ApiService",
                )
            )
        return result

    # -- Providers and events ----------------------------------------------

    def make_provider(
        self,
        class_name: str,
        stub: str,
        folder: str | None = None,
        force: bool = False,
        creation_path: str | None = None,
        add_to_config: bool = True,
    ) -> ArtifactResult:
        project_file, path = self._create(
            ArtifactKind.PROVIDER, class_name, stub, folder, force, creation_path
        )
        result = ArtifactResult(ArtifactKind.PROVIDER, path, True)
        if add_to_config:
            result.registration = self._register(
                schemas.build_edit(
                    self.config.providers_file,
                    make_import_line(path),
                    schemas.PROVIDERS,
                    f"{pascal_case(project_file.name)}Provider",
                )
            )
        return result

    def make_event(
        self,
        class_name: str,
        stub: str,
        folder: str | None = None,
        force: bool = False,
        creation_path: str | None = None,
        add_to_config: bool = True,
    ) -> ArtifactResult:
        project_file, path = self._create(
            ArtifactKind.EVENT, class_name, stub, folder, force, creation_path
        )
        result = ArtifactResult(ArtifactKind.EVENT, path, True)
        if add_to_config:
            result.registration = self._register(
                schemas.build_edit(
                    self.config.events_file,
                    make_import_line(path),
                    schemas.EVENTS,
                    f"{pascal_case(project_file.name)}Event",
                )
            )
        return result

    # -- Pages and the router ----------------------------------------------

    @staticmethod
    def route_call(
        class_name: str, is_auth_page: bool = False, is_initial_page: bool = False
    ) -> str:
        """``router.add(X.path[, authenticatedRoute: true][, initialRoute: true]);``"""
        flags = ""
        if is_auth_page:
            flags += ", authenticatedRoute: true"
        if is_initial_page:
            flags += ", initialRoute: true"
        return f"router.add({class_name}.path{flags});"

    def _make_routed(
        self,
        kind: ArtifactKind,
        class_suffix: str,
        class_name: str,
        stub: str,
        folder: str | None,
        force: bool,
        creation_path: str | None,
        add_to_route: bool,
        is_initial_page: bool,
        is_auth_page: bool,
    ) -> ArtifactResult:
        project_file, path = self._create(kind, class_name, stub, folder, force, creation_path)
        result = ArtifactResult(kind, path, True)
        if not add_to_route:
            return result

        call = self.route_call(
            f"{pascal_case(project_file.name)}{class_suffix}", is_auth_page, is_initial_page
        )
        result.registration = self.patcher.apply_router(
            self.config.router_file, make_import_line(path), call
        )
        if result.registration.status is PatchStatus.PATTERN_NOT_FOUND:
            print_warning(
                f"Could not find the route list in {self.config.router_file}; "
                f"add '{call}' manually."
            )
        return result

    def make_page(
        self,
        class_name: str,
        stub: str,
        folder: str | None = None,
        force: bool = False,
        creation_path: str | None = None,
        add_to_route: bool = True,
        is_initial_page: bool = False,
        is_auth_page: bool = False,
    ) -> ArtifactResult:
        """Create a page and add ``router.add(XPage.path)`` to the router."""
        return self._make_routed(
            ArtifactKind.PAGE, "Page", class_name, stub, folder, force,
            creation_path, add_to_route, is_initial_page, is_auth_page,
        )

    def make_navigation_hub(
        self,
        class_name: str,
        stub: str,
        folder: str | None = None,
        force: bool = False,
        creation_path: str | None = None,
        add_to_route: bool = True,
        is_initial_page: bool = False,
        is_auth_page: bool = False,
    ) -> ArtifactResult:
        """Create a navigation hub page and add it to the router."""
        return self._make_routed(
            ArtifactKind.NAVIGATION_HUB, "NavigationHub", class_name, stub, folder,
            force, creation_path, add_to_route, is_initial_page, is_auth_page,
        )

    # -- Themes ------------------------------------------------------------

    def make_theme(
        self,
        class_name: str,
        stub: str,
        folder: str | None = None,
        force: bool = False,
        creation_path: str | None = None,
        add_to_config: bool = True,
    ) -> ArtifactResult:
        """Create a theme file and, by default, add it to ``appThemes``."""
        project_file, path = self._create(
            ArtifactKind.THEME, class_name, stub, folder, force, creation_path
        )
        result = ArtifactResult(ArtifactKind.THEME, path, True)
        if add_to_config:
            result.registration = self.add_to_theme(
                project_file.name, creation_path=project_file.creation_path, folder=folder
            )
        return result

    def make_theme_colors(
        self,
        class_name: str,
        stub: str,
        folder: str | None = None,
        force: bool = False,
        creation_path: str | None = None,
    ) -> ArtifactResult:
        _, path = self._create(
            ArtifactKind.THEME_COLORS, class_name, stub, folder, force, creation_path
        )
        return ArtifactResult(ArtifactKind.THEME_COLORS, path, True)

    def add_to_theme(
        self,
        class_name: str,
        creation_path: str | None = None,
        folder: str | None = None,
    ) -> PatchOutcome:
        """Register a theme and its colors in ``theme.dart``'s ``appThemes`` list.

        ``folder`` overrides the theme's folder only; the colors file is
        expected in the configured colors folder under the same creation path.
        """
        _, _, colors_path = self.resolve(
            ArtifactKind.THEME_COLORS, class_name, creation_path=creation_path
        )
        project_file, _, theme_path = self.resolve(
            ArtifactKind.THEME, class_name, folder=folder, creation_path=creation_path
        )
        imports = f"{make_import_line(colors_path)}\n{make_import_line(theme_path)}"
        return self._register(
            schemas.build_edit(
                self.config.theme_file, imports, schemas.THEMES, project_file.name
            )
        )

    # -- Plain files -------------------------------------------------------

    def _make_plain(
        self,
        kind: ArtifactKind,
        class_name: str,
        stub: str,
        folder: str | None = None,
        force: bool = False,
        creation_path: str | None = None,
    ) -> ArtifactResult:
        _, path = self._create(kind, class_name, stub, folder, force, creation_path)
        return ArtifactResult(kind, path, True)

    def make_route_guard(self, class_name: str, stub: str, **kwargs: Any) -> ArtifactResult:
        return self._make_plain(ArtifactKind.ROUTE_GUARD, class_name, stub, **kwargs)

    def make_form(self, class_name: str, stub: str, **kwargs: Any) -> ArtifactResult:
        return self._make_plain(ArtifactKind.FORM, class_name, stub, **kwargs)

    def make_stateless_widget(self, class_name: str, stub: str, **kwargs: Any) -> ArtifactResult:
        return self._make_plain(ArtifactKind.STATELESS_WIDGET, class_name, stub, **kwargs)

    def make_stateful_widget(self, class_name: str, stub: str, **kwargs: Any) -> ArtifactResult:
        return self._make_plain(ArtifactKind.STATEFUL_WIDGET, class_name, stub, **kwargs)

    def make_journey_widget(self, class_name: str, stub: str, **kwargs: Any) -> ArtifactResult:
        return self._make_plain(ArtifactKind.JOURNEY_WIDGET, class_name, stub, **kwargs)

    def make_state_managed_widget(
        self, class_name: str, stub: str, **kwargs: Any
    ) -> ArtifactResult:
        return self._make_plain(ArtifactKind.STATE_MANAGED_WIDGET, class_name, stub, **kwargs)

    def make_interceptor(self, class_name: str, stub: str, **kwargs: Any) -> ArtifactResult:
        return self._make_plain(ArtifactKind.INTERCEPTOR, class_name, stub, **kwargs)

    def make_config(self, class_name: str, stub: str, **kwargs: Any) -> ArtifactResult:
        return self._make_plain(ArtifactKind.CONFIG, class_name, stub, **kwargs)

    # -- Custom commands ---------------------------------------------------

    def make_command(
        self,
        class_name: str,
        stub: str,
        folder: str | None = None,
        force: bool = False,
        creation_path: str | None = None,
        category: str = "app",
    ) -> ArtifactResult:
        """Create a command script and add it to the custom command manifest.

        Raises:
            ManifestCorruption: The existing manifest cannot be parsed. The
                script file has been written at that point.
        """
        self.commands.ensure_manifest()
        project_file, path = self._create(
            ArtifactKind.COMMAND, class_name, stub, folder, force, creation_path
        )
        base = (folder or self.folder_for(ArtifactKind.COMMAND)).rstrip("/")
        script = path[len(base) + 1:]
        self.commands.register(
            CustomCommandSpec(
                name=snake_case(project_file.name), category=category, script=script
            )
        )
        return ArtifactResult(ArtifactKind.COMMAND, path, True)

    # -- Dispatch by kind --------------------------------------------------

    def make(self, request: ArtifactRequest) -> ArtifactResult:
        """Apply an ``ArtifactRequest`` with the recipe of its kind."""
        opts = request.options
        common: dict[str, Any] = {
            "folder": request.folder,
            "force": request.force,
            "creation_path": request.creation_path,
        }
        name, stub, kind = request.name, request.stub, request.kind

        if kind is ArtifactKind.CONTROLLER:
            return self.make_controller(
                name, stub, add_to_config=opts.get("add_to_config", True), **common
            )
        if kind is ArtifactKind.MODEL:
            return self.make_model(
                name, stub,
                add_to_config=opts.get("add_to_config", True),
                skip_if_exists=opts.get("skip_if_exists", False),
                **common,
            )
        if kind is ArtifactKind.API_SERVICE:
            return self.make_api_service(
                name, stub, add_to_config=opts.get("add_to_config", True), **common
            )
        if kind is ArtifactKind.PROVIDER:
            return self.make_provider(
                name, stub, add_to_config=opts.get("add_to_config", True), **common
            )
        if kind is ArtifactKind.EVENT:
            return self.make_event(
                name, stub, add_to_config=opts.get("add_to_config", True), **common
            )
        if kind in (ArtifactKind.PAGE, ArtifactKind.NAVIGATION_HUB):
            maker = self.make_page if kind is ArtifactKind.PAGE else self.make_navigation_hub
            return maker(
                name, stub,
                add_to_route=opts.get("add_to_route", True),
                is_initial_page=opts.get("is_initial_page", False),
                is_auth_page=opts.get("is_auth_page", False),
                **common,
            )
        if kind is ArtifactKind.THEME:
            return self.make_theme(
                name, stub, add_to_config=opts.get("add_to_config", True), **common
            )
        if kind is ArtifactKind.THEME_COLORS:
            return self.make_theme_colors(name, stub, **common)
        if kind is ArtifactKind.COMMAND:
            return self.make_command(
                name, stub, category=opts.get("category", "app"), **common
            )
        return self._make_plain(kind, name, stub, **common)

    # -- Packages ----------------------------------------------------------

    def add_package(self, package: str, version: str | None = None, dev: bool = False) -> int:
        """Add one package to the project's dependency manifest."""
        spec = f"{package}:{version}" if version else package
        return self.add_packages([spec], dev=dev)

    def add_packages(self, packages: list[str], dev: bool = False) -> int:
        """Add packages with the configured installer. Returns its exit code."""
        command = self.config.package_installer
        if dev:
            command += " --dev"
        command += " " + " ".join(packages)
        return self.runner(command, cwd=self.config.project_root)
