"""Metro scaffolding configuration.

Centralised, typed configuration for the scaffolding engine. All settings use
Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.

Every folder below is relative to the project root; the engine never writes
outside of it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class FolderConfig(BaseModel):
    """Where each kind of artifact is written inside the project."""

    controllers: str = Field(default="lib/app/controllers")
    models: str = Field(default="lib/app/models")
    providers: str = Field(default="lib/app/providers")
    events: str = Field(default="lib/app/events")
    networking: str = Field(default="lib/app/networking")
    interceptors: str = Field(default="lib/app/networking/dio/interceptors")
    forms: str = Field(default="lib/app/forms")
    commands: str = Field(default="lib/app/commands")
    pages: str = Field(default="lib/resources/pages")
    widgets: str = Field(default="lib/resources/widgets")
    themes: str = Field(default="lib/resources/themes")
    theme_colors: str = Field(default="lib/resources/themes/styles")
    route_guards: str = Field(default="lib/routes/guards")
    config: str = Field(default="lib/config")


class MetroConfig(BaseModel):
    """Global scaffolding configuration.

    Instances are typically created once by the CLI entry point and then
    passed to the generator, the slate orchestrator and the command registry.
    """

    project_root: Path = Field(default=Path("."))
    folders: FolderConfig = Field(default_factory=FolderConfig)
    router_file: str = Field(default="lib/routes/router.dart")
    dependency_manifest: str = Field(default="pubspec.yaml")
    custom_commands_file: str = Field(default="custom_commands.json")
    script_interpreter: str = Field(
        default="dart run", description="Command prefix used to run custom command scripts"
    )
    package_installer: str = Field(
        default="flutter pub add", description="Command prefix used to add packages"
    )

    # ------------------------------------------------------------------
    # Derived paths (relative to project_root)
    # ------------------------------------------------------------------

    def config_file(self, name: str) -> str:
        """Relative path of a ``lib/config/<name>.dart`` registration file."""
        return f"{self.folders.config}/{name}.dart"

    @property
    def decoders_file(self) -> str:
        return self.config_file("decoders")

    @property
    def providers_file(self) -> str:
        return self.config_file("providers")

    @property
    def events_file(self) -> str:
        return self.config_file("events")

    @property
    def theme_file(self) -> str:
        return self.config_file("theme")

    @property
    def custom_commands_path(self) -> str:
        """Relative path of the custom command manifest."""
        return f"{self.folders.commands}/{self.custom_commands_file}"

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to ``<project_root>/metro.json``.

        Returns:
            The path where the file was written.
        """
        target = path or (self.project_root / "metro.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "MetroConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "MetroConfig":
        """Build a ``MetroConfig`` from environment variables.

        Recognised variables (all optional):
            METRO_PROJECT_ROOT, METRO_SCRIPT_INTERPRETER,
            METRO_PACKAGE_INSTALLER, METRO_DEPENDENCY_MANIFEST.

        A ``metro.json`` file found in the project root is loaded first and
        the environment overrides it.
        """
        root = Path(os.environ.get("METRO_PROJECT_ROOT", "."))
        saved = root / "metro.json"
        base = cls.load(saved) if saved.exists() else cls()

        overrides: dict[str, Any] = {"project_root": root}
        if os.environ.get("METRO_SCRIPT_INTERPRETER"):
            overrides["script_interpreter"] = os.environ["METRO_SCRIPT_INTERPRETER"]
        if os.environ.get("METRO_PACKAGE_INSTALLER"):
            overrides["package_installer"] = os.environ["METRO_PACKAGE_INSTALLER"]
        if os.environ.get("METRO_DEPENDENCY_MANIFEST"):
            overrides["dependency_manifest"] = os.environ["METRO_DEPENDENCY_MANIFEST"]

        return base.model_copy(update=overrides)
