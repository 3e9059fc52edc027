"""Slates: batches of artifact templates applied together.

A slate is validated before anything is written: every package a template
requires must already be declared in the project's dependency manifest.
Templates are then applied strictly in order. There is no rollback; files
created before a failing template stay in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from src.config import MetroConfig
from src.errors import FileConflict, ManifestCorruption, MetroError, MissingDependency
from src.scaffolder.generators import (
    ArtifactGenerator,
    ArtifactKind,
    ArtifactRequest,
    ArtifactResult,
)
from src.utils import print_error, print_warning

# Folder (``FolderConfig`` field) -> kind created for templates saved there.
SLATE_FOLDERS: tuple[tuple[str, ArtifactKind], ...] = (
    ("controllers", ArtifactKind.CONTROLLER),
    ("widgets", ArtifactKind.STATELESS_WIDGET),
    ("pages", ArtifactKind.PAGE),
    ("models", ArtifactKind.MODEL),
    ("themes", ArtifactKind.THEME),
    ("providers", ArtifactKind.PROVIDER),
    ("events", ArtifactKind.EVENT),
    ("networking", ArtifactKind.API_SERVICE),
    ("theme_colors", ArtifactKind.THEME_COLORS),
    ("forms", ArtifactKind.FORM),
    ("commands", ArtifactKind.COMMAND),
)

_DEPENDENCY_SECTIONS = ("dependencies", "dev_dependencies", "dependency_overrides")


class SlateTemplate(BaseModel):
    """One file of a slate.

    ``save_to`` is the project folder the file belongs in (for example
    ``lib/app/controllers``); it decides which generator is used.
    """

    name: str
    save_to: str
    stub: str
    plugins_required: list[str] = Field(default_factory=list)
    options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def _name_has_segment(cls, value: str) -> str:
        if not any(segment.strip() for segment in value.split("/")):
            raise ValueError("name must not be empty")
        return value.strip()


@dataclass
class SlateResult:
    created: list[ArtifactResult] = field(default_factory=list)
    failed: list[tuple[str, MetroError]] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed


def load_slate(path: str | Path) -> list[SlateTemplate]:
    """Read slate templates from a YAML (or JSON) file.

    The file holds either a list of templates or a mapping with a
    ``templates`` list.
    """
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("templates", [])
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a list of templates")
    return [SlateTemplate.model_validate(item) for item in data]


class SlateOrchestrator:
    """Applies slates through an ``ArtifactGenerator``."""

    def __init__(self, generator: ArtifactGenerator) -> None:
        self.generator = generator

    @property
    def config(self) -> MetroConfig:
        return self.generator.config

    def kind_for(self, save_to: str) -> ArtifactKind | None:
        folders = self.config.folders
        target = save_to.rstrip("/")
        for folder_field, kind in SLATE_FOLDERS:
            if getattr(folders, folder_field).rstrip("/") == target:
                return kind
        return None

    # -- Dependency check --------------------------------------------------

    def is_declared(self, package: str, manifest_text: str) -> bool:
        """Whether ``package`` is declared in the dependency manifest.

        The manifest is parsed as YAML and the dependency sections are
        checked by key. When it is not a YAML mapping the raw text is
        searched instead.
        """
        try:
            data = yaml.safe_load(manifest_text)
        except yaml.YAMLError:
            data = None
        if not isinstance(data, dict):
            return package in manifest_text
        for section in _DEPENDENCY_SECTIONS:
            deps = data.get(section)
            if isinstance(deps, dict) and package in deps:
                return True
        return False

    def check_dependencies(self, templates: list[SlateTemplate]) -> None:
        """Raise ``MissingDependency`` for the first undeclared package."""
        manifest = self.config.dependency_manifest
        manifest_text = self.generator.materializer.load_asset(manifest)
        for template in templates:
            for package in template.plugins_required:
                if not self.is_declared(package, manifest_text):
                    raise MissingDependency(package, manifest, self.config.package_installer)

    # -- Application -------------------------------------------------------

    def request_for(self, template: SlateTemplate, force: bool) -> ArtifactRequest | None:
        kind = self.kind_for(template.save_to)
        if kind is None:
            return None
        options = dict(template.options)
        if kind is ArtifactKind.THEME:
            options.setdefault("add_to_config", False)
        return ArtifactRequest(
            name=template.name,
            kind=kind,
            stub=template.stub,
            folder=template.save_to,
            force=force,
            options=options,
        )

    def create_slate(self, templates: list[SlateTemplate], force: bool = False) -> SlateResult:
        """Validate, then create every template in order.

        Raises:
            MissingDependency: Before any file is written.
        """
        self.check_dependencies(templates)
        requests = [(template, self.request_for(template, force)) for template in templates]

        result = SlateResult()
        for template, request in requests:
            if request is None:
                result.skipped.append(template.name)
                continue
            try:
                result.created.append(self.generator.make(request))
            except (FileConflict, ManifestCorruption) as exc:
                print_error(str(exc))
                result.failed.append((template.name, exc))

        if result.skipped:
            print_warning(f"Skipped templates with unknown folders: {', '.join(result.skipped)}")
        return result
