"""Custom command manifest.

Third-party or project-specific commands live in
``lib/app/commands/custom_commands.json``, a JSON array of
``{"name", "category"?, "script"}`` objects. The registry loads them into
``Command`` objects that run the script through the configured interpreter.
"""

from __future__ import annotations

import json
import shlex
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ValidationError

from src.commands.dispatcher import Command
from src.config import MetroConfig
from src.errors import ManifestCorruption
from src.scaffolder.filesystem import FileSystem, LocalFileSystem
from src.utils import dump_json, print_error, run_process


class CustomCommandSpec(BaseModel):
    """One entry of the custom command manifest."""

    name: str
    category: str = "app"
    script: str


class CommandRegistry:
    """Reads and appends to the custom command manifest."""

    def __init__(
        self,
        config: MetroConfig,
        fs: FileSystem | None = None,
        runner: Callable[..., int] = run_process,
    ) -> None:
        self.config = config
        self.fs = fs if fs is not None else LocalFileSystem(config.project_root)
        self.runner = runner

    @property
    def manifest_path(self) -> str:
        return self.config.custom_commands_path

    # -- Reading -----------------------------------------------------------

    def _read_raw(self) -> list[Any]:
        try:
            data = json.loads(self.fs.read_text(self.manifest_path))
        except json.JSONDecodeError as exc:
            raise ManifestCorruption(self.manifest_path, f"invalid JSON ({exc})") from exc
        if not isinstance(data, list):
            raise ManifestCorruption(self.manifest_path, "the top level must be an array")
        return data

    def load(self) -> list[CustomCommandSpec]:
        """Return the manifest's commands sorted by ``(category, name)``.

        Entries whose ``name`` was already seen are dropped; the first
        occurrence wins. A missing manifest yields an empty list.

        Raises:
            ManifestCorruption: Invalid JSON, a non-array top level, an entry
                without ``name`` or ``script``, or a non-string ``name``.
        """
        if not self.fs.exists(self.manifest_path):
            return []

        seen: set[Any] = set()
        specs: list[CustomCommandSpec] = []
        for index, entry in enumerate(self._read_raw()):
            if not isinstance(entry, dict):
                raise ManifestCorruption(self.manifest_path, f"entry {index} is not an object")
            name = entry.get("name")
            if name is not None and not isinstance(name, str):
                raise ManifestCorruption(
                    self.manifest_path, f'command "name" must be a string (entry {index})'
                )
            if name in seen:
                continue
            seen.add(name)
            for key in ("name", "script"):
                if entry.get(key) is None:
                    raise ManifestCorruption(
                        self.manifest_path, f'command "{key}" is required (entry {index})'
                    )
            try:
                specs.append(CustomCommandSpec.model_validate(entry))
            except ValidationError as exc:
                raise ManifestCorruption(self.manifest_path, str(exc)) from exc

        return sorted(specs, key=lambda spec: (spec.category, spec.name))

    # -- Writing -----------------------------------------------------------

    def ensure_manifest(self) -> None:
        """Create the manifest as an empty array if it does not exist."""
        if self.fs.exists(self.manifest_path):
            return
        folder = self.manifest_path.rsplit("/", 1)[0]
        if folder != self.manifest_path and not self.fs.is_dir(folder):
            self.fs.mkdir(folder)
        self.fs.write_text(self.manifest_path, "[]")

    def register(self, spec: CustomCommandSpec) -> bool:
        """Append ``spec`` unless a command with the same name exists.

        Returns:
            ``True`` when the manifest was changed.
        """
        self.ensure_manifest()
        commands = self._read_raw()
        if any(isinstance(c, dict) and c.get("name") == spec.name for c in commands):
            return False
        commands.append(spec.model_dump())
        self.fs.write_text(self.manifest_path, dump_json(commands))
        return True

    # -- Execution ---------------------------------------------------------

    def execute_script(self, script: str, args: list[str]) -> int:
        """Run a command script with the configured interpreter.

        A missing script is reported and returns ``1`` without spawning.
        """
        script_path = f"{self.config.folders.commands}/{script}"
        if not self.fs.exists(script_path):
            print_error(f"Command script not found: {script}")
            return 1
        argv = [*shlex.split(self.config.script_interpreter), script_path, *args]
        return self.runner(argv, cwd=self.config.project_root)

    def discover(self) -> list[Command]:
        """Load the manifest as dispatchable ``Command`` objects."""
        return [
            Command(
                category=spec.category,
                name=spec.name,
                action=lambda args, script=spec.script: self.execute_script(script, args),
                description=f"Run {spec.script}",
            )
            for spec in self.load()
        ]
