"""Naming conventions and path resolution for generated files.

Everything in this module is pure: identical inputs always produce identical
outputs and nothing touches the file system.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, field_validator


class ProjectFile(BaseModel):
    """Resolved identity of a generated file.

    ``creation_path`` is a ``/``-joined directory relative to the artifact's
    folder, e.g. ``admin/settings`` for ``make:page admin/settings/profile``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    creation_path: str | None = None

    @field_validator("name")
    @classmethod
    def _name_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be empty")
        return value


# ---------------------------------------------------------------------------
# Case conversion
# ---------------------------------------------------------------------------


def snake_case(value: str) -> str:
    """Convert ``SomeThing``, ``some-thing`` or ``some thing`` to ``some_thing``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", value.strip())
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[^A-Za-z0-9]+", "_", s2).strip("_").lower()


def _words(value: str) -> list[str]:
    return [word for word in snake_case(value).split("_") if word]


def pascal_case(value: str) -> str:
    """Convert ``some_thing`` or ``some-thing`` to ``SomeThing``."""
    return "".join(word.capitalize() for word in _words(value))


def camel_case(value: str) -> str:
    """Convert ``some_thing`` or ``some-thing`` to ``someThing``."""
    pascal = pascal_case(value)
    if pascal:
        return pascal[0].lower() + pascal[1:]
    return ""


def title_case(value: str) -> str:
    """Convert ``some_thing`` to ``Some Thing``."""
    return " ".join(word.capitalize() for word in _words(value))


# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------


def strip_suffix(name: str, suffix: str | None) -> str:
    """Return ``name`` in snake_case without its conventional suffix token.

    ``strip_suffix("UserController", "controller")`` gives ``"user"``.
    Repeated suffixes are all removed so the operation is idempotent. A name
    that consists only of the suffix is returned unchanged.
    """
    snake = snake_case(name)
    if not suffix:
        return snake
    token = f"_{snake_case(suffix)}"
    while snake.endswith(token) and len(snake) > len(token):
        snake = snake[: -len(token)]
    return snake


def create_project_file(raw_name: str, suffix: str | None = None) -> ProjectFile:
    """Split a path-like name into a base name and a creation path.

    ``"admin/sub/UserController"`` with suffix ``"controller"`` becomes
    ``ProjectFile(name="user", creation_path="admin/sub")``.
    """
    segments = [segment.strip() for segment in raw_name.split("/") if segment.strip()]
    if not segments:
        raise ValueError("name must not be empty")
    name = strip_suffix(segments.pop(), suffix)
    creation_path = "/".join(segments) or None
    return ProjectFile(name=name, creation_path=creation_path)


def creation_path_segments(folder: str, creation_path: str | None) -> list[str]:
    """Directories to create, one level at a time, for a creation path.

    ``("lib/pages", "admin/sub")`` gives ``["lib/pages/admin", "lib/pages/admin/sub"]``.
    """
    if not creation_path:
        return []
    directories: list[str] = []
    current = folder.rstrip("/")
    for segment in creation_path.split("/"):
        if not segment:
            continue
        current = f"{current}/{segment}"
        directories.append(current)
    return directories


def create_path_for_file(
    folder_path: str,
    class_name: str,
    prefix: str | None = None,
    creation_path: str | None = None,
    extension: str = "dart",
) -> str:
    """Build ``folder[/creation_path]/snake(class_name)[_prefix].extension``."""
    folder = folder_path.rstrip("/")
    nested = f"{creation_path.strip('/')}/" if creation_path else ""
    suffix = f"_{prefix}" if prefix else ""
    return f"{folder}/{nested}{snake_case(class_name)}{suffix}.{extension}"


def make_import_line(file_path: str) -> str:
    """Package-relative Dart import for a generated file under ``lib/``.

    ``lib/app/models/user.dart`` gives ``import '/app/models/user.dart';``.
    """
    relative = file_path[len("lib/"):] if file_path.startswith("lib/") else file_path
    return f"import '/{relative.lstrip('/')}';"
