"""Jinja2 rendering of the built-in stubs.

Generators treat stubs as opaque text. The CLI still needs something to write
when the user does not pass ``--stub``, so every artifact kind ships a small
``<kind>.dart.j2`` file under ``src/scaffolder/stubs/`` rendered with the
artifact's names.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from src.scaffolder.paths import camel_case, pascal_case, snake_case, title_case

_DEFAULT_STUB_DIR = Path(__file__).parent / "stubs"


class StubRenderer:
    """Renders ``.j2`` stubs from a configurable directory."""

    def __init__(self, stub_dir: str | Path | None = None) -> None:
        if stub_dir is None:
            stub_dir = _DEFAULT_STUB_DIR
        self.stub_dir = Path(stub_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.stub_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self.env.filters["pascal_case"] = pascal_case
        self.env.filters["snake_case"] = snake_case
        self.env.filters["camel_case"] = camel_case
        self.env.filters["title_case"] = title_case

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single stub with the provided context."""
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_stub(self, kind: str, name: str, **extra: Any) -> str:
        """Render the built-in stub for ``kind`` with names derived from ``name``.

        ``name`` is the suffix-free base name, e.g. ``"user"`` for a
        ``UserController``.
        """
        context = {
            "name": name,
            "class_name": pascal_case(name),
            "snake_name": snake_case(name),
            "camel_name": camel_case(name),
            "title_name": title_case(name),
            **extra,
        }
        return self.render(f"{kind}.dart.j2", context)

