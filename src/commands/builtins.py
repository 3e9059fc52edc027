"""Built-in ``make:*`` and ``project:*`` commands.

Each command parses its own arguments with ``argparse`` and calls into an
``ArtifactGenerator``. Argument errors raise ``ArgumentError`` instead of
exiting so that the CLI decides the exit code.
"""

from __future__ import annotations

import argparse
from collections.abc import Callable
from pathlib import Path
from typing import NoReturn

import yaml

from src.commands.dispatcher import Command, CommandTable
from src.errors import ArgumentError, FileConflict
from src.scaffolder.generators import KINDS, ArtifactGenerator, ArtifactKind, ArtifactRequest
from src.scaffolder.paths import create_project_file
from src.scaffolder.slate import SlateOrchestrator, load_slate
from src.scaffolder.templates import StubRenderer
from src.utils import print_command_table, print_info, print_success


class CommandArgumentParser(argparse.ArgumentParser):
    """``ArgumentParser`` that raises ``ArgumentError`` instead of exiting."""

    def __init__(self, *args, **kwargs) -> None:
        kwargs.setdefault("add_help", False)
        super().__init__(*args, **kwargs)
        self.add_argument("-h", "--help", action="store_true", help="Show this help message")

    def error(self, message: str) -> NoReturn:
        raise ArgumentError(f"{self.prog}: {message}", usage=self.format_usage())


# Extra flags per kind: (flag, option key, help).
_KIND_FLAGS: dict[ArtifactKind, list[tuple[str, str, str]]] = {
    ArtifactKind.PAGE: [
        ("--auth", "is_auth_page", "Register as the authenticated route"),
        ("--initial", "is_initial_page", "Register as the initial route"),
        ("--no-route", "no_route", "Do not add the page to the router"),
    ],
    ArtifactKind.NAVIGATION_HUB: [
        ("--auth", "is_auth_page", "Register as the authenticated route"),
        ("--initial", "is_initial_page", "Register as the initial route"),
        ("--no-route", "no_route", "Do not add the hub to the router"),
    ],
    ArtifactKind.MODEL: [
        ("--no-config", "no_config", "Do not register the model decoders"),
        ("--skip-if-exists", "skip_if_exists", "Leave an existing model untouched"),
    ],
    ArtifactKind.CONTROLLER: [("--no-config", "no_config", "Do not register the controller")],
    ArtifactKind.PROVIDER: [("--no-config", "no_config", "Do not register the provider")],
    ArtifactKind.EVENT: [("--no-config", "no_config", "Do not register the event")],
    ArtifactKind.API_SERVICE: [("--no-config", "no_config", "Do not register the API service")],
    ArtifactKind.THEME: [("--no-config", "no_config", "Do not add the theme to appThemes")],
}


def _read_stub(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ArgumentError(f"Cannot read stub {path}: {exc.strerror}") from exc


def _make_action(
    kind: ArtifactKind, generator: ArtifactGenerator, renderer: StubRenderer
) -> Callable[[list[str]], int]:
    label = KINDS[kind].label.lower()
    parser = CommandArgumentParser(prog=f"make:{kind.value}", description=f"Create a new {label}")
    parser.add_argument("name", nargs="?", help=f"Name of the {label}, e.g. admin/{label}")
    parser.add_argument("-f", "--force", action="store_true", help="Overwrite an existing file")
    parser.add_argument("--stub", help="Read the file contents from this path")
    for flag, dest, help_text in _KIND_FLAGS.get(kind, []):
        parser.add_argument(flag, dest=dest, action="store_true", help=help_text)
    if kind is ArtifactKind.COMMAND:
        parser.add_argument("--category", default="app", help="Command category (default: app)")

    def action(arguments: list[str]) -> int:
        args = parser.parse_args(arguments)
        if args.help:
            print_info(parser.format_help())
            return 0
        if not args.name:
            raise ArgumentError(f"{parser.prog}: a name is required", usage=parser.format_usage())

        try:
            base_name = create_project_file(args.name, KINDS[kind].suffix).name
        except ValueError as exc:
            raise ArgumentError(f"{parser.prog}: {exc}", usage=parser.format_usage()) from exc
        stub = _read_stub(args.stub) if args.stub else renderer.render_stub(kind.value, base_name)
        options = {
            "add_to_config": not getattr(args, "no_config", False),
            "add_to_route": not getattr(args, "no_route", False),
            "is_auth_page": getattr(args, "is_auth_page", False),
            "is_initial_page": getattr(args, "is_initial_page", False),
            "skip_if_exists": getattr(args, "skip_if_exists", False),
            "category": getattr(args, "category", "app"),
        }
        generator.make(
            ArtifactRequest(name=args.name, kind=kind, stub=stub, force=args.force, options=options)
        )
        if kind is ArtifactKind.THEME:
            colors_stub = renderer.render_stub(ArtifactKind.THEME_COLORS.value, base_name)
            generator.make(
                ArtifactRequest(
                    name=args.name, kind=ArtifactKind.THEME_COLORS,
                    stub=colors_stub, force=args.force,
                )
            )
        return 0

    return action


def _slate_action(generator: ArtifactGenerator) -> Callable[[list[str]], int]:
    parser = CommandArgumentParser(
        prog="project:slate", description="Create every template listed in a slate file"
    )
    parser.add_argument("path", nargs="?", help="YAML or JSON file with the slate templates")
    parser.add_argument("-f", "--force", action="store_true", help="Overwrite existing files")

    def action(arguments: list[str]) -> int:
        args = parser.parse_args(arguments)
        if args.help:
            print_info(parser.format_help())
            return 0
        if not args.path:
            raise ArgumentError(f"{parser.prog}: a slate file is required", usage=parser.format_usage())
        try:
            templates = load_slate(args.path)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise ArgumentError(f"Cannot load slate {args.path}: {exc}") from exc

        result = SlateOrchestrator(generator).create_slate(templates, force=args.force)
        if not result.success:
            return 1
        print_success(f"Slate created ({len(result.created)} files)")
        return 0

    return action


def _add_package_action(generator: ArtifactGenerator) -> Callable[[list[str]], int]:
    parser = CommandArgumentParser(
        prog="project:add_package", description="Add packages to the dependency manifest"
    )
    parser.add_argument("packages", nargs="*", help="Package names, optionally name:version")
    parser.add_argument("--dev", action="store_true", help="Add as dev dependencies")

    def action(arguments: list[str]) -> int:
        args = parser.parse_args(arguments)
        if args.help:
            print_info(parser.format_help())
            return 0
        if not args.packages:
            raise ArgumentError(f"{parser.prog}: a package is required", usage=parser.format_usage())
        return generator.add_packages(args.packages, dev=args.dev)

    return action


def _config_action(generator: ArtifactGenerator) -> Callable[[list[str]], int]:
    parser = CommandArgumentParser(
        prog="project:config", description="Write the current settings to metro.json"
    )
    parser.add_argument("-f", "--force", action="store_true", help="Overwrite an existing metro.json")

    def action(arguments: list[str]) -> int:
        args = parser.parse_args(arguments)
        if args.help:
            print_info(parser.format_help())
            return 0
        target = generator.config.project_root / "metro.json"
        if target.exists() and not args.force:
            raise FileConflict(target)
        generator.config.save(target)
        print_success(f"Settings written to {target}")
        return 0

    return action


def build_command_table(
    generator: ArtifactGenerator,
    renderer: StubRenderer | None = None,
    include_custom: bool = True,
) -> CommandTable:
    """Built-in commands first, then any custom commands from the manifest."""
    renderer = renderer or StubRenderer()
    table = CommandTable()
    for kind in ArtifactKind:
        table.add(
            Command(
                category="make",
                name=kind.value,
                action=_make_action(kind, generator, renderer),
                description=f"Create a new {KINDS[kind].label.lower()}",
            )
        )
    table.add(Command("project", "slate", _slate_action(generator), "Create files from a slate"))
    table.add(
        Command(
            "project", "add_package", _add_package_action(generator),
            "Add packages to the dependency manifest",
        )
    )
    table.add(
        Command(
            "project", "config", _config_action(generator),
            "Write the current settings to metro.json",
        )
    )
    table.add(
        Command(
            "project", "commands",
            lambda _args: print_command_table(table.commands),
            "List every available command",
        )
    )
    if include_custom:
        table.extend(generator.commands.discover())
    return table


def build_menu(table: CommandTable) -> str:
    """Usage text printed when metro runs without arguments."""
    width = max((len(command.key) for command in table), default=0)
    lines = ["Metro - scaffolding for your project", "", "Usage:", "  metro <category>:<action> [options]", ""]
    category = None
    for command in table:
        if command.category != category:
            category = command.category
            lines.append(f"{category}")
        lines.append(f"  {command.key.ljust(width)}  {command.description}")
    return "\n".join(lines)
