"""Metro command-line entry point.

Usage::

    metro make:controller user
    metro make:page admin/dashboard --auth
    metro project:commands
    metro app:seed --fresh          # a custom command from the manifest

This is the only module that turns ``MetroError`` exceptions into process
exit codes.
"""

from __future__ import annotations

import sys

from src.commands.builtins import build_command_table, build_menu
from src.commands.dispatcher import CommandTable, dispatch
from src.config import MetroConfig
from src.errors import ArgumentError, ManifestCorruption, MetroError
from src.scaffolder.generators import ArtifactGenerator
from src.utils import console, print_error, print_warning


def load_commands(generator: ArtifactGenerator) -> CommandTable:
    """Built-in commands plus custom commands.

    A corrupt manifest is reported and only the built-ins are offered.
    """
    try:
        return build_command_table(generator)
    except ManifestCorruption as exc:
        print_error(str(exc))
        print_warning("Custom commands are unavailable until the manifest is fixed.")
        return build_command_table(generator, include_custom=False)


def run(argv: list[str], config: MetroConfig | None = None) -> int:
    """Dispatch ``argv`` and return the exit code."""
    config = config or MetroConfig.from_env()
    generator = ArtifactGenerator(config)
    table = load_commands(generator)

    try:
        return dispatch(argv, table, build_menu(table))
    except ArgumentError as exc:
        print_error(str(exc))
        if exc.usage:
            console.print(exc.usage, markup=False, highlight=False)
        return exc.exit_code
    except MetroError as exc:
        print_error(str(exc))
        return exc.exit_code


def main() -> None:
    """CLI entry point for ``metro`` and ``python -m src.cli``."""
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
