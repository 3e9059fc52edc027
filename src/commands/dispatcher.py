"""``category:action`` command dispatch.

Built-in and custom commands share one namespace. The table is kept sorted by
``(category, name)`` so listings are stable.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from src.errors import MalformedCommand, UnknownCommand
from src.utils import print_info

Action = Callable[[list[str]], int | None]


@dataclass
class Command:
    category: str
    name: str
    action: Action
    description: str = ""

    @property
    def key(self) -> str:
        return f"{self.category}:{self.name}"


class CommandTable:
    """Ordered dispatch table.

    When two commands share ``(category, name)`` the one added first is
    kept, so built-ins registered before custom commands cannot be shadowed.
    """

    def __init__(self, commands: Iterable[Command] = ()) -> None:
        self._commands: dict[tuple[str, str], Command] = {}
        self.extend(commands)

    def add(self, command: Command) -> bool:
        """Add ``command`` unless its key is taken. Returns whether it was added."""
        key = (command.category, command.name)
        if key in self._commands:
            return False
        self._commands[key] = command
        return True

    def extend(self, commands: Iterable[Command]) -> None:
        for command in commands:
            self.add(command)

    def find(self, category: str, name: str) -> Command | None:
        return self._commands.get((category, name))

    @property
    def commands(self) -> list[Command]:
        """Commands sorted by category, then name."""
        return [self._commands[key] for key in sorted(self._commands)]

    def __iter__(self) -> Iterator[Command]:
        return iter(self.commands)

    def __len__(self) -> int:
        return len(self._commands)


def dispatch(arguments: list[str], table: CommandTable, menu: str) -> int:
    """Run the command named by ``arguments[0]`` with the remaining arguments.

    Args:
        arguments: Raw CLI arguments, first token ``category:action``.
        table: Built-in and custom commands.
        menu: Text printed when no arguments are given.

    Returns:
        The action's exit code (``0`` when it returns ``None``).

    Raises:
        MalformedCommand: The first token is not exactly two ``:`` parts.
        UnknownCommand: No command matches.
    """
    if not arguments:
        print_info(menu)
        return 0

    parts = arguments[0].split(":")
    if len(parts) != 2:
        raise MalformedCommand(arguments)

    command = table.find(parts[0], parts[1])
    if command is None:
        raise UnknownCommand(arguments)

    result = command.action(list(arguments[1:]))
    return 0 if result is None else int(result)
