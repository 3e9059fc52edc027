"""Metro command layer.

Routes ``category:action`` tokens to built-in commands and to custom commands
declared in the project's command manifest.

Key classes:
    Command          - One dispatchable ``category:action`` entry
    CommandTable     - First-wins table of commands, sorted for listing
    CommandRegistry  - Custom command manifest reader/writer and script runner

The argparse-backed built-ins live in ``src.commands.builtins``.
"""

from .dispatcher import Command, CommandTable, dispatch
from .registry import CommandRegistry, CustomCommandSpec

__all__ = [
    # Dispatch
    "Command",
    "CommandTable",
    "dispatch",
    # Custom command manifest
    "CommandRegistry",
    "CustomCommandSpec",
]
