"""Exception taxonomy for the scaffolding engine.

Library code raises these; only the CLI entry point turns them into process
exit codes via ``exit_code``.
"""

from __future__ import annotations

from pathlib import Path


class MetroError(Exception):
    """Base class for every user-facing scaffolding failure."""

    exit_code: int = 1


class ArgumentError(MetroError):
    """Missing or malformed command-line arguments."""

    def __init__(self, message: str, usage: str = "") -> None:
        self.usage = usage
        super().__init__(message)


class MalformedCommand(MetroError):
    """The command token is not of the form ``category:action``."""

    exit_code = 2

    def __init__(self, arguments: list[str]) -> None:
        self.arguments = arguments
        super().__init__(f"Invalid arguments {arguments}")


class UnknownCommand(MetroError):
    """No built-in or custom command matches ``category:action``."""

    def __init__(self, arguments: list[str]) -> None:
        self.arguments = arguments
        super().__init__(f"Invalid arguments {arguments}")


class FileConflict(MetroError):
    """The target file exists and force-create was not requested."""

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        super().__init__(f"{self.path} already exists")


class MissingDependency(MetroError):
    """A slate template requires a package the project does not declare."""

    def __init__(
        self, package: str, manifest: str = "pubspec.yaml", installer: str = "flutter pub add"
    ) -> None:
        self.package = package
        self.manifest = manifest
        super().__init__(
            f"Your project is missing the {package} package in your {manifest} file.\n"
            f"Run \"{installer} {package}\" to install it."
        )


class RegistrationPatternNotFound(MetroError):
    """None of the known literal signatures exist in a registration file."""

    def __init__(self, path: str | Path, signatures: list[str]) -> None:
        self.path = str(path)
        self.signatures = signatures
        super().__init__(
            f"Could not find any of {', '.join(signatures)} in {self.path}"
        )


class ManifestCorruption(MetroError):
    """The custom command manifest cannot be parsed or is missing keys."""

    def __init__(self, path: str | Path, detail: str) -> None:
        self.path = str(path)
        self.detail = detail
        super().__init__(
            f"Error loading custom commands from {self.path}: {detail}\n\n"
            f"Make sure {self.path} contains a JSON array of objects with "
            f'"name" and "script" keys.'
        )

