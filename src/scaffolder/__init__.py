"""Metro scaffolder -- creates project files and wires them into the app.

Quick usage::

    from src.config import MetroConfig
    from src.scaffolder.generators import ArtifactGenerator

    generator = ArtifactGenerator(MetroConfig(project_root=Path("my_app")))
    generator.make_controller("User", stub)

The generator and slate modules depend on the command registry, so only the
leaf modules are re-exported here.
"""

from .filesystem import FileMaterializer, FileSystem, LocalFileSystem
from .paths import ProjectFile, create_path_for_file, create_project_file, make_import_line
from .patcher import PatchOutcome, PatchStatus, RegistrationPatcher
from .templates import StubRenderer

__all__ = [
    # Paths
    "ProjectFile",
    "create_project_file",
    "create_path_for_file",
    "make_import_line",
    # File system
    "FileSystem",
    "LocalFileSystem",
    "FileMaterializer",
    # Registration patching
    "RegistrationPatcher",
    "PatchOutcome",
    "PatchStatus",
    # Stubs
    "StubRenderer",
]
