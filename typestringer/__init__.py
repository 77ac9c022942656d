"""Generate ``__str__`` stubs for the types declared in Python packages."""

from .config import ConfigError, GeneratorConfig
from .emitter import EmitError
from .extractor import NoSourceFilesError
from .loader import LoadError, PackageLoader
from .models import TypeName
from .orchestrator import GenerationError, Orchestrator, PackageDiagnosticsError, generate
from .sinks import BrokenSinkCreatorError, FileSinkFactory, SinkCreationError

__all__ = [
    "BrokenSinkCreatorError",
    "ConfigError",
    "EmitError",
    "FileSinkFactory",
    "GenerationError",
    "GeneratorConfig",
    "LoadError",
    "NoSourceFilesError",
    "Orchestrator",
    "PackageDiagnosticsError",
    "PackageLoader",
    "SinkCreationError",
    "TypeName",
    "generate",
]
