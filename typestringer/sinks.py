"""Output sinks for generated modules."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Protocol

from .config import FORMAT_FILENAME, GeneratorConfig
from .logging import get_logger
from .models import LoadedPackage


class Sink(Protocol):
    """Writable, closable destination for generated text."""

    def write(self, text: str) -> int: ...

    def close(self) -> None: ...


# Called with the package directory and the package name.
SinkFactory = Callable[[Path, str], Optional[Sink]]


class SinkCreationError(RuntimeError):
    """Raised when a sink factory fails to create a package's sink."""


class BrokenSinkCreatorError(RuntimeError):
    """Raised when a sink factory returns no sink without raising.

    This is a defect in the factory, not a runtime condition, so the
    orchestrator lets it abort the whole run.
    """


class FileSinkFactory:
    """Default strategy: one file per package, next to its first source file."""

    def __init__(
        self,
        filename_format: str = FORMAT_FILENAME,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.filename_format = filename_format
        self.logger = logger or get_logger("sinks")

    def path_for(self, directory: Path, package_name: str) -> Path:
        return directory / self.filename_format.format(package_name)

    def __call__(self, directory: Path, package_name: str) -> Sink:
        path = self.path_for(directory, package_name)
        try:
            handle = path.open("w", encoding="utf-8", newline="\n")
        except OSError as exc:
            self.logger.info("%s", exc)
            raise
        self.logger.info("writing file: %s", path)
        return handle


def resolve_sink(
    package: LoadedPackage,
    package_name: str,
    config: GeneratorConfig,
    factory: SinkFactory,
) -> Sink:
    """Return the sink for ``package``: the shared output or a fresh factory sink."""
    if config.output is not None:
        return config.output

    directory = package.source_paths[0].parent if package.files else package.directory
    try:
        sink = factory(directory, package_name)
    except Exception as exc:
        raise SinkCreationError(f"cannot create output for package {package_name}: {exc}") from exc
    if sink is None:
        raise BrokenSinkCreatorError(f"sink factory {factory!r} returned no sink for package {package_name}")
    return sink


__all__ = [
    "BrokenSinkCreatorError",
    "FileSinkFactory",
    "Sink",
    "SinkCreationError",
    "SinkFactory",
    "resolve_sink",
]
