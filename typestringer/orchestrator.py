"""Generation run orchestration across all loaded packages."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .config import GeneratorConfig
from .emitter import EmitError, emit
from .extractor import NoSourceFilesError, extract
from .loader import LoadError, PackageLoader
from .logging import diagnostic_logger, get_logger
from .models import Diagnostic, LoadedPackage
from .sinks import FileSinkFactory, SinkCreationError, SinkFactory, resolve_sink


class PackageDiagnosticsError(RuntimeError):
    """Raised for a package that failed to load cleanly; it is not generated."""

    def __init__(self, package: LoadedPackage) -> None:
        self.package = package
        self.diagnostics: List[Diagnostic] = list(package.diagnostics)
        details = "; ".join(str(diagnostic) for diagnostic in self.diagnostics)
        super().__init__(f"package {package.name} has errors: {details}")


class GenerationError(ExceptionGroup):
    """All per-package failures of one run, in the order they happened."""

    def derive(self, excs: Sequence[Exception]) -> "GenerationError":
        return GenerationError(self.message, excs)


class Orchestrator:
    """Runs load, filter and emit for every package a config resolves to."""

    def __init__(
        self,
        config: GeneratorConfig,
        loader: PackageLoader | None = None,
    ) -> None:
        self.config = config
        # Narrates the run on the configured diagnostics stream.
        self.diagnostics = diagnostic_logger(config.diagnostic_output)
        self.loader = loader or PackageLoader(logger=self.diagnostics)
        self.logger = get_logger("orchestrator")
        self._factory: Optional[SinkFactory] = None

    @property
    def sink_factory(self) -> SinkFactory:
        if self._factory is None:
            self._factory = self.config.sink_factory or FileSinkFactory(
                self.config.filename_format, logger=self.diagnostics
            )
        return self._factory

    def generate(self) -> None:
        """Generate every package, raising ``GenerationError`` if any failed.

        ``LoadError`` and ``BrokenSinkCreatorError`` end the run immediately;
        every other failure is recorded and the next package is processed.
        """
        diagnostics = self.diagnostics
        try:
            packages = self.loader.load(self.config.patterns)
        except LoadError as exc:
            diagnostics.info("%s", exc)
            raise

        errors: List[Exception] = []
        for package in packages:
            diagnostics.info("package %s in %s", package.name, package.directory)
            if package.diagnostics:
                diagnostics.info("found package errors, not continuing")
                for diagnostic in package.diagnostics:
                    diagnostics.info("%s", diagnostic)
                errors.append(PackageDiagnosticsError(package))
                continue
            try:
                self.handle_package(package)
            except (NoSourceFilesError, SinkCreationError, EmitError) as exc:
                diagnostics.info("generate error: %s", exc)
                errors.append(exc)

        self.logger.debug("Processed %d packages, %d failed", len(packages), len(errors))
        if errors:
            raise GenerationError(f"{len(errors)} of {len(packages)} packages failed", errors)

    def handle_package(self, package: LoadedPackage) -> None:
        """Filter the package's type names and emit its generated module."""
        package_name, type_names = extract(
            package, self.config.includes, self.config.ignores, self.diagnostics
        )
        sink = resolve_sink(package, package_name, self.config, self.sink_factory)
        emit(sink, package_name, type_names, self.config)


def generate(config: GeneratorConfig) -> None:
    """Run a single generation pass for ``config``."""
    Orchestrator(config).generate()


__all__ = ["GenerationError", "Orchestrator", "PackageDiagnosticsError", "generate"]
