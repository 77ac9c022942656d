"""Write a package's generated module to a sink."""

from __future__ import annotations

from typing import Sequence

from .config import GeneratorConfig
from .models import TypeName
from .sinks import Sink


class EmitError(RuntimeError):
    """Raised when writing to or closing a sink fails."""


def emit(sink: Sink, package_name: str, type_names: Sequence[TypeName], config: GeneratorConfig) -> None:
    """Write header, package clause, preamble and one stub per type name.

    The package clause is the package comment followed by the imports that
    bring every type into the generated module's scope. The sink is closed
    afterwards unless ``config.no_close`` is set. A failed write stops
    immediately and leaves whatever was already written.
    """
    try:
        if config.header:
            sink.write(config.header)
        if not config.no_package:
            sink.write(config.package_format.format(package_name))
            imports = dict.fromkeys(
                config.import_format.format(type_name.module, type_name.name) for type_name in type_names
            )
            if imports:
                sink.write("".join(imports))
                sink.write("\n")
        if config.preamble:
            sink.write(f"{config.preamble}\n\n")
        for type_name in type_names:
            sink.write(config.stub_format.format(type_name.name, type_name.name))
        if not config.no_close:
            sink.close()
    except Exception as exc:
        raise EmitError(f"writing package {package_name} failed: {exc}") from exc


__all__ = ["EmitError", "emit"]
