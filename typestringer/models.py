"""Core data models shared across typestringer components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple, Union


@dataclass(frozen=True)
class TypeSpec:
    """A single named type inside a type declaration."""

    name: str


@dataclass(frozen=True)
class TypeDeclGroup:
    """A top-level statement that declares one or more types."""

    specs: Tuple[TypeSpec, ...]


@dataclass(frozen=True)
class OtherDecl:
    """Any other top-level statement; ``kind`` is the syntax node type."""

    kind: str


Declaration = Union[TypeDeclGroup, OtherDecl]


@dataclass(frozen=True)
class Diagnostic:
    """A problem found while loading a source file."""

    path: Path
    line: int
    column: int
    message: str

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}: {self.message}"


@dataclass
class SourceFile:
    """One parsed source file and the package name it declares."""

    path: Path
    package: str
    declarations: List[Declaration] = field(default_factory=list)

    @property
    def module(self) -> str:
        """Module name relative to the package; empty for ``__init__.py``."""
        return "" if self.path.stem == "__init__" else self.path.stem


@dataclass(frozen=True)
class TypeName:
    """An accepted type name and the package module that declares it."""

    name: str
    module: str


@dataclass
class LoadedPackage:
    """A resolved package: its parsed files plus any load diagnostics."""

    name: str
    directory: Path
    files: List[SourceFile] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def source_paths(self) -> List[Path]:
        return [source.path for source in self.files]
