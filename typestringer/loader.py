"""Tree-sitter powered package loading."""

from __future__ import annotations

import glob
import logging
import os
import re
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import tree_sitter_python
from tree_sitter import Language, Node, Parser

from .logging import get_logger
from .models import Declaration, Diagnostic, LoadedPackage, OtherDecl, SourceFile, TypeDeclGroup, TypeSpec

PY_LANGUAGE = Language(tree_sitter_python.language())

SOURCE_SUFFIX = ".py"

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".tox",
}

_IMPORT_PATH = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")

# Diagnostics reported per file before the rest are summarised.
_MAX_SYNTAX_ERRORS = 10


class LoadError(RuntimeError):
    """Raised when location patterns cannot be resolved into any package."""


class PackageLoader:
    """Resolves location patterns into parsed packages."""

    def __init__(
        self,
        search_path: Optional[Sequence[str]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._search_path = list(search_path) if search_path is not None else None
        self._parser = Parser(PY_LANGUAGE)
        self.logger = logger or get_logger("loader")

    def load(self, patterns: Iterable[str]) -> List[LoadedPackage]:
        """Return one loaded package per resolved directory, in resolution order."""
        # Directory -> named files, or None when the whole directory is loaded.
        selected: Dict[Path, Optional[List[Path]]] = {}
        for pattern in patterns:
            try:
                self._resolve(pattern, selected)
            except OSError as exc:
                raise LoadError(f"cannot resolve pattern {pattern}: {exc}") from exc

        packages = [self._load_package(directory, files) for directory, files in selected.items()]
        if not packages:
            raise LoadError("no packages loaded")
        return packages

    def _resolve(self, pattern: str, selected: Dict[Path, Optional[List[Path]]]) -> None:
        if not isinstance(pattern, str) or not pattern.strip():
            raise LoadError(f"malformed pattern: {pattern!r}")

        if glob.has_magic(pattern):
            matches = sorted(glob.glob(pattern, recursive=True))
            literal = _literal_depth(pattern)
            self.logger.debug("Pattern %s matched %d paths", pattern, len(matches))
            for match in matches:
                path = Path(match)
                # Only the parts the glob matched are checked against exclusions.
                if any(part in _EXCLUDED_DIRS for part in path.parts[literal:]):
                    continue
                if path.is_dir():
                    if _has_sources(path):
                        _select_directory(selected, path)
                elif path.suffix == SOURCE_SUFFIX:
                    _select_file(selected, path)
            return

        path = Path(pattern).expanduser()
        if path.is_dir():
            _select_directory(selected, path)
            return
        if path.is_file():
            if path.suffix != SOURCE_SUFFIX:
                raise LoadError(f"named files must be {SOURCE_SUFFIX} files: {pattern}")
            _select_file(selected, path)
            return

        if _IMPORT_PATH.match(pattern):
            located = _find_import_path(pattern, self._effective_search_path())
            if located is not None:
                self.logger.debug("Import path %s resolved to %s", pattern, located)
                if located.is_dir():
                    _select_directory(selected, located)
                else:
                    _select_file(selected, located)
                return

        self.logger.warning("Pattern %s matched no packages", pattern)

    def _effective_search_path(self) -> List[str]:
        if self._search_path is not None:
            return self._search_path
        return [os.getcwd(), *sys.path]

    def _load_package(self, directory: Path, files: Optional[List[Path]]) -> LoadedPackage:
        package = LoadedPackage(name=directory.name, directory=directory)
        if files is None:
            try:
                paths = _source_files(directory)
            except OSError as exc:
                package.diagnostics.append(Diagnostic(path=directory, line=0, column=0, message=str(exc)))
                return package
        else:
            paths = files
        for path in paths:
            source, diagnostics = self._parse_file(path, directory.name)
            package.diagnostics.extend(diagnostics)
            if source is not None:
                package.files.append(source)
        self.logger.debug(
            "Loaded package %s: %d files, %d diagnostics",
            package.name,
            len(package.files),
            len(package.diagnostics),
        )
        return package

    def _parse_file(self, path: Path, package_name: str) -> tuple[Optional[SourceFile], List[Diagnostic]]:
        try:
            source_bytes = path.read_bytes()
            source_bytes.decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return None, [Diagnostic(path=path, line=0, column=0, message=str(exc))]

        tree = self._parser.parse(source_bytes)
        root = tree.root_node
        declarations = [_declaration(child, source_bytes) for child in root.named_children]
        source = SourceFile(path=path, package=package_name, declarations=declarations)
        return source, _syntax_diagnostics(path, root)


def _select_directory(selected: Dict[Path, Optional[List[Path]]], directory: Path) -> None:
    selected[directory.resolve()] = None


def _select_file(selected: Dict[Path, Optional[List[Path]]], path: Path) -> None:
    resolved = path.resolve()
    directory = resolved.parent
    if directory in selected and selected[directory] is None:
        return
    files = selected.setdefault(directory, [])
    if resolved not in files:
        files.append(resolved)


def _source_files(directory: Path) -> List[Path]:
    return sorted(
        (entry for entry in directory.iterdir() if entry.suffix == SOURCE_SUFFIX and entry.is_file()),
        key=lambda entry: entry.name,
    )


def _has_sources(directory: Path) -> bool:
    # An unreadable directory is kept so loading reports it as a diagnostic.
    try:
        return bool(_source_files(directory))
    except OSError:
        return True


def _literal_depth(pattern: str) -> int:
    parts = Path(pattern).parts
    for index, part in enumerate(parts):
        if glob.has_magic(part):
            return index
    return len(parts)


def _find_import_path(name: str, search_path: Sequence[str]) -> Optional[Path]:
    """Locate a dotted module or package on ``search_path`` without importing it.

    Each segment is looked up in the directories of the previous one, so
    namespace packages resolve without their parents being imported.
    """
    locations = [Path(entry or os.curdir) for entry in search_path]
    parts = name.split(".")
    for index, part in enumerate(parts):
        found = _find_segment(part, locations)
        if not found:
            return None
        if index == len(parts) - 1:
            return found[0]
        if not found[0].is_dir():
            return None
        locations = found
    return None


def _find_segment(part: str, locations: Sequence[Path]) -> List[Path]:
    # Same precedence as the path finder: a regular package or a module in an
    # earlier location wins, namespace portions are collected from all of them.
    portions: List[Path] = []
    for location in locations:
        candidate = location / part
        try:
            if (candidate / "__init__.py").is_file():
                return [candidate]
            module = location / f"{part}{SOURCE_SUFFIX}"
            if module.is_file():
                return [module]
            if candidate.is_dir():
                portions.append(candidate)
        except OSError:
            continue
    return portions


def _node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _declaration(node: Node, source_bytes: bytes) -> Declaration:
    target = node
    if node.type == "decorated_definition":
        definition = node.child_by_field_name("definition")
        if definition is not None:
            target = definition

    if target.type == "class_definition":
        name_node = target.child_by_field_name("name")
        if name_node is not None:
            return TypeDeclGroup(specs=(TypeSpec(name=_node_text(name_node, source_bytes)),))
    elif target.type == "type_alias_statement":
        left = target.child_by_field_name("left")
        if left is not None:
            # ``type Alias[T] = ...`` keeps its parameters on the left-hand side.
            name = _node_text(left, source_bytes).split("[", 1)[0].strip()
            if name:
                return TypeDeclGroup(specs=(TypeSpec(name=name),))
    return OtherDecl(kind=target.type)


def _syntax_diagnostics(path: Path, root: Node) -> List[Diagnostic]:
    if not root.has_error:
        return []
    diagnostics: List[Diagnostic] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            row, column = node.start_point
            message = f"missing {node.type}" if node.is_missing else "syntax error"
            diagnostics.append(Diagnostic(path=path, line=row + 1, column=column + 1, message=message))
            continue
        if node.has_error:
            stack.extend(reversed(node.children))
    diagnostics.sort(key=lambda item: (item.line, item.column))
    if len(diagnostics) > _MAX_SYNTAX_ERRORS:
        extra = len(diagnostics) - _MAX_SYNTAX_ERRORS
        last = diagnostics[_MAX_SYNTAX_ERRORS - 1]
        diagnostics = diagnostics[:_MAX_SYNTAX_ERRORS]
        diagnostics.append(
            Diagnostic(path=path, line=last.line, column=last.column, message=f"{extra} more syntax errors")
        )
    return diagnostics


__all__ = ["LoadError", "PackageLoader", "PY_LANGUAGE"]
