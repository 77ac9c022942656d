"""Run configuration and project settings loading (.typestringer.yml)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from string import Formatter
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, TextIO, Tuple

import yaml

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .sinks import Sink, SinkFactory

CONFIG_FILENAME = ".typestringer.yml"

# Stub written for each type. Both operands are the type name.
FORMAT_RECEIVER = '{0}.__str__ = lambda self: "{1}"\n'
# Package clause written before the preamble. The operand is the package name.
FORMAT_PACKAGE = "# package {}\n\n"
# Import written after the package clause for each type. The operands are the
# declaring module, empty for __init__.py, and the type name.
FORMAT_IMPORT = "from .{0} import {1}\n"
# Name of the generated file inside the package directory.
FORMAT_FILENAME = "{}_strings.py"
DEFAULT_HEADER = "# Code generated by typestringer. DO NOT EDIT.\n"


class ConfigError(RuntimeError):
    """Raised when run settings or the configuration file are invalid."""


@dataclass(frozen=True)
class GeneratorConfig:
    """Immutable settings for one generation run."""

    patterns: Tuple[str, ...]
    includes: Tuple[re.Pattern[str], ...] = ()
    ignores: Tuple[re.Pattern[str], ...] = ()
    stub_format: str = FORMAT_RECEIVER
    header: Optional[str] = None
    preamble: Optional[str] = None
    package_format: str = FORMAT_PACKAGE
    import_format: str = FORMAT_IMPORT
    filename_format: str = FORMAT_FILENAME
    no_package: bool = False
    no_close: bool = False
    sink_factory: Optional["SinkFactory"] = None
    output: Optional["Sink"] = None
    diagnostic_output: Optional[TextIO] = None

    def __post_init__(self) -> None:
        from .patterns import compile_patterns

        if isinstance(self.patterns, str):
            raise ConfigError("patterns must be a sequence of strings, not a single string")
        object.__setattr__(self, "patterns", tuple(self.patterns))
        object.__setattr__(self, "includes", compile_patterns(self.includes))
        object.__setattr__(self, "ignores", compile_patterns(self.ignores))
        _check_stub_format(self.stub_format)
        _check_single_operand("package_format", self.package_format)
        _check_import_format(self.import_format)
        _check_single_operand("filename_format", self.filename_format)


def _check_stub_format(template: str) -> None:
    try:
        slots = [name for _, name, _, _ in Formatter().parse(template) if name is not None]
    except ValueError as exc:
        raise ConfigError(f"Invalid stub format {template!r}: {exc}") from exc
    if len(slots) != 2 or any(name not in ("", "0", "1") for name in slots):
        raise ConfigError(
            f"Stub format {template!r} must contain exactly two replacement fields "
            "({} or {0}/{1}), both receiving the type name"
        )
    try:
        template.format("T", "T")
    except (IndexError, KeyError, ValueError) as exc:
        raise ConfigError(f"Invalid stub format {template!r}: {exc}") from exc


def _check_import_format(template: str) -> None:
    try:
        template.format("module", "Name")
    except (IndexError, KeyError, ValueError) as exc:
        raise ConfigError(f"Invalid import_format {template!r}: {exc}") from exc


def _check_single_operand(label: str, template: str) -> None:
    try:
        template.format("name")
    except (IndexError, KeyError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} {template!r}: {exc}") from exc


@dataclass
class FileConfig:
    """Settings read from .typestringer.yml; ``None`` means not set."""

    root: Path
    includes: List[str] = field(default_factory=list)
    ignores: List[str] = field(default_factory=list)
    stub_format: Optional[str] = None
    header: Optional[str] = None
    preamble: Optional[str] = None
    package_format: Optional[str] = None
    import_format: Optional[str] = None
    filename_format: Optional[str] = None
    no_package: Optional[bool] = None

    def options(self) -> Dict[str, Any]:
        """Return the set values as ``GeneratorConfig`` keyword arguments."""
        skipped = {"root", "includes", "ignores"}
        return {
            item.name: getattr(self, item.name)
            for item in fields(self)
            if item.name not in skipped and getattr(self, item.name) is not None
        }


def load_config(config_path: Path) -> FileConfig:
    """Load project settings from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return FileConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    return FileConfig(
        root=root,
        includes=_as_str_list(data.get("include")),
        ignores=_as_str_list(data.get("ignore")),
        stub_format=_as_str(data.get("format")),
        header=_as_str(data.get("header")),
        preamble=_as_str(data.get("preamble")),
        package_format=_as_str(data.get("package_format")),
        import_format=_as_str(data.get("import_format")),
        filename_format=_as_str(data.get("filename_format")),
        no_package=_as_bool(data.get("no_package")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_HEADER",
    "FORMAT_FILENAME",
    "FORMAT_IMPORT",
    "FORMAT_PACKAGE",
    "FORMAT_RECEIVER",
    "ConfigError",
    "FileConfig",
    "GeneratorConfig",
    "load_config",
]
