"""Tests for typestringer.emitter."""

from __future__ import annotations

import pytest

from tests._fixtures.package_builder import RecordingSink
from typestringer.config import GeneratorConfig
from typestringer.emitter import EmitError, emit
from typestringer.models import TypeName


class FailingSink(RecordingSink):
    """Sink whose writes start failing after a number of successful calls."""

    def __init__(self, successful_writes: int, error: Exception | None = None) -> None:
        super().__init__()
        self.remaining = successful_writes
        self.error = error or OSError("disk full")
        self.closed = False

    def write(self, text: str) -> int:
        if self.remaining == 0:
            raise self.error
        self.remaining -= 1
        return super().write(text)

    def close(self) -> None:
        self.closed = True
        super().close()


def _names(module: str, *names: str) -> list[TypeName]:
    return [TypeName(name=name, module=module) for name in names]


def test_emit_writes_every_section_in_order() -> None:
    sink = RecordingSink()
    config = GeneratorConfig(
        patterns=("one",),
        stub_format="{},{}\n",
        header="# the header\n",
        preamble="import enum",
    )

    emit(sink, "one", _names("types", "Int", "String"), config)

    assert sink.history == [
        "# the header\n"
        "# package one\n"
        "\n"
        "from .types import Int\n"
        "from .types import String\n"
        "\n"
        "import enum\n"
        "\n"
        "Int,Int\n"
        "String,String\n"
    ]


def test_emit_default_stub_returns_type_name() -> None:
    sink = RecordingSink()

    emit(sink, "pkg", _names("colors", "Color"), GeneratorConfig(patterns=("pkg",)))

    assert sink.history == [
        "# package pkg\n\nfrom .colors import Color\n\nColor.__str__ = lambda self: \"Color\"\n"
    ]


def test_emit_imports_package_init_types_from_the_package() -> None:
    sink = RecordingSink()
    type_names = [*_names("", "Base"), *_names("colors", "Red"), *_names("", "Base")]

    emit(sink, "pkg", type_names, GeneratorConfig(patterns=("pkg",), stub_format="{}={}\n"))

    assert sink.history == [
        "# package pkg\n\nfrom . import Base\nfrom .colors import Red\n\nBase=Base\nRed=Red\nBase=Base\n"
    ]


def test_emit_uses_custom_import_format() -> None:
    sink = RecordingSink()
    config = GeneratorConfig(
        patterns=("pkg",), stub_format="{}={}\n", import_format="from pkg.{0} import {1}  # noqa\n"
    )

    emit(sink, "pkg", _names("colors", "Red"), config)

    assert sink.history == ["# package pkg\n\nfrom pkg.colors import Red  # noqa\n\nRed=Red\n"]


def test_emit_can_skip_package_clause_and_close() -> None:
    sink = RecordingSink()
    config = GeneratorConfig(patterns=("pkg",), stub_format="{0}:{1}\n", no_package=True, no_close=True)

    emit(sink, "pkg", _names("types", "A"), config)

    assert sink.history == []
    assert sink.getvalue() == "A:A\n"


def test_emit_with_no_names_still_writes_the_artifact() -> None:
    sink = RecordingSink()

    emit(sink, "pkg", [], GeneratorConfig(patterns=("pkg",), package_format="# {}\n"))

    assert sink.history == ["# pkg\n"]


def test_emit_stops_at_first_failed_write() -> None:
    sink = FailingSink(successful_writes=2)
    config = GeneratorConfig(patterns=("pkg",), stub_format="{},{}\n", no_package=True)

    with pytest.raises(EmitError, match="disk full") as excinfo:
        emit(sink, "pkg", _names("types", "A", "B", "C"), config)

    assert isinstance(excinfo.value.__cause__, OSError)
    assert sink.getvalue() == "A,A\nB,B\n"
    assert sink.closed is False


def test_emit_wraps_any_sink_failure() -> None:
    sink = FailingSink(successful_writes=0, error=RuntimeError("quota exceeded"))

    with pytest.raises(EmitError, match="writing package pkg failed: quota exceeded") as excinfo:
        emit(sink, "pkg", _names("types", "A"), GeneratorConfig(patterns=("pkg",)))

    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert sink.closed is False
