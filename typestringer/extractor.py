"""Collect the filtered type names of a loaded package."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence, Tuple

from .models import LoadedPackage, TypeDeclGroup, TypeName
from .patterns import included


class NoSourceFilesError(RuntimeError):
    """Raised when a resolved package contains no Python source files."""


def extract(
    package: LoadedPackage,
    includes: Sequence[re.Pattern[str]],
    ignores: Sequence[re.Pattern[str]],
    logger: Optional[logging.Logger] = None,
) -> Tuple[str, List[TypeName]]:
    """Return the package name and its accepted types in source order.

    Files are visited in load order and declarations in source order. The
    package name comes from the last visited file; files of one package are
    expected to agree on it.
    """
    if not package.files:
        raise NoSourceFilesError(f"no Python files in package {package.name} ({package.directory})")

    type_names: List[TypeName] = []
    package_name = package.name
    for source in package.files:
        package_name = source.package
        for declaration in source.declarations:
            if not isinstance(declaration, TypeDeclGroup):
                continue
            for spec in declaration.specs:
                if included(spec.name, includes, ignores, logger):
                    type_names.append(TypeName(name=spec.name, module=source.module))
    return package_name, type_names


__all__ = ["NoSourceFilesError", "extract"]
