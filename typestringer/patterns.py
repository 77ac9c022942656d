"""Include/ignore name filtering."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Sequence, Tuple, Union

from .config import ConfigError

PatternLike = Union[str, re.Pattern]


def compile_patterns(patterns: Iterable[PatternLike] | None) -> Tuple[re.Pattern[str], ...]:
    """Compile ``patterns`` in order, keeping already compiled ones as they are."""
    if patterns is None:
        return ()
    compiled = []
    for pattern in patterns:
        if isinstance(pattern, re.Pattern):
            compiled.append(pattern)
            continue
        try:
            compiled.append(re.compile(pattern))
        except re.error as exc:
            raise ConfigError(f"Invalid pattern {pattern!r}: {exc}") from exc
    return tuple(compiled)


def included(
    name: str,
    includes: Sequence[re.Pattern[str]],
    ignores: Sequence[re.Pattern[str]],
    logger: Optional[logging.Logger] = None,
) -> bool:
    """Return True when ``name`` passes the filters.

    An ignore match always excludes the name. Otherwise an empty include list
    accepts everything, and a non-empty one requires at least one match.
    Patterns are searched, so they only anchor when written with ``^``/``$``.
    """
    for pattern in ignores:
        if pattern.search(name):
            _narrate(logger, "ignoring: %s", name)
            return False
    if includes and not any(pattern.search(name) for pattern in includes):
        _narrate(logger, "not included: %s", name)
        return False
    _narrate(logger, "including: %s", name)
    return True


def _narrate(logger: Optional[logging.Logger], message: str, name: str) -> None:
    if logger is not None:
        logger.info(message, name)


__all__ = ["compile_patterns", "included"]
