# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Discovery of the source files a design depends on.

A component ``N`` declared in ``dir/x.vhd`` is expected, by convention, to be
implemented in the sibling file ``dir/N.vhd``.  Starting from a root file the
resolver follows these references transitively.  References whose file does
not exist are dropped, and files that cannot be parsed are treated as having
no dependencies, so one malformed file does not hide the rest of the tree.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from gb.parser.source import ParseFailure, SourceParser

# ###############
# Public Interface
# ###############

SOURCE_SUFFIX = ".vhd"


def resolve(
    root: Path,
    parser: SourceParser,
    *,
    on_failure: Callable[[ParseFailure], None] | None = None,
) -> set[Path]:
    """Return the set of source files reachable from *root*.

    The result contains *root* itself and every existing sibling file reached
    through component declarations.  Cyclic references terminate: each path
    is parsed at most once.

    Args:
        root: The file to start from.
        parser: The shared source parser.
        on_failure: Called with each :class:`ParseFailure`; the failing file
            is kept in the result with no dependencies.

    Returns:
        An unordered set of paths, spelled relative to *root*'s directory.
    """
    direct: dict[Path, list[Path]] = {}
    pending: list[Path] = [root]

    while pending:
        path = pending.pop()
        if path in direct:
            continue

        try:
            components = parser.components_of(path)
        except ParseFailure as exc:
            if on_failure is not None:
                on_failure(exc)
            components = []

        candidates = [_component_path(path, name) for name in components]
        existing = [candidate for candidate in candidates if candidate.exists()]
        direct[path] = existing
        pending.extend(candidate for candidate in existing if candidate not in direct)

    result: set[Path] = set(direct)
    for dependencies in direct.values():
        result.update(dependencies)
    return result


def resolve_all(
    roots: Iterable[Path],
    parser: SourceParser,
    *,
    on_failure: Callable[[ParseFailure], None] | None = None,
) -> set[Path]:
    """Return the union of :func:`resolve` over several root files."""
    result: set[Path] = set()
    for root in roots:
        result |= resolve(root, parser, on_failure=on_failure)
    return result


# ################
# Implementation
# ################


def _component_path(source: Path, component: str) -> Path:
    """Return the sibling file expected to implement *component*."""
    return source.parent / f"{component}{SOURCE_SUFFIX}"
