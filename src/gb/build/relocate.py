# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Relocation of GHDL analysis output into the build directory.

``ghdl -a`` writes one object file per analyzed source and the ``work``
library catalog into the directory it runs in.  Later stages run inside the
build directory, so the objects are moved there and every local file
reference in the catalog is re-rooted to stay valid from the new location.
"""

from pathlib import Path

from gb.errors import RelocationError

# ###############
# Public Interface
# ###############

BUILD_DIR = Path("build") / "root"
CATALOG_NAME = "work-obj93.cf"
OBJECT_SUFFIX = ".o"

# Marks a catalog line that records a source file relative to the analysis directory.
CATALOG_FILE_MARKER = 'file . "'

# BUILD_DIR is two levels below the analysis directory; keep in lockstep.
CATALOG_PATH_PREFIX = "../../"


def rewrite_catalog(text: str) -> str:
    """Re-root the local file references of a library catalog.

    Every line starting with ``file . "`` gets :data:`CATALOG_PATH_PREFIX`
    inserted right after the marker.  All other lines, and all line endings,
    are returned unchanged.

    Example::

        file . "foo.vhd" "..." "..."  ->  file . "../../foo.vhd" "..." "..."
    """
    # Only "\n" ends a line; latin-1 paths may contain other line-break characters.
    lines = text.split("\n")
    rewritten = [
        CATALOG_FILE_MARKER + CATALOG_PATH_PREFIX + line[len(CATALOG_FILE_MARKER) :]
        if line.startswith(CATALOG_FILE_MARKER)
        else line
        for line in lines
    ]
    return "\n".join(rewritten)


def object_name(source: Path | str) -> str:
    """Return the object file name GHDL generates when analyzing *source*."""
    return Path(source).stem + OBJECT_SUFFIX


def relocate(build_dir: Path, analyzed_files: list[Path], *, work_dir: Path) -> None:
    """Move analysis output from *work_dir* into *build_dir*.

    Objects are relocated first, then the catalog.  Every expected object is
    checked before anything is moved, so a missing object leaves both
    directories untouched.  Each object is moved once, even when several
    sources share its base name.

    Args:
        build_dir: Destination directory; created if needed.
        analyzed_files: The sources passed to the analyze stage.
        work_dir: The directory GHDL ran in.

    Raises:
        RelocationError: If an expected object or the catalog is missing, or
            a filesystem operation fails.  The message names the path.
    """
    # Sources sharing a base name produce a single object.
    objects = list(dict.fromkeys(work_dir / object_name(source) for source in analyzed_files))
    for obj in objects:
        if not obj.is_file():
            raise RelocationError(f"expected object file '{obj}' was not generated by the analyze stage")

    catalog = work_dir / CATALOG_NAME
    if not catalog.is_file():
        raise RelocationError(f"library catalog '{catalog}' was not generated by the analyze stage")

    try:
        build_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise RelocationError(f"cannot create build directory '{build_dir}'") from exc

    for obj in objects:
        _move(obj, build_dir / obj.name)

    _relocate_catalog(catalog, build_dir / CATALOG_NAME)


# ################
# Implementation
# ################


def _move(source: Path, destination: Path) -> None:
    try:
        source.replace(destination)
    except OSError as exc:
        raise RelocationError(f"cannot move '{source}' to '{destination}'") from exc


def _relocate_catalog(catalog: Path, destination: Path) -> None:
    """Write the re-rooted catalog to *destination* and remove the original."""
    try:
        with catalog.open(encoding="latin-1", newline="") as handle:
            text = handle.read()
    except OSError as exc:
        raise RelocationError(f"cannot read library catalog '{catalog}'") from exc

    try:
        with destination.open("w", encoding="latin-1", newline="") as handle:
            handle.write(rewrite_catalog(text))
    except OSError as exc:
        raise RelocationError(f"cannot write library catalog '{destination}'") from exc

    try:
        catalog.unlink()
    except OSError as exc:
        raise RelocationError(f"cannot remove library catalog '{catalog}'") from exc
