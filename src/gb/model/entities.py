# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Design units and declarations recognized in a VHDL design file."""

from __future__ import annotations

import enum

from pydantic import BaseModel
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class UnitKind(enum.Enum):
    """The kinds of library unit a design file can contain."""

    ENTITY = "entity"
    ARCHITECTURE = "architecture"
    PACKAGE = "package"
    PACKAGE_BODY = "package body"
    CONFIGURATION = "configuration"
    CONTEXT = "context"


class ComponentDecl(BaseModel):
    """A ``component`` declaration: a reusable design unit referenced by name."""

    name: str
    line: int


class DesignUnit(BaseModel):
    """A library unit together with the context clause that precedes it.

    Attributes:
        kind: The kind of library unit.
        name: The unit's identifier as written in the source.
        primary_unit: For architectures and configurations, the entity they
            belong to.
        libraries: Names from ``library`` clauses in the unit's context.
        uses: Selected names from ``use`` clauses in the unit's context.
        contexts: Selected names from ``context`` references.
        components: Component declarations found inside the unit.
        line: 1-based line of the unit's leading keyword.
    """

    kind: UnitKind
    name: str
    primary_unit: str | None = None
    libraries: list[str] = _Field(default_factory=list)
    uses: list[str] = _Field(default_factory=list)
    contexts: list[str] = _Field(default_factory=list)
    components: list[ComponentDecl] = _Field(default_factory=list)
    line: int = 1


class DesignFile(BaseModel):
    """All library units of one design file, in source order."""

    units: list[DesignUnit] = _Field(default_factory=list)

    def component_names(self) -> list[str]:
        """Return the names of all declared components in declaration order."""
        return [component.name for unit in self.units for component in unit.components]
