# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Structural model of parsed VHDL design files."""

from gb.model.entities import ComponentDecl, DesignFile, DesignUnit, UnitKind

__all__ = [
    "ComponentDecl",
    "DesignFile",
    "DesignUnit",
    "UnitKind",
]
