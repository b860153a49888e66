# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""gb: a TOML based build tool for VHDL designs using GHDL."""

__version__ = "0.1.0"
