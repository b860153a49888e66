# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Thread-safe access to the VHDL parser for whole source files."""

import threading
from pathlib import Path

from gb.model.entities import DesignFile
from gb.parser.lexer import LexerError
from gb.parser.parser import ParseError, parse

# ###############
# Public Interface
# ###############

# VHDL source text is defined over ISO 8859-1, so every byte sequence decodes.
SOURCE_ENCODING = "latin-1"


class ParseFailure(Exception):
    """Raised when a source file cannot be read or is not a recognizable VHDL design file.

    Attributes:
        path: The file that failed.
    """

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot parse '{path}': {reason}")
        self.path = path


class SourceParser:
    """Parses VHDL source files, one at a time.

    Construct one and pass it to every consumer.  The lexer and parser keep
    no state between calls; the instance lock only serializes calls, so at
    most one parse runs at a time.  File reading happens outside the lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def parse_file(self, path: Path) -> DesignFile:
        """Read and parse *path*.

        Raises:
            ParseFailure: If the file cannot be read, or on any lexer or parser error.
        """
        try:
            source = path.read_text(encoding=SOURCE_ENCODING)
        except OSError as exc:
            raise ParseFailure(path, str(exc)) from exc

        with self._lock:
            try:
                return parse(source)
            except (LexerError, ParseError) as exc:
                raise ParseFailure(path, str(exc)) from exc

    def components_of(self, path: Path) -> list[str]:
        """Return the names of all components declared in *path*, in declaration order.

        Raises:
            ParseFailure: If the file cannot be read or parsed.
        """
        return self.parse_file(path).component_names()
