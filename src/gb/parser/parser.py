# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Structural parser for VHDL design files.

Builds a :class:`~gb.model.entities.DesignFile` from the token stream: the
context clauses and library units at the top level, and every component
declaration inside each unit.  Statement and expression syntax inside a unit
is not analyzed; the parser only tracks enough nesting to find where each
library unit ends.
"""

from gb.model.entities import ComponentDecl, DesignFile, DesignUnit, UnitKind
from gb.parser.lexer import Token, TokenType, tokenize

# ###############
# Public Interface
# ###############


class ParseError(Exception):
    """Raised when the parser encounters a syntactically invalid construct.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.line = line
        self.column = column


def parse(source: str) -> DesignFile:
    """Parse VHDL source text into a structural DesignFile model.

    Args:
        source: The full text of a VHDL design file.

    Returns:
        A DesignFile listing the library units and their component declarations.

    Raises:
        LexerError: If the source contains invalid characters or unterminated literals.
        ParseError: If the source is not a recognizable sequence of design units.
    """
    tokens = tokenize(source)
    return _Parser(tokens).parse()


# ################
# Implementation
# ################

# Words that may follow ``end`` when closing a construct nested in a library unit.
_NESTED_END_KEYWORDS: frozenset[str] = frozenset(
    {
        "block",
        "case",
        "component",
        "for",
        "generate",
        "if",
        "loop",
        "postponed",
        "process",
        "protected",
        "record",
        "units",
    }
)

_UNIT_KEYWORDS: dict[UnitKind, tuple[str, ...]] = {
    UnitKind.ENTITY: ("entity",),
    UnitKind.ARCHITECTURE: ("architecture",),
    UnitKind.PACKAGE: ("package",),
    UnitKind.PACKAGE_BODY: ("package", "body"),
    UnitKind.CONFIGURATION: ("configuration",),
    UnitKind.CONTEXT: ("context",),
}


class _Parser:
    """Structural parser for VHDL token streams."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def parse(self) -> DesignFile:
        """Parse the full token stream and return a DesignFile."""
        result = DesignFile()
        libraries: list[str] = []
        uses: list[str] = []
        contexts: list[str] = []
        context_start: Token | None = None

        while not self._at_end():
            tok = self._current()
            if self._check_keyword("library"):
                context_start = context_start or tok
                self._advance()
                libraries.extend(self._parse_name_list())
                self._expect(TokenType.SEMICOLON)
            elif self._check_keyword("use"):
                context_start = context_start or tok
                self._advance()
                uses.extend(self._parse_name_list())
                self._expect(TokenType.SEMICOLON)
            elif self._check_keyword("context") and not self._is_context_declaration():
                context_start = context_start or tok
                self._advance()
                contexts.extend(self._parse_name_list())
                self._expect(TokenType.SEMICOLON)
            elif self._check_keyword("entity", "architecture", "package", "configuration", "context"):
                unit = self._parse_library_unit()
                unit.libraries, unit.uses, unit.contexts = libraries, uses, contexts
                result.units.append(unit)
                libraries, uses, contexts = [], [], []
                context_start = None
            else:
                raise ParseError(
                    f"Expected a design unit or context clause, got {tok.value!r}",
                    tok.line,
                    tok.column,
                )

        if context_start is not None:
            raise ParseError(
                "Context clause is not followed by a design unit",
                context_start.line,
                context_start.column,
            )
        return result

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        """Return the current (un-consumed) token."""
        return self._tokens[self._pos]

    def _previous(self) -> Token | None:
        """Return the most recently consumed token, if any."""
        return self._tokens[self._pos - 1] if self._pos > 0 else None

    def _at_end(self) -> bool:
        """Return True if the current token is the EOF token."""
        return self._current().type == TokenType.EOF

    def _advance(self) -> Token:
        """Consume and return the current token, stopping at EOF."""
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return tok

    def _check(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _check_keyword(self, *words: str) -> bool:
        tok = self._current()
        return tok.type == TokenType.KEYWORD and tok.value in words

    def _expect(self, *types: TokenType) -> Token:
        """Consume the current token if it matches any of the given types.

        Raises ParseError if the current token does not match.
        """
        tok = self._current()
        if tok.type not in types:
            expected = ", ".join(repr(t.value) for t in types)
            raise ParseError(f"Expected {expected}, got {tok.value!r}", tok.line, tok.column)
        return self._advance()

    def _expect_keyword(self, word: str) -> Token:
        tok = self._current()
        if not self._check_keyword(word):
            raise ParseError(f"Expected '{word}', got {tok.value!r}", tok.line, tok.column)
        return self._advance()

    def _expect_identifier(self, what: str) -> Token:
        tok = self._current()
        if tok.type != TokenType.IDENTIFIER:
            raise ParseError(f"Expected {what}, got {tok.value!r}", tok.line, tok.column)
        return self._advance()

    def _skip_past_semicolon(self) -> None:
        """Consume tokens up to and including the next ';'."""
        while not self._check(TokenType.SEMICOLON):
            if self._at_end():
                tok = self._current()
                raise ParseError("Expected ';', got end of file", tok.line, tok.column)
            self._advance()
        self._advance()

    # ------------------------------------------------------------------
    # Context clauses
    # ------------------------------------------------------------------

    def _parse_name_list(self) -> list[str]:
        """Parse ``name {, name}`` where each name may be a selected name."""
        names = [self._parse_selected_name()]
        while self._check(TokenType.COMMA):
            self._advance()
            names.append(self._parse_selected_name())
        return names

    def _parse_selected_name(self) -> str:
        """Parse a selected name such as ``ieee.std_logic_1164.all``."""
        parts = [self._expect_identifier("a name").value]
        while self._check(TokenType.DOT):
            self._advance()
            tok = self._current()
            if tok.type in (TokenType.IDENTIFIER, TokenType.CHARACTER) or self._check_keyword("all"):
                parts.append(self._advance().value)
            elif tok.type == TokenType.STRING:
                parts.append(f'"{self._advance().value}"')
            else:
                raise ParseError(f"Expected a suffix after '.', got {tok.value!r}", tok.line, tok.column)
        return ".".join(parts)

    def _is_context_declaration(self) -> bool:
        """Return True if the ``context`` keyword at the cursor starts ``context <id> is``."""
        ahead = self._tokens[self._pos + 1 : self._pos + 3]
        return (
            len(ahead) == 2
            and ahead[0].type == TokenType.IDENTIFIER
            and ahead[1].type == TokenType.KEYWORD
            and ahead[1].value == "is"
        )

    # ------------------------------------------------------------------
    # Library units
    # ------------------------------------------------------------------

    def _parse_library_unit(self) -> DesignUnit:
        """Parse one library unit starting at its leading keyword."""
        start = self._advance()
        primary_unit: str | None = None

        if start.value == "package" and self._check_keyword("body"):
            self._advance()
            kind = UnitKind.PACKAGE_BODY
        else:
            kind = UnitKind(start.value)

        name = self._expect_identifier(f"{kind.value} name").value
        if kind in (UnitKind.ARCHITECTURE, UnitKind.CONFIGURATION):
            self._expect_keyword("of")
            primary_unit = self._expect_identifier("entity name").value
        self._expect_keyword("is")

        unit = DesignUnit(kind=kind, name=name, primary_unit=primary_unit, line=start.line)
        if kind == UnitKind.PACKAGE and self._check_keyword("new"):
            # Package instantiation: ``package p is new lib.generic_pkg generic map (...);``
            self._skip_past_semicolon()
            return unit

        unit.components = self._parse_unit_body(unit, start)
        return unit

    def _parse_unit_body(self, unit: DesignUnit, start: Token) -> list[ComponentDecl]:
        """Scan the inside of a library unit up to its closing ``end``.

        Collects component declarations on the way.  Subprogram bodies are
        tracked because they may close with a bare ``end;``.  Generate
        statements are tracked too: each of their alternatives may close
        with ``end [alternative_label];`` before the ``end generate``.
        """
        components: list[ComponentDecl] = []
        subprogram_depth = 0
        generate_depth = 0
        # Set between ``elsif``/``else`` and the ``then``/``generate``/``;`` that follows.
        in_alternative = False

        while True:
            if self._at_end():
                raise ParseError(
                    f"Missing 'end' for {unit.kind.value} '{unit.name}'",
                    start.line,
                    start.column,
                )

            if self._check_keyword("end"):
                in_alternative = False
                self._advance()
                if self._check_keyword("generate"):
                    generate_depth = max(generate_depth - 1, 0)
                    self._skip_past_semicolon()
                elif self._check_keyword(*_NESTED_END_KEYWORDS):
                    self._skip_past_semicolon()
                elif subprogram_depth > 0:
                    subprogram_depth -= 1
                    self._skip_past_semicolon()
                elif generate_depth > 0:
                    # ``end [alternative_label];`` of a generate alternative
                    self._skip_past_semicolon()
                else:
                    self._parse_unit_end(unit)
                    return components
            elif self._check_keyword("component") and not self._after_colon():
                self._advance()
                tok = self._expect_identifier("component name")
                components.append(ComponentDecl(name=tok.value, line=tok.line))
            elif self._check_keyword("generate"):
                # ``elsif ... generate`` and ``else generate`` continue an open if-generate.
                if not in_alternative:
                    generate_depth += 1
                in_alternative = False
                self._advance()
            elif self._check_keyword("function", "procedure") and self._starts_subprogram_body():
                subprogram_depth += 1
                self._advance()
            else:
                if self._check_keyword("elsif", "else"):
                    in_alternative = True
                elif self._check_keyword("then") or self._check(TokenType.SEMICOLON):
                    in_alternative = False
                self._advance()

    def _parse_unit_end(self, unit: DesignUnit) -> None:
        """Parse ``[unit keywords] [label] ;`` following the unit's closing ``end``."""
        keywords = _UNIT_KEYWORDS[unit.kind]
        if self._check_keyword(keywords[0]):
            for word in keywords:
                self._expect_keyword(word)

        if self._check(TokenType.IDENTIFIER):
            label = self._advance()
            if not _same_identifier(label.value, unit.name):
                raise ParseError(
                    f"End label {label.value!r} does not match {unit.kind.value} '{unit.name}'",
                    label.line,
                    label.column,
                )
        self._expect(TokenType.SEMICOLON)

    def _after_colon(self) -> bool:
        """Return True if the previous token is ':' (an instantiation or attribute entity class)."""
        previous = self._previous()
        return previous is not None and previous.type == TokenType.COLON

    def _starts_subprogram_body(self) -> bool:
        """Return True if the ``function``/``procedure`` at the cursor begins a subprogram body.

        A body reaches ``is`` (not followed by ``new``) before any ``;`` outside
        parentheses.  Declarations, instantiations and attribute entity classes
        do not.
        """
        if self._after_colon():
            return False
        depth = 0
        for index in range(self._pos + 1, len(self._tokens)):
            tok = self._tokens[index]
            if tok.type == TokenType.LPAREN:
                depth += 1
            elif tok.type == TokenType.RPAREN:
                depth -= 1
            elif depth > 0:
                continue
            elif tok.type in (TokenType.SEMICOLON, TokenType.EOF):
                return False
            elif tok.type == TokenType.KEYWORD and tok.value == "is":
                following = self._tokens[index + 1]
                return not (following.type == TokenType.KEYWORD and following.value == "new")
        return False


def _same_identifier(left: str, right: str) -> bool:
    """Compare identifiers; basic identifiers are case-insensitive, extended ones are not."""
    if left.startswith("\\") or right.startswith("\\"):
        return left == right
    return left.lower() == right.lower()
