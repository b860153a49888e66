# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for VHDL design files.

Converts raw source text into a sequence of tokens for the structural parser.
Reserved words are case-insensitive and are reported with a lower-cased value;
identifiers keep the spelling used in the source.
"""

import enum
from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class TokenType(enum.Enum):
    """All token types produced by the VHDL lexer."""

    # Words
    IDENTIFIER = "IDENTIFIER"
    KEYWORD = "KEYWORD"

    # Literals
    NUMBER = "NUMBER"
    CHARACTER = "CHARACTER"
    STRING = "STRING"
    BIT_STRING = "BIT_STRING"

    # Delimiters the parser cares about
    SEMICOLON = ";"
    COLON = ":"
    COMMA = ","
    DOT = "."
    LPAREN = "("
    RPAREN = ")"
    TICK = "'"

    # Every other simple or compound delimiter
    DELIMITER = "DELIMITER"

    # End of file
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A lexical token with its source location.

    Attributes:
        type: The kind of token.
        value: The token text. Lower-cased for keywords, unquoted for
            CHARACTER and STRING tokens, verbatim otherwise.
        line: 1-based line number where the token starts.
        column: 1-based column number where the token starts.
    """

    type: TokenType
    value: str
    line: int
    column: int


class LexerError(Exception):
    """Raised when the scanner encounters an invalid character or unterminated literal.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.line = line
        self.column = column


RESERVED_WORDS: frozenset[str] = frozenset(
    {
        "abs", "access", "after", "alias", "all", "and", "architecture", "array",
        "assert", "attribute", "begin", "block", "body", "buffer", "bus", "case",
        "component", "configuration", "constant", "context", "disconnect", "downto",
        "else", "elsif", "end", "entity", "exit", "file", "for", "force", "function",
        "generate", "generic", "group", "guarded", "if", "impure", "in", "inertial",
        "inout", "is", "label", "library", "linkage", "literal", "loop", "map", "mod",
        "nand", "new", "next", "nor", "not", "null", "of", "on", "open", "or",
        "others", "out", "package", "port", "postponed", "procedure", "process",
        "protected", "pure", "range", "record", "register", "reject", "release",
        "rem", "report", "return", "rol", "ror", "select", "severity", "shared",
        "signal", "sla", "sll", "sra", "srl", "subtype", "then", "to", "transport",
        "type", "unaffected", "units", "until", "use", "variable", "wait", "when",
        "while", "with", "xnor", "xor",
    }
)  # fmt: skip


def tokenize(source: str) -> list[Token]:
    """Tokenize VHDL source text into a sequence of tokens.

    Returns a list of tokens. The final token is always an EOF token.
    Comments and whitespace are consumed and not included in the output.

    Args:
        source: The full text of a VHDL design file.

    Returns:
        A list of Token objects ending with a single EOF token.

    Raises:
        LexerError: On unexpected characters, unterminated literals or
            extended identifiers, or unterminated block comments.
    """
    return _Lexer(source).tokenize()


# ################
# Implementation
# ################

_WHITESPACE = " \t\r\n\f\v\xa0"

# Longest match first.
_COMPOUND_DELIMITERS: tuple[str, ...] = (
    "?/=", "?<=", "?>=",
    "=>", "**", ":=", "/=", ">=", "<=", "<>", "??", "?=", "?<", "?>", "<<", ">>",
)  # fmt: skip

_SIMPLE_DELIMITERS: dict[str, TokenType] = {
    ";": TokenType.SEMICOLON,
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "&": TokenType.DELIMITER,
    "*": TokenType.DELIMITER,
    "+": TokenType.DELIMITER,
    "-": TokenType.DELIMITER,
    "/": TokenType.DELIMITER,
    "<": TokenType.DELIMITER,
    "=": TokenType.DELIMITER,
    ">": TokenType.DELIMITER,
    "|": TokenType.DELIMITER,
    "!": TokenType.DELIMITER,
    "[": TokenType.DELIMITER,
    "]": TokenType.DELIMITER,
    "?": TokenType.DELIMITER,
    "@": TokenType.DELIMITER,
    "^": TokenType.DELIMITER,
}

_BIT_STRING_BASES: frozenset[str] = frozenset({"b", "o", "x", "d", "ub", "uo", "ux", "sb", "so", "sx"})

# A tick after one of these starts an attribute name, not a character literal.
_TICK_PREDECESSORS: frozenset[TokenType] = frozenset(
    {TokenType.IDENTIFIER, TokenType.RPAREN, TokenType.CHARACTER, TokenType.STRING}
)


class _Lexer:
    """Internal scanner state machine."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._column = 1
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Run the scanner and return all tokens including the terminal EOF."""
        while self._pos < len(self._source):
            self._skip_whitespace_and_comments()
            if self._pos >= len(self._source):
                break
            self._scan_token()
        self._tokens.append(Token(TokenType.EOF, "", self._line, self._column))
        return self._tokens

    # ------------------------------------------------------------------
    # Low-level character access helpers
    # ------------------------------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position, or '' at end of input."""
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _peek(self, offset: int = 1) -> str:
        """Return the character *offset* positions ahead, or '' past the end of input."""
        if self._pos + offset < len(self._source):
            return self._source[self._pos + offset]
        return ""

    def _advance(self) -> str:
        """Consume the current character, update position tracking, and return it."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    def _emit(self, token_type: TokenType, value: str, line: int, col: int) -> None:
        self._tokens.append(Token(token_type, value, line, col))

    # ------------------------------------------------------------------
    # Whitespace and comment skipping
    # ------------------------------------------------------------------

    def _skip_whitespace_and_comments(self) -> None:
        """Skip all whitespace and comment runs at the current position."""
        while self._pos < len(self._source):
            ch = self._current()
            if ch in _WHITESPACE:
                self._advance()
            elif ch == "-" and self._peek() == "-":
                self._skip_line_comment()
            elif ch == "/" and self._peek() == "*":
                self._skip_block_comment()
            else:
                break

    def _skip_line_comment(self) -> None:
        """Consume from '--' through end-of-line (exclusive of the newline itself)."""
        while self._pos < len(self._source) and self._current() != "\n":
            self._advance()

    def _skip_block_comment(self) -> None:
        """Consume from '/*' through the matching '*/' (VHDL-2008 delimited comment)."""
        start_line = self._line
        start_col = self._column
        self._advance()  # /
        self._advance()  # *
        while self._pos < len(self._source):
            if self._current() == "*" and self._peek() == "/":
                self._advance()  # *
                self._advance()  # /
                return
            self._advance()
        raise LexerError("Unterminated block comment", start_line, start_col)

    # ------------------------------------------------------------------
    # Token scanning dispatcher
    # ------------------------------------------------------------------

    def _scan_token(self) -> None:
        """Dispatch to the appropriate handler based on the current character."""
        ch = self._current()
        line = self._line
        col = self._column

        if ch.isalpha():
            self._scan_word(line, col)
        elif ch.isdigit():
            self._scan_number(line, col)
        elif ch == "\\":
            self._scan_extended_identifier(line, col)
        elif ch == '"':
            self._emit(TokenType.STRING, self._scan_quoted(line, col), line, col)
        elif ch == "'":
            self._scan_tick_or_character(line, col)
        else:
            self._scan_delimiter(line, col)

    def _scan_delimiter(self, line: int, col: int) -> None:
        """Scan a compound or simple delimiter."""
        for delimiter in _COMPOUND_DELIMITERS:
            if self._source.startswith(delimiter, self._pos):
                for _ in delimiter:
                    self._advance()
                self._emit(TokenType.DELIMITER, delimiter, line, col)
                return
        ch = self._current()
        if ch not in _SIMPLE_DELIMITERS:
            raise LexerError(f"Unexpected character: {ch!r}", line, col)
        self._advance()
        self._emit(_SIMPLE_DELIMITERS[ch], ch, line, col)

    # ------------------------------------------------------------------
    # Word scanners
    # ------------------------------------------------------------------

    def _scan_word(self, line: int, col: int) -> None:
        """Scan a basic identifier, a reserved word, or a bit string literal prefix."""
        start = self._pos
        while self._pos < len(self._source) and (self._current().isalnum() or self._current() == "_"):
            self._advance()
        value = self._source[start : self._pos]
        lowered = value.lower()

        if lowered in _BIT_STRING_BASES and self._current() == '"':
            digits = self._scan_quoted(line, col)
            self._emit(TokenType.BIT_STRING, f'{value}"{digits}"', line, col)
        elif lowered in RESERVED_WORDS:
            self._emit(TokenType.KEYWORD, lowered, line, col)
        else:
            self._emit(TokenType.IDENTIFIER, value, line, col)

    def _scan_extended_identifier(self, line: int, col: int) -> None:
        """Scan a backslash-delimited extended identifier; a doubled backslash is literal."""
        start = self._pos
        self._advance()  # opening backslash
        while self._pos < len(self._source):
            ch = self._current()
            if ch == "\n":
                break
            self._advance()
            if ch == "\\":
                if self._current() == "\\":
                    self._advance()
                    continue
                self._emit(TokenType.IDENTIFIER, self._source[start : self._pos], line, col)
                return
        raise LexerError("Unterminated extended identifier", line, col)

    # ------------------------------------------------------------------
    # Literal scanners
    # ------------------------------------------------------------------

    def _scan_quoted(self, line: int, col: int) -> str:
        """Scan a double-quoted literal where a doubled quote stands for one quote."""
        self._advance()  # opening "
        chars: list[str] = []
        while self._pos < len(self._source):
            ch = self._current()
            if ch == "\n":
                break
            self._advance()
            if ch == '"':
                if self._current() != '"':
                    return "".join(chars)
                self._advance()
            chars.append(ch)
        raise LexerError("Unterminated string literal", line, col)

    def _scan_tick_or_character(self, line: int, col: int) -> None:
        """Scan either a character literal ('x') or an attribute tick."""
        previous = self._tokens[-1].type if self._tokens else None
        if self._peek(2) == "'" and previous not in _TICK_PREDECESSORS:
            self._advance()  # opening '
            value = self._advance()
            self._advance()  # closing '
            self._emit(TokenType.CHARACTER, value, line, col)
            return
        self._advance()
        self._emit(TokenType.TICK, "'", line, col)

    def _scan_number(self, line: int, col: int) -> None:
        """Scan a decimal or based abstract literal.

        Based literals take the form ``base#digits[.digits]#[exponent]``;
        underscores are allowed between digits.
        """
        start = self._pos
        self._scan_digits()

        if self._current() == "#":
            self._advance()
            while self._pos < len(self._source) and (self._current().isalnum() or self._current() in "_."):
                self._advance()
            if self._current() != "#":
                raise LexerError("Unterminated based literal", line, col)
            self._advance()
        elif self._current() == "." and self._peek().isdigit():
            self._advance()
            self._scan_digits()

        if self._current() in ("e", "E") and (
            self._peek().isdigit() or (self._peek() in "+-" and self._peek(2).isdigit())
        ):
            self._advance()
            if self._current() in "+-":
                self._advance()
            self._scan_digits()

        self._emit(TokenType.NUMBER, self._source[start : self._pos], line, col)

    def _scan_digits(self) -> None:
        while self._pos < len(self._source) and (self._current().isdigit() or self._current() == "_"):
            self._advance()
