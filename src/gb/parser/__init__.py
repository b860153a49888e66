# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexer and structural parser for VHDL design files."""

from gb.parser.lexer import LexerError, Token, TokenType, tokenize
from gb.parser.parser import ParseError, parse
from gb.parser.source import ParseFailure, SourceParser

__all__ = [
    "LexerError",
    "ParseError",
    "ParseFailure",
    "SourceParser",
    "Token",
    "TokenType",
    "parse",
    "tokenize",
]
