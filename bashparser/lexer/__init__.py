"""
bashparser Lexer Package

Implements the lexical scanner for the supported shell subset.

Key Features:
- Words, quoted strings, $NAME / ${NAME} variables and comments
- Pipe, list and redirection operators with one character of lookahead
- Reserved-word reclassification (if/then/else/fi, for/while/do/done, function)
- Source spans (offsets, line, column) on every token
- Lenient recovery on unterminated delimiters, or strict errors on request

Author: xwest
"""

from .tokens import Token, TokenType, SourcePosition, KEYWORDS
from .lexer import Lexer, tokenize, tokenize_file
from .errors import Diagnostic, LexerError, LexerWarning

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "SourcePosition",
    "KEYWORDS",
    "tokenize",
    "tokenize_file",
    "Diagnostic",
    "LexerError",
    "LexerWarning",
]
