"""
Token definitions for the bashparser lexer.

This module defines every token type the shell scanner can emit:
- Words, quoted strings and variable references
- Operators (pipes, redirections, list separators)
- Grouping punctuation
- Reserved words (if/then/else/fi, for/while/do/done, function)

Author: xwest
"""

import string
from enum import Enum, auto
from dataclasses import dataclass


class TokenType(Enum):
    """
    Enumeration of all token types in the shell grammar.

    Organized by category for clarity and maintainability.
    """

    # ========================================================================
    # Special Tokens
    # ========================================================================
    EOF = auto()                    # End of input
    NEWLINE = auto()                # \n (statement separator)
    COMMENT = auto()                # # to end of line

    # ========================================================================
    # Words and Literals
    # ========================================================================
    WORD = auto()                   # ls, -la, /home/user, file.txt
    QUOTED_STRING = auto()          # "hello world", 'single'
    VARIABLE = auto()               # $HOME, ${NAME}

    # ========================================================================
    # Keywords
    # ========================================================================
    IF = auto()                     # if
    THEN = auto()                   # then
    ELSE = auto()                   # else
    FI = auto()                     # fi
    FOR = auto()                    # for
    WHILE = auto()                  # while
    DO = auto()                     # do
    DONE = auto()                   # done
    FUNCTION = auto()               # function

    # ========================================================================
    # Operators
    # ========================================================================
    PIPE = auto()                   # |
    OR = auto()                     # ||
    AMPERSAND = auto()              # &
    AND = auto()                    # &&
    REDIRECT_OUT = auto()           # >
    REDIRECT_APPEND = auto()        # >>
    REDIRECT_IN = auto()            # <
    SEMICOLON = auto()              # ;

    # ========================================================================
    # Punctuation
    # ========================================================================
    LPAREN = auto()                 # (
    RPAREN = auto()                 # )
    LBRACE = auto()                 # {
    RBRACE = auto()                 # }


@dataclass(frozen=True)
class SourcePosition:
    """
    Span of a token or node in the source text.

    Offsets are Python string indices into the input, counted in code
    points rather than encoded bytes (in "echo é x" the "x" starts at
    offset 7, byte 8 in UTF-8); end is exclusive. Line and column are
    1-based and describe where the span starts.
    """
    start_offset: int
    end_offset: int
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"

    def __repr__(self) -> str:
        return (f"SourcePosition({self.start_offset}, {self.end_offset}, "
                f"{self.line}, {self.column})")


@dataclass(frozen=True)
class Token:
    """
    A lexical token of a shell script.

    ``text`` is the token's value (quotes, ``$`` and ``#`` stripped) while
    ``lexeme`` is the exact slice of source the token was scanned from.
    """
    kind: TokenType
    text: str
    lexeme: str
    position: SourcePosition

    def __str__(self) -> str:
        if self.text != self.lexeme:
            return f"{self.kind.name}({self.lexeme!r} -> {self.text!r})"
        return f"{self.kind.name}({self.lexeme!r})"

    def __repr__(self) -> str:
        return (f"Token({self.kind.name}, {self.text!r}, "
                f"{self.lexeme!r}, {self.position!r})")

    @property
    def is_keyword(self) -> bool:
        """Check if this token is a reserved word."""
        return self.kind in KEYWORD_TYPES

    @property
    def is_word_like(self) -> bool:
        """Check if this token can stand as a command argument."""
        return self.kind in (TokenType.WORD, TokenType.QUOTED_STRING, TokenType.VARIABLE)


# Reserved words, matched against the exact text of a WORD-shaped scan.
# There is no context sensitivity: `if` is always IF, even as an argument.
KEYWORDS = {
    "if": TokenType.IF,
    "then": TokenType.THEN,
    "else": TokenType.ELSE,
    "fi": TokenType.FI,
    "for": TokenType.FOR,
    "while": TokenType.WHILE,
    "do": TokenType.DO,
    "done": TokenType.DONE,
    "function": TokenType.FUNCTION,
}

KEYWORD_TYPES = frozenset(KEYWORDS.values())

# Single-character operators and punctuation
OPERATORS = {
    "|": TokenType.PIPE,
    "&": TokenType.AMPERSAND,
    ">": TokenType.REDIRECT_OUT,
    "<": TokenType.REDIRECT_IN,
    ";": TokenType.SEMICOLON,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
}

# Two-character extensions, tried before the one-character form
DOUBLE_OPERATORS = {
    "||": TokenType.OR,
    "&&": TokenType.AND,
    ">>": TokenType.REDIRECT_APPEND,
}

REDIRECTION_TYPES = frozenset({
    TokenType.REDIRECT_OUT,
    TokenType.REDIRECT_APPEND,
    TokenType.REDIRECT_IN,
})

# Characters that may appear in a WORD or a bare $NAME
WORD_CHARS = frozenset(string.ascii_letters + string.digits + "_./-")

# Whitespace skipped between tokens (newline is significant)
BLANK_CHARS = frozenset(" \t")

QUOTE_CHARS = frozenset("\"'")
