"""
Shell lexer - turns script text into a flat token list

Single forward cursor with one character of lookahead, which is all the
two-character operators (||, &&, >>) need. Any byte that matches nothing
else comes out as a one-character WORD so the scan always moves forward.

xwest
"""

import logging
from typing import List

from .tokens import (
    Token, TokenType, SourcePosition, KEYWORDS, OPERATORS, DOUBLE_OPERATORS,
    WORD_CHARS, BLANK_CHARS, QUOTE_CHARS
)
from .errors import (
    LexerError, LexerWarning, create_unterminated_string_error,
    create_unterminated_variable_error
)

logger = logging.getLogger(__name__)


class Lexer:
    """
    Shell lexical analyzer.

    Converts script text into a list of tokens, each annotated with its
    source span. Unterminated quotes and ``${`` references are consumed to
    end of input; in strict mode they raise ``LexerError`` instead.
    """

    def __init__(self, source: str, strict: bool = False):
        """
        Initialize the lexer with source text.

        Args:
            source: Script text
            strict: Raise on unterminated delimiters instead of recovering
        """
        self.source = source
        self.strict = strict
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []
        self.warnings: List[LexerWarning] = []

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source.

        Returns:
            List of tokens, always ending with an EOF token

        Raises:
            LexerError: In strict mode, on an unterminated delimiter
        """
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens = []
        self.warnings = []

        while self.pos < len(self.source):
            self._skip_blanks()

            if self.pos >= len(self.source):
                break

            self.tokens.append(self._next_token())

        eof_position = SourcePosition(self.pos, self.pos, self.line, self.column)
        self.tokens.append(Token(TokenType.EOF, "", "", eof_position))

        logger.debug("Tokenized %d characters into %d tokens", len(self.source), len(self.tokens))
        return self.tokens

    def _next_token(self) -> Token:
        """Scan one token starting at the current position."""
        start_pos = self.pos
        start_line = self.line
        start_column = self.column

        current_char = self.source[self.pos]

        if current_char == '#':
            return self._tokenize_comment(start_pos, start_line, start_column)

        if current_char == '\n':
            self._advance()
            return self._make_token(TokenType.NEWLINE, '\n', start_pos, start_line, start_column)

        if current_char in OPERATORS:
            pair = current_char + self._peek()
            if pair in DOUBLE_OPERATORS:
                self._advance_by(2)
                return self._make_token(DOUBLE_OPERATORS[pair], pair, start_pos, start_line, start_column)
            self._advance()
            return self._make_token(OPERATORS[current_char], current_char, start_pos, start_line, start_column)

        if current_char in QUOTE_CHARS:
            return self._tokenize_quoted_string(start_pos, start_line, start_column)

        if current_char == '$':
            return self._tokenize_variable(start_pos, start_line, start_column)

        return self._tokenize_word_or_keyword(start_pos, start_line, start_column)

    def _tokenize_comment(self, offset: int, line: int, column: int) -> Token:
        """Tokenize a comment; the value excludes '#' and the newline."""
        self._advance()  # Skip '#'
        text_start = self.pos

        while self.pos < len(self.source) and self.source[self.pos] != '\n':
            self._advance()

        return self._make_token(TokenType.COMMENT, self.source[text_start:self.pos], offset, line, column)

    def _tokenize_quoted_string(self, offset: int, line: int, column: int) -> Token:
        """
        Tokenize a single- or double-quoted string.

        Both quote styles treat a backslash as passing the next character
        through literally.
        """
        quote = self.source[self.pos]
        self._advance()  # Skip opening quote

        value_parts = []

        while self.pos < len(self.source) and self.source[self.pos] != quote:
            if self.source[self.pos] == '\\':
                self._advance()
                if self.pos < len(self.source):
                    value_parts.append(self.source[self.pos])
                    self._advance()
            else:
                value_parts.append(self.source[self.pos])
                self._advance()

        if self.pos < len(self.source):
            self._advance()  # Skip closing quote
        else:
            self._recover(create_unterminated_string_error(
                quote, SourcePosition(offset, self.pos, line, column)
            ))

        return self._make_token(TokenType.QUOTED_STRING, ''.join(value_parts), offset, line, column)

    def _tokenize_variable(self, offset: int, line: int, column: int) -> Token:
        """Tokenize $NAME or ${NAME}; the value is the bare name."""
        self._advance()  # Skip '$'

        if self._current() == '{':
            self._advance()
            name_start = self.pos
            while self.pos < len(self.source) and self.source[self.pos] != '}':
                self._advance()
            name = self.source[name_start:self.pos]

            if self.pos < len(self.source):
                self._advance()  # Skip '}'
            else:
                self._recover(create_unterminated_variable_error(
                    SourcePosition(offset, self.pos, line, column)
                ))
        else:
            name_start = self.pos
            while self.pos < len(self.source) and self.source[self.pos] in WORD_CHARS:
                self._advance()
            name = self.source[name_start:self.pos]

        return self._make_token(TokenType.VARIABLE, name, offset, line, column)

    def _tokenize_word_or_keyword(self, offset: int, line: int, column: int) -> Token:
        """Tokenize a word, reclassifying reserved words by exact match."""
        if self.source[self.pos] not in WORD_CHARS:
            # Unknown character: emit it alone so the scan keeps moving
            self._advance()
            return self._make_token(TokenType.WORD, self.source[offset:self.pos], offset, line, column)

        while self.pos < len(self.source) and self.source[self.pos] in WORD_CHARS:
            self._advance()

        lexeme = self.source[offset:self.pos]
        token_type = KEYWORDS.get(lexeme, TokenType.WORD)
        return self._make_token(token_type, lexeme, offset, line, column)

    def _recover(self, error: LexerError):
        """Raise ``error`` in strict mode, otherwise record it as a warning."""
        if self.strict:
            raise error

        diagnostic = error.diagnostic
        self.warnings.append(LexerWarning(
            diagnostic.message,
            diagnostic.position,
            code=diagnostic.code,
            help_text=diagnostic.help_text,
            suggestions=diagnostic.suggestions
        ))
        logger.debug("%s at %s; consumed to end of input", diagnostic.message, diagnostic.position)

    def _make_token(self, token_type: TokenType, text: str, offset: int, line: int, column: int) -> Token:
        """Build a token spanning from ``offset`` to the current position."""
        position = SourcePosition(offset, self.pos, line, column)
        return Token(token_type, text, self.source[offset:self.pos], position)

    def _skip_blanks(self):
        """Skip spaces and tabs (newlines are tokens)."""
        while self.pos < len(self.source) and self.source[self.pos] in BLANK_CHARS:
            self._advance()

    def _current(self) -> str:
        if self.pos < len(self.source):
            return self.source[self.pos]
        return ''

    def _advance(self):
        """Advance position by one character, updating line/column."""
        if self.pos < len(self.source):
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _advance_by(self, count: int):
        """Advance position by multiple characters."""
        for _ in range(count):
            self._advance()

    def _peek(self, offset: int = 1) -> str:
        """Peek at character ahead without advancing."""
        peek_pos = self.pos + offset
        if peek_pos < len(self.source):
            return self.source[peek_pos]
        return ''

    def has_warnings(self) -> bool:
        """Check if the lexer recovered from any unterminated delimiter."""
        return len(self.warnings) > 0


def tokenize(source: str, strict: bool = False) -> List[Token]:
    """
    Convenience function to tokenize a script string.

    Args:
        source: Script text
        strict: Raise on unterminated delimiters

    Returns:
        List of tokens ending with EOF

    Raises:
        LexerError: In strict mode, on an unterminated delimiter
    """
    return Lexer(source, strict=strict).tokenize()


def tokenize_file(filepath: str, strict: bool = False) -> List[Token]:
    """
    Convenience function to tokenize a script file.

    Raises:
        LexerError: In strict mode, on an unterminated delimiter
        OSError: If the file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return tokenize(source, strict=strict)
