"""
Error handling for the bashparser parser.

ParseError is the single failure type surfaced to callers; it carries a
message, the position of the offending token when known, and a Diagnostic
with help text and suggestions.

Author: xwest
"""

import sys
from typing import Optional, List

from ..lexer.tokens import Token, TokenType, SourcePosition, KEYWORDS
from ..lexer.errors import Diagnostic, ErrorRecovery


class ParseError(Exception):
    """
    Exception raised when the parser meets malformed input.

    ``str(error)`` renders ``ParseError at line L, column C: message`` when
    a position is known, else ``ParseError: message``.
    """

    def __init__(
        self,
        message: str,
        position: Optional[SourcePosition] = None,
        token: Optional[Token] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.message = message
        self.position = position
        self.token = token
        self.diagnostic = Diagnostic(
            message=message,
            position=position,
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )

    @property
    def code(self) -> Optional[str]:
        return self.diagnostic.code

    def format(self) -> str:
        """Multi-line rendering with help text and suggestions."""
        return str(self.diagnostic)

    def __str__(self) -> str:
        if self.position is not None:
            return (f"ParseError at line {self.position.line}, "
                    f"column {self.position.column}: {self.message}")
        return f"ParseError: {self.message}"


class ParseWarning:
    """
    Represents a token the top-level parser skipped without failing.
    """

    def __init__(
        self,
        message: str,
        position: Optional[SourcePosition],
        token: Optional[Token] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        self.diagnostic = Diagnostic(
            message=message,
            position=position,
            severity="warning",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )
        self.token = token

    @property
    def code(self) -> Optional[str]:
        return self.diagnostic.code

    def __str__(self) -> str:
        return str(self.diagnostic)


class SyntaxErrorRecovery:
    """
    Suggestion helpers for syntax errors.
    """

    CLOSING_HINTS = {
        TokenType.THEN: ["Add 'then' after the if condition"],
        TokenType.FI: ["Add 'fi' to close the if statement"],
        TokenType.DO: ["Add 'do' after the loop header"],
        TokenType.DONE: ["Add 'done' to close the loop"],
        TokenType.LPAREN: ["Add '()' after the function name"],
        TokenType.RPAREN: ["Add a closing parenthesis ')'"],
        TokenType.LBRACE: ["Add an opening brace '{' to start the function body"],
        TokenType.RBRACE: ["Add a closing brace '}' to end the function body"],
    }

    @staticmethod
    def suggest_missing_token(expected: TokenType, found: Optional[Token]) -> List[str]:
        """Suggest what token might be missing, or what a misspelling meant."""
        suggestions = list(SyntaxErrorRecovery.CLOSING_HINTS.get(expected, []))

        if found is not None and found.kind == TokenType.WORD and expected in KEYWORDS.values():
            for keyword in ErrorRecovery.suggest_keyword_corrections(found.text):
                if KEYWORDS[keyword] == expected:
                    suggestions.insert(0, f"Did you mean '{keyword}'?")

        return suggestions


# Helper functions for creating common parser errors

def create_missing_token_error(expected: TokenType, message: str, found: Token) -> ParseError:
    """Create an error for an expected token that is absent."""
    code = "P010" if found.kind == TokenType.EOF else "P002"
    found_str = "end of input" if found.kind == TokenType.EOF else found.kind.name

    return ParseError(
        message=message,
        position=found.position,
        token=found,
        code=code,
        help_text=f"The parser expected {expected.name} at this position, but found {found_str}.",
        suggestions=SyntaxErrorRecovery.suggest_missing_token(expected, found)
    )


def create_expected_text_error(expected: str, found: Token) -> ParseError:
    """Create an error for a WORD slot that requires specific text (``in``, ``=``)."""
    code = "P010" if found.kind == TokenType.EOF else "P002"

    return ParseError(
        message=f"Expected '{expected}'",
        position=found.position,
        token=found,
        code=code,
        help_text=f"The parser expected the word '{expected}' here, but found {found.lexeme!r}.",
        suggestions=[f"Insert '{expected}'"]
    )


def create_unexpected_token_error(found: Token, context: str) -> ParseError:
    """Create an error for a token that cannot start a statement in ``context``."""
    return ParseError(
        message=f"Unexpected token {found.lexeme!r} in {context}",
        position=found.position,
        token=found,
        code="P001",
        help_text=f"{found.kind.name} cannot start a statement here.",
        suggestions=["Check for a misplaced operator or a missing command name"]
    )


def create_invalid_expression_error(found: Token) -> ParseError:
    """Create an error for a missing word, string or variable."""
    code = "P010" if found.kind == TokenType.EOF else "P005"

    return ParseError(
        message="Expected expression",
        position=found.position,
        token=found,
        code=code,
        help_text="A word, quoted string or variable reference is required here.",
    )


def create_nesting_error(position: Optional[SourcePosition]) -> ParseError:
    """Create an error for compound statements nested past the recursion limit."""
    return ParseError(
        message="Statements nested too deeply",
        position=position,
        code="P014",
        help_text=(f"Nesting of if/for/while/function is bounded by the interpreter "
                   f"recursion limit ({sys.getrecursionlimit()})."),
        suggestions=["Split the script into functions", "Reduce the nesting depth"]
    )


def create_internal_error(fault: Exception, position: Optional[SourcePosition]) -> ParseError:
    """Wrap an unexpected fault raised while parsing."""
    return ParseError(
        message=f"Unexpected error: {fault}",
        position=position,
        code="P013",
        help_text=f"{type(fault).__name__} raised during parsing.",
    )
