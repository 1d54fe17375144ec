"""
Error handling for the bashparser lexer.

Provides diagnostics with source position information and the keyword
correction helpers shared with the parser.

Author: xwest
"""

from typing import Optional, List
from dataclasses import dataclass

from .tokens import SourcePosition, KEYWORDS


@dataclass
class Diagnostic:
    """Base record for diagnostics (errors, warnings)."""
    message: str
    position: Optional[SourcePosition]
    severity: str  # "error", "warning"
    code: Optional[str] = None
    help_text: Optional[str] = None
    suggestions: Optional[List[str]] = None

    def __str__(self) -> str:
        severity_prefix = self.severity.upper()
        result = f"{severity_prefix}: {self.message}\n"
        if self.position is not None:
            result += f"  --> line {self.position.line}, column {self.position.column}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        if self.suggestions:
            result += "  suggestions:\n"
            for suggestion in self.suggestions:
                result += f"    - {suggestion}\n"

        return result


class LexerError(Exception):
    """
    Exception raised when the lexer runs in strict mode and meets an
    unterminated delimiter.
    """

    def __init__(
        self,
        message: str,
        position: SourcePosition,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.message = message
        self.position = position
        self.diagnostic = Diagnostic(
            message=message,
            position=position,
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )

    def __str__(self) -> str:
        return str(self.diagnostic)


class LexerWarning:
    """
    Represents a lenient recovery performed by the lexer.
    """

    def __init__(
        self,
        message: str,
        position: SourcePosition,
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

    @property
    def code(self) -> Optional[str]:
        return self.diagnostic.code

    def __str__(self) -> str:
        return str(self.diagnostic)


class ErrorRecovery:
    """
    Suggestion helpers for misspelled reserved words.
    """

    @staticmethod
    def suggest_keyword_corrections(invalid_word: str) -> List[str]:
        """Suggest reserved words within edit distance 2 of ``invalid_word``."""
        suggestions = []
        for keyword in KEYWORDS.keys():
            distance = ErrorRecovery._edit_distance(invalid_word.lower(), keyword)
            if 0 < distance <= 2:
                suggestions.append(keyword)

        return sorted(suggestions, key=lambda k: ErrorRecovery._edit_distance(invalid_word.lower(), k))[:3]

    @staticmethod
    def _edit_distance(s1: str, s2: str) -> int:
        """Calculate Levenshtein distance between two strings."""
        if len(s1) < len(s2):
            return ErrorRecovery._edit_distance(s2, s1)

        if len(s2) == 0:
            return len(s1)

        previous_row = list(range(len(s2) + 1))
        for i, c1 in enumerate(s1):
            current_row = [i + 1]
            for j, c2 in enumerate(s2):
                insertions = previous_row[j + 1] + 1
                deletions = current_row[j] + 1
                substitutions = previous_row[j] + (c1 != c2)
                current_row.append(min(insertions, deletions, substitutions))
            previous_row = current_row

        return previous_row[-1]


def create_unterminated_string_error(quote: str, position: SourcePosition) -> LexerError:
    """Create an error for a quoted string that runs to end of input."""
    return LexerError(
        message="Unterminated quoted string",
        position=position,
        code="L002",
        help_text=f"Quoted strings must be closed with a matching {quote} quote.",
        suggestions=[f"Add a closing {quote} quote", "Check for an escaped closing quote"]
    )


def create_unterminated_variable_error(position: SourcePosition) -> LexerError:
    """Create an error for a ${...} reference missing its closing brace."""
    return LexerError(
        message="Unterminated variable reference",
        position=position,
        code="L003",
        help_text="Braced variable references must be closed with '}'.",
        suggestions=["Add a closing '}'"]
    )
