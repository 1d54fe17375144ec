"""
Recursive descent parser for the supported shell subset.

Consumes the complete token list from the lexer with a single-token
lookahead cursor and assembles an immutable syntax tree. Top-level parsing
is lenient (unrecognized leading tokens are skipped and recorded as
warnings); bodies of if/for/while/function are strict and raise on them.

Author: xwest
"""

import logging
from dataclasses import replace
from typing import FrozenSet, List, Optional, Tuple

from ..lexer.lexer import Lexer
from ..lexer.errors import LexerError, LexerWarning
from ..lexer.tokens import Token, TokenType, SourcePosition, REDIRECTION_TYPES
from .ast_nodes import (
    Program, Statement, Expression, Command, Pipeline, Conditional, Loop,
    FunctionDeclaration, VariableAssignment, Redirection, Literal, Variable,
    LOOP_FOR, LOOP_WHILE
)
from .errors import (
    ParseError, ParseWarning, create_missing_token_error,
    create_expected_text_error, create_unexpected_token_error,
    create_invalid_expression_error, create_internal_error, create_nesting_error
)

logger = logging.getLogger(__name__)

# Tokens allowed between a condition (or for-list) and its then/do
HEADER_SEPARATORS = frozenset({TokenType.SEMICOLON, TokenType.NEWLINE, TokenType.COMMENT})

# Reserved words that close a compound statement; never a statement start
BLOCK_CLOSERS = frozenset({
    TokenType.THEN, TokenType.ELSE, TokenType.FI,
    TokenType.DO, TokenType.DONE, TokenType.RBRACE,
})

CLOSER_MESSAGES = {
    TokenType.FI: "Expected 'fi'",
    TokenType.DONE: "Expected 'done'",
    TokenType.RBRACE: "Expected '}'",
}


class Parser:
    """
    Shell syntax builder.

    Owns the lexer and the token cursor for the duration of one ``parse``
    call; nothing is shared between calls.
    """

    def __init__(self, source: str, strict: bool = False):
        """
        Initialize the parser with script text.

        Args:
            source: Script text
            strict: Fail on unterminated quotes or ${ references
        """
        self.source = source
        self.strict = strict
        self.tokens: List[Token] = []
        self.current = 0
        self.warnings: List[ParseWarning] = []
        self.lexer_warnings: List[LexerWarning] = []

    def parse(self) -> Program:
        """
        Tokenize the source and parse it into a Program.

        Returns:
            Program node holding the top-level statements

        Raises:
            ParseError: On malformed input, or wrapping any other fault
        """
        self.tokens = []
        self.current = 0
        self.warnings = []
        self.lexer_warnings = []

        try:
            lexer = Lexer(self.source, strict=self.strict)
            self.tokens = lexer.tokenize()
            self.lexer_warnings = lexer.warnings

            body = self._parse_program_body()
            program = Program(tuple(body), self._span_from(self.tokens[0].position))

        except ParseError:
            raise
        except LexerError as e:
            diagnostic = e.diagnostic
            raise ParseError(
                diagnostic.message,
                diagnostic.position,
                code=diagnostic.code,
                help_text=diagnostic.help_text,
                suggestions=diagnostic.suggestions
            ) from e
        except RecursionError as e:
            raise create_nesting_error(self._current_position()) from e
        except Exception as e:
            logger.debug("Wrapping unexpected fault raised while parsing", exc_info=True)
            raise create_internal_error(e, self._current_position()) from e

        logger.debug("Parsed %d top-level statements (%d tokens skipped)",
                     len(program.body), len(self.warnings))
        return program

    # Statement collection

    def _parse_program_body(self) -> List[Statement]:
        """
        Lenient top-level driver.

        A statement attempt that consumes nothing costs one skipped token, so
        the loop always terminates.
        """
        statements: List[Statement] = []

        while not self._is_at_end():
            if self._match(TokenType.NEWLINE):
                continue

            start = self.current
            statement = self._parse_statement()
            if statement is not None:
                statements.append(statement)
            elif self.current == start:
                self._skip_token()

            self._match_separator()

        return statements

    def _parse_block(
        self,
        terminators: FrozenSet[TokenType],
        closer: TokenType,
        context: str
    ) -> Tuple[Statement, ...]:
        """
        Strict nested-body driver: statements until one of ``terminators``.

        Anything other than a statement, newline or comment raises. A closing
        keyword belonging to an enclosing construct reports ``closer`` as
        missing. The caller consumes the terminator.
        """
        statements: List[Statement] = []

        while not self._is_at_end() and self._peek().kind not in terminators:
            if self._match(TokenType.NEWLINE):
                continue

            token = self._peek()
            statement = self._parse_statement()
            if statement is None:
                if token.kind == TokenType.COMMENT:
                    continue
                if token.kind in BLOCK_CLOSERS:
                    raise create_missing_token_error(closer, CLOSER_MESSAGES[closer], token)
                raise create_unexpected_token_error(token, context)

            statements.append(statement)
            self._match_separator()

        return tuple(statements)

    def _parse_statement(self) -> Optional[Statement]:
        """Parse one statement, or return None when none starts here."""
        token = self._peek()

        if token.kind == TokenType.COMMENT:
            self._advance()
            return None
        if token.kind == TokenType.EOF:
            return None

        if token.kind == TokenType.IF:
            return self._parse_conditional()
        if token.kind in (TokenType.FOR, TokenType.WHILE):
            return self._parse_loop()
        if token.kind == TokenType.FUNCTION:
            return self._parse_function()
        if self._is_variable_assignment():
            return self._parse_variable_assignment()
        if token.kind == TokenType.WORD:
            return self._parse_pipeline()

        return None

    # Compound statements

    def _parse_conditional(self) -> Conditional:
        """Parse ``if cond [args]; then ... [else ...] fi``."""
        start = self._consume(TokenType.IF, "Expected 'if'").position

        condition = self._parse_expression()
        condition_args = self._parse_trailing_words()
        self._skip_header_separators()
        self._consume(TokenType.THEN, "Expected 'then'")

        then_body = self._parse_block(frozenset({TokenType.ELSE, TokenType.FI}), TokenType.FI, "if body")

        else_body = None
        if self._match(TokenType.ELSE):
            else_body = self._parse_block(frozenset({TokenType.FI}), TokenType.FI, "else body")

        self._consume(TokenType.FI, CLOSER_MESSAGES[TokenType.FI])

        return Conditional(
            condition=condition,
            then_body=then_body,
            else_body=else_body,
            condition_args=condition_args,
            position=self._span_from(start)
        )

    def _parse_loop(self) -> Loop:
        """Parse ``for NAME in WORDS; do ... done`` or ``while cond; do ... done``."""
        keyword = self._advance()
        start = keyword.position

        if keyword.kind == TokenType.FOR:
            variable = self._consume(TokenType.WORD, "Expected loop variable").text
            self._consume_word_text("in")
            iterable = self._parse_expression()
            items = (iterable,) + self._parse_trailing_words()
            body = self._parse_loop_body()

            return Loop(
                kind=LOOP_FOR,
                body=body,
                variable=variable,
                iterable=iterable,
                items=items,
                position=self._span_from(start)
            )

        condition = self._parse_expression()
        condition_args = self._parse_trailing_words()
        body = self._parse_loop_body()

        return Loop(
            kind=LOOP_WHILE,
            body=body,
            condition=condition,
            condition_args=condition_args,
            position=self._span_from(start)
        )

    def _parse_loop_body(self) -> Tuple[Statement, ...]:
        self._skip_header_separators()
        self._consume(TokenType.DO, "Expected 'do'")
        body = self._parse_block(frozenset({TokenType.DONE}), TokenType.DONE, "loop body")
        self._consume(TokenType.DONE, CLOSER_MESSAGES[TokenType.DONE])
        return body

    def _parse_function(self) -> FunctionDeclaration:
        """Parse ``function NAME() { ... }``."""
        start = self._consume(TokenType.FUNCTION, "Expected 'function'").position
        name = self._consume(TokenType.WORD, "Expected function name").text

        self._consume(TokenType.LPAREN, "Expected '('")
        self._consume(TokenType.RPAREN, "Expected ')'")
        self._consume(TokenType.LBRACE, "Expected '{'")

        body = self._parse_block(frozenset({TokenType.RBRACE}), TokenType.RBRACE, "function body")

        self._consume(TokenType.RBRACE, CLOSER_MESSAGES[TokenType.RBRACE])

        return FunctionDeclaration(name=name, body=body, position=self._span_from(start))

    def _parse_variable_assignment(self) -> VariableAssignment:
        """Parse ``NAME = value`` (the lexer splits ``=`` into its own WORD)."""
        name_token = self._advance()
        self._consume_word_text("=")
        value = self._parse_expression()

        return VariableAssignment(
            name=name_token.text,
            value=value,
            position=self._span_from(name_token.position)
        )

    # Pipelines and commands

    def _parse_pipeline(self) -> Statement:
        """
        Parse commands joined by ``|``.

        A single command comes back bare, never as a one-command Pipeline.
        """
        commands = [self._parse_command()]

        while self._match(TokenType.PIPE):
            commands.append(self._parse_command())

        if len(commands) == 1:
            return commands[0]

        return Pipeline(tuple(commands), self._span_from(commands[0].position))

    def _parse_command(self) -> Command:
        name_token = self._peek()
        if name_token.kind != TokenType.WORD:
            raise create_missing_token_error(TokenType.WORD, "Expected command name", name_token)
        self._advance()

        args: List[str] = []
        arguments: List[Expression] = []
        redirections: List[Redirection] = []

        while True:
            token = self._peek()
            if token.is_word_like:
                args.append(token.lexeme if token.kind == TokenType.VARIABLE else token.text)
                arguments.append(self._parse_expression())
            elif token.kind in REDIRECTION_TYPES:
                redirections.append(self._parse_redirection())
            else:
                break

        return Command(
            name=name_token.text,
            args=tuple(args),
            arguments=tuple(arguments),
            redirections=tuple(redirections),
            position=self._span_from(name_token.position)
        )

    def _parse_redirection(self) -> Redirection:
        operator = self._advance()

        if not self._peek().is_word_like:
            raise create_missing_token_error(TokenType.WORD, "Expected redirection target", self._peek())
        target = self._parse_expression()

        return Redirection(operator=operator.text, target=target, position=self._span_from(operator.position))

    # Expressions

    def _parse_expression(self) -> Expression:
        token = self._peek()

        if token.kind in (TokenType.WORD, TokenType.QUOTED_STRING):
            self._advance()
            return Literal(token.text, token.kind == TokenType.QUOTED_STRING, token.position)

        if token.kind == TokenType.VARIABLE:
            self._advance()
            return Variable(token.text, token.position)

        raise create_invalid_expression_error(token)

    def _parse_trailing_words(self) -> Tuple[Expression, ...]:
        """Collect the words following a condition or iterable."""
        words = []
        while self._peek().is_word_like:
            words.append(self._parse_expression())
        return tuple(words)

    # Utility methods

    def _is_variable_assignment(self) -> bool:
        """Look ahead for WORD followed by the WORD ``=``."""
        if not self._check(TokenType.WORD) or self.current + 1 >= len(self.tokens):
            return False
        following = self.tokens[self.current + 1]
        return following.kind == TokenType.WORD and following.text == "="

    def _consume_word_text(self, text: str) -> Token:
        """Consume a WORD whose text must equal ``text`` (``in``, ``=``)."""
        token = self._peek()
        if token.kind != TokenType.WORD or token.text != text:
            raise create_expected_text_error(text, token)
        return self._advance()

    def _skip_token(self):
        """Drop one unrecognized top-level token, recording a warning."""
        token = self._advance()
        self.warnings.append(ParseWarning(
            f"Skipped unexpected token {token.lexeme!r}",
            token.position,
            token=token,
            code="P001"
        ))
        logger.debug("Skipped %s at %s", token, token.position)

    def _match_separator(self):
        """Consume one optional statement separator."""
        if not self._match(TokenType.SEMICOLON):
            self._match(TokenType.NEWLINE)

    def _skip_header_separators(self):
        while self._peek().kind in HEADER_SEPARATORS:
            self._advance()

    def _span_from(self, start: SourcePosition) -> SourcePosition:
        """Span from ``start`` to the end of the token now under the cursor."""
        end = max(start.end_offset, self._peek().position.end_offset)
        return replace(start, end_offset=end)

    def _current_position(self) -> Optional[SourcePosition]:
        if self.current < len(self.tokens):
            return self.tokens[self.current].position
        return None

    def _match(self, token_type: TokenType) -> bool:
        """Check if current token matches type and consume if so."""
        if self._check(token_type):
            self._advance()
            return True
        return False

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token matches type without consuming."""
        return self._peek().kind == token_type

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._peek()
        if not self._is_at_end():
            self.current += 1
        return token

    def _is_at_end(self) -> bool:
        return self._peek().kind == TokenType.EOF

    def _peek(self) -> Token:
        """Return current token without consuming."""
        return self.tokens[self.current]

    def _consume(self, token_type: TokenType, message: str) -> Token:
        """Consume token of expected type or raise error."""
        if self._check(token_type):
            return self._advance()

        raise create_missing_token_error(token_type, message, self._peek())


def parse(source: str, strict: bool = False) -> Program:
    """
    Parse a script string into a Program.

    Args:
        source: Script text
        strict: Fail on unterminated quotes or ${ references

    Returns:
        Program AST

    Raises:
        ParseError: If parsing fails
    """
    return Parser(source, strict=strict).parse()


def parse_file(filepath: str, strict: bool = False) -> Program:
    """
    Parse a script file into a Program.

    Raises:
        ParseError: If parsing fails
        OSError: If the file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return parse(source, strict=strict)
