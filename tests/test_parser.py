"""
Test suite for the bashparser parser.

Tests cover:
- Commands, pipelines and assignments
- if/else, for/while loops and function declarations
- Redirections
- Lenient top-level recovery and strict nested bodies
- Error positions, codes and source spans

Author: xwest
"""

import unittest
from unittest import mock
import sys
import os
import tempfile

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from bashparser.parser import (
    Parser, ParseError, parse, parse_file,
    Program, Command, Pipeline, Conditional, Loop, FunctionDeclaration,
    VariableAssignment, Literal, Variable, ASTNodeType, LOOP_FOR, LOOP_WHILE
)
from bashparser.lexer import TokenType


class TestCommandParsing(unittest.TestCase):
    """Test cases for simple commands and pipelines."""

    def _parse_single(self, source: str):
        program = parse(source)
        self.assertEqual(len(program.body), 1, f"expected one statement in {source!r}")
        return program.body[0]

    def test_single_command(self):
        """Test a bare command name."""
        stmt = self._parse_single("ls")

        self.assertIsInstance(stmt, Command)
        self.assertEqual(stmt.name, "ls")
        self.assertEqual(stmt.args, ())

    def test_any_word_is_a_command(self):
        """Test a lone word always parses as a command of that name."""
        for word in ["ls", "pwd", "make", "a.out", "./run.sh", "x-y_z"]:
            with self.subTest(word=word):
                stmt = self._parse_single(word)
                self.assertEqual(stmt.node_type, ASTNodeType.COMMAND)
                self.assertEqual(stmt.name, word)

    def test_command_with_arguments(self):
        """Test word arguments in order."""
        stmt = self._parse_single("ls -la /tmp")

        self.assertEqual(stmt.args, ("-la", "/tmp"))
        self.assertEqual(len(stmt.arguments), 2)
        self.assertIsInstance(stmt.arguments[0], Literal)

    def test_quoted_argument(self):
        """Test quotes are stripped from argument text."""
        stmt = self._parse_single('echo "hello world"')

        self.assertEqual(stmt.name, "echo")
        self.assertEqual(stmt.args, ("hello world",))
        self.assertTrue(stmt.arguments[0].quoted)

    def test_variable_argument(self):
        """Test variables keep their raw text in args and become Variable nodes."""
        stmt = self._parse_single("echo $HOME ${USER}")

        self.assertEqual(stmt.args, ("$HOME", "${USER}"))
        self.assertIsInstance(stmt.arguments[0], Variable)
        self.assertEqual(stmt.arguments[0].name, "HOME")
        self.assertEqual(stmt.arguments[1].name, "USER")

    def test_pipeline(self):
        """Test commands joined by '|' in source order."""
        stmt = self._parse_single("ls | grep test | wc -l")

        self.assertIsInstance(stmt, Pipeline)
        self.assertEqual([c.name for c in stmt.commands], ["ls", "grep", "wc"])
        self.assertEqual(stmt.commands[1].args, ("test",))

    def test_single_command_is_not_a_pipeline(self):
        """Test a lone command is never wrapped in a Pipeline."""
        stmt = self._parse_single("cat file")

        self.assertNotIsInstance(stmt, Pipeline)

    def test_pipeline_missing_command(self):
        """Test a dangling '|' fails."""
        with self.assertRaises(ParseError) as ctx:
            parse("ls |")

        self.assertEqual(ctx.exception.message, "Expected command name")
        self.assertEqual(ctx.exception.code, "P010")

    def test_output_redirection(self):
        """Test '>' attaches to the command."""
        stmt = self._parse_single("cat file > out.txt")

        self.assertEqual(stmt.args, ("file",))
        self.assertEqual(len(stmt.redirections), 1)
        self.assertEqual(stmt.redirections[0].operator, ">")
        self.assertEqual(stmt.redirections[0].target.value, "out.txt")

    def test_multiple_redirections(self):
        """Test input and append redirections together."""
        stmt = self._parse_single("sort < in.txt >> out.txt")

        self.assertEqual([r.operator for r in stmt.redirections], ["<", ">>"])
        self.assertEqual(stmt.args, ())

    def test_redirection_missing_target(self):
        """Test a redirection operator needs a target."""
        with self.assertRaises(ParseError) as ctx:
            parse("cat >")

        self.assertEqual(ctx.exception.message, "Expected redirection target")

    def test_multiple_statements(self):
        """Test ';' and newline separators."""
        program = parse("echo hello; ls -la\npwd")

        self.assertEqual([s.name for s in program.body], ["echo", "ls", "pwd"])

    def test_comments_are_discarded(self):
        """Test comments produce no statements."""
        program = parse("# header\necho a\n\n# middle\nls # trailing\n")

        self.assertEqual(len(program.body), 2)
        self.assertEqual([s.name for s in program.body], ["echo", "ls"])

    def test_empty_script(self):
        """Test empty and comment-only scripts."""
        self.assertEqual(parse("").body, ())
        self.assertEqual(parse("\n\n# nothing\n").body, ())


class TestAssignmentParsing(unittest.TestCase):
    """Test cases for variable assignments."""

    def test_simple_assignment(self):
        """Test NAME=value."""
        stmt = parse("name=john").body[0]

        self.assertIsInstance(stmt, VariableAssignment)
        self.assertEqual(stmt.name, "name")
        self.assertEqual(stmt.value.value, "john")
        self.assertFalse(stmt.value.quoted)

    def test_quoted_assignment(self):
        """Test a quoted value."""
        stmt = parse('greeting="hello there"').body[0]

        self.assertEqual(stmt.value.value, "hello there")
        self.assertTrue(stmt.value.quoted)

    def test_variable_assignment_value(self):
        """Test a variable reference as the value."""
        stmt = parse("copy=$original").body[0]

        self.assertIsInstance(stmt.value, Variable)
        self.assertEqual(stmt.value.name, "original")

    def test_spaced_assignment(self):
        """Test blanks around '=' still form an assignment."""
        stmt = parse("x = y").body[0]

        self.assertIsInstance(stmt, VariableAssignment)
        self.assertEqual(stmt.name, "x")

    def test_assignment_missing_value(self):
        """Test 'NAME=' with nothing after it fails."""
        with self.assertRaises(ParseError) as ctx:
            parse("x=")

        self.assertEqual(ctx.exception.message, "Expected expression")


class TestConditionalParsing(unittest.TestCase):
    """Test cases for if/then/else/fi."""

    def test_if_with_newlines(self):
        """Test an if statement laid out on separate lines."""
        stmt = parse("if test -f f\nthen\n  echo found\nfi").body[0]

        self.assertIsInstance(stmt, Conditional)
        self.assertEqual(stmt.condition.value, "test")
        self.assertEqual([a.value for a in stmt.condition_args], ["-f", "f"])
        self.assertEqual(len(stmt.then_body), 1)
        self.assertEqual(stmt.then_body[0].args, ("found",))
        self.assertIsNone(stmt.else_body)

    def test_if_else_with_semicolons(self):
        """Test an if/else statement on one line."""
        stmt = parse("if true; then echo a; else echo b; fi").body[0]

        self.assertEqual(stmt.condition.value, "true")
        self.assertEqual(stmt.condition_args, ())
        self.assertEqual(stmt.then_body[0].args, ("a",))
        self.assertEqual(len(stmt.else_body), 1)
        self.assertEqual(stmt.else_body[0].args, ("b",))

    def test_empty_else_is_not_absent(self):
        """Test 'else' with no statements gives an empty body, not None."""
        stmt = parse("if true; then echo a; else fi").body[0]

        self.assertEqual(stmt.else_body, ())

    def test_nested_if(self):
        """Test an if inside another if's body."""
        source = "if a; then\n  if b; then\n    echo both\n  fi\nfi"
        stmt = parse(source).body[0]

        inner = stmt.then_body[0]
        self.assertIsInstance(inner, Conditional)
        self.assertEqual(inner.condition.value, "b")

    def test_if_without_then(self):
        """Test the error position points at the offending token."""
        with self.assertRaises(ParseError) as ctx:
            parse("if without fi")

        error = ctx.exception
        self.assertEqual(error.message, "Expected 'then'")
        self.assertEqual(error.code, "P002")
        self.assertIsNotNone(error.position)
        self.assertEqual(error.position.line, 1)
        self.assertEqual(error.position.column, 12)
        self.assertEqual(str(error), "ParseError at line 1, column 12: Expected 'then'")

    def test_if_without_fi(self):
        """Test an unterminated if reports end of input."""
        with self.assertRaises(ParseError) as ctx:
            parse("if true; then echo a")

        self.assertEqual(ctx.exception.message, "Expected 'fi'")
        self.assertEqual(ctx.exception.code, "P010")

    def test_comment_before_then(self):
        """Test a comment between the condition and 'then' is skipped."""
        stmt = parse("if ready # wait for it\nthen echo go; fi").body[0]

        self.assertEqual(stmt.condition.value, "ready")
        self.assertEqual(stmt.condition_args, ())
        self.assertEqual(stmt.then_body[0].args, ("go",))

    def test_misspelled_then_suggestion(self):
        """Test a close misspelling of 'then' is pointed out."""
        with self.assertRaises(ParseError) as ctx:
            parse("if true; thne echo a; fi")

        self.assertIn("Did you mean 'then'?", ctx.exception.diagnostic.suggestions)

    def test_unexpected_token_in_body(self):
        """Test nested bodies do not skip unknown tokens."""
        with self.assertRaises(ParseError) as ctx:
            parse("if true; then\n  | ls\nfi")

        self.assertEqual(ctx.exception.message, "Unexpected token '|' in if body")
        self.assertEqual(ctx.exception.code, "P001")
        self.assertEqual(ctx.exception.position.line, 2)


class TestLoopParsing(unittest.TestCase):
    """Test cases for for/while loops."""

    def test_for_loop(self):
        """Test a for loop over one word."""
        stmt = parse("for item in list\ndo\n  echo $item\ndone").body[0]

        self.assertIsInstance(stmt, Loop)
        self.assertEqual(stmt.kind, LOOP_FOR)
        self.assertEqual(stmt.variable, "item")
        self.assertEqual(stmt.iterable.value, "list")
        self.assertIsNone(stmt.condition)
        self.assertEqual(len(stmt.body), 1)
        self.assertEqual(stmt.body[0].args, ("$item",))

    def test_for_loop_multiple_items(self):
        """Test every word after 'in' is kept, starting with the iterable."""
        stmt = parse("for env in dev staging prod; do deploy $env; done").body[0]

        self.assertEqual([i.value for i in stmt.items], ["dev", "staging", "prod"])
        self.assertIs(stmt.items[0], stmt.iterable)

    def test_for_loop_requires_in(self):
        """Test the word after the loop variable must be 'in'."""
        with self.assertRaises(ParseError) as ctx:
            parse("for x of a b; do echo; done")

        self.assertEqual(ctx.exception.message, "Expected 'in'")
        self.assertEqual(ctx.exception.position.column, 7)

    def test_for_loop_missing_variable(self):
        """Test 'for' must be followed by a word."""
        with self.assertRaises(ParseError) as ctx:
            parse("for ; do echo; done")

        self.assertEqual(ctx.exception.message, "Expected loop variable")

    def test_while_loop(self):
        """Test a while loop."""
        stmt = parse("while true\ndo\n  echo loop\ndone").body[0]

        self.assertEqual(stmt.kind, LOOP_WHILE)
        self.assertEqual(stmt.condition.value, "true")
        self.assertIsNone(stmt.variable)
        self.assertIsNone(stmt.iterable)
        self.assertEqual(stmt.body[0].name, "echo")

    def test_while_condition_args(self):
        """Test words after a while condition."""
        stmt = parse("while test -f lock; do sleep 1; done").body[0]

        self.assertEqual([a.value for a in stmt.condition_args], ["-f", "lock"])

    def test_loop_missing_done(self):
        """Test an unterminated loop fails."""
        with self.assertRaises(ParseError) as ctx:
            parse("while true; do echo")

        self.assertEqual(ctx.exception.message, "Expected 'done'")

    def test_done_as_argument_is_a_keyword(self):
        """Test 'done' ends a loop body even where it looks like an argument."""
        stmt = parse("for f in a; do echo done; done").body[0]

        self.assertEqual(stmt.body[0].args, ())

    def test_nested_if_missing_fi(self):
        """Test an if closed by its loop's 'done' reports the missing 'fi'."""
        with self.assertRaises(ParseError) as ctx:
            parse("for x in a; do\n if y; then echo z\ndone")

        error = ctx.exception
        self.assertEqual(error.message, "Expected 'fi'")
        self.assertEqual(error.code, "P002")
        self.assertEqual(error.token.kind, TokenType.DONE)
        self.assertEqual(str(error), "ParseError at line 3, column 1: Expected 'fi'")

    def test_loop_body_rejects_operators(self):
        """Test a stray operator inside a loop body fails."""
        with self.assertRaises(ParseError) as ctx:
            parse("for f in a; do\n  ls && pwd\ndone")

        self.assertIn("loop body", ctx.exception.message)


class TestFunctionParsing(unittest.TestCase):
    """Test cases for function declarations."""

    def test_function_declaration(self):
        """Test a function with one command."""
        stmt = parse('function greet() {\n  echo "Hello $1"\n}').body[0]

        self.assertIsInstance(stmt, FunctionDeclaration)
        self.assertEqual(stmt.name, "greet")
        self.assertEqual(len(stmt.body), 1)
        self.assertEqual(stmt.body[0].args, ("Hello $1",))

    def test_empty_function(self):
        """Test a function with no statements."""
        stmt = parse("function noop() { }").body[0]

        self.assertEqual(stmt.body, ())

    def test_function_missing_parens(self):
        """Test '()' is required after the name."""
        with self.assertRaises(ParseError) as ctx:
            parse("function broken { echo; }")

        self.assertEqual(ctx.exception.message, "Expected '('")

    def test_function_missing_closing_brace(self):
        """Test an unclosed body fails at end of input."""
        with self.assertRaises(ParseError) as ctx:
            parse("function f() {\n  echo hi\n")

        self.assertEqual(ctx.exception.message, "Expected '}'")
        self.assertEqual(ctx.exception.code, "P010")

    def test_nested_loop_missing_done(self):
        """Test a loop closed by its function's '}' reports the missing 'done'."""
        with self.assertRaises(ParseError) as ctx:
            parse("function f() {\n  for x in a; do echo\n}")

        self.assertEqual(ctx.exception.message, "Expected 'done'")
        self.assertEqual(ctx.exception.position.line, 3)

    def test_function_body_rejects_bare_variable(self):
        """Test a statement cannot start with a variable inside a body."""
        with self.assertRaises(ParseError) as ctx:
            parse("function f() {\n  $cmd\n}")

        self.assertEqual(ctx.exception.message, "Unexpected token '$cmd' in function body")

    def test_function_containing_loop(self):
        """Test compound statements nest inside function bodies."""
        source = """
function backup() {
  for f in a b; do
    cp $f /tmp
  done
}
backup
"""
        program = parse(source)

        self.assertEqual(len(program.body), 2)
        loop = program.body[0].body[0]
        self.assertEqual(loop.kind, LOOP_FOR)
        self.assertEqual(loop.body[0].args, ("$f", "/tmp"))
        self.assertEqual(program.body[1].name, "backup")


class TestRecovery(unittest.TestCase):
    """Test cases for lenient top-level parsing and error wrapping."""

    def test_leading_operator_is_skipped(self):
        """Test an unrecognized top-level token is skipped with a warning."""
        parser = Parser("| ls")
        program = parser.parse()

        self.assertEqual([s.name for s in program.body], ["ls"])
        self.assertEqual(len(parser.warnings), 1)
        self.assertEqual(parser.warnings[0].code, "P001")
        self.assertEqual(parser.warnings[0].token.lexeme, "|")

    def test_unsupported_operator_splits_statements(self):
        """Test '&&' is skipped and the following command still parses."""
        parser = Parser("make && make install")
        program = parser.parse()

        self.assertEqual([s.name for s in program.body], ["make", "make"])
        self.assertEqual(program.body[1].args, ("install",))
        self.assertEqual(len(parser.warnings), 1)

    def test_stray_keyword_is_skipped(self):
        """Test a keyword with no statement to close is skipped at top level."""
        parser = Parser("echo done")
        program = parser.parse()

        self.assertEqual(len(program.body), 1)
        self.assertEqual(program.body[0].args, ())
        self.assertEqual(len(parser.warnings), 1)

    def test_unterminated_quote_is_lenient(self):
        """Test an open quote parses and is reported as a lexer warning."""
        parser = Parser('echo "abc')
        program = parser.parse()

        self.assertEqual(program.body[0].args, ("abc",))
        self.assertEqual(len(parser.lexer_warnings), 1)
        self.assertEqual(parser.lexer_warnings[0].code, "L002")

    def test_strict_mode_converts_lexer_errors(self):
        """Test strict scanning failures surface as ParseError."""
        with self.assertRaises(ParseError) as ctx:
            parse('echo "abc', strict=True)

        self.assertEqual(ctx.exception.code, "L002")
        self.assertEqual(ctx.exception.position.column, 6)

    def test_internal_fault_is_wrapped(self):
        """Test any other exception becomes a ParseError."""
        with mock.patch.object(Parser, "_parse_program_body", side_effect=RuntimeError("boom")):
            with self.assertRaises(ParseError) as ctx:
                parse("ls")

        self.assertEqual(ctx.exception.message, "Unexpected error: boom")
        self.assertEqual(ctx.exception.code, "P013")
        self.assertEqual(ctx.exception.position.line, 1)
        self.assertIsInstance(ctx.exception.__cause__, RuntimeError)

    def test_deep_nesting_is_reported(self):
        """Test nesting past the recursion limit gives a dedicated error."""
        depth = sys.getrecursionlimit()
        source = "if a; then\n" * depth + "fi\n" * depth

        with self.assertRaises(ParseError) as ctx:
            parse(source)

        self.assertEqual(ctx.exception.message, "Statements nested too deeply")
        self.assertEqual(ctx.exception.code, "P014")
        self.assertIsNotNone(ctx.exception.position)

    def test_parser_is_reusable(self):
        """Test parse() resets state between calls."""
        parser = Parser("| ls")

        first = parser.parse()
        second = parser.parse()

        self.assertEqual(first, second)
        self.assertEqual(len(parser.warnings), 1)


class TestSourceSpans(unittest.TestCase):
    """Test cases for node positions."""

    def test_command_span(self):
        """Test a command spans from its name past its last argument."""
        stmt = parse("echo hi\nls").body[0]

        self.assertEqual(stmt.position.start_offset, 0)
        self.assertGreaterEqual(stmt.position.end_offset, 7)
        self.assertEqual(stmt.position.line, 1)

    def test_pipeline_starts_at_first_command(self):
        """Test a pipeline starts where its first command does."""
        stmt = parse("  a | b").body[0]

        self.assertEqual(stmt.position.start_offset, 2)
        self.assertEqual(stmt.position.column, 3)

    def test_nested_positions(self):
        """Test statements inside a body carry their own line."""
        stmt = parse("if x; then\n  echo y\nfi").body[0]

        self.assertEqual(stmt.position.line, 1)
        self.assertEqual(stmt.then_body[0].position.line, 2)
        self.assertEqual(stmt.then_body[0].position.column, 3)

    def test_program_span(self):
        """Test the program covers its tokens through end of input."""
        source = "ls\npwd"
        program = parse(source)

        self.assertIsInstance(program, Program)
        self.assertEqual(program.position.start_offset, 0)
        self.assertEqual(program.position.end_offset, len(source))

    def test_parse_is_deterministic(self):
        """Test equal input gives equal trees."""
        source = "for f in a b; do\n  cat $f | sort > out\ndone\nx=1"

        self.assertEqual(parse(source), parse(source))


class TestParseFile(unittest.TestCase):
    """Test cases for parsing from disk."""

    def test_parse_file(self):
        """Test a script file parses like the same string."""
        source = "#!/bin/sh\nname=world\necho hello $name\n"
        with tempfile.NamedTemporaryFile('w', suffix='.sh', delete=False, encoding='utf-8') as f:
            f.write(source)
            path = f.name

        try:
            program = parse_file(path)
        finally:
            os.unlink(path)

        self.assertEqual(program, parse(source))
        self.assertEqual(len(program.body), 2)


if __name__ == '__main__':
    unittest.main()
