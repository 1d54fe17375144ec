"""
bashparser Package

Front end for a restricted shell grammar: a lexical scanner turning script
text into positioned tokens, and a recursive descent parser turning those
tokens into an immutable syntax tree for downstream analysis tools.

Architecture:
    bashparser/
    ├── lexer/           # Tokenization and source positions
    └── parser/          # Syntax analysis and AST node definitions

Author: xwest
License: MIT
"""

__version__ = "0.1.0"
__author__ = "xwest"
__license__ = "MIT"

from .lexer import (
    Lexer, Token, TokenType, SourcePosition, LexerError, LexerWarning,
    tokenize, tokenize_file
)
from .parser import (
    Parser, ParseError, ParseWarning, parse, parse_file,
    ASTNode, ASTNodeType, ASTVisitor, Program, Statement, Expression,
    Command, Pipeline, Conditional, Loop, FunctionDeclaration,
    VariableAssignment, Redirection, Literal, Variable
)

__all__ = [
    # Entry points
    "tokenize",
    "tokenize_file",
    "parse",
    "parse_file",

    # Core classes
    "Lexer",
    "Parser",
    "Token",
    "TokenType",
    "SourcePosition",

    # Tree
    "ASTNode",
    "ASTNodeType",
    "ASTVisitor",
    "Program",
    "Statement",
    "Expression",
    "Command",
    "Pipeline",
    "Conditional",
    "Loop",
    "FunctionDeclaration",
    "VariableAssignment",
    "Redirection",
    "Literal",
    "Variable",

    # Errors
    "ParseError",
    "ParseWarning",
    "LexerError",
    "LexerWarning",

    # Version info
    "__version__",
    "__author__",
    "__license__",
]
