"""
bashparser Parser Package

Implements a recursive descent parser for the supported shell subset.
Produces immutable syntax trees with source spans on every node.

Key Features:
- Commands, pipelines, if/else, for/while loops, functions, assignments
- Redirections attached to commands
- Lenient top-level statement loop, strict nested bodies
- Tagged node variants with visitor dispatch and dict export

Author: xwest
"""

from .ast_nodes import *
from .parser import Parser, parse, parse_file
from .errors import ParseError, ParseWarning

__all__ = [
    # Core parser
    "Parser", "parse", "parse_file",

    # AST nodes
    "ASTNode", "ASTNodeType", "ASTVisitor",
    "Program", "Statement", "Expression",
    "Command", "Pipeline", "Conditional", "Loop",
    "FunctionDeclaration", "VariableAssignment", "Redirection",
    "Literal", "Variable",
    "STATEMENT_TYPES", "EXPRESSION_TYPES", "LOOP_FOR", "LOOP_WHILE",

    # Error handling
    "ParseError", "ParseWarning",
]
