"""
Abstract Syntax Tree node definitions for bashparser.

Nodes are immutable dataclasses built bottom-up by the parser. Every node
class carries a ``node_type`` tag; consumers dispatch on that tag (directly or
through ``ASTVisitor``) because a "pipeline" position may hold either a bare
Command or a Pipeline.

Author: xwest
"""

from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple, Union
from dataclasses import dataclass, fields
from enum import Enum

from ..lexer.tokens import SourcePosition


class ASTNodeType(Enum):
    """Tags for every node variant."""

    # Top-level
    PROGRAM = "program"

    # Statements
    COMMAND = "command"
    PIPELINE = "pipeline"
    CONDITIONAL = "conditional"
    LOOP = "loop"
    FUNCTION = "function"
    ASSIGNMENT = "assignment"

    # Command parts
    REDIRECTION = "redirection"

    # Expressions
    LITERAL = "literal"
    VARIABLE = "variable"


LOOP_FOR = "for"
LOOP_WHILE = "while"


class ASTVisitor:
    """
    Visitor dispatching on ``node.node_type``.

    Subclasses define ``visit_<tag>`` methods, e.g. ``visit_command``;
    nodes without a matching method go to ``generic_visit``.
    """

    def visit(self, node: 'ASTNode') -> Any:
        method = getattr(self, f"visit_{node.node_type.value}", None)
        if method is None:
            return self.generic_visit(node)
        return method(node)

    def generic_visit(self, node: 'ASTNode') -> Any:
        for child in node.children():
            self.visit(child)
        return None


class ASTNode:
    """Base class for all AST nodes."""

    node_type: ClassVar[ASTNodeType]

    def accept(self, visitor: ASTVisitor) -> Any:
        """Accept a visitor (visitor pattern)."""
        return visitor.visit(self)

    def children(self) -> List['ASTNode']:
        """Get all child nodes, in source order."""
        return []

    def walk(self) -> Iterator['ASTNode']:
        """Yield this node and all descendants in pre-order."""
        yield self
        for child in self.children():
            yield from child.walk()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain dicts/lists, tagged with a "type" key."""
        result: Dict[str, Any] = {"type": self.node_type.value}
        for f in fields(self):
            result[f.name] = _to_plain(getattr(self, f.name))
        return result


def _to_plain(value: Any) -> Any:
    if isinstance(value, ASTNode):
        return value.to_dict()
    if isinstance(value, tuple):
        return [_to_plain(item) for item in value]
    if isinstance(value, SourcePosition):
        return {
            "start_offset": value.start_offset,
            "end_offset": value.end_offset,
            "line": value.line,
            "column": value.column,
        }
    return value


# ============================================================================
# Expressions
# ============================================================================

@dataclass(frozen=True)
class Literal(ASTNode):
    """A word or quoted string."""
    value: str
    quoted: bool = False
    position: Optional[SourcePosition] = None

    node_type: ClassVar[ASTNodeType] = ASTNodeType.LITERAL


@dataclass(frozen=True)
class Variable(ASTNode):
    """A $NAME or ${NAME} reference (not expanded)."""
    name: str
    position: Optional[SourcePosition] = None

    node_type: ClassVar[ASTNodeType] = ASTNodeType.VARIABLE


Expression = Union[Literal, Variable]

EXPRESSION_TYPES = (Literal, Variable)


# ============================================================================
# Statements
# ============================================================================

@dataclass(frozen=True)
class Redirection(ASTNode):
    """Redirection attached to a command: ``>``, ``>>`` or ``<``."""
    operator: str
    target: Expression
    position: Optional[SourcePosition] = None

    node_type: ClassVar[ASTNodeType] = ASTNodeType.REDIRECTION

    def children(self) -> List[ASTNode]:
        return [self.target]


@dataclass(frozen=True)
class Command(ASTNode):
    """
    Simple command.

    ``args`` holds the argument strings (quotes stripped; variables as their
    raw ``$NAME`` text) and ``arguments`` the same arguments as expressions.
    """
    name: str
    args: Tuple[str, ...] = ()
    arguments: Tuple[Expression, ...] = ()
    redirections: Tuple[Redirection, ...] = ()
    position: Optional[SourcePosition] = None

    node_type: ClassVar[ASTNodeType] = ASTNodeType.COMMAND

    def children(self) -> List[ASTNode]:
        return list(self.arguments) + list(self.redirections)


@dataclass(frozen=True)
class Pipeline(ASTNode):
    """Two or more commands joined by ``|``."""
    commands: Tuple[Command, ...]
    position: Optional[SourcePosition] = None

    node_type: ClassVar[ASTNodeType] = ASTNodeType.PIPELINE

    def __post_init__(self):
        if len(self.commands) < 2:
            raise ValueError("a Pipeline needs at least two commands")

    def children(self) -> List[ASTNode]:
        return list(self.commands)


@dataclass(frozen=True)
class Conditional(ASTNode):
    """if/then/else/fi statement."""
    condition: Expression
    then_body: Tuple['Statement', ...]
    else_body: Optional[Tuple['Statement', ...]] = None
    condition_args: Tuple[Expression, ...] = ()
    position: Optional[SourcePosition] = None

    node_type: ClassVar[ASTNodeType] = ASTNodeType.CONDITIONAL

    def children(self) -> List[ASTNode]:
        children: List[ASTNode] = [self.condition]
        children.extend(self.condition_args)
        children.extend(self.then_body)
        if self.else_body:
            children.extend(self.else_body)
        return children


@dataclass(frozen=True)
class Loop(ASTNode):
    """
    for/while loop.

    A "for" loop has ``variable``, ``iterable`` and ``items`` (every word after
    ``in``, starting with ``iterable``); a "while" loop has ``condition`` and
    ``condition_args``.
    """
    kind: str
    body: Tuple['Statement', ...]
    condition: Optional[Expression] = None
    variable: Optional[str] = None
    iterable: Optional[Expression] = None
    condition_args: Tuple[Expression, ...] = ()
    items: Tuple[Expression, ...] = ()
    position: Optional[SourcePosition] = None

    node_type: ClassVar[ASTNodeType] = ASTNodeType.LOOP

    def __post_init__(self):
        if self.kind == LOOP_FOR:
            if self.variable is None or self.iterable is None or self.condition is not None:
                raise ValueError("a for loop needs a variable and an iterable and no condition")
        elif self.kind == LOOP_WHILE:
            if self.condition is None or self.variable is not None or self.iterable is not None:
                raise ValueError("a while loop needs a condition and no variable or iterable")
        else:
            raise ValueError(f"unknown loop kind: {self.kind!r}")

    def children(self) -> List[ASTNode]:
        children: List[ASTNode] = []
        if self.condition is not None:
            children.append(self.condition)
            children.extend(self.condition_args)
        children.extend(self.items)
        children.extend(self.body)
        return children


@dataclass(frozen=True)
class FunctionDeclaration(ASTNode):
    """``function name() { ... }``"""
    name: str
    body: Tuple['Statement', ...]
    position: Optional[SourcePosition] = None

    node_type: ClassVar[ASTNodeType] = ASTNodeType.FUNCTION

    def children(self) -> List[ASTNode]:
        return list(self.body)


@dataclass(frozen=True)
class VariableAssignment(ASTNode):
    """``NAME=value``"""
    name: str
    value: Expression
    position: Optional[SourcePosition] = None

    node_type: ClassVar[ASTNodeType] = ASTNodeType.ASSIGNMENT

    def children(self) -> List[ASTNode]:
        return [self.value]


Statement = Union[Command, Pipeline, Conditional, Loop, FunctionDeclaration, VariableAssignment]

STATEMENT_TYPES = (Command, Pipeline, Conditional, Loop, FunctionDeclaration, VariableAssignment)


# ============================================================================
# Top-level
# ============================================================================

@dataclass(frozen=True)
class Program(ASTNode):
    """Root node: the ordered top-level statements of a script."""
    body: Tuple[Statement, ...]
    position: Optional[SourcePosition] = None

    node_type: ClassVar[ASTNodeType] = ASTNodeType.PROGRAM

    def children(self) -> List[ASTNode]:
        return list(self.body)
