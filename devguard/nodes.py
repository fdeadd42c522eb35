"""Immutable syntax tree model consumed by the analysis core.

Typed node classes cover the constructs the rule catalog inspects; every
other construct is a GenericNode carrying an ESTree-style kind name and its
children. Parent and enclosing-function links are never stored here, the
traversal engine supplies them at visit time.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union


# ============================================================================
# Source Positions
# ============================================================================

@dataclass(frozen=True)
class Position:
    """1-based line and column."""
    line: int
    column: int


@dataclass(frozen=True)
class SourceLocation:
    start: Position
    end: Position

    @property
    def line_span(self) -> int:
        return self.end.line - self.start.line


# ============================================================================
# Node Classes
# ============================================================================

@dataclass(frozen=True, eq=False)
class Node:
    """Base class for every tree element. Nodes compare by identity."""
    loc: SourceLocation

    @property
    def kind(self) -> str:
        return type(self).__name__

    def children(self) -> Tuple['Node', ...]:
        return ()


@dataclass(frozen=True, eq=False)
class GenericNode(Node):
    type_name: str
    nodes: Tuple[Node, ...] = ()

    @property
    def kind(self) -> str:
        return self.type_name

    def children(self) -> Tuple[Node, ...]:
        return self.nodes


@dataclass(frozen=True, eq=False)
class Program(Node):
    body: Tuple[Node, ...] = ()

    def children(self) -> Tuple[Node, ...]:
        return self.body


@dataclass(frozen=True, eq=False)
class Identifier(Node):
    name: str


@dataclass(frozen=True, eq=False)
class Literal(Node):
    value: Union[int, float, str, bool, None]
    raw: str


@dataclass(frozen=True, eq=False)
class VariableDeclarator(Node):
    id: Node
    init: Optional[Node] = None

    def children(self) -> Tuple[Node, ...]:
        if self.init is None:
            return (self.id,)
        return (self.id, self.init)


@dataclass(frozen=True, eq=False)
class VariableDeclaration(Node):
    keyword: str
    declarations: Tuple[VariableDeclarator, ...] = ()

    def children(self) -> Tuple[Node, ...]:
        return self.declarations


@dataclass(frozen=True, eq=False)
class MemberExpression(Node):
    object: Node
    property: Node
    computed: bool = False
    optional: bool = False

    def children(self) -> Tuple[Node, ...]:
        return (self.object, self.property)


@dataclass(frozen=True, eq=False)
class CallExpression(Node):
    callee: Node
    arguments: Tuple[Node, ...] = ()
    optional: bool = False

    def children(self) -> Tuple[Node, ...]:
        return (self.callee,) + self.arguments


@dataclass(frozen=True, eq=False)
class AssignmentExpression(Node):
    operator: str
    left: Node
    right: Node

    def children(self) -> Tuple[Node, ...]:
        return (self.left, self.right)


@dataclass(frozen=True, eq=False)
class Function(Node):
    """Shared shape of every function form."""
    params: Tuple[Node, ...]
    body: Node
    id: Optional[Identifier] = None
    is_async: bool = False
    generator: bool = False

    @property
    def display_name(self) -> str:
        return self.id.name if self.id is not None else '<anonymous>'

    def children(self) -> Tuple[Node, ...]:
        head = (self.id,) if self.id is not None else ()
        return head + self.params + (self.body,)


@dataclass(frozen=True, eq=False)
class FunctionDeclaration(Function):
    pass


@dataclass(frozen=True, eq=False)
class FunctionExpression(Function):
    pass


@dataclass(frozen=True, eq=False)
class ArrowFunctionExpression(Function):
    pass


# Kinds the traversal engine treats as an enclosing function
FUNCTION_TYPES = (FunctionDeclaration, FunctionExpression, ArrowFunctionExpression)
