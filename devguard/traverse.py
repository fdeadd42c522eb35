"""Single-pass pre-order traversal with parent and enclosing-function context."""

from typing import Callable, Iterator, Optional, Tuple

from devguard.nodes import FUNCTION_TYPES, Function, Node

Visitor = Callable[[Node, Optional[Node], Optional[Function]], None]


def walk(root: Node) -> Iterator[Tuple[Node, Optional[Node], Optional[Function]]]:
    """Yield (node, parent, enclosing_function) for every node, pre-order.

    Children come out left-to-right. The enclosing function of a function
    node is its nearest function ancestor, never the node itself. The tree
    must be acyclic.
    """
    stack = [(root, None, None)]
    while stack:
        node, parent, function = stack.pop()
        yield node, parent, function
        inner = node if isinstance(node, FUNCTION_TYPES) else function
        for child in reversed(node.children()):
            stack.append((child, node, inner))


def traverse(root: Node, visit: Visitor) -> None:
    for node, parent, function in walk(root):
        visit(node, parent, function)
