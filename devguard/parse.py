"""tree-sitter adapter producing the DevGuard node model.

The converted tree follows ESTree shapes where the rules depend on them:
parentheses disappear, ``var``/``let``/``const`` all become
VariableDeclaration, ``for (var k in o)`` heads get a declaration with no
initializer, and method bodies become FunctionExpression values.
"""

import re
from typing import List, Optional, Tuple

import tree_sitter_javascript as tsjs
from tree_sitter import Language, Parser
from tree_sitter import Node as TSNode

from devguard.nodes import (
    ArrowFunctionExpression, AssignmentExpression, CallExpression,
    FunctionDeclaration, FunctionExpression, GenericNode, Identifier, Literal,
    MemberExpression, Node, Position, Program, SourceLocation,
    VariableDeclaration, VariableDeclarator,
)

JS_LANG = Language(tsjs.language())

SKIPPED_TYPES = {'comment', 'html_comment', 'hash_bang_line', 'escape_sequence'}

IDENTIFIER_TYPES = {
    'identifier', 'property_identifier', 'private_property_identifier',
    'shorthand_property_identifier', 'shorthand_property_identifier_pattern',
    'statement_identifier', 'undefined',
}

FUNCTION_EXPRESSION_TYPES = {'function_expression', 'function', 'generator_function'}
FUNCTION_DECLARATION_TYPES = {'function_declaration', 'generator_function_declaration'}

# tree-sitter type -> ESTree kind, where CamelCasing the type is not enough
KIND_NAMES = {
    'statement_block': 'BlockStatement',
    'object': 'ObjectExpression',
    'array': 'ArrayExpression',
    'pair': 'Property',
    'ternary_expression': 'ConditionalExpression',
    'class': 'ClassExpression',
    'this': 'ThisExpression',
    'super': 'Super',
    'template_string': 'TemplateLiteral',
    'string_fragment': 'TemplateElement',
    'rest_pattern': 'RestElement',
    'do_statement': 'DoWhileStatement',
    'export_statement': 'ExportDeclaration',
    'import_statement': 'ImportDeclaration',
    'new_expression': 'NewExpression',
    'field_definition': 'PropertyDefinition',
}


class ParseError(Exception):
    """Raised when the source is not syntactically valid JavaScript."""

    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"{message} at line {line}, column {column}")
        self.message = message
        self.line = line
        self.column = column


def kind_name(ts_type: str) -> str:
    """Map a tree-sitter node type to an ESTree-style kind."""
    if ts_type in KIND_NAMES:
        return KIND_NAMES[ts_type]
    return ''.join(part.capitalize() for part in ts_type.split('_'))


def parse_number(raw: str) -> Optional[float]:
    """Numeric value of a JS number literal, or None for BigInt literals."""
    text = raw.replace('_', '')
    if text.endswith('n'):
        return None
    lower = text.lower()
    if lower.startswith('0x'):
        return float(int(text[2:], 16))
    if lower.startswith('0o'):
        return float(int(text[2:], 8))
    if lower.startswith('0b'):
        return float(int(text[2:], 2))
    if re.fullmatch(r'0[0-7]+', text):
        return float(int(text, 8))
    return float(text)


def parse_script(source: str) -> Program:
    """Parse JavaScript source into a Program node.

    Raises ParseError when tree-sitter had to recover from a syntax error.
    """
    data = source.encode('utf-8')
    parser = Parser(JS_LANG)
    tree = parser.parse(data)
    converter = _Converter(data)
    root = tree.root_node
    if root.has_error:
        bad = _first_error(root)
        pos = converter.position(bad.start_point if bad is not None else root.start_point)
        what = "Missing token" if bad is not None and bad.is_missing else "Syntax error"
        raise ParseError(what, pos.line, pos.column)
    return converter.program(root)


def _first_error(node: TSNode) -> Optional[TSNode]:
    if node.type == 'ERROR' or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


class _Converter:
    def __init__(self, data: bytes):
        self.data = data
        self.lines = data.split(b'\n')

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------

    def position(self, point) -> Position:
        row, col = point
        line = self.lines[row] if row < len(self.lines) else b''
        return Position(row + 1, len(line[:col].decode('utf-8', errors='replace')) + 1)

    def loc(self, start: TSNode, end: Optional[TSNode] = None) -> SourceLocation:
        if end is None:
            end = start
        return SourceLocation(self.position(start.start_point), self.position(end.end_point))

    def text(self, node: TSNode) -> str:
        return self.data[node.start_byte:node.end_byte].decode('utf-8', errors='replace')

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def program(self, root: TSNode) -> Program:
        return Program(self.loc(root), self.convert_all(root.named_children))

    def convert_all(self, ts_nodes: List[TSNode]) -> Tuple[Node, ...]:
        return tuple(self.convert(n) for n in ts_nodes if n.type not in SKIPPED_TYPES)

    def convert(self, node: TSNode) -> Node:
        t = node.type
        if t == 'parenthesized_expression':
            inner = [c for c in node.named_children if c.type not in SKIPPED_TYPES]
            if len(inner) == 1:
                return self.convert(inner[0])
        if t in IDENTIFIER_TYPES:
            return Identifier(self.loc(node), self.text(node))
        if t in ('number', 'string', 'true', 'false', 'null', 'regex'):
            return self.literal(node)
        if t in ('variable_declaration', 'lexical_declaration'):
            return self.declaration(node)
        if t == 'variable_declarator':
            return self.declarator(node)
        if t in ('member_expression', 'subscript_expression'):
            return self.member(node)
        if t == 'call_expression':
            return self.call(node)
        if t in ('assignment_expression', 'augmented_assignment_expression'):
            return self.assignment(node)
        if t in FUNCTION_DECLARATION_TYPES:
            return self.function(node, FunctionDeclaration)
        if t in FUNCTION_EXPRESSION_TYPES:
            return self.function(node, FunctionExpression)
        if t == 'arrow_function':
            return self.function(node, ArrowFunctionExpression)
        if t == 'method_definition':
            return self.method(node)
        if t == 'for_in_statement':
            return self.for_in(node)
        return GenericNode(self.loc(node), kind_name(t), self.convert_all(node.named_children))

    def literal(self, node: TSNode) -> Literal:
        raw = self.text(node)
        t = node.type
        if t == 'number':
            value = parse_number(raw)
        elif t == 'string':
            value = raw[1:-1]
        elif t in ('true', 'false'):
            value = t == 'true'
        elif t == 'null':
            value = None
        else:
            value = raw
        return Literal(self.loc(node), value, raw)

    def declaration(self, node: TSNode) -> VariableDeclaration:
        kind_node = node.child_by_field_name('kind')
        if kind_node is not None:
            keyword = kind_node.type
        else:
            keyword = node.children[0].type if node.children else 'var'
        declarators = tuple(
            self.declarator(c) for c in node.named_children if c.type == 'variable_declarator'
        )
        return VariableDeclaration(self.loc(node), keyword, declarators)

    def declarator(self, node: TSNode) -> VariableDeclarator:
        name = node.child_by_field_name('name')
        value = node.child_by_field_name('value')
        return VariableDeclarator(
            self.loc(node),
            self.convert(name),
            self.convert(value) if value is not None else None,
        )

    def member(self, node: TSNode) -> MemberExpression:
        obj = node.child_by_field_name('object')
        computed = node.type == 'subscript_expression'
        prop = node.child_by_field_name('index' if computed else 'property')
        optional = any(c.type == 'optional_chain' for c in node.children)
        return MemberExpression(self.loc(node), self.convert(obj), self.convert(prop),
                                computed=computed, optional=optional)

    def call(self, node: TSNode) -> Node:
        callee = self.convert(node.child_by_field_name('function'))
        args_node = node.child_by_field_name('arguments')
        if args_node is not None and args_node.type == 'template_string':
            return GenericNode(self.loc(node), 'TaggedTemplateExpression',
                               (callee, self.convert(args_node)))
        args = self.convert_all(args_node.named_children) if args_node is not None else ()
        optional = any(c.type == 'optional_chain' for c in node.children)
        return CallExpression(self.loc(node), callee, args, optional=optional)

    def assignment(self, node: TSNode) -> AssignmentExpression:
        op_node = node.child_by_field_name('operator')
        operator = self.text(op_node) if op_node is not None else '='
        return AssignmentExpression(
            self.loc(node), operator,
            self.convert(node.child_by_field_name('left')),
            self.convert(node.child_by_field_name('right')),
        )

    def params(self, node: TSNode) -> Tuple[Node, ...]:
        single = node.child_by_field_name('parameter')
        if single is not None:
            return (self.convert(single),)
        params = node.child_by_field_name('parameters')
        if params is None:
            return ()
        return self.convert_all(params.named_children)

    def function(self, node: TSNode, cls):
        name = node.child_by_field_name('name')
        token_types = {c.type for c in node.children if not c.is_named}
        return cls(
            self.loc(node),
            self.params(node),
            self.convert(node.child_by_field_name('body')),
            id=Identifier(self.loc(name), self.text(name)) if name is not None else None,
            is_async='async' in token_types,
            generator='*' in token_types,
        )

    def method(self, node: TSNode) -> GenericNode:
        # ESTree keeps the key on the MethodDefinition and the function
        # (starting at the parameter list) as its value
        key = node.child_by_field_name('name')
        params = node.child_by_field_name('parameters')
        body = node.child_by_field_name('body')
        token_types = {c.type for c in node.children if not c.is_named}
        value = FunctionExpression(
            self.loc(params if params is not None else node, body),
            self.params(node),
            self.convert(body),
            is_async='async' in token_types,
            generator='*' in token_types,
        )
        return GenericNode(self.loc(node), 'MethodDefinition', (self.convert(key), value))

    def for_in(self, node: TSNode) -> GenericNode:
        left = node.child_by_field_name('left')
        right = node.child_by_field_name('right')
        body = node.child_by_field_name('body')
        kind_node = node.child_by_field_name('kind')
        operator = node.child_by_field_name('operator')
        of_loop = operator is not None and operator.type == 'of'
        if operator is None:
            of_loop = any(c.type == 'of' for c in node.children)

        head = self.convert(left)
        if kind_node is not None:
            declarator = VariableDeclarator(self.loc(left), head, None)
            head = VariableDeclaration(self.loc(kind_node, left), kind_node.type, (declarator,))
        name = 'ForOfStatement' if of_loop else 'ForInStatement'
        return GenericNode(self.loc(node), name, (head, self.convert(right), self.convert(body)))
