"""The rule catalog.

Each rule is a stateless predicate plus message formatter evaluated at every
visited node. Catalogs are plain tuples; their order decides the order of
findings reported for the same node.
"""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, List, NamedTuple, Optional, Tuple

from devguard.findings import Finding
from devguard.nodes import (
    AssignmentExpression, CallExpression, Function, FunctionDeclaration,
    FunctionExpression, Identifier, Literal, MemberExpression, Node,
    VariableDeclaration,
)

if TYPE_CHECKING:
    from devguard.config import DevGuardConfig

DEFAULT_MAX_PARAMS = 3
DEFAULT_MAX_FUNCTION_LINES = 50
DEFAULT_DEBUG_CALLS = ('console.log',)


class Visit(NamedTuple):
    """Context handed to a rule for one visited node.

    ``source`` is only filled in for rules declared with ``uses_source``.
    """
    node: Node
    parent: Optional[Node]
    function: Optional[Function]
    source: Optional[str] = None


@dataclass(frozen=True)
class Rule:
    rule_id: str
    title: str
    matches: Callable[[Visit], bool]
    describe: Callable[[Visit], str]
    uses_source: bool = False

    def apply(self, visit: Visit) -> List[Finding]:
        if not self.matches(visit):
            return []
        start = visit.node.loc.start
        return [Finding(self.rule_id, self.describe(visit), start.line, start.column)]


RuleCatalog = Tuple[Rule, ...]


# ============================================================================
# Helpers
# ============================================================================

def _name_of(node: Optional[Node]) -> Optional[str]:
    return node.name if isinstance(node, Identifier) else None


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_number(value) -> str:
    """Render a number the way JavaScript's Number#toString does."""
    if isinstance(value, int):
        return str(value)
    if value != value:
        return 'NaN'
    if value in (float('inf'), float('-inf')):
        return 'Infinity' if value > 0 else '-Infinity'
    if value == 0:
        return '0'
    if value < 0:
        return '-' + format_number(-value)

    # repr gives the shortest round-trip digits; value = 0.digits * 10**n
    mantissa, _, exp = repr(value).partition('e')
    int_part, _, frac = mantissa.partition('.')
    all_digits = int_part + frac
    point = len(int_part) + int(exp or 0)
    digits = all_digits.lstrip('0')
    n = point - (len(all_digits) - len(digits))
    digits = digits.rstrip('0')
    k = len(digits)

    if k <= n <= 21:
        return digits + '0' * (n - k)
    if 0 < n <= 21:
        return digits[:n] + '.' + digits[n:]
    if -6 < n <= 0:
        return '0.' + '0' * -n + digits
    e = n - 1
    sign = '+' if e >= 0 else '-'
    head = digits if k == 1 else digits[0] + '.' + digits[1:]
    return f"{head}e{sign}{abs(e)}"


def _is_sized_function(node: Node) -> bool:
    return isinstance(node, (FunctionDeclaration, FunctionExpression))


# ============================================================================
# Rules
# ============================================================================

def _first_declarator_uninitialized(visit: Visit) -> bool:
    node = visit.node
    if not isinstance(node, VariableDeclaration) or not node.declarations:
        return False
    first = node.declarations[0]
    return first.init is None and _name_of(first.id) is not None


missing_initializer = Rule(
    'missing-initializer',
    'Missing initializer',
    _first_declarator_uninitialized,
    lambda v: f"Undeclared variable detected: {v.node.declarations[0].id.name}",
)


def _null_assigned_object(visit: Visit) -> bool:
    node = visit.node
    if not isinstance(node, MemberExpression) or visit.parent is None:
        return False
    if isinstance(visit.parent, AssignmentExpression):
        return False
    name = _name_of(node.object)
    if name is None or visit.source is None:
        return False
    # Textual heuristic over the whole file, not data-flow
    return re.search(rf'{re.escape(name)}\s*=\s*null', visit.source) is not None


unsafe_member_access = Rule(
    'unsafe-member-access',
    'Unsafe member access',
    _null_assigned_object,
    lambda v: f"Potential null pointer exception on: {v.node.object.name}",
    uses_source=True,
)


def _callback_into_anonymous_call(visit: Visit) -> bool:
    node, parent = visit.node, visit.parent
    if not isinstance(node, FunctionExpression) or not isinstance(parent, CallExpression):
        return False
    return isinstance(parent.callee, FunctionExpression)


nested_callback = Rule(
    'nested-callback',
    'Nested callback',
    _callback_into_anonymous_call,
    lambda v: "Deeply nested callback detected which can lead to callback hell.",
)


def debug_statement(calls: Iterable[str] = DEFAULT_DEBUG_CALLS) -> Rule:
    """Flag calls such as ``console.log(...)`` listed as ``object.method``."""
    targets = frozenset(tuple(c.split('.', 1)) for c in calls if '.' in c)

    def callee_name(node: Node) -> Optional[str]:
        callee = node.callee
        if not isinstance(callee, MemberExpression):
            return None
        obj, prop = _name_of(callee.object), _name_of(callee.property)
        if obj is None or prop is None or (obj, prop) not in targets:
            return None
        return f"{obj}.{prop}"

    def matches(visit: Visit) -> bool:
        return isinstance(visit.node, CallExpression) and callee_name(visit.node) is not None

    def describe(visit: Visit) -> str:
        name = callee_name(visit.node)
        return f"{name[0].upper()}{name[1:]} statement detected."

    return Rule('debug-statement', 'Debug statement', matches, describe)


legacy_declaration = Rule(
    'legacy-declaration',
    'Legacy declaration kind',
    lambda v: isinstance(v.node, VariableDeclaration) and v.node.keyword == 'var',
    lambda v: "Usage of 'var' detected. Consider using 'let' or 'const' instead.",
)


def excess_parameters(limit: int = DEFAULT_MAX_PARAMS) -> Rule:
    return Rule(
        'excess-parameters',
        'Excess parameters',
        lambda v: _is_sized_function(v.node) and len(v.node.params) > limit,
        lambda v: f"Function has too many parameters ({len(v.node.params)}). Consider refactoring.",
    )


def oversized_function(limit: int = DEFAULT_MAX_FUNCTION_LINES) -> Rule:
    return Rule(
        'oversized-function',
        'Oversized function',
        lambda v: _is_sized_function(v.node) and v.node.loc.line_span > limit,
        lambda v: f"Function is too long ({v.node.loc.line_span} lines). Consider refactoring.",
    )


magic_number = Rule(
    'magic-number',
    'Unnamed numeric constant',
    lambda v: isinstance(v.node, Literal) and _is_number(v.node.value),
    lambda v: f"Magic number detected: {format_number(v.node.value)}. Consider defining a constant.",
)


# ============================================================================
# Catalogs
# ============================================================================

DEFAULT_CATALOG: RuleCatalog = (
    missing_initializer,
    unsafe_member_access,
    nested_callback,
    debug_statement(),
    legacy_declaration,
    excess_parameters(),
    oversized_function(),
    magic_number,
)

RULE_IDS = tuple(rule.rule_id for rule in DEFAULT_CATALOG)


def without(catalog: RuleCatalog, *rule_ids: str) -> RuleCatalog:
    """Return the catalog minus the named rules, order preserved."""
    return tuple(rule for rule in catalog if rule.rule_id not in rule_ids)


def build_catalog(config: Optional['DevGuardConfig'] = None) -> RuleCatalog:
    """Catalog in canonical order with configured thresholds and exclusions."""
    if config is None:
        return DEFAULT_CATALOG
    catalog = (
        missing_initializer,
        unsafe_member_access,
        nested_callback,
        debug_statement(config.debug_calls),
        legacy_declaration,
        excess_parameters(config.max_params),
        oversized_function(config.max_function_lines),
        magic_number,
    )
    return without(catalog, *config.disabled_rules)
