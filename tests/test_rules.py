import pytest

from devguard.parse import parse_script
from devguard.rules import (
    DEFAULT_CATALOG, Rule, debug_statement, excess_parameters, format_number,
    legacy_declaration, oversized_function,
)
from devguard.session import analyze


def run(source, catalog=DEFAULT_CATALOG):
    return analyze(source, parse_script(source), catalog)


def summary(source, catalog=DEFAULT_CATALOG):
    return [(f.rule_id, f.line) for f in run(source, catalog)]


def long_function(header, filler_lines):
    return header + " {\n" + "  // filler\n" * filler_lines + "}\n"


# ----------------------------------------------------------------------
# Scenarios
# ----------------------------------------------------------------------

def test_uninitialized_var_declaration():
    findings = run("var x;")
    assert [(f.rule_id, f.line) for f in findings] == [
        ('missing-initializer', 1),
        ('legacy-declaration', 1),
    ]
    assert findings[0].message == "Undeclared variable detected: x"
    assert findings[1].message == "Usage of 'var' detected. Consider using 'let' or 'const' instead."


def test_console_log_call():
    findings = run("console.log('hi');")
    assert [(f.rule_id, f.line) for f in findings] == [('debug-statement', 1)]
    assert findings[0].message == "Console.log statement detected."


def test_long_function_with_many_parameters():
    source = long_function("function f(a, b, c, d, e)", 58)
    assert len(source.splitlines()) == 60
    findings = run(source)
    assert [(f.rule_id, f.line) for f in findings] == [
        ('excess-parameters', 1),
        ('oversized-function', 1),
    ]
    assert findings[0].message == "Function has too many parameters (5). Consider refactoring."
    assert findings[1].message == "Function is too long (59 lines). Consider refactoring."


def test_const_with_number():
    findings = run("const n = 42;")
    assert [(f.rule_id, f.line) for f in findings] == [('magic-number', 1)]
    assert findings[0].message == "Magic number detected: 42. Consider defining a constant."


def test_callback_passed_to_anonymous_function():
    source = (
        "(function (cb) {\n"
        "  cb();\n"
        "})(function () {});\n"
    )
    findings = run(source)
    assert [(f.rule_id, f.line) for f in findings] == [
        ('nested-callback', 1),
        ('nested-callback', 3),
    ]
    assert findings[1].message == "Deeply nested callback detected which can lead to callback hell."


# ----------------------------------------------------------------------
# Missing initializer / legacy declaration
# ----------------------------------------------------------------------

def test_only_first_declarator_is_checked():
    assert summary("let a = 1, b;") == [('magic-number', 1)]
    findings = run("let a, b = 2;")
    assert [(f.rule_id, f.line) for f in findings] == [
        ('missing-initializer', 1),
        ('magic-number', 1),
    ]
    assert findings[0].message.endswith(": a")


def test_for_in_declaration_has_no_initializer():
    assert summary("for (var k in obj) {}") == [
        ('missing-initializer', 1),
        ('legacy-declaration', 1),
    ]


def test_destructured_binding_without_name_is_skipped():
    assert summary("for (const [a, b] of pairs) {}") == []


def test_block_scoped_declarations_are_not_legacy():
    assert summary("let a = 1;\nvar b = 2;") == [
        ('magic-number', 1),
        ('legacy-declaration', 2),
        ('magic-number', 2),
    ]


# ----------------------------------------------------------------------
# Unsafe member access
# ----------------------------------------------------------------------

def test_member_access_on_null_assigned_object():
    source = "let user = null;\nconsole.log(user.name);\n"
    findings = run(source)
    assert [(f.rule_id, f.line) for f in findings] == [
        ('debug-statement', 2),
        ('unsafe-member-access', 2),
    ]
    assert findings[1].message == "Potential null pointer exception on: user"


def test_member_access_as_assignment_target():
    assert summary("let user = null;\nuser.name = 'x';\n") == []


def test_member_access_without_null_assignment():
    assert summary("user.name;") == []


def test_object_name_is_matched_literally():
    findings = run("$el = null;\n$el.hide();\n")
    assert [(f.rule_id, f.line) for f in findings] == [('unsafe-member-access', 2)]
    assert findings[0].message.endswith(": $el")


# ----------------------------------------------------------------------
# Nested callback
# ----------------------------------------------------------------------

def test_iife_callee_is_nested_callback():
    assert summary("(function () {})();") == [('nested-callback', 1)]


def test_nested_callback_ignores_named_callee():
    assert summary("setTimeout(function () {});") == []


def test_callbacks_through_named_calls_are_not_flagged():
    source = "foo(function(){ return bar(function(){}); });"
    assert summary(source) == []


# ----------------------------------------------------------------------
# Debug statement
# ----------------------------------------------------------------------

def test_computed_log_identifier_is_debug_statement():
    findings = run("console[log]('x');")
    assert [(f.rule_id, f.line) for f in findings] == [('debug-statement', 1)]
    assert findings[0].message == "Console.log statement detected."


def test_other_console_methods_are_ignored():
    assert summary("console.error('x');\nconsole['log']('x');\n") == []


def test_configured_debug_calls():
    catalog = (debug_statement(['console.log', 'console.debug']),)
    findings = run("console.debug(value);\nlogger.debug(value);\n", catalog)
    assert [(f.rule_id, f.line) for f in findings] == [('debug-statement', 1)]
    assert findings[0].message == "Console.debug statement detected."


# ----------------------------------------------------------------------
# Function size rules
# ----------------------------------------------------------------------

def test_parameter_limit():
    assert summary("function f(a, b, c) {}") == []
    assert summary("const g = function (a, b, c, d) {};") == [('excess-parameters', 1)]


def test_method_parameters_are_counted():
    source = "class A {\n  m(a, b, c, d) {}\n}\n"
    assert summary(source) == [('excess-parameters', 2)]


def test_arrow_functions_are_not_sized():
    assert summary("const h = (a, b, c, d) => a;") == []


def test_custom_parameter_limit():
    assert summary("function f(a, b, c, d) {}", (excess_parameters(4),)) == []


def test_function_length_boundary():
    assert summary(long_function("function f()", 49)) == []
    findings = run(long_function("function f()", 50))
    assert [(f.rule_id, f.line) for f in findings] == [('oversized-function', 1)]
    assert "(51 lines)" in findings[0].message


def test_custom_length_limit():
    catalog = (oversized_function(5),)
    assert summary(long_function("function f()", 5), catalog) == [('oversized-function', 1)]


# ----------------------------------------------------------------------
# Magic number
# ----------------------------------------------------------------------

def test_numeric_literal_values():
    findings = run("x = 0x1F;\ny = 1.5;\nz = -7;\n")
    assert [f.message for f in findings] == [
        "Magic number detected: 31. Consider defining a constant.",
        "Magic number detected: 1.5. Consider defining a constant.",
        "Magic number detected: 7. Consider defining a constant.",
    ]
    assert [f.line for f in findings] == [1, 2, 3]


def test_non_numeric_literals_are_ignored():
    assert summary("a = true;\nb = '42';\nc = 10n;\nd = null;\n") == []


# ----------------------------------------------------------------------
# Failure isolation
# ----------------------------------------------------------------------

def test_failing_rule_does_not_abort_analysis():
    broken = Rule('broken', 'Broken', lambda v: v.node.no_such_field, lambda v: '')
    assert summary("var x = 1;", (broken, legacy_declaration)) == [('legacy-declaration', 1)]


def test_rule_raising_arbitrary_error_is_skipped():
    broken = Rule('broken', 'Broken', lambda v: 1 / 0, lambda v: '')
    assert summary("var x = 1;", (broken, legacy_declaration)) == [('legacy-declaration', 1)]


# ----------------------------------------------------------------------
# Number formatting
# ----------------------------------------------------------------------

@pytest.mark.parametrize("literal,shown", [
    ("123456789012345680000", "123456789012345680000"),
    ("1e21", "1e+21"),
    ("1e-7", "1e-7"),
    ("0.000001", "0.000001"),
    ("1.5e300", "1.5e+300"),
    ("1e3", "1000"),
    ("0.1", "0.1"),
    ("0xFF", "255"),
])
def test_magic_number_printed_like_javascript(literal, shown):
    findings = run(f"x = {literal};")
    assert [f.message for f in findings] == [
        f"Magic number detected: {shown}. Consider defining a constant."
    ]


@pytest.mark.parametrize("value,shown", [
    (float('nan'), 'NaN'),
    (float('inf'), 'Infinity'),
    (-2.5, '-2.5'),
    (0.0, '0'),
    (1e-6, '0.000001'),
    (1.2345e-7, '1.2345e-7'),
])
def test_format_number(value, shown):
    assert format_number(value) == shown
