from treelox.ast import (
    Assign, Binary, Block, Call, Expression, Function, Grouping, Literal,
    Logical, Print, Unary, Var, Variable, While,
)
from treelox.lexer import scan
from treelox.parser import parse
from treelox.tokens import TokenType


def parse_source(source):
    tokens, scan_diagnostics = scan(source)
    assert not scan_diagnostics.has_errors
    return parse(tokens)


def errors_of(diagnostics):
    return [str(d) for d in diagnostics]


def test_factor_binds_tighter_than_term():
    statements, diagnostics = parse_source('1 + 2 * 3;')
    assert not diagnostics.has_errors
    expr = statements[0].expression
    assert isinstance(expr, Binary)
    assert expr.operator.type == TokenType.PLUS
    assert isinstance(expr.right, Binary)
    assert expr.right.operator.type == TokenType.STAR


def test_binary_operators_are_left_associative():
    statements, _ = parse_source('1 - 2 - 3;')
    expr = statements[0].expression
    assert isinstance(expr.left, Binary)
    assert expr.left.left.token.literal == 1.0
    assert expr.right.token.literal == 3.0


def test_comparison_binds_tighter_than_equality():
    statements, _ = parse_source('1 < 2 == true;')
    expr = statements[0].expression
    assert expr.operator.type == TokenType.EQUAL_EQUAL
    assert expr.left.operator.type == TokenType.LESS


def test_logical_precedence():
    statements, _ = parse_source('a or b and c;')
    expr = statements[0].expression
    assert isinstance(expr, Logical)
    assert expr.operator.type == TokenType.OR
    assert isinstance(expr.right, Logical)
    assert expr.right.operator.type == TokenType.AND


def test_unary_and_grouping():
    statements, _ = parse_source('!-(1);')
    expr = statements[0].expression
    assert isinstance(expr, Unary)
    assert isinstance(expr.right, Unary)
    assert isinstance(expr.right.right, Grouping)


def test_assignment_is_right_associative():
    statements, _ = parse_source('a = b = 1;')
    expr = statements[0].expression
    assert isinstance(expr, Assign)
    assert expr.name.lexeme == 'a'
    assert isinstance(expr.value, Assign)
    assert expr.value.name.lexeme == 'b'


def test_invalid_assignment_target_is_reported_and_parsing_continues():
    statements, diagnostics = parse_source('1 = 2;\nprint 3;')
    assert errors_of(diagnostics) == ["[line 1] Error at '=': Invalid assignment target."]
    assert len(statements) == 2
    assert isinstance(statements[1], Print)


def test_call_chains():
    statements, _ = parse_source('f(1)(2, 3);')
    expr = statements[0].expression
    assert isinstance(expr, Call)
    assert len(expr.arguments) == 2
    assert isinstance(expr.callee, Call)
    assert isinstance(expr.callee.callee, Variable)
    assert expr.paren.type == TokenType.RIGHT_PAREN


def test_var_and_function_declarations():
    statements, diagnostics = parse_source('var a; var b = 2; fun add(x, y) { return x + y; }')
    assert not diagnostics.has_errors
    assert isinstance(statements[0], Var)
    assert statements[0].initializer is None
    assert isinstance(statements[2], Function)
    assert [p.lexeme for p in statements[2].params] == ['x', 'y']
    assert isinstance(statements[2].body, Block)


def test_for_desugars_into_block_and_while():
    statements, diagnostics = parse_source('for (var i = 0; i < 3; i = i + 1) print i;')
    assert not diagnostics.has_errors
    outer = statements[0]
    assert isinstance(outer, Block)
    assert isinstance(outer.statements[0], Var)
    loop = outer.statements[1]
    assert isinstance(loop, While)
    assert isinstance(loop.body, Block)
    assert isinstance(loop.body.statements[0], Print)
    assert isinstance(loop.body.statements[1], Expression)
    assert isinstance(loop.body.statements[1].expression, Assign)


def test_for_without_clauses_loops_on_true():
    statements, _ = parse_source('for (;;) print 1;')
    loop = statements[0].statements[0]
    assert isinstance(loop, While)
    assert isinstance(loop.condition, Literal)
    assert loop.condition.token.type == TokenType.TRUE
    assert len(loop.body.statements) == 1


def test_synchronize_reports_independent_errors():
    statements, diagnostics = parse_source('print ;\nvar = 1;\nprint 3;')
    assert errors_of(diagnostics) == [
        "[line 1] Error at ';': Expect expression.",
        "[line 2] Error at '=': Expect variable name.",
    ]
    assert len(statements) == 1
    assert isinstance(statements[0], Print)


def test_missing_semicolon_at_end():
    _, diagnostics = parse_source('print 1')
    assert errors_of(diagnostics) == ["[line 1] Error at end: Expect ';' after value."]


def test_missing_closing_paren():
    _, diagnostics = parse_source('(1 + 2;')
    assert errors_of(diagnostics) == ["[line 1] Error at ';': Expect ')' after expression."]


def test_unclosed_block():
    _, diagnostics = parse_source('{ print 1;')
    assert errors_of(diagnostics) == ["[line 1] Error at end: Expect '}' after block."]


def test_malformed_parameter_list_recovers():
    statements, diagnostics = parse_source('fun f(a, 1) {}\nprint 2;')
    assert errors_of(diagnostics) == ["[line 1] Error at '1': Expect parameter name."]
    assert len(statements) == 1
    assert isinstance(statements[0], Print)


def test_return_outside_function():
    _, diagnostics = parse_source('return 1;')
    assert errors_of(diagnostics) == ["[line 1] Error at 'return': Can't return from top-level code."]


def test_return_inside_function_is_accepted():
    _, diagnostics = parse_source('fun f() { if (true) return; return 1; }')
    assert not diagnostics.has_errors


def test_parse_tokens_without_eof():
    tokens, diagnostics = scan('print 1; "oops')
    assert diagnostics.fatal
    statements, parse_diagnostics = parse(tokens)
    assert not parse_diagnostics.has_errors
    assert len(statements) == 1


def test_nesting_too_deep_is_reported_and_parsing_continues():
    source = 'print ' + '(' * 3000 + '1' + ')' * 3000 + ';\nprint 2;'
    statements, diagnostics = parse_source(source)
    assert errors_of(diagnostics) == ["[line 1] Error at 'print': Too much nesting."]
    assert len(statements) == 1
    assert statements[0].expression.token.line == 2


def test_nesting_too_deep_inside_function_restores_depth():
    source = 'fun f() { print ' + '(' * 3000 + '1' + ')' * 3000 + '; }\nreturn 1;'
    _, diagnostics = parse_source(source)
    errors = errors_of(diagnostics)
    assert errors[0] == "[line 1] Error at 'fun': Too much nesting."
    assert errors[-1] == "[line 2] Error at 'return': Can't return from top-level code."
