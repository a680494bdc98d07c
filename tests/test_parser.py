import pytest

from sepia.ast import (
    ExpressionStatement, ValueStatement, UpdateStatement, ReturnStatement,
    IntegerLiteral, BooleanLiteral, StringLiteral, Identifier,
    PrefixExpression, InfixExpression, IfExpression, FunctionLiteral,
    CallExpression, ArrayLiteral, IndexExpression, MapLiteral,
)
from sepia.interpreter import parse, lex
from sepia.lexer import Lexer
from sepia.parser import Parser


def parse_ok(source):
    program, errors = parse(source)
    assert errors == []
    return program


def single_expression(source):
    program = parse_ok(source)
    assert len(program.statements) == 1
    stmt = program.statements[0]
    assert isinstance(stmt, ExpressionStatement)
    return stmt.expression


def test_value_and_update_statements():
    program = parse_ok('value x = 5; update x = x + 1; value y = true')
    first, second, third = program.statements
    assert isinstance(first, ValueStatement)
    assert first.name.value == 'x'
    assert first.value == IntegerLiteral(5)
    assert isinstance(second, UpdateStatement)
    assert str(second) == 'update x = (x + 1);'
    assert isinstance(third, ValueStatement)
    assert third.value == BooleanLiteral(True)


def test_return_statement_skips_to_semicolon():
    program = parse_ok('return 5; return x + y; 7;')
    assert [str(s) for s in program.statements] == ['return 5;', 'return (x + y);', '7']
    assert isinstance(program.statements[0], ReturnStatement)


def test_return_statement_stops_at_eof():
    program = parse_ok('return 10')
    assert len(program.statements) == 1
    assert str(program.statements[0]) == 'return 10;'


def test_return_statement_without_semicolon_before_block_end():
    fn = single_expression('fn() -> return 1 end')
    assert isinstance(fn, FunctionLiteral)
    assert str(fn.body) == 'return 1;'


def test_literals():
    assert single_expression('foobar;') == Identifier('foobar')
    assert single_expression('5;') == IntegerLiteral(5)
    assert single_expression('"hello world";') == StringLiteral('hello world')
    assert single_expression('false;') == BooleanLiteral(False)


def test_integer_literal_out_of_range_is_an_error():
    program, errors = parse('9223372036854775808;')
    assert errors == ['could not parse "9223372036854775808" as integer']
    assert program.statements == []
    assert single_expression('9223372036854775807;') == IntegerLiteral(9223372036854775807)


@pytest.mark.parametrize('source, operator, right', [
    ('!5;', '!', IntegerLiteral(5)),
    ('-15;', '-', IntegerLiteral(15)),
    ('!true;', '!', BooleanLiteral(True)),
    ('++x;', '++', Identifier('x')),
    ('--x;', '--', Identifier('x')),
])
def test_prefix_expressions(source, operator, right):
    expr = single_expression(source)
    assert isinstance(expr, PrefixExpression)
    assert expr.operator == operator
    assert expr.right == right


@pytest.mark.parametrize('operator', [
    '+', '-', '*', '/', '>', '<', '>=', '<=', '==', '!=', '&&', '||', 'and', 'or',
    '+=', '-=', '*=', '/=',
])
def test_infix_expressions(operator):
    expr = single_expression(f'a {operator} b;')
    assert isinstance(expr, InfixExpression)
    assert expr.left == Identifier('a')
    assert expr.operator == operator
    assert expr.right == Identifier('b')


@pytest.mark.parametrize('source, expected', [
    ('-a * b', '((-a) * b)'),
    ('!-a', '(!(-a))'),
    ('a + b + c', '((a + b) + c)'),
    ('a + b - c', '((a + b) - c)'),
    ('a * b * c', '((a * b) * c)'),
    ('a * b / c', '((a * b) / c)'),
    ('a + b / c', '(a + (b / c))'),
    ('a + b * c + d / e - f', '(((a + (b * c)) + (d / e)) - f)'),
    ('5 > 4 == 3 < 4', '((5 > 4) == (3 < 4))'),
    ('5 < 4 != 3 > 4', '((5 < 4) != (3 > 4))'),
    ('3 + 4 * 5 == 3 * 1 + 4 * 5', '((3 + (4 * 5)) == ((3 * 1) + (4 * 5)))'),
    ('true == a && b', '(true == (a && b))'),
    ('a || b && c', '((a || b) && c)'),
    ('a < b and c > d', '((a < b) and (c > d))'),
    ('1 + (2 + 3) + 4', '((1 + (2 + 3)) + 4)'),
    ('(5 + 5) * 2', '((5 + 5) * 2)'),
    ('-(5 + 5)', '(-(5 + 5))'),
    ('!(true == true)', '(!(true == true))'),
    ('a + add(b * c) + d', '((a + add((b * c))) + d)'),
    ('add(a, b, 1, 2 * 3, 4 + 5, add(6, 7 * 8))', 'add(a, b, 1, (2 * 3), (4 + 5), add(6, (7 * 8)))'),
    ('a * [1, 2, 3, 4][b * c] * d', '((a * ([1, 2, 3, 4][(b * c)])) * d)'),
    ('add(a * b[2], b[1], 2 * [1, 2][1])', 'add((a * (b[2])), (b[1]), (2 * ([1, 2][1])))'),
    ('x += 1 + 2', '((x += 1) + 2)'),
    ('x *= 2 + 1', '((x *= 2) + 1)'),
    ('++x * 2', '((++x) * 2)'),
])
def test_operator_precedence(source, expected):
    assert str(parse_ok(source)) == expected


def test_if_expression():
    expr = single_expression('if (x < y) -> x end')
    assert isinstance(expr, IfExpression)
    assert str(expr.condition) == '(x < y)'
    assert len(expr.consequence.statements) == 1
    assert expr.consequence.statements[0].expression == Identifier('x')
    assert expr.alternative is None


def test_else_inside_an_open_block_is_an_error():
    program, errors = parse("if (x < y) -> x; else -> y; end")
    assert "no prefix parse function for ELSE found" in errors


def test_if_else_with_both_blocks_closed():
    expr = single_expression('if (x < y) -> x; end else -> y; end')
    assert isinstance(expr, IfExpression)
    assert str(expr) == 'if (x < y) -> x end else -> y end'
    assert expr.alternative.statements[0].expression == Identifier('y')


def test_function_literal():
    expr = single_expression('fn(x, y) -> x + y; end')
    assert isinstance(expr, FunctionLiteral)
    assert [p.value for p in expr.parameters] == ['x', 'y']
    assert str(expr.body) == '(x + y)'


@pytest.mark.parametrize('source, params', [
    ('fn() -> end;', []),
    ('fn(x) -> end;', ['x']),
    ('fn(x, y, z) -> end;', ['x', 'y', 'z']),
])
def test_function_parameters(source, params):
    expr = single_expression(source)
    assert [p.value for p in expr.parameters] == params
    assert expr.body.statements == []


def test_call_expression():
    expr = single_expression('add(1, 2 * 3, 4 + 5);')
    assert isinstance(expr, CallExpression)
    assert expr.function == Identifier('add')
    assert [str(a) for a in expr.arguments] == ['1', '(2 * 3)', '(4 + 5)']


def test_array_and_index():
    arr = single_expression('[1, 2 * 2, 3 + 3]')
    assert isinstance(arr, ArrayLiteral)
    assert [str(e) for e in arr.elements] == ['1', '(2 * 2)', '(3 + 3)']
    idx = single_expression('myArray[1 + 1]')
    assert isinstance(idx, IndexExpression)
    assert idx.left == Identifier('myArray')
    assert str(idx.index) == '(1 + 1)'
    assert single_expression('[]') == ArrayLiteral([])


def test_map_literals():
    m = single_expression('{"one": 1, "two": 2, "three": 3}')
    assert isinstance(m, MapLiteral)
    assert [(str(k), str(v)) for k, v in m.pairs] == [('"one"', '1'), ('"two"', '2'), ('"three"', '3')]
    assert single_expression('{}') == MapLiteral([])
    exprs = single_expression('{"one": 0 + 1, "two": 10 - 8}')
    assert [str(v) for _, v in exprs.pairs] == ['(0 + 1)', '(10 - 8)']
    mixed = single_expression('{1: true, true: "x", "a": [1]}')
    assert str(mixed) == '{1: true, true: "x", "a": [1]}'


def test_map_literal_keeps_duplicate_keys_in_order():
    m = single_expression('{"a": 1, "a": 2}')
    assert [str(v) for _, v in m.pairs] == ['1', '2']


def test_closure_program_shape():
    program = parse_ok('value newAdder = fn(x) -> fn(y) -> x + y; end; end; value addTwo = newAdder(2); addTwo(3);')
    assert [type(s).__name__ for s in program.statements] == [
        'ValueStatement', 'ValueStatement', 'ExpressionStatement',
    ]
    assert str(program.statements[0].value) == 'fn(x) -> fn(y) -> (x + y) end end'


def test_comments_are_invisible():
    program = parse_ok('# comment\nvalue x = 1; # more\nx # end')
    assert str(program) == 'value x = 1;x'


def test_missing_prefix_function_error():
    program, errors = parse(')')
    assert errors == ['no prefix parse function for RPAREN found']
    assert program.statements == []


def test_expect_peek_errors_are_collected_in_order():
    program, errors = parse('value = 5;\nvalue x 5;\nvalue 838383;')
    assert errors[0] == 'expected next token to be IDENT, got ASSIGN instead (line 1, column 7)'
    assert 'no prefix parse function for ASSIGN found' in errors
    assert 'expected next token to be ASSIGN, got INT instead (line 2, column 9)' in errors
    assert 'expected next token to be IDENT, got INT instead (line 3, column 7)' in errors


def test_unterminated_block_is_reported():
    program, errors = parse('fn(x) -> x')
    assert errors == ['unterminated block opened at line 1, column 7']


def test_parser_accepts_token_list():
    program, errors = parse(lex('1 + 2;'))
    assert errors == []
    assert str(program) == '(1 + 2)'


def test_parser_trace_hook():
    lines = []
    parser = Parser(Lexer('1 + 2'), trace=lines.append)
    parser.parse_program()
    assert lines[0].startswith('BEGIN parse_expression_statement')
    assert any('BEGIN parse_infix_expression' in line for line in lines)
    assert lines[-1] == 'END parse_expression_statement'


def test_deep_nesting_is_reported_as_an_error():
    depth = 2000
    program, errors = parse('(' * depth + '1' + ')' * depth)
    assert errors == ['maximum nesting depth exceeded']
    assert program.statements == []


def test_nesting_error_keeps_earlier_statements():
    program, errors = parse('value a = 1;\n' + '-' * 4000 + 'a')
    assert errors == ['maximum nesting depth exceeded']
    assert [str(s) for s in program.statements] == ['value a = 1;']


def test_failed_group_reports_only_the_inner_error():
    program, errors = parse('(1 +)')
    assert errors == ['no prefix parse function for RPAREN found']
