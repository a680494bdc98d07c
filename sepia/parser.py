"""Pratt parser for the Sepia language.

The parser pulls tokens from a `Lexer` (or any iterator of tokens) and
keeps a two-token window, `current` and `peek`. Expressions are parsed by
top-down operator precedence: every token kind that can start an
expression has a prefix function, every token kind that can continue one
has an infix function, and `parse_expression` climbs while the next
operator binds tighter than the caller's precedence.

The parser never raises on bad input. Problems are appended to
`Parser.errors` in the order they are found, the offending statement is
dropped, and parsing resumes at the next statement. Callers should not
evaluate a program whose error list is non-empty.
"""

from __future__ import annotations

import functools
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from . import token
from .ast import (
    Program, Statement, Expression, ExpressionStatement, ValueStatement,
    UpdateStatement, ReturnStatement, BlockStatement, IntegerLiteral,
    BooleanLiteral, StringLiteral, Identifier, PrefixExpression,
    InfixExpression, IfExpression, FunctionLiteral, CallExpression,
    ArrayLiteral, IndexExpression, MapLiteral,
)
from .lexer import Lexer
from .token import Token

# Precedence levels, lowest first
LOWEST = 1
EQUALS = 2       # == !=
LOGIC = 3        # && || and or
LESSGREATER = 4  # < > <= >=
SUM = 5          # + - += -=
PRODUCT = 6      # * / *= /=
PREFIX = 7       # !x -x ++x --x
CALL = 8         # f(x) a[i]

PRECEDENCES: Dict[str, int] = {
    token.EQ: EQUALS,
    token.NOT_EQ: EQUALS,
    token.AND: LOGIC,
    token.OR: LOGIC,
    token.LT: LESSGREATER,
    token.GT: LESSGREATER,
    token.LTEQ: LESSGREATER,
    token.GTEQ: LESSGREATER,
    token.PLUS: SUM,
    token.MINUS: SUM,
    token.PLUSEQ: SUM,
    token.MINUSEQ: SUM,
    token.ASTERISK: PRODUCT,
    token.SLASH: PRODUCT,
    token.MULEQ: PRODUCT,
    token.SLASHEQ: PRODUCT,
    token.LPAREN: CALL,
    token.LBRACKET: CALL,
}

INT64_MAX = 2 ** 63 - 1

PrefixParseFn = Callable[[], Optional[Expression]]
InfixParseFn = Callable[[Expression], Optional[Expression]]


def traced(method):
    """Report entry and exit of a parse method through the parser's trace hook."""
    name = method.__name__

    @functools.wraps(method)
    def wrapper(self, *args):
        if self.trace_fn is None:
            return method(self, *args)
        self.trace_fn(f"{'  ' * self.depth}BEGIN {name} at {self.current}")
        self.depth += 1
        try:
            return method(self, *args)
        finally:
            self.depth -= 1
            self.trace_fn(f"{'  ' * self.depth}END {name}")

    return wrapper


class Parser:
    def __init__(self, lexer: Union[Lexer, Iterable[Token]],
                 trace: Optional[Callable[[str], None]] = None):
        if isinstance(lexer, Lexer):
            self.tokens: Iterator[Token] = lexer.tokens()
        else:
            self.tokens = iter(lexer)
        self.errors: List[str] = []
        self.trace_fn = trace
        self.depth = 0
        self.eof_token = Token(token.EOF, '')

        self.current: Token = self.eof_token
        self.peek: Token = self.eof_token
        self.consume_token()
        self.consume_token()

        self.prefix_parse_fns: Dict[str, PrefixParseFn] = {}
        self.register_prefix(token.IDENT, self.parse_identifier)
        self.register_prefix(token.INT, self.parse_integer_literal)
        self.register_prefix(token.STRING, self.parse_string_literal)
        self.register_prefix(token.LBRACKET, self.parse_array_literal)
        self.register_prefix(token.LBRACE, self.parse_map_literal)
        self.register_prefix(token.BANG, self.parse_prefix_expression)
        self.register_prefix(token.INCREMENT, self.parse_prefix_expression)
        self.register_prefix(token.DECREMENT, self.parse_prefix_expression)
        self.register_prefix(token.MINUS, self.parse_prefix_expression)
        self.register_prefix(token.TRUE, self.parse_boolean)
        self.register_prefix(token.FALSE, self.parse_boolean)
        self.register_prefix(token.LPAREN, self.parse_grouped_expression)
        self.register_prefix(token.IF, self.parse_if_expression)
        self.register_prefix(token.FUNCTION, self.parse_function_literal)

        self.infix_parse_fns: Dict[str, InfixParseFn] = {}
        for kind in (
            token.PLUS, token.MINUS, token.ASTERISK, token.SLASH,
            token.EQ, token.NOT_EQ, token.LT, token.GT, token.LTEQ, token.GTEQ,
            token.AND, token.OR,
            token.PLUSEQ, token.MINUSEQ, token.MULEQ, token.SLASHEQ,
        ):
            self.register_infix(kind, self.parse_infix_expression)
        self.register_infix(token.LPAREN, self.parse_call_expression)
        self.register_infix(token.LBRACKET, self.parse_index_expression)

    def register_prefix(self, kind: str, fn: PrefixParseFn) -> None:
        self.prefix_parse_fns[kind] = fn

    def register_infix(self, kind: str, fn: InfixParseFn) -> None:
        self.infix_parse_fns[kind] = fn

    # Token window

    def consume_token(self) -> None:
        self.current = self.peek
        nxt = next(self.tokens, None)
        if nxt is None:
            nxt = self.eof_token
        elif nxt.type == token.EOF:
            self.eof_token = nxt
        self.peek = nxt

    def current_is(self, kind: str) -> bool:
        return self.current.type == kind

    def peek_is(self, kind: str) -> bool:
        return self.peek.type == kind

    def expect_peek(self, kind: str) -> bool:
        if self.peek_is(kind):
            self.consume_token()
            return True
        self.peek_error(kind)
        return False

    def peek_precedence(self) -> int:
        return PRECEDENCES.get(self.peek.type, LOWEST)

    def current_precedence(self) -> int:
        return PRECEDENCES.get(self.current.type, LOWEST)

    # Errors

    def peek_error(self, kind: str) -> None:
        self.errors.append(
            f"expected next token to be {kind}, got {self.peek.type} instead "
            f"(line {self.peek.line}, column {self.peek.column})"
        )

    def no_prefix_parse_fn_error(self, kind: str) -> None:
        self.errors.append(f"no prefix parse function for {kind} found")

    # Statements

    def parse_program(self) -> Program:
        statements: List[Statement] = []
        try:
            while not self.current_is(token.EOF):
                stmt = self.parse_statement()
                if stmt is not None:
                    statements.append(stmt)
                self.consume_token()
        except RecursionError:
            self.depth = 0
            self.errors.append('maximum nesting depth exceeded')
        return Program(statements)

    def parse_statement(self) -> Optional[Statement]:
        kind = self.current.type
        if kind == token.VALUE:
            return self.parse_value_statement()
        if kind == token.UPDATE:
            return self.parse_update_statement()
        if kind == token.RETURN:
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_binding(self) -> Optional[Tuple[Token, Identifier, Expression]]:
        """Parse `<keyword> IDENT = <expr> [;]`, returning (token, name, value)."""
        start = self.current
        if not self.expect_peek(token.IDENT):
            return None
        name = Identifier(self.current.literal, token=self.current)
        if not self.expect_peek(token.ASSIGN):
            return None
        self.consume_token()
        value = self.parse_expression(LOWEST)
        if value is None:
            return None
        if self.peek_is(token.SEMICOLON):
            self.consume_token()
        return start, name, value

    @traced
    def parse_value_statement(self) -> Optional[ValueStatement]:
        parts = self.parse_binding()
        if parts is None:
            return None
        start, name, value = parts
        return ValueStatement(name, value, token=start)

    @traced
    def parse_update_statement(self) -> Optional[UpdateStatement]:
        parts = self.parse_binding()
        if parts is None:
            return None
        start, name, value = parts
        return UpdateStatement(name, value, token=start)

    @traced
    def parse_return_statement(self) -> Optional[ReturnStatement]:
        start = self.current
        self.consume_token()
        value = self.parse_expression(LOWEST)
        # Everything up to the semicolon belongs to the return statement.
        while not self.current_is(token.SEMICOLON):
            if self.current_is(token.EOF) or self.peek_is(token.EOF) or self.peek_is(token.CLOSEBLOCK):
                break
            self.consume_token()
        if value is None:
            return None
        return ReturnStatement(value, token=start)

    @traced
    def parse_expression_statement(self) -> Optional[ExpressionStatement]:
        start = self.current
        expression = self.parse_expression(LOWEST)
        if self.peek_is(token.SEMICOLON):
            self.consume_token()
        if expression is None:
            return None
        return ExpressionStatement(expression, token=start)

    @traced
    def parse_block_statement(self) -> BlockStatement:
        start = self.current
        statements: List[Statement] = []
        self.consume_token()
        while not self.current_is(token.CLOSEBLOCK) and not self.current_is(token.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.consume_token()
        if self.current_is(token.EOF):
            self.errors.append(
                f"unterminated block opened at line {start.line}, column {start.column}"
            )
        return BlockStatement(statements, token=start)

    # Expressions

    @traced
    def parse_expression(self, precedence: int) -> Optional[Expression]:
        prefix = self.prefix_parse_fns.get(self.current.type)
        if prefix is None:
            self.no_prefix_parse_fn_error(self.current.type)
            return None
        left = prefix()
        if left is None:
            return None

        while not self.peek_is(token.SEMICOLON) and precedence < self.peek_precedence():
            infix = self.infix_parse_fns.get(self.peek.type)
            if infix is None:
                return left
            self.consume_token()
            left = infix(left)
            if left is None:
                return None
        return left

    def parse_identifier(self) -> Expression:
        return Identifier(self.current.literal, token=self.current)

    def parse_integer_literal(self) -> Optional[Expression]:
        literal = self.current.literal
        try:
            value = int(literal, 10)
        except ValueError:
            value = None
        if value is None or value > INT64_MAX:
            self.errors.append(f'could not parse "{literal}" as integer')
            return None
        return IntegerLiteral(value, token=self.current)

    def parse_string_literal(self) -> Expression:
        return StringLiteral(self.current.literal, token=self.current)

    def parse_boolean(self) -> Expression:
        return BooleanLiteral(self.current_is(token.TRUE), token=self.current)

    def parse_grouped_expression(self) -> Optional[Expression]:
        self.consume_token()
        expression = self.parse_expression(LOWEST)
        if expression is None:
            return None
        if not self.expect_peek(token.RPAREN):
            return None
        return expression

    @traced
    def parse_prefix_expression(self) -> Optional[Expression]:
        start = self.current
        self.consume_token()
        right = self.parse_expression(PREFIX)
        if right is None:
            return None
        return PrefixExpression(start.literal, right, token=start)

    @traced
    def parse_infix_expression(self, left: Expression) -> Optional[Expression]:
        start = self.current
        precedence = self.current_precedence()
        self.consume_token()
        right = self.parse_expression(precedence)
        if right is None:
            return None
        return InfixExpression(start.literal, left, right, token=start)

    @traced
    def parse_if_expression(self) -> Optional[Expression]:
        start = self.current
        if not self.expect_peek(token.LPAREN):
            return None
        self.consume_token()
        condition = self.parse_expression(LOWEST)
        if condition is None:
            return None
        if not self.expect_peek(token.RPAREN):
            return None
        if not self.expect_peek(token.OPENBLOCK):
            return None
        consequence = self.parse_block_statement()

        alternative = None
        if self.peek_is(token.ELSE):
            self.consume_token()
            if not self.expect_peek(token.OPENBLOCK):
                return None
            alternative = self.parse_block_statement()
        return IfExpression(condition, consequence, alternative, token=start)

    @traced
    def parse_function_literal(self) -> Optional[Expression]:
        start = self.current
        if not self.expect_peek(token.LPAREN):
            return None
        parameters = self.parse_function_parameters()
        if parameters is None:
            return None
        if not self.expect_peek(token.OPENBLOCK):
            return None
        body = self.parse_block_statement()
        return FunctionLiteral(parameters, body, token=start)

    def parse_function_parameters(self) -> Optional[List[Identifier]]:
        identifiers: List[Identifier] = []
        if self.peek_is(token.RPAREN):
            self.consume_token()
            return identifiers

        if not self.expect_peek(token.IDENT):
            return None
        identifiers.append(Identifier(self.current.literal, token=self.current))
        while self.peek_is(token.COMMA):
            self.consume_token()
            if not self.expect_peek(token.IDENT):
                return None
            identifiers.append(Identifier(self.current.literal, token=self.current))

        if not self.expect_peek(token.RPAREN):
            return None
        return identifiers

    @traced
    def parse_call_expression(self, function: Expression) -> Optional[Expression]:
        start = self.current
        arguments = self.parse_expression_list(token.RPAREN)
        if arguments is None:
            return None
        return CallExpression(function, arguments, token=start)

    @traced
    def parse_index_expression(self, left: Expression) -> Optional[Expression]:
        start = self.current
        self.consume_token()
        index = self.parse_expression(LOWEST)
        if index is None:
            return None
        if not self.expect_peek(token.RBRACKET):
            return None
        return IndexExpression(left, index, token=start)

    def parse_array_literal(self) -> Optional[Expression]:
        start = self.current
        elements = self.parse_expression_list(token.RBRACKET)
        if elements is None:
            return None
        return ArrayLiteral(elements, token=start)

    def parse_expression_list(self, end: str) -> Optional[List[Expression]]:
        items: List[Expression] = []
        if self.peek_is(end):
            self.consume_token()
            return items

        self.consume_token()
        item = self.parse_expression(LOWEST)
        if item is None:
            return None
        items.append(item)
        while self.peek_is(token.COMMA):
            self.consume_token()
            self.consume_token()
            item = self.parse_expression(LOWEST)
            if item is None:
                return None
            items.append(item)

        if not self.expect_peek(end):
            return None
        return items

    def parse_map_literal(self) -> Optional[Expression]:
        start = self.current
        pairs = []
        while not self.peek_is(token.RBRACE):
            if self.peek_is(token.EOF):
                break
            self.consume_token()
            key = self.parse_expression(LOWEST)
            if key is None:
                return None
            if not self.expect_peek(token.COLON):
                return None
            self.consume_token()
            value = self.parse_expression(LOWEST)
            if value is None:
                return None
            pairs.append((key, value))
            if not self.peek_is(token.RBRACE) and not self.expect_peek(token.COMMA):
                return None
        if not self.expect_peek(token.RBRACE):
            return None
        return MapLiteral(pairs, token=start)
