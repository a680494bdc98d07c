"""Interpreter for the Sepia language.

This module ties the pipeline together. `lex` turns source into tokens,
`parse` builds a `Program` with the Pratt parser, and the `Interpreter`
walks the tree against a chain of environments.

Runtime errors are Sepia values (`ErrorVal`). While evaluating, an error
travels as a `SepiaError` exception so that every enclosing step stops at
the first failure; `Interpreter.run` catches it and hands the `ErrorVal`
back as the program's result. `return` works the other way round: the
statement produces a `ReturnValue` wrapper that blocks pass through
untouched until a function call or the program itself unwraps it. When
the wrapper reaches a position that consumes a value (an operand, an
argument, the right side of a binding) it is raised as `ReturnSignal`
instead, so it never becomes a user-visible value.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .ast import (
    Node, Program, ExpressionStatement, ValueStatement, UpdateStatement,
    ReturnStatement, BlockStatement, IntegerLiteral, BooleanLiteral,
    StringLiteral, Identifier, PrefixExpression, InfixExpression,
    IfExpression, FunctionLiteral, CallExpression, ArrayLiteral,
    IndexExpression, MapLiteral,
)
from .builtin_function import BuiltinFunction
from .builtins import BUILTINS
from .environment import Environment
from .errors import SepiaError, ParseFailure, ReturnSignal, runtime_error
from .lexer import Lexer, tokenize
from .objects import (
    TRUE, FALSE, NULL, Value, IntegerVal, BooleanVal, StringVal, ArrayVal,
    MapVal, MapPair, FunctionVal, ReturnValue, ErrorVal,
    native_bool, is_truthy, is_hashable, map_key, wrap_int64, trunc_div,
)
from .parser import Parser
from .token import Token

# compound assignment operator -> arithmetic operator it applies
COMPOUND_OPERATORS = {
    '+=': '+',
    '-=': '-',
    '*=': '*',
    '/=': '/',
}


###############################################################################
# Pipeline helpers
###############################################################################


def lex(source: str) -> List[Token]:
    """Convert source code into a list of tokens ending with EOF."""
    return tokenize(source)


def parse(source: Union[str, Iterable[Token]], trace=None) -> Tuple[Program, List[str]]:
    """Parse source text (or an iterable of tokens) into a Program.

    Returns the program together with the parser's error list. The
    program should not be evaluated when the list is non-empty.
    """
    lexer = Lexer(source) if isinstance(source, str) else source
    parser = Parser(lexer, trace=trace)
    program = parser.parse_program()
    return program, parser.errors


###############################################################################
# Interpreter implementation
###############################################################################


class Interpreter:
    """Core interpreter that evaluates Sepia ASTs."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt',
                 builtins: Optional[Mapping[str, BuiltinFunction]] = None):
        self.global_env = Environment.new_root()
        self.builtins = BUILTINS if builtins is None else builtins
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def __enter__(self) -> 'Interpreter':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # Public API
    def parse(self, source: str) -> Program:
        """Parse `source`, raising ParseFailure if the parser reported errors."""
        trace = self.debug if self.debug_level >= 4 else None
        program, errors = parse(source, trace=trace)
        if self.debug_level >= 1:
            self.debug(f"parsed {len(program.statements)} statements, {len(errors)} errors")
        if errors:
            raise ParseFailure(errors)
        return program

    def run(self, program: Program, env: Optional[Environment] = None) -> Value:
        """Evaluate a whole program and return its result.

        Errors come back as the `ErrorVal` that stopped evaluation; they
        are never raised to the caller.
        """
        if env is None:
            env = self.global_env
        if self.debug_level >= 1:
            self.debug('run program')
        try:
            result = self.evaluate(program, env)
        except SepiaError as ex:
            result = ex.err
        except RecursionError:
            result = ErrorVal('maximum recursion depth exceeded')
        if self.debug_level >= 1:
            self.debug(f"result {result.type()}: {result.inspect()}")
        return result

    def evaluate(self, node: Node, env: Environment) -> Value:
        # Statements
        if isinstance(node, Program):
            return self.eval_program(node, env)
        if isinstance(node, BlockStatement):
            return self.eval_block(node, env)
        if isinstance(node, ExpressionStatement):
            return self.evaluate(node.expression, env)
        if isinstance(node, ValueStatement):
            value = self.eval_operand(node.value, env)
            env.set(node.name.value, value)
            if self.debug_level >= 2:
                self.debug(f"value {node.name.value} = {value.inspect()}")
            return NULL
        if isinstance(node, UpdateStatement):
            value = self.eval_operand(node.value, env)
            self.assign(node.name, value, env)
            return NULL
        if isinstance(node, ReturnStatement):
            return ReturnValue(self.eval_operand(node.value, env))

        # Expressions
        if isinstance(node, IntegerLiteral):
            return IntegerVal(node.value)
        if isinstance(node, BooleanLiteral):
            return native_bool(node.value)
        if isinstance(node, StringLiteral):
            return StringVal(node.value)
        if isinstance(node, Identifier):
            return self.eval_identifier(node, env)
        if isinstance(node, PrefixExpression):
            right = self.eval_operand(node.right, env)
            return self.eval_prefix_expression(node, right, env)
        if isinstance(node, InfixExpression):
            # The right operand is evaluated first.
            right = self.eval_operand(node.right, env)
            left = self.eval_operand(node.left, env)
            result = self.eval_infix_expression(node.operator, left, right)
            if node.operator in COMPOUND_OPERATORS:
                if not isinstance(node.left, Identifier):
                    raise runtime_error(f"invalid assignment target: {node.left}")
                self.assign(node.left, result, env)
            return result
        if isinstance(node, IfExpression):
            return self.eval_if_expression(node, env)
        if isinstance(node, FunctionLiteral):
            return FunctionVal(node.parameters, node.body, env)
        if isinstance(node, CallExpression):
            function = self.eval_operand(node.function, env)
            args = [self.eval_operand(arg, env) for arg in node.arguments]
            return self.apply_function(function, args)
        if isinstance(node, ArrayLiteral):
            return ArrayVal([self.eval_operand(el, env) for el in node.elements])
        if isinstance(node, IndexExpression):
            left = self.eval_operand(node.left, env)
            index = self.eval_operand(node.index, env)
            return self.eval_index_expression(left, index)
        if isinstance(node, MapLiteral):
            return self.eval_map_literal(node, env)
        raise runtime_error(f"unknown node type: {type(node).__name__}")

    def eval_operand(self, node: Node, env: Environment) -> Value:
        """Evaluate a node whose value is consumed by an enclosing expression.

        A `return` reached inside it leaves the whole expression as a
        `ReturnSignal`, caught by the enclosing call or the program.
        """
        value = self.evaluate(node, env)
        if isinstance(value, ReturnValue):
            raise ReturnSignal(value)
        return value

    def eval_program(self, program: Program, env: Environment) -> Value:
        result: Value = NULL
        for stmt in program.statements:
            try:
                result = self.evaluate(stmt, env)
            except ReturnSignal as signal:
                return signal.value.value
            if isinstance(result, ReturnValue):
                return result.value
        return result

    def eval_block(self, block: BlockStatement, env: Environment) -> Value:
        result: Value = NULL
        for stmt in block.statements:
            result = self.evaluate(stmt, env)
            # propagate return values up to the enclosing call
            if isinstance(result, ReturnValue):
                return result
        return result

    def assign(self, name: Identifier, value: Value, env: Environment) -> None:
        if not env.update(name.value, value):
            raise runtime_error(f"identifier not found: {name.value}")
        if self.debug_level >= 2:
            self.debug(f"update {name.value} = {value.inspect()}")

    def eval_identifier(self, node: Identifier, env: Environment) -> Value:
        value, found = env.get(node.value)
        if found:
            return value
        builtin = self.builtins.get(node.value)
        if builtin is not None:
            return builtin
        raise runtime_error(f"identifier not found: {node.value}")

    def eval_prefix_expression(self, node: PrefixExpression, right: Value, env: Environment) -> Value:
        op = node.operator
        if op == '!':
            if right is TRUE:
                return FALSE
            if right is FALSE or right is NULL:
                return TRUE
            return FALSE
        if op == '-':
            if not isinstance(right, IntegerVal):
                raise runtime_error(f"unknown operator: -{right.type()}")
            return IntegerVal(wrap_int64(-right.value))
        if op in ('++', '--') and isinstance(right, IntegerVal):
            step = 1 if op == '++' else -1
            result = IntegerVal(wrap_int64(right.value + step))
            if isinstance(node.right, Identifier):
                self.assign(node.right, result, env)
            return result
        raise runtime_error(f"unknown operator: {op}{right.type()}")

    def eval_infix_expression(self, op: str, left: Value, right: Value) -> Value:
        if isinstance(left, IntegerVal) and isinstance(right, IntegerVal):
            return self.eval_integer_infix(op, left, right)
        if op == '==':
            return native_bool(left is right)
        if op == '!=':
            return native_bool(left is not right)
        if isinstance(left, BooleanVal) and isinstance(right, BooleanVal):
            if op in ('||', 'or'):
                return native_bool(left.value or right.value)
            if op in ('&&', 'and'):
                return native_bool(left.value and right.value)
        if left.type() != right.type():
            raise runtime_error(f"type mismatch: {left.type()} {op} {right.type()}")
        if isinstance(left, StringVal) and isinstance(right, StringVal):
            if COMPOUND_OPERATORS.get(op, op) == '+':
                return StringVal(left.value + right.value)
        raise runtime_error(f"unknown operator: {left.type()} {op} {right.type()}")

    def eval_integer_infix(self, op: str, left: IntegerVal, right: IntegerVal) -> Value:
        a, b = left.value, right.value
        arith = COMPOUND_OPERATORS.get(op, op)
        if arith == '+':
            return IntegerVal(wrap_int64(a + b))
        if arith == '-':
            return IntegerVal(wrap_int64(a - b))
        if arith == '*':
            return IntegerVal(wrap_int64(a * b))
        if arith == '/':
            if b == 0:
                raise runtime_error('division by zero')
            return IntegerVal(trunc_div(a, b))
        if op == '<':
            return native_bool(a < b)
        if op == '>':
            return native_bool(a > b)
        if op == '<=':
            return native_bool(a <= b)
        if op == '>=':
            return native_bool(a >= b)
        if op == '==':
            return native_bool(a == b)
        if op == '!=':
            return native_bool(a != b)
        raise runtime_error(f"unknown operator: {left.type()} {op} {right.type()}")

    def eval_if_expression(self, node: IfExpression, env: Environment) -> Value:
        condition = self.eval_operand(node.condition, env)
        truthy = is_truthy(condition)
        if self.debug_level >= 3:
            self.debug(f"if condition {condition.inspect()} -> {truthy}")
        if truthy:
            return self.evaluate(node.consequence, env)
        if node.alternative is not None:
            return self.evaluate(node.alternative, env)
        return NULL

    def apply_function(self, function: Value, args: List[Value]) -> Value:
        if isinstance(function, FunctionVal):
            if len(args) != len(function.parameters):
                raise runtime_error(
                    f"wrong number of arguments: want={len(function.parameters)}, got={len(args)}"
                )
            # Parameters live in a fresh scope whose parent is the closure's scope
            call_env = function.env.new_child()
            for param, arg in zip(function.parameters, args):
                call_env.set(param.value, arg)
            if self.debug_level >= 3:
                self.debug(f"call {function.inspect()} with ({', '.join(a.inspect() for a in args)})")
            try:
                result = self.evaluate(function.body, call_env)
            except ReturnSignal as signal:
                result = signal.value
            if isinstance(result, ReturnValue):
                return result.value
            return result
        if isinstance(function, BuiltinFunction):
            if function.arity is not None and len(args) != function.arity:
                raise runtime_error(
                    f"wrong number of arguments: want={function.arity}, got={len(args)}"
                )
            if self.debug_level >= 3:
                self.debug(f"call {function.inspect()}")
            result = function.fn(args)
            if isinstance(result, ErrorVal):
                raise SepiaError(result)
            return result
        raise runtime_error(f"not a function: {function.type()}")

    def eval_index_expression(self, left: Value, index: Value) -> Value:
        if isinstance(left, ArrayVal) and isinstance(index, IntegerVal):
            i = index.value
            if i < 0 or i >= len(left.elements):
                return NULL
            return left.elements[i]
        if isinstance(left, MapVal):
            if not is_hashable(index):
                raise runtime_error(f"unusable as map key: {index.type()}")
            pair = left.pairs.get(map_key(index))
            return pair.value if pair is not None else NULL
        raise runtime_error(f"index operator not supported: {left.type()}")

    def eval_map_literal(self, node: MapLiteral, env: Environment) -> Value:
        pairs: Dict[Any, MapPair] = {}
        for key_node, value_node in node.pairs:
            key = self.eval_operand(key_node, env)
            if not is_hashable(key):
                raise runtime_error(f"unusable as map key: {key.type()}")
            value = self.eval_operand(value_node, env)
            pairs[map_key(key)] = MapPair(key, value)
        return MapVal(pairs)


def evaluate(program: Program, env: Optional[Environment] = None) -> Value:
    """Evaluate `program` in `env` (a fresh root scope by default)."""
    interpreter = Interpreter()
    return interpreter.run(program, env)


def run_program(source: str, env: Optional[Environment] = None, debug_level: int = 0) -> Value:
    """Convenience function to parse and evaluate a Sepia program from a source string."""
    with Interpreter(debug_level=debug_level) as interpreter:
        program = interpreter.parse(source)
        return interpreter.run(program, env)


def run_file(file_path: str, debug_level: int = 0) -> Value:
    """Parse and evaluate a Sepia file, returning the program's result."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    return run_program(source, debug_level=debug_level)
