"""Abstract Syntax Tree (AST) definitions for the Sepia language.

The parser produces these nodes and the interpreter walks them. Nodes
fall into two families, statements and expressions. Every node keeps the
token it was parsed from and renders back to a canonical, fully
parenthesised source form through `str()`, which is what the parser
tests compare against.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .token import Token


@dataclass
class Node:
    """Base class for all AST nodes."""

    def token_literal(self) -> str:
        tok = getattr(self, 'token', None)
        return tok.literal if tok is not None else ''


@dataclass
class Statement(Node):
    pass


@dataclass
class Expression(Node):
    pass


###############################################################################
# Statements
###############################################################################


@dataclass
class Program(Node):
    statements: List[Statement]

    def __str__(self) -> str:
        return ''.join(str(s) for s in self.statements)


@dataclass
class ExpressionStatement(Statement):
    expression: Optional[Expression]
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return str(self.expression) if self.expression is not None else ''


@dataclass
class ValueStatement(Statement):
    name: 'Identifier'
    value: Optional[Expression]
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return f"value {self.name} = {self.value};"


@dataclass
class UpdateStatement(Statement):
    name: 'Identifier'
    value: Optional[Expression]
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return f"update {self.name} = {self.value};"


@dataclass
class ReturnStatement(Statement):
    value: Optional[Expression]
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return f"return {self.value};"


@dataclass
class BlockStatement(Statement):
    statements: List[Statement]
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return ' '.join(str(s) for s in self.statements)


###############################################################################
# Expressions
###############################################################################


@dataclass
class IntegerLiteral(Expression):
    value: int
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return str(self.value)


@dataclass
class BooleanLiteral(Expression):
    value: bool
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return 'true' if self.value else 'false'


@dataclass
class StringLiteral(Expression):
    value: str
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return f'"{self.value}"'


@dataclass
class Identifier(Expression):
    value: str
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return self.value


@dataclass
class PrefixExpression(Expression):
    operator: str
    right: Optional[Expression]
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


@dataclass
class InfixExpression(Expression):
    operator: str
    left: Expression
    right: Optional[Expression]
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass
class IfExpression(Expression):
    condition: Expression
    consequence: BlockStatement
    alternative: Optional[BlockStatement] = None
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        out = f"if {self.condition} -> {self.consequence} end"
        if self.alternative is not None:
            out += f" else -> {self.alternative} end"
        return out


@dataclass
class FunctionLiteral(Expression):
    parameters: List[Identifier]
    body: BlockStatement
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        params = ', '.join(str(p) for p in self.parameters)
        return f"fn({params}) -> {self.body} end"


@dataclass
class CallExpression(Expression):
    function: Expression
    arguments: List[Expression]
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        args = ', '.join(str(a) for a in self.arguments)
        return f"{self.function}({args})"


@dataclass
class ArrayLiteral(Expression):
    elements: List[Expression]
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return '[' + ', '.join(str(e) for e in self.elements) + ']'


@dataclass
class IndexExpression(Expression):
    left: Expression
    index: Optional[Expression]
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return f"({self.left}[{self.index}])"


@dataclass
class MapLiteral(Expression):
    pairs: List[Tuple[Expression, Expression]]  # source order; duplicates resolved at runtime
    token: Optional[Token] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return '{' + ', '.join(f"{k}: {v}" for k, v in self.pairs) + '}'
