"""JSON serialization/deserialization for Sepia AST.

This module converts between Sepia AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Token positions are not
kept; everything the interpreter needs survives the round trip.
"""

from __future__ import annotations

from typing import Any

from .ast import (
    Program,
    ExpressionStatement,
    ValueStatement,
    UpdateStatement,
    ReturnStatement,
    BlockStatement,
    IntegerLiteral,
    BooleanLiteral,
    StringLiteral,
    Identifier,
    PrefixExpression,
    InfixExpression,
    IfExpression,
    FunctionLiteral,
    CallExpression,
    ArrayLiteral,
    IndexExpression,
    MapLiteral,
)


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    # Statements
    if isinstance(node, Program):
        return {"type": "Program", "statements": [ast_to_obj(s) for s in node.statements]}
    if isinstance(node, ExpressionStatement):
        return {"type": "ExpressionStatement", "expression": ast_to_obj(node.expression)}
    if isinstance(node, ValueStatement):
        return {"type": "ValueStatement", "name": node.name.value, "value": ast_to_obj(node.value)}
    if isinstance(node, UpdateStatement):
        return {"type": "UpdateStatement", "name": node.name.value, "value": ast_to_obj(node.value)}
    if isinstance(node, ReturnStatement):
        return {"type": "ReturnStatement", "value": ast_to_obj(node.value)}
    if isinstance(node, BlockStatement):
        return {"type": "BlockStatement", "statements": [ast_to_obj(s) for s in node.statements]}

    # Expressions
    if isinstance(node, IntegerLiteral):
        return {"type": "IntegerLiteral", "value": node.value}
    if isinstance(node, BooleanLiteral):
        return {"type": "BooleanLiteral", "value": node.value}
    if isinstance(node, StringLiteral):
        return {"type": "StringLiteral", "value": node.value}
    if isinstance(node, Identifier):
        return {"type": "Identifier", "value": node.value}
    if isinstance(node, PrefixExpression):
        return {"type": "PrefixExpression", "operator": node.operator, "right": ast_to_obj(node.right)}
    if isinstance(node, InfixExpression):
        return {
            "type": "InfixExpression",
            "operator": node.operator,
            "left": ast_to_obj(node.left),
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, IfExpression):
        return {
            "type": "IfExpression",
            "condition": ast_to_obj(node.condition),
            "consequence": ast_to_obj(node.consequence),
            "alternative": ast_to_obj(node.alternative),
        }
    if isinstance(node, FunctionLiteral):
        return {
            "type": "FunctionLiteral",
            "parameters": [p.value for p in node.parameters],
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, CallExpression):
        return {
            "type": "CallExpression",
            "function": ast_to_obj(node.function),
            "arguments": [ast_to_obj(a) for a in node.arguments],
        }
    if isinstance(node, ArrayLiteral):
        return {"type": "ArrayLiteral", "elements": [ast_to_obj(e) for e in node.elements]}
    if isinstance(node, IndexExpression):
        return {"type": "IndexExpression", "left": ast_to_obj(node.left), "index": ast_to_obj(node.index)}
    if isinstance(node, MapLiteral):
        return {"type": "MapLiteral", "pairs": [[ast_to_obj(k), ast_to_obj(v)] for (k, v) in node.pairs]}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")

    if t == "Program":
        return Program(statements=[ast_from_obj(s) for s in obj["statements"]])
    if t == "ExpressionStatement":
        return ExpressionStatement(expression=ast_from_obj(obj["expression"]))
    if t == "ValueStatement":
        return ValueStatement(name=Identifier(obj["name"]), value=ast_from_obj(obj["value"]))
    if t == "UpdateStatement":
        return UpdateStatement(name=Identifier(obj["name"]), value=ast_from_obj(obj["value"]))
    if t == "ReturnStatement":
        return ReturnStatement(value=ast_from_obj(obj["value"]))
    if t == "BlockStatement":
        return BlockStatement(statements=[ast_from_obj(s) for s in obj["statements"]])

    if t == "IntegerLiteral":
        return IntegerLiteral(value=int(obj["value"]))
    if t == "BooleanLiteral":
        return BooleanLiteral(value=bool(obj["value"]))
    if t == "StringLiteral":
        return StringLiteral(value=obj["value"])
    if t == "Identifier":
        return Identifier(value=obj["value"])
    if t == "PrefixExpression":
        return PrefixExpression(operator=obj["operator"], right=ast_from_obj(obj["right"]))
    if t == "InfixExpression":
        return InfixExpression(
            operator=obj["operator"],
            left=ast_from_obj(obj["left"]),
            right=ast_from_obj(obj["right"]),
        )
    if t == "IfExpression":
        return IfExpression(
            condition=ast_from_obj(obj["condition"]),
            consequence=ast_from_obj(obj["consequence"]),
            alternative=ast_from_obj(obj.get("alternative")),
        )
    if t == "FunctionLiteral":
        return FunctionLiteral(
            parameters=[Identifier(p) for p in obj["parameters"]],
            body=ast_from_obj(obj["body"]),
        )
    if t == "CallExpression":
        return CallExpression(
            function=ast_from_obj(obj["function"]),
            arguments=[ast_from_obj(a) for a in obj["arguments"]],
        )
    if t == "ArrayLiteral":
        return ArrayLiteral(elements=[ast_from_obj(e) for e in obj["elements"]])
    if t == "IndexExpression":
        return IndexExpression(left=ast_from_obj(obj["left"]), index=ast_from_obj(obj["index"]))
    if t == "MapLiteral":
        return MapLiteral(pairs=[(ast_from_obj(k), ast_from_obj(v)) for (k, v) in obj["pairs"]])

    raise ValueError(f"Unknown AST node type: {t}")
