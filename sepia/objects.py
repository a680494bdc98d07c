"""Runtime values for the Sepia interpreter.

Every value the interpreter produces is an instance of one of the
classes below. Each exposes `type()`, the tag used in error messages and
dispatch, and `inspect()`, the text shown to users. `TRUE`, `FALSE` and
`NULL` are canonical singletons: the interpreter never builds another
boolean or null, so identity comparison is enough to test them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from .ast import BlockStatement, Identifier
    from .environment import Environment

INTEGER = 'INTEGER'
BOOLEAN = 'BOOLEAN'
STRING = 'STRING'
NULL_TYPE = 'NULL'
ARRAY = 'ARRAY'
MAP = 'MAP'
FUNCTION = 'FUNCTION'
BUILTIN = 'BUILTIN'
RETURN_VALUE = 'RETURN_VALUE'
ERROR = 'ERROR'

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

MapKey = Tuple[str, Any]


class Value:
    """Base class for runtime values."""

    def type(self) -> str:
        raise NotImplementedError

    def inspect(self) -> str:
        raise NotImplementedError


@dataclass
class IntegerVal(Value):
    value: int

    def type(self) -> str:
        return INTEGER

    def inspect(self) -> str:
        return str(self.value)


@dataclass(eq=False)
class BooleanVal(Value):
    value: bool

    def type(self) -> str:
        return BOOLEAN

    def inspect(self) -> str:
        return 'true' if self.value else 'false'


@dataclass
class StringVal(Value):
    value: str

    def type(self) -> str:
        return STRING

    def inspect(self) -> str:
        return self.value


class NullVal(Value):
    """Marker object for the Sepia `null` value."""

    def type(self) -> str:
        return NULL_TYPE

    def inspect(self) -> str:
        return 'null'

    def __repr__(self) -> str:
        return 'NULL'


@dataclass
class ArrayVal(Value):
    elements: List[Value]

    def type(self) -> str:
        return ARRAY

    def inspect(self) -> str:
        return '[' + ', '.join(e.inspect() for e in self.elements) + ']'


@dataclass
class MapPair:
    key: Value
    value: Value


@dataclass
class MapVal(Value):
    """A map from hashable values to values.

    `pairs` is keyed by `map_key(key)` so that two distinct string objects
    with the same text find the same entry. Each entry remembers the
    original key object for display.
    """
    pairs: Dict[MapKey, MapPair] = field(default_factory=dict)

    def type(self) -> str:
        return MAP

    def inspect(self) -> str:
        entries = ', '.join(f"{p.key.inspect()}: {p.value.inspect()}" for p in self.pairs.values())
        return '{' + entries + '}'


@dataclass(eq=False)
class FunctionVal(Value):
    """A user-defined function closed over the environment it was created in."""
    parameters: List['Identifier']
    body: 'BlockStatement'
    env: 'Environment' = field(repr=False)

    def type(self) -> str:
        return FUNCTION

    def inspect(self) -> str:
        params = ', '.join(str(p) for p in self.parameters)
        return f"fn({params}) -> {self.body} end"


@dataclass
class ReturnValue(Value):
    """Carries a returned value out through enclosing blocks to the call site."""
    value: Value

    def type(self) -> str:
        return RETURN_VALUE

    def inspect(self) -> str:
        return self.value.inspect()


@dataclass
class ErrorVal(Value):
    message: str

    def type(self) -> str:
        return ERROR

    def inspect(self) -> str:
        return f"ERROR: {self.message}"


TRUE = BooleanVal(True)
FALSE = BooleanVal(False)
NULL = NullVal()


def native_bool(value: bool) -> BooleanVal:
    return TRUE if value else FALSE


def is_truthy(value: Value) -> bool:
    """Everything except FALSE and NULL is truthy."""
    return value is not FALSE and value is not NULL


def is_hashable(value: Value) -> bool:
    return isinstance(value, (IntegerVal, BooleanVal, StringVal))


def map_key(value: Value) -> MapKey:
    """Return the dictionary key for a hashable value.

    Raises TypeError for values that cannot be used as map keys; the
    caller turns that into a Sepia error.
    """
    if not is_hashable(value):
        raise TypeError(f"unusable as map key: {value.type()}")
    return (value.type(), value.value)


def wrap_int64(n: int) -> int:
    """Reduce `n` to the signed 64-bit range with two's-complement wraparound."""
    n &= 0xFFFFFFFFFFFFFFFF
    if n > INT64_MAX:
        n -= 1 << 64
    return n


def trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero, as in C and Go."""
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return wrap_int64(q)
