"""Native functions visible to every Sepia program.

The interpreter consults `BUILTINS` only after an identifier misses in
every scope, so user bindings shadow these names. Each function receives
the evaluated argument list; arity is checked by the interpreter before
the call.
"""

from types import MappingProxyType
from typing import List, Mapping

from sepia.builtin_function import BuiltinFunction
from sepia.errors import runtime_error
from sepia.objects import (
    NULL, ArrayVal, IntegerVal, MapVal, StringVal, Value,
)


def _unsupported(name: str, arg: Value):
    return runtime_error(f"argument to {name} not supported, got {arg.type()}")


def _expect_array(name: str, arg: Value) -> ArrayVal:
    if not isinstance(arg, ArrayVal):
        raise _unsupported(name, arg)
    return arg


def builtin_len(args: List[Value]) -> Value:
    arg = args[0]
    if isinstance(arg, StringVal):
        return IntegerVal(len(arg.value))
    if isinstance(arg, ArrayVal):
        return IntegerVal(len(arg.elements))
    if isinstance(arg, MapVal):
        return IntegerVal(len(arg.pairs))
    raise _unsupported('len', arg)


def builtin_puts(args: List[Value]) -> Value:
    for arg in args:
        print(arg.inspect())
    return NULL


def builtin_first(args: List[Value]) -> Value:
    arr = _expect_array('first', args[0])
    return arr.elements[0] if arr.elements else NULL


def builtin_last(args: List[Value]) -> Value:
    arr = _expect_array('last', args[0])
    return arr.elements[-1] if arr.elements else NULL


def builtin_rest(args: List[Value]) -> Value:
    arr = _expect_array('rest', args[0])
    if not arr.elements:
        return NULL
    return ArrayVal(list(arr.elements[1:]))


def builtin_push(args: List[Value]) -> Value:
    arr = _expect_array('push', args[0])
    # returns a new array; the argument is left untouched
    return ArrayVal(arr.elements + [args[1]])


def builtin_type(args: List[Value]) -> Value:
    return StringVal(args[0].type())


BUILTINS: Mapping[str, BuiltinFunction] = MappingProxyType({
    'len': BuiltinFunction('len', 1, builtin_len),
    'puts': BuiltinFunction('puts', None, builtin_puts),
    'first': BuiltinFunction('first', 1, builtin_first),
    'last': BuiltinFunction('last', 1, builtin_last),
    'rest': BuiltinFunction('rest', 1, builtin_rest),
    'push': BuiltinFunction('push', 2, builtin_push),
    'type': BuiltinFunction('type', 1, builtin_type),
})
