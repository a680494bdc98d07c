from dataclasses import dataclass
from typing import Callable, List, Optional

from sepia.objects import BUILTIN, Value


@dataclass(eq=False)
class BuiltinFunction(Value):
    name: str
    arity: Optional[int]  # None means variadic
    fn: Callable[[List[Value]], Value]

    def type(self) -> str:
        return BUILTIN

    def inspect(self) -> str:
        return f"builtin {self.name}"

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"
